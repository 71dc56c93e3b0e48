# scripts/run.py
from __future__ import annotations

import argparse
import logging
import sys
import time
import traceback
from pathlib import Path
from typing import Any

from allocheck.dataloader.config_loader import ConfigLoader
from allocheck.dataloader.dataset_loader import DatasetLoader
from allocheck.dataloader.postload_handler import LoadResultHandler
from allocheck.errors import AllocheckError, DataError
from allocheck.validator import validate_dataset


def _setup_logging() -> None:
    """
    @brief
    Initializes global logging configuration.

    @details
    Sets the default logging level to INFO and defines a simple console format.
    """
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    @brief
    Parses command-line arguments for a validation run.

    @details
    --config is optional (defaults apply without it); --input and --output
    override `dataset_json` / `output_dir` from the config.
    """
    parser = argparse.ArgumentParser(
        prog="allocheck-run",
        description="Validate a clients/workers/tasks snapshot: load → validate → report",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to config YAML (default: built-in defaults)",
    )
    parser.add_argument(
        "--input",
        type=str,
        default=None,
        help="Path to the normalized dataset JSON (default: dataset_json from config)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory for the report (default: output_dir from config)",
    )
    return parser.parse_args(argv)


def run_pipeline(
    config_path: Path | None, input_path: Path | None, output_dir: Path | None
) -> dict[str, Any]:
    """
    @brief
    Executes one validation run end to end.

    @details
    (1) Load configuration and the dataset snapshot.
    (2) Run every check over the three collections and the rules.
    (3) Write validation_report.json unless disabled by io_policy.

    @returns
        Dictionary with validity flag, totals per category and artifact paths.

    @raises
        AllocheckError
            On configuration, input or report-writing problems.
    """
    t0 = time.perf_counter()

    # (1) Configuration; CLI arguments win over config values
    logging.info("Loading config: %s", config_path or "<defaults>")
    cfg = ConfigLoader().load(config_path)

    input_path = input_path or (Path(cfg.dataset_json) if cfg.dataset_json else None)
    if input_path is None:
        raise DataError(
            message="No dataset given.",
            source="scripts.run",
            suggested_action="Pass --input or set dataset_json in config.yaml.",
        )
    output_dir = output_dir or Path(cfg.output_dir or "data/output")

    # (2) Dataset snapshot
    logging.info("Loading dataset: %s", input_path)
    load_result = DatasetLoader().load(input_path)
    dataset = LoadResultHandler(output_dir=output_dir).handle(load_result)

    if dataset is None:
        raise DataError(
            message=f"Dataset load failed, see {(output_dir / 'load_errors.json').as_posix()}",
            source="scripts.run",
            suggested_action="Fix the rows reported in load_errors.json and rerun.",
        )

    # (3) Validation and report
    logging.info("Running validations…")
    write = cfg.io_policy.write_report
    result, _report = validate_dataset(
        dataset.clients,
        dataset.workers,
        dataset.tasks,
        dataset.rules,
        cfg,
        write_report=write,
        out_dir=output_dir,
    )
    report_path = output_dir / cfg.io_policy.report_filename if write else None

    logging.info("Validation finished in %.2f s", time.perf_counter() - t0)

    return {
        "valid": result.valid,
        "total_errors": result.summary.total_errors,
        "errors_by_type": dict(result.summary.errors_by_type),
        "artifacts": {"validation_report": report_path},
    }


def main(argv: list[str] | None = None) -> int:
    """
    @brief
    CLI entry point.

    @details
    Exit codes:
      0 – dataset has no findings
      1 – findings present, or a controlled failure (config/data/report)
      2 – unexpected crash
    """
    _setup_logging()
    args = _parse_args(argv)

    try:
        result = run_pipeline(
            Path(args.config) if args.config else None,
            Path(args.input) if args.input else None,
            Path(args.output) if args.output else None,
        )
        if result["valid"]:
            logging.info("All validations passed.")
        else:
            logging.warning("Found %d error(s).", result["total_errors"])
            for category, count in result["errors_by_type"].items():
                logging.warning("  %s: %d", category, count)
        return 0 if result["valid"] else 1

    except AllocheckError as e:
        logging.error(str(e))
        return 1
    except Exception:
        logging.error("Unexpected error occurred:")
        traceback.print_exc()
        return 2


if __name__ == "__main__":
    sys.exit(main())
