# src/allocheck/dataloader/postload_handler.py
from __future__ import annotations

import json
import logging
from pathlib import Path

from allocheck.dataloader.types import Dataset, LoadResult

logger = logging.getLogger(__name__)


class LoadResultHandler:
    """
    @brief
    Handles the LoadResult after snapshot decoding and writes a diagnostic report if needed.

    @details
    On success the decoded Dataset is passed on to the validation engine.
    On failure the per-row issues are written to 'load_errors.json' and
    None is returned so the caller can stop before validating a partial
    dataset.
    """

    def __init__(self, output_dir: Path) -> None:
        self.output_dir = output_dir

    def handle(self, result: LoadResult) -> Dataset | None:
        """
        @brief
        Processes LoadResult and returns either the dataset or None.

        @details
        Any I/O failure while writing the issue report is logged but does
        not raise further.
        """
        # (1) Success path: hand the dataset to the engine
        if result.success:
            logger.info(
                "PostLoad: %d client(s), %d worker(s), %d task(s), %d rule(s) ready for validation.",
                len(result.dataset.clients),
                len(result.dataset.workers),
                len(result.dataset.tasks),
                len(result.dataset.rules),
            )
            return result.dataset

        # (2) Failure path: persist issues next to the other artifacts
        self.output_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.output_dir / "load_errors.json"

        try:
            with out_path.open("w", encoding="utf-8") as f:
                json.dump(result.errors, f, ensure_ascii=False, indent=2)
            logger.error(
                "PostLoad: dataset decoding failed: %d issue(s). See %s",
                len(result.errors),
                out_path,
            )
        except OSError as e:
            logger.error("PostLoad: failed to write error report: %s", e)

        return None
