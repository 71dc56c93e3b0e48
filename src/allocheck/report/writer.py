# src/allocheck/report/writer.py
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from allocheck.errors import ReportError

logger = logging.getLogger(__name__)


def write_report(
    report: dict[str, Any], out_dir: Path, filename: str = "validation_report.json"
) -> Path:
    """
    @brief
    Writes a validation report as UTF-8 JSON, atomically.

    @details
    Validates that the report is a serializable dictionary, dumps it with
    indentation and replaces the target file in one filesystem operation,
    so repeated runs overwrite the same file cleanly.

    @params
        report : dict[str, Any]
            Report produced by ValidationOrchestrator.build_report().
        out_dir : Path
            Directory where the report will be created.
        filename : str
            Target file name.

    @returns
        Path to the written report.

    @raises
        ReportError
            If input is not a dict, JSON serialization fails, or the write fails.
    """
    if not isinstance(report, dict):
        raise ReportError("report must be a dict", source="report.write_report")

    # (1) Validate JSON serializability before touching the filesystem
    try:
        payload = json.dumps(report, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as e:
        raise ReportError(
            f"report not JSON-serializable: {e}",
            source="report.write_report",
            suggested_action="Dump pydantic models with mode='json' before writing.",
        ) from e

    # (2) Atomically write validated payload
    target = Path(out_dir) / filename
    _atomic_write_text(target, payload + "\n", encoding="utf-8")
    logger.info("Validation report saved: %s", target)
    return target


def _atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """
    @brief
    Performs atomic text file writing using a temporary file swap.

    @details
    Writes text to a temporary file within the same directory, then replaces
    the destination in a single filesystem operation.

    @raises
        ReportError
            On write or rename failure.
    """
    path = Path(path)
    tmp_dir = path.parent
    try:
        tmp_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ReportError(
            f"cannot create output directory {tmp_dir}: {e}",
            source="report._atomic_write_text",
            suggested_action="Check output directory permissions.",
        ) from e

    # (1) Create temporary file near the target for atomicity
    fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(tmp_dir))
    try:
        with open(fd, "w", encoding=encoding, newline="") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        # (2) Clean up temp file on error
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise ReportError(
            f"atomic write failed for {path}: {e}",
            source="report._atomic_write_text",
            suggested_action="Check output directory permissions and disk space.",
        ) from e


__all__ = ["write_report"]
