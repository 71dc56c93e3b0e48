# src/allocheck/dataloader/dataset_loader.py
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from allocheck.dataloader.types import Dataset, LoadResult
from allocheck.errors import DataError
from allocheck.schemas.models import RULE_ADAPTER, Client, Task, Worker

logger = logging.getLogger(__name__)


class DatasetLoader:
    """
    JSON snapshot -> LoadResult[Dataset].

    The snapshot holds rows already decoded and normalized by the import
    step (lists are lists, numbers are numbers):
        {"clients": [...], "workers": [...], "tasks": [...], "rules": [...]}

    Rules:
      - Missing sections are treated as empty.
      - Other top-level keys are ignored, so a validation report can be
        loaded back as a snapshot.
      - Row-level problems (not an object, schema mismatch) become issues
        and loading continues; any issue makes success=False.

    Fatal errors (raise DataError immediately):
      - missing / unreadable file, wrong extension
      - invalid JSON syntax
      - root is not an object, or a section is not a list
    """

    SECTIONS: tuple[tuple[str, type[Any]], ...] = (
        ("clients", Client),
        ("workers", Worker),
        ("tasks", Task),
    )

    def load(self, path: Path) -> LoadResult:
        data = self._read_json(path)
        result = self._to_result(data)
        self._report_summary(path, result)
        return result

    # ------------------------------
    # Internal helpers
    # ------------------------------
    def _read_json(self, path: Path) -> dict[str, Any]:
        if not isinstance(path, Path):
            raise DataError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="DatasetLoader._read_json",
                suggested_action="Pass a pathlib.Path pointing to the dataset JSON.",
            )
        if not path.exists():
            raise DataError(
                message=f"Dataset file not found: {path}",
                source="DatasetLoader._read_json",
                suggested_action="Verify file path and ensure the snapshot is present.",
            )
        if path.suffix.lower() != ".json":
            raise DataError(
                message=f"Invalid dataset file extension: {path.suffix}",
                source="DatasetLoader._read_json",
                suggested_action="Export the normalized dataset as .json.",
            )

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise DataError(
                message=f"Dataset JSON parsing failed: {e}",
                source="DatasetLoader._read_json",
                suggested_action="Fix JSON syntax of the snapshot file.",
            ) from e
        except OSError as e:
            raise DataError(
                message=f"Unable to read dataset: {e}",
                source="DatasetLoader._read_json",
                suggested_action="Check file permissions and that the file is not locked.",
            ) from e

        if not isinstance(data, Mapping):
            raise DataError(
                message="Dataset root must be a JSON object.",
                source="DatasetLoader._read_json",
                suggested_action='Use {"clients": [...], "workers": [...], "tasks": [...], "rules": [...]}.',
            )

        for name in ("clients", "workers", "tasks", "rules"):
            if not isinstance(data.get(name, []), list):
                raise DataError(
                    message=f"Dataset section '{name}' must be a list.",
                    source="DatasetLoader._read_json",
                    suggested_action=f"Store {name} as a JSON array.",
                )
        return dict(data)

    def _to_result(self, data: dict[str, Any]) -> LoadResult:
        issues: list[dict[str, Any]] = []
        dataset = Dataset()
        total = 0

        for entity, model in self.SECTIONS:
            target = getattr(dataset, entity)
            for row_no, row in enumerate(data.get(entity, [])):
                total += 1
                if not isinstance(row, Mapping):
                    issues.append(self._issue("not_an_object", entity, row_no, "Row is not an object"))
                    continue
                try:
                    target.append(model.model_validate(row))
                except ValidationError as e:
                    issues.append(self._issue("schema_error", entity, row_no, str(e)))

        for row_no, raw in enumerate(data.get("rules", [])):
            total += 1
            try:
                dataset.rules.append(RULE_ADAPTER.validate_python(raw))
            except ValidationError as e:
                issues.append(self._issue("invalid_rule", "rules", row_no, str(e)))

        if issues:
            return LoadResult(success=False, errors=issues, total_rows=total, kept_rows=0)

        kept = len(dataset.clients) + len(dataset.workers) + len(dataset.tasks) + len(dataset.rules)
        return LoadResult(success=True, dataset=dataset, total_rows=total, kept_rows=kept)

    @staticmethod
    def _issue(kind: str, entity: str, row: int, message: str) -> dict[str, Any]:
        return {"kind": kind, "entity": entity, "row": row, "message": message}

    def _report_summary(self, path: Path, result: LoadResult) -> None:
        if result.success:
            logger.info(
                "DatasetLoader OK: kept=%d/%d from %s",
                result.kept_rows,
                result.total_rows,
                path,
            )
        else:
            counts: dict[str, int] = {}
            for it in result.errors:
                counts[it["kind"]] = counts.get(it["kind"], 0) + 1
            summary = ", ".join(f"{k}={v}" for k, v in counts.items())
            logger.error(
                "DatasetLoader failed: %d issue(s) across %d row(s) in %s [%s]",
                len(result.errors),
                result.total_rows,
                path,
                summary or "no-summary",
            )


__all__ = ["DatasetLoader"]
