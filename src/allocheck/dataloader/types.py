# src/allocheck/dataloader/types.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from allocheck.schemas.models import Client, Task, Worker


@dataclass(slots=True)
class Dataset:
    """Decoded collections and rules, ready for ValidationOrchestrator."""

    clients: list[Client] = field(default_factory=list)
    workers: list[Worker] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    rules: list[Any] = field(default_factory=list)


@dataclass(slots=True)
class LoadResult:
    """
    Structured result of a data loading step.

    Fields:
        success: True if every row and rule decoded, False otherwise.
        dataset: Decoded records (empty if success=False).
        errors: List of issue dicts with per-row context (used for reporting).
                Each item contains at least: kind, entity, row, message.
        total_rows: Total number of rows and rules observed in the snapshot.
        kept_rows: Number of successfully decoded rows and rules.
    """

    success: bool
    dataset: Dataset = field(default_factory=Dataset)
    errors: list[dict[str, Any]] = field(default_factory=list)
    total_rows: int = 0
    kept_rows: int = 0
