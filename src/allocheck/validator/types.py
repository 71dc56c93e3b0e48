# src/allocheck/validator/types.py
from __future__ import annotations

from dataclasses import dataclass, field

from allocheck.schemas.models import Client, Task, ValidationSummary, Worker


@dataclass(slots=True)
class ValidationResult:
    """
    Structured result of one validation run.

    Fields:
        clients: Annotated copies of the input clients (same order).
        workers: Annotated copies of the input workers (same order).
        tasks: Annotated copies of the input tasks (same order).
        summary: Totals per category and the run timestamp.
    """

    clients: list[Client] = field(default_factory=list)
    workers: list[Worker] = field(default_factory=list)
    tasks: list[Task] = field(default_factory=list)
    summary: ValidationSummary = field(default_factory=ValidationSummary)

    @property
    def valid(self) -> bool:
        return self.summary.total_errors == 0
