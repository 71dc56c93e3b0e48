# src/allocheck/validator/context.py
from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from allocheck.schemas.models import FieldError, Task, Worker, _Record


@dataclass(slots=True)
class RunTally:
    """
    Single error counter shared by every check of one run.

    Fields:
        total_errors: Number of increments across all categories.
        errors_by_type: Open-ended category -> count mapping, in first-seen order.
    """

    total_errors: int = 0
    errors_by_type: dict[str, int] = field(default_factory=dict)

    def increment(self, category: str) -> None:
        self.total_errors += 1
        self.errors_by_type[category] = self.errors_by_type.get(category, 0) + 1


def add_error(record: _Record, key: str, message: str, suggestion: str | None = None) -> None:
    """
    @brief
    Attach a diagnostic to a record's error overlay.

    @details
    The overlay holds one entry per key; a later write to the same key
    replaces the earlier one.

    @params
        record : _Record
            Per-run copy owned by the orchestrator.
        key : str
            Column name, or `column.index` for an element of a list column.
        message : str
            Stable, greppable description of the defect.
        suggestion : str | None
            Optional corrected value.
    """
    record.errors[key] = FieldError(message=message, suggestion=suggestion)


def is_number(value: Any) -> bool:
    """True for ints and non-NaN floats; bools are not numbers here."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and not math.isnan(value)


def _unique(values: Iterable[Any]) -> tuple[Any, ...]:
    # dict preserves first-seen order, which keeps suggestion tie-breaks deterministic
    return tuple(dict.fromkeys(values))


def phase_supply(workers: Sequence[Worker]) -> dict[Any, int]:
    """Number of workers listing each phase among their available slots."""
    supply: dict[Any, int] = {}
    for w in workers:
        for slot in w.available_slots or ():
            if is_number(slot):
                supply[slot] = supply.get(slot, 0) + 1
    return supply


def phase_demand(tasks: Sequence[Task]) -> dict[int, int]:
    """Sum of task durations charged in full to every phase a task prefers."""
    demand: dict[int, int] = {}
    for t in tasks:
        for phase in t.preferred_phases or ():
            demand[phase] = demand.get(phase, 0) + (t.duration or 0)
    return demand


@dataclass(frozen=True, slots=True)
class SnapshotIndex:
    """
    Shared lookups computed once per run from the reset snapshot.

    Fields:
        task_ids: Distinct task IDs in collection order (suggestion pool).
        worker_skills: Distinct skills across all workers in collection order.
        supply: Phase -> number of workers available in that phase.
        demand: Phase -> total duration of tasks preferring that phase.
    """

    task_ids: tuple[str, ...]
    worker_skills: tuple[str, ...]
    supply: dict[Any, int]
    demand: dict[int, int]

    @classmethod
    def build(cls, workers: Sequence[Worker], tasks: Sequence[Task]) -> SnapshotIndex:
        return cls(
            task_ids=_unique(t.task_id for t in tasks if t.task_id is not None),
            worker_skills=_unique(s for w in workers for s in (w.skills or ())),
            supply=phase_supply(workers),
            demand=phase_demand(tasks),
        )


__all__ = ["RunTally", "SnapshotIndex", "add_error", "is_number", "phase_supply", "phase_demand"]
