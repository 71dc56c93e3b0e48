# src/allocheck/validator/capacity.py
"""
@brief
Capacity feasibility checks over workers and tasks.

@details
Covers three aggregate conditions:
  - a worker declaring a higher per-phase load than it has slots;
  - a task asking for more concurrent workers than are qualified and
    available for it (bounded tasks x workers scan);
  - a phase whose total task demand exceeds the number of workers
    available in it.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from allocheck.schemas.models import Task, Worker
from allocheck.validator.context import RunTally, SnapshotIndex, add_error

logger = logging.getLogger(__name__)

OVERLOADED_WORKER = "Overloaded Worker"
CONCURRENCY_INFEASIBLE = "Concurrency Infeasible"
PHASE_SATURATION = "Phase Saturation"


def check_worker_overload(workers: Sequence[Worker], tally: RunTally) -> None:
    for worker in workers:
        slots = worker.available_slots
        max_load = worker.max_load_per_phase
        if slots is None or max_load is None:
            continue
        if len(slots) < max_load:
            add_error(
                worker,
                "MaxLoadPerPhase",
                f"MaxLoad ({max_load}) exceeds available slots ({len(slots)}).",
            )
            tally.increment(OVERLOADED_WORKER)


def is_qualified_and_available(worker: Worker, task: Task) -> bool:
    """
    @brief
    Whether a worker can take part in a task.

    @details
    The worker must hold every required skill and be available in at
    least one of the task's preferred phases. A task without preferred
    phases has no available worker.
    """
    skills = set(worker.skills or ())
    if not all(s in skills for s in task.required_skills or ()):
        return False
    slots = worker.available_slots or ()
    return any(p in slots for p in task.preferred_phases or ())


def check_task_concurrency(tasks: Sequence[Task], workers: Sequence[Worker], tally: RunTally) -> None:
    for task in tasks:
        if task.max_concurrent is None:
            continue
        qualified = sum(1 for w in workers if is_qualified_and_available(w, task))
        if task.max_concurrent > qualified:
            add_error(
                task,
                "MaxConcurrent",
                f"Concurrency ({task.max_concurrent}) exceeds qualified, "
                f"available workers ({qualified}).",
            )
            tally.increment(CONCURRENCY_INFEASIBLE)


def check_phase_saturation(tasks: Sequence[Task], index: SnapshotIndex, tally: RunTally) -> None:
    """
    @brief
    Flag tasks preferring a phase whose demand exceeds its supply.

    @details
    Every task listing a saturated phase is flagged on `PreferredPhases`;
    the category is counted once per saturated phase, not per task. When
    a task lists several saturated phases the message names the last one.
    """
    for phase, demand in index.demand.items():
        supply = index.supply.get(phase, 0)
        if demand <= supply:
            continue
        logger.debug("Phase %s saturated: demand=%s supply=%s", phase, demand, supply)
        for task in tasks:
            if phase in (task.preferred_phases or ()):
                add_error(
                    task,
                    "PreferredPhases",
                    f"Phase {phase} is oversaturated. Demand ({demand}) > Supply ({supply}).",
                )
        tally.increment(PHASE_SATURATION)


__all__ = [
    "check_worker_overload",
    "check_task_concurrency",
    "check_phase_saturation",
    "is_qualified_and_available",
]
