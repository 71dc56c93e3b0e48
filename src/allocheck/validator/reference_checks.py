# src/allocheck/validator/reference_checks.py
from __future__ import annotations

from collections.abc import Sequence

from allocheck.schemas.models import Client, Task
from allocheck.validator.context import RunTally, SnapshotIndex, add_error
from allocheck.validator.matcher import best_suggestion

BROKEN_REFERENCE = "Broken Reference"
SKILL_UNCOVERED = "Skill Uncovered"


def check_task_references(clients: Sequence[Client], index: SnapshotIndex, tally: RunTally) -> None:
    """
    @brief
    Resolve every requested task ID against the tasks of this run.

    @details
    Unresolved IDs are reported per element (`RequestedTaskIDs.<i>`) with
    the closest existing task ID as suggestion, if one is close enough.
    """
    known = set(index.task_ids)
    for client in clients:
        for i, ref in enumerate(client.requested_task_ids or ()):
            if ref in known:
                continue
            add_error(
                client,
                f"RequestedTaskIDs.{i}",
                f'TaskID "{ref}" not found.',
                best_suggestion(ref, index.task_ids),
            )
            tally.increment(BROKEN_REFERENCE)


def check_skill_coverage(tasks: Sequence[Task], index: SnapshotIndex, tally: RunTally) -> None:
    """
    @brief
    Ensure each required skill is held by at least one worker.

    @details
    Membership is tested against the union of all worker skills; the same
    union is the suggestion pool for uncovered entries.
    """
    covered = set(index.worker_skills)
    for task in tasks:
        for i, skill in enumerate(task.required_skills or ()):
            if skill in covered:
                continue
            add_error(
                task,
                f"RequiredSkills.{i}",
                f'No worker has this skill: "{skill}".',
                best_suggestion(skill, index.worker_skills),
            )
            tally.increment(SKILL_UNCOVERED)


__all__ = ["check_task_references", "check_skill_coverage"]
