# src/allocheck/validator/field_checks.py
"""
@brief
Row-local checks: presence, key uniqueness, numeric ranges, list shape and
embedded JSON.

@details
Each check walks one collection, attaches diagnostics to the per-run record
copies and increments the shared tally once per attached error. None of
them looks at another record's diagnostics.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import NoReturn

from allocheck.schemas.models import CheckConfig, Client, Task, Worker, _Record
from allocheck.validator.context import RunTally, add_error, is_number

MISSING_FIELD = "Missing Field"
DUPLICATE_ID = "Duplicate ID"
OUT_OF_RANGE = "Out of Range"
MALFORMED_LIST = "Malformed List"
INVALID_JSON = "Invalid JSON"

INVALID_JSON_MESSAGE = "Invalid JSON format."


def _reject_constant(name: str) -> NoReturn:
    # NaN / Infinity / -Infinity are Python extensions, not JSON
    raise ValueError(f"non-standard JSON constant: {name}")


def check_required_fields(
    records: Sequence[_Record], required: Sequence[str], tally: RunTally
) -> None:
    """
    @brief
    Flag every required column whose value is None.

    @params
        records : Sequence[_Record]
            Records of one entity type.
        required : Sequence[str]
            Column names that must be present.
        tally : RunTally
            Run counter.
    """
    for record in records:
        for column in required:
            if record.value_of(column) is None:
                add_error(record, column, "Required field is missing.")
                tally.increment(MISSING_FIELD)


def check_duplicate_keys(records: Sequence[_Record], tally: RunTally) -> None:
    """
    @brief
    Flag all records sharing an identity value.

    @details
    First pass counts occurrences, second pass flags every record whose
    key occurs more than once, so both the first and later rows are
    reported. Missing keys are left to the presence check.
    """
    counts: dict[str, int] = {}
    for record in records:
        if record.key is not None:
            counts[record.key] = counts.get(record.key, 0) + 1

    for record in records:
        if record.key is not None and counts[record.key] > 1:
            add_error(record, record.ID_COLUMN, "Duplicate ID found.")
            tally.increment(DUPLICATE_ID)


def check_priority_range(clients: Sequence[Client], checks: CheckConfig, tally: RunTally) -> None:
    lo, hi = checks.priority_min, checks.priority_max
    for client in clients:
        level = client.priority_level
        if level is not None and (level < lo or level > hi):
            add_error(client, "PriorityLevel", f"Must be between {lo} and {hi}.")
            tally.increment(OUT_OF_RANGE)


def check_duration_range(tasks: Sequence[Task], checks: CheckConfig, tally: RunTally) -> None:
    for task in tasks:
        if task.duration is not None and task.duration < checks.min_duration:
            add_error(task, "Duration", f"Duration must be at least {checks.min_duration}.")
            tally.increment(OUT_OF_RANGE)


def check_slot_lists(workers: Sequence[Worker], tally: RunTally) -> None:
    # a missing list is a presence finding, not a shape finding
    for worker in workers:
        slots = worker.available_slots
        if slots is not None and not all(is_number(s) for s in slots):
            add_error(worker, "AvailableSlots", "Must be a list of numbers.")
            tally.increment(MALFORMED_LIST)


def check_attributes_json(clients: Sequence[Client], tally: RunTally) -> None:
    """
    @brief
    Flag client attribute blobs that are not valid JSON.

    @details
    NaN and Infinity literals are rejected as in strict JSON. The exact
    message is what repair_requests() matches to offer the repair service.
    """
    for client in clients:
        if not client.attributes_json:
            continue
        try:
            json.loads(client.attributes_json, parse_constant=_reject_constant)
        except ValueError:
            add_error(client, "AttributesJSON", INVALID_JSON_MESSAGE)
            tally.increment(INVALID_JSON)


__all__ = [
    "check_required_fields",
    "check_duplicate_keys",
    "check_priority_range",
    "check_duration_range",
    "check_slot_lists",
    "check_attributes_json",
]
