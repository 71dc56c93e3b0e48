# src/allocheck/validator/orchestrator.py
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from allocheck.errors import DataError
from allocheck.report.writer import write_report
from allocheck.schemas.models import (
    Client,
    CoRunRule,
    Config,
    LoadLimitRule,
    PatternMatchRule,
    PhaseWindowRule,
    PrecedenceRule,
    SlotRestrictionRule,
    Task,
    ValidationSummary,
    Worker,
    _Record,
)
from allocheck.validator import capacity, field_checks, reference_checks, rule_graph
from allocheck.validator.context import RunTally, SnapshotIndex
from allocheck.validator.repair import repair_requests
from allocheck.validator.types import ValidationResult

logger = logging.getLogger(__name__)

_RULE_TYPES = (
    CoRunRule,
    SlotRestrictionRule,
    LoadLimitRule,
    PhaseWindowRule,
    PatternMatchRule,
    PrecedenceRule,
)


def _require_sequence(name: str, values: Any, item_types: tuple[type, ...]) -> None:
    """
    @brief
    Enforce the caller contract for one input collection.

    @raises
        DataError
            If `values` is not a list-like sequence or holds a foreign item.
    """
    if isinstance(values, (str, bytes, Mapping)) or not isinstance(values, Sequence):
        raise DataError(
            message=f"{name} must be a sequence of records, got {type(values).__name__}",
            source="ValidationOrchestrator",
            suggested_action="Pass lists of decoded records (use DatasetLoader for raw files).",
        )
    for i, item in enumerate(values):
        if not isinstance(item, item_types):
            expected = " | ".join(t.__name__ for t in item_types)
            raise DataError(
                message=f"{name}[{i}] is {type(item).__name__}, expected {expected}",
                source="ValidationOrchestrator",
                suggested_action="Decode rows into record models before validation.",
            )


def _reset(records: Sequence[_Record]) -> list[Any]:
    # deep copies: the caller keeps the previous generation untouched
    return [r.model_copy(update={"errors": {}}, deep=True) for r in records]


class ValidationOrchestrator:
    """
    @brief
    Single entry point of the validation engine.

    @details
    Copies the three collections with empty error overlays, builds the
    shared indices once, runs every check in a fixed order against the
    copies and returns them with a run summary.

    Data-quality findings never raise; they are attached to the owning
    record and tallied by category. DataError is raised only when the
    inputs themselves break the contract (not sequences of records).
    """

    def __init__(
        self,
        clients: Sequence[Client],
        workers: Sequence[Worker],
        tasks: Sequence[Task],
        rules: Sequence[Any] = (),
        cfg: Config | None = None,
    ) -> None:
        # (1) Reject malformed inputs before anything is copied
        _require_sequence("clients", clients, (Client,))
        _require_sequence("workers", workers, (Worker,))
        _require_sequence("tasks", tasks, (Task,))
        _require_sequence("rules", rules, _RULE_TYPES)

        self.clients = clients
        self.workers = workers
        self.tasks = tasks
        self.rules = list(rules)
        self.cfg = cfg or Config()

    # ---------- Public lifecycle API ----------
    def run(self) -> ValidationResult:
        """
        @brief
        Execute one full validation pass.

        @returns
            ValidationResult with annotated copies and a summary stamped
            with the current UTC time.
        """
        # (1) Fresh copies; no errors from an earlier run survive
        clients: list[Client] = _reset(self.clients)
        workers: list[Worker] = _reset(self.workers)
        tasks: list[Task] = _reset(self.tasks)

        # (2) Shared indices from the reset snapshot
        index = SnapshotIndex.build(workers, tasks)
        tally = RunTally()
        required = self.cfg.required_fields
        checks = self.cfg.checks

        # (3) Presence and key uniqueness
        field_checks.check_required_fields(clients, required.clients, tally)
        field_checks.check_required_fields(workers, required.workers, tally)
        field_checks.check_required_fields(tasks, required.tasks, tally)
        field_checks.check_duplicate_keys(clients, tally)
        field_checks.check_duplicate_keys(workers, tally)
        field_checks.check_duplicate_keys(tasks, tally)

        # (4) Clients
        reference_checks.check_task_references(clients, index, tally)
        field_checks.check_priority_range(clients, checks, tally)
        field_checks.check_attributes_json(clients, tally)

        # (5) Workers
        field_checks.check_slot_lists(workers, tally)
        capacity.check_worker_overload(workers, tally)

        # (6) Tasks
        field_checks.check_duration_range(tasks, checks, tally)
        reference_checks.check_skill_coverage(tasks, index, tally)
        capacity.check_task_concurrency(tasks, workers, tally)

        # (7) Aggregate analyses
        capacity.check_phase_saturation(tasks, index, tally)
        rule_graph.check_corun_cycles(tasks, self.rules, tally)

        summary = ValidationSummary(
            total_errors=tally.total_errors,
            errors_by_type=dict(tally.errors_by_type),
            last_run=datetime.now(timezone.utc),
        )
        logger.info(
            "Validation run: %d client(s), %d worker(s), %d task(s), %d rule(s) -> %d error(s)",
            len(clients),
            len(workers),
            len(tasks),
            len(self.rules),
            summary.total_errors,
        )
        for category, count in summary.errors_by_type.items():
            logger.debug("  %s: %d", category, count)

        return ValidationResult(clients=clients, workers=workers, tasks=tasks, summary=summary)

    def build_report(self, result: ValidationResult) -> dict[str, Any]:
        """
        @brief
        Assemble a run into a JSON-serializable dictionary.

        @details
        Records are dumped by column name so the report can be loaded back
        by DatasetLoader or rendered by the host. No files are written here.
        """
        return {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
            "valid": result.valid,
            "summary": result.summary.model_dump(mode="json", by_alias=True),
            "clients": [c.model_dump(mode="json", by_alias=True) for c in result.clients],
            "workers": [w.model_dump(mode="json", by_alias=True) for w in result.workers],
            "tasks": [t.model_dump(mode="json", by_alias=True) for t in result.tasks],
            "repair_requests": repair_requests(result, self.cfg.repair_context),
        }

    def save_report(
        self,
        report: dict[str, Any],
        out_dir: Path | None = None,
        filename: str | None = None,
    ) -> Path:
        """Writes the report atomically into `out_dir` (defaults from config)."""
        target_dir = out_dir or Path(self.cfg.output_dir or "data/output")
        return write_report(report, target_dir, filename or self.cfg.io_policy.report_filename)


# ----------------------------
# THIN FACADES
# ----------------------------
def run_all_validations(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    rules: Sequence[Any] = (),
    cfg: Config | None = None,
) -> ValidationResult:
    """Validate the three collections against each other and the rules."""
    return ValidationOrchestrator(clients, workers, tasks, rules, cfg).run()


def validate_dataset(
    clients: Sequence[Client],
    workers: Sequence[Worker],
    tasks: Sequence[Task],
    rules: Sequence[Any] = (),
    cfg: Config | None = None,
    *,
    write_report: bool = True,
    out_dir: Path | None = None,
    filename: str | None = None,
) -> tuple[ValidationResult, dict[str, Any]]:
    """
    @brief
    High-level convenience wrapper: run, build the report, optionally save it.

    @returns
        The ValidationResult and its report dictionary.
    """
    orchestrator = ValidationOrchestrator(clients, workers, tasks, rules, cfg)
    result = orchestrator.run()
    report = orchestrator.build_report(result)
    if write_report:
        orchestrator.save_report(report, out_dir=out_dir, filename=filename)
    return result, report


__all__ = ["ValidationOrchestrator", "run_all_validations", "validate_dataset"]
