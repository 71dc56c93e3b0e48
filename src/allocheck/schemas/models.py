# src/allocheck/schemas/models.py
"""
@brief
Pydantic data models for the Allocheck validation engine.

@details
Defines the canonical model types:
    - Client / Worker / Task: one normalized row of each input collection,
      with a separate `errors` overlay keyed by column name
    - Rule variants: tagged union over the rule types a user can define
    - FieldError / ValidationSummary: per-cell diagnostics and run totals
    - Config: runtime configuration (from config.yaml)

Column names of the input collections are kept as field aliases
(e.g. `ClientID`, `RequestedTaskIDs`) so records round-trip with the
host application; attributes use snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator


class _StrictBaseModel(BaseModel):
    """
    @brief
    Base model enforcing strict defaults for configuration and data contracts.

    @details
    Forbids unknown fields and allows population by either alias or
    attribute name. Designed as a foundation for all other Allocheck models.
    """

    model_config = {
        "extra": "forbid",  # Reject unknown fields
        "populate_by_name": True,  # Allow population by field name
        "use_enum_values": True,  # Export raw enum values if enums appear later
    }


class FieldError(_StrictBaseModel):
    """One diagnostic attached to a record column (or `column.index`)."""

    message: str = Field(..., description="Human-readable description of the defect")
    suggestion: str | None = Field(None, description="Closest valid value, if any")


class _Record(_StrictBaseModel):
    """
    @brief
    Common behavior of the three record types.

    @details
    Every domain field is optional: `None` means the column was missing
    in the source row and is reported by the presence check instead of
    failing model construction. The `errors` overlay is never part of the
    domain columns and is fully replaced by each validation run.
    """

    ID_COLUMN: ClassVar[str]

    errors: dict[str, FieldError] = Field(
        default_factory=dict, description="Diagnostics keyed by column or column.index"
    )

    @classmethod
    def attribute_for(cls, column: str) -> str:
        """Resolve a column name (alias) or attribute name to the attribute name."""
        for name, info in cls.model_fields.items():
            if name == "errors":
                continue
            if column == name or column == info.alias:
                return name
        raise KeyError(f"{cls.__name__} has no column {column!r}")

    @classmethod
    def columns(cls) -> list[str]:
        """Column names in declaration order, excluding the error overlay."""
        return [info.alias or name for name, info in cls.model_fields.items() if name != "errors"]

    def value_of(self, column: str) -> Any:
        return getattr(self, self.attribute_for(column))

    @property
    def key(self) -> Any:
        return self.value_of(self.ID_COLUMN)


class Client(_Record):
    """
    @brief
    One row of the clients collection.

    @params
        client_id : str | None
            Client identifier (`ClientID`).
        priority_level : int | None
            Business priority, expected within the configured range.
        requested_task_ids : list[str] | None
            References into the tasks collection.
        attributes_json : str | None
            Free-form JSON blob kept as text for editing.
    """

    ID_COLUMN: ClassVar[str] = "ClientID"

    client_id: str | None = Field(None, alias="ClientID")
    client_name: str | None = Field(None, alias="ClientName")
    priority_level: int | None = Field(None, alias="PriorityLevel")
    requested_task_ids: list[str] | None = Field(None, alias="RequestedTaskIDs")
    group_tag: str | None = Field(None, alias="GroupTag")
    attributes_json: str | None = Field(None, alias="AttributesJSON")


class Worker(_Record):
    """
    @brief
    One row of the workers collection.

    @details
    `available_slots` accepts any numeric element so that a malformed list
    produced upstream (e.g. NaN from an unparsable token) reaches the
    engine and is reported instead of being rejected at construction.
    """

    ID_COLUMN: ClassVar[str] = "WorkerID"

    worker_id: str | None = Field(None, alias="WorkerID")
    worker_name: str | None = Field(None, alias="WorkerName")
    skills: list[str] | None = Field(None, alias="Skills")
    available_slots: list[int | float] | None = Field(None, alias="AvailableSlots")
    max_load_per_phase: int | None = Field(None, alias="MaxLoadPerPhase")
    worker_group: str | None = Field(None, alias="WorkerGroup")
    qualification_level: int | None = Field(None, alias="QualificationLevel")


class Task(_Record):
    """One row of the tasks collection."""

    ID_COLUMN: ClassVar[str] = "TaskID"

    task_id: str | None = Field(None, alias="TaskID")
    task_name: str | None = Field(None, alias="TaskName")
    category: str | None = Field(None, alias="Category")
    duration: int | None = Field(None, alias="Duration")
    required_skills: list[str] | None = Field(None, alias="RequiredSkills")
    preferred_phases: list[int] | None = Field(None, alias="PreferredPhases")
    max_concurrent: int | None = Field(None, alias="MaxConcurrent")


# ------------------------------------------------------------
# Rules
# ------------------------------------------------------------
class CoRunRule(_StrictBaseModel):
    """Listed tasks must be scheduled together."""

    type: Literal["coRun"] = "coRun"
    tasks: list[str] = Field(default_factory=list)


class SlotRestrictionRule(_StrictBaseModel):
    type: Literal["slotRestriction"] = "slotRestriction"
    group: str
    min_common_slots: int = Field(..., alias="minCommonSlots")


class LoadLimitRule(_StrictBaseModel):
    type: Literal["loadLimit"] = "loadLimit"
    worker_group: str = Field(..., alias="workerGroup")
    max_slots_per_phase: int = Field(..., alias="maxSlotsPerPhase")


class PhaseWindowRule(_StrictBaseModel):
    type: Literal["phaseWindow"] = "phaseWindow"
    task: str
    allowed_phases: list[int] = Field(default_factory=list, alias="allowedPhases")


class PatternMatchRule(_StrictBaseModel):
    type: Literal["patternMatch"] = "patternMatch"
    regex: str
    rule: dict[str, Any] = Field(default_factory=dict)


class PrecedenceRule(_StrictBaseModel):
    type: Literal["precedence"] = "precedence"
    order: list[Literal["global", "specific"]] = Field(default_factory=list)


Rule = Annotated[
    Union[
        CoRunRule,
        SlotRestrictionRule,
        LoadLimitRule,
        PhaseWindowRule,
        PatternMatchRule,
        PrecedenceRule,
    ],
    Field(discriminator="type"),
]

RULE_ADAPTER: TypeAdapter[Rule] = TypeAdapter(Rule)


# ------------------------------------------------------------
# Run summary
# ------------------------------------------------------------
class ValidationSummary(_StrictBaseModel):
    """
    @brief
    Aggregate outcome of one validation run.

    @details
    `errors_by_type` is an open-ended tally keyed by category name;
    new checks may introduce new categories without schema changes.
    """

    total_errors: int = Field(0, ge=0, alias="totalErrors")
    errors_by_type: dict[str, int] = Field(default_factory=dict, alias="errorsByType")
    last_run: datetime | None = Field(None, alias="lastRun")


# ------------------------------------------------------------
# Runtime configuration
# ------------------------------------------------------------
class CheckConfig(_StrictBaseModel):
    """
    @brief
    Numeric bounds used by the per-row range checks.
    """

    priority_min: int = Field(1, description="Lowest accepted PriorityLevel (inclusive)")
    priority_max: int = Field(5, description="Highest accepted PriorityLevel (inclusive)")
    min_duration: int = Field(1, ge=0, description="Smallest accepted task Duration")


class RequiredFieldsConfig(_StrictBaseModel):
    """
    @brief
    Columns that must be present on every record of each entity.

    @details
    Column names are checked against the record models so a typo in
    config.yaml fails at load time rather than silently disabling a check.
    """

    clients: list[str] = Field(
        default_factory=lambda: ["ClientID", "PriorityLevel", "RequestedTaskIDs"]
    )
    workers: list[str] = Field(default_factory=lambda: ["WorkerID", "Skills", "AvailableSlots"])
    tasks: list[str] = Field(default_factory=lambda: ["TaskID", "Duration", "RequiredSkills"])

    @field_validator("clients")
    @classmethod
    def _known_client_columns(cls, v: list[str]) -> list[str]:
        return _known_columns(Client, v)

    @field_validator("workers")
    @classmethod
    def _known_worker_columns(cls, v: list[str]) -> list[str]:
        return _known_columns(Worker, v)

    @field_validator("tasks")
    @classmethod
    def _known_task_columns(cls, v: list[str]) -> list[str]:
        return _known_columns(Task, v)


def _known_columns(model: type[_Record], columns: list[str]) -> list[str]:
    unknown = [c for c in columns if c not in model.columns()]
    if unknown:
        raise ValueError(f"unknown {model.__name__} column(s): {', '.join(unknown)}")
    return columns


class IOPolicy(BaseModel):
    """
    @brief
    Controls runtime behavior for artifact writing.
    """

    write_report: bool = Field(True, description="If False, validation_report.json is not written.")
    report_filename: str = Field("validation_report.json", description="Report file name")


class Config(_StrictBaseModel):
    """
    @brief
    Represents the full runtime configuration loaded from config.yaml.

    @details
    Combines check bounds, required columns, the context string handed to
    the external repair collaborator, and I/O settings. `Config()` yields
    the defaults used by the host application.
    """

    checks: CheckConfig = Field(default_factory=CheckConfig)
    required_fields: RequiredFieldsConfig = Field(default_factory=RequiredFieldsConfig)
    repair_context: str = Field(
        "valid JSON string that is properly escaped",
        description="Context passed along with invalid JSON values to the repair service",
    )

    dataset_json: str | None = None
    output_dir: str | None = "data/output"
    io_policy: IOPolicy = Field(default_factory=IOPolicy)


__all__ = [
    "Client",
    "Worker",
    "Task",
    "FieldError",
    "Rule",
    "RULE_ADAPTER",
    "CoRunRule",
    "SlotRestrictionRule",
    "LoadLimitRule",
    "PhaseWindowRule",
    "PatternMatchRule",
    "PrecedenceRule",
    "ValidationSummary",
    "Config",
    "CheckConfig",
    "RequiredFieldsConfig",
]
