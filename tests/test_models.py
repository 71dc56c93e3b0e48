import pytest
from pydantic import ValidationError

from allocheck.schemas.models import (
    RULE_ADAPTER,
    Client,
    CoRunRule,
    Config,
    LoadLimitRule,
    PhaseWindowRule,
    PrecedenceRule,
    RequiredFieldsConfig,
    Task,
    ValidationSummary,
    Worker,
)


def test_client_accepts_column_names_and_attribute_names():
    by_column = Client(ClientID="C1", PriorityLevel=2, RequestedTaskIDs=["T1"])
    by_attr = Client(client_id="C1", priority_level=2, requested_task_ids=["T1"])

    assert by_column == by_attr
    assert by_column.key == "C1"
    assert by_column.errors == {}


def test_record_fields_default_to_missing():
    w = Worker()

    assert w.worker_id is None
    assert w.available_slots is None
    assert w.key is None


def test_unknown_columns_are_rejected():
    with pytest.raises(ValidationError):
        Client(ClientID="C1", Budget=1000)


def test_column_lookup():
    assert Task.attribute_for("RequiredSkills") == "required_skills"
    assert Task.attribute_for("required_skills") == "required_skills"
    assert "errors" not in Task.columns()
    assert Task.columns()[0] == "TaskID"
    with pytest.raises(KeyError):
        Task.attribute_for("errors")
    with pytest.raises(KeyError):
        Task.attribute_for("Nope")


def test_value_of_reads_by_column():
    t = Task(TaskID="T1", PreferredPhases=[1, 2])

    assert t.value_of("PreferredPhases") == [1, 2]


def test_rules_are_discriminated_by_type():
    """
    @brief
    Raw rule dictionaries decode into the matching rule model.
    """
    corun = RULE_ADAPTER.validate_python({"type": "coRun", "tasks": ["T1", "T2"]})
    limit = RULE_ADAPTER.validate_python(
        {"type": "loadLimit", "workerGroup": "G1", "maxSlotsPerPhase": 2}
    )
    window = RULE_ADAPTER.validate_python(
        {"type": "phaseWindow", "task": "T1", "allowedPhases": [1, 2]}
    )

    assert isinstance(corun, CoRunRule) and corun.tasks == ["T1", "T2"]
    assert isinstance(limit, LoadLimitRule) and limit.max_slots_per_phase == 2
    assert isinstance(window, PhaseWindowRule) and window.allowed_phases == [1, 2]


def test_unknown_or_malformed_rules_are_rejected():
    with pytest.raises(ValidationError):
        RULE_ADAPTER.validate_python({"type": "teleport"})
    with pytest.raises(ValidationError):
        RULE_ADAPTER.validate_python({"type": "loadLimit", "workerGroup": "G1"})
    with pytest.raises(ValidationError):
        PrecedenceRule(order=["global", "local"])


def test_summary_dumps_with_camel_case_keys():
    s = ValidationSummary(total_errors=2, errors_by_type={"Duplicate ID": 2})

    data = s.model_dump(by_alias=True)

    assert data["totalErrors"] == 2
    assert data["errorsByType"] == {"Duplicate ID": 2}
    assert data["lastRun"] is None


def test_summary_total_cannot_be_negative():
    with pytest.raises(ValidationError):
        ValidationSummary(total_errors=-1)


def test_config_defaults():
    cfg = Config()

    assert cfg.checks.priority_min == 1
    assert cfg.checks.priority_max == 5
    assert cfg.checks.min_duration == 1
    assert cfg.required_fields.clients == ["ClientID", "PriorityLevel", "RequestedTaskIDs"]
    assert cfg.required_fields.workers == ["WorkerID", "Skills", "AvailableSlots"]
    assert cfg.required_fields.tasks == ["TaskID", "Duration", "RequiredSkills"]
    assert cfg.io_policy.write_report is True
    assert cfg.dataset_json is None


def test_required_fields_must_name_real_columns():
    with pytest.raises(ValidationError) as exc:
        RequiredFieldsConfig(tasks=["TaskID", "Durration"])

    assert "Durration" in str(exc.value)
