# tests/dataloader/test_dataset_loader.py
import json
import logging
from pathlib import Path

import pytest

from allocheck.dataloader.dataset_loader import DatasetLoader
from allocheck.errors import DataError
from allocheck.schemas.models import Client, CoRunRule, LoadLimitRule, Task, Worker
from allocheck.validator import ValidationOrchestrator


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def snapshot() -> dict:
    return {
        "clients": [{"ClientID": "C1", "PriorityLevel": 2, "RequestedTaskIDs": ["T1"]}],
        "workers": [{"WorkerID": "W1", "Skills": ["coding"], "AvailableSlots": [1, 2]}],
        "tasks": [{"TaskID": "T1", "Duration": 1, "RequiredSkills": ["coding"]}],
        "rules": [
            {"type": "coRun", "tasks": ["T1", "T2"]},
            {"type": "loadLimit", "workerGroup": "G", "maxSlotsPerPhase": 1},
        ],
    }


def test_load_valid_snapshot(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    """
    @brief
    A well-formed snapshot decodes into typed records and rules.

    @details
    Every row and rule is counted in total_rows and kept_rows, and a
    one-line summary is logged at INFO level.
    """
    # --- Arrange ---
    caplog.set_level(logging.INFO)
    path = write_json(tmp_path / "dataset.json", snapshot())

    # --- Act ---
    result = DatasetLoader().load(path)

    # --- Assert ---
    assert result.success is True
    assert result.errors == []
    assert (result.total_rows, result.kept_rows) == (5, 5)
    assert isinstance(result.dataset.clients[0], Client)
    assert isinstance(result.dataset.workers[0], Worker)
    assert isinstance(result.dataset.tasks[0], Task)
    assert isinstance(result.dataset.rules[0], CoRunRule)
    assert isinstance(result.dataset.rules[1], LoadLimitRule)
    assert "DatasetLoader OK: kept=5/5" in caplog.text


def test_missing_sections_are_empty(tmp_path: Path):
    path = write_json(tmp_path / "dataset.json", {"clients": []})

    result = DatasetLoader().load(path)

    assert result.success is True
    assert result.dataset.workers == [] and result.dataset.rules == []
    assert result.total_rows == 0


def test_row_issues_are_collected_and_fail_the_load(
    tmp_path: Path, caplog: pytest.LogCaptureFixture
):
    """
    @brief
    Row-level problems become issues instead of exceptions.

    @details
    A non-object row, a type mismatch and an unknown rule type are all
    reported with their entity and row index; the load then fails as a
    whole and keeps nothing.
    """
    # --- Arrange ---
    caplog.set_level(logging.ERROR)
    data = snapshot()
    data["clients"].append({"ClientID": "C2", "PriorityLevel": "high"})
    data["workers"].append("W2")
    data["rules"].append({"type": "teleport"})
    path = write_json(tmp_path / "dataset.json", data)

    # --- Act ---
    result = DatasetLoader().load(path)

    # --- Assert ---
    assert result.success is False
    assert result.kept_rows == 0
    assert result.total_rows == 8
    kinds = [(e["kind"], e["entity"], e["row"]) for e in result.errors]
    assert kinds == [
        ("schema_error", "clients", 1),
        ("not_an_object", "workers", 1),
        ("invalid_rule", "rules", 2),
    ]
    assert "DatasetLoader failed: 3 issue(s)" in caplog.text


def test_unknown_column_is_a_schema_error(tmp_path: Path):
    data = {"tasks": [{"TaskID": "T1", "Budget": 10}]}
    path = write_json(tmp_path / "dataset.json", data)

    result = DatasetLoader().load(path)

    assert result.errors[0]["kind"] == "schema_error"
    assert "Budget" in result.errors[0]["message"]


def test_saved_report_loads_back_as_snapshot(tmp_path: Path):
    """
    @brief
    A validation report can be loaded back and validated again.
    """
    # --- Arrange ---
    orch = ValidationOrchestrator(
        [Client(ClientID="C1", PriorityLevel=9, RequestedTaskIDs=["T1"])],
        [],
        [Task(TaskID="T1", Duration=1, RequiredSkills=[])],
    )
    report = orch.build_report(orch.run())
    path = write_json(tmp_path / "report.json", report)

    # --- Act ---
    result = DatasetLoader().load(path)

    # --- Assert ---
    assert result.success is True
    assert result.dataset.clients[0].errors["PriorityLevel"].message == "Must be between 1 and 5."


# -----------------------------
# Fatal errors
# -----------------------------
def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(DataError) as e:
        DatasetLoader().load(tmp_path / "nope.json")

    assert "Dataset file not found" in str(e.value)


def test_wrong_extension_raises(tmp_path: Path):
    path = tmp_path / "dataset.csv"
    path.write_text("ClientID\nC1\n", encoding="utf-8")

    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)

    assert "Invalid dataset file extension" in str(e.value)


def test_invalid_json_raises(tmp_path: Path):
    path = tmp_path / "dataset.json"
    path.write_text('{"clients": [', encoding="utf-8")

    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)

    assert "Dataset JSON parsing failed" in str(e.value)


def test_root_must_be_object(tmp_path: Path):
    path = write_json(tmp_path / "dataset.json", [1, 2, 3])

    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)

    assert "root must be a JSON object" in str(e.value)


def test_section_must_be_list(tmp_path: Path):
    path = write_json(tmp_path / "dataset.json", {"tasks": {"TaskID": "T1"}})

    with pytest.raises(DataError) as e:
        DatasetLoader().load(path)

    assert "'tasks' must be a list" in str(e.value)


def test_invalid_path_type_raises():
    with pytest.raises(DataError):
        DatasetLoader().load("dataset.json")  # type: ignore[arg-type]
