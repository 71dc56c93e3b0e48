# tests/validator/test_rule_graph.py
from __future__ import annotations

from allocheck.schemas.models import CoRunRule, LoadLimitRule, Task
from allocheck.validator.context import RunTally
from allocheck.validator.rule_graph import (
    build_corun_graph,
    check_corun_cycles,
    find_corun_cycles,
)

CYCLE_MESSAGE = "This task is part of a circular co-run dependency."


def corun(*tasks: str) -> CoRunRule:
    return CoRunRule(tasks=list(tasks))


def test_graph_is_bidirectional_clique_in_insertion_order() -> None:
    # --- Act ---
    graph = build_corun_graph([corun("A", "B"), corun("B", "C"), corun("C", "A")])

    # --- Assert ---
    assert graph == {"A": ["B", "C"], "B": ["A", "C"], "C": ["B", "A"]}


def test_graph_ignores_other_rules_self_links_and_repeats() -> None:
    rules = [
        LoadLimitRule(workerGroup="G", maxSlotsPerPhase=2),
        corun("A", "A", "B"),
        corun("A", "B"),
    ]

    assert build_corun_graph(rules) == {"A": ["B"], "B": ["A"]}


def test_triangle_of_rules_is_one_cycle() -> None:
    """
    @brief
    Three pairwise co-run rules over A, B, C form one cyclic component.

    @details
    Tasks on the search stack at detection time are flagged on TaskID and
    the "Circular Dependency" category is counted once.
    """
    # --- Arrange ---
    tasks = [Task(TaskID="A"), Task(TaskID="B"), Task(TaskID="C"), Task(TaskID="D")]
    rules = [corun("A", "B"), corun("B", "C"), corun("C", "A")]
    tally = RunTally()

    # --- Act ---
    check_corun_cycles(tasks, rules, tally)

    # --- Assert ---
    flagged = {t.task_id for t in tasks if "TaskID" in t.errors}
    assert flagged == {"A", "B", "C"}
    assert tasks[0].errors["TaskID"].message == CYCLE_MESSAGE
    assert tasks[3].errors == {}
    assert tally.errors_by_type == {"Circular Dependency": 1}


def test_triangle_stack_snapshot() -> None:
    graph = build_corun_graph([corun("A", "B"), corun("B", "C"), corun("C", "A")])

    assert find_corun_cycles(graph) == [("A", "B", "C")]


def test_single_pair_rule_is_not_a_cycle() -> None:
    # --- Arrange ---
    tasks = [Task(TaskID="A"), Task(TaskID="B")]
    tally = RunTally()

    # --- Act ---
    check_corun_cycles(tasks, [corun("A", "B")], tally)

    # --- Assert ---
    assert all(t.errors == {} for t in tasks)
    assert tally.total_errors == 0


def test_chain_of_pairs_is_acyclic() -> None:
    graph = build_corun_graph([corun("A", "B"), corun("B", "C"), corun("C", "D")])

    assert find_corun_cycles(graph) == []


def test_repeated_pair_rule_is_not_a_cycle() -> None:
    graph = build_corun_graph([corun("A", "B"), corun("B", "A")])

    assert find_corun_cycles(graph) == []


def test_rule_with_three_tasks_forms_a_clique_cycle() -> None:
    assert len(find_corun_cycles(build_corun_graph([corun("A", "B", "C")]))) == 1


def test_each_cyclic_component_counts_once() -> None:
    """
    @brief
    Two disjoint triangles give two detections; an acyclic pair gives none.
    """
    # --- Arrange ---
    rules = [
        corun("A", "B"),
        corun("B", "C"),
        corun("C", "A"),
        corun("X", "Y"),
        corun("P", "Q"),
        corun("Q", "R"),
        corun("R", "P"),
    ]
    tally = RunTally()

    # --- Act ---
    check_corun_cycles([], rules, tally)

    # --- Assert ---
    assert tally.errors_by_type == {"Circular Dependency": 2}


def test_duplicate_task_rows_are_all_flagged() -> None:
    tasks = [Task(TaskID="A"), Task(TaskID="A"), Task(TaskID="B"), Task(TaskID="C")]
    tally = RunTally()

    check_corun_cycles(tasks, [corun("A", "B"), corun("B", "C"), corun("C", "A")], tally)

    assert tasks[0].errors["TaskID"].message == CYCLE_MESSAGE
    assert tasks[1].errors["TaskID"].message == CYCLE_MESSAGE


def test_long_chain_does_not_exhaust_the_call_stack() -> None:
    # --- Arrange ---
    rules = [corun(f"T{i}", f"T{i + 1}") for i in range(5000)]

    # --- Act ---
    cycles = find_corun_cycles(build_corun_graph(rules))

    # --- Assert ---
    assert cycles == []


def test_no_corun_rules_is_a_no_op() -> None:
    tally = RunTally()

    rules = [LoadLimitRule(workerGroup="G", maxSlotsPerPhase=1)]

    check_corun_cycles([Task(TaskID="A")], rules, tally)

    assert tally.total_errors == 0
