# src/allocheck/validator/rule_graph.py
from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

from allocheck.schemas.models import CoRunRule, Task
from allocheck.validator.context import RunTally, add_error

logger = logging.getLogger(__name__)

CIRCULAR_DEPENDENCY = "Circular Dependency"

_UNVISITED, _IN_PROGRESS, _DONE = 0, 1, 2


def build_corun_graph(rules: Sequence[object]) -> dict[str, list[str]]:
    """
    @brief
    Undirected adjacency induced by co-run rules.

    @details
    Each co-run rule links every listed task to every other listed task.
    Self links and repeated links are dropped; node and neighbor order
    follow first appearance in the rule list. Other rule types are ignored.
    """
    links: dict[str, dict[str, None]] = {}
    for rule in rules:
        if not isinstance(rule, CoRunRule):
            continue
        for task_id in rule.tasks:
            neighbors = links.setdefault(task_id, {})
            for other in rule.tasks:
                if other != task_id:
                    neighbors.setdefault(other, None)
    return {node: list(neighbors) for node, neighbors in links.items()}


def _search(graph: dict[str, list[str]], start: str, state: dict[str, int]) -> tuple[str, ...] | None:
    """
    Depth-first search from `start` on an explicit frame stack.

    Returns the nodes on the stack when a link to an in-progress node other
    than the frame's parent is met, or None when the component is acyclic.
    """
    state[start] = _IN_PROGRESS
    frames: list[tuple[str, str | None, Iterator[str]]] = [(start, None, iter(graph[start]))]

    while frames:
        node, parent, neighbors = frames[-1]

        try:
            nxt = next(neighbors)
        except StopIteration:
            frames.pop()
            state[node] = _DONE
            continue

        nxt_state = state.get(nxt, _UNVISITED)
        if nxt_state == _UNVISITED:
            state[nxt] = _IN_PROGRESS
            frames.append((nxt, node, iter(graph.get(nxt, ()))))
        elif nxt_state == _IN_PROGRESS and nxt != parent:
            return tuple(f[0] for f in frames)

    return None


def _close_component(graph: dict[str, list[str]], start: str, state: dict[str, int]) -> None:
    # mark the rest of a cyclic component so it is not searched (and counted) again
    pending = [start]
    state[start] = _DONE
    while pending:
        node = pending.pop()
        for nxt in graph.get(node, ()):
            if state.get(nxt, _UNVISITED) != _DONE:
                state[nxt] = _DONE
                pending.append(nxt)


def find_corun_cycles(graph: dict[str, list[str]]) -> list[tuple[str, ...]]:
    """
    @brief
    Detect circular co-run dependencies, one entry per cyclic component.

    @details
    Searches start from every unvisited node in insertion order. When a
    cycle is met, the nodes on the search stack at that moment are
    reported; this may include nodes leading into the cycle and may omit
    cycle members not yet reached.

    @returns
        List of stack snapshots, one per component found to be cyclic.
    """
    state: dict[str, int] = {}
    found: list[tuple[str, ...]] = []

    for start in graph:
        if state.get(start, _UNVISITED) != _UNVISITED:
            continue
        on_stack = _search(graph, start, state)
        if on_stack is not None:
            found.append(on_stack)
            _close_component(graph, start, state)

    return found


def check_corun_cycles(tasks: Sequence[Task], rules: Sequence[object], tally: RunTally) -> None:
    """Flag every task row whose ID sits on a detected co-run cycle."""
    graph = build_corun_graph(rules)
    if not graph:
        return

    for on_stack in find_corun_cycles(graph):
        logger.debug("Circular co-run dependency through %s", ", ".join(on_stack))
        members = set(on_stack)
        for task in tasks:
            if task.task_id in members:
                add_error(task, "TaskID", "This task is part of a circular co-run dependency.")
        tally.increment(CIRCULAR_DEPENDENCY)


__all__ = ["build_corun_graph", "find_corun_cycles", "check_corun_cycles"]
