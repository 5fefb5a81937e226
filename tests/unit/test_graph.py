"""Tests for blocking-dependency cycle detection and unmet prerequisites."""

from caseflow.domain.graph import find_cycle, unmet_dependencies


def test_no_cycle_in_chain() -> None:
    """A -> B -> C with no edge back to A is acyclic."""
    edges = {"B": ["C"], "C": []}
    assert find_cycle("A", ["B"], edges) is None


def test_direct_cycle_is_reported_with_path() -> None:
    """B already depends on A; making A depend on B closes A -> B -> A."""
    edges = {"B": ["A"]}
    assert find_cycle("A", ["B"], edges) == ["A", "B", "A"]


def test_transitive_cycle_path() -> None:
    """A -> B -> C -> A is found through an intermediate node."""
    edges = {"B": ["C"], "C": ["A"]}
    assert find_cycle("A", ["B"], edges) == ["A", "B", "C", "A"]


def test_self_dependency_is_a_cycle() -> None:
    assert find_cycle("A", ["A"], {}) == ["A", "A"]


def test_existing_edges_of_task_are_replaced() -> None:
    """The task's old set is ignored; only the proposed set counts."""
    edges = {"A": ["B"], "B": []}
    assert find_cycle("A", [], edges) is None


def test_diamond_is_not_a_cycle() -> None:
    """A -> B, A -> C, B -> D, C -> D shares a node but has no cycle."""
    edges = {"B": ["D"], "C": ["D"], "D": []}
    assert find_cycle("A", ["B", "C"], edges) is None


def test_cycle_elsewhere_in_graph_does_not_involve_task() -> None:
    """A pre-existing cycle among other tasks is not reported for A."""
    edges = {"X": ["Y"], "Y": ["X"]}
    assert find_cycle("A", ["X"], edges) is None


def test_unmet_dependencies_keeps_order_and_unknown_ids() -> None:
    statuses = {"a": "done", "b": "in-progress", "c": "done"}
    assert unmet_dependencies(["a", "b", "c", "zz"], statuses) == ["b", "zz"]


def test_unmet_dependencies_empty_when_all_done() -> None:
    assert unmet_dependencies(["a"], {"a": "done"}) == []
