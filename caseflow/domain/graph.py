"""Blocking-dependency graph rules.

Edges point from a task to the tasks it depends on. Only blocking edges
take part in cycle detection; informational edges never block.
"""

from collections.abc import Iterable, Mapping

from caseflow.shared.enums import TaskStatus


def find_cycle(
    task_id: str,
    depends_on: Iterable[str],
    edges: Mapping[str, Iterable[str]],
) -> list[str] | None:
    """Return the cycle that replacing task_id's blocking set would close, or None.

    Runs a depth-first search from every proposed prerequisite over the
    existing blocking edges (with task_id's own edges replaced by
    depends_on) and looks for a path back to task_id.

    Args:
        task_id: Task whose blocking dependency set is being replaced.
        depends_on: Proposed prerequisites of task_id.
        edges: Current blocking adjacency (task id -> prerequisite ids).

    Returns:
        Cycle path starting and ending at task_id (e.g. [A, B, A]), or None.
    """
    graph = {node: tuple(targets) for node, targets in edges.items()}
    graph[task_id] = tuple(depends_on)

    parents: dict[str, str] = {}
    stack: list[str] = []
    for start in graph[task_id]:
        if start == task_id:
            return [task_id, task_id]
        if start not in parents:
            parents[start] = task_id
            stack.append(start)

    while stack:
        node = stack.pop()
        for target in graph.get(node, ()):
            if target == task_id:
                path = [node]
                while path[-1] != task_id:
                    path.append(parents[path[-1]])
                path.reverse()
                path.append(task_id)
                return path
            if target not in parents:
                parents[target] = node
                stack.append(target)
    return None


def unmet_dependencies(
    depends_on: Iterable[str],
    statuses: Mapping[str, str],
) -> list[str]:
    """Return prerequisites that are not done (unknown ids count as unmet)."""
    return [
        dep for dep in depends_on
        if statuses.get(dep) != TaskStatus.DONE.value
    ]
