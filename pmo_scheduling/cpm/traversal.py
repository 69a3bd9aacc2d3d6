"""
Cycle detection and topological ordering.

Both checks run the same iterative depth-first search with a three-color
state array indexed by item position (WHITE unvisited, GRAY on the current
path, BLACK finished). The search follows predecessor edges, so the
post-order it emits already places every predecessor before its dependents.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from .errors import CycleDetected
from .network import DependencyGraph

logger = logging.getLogger(__name__)

WHITE, GRAY, BLACK = 0, 1, 2


def _depth_first(graph: DependencyGraph) -> tuple[list[int], Optional[list[int]]]:
    """
    Post-order DFS over predecessor edges.

    Returns:
        (order, cycle): ``order`` holds item positions with predecessors first.
        ``cycle`` is None for a DAG; otherwise it lists the positions of one
        cycle in edge order and ``order`` is partial.
    """
    state = [WHITE] * len(graph)
    order: list[int] = []

    for root in range(len(graph)):
        if state[root] != WHITE:
            continue

        # Each frame is [position, index of next predecessor to visit]
        stack = [[root, 0]]
        state[root] = GRAY

        while stack:
            frame = stack[-1]
            node, next_pred = frame
            preds = graph.predecessor_indices(node)

            if next_pred < len(preds):
                frame[1] += 1
                pred = preds[next_pred]
                if state[pred] == WHITE:
                    state[pred] = GRAY
                    stack.append([pred, 0])
                elif state[pred] == GRAY:
                    # Path on the stack runs pred <- ... <- node; pred -> node closes it
                    path = [f[0] for f in stack]
                    start = path.index(pred)
                    return order, [pred] + path[start + 1:][::-1]
                continue

            state[node] = BLACK
            order.append(node)
            stack.pop()

    return order, None


def find_cycle(graph: DependencyGraph) -> Optional[list[str]]:
    """Return the ids of one cycle in edge order, or None for a DAG."""
    _, cycle = _depth_first(graph)
    if cycle is None:
        return None
    return [graph.ids[i] for i in cycle]


def validate_acyclic(graph: DependencyGraph) -> bool:
    """Check that the existing edge set is a DAG."""
    return find_cycle(graph) is None


def topological_sort(graph: DependencyGraph) -> list[str]:
    """
    Return item IDs in topological order (predecessors before dependents).

    Raises:
        CycleDetected: if the graph is not a DAG
    """
    order, cycle = _depth_first(graph)
    if cycle is not None:
        raise CycleDetected([graph.ids[i] for i in cycle])
    return [graph.ids[i] for i in order]


def reverse_topological_sort(graph: DependencyGraph) -> list[str]:
    """Return item IDs with dependents before predecessors."""
    return list(reversed(topological_sort(graph)))


@dataclass
class SortResult:
    """Outcome of a sort that may fall back to insertion order."""

    order: list[str]
    cycle_error: Optional[CycleDetected] = None
    used_fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.cycle_error is None


def sort_or_fallback(graph: DependencyGraph, fallback: bool = True) -> SortResult:
    """
    Topologically sort, reporting a cycle instead of raising.

    Args:
        graph: Dependency graph to sort
        fallback: On a cycle, return every item in insertion order. When
                  False the order is left empty and only the error is set.

    Returns:
        SortResult; ``order`` never silently drops items
    """
    try:
        return SortResult(order=topological_sort(graph))
    except CycleDetected as e:
        if not fallback:
            return SortResult(order=[], cycle_error=e)
        logger.warning(f"{e}; falling back to insertion order")
        return SortResult(order=list(graph.ids), cycle_error=e, used_fallback=True)


def find_path(graph: DependencyGraph, start_id: str, target_id: str) -> Optional[list[str]]:
    """
    Find a path along dependency edges from ``start_id`` to ``target_id``.

    Returns:
        Ids from start to target inclusive, or None when unreachable
    """
    start = graph.index.get(start_id)
    target = graph.index.get(target_id)
    if start is None or target is None:
        return None

    parent = [-1] * len(graph)
    visited = [False] * len(graph)
    visited[start] = True
    stack = [start]

    while stack:
        node = stack.pop()
        if node == target:
            path = [node]
            while path[-1] != start:
                path.append(parent[path[-1]])
            return [graph.ids[i] for i in reversed(path)]
        for nxt in graph.successor_indices(node):
            if not visited[nxt]:
                visited[nxt] = True
                parent[nxt] = node
                stack.append(nxt)

    return None


def would_create_cycle(graph: DependencyGraph, from_id: str, to_id: str) -> bool:
    """
    Check whether adding ``from_id -> to_id`` would close a cycle.

    The edge closes a cycle exactly when ``to_id`` can already reach
    ``from_id``. Unknown ids never form edges, so they return False.
    """
    if from_id not in graph or to_id not in graph:
        return False
    if from_id == to_id:
        return True
    return find_path(graph, to_id, from_id) is not None


def check_new_edge(graph: DependencyGraph, from_id: str, to_id: str) -> None:
    """
    Refuse an edge that would close a cycle.

    Raises:
        CycleDetected: with the cycle the edge would create
    """
    if from_id not in graph or to_id not in graph:
        return
    if from_id == to_id:
        raise CycleDetected([from_id], edge=(from_id, to_id))
    path = find_path(graph, to_id, from_id)
    if path is not None:
        # from -> to -> ... -> from
        raise CycleDetected([from_id] + path[:-1], edge=(from_id, to_id))
