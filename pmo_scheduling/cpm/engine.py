"""
CPM (Critical Path Method) Engine.

Implements forward and backward pass calculations over calendar days.
"""

import logging
from datetime import date, timedelta
from typing import Iterable

from .models import SchedulableItem, ScheduleTiming, CPMResult
from .network import DependencyGraph
from .traversal import topological_sort, sort_or_fallback

logger = logging.getLogger(__name__)

ON_CYCLE_RAISE = 'raise'
ON_CYCLE_INSERTION_ORDER = 'insertion_order'


class CPMEngine:
    """
    CPM calculation engine.

    Performs forward pass (earliest dates), backward pass (latest dates),
    slack calculation, and critical path extraction. The engine keeps its
    results in its own dicts and never modifies the items it reads.
    """

    def __init__(self, graph: DependencyGraph, as_of: date = None):
        """
        Initialize CPM engine.

        Args:
            graph: Dependency graph to calculate
            as_of: Start date for items without a declared start. Defaults to
                   the earliest declared start in the graph, or today.
        """
        self.graph = graph
        self.as_of = as_of or self._find_project_start()

        self.earliest_start: dict[str, date] = {}
        self.earliest_finish: dict[str, date] = {}
        self.latest_start: dict[str, date] = {}
        self.latest_finish: dict[str, date] = {}
        self.slack: dict[str, int] = {}

    def _find_project_start(self) -> date:
        """Find the earliest declared start, falling back to today."""
        starts = [item.start_date for item in self.graph if item.start_date is not None]
        if starts:
            return min(starts)
        return date.today()

    def forward_pass(self, order: list[str]) -> None:
        """
        Calculate earliest start and finish for all items.

        earliest_start = max(own declared start, latest predecessor finish).
        Predecessors not yet visited in ``order`` are skipped, which only
        happens in insertion-order fallback.
        """
        for item_id in order:
            item = self.graph.items[item_id]
            early_start = item.start_date or self.as_of

            for pred_id in self.graph.predecessors(item_id):
                pred_finish = self.earliest_finish.get(pred_id)
                if pred_finish is not None and pred_finish > early_start:
                    early_start = pred_finish

            self.earliest_start[item_id] = early_start
            self.earliest_finish[item_id] = early_start + timedelta(days=self.graph.duration(item_id))

    def backward_pass(self, order: list[str], project_end: date = None) -> None:
        """
        Calculate latest start and finish for all items.

        Processes items in reverse order. Items without dependents finish
        at the project horizon.
        """
        if project_end is None:
            project_end = self._get_project_end()

        for item_id in reversed(order):
            late_finish = project_end
            for succ_id in self.graph.successors(item_id):
                succ_start = self.latest_start.get(succ_id)
                if succ_start is not None and succ_start < late_finish:
                    late_finish = succ_start

            self.latest_finish[item_id] = late_finish
            self.latest_start[item_id] = late_finish - timedelta(days=self.graph.duration(item_id))

    def _get_project_end(self) -> date:
        """Get the latest earliest finish as project horizon."""
        if not self.earliest_finish:
            raise ValueError("No items have earliest_finish calculated - run forward_pass first")
        return max(self.earliest_finish.values())

    def calculate_slack(self) -> None:
        """
        Slack = latest start - earliest start, in whole days.

        Never negative: a DAG cannot produce negative slack, and in
        insertion-order fallback the value is clamped to 0.
        """
        for item_id, early_start in self.earliest_start.items():
            self.slack[item_id] = max(0, (self.latest_start[item_id] - early_start).days)

    def get_critical_path(self, order: list[str]) -> list[str]:
        """
        Return the zero-slack chain in execution order.

        Starts from the first zero-slack item (in ``order``) without a
        zero-slack predecessor and follows driving edges (successor starts
        exactly when the current item finishes) among zero-slack items.
        """
        critical = [item_id for item_id in order if self.slack.get(item_id) == 0]
        if not critical:
            return []

        critical_set = set(critical)
        position = {item_id: i for i, item_id in enumerate(order)}

        current = next(
            (item_id for item_id in critical
             if not any(p in critical_set for p in self.graph.predecessors(item_id))),
            critical[0],
        )
        path = [current]
        on_path = {current}

        while True:
            finish = self.earliest_finish[current]
            candidates = [
                s for s in self.graph.successors(current)
                if s in critical_set and s not in on_path and self.earliest_start[s] == finish
            ]
            if not candidates:
                break
            current = min(candidates, key=lambda s: position[s])
            path.append(current)
            on_path.add(current)

        return path

    def get_timings(self) -> dict[str, ScheduleTiming]:
        """Assemble per-item timing records."""
        return {
            item_id: ScheduleTiming(
                item_id=item_id,
                duration=self.graph.duration(item_id),
                earliest_start=self.earliest_start[item_id],
                earliest_finish=self.earliest_finish[item_id],
                latest_start=self.latest_start[item_id],
                latest_finish=self.latest_finish[item_id],
                slack=self.slack[item_id],
            )
            for item_id in self.graph.ids
        }

    def run(self, on_cycle: str = ON_CYCLE_RAISE) -> CPMResult:
        """
        Execute full CPM calculation.

        Args:
            on_cycle: 'raise' to propagate CycleDetected, or
                      'insertion_order' to schedule in input order instead

        Returns:
            CPMResult with all calculated values

        Raises:
            CycleDetected: if the graph has a cycle and on_cycle is 'raise'
        """
        if on_cycle not in (ON_CYCLE_RAISE, ON_CYCLE_INSERTION_ORDER):
            raise ValueError(f"Unknown on_cycle policy: {on_cycle}")

        used_fallback = False
        if on_cycle == ON_CYCLE_RAISE:
            order = topological_sort(self.graph)
        else:
            sorted_result = sort_or_fallback(self.graph)
            order = sorted_result.order
            used_fallback = sorted_result.used_fallback

        if not order:
            return CPMResult(
                timings={}, order=[], critical_path=[], critical_items=[],
                project_start=None, project_finish=None, used_fallback=used_fallback,
            )

        self.forward_pass(order)
        project_finish = self._get_project_end()
        self.backward_pass(order, project_finish)
        self.calculate_slack()

        critical_path = self.get_critical_path(order)
        critical_items = [item_id for item_id in order if self.slack[item_id] == 0]
        project_start = min(self.earliest_start.values())

        logger.debug(f"CPM solved {len(order)} items: horizon {project_finish}, "
                     f"critical path {len(critical_path)} items")

        return CPMResult(
            timings=self.get_timings(),
            order=order,
            critical_path=critical_path,
            critical_items=critical_items,
            project_start=project_start,
            project_finish=project_finish,
            used_fallback=used_fallback,
        )


def solve_schedule(
    items: Iterable[SchedulableItem],
    as_of: date = None,
    on_cycle: str = ON_CYCLE_RAISE,
) -> CPMResult:
    """
    Build a graph from an item snapshot and run CPM on it.

    Args:
        items: Schedulable items (copied into a new list)
        as_of: Start date for items without a declared start
        on_cycle: Cycle policy passed to CPMEngine.run

    Returns:
        CPMResult
    """
    graph = DependencyGraph(list(items))
    return CPMEngine(graph, as_of=as_of).run(on_cycle=on_cycle)
