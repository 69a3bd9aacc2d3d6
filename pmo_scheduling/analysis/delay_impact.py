"""
Delay Impact Analysis.

Two ways to estimate what a late finish does downstream:

- ``simulate_delay`` pushes a flat, non-decaying shift breadth-first through
  every dependent item. The first delay to reach an item wins.
- ``analyze_delay_impact`` re-solves the full CPM with the item's finish
  moved and reports the change in project horizon and critical path.
"""

import logging
from collections import deque
from dataclasses import replace
from datetime import date, timedelta
from typing import Iterable, Union

import pandas as pd

from ..cpm.models import SchedulableItem, DelayImpact, DelayImpactResult
from ..cpm.network import DependencyGraph
from ..cpm.engine import CPMEngine, ON_CYCLE_RAISE
from ..schemas.outputs import DelayImpactRow
from ..schemas.validator import ensure_valid_dataframe

logger = logging.getLogger(__name__)


def _as_graph(graph: Union[DependencyGraph, Iterable[SchedulableItem]]) -> DependencyGraph:
    if isinstance(graph, DependencyGraph):
        return graph
    return DependencyGraph(list(graph))


def simulate_delay(
    graph: Union[DependencyGraph, Iterable[SchedulableItem]],
    source_id: str,
    delay_days: int,
) -> list[DelayImpact]:
    """
    Propagate a finish delay at one item to everything downstream.

    Each item is visited at most once; every dependent inherits the same
    accumulated delay. The source item itself is not reported.

    Args:
        graph: Dependency graph, or items to build one from
        source_id: Item whose finish slips
        delay_days: Calendar days of slip

    Returns:
        DelayImpact per reachable downstream item, in breadth-first order.
        Empty when ``source_id`` is unknown.
    """
    graph = _as_graph(graph)
    start = graph.index.get(source_id)
    if start is None:
        logger.debug(f"Delay source {source_id} not in graph")
        return []

    impacts = []
    visited = [False] * len(graph)
    queue = deque([(start, delay_days)])

    while queue:
        current, accumulated = queue.popleft()
        if visited[current]:
            continue
        visited[current] = True

        if current != start:
            item = graph.items[graph.ids[current]]
            new_end = None
            if item.end_date is not None:
                new_end = item.end_date + timedelta(days=accumulated)
            impacts.append(DelayImpact(
                item_id=item.id,
                item_name=item.name,
                original_end_date=item.end_date,
                new_end_date=new_end,
                delay_days=accumulated,
            ))

        for nxt in graph.successor_indices(current):
            if not visited[nxt]:
                queue.append((nxt, accumulated))

    return impacts


def analyze_delay_impact(
    items: Iterable[SchedulableItem],
    item_id: str,
    delay_days: int,
    as_of: date = None,
    on_cycle: str = ON_CYCLE_RAISE,
) -> DelayImpactResult:
    """
    Calculate impact of finishing one item late by re-running CPM.

    Args:
        items: Item snapshot (not modified)
        item_id: ID of item to delay
        delay_days: Days added to the item's end date
        as_of: Start date for undated items (auto-detected if None)
        on_cycle: Cycle policy passed to CPMEngine.run

    Returns:
        DelayImpactResult with original vs new horizon and affected items
    """
    items = list(items)
    baseline_graph = DependencyGraph(items)
    item = baseline_graph.get_item(item_id)
    if item is None:
        raise ValueError(f"Item {item_id} not found in graph")
    if item.end_date is None:
        raise ValueError(f"Item {item_id} has no end date to delay")

    # Run baseline CPM
    baseline_engine = CPMEngine(baseline_graph, as_of=as_of)
    baseline_result = baseline_engine.run(on_cycle=on_cycle)

    # Copy items with the delayed finish
    delayed = replace(item, end_date=item.end_date + timedelta(days=delay_days))
    modified_items = [delayed if i.id == item_id else i for i in items]

    modified_engine = CPMEngine(DependencyGraph(modified_items), as_of=baseline_engine.as_of)
    modified_result = modified_engine.run(on_cycle=on_cycle)

    # Find affected items (items whose earliest finish changed)
    affected = [
        tid for tid in baseline_result.order
        if modified_result.timings[tid].earliest_finish != baseline_result.timings[tid].earliest_finish
    ]

    slip_days = (modified_result.project_finish - baseline_result.project_finish).days

    return DelayImpactResult(
        item_id=item_id,
        item_name=item.name,
        delay_days=delay_days,
        original_finish=baseline_result.project_finish,
        new_finish=modified_result.project_finish,
        slip_days=slip_days,
        affected_item_ids=affected,
        original_critical_path=baseline_result.critical_path,
        new_critical_path=modified_result.critical_path,
        critical_path_changed=baseline_result.critical_path != modified_result.critical_path,
    )


def analyze_delay_sensitivity(
    items: Iterable[SchedulableItem],
    delay_days: int = 5,
    item_ids: list[str] = None,
    as_of: date = None,
    on_cycle: str = ON_CYCLE_RAISE,
) -> list[DelayImpactResult]:
    """
    Delay each item by the same amount and rank the horizon slip.

    Args:
        items: Item snapshot
        delay_days: Delay to test per item
        item_ids: Items to test (default: every item with an end date)
        as_of: Start date for undated items
        on_cycle: Cycle policy passed to CPMEngine.run

    Returns:
        List of DelayImpactResult sorted by slip_days (descending)
    """
    items = list(items)
    if item_ids is None:
        item_ids = [i.id for i in items if i.end_date is not None]

    dated = {i.id for i in items if i.end_date is not None}
    skipped = [tid for tid in item_ids if tid not in dated]
    if skipped:
        logger.debug(f"Skipping {len(skipped)} items without end dates")

    results = [
        analyze_delay_impact(items, tid, delay_days, as_of=as_of, on_cycle=on_cycle)
        for tid in item_ids if tid in dated
    ]
    results.sort(key=lambda r: r.slip_days, reverse=True)
    return results


def delay_impacts_to_dataframe(impacts: list[DelayImpact]) -> pd.DataFrame:
    """Flatten DelayImpact records for charting and export."""
    df = pd.DataFrame(
        [
            {
                'item_id': impact.item_id,
                'item_name': impact.item_name,
                'original_end_date': impact.original_end_date,
                'new_end_date': impact.new_end_date,
                'delay_days': impact.delay_days,
            }
            for impact in impacts
        ],
        columns=['item_id', 'item_name', 'original_end_date', 'new_end_date', 'delay_days'],
    )
    for col in ('original_end_date', 'new_end_date'):
        df[col] = pd.to_datetime(df[col])
    df['delay_days'] = df['delay_days'].astype(int)
    return ensure_valid_dataframe(df, DelayImpactRow)
