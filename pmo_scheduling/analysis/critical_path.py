"""
Critical Path Analysis.

Identifies critical and near-critical items, analyzes slack distribution,
and produces the date-rebalancing and edge-insertion copies handed back to
the store layer.
"""

import logging
from collections import defaultdict
from dataclasses import replace
from datetime import date
from typing import Iterable

import pandas as pd

from ..config.settings import settings
from ..cpm.models import SchedulableItem, CPMResult, CriticalPathResult
from ..cpm.network import DependencyGraph
from ..cpm.engine import CPMEngine, ON_CYCLE_RAISE
from ..cpm.traversal import check_new_edge
from ..schemas.outputs import ScheduleTimingRow
from ..schemas.validator import ensure_valid_dataframe

logger = logging.getLogger(__name__)

SLACK_BUCKETS = (
    (0, '0 (critical)'),
    (5, '1-5 days'),
    (10, '6-10 days'),
    (20, '11-20 days'),
)
SLACK_BUCKET_OVERFLOW = '>20 days'


def _slack_bucket(slack: int) -> str:
    for upper, label in SLACK_BUCKETS:
        if slack <= upper:
            return label
    return SLACK_BUCKET_OVERFLOW


def analyze_critical_path(
    items: Iterable[SchedulableItem],
    near_critical_threshold_days: int = None,
    as_of: date = None,
    on_cycle: str = ON_CYCLE_RAISE,
) -> CriticalPathResult:
    """
    Analyze critical path and near-critical items.

    Args:
        items: Item snapshot to analyze
        near_critical_threshold_days: Slack threshold for near-critical
            classification (default: settings.NEAR_CRITICAL_THRESHOLD_DAYS)
        as_of: Start date for undated items (auto-detected if None)
        on_cycle: Cycle policy passed to CPMEngine.run

    Returns:
        CriticalPathResult with critical path, near-critical items, and statistics
    """
    if near_critical_threshold_days is None:
        near_critical_threshold_days = settings.NEAR_CRITICAL_THRESHOLD_DAYS

    graph = DependencyGraph(list(items))
    result = CPMEngine(graph, as_of=as_of).run(on_cycle=on_cycle)

    slack_buckets = defaultdict(int)
    near_critical = []
    for item_id in result.order:
        slack = result.timings[item_id].slack
        slack_buckets[_slack_bucket(slack)] += 1
        if 0 < slack <= near_critical_threshold_days:
            near_critical.append(item_id)

    near_critical.sort(key=lambda tid: result.timings[tid].slack)

    return CriticalPathResult(
        cpm=result,
        critical_path=result.critical_path,
        near_critical_items=near_critical,
        slack_distribution=dict(slack_buckets),
        project_finish=result.project_finish,
        near_critical_threshold_days=near_critical_threshold_days,
        total_items=len(graph),
        names={item.id: item.name for item in graph},
    )


def adjust_task_dates(
    items: Iterable[SchedulableItem],
    as_of: date = None,
    on_cycle: str = ON_CYCLE_RAISE,
) -> list[SchedulableItem]:
    """
    Move each item to its earliest start, keeping its calendar span.

    Args:
        items: Item snapshot (not modified)
        as_of: Start date for undated items
        on_cycle: Cycle policy passed to CPMEngine.run

    Returns:
        New item list in input order. Items without both dates and repeated
        ids after their first occurrence are copied unchanged.
    """
    items = list(items)
    result = CPMEngine(DependencyGraph(items), as_of=as_of).run(on_cycle=on_cycle)

    adjusted = []
    moved = 0
    seen = set()
    for item in items:
        timing = result.timings.get(item.id)
        first = item.id not in seen
        seen.add(item.id)
        if timing is None or not first or not item.has_dates():
            adjusted.append(replace(item))
            continue

        span = item.end_date - item.start_date
        new_start = timing.earliest_start
        if new_start != item.start_date:
            moved += 1
        adjusted.append(replace(item, start_date=new_start, end_date=new_start + span))

    logger.debug(f"Adjusted dates on {moved} of {len(items)} items")
    return adjusted


def add_dependency(
    items: Iterable[SchedulableItem],
    from_id: str,
    to_id: str,
) -> list[SchedulableItem]:
    """
    Return copies of ``items`` where ``to_id`` depends on ``from_id``.

    Raises:
        ValueError: if either id is unknown
        CycleDetected: if the edge would close a cycle
    """
    items = list(items)
    graph = DependencyGraph(items)
    for item_id in (from_id, to_id):
        if item_id not in graph:
            raise ValueError(f"Item {item_id} not found in graph")

    check_new_edge(graph, from_id, to_id)

    updated = []
    for item in items:
        if item.id == to_id and from_id not in item.dependencies:
            updated.append(replace(item, dependencies=item.dependencies + (from_id,)))
        else:
            updated.append(replace(item))
    return updated


def timings_to_dataframe(result: CPMResult) -> pd.DataFrame:
    """
    Flatten CPM timings into one row per item, in topological order.

    Date columns are datetime64 so the frame can go straight to charts or CSV.
    """
    columns = [
        'item_id', 'duration', 'earliest_start', 'earliest_finish',
        'latest_start', 'latest_finish', 'slack', 'is_critical',
    ]
    rows = []
    for item_id in result.order:
        timing = result.timings[item_id]
        rows.append({
            'item_id': item_id,
            'duration': timing.duration,
            'earliest_start': timing.earliest_start,
            'earliest_finish': timing.earliest_finish,
            'latest_start': timing.latest_start,
            'latest_finish': timing.latest_finish,
            'slack': timing.slack,
            'is_critical': timing.is_critical,
        })

    df = pd.DataFrame(rows, columns=columns)
    for col in ('earliest_start', 'earliest_finish', 'latest_start', 'latest_finish'):
        df[col] = pd.to_datetime(df[col])
    df['duration'] = df['duration'].astype(int)
    df['slack'] = df['slack'].astype(int)
    df['is_critical'] = df['is_critical'].astype(bool)
    return ensure_valid_dataframe(df, ScheduleTimingRow)


def print_critical_path_report(result: CriticalPathResult) -> None:
    """Print a formatted critical path report."""
    print("=" * 80)
    print("CRITICAL PATH ANALYSIS REPORT")
    print("=" * 80)

    print(f"\nProject Finish: {result.project_finish}")
    print(f"Total Items: {result.total_items}")
    print(f"Critical Path Items: {len(result.critical_path)}")
    print(f"Near-Critical Items (<= {result.near_critical_threshold_days} days slack): "
          f"{len(result.near_critical_items)}")

    if result.cpm.used_fallback:
        print("\nWARNING: circular dependency found, items scheduled in input order")

    print("\n--- Slack Distribution ---")
    for _, label in SLACK_BUCKETS + ((None, SLACK_BUCKET_OVERFLOW),):
        count = result.slack_distribution.get(label, 0)
        pct = count / result.total_items * 100 if result.total_items else 0.0
        bar = '#' * int(pct / 2)
        print(f"  {label:15s}: {count:5d} ({pct:5.1f}%) {bar}")

    print("\n--- Critical Path ---")
    for i, item_id in enumerate(result.critical_path[:20]):
        timing = result.cpm.timings[item_id]
        name = result.names.get(item_id, '')
        print(f"  {i+1:3d}. {item_id:20s} | {name[:30]:30s} | "
              f"{timing.earliest_start} -> {timing.earliest_finish} ({timing.duration}d)")

    if len(result.critical_path) > 20:
        print(f"  ... and {len(result.critical_path) - 20} more critical items")

    print("\n--- Near-Critical Items (first 10) ---")
    for i, item_id in enumerate(result.near_critical_items[:10]):
        timing = result.cpm.timings[item_id]
        name = result.names.get(item_id, '')
        print(f"  {i+1:3d}. {item_id:20s} | Slack: {timing.slack:4d}d | {name[:35]:35s}")

    print("\n" + "=" * 80)
