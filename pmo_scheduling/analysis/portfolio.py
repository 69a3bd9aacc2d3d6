"""
Portfolio Dependency Analysis.

Infers a project-level dependency graph from shared resources and schedule
proximity, then runs the same CPM and delay propagation used for tasks.
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, Optional

from ..config.settings import settings
from ..cpm.models import (
    SchedulableItem,
    ProjectDependency,
    ProjectCount,
    DependencyStatistics,
    PortfolioAnalysis,
    DelayImpact,
)
from ..cpm.network import DependencyGraph
from ..cpm.engine import CPMEngine, ON_CYCLE_RAISE
from .delay_impact import simulate_delay

logger = logging.getLogger(__name__)

FINISH_TO_START = 'finish-to-start'
START_TO_START = 'start-to-start'
FINISH_TO_FINISH = 'finish-to-finish'


def filter_portfolio_projects(
    projects: Iterable[SchedulableItem],
    statuses: Optional[tuple[str, ...]] = None,
) -> list[SchedulableItem]:
    """
    Keep projects whose status takes part in portfolio scheduling.

    Args:
        projects: Project snapshot
        statuses: Accepted statuses (default: settings.PORTFOLIO_STATUSES).
                  Pass an empty tuple to keep every project.
    """
    if statuses is None:
        statuses = settings.PORTFOLIO_STATUSES
    if not statuses:
        return list(projects)
    return [p for p in projects if p.status in statuses]


def find_shared_resources(first: SchedulableItem, second: SchedulableItem) -> list[str]:
    """Resource ids required by both projects, in the first project's order."""
    other = set(second.resource_requirements)
    shared = []
    for resource_id in first.resource_requirements:
        if resource_id in other and resource_id not in shared:
            shared.append(resource_id)
    return shared


def classify_timeline_dependency(
    earlier: SchedulableItem,
    later: SchedulableItem,
    window_days: int = None,
) -> Optional[str]:
    """
    Classify the schedule relation between two projects.

    ``earlier`` is the project that starts first. The first matching rule
    wins: finish-to-start, then start-to-start, then finish-to-finish.
    Projects missing a date never match.
    """
    if window_days is None:
        window_days = settings.PROXIMITY_WINDOW_DAYS
    if not (earlier.has_dates() and later.has_dates()):
        return None

    # Later project starts shortly after the earlier one ends
    gap = (later.start_date - earlier.end_date).days
    if 0 < gap < window_days:
        return FINISH_TO_START

    if abs((earlier.start_date - later.start_date).days) < window_days:
        return START_TO_START

    if abs((earlier.end_date - later.end_date).days) < window_days:
        return FINISH_TO_FINISH

    return None


def detect_project_dependencies(
    projects: Iterable[SchedulableItem],
    window_days: int = None,
    include_declared: bool = False,
) -> list[ProjectDependency]:
    """
    Infer dependencies between every pair of projects.

    Edges run from the earlier-starting project to the later one (ties keep
    input order), so inferred edges alone always form a DAG. A pair gets an
    edge when the projects share a resource or when their dates fall within
    ``window_days`` of each other. Resource-only pairs are typed
    finish-to-start.

    Args:
        projects: Projects to compare (already filtered by status)
        window_days: Proximity window (default: settings.PROXIMITY_WINDOW_DAYS)
        include_declared: Also add edges from each project's own
            ``dependencies``; these may introduce cycles

    Returns:
        List of ProjectDependency
    """
    projects = list(projects)
    ordered = sorted(
        enumerate(projects),
        key=lambda pair: (pair[1].start_date or date.max, pair[0]),
    )
    ordered = [p for _, p in ordered]

    dependencies = []
    for i, earlier in enumerate(ordered):
        for later in ordered[i + 1:]:
            shared = find_shared_resources(earlier, later)
            timeline = classify_timeline_dependency(earlier, later, window_days)
            if not shared and timeline is None:
                continue

            if shared:
                description = f"Shared resources: {', '.join(shared)}"
            else:
                description = "Timeline dependency"

            dependencies.append(ProjectDependency(
                source_id=earlier.id,
                source_name=earlier.name,
                target_id=later.id,
                target_name=later.name,
                dependency_type=timeline or FINISH_TO_START,
                shared_resources=tuple(shared),
                description=description,
            ))

    inferred_count = len(dependencies)

    if include_declared:
        by_id = {p.id: p for p in projects}
        existing = {d.edge for d in dependencies}
        for project in projects:
            for pred_id in project.dependencies:
                pred = by_id.get(pred_id)
                if pred is None or (pred_id, project.id) in existing:
                    continue
                existing.add((pred_id, project.id))
                dependencies.append(ProjectDependency(
                    source_id=pred_id,
                    source_name=pred.name,
                    target_id=project.id,
                    target_name=project.name,
                    dependency_type=FINISH_TO_START,
                    description="Declared dependency",
                    declared=True,
                ))

    logger.info(f"Inferred {inferred_count} project dependencies across {len(projects)} projects "
                f"({len(dependencies) - inferred_count} declared)")
    return dependencies


def build_portfolio_graph(
    projects: Iterable[SchedulableItem],
    dependencies: list[ProjectDependency],
) -> DependencyGraph:
    """
    Build a DependencyGraph whose edges are exactly ``dependencies``.

    Projects are copied with their ``dependencies`` replaced by the
    predecessors found in the edge list.
    """
    predecessors: dict[str, list[str]] = {}
    for dep in dependencies:
        preds = predecessors.setdefault(dep.target_id, [])
        if dep.source_id not in preds:
            preds.append(dep.source_id)

    return DependencyGraph([
        replace(p, dependencies=tuple(predecessors.get(p.id, ())))
        for p in projects
    ])


def get_dependency_statistics(
    projects: Iterable[SchedulableItem],
    dependencies: list[ProjectDependency],
) -> DependencyStatistics:
    """
    Count in-degree and out-degree over the dependency edges.

    The most dependent project has the most incoming edges, the most blocking
    project the most outgoing ones. Ties go to the earlier project in input
    order; None is returned when no project has any edge on that side.
    """
    projects = list(projects)
    names = {p.id: p.name for p in projects}
    incoming = {p.id: 0 for p in projects}
    outgoing = {p.id: 0 for p in projects}

    for dep in dependencies:
        outgoing[dep.source_id] = outgoing.get(dep.source_id, 0) + 1
        incoming[dep.target_id] = incoming.get(dep.target_id, 0) + 1

    def _max_count(counts: dict[str, int]) -> Optional[ProjectCount]:
        best_id, best = None, 0
        for project_id, count in counts.items():
            if count > best:
                best_id, best = project_id, count
        if best_id is None:
            return None
        return ProjectCount(id=best_id, name=names.get(best_id, ''), count=best)

    return DependencyStatistics(
        total_dependencies=len(dependencies),
        critical_dependencies=sum(1 for d in dependencies if d.on_critical_path),
        most_dependent_project=_max_count(incoming),
        most_blocking_project=_max_count(outgoing),
    )


def analyze_portfolio(
    projects: Iterable[SchedulableItem],
    window_days: int = None,
    statuses: Optional[tuple[str, ...]] = None,
    include_declared: bool = False,
    as_of: date = None,
    on_cycle: str = ON_CYCLE_RAISE,
) -> PortfolioAnalysis:
    """
    Infer the portfolio dependency graph and solve its critical path.

    Args:
        projects: Project snapshot
        window_days: Proximity window for timeline heuristics
        statuses: Project statuses to include
        include_declared: Merge declared project dependencies
        as_of: Start date for undated projects
        on_cycle: Cycle policy passed to CPMEngine.run

    Returns:
        PortfolioAnalysis with edges flagged when they lie on the critical path

    Raises:
        CycleDetected: if declared edges close a cycle and on_cycle is 'raise'
    """
    eligible = filter_portfolio_projects(projects, statuses)
    dependencies = detect_project_dependencies(eligible, window_days, include_declared)
    graph = build_portfolio_graph(eligible, dependencies)
    result = CPMEngine(graph, as_of=as_of).run(on_cycle=on_cycle)

    critical_edges = set(zip(result.critical_path, result.critical_path[1:]))
    for dep in dependencies:
        dep.on_critical_path = dep.edge in critical_edges

    statistics = get_dependency_statistics(eligible, dependencies)
    return PortfolioAnalysis(
        dependencies=dependencies,
        cpm=result,
        statistics=statistics,
        projects=list(graph),
    )


def simulate_portfolio_delay(
    projects: Iterable[SchedulableItem],
    project_id: str,
    delay_days: int,
    window_days: int = None,
    statuses: Optional[tuple[str, ...]] = None,
    include_declared: bool = False,
) -> list[DelayImpact]:
    """
    Propagate a project delay across the inferred portfolio graph.

    Returns:
        DelayImpact per downstream project (empty if the project is not
        part of the portfolio graph)
    """
    eligible = filter_portfolio_projects(projects, statuses)
    dependencies = detect_project_dependencies(eligible, window_days, include_declared)
    graph = build_portfolio_graph(eligible, dependencies)
    return simulate_delay(graph, project_id, delay_days)
