"""
Data models for scheduling calculations.

Defines dataclasses for schedulable items and analysis results. Items are
frozen: the engine only ever returns modified copies.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class SchedulableItem:
    """A task inside a project, or a project inside a portfolio."""

    id: str
    name: str = ''
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    progress: float = 0.0                  # 0-100
    priority: Optional[str] = None         # P0, P1, P2
    dependencies: tuple[str, ...] = ()     # predecessor ids
    resource_requirements: tuple[str, ...] = ()
    status: Optional[str] = None           # active, planning, completed, ...

    def duration_days(self) -> int:
        """
        Scheduled duration in whole days, floored at 1.

        Same-day items, milestones, items with end before start and items
        missing either date all count as one day.
        """
        if self.start_date is None or self.end_date is None:
            return 1
        return max(1, (self.end_date - self.start_date).days)

    def has_dates(self) -> bool:
        """Check if both start and end dates are set."""
        return self.start_date is not None and self.end_date is not None


@dataclass(frozen=True)
class ScheduleTiming:
    """CPM timing for one item."""

    item_id: str
    duration: int
    earliest_start: date
    earliest_finish: date
    latest_start: date
    latest_finish: date
    slack: int

    @property
    def is_critical(self) -> bool:
        return self.slack == 0


@dataclass
class CPMResult:
    """Results from a CPM calculation."""

    timings: dict[str, ScheduleTiming]
    order: list[str]               # item ids in topological order
    critical_path: list[str]       # connected zero-slack chain, source to horizon
    critical_items: list[str]      # every zero-slack item, topological order
    project_start: Optional[date]
    project_finish: Optional[date]
    used_fallback: bool = False

    def get_timing(self, item_id: str) -> Optional[ScheduleTiming]:
        return self.timings.get(item_id)

    def slack(self, item_id: str) -> int:
        """Slack of an item in days."""
        return self.timings[item_id].slack

    def get_project_duration_days(self) -> int:
        """Days between the earliest start and the horizon."""
        if self.project_start is None or self.project_finish is None:
            return 0
        return (self.project_finish - self.project_start).days

    def get_items_by_slack(self, max_slack: int = None) -> list[ScheduleTiming]:
        """Get timings sorted by slack (ascending)."""
        timings = list(self.timings.values())
        if max_slack is not None:
            timings = [t for t in timings if t.slack <= max_slack]
        return sorted(timings, key=lambda t: t.slack)


@dataclass(frozen=True)
class DelayImpact:
    """Propagated finish-date shift for one downstream item."""

    item_id: str
    item_name: str
    original_end_date: Optional[date]
    new_end_date: Optional[date]
    delay_days: int


@dataclass
class DelayImpactResult:
    """Results from re-solving the schedule with one item delayed."""

    item_id: str
    item_name: str
    delay_days: int
    original_finish: Optional[date]
    new_finish: Optional[date]
    slip_days: int
    affected_item_ids: list[str]
    original_critical_path: list[str]
    new_critical_path: list[str]
    critical_path_changed: bool

    def get_slip_summary(self) -> str:
        """Get human-readable slip summary."""
        if self.slip_days <= 0:
            return "No impact on project finish"
        return f"{self.slip_days} days slip ({self.original_finish} -> {self.new_finish})"


@dataclass
class CriticalPathResult:
    """Results from critical path analysis."""

    cpm: CPMResult
    critical_path: list[str]
    near_critical_items: list[str]
    slack_distribution: dict[str, int]   # slack bucket -> count
    project_finish: Optional[date]
    near_critical_threshold_days: int
    total_items: int
    names: dict[str, str] = field(default_factory=dict)

    def get_critical_path_length(self) -> int:
        """Number of items on the critical path."""
        return len(self.critical_path)

    def get_risk_summary(self) -> str:
        """Get summary of schedule risk."""
        critical = len(self.critical_path)
        near_critical = len(self.near_critical_items)
        return (f"{critical} critical items, {near_critical} near-critical "
                f"(<= {self.near_critical_threshold_days} days slack)")


@dataclass
class ProjectDependency:
    """An inferred (or declared) precedence edge between two projects."""

    source_id: str
    source_name: str
    target_id: str
    target_name: str
    dependency_type: str           # finish-to-start, start-to-start, finish-to-finish
    shared_resources: tuple[str, ...] = ()
    description: str = ''
    declared: bool = False
    on_critical_path: bool = False

    @property
    def edge(self) -> tuple[str, str]:
        return (self.source_id, self.target_id)


@dataclass(frozen=True)
class ProjectCount:
    """A project and a degree count, used for dependency extremes."""

    id: str
    name: str
    count: int


@dataclass
class DependencyStatistics:
    """Degree statistics over a portfolio dependency graph."""

    total_dependencies: int
    critical_dependencies: int
    most_dependent_project: Optional[ProjectCount]
    most_blocking_project: Optional[ProjectCount]


@dataclass
class PortfolioAnalysis:
    """Portfolio-level dependency graph with its CPM results."""

    dependencies: list[ProjectDependency]
    cpm: CPMResult
    statistics: DependencyStatistics
    projects: list[SchedulableItem] = field(default_factory=list)

    def get_dependencies_of(self, project_id: str) -> list[ProjectDependency]:
        """Edges where the project is the dependent side."""
        return [d for d in self.dependencies if d.target_id == project_id]


@dataclass(frozen=True)
class EVMSnapshot:
    """Earned value metrics at one point in time."""

    pv: float
    ev: float
    ac: float
    sv: float
    cv: float
    spi: float
    cpi: float
    bac: float
    eac: float
    etc: float
    vac: float
    tcpi: float
    schedule_status: str           # ahead, on_track, behind
    cost_status: str               # under_budget, on_track, over_budget
    overall_health: str            # good, warning, critical
    as_of: Optional[date] = None

    @property
    def status(self) -> dict[str, str]:
        return {'schedule': self.schedule_status, 'cost': self.cost_status}
