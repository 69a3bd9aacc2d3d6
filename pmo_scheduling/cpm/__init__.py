"""
CPM (Critical Path Method) calculator for portfolio and task schedules.

This module provides:
- Dependency graph construction from declared predecessor ids
- Cycle detection and topological ordering
- Forward/backward pass CPM calculations
- Slack and critical path identification
"""

from .models import (
    SchedulableItem,
    ScheduleTiming,
    CPMResult,
    DelayImpact,
    DelayImpactResult,
    CriticalPathResult,
    ProjectDependency,
    ProjectCount,
    DependencyStatistics,
    PortfolioAnalysis,
    EVMSnapshot,
)
from .errors import SchedulingError, CycleDetected
from .network import DependencyGraph
from .traversal import (
    SortResult,
    find_cycle,
    find_path,
    validate_acyclic,
    topological_sort,
    reverse_topological_sort,
    sort_or_fallback,
    would_create_cycle,
    check_new_edge,
)
from .engine import CPMEngine, solve_schedule

__all__ = [
    'SchedulableItem',
    'ScheduleTiming',
    'CPMResult',
    'DelayImpact',
    'DelayImpactResult',
    'CriticalPathResult',
    'ProjectDependency',
    'ProjectCount',
    'DependencyStatistics',
    'PortfolioAnalysis',
    'EVMSnapshot',
    'SchedulingError',
    'CycleDetected',
    'DependencyGraph',
    'SortResult',
    'find_cycle',
    'find_path',
    'validate_acyclic',
    'topological_sort',
    'reverse_topological_sort',
    'sort_or_fallback',
    'would_create_cycle',
    'check_new_edge',
    'CPMEngine',
    'solve_schedule',
]
