"""
PMO Scheduling Engine.

Dependency analysis, CPM scheduling, delay propagation, portfolio
cross-project dependencies and earned value metrics for task and project
schedules.
"""

from .cpm import (
    SchedulableItem,
    ScheduleTiming,
    CPMResult,
    DelayImpact,
    DelayImpactResult,
    CriticalPathResult,
    ProjectDependency,
    PortfolioAnalysis,
    EVMSnapshot,
    SchedulingError,
    CycleDetected,
    DependencyGraph,
    CPMEngine,
    find_cycle,
    topological_sort,
    sort_or_fallback,
    solve_schedule,
)
from .analysis import (
    analyze_critical_path,
    adjust_task_dates,
    add_dependency,
    simulate_delay,
    analyze_delay_impact,
    detect_project_dependencies,
    analyze_portfolio,
    calculate_evm,
    get_evm_status,
)
from .data_loader import load_items, items_from_dataframe, load_items_csv

__version__ = '0.1.0'

__all__ = [
    # Models
    'SchedulableItem',
    'ScheduleTiming',
    'CPMResult',
    'DelayImpact',
    'DelayImpactResult',
    'CriticalPathResult',
    'ProjectDependency',
    'PortfolioAnalysis',
    'EVMSnapshot',
    # Errors
    'SchedulingError',
    'CycleDetected',
    # Core
    'DependencyGraph',
    'CPMEngine',
    'find_cycle',
    'topological_sort',
    'sort_or_fallback',
    'solve_schedule',
    # Analysis
    'analyze_critical_path',
    'adjust_task_dates',
    'add_dependency',
    'simulate_delay',
    'analyze_delay_impact',
    'detect_project_dependencies',
    'analyze_portfolio',
    'calculate_evm',
    'get_evm_status',
    # Loading
    'load_items',
    'items_from_dataframe',
    'load_items_csv',
]
