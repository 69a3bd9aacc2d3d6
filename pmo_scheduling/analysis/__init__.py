"""
Analysis modules for schedule what-if scenarios and performance indices.
"""

from .critical_path import (
    analyze_critical_path,
    adjust_task_dates,
    add_dependency,
    timings_to_dataframe,
    print_critical_path_report,
)
from .delay_impact import (
    simulate_delay,
    analyze_delay_impact,
    analyze_delay_sensitivity,
    delay_impacts_to_dataframe,
)
from .portfolio import (
    detect_project_dependencies,
    build_portfolio_graph,
    analyze_portfolio,
    simulate_portfolio_delay,
    get_dependency_statistics,
)
from .evm import calculate_evm, get_evm_status, planned_value_curve, snapshots_to_dataframe

__all__ = [
    'analyze_critical_path',
    'adjust_task_dates',
    'add_dependency',
    'timings_to_dataframe',
    'print_critical_path_report',
    'simulate_delay',
    'analyze_delay_impact',
    'analyze_delay_sensitivity',
    'delay_impacts_to_dataframe',
    'detect_project_dependencies',
    'build_portfolio_graph',
    'analyze_portfolio',
    'simulate_portfolio_delay',
    'get_dependency_statistics',
    'calculate_evm',
    'get_evm_status',
    'planned_value_curve',
    'snapshots_to_dataframe',
]
