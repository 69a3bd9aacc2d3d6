"""
Record and table schemas.

Input records are validated with Pydantic before they become
SchedulableItems; output DataFrames are checked against row schemas so
chart and export consumers keep a stable column contract.

Usage:
    from pmo_scheduling.schemas import ScheduleTimingRow, validate_dataframe

    errors = validate_dataframe(timings_df, ScheduleTimingRow)
"""

from .items import SchedulableItemRecord
from .outputs import ScheduleTimingRow, DelayImpactRow, EVMSnapshotRow
from .validator import (
    validate_dataframe,
    ensure_valid_dataframe,
    SchemaValidationError,
)

__all__ = [
    'SchedulableItemRecord',
    'ScheduleTimingRow',
    'DelayImpactRow',
    'EVMSnapshotRow',
    'validate_dataframe',
    'ensure_valid_dataframe',
    'SchemaValidationError',
]
