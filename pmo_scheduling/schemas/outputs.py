"""
Output table schemas.

Column contracts for the DataFrames handed to the rendering and export
layers.
"""

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class ScheduleTimingRow(BaseModel):
    """
    CPM timing per item.

    Produced by: timings_to_dataframe
    """
    item_id: str = Field(description="Item identifier")
    duration: int = Field(description="Duration in days (floored at 1)")
    earliest_start: date = Field(description="Earliest start")
    earliest_finish: date = Field(description="Earliest finish")
    latest_start: date = Field(description="Latest start")
    latest_finish: date = Field(description="Latest finish")
    slack: int = Field(description="Total slack in days")
    is_critical: bool = Field(description="Slack is zero")


class DelayImpactRow(BaseModel):
    """
    Propagated delay per downstream item.

    Produced by: delay_impacts_to_dataframe
    """
    item_id: str = Field(description="Impacted item identifier")
    item_name: str = Field(description="Impacted item name")
    original_end_date: Optional[date] = Field(default=None, description="End date before the delay")
    new_end_date: Optional[date] = Field(default=None, description="End date after the delay")
    delay_days: int = Field(description="Propagated delay in days")


class EVMSnapshotRow(BaseModel):
    """
    Earned value metrics per project.

    Produced by: snapshots_to_dataframe
    """
    project_id: str = Field(description="Project identifier")
    pv: float = Field(description="Planned value")
    ev: float = Field(description="Earned value")
    ac: float = Field(description="Actual cost")
    sv: float = Field(description="Schedule variance (EV - PV)")
    cv: float = Field(description="Cost variance (EV - AC)")
    spi: float = Field(description="Schedule performance index")
    cpi: float = Field(description="Cost performance index")
    bac: float = Field(description="Budget at completion")
    eac: float = Field(description="Estimate at completion")
    etc: float = Field(description="Estimate to complete")
    vac: float = Field(description="Variance at completion")
    tcpi: float = Field(description="To-complete performance index")
    schedule_status: str = Field(description="ahead, on_track, behind")
    cost_status: str = Field(description="under_budget, on_track, over_budget")
    overall_health: str = Field(description="good, warning, critical")
