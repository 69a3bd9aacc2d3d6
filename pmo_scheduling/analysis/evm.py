"""
Earned Value Management (EVM) calculations.

The project budget is spread over items in proportion to their duration,
then planned value follows the elapsed share of each item and earned value
follows its reported progress.
"""

import logging
from datetime import date
from typing import Iterable

import pandas as pd

from ..config.settings import settings
from ..cpm.models import SchedulableItem, EVMSnapshot
from ..schemas.outputs import EVMSnapshotRow
from ..schemas.validator import ensure_valid_dataframe

logger = logging.getLogger(__name__)

SCHEDULE_AHEAD = 'ahead'
SCHEDULE_ON_TRACK = 'on_track'
SCHEDULE_BEHIND = 'behind'

COST_UNDER_BUDGET = 'under_budget'
COST_ON_TRACK = 'on_track'
COST_OVER_BUDGET = 'over_budget'

HEALTH_GOOD = 'good'
HEALTH_WARNING = 'warning'
HEALTH_CRITICAL = 'critical'


def classify_schedule(spi: float, on_track_threshold: float = None) -> str:
    """SPI >= 1 is ahead, >= the on-track threshold is on track, else behind."""
    if on_track_threshold is None:
        on_track_threshold = settings.ON_TRACK_INDEX_THRESHOLD
    if spi >= 1:
        return SCHEDULE_AHEAD
    if spi >= on_track_threshold:
        return SCHEDULE_ON_TRACK
    return SCHEDULE_BEHIND


def classify_cost(cpi: float, on_track_threshold: float = None) -> str:
    """CPI >= 1 is under budget, >= the on-track threshold is on track, else over."""
    if on_track_threshold is None:
        on_track_threshold = settings.ON_TRACK_INDEX_THRESHOLD
    if cpi >= 1:
        return COST_UNDER_BUDGET
    if cpi >= on_track_threshold:
        return COST_ON_TRACK
    return COST_OVER_BUDGET


def classify_health(spi: float, cpi: float) -> str:
    """Overall health from the weaker of the two indices."""
    if spi >= settings.HEALTH_GOOD_THRESHOLD and cpi >= settings.HEALTH_GOOD_THRESHOLD:
        return HEALTH_GOOD
    if spi >= settings.HEALTH_WARNING_THRESHOLD and cpi >= settings.HEALTH_WARNING_THRESHOLD:
        return HEALTH_WARNING
    return HEALTH_CRITICAL


def _neutral_snapshot(budget: float, actual_cost: float, as_of: date) -> EVMSnapshot:
    return EVMSnapshot(
        pv=0.0, ev=0.0, ac=actual_cost, sv=0.0, cv=0.0, spi=1.0, cpi=1.0,
        bac=budget, eac=budget, etc=0.0, vac=0.0, tcpi=1.0,
        schedule_status=SCHEDULE_ON_TRACK,
        cost_status=COST_ON_TRACK,
        overall_health=HEALTH_GOOD,
        as_of=as_of,
    )


def calculate_evm(
    items: Iterable[SchedulableItem],
    budget: float,
    actual_cost: float = 0.0,
    as_of: date = None,
    cpi_floor: float = None,
) -> EVMSnapshot:
    """
    Calculate earned value metrics for a set of items.

    Args:
        items: Task snapshot (dates and progress)
        budget: Budget at completion (BAC)
        actual_cost: Actual cost spent so far (AC)
        as_of: Status date for planned value (default: today)
        cpi_floor: CPI at or below which EAC ignores CPI
            (default: settings.EAC_CPI_FLOOR)

    Returns:
        EVMSnapshot. With no items or a zero budget the neutral snapshot is
        returned (SPI = CPI = 1, EAC = BAC).
    """
    items = list(items)
    if as_of is None:
        as_of = date.today()
    if cpi_floor is None:
        cpi_floor = settings.EAC_CPI_FLOOR

    bac = float(budget or 0.0)
    ac = float(actual_cost or 0.0)

    if not items or bac == 0:
        logger.debug("No items or zero budget, returning neutral EVM snapshot")
        return _neutral_snapshot(bac, ac, as_of)

    total_duration = sum(item.duration_days() for item in items)

    pv = 0.0
    ev = 0.0
    for item in items:
        duration = item.duration_days()
        item_budget = bac * duration / total_duration

        # Planned value: share of the item's window already elapsed
        if item.start_date is not None and as_of >= item.start_date:
            days_elapsed = min(duration, max(0, (as_of - item.start_date).days))
            pv += item_budget * days_elapsed / duration

        ev += item_budget * (item.progress or 0) / 100

    sv = ev - pv
    cv = ev - ac

    spi = ev / pv if pv > 0 else 1.0
    cpi = ev / ac if ac > 0 else 1.0

    # EAC = AC + (BAC - EV) / CPI, without CPI when it is near zero
    if cpi > cpi_floor:
        eac = ac + (bac - ev) / cpi
    else:
        eac = ac + (bac - ev)
    etc = eac - ac
    vac = bac - eac

    remaining_budget = bac - ac
    tcpi = (bac - ev) / remaining_budget if remaining_budget > 0 else 1.0

    return EVMSnapshot(
        pv=pv, ev=ev, ac=ac,
        sv=sv, cv=cv,
        spi=spi, cpi=cpi,
        bac=bac, eac=eac, etc=etc, vac=vac,
        tcpi=tcpi,
        schedule_status=classify_schedule(spi),
        cost_status=classify_cost(cpi),
        overall_health=classify_health(spi, cpi),
        as_of=as_of,
    )


def get_evm_status(snapshot: EVMSnapshot) -> dict[str, str]:
    """Categorical statuses for display."""
    return {
        'schedule': snapshot.schedule_status,
        'cost': snapshot.cost_status,
        'overall_health': snapshot.overall_health,
    }


def planned_value_curve(
    items: Iterable[SchedulableItem],
    budget: float,
    periods: int = 10,
) -> pd.DataFrame:
    """
    Cumulative planned value across the item span (S-curve data).

    Args:
        items: Task snapshot
        budget: Budget at completion
        periods: Number of intervals between first start and last end

    Returns:
        DataFrame with columns date, pv, pv_pct (empty if no item is dated)
    """
    items = list(items)
    starts = [i.start_date for i in items if i.start_date is not None]
    ends = [i.end_date for i in items if i.end_date is not None]
    if not starts or not ends or periods < 1:
        return pd.DataFrame(columns=['date', 'pv', 'pv_pct'])

    points = pd.date_range(min(starts), max(max(ends), min(starts)), periods=periods + 1)
    rows = []
    for point in points.normalize().unique():
        snapshot = calculate_evm(items, budget, as_of=point.date())
        rows.append({
            'date': point,
            'pv': snapshot.pv,
            'pv_pct': snapshot.pv / budget * 100 if budget else 0.0,
        })
    return pd.DataFrame(rows, columns=['date', 'pv', 'pv_pct'])


def snapshots_to_dataframe(snapshots: dict[str, EVMSnapshot]) -> pd.DataFrame:
    """One row per project, keyed by project id."""
    columns = [
        'project_id', 'pv', 'ev', 'ac', 'sv', 'cv', 'spi', 'cpi', 'bac',
        'eac', 'etc', 'vac', 'tcpi', 'schedule_status', 'cost_status', 'overall_health',
    ]
    rows = []
    for project_id, s in snapshots.items():
        rows.append({
            'project_id': project_id,
            'pv': s.pv, 'ev': s.ev, 'ac': s.ac, 'sv': s.sv, 'cv': s.cv,
            'spi': s.spi, 'cpi': s.cpi, 'bac': s.bac, 'eac': s.eac,
            'etc': s.etc, 'vac': s.vac, 'tcpi': s.tcpi,
            'schedule_status': s.schedule_status,
            'cost_status': s.cost_status,
            'overall_health': s.overall_health,
        })
    return ensure_valid_dataframe(pd.DataFrame(rows, columns=columns), EVMSnapshotRow)
