"""Unit tests for earned value calculations."""
from datetime import date

import pytest

from pmo_scheduling.analysis.evm import (
    calculate_evm,
    classify_schedule,
    classify_cost,
    classify_health,
    get_evm_status,
    planned_value_curve,
    snapshots_to_dataframe,
)
from pmo_scheduling.cpm.models import SchedulableItem


@pytest.fixture
def evm_items():
    """Two back-to-back 10 day tasks, the first half done."""
    return [
        SchedulableItem(id='T1', start_date=date(2024, 1, 1), end_date=date(2024, 1, 11), progress=50),
        SchedulableItem(id='T2', start_date=date(2024, 1, 11), end_date=date(2024, 1, 21), progress=0),
    ]


class TestCalculateEVM:
    """Test EVM metrics."""

    def test_on_plan(self, evm_items):
        """Halfway through T1 with half the work done is exactly on plan."""
        snapshot = calculate_evm(evm_items, budget=1000, actual_cost=250, as_of=date(2024, 1, 6))
        assert snapshot.pv == pytest.approx(250)
        assert snapshot.ev == pytest.approx(250)
        assert snapshot.sv == pytest.approx(0)
        assert snapshot.cv == pytest.approx(0)
        assert snapshot.spi == pytest.approx(1.0)
        assert snapshot.cpi == pytest.approx(1.0)
        assert snapshot.eac == pytest.approx(1000)
        assert snapshot.vac == pytest.approx(0)
        assert snapshot.tcpi == pytest.approx(1.0)
        assert snapshot.schedule_status == 'ahead'
        assert snapshot.cost_status == 'under_budget'
        assert snapshot.overall_health == 'good'

    def test_over_budget(self, evm_items):
        """Spending twice the earned value halves CPI and doubles the estimate."""
        snapshot = calculate_evm(evm_items, budget=1000, actual_cost=500, as_of=date(2024, 1, 6))
        assert snapshot.cpi == pytest.approx(0.5)
        assert snapshot.eac == pytest.approx(2000)
        assert snapshot.etc == pytest.approx(1500)
        assert snapshot.vac == pytest.approx(-1000)
        assert snapshot.tcpi == pytest.approx(1.5)
        assert snapshot.cost_status == 'over_budget'
        assert snapshot.overall_health == 'critical'

    def test_behind_schedule(self, evm_items):
        """After both tasks should be done, SPI reflects the missing work."""
        snapshot = calculate_evm(evm_items, budget=1000, as_of=date(2024, 2, 1))
        assert snapshot.pv == pytest.approx(1000)
        assert snapshot.spi == pytest.approx(0.25)
        assert snapshot.schedule_status == 'behind'

    def test_zero_planned_value(self, evm_items):
        """Before any work is planned SPI is 1."""
        snapshot = calculate_evm(evm_items, budget=1000, as_of=date(2023, 12, 1))
        assert snapshot.pv == 0
        assert snapshot.spi == 1.0

    def test_zero_actual_cost(self, evm_items):
        """Without actual cost CPI is 1."""
        snapshot = calculate_evm(evm_items, budget=1000, as_of=date(2024, 1, 6))
        assert snapshot.ac == 0
        assert snapshot.cpi == 1.0

    def test_low_cpi_ignored_in_eac(self, evm_items):
        """A CPI at or below the floor falls back to AC + remaining budget."""
        snapshot = calculate_evm(evm_items, budget=1000, actual_cost=10000, as_of=date(2024, 1, 6))
        assert snapshot.cpi == pytest.approx(0.025)
        assert snapshot.eac == pytest.approx(10750)

    def test_budget_exhausted_tcpi(self, evm_items):
        """With no budget left TCPI is reported as 1."""
        snapshot = calculate_evm(evm_items, budget=1000, actual_cost=1000, as_of=date(2024, 1, 6))
        assert snapshot.tcpi == 1.0

    @pytest.mark.parametrize("items, budget", [
        ([], 1000),
        ([SchedulableItem(id='T1', start_date=date(2024, 1, 1), end_date=date(2024, 1, 5))], 0),
    ])
    def test_neutral_snapshot(self, items, budget):
        """No items or a zero budget gives the neutral snapshot."""
        snapshot = calculate_evm(items, budget=budget, as_of=date(2024, 1, 3))
        assert snapshot.pv == 0
        assert snapshot.ev == 0
        assert snapshot.spi == 1.0
        assert snapshot.cpi == 1.0
        assert snapshot.eac == budget
        assert snapshot.overall_health == 'good'

    def test_status_dict(self, evm_items):
        """Statuses are exposed for display."""
        snapshot = calculate_evm(evm_items, budget=1000, actual_cost=250, as_of=date(2024, 1, 6))
        assert get_evm_status(snapshot) == {
            'schedule': 'ahead',
            'cost': 'under_budget',
            'overall_health': 'good',
        }
        assert snapshot.status == {'schedule': 'ahead', 'cost': 'under_budget'}


class TestClassification:
    """Test status thresholds."""

    @pytest.mark.parametrize("spi, expected", [
        (1.2, 'ahead'),
        (1.0, 'ahead'),
        (0.9, 'on_track'),
        (0.89, 'behind'),
    ])
    def test_schedule(self, spi, expected):
        """SPI bands."""
        assert classify_schedule(spi) == expected

    @pytest.mark.parametrize("cpi, expected", [
        (1.0, 'under_budget'),
        (0.95, 'on_track'),
        (0.5, 'over_budget'),
    ])
    def test_cost(self, cpi, expected):
        """CPI bands."""
        assert classify_cost(cpi) == expected

    @pytest.mark.parametrize("spi, cpi, expected", [
        (1.0, 1.0, 'good'),
        (0.95, 0.95, 'good'),
        (0.94, 1.0, 'warning'),
        (0.85, 0.85, 'warning'),
        (1.0, 0.84, 'critical'),
    ])
    def test_health(self, spi, cpi, expected):
        """Health follows the weaker index."""
        assert classify_health(spi, cpi) == expected


class TestEVMFrames:
    """Test DataFrame outputs."""

    def test_planned_value_curve(self, evm_items):
        """The S-curve rises from 0 to the full budget."""
        df = planned_value_curve(evm_items, budget=1000, periods=4)
        assert list(df.columns) == ['date', 'pv', 'pv_pct']
        assert df['pv'].tolist() == pytest.approx([0, 250, 500, 750, 1000])
        assert df['pv_pct'].iloc[-1] == pytest.approx(100)

    def test_planned_value_curve_undated(self):
        """Undated items give an empty curve."""
        df = planned_value_curve([SchedulableItem(id='T1')], budget=1000)
        assert df.empty

    def test_snapshots_frame(self, evm_items):
        """One row per project with every metric."""
        snapshot = calculate_evm(evm_items, budget=1000, actual_cost=250, as_of=date(2024, 1, 6))
        df = snapshots_to_dataframe({'P1': snapshot})
        assert df['project_id'].tolist() == ['P1']
        assert df['overall_health'].tolist() == ['good']
        assert df['eac'].iloc[0] == pytest.approx(1000)
