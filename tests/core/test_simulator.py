"""
Tests for the year-by-year cash-flow simulator.
"""

import pytest
from retirelab.core.events import LiquidityEvent
from retirelab.core.params import SimulationParameters
from retirelab.core.rates import annuity_fv_factor, monthly_rate
from retirelab.core.results import Phase
from retirelab.core.simulator import simulate_cash_flow


@pytest.fixture
def accumulating():
    return SimulationParameters(
        current_age=60,
        retirement_age=63,
        current_capital=100_000,
        real_return_accumulation=0.05,
        real_return_consumption=0.03,
        override_end_age=66,
    )


class TestRows:
    """Row layout and the cash-flow identity."""

    def test_one_row_per_year(self, accumulating):
        run = simulate_cash_flow(accumulating, [], contribution=1_000, withdrawal=2_000)
        assert [row.age for row in run.rows] == [60, 61, 62, 63, 64, 65]
        assert [row.phase for row in run.rows] == [Phase.ACCUMULATION] * 3 + [
            Phase.CONSUMPTION
        ] * 3

    def test_trajectory_starts_at_current_age(self, accumulating):
        run = simulate_cash_flow(accumulating, [], contribution=0, withdrawal=0)
        assert run.trajectory[0].age == 60
        assert run.trajectory[0].capital == 100_000
        assert run.trajectory[-1].age == 66
        assert len(run.trajectory) == len(run.rows) + 1

    def test_cash_flow_identity(self, accumulating):
        events = [
            LiquidityEvent("a", "x", 5_000, start_age=61),
            LiquidityEvent("b", "y", 300, False, "monthly", start_age=62, end_age=64),
        ]
        run = simulate_cash_flow(accumulating, events, contribution=1_000, withdrawal=500)
        for row in run.rows:
            expected = (
                row.opening_capital
                + row.events_net
                + row.contribution
                + row.investment_return
                - row.withdrawal
            )
            assert row.closing_capital == pytest.approx(expected)

    def test_rows_chain(self, accumulating):
        run = simulate_cash_flow(accumulating, [], contribution=1_000, withdrawal=500)
        for prev, row in zip(run.rows, run.rows[1:]):
            assert row.opening_capital == prev.closing_capital

    def test_contribution_is_twelve_monthly_payments(self, accumulating):
        run = simulate_cash_flow(accumulating, [], contribution=1_000, withdrawal=0)
        assert run.rows[0].contribution == 12_000

    def test_withdrawal_is_year_end_value_of_monthly_payments(self, accumulating):
        run = simulate_cash_flow(accumulating, [], contribution=0, withdrawal=2_000)
        s12 = annuity_fv_factor(monthly_rate(0.03), 12)
        assert run.rows[3].withdrawal == pytest.approx(2_000 * s12)

    def test_retired_today_has_no_accumulation(self):
        params = SimulationParameters(current_age=65, retirement_age=65, current_capital=1e6)
        run = simulate_cash_flow(params, [], contribution=5_000, withdrawal=1_000)
        assert all(row.phase is Phase.CONSUMPTION for row in run.rows)
        assert all(row.contribution == 0 for row in run.rows)
        assert run.rows[-1].age == 99


class TestDepletion:
    """Clamping, freezing and the depletion age."""

    @pytest.fixture
    def short_funds(self):
        return SimulationParameters(
            current_age=65,
            retirement_age=65,
            current_capital=100_000,
            real_return_consumption=0.0,
        )

    def test_depletion_age_and_clamp_row(self, short_funds):
        # 24,000 a year from 100,000 at zero return lasts four years and change
        run = simulate_cash_flow(short_funds, [], contribution=0, withdrawal=2_000)
        assert run.depletion_age == 70
        clamp_row = run.rows[4]
        assert clamp_row.age == 69
        assert clamp_row.withdrawal == pytest.approx(4_000)
        assert clamp_row.closing_capital == 0.0

    def test_rows_after_depletion_are_frozen(self, short_funds):
        later = [
            LiquidityEvent("gift", "Gift", 50_000, start_age=80),
            LiquidityEvent("care", "Care", 500, False, "monthly", start_age=75),
        ]
        run = simulate_cash_flow(short_funds, later, contribution=0, withdrawal=2_000)
        assert run.depletion_age == 70
        for row in run.rows:
            if row.age >= run.depletion_age:
                assert row.closing_capital == 0.0
                assert row.events_net == 0.0
                assert row.withdrawal == 0.0
        assert all(p.capital == 0.0 for p in run.trajectory if p.age >= 70)

    def test_unclamped_run_goes_negative(self, short_funds):
        run = simulate_cash_flow(
            short_funds, [], contribution=0, withdrawal=2_000, clamp=False
        )
        assert run.depletion_age is None
        assert run.terminal_capital == pytest.approx(100_000 - 35 * 24_000)
        assert min(row.closing_capital for row in run.rows) < 0
        # trajectory is floored for display
        assert min(p.capital for p in run.trajectory) == 0.0

    def test_sufficient_capital_never_depletes(self, short_funds):
        run = simulate_cash_flow(short_funds, [], contribution=0, withdrawal=100)
        assert run.depletion_age is None
        assert run.terminal_capital == pytest.approx(100_000 - 35 * 1_200)

    def test_landing_on_zero_at_the_end_counts_as_depletion(self, short_funds):
        params = short_funds.replace(current_capital=35 * 12 * 1_000)
        run = simulate_cash_flow(params, [], contribution=0, withdrawal=1_000)
        assert run.depletion_age == 100
        assert run.rows[-1].closing_capital == 0.0

    def test_force_final_zero_empties_the_last_year(self, short_funds):
        run = simulate_cash_flow(
            short_funds, [], contribution=0, withdrawal=100, force_final_zero=True
        )
        last = run.rows[-1]
        assert last.closing_capital == 0.0
        assert last.withdrawal == pytest.approx(100_000 - 34 * 1_200)
        assert run.depletion_age == 100

    def test_end_age_shortens_the_run(self, short_funds):
        run = simulate_cash_flow(
            short_funds, [], contribution=0, withdrawal=2_000, end_age=68
        )
        assert run.rows[-1].age == 67
        assert run.depletion_age is None


class TestPerpetuity:
    """Perpetuity consumption modes."""

    @pytest.fixture
    def perpetual(self):
        return SimulationParameters(
            current_age=65,
            retirement_age=65,
            current_capital=1_000_000,
            is_perpetuity=True,
            lock_withdrawal_to_target=False,
        )

    def test_yield_only_preserves_principal(self, perpetual):
        run = simulate_cash_flow(perpetual, [], contribution=0, withdrawal=50_000)
        assert run.depletion_age is None
        for row in run.rows:
            assert row.withdrawal == pytest.approx(row.investment_return)
            assert row.closing_capital == pytest.approx(1_000_000)

    def test_yield_only_ignores_force_final_zero(self, perpetual):
        run = simulate_cash_flow(
            perpetual, [], contribution=0, withdrawal=0, force_final_zero=True
        )
        assert run.rows[-1].closing_capital == pytest.approx(1_000_000)

    def test_locked_withdrawal_clamps_without_freezing(self, perpetual):
        params = perpetual.replace(
            lock_withdrawal_to_target=True,
            current_capital=50_000,
            real_return_consumption=0.0,
        )
        refill = LiquidityEvent("sale", "Sale", 200_000, start_age=80)
        run = simulate_cash_flow(params, [refill], contribution=0, withdrawal=1_000)
        assert run.depletion_age == 70
        row_80 = next(row for row in run.rows if row.age == 80)
        assert row_80.events_net == 200_000
        assert row_80.closing_capital == pytest.approx(188_000)
