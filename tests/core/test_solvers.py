"""
Tests for the contribution and income solvers.
"""

import logging

import pytest
from retirelab.core.capital import required_capital
from retirelab.core.events import LiquidityEvent
from retirelab.core.params import SimulationParameters
from retirelab.core.rates import annuity_fv_factor, monthly_rate
from retirelab.core.settings import SolverSettings
from retirelab.core.simulator import simulate_cash_flow
from retirelab.core.solvers import (
    bisect_root,
    required_contribution,
    sustainable_income,
)


@pytest.fixture
def saver():
    return SimulationParameters(
        current_age=40,
        retirement_age=65,
        current_capital=50_000,
        desired_monthly_withdrawal=6_000,
        real_return_accumulation=0.04,
        real_return_consumption=0.03,
    )


class TestBisectRoot:
    """Grow-then-bisect root search."""

    def test_linear_root(self):
        result = bisect_root(lambda x: x - 12_345.678)
        assert result.bracketed
        assert result.value == pytest.approx(12_345.678, abs=1e-3)
        assert result.growth_steps > 0

    def test_root_at_zero(self):
        result = bisect_root(lambda x: x + 1.0)
        assert result.value == 0.0
        assert result.iterations == 0

    def test_no_bracket_returns_largest_bound(self, caplog):
        settings = SolverSettings(max_growth_iterations=3)
        with caplog.at_level(logging.WARNING, logger="retirelab.core.solvers"):
            result = bisect_root(lambda x: -1.0, settings=settings, label="never")
        assert not result.bracketed
        assert result.value == pytest.approx(1_000 * 1.8**3)
        assert "never: no sign change" in caplog.text

    def test_step_objective_brackets_tightly(self):
        result = bisect_root(lambda x: 1.0 if x >= 777.0 else -1.0)
        assert result.low < 777.0 <= result.high
        assert result.high - result.low < 1e-3


class TestRequiredContribution:
    """Contribution needed during accumulation."""

    def test_finite_zeroes_terminal_capital(self, saver):
        c = required_contribution(saver)
        assert c > 0
        run = simulate_cash_flow(
            saver, [], contribution=c, withdrawal=saver.desired_monthly_withdrawal, clamp=False
        )
        assert run.terminal_capital == pytest.approx(0.0, abs=1.0)

    def test_perpetuity_reaches_required_capital(self, saver):
        params = saver.replace(is_perpetuity=True)
        c = required_contribution(params)
        run = simulate_cash_flow(
            params, [], contribution=c, withdrawal=params.desired_monthly_withdrawal
        )
        at_retirement = next(p.capital for p in run.trajectory if p.age == 65)
        assert at_retirement == pytest.approx(required_capital(params), rel=1e-9)

    def test_perpetuity_closed_form(self, saver):
        params = saver.replace(is_perpetuity=True)
        r = monthly_rate(0.04)
        n = 25 * 12
        target = 6_000 / monthly_rate(0.03)
        expected = (target - 50_000 * (1 + r) ** n) / annuity_fv_factor(r, n)
        assert required_contribution(params) == pytest.approx(expected)

    def test_no_accumulation_phase(self, saver):
        assert required_contribution(saver.replace(current_age=65)) == 0.0

    def test_enough_capital_needs_nothing(self, saver):
        assert required_contribution(saver.replace(current_capital=5e6)) == 0.0
        assert (
            required_contribution(saver.replace(current_capital=5e6, is_perpetuity=True))
            == 0.0
        )

    def test_pre_retirement_inflow_lowers_contribution(self, saver):
        bonus = LiquidityEvent("b", "Bonus", 200_000, start_age=50)
        assert required_contribution(saver, [bonus]) < required_contribution(saver)

    def test_post_retirement_inflow_lowers_contribution(self, saver):
        sale = LiquidityEvent("s", "House sale", 400_000, start_age=75)
        assert required_contribution(saver, [sale]) < required_contribution(saver)

    def test_zero_rates(self, saver):
        params = saver.replace(real_return_accumulation=0.0, real_return_consumption=0.0)
        c = required_contribution(params)
        # 34 years of 6,000 a month, minus today's capital, over 25 years
        assert c == pytest.approx((6_000 * 34 * 12 - 50_000) / (25 * 12), abs=1e-3)

    def test_perpetuity_at_zero_rate_is_unreachable(self, saver, caplog):
        params = saver.replace(is_perpetuity=True, real_return_consumption=0.0)
        with caplog.at_level(logging.WARNING, logger="retirelab.core.solvers"):
            assert required_contribution(params) == 0.0
        assert "goal unreachable" in caplog.text


class TestSustainableIncome:
    """Largest sustainable withdrawal."""

    def test_finite_depletes_exactly_at_horizon(self, saver):
        income = sustainable_income(saver, contribution=500)
        assert income > 0
        run = simulate_cash_flow(saver, [], contribution=500, withdrawal=income)
        assert run.depletion_age == saver.horizon_end_age

    def test_slightly_less_income_survives(self, saver):
        income = sustainable_income(saver, contribution=500)
        run = simulate_cash_flow(saver, [], contribution=500, withdrawal=income * 0.999)
        assert run.depletion_age is None

    def test_custom_target_age(self, saver):
        income = sustainable_income(saver, contribution=500, target_age=85)
        run = simulate_cash_flow(saver, [], contribution=500, withdrawal=income, end_age=85)
        assert run.depletion_age == 85
        assert income > sustainable_income(saver, contribution=500)

    def test_uses_parameter_contribution_by_default(self, saver):
        params = saver.replace(monthly_contribution=500)
        assert sustainable_income(params) == sustainable_income(saver, contribution=500)

    def test_depletes_without_withdrawals(self):
        params = SimulationParameters(current_age=65, retirement_age=65, current_capital=0)
        assert sustainable_income(params) == 0.0

    def test_target_before_retirement(self, saver):
        assert sustainable_income(saver, target_age=60) == 0.0

    def test_perpetuity_is_monthly_yield(self):
        params = SimulationParameters(
            current_age=65,
            retirement_age=65,
            current_capital=2_000_000,
            is_perpetuity=True,
        )
        assert sustainable_income(params) == pytest.approx(
            2_000_000 * monthly_rate(0.03)
        )

    def test_perpetuity_includes_contributions(self, saver):
        params = saver.replace(is_perpetuity=True)
        r_acc = monthly_rate(0.04)
        n = 25 * 12
        capital = 50_000 * (1 + r_acc) ** n + 1_000 * annuity_fv_factor(r_acc, n)
        assert sustainable_income(params, contribution=1_000) == pytest.approx(
            capital * monthly_rate(0.03)
        )

    def test_round_trip_with_contribution_solver(self, saver):
        c = required_contribution(saver)
        income = sustainable_income(saver, contribution=c)
        assert income == pytest.approx(saver.desired_monthly_withdrawal, rel=1e-5)
