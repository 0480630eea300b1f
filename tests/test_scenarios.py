"""
Tests for retirement-age scenario tables.
"""

import pandas as pd
import pytest
from retirelab import SimulationParameters
from retirelab.core.events import LiquidityEvent
from retirelab.scenarios import SCENARIO_COLUMNS, retirement_age_scenarios


@pytest.fixture
def params():
    return SimulationParameters(
        current_age=40,
        retirement_age=55,
        current_capital=100_000,
        monthly_contribution=123,
        desired_monthly_withdrawal=5_000,
        real_return_accumulation=0.04,
    )


class TestRetirementAgeScenarios:
    def test_columns_and_rows(self, params):
        table = retirement_age_scenarios(params, [], ages=[55, 60, 65])
        assert isinstance(table, pd.DataFrame)
        assert list(table.columns) == SCENARIO_COLUMNS
        assert table["retirement_age"].tolist() == [55, 60, 65]
        assert str(table["depletion_age"].dtype) == "Int64"

    def test_later_retirement_needs_less(self, params):
        table = retirement_age_scenarios(params, [], ages=[55, 60, 65])
        contributions = table["monthly_contribution"].tolist()
        capitals = table["required_capital"].tolist()
        assert contributions[0] > contributions[1] > contributions[2] > 0
        assert capitals[0] > capitals[1] > capitals[2]

    def test_contribution_override_is_ignored(self, params):
        table = retirement_age_scenarios(params, [], ages=[55])
        assert table.loc[0, "monthly_contribution"] != 123

    def test_default_ages(self, params):
        table = retirement_age_scenarios(params)
        assert table["retirement_age"].tolist() == [55, 60, 65, 70, 75]

    def test_events_are_shared(self, params):
        sale = LiquidityEvent("s", "Sale", 300_000, start_age=75)
        with_sale = retirement_age_scenarios(params, [sale], ages=[60])
        without = retirement_age_scenarios(params, [], ages=[60])
        assert (
            with_sale.loc[0, "monthly_contribution"]
            < without.loc[0, "monthly_contribution"]
        )

    def test_solved_plans_end_at_the_horizon(self, params):
        table = retirement_age_scenarios(params, [], ages=[60])
        assert table.loc[0, "depletion_age"] == 99
