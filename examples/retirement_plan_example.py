"""
Quick demonstration of a retirement projection with liquidity events.
"""

from __future__ import annotations

import json

from retirelab import (
    LiquidityEvent,
    SimulationParameters,
    compute_retirement_projection,
    retirement_age_scenarios,
)
from retirelab.kpi import event_markers, funded_ratio, years_of_coverage


def pretty(data: dict) -> str:
    """Return JSON formatted output."""
    return json.dumps(data, indent=2, sort_keys=True)


def build_plan() -> tuple[SimulationParameters, list[LiquidityEvent]]:
    params = SimulationParameters(
        current_age=42,
        retirement_age=62,
        current_capital=180_000,
        life_expectancy=92,
        desired_monthly_withdrawal=7_500,
        real_return_accumulation=0.045,
        real_return_consumption=0.03,
    )
    events = [
        LiquidityEvent(
            id="sale", name="Holiday home sale", value=250_000, start_age=68
        ),
        LiquidityEvent(
            id="school",
            name="University fees",
            value=18_000,
            is_positive=False,
            recurrence="annual",
            start_age=48,
            end_age=52,
        ),
        LiquidityEvent(
            id="pension",
            name="State pension",
            value=1_400,
            recurrence="monthly",
            start_age=67,
        ),
    ]
    return params, events


def main() -> None:
    params, events = build_plan()
    result = compute_retirement_projection(params, events)

    print("Projection summary:")
    print(pretty(result.summary()))
    print(f"\nFunded ratio: {funded_ratio(result):.2f}")
    print(f"Years of coverage: {years_of_coverage(result)}")

    print("\nEvent markers:")
    ages = [p.age for p in result.capital_trajectory]
    for age, names in event_markers(events, ages, params.current_age).items():
        print(f"  {age}: {', '.join(names)}")

    print("\nCash-flow table (first and last years):")
    frame = result.to_frame()
    print(frame.head(3).to_string(index=False))
    print(frame.tail(3).to_string(index=False))

    print("\nRetirement-age scenarios:")
    print(retirement_age_scenarios(params, events, ages=range(58, 68, 2)).to_string())


if __name__ == "__main__":
    main()
