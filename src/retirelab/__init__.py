"""
RetireLab - Retirement Projection Engine

RetireLab answers the two questions of a retirement plan: how much capital is
needed at retirement to fund a target monthly income, and how much must be
saved every month to get there. It projects capital year by year through an
accumulation phase and a consumption phase, with one-time and recurring
liquidity events layered on top.

Key Features:
- **Two horizons**: finite (capital runs down to zero at the horizon end) or
  perpetuity (only the investment yield is consumed)
- **Liquidity events**: one-time, annual or monthly inflows and outflows,
  valued by a single shared aggregator in both directions
- **Solvers**: closed forms where they exist, bracketed bisection on the
  simulator where they don't
- **Depletion tracking**: capital is clamped at zero and the depletion age is
  reported
- **Scenario files**: YAML/JSON scenarios with validation and a CLI

Quick Start:
    ```python
    from retirelab import (
        LiquidityEvent, SimulationParameters, compute_retirement_projection,
    )

    params = SimulationParameters(
        current_age=40, retirement_age=65, current_capital=100_000,
        desired_monthly_withdrawal=10_000, real_return_accumulation=0.04,
    )
    inheritance = LiquidityEvent(
        id="inh", name="Inheritance", value=500_000, start_age=70,
    )
    result = compute_retirement_projection(params, [inheritance])
    result.monthly_contribution
    result.to_frame()  # annual cash-flow table
    ```

All rates are real (inflation-adjusted) annual rates; ages are whole years.
"""

# Version information
__version__ = "0.1.0"
__author__ = "RetireLab Team"
__description__ = "Retirement capital and contribution projection engine"

from .core import (
    DEFAULT_SETTINGS,
    CashFlowRow,
    ConfigError,
    EventValidationReport,
    LiquidityEvent,
    Phase,
    ProjectionResult,
    Recurrence,
    RetireLabWarning,
    ScenarioDefinition,
    ScenarioFileError,
    SimulationParameters,
    SolverSettings,
    TrajectoryPoint,
    compute_retirement_projection,
    events_from_payload,
    events_to_payload,
    load_scenario,
    required_capital,
    required_contribution,
    sustainable_income,
    validate_event,
    validate_events,
    validate_parameters,
)
from .kpi import (
    capital_at_age,
    depletes_before,
    event_markers,
    funded_ratio,
    years_of_coverage,
)
from .scenarios import retirement_age_scenarios

# Define what gets imported with "from retirelab import *"
__all__ = [
    # Engine
    "compute_retirement_projection",
    "required_capital",
    "required_contribution",
    "sustainable_income",
    # Data model
    "SimulationParameters",
    "LiquidityEvent",
    "Recurrence",
    "ProjectionResult",
    "CashFlowRow",
    "TrajectoryPoint",
    "Phase",
    "SolverSettings",
    "DEFAULT_SETTINGS",
    # Input layer
    "ScenarioDefinition",
    "load_scenario",
    "events_from_payload",
    "events_to_payload",
    "EventValidationReport",
    "validate_event",
    "validate_events",
    "validate_parameters",
    # Errors
    "ConfigError",
    "ScenarioFileError",
    "RetireLabWarning",
    # KPI utilities
    "funded_ratio",
    "capital_at_age",
    "depletes_before",
    "years_of_coverage",
    "event_markers",
    # Scenario tables
    "retirement_age_scenarios",
]
