"""
Core module for RetireLab.

This module contains the projection engine: rates, liquidity events, the
shared event aggregator, the capital and contribution/income solvers, the
year-by-year simulator and the input layer (validation, scenario files,
API codec).
"""

from .aggregation import (
    Direction,
    aggregate_events,
    event_schedule,
    future_value_at_retirement,
    present_value_at_retirement,
)
from .capital import required_capital
from .codec import events_from_payload, events_to_payload
from .errors import ConfigError, RetireLabWarning, ScenarioFileError
from .events import LiquidityEvent, Recurrence, active_events, is_active_at_age
from .loader import ScenarioDefinition, dump_scenario, load_scenario
from .params import SimulationParameters
from .projection import compute_retirement_projection
from .rates import annual_rate, annuity_fv_factor, annuity_pv_factor, monthly_rate, pmt
from .results import CashFlowRow, Phase, ProjectionResult, TrajectoryPoint
from .settings import DEFAULT_SETTINGS, SolverSettings
from .simulator import SimulationRun, simulate_cash_flow
from .solvers import (
    BisectionResult,
    bisect_root,
    required_contribution,
    sustainable_income,
)
from .validation import (
    EventValidationReport,
    ValidationIssue,
    validate_event,
    validate_events,
    validate_parameters,
)
