"""
Command-line interface for RetireLab.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from retirelab import __version__
from retirelab.core.errors import ConfigError
from retirelab.core.loader import ScenarioDefinition, load_scenario
from retirelab.core.projection import compute_retirement_projection
from retirelab.core.solvers import required_contribution, sustainable_income
from retirelab.core.validation import validate_events, validate_parameters
from retirelab.scenarios import retirement_age_scenarios

EXAMPLE_SCENARIO = {
    "version": 1,
    "name": "Early retirement with an inheritance",
    "parameters": {
        "currentAge": 40,
        "retirementAge": 60,
        "currentCapital": 150_000,
        "lifeExpectancy": 90,
        "desiredMonthlyWithdrawal": 8_000,
        "realReturnAccumulation": 0.04,
        "realReturnConsumption": 0.03,
        "isPerpetuity": False,
        "lockWithdrawalToTarget": True,
        "forceFinalZeroAtEnd": True,
    },
    "events": [
        {
            "id": "inheritance",
            "name": "Inheritance",
            "value": 300_000,
            "isPositive": True,
            "recurrence": "once",
            "startAge": 55,
        },
        {
            "id": "rent",
            "name": "Rental income",
            "value": 2_500,
            "isPositive": True,
            "recurrence": "monthly",
            "startAge": 60,
            "endAge": 80,
        },
        {
            "id": "tuition",
            "name": "Children's tuition",
            "value": 30_000,
            "isPositive": False,
            "recurrence": "annual",
            "startAge": 45,
            "endAge": 49,
        },
    ],
}


def _load(path: str) -> ScenarioDefinition:
    """Load a scenario, reporting the source in log output."""
    scenario = load_scenario(path)
    logging.getLogger(__name__).info(
        "Loaded scenario %s (%d events)", scenario.source, len(scenario.events)
    )
    return scenario


def _save_json(path: str, data: dict) -> None:
    """Save data as JSON to file path."""
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def _format_amount(value: float) -> str:
    return f"{value:,.2f}"


def _print_summary(summary: dict) -> None:
    depletion = summary["depletion_age"]
    print(f"Required capital:      {_format_amount(summary['required_capital'])}")
    print(f"Monthly contribution:  {_format_amount(summary['monthly_contribution'])}")
    print(f"Monthly income:        {_format_amount(summary['monthly_income'])}")
    print(f"Capital at retirement: {_format_amount(summary['capital_at_retirement'])}")
    print(f"Depletion age:         {depletion if depletion is not None else 'never'}")


def cmd_example(_) -> int:
    """Print an example scenario JSON."""
    json.dump(EXAMPLE_SCENARIO, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def cmd_run(args) -> int:
    """Run a scenario file and export the projection as JSON."""
    try:
        scenario = _load(args.input)
    except (ConfigError, OSError) as e:
        print(f"Error running scenario: {e}", file=sys.stderr)
        return 1

    result = compute_retirement_projection(
        scenario.params, scenario.events, settings=scenario.settings
    )
    _print_summary(result.summary())
    if args.table:
        print(result.to_frame().to_string(index=False, float_format="{:,.2f}".format))

    _save_json(args.output, result.to_dict())
    print(f"Results saved to {args.output}")
    return 0


def cmd_solve(args) -> int:
    """Solve a single unknown for a scenario file."""
    try:
        scenario = _load(args.input)
    except (ConfigError, OSError) as e:
        print(f"Error solving scenario: {e}", file=sys.stderr)
        return 1

    if args.target == "contribution":
        value = required_contribution(
            scenario.params, scenario.events, settings=scenario.settings
        )
    else:
        value = sustainable_income(
            scenario.params, scenario.events, settings=scenario.settings
        )
    print(f"{args.target}: {_format_amount(value)}")
    return 0


def cmd_scenarios(args) -> int:
    """Tabulate the solved contribution for several retirement ages."""
    try:
        scenario = _load(args.input)
    except (ConfigError, OSError) as e:
        print(f"Error building scenarios: {e}", file=sys.stderr)
        return 1

    table = retirement_age_scenarios(
        scenario.params, scenario.events, args.ages, settings=scenario.settings
    )
    print(table.to_string(index=False, float_format="{:,.2f}".format))
    return 0


def cmd_validate(args) -> int:
    """Validate a scenario file."""
    try:
        scenario = _load(args.input)
    except (ConfigError, OSError) as e:
        if args.format == "json":
            error_report = {
                "has_errors": True,
                "has_warnings": False,
                "is_valid": False,
                "exit_code": 1,
                "error": str(e),
            }
            json.dump(error_report, sys.stdout, indent=2)
            sys.stdout.write("\n")
        else:
            print(f"Validation failed: {e}", file=sys.stderr)
        return 1

    report = validate_parameters(scenario.params).extend(
        validate_events(scenario.events, current_age=scenario.params.current_age)
    )
    if args.format == "json":
        json.dump(report.to_dict(), sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        print(str(report))
    return report.get_exit_code()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="retirelab", description="RetireLab - Retirement projection engine"
    )
    parser.add_argument(
        "--version", action="version", version=f"RetireLab {__version__}"
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )

    subparsers = parser.add_subparsers(
        dest="cmd", required=True, help="Available commands"
    )

    example_parser = subparsers.add_parser(
        "example", help="Print an example scenario JSON"
    )
    example_parser.set_defaults(func=cmd_example)

    run_parser = subparsers.add_parser(
        "run", help="Run a scenario file and export JSON results"
    )
    run_parser.add_argument(
        "-i", "--input", required=True, help="Input scenario file (YAML or JSON)"
    )
    run_parser.add_argument(
        "-o", "--output", required=True, help="Output results JSON file"
    )
    run_parser.add_argument(
        "--table", action="store_true", help="Print the annual cash-flow table"
    )
    run_parser.set_defaults(func=cmd_run)

    solve_parser = subparsers.add_parser(
        "solve", help="Solve the required contribution or the sustainable income"
    )
    solve_parser.add_argument("target", choices=["contribution", "income"])
    solve_parser.add_argument(
        "-i", "--input", required=True, help="Input scenario file (YAML or JSON)"
    )
    solve_parser.set_defaults(func=cmd_solve)

    scenarios_parser = subparsers.add_parser(
        "scenarios", help="Compare candidate retirement ages"
    )
    scenarios_parser.add_argument(
        "-i", "--input", required=True, help="Input scenario file (YAML or JSON)"
    )
    scenarios_parser.add_argument(
        "--ages", type=int, nargs="+", help="Candidate retirement ages"
    )
    scenarios_parser.set_defaults(func=cmd_scenarios)

    validate_parser = subparsers.add_parser("validate", help="Validate a scenario file")
    validate_parser.add_argument(
        "-i", "--input", required=True, help="Input scenario file (YAML or JSON)"
    )
    validate_parser.add_argument(
        "--format", choices=["human", "json"], default="human", help="Output format"
    )
    validate_parser.set_defaults(func=cmd_validate)

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(args.func(args))


if __name__ == "__main__":
    main()
