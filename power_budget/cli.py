# power_budget/cli.py
"""
Command-line interface for the power allocator.
Replays a scenario and prints the power distribution after every step.
"""

import argparse
import dataclasses
import logging
import sys

from power_budget.config import AllocatorConfig, load_config
from power_budget.core.constants import EVENT_STATUS
from power_budget.scenario import ScenarioLoader, default_scenario
from power_budget.telemetry import format_status
from power_budget.utils.errors import PowerBudgetError, format_error

logger = logging.getLogger(__name__)


def print_status(event):
    """Event bus handler printing each status report."""
    print(format_status(event["data"]))
    print()


def build_parser():
    parser = argparse.ArgumentParser(description="Power budget allocator")
    parser.add_argument('scenario', nargs='?',
                        help='Scenario file (.yaml/.json); runs the built-in session when omitted')
    parser.add_argument('--config', help='Allocator config file overriding the scenario limits')
    parser.add_argument('--env', action='store_true',
                        help='Read limits from POWER_BUDGET_* environment variables')
    parser.add_argument('--clamp-amend', action='store_true',
                        help='Clamp manual changes to the configured limits')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None):
    """
    Main entry point for the CLI
    """
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    try:
        scenario = ScenarioLoader.load(args.scenario) if args.scenario else default_scenario()
        config = scenario.config
        if args.config:
            config = load_config(args.config)
        elif args.env:
            config = AllocatorConfig.from_env()
    except (OSError, PowerBudgetError) as e:
        print(format_error("LOAD_FAILED", str(e)), file=sys.stderr)
        return 1

    if args.clamp_amend:
        config = dataclasses.replace(config, clamp_amend=True)
    scenario.config = config

    allocator = scenario.build_allocator()
    allocator.event_bus.enable_debug(args.debug)
    allocator.event_bus.subscribe(EVENT_STATUS, print_status)

    print(scenario.name)
    if scenario.description:
        print(scenario.description)
    print()

    for step in scenario.steps:
        print(step.describe())
        try:
            step.apply(allocator)
            logger.debug(f"Applied {step.action} for {step.id}")
        except PowerBudgetError as e:
            print(format_error(type(e).__name__, str(e)))
            print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
