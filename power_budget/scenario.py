# power_budget/scenario.py
"""Scenario loader and runner for scripted allocator sessions."""

import json
import logging
import math
import os
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import yaml

from power_budget.config import AllocatorConfig
from power_budget.core.allocator import PowerAllocator
from power_budget.core.consumer import Consumer
from power_budget.utils.errors import ScenarioError

logger = logging.getLogger(__name__)

ACTIONS = ("connect", "disconnect", "amend")


@dataclass
class Step:
    action: str
    id: str
    amount: Optional[float] = None

    def describe(self) -> str:
        if self.action == "amend":
            return f"Changing Device {self.id} power to {self.amount}"
        return f"{self.action.capitalize()}ing Device {self.id}"

    def apply(self, allocator: PowerAllocator):
        if self.action == "connect":
            return allocator.connect(Consumer(self.id))
        if self.action == "disconnect":
            return allocator.disconnect(self.id)
        return allocator.amend(self.id, self.amount)


@dataclass
class Scenario:
    name: str = "Untitled Scenario"
    description: str = ""
    config: AllocatorConfig = field(default_factory=AllocatorConfig)
    steps: List[Step] = field(default_factory=list)

    def build_allocator(self, **kwargs) -> PowerAllocator:
        return PowerAllocator(self.config, name=self.name, **kwargs)

    def run(self, allocator: Optional[PowerAllocator] = None,
            on_step: Optional[Callable[[Step, PowerAllocator], None]] = None) -> PowerAllocator:
        """Apply every step in order.

        Args:
            allocator: Allocator to drive; a fresh one is built when omitted
            on_step: Called after each step with the step and allocator

        Returns:
            PowerAllocator: The allocator after the last step
        """
        if allocator is None:
            allocator = self.build_allocator()
        for step in self.steps:
            logger.info(step.describe())
            step.apply(allocator)
            if on_step:
                on_step(step, allocator)
        return allocator


# The three-device session the allocator was first written around
DEFAULT_SCENARIO = {
    "name": "Three device session",
    "description": "Connect A, B and C, turn A down to 20, then unplug B.",
    "config": {"max_capacity": 100, "safety_limit": 92, "device_max_power": 40},
    "steps": [
        {"action": "connect", "id": "A"},
        {"action": "connect", "id": "B"},
        {"action": "connect", "id": "C"},
        {"action": "amend", "id": "A", "amount": 20},
        {"action": "disconnect", "id": "B"},
    ],
}


class ScenarioLoader:
    """Loads scenarios from YAML or JSON files."""

    @staticmethod
    def load(filepath: str) -> Scenario:
        """Load a scenario from file.

        Args:
            filepath: Path to scenario file (.yaml, .yml or .json)

        Returns:
            Scenario: Parsed scenario
        """
        _, ext = os.path.splitext(filepath)

        with open(filepath, 'r') as f:
            if ext in ['.yaml', '.yml']:
                data = yaml.safe_load(f)
            elif ext == '.json':
                data = json.load(f)
            else:
                raise ScenarioError(f"Unsupported file format: {ext}")

        scenario = ScenarioLoader.parse(data)
        logger.info(f"Loaded scenario: {scenario.name}")
        return scenario

    @staticmethod
    def parse(data: Optional[Dict[str, Any]]) -> Scenario:
        if not isinstance(data, dict):
            raise ScenarioError("Scenario must be a mapping")

        return Scenario(
            name=data.get("name", "Untitled Scenario"),
            description=data.get("description", ""),
            config=AllocatorConfig.from_dict(data.get("config", {})),
            steps=ScenarioLoader._parse_steps(data.get("steps", [])),
        )

    @staticmethod
    def _parse_steps(steps_data: List[Dict]) -> List[Step]:
        """Parse step definitions.

        Args:
            steps_data: List of step dicts

        Returns:
            list: Parsed steps
        """
        if not isinstance(steps_data, list):
            raise ScenarioError("'steps' must be a list")

        steps = []
        for index, step_def in enumerate(steps_data):
            if not isinstance(step_def, dict):
                raise ScenarioError(f"Step {index} must be a mapping")
            action = step_def.get("action")
            if action not in ACTIONS:
                raise ScenarioError(f"Step {index}: unknown action {action!r}")
            if "id" not in step_def:
                raise ScenarioError(f"Step {index}: missing consumer id")

            amount = None
            if action == "amend":
                if "amount" not in step_def:
                    raise ScenarioError(f"Step {index}: amend requires an amount")
                try:
                    amount = float(step_def["amount"])
                except (TypeError, ValueError):
                    raise ScenarioError(f"Step {index}: amount must be a number")
                if not math.isfinite(amount):
                    raise ScenarioError(f"Step {index}: amount must be finite (got {amount})")

            steps.append(Step(action=action, id=str(step_def["id"]), amount=amount))
        return steps


def default_scenario() -> Scenario:
    return ScenarioLoader.parse(DEFAULT_SCENARIO)
