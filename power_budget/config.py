"""
Allocator configuration.

Holds the limits an allocator enforces. Each allocator owns its own
configuration, so several independently tuned allocators can coexist.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional
import json
import logging
import math
import os

import yaml

from power_budget.core.constants import (
    DEFAULT_DEVICE_MAX_POWER,
    DEFAULT_MAX_CAPACITY,
    DEFAULT_SAFETY_LIMIT,
    ENV_PREFIX,
)
from power_budget.utils.errors import ConfigError, invalid_range_error

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AllocatorConfig:
    """
    Limits enforced by a PowerAllocator.

    max_capacity is informational; it is only enforced through
    safety_limit, which must not exceed it.
    """

    max_capacity: float = DEFAULT_MAX_CAPACITY
    safety_limit: float = DEFAULT_SAFETY_LIMIT
    device_max_power: float = DEFAULT_DEVICE_MAX_POWER

    # Clamp amend requests to both ceilings instead of applying them as-is
    clamp_amend: bool = False

    def __post_init__(self):
        for name in ("max_capacity", "safety_limit", "device_max_power"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ConfigError(f"{name} must be a number (got {value!r})")
            if not math.isfinite(value):
                raise ConfigError(f"{name} must be a finite number (got {value!r})")
            if value < 0:
                raise ConfigError(f"{name} must be non-negative (got {value!r})")
        if self.safety_limit > self.max_capacity:
            raise ConfigError(
                invalid_range_error("safety_limit", 0, self.max_capacity, self.safety_limit)
            )

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "AllocatorConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        data = data or {}
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(sorted(unknown))}")
        kwargs = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "clamp_amend" in kwargs:
            kwargs["clamp_amend"] = _as_bool(kwargs["clamp_amend"])
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ=None) -> "AllocatorConfig":
        """Create config from POWER_BUDGET_* environment variables."""
        environ = os.environ if environ is None else environ
        try:
            return cls(
                max_capacity=float(environ.get(f"{ENV_PREFIX}MAX_CAPACITY", DEFAULT_MAX_CAPACITY)),
                safety_limit=float(environ.get(f"{ENV_PREFIX}SAFETY_LIMIT", DEFAULT_SAFETY_LIMIT)),
                device_max_power=float(
                    environ.get(f"{ENV_PREFIX}DEVICE_MAX_POWER", DEFAULT_DEVICE_MAX_POWER)
                ),
                clamp_amend=_as_bool(environ.get(f"{ENV_PREFIX}CLAMP_AMEND", "")),
            )
        except ValueError as e:
            raise ConfigError(f"Invalid environment configuration: {e}") from e

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def load_config(filepath: str) -> AllocatorConfig:
    """Load an allocator config from a YAML or JSON file.

    Args:
        filepath: Path to config file (.yaml, .yml or .json)

    Returns:
        AllocatorConfig: Parsed configuration
    """
    _, ext = os.path.splitext(filepath)

    with open(filepath, 'r') as f:
        if ext in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        elif ext == '.json':
            data = json.load(f)
        else:
            raise ConfigError(f"Unsupported config format: {ext}")

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Config file {filepath} must contain a mapping")

    config = AllocatorConfig.from_dict(data)
    logger.info(f"Loaded allocator config from {filepath}")
    return config


def get_default_config() -> AllocatorConfig:
    """Get the default allocator configuration."""
    return AllocatorConfig()
