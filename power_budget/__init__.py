# power_budget/__init__.py
"""
Power-budget admission control.
Arbitrates a capped power supply between connected consumers.
"""

from power_budget.config import AllocatorConfig
from power_budget.core.allocator import PowerAllocator
from power_budget.core.consumer import Consumer
from power_budget.core.event_bus import EventBus
from power_budget.utils.errors import DuplicateConsumerError, PowerBudgetError

__all__ = [
    'AllocatorConfig',
    'Consumer',
    'DuplicateConsumerError',
    'EventBus',
    'PowerAllocator',
    'PowerBudgetError',
]
