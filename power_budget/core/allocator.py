# power_budget/core/allocator.py
"""
FIFO power allocator.

Grants power to consumers on connect, reclaims it on disconnect and
re-offers any headroom under the safety limit to connected consumers in
arrival order.
"""

import logging
import math
from typing import Optional

from power_budget.config import AllocatorConfig
from power_budget.core.constants import (
    EVENT_AMENDED,
    EVENT_CONNECTED,
    EVENT_DISCONNECTED,
    EVENT_REDISTRIBUTED,
    EVENT_STATUS,
)
from power_budget.core.consumer import Consumer
from power_budget.core.event_bus import EventBus
from power_budget.telemetry import get_status
from power_budget.utils.errors import (
    DuplicateConsumerError,
    InvalidAmountError,
    PowerBudgetError,
    error_dict,
    format_warning,
    success_dict,
)

logger = logging.getLogger(__name__)


class PowerAllocator:
    """Owns the consumer queue and the aggregate usage counter.

    Every mutating call runs to completion, ending with a redistribution
    pass and a ``power_status`` event. Not thread-safe; callers sharing an
    allocator must serialize access to it.
    """

    def __init__(self, config: Optional[AllocatorConfig] = None,
                 event_bus: Optional[EventBus] = None, name: str = "allocator"):
        self.config = config or AllocatorConfig()
        self.event_bus = event_bus if event_bus is not None else EventBus(source=name)
        self.name = name
        self._queue = []
        self._total_used = 0

    # ----- Queries -----
    @property
    def total_used(self):
        return self._total_used

    @property
    def available(self):
        """Headroom left under the safety limit."""
        return self.config.safety_limit - self._total_used

    @property
    def consumers(self):
        return tuple(self._queue)

    def get(self, consumer_id) -> Optional[Consumer]:
        for consumer in self._queue:
            if consumer.id == consumer_id:
                return consumer
        return None

    def __contains__(self, consumer_id):
        return self.get(consumer_id) is not None

    def __len__(self):
        return len(self._queue)

    def __iter__(self):
        return iter(tuple(self._queue))

    def status(self):
        """Snapshot of current allocations. Never mutates state."""
        return get_status(self)

    # ----- Operations -----
    def connect(self, consumer: Consumer) -> Consumer:
        """Admit a consumer at the tail of the queue.

        The initial grant is capped by both the per-consumer limit and the
        headroom left under the safety limit, and is never negative.

        Raises:
            DuplicateConsumerError: a consumer with this id is already connected.
        """
        if consumer.id in self:
            raise DuplicateConsumerError(consumer.id)

        logger.info(f"Connecting consumer {consumer.id}")
        grant = max(0, min(self.config.device_max_power, self.available))
        consumer.set_allocation(grant)
        self._total_used += grant
        self._queue.append(consumer)

        self._publish(EVENT_CONNECTED, consumer.to_dict())
        self.redistribute()
        self._report()
        return consumer

    def disconnect(self, consumer_id) -> Optional[Consumer]:
        """Remove a consumer and hand its power to the rest of the queue.

        Unknown ids are ignored and produce no status report.
        """
        consumer = self.get(consumer_id)
        if consumer is None:
            logger.warning(f"Disconnect ignored: consumer {consumer_id} is not connected")
            return None

        logger.info(f"Disconnecting consumer {consumer_id}")
        self._queue.remove(consumer)
        self._total_used -= consumer.allocated

        self._publish(EVENT_DISCONNECTED, consumer.to_dict())
        self.redistribute()
        self._report()
        return consumer

    def amend(self, consumer_id, new_amount) -> Optional[Consumer]:
        """Set a consumer's allocation by hand, then redistribute.

        With ``clamp_amend`` off the amount is applied as requested, even
        past either ceiling; redistribution only ever adds power, so such an
        over-allocation persists until the consumer is amended again or
        disconnected. Unknown ids are ignored.

        Raises:
            InvalidAmountError: ``new_amount`` is NaN or infinite.
        """
        consumer = self.get(consumer_id)
        if consumer is None:
            logger.warning(f"Amend ignored: consumer {consumer_id} is not connected")
            return None

        if not math.isfinite(new_amount):
            raise InvalidAmountError(consumer_id, new_amount)

        logger.info(f"Changing consumer {consumer_id} allocation to {new_amount}")
        old_amount = consumer.allocated
        self._total_used -= old_amount

        if self.config.clamp_amend:
            ceiling = min(self.config.device_max_power, self.available)
            amount = max(0, min(new_amount, ceiling))
            if amount != new_amount:
                logger.info(f"Clamped amend for {consumer_id}: {new_amount} -> {amount}")
        else:
            amount = new_amount
            if amount < 0 or amount > self.config.device_max_power or amount > self.available:
                logger.warning(format_warning(
                    f"consumer {consumer_id} amended to {amount} outside configured limits"
                ))

        consumer.set_allocation(amount)
        self._total_used += amount

        self._publish(EVENT_AMENDED, {
            "id": consumer_id,
            "requested": new_amount,
            "previous": old_amount,
            "allocated": amount,
        })
        self.redistribute()
        self._report()
        return consumer

    def redistribute(self):
        """Top consumers up to their cap in FIFO order until headroom runs out.

        Additive only: never takes power away from any consumer.

        Returns:
            Total power granted during this pass.
        """
        available = self.available
        granted_total = 0
        grants = []

        for consumer in self._queue:
            if available <= 0:
                break
            grant = min(consumer.headroom(self.config.device_max_power), available)
            if grant > 0:
                consumer.set_allocation(consumer.allocated + grant)
                self._total_used += grant
                available -= grant
                granted_total += grant
                grants.append({"id": consumer.id, "granted": grant})

        if grants:
            logger.debug(f"Redistributed {granted_total} across {len(grants)} consumer(s)")
            self._publish(EVENT_REDISTRIBUTED, {"grants": grants, "total": granted_total})
        return granted_total

    # ----- Command Helpers -----
    def command(self, action, params=None):
        """Dict-in, dict-out entry point for scripted control."""
        params = params or {}
        try:
            if action in ("status", "get_state"):
                return success_dict("Current power distribution", state=self.status().to_dict())
            if action == "connect":
                consumer = self.connect(Consumer(params["id"]))
                return success_dict(f"Consumer {consumer.id} connected",
                                    allocated=consumer.allocated, state=self.status().to_dict())
            if action == "disconnect":
                removed = self.disconnect(params["id"])
                if removed is None:
                    return error_dict("UNKNOWN_CONSUMER", f"Consumer {params['id']} is not connected")
                return success_dict(f"Consumer {removed.id} disconnected",
                                    state=self.status().to_dict())
            if action == "amend":
                consumer = self.amend(params["id"], float(params["amount"]))
                if consumer is None:
                    return error_dict("UNKNOWN_CONSUMER", f"Consumer {params['id']} is not connected")
                return success_dict(f"Consumer {consumer.id} amended",
                                    allocated=consumer.allocated, state=self.status().to_dict())
        except KeyError as e:
            return error_dict("MISSING_PARAMETER", f"Missing parameter: {e.args[0]}")
        except (TypeError, ValueError) as e:
            return error_dict("INVALID_PARAMETER", str(e))
        except PowerBudgetError as e:
            return error_dict(type(e).__name__, str(e))
        return error_dict("UNKNOWN_COMMAND", f"Command '{action}' not supported by this allocator")

    # ----- Internals -----
    def _publish(self, event_type, data):
        self.event_bus.publish(event_type, data, self.name)

    def _report(self):
        snapshot = self.status()
        logger.debug(f"Status: total_used={snapshot.total_used} consumers={list(snapshot.consumers)}")
        self._publish(EVENT_STATUS, snapshot)
