# power_budget/telemetry.py
"""Read-only status snapshots of an allocator."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time view of every consumer's allocation."""

    consumers: Tuple[Tuple[str, float], ...]
    total_used: float
    safety_limit: float
    device_max_power: float
    available: float = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "available", self.safety_limit - self.total_used)

    def allocation_of(self, consumer_id):
        for cid, allocated in self.consumers:
            if cid == consumer_id:
                return allocated
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "consumers": [{"id": cid, "allocated": allocated} for cid, allocated in self.consumers],
            "total_used": self.total_used,
            "available": self.available,
            "safety_limit": self.safety_limit,
            "device_max_power": self.device_max_power,
        }


def get_status(allocator) -> StatusSnapshot:
    """Capture the allocator's current state without changing it.

    Args:
        allocator: PowerAllocator to inspect

    Returns:
        StatusSnapshot: Consumers in FIFO order plus totals
    """
    config = allocator.config
    return StatusSnapshot(
        consumers=tuple((c.id, c.allocated) for c in allocator),
        total_used=allocator.total_used,
        safety_limit=config.safety_limit,
        device_max_power=config.device_max_power,
    )


def _fmt(value):
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def format_status(snapshot: StatusSnapshot) -> str:
    """Render a snapshot as the classic power distribution listing."""
    lines: List[str] = ["Current power distribution:"]
    for cid, allocated in snapshot.consumers:
        lines.append(f"Device {cid} → {_fmt(allocated)} units")
    lines.append(f"Total Power Used: {_fmt(snapshot.total_used)} units")
    return "\n".join(lines)
