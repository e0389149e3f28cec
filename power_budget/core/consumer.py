# power_budget/core/consumer.py
"""A consumer drawing a share of the power budget."""

from dataclasses import dataclass


@dataclass
class Consumer:
    """Identity plus the allocation currently granted to it.

    Bounds are enforced by the allocator, never here.
    """

    id: str
    allocated: float = 0.0

    def set_allocation(self, amount):
        self.allocated = amount

    def headroom(self, cap):
        """Power still grantable before ``cap`` is reached."""
        return cap - self.allocated

    def to_dict(self):
        return {"id": self.id, "allocated": self.allocated}
