"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state, with no cross-user
sharing. State tracks the seeded order and the last notification so
follow-up requests can redeliver it.
"""

from dataclasses import dataclass, field


@dataclass
class CallbackState:
    """Tracks state for a single simulated checkout and its callbacks."""

    order: dict = field(default_factory=dict)
    notification: dict = field(default_factory=dict)
    redirect_target: str | None = None
    deliveries: int = 0

    @property
    def order_id(self) -> str | None:
        return self.order.get("order_id")
