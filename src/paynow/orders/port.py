"""Order store port (abstract interface).

The storefront owns orders; this context only reads and mutates them
through ``OrderStore``. Status writes are conditional: an order that has
reached terminal-success (``COMPLETED`` or ``PROCESSING``) is never moved
again by a notification, so two racing deliveries cannot both apply.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum


class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"
    REFUNDED = "refunded"


TERMINAL_SUCCESS = frozenset({OrderStatus.COMPLETED, OrderStatus.PROCESSING})


@dataclass
class Order:
    """Snapshot of a storefront order."""

    id: str
    key: str
    total_amount: Decimal
    status: OrderStatus = OrderStatus.PENDING
    notes: list[str] = field(default_factory=list)
    # False for orders with nothing to ship (paid orders complete immediately).
    needs_processing: bool = True

    @property
    def is_settled(self) -> bool:
        return self.status in TERMINAL_SUCCESS


class OrderStore(ABC):
    """Abstract order store interface."""

    @abstractmethod
    def get_order(self, order_id: str) -> Order:
        """Return the order. Raises ``OrderNotFound`` when it does not exist."""
        ...

    @abstractmethod
    def mark_paid(self, order: Order, notes: Sequence[str] = ()) -> Order | None:
        """Move the order to terminal-success.

        The store chooses ``COMPLETED`` or ``PROCESSING``. ``notes`` are
        appended in the same write. Returns the updated order, or ``None``
        (with nothing written) when the order was already terminal-success.
        """
        ...

    @abstractmethod
    def update_status(
        self,
        order: Order,
        status: OrderStatus,
        note: str = "",
        notes: Sequence[str] = (),
    ) -> bool:
        """Set ``status`` unless the order is already terminal-success.

        ``notes`` are appended ahead of the status-change ``note`` in the same
        write. Returns ``True`` when the write was applied; a refused write
        leaves the order untouched.
        """
        ...

    @abstractmethod
    def append_note(self, order: Order, text: str) -> None:
        """Append an order note. Notes are append-only."""
        ...

    @abstractmethod
    def build_return_url(self, order: Order) -> str:
        """URL the shopper lands on after paying (the "thank you" page)."""
        ...

    @abstractmethod
    def build_cancel_url(self, order: Order) -> str:
        """URL that cancels the order and restores the cart."""
        ...

    @abstractmethod
    def claim_notification(self, order_id: str, marker: str) -> bool:
        """Atomically record that ``marker`` was applied to the order.

        Returns ``False`` when the same marker was claimed before.
        """
        ...

    @abstractmethod
    def release_claim(self, order_id: str, marker: str) -> None:
        """Forget a claim whose delivery failed, so a retry can be applied."""
        ...
