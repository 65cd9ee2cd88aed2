"""In-memory order store for development and testing.

Stands in for the storefront's order management system. Every mutation
happens under a single lock, which gives the compare-and-swap semantics
the protocol needs when the IPN and the browser return race each other.
"""

import threading
from collections.abc import Sequence
from decimal import Decimal
from urllib.parse import urlencode

import structlog

from paynow.exceptions import OrderNotFound
from paynow.orders.port import TERMINAL_SUCCESS, Order, OrderStatus, OrderStore

logger = structlog.get_logger(__name__)


class InMemoryOrderStore(OrderStore):
    """Dict-backed order store."""

    def __init__(self, base_url: str = "https://shop.example.com") -> None:
        self.base_url = base_url.rstrip("/")
        self._orders: dict[str, Order] = {}
        self._claims: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def add_order(
        self,
        order_id: str,
        key: str,
        total_amount: Decimal | str,
        status: OrderStatus = OrderStatus.PENDING,
        needs_processing: bool = True,
    ) -> Order:
        """Seed an order (storefront checkout stand-in)."""
        order = Order(
            id=str(order_id),
            key=key,
            total_amount=Decimal(str(total_amount)),
            status=status,
            needs_processing=needs_processing,
        )
        with self._lock:
            self._orders[order.id] = order
        return order

    def _stored(self, order_id: str) -> Order:
        try:
            return self._orders[order_id]
        except KeyError:
            raise OrderNotFound(order_id) from None

    def get_order(self, order_id: str) -> Order:
        with self._lock:
            stored = self._stored(str(order_id))
            return Order(
                id=stored.id,
                key=stored.key,
                total_amount=stored.total_amount,
                status=stored.status,
                notes=list(stored.notes),
                needs_processing=stored.needs_processing,
            )

    def mark_paid(self, order: Order, notes: Sequence[str] = ()) -> Order | None:
        with self._lock:
            stored = self._stored(order.id)
            if stored.status in TERMINAL_SUCCESS:
                logger.warning("Order already paid", order_id=order.id, status=stored.status.value)
                return None
            stored.status = OrderStatus.PROCESSING if stored.needs_processing else OrderStatus.COMPLETED
            stored.notes.extend(notes)
            order.status = stored.status
            order.notes = list(stored.notes)
            return order

    def update_status(
        self,
        order: Order,
        status: OrderStatus,
        note: str = "",
        notes: Sequence[str] = (),
    ) -> bool:
        with self._lock:
            stored = self._stored(order.id)
            if stored.status in TERMINAL_SUCCESS:
                logger.warning(
                    "Refusing status change on settled order",
                    order_id=order.id,
                    status=stored.status.value,
                    requested=status.value,
                )
                return False
            old = stored.status
            stored.status = status
            stored.notes.extend(notes)
            if note:
                stored.notes.append(f"Order status changed from {old.value} to {status.value}. {note}".rstrip())
            order.status = status
            order.notes = list(stored.notes)
            return True

    def append_note(self, order: Order, text: str) -> None:
        with self._lock:
            stored = self._stored(order.id)
            stored.notes.append(text)
            order.notes = list(stored.notes)

    def build_return_url(self, order: Order) -> str:
        return f"{self.base_url}/checkout/order-received/{order.id}/?{urlencode({'key': order.key})}"

    def build_cancel_url(self, order: Order) -> str:
        query = urlencode({"cancel_order": "true", "order": order.key, "order_id": order.id})
        return f"{self.base_url}/cart/?{query}"

    def claim_notification(self, order_id: str, marker: str) -> bool:
        with self._lock:
            claim = (str(order_id), marker)
            if claim in self._claims:
                return False
            self._claims.add(claim)
            return True

    def release_claim(self, order_id: str, marker: str) -> None:
        with self._lock:
            self._claims.discard((str(order_id), marker))
