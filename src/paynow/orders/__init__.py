"""Order store factory.

Provides get_order_store() / set_order_store() to swap implementations:
- InMemoryOrderStore for development and testing
- a storefront-backed adapter in production
"""

import os
import threading

from paynow.orders.memory_adapter import InMemoryOrderStore
from paynow.orders.port import TERMINAL_SUCCESS, Order, OrderStatus, OrderStore

_current_store: OrderStore | None = None
_store_lock = threading.Lock()


def get_order_store() -> OrderStore:
    """Return the current order store. Defaults to InMemoryOrderStore."""
    global _current_store
    with _store_lock:
        if _current_store is None:
            _current_store = InMemoryOrderStore(base_url=os.getenv("PAYNOW_SHOP_URL", "https://shop.example.com"))
        return _current_store


def set_order_store(store: OrderStore) -> None:
    """Override the active order store (useful for tests)."""
    global _current_store
    with _store_lock:
        _current_store = store


def reset_order_store() -> None:
    """Reset to default order store."""
    global _current_store
    with _store_lock:
        _current_store = None


__all__ = [
    "TERMINAL_SUCCESS",
    "InMemoryOrderStore",
    "Order",
    "OrderStatus",
    "OrderStore",
    "get_order_store",
    "reset_order_store",
    "set_order_store",
]
