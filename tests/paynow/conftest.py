"""Shared fixtures for the Pay Now callback tests."""

from decimal import Decimal

import pytest
from paynow.config import PayNowSettings
from paynow.orders import InMemoryOrderStore, OrderStatus
from paynow.reconciliation import OrderReconciler, ResponseAuthenticator, build_dispatcher
from paynow.verifier import FakeVerifier

SHOP_URL = "https://shop.test"
ACCOUNT_URL = "https://shop.test/my-account/"


@pytest.fixture()
def settings():
    return PayNowSettings(environment="test", account_url=ACCOUNT_URL)


@pytest.fixture()
def store():
    return InMemoryOrderStore(base_url=SHOP_URL)


@pytest.fixture()
def verifier():
    return FakeVerifier()


@pytest.fixture()
def authenticator(verifier, settings):
    return ResponseAuthenticator(verifier, settings)


@pytest.fixture()
def reconciler(store):
    return OrderReconciler(store)


@pytest.fixture()
def dispatcher(store, verifier, settings):
    return build_dispatcher(store, verifier, settings)


@pytest.fixture()
def pending_order(store):
    """Order #100, awaiting payment, key "abc"."""
    return store.add_order("100", key="abc", total_amount=Decimal("249.99"))


@pytest.fixture()
def make_payload():
    """Factory for raw Pay Now callback fields."""

    def _make(
        order_id="100",
        order_key="abc",
        amount="249.99",
        accepted="true",
        reason="",
        method="1",
        cancel_url="https://shop.test/cart/?cancel_order=true",
        pending=None,
        trace="trace-001",
        card=None,
        **extra,
    ):
        fields = {
            "Reference": order_id,
            "Amount": amount,
            "Method": method,
            "Extra1": "42",
            "Extra2": cancel_url,
            "Extra3": order_key,
            "RequestTrace": trace,
        }
        if accepted is not None:
            fields["TransactionAccepted"] = accepted
        if reason:
            fields["Reason"] = reason
        if pending is not None:
            fields["Pending"] = pending
        if card:
            fields.update(card)
        fields.update(extra)
        return {k: v for k, v in fields.items() if v is not None}

    return _make


@pytest.fixture()
def card_fields():
    return {
        "ccHolder": "J Smith",
        "ccMasked": "411111******1111",
        "ccExpiry": "12/29",
        "ccToken": "tok_9f8e7d",
    }


@pytest.fixture()
def settle(store):
    """Force an order into a status, bypassing the conditional writes."""

    def _settle(order_id, status=OrderStatus.COMPLETED):
        store._orders[order_id].status = status
        return store.get_order(order_id)

    return _settle
