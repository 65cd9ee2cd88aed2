"""Shared BDD fixtures and step definitions for the Pay Now callback."""

import json

import pytest
from paynow.orders import TERMINAL_SUCCESS, InMemoryOrderStore, OrderStatus
from paynow.reconciliation import InboundDelivery
from pytest_bdd import given, parsers, then, when

_OUTCOME_FIELDS = {
    "accepted": {"TransactionAccepted": "true", "Method": "2"},
    "declined": {"TransactionAccepted": "false", "Reason": "Insufficient funds", "Method": "1"},
    "cancelled": {"TransactionAccepted": "false", "Reason": "Cancelled by user", "Method": "1"},
    "pending": {"Pending": "true", "Method": "2"},
}


class RecordingOrderStore(InMemoryOrderStore):
    """In-memory store that records every call made to it."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls: list[str] = []

    def get_order(self, order_id):
        self.calls.append("get_order")
        return super().get_order(order_id)

    def mark_paid(self, order, notes=()):
        self.calls.append("mark_paid")
        return super().mark_paid(order, notes)

    def update_status(self, order, status, note="", notes=()):
        self.calls.append("update_status")
        return super().update_status(order, status, note, notes)

    def append_note(self, order, text):
        self.calls.append("append_note")
        return super().append_note(order, text)

    def build_return_url(self, order):
        self.calls.append("build_return_url")
        return super().build_return_url(order)

    def build_cancel_url(self, order):
        self.calls.append("build_cancel_url")
        return super().build_cancel_url(order)

    def claim_notification(self, order_id, marker):
        self.calls.append("claim_notification")
        return super().claim_notification(order_id, marker)

    def release_claim(self, order_id, marker):
        self.calls.append("release_claim")
        return super().release_claim(order_id, marker)


@pytest.fixture()
def store():
    return RecordingOrderStore(base_url="https://shop")


@pytest.fixture()
def cancel_url():
    return "https://shop/cart?fallback"


@pytest.fixture()
def delivery_calls():
    """Store calls made while the delivery itself was handled."""
    return []


def _notification_fields(order_id, key, amount, outcome_fields, cancel_url):
    fields = {
        "Reference": order_id,
        "Amount": amount,
        "Extra1": "7",
        "Extra2": cancel_url,
        "Extra3": key,
        "RequestTrace": f"bdd-{order_id}",
    }
    fields.update(outcome_fields)
    return fields


def _deliver(dispatcher, store, delivery_calls, fields):
    store.calls.clear()
    action = dispatcher.handle(InboundDelivery.from_fields(fields))
    delivery_calls.extend(store.calls)
    return action


def _script_target(body):
    prefix = "<script>window.location="
    return json.loads(body[len(prefix) : -len("</script>")])


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse('order "{order_id}" with key "{key}" and total {total} is "{status}"'))
def _order_exists(store, order_id, key, total, status):
    store.add_order(order_id, key=key, total_amount=total)
    store._orders[order_id].status = OrderStatus(status)


@given(parsers.parse('the cancel URL in extra field 2 is "{url}"'), target_fixture="cancel_url")
def _cancel_url(url):
    return url


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.parse('the processor notifies order "{order_id}" with key "{key}" amount {amount} as {outcome}'),
    target_fixture="action",
)
def _notify(dispatcher, store, delivery_calls, cancel_url, order_id, key, amount, outcome):
    fields = _notification_fields(order_id, key, amount, _OUTCOME_FIELDS[outcome], cancel_url)
    return _deliver(dispatcher, store, delivery_calls, fields)


@when(
    parsers.parse('the processor notifies order "{order_id}" with key "{key}" amount {amount} with an unknown status'),
    target_fixture="action",
)
def _notify_unknown(dispatcher, store, delivery_calls, cancel_url, order_id, key, amount):
    fields = _notification_fields(order_id, key, amount, {"Method": "1"}, cancel_url)
    return _deliver(dispatcher, store, delivery_calls, fields)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('the order "{order_id}" is settled'))
def _order_settled(store, order_id):
    assert store.get_order(order_id).status in TERMINAL_SUCCESS


@then(parsers.parse('the order "{order_id}" status is "{status}"'))
def _order_status(store, order_id, status):
    assert store.get_order(order_id).status == OrderStatus(status)


@then(parsers.re(r'the order "(?P<order_id>[^"]+)" has (?P<count>\d+) notes?'), converters={"count": int})
def _order_note_count(store, order_id, count):
    assert len(store.get_order(order_id).notes) == count


@then(parsers.parse('the shopper is redirected to the return URL of order "{order_id}"'))
def _redirect_to_return_url(action, store, order_id):
    assert action.location == store.build_return_url(store.get_order(order_id))


@then(parsers.parse('the shopper is redirected to "{url}"'))
def _redirect_to(action, url):
    assert action.location == url


@then("the redirect header and inline script agree")
def _header_and_script_agree(action):
    assert action.status_code == 302
    assert _script_target(action.body) == action.location


@then(parsers.parse('the delivery is rejected as "{message}"'))
def _rejected_as(action, message):
    assert action.validation.ok is False
    assert action.validation.error.value == message


@then("the delivery was terminated after the redirect")
def _terminated(action, delivery_calls):
    assert action.terminate is True
    assert delivery_calls[-1] == "update_status"
    assert "mark_paid" not in delivery_calls
