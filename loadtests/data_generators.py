"""Faker-based data generators for Locust load test scenarios.

Each generator produces payloads that match the field names the Pay Now
processor posts and the dev seeding endpoint accepts.
"""

import random
import uuid

from faker import Faker

fake = Faker()

CANCEL_REASONS = ["Cancelled by user", "User cancelled transaction"]
DECLINE_REASONS = ["Insufficient funds", "Card expired", "Do not honour"]


def unique_order_id() -> str:
    """Generate unique order ids like 'LT-a1b2c3d4'."""
    return f"LT-{uuid.uuid4().hex[:8]}"


def order_key() -> str:
    return f"wc_order_{uuid.uuid4().hex[:13]}"


def order_total() -> str:
    """Two-decimal amount between 5 and 5000."""
    return f"{random.uniform(5, 5000):.2f}"


def seed_order_data() -> dict:
    """Generate SeedOrderRequest payload."""
    return {
        "order_id": unique_order_id(),
        "key": order_key(),
        "total_amount": order_total(),
    }


def _base_notification(order: dict, host: str) -> dict:
    return {
        "Reference": order["order_id"],
        "Amount": order["total_amount"],
        "Extra1": str(fake.random_int(min=1, max=99999)),
        "Extra2": f"{host}/cart/?cancel_order=true&order_id={order['order_id']}",
        "Extra3": order["key"],
        "RequestTrace": uuid.uuid4().hex,
    }


def accepted_card_notification(order: dict, host: str = "https://shop.example.com") -> dict:
    """Accepted card payment with tokenized card detail."""
    data = _base_notification(order, host)
    data.update(
        {
            "TransactionAccepted": "true",
            "Method": "1",
            "ccHolder": fake.name(),
            "ccMasked": f"4111******{random.randint(1000, 9999)}",
            "ccExpiry": fake.credit_card_expire(date_format="%m/%y"),
            "ccToken": f"tok_{uuid.uuid4().hex[:12]}",
        }
    )
    return data


def accepted_eft_notification(order: dict, host: str = "https://shop.example.com") -> dict:
    data = _base_notification(order, host)
    data.update({"TransactionAccepted": "true", "Method": "2"})
    return data


def pending_notification(order: dict, host: str = "https://shop.example.com") -> dict:
    """Offline (EFT or retail) payment awaiting settlement."""
    data = _base_notification(order, host)
    data.update({"Pending": "true", "Method": random.choice(["2", "3"])})
    return data


def cancelled_notification(order: dict, host: str = "https://shop.example.com") -> dict:
    data = _base_notification(order, host)
    data.update(
        {
            "TransactionAccepted": "false",
            "Method": "1",
            "Reason": random.choice(CANCEL_REASONS),
        }
    )
    return data


def declined_notification(order: dict, host: str = "https://shop.example.com") -> dict:
    data = _base_notification(order, host)
    data.update(
        {
            "TransactionAccepted": "false",
            "Method": "1",
            "Reason": random.choice(DECLINE_REASONS),
        }
    )
    return data


def tampered_notification(order: dict, host: str = "https://shop.example.com") -> dict:
    """Accepted notification carrying the wrong order key."""
    data = accepted_eft_notification(order, host)
    data["Extra3"] = order_key()
    return data
