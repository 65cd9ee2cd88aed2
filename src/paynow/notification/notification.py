"""Typed Pay Now notification.

One ``Notification`` is built per inbound delivery and discarded when the
request ends. Exactly one ``OutcomeCategory`` is assigned to it.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

# Indexed extra fields, fixed when the outbound payment form was built.
EXTRA_CUSTOMER_ID = 1
EXTRA_CANCEL_URL = 2
EXTRA_ORDER_KEY = 3


class OutcomeCategory(Enum):
    ACCEPTED = "Accepted"
    DECLINED = "Declined"
    CANCELLED = "Cancelled"
    PENDING = "Pending"
    UNKNOWN = "Unknown"

    @property
    def is_definitive(self) -> bool:
        return self is not OutcomeCategory.PENDING


@dataclass(frozen=True)
class CardDetail:
    """Tokenized card detail echoed back by the processor."""

    holder_name: str
    masked_number: str
    expiry: str
    token: str


@dataclass(frozen=True)
class Notification:
    order_id: str
    order_key: str
    amount: Decimal | None
    outcome: OutcomeCategory
    reason: str = ""
    extra_fields: dict[int, str] = field(default_factory=dict)
    was_card_transaction: bool = False
    card_detail: CardDetail | None = None
    is_offline_channel: bool = False
    request_trace: str = ""
    raw: dict[str, str] = field(default_factory=dict)

    def extra(self, index: int) -> str:
        """Return extra field ``index``, or an empty string."""
        return self.extra_fields.get(index, "")

    @property
    def customer_id(self) -> str:
        return self.extra(EXTRA_CUSTOMER_ID)

    @property
    def cancel_url(self) -> str:
        return self.extra(EXTRA_CANCEL_URL)

    @property
    def is_pending(self) -> bool:
        return self.outcome is OutcomeCategory.PENDING
