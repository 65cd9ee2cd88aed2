"""Pay Now notification parser.

Decodes the form-encoded payload Netcash posts to the callback URL into a
``Notification``. Parsing is total: unknown or missing fields degrade to
empty strings, ``amount=None`` and ``OutcomeCategory.UNKNOWN``.

Classification precedence:
    Pending flag  >  Declined / Cancelled  >  Accepted  >  Unknown
"""

from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

from paynow.notification.notification import (
    EXTRA_ORDER_KEY,
    CardDetail,
    Notification,
    OutcomeCategory,
)

# ---------------------------------------------------------------------------
# Wire vocabulary
# ---------------------------------------------------------------------------
FIELD_ORDER_ID = "Reference"
FIELD_AMOUNT = "Amount"
FIELD_ACCEPTED = "TransactionAccepted"
FIELD_REASON = "Reason"
FIELD_PENDING = "Pending"
FIELD_METHOD = "Method"
FIELD_REQUEST_TRACE = "RequestTrace"
FIELD_CC_HOLDER = "ccHolder"
FIELD_CC_MASKED = "ccMasked"
FIELD_CC_EXPIRY = "ccExpiry"
FIELD_CC_TOKEN = "ccToken"
EXTRA_FIELD_PREFIX = "Extra"
EXTRA_FIELD_INDEXES = (1, 2, 3)

METHOD_CREDIT_CARD = "1"
METHOD_BANK_EFT = "2"
METHOD_RETAIL = "3"
OFFLINE_METHODS = frozenset({METHOD_BANK_EFT, METHOD_RETAIL})

_TRUTHY = {"true", "1", "yes"}
_FALSY = {"false", "0", "no"}
_CANCEL_MARKERS = ("cancelled by user", "canceled by user", "user cancelled", "user canceled")


def _text(fields: Mapping[str, str], name: str) -> str:
    value = fields.get(name)
    if value is None:
        return ""
    return str(value).strip()


def _flag(value: str) -> bool | None:
    lowered = value.lower()
    if lowered in _TRUTHY:
        return True
    if lowered in _FALSY:
        return False
    return None


def parse_amount(value: str) -> Decimal | None:
    """Parse a claimed amount; ``None`` when missing or not a finite number."""
    if not value:
        return None
    try:
        amount = Decimal(value)
    except InvalidOperation:
        return None
    if not amount.is_finite():
        return None
    return amount


def classify(fields: Mapping[str, str]) -> OutcomeCategory:
    """Map the processor's status markers to exactly one outcome category."""
    if _flag(_text(fields, FIELD_PENDING)):
        return OutcomeCategory.PENDING

    accepted = _flag(_text(fields, FIELD_ACCEPTED))
    if accepted is False:
        reason = _text(fields, FIELD_REASON).lower()
        if any(marker in reason for marker in _CANCEL_MARKERS):
            return OutcomeCategory.CANCELLED
        return OutcomeCategory.DECLINED
    if accepted is True:
        return OutcomeCategory.ACCEPTED
    return OutcomeCategory.UNKNOWN


def _extra_fields(fields: Mapping[str, str]) -> dict[int, str]:
    extras = {}
    for index in EXTRA_FIELD_INDEXES:
        name = f"{EXTRA_FIELD_PREFIX}{index}"
        if name in fields:
            extras[index] = _text(fields, name)
    return extras


def _card_detail(fields: Mapping[str, str]) -> CardDetail | None:
    # The processor only sends card sub-fields when tokenization is enabled.
    if FIELD_CC_HOLDER not in fields:
        return None
    return CardDetail(
        holder_name=_text(fields, FIELD_CC_HOLDER),
        masked_number=_text(fields, FIELD_CC_MASKED),
        expiry=_text(fields, FIELD_CC_EXPIRY),
        token=_text(fields, FIELD_CC_TOKEN),
    )


def parse(fields: Mapping[str, str]) -> Notification:
    """Build a ``Notification`` from raw callback fields. Never raises."""
    raw = {str(k): "" if v is None else str(v) for k, v in fields.items()}
    method = _text(raw, FIELD_METHOD)
    outcome = classify(raw)
    extras = _extra_fields(raw)

    return Notification(
        order_id=_text(raw, FIELD_ORDER_ID),
        order_key=extras.get(EXTRA_ORDER_KEY, ""),
        amount=parse_amount(_text(raw, FIELD_AMOUNT)),
        outcome=outcome,
        reason=_text(raw, FIELD_REASON),
        extra_fields=extras,
        was_card_transaction=method == METHOD_CREDIT_CARD,
        card_detail=_card_detail(raw),
        is_offline_channel=outcome is OutcomeCategory.PENDING or method in OFFLINE_METHODS,
        request_trace=_text(raw, FIELD_REQUEST_TRACE),
        raw=raw,
    )
