"""Offline response validation.

Checks what can be checked without calling the processor: the notification
references the expected order and claims exactly the expected total. This
is the SDK's local response validation; it cannot prove authenticity, so
the authenticator also enforces the amount itself.
"""

from collections.abc import Mapping
from decimal import Decimal

import structlog

from paynow.notification.parser import FIELD_AMOUNT, FIELD_ORDER_ID, parse_amount
from paynow.verifier.port import ProcessorVerifier

logger = structlog.get_logger(__name__)


class LocalVerifier(ProcessorVerifier):
    requires_local_amount_check = True

    def verify(
        self,
        raw_payload: Mapping[str, str],
        order_id: str,
        expected_amount: Decimal,
    ) -> bool:
        reference = str(raw_payload.get(FIELD_ORDER_ID, "")).strip()
        if reference != str(order_id):
            logger.info("Reference does not match order", order_id=order_id, reference=reference)
            return False

        amount = parse_amount(str(raw_payload.get(FIELD_AMOUNT, "")).strip())
        if amount is None or amount != expected_amount:
            logger.info(
                "Claimed amount does not match order total",
                order_id=order_id,
                claimed=str(amount),
                expected=str(expected_amount),
            )
            return False

        return True
