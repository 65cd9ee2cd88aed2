"""Response authentication: is this notification genuine and ours?

Two layers, both required:

1. The processor verification oracle vouches for the payload, given the
   order id and the expected total. A negative answer, an error or a
   timeout is ``GENERAL_ERROR``: the check fails closed.
2. Identity and state checks against the order, in this order:
   already terminal-success → ``ALREADY_HANDLED``; order key differs →
   ``KEY_MISMATCH``; claimed amount differs → ``AMOUNT_MISMATCH``.

The settled-order check runs before the key check so a replay for a paid
order is told apart from a tampered payload.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from paynow.config import PayNowSettings
from paynow.exceptions import VerificationError
from paynow.notification import Notification
from paynow.orders import Order
from paynow.verifier import ProcessorVerifier

logger = structlog.get_logger(__name__)


class ErrorKind(Enum):
    KEY_MISMATCH = "order key mismatch"
    AMOUNT_MISMATCH = "order amount mismatch"
    ALREADY_HANDLED = "order already completed/processed"
    GENERAL_ERROR = "something went wrong"


@dataclass(frozen=True)
class ValidationResult:
    ok: bool
    error: ErrorKind | None = None

    @classmethod
    def success(cls) -> "ValidationResult":
        return cls(ok=True)

    @classmethod
    def failure(cls, error: ErrorKind) -> "ValidationResult":
        return cls(ok=False, error=error)

    @property
    def is_already_handled(self) -> bool:
        return self.error is ErrorKind.ALREADY_HANDLED


class ResponseAuthenticator:
    """Stateless notification authenticator."""

    def __init__(self, verifier: ProcessorVerifier, settings: PayNowSettings) -> None:
        self.verifier = verifier
        self.settings = settings

    @property
    def enforces_amount(self) -> bool:
        return self.settings.verify_amount_locally or self.verifier.requires_local_amount_check

    def _processor_vouches(self, notification: Notification, order: Order) -> bool:
        try:
            return self.verifier.verify(notification.raw, order.id, order.total_amount) is True
        except VerificationError as exc:
            logger.warning("Processor verification failed", order_id=order.id, error=str(exc))
            return False

    def authenticate(self, notification: Notification, order: Order | None) -> ValidationResult:
        """Validate ``notification`` against the processor and ``order``."""
        if order is None:
            logger.warning("Notification references an unknown order", order_id=notification.order_id)
            return ValidationResult.failure(ErrorKind.GENERAL_ERROR)

        if not self._processor_vouches(notification, order):
            logger.warning("System failed checking the IPN request", order_id=order.id)
            return ValidationResult.failure(ErrorKind.GENERAL_ERROR)

        logger.info("Valid Pay Now response", order_id=order.id)

        if order.is_settled:
            logger.info(
                "Order has already been completed/processed",
                order_id=order.id,
                status=order.status.value,
            )
            return ValidationResult.failure(ErrorKind.ALREADY_HANDLED)

        if notification.order_key != order.key:
            logger.warning(
                "Order key mismatch",
                order_id=order.id,
                expected_key=order.key,
                claimed_key=notification.order_key,
            )
            return ValidationResult.failure(ErrorKind.KEY_MISMATCH)

        if self.enforces_amount and notification.amount != order.total_amount:
            logger.warning(
                "Order amount mismatch",
                order_id=order.id,
                expected=str(order.total_amount),
                claimed=str(notification.amount),
            )
            return ValidationResult.failure(ErrorKind.AMOUNT_MISMATCH)

        return ValidationResult.success()
