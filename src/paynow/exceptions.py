"""Exceptions raised across the Pay Now callback context.

Expected protocol outcomes (key mismatch, replays, unknown statuses) are
returned as data. Only faults that abort a delivery are raised.
"""


class PayNowError(Exception):
    """Base class for Pay Now callback errors."""


class ConfigurationError(PayNowError):
    """No redirect target can be resolved for a delivery."""


class VerificationError(PayNowError):
    """The processor verification call failed or returned garbage."""


class OrderNotFound(PayNowError, LookupError):
    """The order store has no order for the given id."""

    def __init__(self, order_id: str) -> None:
        super().__init__(f"Order {order_id!r} does not exist")
        self.order_id = order_id
