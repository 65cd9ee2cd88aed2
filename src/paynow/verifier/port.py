"""Processor verification port (abstract interface).

The processor's own verification channel is an opaque authenticity oracle:
given the raw payload, the order id and the expected total, it says whether
the notification is genuine. Adapters may raise ``VerificationError``; the
authenticator treats that exactly like a negative answer.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping
from decimal import Decimal


class ProcessorVerifier(ABC):
    """Abstract processor verification interface."""

    # True when the adapter cannot vouch for the amount itself, so the
    # authenticator must compare it locally before accepting.
    requires_local_amount_check: bool = False

    @abstractmethod
    def verify(
        self,
        raw_payload: Mapping[str, str],
        order_id: str,
        expected_amount: Decimal,
    ) -> bool:
        """Return True when the processor vouches for the notification."""
        ...
