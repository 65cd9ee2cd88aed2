"""Configurable fake processor verifier for development and testing.

Simulates the processor's verification channel without any external calls.
It can be configured at runtime to vouch for or reject notifications, or to
fail outright, making it useful for:
- Manual API testing via /paynow/verifier/configure
- Automated tests with predictable outcomes
- Development without real merchant credentials
"""

from collections.abc import Mapping
from decimal import Decimal

from paynow.exceptions import VerificationError
from paynow.verifier.port import ProcessorVerifier


class FakeVerifier(ProcessorVerifier):
    """Configurable fake verifier."""

    def __init__(self, should_verify: bool = True, should_error: bool = False) -> None:
        self.should_verify = should_verify
        self.should_error = should_error
        self.calls: list[dict] = []

    def configure(self, should_verify: bool, should_error: bool = False) -> None:
        """Configure verifier behavior at runtime."""
        self.should_verify = should_verify
        self.should_error = should_error

    def verify(
        self,
        raw_payload: Mapping[str, str],
        order_id: str,
        expected_amount: Decimal,
    ) -> bool:
        self.calls.append(
            {
                "method": "verify",
                "raw_payload": dict(raw_payload),
                "order_id": order_id,
                "expected_amount": expected_amount,
            }
        )
        if self.should_error:
            raise VerificationError("Fake verification channel unavailable")
        return self.should_verify
