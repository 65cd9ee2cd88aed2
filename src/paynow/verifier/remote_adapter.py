"""Remote processor verifier.

Confirms a notification with the processor's verification endpoint in a
single synchronous round trip. The endpoint receives the raw payload plus
the order id, expected total and merchant service key, and answers with a
JSON body ``{"valid": true|false}``.

Anything other than a 2xx response carrying ``"valid": true`` is treated as
inconclusive; transport failures and timeouts raise ``VerificationError``
so an order is never marked paid on an unconfirmed notification.
"""

from collections.abc import Mapping
from decimal import Decimal

import httpx
import structlog

from paynow.exceptions import VerificationError
from paynow.verifier.port import ProcessorVerifier

logger = structlog.get_logger(__name__)


class RemoteVerifier(ProcessorVerifier):
    """Processor verification over HTTP."""

    def __init__(
        self,
        verify_url: str,
        service_key: str,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.verify_url = verify_url
        self.service_key = service_key
        self.timeout = timeout
        self._client = client

    def _post(self, data: dict[str, str]) -> httpx.Response:
        if self._client is not None:
            return self._client.post(self.verify_url, data=data, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.post(self.verify_url, data=data)

    def verify(
        self,
        raw_payload: Mapping[str, str],
        order_id: str,
        expected_amount: Decimal,
    ) -> bool:
        data = dict(raw_payload)
        data.update(
            {
                "order_id": str(order_id),
                "expected_amount": str(expected_amount),
                "service_key": self.service_key,
            }
        )

        try:
            response = self._post(data)
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException as exc:
            raise VerificationError(f"Verification timed out after {self.timeout}s") from exc
        except httpx.HTTPStatusError as exc:
            raise VerificationError(f"Verification endpoint returned {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise VerificationError(f"Verification request failed: {exc}") from exc
        except ValueError as exc:
            raise VerificationError("Verification endpoint returned a non-JSON body") from exc

        if not isinstance(body, dict):
            raise VerificationError("Verification endpoint returned an unexpected body")

        valid = body.get("valid") is True
        logger.debug("Processor verification answered", order_id=order_id, valid=valid)
        return valid
