"""Settings for the Pay Now callback context.

Settings are passed explicitly into the authenticator, reconciler and
dispatcher. ``PayNowSettings.from_env()`` builds them from ``PAYNOW_*``
environment variables for the HTTP app.
"""

import os

from pydantic import BaseModel, Field

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in _TRUTHY


class PayNowSettings(BaseModel):
    """Explicit configuration for one Pay Now merchant integration."""

    environment: str = "development"
    service_key: str = ""
    # Verifier adapter: "auto" (remote when verify_url is set, else local),
    # "remote", "local" or "fake".
    verifier: str = "auto"
    # Processor trust endpoint.
    verify_url: str = ""
    verify_timeout: float = Field(default=10.0, gt=0)
    # Storefront account page: default fallback redirect target.
    account_url: str = ""
    verify_amount_locally: bool = True
    # Audit trace toggle (the gateway's "send debug" switch).
    debug: bool = True

    model_config = {"frozen": True}

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @classmethod
    def from_env(cls) -> "PayNowSettings":
        """Build settings from ``PAYNOW_*`` environment variables."""
        return cls(
            environment=os.getenv("PAYNOW_ENV", "development"),
            service_key=os.getenv("PAYNOW_SERVICE_KEY", ""),
            verifier=os.getenv("PAYNOW_VERIFIER", "auto").lower(),
            verify_url=os.getenv("PAYNOW_VERIFY_URL", ""),
            verify_timeout=os.getenv("PAYNOW_VERIFY_TIMEOUT", "10"),
            account_url=os.getenv("PAYNOW_ACCOUNT_URL", ""),
            verify_amount_locally=_env_flag("PAYNOW_VERIFY_AMOUNT_LOCALLY", True),
            debug=_env_flag("PAYNOW_DEBUG", True),
        )
