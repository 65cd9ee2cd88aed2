"""Processor verifier factory.

Provides get_verifier() / set_verifier() to swap implementations:
- RemoteVerifier when a verification endpoint is configured
- LocalVerifier otherwise
- FakeVerifier for tests and manual API testing
"""

import threading

from paynow.config import PayNowSettings
from paynow.exceptions import ConfigurationError
from paynow.verifier.fake_adapter import FakeVerifier
from paynow.verifier.local_adapter import LocalVerifier
from paynow.verifier.port import ProcessorVerifier
from paynow.verifier.remote_adapter import RemoteVerifier

_current_verifier: ProcessorVerifier | None = None
_verifier_lock = threading.Lock()


def build_verifier(settings: PayNowSettings) -> ProcessorVerifier:
    """Select the verifier adapter for ``settings``."""
    choice = settings.verifier
    if choice == "auto":
        choice = "remote" if settings.verify_url else "local"

    if choice == "remote":
        if not settings.verify_url:
            raise ConfigurationError("PAYNOW_VERIFY_URL is required for the remote verifier")
        return RemoteVerifier(
            verify_url=settings.verify_url,
            service_key=settings.service_key,
            timeout=settings.verify_timeout,
        )
    if choice == "local":
        return LocalVerifier()
    if choice == "fake":
        return FakeVerifier()
    raise ConfigurationError(f"Unknown verifier: {settings.verifier}")


def get_verifier(settings: PayNowSettings | None = None) -> ProcessorVerifier:
    """Return the current verifier, building it from settings on first use."""
    global _current_verifier
    with _verifier_lock:
        if _current_verifier is None:
            _current_verifier = build_verifier(settings or PayNowSettings.from_env())
        return _current_verifier


def set_verifier(verifier: ProcessorVerifier) -> None:
    """Override the active verifier (useful for tests)."""
    global _current_verifier
    with _verifier_lock:
        _current_verifier = verifier


def reset_verifier() -> None:
    """Reset to default verifier."""
    global _current_verifier
    with _verifier_lock:
        _current_verifier = None


__all__ = [
    "FakeVerifier",
    "LocalVerifier",
    "ProcessorVerifier",
    "RemoteVerifier",
    "build_verifier",
    "get_verifier",
    "reset_verifier",
    "set_verifier",
]
