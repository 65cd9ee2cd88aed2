"""Callback dispatcher: one call per inbound HTTP delivery.

The processor posts the IPN and the shopper's browser returns to the same
endpoint. A delivery without body fields is the browser return trip and is
sent to the account page. A delivery with fields is parsed, authenticated
and, when genuine, reconciled once against the order.

Every redirect is emitted twice, as a ``Location`` header and as an inline
script for callers that drop the header. Both are rendered from the same
target.
"""

import hashlib
import json
from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from paynow.config import PayNowSettings
from paynow.exceptions import ConfigurationError, OrderNotFound
from paynow.notification import Notification, parse
from paynow.notification.notification import EXTRA_CANCEL_URL
from paynow.notification.parser import EXTRA_FIELD_PREFIX
from paynow.orders import Order, OrderStore
from paynow.reconciliation.authenticator import ErrorKind, ResponseAuthenticator, ValidationResult
from paynow.reconciliation.reconciler import OrderReconciler

logger = structlog.get_logger(__name__)

FALLBACK_FIELD = f"{EXTRA_FIELD_PREFIX}{EXTRA_CANCEL_URL}"


@dataclass(frozen=True)
class InboundDelivery:
    fields: Mapping[str, str] = field(default_factory=dict)
    has_body: bool = False

    @classmethod
    def from_fields(cls, fields: Mapping[str, str]) -> "InboundDelivery":
        fields = dict(fields)
        return cls(fields=fields, has_body=bool(fields))


@dataclass(frozen=True)
class OutboundAction:
    """HTTP result of a delivery.

    ``location`` is ``None`` for a plain 200 receipt. ``terminate`` marks a
    delivery that ended early: nothing may run after this response.
    """

    status_code: int = 200
    location: str | None = None
    body: str = ""
    terminate: bool = False
    validation: ValidationResult | None = None

    @property
    def is_redirect(self) -> bool:
        return self.location is not None


def render_script_redirect(url: str) -> str:
    # json.dumps yields a quoted JS string literal; "</" is split so the
    # value can never close the script element.
    literal = json.dumps(url).replace("</", "<\\/")
    return f"<script>window.location={literal}</script>"


def redirect(url: str, terminate: bool = False, validation: ValidationResult | None = None) -> OutboundAction:
    """Build a redirect carrying both the header and the inline script."""
    return OutboundAction(
        status_code=302,
        location=url,
        body=render_script_redirect(url),
        terminate=terminate,
        validation=validation,
    )


def notification_marker(notification: Notification) -> str:
    """De-duplication marker: outcome plus processor trace (or payload digest)."""
    nonce = notification.request_trace
    if not nonce:
        canonical = json.dumps(notification.raw, sort_keys=True, separators=(",", ":"))
        nonce = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{notification.outcome.value}:{nonce}"


class CallbackDispatcher:
    """Entry point for the Pay Now callback URL."""

    def __init__(
        self,
        store: OrderStore,
        authenticator: ResponseAuthenticator,
        reconciler: OrderReconciler,
        settings: PayNowSettings,
    ) -> None:
        self.store = store
        self.authenticator = authenticator
        self.reconciler = reconciler
        self.settings = settings

    def handle(self, delivery: InboundDelivery) -> OutboundAction:
        if not delivery.has_body or not delivery.fields:
            return self._return_trip()

        notification = parse(delivery.fields)
        log = logger.bind(order_id=notification.order_id, outcome=notification.outcome.value)
        log.info("Notification received", offline=notification.is_offline_channel)

        order = self._load_order(notification)
        result = self.authenticator.authenticate(notification, order)
        if not result.ok:
            return self._rejected(notification, order, result, delivery.fields)

        marker = notification_marker(notification)
        if not self.store.claim_notification(order.id, marker):
            log.info("Duplicate delivery ignored")
            return self._rejected(
                notification,
                order,
                ValidationResult.failure(ErrorKind.ALREADY_HANDLED),
                delivery.fields,
            )

        try:
            reconciliation = self.reconciler.reconcile(notification, order)
        except Exception:
            # The processor retries a failed delivery with the same payload.
            log.exception("Reconciliation failed; releasing claim", marker=marker)
            self.store.release_claim(order.id, marker)
            raise

        log.info("Redirecting", target=reconciliation.redirect_target, fatal=reconciliation.fatal)
        return redirect(reconciliation.redirect_target, terminate=reconciliation.fatal, validation=result)

    def _return_trip(self) -> OutboundAction:
        # Browser "redirect" URL hit without a payload.
        if not self.settings.account_url:
            logger.error("No redirect URL configured for the return trip")
            raise ConfigurationError("No 'redirect' URL set.")
        logger.info("Return trip without payload", target=self.settings.account_url)
        return redirect(self.settings.account_url)

    def _load_order(self, notification: Notification) -> Order | None:
        if not notification.order_id:
            return None
        try:
            return self.store.get_order(notification.order_id)
        except OrderNotFound:
            return None

    def _rejected(
        self,
        notification: Notification,
        order: Order | None,
        result: ValidationResult,
        fields: Mapping[str, str],
    ) -> OutboundAction:
        logger.warning(
            "Notification not reconciled",
            order_id=notification.order_id,
            error=result.error.value if result.error else None,
        )

        if result.is_already_handled and order is not None:
            # Replay or the IPN beat the browser here: not the shopper's problem.
            return redirect(self.store.build_return_url(order), validation=result)

        target = str(fields.get(FALLBACK_FIELD) or "").strip() or self.settings.account_url
        if not target:
            return OutboundAction(status_code=200, validation=result)
        return redirect(target, validation=result)
