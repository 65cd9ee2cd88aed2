"""Order reconciliation: the payment state machine.

Transitions driven by an authenticated notification:

    PENDING  → PENDING     (offline instrument still settling)
    *        → FAILED      (declined)
    *        → CANCELLED   (cancelled by the shopper)
    *        → PROCESSING / COMPLETED   (accepted; the store decides which)
    *        → ON_HOLD     (outcome could not be determined; fatal for the delivery)

PROCESSING and COMPLETED are absorbing. The authenticator rejects
notifications for settled orders and every store write is conditional, so
success side effects never repeat.
"""

import html
import re
from dataclasses import dataclass, field

import structlog

from paynow.notification import CardDetail, Notification, OutcomeCategory
from paynow.orders import Order, OrderStatus, OrderStore

logger = structlog.get_logger(__name__)

NOTE_PENDING = "Pay Now response received. Payment pending."
STATUS_NOTE_PENDING = "Pending payment."
NOTE_DEFINITIVE = "IPN payment completed."
NOTE_CANCELLED_OR_DECLINED = "Payment was cancelled or declined."
STATUS_NOTE_CANCELLED = "Payment canceled by user."
NOTE_CARD_DETAIL_MISSING = "Paid with credit card but tokenized detail was not received."

_CARD_NUMBER = re.compile(r"^\d{12,19}$")


def failure_reason(reason: str) -> str:
    return f'Payment failure reason "{reason.lower()}".'


def mask_card_number(number: str) -> str:
    """Keep a processor-masked number as is; mask a bare PAN to its last four digits."""
    compact = number.replace(" ", "").replace("-", "")
    if _CARD_NUMBER.match(compact):
        return "*" * (len(compact) - 4) + compact[-4:]
    return number


def card_detail_note(detail: CardDetail) -> str:
    return "\n".join(
        [
            "Tokenized credit card detail:",
            f"Credit card name: {detail.holder_name}",
            f"Credit card number: {mask_card_number(detail.masked_number)}",
            f"Expiry date: {detail.expiry}",
            f"Card token: {detail.token}",
        ]
    )


@dataclass
class Reconciliation:
    """Outcome of reconciling one notification against one order.

    ``new_status`` is ``None`` when ``mark_paid`` is set: the store picks the
    terminal-success status. ``fatal`` means the delivery must end with the
    redirect and nothing else.
    """

    new_status: OrderStatus | None
    redirect_target: str
    notes: list[str] = field(default_factory=list)
    status_note: str = ""
    mark_paid: bool = False
    fatal: bool = False
    applied: bool = False
    final_status: OrderStatus | None = None


class OrderReconciler:
    """Stateless reconciler applying notifications through the order store."""

    def __init__(self, store: OrderStore) -> None:
        self.store = store

    def _cancel_target(self, notification: Notification, order: Order) -> str:
        # Extra field 2 carries the cancel URL, entity-encoded by the form builder.
        if notification.cancel_url:
            return html.unescape(notification.cancel_url)
        return html.unescape(self.store.build_cancel_url(order))

    def plan(self, notification: Notification, order: Order, return_url: str) -> Reconciliation:
        """Compute the transition for ``notification`` without touching the store."""
        outcome = notification.outcome

        if outcome is OutcomeCategory.PENDING:
            return Reconciliation(
                new_status=OrderStatus.PENDING,
                redirect_target=return_url,
                notes=[NOTE_PENDING],
                status_note=STATUS_NOTE_PENDING,
            )

        notes = [NOTE_DEFINITIVE]

        if outcome in (OutcomeCategory.DECLINED, OutcomeCategory.CANCELLED):
            notes.append(NOTE_CANCELLED_OR_DECLINED)
            if outcome is OutcomeCategory.DECLINED:
                return Reconciliation(
                    new_status=OrderStatus.FAILED,
                    redirect_target=return_url,
                    notes=notes,
                    status_note=failure_reason(notification.reason),
                )
            return Reconciliation(
                new_status=OrderStatus.CANCELLED,
                redirect_target=self._cancel_target(notification, order),
                notes=notes,
                status_note=STATUS_NOTE_CANCELLED,
            )

        if outcome is OutcomeCategory.ACCEPTED:
            card_notes = []
            if notification.was_card_transaction:
                if notification.card_detail is not None:
                    card_notes.append(card_detail_note(notification.card_detail))
                else:
                    card_notes.append(NOTE_CARD_DETAIL_MISSING)
            return Reconciliation(
                new_status=None,
                redirect_target=return_url,
                notes=notes + card_notes,
                mark_paid=True,
            )

        return Reconciliation(
            new_status=OrderStatus.ON_HOLD,
            redirect_target=self._cancel_target(notification, order),
            notes=notes,
            status_note=failure_reason(notification.reason),
            fatal=True,
        )

    def apply(self, reconciliation: Reconciliation, order: Order) -> Reconciliation:
        """Write a planned reconciliation through the order store."""
        log = logger.bind(order_id=order.id, current_status=order.status.value)

        # Notes travel with the conditional write: a refused write leaves
        # a settled order untouched.
        if reconciliation.mark_paid:
            paid = self.store.mark_paid(order, notes=reconciliation.notes)
            if paid is None:
                log.warning("Order was settled concurrently; payment not re-applied")
                return reconciliation
            reconciliation.applied = True
            reconciliation.final_status = paid.status
            log.info("Transaction accepted", new_status=paid.status.value)
            return reconciliation

        applied = self.store.update_status(
            order,
            reconciliation.new_status,
            reconciliation.status_note,
            notes=reconciliation.notes,
        )
        reconciliation.applied = applied
        if applied:
            reconciliation.final_status = reconciliation.new_status
            log.info("Order status updated", new_status=reconciliation.new_status.value)
        else:
            log.warning("Status update refused by the order store", requested=reconciliation.new_status.value)

        if reconciliation.fatal:
            log.warning("Transaction status could not be determined", redirect=reconciliation.redirect_target)
        return reconciliation

    def reconcile(self, notification: Notification, order: Order) -> Reconciliation:
        """Plan and apply the transition for an authenticated notification."""
        return_url = self.store.build_return_url(order)
        reconciliation = self.plan(notification, order, return_url)
        return self.apply(reconciliation, order)
