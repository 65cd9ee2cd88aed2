"""Notification authentication, order reconciliation and callback dispatch."""

from paynow.config import PayNowSettings
from paynow.orders import OrderStore
from paynow.reconciliation.authenticator import ErrorKind, ResponseAuthenticator, ValidationResult
from paynow.reconciliation.dispatcher import CallbackDispatcher, InboundDelivery, OutboundAction
from paynow.reconciliation.reconciler import OrderReconciler, Reconciliation
from paynow.verifier import ProcessorVerifier


def build_dispatcher(
    store: OrderStore,
    verifier: ProcessorVerifier,
    settings: PayNowSettings,
) -> CallbackDispatcher:
    """Wire the stateless services into a dispatcher."""
    return CallbackDispatcher(
        store=store,
        authenticator=ResponseAuthenticator(verifier, settings),
        reconciler=OrderReconciler(store),
        settings=settings,
    )


__all__ = [
    "CallbackDispatcher",
    "ErrorKind",
    "InboundDelivery",
    "OrderReconciler",
    "OutboundAction",
    "Reconciliation",
    "ResponseAuthenticator",
    "ValidationResult",
    "build_dispatcher",
]
