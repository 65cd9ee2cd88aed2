"""Inbound Pay Now notifications: typed model and payload parser."""

from paynow.notification.notification import CardDetail, Notification, OutcomeCategory
from paynow.notification.parser import parse

__all__ = ["CardDetail", "Notification", "OutcomeCategory", "parse"]
