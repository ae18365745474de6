"""Aggregate application use cases."""

from .push import notify_restock, send_push_message
from .stock_notifications import create_request, has_registered, list_pending, mark_sent

__all__ = [
    "create_request",
    "has_registered",
    "list_pending",
    "mark_sent",
    "notify_restock",
    "send_push_message",
]
