"""Use cases delivering back-in-stock push messages."""

from .dispatcher import (
    DeliveryResult,
    DispatchReport,
    PushDispatcher,
    deliver_with_retry,
    restock_text,
)
from .restock import notify_restock
from .send_message import send_push_message

__all__ = [
    "DeliveryResult",
    "DispatchReport",
    "PushDispatcher",
    "deliver_with_retry",
    "notify_restock",
    "restock_text",
    "send_push_message",
]
