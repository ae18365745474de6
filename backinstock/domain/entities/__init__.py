"""Domain entities exposed by the application."""

from .notification_payload import NotificationPayload
from .stock_notification import (
    STOCK_NOTIFICATION_STATUS_PENDING,
    STOCK_NOTIFICATION_STATUS_SENT,
    STOCK_NOTIFICATION_STATUSES,
    DeviceInfo,
    StockNotification,
)
from .subscription import Subscription, SubscriptionKeys

__all__ = [
    "DeviceInfo",
    "NotificationPayload",
    "StockNotification",
    "STOCK_NOTIFICATION_STATUS_PENDING",
    "STOCK_NOTIFICATION_STATUS_SENT",
    "STOCK_NOTIFICATION_STATUSES",
    "Subscription",
    "SubscriptionKeys",
]
