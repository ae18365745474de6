"""Repository implementations for infrastructure layer."""

from .stock_notification_repository import StockNotificationRepository

__all__ = ["StockNotificationRepository"]
