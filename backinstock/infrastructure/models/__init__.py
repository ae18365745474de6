"""ORM models used by the application infrastructure."""

from .stock_notification import StockNotificationModel

__all__ = ["StockNotificationModel"]
