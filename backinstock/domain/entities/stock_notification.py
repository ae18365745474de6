"""Domain entity representing a visitor's back-in-stock request."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .subscription import Subscription

STOCK_NOTIFICATION_STATUS_PENDING = "pending"
STOCK_NOTIFICATION_STATUS_SENT = "sent"

STOCK_NOTIFICATION_STATUSES = (
    STOCK_NOTIFICATION_STATUS_PENDING,
    STOCK_NOTIFICATION_STATUS_SENT,
)


@dataclass(frozen=True)
class DeviceInfo:
    """Diagnostic metadata captured when the visitor opted in."""

    user_agent: str
    platform: str
    language: str

    def to_dict(self) -> dict[str, str]:
        return {
            "userAgent": self.user_agent,
            "platform": self.platform,
            "language": self.language,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "DeviceInfo":
        data = data or {}
        return cls(
            user_agent=str(data.get("userAgent") or ""),
            platform=str(data.get("platform") or ""),
            language=str(data.get("language") or ""),
        )


@dataclass
class StockNotification:
    """Request to be told when ``product_id`` is available again."""

    id: str | None
    product_id: str
    device_info: DeviceInfo
    subscription: Subscription | None
    status: str
    created_at: datetime | None

    @property
    def is_pending(self) -> bool:
        return self.status == STOCK_NOTIFICATION_STATUS_PENDING


__all__ = [
    "DeviceInfo",
    "StockNotification",
    "STOCK_NOTIFICATION_STATUS_PENDING",
    "STOCK_NOTIFICATION_STATUS_SENT",
    "STOCK_NOTIFICATION_STATUSES",
]
