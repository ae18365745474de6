"""Domain entity representing a device push subscription."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from backinstock.utils import epoch_millis_to_datetime


@dataclass(frozen=True)
class SubscriptionKeys:
    """Key material a device hands out for message encryption."""

    p256dh: str
    auth: str


@dataclass(frozen=True)
class Subscription:
    """Push destination of a single device and browser installation."""

    endpoint: str
    keys: SubscriptionKeys
    expiration_time: int | None = None

    def expires_at(self) -> datetime | None:
        """Return ``expiration_time`` as a UTC datetime, if any."""

        return epoch_millis_to_datetime(self.expiration_time)

    def is_expired(self, now: datetime) -> bool:
        """Whether the push service no longer accepts messages for this endpoint."""

        expires_at = self.expires_at()
        return expires_at is not None and expires_at <= now

    def to_dict(self) -> dict[str, Any]:
        """Return the platform ``PushSubscriptionJSON`` representation."""

        return {
            "endpoint": self.endpoint,
            "expirationTime": self.expiration_time,
            "keys": {"p256dh": self.keys.p256dh, "auth": self.keys.auth},
        }


__all__ = ["Subscription", "SubscriptionKeys"]
