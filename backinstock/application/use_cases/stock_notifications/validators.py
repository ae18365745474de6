"""Validation helpers for push subscriptions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from backinstock.domain.entities import Subscription, SubscriptionKeys
from backinstock.domain.exceptions import InvalidSubscriptionError


def _required_text(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    text = value.strip()
    return text or None


def parse_subscription(data: Mapping[str, Any] | Subscription | None) -> Subscription:
    """Return a :class:`Subscription` or raise ``InvalidSubscriptionError``.

    ``data`` follows the platform ``PushSubscriptionJSON`` shape:
    ``{"endpoint": ..., "expirationTime": ..., "keys": {"p256dh": ..., "auth": ...}}``.
    """

    if isinstance(data, Subscription):
        data = data.to_dict()
    if not isinstance(data, Mapping):
        raise InvalidSubscriptionError("Invalid push subscription")

    endpoint = _required_text(data.get("endpoint"))
    keys = data.get("keys")
    if not isinstance(keys, Mapping):
        keys = {}
    p256dh = _required_text(keys.get("p256dh"))
    auth = _required_text(keys.get("auth"))

    missing = [
        name
        for name, value in (("endpoint", endpoint), ("keys.p256dh", p256dh), ("keys.auth", auth))
        if value is None
    ]
    if missing:
        raise InvalidSubscriptionError(
            "Invalid push subscription: missing " + ", ".join(missing)
        )

    expiration_time = data.get("expirationTime")
    if expiration_time is not None:
        if isinstance(expiration_time, bool) or not isinstance(expiration_time, (int, float)):
            raise InvalidSubscriptionError("Invalid push subscription: bad expirationTime")
        expiration_time = int(expiration_time)

    return Subscription(
        endpoint=endpoint,
        keys=SubscriptionKeys(p256dh=p256dh, auth=auth),
        expiration_time=expiration_time,
    )


__all__ = ["parse_subscription"]
