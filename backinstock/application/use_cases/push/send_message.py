"""Immediate delivery of a single push message to one subscription."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from backinstock.application.use_cases.stock_notifications.validators import (
    parse_subscription,
)
from backinstock.config import Settings, get_settings
from backinstock.domain.entities import Subscription
from backinstock.infrastructure.push import WebPushClient

from .dispatcher import PushSender, deliver_with_retry


def send_push_message(
    subscription: Mapping[str, Any] | Subscription | None,
    message: Mapping[str, Any],
    *,
    settings: Settings | None = None,
    sender: PushSender | None = None,
) -> int:
    """Encrypt ``message`` as JSON and deliver it to ``subscription``.

    Returns the push service status code. Delivery errors propagate so that the
    caller decides how to report them.
    """

    settings = settings or get_settings()
    validated = parse_subscription(subscription)
    payload = json.dumps(dict(message), separators=(",", ":"), ensure_ascii=False).encode(
        "utf-8"
    )
    status_code, _ = deliver_with_retry(
        sender or WebPushClient.from_settings(settings),
        validated,
        payload,
        max_attempts=settings.push_max_attempts,
        backoff_seconds=settings.push_backoff_seconds,
        backoff_factor=settings.push_backoff_factor,
    )
    return status_code
