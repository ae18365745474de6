"""Background agent rendering restock notifications and routing taps."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)

DEFAULT_ICON = "/icon-192x192.png"
DEFAULT_VIBRATE_PATTERN = (200, 100, 200)

CLICK_FOCUSED = "focused"
CLICK_OPENED = "opened"
CLICK_IGNORED = "ignored"


@dataclass(frozen=True)
class NotificationOptions:
    body: str
    data: dict[str, Any]
    icon: str = DEFAULT_ICON
    badge: str = DEFAULT_ICON
    vibrate: tuple[int, ...] = DEFAULT_VIBRATE_PATTERN


class DisplayedNotification(Protocol):
    data: Mapping[str, Any]

    def close(self) -> None: ...


class NotificationSurface(Protocol):
    def show_notification(self, title: str, options: NotificationOptions) -> Any: ...


class WindowClient(Protocol):
    url: str

    def focus(self) -> Any: ...


class WindowClients(Protocol):
    def match_all(self) -> Iterable[WindowClient]: ...

    def open_window(self, url: str) -> Any: ...


@dataclass
class ClickResult:
    action: str
    url: str | None = None
    client: Any = field(default=None, repr=False)


def product_url(origin: str, product_id: str) -> str:
    """Return the canonical in-app URL of ``product_id``."""

    return f"{origin.rstrip('/')}/products/{quote(str(product_id), safe='')}"


def _parse_payload(data: bytes | str | Mapping[str, Any] | None) -> Mapping[str, Any] | None:
    if data is None:
        return None
    if isinstance(data, Mapping):
        return data
    if isinstance(data, (bytes, bytearray)):
        data = bytes(data).decode("utf-8")
    if not isinstance(data, str):
        return None
    if not data.strip():
        return None
    parsed = json.loads(data)
    return parsed if isinstance(parsed, Mapping) else None


class NotificationReceiver:
    """Handle ``push`` and ``notificationclick`` events for restock alerts."""

    def __init__(
        self,
        surface: NotificationSurface,
        clients: WindowClients,
        *,
        origin: str,
        title: str,
    ) -> None:
        self._surface = surface
        self._clients = clients
        self._origin = origin
        self._title = title

    def handle_push(self, data: bytes | str | Mapping[str, Any] | None) -> Any:
        """Show a notification for a decrypted push payload.

        Events without a usable payload are ignored; this method never raises.
        """

        try:
            payload = _parse_payload(data)
        except (UnicodeDecodeError, ValueError, RecursionError):
            logger.warning("Ignoring push event with an unreadable payload")
            return None
        if payload is None:
            return None

        product_id = payload.get("productId")
        if product_id in (None, ""):
            logger.warning("Ignoring push event without productId")
            return None

        options = NotificationOptions(
            body=str(payload.get("text") or ""),
            data={"productId": str(product_id)},
        )
        try:
            return self._surface.show_notification(self._title, options)
        except Exception:
            logger.exception("Could not display restock notification")
            return None

    def handle_click(self, notification: DisplayedNotification) -> ClickResult:
        """Close ``notification`` and bring its product page to the front.

        An open window already showing the product is focused; otherwise a new
        window is opened. Never both.
        """

        notification.close()
        product_id = (notification.data or {}).get("productId")
        if product_id in (None, ""):
            return ClickResult(action=CLICK_IGNORED)

        url = product_url(self._origin, product_id)
        for client in self._clients.match_all():
            if client.url == url:
                return ClickResult(action=CLICK_FOCUSED, url=url, client=client.focus())
        return ClickResult(action=CLICK_OPENED, url=url, client=self._clients.open_window(url))


__all__ = [
    "CLICK_FOCUSED",
    "CLICK_IGNORED",
    "CLICK_OPENED",
    "ClickResult",
    "DisplayedNotification",
    "NotificationOptions",
    "NotificationReceiver",
    "NotificationSurface",
    "WindowClient",
    "WindowClients",
    "product_url",
]
