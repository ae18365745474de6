"""Device side registration of back-in-stock push subscriptions.

The registrar runs inside the visitor's device runtime. Everything it needs
from that runtime is reached through :class:`PushPlatform`, so the same flow
drives a browser bridge in production and a scripted double in tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from backinstock.application.use_cases.stock_notifications.validators import (
    parse_subscription,
)
from backinstock.domain.entities import DeviceInfo, Subscription
from backinstock.domain.exceptions import PermissionDeniedError, UnsupportedPlatformError

logger = logging.getLogger(__name__)

PERMISSION_GRANTED = "granted"
PERMISSION_DENIED = "denied"

OPT_IN_SUBSCRIBED = "subscribed"
OPT_IN_UNAVAILABLE = "unavailable"
OPT_IN_DENIED = "denied"

DEFAULT_AGENT_SCRIPT = "/service-worker.js"
DEFAULT_AGENT_SCOPE = "/"

T = TypeVar("T")


class PlatformSubscription(Protocol):
    def unsubscribe(self) -> bool: ...


class PushManager(Protocol):
    def subscribe(
        self, *, user_visible_only: bool, application_server_key: str
    ) -> Mapping[str, Any]: ...

    def get_subscription(self) -> PlatformSubscription | None: ...


class Registration(Protocol):
    push_manager: PushManager


class PushPlatform(Protocol):
    def supports_background_agent(self) -> bool: ...

    def supports_notifications(self) -> bool: ...

    def supports_push(self) -> bool: ...

    def register_agent(self, script_url: str, *, scope: str) -> Registration: ...

    def request_permission(self) -> str: ...


@dataclass
class OptInResult(Generic[T]):
    """Outcome of the opt-in flow, suitable for driving the storefront UI."""

    status: str
    subscription: Subscription | None = None
    request: T | None = None
    reason: str | None = None

    @property
    def subscribed(self) -> bool:
        return self.status == OPT_IN_SUBSCRIBED


class SubscriptionRegistrar:
    """Obtain permission and a validated push subscription for this device."""

    def __init__(
        self,
        platform: PushPlatform,
        application_server_key: str,
        *,
        agent_script_url: str = DEFAULT_AGENT_SCRIPT,
        agent_scope: str = DEFAULT_AGENT_SCOPE,
    ) -> None:
        self._platform = platform
        self._application_server_key = application_server_key
        self._agent_script_url = agent_script_url
        self._agent_scope = agent_scope

    def is_supported(self) -> bool:
        """Whether background agents, notifications and push are all available."""

        return (
            self._platform.supports_background_agent()
            and self._platform.supports_notifications()
            and self._platform.supports_push()
        )

    def register_device(self) -> Registration:
        """Activate the background push agent on this device."""

        if not (self._platform.supports_background_agent() and self._platform.supports_push()):
            raise UnsupportedPlatformError("This device cannot host a background push agent")
        try:
            return self._platform.register_agent(self._agent_script_url, scope=self._agent_scope)
        except Exception:
            logger.exception("Background push agent registration failed")
            raise

    def request_permission(self) -> str:
        """Ask the visitor for permission to show notifications."""

        if not self._platform.supports_notifications():
            raise UnsupportedPlatformError("Notifications are not supported on this device")
        permission = self._platform.request_permission()
        if permission != PERMISSION_GRANTED:
            raise PermissionDeniedError("Notification permission was denied")
        return PERMISSION_GRANTED

    def subscribe(self, registration: Registration) -> Subscription:
        """Create a push subscription addressable only with our application key.

        The platform answer is validated before it is returned, so a subscription
        without endpoint or keys never reaches the store.
        """

        raw = registration.push_manager.subscribe(
            user_visible_only=True,
            application_server_key=self._application_server_key,
        )
        try:
            return parse_subscription(raw)
        except ValueError as exc:
            logger.error("Failed to subscribe to push notifications: %s", exc)
            raise

    def unsubscribe(self, registration: Registration) -> None:
        """Revoke the current subscription, if there is one."""

        existing = registration.push_manager.get_subscription()
        if existing is None:
            return
        existing.unsubscribe()

    def opt_in(
        self,
        product_id: str,
        device_info: DeviceInfo,
        submit: Callable[[str, DeviceInfo, Subscription], T],
    ) -> OptInResult[T]:
        """Run the full opt-in flow and hand the subscription to ``submit``.

        Unsupported devices and refused permissions degrade to an unavailable or
        denied result so the page can hide or disable the offer.
        """

        try:
            registration = self.register_device()
            self.request_permission()
        except UnsupportedPlatformError as exc:
            logger.info("Back-in-stock alerts unavailable: %s", exc)
            return OptInResult(status=OPT_IN_UNAVAILABLE, reason=str(exc))
        except PermissionDeniedError as exc:
            logger.info("Back-in-stock alerts declined: %s", exc)
            return OptInResult(status=OPT_IN_DENIED, reason=str(exc))

        subscription = self.subscribe(registration)
        request = submit(product_id, device_info, subscription)
        return OptInResult(status=OPT_IN_SUBSCRIBED, subscription=subscription, request=request)


__all__ = [
    "OPT_IN_DENIED",
    "OPT_IN_SUBSCRIBED",
    "OPT_IN_UNAVAILABLE",
    "OptInResult",
    "PERMISSION_DENIED",
    "PERMISSION_GRANTED",
    "PlatformSubscription",
    "PushManager",
    "PushPlatform",
    "Registration",
    "SubscriptionRegistrar",
]
