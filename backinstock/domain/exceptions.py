"""Errors raised by the back-in-stock notification pipeline."""

from __future__ import annotations


class UnsupportedPlatformError(RuntimeError):
    """The device cannot host a background push agent or show notifications."""


class PermissionDeniedError(RuntimeError):
    """The visitor declined the notification permission prompt."""


class InvalidSubscriptionError(ValueError):
    """A subscription is missing its endpoint or key material."""


class NotFoundError(LookupError):
    """No stock notification request exists for the given identifier."""

    def __init__(self, request_id: str) -> None:
        self.request_id = request_id
        super().__init__(f"Stock notification request {request_id} not found")


class VapidConfigurationError(RuntimeError):
    """The application server keys are missing or inconsistent."""


class DeliveryError(RuntimeError):
    """Base class for failures reported while posting to a push endpoint."""

    def __init__(self, endpoint: str, message: str, *, status_code: int | None = None) -> None:
        self.endpoint = endpoint
        self.status_code = status_code
        self.attempts = 1
        super().__init__(message)


class DeliveryTransientError(DeliveryError):
    """Rate limiting, server errors or timeouts; the attempt may be retried."""


class DeliveryPermanentError(DeliveryError):
    """The push service rejected the message for good.

    ``gone`` is set when the endpoint itself no longer exists (HTTP 404/410) and the
    subscription should be cleaned up.
    """

    def __init__(
        self,
        endpoint: str,
        message: str,
        *,
        status_code: int | None = None,
        gone: bool = False,
    ) -> None:
        super().__init__(endpoint, message, status_code=status_code)
        self.gone = gone


__all__ = [
    "DeliveryError",
    "DeliveryPermanentError",
    "DeliveryTransientError",
    "InvalidSubscriptionError",
    "NotFoundError",
    "PermissionDeniedError",
    "UnsupportedPlatformError",
    "VapidConfigurationError",
]
