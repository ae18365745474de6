"""Web Push delivery through :func:`pywebpush.webpush`."""

from __future__ import annotations

import logging
from typing import Any

import requests
from pywebpush import WebPushException, webpush

from backinstock.config import Settings
from backinstock.domain.entities import Subscription
from backinstock.domain.exceptions import DeliveryPermanentError, DeliveryTransientError

from .encryption import CONTENT_ENCODING, MAX_PAYLOAD_SIZE, validate_receiver_keys
from .vapid import VapidCredentials

logger = logging.getLogger(__name__)

GONE_STATUS_CODES = frozenset({404, 410})
RATE_LIMITED_STATUS_CODE = 429


def shorten_endpoint(endpoint: str, length: int = 60) -> str:
    """Return a log friendly prefix of ``endpoint``; the tail identifies a device."""

    return endpoint if len(endpoint) <= length else endpoint[:length] + "..."


class WebPushClient:
    """Encrypt and deliver a single message per call.

    Each :meth:`send` is one attempt. Failures are reported through
    :class:`DeliveryTransientError` (retry later) or
    :class:`DeliveryPermanentError` (do not retry; ``gone`` for 404/410).
    """

    def __init__(
        self,
        credentials: VapidCredentials,
        *,
        ttl_seconds: int = 24 * 60 * 60,
        urgency: str = "normal",
        timeout_seconds: float = 5.0,
        session: Any | None = None,
    ) -> None:
        self._credentials = credentials
        self._ttl_seconds = ttl_seconds
        self._urgency = urgency
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Settings, *, session: Any | None = None) -> "WebPushClient":
        return cls(
            VapidCredentials.from_settings(settings),
            ttl_seconds=settings.push_ttl_seconds,
            urgency=settings.push_urgency,
            timeout_seconds=settings.push_timeout_seconds,
            session=session,
        )

    @property
    def public_key(self) -> str:
        return self._credentials.public_key

    def send(self, subscription: Subscription, payload: bytes) -> int:
        """Deliver ``payload`` to ``subscription`` and return the response status.

        Raises ``InvalidSubscriptionError`` when the key material cannot be used.
        """

        if len(payload) > MAX_PAYLOAD_SIZE:
            raise ValueError(
                f"Push payload is {len(payload)} bytes; the limit is {MAX_PAYLOAD_SIZE}"
            )
        validate_receiver_keys(subscription.keys.p256dh, subscription.keys.auth)
        endpoint = subscription.endpoint

        try:
            response = webpush(
                subscription_info=subscription.to_dict(),
                data=payload,
                vapid_private_key=self._credentials.vapid,
                vapid_claims=self._credentials.claims_for(endpoint),
                content_encoding=CONTENT_ENCODING,
                ttl=self._ttl_seconds,
                timeout=self._timeout,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Urgency": self._urgency,
                },
                requests_session=self._session,
            )
        except WebPushException as exc:
            if exc.response is None:
                raise DeliveryPermanentError(endpoint, f"Push request failed: {exc}") from exc
            status_code = exc.response.status_code
            if 200 <= status_code < 300:
                return status_code
            raise _classify(endpoint, status_code, exc.response) from exc
        except requests.Timeout as exc:
            raise DeliveryTransientError(endpoint, "Push service timed out") from exc
        except requests.ConnectionError as exc:
            raise DeliveryTransientError(endpoint, f"Push service unreachable: {exc}") from exc
        except requests.RequestException as exc:
            raise DeliveryPermanentError(endpoint, f"Push request failed: {exc}") from exc

        logger.debug(
            "Push accepted with status %s for %s",
            response.status_code,
            shorten_endpoint(endpoint),
        )
        return response.status_code


def _classify(
    endpoint: str, status_code: int, response: Any
) -> DeliveryPermanentError | DeliveryTransientError:
    detail = (getattr(response, "text", "") or "").strip()[:200] or "no details"
    if status_code in GONE_STATUS_CODES:
        return DeliveryPermanentError(
            endpoint,
            f"Push endpoint gone (status {status_code})",
            status_code=status_code,
            gone=True,
        )
    if status_code == RATE_LIMITED_STATUS_CODE or status_code >= 500:
        return DeliveryTransientError(
            endpoint,
            f"Push service responded with status {status_code}: {detail}",
            status_code=status_code,
        )
    return DeliveryPermanentError(
        endpoint,
        f"Push service rejected the message with status {status_code}: {detail}",
        status_code=status_code,
    )


__all__ = ["GONE_STATUS_CODES", "WebPushClient", "shorten_endpoint"]
