"""Dispatch cycle delivering restock push messages to pending subscribers."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError

from backinstock.application.use_cases.stock_notifications.validators import (
    parse_subscription,
)
from backinstock.config import Settings
from backinstock.domain.entities import NotificationPayload, StockNotification, Subscription
from backinstock.domain.exceptions import (
    DeliveryPermanentError,
    DeliveryTransientError,
    InvalidSubscriptionError,
    NotFoundError,
)
from backinstock.infrastructure.push import WebPushClient, shorten_endpoint
from backinstock.utils import utc_now

logger = logging.getLogger(__name__)

OUTCOME_DELIVERED = "delivered"
OUTCOME_GONE = "gone"
OUTCOME_FAILED = "failed"
OUTCOME_DEFERRED = "deferred"


class PushSender(Protocol):
    def send(self, subscription: Subscription, payload: bytes) -> int: ...


class StockNotificationStore(Protocol):
    def list_pending(self, product_id: str) -> Sequence[StockNotification]: ...

    def mark_sent(self, request_id: str) -> bool: ...

    def rollback(self) -> None: ...


@dataclass
class DeliveryResult:
    """Outcome of delivering one request during a cycle."""

    request_id: str
    outcome: str
    endpoint: str | None = None
    status_code: int | None = None
    attempts: int = 0
    error: str | None = None


@dataclass
class DispatchReport:
    """Summary of a restock dispatch cycle."""

    product_id: str
    total: int = 0
    sent: list[str] = field(default_factory=list)
    stale_endpoints: list[str] = field(default_factory=list)
    deferred: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    disabled: bool = False


def restock_text(product_name: str | None) -> str:
    """Return the notification body announcing that a product is available."""

    name = (product_name or "").strip()
    if name:
        return f"{name} is back in stock!"
    return "An item you asked about is back in stock!"


def deliver_with_retry(
    sender: PushSender,
    subscription: Subscription,
    payload: bytes,
    *,
    max_attempts: int = 3,
    backoff_seconds: float = 0.5,
    backoff_factor: float = 2.0,
    sleep: Callable[[float], None] = time.sleep,
) -> tuple[int, int]:
    """Send ``payload``, retrying transient failures with exponential backoff.

    Returns ``(status_code, attempts)``. The last :class:`DeliveryTransientError`
    is re-raised once ``max_attempts`` is exhausted; permanent errors are raised
    immediately. Raised delivery errors carry the attempt count in ``attempts``.
    """

    delay = backoff_seconds
    endpoint = shorten_endpoint(subscription.endpoint)
    for attempt in range(1, max_attempts + 1):
        try:
            return sender.send(subscription, payload), attempt
        except DeliveryTransientError as exc:
            exc.attempts = attempt
            if attempt >= max_attempts:
                raise
            logger.warning(
                "Push attempt %s/%s to %s failed: %s. Retrying in %.1fs",
                attempt,
                max_attempts,
                endpoint,
                exc,
                delay,
            )
            sleep(delay)
            delay *= backoff_factor
        except DeliveryPermanentError as exc:
            exc.attempts = attempt
            raise
    raise RuntimeError("max_attempts must be at least 1")


class PushDispatcher:
    """Deliver one product's pending requests and converge their status.

    Deliveries run on a bounded thread pool and only perform network I/O; every
    status write happens on the calling thread as results come in, so the store
    is never shared between threads. The dispatcher keeps no state between
    cycles.
    """

    def __init__(
        self,
        store: StockNotificationStore,
        sender: PushSender | None = None,
        *,
        title: str,
        sender_factory: Callable[[], PushSender] | None = None,
        max_workers: int = 10,
        max_attempts: int = 3,
        backoff_seconds: float = 0.5,
        backoff_factor: float = 2.0,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], datetime] = utc_now,
        on_stale_subscription: Callable[[str], None] | None = None,
    ) -> None:
        if sender is None and sender_factory is None:
            raise ValueError("Either sender or sender_factory is required")
        self._store = store
        self._sender = sender
        self._sender_factory = sender_factory
        self._title = title
        self._max_workers = max(1, max_workers)
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = backoff_seconds
        self._backoff_factor = backoff_factor
        self._sleep = sleep
        self._clock = clock
        self._on_stale_subscription = on_stale_subscription or _log_stale_subscription

    @classmethod
    def from_settings(
        cls,
        store: StockNotificationStore,
        settings: Settings,
        *,
        sender: PushSender | None = None,
        on_stale_subscription: Callable[[str], None] | None = None,
    ) -> "PushDispatcher":
        return cls(
            store,
            sender,
            title=settings.store_name,
            sender_factory=lambda: WebPushClient.from_settings(settings),
            max_workers=settings.push_max_workers,
            max_attempts=settings.push_max_attempts,
            backoff_seconds=settings.push_backoff_seconds,
            backoff_factor=settings.push_backoff_factor,
            on_stale_subscription=on_stale_subscription,
        )

    def dispatch(self, product_id: str, text: str) -> DispatchReport:
        """Run one delivery cycle for ``product_id``.

        The sender is only built once there is something to deliver.
        """

        pending = list(self._store.list_pending(product_id))
        report = DispatchReport(product_id=product_id, total=len(pending))
        if not pending:
            logger.info("No pending stock notifications for product %s", product_id)
            return report

        sender = self._sender or self._sender_factory()
        payload = NotificationPayload(
            title=self._title, text=text, product_id=product_id
        ).to_bytes()

        flagged: set[str] = set()
        workers = min(self._max_workers, len(pending))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="push") as executor:
            futures = [
                executor.submit(self._deliver_request, sender, request, payload)
                for request in pending
            ]
            for future in as_completed(futures):
                self._record(future.result(), report, flagged)

        logger.info(
            "Restock dispatch for product %s: total=%s sent=%s stale=%s deferred=%s failed=%s",
            product_id,
            report.total,
            len(report.sent),
            len(report.stale_endpoints),
            len(report.deferred),
            len(report.failed),
        )
        return report

    def _deliver_request(
        self, sender: PushSender, request: StockNotification, payload: bytes
    ) -> DeliveryResult:
        request_id = request.id or ""
        try:
            subscription = parse_subscription(request.subscription)
        except InvalidSubscriptionError as exc:
            return DeliveryResult(request_id, OUTCOME_FAILED, error=str(exc))

        endpoint = subscription.endpoint
        if subscription.is_expired(self._clock()):
            return DeliveryResult(
                request_id, OUTCOME_FAILED, endpoint=endpoint, error="Subscription expired"
            )

        try:
            status_code, attempts = deliver_with_retry(
                sender,
                subscription,
                payload,
                max_attempts=self._max_attempts,
                backoff_seconds=self._backoff_seconds,
                backoff_factor=self._backoff_factor,
                sleep=self._sleep,
            )
        except DeliveryTransientError as exc:
            return DeliveryResult(
                request_id,
                OUTCOME_DEFERRED,
                endpoint=endpoint,
                status_code=exc.status_code,
                attempts=exc.attempts,
                error=str(exc),
            )
        except DeliveryPermanentError as exc:
            return DeliveryResult(
                request_id,
                OUTCOME_GONE if exc.gone else OUTCOME_FAILED,
                endpoint=endpoint,
                status_code=exc.status_code,
                attempts=exc.attempts,
                error=str(exc),
            )
        except (InvalidSubscriptionError, ValueError) as exc:
            return DeliveryResult(request_id, OUTCOME_FAILED, endpoint=endpoint, error=str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error delivering stock notification %s", request_id)
            return DeliveryResult(request_id, OUTCOME_DEFERRED, endpoint=endpoint, error=str(exc))

        return DeliveryResult(
            request_id,
            OUTCOME_DELIVERED,
            endpoint=endpoint,
            status_code=status_code,
            attempts=attempts,
        )

    def _record(self, result: DeliveryResult, report: DispatchReport, flagged: set[str]) -> None:
        endpoint = shorten_endpoint(result.endpoint) if result.endpoint else "-"

        if result.outcome == OUTCOME_GONE and result.endpoint not in flagged:
            flagged.add(result.endpoint or "")
            self._flag_stale(result, report)

        if result.outcome == OUTCOME_DEFERRED:
            logger.warning(
                "Stock notification %s stays pending after %s attempt(s) to %s: %s",
                result.request_id,
                result.attempts,
                endpoint,
                result.error,
            )
            report.deferred.append(result.request_id)
            return

        if result.outcome == OUTCOME_FAILED:
            logger.error(
                "Stock notification %s could not be delivered to %s: %s",
                result.request_id,
                endpoint,
                result.error,
            )

        try:
            self._store.mark_sent(result.request_id)
        except NotFoundError:
            logger.warning(
                "Stock notification %s disappeared before it could be marked sent",
                result.request_id,
            )
            return
        except SQLAlchemyError:
            logger.exception(
                "Could not mark stock notification %s as sent; it stays pending",
                result.request_id,
            )
            self._store.rollback()
            report.deferred.append(result.request_id)
            return

        report.sent.append(result.request_id)
        if result.outcome == OUTCOME_FAILED:
            report.failed.append(result.request_id)

    def _flag_stale(self, result: DeliveryResult, report: DispatchReport) -> None:
        logger.info(
            "Push endpoint %s is gone (status %s); flagging for cleanup",
            shorten_endpoint(result.endpoint or ""),
            result.status_code,
        )
        report.stale_endpoints.append(result.endpoint or "")
        try:
            self._on_stale_subscription(result.endpoint or "")
        except Exception:  # noqa: BLE001
            logger.exception("Stale subscription callback failed for %s", result.request_id)


def _log_stale_subscription(endpoint: str) -> None:
    logger.warning("Stale push subscription flagged for cleanup: %s", shorten_endpoint(endpoint))


__all__ = [
    "DeliveryResult",
    "DispatchReport",
    "OUTCOME_DEFERRED",
    "OUTCOME_DELIVERED",
    "OUTCOME_FAILED",
    "OUTCOME_GONE",
    "PushDispatcher",
    "PushSender",
    "StockNotificationStore",
    "deliver_with_retry",
    "restock_text",
]
