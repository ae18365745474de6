"""Tests for the restock dispatch cycle."""

from __future__ import annotations

import json

import pytest
from sqlalchemy.exc import OperationalError

from backinstock.config import Settings
from backinstock.application.use_cases.push import (
    PushDispatcher,
    deliver_with_retry,
    notify_restock,
    restock_text,
    send_push_message,
)
from backinstock.application.use_cases.stock_notifications import (
    create_request,
    get_request,
    list_pending,
)
from backinstock.domain.entities import (
    STOCK_NOTIFICATION_STATUS_PENDING,
    STOCK_NOTIFICATION_STATUS_SENT,
    StockNotification,
    Subscription,
    SubscriptionKeys,
)
from backinstock.domain.exceptions import (
    DeliveryPermanentError,
    DeliveryTransientError,
    InvalidSubscriptionError,
)
from backinstock.infrastructure.repositories import StockNotificationRepository


class InMemoryStore:
    """Store double keeping requests in a list; ``mark_sent`` can be made to fail."""

    def __init__(self, requests, failing_ids=()) -> None:
        self.requests = {request.id: request for request in requests}
        self.failing_ids = set(failing_ids)
        self.rollbacks = 0

    def list_pending(self, product_id):
        return [
            r for r in self.requests.values() if r.product_id == product_id and r.is_pending
        ]

    def mark_sent(self, request_id) -> bool:
        if request_id in self.failing_ids:
            raise OperationalError("UPDATE stock_notification", {}, Exception("database is locked"))
        request = self.requests[request_id]
        transitioned = request.is_pending
        request.status = STOCK_NOTIFICATION_STATUS_SENT
        return transitioned

    def rollback(self) -> None:
        self.rollbacks += 1


def _pending(request_id: str, endpoint: str, device_info) -> StockNotification:
    return StockNotification(
        id=request_id,
        product_id="sku-1",
        device_info=device_info,
        subscription=Subscription(endpoint, SubscriptionKeys("p", "a")),
        status=STOCK_NOTIFICATION_STATUS_PENDING,
        created_at=None,
    )


def _gone(endpoint: str) -> DeliveryPermanentError:
    return DeliveryPermanentError(endpoint, "gone", status_code=410, gone=True)


def _timeout(endpoint: str) -> DeliveryTransientError:
    return DeliveryTransientError(endpoint, "Push service timed out")


def _register(session, device_info, make_subscription, endpoints, product_id="sku-1"):
    return [
        create_request(
            session,
            product_id=product_id,
            device_info=device_info,
            subscription=make_subscription(endpoint),
        )
        for endpoint in endpoints
    ]


def _dispatcher(session, sender, **kwargs) -> PushDispatcher:
    kwargs.setdefault("sleep", lambda _: None)
    return PushDispatcher(
        StockNotificationRepository(session), sender, title="Supermom Store", **kwargs
    )


def test_restock_text() -> None:
    assert restock_text("Baby Carrier") == "Baby Carrier is back in stock!"
    assert restock_text("  ") == "An item you asked about is back in stock!"


def test_every_request_is_sent_and_gone_endpoint_flagged_once(
    session, device_info, make_subscription, scripted_sender
) -> None:
    endpoints = [f"https://push.example/device-{i}" for i in range(5)]
    requests = _register(session, device_info, make_subscription, endpoints)
    stale = endpoints[2]
    sender = scripted_sender({stale: [_gone(stale)]})
    flagged: list[str] = []

    report = _dispatcher(
        session, sender, max_workers=3, on_stale_subscription=flagged.append
    ).dispatch("sku-1", "Baby Carrier is back in stock!")

    assert report.total == 5
    assert sorted(report.sent) == sorted(r.id for r in requests)
    assert report.stale_endpoints == [stale]
    assert flagged == [stale]
    assert sender.calls[stale] == 1
    assert list_pending(session, "sku-1") == []
    assert all(get_request(session, r.id).status == STOCK_NOTIFICATION_STATUS_SENT for r in requests)


def test_payload_carries_title_text_and_product(
    session, device_info, make_subscription, scripted_sender
) -> None:
    _register(session, device_info, make_subscription, ["https://push.example/a"])
    sender = scripted_sender()

    _dispatcher(session, sender).dispatch("sku-1", "Baby Carrier is back in stock!")

    assert json.loads(sender.payloads[0]) == {
        "title": "Supermom Store",
        "text": "Baby Carrier is back in stock!",
        "productId": "sku-1",
    }


def test_two_timeouts_then_success_is_sent(
    session, device_info, make_subscription, scripted_sender
) -> None:
    endpoint = "https://push.example/flaky"
    (request,) = _register(session, device_info, make_subscription, [endpoint])
    sender = scripted_sender({endpoint: [_timeout(endpoint), _timeout(endpoint), 201]})
    delays: list[float] = []

    report = _dispatcher(session, sender, sleep=delays.append).dispatch("sku-1", "back")

    assert report.sent == [request.id]
    assert sender.calls[endpoint] == 3
    assert delays == [0.5, 1.0]
    assert get_request(session, request.id).status == STOCK_NOTIFICATION_STATUS_SENT


def test_request_that_never_succeeds_stays_pending(
    session, device_info, make_subscription, scripted_sender
) -> None:
    endpoint = "https://push.example/down"
    (request,) = _register(session, device_info, make_subscription, [endpoint])
    sender = scripted_sender({endpoint: [_timeout(endpoint)]})

    report = _dispatcher(session, sender, max_attempts=3).dispatch("sku-1", "back")

    assert report.deferred == [request.id]
    assert report.sent == []
    assert sender.calls[endpoint] == 3
    assert get_request(session, request.id).status == STOCK_NOTIFICATION_STATUS_PENDING

    # The next cycle picks it up again.
    sender = scripted_sender()
    assert _dispatcher(session, sender).dispatch("sku-1", "back").sent == [request.id]


def test_one_failure_does_not_block_the_batch(
    session, device_info, make_subscription, scripted_sender
) -> None:
    rejected = "https://push.example/rejected"
    broken = "https://push.example/broken"
    healthy = "https://push.example/healthy"
    requests = _register(session, device_info, make_subscription, [rejected, broken, healthy])
    sender = scripted_sender(
        {
            rejected: [DeliveryPermanentError(rejected, "bad request", status_code=400)],
            broken: [RuntimeError("socket exploded")],
        }
    )

    report = _dispatcher(session, sender).dispatch("sku-1", "back")

    rejected_req, broken_req, healthy_req = requests
    assert sorted(report.sent) == sorted([rejected_req.id, healthy_req.id])
    assert report.failed == [rejected_req.id]
    assert report.deferred == [broken_req.id]
    assert report.stale_endpoints == []
    assert [n.id for n in list_pending(session, "sku-1")] == [broken_req.id]


def test_malformed_and_expired_subscriptions_are_closed_without_delivery(
    session, device_info, make_subscription, scripted_sender
) -> None:
    repository = StockNotificationRepository(session)
    malformed = repository.create(
        StockNotification(
            id=None,
            product_id="sku-1",
            device_info=device_info,
            subscription=None,
            status=STOCK_NOTIFICATION_STATUS_PENDING,
            created_at=None,
        )
    )
    expired = create_request(
        session,
        product_id="sku-1",
        device_info=device_info,
        subscription=make_subscription("https://push.example/old", expirationTime=1_000),
    )
    sender = scripted_sender()

    report = _dispatcher(session, sender).dispatch("sku-1", "back")

    assert sorted(report.failed) == sorted([malformed.id, expired.id])
    assert sorted(report.sent) == sorted([malformed.id, expired.id])
    assert sender.calls == {}
    assert list_pending(session, "sku-1") == []


def test_dispatch_without_pending_requests(session, scripted_sender) -> None:
    sender = scripted_sender()

    report = _dispatcher(session, sender).dispatch("sku-404", "back")

    assert report.total == 0
    assert sender.calls == {}


def test_deliver_with_retry_does_not_retry_permanent_errors(scripted_sender) -> None:
    endpoint = "https://push.example/gone"
    subscription = Subscription(endpoint, SubscriptionKeys("p", "a"))
    sender = scripted_sender({endpoint: [_gone(endpoint)]})

    with pytest.raises(DeliveryPermanentError) as excinfo:
        deliver_with_retry(sender, subscription, b"{}", sleep=lambda _: None)

    assert excinfo.value.attempts == 1
    assert sender.calls[endpoint] == 1


def test_notify_restock_respects_disabled_flag(
    session, settings, device_info, make_subscription, scripted_sender
) -> None:
    (request,) = _register(session, device_info, make_subscription, ["https://push.example/a"])
    sender = scripted_sender()

    report = notify_restock(
        session,
        "sku-1",
        product_name="Baby Carrier",
        settings=settings.model_copy(update={"push_enabled": False}),
        sender=sender,
    )

    assert report.disabled is True
    assert sender.calls == {}
    assert get_request(session, request.id).is_pending


def test_notify_restock_uses_product_name(
    session, settings, device_info, make_subscription, scripted_sender
) -> None:
    (request,) = _register(session, device_info, make_subscription, ["https://push.example/a"])
    sender = scripted_sender()

    report = notify_restock(
        session, "sku-1", product_name="Baby Carrier", settings=settings, sender=sender
    )

    assert report.sent == [request.id]
    assert json.loads(sender.payloads[0])["text"] == "Baby Carrier is back in stock!"


def test_send_push_message(settings, make_subscription, scripted_sender) -> None:
    sender = scripted_sender(default=201)

    status_code = send_push_message(
        make_subscription("https://push.example/a"),
        {"title": "Hello", "body": "World"},
        settings=settings,
        sender=sender,
    )

    assert status_code == 201
    assert json.loads(sender.payloads[0]) == {"title": "Hello", "body": "World"}

    with pytest.raises(InvalidSubscriptionError):
        send_push_message({"endpoint": ""}, {"title": "x"}, settings=settings, sender=sender)


def test_store_error_on_one_request_does_not_abort_the_batch(
    device_info, scripted_sender
) -> None:
    requests = [
        _pending(f"req-{i}", f"https://push.example/device-{i}", device_info) for i in range(5)
    ]
    store = InMemoryStore(requests, failing_ids={"req-0"})
    sender = scripted_sender()

    report = PushDispatcher(
        store, sender, title="Supermom Store", max_workers=1, sleep=lambda _: None
    ).dispatch("sku-1", "back")

    assert report.deferred == ["req-0"]
    assert sorted(report.sent) == ["req-1", "req-2", "req-3", "req-4"]
    assert store.rollbacks == 1
    assert [r.id for r in store.list_pending("sku-1")] == ["req-0"]


def test_gone_endpoint_shared_by_two_requests_is_flagged_once(
    device_info, scripted_sender
) -> None:
    endpoint = "https://push.example/gone"
    store = InMemoryStore(
        [_pending("req-a", endpoint, device_info), _pending("req-b", endpoint, device_info)]
    )
    sender = scripted_sender({endpoint: [_gone(endpoint)]})
    flagged: list[str] = []

    report = PushDispatcher(
        store, sender, title="Supermom Store", on_stale_subscription=flagged.append
    ).dispatch("sku-1", "back")

    assert flagged == [endpoint]
    assert report.stale_endpoints == [endpoint]
    assert sorted(report.sent) == ["req-a", "req-b"]


def test_failing_stale_callback_does_not_abort_the_batch(device_info, scripted_sender) -> None:
    endpoint = "https://push.example/gone"
    store = InMemoryStore(
        [
            _pending("req-a", endpoint, device_info),
            _pending("req-b", "https://push.example/ok", device_info),
        ]
    )
    sender = scripted_sender({endpoint: [_gone(endpoint)]})

    def explode(_endpoint: str) -> None:
        raise RuntimeError("cleanup queue unavailable")

    report = PushDispatcher(
        store, sender, title="Supermom Store", on_stale_subscription=explode
    ).dispatch("sku-1", "back")

    assert sorted(report.sent) == ["req-a", "req-b"]


def test_notify_restock_without_pending_requests_needs_no_push_keys(session) -> None:
    settings = Settings(push_enabled=True, vapid_public_key=None, vapid_private_key=None)

    report = notify_restock(session, "sku-none", settings=settings)

    assert report.total == 0
    assert report.disabled is False


def test_dispatcher_requires_a_sender(session) -> None:
    with pytest.raises(ValueError):
        PushDispatcher(StockNotificationRepository(session), title="Supermom Store")
