"""Persistence helpers for stock notification requests."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from uuid import uuid4

from sqlalchemy.orm import Session

from backinstock.domain.entities import (
    STOCK_NOTIFICATION_STATUS_PENDING,
    STOCK_NOTIFICATION_STATUS_SENT,
    DeviceInfo,
    StockNotification,
    Subscription,
    SubscriptionKeys,
)
from backinstock.domain.exceptions import NotFoundError
from backinstock.infrastructure.models import StockNotificationModel
from backinstock.utils import ensure_utc, utc_now


class StockNotificationRepository:
    """Provide persistence operations for :class:`StockNotification` objects.

    The repository is the only writer of ``status``; the single transition it
    knows about is ``pending -> sent``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, request_id: str) -> StockNotification | None:
        model = self._get_model(request_id)
        return self._to_entity(model) if model is not None else None

    def create(self, notification: StockNotification) -> StockNotification:
        model = StockNotificationModel(
            id=notification.id or uuid4().hex,
            product_id=notification.product_id,
            device_info=notification.device_info.to_dict(),
            subscription=(
                notification.subscription.to_dict() if notification.subscription else None
            ),
            endpoint=notification.subscription.endpoint if notification.subscription else None,
            status=notification.status or STOCK_NOTIFICATION_STATUS_PENDING,
            created_at=notification.created_at or utc_now(),
        )
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_pending(self, product_id: str) -> Sequence[StockNotification]:
        """Return pending requests for ``product_id``, first asked first served."""

        query = (
            self.session.query(StockNotificationModel)
            .filter(StockNotificationModel.product_id == product_id)
            .filter(StockNotificationModel.status == STOCK_NOTIFICATION_STATUS_PENDING)
            .order_by(
                StockNotificationModel.created_at.asc(),
                StockNotificationModel.row_id.asc(),
            )
        )
        return [self._to_entity(model) for model in query.all()]

    def get_pending_by_endpoint(
        self, *, product_id: str, endpoint: str
    ) -> StockNotification | None:
        model = (
            self.session.query(StockNotificationModel)
            .filter(StockNotificationModel.product_id == product_id)
            .filter(StockNotificationModel.endpoint == endpoint)
            .filter(StockNotificationModel.status == STOCK_NOTIFICATION_STATUS_PENDING)
            .order_by(StockNotificationModel.row_id.asc())
            .first()
        )
        return self._to_entity(model) if model is not None else None

    def has_pending_for_device(self, *, product_id: str, device_info: DeviceInfo) -> bool:
        """Whether a pending request exists for ``product_id`` and this device."""

        query = (
            self.session.query(StockNotificationModel)
            .filter(StockNotificationModel.product_id == product_id)
            .filter(StockNotificationModel.status == STOCK_NOTIFICATION_STATUS_PENDING)
        )
        expected = device_info.to_dict()
        # JSON equality is not portable across dialects; compare in Python.
        return any(
            DeviceInfo.from_dict(model.device_info).to_dict() == expected
            for model in query.all()
        )

    def mark_sent(self, request_id: str) -> bool:
        """Move ``request_id`` to ``sent``.

        Returns ``True`` when this call performed the transition and ``False`` when
        the request was already sent. Raises :class:`NotFoundError` for unknown ids.
        """

        updated = (
            self.session.query(StockNotificationModel)
            .filter(StockNotificationModel.id == request_id)
            .filter(StockNotificationModel.status == STOCK_NOTIFICATION_STATUS_PENDING)
            .update(
                {StockNotificationModel.status: STOCK_NOTIFICATION_STATUS_SENT},
                synchronize_session=False,
            )
        )
        self.session.commit()
        if updated:
            return True
        if self._get_model(request_id) is None:
            raise NotFoundError(request_id)
        return False

    def rollback(self) -> None:
        self.session.rollback()

    def _get_model(self, request_id: str) -> StockNotificationModel | None:
        return (
            self.session.query(StockNotificationModel)
            .filter(StockNotificationModel.id == request_id)
            .one_or_none()
        )

    @staticmethod
    def _to_entity(model: StockNotificationModel) -> StockNotification:
        return StockNotification(
            id=model.id,
            product_id=model.product_id,
            device_info=DeviceInfo.from_dict(model.device_info),
            subscription=_subscription_from_json(model.subscription),
            status=model.status,
            created_at=ensure_utc(model.created_at),
        )


def _subscription_from_json(data: dict[str, Any] | None) -> Subscription | None:
    if not data:
        return None
    keys = data.get("keys") or {}
    expiration_time = data.get("expirationTime")
    return Subscription(
        endpoint=str(data.get("endpoint") or ""),
        keys=SubscriptionKeys(
            p256dh=str(keys.get("p256dh") or ""),
            auth=str(keys.get("auth") or ""),
        ),
        expiration_time=int(expiration_time) if expiration_time is not None else None,
    )


__all__ = ["StockNotificationRepository"]
