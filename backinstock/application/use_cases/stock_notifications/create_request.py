"""Use case for registering a back-in-stock request."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backinstock.domain.entities import (
    STOCK_NOTIFICATION_STATUS_PENDING,
    DeviceInfo,
    StockNotification,
    Subscription,
)
from backinstock.infrastructure.repositories import StockNotificationRepository
from backinstock.utils import utc_now

from .validators import parse_subscription

logger = logging.getLogger(__name__)


def create_request(
    session: Session,
    *,
    product_id: str,
    device_info: DeviceInfo,
    subscription: Mapping[str, Any] | Subscription | None,
) -> StockNotification:
    """Persist a pending request for ``product_id``.

    The subscription is validated first, so an incomplete one never reaches the
    database. When the same endpoint already waits for this product the existing
    pending request is returned instead of storing a duplicate.
    """

    product_id = (product_id or "").strip()
    if not product_id:
        raise ValueError("productId is required")
    validated = parse_subscription(subscription)

    repository = StockNotificationRepository(session)
    existing = repository.get_pending_by_endpoint(
        product_id=product_id, endpoint=validated.endpoint
    )
    if existing is not None:
        logger.info(
            "Reusing pending stock notification %s for product %s", existing.id, product_id
        )
        return existing

    notification = StockNotification(
        id=None,
        product_id=product_id,
        device_info=device_info,
        subscription=validated,
        status=STOCK_NOTIFICATION_STATUS_PENDING,
        created_at=utc_now(),
    )
    try:
        saved = repository.create(notification)
    except IntegrityError:
        # A concurrent opt-in from the same endpoint won the insert.
        session.rollback()
        existing = repository.get_pending_by_endpoint(
            product_id=product_id, endpoint=validated.endpoint
        )
        if existing is None:
            raise
        logger.info(
            "Reusing concurrently created stock notification %s for product %s",
            existing.id,
            product_id,
        )
        return existing
    logger.info("Registered stock notification %s for product %s", saved.id, product_id)
    return saved
