"""Use case for listing requests waiting for a restock."""

from collections.abc import Sequence

from sqlalchemy.orm import Session

from backinstock.domain.entities import StockNotification
from backinstock.infrastructure.repositories import StockNotificationRepository


def list_pending(session: Session, product_id: str) -> Sequence[StockNotification]:
    """Return pending requests for ``product_id`` ordered by creation time."""

    return StockNotificationRepository(session).list_pending(product_id)
