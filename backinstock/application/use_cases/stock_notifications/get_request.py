"""Use case for retrieving a single stock notification request."""

from sqlalchemy.orm import Session

from backinstock.domain.entities import StockNotification
from backinstock.domain.exceptions import NotFoundError
from backinstock.infrastructure.repositories import StockNotificationRepository


def get_request(session: Session, request_id: str) -> StockNotification:
    """Return the request identified by ``request_id``."""

    notification = StockNotificationRepository(session).get(request_id)
    if notification is None:
        raise NotFoundError(request_id)
    return notification
