"""Use case for closing a request once its notification went out."""

from sqlalchemy.orm import Session

from backinstock.infrastructure.repositories import StockNotificationRepository


def mark_sent(session: Session, request_id: str) -> None:
    """Transition ``request_id`` to ``sent``.

    Idempotent for requests that are already sent; raises ``NotFoundError`` for
    unknown identifiers.
    """

    StockNotificationRepository(session).mark_sent(request_id)
