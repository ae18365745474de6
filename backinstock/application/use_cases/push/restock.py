"""Entry point invoked by the inventory collaborator when stock returns."""

from __future__ import annotations

import logging
from collections.abc import Callable

from sqlalchemy.orm import Session

from backinstock.config import Settings, get_settings
from backinstock.infrastructure.repositories import StockNotificationRepository

from .dispatcher import DispatchReport, PushDispatcher, PushSender, restock_text

logger = logging.getLogger(__name__)


def notify_restock(
    session: Session,
    product_id: str,
    *,
    product_name: str | None = None,
    settings: Settings | None = None,
    sender: PushSender | None = None,
    on_stale_subscription: Callable[[str], None] | None = None,
) -> DispatchReport:
    """Notify every visitor waiting for ``product_id`` that it is available.

    Returns an empty report flagged ``disabled`` when push delivery is switched
    off through ``PUSH_ENABLED``; pending requests are left untouched then.
    """

    settings = settings or get_settings()
    if not settings.push_enabled:
        logger.info("Push delivery disabled; skipping restock dispatch for %s", product_id)
        return DispatchReport(product_id=product_id, disabled=True)

    dispatcher = PushDispatcher.from_settings(
        StockNotificationRepository(session),
        settings,
        sender=sender,
        on_stale_subscription=on_stale_subscription,
    )
    return dispatcher.dispatch(product_id, restock_text(product_name))
