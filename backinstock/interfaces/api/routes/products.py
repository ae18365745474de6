"""Restock trigger called by the inventory service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from backinstock.application.use_cases.push import notify_restock
from backinstock.application.use_cases.push.dispatcher import PushSender
from backinstock.config import Settings
from backinstock.domain.exceptions import VapidConfigurationError
from backinstock.infrastructure.database import get_db
from backinstock.interfaces.api.dependencies import get_app_settings, get_push_sender
from backinstock.interfaces.api.schemas import DispatchReportRead, RestockRequest

router = APIRouter(prefix="/products", tags=["products"])
logger = logging.getLogger(__name__)


@router.post("/{product_id}/restock", response_model=DispatchReportRead)
def trigger_restock(
    product_id: str,
    payload: RestockRequest | None = Body(default=None),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    sender: PushSender | None = Depends(get_push_sender),
) -> DispatchReportRead:
    """Notify every visitor waiting for ``product_id`` that it is back in stock."""

    try:
        report = notify_restock(
            db,
            product_id,
            product_name=payload.product_name if payload else None,
            settings=settings,
            sender=sender,
        )
    except VapidConfigurationError as exc:
        logger.error("Push delivery is not configured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    return DispatchReportRead.from_report(report)
