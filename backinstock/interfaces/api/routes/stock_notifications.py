"""Endpoints for registering and inspecting back-in-stock requests."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from backinstock.application.use_cases.stock_notifications import (
    create_request as create_request_uc,
    get_request as get_request_uc,
    has_registered as has_registered_uc,
    list_pending as list_pending_uc,
    mark_sent as mark_sent_uc,
)
from backinstock.domain.entities import DeviceInfo
from backinstock.domain.exceptions import InvalidSubscriptionError, NotFoundError
from backinstock.infrastructure.database import get_db
from backinstock.interfaces.api.schemas import (
    RegistrationStatusRead,
    StockNotificationCreate,
    StockNotificationRead,
)

router = APIRouter(prefix="/stock-notifications", tags=["stock-notifications"])
logger = logging.getLogger(__name__)


@router.post("/", response_model=StockNotificationRead, status_code=status.HTTP_201_CREATED)
def create_stock_notification(
    payload: StockNotificationCreate,
    db: Session = Depends(get_db),
) -> StockNotificationRead:
    """Register a visitor's wish to hear about a restock."""

    try:
        notification = create_request_uc(
            db,
            product_id=payload.product_id,
            device_info=payload.device_info.to_entity(),
            subscription=payload.subscription,
        )
    except InvalidSubscriptionError as exc:
        logger.warning("Rejected stock notification for %s: %s", payload.product_id, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return StockNotificationRead.from_entity(notification)


@router.get("/pending", response_model=list[StockNotificationRead])
def list_pending_notifications(
    product_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> list[StockNotificationRead]:
    """Return the requests still waiting for ``product_id``."""

    return [StockNotificationRead.from_entity(n) for n in list_pending_uc(db, product_id)]


@router.get("/registered", response_model=RegistrationStatusRead)
def read_registration_status(
    product_id: str = Query(..., min_length=1),
    user_agent: str = Query(""),
    platform: str = Query(""),
    language: str = Query(""),
    db: Session = Depends(get_db),
) -> RegistrationStatusRead:
    """Tell the storefront whether this device already asked about the product."""

    registered = has_registered_uc(
        db,
        product_id=product_id,
        device_info=DeviceInfo(user_agent=user_agent, platform=platform, language=language),
    )
    return RegistrationStatusRead(registered=registered)


@router.get("/{request_id}", response_model=StockNotificationRead)
def read_stock_notification(
    request_id: str,
    db: Session = Depends(get_db),
) -> StockNotificationRead:
    try:
        notification = get_request_uc(db, request_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return StockNotificationRead.from_entity(notification)


@router.post("/{request_id}/sent", status_code=status.HTTP_204_NO_CONTENT)
def mark_stock_notification_sent(
    request_id: str,
    db: Session = Depends(get_db),
) -> Response:
    """Close a request; calling it again for a sent request is harmless."""

    try:
        mark_sent_uc(db, request_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
