"""Endpoints exposing push configuration and immediate delivery."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from backinstock.application.use_cases.push import send_push_message
from backinstock.application.use_cases.push.dispatcher import PushSender
from backinstock.config import Settings
from backinstock.domain.exceptions import (
    DeliveryPermanentError,
    DeliveryTransientError,
    InvalidSubscriptionError,
    VapidConfigurationError,
)
from backinstock.interfaces.api.dependencies import get_app_settings, get_push_sender
from backinstock.interfaces.api.schemas import (
    PushDisabledResponse,
    PushSendRequest,
    PushSendResponse,
    VapidPublicKeyRead,
)

router = APIRouter(prefix="/push", tags=["push"])
logger = logging.getLogger(__name__)


@router.get("/vapid-public-key", response_model=VapidPublicKeyRead)
def read_vapid_public_key(settings: Settings = Depends(get_app_settings)) -> VapidPublicKeyRead:
    """Return the application server key browsers need to subscribe."""

    if not settings.vapid_public_key:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="VAPID public key is not configured"
        )
    return VapidPublicKeyRead(public_key=settings.vapid_public_key)


@router.post("/send", response_model=PushSendResponse | PushDisabledResponse)
def send_notification(
    payload: PushSendRequest,
    settings: Settings = Depends(get_app_settings),
    sender: PushSender | None = Depends(get_push_sender),
):
    """Deliver one message to one subscription immediately."""

    if not settings.push_enabled:
        return PushDisabledResponse()
    if not payload.subscription or not payload.message:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Missing required fields"
        )

    try:
        status_code = send_push_message(
            payload.subscription, payload.message, settings=settings, sender=sender
        )
    except InvalidSubscriptionError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except VapidConfigurationError as exc:
        logger.error("Push delivery is not configured: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        ) from exc
    except DeliveryPermanentError as exc:
        logger.warning("Error sending push notification: %s", exc)
        code = status.HTTP_410_GONE if exc.gone else status.HTTP_502_BAD_GATEWAY
        raise HTTPException(status_code=code, detail="Failed to send notification") from exc
    except DeliveryTransientError as exc:
        logger.warning("Error sending push notification: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send notification"
        ) from exc
    return PushSendResponse(success=True, status_code=status_code)
