"""Use case telling whether a device already waits for a product."""

from sqlalchemy.orm import Session

from backinstock.domain.entities import DeviceInfo
from backinstock.infrastructure.repositories import StockNotificationRepository


def has_registered(session: Session, *, product_id: str, device_info: DeviceInfo) -> bool:
    """Whether a pending request exists for ``product_id`` from this device."""

    return StockNotificationRepository(session).has_pending_for_device(
        product_id=product_id, device_info=device_info
    )
