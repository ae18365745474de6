"""Pydantic models describing stock notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backinstock.domain.entities import DeviceInfo, StockNotification


class DeviceInfoSchema(BaseModel):
    """Diagnostic metadata about the visitor's device."""

    model_config = ConfigDict(populate_by_name=True)

    user_agent: str = Field(default="", alias="userAgent", max_length=512)
    platform: str = Field(default="", max_length=120)
    language: str = Field(default="", max_length=35)

    def to_entity(self) -> DeviceInfo:
        return DeviceInfo(
            user_agent=self.user_agent, platform=self.platform, language=self.language
        )


class StockNotificationCreate(BaseModel):
    """Payload sent by the storefront when a visitor opts in.

    ``subscription`` is kept loose on purpose so incomplete subscriptions are
    reported with a 400 from the validation use case.
    """

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(..., alias="productId", min_length=1, max_length=128)
    device_info: DeviceInfoSchema = Field(default_factory=DeviceInfoSchema, alias="deviceInfo")
    subscription: dict[str, Any] | None = None


class StockNotificationRead(BaseModel):
    """Representation of a stored stock notification request."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    product_id: str = Field(alias="productId")
    device_info: DeviceInfoSchema = Field(alias="deviceInfo")
    subscription: dict[str, Any] | None = None
    status: str
    created_at: datetime | None = Field(default=None, alias="createdAt")

    @classmethod
    def from_entity(cls, notification: StockNotification) -> "StockNotificationRead":
        device = notification.device_info
        return cls(
            id=notification.id or "",
            product_id=notification.product_id,
            device_info=DeviceInfoSchema(
                user_agent=device.user_agent, platform=device.platform, language=device.language
            ),
            subscription=(
                notification.subscription.to_dict() if notification.subscription else None
            ),
            status=notification.status,
            created_at=notification.created_at,
        )


class RegistrationStatusRead(BaseModel):
    registered: bool


__all__ = [
    "DeviceInfoSchema",
    "RegistrationStatusRead",
    "StockNotificationCreate",
    "StockNotificationRead",
]
