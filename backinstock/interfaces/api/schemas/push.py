"""Pydantic models for push delivery endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from backinstock.application.use_cases.push import DispatchReport


class PushSendRequest(BaseModel):
    """Single message to deliver right away to one subscription."""

    subscription: dict[str, Any] | None = None
    message: dict[str, Any] | None = None


class PushSendResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    status_code: int | None = Field(default=None, alias="statusCode")


class PushDisabledResponse(BaseModel):
    disabled: bool = True
    message: str = "Push notifications are temporarily disabled."


class VapidPublicKeyRead(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    public_key: str = Field(alias="publicKey")


class RestockRequest(BaseModel):
    """Optional details sent by the inventory service with a restock trigger."""

    model_config = ConfigDict(populate_by_name=True)

    product_name: str | None = Field(default=None, alias="productName", max_length=200)


class DispatchReportRead(BaseModel):
    """Summary of a restock dispatch cycle."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str = Field(alias="productId")
    total: int
    sent: list[str] = Field(default_factory=list)
    stale_endpoints: list[str] = Field(default_factory=list, alias="staleEndpoints")
    deferred: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    disabled: bool = False

    @classmethod
    def from_report(cls, report: DispatchReport) -> "DispatchReportRead":
        return cls(
            product_id=report.product_id,
            total=report.total,
            sent=list(report.sent),
            stale_endpoints=list(report.stale_endpoints),
            deferred=list(report.deferred),
            failed=list(report.failed),
            disabled=report.disabled,
        )


__all__ = [
    "DispatchReportRead",
    "PushDisabledResponse",
    "PushSendRequest",
    "PushSendResponse",
    "RestockRequest",
    "VapidPublicKeyRead",
]
