"""SQLAlchemy model for back-in-stock notification requests."""

from sqlalchemy import Column, DateTime, Index, Integer, JSON, String, Text, text

from backinstock.domain.entities import STOCK_NOTIFICATION_STATUS_PENDING
from backinstock.infrastructure.database import Base
from backinstock.utils import utc_now

_PENDING_CLAUSE = f"status = '{STOCK_NOTIFICATION_STATUS_PENDING}'"


class StockNotificationModel(Base):
    """Database representation of a visitor's restock request."""

    __tablename__ = "stock_notification"
    __table_args__ = (
        Index("ix_stock_notification_product_status", "product_id", "status"),
        # One pending request per endpoint and product.
        Index(
            "uq_stock_notification_pending_endpoint",
            "product_id",
            "endpoint",
            unique=True,
            sqlite_where=text(_PENDING_CLAUSE),
            postgresql_where=text(_PENDING_CLAUSE),
        ),
    )

    # Surrogate key; also breaks ``created_at`` ties in insertion order.
    row_id = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(32), nullable=False, unique=True, index=True)
    product_id = Column(String(128), nullable=False, index=True)
    device_info = Column(JSON, nullable=False, default=dict)
    subscription = Column(JSON, nullable=True)
    endpoint = Column(Text, nullable=True)
    status = Column(
        String(10), nullable=False, default=STOCK_NOTIFICATION_STATUS_PENDING
    )
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)


__all__ = ["StockNotificationModel"]
