from .push import (
    DispatchReportRead,
    PushDisabledResponse,
    PushSendRequest,
    PushSendResponse,
    RestockRequest,
    VapidPublicKeyRead,
)
from .stock_notification import (
    DeviceInfoSchema,
    RegistrationStatusRead,
    StockNotificationCreate,
    StockNotificationRead,
)

__all__ = [
    "DeviceInfoSchema",
    "DispatchReportRead",
    "PushDisabledResponse",
    "PushSendRequest",
    "PushSendResponse",
    "RegistrationStatusRead",
    "RestockRequest",
    "StockNotificationCreate",
    "StockNotificationRead",
    "VapidPublicKeyRead",
]
