"""Device side components: subscription registrar and notification receiver."""

from .receiver import (
    CLICK_FOCUSED,
    CLICK_IGNORED,
    CLICK_OPENED,
    ClickResult,
    NotificationOptions,
    NotificationReceiver,
    product_url,
)
from .registrar import (
    OPT_IN_DENIED,
    OPT_IN_SUBSCRIBED,
    OPT_IN_UNAVAILABLE,
    OptInResult,
    SubscriptionRegistrar,
)

__all__ = [
    "CLICK_FOCUSED",
    "CLICK_IGNORED",
    "CLICK_OPENED",
    "ClickResult",
    "NotificationOptions",
    "NotificationReceiver",
    "OPT_IN_DENIED",
    "OPT_IN_SUBSCRIBED",
    "OPT_IN_UNAVAILABLE",
    "OptInResult",
    "SubscriptionRegistrar",
    "product_url",
]
