"""FastAPI dependency utilities."""

from backinstock.application.use_cases.push.dispatcher import PushSender
from backinstock.config import Settings, get_settings


def get_app_settings() -> Settings:
    """Return the cached application settings."""

    return get_settings()


def get_push_sender() -> PushSender | None:
    """Return the sender used for deliveries.

    ``None`` lets the use cases build a :class:`WebPushClient` from settings;
    tests override this dependency with a scripted sender.
    """

    return None
