"""Use cases for the stock notification store."""

from .create_request import create_request
from .get_request import get_request
from .has_registered import has_registered
from .list_pending import list_pending
from .mark_sent import mark_sent
from .validators import parse_subscription

__all__ = [
    "create_request",
    "get_request",
    "has_registered",
    "list_pending",
    "mark_sent",
    "parse_subscription",
]
