"""Utility helpers for reusable functionality."""

from .datetime import ensure_utc, epoch_millis_to_datetime, utc_now
from .encoding import b64url_decode, b64url_encode

__all__ = [
    "b64url_decode",
    "b64url_encode",
    "ensure_utc",
    "epoch_millis_to_datetime",
    "utc_now",
]
