"""Base64url helpers used for Web Push key material."""

from __future__ import annotations

import base64


def b64url_encode(data: bytes) -> str:
    """Encode ``data`` as unpadded base64url text."""

    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(value: str) -> bytes:
    """Decode base64url text, tolerating missing padding.

    Raises ``ValueError`` (``binascii.Error``) when ``value`` is not valid base64url.
    """

    text = value.strip()
    padding = "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(text + padding)
