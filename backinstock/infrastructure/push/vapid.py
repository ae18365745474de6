"""VAPID (RFC 8292) application server identity for the push service."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from urllib.parse import urlsplit

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from py_vapid import Vapid

from backinstock.config import MAX_VAPID_TOKEN_TTL_SECONDS, Settings
from backinstock.domain.exceptions import InvalidSubscriptionError, VapidConfigurationError
from backinstock.utils import b64url_decode, b64url_encode, utc_now


def load_private_key(value: str) -> ec.EllipticCurvePrivateKey:
    """Load a P-256 private key given as PEM or as a raw base64url scalar."""

    text = (value or "").strip()
    if not text:
        raise VapidConfigurationError("VAPID private key is not configured")
    try:
        if "-----BEGIN" in text:
            key = serialization.load_pem_private_key(text.encode("ascii"), password=None)
        else:
            raw = b64url_decode(text)
            if len(raw) != 32:
                raise ValueError("raw VAPID private key must be 32 bytes")
            key = ec.derive_private_key(int.from_bytes(raw, "big"), ec.SECP256R1())
    except (TypeError, ValueError) as exc:
        raise VapidConfigurationError("VAPID private key could not be loaded") from exc
    if not isinstance(key, ec.EllipticCurvePrivateKey) or not isinstance(
        key.curve, ec.SECP256R1
    ):
        raise VapidConfigurationError("VAPID private key must be a P-256 key")
    return key


def encode_public_key(private_key: ec.EllipticCurvePrivateKey) -> str:
    """Return the base64url uncompressed point browsers expect as server key."""

    raw = private_key.public_key().public_bytes(
        serialization.Encoding.X962, serialization.PublicFormat.UncompressedPoint
    )
    return b64url_encode(raw)


def generate_key_pair() -> tuple[str, str]:
    """Return a new ``(public_key, private_key)`` pair as base64url strings."""

    private_key = ec.generate_private_key(ec.SECP256R1())
    raw_private = private_key.private_numbers().private_value.to_bytes(32, "big")
    return encode_public_key(private_key), b64url_encode(raw_private)


def audience_for(endpoint: str) -> str:
    """Return the push service origin that a token for ``endpoint`` is scoped to."""

    parts = urlsplit(endpoint)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidSubscriptionError("Invalid push subscription endpoint")
    return f"{parts.scheme}://{parts.netloc}"


class VapidCredentials:
    """Application server key and the claims its tokens are signed with.

    Tokens themselves are produced by :mod:`py_vapid` when a message is sent;
    this class only pins the key and bounds ``exp`` to at most 24 hours.
    """

    def __init__(
        self,
        private_key: str,
        subject: str,
        *,
        public_key: str | None = None,
        token_ttl_seconds: int = MAX_VAPID_TOKEN_TTL_SECONDS // 2,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        key = load_private_key(private_key)
        self._public_key = encode_public_key(key)
        if public_key and public_key.strip().rstrip("=") != self._public_key:
            raise VapidConfigurationError(
                "VAPID_PUBLIC_KEY does not match VAPID_PRIVATE_KEY"
            )
        self._vapid = Vapid(private_key=key)
        self._subject = subject
        self._token_ttl = timedelta(
            seconds=min(max(int(token_ttl_seconds), 1), MAX_VAPID_TOKEN_TTL_SECONDS)
        )
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: Settings) -> "VapidCredentials":
        if not (settings.vapid_private_key and settings.vapid_public_key):
            raise VapidConfigurationError("VAPID keys are not configured")
        return cls(
            settings.vapid_private_key,
            settings.vapid_subject,
            public_key=settings.vapid_public_key,
            token_ttl_seconds=settings.vapid_token_ttl_seconds,
        )

    @property
    def public_key(self) -> str:
        return self._public_key

    @property
    def vapid(self) -> Vapid:
        return self._vapid

    def claims_for(self, endpoint: str) -> dict[str, object]:
        """Return fresh claims for a push to ``endpoint``."""

        expires_at = self._clock() + self._token_ttl
        return {
            "aud": audience_for(endpoint),
            "exp": int(expires_at.timestamp()),
            "sub": self._subject,
        }


__all__ = [
    "VapidCredentials",
    "audience_for",
    "encode_public_key",
    "generate_key_pair",
    "load_private_key",
]
