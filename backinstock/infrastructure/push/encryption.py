"""Web Push message encryption parameters (``aes128gcm`` content coding, RFC 8291).

Messages are encrypted by :mod:`pywebpush` with a fresh ephemeral P-256 key per
message; the shared ECDH secret is combined with the subscriber's ``auth``
through HKDF into the AES-128-GCM content key and nonce.
"""

from __future__ import annotations

import http_ece
from cryptography.hazmat.primitives.asymmetric import ec

from backinstock.domain.exceptions import InvalidSubscriptionError
from backinstock.utils import b64url_decode

CONTENT_ENCODING = "aes128gcm"
RECORD_SIZE = 4096
AUTH_SECRET_LENGTH = 16

# salt(16) + rs(4) + idlen(1) + keyid(65) + padding delimiter(1) + GCM tag(16)
_OVERHEAD = 16 + 4 + 1 + 65 + 1 + 16
MAX_PAYLOAD_SIZE = RECORD_SIZE - _OVERHEAD


def validate_receiver_keys(p256dh: str, auth: str) -> tuple[ec.EllipticCurvePublicKey, bytes]:
    """Decode and sanity check the subscriber's ``p256dh`` and ``auth`` values."""

    try:
        auth_secret = b64url_decode(auth)
        receiver_key = ec.EllipticCurvePublicKey.from_encoded_point(
            ec.SECP256R1(), b64url_decode(p256dh)
        )
    except ValueError as exc:
        raise InvalidSubscriptionError("Invalid push subscription key material") from exc
    if len(auth_secret) != AUTH_SECRET_LENGTH:
        raise InvalidSubscriptionError(
            f"Invalid push subscription: auth secret must be {AUTH_SECRET_LENGTH} bytes"
        )
    return receiver_key, auth_secret


def decrypt_payload(body: bytes, private_key: ec.EllipticCurvePrivateKey, auth: str) -> bytes:
    """Decrypt an ``aes128gcm`` message with the subscriber's private key.

    The sender public key is read from the record header.
    """

    auth_secret = b64url_decode(auth)
    return http_ece.decrypt(
        body,
        private_key=private_key,
        auth_secret=auth_secret,
        version=CONTENT_ENCODING,
    )


__all__ = [
    "CONTENT_ENCODING",
    "MAX_PAYLOAD_SIZE",
    "decrypt_payload",
    "validate_receiver_keys",
]
