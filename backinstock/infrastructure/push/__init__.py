"""Web Push delivery helpers for the infrastructure layer."""

from .client import GONE_STATUS_CODES, WebPushClient, shorten_endpoint
from .encryption import (
    CONTENT_ENCODING,
    MAX_PAYLOAD_SIZE,
    decrypt_payload,
    validate_receiver_keys,
)
from .vapid import (
    VapidCredentials,
    audience_for,
    encode_public_key,
    generate_key_pair,
    load_private_key,
)

__all__ = [
    "CONTENT_ENCODING",
    "GONE_STATUS_CODES",
    "MAX_PAYLOAD_SIZE",
    "VapidCredentials",
    "WebPushClient",
    "audience_for",
    "decrypt_payload",
    "encode_public_key",
    "generate_key_pair",
    "load_private_key",
    "shorten_endpoint",
    "validate_receiver_keys",
]
