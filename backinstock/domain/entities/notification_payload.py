"""Ephemeral message pushed to a subscriber when a product is restocked."""

from __future__ import annotations

import json
from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationPayload:
    """Application level push payload, built right before encryption."""

    title: str
    text: str
    product_id: str

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "text": self.text, "productId": self.product_id}

    def to_bytes(self) -> bytes:
        """Serialize the payload as compact UTF-8 JSON."""

        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False).encode(
            "utf-8"
        )


__all__ = ["NotificationPayload"]
