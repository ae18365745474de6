"""Tests for settings validation and database URL handling."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from backinstock.config import Settings
from backinstock.infrastructure.database import normalize_database_url


def test_vapid_keys_must_be_configured_together(vapid_keys) -> None:
    public_key, _ = vapid_keys

    with pytest.raises(ValidationError):
        Settings(vapid_public_key=public_key, vapid_private_key=None)


def test_vapid_subject_must_be_contact_uri() -> None:
    with pytest.raises(ValidationError):
        Settings(vapid_subject="ops@example.com")


def test_vapid_token_lifetime_is_capped() -> None:
    with pytest.raises(ValidationError):
        Settings(vapid_token_ttl_seconds=25 * 60 * 60)


def test_cors_origin_list() -> None:
    assert Settings(cors_origins="*").cors_origin_list() == ["*"]
    assert Settings(
        cors_origins="https://shop.example.com, http://localhost:3000"
    ).cors_origin_list() == ["https://shop.example.com", "http://localhost:3000"]


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("postgres://u:p@db/shop", "postgresql+psycopg://u:p@db/shop"),
        ("postgresql://u:p@db/shop", "postgresql+psycopg://u:p@db/shop"),
        ("sqlite:///./local.db", "sqlite:///./local.db"),
    ],
)
def test_normalize_database_url(raw, expected) -> None:
    assert normalize_database_url(raw) == expected
