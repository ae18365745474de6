"""Shared fixtures for the back-in-stock test suite."""

from __future__ import annotations

import os
import threading
from collections import defaultdict
from types import SimpleNamespace

import pytest

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["PUSH_ENABLED"] = "true"

from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402
from cryptography.hazmat.primitives.serialization import (  # noqa: E402
    Encoding,
    PublicFormat,
)

from backinstock.config import Settings, reset_settings_cache  # noqa: E402
from backinstock.domain.entities import DeviceInfo  # noqa: E402
from backinstock.infrastructure import database  # noqa: E402
from backinstock.infrastructure.push import generate_key_pair  # noqa: E402
from backinstock.utils import b64url_encode  # noqa: E402

reset_settings_cache()


class ScriptedSender:
    """Push sender double answering from a per-endpoint script.

    Each script entry is either a status code to return or an exception to
    raise. The last entry repeats once the script runs out.
    """

    def __init__(self, scripts: dict[str, list] | None = None, default: int = 201) -> None:
        self._scripts = {endpoint: list(steps) for endpoint, steps in (scripts or {}).items()}
        self._default = default
        self._lock = threading.Lock()
        self.calls: dict[str, int] = defaultdict(int)
        self.payloads: list[bytes] = []

    def script(self, endpoint: str, steps: list) -> None:
        with self._lock:
            self._scripts[endpoint] = list(steps)

    def send(self, subscription, payload: bytes) -> int:
        with self._lock:
            self.calls[subscription.endpoint] += 1
            self.payloads.append(payload)
            steps = self._scripts.get(subscription.endpoint)
            if not steps:
                step = self._default
            elif len(steps) > 1:
                step = steps.pop(0)
            else:
                step = steps[0]
        if isinstance(step, Exception):
            raise step
        return step


class FakeHttpSession:
    """Stand-in for ``requests.Session`` recording every POST."""

    def __init__(self, status_code: int = 201, error: Exception | None = None) -> None:
        self.status_code = status_code
        self.error = error
        self.requests: list[dict] = []

    def post(self, url, data=None, headers=None, timeout=None, **kwargs):
        self.requests.append({"url": url, "data": data, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return SimpleNamespace(status_code=self.status_code, reason="", text="", headers={})


@pytest.fixture(autouse=True)
def setup_database():
    """Give every test an empty schema."""

    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)
    database.initialize_database()
    yield
    database.Base.metadata.drop_all(bind=database.engine, checkfirst=True)


@pytest.fixture()
def session():
    db = database.SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def vapid_keys() -> tuple[str, str]:
    """Return a fresh ``(public_key, private_key)`` application server pair."""

    return generate_key_pair()


@pytest.fixture()
def settings(vapid_keys) -> Settings:
    public_key, private_key = vapid_keys
    return Settings(
        database_url="sqlite:///:memory:",
        push_enabled=True,
        vapid_public_key=public_key,
        vapid_private_key=private_key,
        vapid_subject="mailto:ops@example.com",
        store_name="Supermom Store",
        push_backoff_seconds=0,
    )


@pytest.fixture()
def subscriber_keys():
    """Return ``(private_key, p256dh, auth)`` for a simulated browser."""

    private_key = ec.generate_private_key(ec.SECP256R1())
    p256dh = b64url_encode(
        private_key.public_key().public_bytes(Encoding.X962, PublicFormat.UncompressedPoint)
    )
    auth = b64url_encode(os.urandom(16))
    return private_key, p256dh, auth


@pytest.fixture()
def device_info() -> DeviceInfo:
    return DeviceInfo(user_agent="Mozilla/5.0 (Test)", platform="Linux x86_64", language="en-US")


def _make_subscription(endpoint: str, **overrides) -> dict:
    """Return a subscription payload shaped like ``PushSubscription.toJSON()``."""

    data = {
        "endpoint": endpoint,
        "expirationTime": None,
        "keys": {"p256dh": "BNcRdreALRFXTkOOUHK1EtK2wtaz5Ry4YfYCA", "auth": "tBHItJI5svbpez7KI4CCXg"},
    }
    data.update(overrides)
    return data


@pytest.fixture()
def make_subscription():
    return _make_subscription


@pytest.fixture()
def scripted_sender():
    return ScriptedSender


@pytest.fixture()
def http_session():
    return FakeHttpSession
