from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from robot_api.config import Settings
from robot_api.main import create_app
from robot_api.storage.commands import InMemoryCommandStore

SIGNING_KEY = "test-signing-key-0123456789abcdefghijklmnop"


class FakeClock:
    """Settable UTC clock shared by issuer and authenticator."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC))


@pytest.fixture
def settings() -> Settings:
    return Settings(signing_key=SIGNING_KEY)


@pytest.fixture
def store() -> InMemoryCommandStore:
    return InMemoryCommandStore()


@pytest.fixture
def app(settings, store, clock):
    return create_app(settings, commands=store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def token(client) -> str:
    r = client.post("/login", json={"username": "user", "password": "password"})
    assert r.status_code == 200
    return r.json()["token"]


@pytest.fixture
def auth(token) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}
