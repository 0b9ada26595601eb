"""Shared fixtures."""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from scribe.api import create_app
from scribe.auth.jwt import SigningConfig, TokenCodec
from scribe.config import Settings
from scribe.core.models import UserIdentity
from scribe.storage import create_local_storage

SECRET = "test-secret-key-that-is-long-enough-for-hs256"


class FakeClock:
    """Settable clock for expiry tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def signing():
    return SigningConfig(
        secret_key=SECRET,
        access_ttl=timedelta(hours=1),
        remember_ttl=timedelta(days=30),
    )


@pytest.fixture
def codec(signing, clock):
    return TokenCodec(signing, clock=clock)


@pytest.fixture
def admin():
    return UserIdentity(id=1, username="alice", admin=True)


@pytest.fixture
def user():
    return UserIdentity(id=2, username="bob", admin=False)


@pytest.fixture
def settings():
    return Settings(
        environment="test",
        jwt_secret_key=SECRET,
        database_url="",
        allow_admin_registration=True,
        posts_page_size=3,
        comments_page_size=2,
        comments_max_page_size=5,
    )


@pytest.fixture
def client(settings):
    app = create_app(settings, storage=create_local_storage())
    with TestClient(app) as c:
        yield c
