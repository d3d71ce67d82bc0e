"""Test configuration and shared fixtures."""

from __future__ import annotations

import os
from datetime import datetime, timezone

import pytest

os.environ.setdefault("API_SECRET_KEYS", "test-key-one,test-key-two")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("LOG_FORMAT", "console")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from core.config import Settings  # noqa: E402
from core.store import RecordStore  # noqa: E402
from services.documents import DocumentService  # noqa: E402
from services.identifiers import IdentifierGenerator  # noqa: E402

from tests.fakes import FakeRedis  # noqa: E402


class FrozenClock:
    """Controllable clock for expiry tests."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings():
    return Settings(api_secret_keys="test-key-one,test-key-two")


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def store(settings, fake_redis):
    return RecordStore(settings, client=fake_redis)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def service(store, settings, clock):
    return DocumentService(
        store=store,
        id_generator=IdentifierGenerator(settings.id_length),
        settings=settings,
        clock=clock,
    )
