"""Unit tests for the Redis-backed record store."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from core.exceptions import StoreUnavailableError
from core.store import RecordStore, document_key
from models.document import TempDocument


def make_document(document_id="abcDEF123456", **overrides):
    created = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    fields = dict(
        id=document_id,
        content="# Hello\n\nWorld",
        title="Greeting",
        created_at=created,
        expires_at=created + timedelta(hours=24),
        content_length=14,
        user_agent="pytest",
        referrer="Unknown",
        client_ip="127.0.0.1",
    )
    fields.update(overrides)
    return TempDocument(**fields)


class TestRecordStore:
    """Tests for RecordStore."""

    def test_document_key_namespace(self):
        assert document_key("abcDEF123456") == "temp-markdown:abcDEF123456"

    @pytest.mark.asyncio
    async def test_put_then_get(self, store, fake_redis):
        document = make_document()
        await store.put(document_key(document.id), document, ttl_seconds=3600)

        loaded = await store.get(document_key(document.id))
        assert loaded == document
        assert 3590 < fake_redis.ttl_of(document_key(document.id)) <= 3600

    @pytest.mark.asyncio
    async def test_stored_payload_uses_camel_case(self, store, fake_redis):
        document = make_document()
        await store.put(document_key(document.id), document, ttl_seconds=60)

        raw = json.loads(await fake_redis.get(document_key(document.id)))
        assert raw["expiresAt"] == "2026-01-02T12:00:00.000Z"
        assert raw["createdAt"] == "2026-01-01T12:00:00.000Z"
        assert raw["contentLength"] == 14
        assert raw["userAgent"] == "pytest"

    @pytest.mark.asyncio
    async def test_get_absent(self, store):
        assert await store.get(document_key("missing00000")) is None

    @pytest.mark.asyncio
    async def test_get_reads_entries_without_id(self, store, fake_redis):
        fake_redis.raw_set("temp-markdown:legacy123456", json.dumps({
            "content": "legacy",
            "title": "Old",
            "createdAt": "2026-01-01T00:00:00.000Z",
            "expiresAt": "2026-01-02T00:00:00.000Z",
            "contentLength": 6,
        }))

        loaded = await store.get("temp-markdown:legacy123456")
        assert loaded.id == "legacy123456"
        assert loaded.expires_at == datetime(2026, 1, 2, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_undecodable_entry_is_absent(self, store, fake_redis):
        fake_redis.raw_set("temp-markdown:broken123456", "not json")
        assert await store.get("temp-markdown:broken123456") is None

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, store):
        document = make_document()
        key = document_key(document.id)
        await store.put(key, document, ttl_seconds=60)

        assert await store.delete(key) is True
        assert await store.delete(key) is False
        assert await store.get(key) is None

    @pytest.mark.asyncio
    async def test_exists(self, store):
        document = make_document()
        key = document_key(document.id)
        assert await store.exists(key) is False
        await store.put(key, document, ttl_seconds=60)
        assert await store.exists(key) is True

    @pytest.mark.asyncio
    async def test_backend_failure_is_translated(self, store, fake_redis):
        fake_redis.fail = True
        key = document_key("abcDEF123456")

        with pytest.raises(StoreUnavailableError) as exc_info:
            await store.get(key)
        assert "Connection refused" not in exc_info.value.message

        with pytest.raises(StoreUnavailableError):
            await store.put(key, make_document(), ttl_seconds=60)
        with pytest.raises(StoreUnavailableError):
            await store.delete(key)

    @pytest.mark.asyncio
    async def test_use_before_startup(self, settings):
        store = RecordStore(settings)
        assert store.is_connected() is False
        assert await store.ping() is False
        with pytest.raises(StoreUnavailableError):
            await store.get("temp-markdown:abcDEF123456")

    @pytest.mark.asyncio
    async def test_startup_with_injected_client_and_shutdown(self, store, fake_redis):
        await store.startup()
        assert "ping" in fake_redis.calls

        await store.shutdown()
        assert fake_redis.closed is True
        assert store.is_connected() is False

    @pytest.mark.asyncio
    async def test_probe(self, store, fake_redis):
        assert await store.probe("health-check-test", "value") is True
        assert fake_redis.keys() == []
