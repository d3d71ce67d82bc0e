"""Record store backed by Redis with native per-key TTL.

Owns the encode/decode of stored documents. Every backing-service failure is
reported as ``StoreUnavailableError``; nothing is retried here.
"""

import json
from contextlib import asynccontextmanager
from typing import Any, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from core.config import Settings
from core.exceptions import StoreUnavailableError
from core.logging import get_logger, log_store_operation
from models.document import TempDocument

logger = get_logger(__name__)

KEY_NAMESPACE = "temp-markdown"


def document_key(document_id: str) -> str:
    """Namespaced lookup key for a document id."""
    return f"{KEY_NAMESPACE}:{document_id}"


def _document_id(key: str) -> str:
    return key.split(":", 1)[-1]


class RecordStore:
    """Async key-value store for ``TempDocument`` records.

    Holds one long-lived client for the whole process. Tests inject a client
    implementing the same async subset (``set``, ``get``, ``delete``,
    ``exists``, ``ping``, ``aclose``).
    """

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.settings = settings
        self.redis = client

    async def startup(self) -> None:
        """Create the shared client and verify connectivity."""
        if self.redis is None:
            self.redis = redis.from_url(
                self.settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
                socket_timeout=self.settings.store_timeout_seconds,
                socket_connect_timeout=self.settings.store_timeout_seconds,
            )

        if await self.ping():
            logger.info("Record store initialized")
        else:
            # Requests will surface the failure individually
            logger.warning("Record store not reachable at startup")

    async def shutdown(self) -> None:
        """Close the store connection."""
        if self.redis is not None:
            await self.redis.aclose()
            self.redis = None
            logger.info("Record store connection closed")

    @asynccontextmanager
    async def _guard(self, operation: str, key: str):
        if self.redis is None:
            logger.error("Record store used before startup", operation=operation, key=key)
            raise StoreUnavailableError(operation)
        try:
            yield
        except (RedisError, OSError) as e:
            logger.error("Store operation failed", operation=operation, key=key,
                         error_type=type(e).__name__, error=str(e))
            raise StoreUnavailableError(operation) from e

    async def ping(self) -> bool:
        """Check backing-service connectivity without raising."""
        if self.redis is None:
            return False
        try:
            return bool(await self.redis.ping())
        except (RedisError, OSError) as e:
            logger.warning("Store ping failed", error=str(e))
            return False

    async def put(self, key: str, record: TempDocument, ttl_seconds: int) -> None:
        """Persist ``record`` under ``key`` with a native expiry, overwriting."""
        serialized = json.dumps(record.to_dict(), ensure_ascii=False)
        async with self._guard("put", key):
            await self.redis.set(key, serialized, ex=ttl_seconds)
        log_store_operation(logger, "put", key, ttl=ttl_seconds, size=len(serialized))

    async def get(self, key: str) -> Optional[TempDocument]:
        """Return the stored record, or None if absent or evicted."""
        async with self._guard("get", key):
            value = await self.redis.get(key)

        if value is None:
            log_store_operation(logger, "get", key, hit=False)
            return None

        log_store_operation(logger, "get", key, hit=True)
        try:
            return TempDocument.from_dict(json.loads(value), document_id=_document_id(key))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning("Discarding undecodable record", key=key, error=str(e))
            return None

    async def delete(self, key: str) -> bool:
        """Remove the entry immediately. Deleting an absent key is not an error."""
        async with self._guard("delete", key):
            deleted = await self.redis.delete(key)
        log_store_operation(logger, "delete", key, deleted=bool(deleted))
        return bool(deleted)

    async def exists(self, key: str) -> bool:
        """Check if a key is currently live."""
        async with self._guard("exists", key):
            return bool(await self.redis.exists(key))

    async def probe(self, key: str, value: str, ttl_seconds: int = 60) -> bool:
        """Round-trip a raw value through the store (health checks)."""
        async with self._guard("probe", key):
            await self.redis.set(key, value, ex=ttl_seconds)
            retrieved = await self.redis.get(key)
            await self.redis.delete(key)
        return retrieved == value

    def is_connected(self) -> bool:
        """Check if a client has been created."""
        return self.redis is not None
