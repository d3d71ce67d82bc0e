"""Ephemeral document lifecycle: create, fetch, purge.

Create persists a record with a native store TTL. Fetch re-checks the stored
``expiresAt`` because TTL eviction is not guaranteed to be atomic with read
visibility, and lazily deletes records it finds expired.
"""

import asyncio
import math
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional, Set

from core.config import Settings
from core.exceptions import (
    ExpiredError,
    NotFoundError,
    PayloadTooLargeError,
    StoreUnavailableError,
    ValidationError,
)
from core.logging import get_logger, log_document_event
from core.store import RecordStore, document_key
from models.document import DEFAULT_TITLE, UNKNOWN, TempDocument
from services.identifiers import IdentifierGenerator, is_valid_identifier

logger = get_logger(__name__)

MAX_ID_ATTEMPTS = 5


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def clamp_hours(hours: float, minimum: float, maximum: float) -> float:
    """Clamp a requested lifetime into ``[minimum, maximum]``."""
    return min(max(hours, minimum), maximum)


class DocumentService:
    """Orchestrates identifier generation, record building and persistence."""

    def __init__(
        self,
        store: RecordStore,
        id_generator: IdentifierGenerator,
        settings: Settings,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.id_generator = id_generator
        self.settings = settings
        self.clock = clock or _utcnow
        self._pending: Set[asyncio.Task] = set()

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def _validate_content(self, content: Any) -> str:
        if not isinstance(content, str) or not content:
            raise ValidationError("Content is required and must be a string")
        if len(content) > self.settings.max_content_length:
            raise PayloadTooLargeError(self.settings.max_content_length)
        return content

    def _resolve_hours(self, expires_in_hours: Any) -> float:
        if expires_in_hours is None:
            hours = self.settings.default_ttl_hours
        elif isinstance(expires_in_hours, bool):
            raise ValidationError("expiresInHours must be a number")
        else:
            try:
                hours = float(expires_in_hours)
            except (TypeError, ValueError):
                raise ValidationError("expiresInHours must be a number")
            except OverflowError:
                # Integers beyond float range, e.g. 10**400 from a JSON body
                raise ValidationError("expiresInHours must be a finite number")
            if not math.isfinite(hours):
                raise ValidationError("expiresInHours must be a finite number")

        clamped = clamp_hours(hours, self.settings.min_ttl_hours, self.settings.max_ttl_hours)
        # Whole hours stay ints in responses
        return int(clamped) if float(clamped).is_integer() else clamped

    def _validate_id(self, document_id: Any) -> str:
        if not is_valid_identifier(
            document_id,
            min_length=self.settings.id_min_length,
            max_length=self.settings.id_max_length,
        ):
            raise ValidationError("Invalid ID format")
        return document_id

    # =========================================================================
    # OPERATIONS
    # =========================================================================

    async def _allocate_id(self) -> str:
        for attempt in range(MAX_ID_ATTEMPTS):
            document_id = self.id_generator.generate()
            if not await self.store.exists(document_key(document_id)):
                return document_id
            logger.warning("Identifier collision, regenerating", attempt=attempt + 1)
        logger.error("Could not allocate a free identifier", attempts=MAX_ID_ATTEMPTS)
        raise StoreUnavailableError("allocate_id")

    async def create(
        self,
        content: Any,
        title: Optional[str] = None,
        expires_in_hours: Any = None,
        user_agent: Optional[str] = None,
        referrer: Optional[str] = None,
        client_ip: Optional[str] = None,
    ) -> TempDocument:
        """Validate, build and persist a new document.

        Raises:
            ValidationError: bad content or lifetime (nothing is written)
            PayloadTooLargeError: content over the configured limit
            StoreUnavailableError: backing store failed
        """
        content = self._validate_content(content)
        hours = self._resolve_hours(expires_in_hours)
        if title is not None and not isinstance(title, str):
            raise ValidationError("Title must be a string")

        document_id = await self._allocate_id()
        created_at = self.clock()
        record = TempDocument(
            id=document_id,
            content=content,
            title=title or DEFAULT_TITLE,
            created_at=created_at,
            expires_at=created_at + timedelta(hours=hours),
            content_length=len(content.encode("utf-8")),
            user_agent=user_agent or UNKNOWN,
            referrer=referrer or UNKNOWN,
            client_ip=client_ip,
        )

        ttl_seconds = math.ceil(hours * 3600)
        await self.store.put(document_key(document_id), record, ttl_seconds)

        log_document_event(logger, "Created temp markdown", document_id,
                           size=record.content_length,
                           expires_at=record.expires_at.isoformat())
        return record

    async def fetch(self, document_id: Any) -> TempDocument:
        """Return a live document.

        Raises:
            ValidationError: malformed id (no store access)
            NotFoundError: never issued, purged or evicted
            ExpiredError: stored but past ``expiresAt``; a lazy delete is scheduled
            StoreUnavailableError: backing store failed
        """
        document_id = self._validate_id(document_id)
        key = document_key(document_id)

        record = await self.store.get(key)
        if record is None:
            raise NotFoundError(document_id)

        if record.is_expired(self.clock()):
            self._schedule_lazy_delete(key)
            log_document_event(logger, "Temp markdown expired on read", document_id,
                               expires_at=record.expires_at.isoformat())
            raise ExpiredError(document_id)

        log_document_event(logger, "Retrieved temp markdown", document_id,
                           size=record.content_length)
        return record

    async def purge(self, document_id: Any) -> bool:
        """Delete a document immediately. Idempotent.

        Returns:
            True if an entry was removed, False if none existed
        """
        document_id = self._validate_id(document_id)
        deleted = await self.store.delete(document_key(document_id))
        log_document_event(logger, "Purged temp markdown", document_id, deleted=deleted)
        return deleted

    # =========================================================================
    # LAZY DELETE
    # =========================================================================

    def _schedule_lazy_delete(self, key: str) -> None:
        task = asyncio.create_task(self._lazy_delete(key))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _lazy_delete(self, key: str) -> None:
        try:
            await self.store.delete(key)
        except StoreUnavailableError as e:
            # The record is already semantically gone; native TTL will finish the job
            logger.warning("Lazy delete failed", key=key, error=e.message)

    async def wait_for_pending(self) -> None:
        """Wait for outstanding lazy deletes."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    @property
    def pending_count(self) -> int:
        return len(self._pending)
