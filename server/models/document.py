"""Stored record for one ephemeral markdown document.

The record is JSON-serializable for Redis persistence. Keys are camelCase so
entries stay readable by other clients of the same key space.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

DEFAULT_TITLE = "Untitled"
UNKNOWN = "Unknown"

_FILENAME_UNSAFE = re.compile(r"[^a-zA-Z0-9]")


def _parse_timestamp(value: str) -> datetime:
    # JavaScript-style "Z" suffix is accepted for entries written by other clients
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def isoformat(value: datetime) -> str:
    """UTC ISO 8601 with millisecond precision and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class TempDocument:
    """Immutable stored document and its metadata.

    Attributes:
        id: Alphanumeric identifier (lookup key without namespace)
        content: Opaque markdown text
        title: Display label, only used to suggest a filename
        created_at: Creation instant (UTC)
        expires_at: Authoritative expiry instant (UTC)
        content_length: UTF-8 byte length of ``content``
        user_agent: Diagnostic provenance, never used in logic
        referrer: Diagnostic provenance, never used in logic
        client_ip: Diagnostic provenance, never used in logic
    """

    id: str
    content: str
    title: str
    created_at: datetime
    expires_at: datetime
    content_length: int
    user_agent: str = UNKNOWN
    referrer: str = UNKNOWN
    client_ip: Optional[str] = None

    def is_expired(self, now: datetime) -> bool:
        """Check whether ``now`` is past the authoritative expiry."""
        return now > self.expires_at

    @property
    def filename(self) -> str:
        """Suggested download filename derived from the title."""
        if self.title:
            return f"{_FILENAME_UNSAFE.sub('-', self.title)}.md"
        return f"markdown-{self.id}.md"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "title": self.title,
            "createdAt": isoformat(self.created_at),
            "expiresAt": isoformat(self.expires_at),
            "contentLength": self.content_length,
            "userAgent": self.user_agent,
            "referrer": self.referrer,
            "clientIp": self.client_ip,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], document_id: Optional[str] = None) -> "TempDocument":
        """Rebuild a record from its stored form.

        ``document_id`` fills in the id for entries that were written without
        one. Missing ``content`` or ``expiresAt`` raise ``KeyError``.
        """
        content = data["content"]
        return cls(
            id=data.get("id") or document_id or "",
            content=content,
            title=data.get("title") or "",
            created_at=_parse_timestamp(data.get("createdAt") or data["expiresAt"]),
            expires_at=_parse_timestamp(data["expiresAt"]),
            content_length=int(data.get("contentLength", len(content.encode("utf-8")))),
            user_agent=data.get("userAgent") or UNKNOWN,
            referrer=data.get("referrer") or UNKNOWN,
            client_ip=data.get("clientIp"),
        )
