"""Shared-secret API key validation for write operations."""

import hmac
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from core.logging import get_logger

logger = get_logger(__name__)

API_KEY_REQUIRED = "API key required"
INVALID_API_KEY = "Invalid API key"


@dataclass(frozen=True)
class AuthResult:
    """Outcome of an API key check."""
    valid: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "AuthResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: str) -> "AuthResult":
        return cls(valid=False, reason=reason)


class Authenticator:
    """Compares a caller-supplied secret against the configured key set.

    The key set is fixed at construction. Header extraction belongs to the
    caller; this class only compares.
    """

    def __init__(self, accepted_keys: Iterable[str]):
        self._accepted_keys: FrozenSet[bytes] = frozenset(
            key.encode("utf-8") for key in accepted_keys if key
        )
        if not self._accepted_keys:
            logger.warning("No API keys configured - all write requests will be rejected")

    @property
    def key_count(self) -> int:
        return len(self._accepted_keys)

    def validate(self, supplied: Optional[str]) -> AuthResult:
        """Validate ``supplied`` in constant time relative to each configured key."""
        if not supplied:
            return AuthResult.invalid(API_KEY_REQUIRED)

        candidate = supplied.encode("utf-8")
        matched = False
        # Compare against every key so timing does not reveal which one matched
        for key in self._accepted_keys:
            if hmac.compare_digest(candidate, key):
                matched = True

        if not matched:
            return AuthResult.invalid(INVALID_API_KEY)
        return AuthResult.ok()
