"""Short random identifiers for document URLs."""

import re
import secrets
import string

ALPHABET = string.ascii_letters + string.digits

_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9]+")


def is_valid_identifier(value: object, min_length: int = 8, max_length: int = 20) -> bool:
    """Check length and character class of a caller-supplied identifier."""
    if not isinstance(value, str):
        return False
    if not min_length <= len(value) <= max_length:
        return False
    return _IDENTIFIER_PATTERN.fullmatch(value) is not None


class IdentifierGenerator:
    """Generates fixed-length alphanumeric identifiers.

    Uses the ``secrets`` CSPRNG so ids cannot be derived from request time or
    other public information.
    """

    def __init__(self, length: int = 12):
        self.length = length

    def generate(self) -> str:
        return "".join(secrets.choice(ALPHABET) for _ in range(self.length))
