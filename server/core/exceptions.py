"""Document lifecycle exception hierarchy.

Each error carries the HTTP status the request layer maps it to and a
client-safe message. Backing-store details never appear in ``message``.
"""


class DocumentError(Exception):
    """Base exception for all document lifecycle errors."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(DocumentError):
    """Bad input shape or size, detected before any store access."""

    status_code = 400
    error = "Bad request"


class PayloadTooLargeError(ValidationError):
    """Content exceeds the configured maximum length."""

    status_code = 413
    error = "Payload too large"

    def __init__(self, max_length: int):
        self.max_length = max_length
        super().__init__(f"Content too large (max {max_length} characters)")


class AuthError(DocumentError):
    """Missing or invalid API key."""

    status_code = 401
    error = "Unauthorized"


class NotFoundError(DocumentError):
    """No live record exists for the identifier."""

    status_code = 404
    error = "Not found"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__("Temporary markdown file not found or expired")


class ExpiredError(DocumentError):
    """Record exists but is logically past its ``expiresAt``."""

    status_code = 410
    error = "Gone"

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__("Temporary markdown file has expired")


class StoreUnavailableError(DocumentError):
    """Backing store failed: unreachable, rejected credentials or payload."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("Storage backend unavailable")
