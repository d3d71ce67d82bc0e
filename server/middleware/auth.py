"""API key middleware guarding write routes."""

from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware

from core.container import container
from core.logging import get_logger

logger = get_logger(__name__)

# Path prefixes whose write methods require an API key
PROTECTED_PREFIXES = (
    "/api/temp-markdown",
)

# Methods the protected routes accept that need a key. Anything else falls
# through to routing, so reads pass and unsupported methods get 405.
PROTECTED_METHODS = frozenset(["POST", "DELETE"])

BEARER_PREFIX = "Bearer "


def extract_api_key(headers: Headers) -> Optional[str]:
    """Read the key from ``X-API-Key`` or a bearer ``Authorization`` header."""
    api_key = headers.get("x-api-key")
    if api_key:
        return api_key.strip()

    authorization = headers.get("authorization")
    if authorization:
        if authorization.startswith(BEARER_PREFIX):
            return authorization[len(BEARER_PREFIX):].strip()
        return authorization.strip()

    return None


class AuthMiddleware(BaseHTTPMiddleware):
    """Middleware to require a valid API key on write requests."""

    async def dispatch(self, request: Request, call_next):
        if not self._requires_auth(request.method, request.url.path):
            return await call_next(request)

        authenticator = container.authenticator()
        result = authenticator.validate(extract_api_key(request.headers))

        if not result.valid:
            logger.info("Rejected write request", path=request.url.path, reason=result.reason)
            return JSONResponse(
                status_code=401,
                content={"success": False, "error": result.reason}
            )

        return await call_next(request)

    def _requires_auth(self, method: str, path: str) -> bool:
        """Check if the request is a write on a protected path."""
        if method.upper() not in PROTECTED_METHODS:
            return False

        for prefix in PROTECTED_PREFIXES:
            if path == prefix or path.startswith(prefix + "/"):
                return True

        return False
