"""Health check utilities for the /health endpoint.

Provides uptime tracking and a backing-store round-trip probe.
"""
import secrets
import time
from datetime import datetime, timezone
from typing import Dict, Any, TYPE_CHECKING

import psutil

from core.exceptions import StoreUnavailableError
from core.logging import get_logger

if TYPE_CHECKING:
    from core.store import RecordStore

logger = get_logger(__name__)

SERVICE_VERSION = "1.0.0"
HEALTH_CHECK_KEY = "health-check-test"

# Module-level startup time tracking
_startup_time: float = 0.0


def set_startup_time() -> None:
    """Record the application startup time. Call once during lifespan startup."""
    global _startup_time
    _startup_time = time.time()


def get_uptime() -> float:
    """Get uptime in seconds since startup."""
    return time.time() - _startup_time if _startup_time else 0.0


def get_memory_mb() -> float:
    """Get current process memory usage in MB."""
    try:
        return psutil.Process().memory_info().rss / (1024 * 1024)
    except psutil.Error:
        return 0.0


async def check_store(store: "RecordStore") -> bool:
    """Write, read back and delete a short-lived probe key."""
    value = f"{time.time_ns()}-{secrets.token_hex(4)}"
    # Unique key per probe so concurrent checks cannot overwrite each other
    try:
        healthy = await store.probe(f"{HEALTH_CHECK_KEY}:{value}", value, ttl_seconds=60)
    except StoreUnavailableError:
        return False
    logger.info("Store health probe", result="SUCCESS" if healthy else "FAILED")
    return healthy


async def get_health_status(store: "RecordStore") -> Dict[str, Any]:
    """Get health status for /health endpoint.

    Returns:
        Dict containing status, uptime, memory usage and per-service checks.
    """
    store_healthy = await check_store(store)

    return {
        "status": "healthy" if store_healthy else "unhealthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
        "uptime_seconds": round(get_uptime(), 1),
        "memory_mb": round(get_memory_mb(), 1),
        "services": {
            "redis": "ok" if store_healthy else "error",
        },
    }
