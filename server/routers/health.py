"""Health check routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from core.container import container
from core.health import get_health_status
from core.store import RecordStore

router = APIRouter(tags=["health"])


def get_store() -> RecordStore:
    return container.store()


@router.get("/health")
@router.get("/api/health")
async def health_check(store: RecordStore = Depends(get_store)):
    """Probe the backing store; 503 when it cannot round-trip a value."""
    health = await get_health_status(store)
    status_code = 200 if health["status"] == "healthy" else 503
    return JSONResponse(status_code=status_code, content=health)
