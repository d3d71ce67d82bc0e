"""
FastAPI backend for short-lived markdown sharing.

Documents are stored in Redis with a native TTL and served from unguessable
URLs until they expire or are purged.
"""

# Performance: Install uvloop if available (Linux/macOS only)
try:
    import uvloop
    uvloop.install()
except ImportError:
    pass  # Windows - uvloop not available, use default asyncio

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, ORJSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.container import container
from core.exceptions import DocumentError
from core.health import set_startup_time
from core.logging import configure_logging, get_logger
from middleware.auth import AuthMiddleware
from routers import documents, health

# Initialize settings and logging
settings = container.settings()
configure_logging(settings)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    # Startup
    logger.info("Starting temp markdown service")
    set_startup_time()

    await container.store().startup()
    authenticator = container.authenticator()
    logger.info("API keys loaded", count=authenticator.key_count)

    logger.info("Services started successfully")
    yield

    # Shutdown
    await container.document_service().wait_for_pending()
    await container.store().shutdown()
    logger.info("Services shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Temp Markdown Service",
    version="1.0.0",
    description="Ephemeral markdown hosting with expiring share links",
    lifespan=lifespan,
    default_response_class=ORJSONResponse
)


@app.exception_handler(DocumentError)
async def document_error_handler(request: Request, exc: DocumentError):
    return documents.document_error_response(exc)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.info("Malformed request body", path=request.url.path, errors=len(exc.errors()))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Bad request",
            "message": "Request body must be a JSON object"
        }
    )


# Exception handler middleware BEFORE CORS to catch all errors
class CatchAllExceptionsMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error("Unhandled exception", error_type=type(e).__name__,
                         path=request.url.path, exc_info=True)
            # Internal details stay in the logs
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error": "Internal server error",
                    "message": "Unexpected server error"
                }
            )


app.add_middleware(CatchAllExceptionsMiddleware)

# API key check for write routes
app.add_middleware(AuthMiddleware)

# CORS middleware (must be AFTER exception middleware)
logger.info("Configuring CORS middleware",
           origins_count=len(settings.cors_origins),
           origins=settings.cors_origins)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-API-Key"],
)

# Include routers
app.include_router(health.router)
app.include_router(documents.router)


if __name__ == "__main__":
    import uvicorn
    logger.info("Starting temp markdown service",
               host=settings.host, port=settings.port, debug=settings.debug)
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_dirs=["."] if settings.debug else None,
        reload_excludes=["*.pyc", "__pycache__", "*.log"] if settings.debug else None,
        workers=1 if settings.debug else settings.workers
    )
