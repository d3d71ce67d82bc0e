"""Temporary markdown routes: create, fetch and purge documents."""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, Field

from core.config import Settings
from core.container import container
from core.exceptions import DocumentError
from core.logging import get_logger
from models.document import TempDocument, isoformat
from routers.pages import render_error_page, wants_html
from services.documents import DocumentService

logger = get_logger(__name__)
router = APIRouter(prefix="/api/temp-markdown", tags=["temp-markdown"])

NO_CACHE_HEADERS = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


class CreateDocumentRequest(BaseModel):
    # Loosely typed so the service reports bad input as a 400, not a schema error
    content: Any = None
    title: Optional[Any] = None
    expires_in_hours: Any = Field(default=None, alias="expiresInHours")

    model_config = {"populate_by_name": True}


def get_document_service() -> DocumentService:
    return container.document_service()


def get_settings() -> Settings:
    return container.settings()


def error_payload(exc: DocumentError) -> dict:
    return {"success": False, "error": exc.error, "message": exc.message}


def document_error_response(exc: DocumentError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_payload(exc))


def build_base_url(request: Request, settings: Settings) -> str:
    """Externally visible base URL for links handed back to clients."""
    if settings.public_base_url:
        base = settings.public_base_url.rstrip("/")
        return base if "://" in base else f"https://{base}"

    proto = request.headers.get("x-forwarded-proto") or request.url.scheme
    host = request.headers.get("host") or request.url.netloc
    return f"{proto}://{host}"


def client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def markdown_response(document: TempDocument) -> Response:
    headers = {
        **NO_CACHE_HEADERS,
        "Content-Disposition": f'inline; filename="{document.filename}"',
    }
    return Response(
        content=document.content,
        media_type="text/markdown; charset=utf-8",
        headers=headers,
    )


async def _create(
    request: Request,
    body: CreateDocumentRequest,
    service: DocumentService,
    settings: Settings,
):
    document = await service.create(
        content=body.content,
        title=body.title,
        expires_in_hours=body.expires_in_hours,
        user_agent=request.headers.get("user-agent"),
        referrer=request.headers.get("referer") or request.headers.get("referrer"),
        client_ip=client_ip(request),
    )
    url = f"{build_base_url(request, settings)}{router.prefix}/{document.id}"
    hours = (document.expires_at - document.created_at).total_seconds() / 3600

    return JSONResponse(
        status_code=201,
        content={
            "success": True,
            "id": document.id,
            "url": url,
            "title": document.title,
            "expiresAt": isoformat(document.expires_at),
            "expiresInHours": int(hours) if hours.is_integer() else hours,
            "contentLength": document.content_length,
            "message": "Temporary markdown file created successfully",
        },
    )


@router.post("/create")
async def create_document(
    request: Request,
    body: CreateDocumentRequest,
    service: DocumentService = Depends(get_document_service),
    settings: Settings = Depends(get_settings)
):
    """Store a markdown document and return its short-lived URL."""
    return await _create(request, body, service, settings)


@router.post("")
async def create_document_alias(
    request: Request,
    body: CreateDocumentRequest,
    service: DocumentService = Depends(get_document_service),
    settings: Settings = Depends(get_settings)
):
    """Same as ``POST /create``."""
    return await _create(request, body, service, settings)


@router.get("/{document_id}")
async def fetch_document(
    document_id: str,
    request: Request,
    service: DocumentService = Depends(get_document_service)
):
    """Serve the raw markdown, or an error page/payload if it is gone."""
    try:
        document = await service.fetch(document_id)
    except DocumentError as e:
        if wants_html(request):
            return render_error_page(e.status_code, e.message)
        return document_error_response(e)

    return markdown_response(document)


@router.delete("/{document_id}")
async def purge_document(
    document_id: str,
    service: DocumentService = Depends(get_document_service)
):
    """Remove a document immediately (administrative cleanup)."""
    deleted = await service.purge(document_id)
    return {"success": True, "id": document_id, "deleted": deleted}
