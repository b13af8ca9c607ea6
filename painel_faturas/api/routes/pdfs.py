"""PDF routes for Painel de Faturas - catalog and download proxy.

The browser never talks to the bucket directly: /pdfs/{id}/url hands out a
same-origin proxy URL and /api/pdf/{id} streams the bytes through this service.
"""

import asyncio
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from painel_faturas.api.dependencies import get_object_store, get_pdf_repository
from painel_faturas.api.routes.invoices import error_response, store_failure
from painel_faturas.core.errors import StorageError, StorageUnavailableError
from painel_faturas.core.logging import logger
from painel_faturas.infrastructure.database import PdfRepository
from painel_faturas.infrastructure.storage import ObjectStoreClient

router = APIRouter(tags=["PDFs"])


def content_disposition(filename: str) -> str:
    """Inline disposition with an ASCII fallback and an RFC 5987 UTF-8 name."""
    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', "") or "fatura.pdf"
    return f"inline; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


@router.get("/pdfs")
async def list_pdfs(repo: PdfRepository = Depends(get_pdf_repository)):
    """List every cataloged PDF, newest first."""
    try:
        pdfs = await asyncio.to_thread(repo.list_all)
    except Exception as e:
        return store_failure("list_pdfs", e)

    return JSONResponse(
        content={
            "success": True,
            "data": [pdf.to_api_dict() for pdf in pdfs],
            "count": len(pdfs),
        }
    )


@router.delete("/pdfs/{pdf_id}")
async def delete_pdf(pdf_id: int, repo: PdfRepository = Depends(get_pdf_repository)):
    """Remove a PDF from the catalog. Unknown ids still succeed with deleted=false."""
    try:
        deleted = await asyncio.to_thread(repo.delete, pdf_id)
    except Exception as e:
        return store_failure("delete_pdf", e)

    if deleted:
        logger.info("pdf_deleted", pdf_id=pdf_id)
    return JSONResponse(content={"success": True, "deleted": deleted})


@router.get("/pdfs/{pdf_id}/url")
async def get_pdf_url(
    pdf_id: int,
    request: Request,
    repo: PdfRepository = Depends(get_pdf_repository),
):
    """Same-origin proxy URL for a PDF."""
    try:
        pdf = await asyncio.to_thread(repo.get_by_id, pdf_id)
    except Exception as e:
        return store_failure("get_pdf", e)

    if pdf is None:
        return error_response(404, "PDF not found")

    base_url = str(request.base_url).rstrip("/")
    return JSONResponse(content={"success": True, "url": f"{base_url}/api/pdf/{pdf.id}"})


@router.get("/api/pdf/{pdf_id}")
async def download_pdf(
    pdf_id: int,
    repo: PdfRepository = Depends(get_pdf_repository),
    storage: ObjectStoreClient = Depends(get_object_store),
):
    """Stream a PDF from the bucket."""
    try:
        pdf = await asyncio.to_thread(repo.get_by_id, pdf_id)
    except Exception as e:
        return store_failure("get_pdf", e)

    if pdf is None:
        return error_response(404, "PDF not found")

    try:
        upstream = await storage.open_object(pdf.storage_key)
    except StorageUnavailableError as e:
        return error_response(503, str(e))
    except StorageError as e:
        logger.error("pdf_proxy_failed", pdf_id=pdf_id, storage_key=pdf.storage_key, error=str(e))
        return JSONResponse(
            status_code=502,
            content={"success": False, "error": "Failed to fetch PDF", "details": str(e)},
        )

    return StreamingResponse(
        upstream.aiter_bytes(),
        media_type="application/pdf",
        headers={
            "Content-Disposition": content_disposition(pdf.filename),
            "Cache-Control": "public, max-age=3600",
        },
        background=BackgroundTask(upstream.aclose),
    )
