"""Invoice routes for Painel de Faturas - immediate requests and scheduled dispatches."""

import asyncio

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from painel_faturas.api.dependencies import get_dispatch_repository, get_webhook_client
from painel_faturas.api.models import (
    DispatchToggleRequest,
    InvoiceRequest,
    ScheduleDispatchRequest,
)
from painel_faturas.core.errors import StoreUnavailableError, WebhookError
from painel_faturas.core.logging import logger
from painel_faturas.infrastructure.database import DispatchRepository
from painel_faturas.infrastructure.webhook import WebhookClient
from painel_faturas.utils.scheduling import calculate_batch_times

router = APIRouter(prefix="/invoices", tags=["Invoices"])


def error_response(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": error})


def store_failure(operation: str, e: Exception) -> JSONResponse:
    """Map a repository exception to a {success: false} response."""
    if isinstance(e, StoreUnavailableError):
        return error_response(503, str(e))
    logger.error(f"{operation}_failed", error=str(e))
    return error_response(500, f"Failed to {operation.replace('_', ' ')}: {str(e)}")


@router.post("/request")
async def request_invoice(
    request_data: InvoiceRequest,
    webhook: WebhookClient = Depends(get_webhook_client),
):
    """Request an invoice from the bot right now.

    - **uc**: Consumer unit identifier
    - **cpfCnpj**: CPF/CNPJ of the holder (min 11 chars)
    - **birthDate**: dd/mm/yyyy
    """
    try:
        data = await webhook.submit(request_data.uc, request_data.cpfCnpj, request_data.birthDate)
    except WebhookError as e:
        logger.warning("invoice_request_failed", uc=request_data.uc, error=str(e))
        return JSONResponse(content={"success": False, "error": str(e)})

    return JSONResponse(content={"success": True, "data": data})


@router.post("/schedule")
async def schedule_invoice(
    request_data: ScheduleDispatchRequest,
    repo: DispatchRepository = Depends(get_dispatch_repository),
):
    """Schedule one or more dispatches.

    - **scheduleType**: once or daily
    - **scheduledTime**: first fire time (future)
    - **multipleCount**: number of copies (1-20)
    - **intervalMinutes**: gap between copies (2-10)
    """
    times = calculate_batch_times(
        request_data.scheduledTime,
        count=request_data.multipleCount,
        interval_minutes=request_data.intervalMinutes,
    )

    try:
        dispatches = await asyncio.to_thread(
            repo.create_dispatches,
            uc=request_data.uc,
            cpf_cnpj=request_data.cpfCnpj,
            birth_date=request_data.birthDate,
            schedule_type=request_data.scheduleType,
            scheduled_times=times,
        )
    except Exception as e:
        return store_failure("schedule_dispatch", e)

    if not dispatches:
        return error_response(500, "Failed to create scheduled dispatch")

    items = [dispatch.to_api_dict() for dispatch in dispatches]
    return JSONResponse(
        content={
            "success": True,
            "dispatch": items[0],
            "dispatches": items,
            "count": len(items),
        }
    )


@router.get("/scheduled")
async def list_scheduled(repo: DispatchRepository = Depends(get_dispatch_repository)):
    """List active scheduled dispatches, next fire time first."""
    try:
        dispatches = await asyncio.to_thread(repo.list_active)
    except Exception as e:
        return store_failure("list_dispatches", e)

    return JSONResponse(
        content={
            "success": True,
            "data": [dispatch.to_api_dict() for dispatch in dispatches],
            "count": len(dispatches),
        }
    )


@router.delete("/scheduled/{dispatch_id}")
async def delete_scheduled(
    dispatch_id: int,
    repo: DispatchRepository = Depends(get_dispatch_repository),
):
    """Delete a scheduled dispatch. Unknown ids still succeed with deleted=false."""
    try:
        deleted = await asyncio.to_thread(repo.delete, dispatch_id)
    except Exception as e:
        return store_failure("delete_dispatch", e)

    if deleted:
        logger.info("dispatch_deleted", dispatch_id=dispatch_id)
    return JSONResponse(content={"success": True, "deleted": deleted})


@router.patch("/scheduled/{dispatch_id}")
async def toggle_scheduled(
    dispatch_id: int,
    request_data: DispatchToggleRequest,
    repo: DispatchRepository = Depends(get_dispatch_repository),
):
    """Activate or pause a scheduled dispatch."""
    try:
        dispatch = await asyncio.to_thread(repo.set_active, dispatch_id, request_data.isActive)
    except Exception as e:
        return store_failure("toggle_dispatch", e)

    if dispatch is None:
        return error_response(404, f"Dispatch {dispatch_id} not found")

    return JSONResponse(content={"success": True, "data": dispatch.to_api_dict()})
