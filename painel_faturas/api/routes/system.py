"""System routes for Painel de Faturas."""

from fastapi import APIRouter, Depends

from painel_faturas.api.dependencies import get_object_store, get_supabase, get_supervisor
from painel_faturas.core.periodic import BackgroundSupervisor
from painel_faturas.infrastructure.database import SupabaseClient
from painel_faturas.infrastructure.health import get_health_status
from painel_faturas.infrastructure.storage import ObjectStoreClient

router = APIRouter(tags=["System"])


@router.get("/health")
async def health_check(
    supabase: SupabaseClient = Depends(get_supabase),
    storage: ObjectStoreClient = Depends(get_object_store),
    supervisor: BackgroundSupervisor = Depends(get_supervisor),
):
    """Health check with Supabase database/storage testing and background task state."""
    return await get_health_status(supabase, storage, supervisor)
