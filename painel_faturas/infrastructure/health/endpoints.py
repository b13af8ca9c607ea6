"""Health check endpoint handler for Painel de Faturas.

Provides /health payload with dependency testing.
"""

import asyncio
from typing import Any, Dict, Optional

from painel_faturas import __version__
from painel_faturas.core.periodic import BackgroundSupervisor
from painel_faturas.infrastructure.database import SupabaseClient
from painel_faturas.infrastructure.health.checks import (
    test_storage_connection,
    test_supabase_connection,
)
from painel_faturas.infrastructure.storage import ObjectStoreClient
from painel_faturas.utils.scheduling import utc_now


async def get_health_status(
    supabase: SupabaseClient,
    storage: ObjectStoreClient,
    supervisor: Optional[BackgroundSupervisor] = None,
    service_name: str = "painel-faturas",
) -> Dict[str, Any]:
    """Get comprehensive health status.

    Args:
        supabase: Shared Supabase client wrapper
        storage: Bucket client
        supervisor: Background task supervisor, if any
        service_name: Service name for response

    Returns:
        Dict with overall status, dependency health and background task state
    """
    # Test dependencies in parallel
    supabase_health, storage_health = await asyncio.gather(
        test_supabase_connection(supabase),
        test_storage_connection(storage),
        return_exceptions=True,
    )

    # Handle exceptions from gather
    if isinstance(supabase_health, Exception):
        supabase_health = {"status": "error", "error": str(supabase_health)}
    if isinstance(storage_health, Exception):
        storage_health = {"status": "error", "error": str(storage_health)}

    all_healthy = (
        supabase_health.get("status") == "healthy"
        and storage_health.get("status") == "healthy"
    )
    overall_status = "healthy" if all_healthy else "degraded"

    return {
        "status": overall_status,
        "service": service_name,
        "version": __version__,
        "dependencies": {"supabase": supabase_health, "storage": storage_health},
        "background_tasks": supervisor.status() if supervisor else {},
        "timestamp": utc_now().isoformat(),
    }
