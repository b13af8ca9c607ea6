"""Health check functions for Painel de Faturas.

Tests connectivity to external dependencies (Supabase database and storage).
"""

import asyncio
from typing import Any, Dict

from painel_faturas.infrastructure.database import SupabaseClient
from painel_faturas.infrastructure.storage import ObjectStoreClient

CHECK_TIMEOUT_SECONDS = 2.0


async def test_supabase_connection(supabase: SupabaseClient) -> Dict[str, Any]:
    """Test Supabase connectivity with minimal query.

    Returns:
        Dict with status ("healthy", "unconfigured", "timeout", "unavailable")
        and optional error message
    """
    try:
        if not supabase.is_configured():
            return {"status": "unconfigured", "error": "Supabase credentials not set"}

        client = supabase.client

        await asyncio.wait_for(
            asyncio.to_thread(
                lambda: client.table("scheduled_dispatches").select("id").limit(1).execute()
            ),
            timeout=CHECK_TIMEOUT_SECONDS,
        )

        return {"status": "healthy", "database": "connected"}

    except asyncio.TimeoutError:
        return {"status": "timeout", "error": f"Request timed out after {CHECK_TIMEOUT_SECONDS:g}s"}

    except Exception as e:
        return {"status": "unavailable", "error": str(e)[:100]}


async def test_storage_connection(storage: ObjectStoreClient) -> Dict[str, Any]:
    """Test bucket access by listing the faturas folder.

    Returns:
        Dict with status ("healthy", "unconfigured", "timeout", "unavailable")
        and optional error message
    """
    try:
        if not storage.is_configured():
            return {"status": "unconfigured", "error": "Supabase Storage credentials not set"}

        files = await asyncio.wait_for(storage.list("faturas"), timeout=CHECK_TIMEOUT_SECONDS)

        return {"status": "healthy", "bucket": storage.bucket, "faturas": len(files)}

    except asyncio.TimeoutError:
        return {"status": "timeout", "error": f"Request timed out after {CHECK_TIMEOUT_SECONDS:g}s"}

    except Exception as e:
        return {"status": "unavailable", "error": str(e)[:100]}
