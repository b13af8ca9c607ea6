"""Health check module for Painel de Faturas."""

from painel_faturas.infrastructure.health.checks import (
    test_storage_connection,
    test_supabase_connection,
)
from painel_faturas.infrastructure.health.endpoints import get_health_status

__all__ = ["test_supabase_connection", "test_storage_connection", "get_health_status"]
