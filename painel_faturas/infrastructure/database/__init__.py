"""Database module for Painel de Faturas.

Provides the Supabase client wrapper and repository pattern for database operations.
"""

from painel_faturas.infrastructure.database.client import SupabaseClient
from painel_faturas.infrastructure.database.models import (
    GeneratedPdf,
    PdfType,
    ScheduledDispatch,
    ScheduleType,
)
from painel_faturas.infrastructure.database.repositories import (
    BaseRepository,
    DispatchRepository,
    PdfRepository,
)

__all__ = [
    "SupabaseClient",
    "GeneratedPdf",
    "PdfType",
    "ScheduledDispatch",
    "ScheduleType",
    "BaseRepository",
    "DispatchRepository",
    "PdfRepository",
]
