"""Repository implementations for Painel de Faturas.

Implements Repository pattern with Dependency Inversion principle.
"""

from painel_faturas.infrastructure.database.repositories.base import BaseRepository
from painel_faturas.infrastructure.database.repositories.dispatches import DispatchRepository
from painel_faturas.infrastructure.database.repositories.pdfs import PdfRepository

__all__ = [
    "BaseRepository",
    "DispatchRepository",
    "PdfRepository",
]
