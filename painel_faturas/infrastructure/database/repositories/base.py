"""Base repository interface for Painel de Faturas.

Implements Repository pattern with Dependency Inversion principle.
All concrete repositories inherit from BaseRepository.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from painel_faturas.core.errors import StoreError, StoreUnavailableError
from painel_faturas.infrastructure.database.client import SupabaseClient

T = TypeVar("T")


class BaseRepository(ABC, Generic[T]):
    """Abstract base repository for database operations.

    Provides dependency inversion - depend on repository interface, not concrete tables.
    """

    def __init__(self, client: SupabaseClient):
        """Initialize repository with an explicitly constructed Supabase client."""
        self._client = client

    @property
    def db(self):
        """Get Supabase client instance."""
        return self._client.client

    def is_available(self) -> bool:
        return self._client.is_configured()

    @abstractmethod
    def table_name(self) -> str:
        """Return the table name this repository manages."""
        pass

    def _table(self):
        return self.db.table(self.table_name())

    def _execute(self, operation: str, build: Callable[[], Any]) -> Any:
        """Run a query and normalize failures.

        StoreUnavailableError passes through untouched; any other exception is
        wrapped in StoreError.
        """
        try:
            return build().execute()
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreError(f"{self.table_name()}.{operation} failed: {e}") from e
