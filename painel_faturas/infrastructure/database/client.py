"""Supabase client for Painel de Faturas.

One instance is built by the application factory and handed to every
repository, the storage client and the background loops. When credentials are
missing the instance stays in an explicit unavailable state: is_configured()
returns False and touching .client raises StoreUnavailableError.
"""

from typing import Optional

from supabase import Client, create_client

from painel_faturas.config import config
from painel_faturas.core.errors import StoreUnavailableError
from painel_faturas.core.logging import logger


class SupabaseClient:
    """Supabase client wrapper with lazy initialization."""

    def __init__(
        self,
        url: Optional[str] = None,
        key: Optional[str] = None,
        client: Optional[Client] = None,
    ):
        """Initialize wrapper.

        Args:
            url: Supabase project URL
            key: Service role key
            client: Prebuilt client (skips create_client)
        """
        self.url = url.rstrip("/") if url else None
        self.key = key
        self._client: Optional[Client] = client

    @classmethod
    def from_config(cls) -> "SupabaseClient":
        """Build from SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY."""
        return cls(url=config.supabase_url(), key=config.supabase_service_role_key())

    @property
    def client(self) -> Client:
        """Get Supabase client, initializing if needed."""
        if self._client is None:
            if not self.url or not self.key:
                raise StoreUnavailableError(
                    "Supabase not configured. Set SUPABASE_URL and "
                    "SUPABASE_SERVICE_ROLE_KEY environment variables."
                )

            self._client = create_client(self.url, self.key)
            logger.info("supabase_client_initialized", url=self.url)

        return self._client

    def is_configured(self) -> bool:
        """Check if Supabase is properly configured."""
        if self._client is not None:
            return True
        return bool(self.url) and bool(self.key)

    @property
    def storage_base_url(self) -> Optional[str]:
        """Base URL of the Storage REST API (``<url>/storage/v1``)."""
        if not self.url:
            return None
        return f"{self.url}/storage/v1"
