"""Supabase Storage client for Painel de Faturas.

Lists the PDFs the automation drops into the bucket, derives their public
URLs and opens downloads for the proxy endpoint.

Bucket layout:
  celesc-faturas/
  ├── faturas/
  │   └── <name>.pdf
  └── resumos/
      └── <name>.pdf
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from painel_faturas.config import config
from painel_faturas.core.errors import StorageError, StorageUnavailableError, StoreUnavailableError
from painel_faturas.core.logging import logger
from painel_faturas.infrastructure.database.client import SupabaseClient

LIST_LIMIT = 1000
HEAD_TIMEOUT_SECONDS = 5.0
DOWNLOAD_TIMEOUT_SECONDS = 30.0


@dataclass
class StorageObject:
    """One entry of a bucket listing."""

    name: str
    size: Optional[int] = None

    @classmethod
    def from_listing(cls, entry: Dict[str, Any]) -> "StorageObject":
        metadata = entry.get("metadata") or {}
        size = metadata.get("size")
        return cls(name=entry["name"], size=int(size) if size else None)


def encode_storage_key(storage_key: str) -> str:
    """URL-encode each path segment independently and rejoin with '/'.

    >>> encode_storage_key("resumos/Jane Doe.pdf")
    'resumos/Jane%20Doe.pdf'
    """
    return "/".join(quote(segment, safe="") for segment in storage_key.lstrip("/").split("/"))


class ObjectStoreClient:
    """Bucket operations backed by supabase-py storage and httpx."""

    def __init__(
        self,
        supabase: SupabaseClient,
        bucket: Optional[str] = None,
        signed_url_ttl: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize storage client.

        Args:
            supabase: Shared Supabase client wrapper
            bucket: Bucket name (defaults to STORAGE_BUCKET)
            signed_url_ttl: Signed URL lifetime in seconds
            transport: Optional httpx transport, used by tests
        """
        self._supabase = supabase
        self.bucket = bucket or config.storage_bucket()
        self.signed_url_ttl = signed_url_ttl or config.signed_url_ttl_seconds()
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    def is_configured(self) -> bool:
        return self._supabase.is_configured() and bool(self._supabase.storage_base_url)

    def _bucket(self):
        try:
            return self._supabase.client.storage.from_(self.bucket)
        except StoreUnavailableError as e:
            raise StorageUnavailableError(str(e)) from e

    def _http_client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(transport=self._transport, follow_redirects=True)
        return self._http

    def _require_base_url(self) -> str:
        base_url = self._supabase.storage_base_url
        if not base_url:
            raise StorageUnavailableError("Supabase Storage not configured. Set SUPABASE_URL.")
        return base_url

    async def list(self, folder: str) -> List[StorageObject]:
        """List PDFs under a folder, newest first.

        Args:
            folder: Folder prefix (e.g. 'faturas')

        Returns:
            Entries whose name ends in .pdf, folder placeholder excluded

        Raises:
            StorageError: If the listing call fails
        """
        bucket = self._bucket()
        options = {
            "limit": LIST_LIMIT,
            "offset": 0,
            "sortBy": {"column": "created_at", "order": "desc"},
        }

        try:
            entries = await asyncio.to_thread(bucket.list, folder, options)
        except Exception as e:
            raise StorageError(f"Listing {self.bucket}/{folder} failed: {e}") from e

        files = [
            StorageObject.from_listing(entry)
            for entry in entries or []
            if entry.get("name")
            and entry["name"] != folder
            and entry["name"].endswith(".pdf")
        ]

        logger.debug("storage_listed", folder=folder, count=len(files))
        return files

    def public_url(self, storage_key: str) -> str:
        """Public download URL of an object."""
        base_url = self._require_base_url()
        return f"{base_url}/object/public/{self.bucket}/{encode_storage_key(storage_key)}"

    def authenticated_url(self, storage_key: str) -> str:
        """Direct object URL that needs the service key."""
        base_url = self._require_base_url()
        return f"{base_url}/object/{self.bucket}/{encode_storage_key(storage_key)}"

    async def head_size(self, url: str) -> int:
        """Read Content-Length with a HEAD request.

        Returns:
            Size in bytes, 0 if the HEAD request fails or the header is missing
        """
        try:
            response = await self._http_client().head(url, timeout=HEAD_TIMEOUT_SECONDS)
            response.raise_for_status()
            return int(response.headers.get("content-length", "0") or 0)
        except (httpx.HTTPError, ValueError) as e:
            logger.debug("storage_head_size_failed", url=url, error=str(e))
            return 0

    async def signed_url(self, storage_key: str) -> str:
        """Request a short-lived signed URL for an object.

        Raises:
            StorageError: If signing fails
        """
        bucket = self._bucket()
        try:
            result = await asyncio.to_thread(
                bucket.create_signed_url, storage_key, self.signed_url_ttl
            )
        except Exception as e:
            raise StorageError(f"Signing {storage_key} failed: {e}") from e

        signed = (result or {}).get("signedURL") or (result or {}).get("signedUrl")
        if not signed:
            raise StorageError(f"Signing {storage_key} returned no URL")

        if signed.startswith("/"):
            signed = f"{self._require_base_url()}{signed}"
        return signed

    async def open_object(self, storage_key: str) -> httpx.Response:
        """Open a streaming download of an object.

        Tries a signed URL first and falls back to an authenticated direct
        fetch. The caller must close the returned response.

        Raises:
            StorageUnavailableError: If storage is not configured
            StorageError: If both download paths fail
        """
        if not self.is_configured():
            raise StorageUnavailableError("Supabase Storage not configured.")

        try:
            url = await self.signed_url(storage_key)
            response = await self._open_stream(url)
            if response.status_code == 200:
                return response
            await response.aclose()
            logger.warning(
                "storage_signed_download_failed",
                storage_key=storage_key,
                status_code=response.status_code,
            )
        except StorageUnavailableError:
            raise
        except (StorageError, httpx.HTTPError) as e:
            logger.warning("storage_signed_download_failed", storage_key=storage_key, error=str(e))

        key = self._supabase.key
        headers = {"Authorization": f"Bearer {key}", "apikey": key}
        try:
            response = await self._open_stream(self.authenticated_url(storage_key), headers)
        except httpx.HTTPError as e:
            raise StorageError(f"Direct download of {storage_key} failed: {e}") from e

        if response.status_code != 200:
            await response.aclose()
            raise StorageError(
                f"Direct download of {storage_key} returned HTTP {response.status_code}"
            )

        logger.info("storage_direct_download", storage_key=storage_key)
        return response

    async def _open_stream(self, url: str, headers: Optional[Dict[str, str]] = None) -> httpx.Response:
        client = self._http_client()
        request = client.build_request("GET", url, headers=headers, timeout=DOWNLOAD_TIMEOUT_SECONDS)
        return await client.send(request, stream=True)

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None
