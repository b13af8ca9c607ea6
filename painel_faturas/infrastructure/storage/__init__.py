"""Object storage module for Painel de Faturas."""

from painel_faturas.infrastructure.storage.client import (
    ObjectStoreClient,
    StorageObject,
    encode_storage_key,
)

__all__ = ["ObjectStoreClient", "StorageObject", "encode_storage_key"]
