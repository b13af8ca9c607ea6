"""Exception hierarchy for Painel de Faturas."""


class PainelError(Exception):
    """Base class for all application errors."""


class StoreUnavailableError(PainelError):
    """Supabase database credentials are not configured."""


class StoreError(PainelError):
    """A database query failed."""


class WebhookError(PainelError):
    """The invoice automation webhook call failed.

    Covers network failures, timeouts and non-2xx responses.
    """

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class StorageError(PainelError):
    """An object storage operation failed."""


class StorageUnavailableError(StorageError):
    """Supabase Storage credentials are not configured."""
