"""Error classifier for Painel de Faturas.

Tags background failures so logs show whether a failed dispatch or listing was
worth a second look. Nothing is retried based on the category.
"""

import asyncio
from enum import Enum

import httpx

from painel_faturas.core.errors import (
    StorageUnavailableError,
    StoreUnavailableError,
    WebhookError,
)


class ErrorCategory(str, Enum):
    """Error categories for log classification.

    - TRANSIENT: Temporary errors (network timeouts, 5xx responses)
    - PERMANENT: Errors that will repeat (4xx responses, missing configuration)
    - UNKNOWN: Anything else
    """

    TRANSIENT = "transient"
    PERMANENT = "permanent"
    UNKNOWN = "unknown"


class ErrorClassifier:
    """Classifies errors into categories.

    Static methods for stateless classification.
    """

    @staticmethod
    def categorize(error: BaseException) -> ErrorCategory:
        """Categorize an error into TRANSIENT, PERMANENT, or UNKNOWN.

        Args:
            error: Exception to categorize

        Returns:
            ErrorCategory enum value
        """
        if isinstance(error, (StoreUnavailableError, StorageUnavailableError)):
            return ErrorCategory.PERMANENT

        # Unwrap the httpx error a WebhookError was raised from
        cause = error.__cause__ if isinstance(error, WebhookError) else None

        if isinstance(error, WebhookError) and error.status_code is not None:
            return ErrorClassifier.categorize_status(error.status_code)

        candidate = cause or error

        if isinstance(candidate, httpx.HTTPStatusError):
            return ErrorClassifier.categorize_status(candidate.response.status_code)

        if isinstance(
            candidate,
            (asyncio.TimeoutError, httpx.TimeoutException, httpx.NetworkError),
        ):
            return ErrorCategory.TRANSIENT

        error_str = str(error).lower()
        if "timeout" in error_str or "timed out" in error_str:
            return ErrorCategory.TRANSIENT

        if isinstance(candidate, ValueError):
            return ErrorCategory.PERMANENT

        return ErrorCategory.UNKNOWN

    @staticmethod
    def categorize_status(status_code: int) -> ErrorCategory:
        """Categorize an HTTP status code."""
        if status_code == 429 or status_code >= 500:
            return ErrorCategory.TRANSIENT
        if 400 <= status_code < 500:
            return ErrorCategory.PERMANENT
        return ErrorCategory.UNKNOWN
