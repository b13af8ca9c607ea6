"""API models for Painel de Faturas."""

from painel_faturas.api.models.requests import (
    DispatchToggleRequest,
    InvoiceRequest,
    ScheduleDispatchRequest,
)

__all__ = [
    "InvoiceRequest",
    "ScheduleDispatchRequest",
    "DispatchToggleRequest",
]
