"""Request models for Painel de Faturas API."""

import re
from datetime import datetime

from pydantic import BaseModel, Field, validator

from painel_faturas.infrastructure.database.models import ScheduleType
from painel_faturas.utils.scheduling import (
    DEFAULT_INTERVAL_MINUTES,
    MAX_BATCH_COUNT,
    MAX_INTERVAL_MINUTES,
    MIN_INTERVAL_MINUTES,
    ensure_utc,
    utc_now,
)

BIRTH_DATE_PATTERN = re.compile(r"^\d{2}/\d{2}/\d{4}$")


class InvoiceRequest(BaseModel):
    """Request for /invoices/request - immediate webhook submission."""

    uc: str = Field(..., min_length=1, description="Consumer unit (UC) identifier")
    cpfCnpj: str = Field(..., min_length=11, description="CPF or CNPJ of the UC holder")
    birthDate: str = Field(..., description="Birth date in dd/mm/yyyy format")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {"uc": "123456789", "cpfCnpj": "12345678900", "birthDate": "01/01/1990"}
            ]
        }
    }

    @validator("uc")
    def validate_uc(cls, v: str) -> str:
        """Reject blank UC."""
        if not v.strip():
            raise ValueError("UC é obrigatório")
        return v.strip()

    @validator("birthDate")
    def validate_birth_date(cls, v: str) -> str:
        """Birth date must be dd/mm/yyyy exactly."""
        if not BIRTH_DATE_PATTERN.match(v):
            raise ValueError("Data deve estar no formato dd/mm/aaaa")
        return v


class ScheduleDispatchRequest(InvoiceRequest):
    """Request for /invoices/schedule - one or more scheduled dispatches."""

    scheduleType: ScheduleType
    scheduledTime: datetime = Field(..., description="First fire time, must be in the future")
    multipleCount: int = Field(1, ge=1, le=MAX_BATCH_COUNT)
    intervalMinutes: int = Field(
        DEFAULT_INTERVAL_MINUTES, ge=MIN_INTERVAL_MINUTES, le=MAX_INTERVAL_MINUTES
    )

    @validator("scheduledTime")
    def validate_scheduled_time(cls, v: datetime) -> datetime:
        """Normalize to UTC and require a future instant."""
        v = ensure_utc(v)
        if v <= utc_now():
            raise ValueError("scheduledTime must be in the future")
        return v


class DispatchToggleRequest(BaseModel):
    """Request for PATCH /invoices/scheduled/{id}."""

    isActive: bool
