"""Database models for Painel de Faturas.

Type-safe dataclasses representing database records.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class ScheduleType(str, Enum):
    """Recurrence of a scheduled dispatch."""

    ONCE = "once"
    DAILY = "daily"


class PdfType(str, Enum):
    """Kind of PDF produced by the automation."""

    FATURA = "fatura"
    RESUMO = "resumo"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class ScheduledDispatch:
    """Represents a row in the scheduled_dispatches table.

    scheduled_time is always the next fire time.
    """

    id: int
    uc: str
    cpf_cnpj: str
    birth_date: str
    schedule_type: ScheduleType
    scheduled_time: datetime
    last_executed: Optional[datetime] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_api_dict(self) -> Dict[str, Any]:
        """JSON representation using the external field names."""
        return {
            "id": self.id,
            "uc": self.uc,
            "cpfCnpj": self.cpf_cnpj,
            "birthDate": self.birth_date,
            "scheduleType": self.schedule_type.value,
            "scheduledTime": _iso(self.scheduled_time),
            "lastExecuted": _iso(self.last_executed),
            "isActive": self.is_active,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


@dataclass
class GeneratedPdf:
    """Represents a row in the generated_pdfs table.

    filename is the bare file name; storage_key keeps the folder prefix.
    """

    id: int
    filename: str
    storage_key: str
    storage_url: str
    pdf_type: PdfType
    file_size: int = 0
    created_at: Optional[datetime] = None

    def to_api_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "storageKey": self.storage_key,
            "storageUrl": self.storage_url,
            "fileSize": self.file_size,
            "pdfType": self.pdf_type.value,
            "createdAt": _iso(self.created_at),
        }
