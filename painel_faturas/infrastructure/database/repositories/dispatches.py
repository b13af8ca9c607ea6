"""Scheduled dispatches repository for Painel de Faturas.

Handles CRUD operations for invoice request schedules.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from painel_faturas.core.logging import logger
from painel_faturas.infrastructure.database.models import ScheduledDispatch, ScheduleType
from painel_faturas.infrastructure.database.repositories.base import BaseRepository
from painel_faturas.utils.scheduling import parse_timestamp, utc_now


class DispatchRepository(BaseRepository[ScheduledDispatch]):
    """Repository for scheduled_dispatches table."""

    def table_name(self) -> str:
        """Return table name."""
        return "scheduled_dispatches"

    def create_dispatches(
        self,
        uc: str,
        cpf_cnpj: str,
        birth_date: str,
        schedule_type: ScheduleType,
        scheduled_times: List[datetime],
    ) -> List[ScheduledDispatch]:
        """Create one active dispatch per fire time.

        Args:
            uc: Consumer unit identifier
            cpf_cnpj: Tax id
            birth_date: Birth date (dd/mm/yyyy)
            schedule_type: once or daily
            scheduled_times: First fire time of each copy

        Returns:
            Created ScheduledDispatch rows, in the order of scheduled_times
        """
        now = utc_now().isoformat()
        rows = [
            {
                "uc": uc,
                "cpf_cnpj": cpf_cnpj,
                "birth_date": birth_date,
                "schedule_type": ScheduleType(schedule_type).value,
                "scheduled_time": scheduled_time.isoformat(),
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
            for scheduled_time in scheduled_times
        ]

        result = self._execute("insert", lambda: self._table().insert(rows))

        logger.info("dispatches_created", uc=uc, count=len(result.data or []))
        return [self._row_to_model(row) for row in result.data or []]

    def list_active(self) -> List[ScheduledDispatch]:
        """List active dispatches ordered by next fire time."""
        result = self._execute(
            "list_active",
            lambda: self._table()
            .select("*")
            .eq("is_active", True)
            .order("scheduled_time"),
        )
        return [self._row_to_model(row) for row in result.data or []]

    def get_by_id(self, dispatch_id: int) -> Optional[ScheduledDispatch]:
        result = self._execute(
            "get", lambda: self._table().select("*").eq("id", dispatch_id)
        )
        if not result.data:
            return None
        return self._row_to_model(result.data[0])

    def get_due(self, current_time: datetime) -> List[ScheduledDispatch]:
        """Get active dispatches whose fire time has passed.

        No ordering is requested; rows come back in the store's natural order.
        """
        result = self._execute(
            "get_due",
            lambda: self._table()
            .select("*")
            .eq("is_active", True)
            .lte("scheduled_time", current_time.isoformat()),
        )
        return [self._row_to_model(row) for row in result.data or []]

    def record_execution(
        self,
        dispatch_id: int,
        executed_at: datetime,
        next_scheduled_time: Optional[datetime] = None,
        is_active: Optional[bool] = None,
    ) -> None:
        """Store the outcome of one execution.

        Args:
            dispatch_id: Dispatch id
            executed_at: Value for last_executed
            next_scheduled_time: New scheduled_time (daily dispatches)
            is_active: New is_active flag, left untouched when None
        """
        update_data: Dict[str, Any] = {
            "last_executed": executed_at.isoformat(),
            "updated_at": utc_now().isoformat(),
        }
        if next_scheduled_time is not None:
            update_data["scheduled_time"] = next_scheduled_time.isoformat()
        if is_active is not None:
            update_data["is_active"] = is_active

        self._execute(
            "record_execution",
            lambda: self._table().update(update_data).eq("id", dispatch_id),
        )

    def set_active(self, dispatch_id: int, is_active: bool) -> Optional[ScheduledDispatch]:
        """Toggle is_active.

        Returns:
            Updated dispatch, or None if the id does not exist
        """
        result = self._execute(
            "set_active",
            lambda: self._table().update({"is_active": is_active}).eq("id", dispatch_id),
        )
        if not result.data:
            return None

        logger.info("dispatch_toggled", dispatch_id=dispatch_id, is_active=is_active)
        return self._row_to_model(result.data[0])

    def delete(self, dispatch_id: int) -> bool:
        """Delete a dispatch.

        Returns:
            True if a row was removed, False if the id was unknown
        """
        result = self._execute(
            "delete", lambda: self._table().delete().eq("id", dispatch_id)
        )
        return bool(result.data)

    def _row_to_model(self, row: Dict[str, Any]) -> ScheduledDispatch:
        """Convert database row to ScheduledDispatch model."""
        return ScheduledDispatch(
            id=row["id"],
            uc=row["uc"],
            cpf_cnpj=row["cpf_cnpj"],
            birth_date=row["birth_date"],
            schedule_type=ScheduleType(row["schedule_type"]),
            scheduled_time=parse_timestamp(row["scheduled_time"]),
            last_executed=parse_timestamp(row.get("last_executed")),
            is_active=row.get("is_active", True),
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )
