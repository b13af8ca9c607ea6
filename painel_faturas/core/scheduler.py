"""Dispatch scheduler for Painel de Faturas.

Fires the invoice webhook for every due dispatch and moves each one forward:
daily dispatches are rescheduled 24h after their previous fire time, one-time
dispatches are removed. A webhook failure is logged and otherwise handled
like a success; nothing is retried.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from painel_faturas.config import ONCE_FAILURE_POLICIES
from painel_faturas.core.error_classifier import ErrorClassifier
from painel_faturas.core.logging import logger
from painel_faturas.core.throttle import DispatchThrottle
from painel_faturas.infrastructure.database.models import ScheduledDispatch, ScheduleType
from painel_faturas.infrastructure.database.repositories import DispatchRepository
from painel_faturas.infrastructure.webhook import WebhookClient
from painel_faturas.utils.scheduling import calculate_next_daily_run, utc_now


@dataclass
class CycleReport:
    """Outcome of one scheduler cycle."""

    due: int = 0
    succeeded: int = 0
    failed: int = 0
    rescheduled: int = 0
    removed: int = 0
    deactivated: int = 0
    skipped: bool = False


class DispatchScheduler:
    """Executes due dispatches against the webhook."""

    def __init__(
        self,
        repository: DispatchRepository,
        webhook: WebhookClient,
        throttle: DispatchThrottle,
        once_failure_policy: str = "delete",
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize scheduler.

        Args:
            repository: Dispatch repository
            webhook: Webhook client
            throttle: Gap enforcer between dispatches of one cycle
            once_failure_policy: 'delete' or 'deactivate' for failed one-time dispatches
            clock: Returns the current aware UTC datetime
        """
        if once_failure_policy not in ONCE_FAILURE_POLICIES:
            raise ValueError(f"Invalid once_failure_policy: {once_failure_policy}")

        self.repository = repository
        self.webhook = webhook
        self.throttle = throttle
        self.once_failure_policy = once_failure_policy
        self._clock = clock

    async def run(self) -> CycleReport:
        """Run one cycle. Never raises."""
        report = CycleReport()

        try:
            due = await asyncio.to_thread(self.repository.get_due, self._clock())
        except Exception as e:
            logger.error(
                "scheduler_due_query_failed",
                error=str(e),
                error_category=ErrorClassifier.categorize(e).value,
            )
            report.skipped = True
            return report

        report.due = len(due)
        if not due:
            return report

        logger.info("scheduler_processing", due=len(due))
        self.throttle.reset()

        for position, dispatch in enumerate(due, start=1):
            await self.throttle.acquire()
            try:
                await self._execute(dispatch, position, len(due), report)
            finally:
                self.throttle.release()

        logger.info(
            "scheduler_cycle_completed",
            due=report.due,
            succeeded=report.succeeded,
            failed=report.failed,
        )
        return report

    async def _execute(
        self, dispatch: ScheduledDispatch, position: int, total: int, report: CycleReport
    ) -> None:
        log = logger.bind(dispatch_id=dispatch.id, uc=dispatch.uc, position=f"{position}/{total}")
        log.info("dispatch_executing", schedule_type=dispatch.schedule_type.value)

        succeeded = True
        try:
            await self.webhook.submit(dispatch.uc, dispatch.cpf_cnpj, dispatch.birth_date)
            report.succeeded += 1
            log.info("dispatch_completed")
        except Exception as e:
            succeeded = False
            report.failed += 1
            log.error(
                "dispatch_failed",
                error=str(e),
                error_category=ErrorClassifier.categorize(e).value,
            )

        try:
            await asyncio.to_thread(self._advance, dispatch, succeeded, report)
        except Exception as e:
            log.error("dispatch_state_update_failed", error=str(e))

    def _advance(self, dispatch: ScheduledDispatch, succeeded: bool, report: CycleReport) -> None:
        """Move a dispatch to its post-execution state."""
        executed_at = self._clock()

        if dispatch.schedule_type == ScheduleType.DAILY:
            next_time = calculate_next_daily_run(dispatch.scheduled_time)
            self.repository.record_execution(dispatch.id, executed_at, next_scheduled_time=next_time)
            report.rescheduled += 1
            logger.info("dispatch_rescheduled", dispatch_id=dispatch.id, next_run=next_time.isoformat())
            return

        if not succeeded and self.once_failure_policy == "deactivate":
            self.repository.record_execution(dispatch.id, executed_at, is_active=False)
            report.deactivated += 1
            logger.warning("dispatch_deactivated_after_failure", dispatch_id=dispatch.id)
            return

        self.repository.delete(dispatch.id)
        report.removed += 1
        logger.info("dispatch_removed", dispatch_id=dispatch.id)


def build_scheduler(
    repository: DispatchRepository,
    webhook: WebhookClient,
    throttle_seconds: float,
    once_failure_policy: str = "delete",
    clock: Optional[Callable[[], datetime]] = None,
) -> DispatchScheduler:
    """Scheduler with a real asyncio-backed throttle."""
    return DispatchScheduler(
        repository=repository,
        webhook=webhook,
        throttle=DispatchThrottle(min_interval=throttle_seconds),
        once_failure_policy=once_failure_policy,
        clock=clock or utc_now,
    )
