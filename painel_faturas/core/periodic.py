"""Periodic background tasks for Painel de Faturas.

The scheduler and the poller each run as a PeriodicTask registered as an
APScheduler interval job: one cycle right at start, then one cycle per
interval. A task never overlaps itself; a tick that arrives while the previous
cycle is still running is skipped and the next cycle starts at the following
tick. The two tasks are independent and can overlap each other.
"""

import asyncio
from datetime import timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from painel_faturas.core.logging import logger
from painel_faturas.utils.scheduling import utc_now

MISFIRE_GRACE_SECONDS = 30


class PeriodicTask:
    """One repeating cycle and its bookkeeping."""

    def __init__(
        self,
        name: str,
        func: Callable[[], Awaitable[Any]],
        interval: float,
        enabled: bool = True,
        disabled_reason: Optional[str] = None,
    ):
        """Initialize periodic task.

        Args:
            name: Task name, also used as the APScheduler job id
            func: Coroutine function running one cycle; must not raise
            interval: Seconds between cycle starts
            enabled: Disabled tasks are never scheduled
            disabled_reason: Logged when a disabled task is asked to start
        """
        self.name = name
        self.func = func
        self.interval = interval
        self.enabled = enabled
        self.disabled_reason = disabled_reason
        self.last_run_at = None
        self.last_result: Any = None
        self.last_error: Optional[str] = None
        self.runs = 0
        self.job: Optional[Job] = None
        self._lock = asyncio.Lock()

    @property
    def running(self) -> bool:
        """Whether the task is currently scheduled."""
        return self.job is not None

    async def wait_idle(self) -> None:
        """Return once no cycle of this task is in flight."""
        async with self._lock:
            pass

    async def run_once(self) -> Any:
        """Run a single cycle now.

        Waits for an in-flight cycle of the same task to finish first.
        """
        async with self._lock:
            self.last_run_at = utc_now()
            self.runs += 1
            try:
                self.last_result = await self.func()
                self.last_error = None
            except asyncio.CancelledError:
                raise
            except Exception as e:
                # Cycle functions already swallow their own errors; this is the last net.
                self.last_error = str(e)
                logger.error("periodic_task_cycle_failed", task=self.name, error=str(e))
            return self.last_result

    def status(self) -> Dict[str, Any]:
        next_run = self.job.next_run_time if self.job is not None else None
        return {
            "enabled": self.enabled,
            "running": self.running,
            "interval_seconds": self.interval,
            "runs": self.runs,
            "last_run_at": self.last_run_at.isoformat() if self.last_run_at else None,
            "next_run_at": next_run.isoformat() if next_run else None,
            "last_error": self.last_error,
            "disabled_reason": None if self.enabled else self.disabled_reason,
        }


class BackgroundSupervisor:
    """Owns the process-lifetime periodic tasks and their APScheduler instance."""

    def __init__(
        self,
        tasks: Optional[List[PeriodicTask]] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self._tasks: Dict[str, PeriodicTask] = {}
        self._scheduler = scheduler or AsyncIOScheduler(timezone=timezone.utc)
        for task in tasks or []:
            self.add(task)

    def add(self, task: PeriodicTask) -> None:
        self._tasks[task.name] = task

    def get(self, name: str) -> PeriodicTask:
        return self._tasks[name]

    @property
    def tasks(self) -> List[PeriodicTask]:
        return list(self._tasks.values())

    @property
    def running(self) -> bool:
        return self._scheduler.running

    def start(self) -> None:
        """Schedule every enabled task and start the scheduler.

        Must be called from the running event loop.
        """
        if self._scheduler.running:
            return

        for task in self._tasks.values():
            if not task.enabled:
                logger.warning("periodic_task_disabled", task=task.name, reason=task.disabled_reason)
                continue

            task.job = self._scheduler.add_job(
                task.run_once,
                trigger=IntervalTrigger(seconds=task.interval),
                id=task.name,
                next_run_time=utc_now(),
                coalesce=True,
                max_instances=1,
                misfire_grace_time=MISFIRE_GRACE_SECONDS,
                replace_existing=True,
            )
            logger.info("periodic_task_started", task=task.name, interval_seconds=task.interval)

        self._scheduler.start()

    async def stop(self) -> None:
        """Shut the scheduler down and wait for in-flight cycles to unwind.

        APScheduler cancels the coroutine jobs it is running on shutdown.
        """
        if not self._scheduler.running:
            return

        self._scheduler.shutdown(wait=False)
        # AsyncIOScheduler.shutdown is deferred to the next loop iteration
        await asyncio.sleep(0)

        for task in self._tasks.values():
            if task.job is None:
                continue
            task.job = None
            await task.wait_idle()
            logger.info("periodic_task_stopped", task=task.name)

    async def run_once(self, name: str) -> Any:
        """Drive a single cycle of one task, without its timer."""
        return await self.get(name).run_once()

    def status(self) -> Dict[str, Dict[str, Any]]:
        return {name: task.status() for name, task in self._tasks.items()}
