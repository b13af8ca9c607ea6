"""Dispatch throttling for Painel de Faturas.

Keeps consecutive webhook calls of one scheduler cycle at least a fixed gap
apart so the WhatsApp automation is not flooded.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from painel_faturas.core.logging import logger


class DispatchThrottle:
    """Minimum-gap limiter.

    The first acquire() after reset() passes immediately; each later one waits
    until min_interval seconds have passed since the previous release(), i.e.
    since the previous dispatch finished.
    Waiting uses an awaitable sleep, so a cancelled cycle stops cleanly.
    """

    def __init__(
        self,
        min_interval: float,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize throttle.

        Args:
            min_interval: Minimum seconds from one release() to the next acquisition
            sleep: Awaitable sleep (injectable for tests)
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self.min_interval = min_interval
        self._sleep = sleep
        self._clock = clock
        self._last: Optional[float] = None

    def reset(self) -> None:
        """Forget the previous dispatch; the next one passes immediately."""
        self._last = None

    async def acquire(self) -> float:
        """Wait for the next slot.

        Returns:
            Seconds waited
        """
        waited = 0.0
        if self._last is not None:
            remaining = self.min_interval - (self._clock() - self._last)
            if remaining > 0:
                logger.info("dispatch_throttle_wait", seconds=round(remaining, 1))
                await self._sleep(remaining)
                waited = remaining

        self._last = self._clock()
        return waited

    def release(self) -> None:
        """Mark the current dispatch as finished; the gap counts from now."""
        self._last = self._clock()
