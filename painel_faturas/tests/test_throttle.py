"""Unit tests for DispatchThrottle."""

import pytest

from painel_faturas.core.throttle import DispatchThrottle


class FakeTime:
    """Clock and sleep that advance together without real waiting."""

    def __init__(self):
        self.now = 1000.0
        self.sleeps = []

    def clock(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class TestDispatchThrottle:
    """Test minimum gap enforcement."""

    @pytest.mark.asyncio
    async def test_first_acquire_does_not_wait(self):
        fake = FakeTime()
        throttle = DispatchThrottle(180, sleep=fake.sleep, clock=fake.clock)

        waited = await throttle.acquire()

        assert waited == 0
        assert fake.sleeps == []

    @pytest.mark.asyncio
    async def test_consecutive_dispatches_wait_full_interval(self):
        fake = FakeTime()
        throttle = DispatchThrottle(180, sleep=fake.sleep, clock=fake.clock)

        for _ in range(3):
            await throttle.acquire()
            throttle.release()

        assert fake.sleeps == [180, 180]

    @pytest.mark.asyncio
    async def test_gap_counts_from_end_of_previous_dispatch(self):
        """Test a slow dispatch does not shorten the gap before the next one."""
        fake = FakeTime()
        throttle = DispatchThrottle(180, sleep=fake.sleep, clock=fake.clock)

        await throttle.acquire()
        fake.now += 100
        throttle.release()
        waited = await throttle.acquire()

        assert waited == 180
        assert fake.sleeps == [180]

    @pytest.mark.asyncio
    async def test_no_wait_once_interval_elapsed_after_release(self):
        fake = FakeTime()
        throttle = DispatchThrottle(180, sleep=fake.sleep, clock=fake.clock)

        await throttle.acquire()
        throttle.release()
        fake.now += 200
        await throttle.acquire()

        assert fake.sleeps == []

    @pytest.mark.asyncio
    async def test_reset_lets_next_acquire_pass(self):
        fake = FakeTime()
        throttle = DispatchThrottle(180, sleep=fake.sleep, clock=fake.clock)

        await throttle.acquire()
        throttle.release()
        throttle.reset()
        await throttle.acquire()

        assert fake.sleeps == []
