"""Tests for the tick loop that drives running timers."""
import asyncio
from datetime import datetime

import pytest

from events import AppEvent, event_bus
from services.timer import TimerService


@pytest.fixture
def ticks():
    event_bus.clear()
    received = []
    sub = event_bus.subscribe(AppEvent.TIMER_TICK, lambda now: received.append(now))
    yield received
    sub.unsubscribe()


@pytest.fixture
def timer():
    service = TimerService(tick_interval=0.01)
    yield service
    service.cleanup()


class TestTickLoop:
    async def test_emits_ticks_while_running(self, timer, ticks):
        timer.start("c1")
        assert timer.running
        await asyncio.sleep(0.08)
        assert timer.ticks >= 2
        assert len(ticks) == timer.ticks
        assert isinstance(ticks[0], datetime)
        assert ticks[0].tzinfo is not None

    async def test_single_loop_for_many_clients(self, timer, ticks):
        timer.start("c1")
        handle = timer._handle
        timer.start("c2")
        assert timer._handle is handle
        assert timer.active_client_ids == {"c1", "c2"}

    async def test_stop_last_client_ends_loop(self, timer, ticks):
        timer.start("c1")
        timer.start("c2")
        timer.stop("c1")
        assert timer.running
        timer.stop("c2")
        assert not timer.running
        await asyncio.sleep(0.01)
        count = len(ticks)
        await asyncio.sleep(0.05)
        assert len(ticks) == count

    async def test_cleanup(self, timer, ticks):
        timer.start("c1")
        timer.start("c2")
        timer.cleanup()
        assert not timer.running
        assert timer.active_client_ids == set()

    async def test_restart_after_stop(self, timer, ticks):
        timer.start("c1")
        timer.stop("c1")
        timer.start("c1")
        assert timer.running
        await asyncio.sleep(0.05)
        assert timer.ticks >= 1

    async def test_cancelled_loop_resets_state(self, timer):
        timer.start("c1")
        await asyncio.sleep(0)
        task = timer._handle
        task.cancel()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert not timer.running
        assert timer.active_client_ids == set()


class TestSync:
    async def test_sync_matches_running_entries(self, timer):
        timer.start("c1")
        timer.start("c2")
        timer.sync(["c2", "c3"])
        assert timer.active_client_ids == {"c2", "c3"}
        assert timer.running

    async def test_sync_empty_stops(self, timer):
        timer.start("c1")
        timer.sync([])
        assert not timer.running


class TestScheduler:
    async def test_injected_scheduler_used(self, timer):
        scheduled = []

        def scheduler(handler, *args):
            scheduled.append(handler)
            return asyncio.get_running_loop().create_task(handler(*args))

        timer.inject_dependencies(scheduler)
        timer.start("c1")
        assert scheduled == [timer._tick_loop]
