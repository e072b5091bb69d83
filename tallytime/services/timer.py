import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Set

from config import TICK_INTERVAL_SECONDS
from events import event_bus, AppEvent

logger = logging.getLogger(__name__)


class TimerError(Exception):
    """Raised when a timer action conflicts with the current timer state."""
    pass


def default_scheduler(handler: Callable[..., Any], *args: Any) -> asyncio.Task:
    """Schedule ``handler(*args)`` on the running loop, like page.run_task does in the UI."""
    return asyncio.get_running_loop().create_task(handler(*args))


class TimerService:
    """Tick loop that drives the live display of running timers.

    Framework-agnostic: uses an injected scheduler for async operations.
    Elapsed time is never counted here; subscribers recompute it from the
    entries' start times on every TIMER_TICK. The loop runs while at least
    one client has a running entry.
    """

    def __init__(self, tick_interval: float = TICK_INTERVAL_SECONDS) -> None:
        self._tick_interval = tick_interval
        self._schedule_async: Callable[..., Any] = default_scheduler

        # State
        self.active_client_ids: Set[str] = set()
        self.ticks: int = 0

        # Async control
        self._stop_event: Optional[asyncio.Event] = None
        self._handle: Any = None

    def inject_dependencies(self, async_scheduler: Callable[..., Any]) -> None:
        """Use a different scheduler (e.g., page.run_task) for the tick loop."""
        self._schedule_async = async_scheduler

    @property
    def running(self) -> bool:
        return self._stop_event is not None

    def start(self, client_id: str) -> None:
        """Track a client's running entry, starting the loop if it is idle."""
        self.active_client_ids.add(client_id)
        if self.running:
            return
        stop_event = asyncio.Event()
        self._stop_event = stop_event
        self.ticks = 0
        self._handle = self._schedule_async(self._tick_loop, stop_event)

    def stop(self, client_id: str) -> None:
        """Stop tracking a client; the loop stops with the last one."""
        self.active_client_ids.discard(client_id)
        if not self.active_client_ids:
            self._halt()

    def sync(self, client_ids: Iterable[str]) -> None:
        """Match the tracked clients to the running entries found after a reload."""
        ids = set(client_ids)
        for client_id in self.active_client_ids - ids:
            self.stop(client_id)
        for client_id in ids:
            self.start(client_id)

    def cleanup(self) -> None:
        """Stop the loop and forget every client (logout, page close, data reset)."""
        self.active_client_ids.clear()
        self._halt()

    def _halt(self) -> None:
        if self._stop_event is None:
            return
        self._stop_event.set()
        handle = self._handle
        self._stop_event = None
        self._handle = None
        if handle is not None and not handle.done():
            handle.cancel()
        logger.info("Timer loop stopped")

    async def _tick_loop(self, stop_event: asyncio.Event) -> None:
        """Emit TIMER_TICK every interval until stop_event is set."""
        logger.info(f"Timer loop started for {len(self.active_client_ids)} client(s)")
        try:
            while not stop_event.is_set():
                await asyncio.sleep(self._tick_interval)
                if stop_event.is_set():
                    break
                self.ticks += 1
                logger.debug(f"Timer tick {self.ticks}")
                event_bus.emit(AppEvent.TIMER_TICK, datetime.now().astimezone())
        except asyncio.CancelledError:
            logger.debug("Timer loop cancelled")
        finally:
            # A newer loop may already own the service state
            if self._stop_event is stop_event:
                self._stop_event = None
                self._handle = None
                self.active_client_ids.clear()
