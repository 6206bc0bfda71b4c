"""Cooperative rest countdown."""

import asyncio
import logging
from typing import Awaitable, Callable

from ..models.live_status import TimerActivity, TimerEventType, TimerSnapshot
from .broadcast import LiveStatusChannel, NullLiveStatusChannel

logger = logging.getLogger(__name__)

# Seconds between two ticks of the countdown
TICK_SECONDS = 1.0

# Rest durations offered by the UI (label, seconds)
PRESET_REST_TIMES: list[tuple[str, int]] = [
    ("1 min", 60),
    ("1:30", 90),
    ("2 min", 120),
    ("2:30", 150),
    ("3 min", 180),
    ("4 min", 240),
    ("5 min", 300),
]

SleepFunc = Callable[[float], Awaitable[None]]


class CancellationToken:
    """Cancellation flag owned by exactly one countdown loop."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled


class RestTimer:
    """Countdown that ticks once per second and publishes each tick.

    At most one countdown loop is live at a time. ``stop()``, ``pause()``
    and a new ``start()`` cancel the running loop through its token before
    returning, so a cancelled loop can never tick again. The ``sleep``
    coroutine function is the clock; tests inject a manual one.

    Must be driven from inside a running event loop.
    """

    def __init__(
        self,
        channel: LiveStatusChannel | None = None,
        sleep: SleepFunc = asyncio.sleep,
        tick_seconds: float = TICK_SECONDS,
    ):
        self.channel = channel or NullLiveStatusChannel()
        self.remaining_seconds = 0
        self.total_seconds = 0
        self.is_running = False
        self.is_paused = False
        self.activity: TimerActivity | None = None
        self._sleep = sleep
        self._tick_seconds = tick_seconds
        self._task: asyncio.Task | None = None
        self._token: CancellationToken | None = None

    @property
    def snapshot(self) -> TimerSnapshot:
        return TimerSnapshot(
            remaining_seconds=self.remaining_seconds,
            total_seconds=self.total_seconds,
            is_paused=self.is_paused,
        )

    @property
    def display_time(self) -> str:
        return self.snapshot.display_time

    @property
    def has_live_loop(self) -> bool:
        """True while a countdown task is scheduled and not cancelled."""
        return self._task is not None and not self._task.done()

    def start(self, total_seconds: int, activity: TimerActivity | None = None) -> None:
        """Start a new countdown, replacing any running one."""
        self._cancel_loop()
        self.total_seconds = max(int(total_seconds), 0)
        self.remaining_seconds = self.total_seconds
        self.is_running = True
        self.is_paused = False
        self.activity = activity

        logger.debug("Rest timer started for %ds", self.total_seconds)
        self._publish(TimerEventType.STARTED, activity)

        if self.remaining_seconds <= 0:
            self._finish()
        else:
            self._spawn_loop()

    def stop(self) -> None:
        """Cancel the countdown and reset it."""
        was_running = self.is_running
        self._cancel_loop()
        self.remaining_seconds = 0
        self.total_seconds = 0
        self.is_running = False
        self.is_paused = False
        self.activity = None
        if was_running:
            logger.debug("Rest timer stopped")
            self._publish(TimerEventType.STOPPED)

    def pause(self) -> None:
        """Freeze the countdown, keeping the remaining time."""
        if not self.is_running or self.is_paused:
            return
        self._cancel_loop()
        self.is_paused = True
        self._publish(TimerEventType.PAUSED)

    def resume(self) -> None:
        """Continue a paused countdown."""
        if not self.is_running or not self.is_paused:
            return
        self.is_paused = False
        self._publish(TimerEventType.RESUMED)
        self._spawn_loop()

    def add_time(self, delta: int) -> None:
        """Extend (or shorten) the rest.

        Remaining and total move together, so the elapsed time is kept and
        the loop keeps running untouched.
        """
        if not self.is_running:
            return
        elapsed = self.total_seconds - self.remaining_seconds
        self.remaining_seconds = max(self.remaining_seconds + delta, 0)
        self.total_seconds = elapsed + self.remaining_seconds
        self._publish(TimerEventType.ADJUSTED)

        if self.remaining_seconds <= 0:
            self._cancel_loop()
            self._finish()

    async def wait(self) -> None:
        """Wait until the current countdown finishes or is cancelled."""
        task = self._task
        if task is None:
            return
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def _spawn_loop(self) -> None:
        token = CancellationToken()
        self._token = token
        self._task = asyncio.get_running_loop().create_task(self._run(token))

    def _cancel_loop(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._token = None
        self._task = None

    async def _run(self, token: CancellationToken) -> None:
        while True:
            await self._sleep(self._tick_seconds)
            if token.is_cancelled:
                return
            if self.remaining_seconds > 0:
                self.remaining_seconds -= 1
                self._publish(TimerEventType.TICK)
            if self.remaining_seconds <= 0:
                break

        self._token = None
        self._task = None
        self._finish()

    def _finish(self) -> None:
        self.remaining_seconds = 0
        self.is_running = False
        self.is_paused = False
        logger.debug("Rest timer finished")
        self._publish(TimerEventType.FINISHED)

    def _publish(
        self, event: TimerEventType, activity: TimerActivity | None = None
    ) -> None:
        try:
            self.channel.publish(event, self.snapshot, activity)
        except Exception:
            logger.exception("Failed to publish %s timer snapshot", event.value)
