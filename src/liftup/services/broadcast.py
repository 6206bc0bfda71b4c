"""Channels that carry session and timer state to external displays."""

import logging
from typing import Protocol, runtime_checkable

from ..models.live_status import (
    CompanionSnapshot,
    TimerActivity,
    TimerEventType,
    TimerSnapshot,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class LiveStatusChannel(Protocol):
    """Receives rest timer snapshots (lock screen, widget, status bar)."""

    def publish(
        self,
        event: TimerEventType,
        snapshot: TimerSnapshot,
        activity: TimerActivity | None = None,
    ) -> None:
        """Publish a snapshot. ``activity`` accompanies STARTED events."""
        ...


@runtime_checkable
class CompanionChannel(Protocol):
    """Sends session position and timer state to a companion device."""

    def send_session(self, snapshot: CompanionSnapshot) -> None:
        ...

    def send_timer_state(self, seconds: int, is_running: bool) -> None:
        ...

    def send_session_ended(self) -> None:
        ...


class NullLiveStatusChannel:
    """Live-status channel that discards everything."""

    def publish(
        self,
        event: TimerEventType,
        snapshot: TimerSnapshot,
        activity: TimerActivity | None = None,
    ) -> None:
        pass


class NullCompanionChannel:
    """Companion channel used when no device is paired."""

    def send_session(self, snapshot: CompanionSnapshot) -> None:
        pass

    def send_timer_state(self, seconds: int, is_running: bool) -> None:
        pass

    def send_session_ended(self) -> None:
        pass


class TimerRelay:
    """Fans timer snapshots out to the live-status and companion channels.

    Failures of a display channel are logged and never interrupt the
    countdown.
    """

    def __init__(self, live_status: LiveStatusChannel, companion: CompanionChannel):
        self.live_status = live_status
        self.companion = companion

    def publish(
        self,
        event: TimerEventType,
        snapshot: TimerSnapshot,
        activity: TimerActivity | None = None,
    ) -> None:
        try:
            self.live_status.publish(event, snapshot, activity)
        except Exception:
            logger.exception("Live-status channel failed on %s event", event.value)

        is_running = event not in (TimerEventType.FINISHED, TimerEventType.STOPPED)
        try:
            self.companion.send_timer_state(snapshot.remaining_seconds, is_running)
        except Exception:
            logger.exception("Companion channel failed on %s event", event.value)
