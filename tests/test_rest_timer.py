"""Tests for the rest timer countdown."""

import pytest

from liftup.models.live_status import TimerActivity, TimerEventType
from liftup.services.rest_timer import RestTimer


@pytest.fixture
def timer(live_status, manual_clock):
    return RestTimer(channel=live_status, sleep=manual_clock.sleep)


class TestRestTimer:
    """Tests for RestTimer."""

    @pytest.mark.asyncio
    async def test_start_publishes_activity(self, timer, live_status):
        activity = TimerActivity(exercise_name="Bench Press", set_number=2, total_sets=3)
        timer.start(90, activity)

        assert timer.is_running
        assert timer.display_time == "1:30"
        snapshot, published = live_status.of(TimerEventType.STARTED)[0]
        assert snapshot.remaining_seconds == 90
        assert published == activity
        timer.stop()

    @pytest.mark.asyncio
    async def test_ticks_down_and_finishes(self, timer, live_status, manual_clock):
        timer.start(3)
        await manual_clock.advance(3)

        assert not timer.is_running
        assert timer.remaining_seconds == 0
        assert live_status.event_types == [
            TimerEventType.STARTED,
            TimerEventType.TICK,
            TimerEventType.TICK,
            TimerEventType.TICK,
            TimerEventType.FINISHED,
        ]
        ticks = [snapshot.remaining_seconds for snapshot, _ in live_status.of(TimerEventType.TICK)]
        assert ticks == [2, 1, 0]
        assert not timer.has_live_loop

    @pytest.mark.asyncio
    async def test_zero_duration_finishes_immediately(self, timer, live_status):
        timer.start(0)

        assert not timer.is_running
        assert live_status.event_types == [TimerEventType.STARTED, TimerEventType.FINISHED]
        assert not timer.has_live_loop

    @pytest.mark.asyncio
    async def test_restart_keeps_single_loop(self, timer, live_status, manual_clock):
        timer.start(10)
        await manual_clock.advance(2)
        timer.start(5)
        await manual_clock.settle()

        assert len(manual_clock.pending) == 1
        await manual_clock.advance(1)

        ticks = [snapshot.remaining_seconds for snapshot, _ in live_status.of(TimerEventType.TICK)]
        assert ticks == [9, 8, 4]
        assert timer.remaining_seconds == 4
        timer.stop()

    @pytest.mark.asyncio
    async def test_stop_prevents_pending_tick(self, timer, live_status, manual_clock):
        timer.start(10)
        await manual_clock.settle()
        # The sleep has returned but the loop has not resumed yet
        manual_clock.release_all()
        timer.stop()
        await manual_clock.settle()

        assert live_status.event_types == [TimerEventType.STARTED, TimerEventType.STOPPED]
        assert timer.remaining_seconds == 0
        assert not timer.has_live_loop

    @pytest.mark.asyncio
    async def test_stop_when_idle_is_silent(self, timer, live_status):
        timer.stop()
        assert live_status.events == []

    @pytest.mark.asyncio
    async def test_add_time_keeps_elapsed(self, timer, live_status, manual_clock):
        timer.start(60)
        await manual_clock.advance(20)
        timer.add_time(30)

        assert timer.remaining_seconds == 70
        assert timer.total_seconds == 90
        assert timer.snapshot.progress == pytest.approx(20 / 90)
        assert live_status.event_types[-1] == TimerEventType.ADJUSTED

        await manual_clock.advance(1)
        assert timer.remaining_seconds == 69
        timer.stop()

    @pytest.mark.asyncio
    async def test_add_negative_time_clamps_and_finishes(self, timer, live_status, manual_clock):
        timer.start(30)
        await manual_clock.advance(5)
        timer.add_time(-60)

        assert timer.remaining_seconds == 0
        assert timer.total_seconds == 5
        assert not timer.is_running
        assert live_status.event_types[-2:] == [TimerEventType.ADJUSTED, TimerEventType.FINISHED]
        await manual_clock.advance(1)
        assert live_status.event_types.count(TimerEventType.FINISHED) == 1

    @pytest.mark.asyncio
    async def test_add_time_when_idle_is_ignored(self, timer, live_status):
        timer.add_time(30)
        assert timer.remaining_seconds == 0
        assert live_status.events == []

    @pytest.mark.asyncio
    async def test_pause_and_resume(self, timer, live_status, manual_clock):
        timer.start(10)
        await manual_clock.advance(2)
        timer.pause()
        await manual_clock.advance(3)

        assert timer.is_paused
        assert timer.is_running
        assert timer.remaining_seconds == 8

        timer.resume()
        await manual_clock.advance(1)
        assert timer.remaining_seconds == 7
        assert TimerEventType.PAUSED in live_status.event_types
        assert TimerEventType.RESUMED in live_status.event_types
        timer.stop()

    @pytest.mark.asyncio
    async def test_wait_returns_after_finish(self, timer, manual_clock):
        timer.start(2)
        await manual_clock.advance(2)
        await timer.wait()
        assert not timer.is_running

    @pytest.mark.asyncio
    async def test_channel_failure_does_not_stop_countdown(self, manual_clock):
        class BrokenChannel:
            def publish(self, event, snapshot, activity=None):
                raise RuntimeError("display gone")

        timer = RestTimer(channel=BrokenChannel(), sleep=manual_clock.sleep)
        timer.start(2)
        await manual_clock.advance(2)

        assert not timer.is_running
        assert timer.remaining_seconds == 0
