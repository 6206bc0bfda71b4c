"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

from liftup.errors import PersistenceError
from liftup.models.exercises import Exercise, MuscleGroup, PlannedExercise
from liftup.models.live_status import TimerEventType
from liftup.models.program import SessionTemplate, SessionType, WeekProgram
from liftup.models.session import WorkoutSession
from liftup.services.runtime import SessionRuntime

SESSION_START = datetime(2024, 5, 6, 18, 0)


class ManualClock:
    """Stand-in for ``asyncio.sleep`` that only returns when released."""

    def __init__(self):
        self.waiters: list[asyncio.Future] = []

    async def sleep(self, seconds: float) -> None:
        future = asyncio.get_running_loop().create_future()
        self.waiters.append(future)
        await future

    @property
    def pending(self) -> list[asyncio.Future]:
        """Sleeps still waiting to be released."""
        return [future for future in self.waiters if not future.done()]

    async def settle(self) -> None:
        """Let every ready task run until it blocks again."""
        for _ in range(10):
            await asyncio.sleep(0)

    def release_all(self) -> None:
        waiters, self.waiters = self.waiters, []
        for future in waiters:
            if not future.done():
                future.set_result(None)

    async def advance(self, ticks: int = 1) -> None:
        """Let the countdown loop tick ``ticks`` times."""
        for _ in range(ticks):
            await self.settle()
            self.release_all()
            await self.settle()


class RecordingLiveStatus:
    """Live-status channel that keeps every published snapshot."""

    def __init__(self):
        self.events = []

    def publish(self, event, snapshot, activity=None):
        self.events.append((event, snapshot, activity))

    def of(self, event_type: TimerEventType) -> list:
        return [(snapshot, activity) for event, snapshot, activity in self.events if event == event_type]

    @property
    def event_types(self) -> list[TimerEventType]:
        return [event for event, _, _ in self.events]


class RecordingCompanion:
    """Companion channel that keeps every message."""

    def __init__(self):
        self.sessions = []
        self.timer_states = []
        self.ended = 0

    def send_session(self, snapshot):
        self.sessions.append(snapshot)

    def send_timer_state(self, seconds, is_running):
        self.timer_states.append((seconds, is_running))

    def send_session_ended(self):
        self.ended += 1


class InMemoryWorkoutRepository:
    """Workout repository kept in dictionaries.

    With ``fail_saves`` set, session writes raise PersistenceError. With
    ``fail_reads`` set, previous-session lookups raise OSError.
    """

    def __init__(self, fail_saves: bool = False, fail_reads: bool = False):
        self.programs: dict[str, WeekProgram] = {}
        self.sessions: dict[str, WorkoutSession] = {}
        self.fail_saves = fail_saves
        self.fail_reads = fail_reads
        self.save_count = 0

    async def get_current_week_program(self, today=None):
        today = today or date.today()
        matches = [
            p
            for p in self.programs.values()
            if p.is_active and p.start_date <= today < p.start_date + timedelta(days=7)
        ]
        return max(matches, key=lambda p: p.week_number, default=None)

    async def get_week_program(self, week_number):
        for program in self.programs.values():
            if program.week_number == week_number:
                return program
        return None

    async def get_all_week_programs(self):
        return sorted(self.programs.values(), key=lambda p: p.week_number, reverse=True)

    async def save_week_program(self, program):
        self.programs[program.id] = program

    async def delete_week_program(self, program):
        self.programs.pop(program.id, None)

    async def get_workout_session(self, session_id):
        return self.sessions.get(session_id)

    async def get_workout_sessions_for_week(self, week_number):
        return sorted(
            (s for s in self.sessions.values() if s.week_number == week_number),
            key=lambda s: s.started_at,
        )

    async def get_workout_sessions_for_type(self, session_type, limit):
        return (await self._completed(session_type))[:limit]

    async def get_all_completed_sessions(self):
        return await self._completed()

    async def get_completed_sessions_for_month(self, day):
        return [
            s
            for s in await self._completed()
            if (s.started_at.year, s.started_at.month) == (day.year, day.month)
        ]

    async def get_previous_session(self, session_type, before):
        if self.fail_reads:
            raise OSError("database is locked")
        for session in await self._completed(session_type):
            if session.started_at < before:
                return session
        return None

    async def save_workout_session(self, session):
        self.save_count += 1
        if self.fail_saves:
            raise PersistenceError("disk full")
        self.sessions[session.id] = session

    async def delete_workout_session(self, session):
        self.sessions.pop(session.id, None)

    async def _completed(self, session_type=None):
        return sorted(
            (
                s
                for s in self.sessions.values()
                if s.is_completed and (session_type is None or s.session_type == session_type)
            ),
            key=lambda s: s.started_at,
            reverse=True,
        )


class SlowWorkoutRepository(InMemoryWorkoutRepository):
    """Repository whose saves yield to the event loop before finishing.

    Keeps the number of completed sets seen by every save and the highest
    number of saves running at once.
    """

    def __init__(self):
        super().__init__()
        self.completed_counts: list[int] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def save_workout_session(self, session):
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            self.completed_counts.append(
                sum(1 for e in session.exercises for s in e.sets if s.is_completed)
            )
            for _ in range(3):
                await asyncio.sleep(0)
            await super().save_workout_session(session)
        finally:
            self.in_flight -= 1


def perform(session: WorkoutSession, results: dict[str, list[tuple[int, float]]]) -> WorkoutSession:
    """Fill in working sets by catalog exercise id and mark those exercises completed."""
    for exercise in session.sorted_exercises:
        performed = results.get(exercise.exercise_id)
        if performed is None:
            continue
        for exercise_set, (reps, weight) in zip(exercise.working_sets, performed):
            exercise_set.reps = reps
            exercise_set.weight = weight
            exercise_set.mark_completed(session.started_at)
        exercise.mark_completed()
    return session


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def bench_press():
    return Exercise(
        name="Bench Press",
        muscle_groups={MuscleGroup.CHEST, MuscleGroup.TRICEPS},
        equipment="barbell",
    )


@pytest.fixture
def barbell_row():
    return Exercise(
        name="Barbell Row",
        muscle_groups={MuscleGroup.BACK, MuscleGroup.LATS},
        equipment="barbell",
    )


@pytest.fixture
def upper_template(bench_press, barbell_row):
    """Upper session: bench with one warmup, then rows without warmup."""
    return SessionTemplate(
        session_type=SessionType.UPPER,
        exercises=[
            PlannedExercise(
                exercise=bench_press,
                warmup_sets=1,
                target_reps_min=8,
                target_reps_max=12,
                rest_seconds=90,
                order_index=0,
            ),
            PlannedExercise(
                exercise=barbell_row,
                warmup_sets=0,
                target_reps_min=8,
                target_reps_max=12,
                rest_seconds=60,
                order_index=1,
            ),
        ],
    )


@pytest.fixture
def week_program(upper_template):
    return WeekProgram(
        week_number=1,
        start_date=date(2024, 5, 6),
        sessions=[upper_template, SessionTemplate(session_type=SessionType.LOWER)],
    )


@pytest.fixture
def make_session(upper_template):
    """Factory for a performed upper session."""

    def factory(results, started_at=SESSION_START, completed=True):
        session = WorkoutSession.from_template(upper_template, week_number=1, started_at=started_at)
        perform(session, results)
        if completed:
            session.complete(started_at + timedelta(hours=1))
        return session

    return factory


@pytest.fixture
def manual_clock():
    return ManualClock()


@pytest.fixture
def live_status():
    return RecordingLiveStatus()


@pytest.fixture
def companion():
    return RecordingCompanion()


@pytest.fixture
def memory_repository():
    return InMemoryWorkoutRepository()


@pytest.fixture
def failing_repository():
    return InMemoryWorkoutRepository(fail_saves=True)


@pytest.fixture
def runtime(memory_repository, live_status, companion, manual_clock):
    return SessionRuntime(
        memory_repository,
        live_status=live_status,
        companion=companion,
        sleep=manual_clock.sleep,
        now=lambda: SESSION_START,
    )
