"""Session runtime: the state machine that drives a live workout."""

import asyncio
import logging
from datetime import datetime
from enum import Enum
from typing import Callable

from ..db.base import WorkoutRepositoryProtocol
from ..errors import PersistenceError, ValidationError
from ..models.live_status import CompanionSnapshot, TimerActivity
from ..models.program import SessionTemplate
from ..models.session import ExerciseSet, SessionExercise, WorkoutSession
from .analysis import SessionAnalysis, SessionAnalysisEngine
from .broadcast import (
    CompanionChannel,
    LiveStatusChannel,
    NullCompanionChannel,
    NullLiveStatusChannel,
    TimerRelay,
)
from .progression import ProgressionEngine, ProgressionSuggestion
from .rest_timer import TICK_SECONDS, RestTimer, SleepFunc

logger = logging.getLogger(__name__)


class RuntimeState(str, Enum):
    """Lifecycle state of a SessionRuntime."""

    IDLE = "idle"
    ACTIVE = "active"
    REST_PENDING = "rest_pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class SessionRuntime:
    """Drives one workout session from start to completion.

    All mutations are synchronous and must happen on the event loop that
    owns the runtime; that loop is the single writer of the session graph.
    Storage writes run in the background, one at a time and in mutation
    order. A failed write is kept in ``last_error`` and never undoes the
    in-memory change.
    """

    def __init__(
        self,
        repository: WorkoutRepositoryProtocol,
        live_status: LiveStatusChannel | None = None,
        companion: CompanionChannel | None = None,
        progression: ProgressionEngine | None = None,
        analysis: SessionAnalysisEngine | None = None,
        sleep: SleepFunc = asyncio.sleep,
        tick_seconds: float = TICK_SECONDS,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.repository = repository
        self.companion = companion or NullCompanionChannel()
        self.progression = progression or ProgressionEngine()
        self.analysis_engine = analysis or SessionAnalysisEngine()
        self.timer = RestTimer(
            channel=TimerRelay(live_status or NullLiveStatusChannel(), self.companion),
            sleep=sleep,
            tick_seconds=tick_seconds,
        )
        self._now = now

        self.session: WorkoutSession | None = None
        self.previous_session: WorkoutSession | None = None
        self.current_exercise_index = 0
        self.summary_requested = False
        self.analysis: SessionAnalysis | None = None
        self.last_error: PersistenceError | None = None

        self._terminal: RuntimeState | None = None
        self._write_lock = asyncio.Lock()
        self._pending_writes: set[asyncio.Task] = set()

    # State

    @property
    def state(self) -> RuntimeState:
        if self._terminal is not None:
            return self._terminal
        if self.session is None:
            return RuntimeState.IDLE
        if self.timer.is_running:
            return RuntimeState.REST_PENDING
        return RuntimeState.ACTIVE

    @property
    def exercises(self) -> list[SessionExercise]:
        if self.session is None:
            return []
        return self.session.sorted_exercises

    @property
    def exercise_count(self) -> int:
        return len(self.exercises)

    @property
    def current_exercise(self) -> SessionExercise | None:
        exercises = self.exercises
        if 0 <= self.current_exercise_index < len(exercises):
            return exercises[self.current_exercise_index]
        return None

    @property
    def completed_exercise_count(self) -> int:
        return sum(1 for e in self.exercises if e.is_completed or e.is_skipped)

    @property
    def is_last_exercise(self) -> bool:
        return self.current_exercise_index >= self.exercise_count - 1

    @property
    def can_go_next(self) -> bool:
        return self.current_exercise_index < self.exercise_count - 1

    @property
    def can_go_previous(self) -> bool:
        return self.current_exercise_index > 0

    # Lifecycle

    def start(self, template: SessionTemplate, week_number: int) -> WorkoutSession:
        """Create a session from a template and make it the active one."""
        session = WorkoutSession.from_template(template, week_number, started_at=self._now())
        logger.info(
            "Starting %s session for week %d (%d exercises)",
            session.session_type.value,
            week_number,
            len(session.exercises),
        )
        self._adopt(session)
        self._persist()
        return session

    def resume(self, session: WorkoutSession) -> WorkoutSession:
        """Continue a partially performed session."""
        logger.info("Resuming session %s", session.id)
        self._adopt(session)
        if session.is_completed:
            self._terminal = RuntimeState.COMPLETED
        return session

    def _adopt(self, session: WorkoutSession) -> None:
        self.timer.stop()
        self.session = session
        self.previous_session = None
        self.analysis = None
        self.summary_requested = False
        self._terminal = None
        self.current_exercise_index = 0
        for index, exercise in enumerate(session.sorted_exercises):
            if not exercise.is_completed and not exercise.is_skipped:
                self.current_exercise_index = index
                break
        self._push_companion()

    async def load_previous_session(self) -> WorkoutSession | None:
        """Fetch the last completed session of the same type for comparisons."""
        if self.session is None:
            return None
        try:
            self.previous_session = await self.repository.get_previous_session(
                self.session.session_type, self.session.started_at
            )
        except Exception as e:
            self._capture_error(e, "Could not load previous session")
            self.previous_session = None
        self._push_companion()
        return self.previous_session

    # Navigation

    def next_exercise(self) -> None:
        """Move to the next exercise, or request the summary after the last."""
        if not self._can_mutate("next exercise"):
            return
        self.timer.stop()
        if not self.can_go_next:
            self.summary_requested = True
            logger.debug("Reached end of session, summary requested")
            return
        self.current_exercise_index += 1
        self._push_companion()

    def previous_exercise(self) -> None:
        if not self._can_mutate("previous exercise"):
            return
        if not self.can_go_previous:
            return
        self.timer.stop()
        self.current_exercise_index -= 1
        self._push_companion()

    def go_to_exercise(self, index: int) -> None:
        if not self._can_mutate("go to exercise"):
            return
        if not 0 <= index < self.exercise_count:
            logger.warning("Ignoring navigation to exercise %d of %d", index, self.exercise_count)
            return
        self.timer.stop()
        self.current_exercise_index = index
        self._push_companion()

    # Sets

    def record_set(self, exercise_set: ExerciseSet, reps: int, weight: float) -> None:
        """Record a performed set and start the rest timer if sets remain."""
        _validate_performance(reps, weight)
        if not self._can_mutate("record set"):
            return

        owner, target = self._locate(exercise_set)
        if target is None:
            return

        target.reps = reps
        target.weight = float(weight)
        target.mark_completed(self._now())

        if owner is not self.current_exercise:
            self._persist()
            return

        if owner.pending_working_sets:
            self._persist()
            self._start_rest(owner)
            self._push_companion()
        else:
            owner.mark_completed()
            self._persist()
            self.next_exercise()

    def skip_set(self, exercise_set: ExerciseSet) -> None:
        if not self._can_mutate("skip set"):
            return
        _, target = self._locate(exercise_set)
        if target is None:
            return
        target.mark_skipped(self._now())
        self._persist()
        self._push_companion()

    def update_set(self, exercise_set: ExerciseSet, reps: int, weight: float) -> None:
        """Correct the values of a set in place."""
        _validate_performance(reps, weight)
        if not self._can_mutate("update set"):
            return
        _, target = self._locate(exercise_set)
        if target is None:
            return
        target.reps = reps
        target.weight = float(weight)
        self._persist()

    def _locate(
        self, exercise_set: ExerciseSet
    ) -> tuple[SessionExercise | None, ExerciseSet | None]:
        owner = self.session.find_exercise_for_set(exercise_set.id)
        if owner is None:
            logger.warning("Set %s does not belong to session %s", exercise_set.id, self.session.id)
            return None, None
        return owner, owner.find_set(exercise_set.id)

    # Exercises

    def complete_current_exercise(self) -> None:
        if not self._can_mutate("complete exercise"):
            return
        exercise = self.current_exercise
        if exercise is None:
            return
        exercise.mark_completed()
        self._persist()
        self.next_exercise()

    def skip_current_exercise(self) -> None:
        if not self._can_mutate("skip exercise"):
            return
        exercise = self.current_exercise
        if exercise is None:
            return
        exercise.mark_skipped(self._now())
        self._persist()
        self.next_exercise()

    # Session end

    def complete_session(self) -> SessionAnalysis | None:
        """Finish the session and analyze it against the previous one.

        Calling it again returns the first analysis unchanged.
        """
        if self.session is None:
            return None
        if self._terminal == RuntimeState.COMPLETED and self.analysis is not None:
            return self.analysis
        if self._terminal == RuntimeState.CANCELLED:
            logger.warning("Cannot complete cancelled session %s", self.session.id)
            return None

        self.timer.stop()
        if self.session.complete(self._now()):
            self._persist()
        self._terminal = RuntimeState.COMPLETED
        self.summary_requested = True
        self._notify_session_ended()

        self.analysis = self.analysis_engine.analyze(self.session, self.previous_session)
        logger.info(
            "Completed session %s in %ss: %s",
            self.session.id,
            self.session.duration_seconds,
            self.analysis.summary,
        )
        return self.analysis

    def cancel_session(self) -> None:
        """Abandon the session. Stored data is left for the caller to keep or delete."""
        if self.session is None or self._terminal is not None:
            return
        self.timer.stop()
        self._terminal = RuntimeState.CANCELLED
        self._notify_session_ended()
        logger.info("Cancelled session %s", self.session.id)

    # Rest timer

    def _start_rest(self, exercise: SessionExercise) -> None:
        rest_seconds = exercise.planned_exercise.rest_seconds if exercise.planned_exercise else 0
        working = exercise.working_sets
        pending = exercise.pending_working_sets
        activity = TimerActivity(
            exercise_name=exercise.name,
            set_number=working.index(pending[0]) + 1 if pending else len(working),
            total_sets=len(working),
        )
        self.timer.start(rest_seconds, activity)

    def add_rest_time(self, seconds: int) -> None:
        self.timer.add_time(seconds)

    def stop_rest_timer(self) -> None:
        self.timer.stop()

    def pause_rest_timer(self) -> None:
        self.timer.pause()

    def resume_rest_timer(self) -> None:
        self.timer.resume()

    # Suggestions

    def previous_exercise_for(self, exercise: SessionExercise) -> SessionExercise | None:
        """The same catalog exercise in the previous session."""
        if self.previous_session is None or exercise.exercise_id is None:
            return None
        return self.previous_session.exercise_for_catalog(exercise.exercise_id)

    def previous_sets_for(self, exercise: SessionExercise) -> list[ExerciseSet]:
        """Completed working sets of the same exercise in the previous session."""
        previous = self.previous_exercise_for(exercise)
        if previous is None:
            return []
        return previous.completed_sets

    def previous_sets_for_current_exercise(self) -> list[ExerciseSet]:
        exercise = self.current_exercise
        if exercise is None:
            return []
        return self.previous_sets_for(exercise)

    def suggestion_for(self, exercise: SessionExercise) -> ProgressionSuggestion | None:
        if exercise.planned_exercise is None:
            return None
        return self.progression.suggest(
            exercise.planned_exercise, self.previous_sets_for(exercise)
        )

    def suggestion_for_current_exercise(self) -> ProgressionSuggestion | None:
        exercise = self.current_exercise
        if exercise is None:
            return None
        return self.suggestion_for(exercise)

    def companion_snapshot(self) -> CompanionSnapshot | None:
        """Current position for a companion display."""
        exercise = self.current_exercise
        if exercise is None or self.session is None:
            return None

        suggestion = self.suggestion_for(exercise)
        working = exercise.working_sets
        pending = exercise.pending_working_sets
        current_set = pending[0] if pending else None

        previous_display = None
        previous = self.previous_exercise_for(exercise)
        if current_set is not None and previous is not None:
            position = working.index(current_set)
            previous_working = previous.working_sets
            if position < len(previous_working) and previous_working[position].is_completed:
                previous_display = previous_working[position].display_format

        return CompanionSnapshot(
            session_type_name=self.session.session_type.display_name,
            current_exercise_name=exercise.name,
            current_exercise_index=self.current_exercise_index,
            total_exercises=self.exercise_count,
            current_set_number=current_set.set_number if current_set else 1,
            total_sets=len(working),
            target_reps_display=(
                exercise.planned_exercise.target_reps_display
                if exercise.planned_exercise
                else "8-12"
            ),
            previous_set_display=previous_display,
            suggested_weight=suggestion.weight if suggestion else 0.0,
            suggested_reps=suggestion.reps if suggestion else 10,
        )

    # Companion commands

    def handle_companion_message(self, message: dict) -> None:
        """Apply an action sent by the companion device."""
        action = message.get("action")
        exercise = self.current_exercise

        if action == "recordSet":
            reps, weight = message.get("reps"), message.get("weight")
            if reps is None or weight is None or exercise is None:
                return
            pending = [s for s in exercise.sorted_sets if s.is_pending]
            if pending:
                self.record_set(pending[0], int(reps), float(weight))
        elif action == "skipSet":
            if exercise is None:
                return
            pending = [s for s in exercise.sorted_sets if s.is_pending]
            if pending:
                self.skip_set(pending[0])
        elif action == "nextExercise":
            self.next_exercise()
        elif action == "stopTimer":
            self.stop_rest_timer()
        elif action == "addTime":
            seconds = message.get("seconds")
            if seconds is not None:
                self.add_rest_time(int(seconds))
        else:
            logger.debug("Ignoring companion action %r", action)

    # Persistence

    async def flush(self) -> None:
        """Wait for all scheduled writes to finish."""
        while self._pending_writes:
            await asyncio.gather(*list(self._pending_writes))

    def _persist(self) -> None:
        if self.session is None:
            return
        task = asyncio.get_running_loop().create_task(self._write(self.session))
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def _write(self, session: WorkoutSession) -> None:
        async with self._write_lock:
            try:
                await self.repository.save_workout_session(session)
            except Exception as e:
                self._capture_error(e, f"Could not save session {session.id}")

    def _capture_error(self, error: Exception, message: str) -> None:
        if isinstance(error, PersistenceError):
            captured = error
        else:
            captured = PersistenceError(f"{message}: {error}")
            captured.__cause__ = error
        self.last_error = captured
        logger.error("%s: %s", message, error)

    # Helpers

    def _can_mutate(self, operation: str) -> bool:
        if self.session is None:
            logger.warning("Ignoring %s: no active session", operation)
            return False
        if self._terminal is not None:
            logger.warning("Ignoring %s: session is %s", operation, self._terminal.value)
            return False
        return True

    def _push_companion(self) -> None:
        snapshot = self.companion_snapshot()
        if snapshot is None:
            return
        try:
            self.companion.send_session(snapshot)
        except Exception:
            logger.exception("Companion channel failed to receive session snapshot")

    def _notify_session_ended(self) -> None:
        try:
            self.companion.send_session_ended()
        except Exception:
            logger.exception("Companion channel failed to receive session end")


def _validate_performance(reps: int, weight: float) -> None:
    if reps < 0:
        raise ValidationError(f"Reps cannot be negative (got {reps})")
    if weight < 0:
        raise ValidationError(f"Weight cannot be negative (got {weight})")
