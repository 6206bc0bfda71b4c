"""Repository contracts consumed by the session runtime and the CLI."""

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from ..models.exercises import Exercise, MuscleGroup
from ..models.program import SessionType, WeekProgram
from ..models.session import WorkoutSession


@runtime_checkable
class WorkoutRepositoryProtocol(Protocol):
    """Storage for week programs and performed sessions."""

    async def get_current_week_program(self, today: date | None = None) -> WeekProgram | None:
        """Return the active program whose week contains ``today``."""
        ...

    async def get_week_program(self, week_number: int) -> WeekProgram | None:
        ...

    async def get_all_week_programs(self) -> list[WeekProgram]:
        """All programs, most recent week first."""
        ...

    async def save_week_program(self, program: WeekProgram) -> None:
        ...

    async def delete_week_program(self, program: WeekProgram) -> None:
        ...

    async def get_workout_session(self, session_id: str) -> WorkoutSession | None:
        ...

    async def get_workout_sessions_for_week(self, week_number: int) -> list[WorkoutSession]:
        """Sessions logged against a week, oldest first."""
        ...

    async def get_workout_sessions_for_type(
        self, session_type: SessionType, limit: int
    ) -> list[WorkoutSession]:
        """Most recent completed sessions of a type."""
        ...

    async def get_all_completed_sessions(self) -> list[WorkoutSession]:
        ...

    async def get_completed_sessions_for_month(self, day: date) -> list[WorkoutSession]:
        """Completed sessions started in the calendar month of ``day``."""
        ...

    async def get_previous_session(
        self, session_type: SessionType, before: datetime
    ) -> WorkoutSession | None:
        """Most recent completed session of a type started strictly before ``before``."""
        ...

    async def save_workout_session(self, session: WorkoutSession) -> None:
        ...

    async def delete_workout_session(self, session: WorkoutSession) -> None:
        ...


@runtime_checkable
class ExerciseRepositoryProtocol(Protocol):
    """Storage for the exercise catalog."""

    async def list_all(self) -> list[Exercise]:
        ...

    async def get(self, exercise_id: str) -> Exercise | None:
        ...

    async def search(self, query: str) -> list[Exercise]:
        ...

    async def get_by_muscle_group(self, muscle_group: MuscleGroup) -> list[Exercise]:
        ...

    async def save(self, exercise: Exercise) -> None:
        ...

    async def delete(self, exercise: Exercise) -> None:
        """Delete a user exercise. Built-in exercises are rejected."""
        ...
