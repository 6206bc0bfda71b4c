"""Data access layer for liftup."""

import json
import logging
from datetime import date, datetime, timedelta
from pathlib import Path

import aiosqlite

from ..errors import ValidationError
from ..models.exercises import Exercise, MuscleGroup
from ..models.program import SessionType, WeekProgram, monday_of
from ..models.session import WorkoutSession
from .engine import get_db_path

logger = logging.getLogger(__name__)


class WorkoutRepository:
    """SQLite storage for week programs and workout sessions.

    Each aggregate is one JSON document; deleting a program or session
    removes everything it owns.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    # Week programs

    async def get_current_week_program(self, today: date | None = None) -> WeekProgram | None:
        """Get the active program whose week contains ``today``."""
        today = today or date.today()
        if isinstance(today, datetime):
            today = today.date()
        monday = monday_of(today)
        next_monday = monday + timedelta(days=7)
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                """
                SELECT * FROM week_programs
                WHERE start_date >= ? AND start_date < ? AND is_active = 1
                ORDER BY week_number DESC LIMIT 1
                """,
                (monday.isoformat(), next_monday.isoformat()),
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_program(row)

    async def get_week_program(self, week_number: int) -> WeekProgram | None:
        """Get a program by week number."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM week_programs WHERE week_number = ? LIMIT 1", (week_number,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_program(row)

    async def get_all_week_programs(self) -> list[WeekProgram]:
        """List all programs, latest week first."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM week_programs ORDER BY week_number DESC")
            rows = await cursor.fetchall()
            return [self._row_to_program(row) for row in rows]

    async def save_week_program(self, program: WeekProgram) -> None:
        """Insert or replace a program."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO week_programs
                (id, week_number, start_date, is_active, structure, updated_at)
                VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                """,
                (
                    program.id,
                    program.week_number,
                    program.start_date.isoformat(),
                    int(program.is_active),
                    json.dumps(program.to_dict()),
                ),
            )
            await db.commit()
        logger.debug("Saved week program %s (week %d)", program.id, program.week_number)

    async def delete_week_program(self, program: WeekProgram) -> None:
        """Delete a program and its templates."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM week_programs WHERE id = ?", (program.id,))
            await db.commit()

    def _row_to_program(self, row: aiosqlite.Row) -> WeekProgram:
        """Convert a database row to a WeekProgram."""
        return WeekProgram.from_dict(json.loads(row["structure"]))

    # Workout sessions

    async def get_workout_session(self, session_id: str) -> WorkoutSession | None:
        """Get a session by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM workout_sessions WHERE id = ?", (session_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_session(row)

    async def get_workout_sessions_for_week(self, week_number: int) -> list[WorkoutSession]:
        """Sessions of a week, oldest first."""
        return await self._fetch_sessions(
            "SELECT * FROM workout_sessions WHERE week_number = ? ORDER BY started_at ASC",
            (week_number,),
        )

    async def get_workout_sessions_for_type(
        self, session_type: SessionType, limit: int
    ) -> list[WorkoutSession]:
        """Most recent completed sessions of a type."""
        return await self._fetch_sessions(
            """
            SELECT * FROM workout_sessions
            WHERE session_type = ? AND is_completed = 1
            ORDER BY started_at DESC LIMIT ?
            """,
            (session_type.value, limit),
        )

    async def get_all_completed_sessions(self) -> list[WorkoutSession]:
        """All completed sessions, newest first."""
        return await self._fetch_sessions(
            "SELECT * FROM workout_sessions WHERE is_completed = 1 ORDER BY started_at DESC",
            (),
        )

    async def get_completed_sessions_for_month(self, day: date) -> list[WorkoutSession]:
        """Completed sessions started in the month of ``day``, newest first."""
        start = datetime(day.year, day.month, 1)
        if day.month == 12:
            end = datetime(day.year + 1, 1, 1)
        else:
            end = datetime(day.year, day.month + 1, 1)
        return await self._fetch_sessions(
            """
            SELECT * FROM workout_sessions
            WHERE is_completed = 1 AND started_at >= ? AND started_at < ?
            ORDER BY started_at DESC
            """,
            (start.isoformat(), end.isoformat()),
        )

    async def get_previous_session(
        self, session_type: SessionType, before: datetime
    ) -> WorkoutSession | None:
        """Most recent completed session of a type started before ``before``."""
        sessions = await self._fetch_sessions(
            """
            SELECT * FROM workout_sessions
            WHERE session_type = ? AND started_at < ? AND is_completed = 1
            ORDER BY started_at DESC LIMIT 1
            """,
            (session_type.value, before.isoformat()),
        )
        return sessions[0] if sessions else None

    async def save_workout_session(self, session: WorkoutSession) -> None:
        """Insert or replace a session with all its exercises and sets."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO workout_sessions
                (id, session_type, week_number, started_at, completed_at,
                 is_completed, structure, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                """,
                (
                    session.id,
                    session.session_type.value,
                    session.week_number,
                    session.started_at.isoformat(),
                    session.completed_at.isoformat() if session.completed_at else None,
                    int(session.is_completed),
                    json.dumps(session.to_dict()),
                ),
            )
            await db.commit()
        logger.debug("Saved workout session %s", session.id)

    async def delete_workout_session(self, session: WorkoutSession) -> None:
        """Delete a session with its exercises and sets."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM workout_sessions WHERE id = ?", (session.id,))
            await db.commit()

    async def _fetch_sessions(self, query: str, params: tuple) -> list[WorkoutSession]:
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(query, params)
            rows = await cursor.fetchall()
            return [self._row_to_session(row) for row in rows]

    def _row_to_session(self, row: aiosqlite.Row) -> WorkoutSession:
        """Convert a database row to a WorkoutSession."""
        return WorkoutSession.from_dict(json.loads(row["structure"]))


class ExerciseRepository:
    """Repository for the exercise catalog."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def list_all(self) -> list[Exercise]:
        """List all exercises."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM exercises ORDER BY name")
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def get(self, exercise_id: str) -> Exercise | None:
        """Get an exercise by ID."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute("SELECT * FROM exercises WHERE id = ?", (exercise_id,))
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def get_by_name(self, name: str) -> Exercise | None:
        """Get an exercise by exact name (case-insensitive)."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE name = ? COLLATE NOCASE LIMIT 1", (name,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return self._row_to_exercise(row)

    async def search(self, query: str) -> list[Exercise]:
        """Search exercises by name."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE name LIKE ? ORDER BY name",
                (f"%{query}%",),
            )
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def get_by_muscle_group(self, muscle_group: MuscleGroup) -> list[Exercise]:
        """Get exercises targeting a muscle group."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM exercises WHERE muscle_groups LIKE ? ORDER BY name",
                (f'%"{muscle_group.value}"%',),
            )
            rows = await cursor.fetchall()
            return [self._row_to_exercise(row) for row in rows]

    async def save(self, exercise: Exercise) -> None:
        """Insert or replace an exercise."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT OR REPLACE INTO exercises
                (id, name, muscle_groups, equipment, description, is_built_in, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    exercise.id,
                    exercise.name,
                    json.dumps(sorted(mg.value for mg in exercise.muscle_groups)),
                    exercise.equipment,
                    exercise.description,
                    int(exercise.is_built_in),
                    exercise.created_at.isoformat(),
                ),
            )
            await db.commit()

    async def delete(self, exercise: Exercise) -> None:
        """Delete a user-created exercise."""
        if exercise.is_built_in:
            raise ValidationError(f"Cannot delete built-in exercise '{exercise.name}'")
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("DELETE FROM exercises WHERE id = ?", (exercise.id,))
            await db.commit()

    def _row_to_exercise(self, row: aiosqlite.Row) -> Exercise:
        """Convert a database row to an Exercise."""
        return Exercise(
            id=row["id"],
            name=row["name"],
            muscle_groups={MuscleGroup(mg) for mg in json.loads(row["muscle_groups"])},
            equipment=row["equipment"],
            description=row["description"] or "",
            is_built_in=bool(row["is_built_in"]),
            created_at=(
                datetime.fromisoformat(row["created_at"]) if row["created_at"] else datetime.now()
            ),
        )
