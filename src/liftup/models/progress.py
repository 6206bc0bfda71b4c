"""Weekly progress statistics and per-exercise progression."""

import calendar
from dataclasses import dataclass, field
from datetime import datetime

from .program import SessionType, WeekProgram
from .session import WorkoutSession

# Look-back windows shown for each exercise, in months
CHANGE_WINDOWS = (1, 3, 6)


def months_before(moment: datetime, months: int) -> datetime:
    """Same day and time ``months`` earlier, clamped to the end of short months."""
    month_index = moment.year * 12 + moment.month - 1 - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


@dataclass
class ProgramStats:
    """Completion and volume figures for one week program.

    ``completed_sessions`` are the finished sessions logged against the
    program's week number.
    """

    week_program: WeekProgram
    completed_sessions: list[WorkoutSession] = field(default_factory=list)

    @property
    def total_exercises(self) -> int:
        return sum(len(session.exercises) for session in self.week_program.sessions)

    @property
    def completed_sessions_count(self) -> int:
        return len(self.completed_sessions)

    @property
    def total_sessions_count(self) -> int:
        return len(self.week_program.sessions)

    @property
    def completion_rate(self) -> float:
        """Completed sessions as a fraction of planned sessions."""
        if self.total_sessions_count == 0:
            return 0.0
        return self.completed_sessions_count / self.total_sessions_count

    @property
    def total_volume_this_week(self) -> float:
        return sum(s.total_volume for s in self.completed_sessions)

    @property
    def total_sets_this_week(self) -> int:
        return sum(s.total_sets for s in self.completed_sessions)

    def get_progress_percentage(self) -> float:
        """Completion rate as a percentage (0-100)."""
        return self.completion_rate * 100

    def get_position_display(self) -> str:
        """Human-readable position string."""
        return (
            f"Week {self.week_program.week_number}: "
            f"{self.completed_sessions_count}/{self.total_sessions_count} sessions"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "week_number": self.week_program.week_number,
            "total_exercises": self.total_exercises,
            "completed_sessions": self.completed_sessions_count,
            "total_sessions": self.total_sessions_count,
            "completion_rate": self.completion_rate,
            "total_volume": self.total_volume_this_week,
            "total_sets": self.total_sets_this_week,
        }


@dataclass
class PerformanceData:
    """Average working-set load of one exercise in one session."""

    date: datetime
    avg_weight: float
    avg_reps: float

    @property
    def date_display(self) -> str:
        return f"{self.date.day} {self.date:%b %Y}"


@dataclass
class ExerciseProgression:
    """Performance history of one catalog exercise, newest first."""

    exercise_id: str
    exercise_name: str
    target_reps_min: int
    target_reps_max: int
    performances: list[PerformanceData] = field(default_factory=list)

    @property
    def last_performance(self) -> PerformanceData | None:
        return self.performances[0] if self.performances else None

    @property
    def last_weight(self) -> float:
        return self.last_performance.avg_weight if self.last_performance else 0.0

    @property
    def last_reps(self) -> int:
        return int(self.last_performance.avg_reps) if self.last_performance else 0

    @property
    def is_ready_to_increase(self) -> bool:
        """Average reps last time went past the top of the rep range."""
        return self.last_reps > self.target_reps_max

    def weight_change(self, months: int, now: datetime | None = None) -> float | None:
        """Weight gained since the latest performance at least ``months`` ago.

        Returns None without any performance that old.
        """
        current = self.last_performance
        if current is None:
            return None
        cutoff = months_before(now or datetime.now(), months)
        for performance in self.performances:
            if performance.date <= cutoff:
                return current.avg_weight - performance.avg_weight
        return None

    def to_dict(self, now: datetime | None = None) -> dict:
        """Convert to dictionary."""
        return {
            "exercise_id": self.exercise_id,
            "exercise_name": self.exercise_name,
            "last_weight": self.last_weight,
            "last_reps": self.last_reps,
            "is_ready_to_increase": self.is_ready_to_increase,
            "changes": {months: self.weight_change(months, now) for months in CHANGE_WINDOWS},
        }

    @classmethod
    def from_sessions(
        cls, sessions: list[WorkoutSession], session_type: SessionType | None = None
    ) -> list["ExerciseProgression"]:
        """Group completed working sets by catalog exercise, sorted by name.

        Target reps come from the most recent session containing the exercise.
        """
        progressions: dict[str, ExerciseProgression] = {}
        ordered = sorted(sessions, key=lambda s: s.started_at, reverse=True)
        for session in ordered:
            if session_type is not None and session.session_type != session_type:
                continue
            for exercise in session.sorted_exercises:
                planned = exercise.planned_exercise
                working = exercise.completed_sets
                if exercise.exercise_id is None or not working:
                    continue

                performance = PerformanceData(
                    date=session.started_at,
                    avg_weight=sum(s.weight for s in working) / len(working),
                    avg_reps=sum(s.reps for s in working) / len(working),
                )
                progression = progressions.get(exercise.exercise_id)
                if progression is None:
                    progression = progressions[exercise.exercise_id] = cls(
                        exercise_id=exercise.exercise_id,
                        exercise_name=exercise.name,
                        target_reps_min=planned.target_reps_min,
                        target_reps_max=planned.target_reps_max,
                    )
                progression.performances.append(performance)

        return sorted(progressions.values(), key=lambda p: p.exercise_name)
