"""Weekly training program models."""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum

from ..errors import DomainStateError, ValidationError
from .exercises import PlannedExercise, new_id

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
SHORT_DAY_NAMES = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


class SessionType(str, Enum):
    """Session types of the weekly split."""

    UPPER = "UPPER"
    LOWER = "LOWER"
    PULL = "PULL"
    LEGS = "LEGS"
    PUSH = "PUSH"

    @classmethod
    def parse(cls, raw: str) -> "SessionType":
        """Decode a persisted or user-supplied session type.

        Accepts the stored value case-insensitively. Unknown values raise
        instead of decoding to a default.
        """
        try:
            return cls(raw.strip().upper())
        except (AttributeError, ValueError):
            raise ValidationError(f"Unknown session type: {raw!r}") from None

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        return {
            SessionType.UPPER: "Upper Body",
            SessionType.LOWER: "Lower Body",
            SessionType.PULL: "Pull",
            SessionType.LEGS: "Legs",
            SessionType.PUSH: "Push",
        }[self]

    @property
    def default_day_index(self) -> int:
        """Default weekday of this session (0 = Monday)."""
        return list(SessionType).index(self)

    @classmethod
    def for_day(cls, day_index: int) -> "SessionType | None":
        """Session type scheduled by default on a weekday."""
        for session_type in cls:
            if session_type.default_day_index == day_index:
                return session_type
        return None


def monday_of(day: date) -> date:
    """Return the Monday of the week containing ``day``."""
    return day - timedelta(days=day.weekday())


@dataclass
class SessionTemplate:
    """Blueprint for one session of the week."""

    session_type: SessionType
    exercises: list[PlannedExercise] = field(default_factory=list)
    day_index: int | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if self.day_index is None:
            self.day_index = self.session_type.default_day_index
        if not 0 <= self.day_index <= 6:
            raise ValidationError(f"Invalid day index {self.day_index}")

    @property
    def sorted_exercises(self) -> list[PlannedExercise]:
        """Planned exercises in session order."""
        return sorted(self.exercises, key=lambda e: e.order_index)

    def add_exercise(self, exercise: PlannedExercise) -> PlannedExercise:
        """Append a planned exercise at the end of the session."""
        if self.exercises:
            exercise.order_index = max(e.order_index for e in self.exercises) + 1
        else:
            exercise.order_index = 0
        self.exercises.append(exercise)
        return exercise

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "session_type": self.session_type.value,
            "day_index": self.day_index,
            "exercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionTemplate":
        """Create from dictionary."""
        return cls(
            id=data["id"],
            session_type=SessionType.parse(data["session_type"]),
            day_index=data.get("day_index"),
            exercises=[PlannedExercise.from_dict(ex) for ex in data.get("exercises", [])],
        )


@dataclass
class WeekProgram:
    """One week's complete set of session templates."""

    week_number: int
    start_date: date
    sessions: list[SessionTemplate] = field(default_factory=list)
    notes: str | None = None
    is_active: bool = True
    id: str = field(default_factory=new_id)

    @property
    def sorted_sessions(self) -> list[SessionTemplate]:
        """Sessions ordered by weekday."""
        return sorted(self.sessions, key=lambda s: s.day_index)

    def session_for_day(self, day_index: int) -> SessionTemplate | None:
        """Return the session scheduled on a weekday, if any."""
        for session in self.sessions:
            if session.day_index == day_index:
                return session
        return None

    def session_for_type(self, session_type: SessionType) -> SessionTemplate | None:
        """Return the first session of a given type, if any."""
        for session in self.sorted_sessions:
            if session.session_type == session_type:
                return session
        return None

    def require_session(self, session_type: SessionType) -> SessionTemplate:
        """Return the session of a given type or raise DomainStateError."""
        session = self.session_for_type(session_type)
        if session is None:
            raise DomainStateError(
                f"Week {self.week_number} has no {session_type.display_name} session"
            )
        return session

    def today_session(self, today: date | None = None) -> SessionTemplate | None:
        """Return the session scheduled for today."""
        today = today or date.today()
        return self.session_for_day(today.weekday())

    def date_for_day(self, day_index: int) -> date:
        """Calendar date of a weekday in this program's week."""
        return self.start_date + timedelta(days=day_index)

    @staticmethod
    def day_name(day_index: int) -> str:
        """Full weekday name, or empty string when out of range."""
        if 0 <= day_index < len(DAY_NAMES):
            return DAY_NAMES[day_index]
        return ""

    @staticmethod
    def short_day_name(day_index: int) -> str:
        """Abbreviated weekday name, or empty string when out of range."""
        if 0 <= day_index < len(SHORT_DAY_NAMES):
            return SHORT_DAY_NAMES[day_index]
        return ""

    def duplicate(self, new_week_number: int, new_start_date: date) -> "WeekProgram":
        """Deep copy this program into a new week.

        Every template and planned exercise gets a new identity; catalog
        exercise references are shared. The copy is active.
        """
        program = WeekProgram(
            week_number=new_week_number,
            start_date=new_start_date,
            notes=self.notes,
            is_active=True,
        )
        for session in self.sessions:
            program.sessions.append(
                SessionTemplate(
                    session_type=session.session_type,
                    day_index=session.day_index,
                    exercises=[exercise.copy() for exercise in session.exercises],
                )
            )
        return program

    def get_summary(self) -> str:
        """Generate a text summary of the week."""
        summary = f"Week {self.week_number} (from {self.start_date.isoformat()})"
        if not self.is_active:
            summary += " [inactive]"
        summary += "\n"

        for session in self.sorted_sessions:
            summary += (
                f"  {self.day_name(session.day_index)}: "
                f"{session.session_type.display_name}\n"
            )
            for ex in session.sorted_exercises:
                warmups = f", {ex.warmup_sets} warmup" if ex.warmup_sets else ""
                summary += (
                    f"    - {ex.exercise_name}: 3x{ex.target_reps_display}"
                    f"{warmups}, rest {ex.rest_time_display}\n"
                )

        return summary

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "week_number": self.week_number,
            "start_date": self.start_date.isoformat(),
            "sessions": [session.to_dict() for session in self.sessions],
            "notes": self.notes,
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WeekProgram":
        """Create from dictionary."""
        start_date = data["start_date"]
        if isinstance(start_date, str):
            start_date = datetime.fromisoformat(start_date).date()

        return cls(
            id=data["id"],
            week_number=data["week_number"],
            start_date=start_date,
            sessions=[SessionTemplate.from_dict(s) for s in data.get("sessions", [])],
            notes=data.get("notes"),
            is_active=data.get("is_active", True),
        )
