"""Performed workout session models."""

from dataclasses import dataclass, field
from datetime import datetime

from .exercises import PlannedExercise, new_id
from .program import SessionTemplate, SessionType

# Working sets created for every exercise when a session starts
WORKING_SETS_PER_EXERCISE = 3


def format_weight(weight: float) -> str:
    """Format a weight without a trailing '.0' for whole numbers."""
    if float(weight).is_integer():
        return f"{weight:.0f}"
    return f"{weight:.1f}"


@dataclass
class ExerciseSet:
    """A single set attempt."""

    set_number: int
    reps: int = 0
    weight: float = 0.0
    is_warmup: bool = False
    is_completed: bool = False
    is_skipped: bool = False
    notes: str | None = None
    completed_at: datetime | None = None
    id: str = field(default_factory=new_id)

    @property
    def volume(self) -> float:
        """Reps times weight."""
        return self.reps * self.weight

    @property
    def display_format(self) -> str:
        """Compact display: '10(35)' is 10 reps at 35kg."""
        if self.weight == 0:
            return str(self.reps)
        return f"{self.reps}({format_weight(self.weight)})"

    @property
    def is_pending(self) -> bool:
        """Neither completed nor skipped yet."""
        return not self.is_completed and not self.is_skipped

    def mark_completed(self, at: datetime | None = None) -> None:
        """Mark the set as performed."""
        self.is_completed = True
        self.is_skipped = False
        self.completed_at = at or datetime.now()

    def mark_skipped(self, at: datetime | None = None) -> None:
        """Mark the set as skipped."""
        self.is_skipped = True
        self.is_completed = False
        self.completed_at = at or datetime.now()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "set_number": self.set_number,
            "reps": self.reps,
            "weight": self.weight,
            "is_warmup": self.is_warmup,
            "is_completed": self.is_completed,
            "is_skipped": self.is_skipped,
            "notes": self.notes,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseSet":
        """Create from dictionary."""
        completed_at = None
        if data.get("completed_at"):
            completed_at = datetime.fromisoformat(data["completed_at"])

        return cls(
            id=data["id"],
            set_number=data["set_number"],
            reps=data.get("reps", 0),
            weight=data.get("weight", 0.0),
            is_warmup=data.get("is_warmup", False),
            is_completed=data.get("is_completed", False),
            is_skipped=data.get("is_skipped", False),
            notes=data.get("notes"),
            completed_at=completed_at,
        )


@dataclass
class SessionExercise:
    """One exercise as performed within a workout session.

    ``planned_exercise`` is a lookup reference to the template entry this
    exercise was generated from. It may be None once the originating
    program is gone.
    """

    planned_exercise: PlannedExercise | None = None
    sets: list[ExerciseSet] = field(default_factory=list)
    is_completed: bool = False
    is_skipped: bool = False
    order_index: int = 0
    notes: str | None = None
    id: str = field(default_factory=new_id)

    @classmethod
    def from_planned(cls, planned: PlannedExercise) -> "SessionExercise":
        """Create with warmup sets followed by the working sets."""
        sets = [
            ExerciseSet(set_number=i, is_warmup=True)
            for i in range(1, planned.warmup_sets + 1)
        ]
        sets += [
            ExerciseSet(set_number=planned.warmup_sets + i)
            for i in range(1, WORKING_SETS_PER_EXERCISE + 1)
        ]
        return cls(planned_exercise=planned, sets=sets, order_index=planned.order_index)

    @property
    def exercise_id(self) -> str | None:
        """Catalog exercise identity, if known."""
        if self.planned_exercise and self.planned_exercise.exercise:
            return self.planned_exercise.exercise.id
        return None

    @property
    def name(self) -> str:
        """Catalog exercise name, or a placeholder."""
        if self.planned_exercise:
            return self.planned_exercise.exercise_name
        return "Exercise"

    @property
    def sorted_sets(self) -> list[ExerciseSet]:
        return sorted(self.sets, key=lambda s: s.set_number)

    @property
    def working_sets(self) -> list[ExerciseSet]:
        return [s for s in self.sorted_sets if not s.is_warmup]

    @property
    def completed_sets(self) -> list[ExerciseSet]:
        """Completed working sets."""
        return [s for s in self.sorted_sets if s.is_completed and not s.is_warmup]

    @property
    def pending_working_sets(self) -> list[ExerciseSet]:
        return [s for s in self.working_sets if s.is_pending]

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.completed_sets)

    @property
    def best_set(self) -> ExerciseSet | None:
        """Completed working set with the highest volume."""
        best = None
        for s in self.completed_sets:
            if best is None or s.volume > best.volume:
                best = s
        return best

    def find_set(self, set_id: str) -> ExerciseSet | None:
        for s in self.sets:
            if s.id == set_id:
                return s
        return None

    def mark_completed(self) -> None:
        self.is_completed = True
        self.is_skipped = False

    def mark_skipped(self, at: datetime | None = None) -> None:
        """Skip the exercise and every set not already completed."""
        self.is_skipped = True
        self.is_completed = False
        for exercise_set in self.sets:
            if not exercise_set.is_completed:
                exercise_set.mark_skipped(at)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "planned_exercise": (
                self.planned_exercise.to_dict() if self.planned_exercise else None
            ),
            "sets": [s.to_dict() for s in self.sets],
            "is_completed": self.is_completed,
            "is_skipped": self.is_skipped,
            "order_index": self.order_index,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "SessionExercise":
        """Create from dictionary."""
        planned = None
        if data.get("planned_exercise"):
            planned = PlannedExercise.from_dict(data["planned_exercise"])

        return cls(
            id=data["id"],
            planned_exercise=planned,
            sets=[ExerciseSet.from_dict(s) for s in data.get("sets", [])],
            is_completed=data.get("is_completed", False),
            is_skipped=data.get("is_skipped", False),
            order_index=data.get("order_index", 0),
            notes=data.get("notes"),
        )


@dataclass
class WorkoutSession:
    """The as-performed record of one executed session."""

    session_type: SessionType
    week_number: int
    started_at: datetime = field(default_factory=datetime.now)
    exercises: list[SessionExercise] = field(default_factory=list)
    completed_at: datetime | None = None
    duration_seconds: int | None = None
    is_completed: bool = False
    notes: str | None = None
    id: str = field(default_factory=new_id)

    @classmethod
    def from_template(
        cls,
        template: SessionTemplate,
        week_number: int,
        started_at: datetime | None = None,
    ) -> "WorkoutSession":
        """Instantiate a session and its exercise/set tree from a template."""
        return cls(
            session_type=template.session_type,
            week_number=week_number,
            started_at=started_at or datetime.now(),
            exercises=[
                SessionExercise.from_planned(planned)
                for planned in template.sorted_exercises
            ],
        )

    @property
    def sorted_exercises(self) -> list[SessionExercise]:
        return sorted(self.exercises, key=lambda e: e.order_index)

    @property
    def completed_exercises(self) -> list[SessionExercise]:
        return [e for e in self.sorted_exercises if e.is_completed]

    @property
    def skipped_exercises(self) -> list[SessionExercise]:
        return [e for e in self.sorted_exercises if e.is_skipped]

    @property
    def total_volume(self) -> float:
        """Volume of all completed working sets."""
        return sum(e.total_volume for e in self.exercises)

    @property
    def total_sets(self) -> int:
        return sum(len(e.completed_sets) for e in self.exercises)

    @property
    def progress(self) -> float:
        """Fraction of exercises completed or skipped."""
        if not self.exercises:
            return 0.0
        done = sum(1 for e in self.exercises if e.is_completed or e.is_skipped)
        return done / len(self.exercises)

    def duration_display(self, now: datetime | None = None) -> str:
        """Duration as '1h 5min' or '42 min'; elapsed time while running."""
        if self.duration_seconds is not None:
            seconds = self.duration_seconds
        else:
            seconds = int(((now or datetime.now()) - self.started_at).total_seconds())
        hours, remainder = divmod(max(seconds, 0), 3600)
        minutes = remainder // 60
        if hours > 0:
            return f"{hours}h {minutes}min"
        return f"{minutes} min"

    def exercise_by_id(self, exercise_id: str) -> SessionExercise | None:
        for exercise in self.exercises:
            if exercise.id == exercise_id:
                return exercise
        return None

    def find_exercise_for_set(self, set_id: str) -> SessionExercise | None:
        """Owning exercise of a set, looked up by id."""
        for exercise in self.exercises:
            if exercise.find_set(set_id) is not None:
                return exercise
        return None

    def exercise_for_catalog(
        self, exercise_id: str, completed_only: bool = False
    ) -> SessionExercise | None:
        """First exercise in this session for a catalog exercise."""
        for exercise in self.sorted_exercises:
            if exercise.exercise_id != exercise_id:
                continue
            if completed_only and not exercise.is_completed:
                continue
            return exercise
        return None

    def complete(self, at: datetime | None = None) -> bool:
        """Finalize the session.

        Returns False without touching anything if already completed.
        """
        if self.is_completed:
            return False
        self.is_completed = True
        self.completed_at = at or datetime.now()
        self.duration_seconds = int((self.completed_at - self.started_at).total_seconds())
        return True

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "session_type": self.session_type.value,
            "week_number": self.week_number,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "is_completed": self.is_completed,
            "notes": self.notes,
            "exercises": [e.to_dict() for e in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutSession":
        """Create from dictionary."""
        completed_at = None
        if data.get("completed_at"):
            completed_at = datetime.fromisoformat(data["completed_at"])

        return cls(
            id=data["id"],
            session_type=SessionType.parse(data["session_type"]),
            week_number=data["week_number"],
            started_at=datetime.fromisoformat(data["started_at"]),
            completed_at=completed_at,
            duration_seconds=data.get("duration_seconds"),
            is_completed=data.get("is_completed", False),
            notes=data.get("notes"),
            exercises=[SessionExercise.from_dict(e) for e in data.get("exercises", [])],
        )


@dataclass
class SetComparison:
    """Comparison of a set with the matching set of a previous session."""

    current_set: ExerciseSet
    previous_set: ExerciseSet | None = None

    @property
    def reps_change(self) -> int:
        if self.previous_set is None:
            return 0
        return self.current_set.reps - self.previous_set.reps

    @property
    def weight_change(self) -> float:
        if self.previous_set is None:
            return 0.0
        return self.current_set.weight - self.previous_set.weight

    @property
    def volume_change(self) -> float:
        if self.previous_set is None:
            return 0.0
        return self.current_set.volume - self.previous_set.volume

    @property
    def is_improvement(self) -> bool:
        return self.volume_change > 0 or (self.volume_change == 0 and self.reps_change > 0)

    @property
    def is_pr(self) -> bool:
        if self.previous_set is None:
            return True
        return self.current_set.weight > self.previous_set.weight or (
            self.current_set.weight == self.previous_set.weight
            and self.current_set.reps > self.previous_set.reps
        )


@dataclass
class ExerciseImprovement:
    """Best-set improvement of one exercise between two sessions."""

    exercise_name: str
    previous_best: str
    current_best: str
    volume_change: float
    weight_change: float
    reps_change: int
    is_pr: bool


@dataclass
class SessionComparison:
    """Per-exercise best-set comparison between two sessions."""

    current_session: WorkoutSession
    previous_session: WorkoutSession | None = None

    @property
    def volume_change(self) -> float:
        if self.previous_session is None:
            return 0.0
        return self.current_session.total_volume - self.previous_session.total_volume

    @property
    def volume_change_percent(self) -> float:
        if self.previous_session is None or self.previous_session.total_volume <= 0:
            return 0.0
        return self.volume_change / self.previous_session.total_volume * 100

    @property
    def improvements(self) -> list[ExerciseImprovement]:
        if self.previous_session is None:
            return []

        results = []
        for current in self.current_session.completed_exercises:
            if current.exercise_id is None:
                continue
            previous = self.previous_session.exercise_for_catalog(current.exercise_id)
            if previous is None:
                continue

            current_best = current.best_set
            previous_best = previous.best_set
            if current_best is None or previous_best is None:
                continue

            comparison = SetComparison(current_set=current_best, previous_set=previous_best)
            if (
                comparison.volume_change > 0
                or comparison.weight_change > 0
                or comparison.reps_change > 0
            ):
                results.append(
                    ExerciseImprovement(
                        exercise_name=current.name,
                        previous_best=previous_best.display_format,
                        current_best=current_best.display_format,
                        volume_change=comparison.volume_change,
                        weight_change=comparison.weight_change,
                        reps_change=comparison.reps_change,
                        is_pr=current_best.weight > previous_best.weight,
                    )
                )

        return sorted(results, key=lambda i: i.volume_change, reverse=True)
