"""Exercise catalog and planned exercise models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from uuid import uuid4

from ..errors import ValidationError


def new_id() -> str:
    """Generate a fresh entity identifier."""
    return str(uuid4())


class MuscleGroup(str, Enum):
    """Muscle groups targeted by an exercise."""

    CHEST = "chest"
    BACK = "back"
    SHOULDERS = "shoulders"
    BICEPS = "biceps"
    TRICEPS = "triceps"
    FOREARMS = "forearms"
    QUADRICEPS = "quadriceps"
    HAMSTRINGS = "hamstrings"
    GLUTES = "glutes"
    CALVES = "calves"
    CORE = "core"
    TRAPS = "traps"
    LATS = "lats"
    REAR_DELTS = "rear_delts"


@dataclass
class Exercise:
    """A movement in the exercise catalog."""

    name: str
    muscle_groups: set[MuscleGroup] = field(default_factory=set)
    equipment: str | None = None
    description: str = ""
    is_built_in: bool = False
    created_at: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_id)

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "name": self.name,
            "muscle_groups": sorted(mg.value for mg in self.muscle_groups),
            "equipment": self.equipment,
            "description": self.description,
            "is_built_in": self.is_built_in,
            "created_at": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Exercise":
        """Create from dictionary."""
        created_at = datetime.now()
        if data.get("created_at"):
            created_at = datetime.fromisoformat(data["created_at"])

        return cls(
            id=data["id"],
            name=data["name"],
            muscle_groups={MuscleGroup(mg) for mg in data.get("muscle_groups", [])},
            equipment=data.get("equipment"),
            description=data.get("description", ""),
            is_built_in=data.get("is_built_in", False),
            created_at=created_at,
        )


@dataclass
class PlannedExercise:
    """An exercise scheduled inside a session template.

    Holds the scheduling parameters (warmups, rep range, rest) for one
    catalog exercise. The catalog reference is shared, never copied.
    """

    exercise: Exercise | None = None
    warmup_sets: int = 1
    target_reps_min: int = 8
    target_reps_max: int = 12
    rest_seconds: int = 120
    order_index: int = 0
    notes: str | None = None
    id: str = field(default_factory=new_id)

    def __post_init__(self):
        if self.warmup_sets < 0:
            raise ValidationError("Warmup sets cannot be negative")
        if self.target_reps_min > self.target_reps_max:
            raise ValidationError(
                f"Invalid rep range {self.target_reps_min}-{self.target_reps_max}: "
                "minimum exceeds maximum"
            )
        if self.rest_seconds < 0:
            raise ValidationError("Rest time cannot be negative")

    @property
    def exercise_name(self) -> str:
        """Name of the catalog exercise, or a placeholder."""
        return self.exercise.name if self.exercise else "Exercise"

    @property
    def target_reps_display(self) -> str:
        """Target rep range, e.g. '8-12' or '5'."""
        if self.target_reps_min == self.target_reps_max:
            return str(self.target_reps_min)
        return f"{self.target_reps_min}-{self.target_reps_max}"

    @property
    def rest_time_display(self) -> str:
        """Rest time, e.g. '2 min' or '1:30 min'."""
        minutes, seconds = divmod(self.rest_seconds, 60)
        if seconds == 0:
            return f"{minutes} min"
        return f"{minutes}:{seconds:02d} min"

    def copy(self) -> "PlannedExercise":
        """Copy with a fresh identity and the same catalog reference."""
        return PlannedExercise(
            exercise=self.exercise,
            warmup_sets=self.warmup_sets,
            target_reps_min=self.target_reps_min,
            target_reps_max=self.target_reps_max,
            rest_seconds=self.rest_seconds,
            order_index=self.order_index,
            notes=self.notes,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "id": self.id,
            "exercise": self.exercise.to_dict() if self.exercise else None,
            "warmup_sets": self.warmup_sets,
            "target_reps_min": self.target_reps_min,
            "target_reps_max": self.target_reps_max,
            "rest_seconds": self.rest_seconds,
            "order_index": self.order_index,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PlannedExercise":
        """Create from dictionary."""
        exercise = None
        if data.get("exercise"):
            exercise = Exercise.from_dict(data["exercise"])

        return cls(
            id=data["id"],
            exercise=exercise,
            warmup_sets=data.get("warmup_sets", 1),
            target_reps_min=data.get("target_reps_min", 8),
            target_reps_max=data.get("target_reps_max", 12),
            rest_seconds=data.get("rest_seconds", 120),
            order_index=data.get("order_index", 0),
            notes=data.get("notes"),
        )
