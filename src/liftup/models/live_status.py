"""Snapshots published to external displays."""

from dataclasses import dataclass
from enum import Enum

# Remaining seconds at or below which a countdown is "almost finished"
ALMOST_FINISHED_THRESHOLD = 10


class TimerEventType(str, Enum):
    """Why a timer snapshot was published."""

    STARTED = "started"
    TICK = "tick"
    ADJUSTED = "adjusted"
    PAUSED = "paused"
    RESUMED = "resumed"
    FINISHED = "finished"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TimerSnapshot:
    """Rest timer state as shown on a live-status surface."""

    remaining_seconds: int
    total_seconds: int
    is_paused: bool = False

    @property
    def progress(self) -> float:
        """Elapsed fraction, 0.0 to 1.0."""
        if self.total_seconds <= 0:
            return 0.0
        return 1.0 - self.remaining_seconds / self.total_seconds

    @property
    def display_time(self) -> str:
        """Remaining time as 'M:SS'."""
        minutes, seconds = divmod(max(self.remaining_seconds, 0), 60)
        return f"{minutes}:{seconds:02d}"

    @property
    def is_finished(self) -> bool:
        return self.remaining_seconds <= 0

    @property
    def is_almost_finished(self) -> bool:
        return 0 < self.remaining_seconds <= ALMOST_FINISHED_THRESHOLD

    def to_dict(self) -> dict:
        return {
            "remainingSeconds": self.remaining_seconds,
            "totalSeconds": self.total_seconds,
            "isPaused": self.is_paused,
        }


@dataclass(frozen=True)
class TimerActivity:
    """Static context of a rest countdown: the working set the athlete is resting for."""

    exercise_name: str
    set_number: int
    total_sets: int


@dataclass(frozen=True)
class CompanionSnapshot:
    """Current position in a session, sent to a companion device."""

    session_type_name: str
    current_exercise_name: str
    current_exercise_index: int
    total_exercises: int
    current_set_number: int
    total_sets: int
    target_reps_display: str
    previous_set_display: str | None
    suggested_weight: float
    suggested_reps: int

    def to_dict(self) -> dict:
        """Wire representation with camelCase keys."""
        return {
            "sessionType": self.session_type_name,
            "currentExerciseName": self.current_exercise_name,
            "currentExerciseIndex": self.current_exercise_index,
            "totalExercises": self.total_exercises,
            "currentSetNumber": self.current_set_number,
            "totalSets": self.total_sets,
            "targetReps": self.target_reps_display,
            "previousSetDisplay": self.previous_set_display,
            "suggestedWeight": self.suggested_weight,
            "suggestedReps": self.suggested_reps,
        }
