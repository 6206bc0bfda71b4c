"""Next-set weight and rep suggestions from exercise history."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ..models.exercises import PlannedExercise
from ..models.session import ExerciseSet, format_weight


class ProgressionReason(str, Enum):
    """Why a suggestion was made."""

    FIRST_TIME = "first_time"
    REACHED_MAX_REPS = "reached_max_reps"
    PROGRESS_IN_REPS = "progress_in_reps"
    MAINTAIN_WEIGHT = "maintain_weight"

    @property
    def explanation(self) -> str:
        return {
            ProgressionReason.FIRST_TIME: "First time - start light to find your working weight",
            ProgressionReason.REACHED_MAX_REPS: "You hit the top of the rep range, add weight!",
            ProgressionReason.PROGRESS_IN_REPS: "Keep adding reps before increasing the weight",
            ProgressionReason.MAINTAIN_WEIGHT: "Stay at this weight until you reach the target reps",
        }[self]


@dataclass(frozen=True)
class ProgressionSuggestion:
    """Suggested weight and reps for the next session."""

    weight: float
    reps: int
    reason: ProgressionReason

    @property
    def display_text(self) -> str:
        if self.weight == 0:
            return f"{self.reps} reps"
        return f"{self.reps} reps @ {format_weight(self.weight)}kg"


def calculate_weight_increase(current_weight: float) -> float:
    """Weight increment for a lift at the given load.

    Light loads (dumbbells) move by 1-2kg, heavy barbell loads by 2.5-5kg.
    """
    if current_weight < 20:
        return 1.0
    if current_weight < 40:
        return 2.0
    if current_weight < 80:
        return 2.5
    return 5.0


class ProgressionEngine:
    """Double-progression suggestions: reps first, then weight."""

    def suggest(
        self,
        planned_exercise: PlannedExercise,
        previous_working_sets: Iterable[ExerciseSet],
    ) -> ProgressionSuggestion:
        """Suggest the next weight and reps for a planned exercise.

        Args:
            planned_exercise: Exercise with its target rep range
            previous_working_sets: Sets from the last completed session, in
                performed order. Warmup and unfinished sets are ignored.

        Returns:
            The suggestion and the reason behind it
        """
        working_sets = [
            s for s in previous_working_sets if s.is_completed and not s.is_warmup
        ]
        if not working_sets:
            return ProgressionSuggestion(
                weight=0.0,
                reps=planned_exercise.target_reps_min,
                reason=ProgressionReason.FIRST_TIME,
            )

        avg_reps = sum(s.reps for s in working_sets) / len(working_sets)
        last_weight = working_sets[-1].weight
        max_reps = max(s.reps for s in working_sets)

        if avg_reps >= planned_exercise.target_reps_max:
            return ProgressionSuggestion(
                weight=last_weight + calculate_weight_increase(last_weight),
                reps=planned_exercise.target_reps_min,
                reason=ProgressionReason.REACHED_MAX_REPS,
            )

        if avg_reps >= planned_exercise.target_reps_min:
            return ProgressionSuggestion(
                weight=last_weight,
                reps=min(max_reps + 1, planned_exercise.target_reps_max),
                reason=ProgressionReason.PROGRESS_IN_REPS,
            )

        return ProgressionSuggestion(
            weight=last_weight,
            reps=planned_exercise.target_reps_min,
            reason=ProgressionReason.MAINTAIN_WEIGHT,
        )
