"""Tests for the progression engine."""

import pytest

from liftup.models.exercises import PlannedExercise
from liftup.models.session import ExerciseSet
from liftup.services.progression import (
    ProgressionEngine,
    ProgressionReason,
    ProgressionSuggestion,
    calculate_weight_increase,
)


def working_sets(reps: list[int], weight: float) -> list[ExerciseSet]:
    return [
        ExerciseSet(set_number=i + 1, reps=r, weight=weight, is_completed=True)
        for i, r in enumerate(reps)
    ]


@pytest.fixture
def engine():
    return ProgressionEngine()


@pytest.fixture
def planned():
    return PlannedExercise(target_reps_min=8, target_reps_max=12)


class TestProgressionEngine:
    """Tests for double-progression suggestions."""

    def test_first_time(self, engine, planned):
        suggestion = engine.suggest(planned, [])
        assert suggestion == ProgressionSuggestion(0.0, 8, ProgressionReason.FIRST_TIME)

    def test_reached_max_reps_adds_weight(self, engine, planned):
        suggestion = engine.suggest(planned, working_sets([12, 12, 12], 10))
        assert suggestion.weight == 11
        assert suggestion.reps == 8
        assert suggestion.reason == ProgressionReason.REACHED_MAX_REPS

    def test_progress_in_reps_is_capped(self, engine, planned):
        suggestion = engine.suggest(planned, working_sets([9, 10, 11], 10))
        assert suggestion.weight == 10
        assert suggestion.reps == 12
        assert suggestion.reason == ProgressionReason.PROGRESS_IN_REPS

    def test_progress_in_reps_adds_one(self, engine, planned):
        suggestion = engine.suggest(planned, working_sets([8, 9, 8], 40))
        assert suggestion.reps == 10
        assert suggestion.weight == 40

    def test_maintain_weight_below_range(self, engine, planned):
        suggestion = engine.suggest(planned, working_sets([5, 6, 6], 10))
        assert suggestion.weight == 10
        assert suggestion.reps == 8
        assert suggestion.reason == ProgressionReason.MAINTAIN_WEIGHT

    def test_ignores_warmups_and_unfinished_sets(self, engine, planned):
        sets = [
            ExerciseSet(set_number=1, reps=15, weight=20, is_warmup=True, is_completed=True),
            ExerciseSet(set_number=2, reps=5, weight=50, is_completed=True),
            ExerciseSet(set_number=3, reps=12, weight=50),
        ]
        suggestion = engine.suggest(planned, sets)
        assert suggestion.reason == ProgressionReason.MAINTAIN_WEIGHT
        assert suggestion.weight == 50

    def test_only_warmups_counts_as_first_time(self, engine, planned):
        sets = [ExerciseSet(set_number=1, reps=10, weight=20, is_warmup=True, is_completed=True)]
        assert engine.suggest(planned, sets).reason == ProgressionReason.FIRST_TIME

    def test_uses_last_set_weight(self, engine, planned):
        sets = working_sets([12, 12], 60) + working_sets([12], 62.5)
        suggestion = engine.suggest(planned, sets)
        assert suggestion.weight == 62.5 + 2.5

    def test_display_text(self):
        assert ProgressionSuggestion(62.5, 8, ProgressionReason.REACHED_MAX_REPS).display_text == "8 reps @ 62.5kg"
        assert ProgressionSuggestion(0.0, 8, ProgressionReason.FIRST_TIME).display_text == "8 reps"


class TestWeightIncrease:
    """Tests for load-dependent increments."""

    @pytest.mark.parametrize(
        "weight,increase",
        [(0, 1.0), (19.5, 1.0), (20, 2.0), (39, 2.0), (40, 2.5), (79.9, 2.5), (80, 5.0), (200, 5.0)],
    )
    def test_tiers(self, weight, increase):
        assert calculate_weight_increase(weight) == increase
