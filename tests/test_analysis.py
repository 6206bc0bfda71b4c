"""Tests for session analysis."""

from datetime import datetime

import pytest

from liftup.services.analysis import FIRST_SESSION_SUMMARY, SessionAnalysisEngine

PREVIOUS_START = datetime(2024, 4, 29, 18, 0)


@pytest.fixture
def engine():
    return SessionAnalysisEngine()


class TestSessionAnalysisEngine:
    """Tests for PR, improvement and regression detection."""

    def test_first_session(self, engine, make_session, bench_press):
        analysis = engine.analyze(make_session({bench_press.id: [(10, 60.0)] * 3}), None)

        assert analysis.improvements == []
        assert analysis.regressions == []
        assert analysis.prs == []
        assert analysis.volume_change == 0
        assert analysis.summary == FIRST_SESSION_SUMMARY

    def test_weight_pr(self, engine, make_session, bench_press):
        previous = make_session({bench_press.id: [(10, 10.0)] * 3}, started_at=PREVIOUS_START)
        current = make_session({bench_press.id: [(10, 12.0)] * 3})

        analysis = engine.analyze(current, previous)

        assert analysis.prs == ["Bench Press: 12kg (+2kg)"]
        assert analysis.improvements == ["Bench Press: weight PR!"]
        assert analysis.has_prs
        assert analysis.summary == "Great session! 1 new personal record!"

    def test_more_reps_same_weight(self, engine, make_session, bench_press):
        previous = make_session({bench_press.id: [(10, 60.0)] * 3}, started_at=PREVIOUS_START)
        current = make_session({bench_press.id: [(11, 60.0), (10, 60.0), (10, 60.0)]})

        analysis = engine.analyze(current, previous)

        assert analysis.prs == []
        assert analysis.improvements == ["Bench Press: +1 reps at 60kg"]
        assert analysis.volume_change == 60.0
        assert analysis.summary == "Good session with 1 improvement."

    def test_better_volume_at_lower_weight(self, engine, make_session, bench_press):
        previous = make_session({bench_press.id: [(5, 100.0)] * 3}, started_at=PREVIOUS_START)
        current = make_session({bench_press.id: [(12, 50.0), (5, 100.0), (5, 100.0)]})

        analysis = engine.analyze(current, previous)

        assert analysis.improvements == ["Bench Press: better volume"]

    def test_regression(self, engine, make_session, bench_press):
        previous = make_session({bench_press.id: [(10, 60.0)] * 3}, started_at=PREVIOUS_START)
        current = make_session({bench_press.id: [(8, 60.0)] * 3})

        analysis = engine.analyze(current, previous)

        assert analysis.regressions == ["Bench Press: volume down"]
        assert not analysis.is_positive
        assert analysis.summary == "Tough session. Recover well."

    def test_small_drop_is_not_a_regression(self, engine, make_session, bench_press):
        previous = make_session({bench_press.id: [(10, 60.0)] * 3}, started_at=PREVIOUS_START)
        current = make_session({bench_press.id: [(10, 60.0), (10, 60.0), (9, 60.0)]})

        analysis = engine.analyze(current, previous)

        assert analysis.regressions == []
        assert analysis.improvements == []
        assert analysis.summary == "Stable session, performance maintained."

    def test_volume_progress_summary(self, engine, make_session, bench_press):
        previous = make_session(
            {bench_press.id: [(10, 60.0), (10, 60.0), (5, 60.0)]}, started_at=PREVIOUS_START
        )
        current = make_session({bench_press.id: [(10, 60.0)] * 3})

        analysis = engine.analyze(current, previous)

        assert analysis.improvements == []
        assert analysis.volume_change_percent == pytest.approx(20.0)
        assert analysis.summary == "Strong progress! Volume up 20.0%"

    def test_improvements_sorted_by_volume_gain(self, engine, make_session, bench_press, barbell_row):
        previous = make_session(
            {bench_press.id: [(10, 60.0)] * 3, barbell_row.id: [(10, 50.0)] * 3},
            started_at=PREVIOUS_START,
        )
        current = make_session(
            {bench_press.id: [(11, 60.0)] * 3, barbell_row.id: [(10, 60.0)] * 3}
        )

        analysis = engine.analyze(current, previous)

        assert analysis.improvements == [
            "Barbell Row: weight PR!",
            "Bench Press: +1 reps at 60kg",
        ]
        assert analysis.prs == ["Barbell Row: 60kg (+10kg)"]

    def test_skips_exercises_not_completed(self, engine, make_session, bench_press, barbell_row):
        previous = make_session({barbell_row.id: [(10, 50.0)] * 3}, started_at=PREVIOUS_START)
        current = make_session({bench_press.id: [(10, 60.0)] * 3, barbell_row.id: [(10, 60.0)] * 3})
        previous_bench = previous.sorted_exercises[0]
        assert not previous_bench.is_completed

        analysis = engine.analyze(current, previous)

        assert [line.split(":")[0] for line in analysis.improvements] == ["Barbell Row"]

    def test_to_dict(self, engine, make_session, bench_press):
        analysis = engine.analyze(make_session({bench_press.id: [(10, 60.0)] * 3}), None)
        assert analysis.to_dict()["summary"] == FIRST_SESSION_SUMMARY
