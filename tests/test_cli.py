"""Tests for the non-interactive CLI commands."""

import asyncio

import pytest
from click.testing import CliRunner

from liftup.cli import main
from liftup.commands.base import format_table
from liftup.db import WorkoutRepository


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Invoke the CLI against a throwaway data directory."""
    monkeypatch.setenv("LIFTUP_DATA_DIR", str(tmp_path / "data"))
    runner = CliRunner()

    def invoke(*args, input=None):
        return runner.invoke(main, list(args), input=input)

    return invoke


class TestFormatTable:
    """Tests for format_table."""

    def test_columns_are_padded(self):
        table = format_table(["Name", "Sets"], [["Bench Press", "3"], ["Row", "12"]])
        lines = table.splitlines()

        assert lines[0] == "Name         Sets"
        assert lines[1] == "-----------  ----"
        assert lines[3] == "Row          12"

    def test_empty_rows(self):
        assert format_table(["Name"], []) == ""


class TestCommands:
    """End-to-end planning flow."""

    def test_requires_init(self, cli):
        result = cli("program", "list")
        assert result.exit_code == 1
        assert "liftup init" in result.output

    def test_plan_a_week(self, cli):
        assert cli("init").exit_code == 0
        assert cli("exercise", "add", "Bench Press", "-m", "chest", "-m", "triceps").exit_code == 0
        assert cli("program", "create").exit_code == 0
        assert cli("program", "add-session", "upper").exit_code == 0

        result = cli("program", "add-exercise", "UPPER", "Bench Press", "--rest", "90")
        assert result.exit_code == 0, result.output

        result = cli("program", "show")
        assert "Monday: Upper Body" in result.output
        assert "Bench Press: 3x8-12, 1 warmup, rest 1:30 min" in result.output

        result = cli("stats")
        assert result.exit_code == 0
        assert "Week 1: 0/1 sessions" in result.output

    def test_duplicate_week(self, cli):
        cli("init")
        cli("program", "create", "--start", "2024-05-08")
        cli("program", "add-session", "LEGS", "--week", "1")

        result = cli("program", "duplicate", "1")
        assert result.exit_code == 0, result.output
        assert "2024-05-13" in result.output

        result = cli("program", "list")
        assert "LEGS" in result.output
        assert result.output.count("LEGS") == 2

    def test_domain_errors_exit_with_message(self, cli):
        cli("init")
        cli("program", "create")
        cli("program", "add-session", "PUSH")

        result = cli("program", "add-exercise", "PUSH", "Unknown Lift")

        assert result.exit_code == 1
        assert "[ERROR]" in result.output
        assert "Unknown Lift" in result.output

    def test_invalid_rep_range_rejected(self, cli):
        cli("init")
        cli("exercise", "add", "Curl", "-m", "biceps")
        cli("program", "create")
        cli("program", "add-session", "PULL")

        result = cli("program", "add-exercise", "PULL", "Curl", "--min-reps", "12", "--max-reps", "8")

        assert result.exit_code == 1
        assert "minimum exceeds maximum" in result.output

    def test_rest_must_be_a_preset(self, cli):
        cli("init")
        cli("exercise", "add", "Curl", "-m", "biceps")
        cli("program", "create")
        cli("program", "add-session", "PULL")

        result = cli("program", "add-exercise", "PULL", "Curl", "--rest", "75")

        assert result.exit_code == 2
        assert "Invalid value for '--rest'" in result.output

    def test_exercise_list_and_delete(self, cli):
        cli("init")
        cli("exercise", "add", "Curl", "-m", "biceps")

        assert "Curl" in cli("exercise", "list").output
        assert cli("exercise", "delete", "Curl", "--yes").exit_code == 0
        assert "No exercises found" in cli("exercise", "list").output

    def test_history_empty(self, cli):
        cli("init")
        result = cli("history", "list")
        assert result.exit_code == 0
        assert "No completed sessions yet" in result.output


class TestSessionHistory:
    """Commands working on logged sessions."""

    @pytest.fixture
    def logged_session(self, cli, make_session, bench_press):
        cli("init")
        session = make_session({bench_press.id: [(13, 60.0)] * 3})
        asyncio.run(WorkoutRepository().save_workout_session(session))
        return session

    def test_delete_by_prefix(self, cli, logged_session):
        result = cli("history", "delete", logged_session.id[:8], "--yes")

        assert result.exit_code == 0, result.output
        assert "Deleted session: Upper Body of 2024-05-06 18:00" in result.output
        assert "No completed sessions yet" in cli("history", "list").output

    def test_delete_asks_for_confirmation(self, cli, logged_session):
        result = cli("history", "delete", logged_session.id, input="n\n")

        assert result.exit_code == 0
        assert "Delete the Upper Body of 2024-05-06 18:00 session?" in result.output
        assert logged_session.id[:8] in cli("history", "list").output

    def test_delete_unknown_session(self, cli, logged_session):
        result = cli("history", "delete", "nope", "--yes")

        assert result.exit_code == 1
        assert "Session nope not found" in result.output

    def test_exercise_progression(self, cli, logged_session):
        result = cli("stats", "exercises")

        assert result.exit_code == 0, result.output
        assert "Bench Press (+)" in result.output
        assert "60kg" in result.output
        assert "6 May 2024" in result.output

    def test_exercise_progression_filtered_by_type(self, cli, logged_session):
        result = cli("stats", "exercises", "--type", "LOWER")

        assert result.exit_code == 0
        assert "No completed sessions yet" in result.output
