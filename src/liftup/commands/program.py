"""Weekly program commands."""

from datetime import date, datetime, timedelta

import click

from ..db import ExerciseRepository, WorkoutRepository
from ..errors import DomainStateError, ValidationError
from ..models.exercises import PlannedExercise
from ..models.program import SessionTemplate, SessionType, WeekProgram, monday_of
from ..services.rest_timer import PRESET_REST_TIMES
from .base import (
    async_command,
    echo_info,
    echo_success,
    echo_warning,
    ensure_initialized,
    format_table,
)

SESSION_TYPE_CHOICES = [t.value for t in SessionType]
REST_CHOICES = [str(seconds) for _, seconds in PRESET_REST_TIMES]


def parse_start_date(raw: str | None) -> date:
    """Parse an ISO date and snap it to its Monday (default: this week)."""
    if raw is None:
        return monday_of(date.today())
    try:
        return monday_of(datetime.strptime(raw, "%Y-%m-%d").date())
    except ValueError:
        raise ValidationError(f"Invalid date '{raw}', expected YYYY-MM-DD") from None


async def resolve_program(repo: WorkoutRepository, week: int | None) -> WeekProgram:
    """Load a program by week number, or this week's program."""
    if week is not None:
        program = await repo.get_week_program(week)
        if program is None:
            raise DomainStateError(f"No program for week {week}")
        return program

    program = await repo.get_current_week_program()
    if program is None:
        raise DomainStateError(
            "No program for the current week. Run 'liftup program create' first."
        )
    return program


async def next_week_number(repo: WorkoutRepository) -> int:
    programs = await repo.get_all_week_programs()
    return programs[0].week_number + 1 if programs else 1


@click.group()
def program():
    """Plan weekly programs."""
    pass


@program.command("create")
@click.option("--week", "-w", type=int, help="Week number (default: next free week)")
@click.option("--start", "-s", "start", help="Any date in the week, YYYY-MM-DD (default: today)")
@click.option("--notes", "-n", help="Notes for the week")
@click.pass_context
@async_command
async def create(ctx: click.Context, week: int | None, start: str | None, notes: str | None):
    """Create an empty week program."""
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    week_number = week if week is not None else await next_week_number(repo)
    if await repo.get_week_program(week_number):
        raise ValidationError(f"Week {week_number} already exists")

    new_program = WeekProgram(
        week_number=week_number,
        start_date=parse_start_date(start),
        notes=notes,
    )
    await repo.save_week_program(new_program)
    echo_success(
        f"Created week {week_number} starting {new_program.start_date.isoformat()}"
    )


@program.command("add-session")
@click.argument("session_type", type=click.Choice(SESSION_TYPE_CHOICES, case_sensitive=False))
@click.option("--day", "-d", type=click.IntRange(0, 6), help="Weekday, 0 = Monday")
@click.option("--week", "-w", type=int, help="Week number (default: current week)")
@click.pass_context
@async_command
async def add_session(ctx: click.Context, session_type: str, day: int | None, week: int | None):
    """Add a session to a week program."""
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    week_program = await resolve_program(repo, week)
    parsed = SessionType.parse(session_type)

    if week_program.session_for_type(parsed):
        raise ValidationError(
            f"Week {week_program.week_number} already has a {parsed.display_name} session"
        )

    template = SessionTemplate(session_type=parsed, day_index=day)
    if week_program.session_for_day(template.day_index):
        echo_warning(f"{WeekProgram.day_name(template.day_index)} already has a session")

    week_program.sessions.append(template)
    await repo.save_week_program(week_program)
    echo_success(
        f"Added {parsed.display_name} on {WeekProgram.day_name(template.day_index)} "
        f"to week {week_program.week_number}"
    )


@program.command("add-exercise")
@click.argument("session_type", type=click.Choice(SESSION_TYPE_CHOICES, case_sensitive=False))
@click.argument("exercise_name")
@click.option("--warmups", type=click.IntRange(min=0), default=1, show_default=True)
@click.option("--min-reps", type=click.IntRange(min=0), default=8, show_default=True)
@click.option("--max-reps", type=click.IntRange(min=0), default=12, show_default=True)
@click.option("--rest", type=click.Choice(REST_CHOICES), default="120", show_default=True,
              help="Rest between sets in seconds")
@click.option("--week", "-w", type=int, help="Week number (default: current week)")
@click.pass_context
@async_command
async def add_exercise(
    ctx: click.Context,
    session_type: str,
    exercise_name: str,
    warmups: int,
    min_reps: int,
    max_reps: int,
    rest: str,
    week: int | None,
):
    """Schedule a catalog exercise in a session."""
    ensure_initialized(ctx)

    catalog_exercise = await ExerciseRepository().get_by_name(exercise_name)
    if catalog_exercise is None:
        raise DomainStateError(f"Exercise '{exercise_name}' not found in the catalog")

    repo = WorkoutRepository()
    week_program = await resolve_program(repo, week)
    template = week_program.require_session(SessionType.parse(session_type))

    planned = template.add_exercise(
        PlannedExercise(
            exercise=catalog_exercise,
            warmup_sets=warmups,
            target_reps_min=min_reps,
            target_reps_max=max_reps,
            rest_seconds=int(rest),
        )
    )
    await repo.save_week_program(week_program)
    echo_success(
        f"Added {planned.exercise_name} ({planned.target_reps_display} reps, "
        f"rest {planned.rest_time_display}) to {template.session_type.display_name}"
    )


@program.command("show")
@click.argument("week", type=int, required=False)
@click.pass_context
@async_command
async def show(ctx: click.Context, week: int | None):
    """Show a week program (default: current week)."""
    ensure_initialized(ctx)

    week_program = await resolve_program(WorkoutRepository(), week)
    click.echo()
    click.echo(week_program.get_summary())
    if week_program.notes:
        click.echo(f"Notes: {week_program.notes}")


@program.command("list")
@click.pass_context
@async_command
async def list_programs(ctx: click.Context):
    """List all week programs."""
    ensure_initialized(ctx)

    programs = await WorkoutRepository().get_all_week_programs()
    if not programs:
        echo_info("No programs yet. Create one with 'liftup program create'.")
        return

    rows = [
        [
            str(p.week_number),
            p.start_date.isoformat(),
            ", ".join(s.session_type.value for s in p.sorted_sessions) or "-",
            "yes" if p.is_active else "no",
        ]
        for p in programs
    ]
    click.echo(format_table(["Week", "Start", "Sessions", "Active"], rows))


@program.command("duplicate")
@click.argument("week", type=int)
@click.option("--to-week", type=int, help="Target week number (default: next free week)")
@click.option("--start", "-s", "start", help="Any date in the target week, YYYY-MM-DD")
@click.pass_context
@async_command
async def duplicate(ctx: click.Context, week: int, to_week: int | None, start: str | None):
    """Copy a week program into a new week."""
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    source = await resolve_program(repo, week)
    target_week = to_week if to_week is not None else await next_week_number(repo)
    if await repo.get_week_program(target_week):
        raise ValidationError(f"Week {target_week} already exists")

    start_date = (
        parse_start_date(start) if start else source.start_date + timedelta(days=7)
    )
    copy = source.duplicate(target_week, start_date)
    await repo.save_week_program(copy)
    echo_success(f"Copied week {source.week_number} to week {target_week} ({start_date})")


@program.command("next-week")
@click.pass_context
@async_command
async def next_week(ctx: click.Context):
    """Start this week from a copy of the latest program."""
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    programs = await repo.get_all_week_programs()
    if not programs:
        raise DomainStateError("No program to copy. Run 'liftup program create' first.")

    latest = programs[0]
    monday = monday_of(date.today())
    if latest.start_date >= monday:
        echo_info(f"Week {latest.week_number} already covers this week.")
        return

    copy = latest.duplicate(latest.week_number + 1, monday)
    await repo.save_week_program(copy)
    echo_success(f"Week {copy.week_number} created from week {latest.week_number}")
