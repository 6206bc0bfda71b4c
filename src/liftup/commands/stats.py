"""Statistics commands."""

from datetime import datetime

import click

from ..db import WorkoutRepository
from ..models.program import SessionType
from ..models.progress import CHANGE_WINDOWS, ExerciseProgression, ProgramStats
from ..models.session import format_weight
from .base import async_command, echo_info, ensure_initialized, format_table, format_volume
from .program import SESSION_TYPE_CHOICES, resolve_program


@click.group(invoke_without_command=True)
@click.option("--week", "-w", type=int, help="Week number (default: current week)")
@click.pass_context
@async_command
async def stats(ctx: click.Context, week: int | None):
    """Show completion and volume for a week."""
    if ctx.invoked_subcommand is not None:
        return
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    week_program = await resolve_program(repo, week)
    sessions = await repo.get_workout_sessions_for_week(week_program.week_number)
    program_stats = ProgramStats(
        week_program=week_program,
        completed_sessions=[s for s in sessions if s.is_completed],
    )

    click.echo()
    click.echo(click.style(program_stats.get_position_display(), bold=True))
    click.echo("=" * 50)
    click.echo(f"Progress: {program_stats.get_progress_percentage():.1f}%")
    click.echo(f"Planned exercises: {program_stats.total_exercises}")
    click.echo(f"Sets this week: {program_stats.total_sets_this_week}")
    click.echo(f"Volume this week: {format_volume(program_stats.total_volume_this_week)}")

    click.echo()
    completed_types = {s.session_type for s in program_stats.completed_sessions}
    for template in week_program.sorted_sessions:
        done = template.session_type in completed_types
        icon = click.style(" [done]", fg="green") if done else ""
        click.echo(
            f"  {week_program.short_day_name(template.day_index)} "
            f"{template.session_type.display_name}{icon}"
        )


def format_change(change: float | None) -> str:
    if change is None:
        return "-"
    sign = "+" if change > 0 else ""
    return f"{sign}{change:.1f}kg"


@stats.command("exercises")
@click.option("--type", "-t", "session_type", type=click.Choice(SESSION_TYPE_CHOICES, case_sensitive=False),
              help="Only sessions of this type")
@click.pass_context
@async_command
async def exercises(ctx: click.Context, session_type: str | None):
    """Show weight progression per exercise across completed sessions."""
    ensure_initialized(ctx)

    sessions = await WorkoutRepository().get_all_completed_sessions()
    progressions = ExerciseProgression.from_sessions(
        sessions, SessionType.parse(session_type) if session_type else None
    )
    if not progressions:
        echo_info("No completed sessions yet.")
        return

    now = datetime.now()
    rows = []
    for progression in progressions:
        name = progression.exercise_name
        if progression.is_ready_to_increase:
            name += " (+)"
        rows.append(
            [
                name,
                f"{format_weight(progression.last_weight)}kg",
                str(progression.last_reps),
                progression.last_performance.date_display,
            ]
            + [format_change(progression.weight_change(months, now)) for months in CHANGE_WINDOWS]
        )

    headers = ["Exercise", "Weight", "Reps", "Last"] + [f"{m}M" for m in CHANGE_WINDOWS]
    click.echo(format_table(headers, rows))
    click.echo()
    echo_info("(+) reps above the target range: time to add weight.")
