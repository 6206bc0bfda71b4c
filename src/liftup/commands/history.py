"""Session history commands."""

from datetime import date

import click

from ..clients.console import echo_analysis
from ..db import WorkoutRepository
from ..models.session import WorkoutSession, format_weight
from ..services.analysis import SessionAnalysisEngine
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
    format_volume,
)


async def find_session(repo: WorkoutRepository, session_id: str) -> WorkoutSession | None:
    """Look a session up by id or by an unambiguous id prefix."""
    workout = await repo.get_workout_session(session_id)
    if workout is not None:
        return workout
    matches = [s for s in await repo.get_all_completed_sessions() if s.id.startswith(session_id)]
    return matches[0] if len(matches) == 1 else None


@click.group()
def history():
    """Browse completed sessions."""
    pass


@history.command("list")
@click.option("--month", "-m", is_flag=True, help="Only sessions of the current month")
@click.option("--limit", "-n", type=int, default=20, show_default=True)
@click.pass_context
@async_command
async def list_sessions(ctx: click.Context, month: bool, limit: int):
    """List completed sessions, newest first."""
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    if month:
        sessions = await repo.get_completed_sessions_for_month(date.today())
    else:
        sessions = await repo.get_all_completed_sessions()
    sessions = sessions[:limit]

    if not sessions:
        echo_info("No completed sessions yet.")
        return

    rows = [
        [
            s.started_at.strftime("%Y-%m-%d %H:%M"),
            s.session_type.display_name,
            str(s.week_number),
            s.duration_display(),
            str(s.total_sets),
            format_volume(s.total_volume),
            s.id[:8],
        ]
        for s in sessions
    ]
    click.echo(format_table(["Date", "Session", "Week", "Duration", "Sets", "Volume", "ID"], rows))


@history.command("show")
@click.argument("session_id")
@click.pass_context
@async_command
async def show(ctx: click.Context, session_id: str):
    """Show a session and how it compares to the one before it.

    SESSION_ID may be abbreviated to its first characters.
    """
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    workout = await find_session(repo, session_id)
    if workout is None:
        echo_error(f"Session {session_id} not found.")
        ctx.exit(1)

    click.echo()
    click.echo(
        click.style(
            f"{workout.session_type.display_name} - {workout.started_at:%Y-%m-%d %H:%M}",
            bold=True,
        )
    )
    click.echo(
        f"Week {workout.week_number} | {workout.duration_display()} | "
        f"{workout.total_sets} sets | {format_volume(workout.total_volume)}"
    )

    for exercise in workout.sorted_exercises:
        click.echo()
        status = " (skipped)" if exercise.is_skipped else ""
        click.echo(click.style(f"{exercise.name}{status}", bold=True))
        for s in exercise.sorted_sets:
            if s.is_completed:
                label = "warmup" if s.is_warmup else f"set {s.set_number}"
                click.echo(f"  {label}: {s.reps} x {format_weight(s.weight)}kg")

    previous = await repo.get_previous_session(workout.session_type, workout.started_at)
    echo_analysis(SessionAnalysisEngine().analyze(workout, previous))


@history.command("delete")
@click.argument("session_id")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx: click.Context, session_id: str, yes: bool):
    """Delete a logged session.

    SESSION_ID may be abbreviated to its first characters.
    """
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    workout = await find_session(repo, session_id)
    if workout is None:
        echo_error(f"Session {session_id} not found.")
        ctx.exit(1)

    label = f"{workout.session_type.display_name} of {workout.started_at:%Y-%m-%d %H:%M}"
    if not yes and not click.confirm(f"Delete the {label} session?"):
        return

    await repo.delete_workout_session(workout)
    echo_success(f"Deleted session: {label}")
