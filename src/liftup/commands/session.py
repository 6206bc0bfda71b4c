"""Live workout session command."""

import click
import questionary

from ..clients.console import ConsoleLiveStatus, ConsoleSessionClient, custom_style, echo_analysis
from ..db import WorkoutRepository
from ..errors import DomainStateError
from ..models.program import SessionType
from ..services.runtime import SessionRuntime
from .base import async_command, echo_info, echo_success, echo_warning, ensure_initialized
from .program import SESSION_TYPE_CHOICES, resolve_program


@click.group()
def session():
    """Log workout sessions."""
    pass


@session.command("start")
@click.argument("session_type", type=click.Choice(SESSION_TYPE_CHOICES, case_sensitive=False))
@click.option("--week", "-w", type=int, help="Week number (default: current week)")
@click.pass_context
@async_command
async def start(ctx: click.Context, session_type: str, week: int | None):
    """Start (or resume) a session of this week's program."""
    ensure_initialized(ctx)

    repo = WorkoutRepository()
    week_program = await resolve_program(repo, week)
    parsed = SessionType.parse(session_type)
    template = week_program.require_session(parsed)
    if not template.exercises:
        raise DomainStateError(
            f"{parsed.display_name} has no exercises. Add some with 'liftup program add-exercise'."
        )

    runtime = SessionRuntime(repo, live_status=ConsoleLiveStatus())

    unfinished = [
        s
        for s in await repo.get_workout_sessions_for_week(week_program.week_number)
        if s.session_type == parsed and not s.is_completed
    ]
    resumed = False
    if unfinished:
        latest = unfinished[-1]
        resume = await questionary.confirm(
            f"Resume the unfinished session from {latest.started_at:%a %H:%M}?",
            default=True,
            style=custom_style,
        ).ask_async()
        if resume:
            runtime.resume(latest)
            resumed = True

    if not resumed:
        runtime.start(template, week_program.week_number)

    previous = await runtime.load_previous_session()
    click.echo()
    click.echo(click.style(f"{parsed.display_name} - Week {week_program.week_number}", bold=True))
    if previous is None:
        echo_info("No previous session of this type, today sets the baseline.")
    else:
        echo_info(f"Comparing with {previous.started_at:%Y-%m-%d}")

    analysis = await ConsoleSessionClient(runtime).run()
    await runtime.flush()

    if analysis is None:
        echo_warning("Session cancelled.")
        keep = await questionary.confirm(
            "Keep the logged sets to resume later?", default=True, style=custom_style
        ).ask_async()
        if not keep and runtime.session is not None:
            await repo.delete_workout_session(runtime.session)
            echo_info("Session discarded.")
    else:
        completed = runtime.session
        echo_success(
            f"Session complete: {completed.total_sets} sets, "
            f"{completed.total_volume:,.0f} kg in {completed.duration_display()}"
        )
        echo_analysis(analysis)

    if runtime.last_error is not None:
        echo_warning(f"Some changes may not have been saved: {runtime.last_error}")
