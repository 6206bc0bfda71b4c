"""Interactive terminal session logger."""

import click
import questionary
from questionary import Style

from ..models.live_status import (
    ALMOST_FINISHED_THRESHOLD,
    TimerActivity,
    TimerEventType,
    TimerSnapshot,
)
from ..models.session import ExerciseSet, format_weight
from ..services.analysis import SessionAnalysis
from ..services.runtime import RuntimeState, SessionRuntime

custom_style = Style(
    [
        ("qmark", "fg:#673ab7 bold"),
        ("question", "bold"),
        ("answer", "fg:#f44336 bold"),
        ("pointer", "fg:#673ab7 bold"),
        ("highlighted", "fg:#673ab7 bold"),
        ("selected", "fg:#cc5454"),
        ("instruction", ""),
        ("text", ""),
    ]
)

# Seconds added by the "more rest" action
EXTRA_REST_SECONDS = 30


class ConsoleLiveStatus:
    """Live-status channel that prints rest milestones to the terminal."""

    def publish(
        self,
        event: TimerEventType,
        snapshot: TimerSnapshot,
        activity: TimerActivity | None = None,
    ) -> None:
        if event == TimerEventType.STARTED and activity is not None:
            click.echo(
                click.style(f"\nRest {snapshot.display_time}", fg="cyan")
                + f" before set {activity.set_number}/{activity.total_sets}"
                f" of {activity.exercise_name}"
            )
        elif event == TimerEventType.TICK and snapshot.remaining_seconds == ALMOST_FINISHED_THRESHOLD:
            click.echo(click.style(f"\n{ALMOST_FINISHED_THRESHOLD} seconds of rest left", fg="yellow"))
        elif event == TimerEventType.FINISHED:
            click.echo(click.style("\nRest over, time for the next set!", fg="green", bold=True))


def validate_reps(text: str) -> bool | str:
    if text.strip().isdigit():
        return True
    return "Enter a whole number of reps"


def validate_weight(text: str) -> bool | str:
    try:
        value = float(text)
    except ValueError:
        return "Enter a weight in kg"
    return True if value >= 0 else "Weight cannot be negative"


def echo_analysis(analysis: SessionAnalysis) -> None:
    """Print a session analysis."""
    click.echo()
    click.echo(click.style(analysis.summary, bold=True))

    if analysis.volume_change or analysis.volume_change_percent:
        sign = "+" if analysis.volume_change >= 0 else ""
        click.echo(
            f"Volume: {sign}{analysis.volume_change:,.0f} kg "
            f"({sign}{analysis.volume_change_percent:.1f}%)"
        )

    for title, lines, color in (
        ("Personal records", analysis.prs, "magenta"),
        ("Improvements", analysis.improvements, "green"),
        ("Regressions", analysis.regressions, "red"),
    ):
        if lines:
            click.echo()
            click.echo(click.style(f"{title}:", fg=color, bold=True))
            for line in lines:
                click.echo(f"  - {line}")


class ConsoleSessionClient:
    """Walks the user through a session with questionary prompts.

    Prompts are awaited with ``ask_async`` so the rest timer keeps
    counting down while the user is choosing.
    """

    def __init__(self, runtime: SessionRuntime):
        self.runtime = runtime

    async def run(self) -> SessionAnalysis | None:
        """Run until the session is finished or cancelled."""
        runtime = self.runtime
        while runtime.state in (RuntimeState.ACTIVE, RuntimeState.REST_PENDING):
            if runtime.summary_requested:
                finish = await questionary.confirm(
                    "All exercises done. Finish the session?",
                    default=True,
                    style=custom_style,
                ).ask_async()
                if finish is None:
                    runtime.cancel_session()
                    break
                if finish:
                    break
                runtime.summary_requested = False

            self.echo_position()
            action = await self.ask_action()
            if action is None or action == "cancel":
                runtime.cancel_session()
                break
            if action == "finish":
                break
            await self.perform(action)

        if runtime.state == RuntimeState.CANCELLED:
            return None
        return runtime.complete_session()

    def echo_position(self) -> None:
        runtime = self.runtime
        exercise = runtime.current_exercise
        if exercise is None:
            return

        click.echo()
        click.echo(
            click.style(
                f"[{runtime.current_exercise_index + 1}/{runtime.exercise_count}] {exercise.name}",
                bold=True,
            )
        )
        if exercise.planned_exercise:
            planned = exercise.planned_exercise
            click.echo(
                f"Target: {len(exercise.working_sets)}x{planned.target_reps_display}, "
                f"rest {planned.rest_time_display}"
            )
        for s in exercise.sorted_sets:
            label = "W" if s.is_warmup else str(s.set_number)
            if s.is_completed:
                status = click.style(s.display_format, fg="green")
            elif s.is_skipped:
                status = click.style("skipped", fg="yellow")
            else:
                status = "-"
            click.echo(f"  {label}: {status}")

        previous = runtime.previous_sets_for(exercise)
        if previous:
            click.echo("Last time: " + " ".join(s.display_format for s in previous))
        suggestion = runtime.suggestion_for(exercise)
        if suggestion:
            click.echo(f"Suggested: {suggestion.display_text} ({suggestion.reason.explanation})")
        if runtime.timer.is_running:
            click.echo(click.style(f"Resting: {runtime.timer.display_time} left", fg="cyan"))

    async def ask_action(self) -> str | None:
        runtime = self.runtime
        choices = [
            questionary.Choice("Log next set", "log"),
            questionary.Choice("Skip next set", "skip_set"),
            questionary.Choice("Edit a logged set", "edit"),
        ]
        if runtime.timer.is_running:
            choices += [
                questionary.Choice(f"Rest {EXTRA_REST_SECONDS}s more", "more_rest"),
                questionary.Choice("End rest", "stop_rest"),
            ]
        choices.append(questionary.Choice("Next exercise", "next"))
        if runtime.can_go_previous:
            choices.append(questionary.Choice("Previous exercise", "previous"))
        choices += [
            questionary.Choice("Skip exercise", "skip_exercise"),
            questionary.Choice("Finish session", "finish"),
            questionary.Choice("Cancel session", "cancel"),
        ]
        return await questionary.select(
            "What next?", choices=choices, style=custom_style
        ).ask_async()

    async def perform(self, action: str) -> None:
        runtime = self.runtime
        exercise = runtime.current_exercise
        if exercise is None:
            return

        if action in ("log", "skip_set"):
            pending = [s for s in exercise.sorted_sets if s.is_pending]
            if not pending:
                click.echo("No sets left for this exercise.")
                return
            if action == "skip_set":
                runtime.skip_set(pending[0])
                return
            values = await self.ask_performance(pending[0])
            if values:
                runtime.record_set(pending[0], *values)
        elif action == "edit":
            logged = [s for s in exercise.sorted_sets if s.is_completed]
            if not logged:
                click.echo("No logged sets yet.")
                return
            target = await questionary.select(
                "Which set?",
                choices=[
                    questionary.Choice(f"Set {s.set_number}: {s.display_format}", s)
                    for s in logged
                ],
                style=custom_style,
            ).ask_async()
            if target is None:
                return
            values = await self.ask_performance(target)
            if values:
                runtime.update_set(target, *values)
        elif action == "more_rest":
            runtime.add_rest_time(EXTRA_REST_SECONDS)
        elif action == "stop_rest":
            runtime.stop_rest_timer()
        elif action == "next":
            runtime.next_exercise()
        elif action == "previous":
            runtime.previous_exercise()
        elif action == "skip_exercise":
            runtime.skip_current_exercise()

    async def ask_performance(self, exercise_set: ExerciseSet) -> tuple[int, float] | None:
        """Prompt for reps and weight, defaulting to the suggestion."""
        runtime = self.runtime
        exercise = runtime.current_exercise
        suggestion = runtime.suggestion_for(exercise) if exercise else None

        default_reps = exercise_set.reps or (suggestion.reps if suggestion else 10)
        default_weight = exercise_set.weight or (suggestion.weight if suggestion else 0.0)
        if exercise_set.is_warmup and not exercise_set.weight:
            default_weight = default_weight / 2

        reps = await questionary.text(
            "Reps:",
            default=str(default_reps),
            validate=validate_reps,
            style=custom_style,
        ).ask_async()
        if reps is None:
            return None
        weight = await questionary.text(
            "Weight (kg):",
            default=format_weight(default_weight),
            validate=validate_weight,
            style=custom_style,
        ).ask_async()
        if weight is None:
            return None
        return int(reps), float(weight)
