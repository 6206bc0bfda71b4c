"""Exercise catalog commands."""

import click

from ..db import ExerciseRepository
from ..models.exercises import Exercise, MuscleGroup
from .base import (
    async_command,
    echo_error,
    echo_info,
    echo_success,
    ensure_initialized,
    format_table,
)

MUSCLE_GROUP_CHOICES = [mg.value for mg in MuscleGroup]


@click.group()
def exercise():
    """Manage the exercise catalog."""
    pass


@exercise.command("add")
@click.argument("name")
@click.option(
    "--muscle",
    "-m",
    "muscles",
    multiple=True,
    type=click.Choice(MUSCLE_GROUP_CHOICES, case_sensitive=False),
    help="Targeted muscle group (repeatable)",
)
@click.option("--equipment", "-e", default=None, help="Equipment used")
@click.option("--description", "-d", default="", help="Short description")
@click.pass_context
@async_command
async def add(ctx: click.Context, name: str, muscles: tuple[str, ...], equipment, description):
    """Add an exercise to the catalog."""
    ensure_initialized(ctx)

    repo = ExerciseRepository()
    if await repo.get_by_name(name):
        echo_error(f"Exercise '{name}' already exists.")
        ctx.exit(1)

    new_exercise = Exercise(
        name=name,
        muscle_groups={MuscleGroup(m.lower()) for m in muscles},
        equipment=equipment,
        description=description,
    )
    await repo.save(new_exercise)
    echo_success(f"Added exercise: {name}")


@exercise.command("list")
@click.option("--muscle", "-m", type=click.Choice(MUSCLE_GROUP_CHOICES, case_sensitive=False))
@click.option("--search", "-s", "query", help="Filter by name")
@click.pass_context
@async_command
async def list_exercises(ctx: click.Context, muscle: str | None, query: str | None):
    """List catalog exercises."""
    ensure_initialized(ctx)

    repo = ExerciseRepository()
    if muscle:
        exercises = await repo.get_by_muscle_group(MuscleGroup(muscle.lower()))
    elif query:
        exercises = await repo.search(query)
    else:
        exercises = await repo.list_all()

    if not exercises:
        echo_info("No exercises found. Add one with 'liftup exercise add'.")
        return

    rows = [
        [
            ex.name,
            ", ".join(sorted(mg.value for mg in ex.muscle_groups)) or "-",
            ex.equipment or "-",
            "yes" if ex.is_built_in else "",
        ]
        for ex in exercises
    ]
    click.echo(format_table(["Name", "Muscles", "Equipment", "Built-in"], rows))


@exercise.command("delete")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation")
@click.pass_context
@async_command
async def delete(ctx: click.Context, name: str, yes: bool):
    """Delete a user-created exercise."""
    ensure_initialized(ctx)

    repo = ExerciseRepository()
    target = await repo.get_by_name(name)
    if not target:
        echo_error(f"Exercise '{name}' not found.")
        ctx.exit(1)

    if not yes and not click.confirm(f"Delete '{target.name}'?"):
        return

    await repo.delete(target)
    echo_success(f"Deleted exercise: {target.name}")
