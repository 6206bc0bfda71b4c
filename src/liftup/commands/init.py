"""Initialize project command."""

import click

from ..db import get_data_dir, get_db_path, init_db
from .base import async_command, echo_info, echo_success


@click.command()
@async_command
async def init():
    """Initialize the liftup data directory and database.

    Safe to run again: existing tables and data are kept.
    """
    data_dir = get_data_dir()
    db_path = get_db_path(data_dir)

    echo_info(f"Initializing liftup in {data_dir}")

    await init_db(db_path)
    echo_success("Database initialized")

    click.echo()
    click.echo("liftup is ready to use!")
    click.echo()
    click.echo("Next steps:")
    click.echo("  1. Add exercises to your catalog:")
    click.echo('     liftup exercise add "Bench Press" -m chest -m triceps')
    click.echo()
    click.echo("  2. Plan this week:")
    click.echo("     liftup program create")
    click.echo("     liftup program add-session UPPER")
    click.echo('     liftup program add-exercise UPPER "Bench Press"')
    click.echo()
    click.echo("  3. Train:")
    click.echo("     liftup session start UPPER")
