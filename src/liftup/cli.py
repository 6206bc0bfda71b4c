"""CLI entry point for liftup."""

import logging

import click

from . import __version__
from .commands import exercise, history, init, program, session, stats


@click.group()
@click.version_option(version=__version__, prog_name="liftup")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """liftup: weekly strength training planner and session logger.

    Plan a week of sessions, log every set live with rest timing and
    progression suggestions, and compare each session with the last one.

    Example usage:

        # Initialize the project
        liftup init

        # Plan the week
        liftup program create
        liftup program add-session UPPER

        # Train
        liftup session start UPPER

        # Review
        liftup history list
        liftup stats
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Register commands
main.add_command(init)
main.add_command(exercise)
main.add_command(program)
main.add_command(session)
main.add_command(history)
main.add_command(stats)


def run():
    """Run the CLI (handles async event loop)."""
    main()


if __name__ == "__main__":
    run()
