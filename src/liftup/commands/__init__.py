"""CLI commands for liftup."""

from .exercise import exercise
from .history import history
from .init import init
from .program import program
from .session import session
from .stats import stats

__all__ = [
    "exercise",
    "history",
    "init",
    "program",
    "session",
    "stats",
]
