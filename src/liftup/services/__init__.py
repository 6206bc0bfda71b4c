"""Session runtime and progression services."""

from .analysis import SessionAnalysis, SessionAnalysisEngine
from .progression import ProgressionEngine, ProgressionReason, ProgressionSuggestion
from .rest_timer import RestTimer
from .runtime import RuntimeState, SessionRuntime

__all__ = [
    "ProgressionEngine",
    "ProgressionReason",
    "ProgressionSuggestion",
    "RestTimer",
    "RuntimeState",
    "SessionAnalysis",
    "SessionAnalysisEngine",
    "SessionRuntime",
]
