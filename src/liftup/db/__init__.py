"""Database layer for liftup."""

from .base import ExerciseRepositoryProtocol, WorkoutRepositoryProtocol
from .engine import get_data_dir, get_db_path, init_db
from .repositories import ExerciseRepository, WorkoutRepository

__all__ = [
    "ExerciseRepository",
    "ExerciseRepositoryProtocol",
    "get_data_dir",
    "get_db_path",
    "init_db",
    "WorkoutRepository",
    "WorkoutRepositoryProtocol",
]
