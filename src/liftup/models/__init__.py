"""Data models for liftup."""

from .exercises import Exercise, MuscleGroup, PlannedExercise
from .live_status import CompanionSnapshot, TimerActivity, TimerEventType, TimerSnapshot
from .program import SessionTemplate, SessionType, WeekProgram
from .progress import ExerciseProgression, PerformanceData, ProgramStats
from .session import ExerciseSet, SessionExercise, WorkoutSession

__all__ = [
    "CompanionSnapshot",
    "Exercise",
    "ExerciseProgression",
    "ExerciseSet",
    "MuscleGroup",
    "PerformanceData",
    "PlannedExercise",
    "ProgramStats",
    "SessionExercise",
    "SessionTemplate",
    "SessionType",
    "TimerActivity",
    "TimerEventType",
    "TimerSnapshot",
    "WeekProgram",
    "WorkoutSession",
]
