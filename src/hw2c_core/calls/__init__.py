"""
Exercise-schedule utilities for hw2c_core.
"""

from .exercise_schedule import (
    Exercise,
    ExerciseType,
    bermudan_exercise,
    bermudan_exercise_from_fixed_leg,
    european_exercise,
)

__all__ = [
    "Exercise",
    "ExerciseType",
    "bermudan_exercise",
    "bermudan_exercise_from_fixed_leg",
    "european_exercise",
]
