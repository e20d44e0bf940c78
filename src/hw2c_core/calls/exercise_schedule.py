# src/hw2c_core/calls/exercise_schedule.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Iterable, List


class ExerciseType(Enum):
    EUROPEAN = "EUROPEAN"
    BERMUDAN = "BERMUDAN"


@dataclass
class Exercise:
    """
    Exercise rights of an option: one date (European) or several (Bermudan).

    American exercise is not supported on the dual-curve tree.
    """

    dates: List[date]
    exercise_type: ExerciseType

    def __post_init__(self) -> None:
        if not self.dates:
            raise ValueError("Exercise requires at least one date")
        self.dates = sorted(self.dates)
        if self.exercise_type is ExerciseType.EUROPEAN and len(self.dates) != 1:
            raise ValueError(
                f"European exercise takes exactly one date, got {len(self.dates)}"
            )

    @property
    def last_date(self) -> date:
        return self.dates[-1]


def european_exercise(exercise_date: date) -> Exercise:
    return Exercise([exercise_date], ExerciseType.EUROPEAN)


def bermudan_exercise(dates: Iterable[date]) -> Exercise:
    return Exercise(sorted(set(dates)), ExerciseType.BERMUDAN)


def bermudan_exercise_from_fixed_leg(swap) -> Exercise:
    """
    Bermudan exercise on every accrual start date of the swap's fixed leg.

    Dates before the valuation date are kept; the pricing engines ignore
    exercise times that are already in the past.
    """
    return bermudan_exercise(c.accrual_start for c in swap.fixed_leg())

