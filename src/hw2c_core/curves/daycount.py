# src/hw2c_core/curves/daycount.py

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime
from typing import Dict, Union

DateLike = Union[date, datetime]


def to_date(d: DateLike) -> date:
    """Strip the time component of a datetime; plain dates pass through."""
    return d.date() if isinstance(d, datetime) else d


@dataclass(frozen=True)
class DayCounter:
    """
    Base day count convention.

    Two day counters compare equal when they carry the same name, which is
    what the dual-curve model relies on when it checks that discount and
    forward curves measure time the same way.
    """

    name: str

    def day_count(self, start: DateLike, end: DateLike) -> int:
        return (to_date(end) - to_date(start)).days

    def year_fraction(self, start: DateLike, end: DateLike) -> float:
        raise NotImplementedError

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Actual360(DayCounter):
    name: str = "ACT/360"

    def year_fraction(self, start: DateLike, end: DateLike) -> float:
        return self.day_count(start, end) / 360.0


@dataclass(frozen=True)
class Actual365Fixed(DayCounter):
    name: str = "ACT/365F"

    def year_fraction(self, start: DateLike, end: DateLike) -> float:
        return self.day_count(start, end) / 365.0


@dataclass(frozen=True)
class Thirty360(DayCounter):
    """30/360 bond basis (US)."""

    name: str = "30/360"

    def day_count(self, start: DateLike, end: DateLike) -> int:
        d1 = to_date(start)
        d2 = to_date(end)
        dd1, dd2 = d1.day, d2.day
        if dd1 == 31:
            dd1 = 30
        if dd2 == 31 and dd1 >= 30:
            dd2 = 30
        return 360 * (d2.year - d1.year) + 30 * (d2.month - d1.month) + (dd2 - dd1)

    def year_fraction(self, start: DateLike, end: DateLike) -> float:
        return self.day_count(start, end) / 360.0


@dataclass(frozen=True)
class ActualActualISDA(DayCounter):
    name: str = "ACT/ACT"

    def year_fraction(self, start: DateLike, end: DateLike) -> float:
        d1 = to_date(start)
        d2 = to_date(end)
        if d1 == d2:
            return 0.0
        if d1 > d2:
            return -self.year_fraction(d2, d1)

        def days_in_year(y: int) -> float:
            return 366.0 if calendar.isleap(y) else 365.0

        if d1.year == d2.year:
            return (d2 - d1).days / days_in_year(d1.year)

        first = (date(d1.year + 1, 1, 1) - d1).days / days_in_year(d1.year)
        last = (d2 - date(d2.year, 1, 1)).days / days_in_year(d2.year)
        return first + (d2.year - d1.year - 1) + last


ACT_360 = Actual360()
ACT_365F = Actual365Fixed()
THIRTY_360 = Thirty360()
ACT_ACT = ActualActualISDA()

DAY_COUNTERS: Dict[str, DayCounter] = {
    "ACT/360": ACT_360,
    "ACTUAL/360": ACT_360,
    "ACT/365F": ACT_365F,
    "ACT/365": ACT_365F,
    "ACTUAL/365F": ACT_365F,
    "30/360": THIRTY_360,
    "30U/360": THIRTY_360,
    "30/360 BOND BASIS": THIRTY_360,
    "ACT/ACT": ACT_ACT,
    "ACTUAL/ACTUAL": ACT_ACT,
    "ACT/ACT ISDA": ACT_ACT,
}


def get_day_counter(name: str) -> DayCounter:
    """Look up a day counter by its usual market name (case-insensitive)."""
    key = name.strip().upper()
    if key not in DAY_COUNTERS:
        raise ValueError(
            f"Unknown day counter: {name}. Available: {sorted(DAY_COUNTERS)}"
        )
    return DAY_COUNTERS[key]
