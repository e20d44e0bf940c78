# src/hw2c_core/curves/dates.py

from __future__ import annotations

from datetime import date, timedelta
from enum import Enum


class BusinessDayConvention(Enum):
    UNADJUSTED = "UNADJUSTED"
    FOLLOWING = "FOLLOWING"
    MODIFIED_FOLLOWING = "MODIFIED_FOLLOWING"
    PRECEDING = "PRECEDING"


def is_business_day(d: date) -> bool:
    """Weekends-only calendar: Saturday and Sunday are holidays."""
    return d.weekday() < 5


def add_months(d: date, months: int) -> date:
    """
    Add a number of months to a date, clamping to last valid day of month.
    """
    new_month = d.month - 1 + months
    new_year = d.year + new_month // 12
    new_month = new_month % 12 + 1

    day = d.day
    while True:
        try:
            return date(new_year, new_month, day)
        except ValueError:
            day -= 1


def adjust(
    d: date,
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
) -> date:
    """Roll a date onto a business day according to `convention`."""
    if convention is BusinessDayConvention.UNADJUSTED or is_business_day(d):
        return d

    if convention is BusinessDayConvention.PRECEDING:
        out = d
        while not is_business_day(out):
            out -= timedelta(days=1)
        return out

    out = d
    while not is_business_day(out):
        out += timedelta(days=1)

    if convention is BusinessDayConvention.MODIFIED_FOLLOWING and out.month != d.month:
        return adjust(d, BusinessDayConvention.PRECEDING)
    return out


def advance_business_days(d: date, n: int) -> date:
    """Move `n` business days forward (or backward for negative `n`)."""
    step = timedelta(days=1 if n >= 0 else -1)
    out = d
    remaining = abs(n)
    while remaining > 0:
        out += step
        if is_business_day(out):
            remaining -= 1
    return out


def tenor_to_months(tenor: str) -> int:
    """Convert a tenor string such as '3M' or '10Y' to months."""
    t = tenor.upper().strip()
    if t.endswith("M"):
        return int(t[:-1])
    if t.endswith("Y"):
        return int(t[:-1]) * 12
    raise ValueError(f"Unsupported tenor: {tenor}")
