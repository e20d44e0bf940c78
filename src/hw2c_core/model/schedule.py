# src/hw2c_core/model/schedule.py

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import List

from hw2c_core.curves.dates import BusinessDayConvention, add_months, adjust


@dataclass
class Schedule:
    """
    Adjusted accrual dates of one swap leg.

    dates[0] is the (adjusted) effective date, dates[-1] the (adjusted)
    termination date; period k accrues from dates[k] to dates[k + 1].
    """

    dates: List[date]
    tenor_months: int
    convention: BusinessDayConvention

    def __len__(self) -> int:
        return len(self.dates)

    @property
    def start_dates(self) -> List[date]:
        return self.dates[:-1]

    @property
    def end_dates(self) -> List[date]:
        return self.dates[1:]


def make_schedule(
    effective_date: date,
    termination_date: date,
    tenor_months: int,
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING,
) -> Schedule:
    """
    Generate a schedule backwards from the termination date.

    Unadjusted dates are termination - k * tenor; a short front stub is
    left when the tenor does not divide the period. Every date (effective
    and termination included) is then rolled with `convention`.
    """
    if termination_date <= effective_date:
        raise ValueError(
            f"termination date {termination_date} must be after effective date {effective_date}"
        )
    if tenor_months <= 0:
        raise ValueError(f"tenor_months must be positive, got {tenor_months}")

    unadjusted: List[date] = [termination_date]
    k = 1
    while True:
        d = add_months(termination_date, -k * tenor_months)
        if d <= effective_date:
            break
        unadjusted.append(d)
        k += 1
    unadjusted.append(effective_date)
    unadjusted.reverse()

    adjusted: List[date] = []
    for d in unadjusted:
        a = adjust(d, convention)
        if not adjusted or a > adjusted[-1]:
            adjusted.append(a)

    return Schedule(dates=adjusted, tenor_months=tenor_months, convention=convention)
