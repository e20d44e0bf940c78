# src/hw2c_core/model/index.py

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Dict, Optional

from hw2c_core.curves.dates import (
    BusinessDayConvention,
    add_months,
    adjust,
    advance_business_days,
    is_business_day,
    tenor_to_months,
)
from hw2c_core.curves.daycount import ACT_360, DayCounter
from hw2c_core.curves.types import YieldTermStructure


@dataclass
class IborIndex:
    """
    Minimal IBOR-style index (Euribor flavour).

    Conventions:
    - fixing_days: business days between fixing date and value date
    - tenor_months: length of the deposit the index represents
    - fixings: past fixings keyed by fixing date (decimal rates)
    - forward_curve: optional projection curve, used to forecast rates
    """

    name: str
    tenor_months: int
    fixing_days: int = 2
    day_counter: DayCounter = ACT_360
    convention: BusinessDayConvention = BusinessDayConvention.MODIFIED_FOLLOWING
    forward_curve: Optional[YieldTermStructure] = None
    fixings: Dict[date, float] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # dates
    # ------------------------------------------------------------------

    def is_valid_fixing_date(self, d: date) -> bool:
        return is_business_day(d)

    def fixing_date(self, value_date: date) -> date:
        return advance_business_days(value_date, -self.fixing_days)

    def value_date(self, fixing_date: date) -> date:
        return advance_business_days(fixing_date, self.fixing_days)

    def maturity_date(self, value_date: date) -> date:
        return adjust(add_months(value_date, self.tenor_months), self.convention)

    # ------------------------------------------------------------------
    # fixings
    # ------------------------------------------------------------------

    def add_fixing(self, fixing_date: date, rate: float) -> None:
        if not self.is_valid_fixing_date(fixing_date):
            raise ValueError(f"{self.name}: {fixing_date} is not a valid fixing date")
        self.fixings[fixing_date] = float(rate)

    def past_fixing(self, fixing_date: date) -> Optional[float]:
        return self.fixings.get(fixing_date)

    def forecast_fixing(self, value_date: date, end_date: date, spanning_time: float) -> float:
        """Simple forward rate (P(v)/P(e) - 1) / tau on the projection curve."""
        if self.forward_curve is None:
            raise ValueError(f"{self.name}: no forward curve to forecast fixings")
        p_start = self.forward_curve.discount(value_date)
        p_end = self.forward_curve.discount(end_date)
        return (p_start / p_end - 1.0) / spanning_time

    def clone(self, forward_curve: Optional[YieldTermStructure]) -> "IborIndex":
        """Same index on another projection curve; fixings are shared."""
        return replace(self, forward_curve=forward_curve)


def euribor(tenor: str, forward_curve: Optional[YieldTermStructure] = None) -> IborIndex:
    """Euribor index for a tenor string such as '3M', '6M' or '1Y'."""
    months = tenor_to_months(tenor)
    label = f"{months // 12}Y" if months % 12 == 0 else f"{months}M"
    return IborIndex(
        name=f"Euribor{label}",
        tenor_months=months,
        forward_curve=forward_curve,
    )
