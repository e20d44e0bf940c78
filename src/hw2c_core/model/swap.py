# src/hw2c_core/model/swap.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, List, Optional

import pandas as pd

from hw2c_core.curves.dates import (
    BusinessDayConvention,
    add_months,
    adjust,
    advance_business_days,
    tenor_to_months,
)
from hw2c_core.curves.daycount import ACT_360, THIRTY_360, DayCounter
from .index import IborIndex
from .schedule import Schedule, make_schedule


class SwapType(Enum):
    PAYER = 1       # pay fixed, receive floating
    RECEIVER = -1   # receive fixed, pay floating

    @property
    def sign(self) -> int:
        return self.value


# ----------------------------------------------------------------------
# Coupons
# ----------------------------------------------------------------------


@dataclass
class FixedRateCoupon:
    accrual_start: date
    accrual_end: date
    payment_date: date
    nominal: float
    rate: float
    day_counter: DayCounter

    @property
    def accrual_time(self) -> float:
        return self.day_counter.year_fraction(self.accrual_start, self.accrual_end)

    @property
    def amount(self) -> float:
        return self.nominal * self.rate * self.accrual_time


@dataclass
class IborCoupon:
    """
    Floating coupon on an IBOR index.

    At-par coupons fix on the accrual period itself (fixing end = value
    date of the next period's fixing); indexed coupons fix on the index's
    own deposit period starting at the fixing value date.
    """

    accrual_start: date
    accrual_end: date
    payment_date: date
    nominal: float
    index: IborIndex
    spread: float
    day_counter: DayCounter
    at_par: bool = True

    @property
    def accrual_time(self) -> float:
        return self.day_counter.year_fraction(self.accrual_start, self.accrual_end)

    @property
    def fixing_date(self) -> date:
        return self.index.fixing_date(self.accrual_start)

    @property
    def fixing_value_date(self) -> date:
        return self.index.value_date(self.fixing_date)

    @property
    def fixing_end_date(self) -> date:
        if self.at_par:
            next_fixing = self.index.fixing_date(self.accrual_end)
            end = self.index.value_date(next_fixing)
            return max(end, self.fixing_value_date)
        return self.index.maturity_date(self.fixing_value_date)

    @property
    def spanning_time(self) -> float:
        return self.index.day_counter.year_fraction(self.fixing_value_date, self.fixing_end_date)

    def known_amount(self) -> Optional[float]:
        """Amount from a stored fixing, or None when the index has none."""
        fixing = self.index.past_fixing(self.fixing_date)
        if fixing is None:
            return None
        return self.nominal * self.accrual_time * (fixing + self.spread)

    def forecast_rate(self) -> float:
        """Index rate projected on the index's forward curve."""
        return self.index.forecast_fixing(
            self.fixing_value_date, self.fixing_end_date, self.spanning_time
        )


# ----------------------------------------------------------------------
# Pricing-engine arguments
# ----------------------------------------------------------------------


@dataclass
class SwapArguments:
    """
    Flat, date-based view of a vanilla swap handed to pricing engines.

    Reset dates are accrual start dates. `floating_coupons` holds the
    known amount of every floating coupon (None when not fixed yet).
    """

    swap_type: SwapType
    nominal: float

    fixed_reset_dates: List[date] = field(default_factory=list)
    fixed_pay_dates: List[date] = field(default_factory=list)
    fixed_accrual_times: List[float] = field(default_factory=list)
    fixed_coupons: List[float] = field(default_factory=list)
    fixed_rate: float = 0.0

    floating_reset_dates: List[date] = field(default_factory=list)
    floating_fixing_dates: List[date] = field(default_factory=list)
    floating_pay_dates: List[date] = field(default_factory=list)
    floating_accrual_times: List[float] = field(default_factory=list)
    floating_spreads: List[float] = field(default_factory=list)
    floating_coupons: List[Optional[float]] = field(default_factory=list)

    fixing_value_dates: List[date] = field(default_factory=list)
    fixing_end_dates: List[date] = field(default_factory=list)
    fixing_spanning_times: List[float] = field(default_factory=list)
    index_day_counter: DayCounter = ACT_360

    def validate(self) -> None:
        n_fixed = len(self.fixed_pay_dates)
        for name in ("fixed_reset_dates", "fixed_accrual_times", "fixed_coupons"):
            if len(getattr(self, name)) != n_fixed:
                raise ValueError(f"{name} has {len(getattr(self, name))} entries, expected {n_fixed}")

        n_float = len(self.floating_pay_dates)
        for name in (
            "floating_reset_dates",
            "floating_fixing_dates",
            "floating_accrual_times",
            "floating_spreads",
            "floating_coupons",
            "fixing_value_dates",
            "fixing_end_dates",
            "fixing_spanning_times",
        ):
            if len(getattr(self, name)) != n_float:
                raise ValueError(f"{name} has {len(getattr(self, name))} entries, expected {n_float}")


# ----------------------------------------------------------------------
# Instrument
# ----------------------------------------------------------------------


@dataclass
class VanillaSwap:
    """
    Fixed-vs-IBOR swap.

    The pricing engine is attached with `set_pricing_engine`; `npv()`
    clears the cached value before recalculating, so a failed calculation
    never leaves a stale NPV behind.
    """

    swap_type: SwapType
    nominal: float
    fixed_schedule: Schedule
    fixed_rate: float
    fixed_day_counter: DayCounter
    floating_schedule: Schedule
    index: IborIndex
    spread: float = 0.0
    floating_day_counter: Optional[DayCounter] = None
    use_at_par_coupons: bool = True

    _engine: Any = field(default=None, init=False, repr=False)
    _npv: Optional[float] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.floating_day_counter is None:
            self.floating_day_counter = self.index.day_counter

    # -------------------- legs --------------------

    def fixed_leg(self) -> List[FixedRateCoupon]:
        return [
            FixedRateCoupon(
                accrual_start=s,
                accrual_end=e,
                payment_date=e,
                nominal=self.nominal,
                rate=self.fixed_rate,
                day_counter=self.fixed_day_counter,
            )
            for s, e in zip(self.fixed_schedule.start_dates, self.fixed_schedule.end_dates)
        ]

    def floating_leg(self) -> List[IborCoupon]:
        return [
            IborCoupon(
                accrual_start=s,
                accrual_end=e,
                payment_date=e,
                nominal=self.nominal,
                index=self.index,
                spread=self.spread,
                day_counter=self.floating_day_counter,
                at_par=self.use_at_par_coupons,
            )
            for s, e in zip(self.floating_schedule.start_dates, self.floating_schedule.end_dates)
        ]

    @property
    def start_date(self) -> date:
        return min(self.fixed_schedule.dates[0], self.floating_schedule.dates[0])

    @property
    def maturity_date(self) -> date:
        return max(self.fixed_schedule.dates[-1], self.floating_schedule.dates[-1])

    def arguments(self) -> SwapArguments:
        fixed = self.fixed_leg()
        floating = self.floating_leg()
        args = SwapArguments(
            swap_type=self.swap_type,
            nominal=self.nominal,
            fixed_reset_dates=[c.accrual_start for c in fixed],
            fixed_pay_dates=[c.payment_date for c in fixed],
            fixed_accrual_times=[c.accrual_time for c in fixed],
            fixed_coupons=[c.amount for c in fixed],
            fixed_rate=self.fixed_rate,
            floating_reset_dates=[c.accrual_start for c in floating],
            floating_fixing_dates=[c.fixing_date for c in floating],
            floating_pay_dates=[c.payment_date for c in floating],
            floating_accrual_times=[c.accrual_time for c in floating],
            floating_spreads=[c.spread for c in floating],
            floating_coupons=[c.known_amount() for c in floating],
            fixing_value_dates=[c.fixing_value_date for c in floating],
            fixing_end_dates=[c.fixing_end_date for c in floating],
            fixing_spanning_times=[c.spanning_time for c in floating],
            index_day_counter=self.index.day_counter,
        )
        args.validate()
        return args

    def cashflows_frame(self) -> pd.DataFrame:
        """
        One row per coupon of both legs (no discounting).

        Floating rates are the stored fixing where there is one, otherwise
        the rate projected on the index curve (None without a curve).
        """
        rows = []
        for c in self.fixed_leg():
            rows.append(
                {
                    "leg": "FIXED",
                    "accrual_start": c.accrual_start,
                    "accrual_end": c.accrual_end,
                    "payment_date": c.payment_date,
                    "accrual_time": c.accrual_time,
                    "rate": c.rate,
                    "amount": c.amount,
                }
            )
        for c in self.floating_leg():
            rate = self.index.past_fixing(c.fixing_date)
            if rate is None and self.index.forward_curve is not None:
                rate = c.forecast_rate()
            rows.append(
                {
                    "leg": "FLOATING",
                    "accrual_start": c.accrual_start,
                    "accrual_end": c.accrual_end,
                    "payment_date": c.payment_date,
                    "accrual_time": c.accrual_time,
                    "rate": rate,
                    "amount": c.known_amount(),
                }
            )
        return pd.DataFrame(rows)

    # -------------------- pricing --------------------

    def set_pricing_engine(self, engine) -> None:
        self._engine = engine
        self._npv = None

    def npv(self) -> float:
        self._npv = None
        if self._engine is None:
            raise ValueError("VanillaSwap: no pricing engine set")
        self._npv = float(self._engine.calculate(self.arguments()))
        return self._npv


def make_vanilla_swap(
    swap_tenor: str,
    index: IborIndex,
    fixed_rate: float,
    reference_date: date,
    nominal: float = 1.0,
    effective_date: Optional[date] = None,
    swap_type: SwapType = SwapType.PAYER,
    fixed_leg_tenor: str = "1Y",
    fixed_day_counter: DayCounter = THIRTY_360,
    floating_spread: float = 0.0,
    use_at_par_coupons: bool = True,
    settlement_days: Optional[int] = None,
) -> VanillaSwap:
    """
    Build a spot-starting (or forward-starting) vanilla swap, Euribor style.

    - effective date: `settlement_days` (default: the index fixing days)
      business days after the reference date, unless given
    - fixed leg: annual 30/360 by default
    - floating leg: index tenor and index day counter
    - schedules generated backwards, Modified Following
    """
    if effective_date is None:
        days = index.fixing_days if settlement_days is None else settlement_days
        spot = adjust(reference_date, BusinessDayConvention.FOLLOWING)
        effective_date = advance_business_days(spot, days)

    termination = add_months(effective_date, tenor_to_months(swap_tenor))

    fixed_schedule = make_schedule(effective_date, termination, tenor_to_months(fixed_leg_tenor))
    floating_schedule = make_schedule(effective_date, termination, index.tenor_months)

    return VanillaSwap(
        swap_type=swap_type,
        nominal=float(nominal),
        fixed_schedule=fixed_schedule,
        fixed_rate=float(fixed_rate),
        fixed_day_counter=fixed_day_counter,
        floating_schedule=floating_schedule,
        index=index,
        spread=float(floating_spread),
        use_at_par_coupons=use_at_par_coupons,
    )
