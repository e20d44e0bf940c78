# src/hw2c_core/model/swaption.py

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, List, Optional

from hw2c_core.calls.exercise_schedule import Exercise, ExerciseType, european_exercise
from hw2c_core.curves.dates import BusinessDayConvention, add_months, adjust, tenor_to_months
from hw2c_core.curves.daycount import THIRTY_360, DayCounter
from hw2c_core.curves.types import YieldTermStructure
from .index import IborIndex
from .swap import SwapArguments, SwapType, VanillaSwap, make_vanilla_swap


class SettlementType(Enum):
    PHYSICAL = "PHYSICAL"
    CASH = "CASH"


class SettlementMethod(Enum):
    PHYSICAL_OTC = "PHYSICAL_OTC"
    PHYSICAL_CLEARED = "PHYSICAL_CLEARED"
    COLLATERALIZED_CASH_PRICE = "COLLATERALIZED_CASH_PRICE"
    PAR_YIELD_CURVE = "PAR_YIELD_CURVE"


_PHYSICAL_METHODS = (SettlementMethod.PHYSICAL_OTC, SettlementMethod.PHYSICAL_CLEARED)
_CASH_METHODS = (SettlementMethod.COLLATERALIZED_CASH_PRICE, SettlementMethod.PAR_YIELD_CURVE)


@dataclass
class SwaptionArguments:
    """Underlying swap arguments plus the exercise and settlement terms."""

    swap: SwapArguments
    exercise_dates: List[date]
    exercise_type: ExerciseType
    settlement_type: SettlementType = SettlementType.PHYSICAL
    settlement_method: SettlementMethod = SettlementMethod.PHYSICAL_OTC


@dataclass
class Swaption:
    """Option to enter the underlying swap on one of the exercise dates."""

    swap: VanillaSwap
    exercise: Exercise
    settlement_type: SettlementType = SettlementType.PHYSICAL
    settlement_method: SettlementMethod = SettlementMethod.PHYSICAL_OTC

    _engine: Any = field(default=None, init=False, repr=False)
    _npv: Optional[float] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        allowed = _PHYSICAL_METHODS if self.settlement_type is SettlementType.PHYSICAL else _CASH_METHODS
        if self.settlement_method not in allowed:
            raise ValueError(
                f"settlement method {self.settlement_method.value} is not valid "
                f"for {self.settlement_type.value} settlement"
            )

    @property
    def underlying_swap(self) -> VanillaSwap:
        return self.swap

    def is_expired(self, reference_date: date) -> bool:
        return self.exercise.last_date < reference_date

    def arguments(self) -> SwaptionArguments:
        return SwaptionArguments(
            swap=self.swap.arguments(),
            exercise_dates=list(self.exercise.dates),
            exercise_type=self.exercise.exercise_type,
            settlement_type=self.settlement_type,
            settlement_method=self.settlement_method,
        )

    def set_pricing_engine(self, engine) -> None:
        self._engine = engine
        self._npv = None

    def npv(self) -> float:
        self._npv = None
        if self._engine is None:
            raise ValueError("Swaption: no pricing engine set")
        # engines without a model have no reference date; let them raise
        reference_date = self._engine.reference_date
        if reference_date is not None and self.is_expired(reference_date):
            self._npv = 0.0
            return self._npv
        self._npv = float(self._engine.calculate(self.arguments()))
        return self._npv


def make_swaption(
    index: IborIndex,
    option_tenor: str,
    swap_tenor: str,
    reference_date: date,
    discount_curve: YieldTermStructure,
    strike: Optional[float] = None,
    nominal: float = 1.0,
    swap_type: SwapType = SwapType.PAYER,
    fixed_leg_tenor: str = "1Y",
    fixed_day_counter: DayCounter = THIRTY_360,
    use_at_par_coupons: bool = True,
    settlement_type: SettlementType = SettlementType.PHYSICAL,
    settlement_method: SettlementMethod = SettlementMethod.PHYSICAL_OTC,
) -> Swaption:
    """
    European swaption expiring `option_tenor` after the reference date on a
    swap of `swap_tenor` starting at the index value date of the expiry.

    strike=None gives an at-the-money swaption: the fair rate of the
    underlying with `discount_curve` for discounting and the index's
    forward curve for projection.
    """
    # pricing imports the model layer
    from hw2c_core.pricing.discounting import DiscountingSwapEngine

    exercise_date = adjust(
        add_months(reference_date, tenor_to_months(option_tenor)),
        BusinessDayConvention.MODIFIED_FOLLOWING,
    )
    start_date = index.value_date(exercise_date)

    def build(rate: float) -> VanillaSwap:
        return make_vanilla_swap(
            swap_tenor,
            index,
            rate,
            reference_date,
            nominal=nominal,
            effective_date=start_date,
            swap_type=swap_type,
            fixed_leg_tenor=fixed_leg_tenor,
            fixed_day_counter=fixed_day_counter,
            use_at_par_coupons=use_at_par_coupons,
        )

    if strike is None:
        forward_curve = index.forward_curve or discount_curve
        engine = DiscountingSwapEngine(discount_curve, forward_curve)
        strike = engine.fair_rate(build(0.0).arguments())

    return Swaption(
        swap=build(strike),
        exercise=european_exercise(exercise_date),
        settlement_type=settlement_type,
        settlement_method=settlement_method,
    )
