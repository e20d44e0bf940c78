# src/hw2c_core/pricing/black.py

from __future__ import annotations

import logging
import math
from datetime import date
from enum import Enum
from typing import Optional

from scipy.stats import norm

from hw2c_core.calls.exercise_schedule import ExerciseType
from hw2c_core.curves.daycount import ACT_365F, DayCounter
from hw2c_core.curves.types import YieldTermStructure
from hw2c_core.model.swaption import SwaptionArguments
from .discounting import DiscountingSwapEngine

logger = logging.getLogger(__name__)


class VolatilityType(Enum):
    SHIFTED_LOGNORMAL = "SHIFTED_LOGNORMAL"
    NORMAL = "NORMAL"


def black_formula(
    sign: int,
    strike: float,
    forward: float,
    std_dev: float,
    discount: float = 1.0,
    displacement: float = 0.0,
) -> float:
    """
    Black (shifted lognormal) option price.

    sign = +1 for a call (payer swaption), -1 for a put (receiver).
    `std_dev` is vol * sqrt(T); `discount` scales the result (annuity).
    """
    f = forward + displacement
    k = strike + displacement
    if f <= 0.0 or k <= 0.0:
        raise ValueError(
            f"black_formula: shifted forward ({f}) and strike ({k}) must be positive"
        )
    if std_dev == 0.0:
        return discount * max(sign * (f - k), 0.0)

    d1 = math.log(f / k) / std_dev + 0.5 * std_dev
    d2 = d1 - std_dev
    return discount * sign * (f * norm.cdf(sign * d1) - k * norm.cdf(sign * d2))


def bachelier_formula(
    sign: int,
    strike: float,
    forward: float,
    std_dev: float,
    discount: float = 1.0,
) -> float:
    """Bachelier (normal) option price; `std_dev` = normal vol * sqrt(T)."""
    diff = sign * (forward - strike)
    if std_dev == 0.0:
        return discount * max(diff, 0.0)
    d = diff / std_dev
    return discount * (diff * norm.cdf(d) + std_dev * norm.pdf(d))


class BlackSwaptionEngine:
    """
    Analytic European swaption engine with a constant volatility.

    forward = fair swap rate, annuity = fixed-leg annuity, both on the
    discount curve (projection on `forward_curve`); expiry time is
    measured with `vol_day_counter` (Actual/365 Fixed by default).
    """

    def __init__(
        self,
        discount_curve: YieldTermStructure,
        volatility: float,
        volatility_type: VolatilityType = VolatilityType.SHIFTED_LOGNORMAL,
        displacement: float = 0.0,
        forward_curve: Optional[YieldTermStructure] = None,
        vol_day_counter: DayCounter = ACT_365F,
    ) -> None:
        if volatility < 0.0:
            raise ValueError(f"volatility must be >= 0, got {volatility}")
        self.discount_curve = discount_curve
        self.forward_curve = forward_curve
        self.volatility = float(volatility)
        self.volatility_type = volatility_type
        self.displacement = float(displacement)
        self.vol_day_counter = vol_day_counter

    @property
    def reference_date(self) -> date:
        return self.discount_curve.reference_date

    def calculate(self, args: SwaptionArguments) -> float:
        if args.exercise_type is not ExerciseType.EUROPEAN:
            raise ValueError("BlackSwaptionEngine prices European swaptions only")

        swap_engine = DiscountingSwapEngine(self.discount_curve, self.forward_curve)
        legs = swap_engine.leg_values(args.swap)
        annuity = legs.annuity
        forward = args.swap.fixed_rate + (legs.floating_leg_npv - legs.fixed_leg_npv) / annuity
        strike = args.swap.fixed_rate

        expiry = self.vol_day_counter.year_fraction(self.reference_date, args.exercise_dates[0])
        std_dev = self.volatility * math.sqrt(max(expiry, 0.0))
        sign = args.swap.swap_type.sign

        if self.volatility_type is VolatilityType.NORMAL:
            price = bachelier_formula(sign, strike, forward, std_dev, annuity)
        else:
            price = black_formula(sign, strike, forward, std_dev, annuity, self.displacement)

        logger.debug(
            "BlackSwaptionEngine: F=%.6f K=%.6f T=%.4f vol=%.6f (%s) price=%.8f",
            forward,
            strike,
            expiry,
            self.volatility,
            self.volatility_type.value,
            price,
        )
        return price
