# src/hw2c_core/calibration/swaption_helper.py

from __future__ import annotations

from enum import Enum
from typing import Optional

from scipy.optimize import brentq

from hw2c_core.curves.daycount import ACT_365F, THIRTY_360, DayCounter
from hw2c_core.curves.types import YieldTermStructure
from hw2c_core.model.index import IborIndex
from hw2c_core.model.swap import SwapType
from hw2c_core.model.swaption import Swaption, make_swaption
from hw2c_core.pricing.black import BlackSwaptionEngine, VolatilityType


class CalibrationErrorType(Enum):
    RELATIVE_PRICE_ERROR = "RELATIVE_PRICE_ERROR"
    PRICE_ERROR = "PRICE_ERROR"
    IMPLIED_VOL_ERROR = "IMPLIED_VOL_ERROR"


class SwaptionHelper:
    """
    European swaption used as a calibration instrument.

    The swaption expires `option_tenor` after the discount curve's
    reference date on a swap of `swap_tenor`. Without a strike it is at
    the money; with a strike the out-of-the-money side is used (payer
    when strike >= forward, receiver otherwise).

    The market value comes from the quoted volatility (Black or
    Bachelier on the discount curve) unless `market_value` is given.
    """

    def __init__(
        self,
        option_tenor: str,
        swap_tenor: str,
        volatility: float,
        index: IborIndex,
        discount_curve: YieldTermStructure,
        fixed_leg_tenor: str = "1Y",
        fixed_day_counter: DayCounter = THIRTY_360,
        error_type: CalibrationErrorType = CalibrationErrorType.RELATIVE_PRICE_ERROR,
        strike: Optional[float] = None,
        nominal: float = 1.0,
        volatility_type: VolatilityType = VolatilityType.SHIFTED_LOGNORMAL,
        displacement: float = 0.0,
        market_value: Optional[float] = None,
        use_at_par_coupons: bool = True,
        vol_day_counter: DayCounter = ACT_365F,
    ) -> None:
        self.option_tenor = option_tenor
        self.swap_tenor = swap_tenor
        self.volatility = float(volatility)
        self.index = index
        self.discount_curve = discount_curve
        self.error_type = error_type
        self.volatility_type = volatility_type
        self.displacement = float(displacement)
        self.vol_day_counter = vol_day_counter

        reference_date = discount_curve.reference_date

        def build(rate: Optional[float], swap_type: SwapType) -> Swaption:
            return make_swaption(
                index,
                option_tenor,
                swap_tenor,
                reference_date,
                discount_curve,
                strike=rate,
                nominal=nominal,
                swap_type=swap_type,
                fixed_leg_tenor=fixed_leg_tenor,
                fixed_day_counter=fixed_day_counter,
                use_at_par_coupons=use_at_par_coupons,
            )

        atm = build(None, SwapType.PAYER)
        self.forward_rate = atm.swap.fixed_rate
        if strike is None:
            self.swaption = atm
        else:
            swap_type = SwapType.PAYER if strike >= self.forward_rate else SwapType.RECEIVER
            self.swaption = build(float(strike), swap_type)
        self.strike = self.swaption.swap.fixed_rate

        self._market_value = None if market_value is None else float(market_value)

    # ------------------------------------------------------------------
    # values
    # ------------------------------------------------------------------

    def set_pricing_engine(self, engine) -> None:
        self.swaption.set_pricing_engine(engine)

    def black_price(self, volatility: float) -> float:
        """Analytic price of the helper's swaption for a given volatility."""
        engine = BlackSwaptionEngine(
            self.discount_curve,
            volatility,
            volatility_type=self.volatility_type,
            displacement=self.displacement,
            forward_curve=self.index.forward_curve,
            vol_day_counter=self.vol_day_counter,
        )
        return engine.calculate(self.swaption.arguments())

    def market_value(self) -> float:
        if self._market_value is None:
            self._market_value = self.black_price(self.volatility)
        return self._market_value

    def model_value(self) -> float:
        return self.swaption.npv()

    def implied_volatility(
        self,
        target_value: float,
        accuracy: float = 1e-10,
        max_evaluations: int = 200,
        min_vol: Optional[float] = None,
        max_vol: Optional[float] = None,
    ) -> float:
        """Volatility that reproduces `target_value` (Brent root search)."""
        if self.volatility_type is VolatilityType.NORMAL:
            lo = 1e-8 if min_vol is None else min_vol
            hi = 0.05 if max_vol is None else max_vol
        else:
            lo = 1e-6 if min_vol is None else min_vol
            hi = 4.0 if max_vol is None else max_vol

        def f(vol: float) -> float:
            return self.black_price(vol) - target_value

        f_lo, f_hi = f(lo), f(hi)
        if f_lo * f_hi > 0.0:
            raise ValueError(
                f"implied volatility: price {target_value:.10f} outside "
                f"[{f_lo + target_value:.10f}, {f_hi + target_value:.10f}]"
            )
        return float(brentq(f, lo, hi, xtol=accuracy, maxiter=max_evaluations))

    def calibration_error(self, model_value: Optional[float] = None) -> float:
        """Error of `model_value` (priced with the attached engine if not given)."""
        market = self.market_value()
        model = self.model_value() if model_value is None else model_value
        if self.error_type is CalibrationErrorType.RELATIVE_PRICE_ERROR:
            if market == 0.0:
                raise ValueError("relative price error undefined for a zero market value")
            return (model - market) / market
        if self.error_type is CalibrationErrorType.PRICE_ERROR:
            return model - market
        return self.implied_volatility(model) - self.volatility

    def __repr__(self) -> str:
        return (
            f"SwaptionHelper({self.option_tenor}x{self.swap_tenor}, "
            f"vol={self.volatility:.6f} {self.volatility_type.value}, "
            f"strike={self.strike:.6f})"
        )

    @property
    def expiry_time(self) -> float:
        return self.vol_day_counter.year_fraction(
            self.discount_curve.reference_date, self.swaption.exercise.last_date
        )

    @property
    def maturity_time(self) -> float:
        return self.vol_day_counter.year_fraction(
            self.discount_curve.reference_date, self.swaption.swap.maturity_date
        )
