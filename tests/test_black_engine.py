# tests/test_black_engine.py

from __future__ import annotations

import math

import pytest

from hw2c_core.calls import bermudan_exercise_from_fixed_leg
from hw2c_core.calibration import CalibrationErrorType, SwaptionHelper
from hw2c_core.model import Swaption, SwapType, make_swaption
from hw2c_core.pricing import (
    BlackSwaptionEngine,
    DiscountingSwapEngine,
    VolatilityType,
    bachelier_formula,
    black_formula,
)


def test_black_formula_at_the_money():
    f, std = 0.03, 0.2
    expected = f * math.erf(0.5 * std / math.sqrt(2.0))
    assert black_formula(1, f, f, std) == pytest.approx(expected, rel=1e-12)
    assert black_formula(-1, f, f, std) == pytest.approx(expected, rel=1e-12)


def test_black_put_call_parity_with_displacement():
    k, f, std, df, shift = -0.001, 0.002, 0.15, 0.9, 0.01
    call = black_formula(1, k, f, std, df, shift)
    put = black_formula(-1, k, f, std, df, shift)
    assert call - put == pytest.approx(df * (f - k), abs=1e-15)

    with pytest.raises(ValueError):
        black_formula(1, k, f, std, df)


def test_bachelier_formula():
    std = 0.008
    assert bachelier_formula(1, 0.03, 0.03, std) == pytest.approx(std / math.sqrt(2.0 * math.pi))
    assert bachelier_formula(-1, 0.05, 0.03, 0.0, 2.0) == pytest.approx(0.04)


def test_zero_volatility_gives_intrinsic(discount_curve, forward_curve, euribor6m, nominal, asof_date):
    swaption = make_swaption(euribor6m, "1Y", "5Y", asof_date, discount_curve, strike=0.02, nominal=nominal)
    swaption.set_pricing_engine(BlackSwaptionEngine(discount_curve, 0.0, forward_curve=forward_curve))

    underlying = swaption.underlying_swap
    underlying.set_pricing_engine(DiscountingSwapEngine(discount_curve, forward_curve))
    assert swaption.npv() == pytest.approx(underlying.npv(), rel=1e-12)


def test_black_engine_is_european_only(discount_curve, euribor6m, nominal, asof_date):
    swaption = make_swaption(euribor6m, "1Y", "5Y", asof_date, discount_curve, nominal=nominal)
    bermudan = Swaption(swaption.swap, bermudan_exercise_from_fixed_leg(swaption.swap))
    bermudan.set_pricing_engine(BlackSwaptionEngine(discount_curve, 0.2))
    with pytest.raises(ValueError):
        bermudan.npv()


# ----------------------------------------------------------------------
# Swaption helper
# ----------------------------------------------------------------------


def test_helper_is_at_the_money_by_default(discount_curve, forward_curve, euribor6m):
    helper = SwaptionHelper("1Y", "5Y", 0.2, euribor6m, discount_curve)
    assert helper.strike == pytest.approx(helper.forward_rate, abs=1e-15)

    swap = helper.swaption.underlying_swap
    swap.set_pricing_engine(DiscountingSwapEngine(discount_curve, forward_curve))
    assert swap.npv() == pytest.approx(0.0, abs=1e-12)
    assert helper.expiry_time == pytest.approx(1.0)
    assert helper.maturity_time > 6.0


def test_helper_uses_out_of_the_money_side(discount_curve, euribor6m):
    high = SwaptionHelper("1Y", "5Y", 0.2, euribor6m, discount_curve, strike=0.05)
    low = SwaptionHelper("1Y", "5Y", 0.2, euribor6m, discount_curve, strike=0.01)
    assert high.swaption.swap.swap_type is SwapType.PAYER
    assert low.swaption.swap.swap_type is SwapType.RECEIVER
    assert high.strike == 0.05


@pytest.mark.parametrize(
    "volatility, volatility_type",
    [(0.2, VolatilityType.SHIFTED_LOGNORMAL), (0.008, VolatilityType.NORMAL)],
)
def test_implied_volatility_roundtrip(discount_curve, euribor6m, volatility, volatility_type):
    helper = SwaptionHelper(
        "2Y", "5Y", volatility, euribor6m, discount_curve, volatility_type=volatility_type
    )
    assert helper.market_value() > 0.0
    assert helper.implied_volatility(helper.market_value()) == pytest.approx(volatility, abs=1e-8)

    with pytest.raises(ValueError):
        helper.implied_volatility(-1.0)


def test_calibration_errors(discount_curve, forward_curve, euribor6m):
    helper = SwaptionHelper(
        "1Y", "5Y", 0.2, euribor6m, discount_curve,
        error_type=CalibrationErrorType.IMPLIED_VOL_ERROR,
    )
    helper.set_pricing_engine(BlackSwaptionEngine(discount_curve, 0.2, forward_curve=forward_curve))
    assert helper.calibration_error() == pytest.approx(0.0, abs=1e-8)

    helper.error_type = CalibrationErrorType.PRICE_ERROR
    helper.set_pricing_engine(BlackSwaptionEngine(discount_curve, 0.25, forward_curve=forward_curve))
    assert helper.calibration_error() > 0.0

    helper.error_type = CalibrationErrorType.RELATIVE_PRICE_ERROR
    assert helper.calibration_error() == pytest.approx(
        helper.model_value() / helper.market_value() - 1.0
    )
