# tests/test_calibration.py

from __future__ import annotations

import logging

import pytest

from hw2c_core.calibration import (
    CalibrationErrorType,
    EndCriteria,
    SwaptionHelper,
    calibrate_hw2c_model,
    resolve_fixed_parameters,
)
from hw2c_core.curves import HW2CModel
from hw2c_core.errors import DidNotConvergeError
from hw2c_core.pricing import HW2CTreeSwaptionEngine, VolatilityType

TIME_STEPS = 40


def _tree_quoted_helper(option_tenor, swap_tenor, index, discount_curve, forward_curve, a, sigma):
    """Helper whose market value is the tree price under known parameters."""
    quoting = SwaptionHelper(option_tenor, swap_tenor, 0.2, index, discount_curve)
    quoting.set_pricing_engine(
        HW2CTreeSwaptionEngine(HW2CModel(discount_curve, forward_curve, a, sigma), TIME_STEPS)
    )
    return SwaptionHelper(
        option_tenor, swap_tenor, 0.2, index, discount_curve, market_value=quoting.model_value()
    )


# ----------------------------------------------------------------------
# Fix policy
# ----------------------------------------------------------------------


def test_resolve_fixed_parameters():
    assert resolve_fixed_parameters("auto", 1) == [True, False]
    assert resolve_fixed_parameters("AUTO", 3) == [False, False]
    assert resolve_fixed_parameters("none", 1) == [False, False]
    assert resolve_fixed_parameters([False, True], 1) == [False, True]
    with pytest.raises(ValueError):
        resolve_fixed_parameters("sometimes", 1)
    with pytest.raises(ValueError):
        resolve_fixed_parameters([True], 1)


def test_bad_inputs_are_rejected(model, discount_curve, euribor6m):
    helper = SwaptionHelper("1Y", "5Y", 0.2, euribor6m, discount_curve)
    with pytest.raises(ValueError):
        calibrate_hw2c_model(model, [], TIME_STEPS)
    with pytest.raises(ValueError):
        calibrate_hw2c_model(model, [helper], TIME_STEPS, weights=[1.0, 2.0])
    with pytest.raises(ValueError):
        calibrate_hw2c_model(model, [helper], TIME_STEPS, fix_policy=[True, True])
    with pytest.raises(ValueError):
        EndCriteria(max_iterations=0)


# ----------------------------------------------------------------------
# Round trips
# ----------------------------------------------------------------------


def test_single_helper_recovers_sigma(model, discount_curve, forward_curve, euribor6m):
    helper = _tree_quoted_helper("1Y", "5Y", euribor6m, discount_curve, forward_curve, 0.1, 0.012)
    model.set_params([0.1, 0.008])

    result = calibrate_hw2c_model(model, [helper], TIME_STEPS)

    assert result.success
    assert result.fixed == [True, False]
    assert result.a == 0.1
    assert result.sigma == pytest.approx(0.012, rel=1e-5)
    assert list(result.initial_params) == [0.1, 0.008]
    assert (model.a, model.sigma) == (result.a, result.sigma)
    assert result.rmse < 1e-6


def test_mask_fixes_mean_reversion_over_several_helpers(model, discount_curve, forward_curve, euribor6m):
    helpers = [
        _tree_quoted_helper(o, s, euribor6m, discount_curve, forward_curve, 0.05, 0.011)
        for o, s in (("1Y", "2Y"), ("2Y", "3Y"))
    ]
    model.set_params([0.05, 0.015])

    result = calibrate_hw2c_model(
        model, helpers, TIME_STEPS, fix_policy=[True, False], weights=[1.0, 2.0]
    )

    assert result.a == 0.05
    assert result.sigma == pytest.approx(0.011, rel=1e-5)

    frame = result.to_frame()
    assert list(frame.columns) == ["helper", "market_value", "model_value", "error"]
    assert len(frame) == 2
    assert frame["error"].abs().max() < 1e-6


def test_auto_policy_recovers_both_parameters(model, discount_curve, forward_curve, euribor6m):
    # coterminal basket: short expiries on long swaps against the reverse
    helpers = [
        _tree_quoted_helper(o, s, euribor6m, discount_curve, forward_curve, 0.04, 0.011)
        for o, s in (("1Y", "9Y"), ("3Y", "7Y"), ("5Y", "5Y"), ("7Y", "3Y"), ("9Y", "1Y"))
    ]
    model.set_params([0.07, 0.009])

    result = calibrate_hw2c_model(model, helpers, TIME_STEPS)

    assert result.success
    assert result.fixed == [False, False]
    assert result.a == pytest.approx(0.04, rel=5e-2)
    assert result.sigma == pytest.approx(0.011, rel=1e-2)
    assert result.rmse < 1e-4


@pytest.mark.parametrize(
    "volatility, volatility_type",
    [(0.2, VolatilityType.SHIFTED_LOGNORMAL), (0.008, VolatilityType.NORMAL)],
)
def test_calibrated_tree_reprices_analytic_european(
    model, discount_curve, euribor6m, volatility, volatility_type
):
    helper = SwaptionHelper(
        "2Y", "5Y", volatility, euribor6m, discount_curve, volatility_type=volatility_type
    )
    result = calibrate_hw2c_model(model, [helper], TIME_STEPS)

    assert result.success
    market_val = helper.market_value()
    tree_val = helper.model_value()
    assert tree_val == pytest.approx(market_val, rel=1e-6)

    # the calibrated model prices the same swaption through a fresh engine
    swaption = helper.swaption
    swaption.set_pricing_engine(HW2CTreeSwaptionEngine(model, TIME_STEPS))
    assert swaption.npv() == pytest.approx(market_val, rel=1e-6)


def test_failed_calibration_restores_parameters(model, discount_curve, forward_curve, euribor6m, caplog):
    helper = _tree_quoted_helper("1Y", "5Y", euribor6m, discount_curve, forward_curve, 0.1, 0.02)
    model.set_params([0.1, 0.005])

    with caplog.at_level(logging.WARNING, logger="hw2c_core.calibration.calibrate"):
        with pytest.raises(DidNotConvergeError) as exc_info:
            calibrate_hw2c_model(
                model, [helper], TIME_STEPS, end_criteria=EndCriteria(max_iterations=1)
            )

    result = exc_info.value.result
    assert result is not None
    assert not result.success
    assert result.n_evaluations == 1
    assert (model.a, model.sigma) == (0.1, 0.005)
    assert "did not converge" in caplog.text


def test_pricing_error_during_solve_restores_parameters(model, discount_curve, forward_curve, euribor6m, monkeypatch):
    helper = _tree_quoted_helper("1Y", "5Y", euribor6m, discount_curve, forward_curve, 0.1, 0.012)
    model.set_params([0.1, 0.008])

    calls = {"n": 0}
    original_error = helper.calibration_error

    def failing_error(model_value=None):
        calls["n"] += 1
        if calls["n"] == 3:
            raise ValueError("implied volatility: price outside bracket")
        return original_error(model_value)

    monkeypatch.setattr(helper, "calibration_error", failing_error)

    with pytest.raises(ValueError, match="outside bracket"):
        calibrate_hw2c_model(model, [helper], TIME_STEPS)

    assert calls["n"] == 3
    assert (model.a, model.sigma) == (0.1, 0.008)


def test_calibration_error_reuses_a_given_model_value(discount_curve, euribor6m):
    helper = SwaptionHelper(
        "1Y", "5Y", 0.2, euribor6m, discount_curve, error_type=CalibrationErrorType.PRICE_ERROR
    )
    # no engine attached, so the error must not reprice
    market = helper.market_value()
    assert helper.calibration_error(market + 1.5) == pytest.approx(1.5)
    with pytest.raises(ValueError):
        helper.calibration_error()
