# src/hw2c_core/calibration/calibrate.py

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from scipy.optimize import least_squares

from hw2c_core.curves.hw2c_model import HW2CModel
from hw2c_core.errors import DidNotConvergeError
from hw2c_core.pricing.tree_engines import HW2CTreeSwaptionEngine
from .swaption_helper import SwaptionHelper

logger = logging.getLogger(__name__)

_LOWER_BOUND = 1e-10

FixPolicy = Union[str, Sequence[bool]]


@dataclass
class EndCriteria:
    """
    Stopping rules of the calibration.

    max_iterations         -> least_squares max_nfev
    root_epsilon           -> xtol (relative change of the parameters)
    function_epsilon       -> ftol (relative change of the cost)
    gradient_norm_epsilon  -> gtol
    """

    max_iterations: int = 400
    root_epsilon: float = 1e-8
    function_epsilon: float = 1e-8
    gradient_norm_epsilon: float = 1e-8

    def __post_init__(self) -> None:
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")


@dataclass
class CalibrationResult:
    """
    Outcome of one calibration run.

    params / initial_params : [a, sigma] after / before
    fixed                   : which parameters were held constant
    errors                  : per-helper calibration errors at `params`
    """

    params: np.ndarray
    initial_params: np.ndarray
    fixed: List[bool]
    success: bool
    status: int
    message: str
    n_evaluations: int
    cost: float
    errors: List[float] = field(default_factory=list)
    market_values: List[float] = field(default_factory=list)
    model_values: List[float] = field(default_factory=list)
    helper_labels: List[str] = field(default_factory=list)

    @property
    def a(self) -> float:
        return float(self.params[0])

    @property
    def sigma(self) -> float:
        return float(self.params[1])

    @property
    def rmse(self) -> float:
        if not self.errors:
            return 0.0
        return math.sqrt(sum(e * e for e in self.errors) / len(self.errors))

    def to_frame(self) -> pd.DataFrame:
        """One row per helper: market value, model value, error."""
        return pd.DataFrame(
            {
                "helper": self.helper_labels,
                "market_value": self.market_values,
                "model_value": self.model_values,
                "error": self.errors,
            }
        )


def resolve_fixed_parameters(fix_policy: FixPolicy, n_helpers: int) -> List[bool]:
    """
    Translate a fix policy into a [fix_a, fix_sigma] mask.

      "auto" : fix a when there is a single helper, free both otherwise
      "none" : free both
      mask   : explicit booleans, used as given
    """
    if isinstance(fix_policy, str):
        policy = fix_policy.strip().lower()
        if policy == "auto":
            return [n_helpers == 1, False]
        if policy == "none":
            return [False, False]
        raise ValueError(f"Unknown fix_policy: {fix_policy!r} (use 'auto', 'none' or a mask)")

    mask = [bool(x) for x in fix_policy]
    if len(mask) != HW2CModel.n_params:
        raise ValueError(f"fix mask needs {HW2CModel.n_params} entries, got {len(mask)}")
    return mask


def _helper_values(helpers: Sequence[SwaptionHelper]):
    markets = [h.market_value() for h in helpers]
    models = [h.model_value() for h in helpers]
    errors = [h.calibration_error(m) for h, m in zip(helpers, models)]
    return markets, models, errors


def calibrate_hw2c_model(
    model: HW2CModel,
    helpers: Sequence[SwaptionHelper],
    time_steps: int,
    end_criteria: Optional[EndCriteria] = None,
    fix_policy: FixPolicy = "auto",
    weights: Optional[Sequence[float]] = None,
) -> CalibrationResult:
    """
    Fit (a, sigma) of `model` to a basket of swaption helpers.

    Each helper is priced with an HW2CTreeSwaptionEngine on `model`, so
    every objective evaluation rebuilds both lattices with the trial
    parameters. The weighted errors sqrt(w_i) * error_i are minimized with
    scipy.optimize.least_squares (trust region reflective, parameters
    bounded away from zero).

    On success the model keeps the calibrated parameters. Otherwise the
    initial parameters are restored and DidNotConvergeError is raised
    with the CalibrationResult attached. An exception raised while
    pricing a helper also restores the initial parameters before it
    propagates.
    """
    helpers = list(helpers)
    if not helpers:
        raise ValueError("calibrate_hw2c_model: no calibration helpers given")

    criteria = end_criteria or EndCriteria()

    if weights is None:
        weights = [1.0] * len(helpers)
    if len(weights) != len(helpers):
        raise ValueError(f"{len(weights)} weights given for {len(helpers)} helpers")
    sqrt_w = np.sqrt(np.asarray(weights, dtype=float))

    fixed = resolve_fixed_parameters(fix_policy, len(helpers))
    free_idx = [i for i, is_fixed in enumerate(fixed) if not is_fixed]
    if not free_idx:
        raise ValueError("calibrate_hw2c_model: every parameter is fixed")

    engine = HW2CTreeSwaptionEngine(model, time_steps)
    for h in helpers:
        h.set_pricing_engine(engine)

    initial = model.params.copy()

    def full_params(x_free: np.ndarray) -> np.ndarray:
        p = initial.copy()
        p[free_idx] = x_free
        return p

    def residuals(x_free: np.ndarray) -> np.ndarray:
        model.set_params(full_params(x_free))
        return sqrt_w * np.array([h.calibration_error() for h in helpers])

    x0 = initial[free_idx]
    lower = np.full(len(free_idx), _LOWER_BOUND)
    upper = np.full(len(free_idx), np.inf)

    # pricing failures leave the model where the caller had it
    try:
        sol = least_squares(
            residuals,
            x0=x0,
            bounds=(lower, upper),
            method="trf",
            xtol=criteria.root_epsilon,
            ftol=criteria.function_epsilon,
            gtol=criteria.gradient_norm_epsilon,
            max_nfev=criteria.max_iterations,
            diff_step=1e-6,
        )
        model.set_params(full_params(sol.x))
        markets, models, errors = _helper_values(helpers)
    except BaseException:
        model.set_params(initial)
        raise

    result = CalibrationResult(
        params=full_params(sol.x),
        initial_params=initial,
        fixed=fixed,
        success=bool(sol.success),
        status=int(sol.status),
        message=str(sol.message),
        n_evaluations=int(sol.nfev),
        cost=float(sol.cost),
        errors=errors,
        market_values=markets,
        model_values=models,
        helper_labels=[repr(h) for h in helpers],
    )

    if not sol.success:
        model.set_params(initial)
        logger.warning(
            "HW2C calibration did not converge after %d evaluations: %s",
            result.n_evaluations,
            result.message,
        )
        raise DidNotConvergeError(
            f"HW2C calibration did not converge: {result.message}", result=result
        )

    logger.info(
        "HW2C calibration: a=%.6f sigma=%.6f fixed=%s helpers=%d rmse=%.3e evals=%d",
        result.a,
        result.sigma,
        fixed,
        len(helpers),
        result.rmse,
        result.n_evaluations,
    )
    return result
