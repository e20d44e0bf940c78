# src/hw2c_core/pricing/tree_engines.py

from __future__ import annotations

import logging
from datetime import date
from typing import Optional, Tuple

from hw2c_core.curves.daycount import DayCounter
from hw2c_core.curves.hw2c_model import HW2CModel
from hw2c_core.curves.time_grid import TimeGrid
from hw2c_core.errors import NoModelError, UnsupportedSettlementError
from hw2c_core.model.swap import SwapArguments
from hw2c_core.model.swaption import SettlementMethod, SwaptionArguments
from .discretized_swap import HW2CDiscretizedSwap
from .discretized_swaption import HW2CDiscretizedSwaption

logger = logging.getLogger(__name__)


# -------------------------------------------------------------------
# Shared model plumbing
# -------------------------------------------------------------------


class _HW2CTreeEngine:
    def __init__(self, model: Optional[HW2CModel], time_steps: int) -> None:
        if time_steps < 0:
            raise ValueError(f"time_steps must be >= 0, got {time_steps}")
        self.model = model
        self.time_steps = int(time_steps)

    @property
    def reference_date(self) -> Optional[date]:
        if self.model is None:
            return None
        return self.model.discount_curve.reference_date

    def _require_model(self) -> HW2CModel:
        if self.model is None:
            raise NoModelError(f"{type(self).__name__}: no model specified")
        return self.model

    def _curve_frame(self, model: HW2CModel) -> Tuple[date, DayCounter]:
        curve = model.discount_curve
        return curve.reference_date, curve.day_counter


# -------------------------------------------------------------------
# Swap
# -------------------------------------------------------------------


class HW2CTreeSwapEngine(_HW2CTreeEngine):
    """
    Prices a vanilla swap on the dual-curve Hull-White lattices.

    The grid is built from the swap's mandatory times with `time_steps`
    as the target number of steps; the swap is started at the last grid
    time and rolled back to 0.
    """

    def calculate(self, args: SwapArguments) -> float:
        model = self._require_model()
        reference_date, day_counter = self._curve_frame(model)

        swap = HW2CDiscretizedSwap(args, reference_date, day_counter)
        times = swap.mandatory_times()
        if not times:
            logger.debug("HW2CTreeSwapEngine: every cash flow is in the past, NPV=0")
            return 0.0

        grid = TimeGrid(times, self.time_steps)
        discount_lattice = model.discount_tree(grid)
        forward_lattice = model.forward_tree(grid)

        swap.initialize(discount_lattice, forward_lattice, grid.last)
        swap.rollback(0.0)
        npv = swap.present_value()

        logger.debug(
            "HW2CTreeSwapEngine: steps=%d grid_nodes=%d npv=%.10f",
            self.time_steps,
            len(grid),
            npv,
        )
        return npv


# -------------------------------------------------------------------
# Swaption
# -------------------------------------------------------------------


class HW2CTreeSwaptionEngine(_HW2CTreeEngine):
    """
    Prices European and Bermudan swaptions on the dual-curve lattices.

    The option is started at its last exercise time and rolled back to
    the first exercise time on or after the reference date; the present
    value is the state-price weighted sum on the discount lattice.
    """

    def calculate(self, args: SwaptionArguments) -> float:
        if args.settlement_method is SettlementMethod.PAR_YIELD_CURVE:
            raise UnsupportedSettlementError(
                "cash settled (par yield curve) swaptions are not priced "
                "with HW2CTreeSwaptionEngine"
            )
        model = self._require_model()
        reference_date, day_counter = self._curve_frame(model)

        swaption = HW2CDiscretizedSwaption(args, reference_date, day_counter)

        future_exercises = [t for t in swaption.exercise_times if t >= 0.0]
        if not future_exercises:
            logger.debug("HW2CTreeSwaptionEngine: no exercise left, NPV=0")
            return 0.0
        next_exercise = future_exercises[0]
        last_exercise = swaption.exercise_times[-1]

        grid = TimeGrid(swaption.mandatory_times(), self.time_steps)
        discount_lattice = model.discount_tree(grid)
        forward_lattice = model.forward_tree(grid)

        swaption.initialize(discount_lattice, forward_lattice, last_exercise)
        swaption.rollback(next_exercise)
        npv = swaption.present_value()

        logger.debug(
            "HW2CTreeSwaptionEngine: exercises=%d steps=%d grid_nodes=%d npv=%.10f",
            len(future_exercises),
            self.time_steps,
            len(grid),
            npv,
        )
        return npv
