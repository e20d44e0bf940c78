# src/hw2c_core/pricing/discretized_swaption.py

from __future__ import annotations

from datetime import date
from typing import List

import numpy as np

from hw2c_core.curves.daycount import DayCounter
from hw2c_core.model.swaption import SwaptionArguments
from .discretized_asset import LatticePairAsset
from .discretized_swap import HW2CDiscretizedSwap


class HW2CDiscretizedSwaption(LatticePairAsset):
    """
    European or Bermudan swaption on a pair of Hull-White lattices.

    The swaption owns its underlying swap, built on the contractual
    coupon dates with every coupon flagged PRE: a coupon resetting on an
    exercise date belongs to the exercised swap. The underlying is
    started at the last payment time and rolled back alongside the
    option; on every exercise step the option value becomes
    max(option, underlying).
    """

    def __init__(
        self,
        args: SwaptionArguments,
        reference_date: date,
        day_counter: DayCounter,
    ) -> None:
        super().__init__()
        self.arguments = args
        self.underlying = HW2CDiscretizedSwap(args.swap, reference_date, day_counter)

        self.exercise_times: List[float] = sorted(
            day_counter.year_fraction(reference_date, d) for d in args.exercise_dates
        )

        self.last_payment = max(self.mandatory_times(), default=0.0)

    def mandatory_times(self) -> List[float]:
        times = self.underlying.mandatory_times()
        times.extend(t for t in self.exercise_times if t >= 0.0)
        return times

    def reset(self, size: int) -> None:
        self.underlying.initialize(self.lattice, self.forward_lattice, self.last_payment)
        self.values = np.zeros(size)
        self.adjust_values()

    def post_adjust_values_impl(self) -> None:
        self.underlying.partial_rollback(self.time)
        self.underlying.pre_adjust_values()
        for t in self.exercise_times:
            if t >= 0.0 and self.is_on_time(t):
                self.values = np.maximum(self.values, self.underlying.values)
        self.underlying.post_adjust_values()
