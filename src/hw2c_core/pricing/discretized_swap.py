# src/hw2c_core/pricing/discretized_swap.py

from __future__ import annotations

from datetime import date
from typing import List, Optional, Sequence

import numpy as np

from hw2c_core.curves.daycount import DayCounter
from hw2c_core.curves.time_grid import close_enough
from hw2c_core.errors import LatticeMismatchError, MissingFixingError
from hw2c_core.model.swap import SwapArguments
from .discretized_asset import CouponAdjustment, DiscretizedDiscountBond, LatticePairAsset


class HW2CDiscretizedSwap(LatticePairAsset):
    """
    Vanilla swap on a pair of Hull-White lattices.

    Coupons enter the values at their reset step:

      fixed:    amount * P_d(t, pay)
      floating: N * tau * (F + spread) * P_d(t, pay),
                F = (1 / P_f(s, e) - 1) / spanning_time

    P_d comes from a discount bond on the discount lattice, P_f from a
    bond on the forward lattice between the fixing value date s and the
    fixing end date e. Payer swaps receive floating and pay fixed.

    Coupons that reset before the reference date (negative reset time)
    are added with their known amount on their payment step.
    """

    def __init__(
        self,
        args: SwapArguments,
        reference_date: date,
        day_counter: DayCounter,
        fixed_coupon_adjustments: Optional[Sequence[CouponAdjustment]] = None,
        floating_coupon_adjustments: Optional[Sequence[CouponAdjustment]] = None,
    ) -> None:
        super().__init__()
        args.validate()
        self.arguments = args

        n_fixed = len(args.fixed_pay_dates)
        n_float = len(args.floating_pay_dates)

        if fixed_coupon_adjustments is None:
            fixed_coupon_adjustments = [CouponAdjustment.PRE] * n_fixed
        if floating_coupon_adjustments is None:
            floating_coupon_adjustments = [CouponAdjustment.PRE] * n_float
        if len(fixed_coupon_adjustments) != n_fixed:
            raise ValueError("one fixed coupon adjustment per fixed coupon is required")
        if len(floating_coupon_adjustments) != n_float:
            raise ValueError("one floating coupon adjustment per floating coupon is required")

        self.fixed_coupon_adjustments: List[CouponAdjustment] = list(fixed_coupon_adjustments)
        self.floating_coupon_adjustments: List[CouponAdjustment] = list(floating_coupon_adjustments)

        def yf(d: date) -> float:
            return day_counter.year_fraction(reference_date, d)

        self.fixed_reset_times = [yf(d) for d in args.fixed_reset_dates]
        self.fixed_pay_times = [yf(d) for d in args.fixed_pay_dates]
        self.floating_reset_times = [yf(d) for d in args.floating_reset_dates]
        self.floating_pay_times = [yf(d) for d in args.floating_pay_dates]
        self.index_start_times = [yf(d) for d in args.fixing_value_dates]
        self.index_end_times = [yf(d) for d in args.fixing_end_dates]

        self._sign = args.swap_type.sign

    def mandatory_times(self) -> List[float]:
        times: List[float] = []
        for group in (
            self.fixed_reset_times,
            self.fixed_pay_times,
            self.floating_reset_times,
            self.floating_pay_times,
            self.index_start_times,
            self.index_end_times,
        ):
            times.extend(t for t in group if t >= 0.0)
        return times

    def reset(self, size: int) -> None:
        self.values = np.zeros(size)
        self.adjust_values()

    # ------------------------------------------------------------------
    # adjustments
    # ------------------------------------------------------------------

    def pre_adjust_values_impl(self) -> None:
        self._add_resetting_coupons(CouponAdjustment.PRE)

    def post_adjust_values_impl(self) -> None:
        self._add_resetting_coupons(CouponAdjustment.POST)

        # coupons that reset in the past are paid with their known amounts
        args = self.arguments
        for i, t in enumerate(self.fixed_pay_times):
            if t >= 0.0 and self.fixed_reset_times[i] < 0.0 and self.is_on_time(t):
                self.values -= self._sign * args.fixed_coupons[i]

        for i, t in enumerate(self.floating_pay_times):
            if t >= 0.0 and self.floating_reset_times[i] < 0.0 and self.is_on_time(t):
                amount = args.floating_coupons[i]
                if amount is None:
                    raise MissingFixingError(
                        f"floating coupon {i} reset on {args.floating_reset_dates[i]} "
                        f"(fixing date {args.floating_fixing_dates[i]}) has no fixing"
                    )
                self.values += self._sign * amount

    def _add_resetting_coupons(self, adjustment: CouponAdjustment) -> None:
        for i, t in enumerate(self.fixed_reset_times):
            if (
                t >= 0.0
                and self.fixed_coupon_adjustments[i] is adjustment
                and self.is_on_time(t)
            ):
                self._add_fixed_coupon(i)

        for i, t in enumerate(self.floating_reset_times):
            if (
                t >= 0.0
                and self.floating_coupon_adjustments[i] is adjustment
                and self.is_on_time(t)
            ):
                self._add_floating_coupon(i)

    # ------------------------------------------------------------------
    # coupons
    # ------------------------------------------------------------------

    def _discount_bond_values(self, pay_time: float) -> np.ndarray:
        bond = DiscretizedDiscountBond()
        bond.initialize(self.lattice, pay_time)
        bond.rollback(self.time)
        return bond.values

    def _add_fixed_coupon(self, i: int) -> None:
        discount = self._discount_bond_values(self.fixed_pay_times[i])
        self.values -= self._sign * self.arguments.fixed_coupons[i] * discount

    def _add_floating_coupon(self, i: int) -> None:
        start = self.index_start_times[i]
        if not close_enough(start, self.time):
            raise LatticeMismatchError(
                f"floating coupon {i}: index start t={start:.10f} is not on the "
                f"current step t={self.time:.10f}"
            )

        discount = self._discount_bond_values(self.floating_pay_times[i])

        index_bond = DiscretizedDiscountBond()
        index_bond.initialize(self.forward_lattice, self.index_end_times[i])
        index_bond.rollback(start)

        if len(index_bond.values) != len(self.values):
            raise LatticeMismatchError(
                f"floating coupon {i}: forward lattice has {len(index_bond.values)} nodes "
                f"at t={start:.10f}, discount lattice has {len(self.values)}"
            )

        args = self.arguments
        nominal = args.nominal
        accrual = args.floating_accrual_times[i]
        spanning = args.fixing_spanning_times[i]

        forward = (1.0 / index_bond.values - 1.0) / spanning
        amount = nominal * accrual * (forward + args.floating_spreads[i])
        self.values += self._sign * amount * discount
