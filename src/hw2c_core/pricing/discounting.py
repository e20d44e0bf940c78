# src/hw2c_core/pricing/discounting.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pandas as pd

from hw2c_core.curves.types import YieldTermStructure
from hw2c_core.errors import MissingFixingError
from hw2c_core.model.swap import SwapArguments

logger = logging.getLogger(__name__)


@dataclass
class SwapLegValues:
    """Unsigned present values of both legs plus the fixed-leg annuity."""

    fixed_leg_npv: float
    floating_leg_npv: float
    annuity: float          # sum of nominal * accrual * P(0, pay) on the fixed leg


class DiscountingSwapEngine:
    """
    Analytic swap valuation: coupons discounted on `discount_curve`,
    floating rates forecast on `forward_curve`.

    Coupons paid on or after the reference date are included. A floating
    coupon that reset before the reference date pays its known amount;
    later ones pay (P_f(s)/P_f(e) - 1) / tau + spread on the accrual.
    """

    def __init__(
        self,
        discount_curve: YieldTermStructure,
        forward_curve: Optional[YieldTermStructure] = None,
    ) -> None:
        self.discount_curve = discount_curve
        self.forward_curve = forward_curve if forward_curve is not None else discount_curve

    @property
    def reference_date(self) -> date:
        return self.discount_curve.reference_date

    def leg_values(self, args: SwapArguments) -> SwapLegValues:
        ref = self.reference_date
        disc = self.discount_curve
        fwd = self.forward_curve

        fixed_npv = 0.0
        annuity = 0.0
        for i, pay in enumerate(args.fixed_pay_dates):
            if pay < ref:
                continue
            df = disc.discount(pay)
            fixed_npv += args.fixed_coupons[i] * df
            annuity += args.nominal * args.fixed_accrual_times[i] * df

        floating_npv = 0.0
        for i, pay in enumerate(args.floating_pay_dates):
            if pay < ref:
                continue
            if args.floating_reset_dates[i] < ref:
                amount = args.floating_coupons[i]
                if amount is None:
                    raise MissingFixingError(
                        f"floating coupon {i} reset on {args.floating_reset_dates[i]} "
                        f"(fixing date {args.floating_fixing_dates[i]}) has no fixing"
                    )
            else:
                p_start = fwd.discount(args.fixing_value_dates[i])
                p_end = fwd.discount(args.fixing_end_dates[i])
                rate = (p_start / p_end - 1.0) / args.fixing_spanning_times[i]
                amount = args.nominal * args.floating_accrual_times[i] * (
                    rate + args.floating_spreads[i]
                )
            floating_npv += amount * disc.discount(pay)

        return SwapLegValues(fixed_npv, floating_npv, annuity)

    def calculate(self, args: SwapArguments) -> float:
        legs = self.leg_values(args)
        npv = args.swap_type.sign * (legs.floating_leg_npv - legs.fixed_leg_npv)
        logger.debug(
            "DiscountingSwapEngine: fixed=%.6f floating=%.6f npv=%.10f",
            legs.fixed_leg_npv,
            legs.floating_leg_npv,
            npv,
        )
        return npv

    def annuity(self, args: SwapArguments) -> float:
        return self.leg_values(args).annuity

    def fair_rate(self, args: SwapArguments) -> float:
        """Fixed rate that sets the swap NPV to zero."""
        legs = self.leg_values(args)
        if legs.annuity == 0.0:
            raise ValueError("fair rate undefined: no fixed coupon left to pay")
        return args.fixed_rate + (legs.floating_leg_npv - legs.fixed_leg_npv) / legs.annuity

    def cashflow_table(self, args: SwapArguments) -> pd.DataFrame:
        """Per-coupon discount factors and present values of both legs."""
        ref = self.reference_date
        disc = self.discount_curve
        rows = []
        for i, pay in enumerate(args.fixed_pay_dates):
            df = disc.discount(pay) if pay >= ref else 0.0
            rows.append(
                {
                    "leg": "FIXED",
                    "reset_date": args.fixed_reset_dates[i],
                    "pay_date": pay,
                    "amount": args.fixed_coupons[i],
                    "discount": df,
                    "pv": args.fixed_coupons[i] * df,
                }
            )
        for i, pay in enumerate(args.floating_pay_dates):
            if pay < ref:
                amount, df = args.floating_coupons[i], 0.0
            elif args.floating_reset_dates[i] < ref:
                amount, df = args.floating_coupons[i], disc.discount(pay)
            else:
                p_start = self.forward_curve.discount(args.fixing_value_dates[i])
                p_end = self.forward_curve.discount(args.fixing_end_dates[i])
                rate = (p_start / p_end - 1.0) / args.fixing_spanning_times[i]
                amount = args.nominal * args.floating_accrual_times[i] * (
                    rate + args.floating_spreads[i]
                )
                df = disc.discount(pay)
            rows.append(
                {
                    "leg": "FLOATING",
                    "reset_date": args.floating_reset_dates[i],
                    "pay_date": pay,
                    "amount": amount,
                    "discount": df,
                    "pv": None if amount is None else amount * df,
                }
            )
        return pd.DataFrame(rows)
