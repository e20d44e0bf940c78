# tests/test_swap_tree_engine.py

from __future__ import annotations

from datetime import date, timedelta

import pytest

from hw2c_core.curves import ACT_360, HW2CModel, TimeGrid, add_months, adjust, is_business_day
from hw2c_core.errors import MissingFixingError, NoModelError
from hw2c_core.model import SwapType, euribor, make_vanilla_swap
from hw2c_core.pricing import (
    CouponAdjustment,
    DiscountingSwapEngine,
    HW2CDiscretizedSwap,
    HW2CTreeSwapEngine,
)

# relative to nominal
AT_PAR_TOLERANCE = 1e-14
INDEXED_TOLERANCE = 1e-5


def _npvs(swap, model, discount_curve, forward_curve, time_steps=40):
    swap.set_pricing_engine(DiscountingSwapEngine(discount_curve, forward_curve))
    discounting_npv = swap.npv()
    swap.set_pricing_engine(HW2CTreeSwapEngine(model, time_steps))
    tree_npv = swap.npv()
    return discounting_npv, tree_npv


def test_ten_year_payer_against_discounting(model, discount_curve, forward_curve, euribor3m, nominal, asof_date):
    swap = make_vanilla_swap("10Y", euribor3m, 0.04, asof_date, nominal=nominal)
    assert swap.start_date == date(2022, 11, 17)
    assert swap.maturity_date == date(2032, 11, 17)

    discounting_npv, tree_npv = _npvs(swap, model, discount_curve, forward_curve)
    # paying 4% against a 3% projection
    assert discounting_npv < 0.0
    assert tree_npv == pytest.approx(discounting_npv, abs=AT_PAR_TOLERANCE * nominal)


@pytest.mark.parametrize("index_tenor", ["3M", "6M", "1Y"])
@pytest.mark.parametrize("swap_tenor", ["2Y", "5Y", "10Y"])
@pytest.mark.parametrize("at_par", [True, False])
def test_tree_matches_discounting(
    index_tenor, swap_tenor, at_par, model, discount_curve, forward_curve, nominal, asof_date
):
    index = euribor(index_tenor, forward_curve)
    swap = make_vanilla_swap(
        swap_tenor, index, 0.04, asof_date, nominal=nominal, use_at_par_coupons=at_par
    )
    discounting_npv, tree_npv = _npvs(swap, model, discount_curve, forward_curve)
    tolerance = AT_PAR_TOLERANCE if at_par else INDEXED_TOLERANCE
    assert abs(tree_npv - discounting_npv) <= tolerance * nominal


def test_indexed_coupons_stay_close_as_the_grid_refines(model, discount_curve, forward_curve, nominal, asof_date):
    index = euribor("1Y", forward_curve)
    swap = make_vanilla_swap("10Y", index, 0.04, asof_date, nominal=nominal, use_at_par_coupons=False)
    swap.set_pricing_engine(DiscountingSwapEngine(discount_curve, forward_curve))
    discounting_npv = swap.npv()

    tree_npvs = []
    for steps in (40, 80, 160, 320):
        swap.set_pricing_engine(HW2CTreeSwapEngine(model, steps))
        tree_npvs.append(swap.npv())

    errors = [abs(v - discounting_npv) for v in tree_npvs]
    assert max(errors) <= INDEXED_TOLERANCE * nominal
    # refining the grid further barely moves the price
    assert abs(tree_npvs[-1] - tree_npvs[-2]) <= INDEXED_TOLERANCE * nominal / 10


def test_single_curve_model(discount_curve, nominal, asof_date):
    model = HW2CModel(discount_curve, discount_curve)
    index = euribor("6M", discount_curve)
    swap = make_vanilla_swap("5Y", index, 0.05, asof_date, nominal=nominal)
    discounting_npv, tree_npv = _npvs(swap, model, discount_curve, discount_curve)
    assert tree_npv == pytest.approx(discounting_npv, abs=AT_PAR_TOLERANCE * nominal)


def test_receiver_is_the_negative_payer(model, euribor6m, nominal, asof_date):
    engine = HW2CTreeSwapEngine(model, 40)
    payer = make_vanilla_swap("5Y", euribor6m, 0.04, asof_date, nominal=nominal)
    receiver = make_vanilla_swap(
        "5Y", euribor6m, 0.04, asof_date, nominal=nominal, swap_type=SwapType.RECEIVER
    )
    payer.set_pricing_engine(engine)
    receiver.set_pricing_engine(engine)
    assert receiver.npv() == pytest.approx(-payer.npv(), abs=1e-10)


def test_fair_rate_zeroes_the_tree_npv(model, discount_curve, forward_curve, euribor6m, nominal, asof_date):
    template = make_vanilla_swap("5Y", euribor6m, 0.0, asof_date, nominal=nominal)
    fair = DiscountingSwapEngine(discount_curve, forward_curve).fair_rate(template.arguments())
    swap = make_vanilla_swap("5Y", euribor6m, fair, asof_date, nominal=nominal)
    swap.set_pricing_engine(HW2CTreeSwapEngine(model, 40))
    assert swap.npv() == pytest.approx(0.0, abs=AT_PAR_TOLERANCE * nominal)


def _seasoned_swap(index, asof_date, nominal, with_fixings):
    effective = adjust(add_months(asof_date, -16))
    if with_fixings:
        d = add_months(effective, -1)
        while d <= asof_date:
            if is_business_day(d):
                index.add_fixing(d, 0.05)
            d += timedelta(days=1)
    return make_vanilla_swap(
        "5Y", index, 0.04, asof_date, nominal=nominal, effective_date=effective
    )


def test_seasoned_swap_pays_known_fixings(model, discount_curve, forward_curve, nominal, asof_date):
    index = euribor("6M", forward_curve)
    swap = _seasoned_swap(index, asof_date, nominal, with_fixings=True)
    args = swap.arguments()
    assert args.floating_reset_dates[0] < asof_date
    assert all(a is not None for a, r in zip(args.floating_coupons, args.floating_fixing_dates) if r <= asof_date)

    discounting_npv, tree_npv = _npvs(swap, model, discount_curve, forward_curve)
    assert tree_npv == pytest.approx(discounting_npv, abs=AT_PAR_TOLERANCE * nominal)


def test_seasoned_swap_without_fixings_fails(model, discount_curve, forward_curve, nominal, asof_date):
    index = euribor("6M", forward_curve)
    swap = _seasoned_swap(index, asof_date, nominal, with_fixings=False)

    swap.set_pricing_engine(HW2CTreeSwapEngine(model, 40))
    with pytest.raises(MissingFixingError):
        swap.npv()

    swap.set_pricing_engine(DiscountingSwapEngine(discount_curve, forward_curve))
    with pytest.raises(MissingFixingError):
        swap.npv()


def test_matured_swap_is_worth_nothing(model, euribor3m, nominal, asof_date):
    swap = make_vanilla_swap(
        "1Y", euribor3m, 0.04, asof_date, nominal=nominal, effective_date=date(2020, 6, 15)
    )
    swap.set_pricing_engine(HW2CTreeSwapEngine(model, 40))
    assert swap.npv() == 0.0


def test_engine_needs_a_model(euribor3m, nominal, asof_date):
    swap = make_vanilla_swap("2Y", euribor3m, 0.04, asof_date, nominal=nominal)
    with pytest.raises(ValueError):
        swap.npv()

    swap.set_pricing_engine(HW2CTreeSwapEngine(None, 40))
    with pytest.raises(NoModelError):
        swap.npv()


def test_post_flagged_coupons_price_like_pre(model, euribor6m, nominal, asof_date):
    swap = make_vanilla_swap("5Y", euribor6m, 0.04, asof_date, nominal=nominal)
    args = swap.arguments()

    def tree_value(fixed_adj=None, float_adj=None):
        asset = HW2CDiscretizedSwap(
            args, asof_date, ACT_360,
            fixed_coupon_adjustments=fixed_adj,
            floating_coupon_adjustments=float_adj,
        )
        grid = TimeGrid(asset.mandatory_times(), 40)
        asset.initialize(model.discount_tree(grid), model.forward_tree(grid), grid.last)
        asset.rollback(0.0)
        return asset.present_value()

    post_fixed = [CouponAdjustment.POST] * len(args.fixed_pay_dates)
    post_float = [CouponAdjustment.POST] * len(args.floating_pay_dates)
    assert tree_value(post_fixed, post_float) == pytest.approx(tree_value(), abs=1e-10)

    with pytest.raises(ValueError):
        HW2CDiscretizedSwap(args, asof_date, ACT_360, fixed_coupon_adjustments=post_fixed[:-1])
