# tests/test_curves_and_daycount.py

from __future__ import annotations

import math
from datetime import date

import pytest

from hw2c_core.curves import (
    ACT_360,
    ACT_365F,
    ACT_ACT,
    THIRTY_360,
    BusinessDayConvention,
    FlatForward,
    ZeroCurve,
    add_months,
    adjust,
    advance_business_days,
    get_day_counter,
    is_business_day,
    tenor_to_months,
)


# ----------------------------------------------------------------------
# Day counters
# ----------------------------------------------------------------------


def test_actual_day_counters():
    d1, d2 = date(2022, 11, 15), date(2023, 11, 15)
    assert ACT_360.year_fraction(d1, d2) == pytest.approx(365.0 / 360.0)
    assert ACT_365F.year_fraction(d1, d2) == pytest.approx(1.0)


def test_thirty_360_end_of_month():
    assert THIRTY_360.day_count(date(2022, 1, 31), date(2022, 2, 28)) == 28
    assert THIRTY_360.day_count(date(2022, 1, 30), date(2022, 3, 31)) == 60
    assert THIRTY_360.year_fraction(date(2022, 11, 17), date(2023, 11, 17)) == pytest.approx(1.0)


def test_actual_actual_isda_spans_leap_year():
    yf = ACT_ACT.year_fraction(date(2023, 7, 1), date(2024, 7, 1))
    assert yf == pytest.approx(184.0 / 365.0 + 182.0 / 366.0)
    assert ACT_ACT.year_fraction(date(2024, 7, 1), date(2023, 7, 1)) == pytest.approx(-yf)


def test_get_day_counter_aliases():
    assert get_day_counter("actual/360") is ACT_360
    assert get_day_counter(" 30/360 ") is THIRTY_360
    with pytest.raises(ValueError):
        get_day_counter("BUS/252")


# ----------------------------------------------------------------------
# Calendar helpers (weekends only)
# ----------------------------------------------------------------------


def test_business_day_adjustment():
    saturday = date(2022, 12, 31)
    assert not is_business_day(saturday)
    assert adjust(saturday, BusinessDayConvention.FOLLOWING) == date(2023, 1, 2)
    # following would leave December
    assert adjust(saturday, BusinessDayConvention.MODIFIED_FOLLOWING) == date(2022, 12, 30)
    assert adjust(saturday, BusinessDayConvention.PRECEDING) == date(2022, 12, 30)
    assert adjust(saturday, BusinessDayConvention.UNADJUSTED) == saturday


def test_advance_and_add_months():
    friday = date(2022, 11, 18)
    assert advance_business_days(friday, 2) == date(2022, 11, 22)
    assert advance_business_days(date(2022, 11, 22), -2) == friday
    assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
    assert add_months(date(2022, 11, 15), -16) == date(2021, 7, 15)


def test_tenor_to_months():
    assert tenor_to_months("3M") == 3
    assert tenor_to_months("10y") == 120
    with pytest.raises(ValueError):
        tenor_to_months("2W")


# ----------------------------------------------------------------------
# Term structures
# ----------------------------------------------------------------------


def test_flat_forward_discount(asof_date):
    curve = FlatForward(asof_date, 0.05, ACT_360)
    d = date(2023, 11, 15)
    t = 365.0 / 360.0
    assert curve.discount(d) == pytest.approx(math.exp(-0.05 * t), rel=1e-15)
    assert curve.discount(0.0) == 1.0
    assert curve.forward_rate(1.0, 2.0) == pytest.approx(0.05)


def test_zero_curve_interpolation_is_linear_and_flat_outside(asof_date):
    curve = ZeroCurve.from_pairs(asof_date, ACT_360, [(5.0, 0.031), (1.0, 0.030)])
    assert [p.tenor_years for p in curve.points] == [1.0, 5.0]
    assert curve.zero_rate(3.0) == pytest.approx(0.0305)
    assert curve.zero_rate(0.1) == pytest.approx(0.030)
    assert curve.zero_rate(30.0) == pytest.approx(0.031)

    with pytest.raises(ValueError):
        ZeroCurve(asof_date, ACT_360, [])
