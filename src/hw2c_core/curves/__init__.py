"""
Curves, time grids and Hull-White lattices for hw2c_core (hw2c-lab-core).
"""

from .daycount import (
    DayCounter,
    Actual360,
    Actual365Fixed,
    Thirty360,
    ActualActualISDA,
    ACT_360,
    ACT_365F,
    THIRTY_360,
    ACT_ACT,
    get_day_counter,
)
from .dates import (
    BusinessDayConvention,
    add_months,
    adjust,
    advance_business_days,
    is_business_day,
    tenor_to_months,
)
from .types import CurvePoint, FlatForward, YieldTermStructure, ZeroCurve
from .time_grid import TimeGrid, close_enough, time_steps_for

from .short_rate_lattice import ShortRateLattice, export_lattice_pair
from .short_rate import HullWhite, HullWhite1FParams
from .hw2c_model import HW2CModel, check_curve_pair


__all__ = [
    # day counting + calendar
    "DayCounter",
    "Actual360",
    "Actual365Fixed",
    "Thirty360",
    "ActualActualISDA",
    "ACT_360",
    "ACT_365F",
    "THIRTY_360",
    "ACT_ACT",
    "get_day_counter",
    "BusinessDayConvention",
    "add_months",
    "adjust",
    "advance_business_days",
    "is_business_day",
    "tenor_to_months",

    # term structures
    "CurvePoint",
    "FlatForward",
    "YieldTermStructure",
    "ZeroCurve",

    # grids + lattices
    "TimeGrid",
    "close_enough",
    "time_steps_for",
    "ShortRateLattice",
    "export_lattice_pair",

    # models
    "HullWhite",
    "HullWhite1FParams",
    "HW2CModel",
    "check_curve_pair",
]
