"""
hw2c_core: dual-curve Hull-White lattice pricing for swaps and swaptions.
"""

from .errors import (
    CurveMismatchError,
    DidNotConvergeError,
    HW2CError,
    InadequateTimeGridError,
    LatticeMismatchError,
    MissingFixingError,
    NoModelError,
    UnsupportedSettlementError,
)
from .curves import FlatForward, HW2CModel, TimeGrid, ZeroCurve
from .model import (
    IborIndex,
    Swaption,
    SwapType,
    VanillaSwap,
    euribor,
    make_swaption,
    make_vanilla_swap,
)
from .pricing import (
    BlackSwaptionEngine,
    DiscountingSwapEngine,
    HW2CTreeSwapEngine,
    HW2CTreeSwaptionEngine,
)
from .calibration import EndCriteria, SwaptionHelper, calibrate_hw2c_model

__all__ = [
    "CurveMismatchError",
    "DidNotConvergeError",
    "HW2CError",
    "InadequateTimeGridError",
    "LatticeMismatchError",
    "MissingFixingError",
    "NoModelError",
    "UnsupportedSettlementError",
    "FlatForward",
    "HW2CModel",
    "TimeGrid",
    "ZeroCurve",
    "IborIndex",
    "Swaption",
    "SwapType",
    "VanillaSwap",
    "euribor",
    "make_swaption",
    "make_vanilla_swap",
    "BlackSwaptionEngine",
    "DiscountingSwapEngine",
    "HW2CTreeSwapEngine",
    "HW2CTreeSwaptionEngine",
    "EndCriteria",
    "SwaptionHelper",
    "calibrate_hw2c_model",
]
