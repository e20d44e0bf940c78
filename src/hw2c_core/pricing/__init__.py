"""
Pricing engines for hw2c_core: lattice assets, tree engines, analytic benchmarks.
"""

from .discretized_asset import (
    CouponAdjustment,
    DiscretizedAsset,
    DiscretizedDiscountBond,
    LatticePairAsset,
)
from .discretized_swap import HW2CDiscretizedSwap
from .discretized_swaption import HW2CDiscretizedSwaption
from .tree_engines import HW2CTreeSwapEngine, HW2CTreeSwaptionEngine
from .discounting import DiscountingSwapEngine, SwapLegValues
from .black import (
    BlackSwaptionEngine,
    VolatilityType,
    bachelier_formula,
    black_formula,
)

__all__ = [
    "CouponAdjustment",
    "DiscretizedAsset",
    "DiscretizedDiscountBond",
    "LatticePairAsset",
    "HW2CDiscretizedSwap",
    "HW2CDiscretizedSwaption",
    "HW2CTreeSwapEngine",
    "HW2CTreeSwaptionEngine",
    "DiscountingSwapEngine",
    "SwapLegValues",
    "BlackSwaptionEngine",
    "VolatilityType",
    "bachelier_formula",
    "black_formula",
]
