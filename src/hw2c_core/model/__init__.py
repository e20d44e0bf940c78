"""
Instrument definitions for hw2c_core: index, schedules, swaps, swaptions.
"""

from .index import IborIndex, euribor
from .schedule import Schedule, make_schedule
from .swap import (
    FixedRateCoupon,
    IborCoupon,
    SwapArguments,
    SwapType,
    VanillaSwap,
    make_vanilla_swap,
)
from .swaption import (
    SettlementMethod,
    SettlementType,
    Swaption,
    SwaptionArguments,
    make_swaption,
)

__all__ = [
    "IborIndex",
    "euribor",
    "Schedule",
    "make_schedule",
    "FixedRateCoupon",
    "IborCoupon",
    "SwapArguments",
    "SwapType",
    "VanillaSwap",
    "make_vanilla_swap",
    "SettlementMethod",
    "SettlementType",
    "Swaption",
    "SwaptionArguments",
    "make_swaption",
]
