"""
Calibration of the dual-curve Hull-White model to swaption quotes.
"""

from .swaption_helper import CalibrationErrorType, SwaptionHelper
from .calibrate import (
    CalibrationResult,
    EndCriteria,
    calibrate_hw2c_model,
    resolve_fixed_parameters,
)

__all__ = [
    "CalibrationErrorType",
    "SwaptionHelper",
    "CalibrationResult",
    "EndCriteria",
    "calibrate_hw2c_model",
    "resolve_fixed_parameters",
]
