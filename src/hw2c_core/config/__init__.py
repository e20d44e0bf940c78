"""
Configuration loading for hw2c_core.
"""

from .loader import (
    AppConfig,
    CalibrationConfig,
    CurveSpec,
    CurvesConfig,
    EngineConfig,
    ModelConfig,
)

__all__ = [
    "AppConfig",
    "CalibrationConfig",
    "CurveSpec",
    "CurvesConfig",
    "EngineConfig",
    "ModelConfig",
]
