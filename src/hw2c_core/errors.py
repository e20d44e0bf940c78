# src/hw2c_core/errors.py

from __future__ import annotations


class HW2CError(Exception):
    """Base class for every failure raised by hw2c_core."""


class CurveMismatchError(HW2CError, ValueError):
    """Discount and forward curves disagree on reference date or day counter."""


class NoModelError(HW2CError, ValueError):
    """A tree engine was asked to price without a model attached."""


class UnsupportedSettlementError(HW2CError, ValueError):
    """Cash settlement against the par yield curve cannot be priced on the tree."""


class InadequateTimeGridError(HW2CError, ValueError):
    """A time needed by the rollback is not a node of the time grid."""


class LatticeMismatchError(HW2CError, ValueError):
    """Two lattices (or two steps) that must share nodes do not."""


class MissingFixingError(HW2CError, ValueError):
    """A floating coupon that already reset has no fixing to pay on."""


class DidNotConvergeError(HW2CError, RuntimeError):
    """
    Calibration stopped before meeting its end criteria.

    The last optimizer state is attached as `result` so callers can decide
    whether to restart from different initial parameters.
    """

    def __init__(self, message: str, result=None) -> None:
        super().__init__(message)
        self.result = result
