# src/hw2c_core/curves/hw2c_model.py

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from hw2c_core.errors import CurveMismatchError
from .short_rate import HullWhite, HullWhite1FParams
from .short_rate_lattice import ShortRateLattice, export_lattice_pair
from .time_grid import TimeGrid
from .types import YieldTermStructure

logger = logging.getLogger(__name__)


def check_curve_pair(
    discount_curve: YieldTermStructure,
    forward_curve: YieldTermStructure,
) -> None:
    """Raise CurveMismatchError unless both curves measure time identically."""
    if discount_curve.reference_date != forward_curve.reference_date:
        raise CurveMismatchError(
            "The reference date of discount and forward curve do not match: "
            f"{discount_curve.reference_date} vs {forward_curve.reference_date}."
        )
    if discount_curve.day_counter != forward_curve.day_counter:
        raise CurveMismatchError(
            "The day counter of discount and forward curve do not match: "
            f"{discount_curve.day_counter} vs {forward_curve.day_counter}."
        )


class HW2CModel:
    """
    Hull-White model with two curves.

    One Hull-White model is fitted to the discount curve, another one to
    the forward (projection) curve; both share the same (a, sigma). The
    parameter vector [a, sigma] lives here. Every change bumps
    `params_version`; the two internal models remember the version they
    were built from and are rebuilt on the next tree request when stale.

    Lattices handed out by `discount_tree` / `forward_tree` for the same
    grid share their node layout, so values can be combined node by node.
    """

    n_params = 2

    def __init__(
        self,
        discount_curve: YieldTermStructure,
        forward_curve: YieldTermStructure,
        a: float = 0.1,
        sigma: float = 0.01,
    ) -> None:
        check_curve_pair(discount_curve, forward_curve)

        self.discount_curve = discount_curve
        self.forward_curve = forward_curve

        self._lock = threading.Lock()
        self._params = HullWhite1FParams(float(a), float(sigma))
        self._params_version = 0

        self._discount_model: Optional[HullWhite] = None
        self._forward_model: Optional[HullWhite] = None
        self._built_version = -1

    # ------------------------------------------------------------------
    # parameters
    # ------------------------------------------------------------------

    @property
    def params(self) -> np.ndarray:
        return np.array(self._params.as_tuple(), dtype=float)

    @property
    def a(self) -> float:
        return self._params.a

    @property
    def sigma(self) -> float:
        return self._params.sigma

    @property
    def params_version(self) -> int:
        return self._params_version

    def set_params(self, values: Sequence[float]) -> None:
        """Replace [a, sigma]; both internal models go stale."""
        if len(values) != self.n_params:
            raise ValueError(f"expected {self.n_params} parameters, got {len(values)}")
        new_params = HullWhite1FParams(float(values[0]), float(values[1]))
        with self._lock:
            self._params = new_params
            self._params_version += 1

    # ------------------------------------------------------------------
    # internal single-curve models
    # ------------------------------------------------------------------

    def _ensure_models(self) -> None:
        with self._lock:
            if self._built_version == self._params_version:
                return
            a, sigma = self._params.as_tuple()
            self._discount_model = HullWhite(self.discount_curve, a, sigma)
            self._forward_model = HullWhite(self.forward_curve, a, sigma)
            self._built_version = self._params_version
            logger.debug(
                "Regenerated HW2C sub-models: a=%.6f sigma=%.6f version=%d",
                a,
                sigma,
                self._built_version,
            )

    @property
    def discount_model(self) -> HullWhite:
        self._ensure_models()
        return self._discount_model

    @property
    def forward_model(self) -> HullWhite:
        self._ensure_models()
        return self._forward_model

    def discount_tree(self, grid: TimeGrid) -> ShortRateLattice:
        return self.discount_model.tree(grid)

    def forward_tree(self, grid: TimeGrid) -> ShortRateLattice:
        return self.forward_model.tree(grid)

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def snapshot(self) -> "HW2CModel":
        """Independent copy with the current parameters (for parallel pricing)."""
        return HW2CModel(self.discount_curve, self.forward_curve, self.a, self.sigma)

    def export_lattices(self, grid: TimeGrid, out_dir: Path, tag: Optional[str] = None) -> dict:
        return export_lattice_pair(
            self.discount_tree(grid),
            self.forward_tree(grid),
            out_dir=out_dir,
            tag=tag,
        )

    def __repr__(self) -> str:
        return (
            f"HW2CModel(a={self.a:.6f}, sigma={self.sigma:.6f}, "
            f"version={self._params_version})"
        )
