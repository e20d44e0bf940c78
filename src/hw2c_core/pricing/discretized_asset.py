# src/hw2c_core/pricing/discretized_asset.py

from __future__ import annotations

import math
from enum import Enum
from typing import List, Optional

import numpy as np

from hw2c_core.curves.short_rate_lattice import ShortRateLattice
from hw2c_core.curves.time_grid import close_enough


class CouponAdjustment(Enum):
    """When a coupon enters the asset value relative to exercise at its reset step."""

    PRE = "PRE"     # before the exercise decision
    POST = "POST"   # after the exercise decision


class DiscretizedAsset:
    """
    Node values of an asset living on a lattice.

    The lattice drives backward induction: it steps `values` back one
    time step at a time and calls `adjust_values()` on every step it
    lands on. Subclasses hook into `pre_adjust_values_impl` and
    `post_adjust_values_impl`; each adjustment runs at most once per
    time step.
    """

    def __init__(self) -> None:
        self.time: float = 0.0
        self.values: np.ndarray = np.zeros(0)
        self._lattice: Optional[ShortRateLattice] = None
        self._latest_pre_adjustment = math.inf
        self._latest_post_adjustment = math.inf

    @property
    def lattice(self) -> ShortRateLattice:
        if self._lattice is None:
            raise ValueError(f"{type(self).__name__} is not attached to a lattice")
        return self._lattice

    def mandatory_times(self) -> List[float]:
        raise NotImplementedError

    def reset(self, size: int) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # lattice interaction
    # ------------------------------------------------------------------

    def initialize(self, lattice: ShortRateLattice, t: float) -> None:
        self._lattice = lattice
        self._latest_pre_adjustment = math.inf
        self._latest_post_adjustment = math.inf
        lattice.initialize(self, t)

    def rollback(self, to: float) -> None:
        self.lattice.rollback(self, to)

    def partial_rollback(self, to: float) -> None:
        self.lattice.partial_rollback(self, to)

    def present_value(self) -> float:
        return self.lattice.present_value(self)

    # ------------------------------------------------------------------
    # adjustments
    # ------------------------------------------------------------------

    def pre_adjust_values(self) -> None:
        if not close_enough(self.time, self._latest_pre_adjustment):
            self.pre_adjust_values_impl()
            self._latest_pre_adjustment = self.time

    def post_adjust_values(self) -> None:
        if not close_enough(self.time, self._latest_post_adjustment):
            self.post_adjust_values_impl()
            self._latest_post_adjustment = self.time

    def adjust_values(self) -> None:
        self.pre_adjust_values()
        self.post_adjust_values()

    def pre_adjust_values_impl(self) -> None:
        pass

    def post_adjust_values_impl(self) -> None:
        pass

    def is_on_time(self, t: float) -> bool:
        """True if the grid node closest to `t` is the asset's current time."""
        grid = self.lattice.time_grid
        return close_enough(grid[grid.index(t)], self.time)


class DiscretizedDiscountBond(DiscretizedAsset):
    """Unit zero-coupon bond: 1.0 at every node of its maturity step."""

    def mandatory_times(self) -> List[float]:
        return []

    def reset(self, size: int) -> None:
        self.values = np.ones(size)


class LatticePairAsset(DiscretizedAsset):
    """
    Asset valued on the discount lattice that also reads a forward lattice.

    Both lattices must share grid and node layout; values computed on one
    are combined node by node with values from the other.
    """

    def __init__(self) -> None:
        super().__init__()
        self._forward_lattice: Optional[ShortRateLattice] = None

    @property
    def forward_lattice(self) -> ShortRateLattice:
        if self._forward_lattice is None:
            raise ValueError(f"{type(self).__name__} has no forward lattice")
        return self._forward_lattice

    def initialize(  # type: ignore[override]
        self,
        discount_lattice: ShortRateLattice,
        forward_lattice: ShortRateLattice,
        t: float,
    ) -> None:
        discount_lattice.check_compatible(forward_lattice)
        # reset() may already need the forward lattice
        self._forward_lattice = forward_lattice
        super().initialize(discount_lattice, t)
