# src/hw2c_core/curves/short_rate.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .short_rate_lattice import ShortRateLattice
from .time_grid import TimeGrid
from .types import YieldTermStructure


@dataclass(frozen=True)
class HullWhite1FParams:
    """
    Container for 1-factor Hull-White parameters.

        dr(t) = [theta(t) - a * r(t)] dt + sigma dW(t)

    theta(t) is not stored: the lattice fits it to the curve numerically.
    """

    a: float              # mean reversion speed
    sigma: float          # short-rate volatility

    def __post_init__(self) -> None:
        if not self.a > 0.0:
            raise ValueError(f"HullWhite1FParams: a must be positive, got {self.a}")
        if not self.sigma > 0.0:
            raise ValueError(f"HullWhite1FParams: sigma must be positive, got {self.sigma}")

    def as_tuple(self) -> Tuple[float, float]:
        return (self.a, self.sigma)


class HullWhite:
    """
    Single-curve Hull-White model: one term structure plus (a, sigma).

    It only knows how to hand out lattices fitted to its own curve; the
    dual-curve model holds two of these.
    """

    def __init__(
        self,
        term_structure: YieldTermStructure,
        a: float = 0.1,
        sigma: float = 0.01,
    ) -> None:
        self.term_structure = term_structure
        self.params = HullWhite1FParams(float(a), float(sigma))

    @property
    def a(self) -> float:
        return self.params.a

    @property
    def sigma(self) -> float:
        return self.params.sigma

    def tree(self, grid: TimeGrid) -> ShortRateLattice:
        """Fresh lattice on `grid`, fitted to this model's curve."""
        return ShortRateLattice(grid, self.a, self.sigma, self.term_structure)
