# src/hw2c_core/curves/short_rate_lattice.py

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from hw2c_core.errors import LatticeMismatchError
from .time_grid import TimeGrid, close_enough
from .types import YieldTermStructure

logger = logging.getLogger(__name__)

_SQRT3 = math.sqrt(3.0)


def _ou_variance(a: float, sigma: float, dt: float) -> float:
    """Variance of x(t+dt) given x(t) for dx = -a x dt + sigma dW."""
    if a < math.sqrt(np.finfo(float).eps):
        return sigma * sigma * dt
    return 0.5 * sigma * sigma / a * (1.0 - math.exp(-2.0 * a * dt))


class ShortRateLattice:
    """
    Recombining trinomial Hull-White lattice fitted to one yield curve.

    The state variable x follows the zero-mean Ornstein-Uhlenbeck process
    dx = -a x dt + sigma dW and the short rate at step i is
    r(i, j) = x(i, j) + alpha(i). alpha is solved step by step from the
    Arrow-Debreu state prices so that the lattice reprices every discount
    bond P(0, t_i) of the curve on the grid nodes.

    Construction at step i (node index j, x = j * dx_i):
      - dx_{i+1} = sqrt(3 * V_i), V_i the conditional variance over dt_i
      - m = x * exp(-a dt_i), k = round(m / dx_{i+1})
      - e = m - k dx_{i+1} and the usual branch probabilities

            p_down = 1/6 + e^2/(6V) - e sqrt(3)/(6 sqrt(V))
            p_mid  = 2/3 - e^2/(3V)
            p_up   = 1/6 + e^2/(6V) + e sqrt(3)/(6 sqrt(V))

    Instances are never mutated after construction; a new parameter set
    or curve means a new lattice.
    """

    def __init__(
        self,
        time_grid: TimeGrid,
        a: float,
        sigma: float,
        term_structure: YieldTermStructure,
    ) -> None:
        if a <= 0.0:
            raise ValueError(f"Hull-White mean reversion 'a' must be > 0, got {a}.")
        if sigma <= 0.0:
            raise ValueError(f"Hull-White sigma must be > 0, got {sigma}.")

        self.time_grid = time_grid
        self.a = float(a)
        self.sigma = float(sigma)
        self.term_structure = term_structure

        times = time_grid.times
        n_steps = len(times) - 1

        self._dx: List[float] = [0.0]
        self._j_min: List[int] = [0]
        self._x: List[np.ndarray] = [np.zeros(1)]
        self._offsets: List[np.ndarray] = []
        self._probs: List[np.ndarray] = []
        self._alpha = np.zeros(n_steps)
        self._discounts: List[np.ndarray] = []
        self._state_prices: List[np.ndarray] = [np.ones(1)]

        j = np.zeros(1, dtype=int)
        for i in range(n_steps):
            dt = times[i + 1] - times[i]
            v2 = _ou_variance(self.a, self.sigma, dt)
            v = math.sqrt(v2)
            dx_next = v * _SQRT3

            x = self._x[i]
            m = x * math.exp(-self.a * dt)
            k = np.floor(m / dx_next + 0.5).astype(int)
            e = m - k * dx_next
            e2 = e * e / v2
            e3 = e * _SQRT3 / v
            probs = np.vstack(
                (
                    (1.0 + e2 - e3) / 6.0,
                    (2.0 - e2) / 3.0,
                    (1.0 + e2 + e3) / 6.0,
                )
            )

            j_min_next = int(k.min()) - 1
            j_max_next = int(k.max()) + 1
            # index of the down branch in the next level's node array
            offsets = k - 1 - j_min_next

            # fit alpha(t_i) to P(0, t_{i+1})
            q = self._state_prices[i]
            target = term_structure.discount(times[i + 1])
            value = float(np.dot(q, np.exp(-x * dt)))
            alpha_i = math.log(value / target) / dt
            discounts = np.exp(-(x + alpha_i) * dt)

            q_next = np.zeros(j_max_next - j_min_next + 1)
            weighted = q * discounts
            for branch in range(3):
                np.add.at(q_next, offsets + branch, weighted * probs[branch])

            j = np.arange(j_min_next, j_max_next + 1)

            self._alpha[i] = alpha_i
            self._offsets.append(offsets)
            self._probs.append(probs)
            self._discounts.append(discounts)
            self._state_prices.append(q_next)
            self._dx.append(dx_next)
            self._j_min.append(j_min_next)
            self._x.append(j * dx_next)

        logger.debug(
            "Built HW lattice: a=%.6f sigma=%.6f steps=%d max_nodes=%d",
            self.a,
            self.sigma,
            n_steps,
            max(len(x) for x in self._x),
        )

    # ------------------------------------------------------------------
    # node data
    # ------------------------------------------------------------------

    @property
    def n_steps(self) -> int:
        return len(self.time_grid) - 1

    def size(self, i: int) -> int:
        return len(self._x[i])

    def underlying(self, i: int) -> np.ndarray:
        return self._x[i]

    def alpha(self, i: int) -> float:
        return float(self._alpha[i])

    def short_rates(self, i: int) -> np.ndarray:
        """Short rate r(i, j) at every node of step i (i < n_steps)."""
        return self._x[i] + self._alpha[i]

    def discount(self, i: int) -> np.ndarray:
        """One-step discount factors exp(-r(i, j) dt_i)."""
        return self._discounts[i]

    def probabilities(self, i: int) -> np.ndarray:
        """Array of shape (3, size(i)): down, middle, up branch probabilities."""
        return self._probs[i]

    def descendants(self, i: int) -> np.ndarray:
        """Index in step i+1 of the down branch of every node of step i."""
        return self._offsets[i]

    def state_prices(self, i: int) -> np.ndarray:
        return self._state_prices[i]

    # ------------------------------------------------------------------
    # backward induction
    # ------------------------------------------------------------------

    def stepback(self, i: int, values: np.ndarray) -> np.ndarray:
        """Discounted expectation at step i of node values living on step i+1."""
        if len(values) != self.size(i + 1):
            raise LatticeMismatchError(
                f"step {i + 1} has {self.size(i + 1)} nodes, got {len(values)} values"
            )
        off = self._offsets[i]
        p = self._probs[i]
        cont = p[0] * values[off] + p[1] * values[off + 1] + p[2] * values[off + 2]
        return cont * self._discounts[i]

    def initialize(self, asset, t: float) -> None:
        i = self.time_grid.index(t)
        asset.time = t
        asset.reset(self.size(i))

    def partial_rollback(self, asset, to: float) -> None:
        """
        Roll the asset back to `to`, adjusting values at every intermediate
        step but not at `to` itself.
        """
        from_t = asset.time
        if close_enough(from_t, to):
            return

        i_from = self.time_grid.index(from_t)
        i_to = self.time_grid.index(to)
        if i_to > i_from:
            raise ValueError(
                f"cannot roll an asset forward in time (from t={from_t} to t={to})"
            )

        for i in range(i_from - 1, i_to - 1, -1):
            asset.values = self.stepback(i, asset.values)
            asset.time = self.time_grid[i]
            if i != i_to:
                asset.adjust_values()

    def rollback(self, asset, to: float) -> None:
        self.partial_rollback(asset, to)
        asset.adjust_values()

    def present_value(self, asset) -> float:
        i = self.time_grid.index(asset.time)
        return float(np.dot(asset.values, self._state_prices[i]))

    # ------------------------------------------------------------------
    # compatibility between the two curves' lattices
    # ------------------------------------------------------------------

    def check_compatible(self, other: "ShortRateLattice") -> None:
        """
        Raise LatticeMismatchError unless `other` shares this lattice's time
        grid and node layout, i.e. node j of step i means the same state on
        both lattices.
        """
        if self.time_grid.times != other.time_grid.times:
            raise LatticeMismatchError("lattices were built on different time grids")
        if self._j_min != other._j_min or any(
            self.size(i) != other.size(i) for i in range(len(self.time_grid))
        ):
            raise LatticeMismatchError(
                "lattices do not share the same node layout; "
                "were they built with different (a, sigma)?"
            )

    # ------------------------------------------------------------------
    # inspection
    # ------------------------------------------------------------------

    def to_dataframe(self) -> pd.DataFrame:
        """
        Long table of the lattice.

        Columns:
            step, t_yrs, j, x, r_short, state_price, p_down, p_mid, p_up
        (short rate and probabilities are NaN on the last step).
        """
        records: List[dict] = []
        for i in range(len(self.time_grid)):
            t_i = self.time_grid[i]
            last = i == self.n_steps
            for idx in range(self.size(i)):
                records.append(
                    {
                        "step": i,
                        "t_yrs": t_i,
                        "j": self._j_min[i] + idx,
                        "x": float(self._x[i][idx]),
                        "r_short": np.nan if last else float(self._x[i][idx] + self._alpha[i]),
                        "state_price": float(self._state_prices[i][idx]),
                        "p_down": np.nan if last else float(self._probs[i][0][idx]),
                        "p_mid": np.nan if last else float(self._probs[i][1][idx]),
                        "p_up": np.nan if last else float(self._probs[i][2][idx]),
                    }
                )
        return pd.DataFrame.from_records(records)


def export_lattice_pair(
    discount_lattice: ShortRateLattice,
    forward_lattice: ShortRateLattice,
    out_dir: Path,
    tag: Optional[str] = None,
) -> dict:
    """
    Export both lattices of a dual-curve model for inspection:

      - hw2c_lattice_discount_<tag>.parquet
      - hw2c_lattice_forward_<tag>.parquet
      - hw2c_lattice_<tag>.xlsx  (DISCOUNT and FORWARD sheets)

    Returns a dict of the written paths.
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    safe_tag = (tag or "lattice").replace(" ", "_")
    disc_df = discount_lattice.to_dataframe()
    fwd_df = forward_lattice.to_dataframe()

    disc_parquet = out_dir / f"hw2c_lattice_discount_{safe_tag}.parquet"
    fwd_parquet = out_dir / f"hw2c_lattice_forward_{safe_tag}.parquet"
    xlsx_path = out_dir / f"hw2c_lattice_{safe_tag}.xlsx"

    disc_df.to_parquet(disc_parquet)
    fwd_df.to_parquet(fwd_parquet)

    with pd.ExcelWriter(xlsx_path, engine="openpyxl") as writer:
        disc_df.to_excel(writer, sheet_name="DISCOUNT", index=False)
        fwd_df.to_excel(writer, sheet_name="FORWARD", index=False)

    print(
        f"[OK] Exported HW2C lattices ({safe_tag}) to\n"
        f"      {disc_parquet}\n"
        f"      {fwd_parquet}\n"
        f"      {xlsx_path}"
    )
    return {"discount": disc_parquet, "forward": fwd_parquet, "xlsx": xlsx_path}
