# src/hw2c_core/curves/time_grid.py

from __future__ import annotations

import bisect
import math
import sys
from typing import Iterable, List

from hw2c_core.errors import InadequateTimeGridError

_CLOSE_TOLERANCE = 42 * sys.float_info.epsilon


def close_enough(x: float, y: float) -> bool:
    """
    Relative float comparison used for every time lookup on the grid.

    Exactly equal values (including two infinities) are close; otherwise
    the tolerance is relative, and absolute (squared) when one side is 0.
    """
    if x == y:
        return True
    diff = abs(x - y)
    if x == 0.0 or y == 0.0:
        return diff < _CLOSE_TOLERANCE * _CLOSE_TOLERANCE
    return diff <= _CLOSE_TOLERANCE * abs(x) and diff <= _CLOSE_TOLERANCE * abs(y)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


class TimeGrid:
    """
    Time grid for lattice rollback.

    Every mandatory time is a node; between two mandatory times the nodes
    are evenly spaced with a step as close as possible to `last / steps`
    (at least one step per interval). The grid always starts at 0.
    """

    def __init__(self, mandatory_times: Iterable[float], steps: int = 0) -> None:
        mandatory = sorted(float(t) for t in mandatory_times)
        if not mandatory:
            raise ValueError("TimeGrid needs at least one mandatory time")
        if mandatory[0] < 0.0:
            raise ValueError(f"negative times not allowed in a time grid: {mandatory[0]}")

        unique: List[float] = [mandatory[0]]
        for t in mandatory[1:]:
            if not close_enough(t, unique[-1]):
                unique.append(t)
        self.mandatory_times: List[float] = unique

        last = unique[-1]
        if steps == 0:
            diffs = [b - a for a, b in zip([0.0] + unique[:-1], unique)]
            diffs = [d for d in diffs if d > 0.0]
            if not diffs:
                raise ValueError("cannot infer a time step from a single time at 0")
            dt_max = min(diffs)
        else:
            if steps < 0:
                raise ValueError(f"steps must be >= 0, got {steps}")
            dt_max = last / steps

        times: List[float] = [0.0]
        period_begin = 0.0
        for period_end in unique:
            if period_end != 0.0:
                n_steps = max(_round_half_up((period_end - period_begin) / dt_max), 1)
                dt = (period_end - period_begin) / n_steps
                for n in range(1, n_steps + 1):
                    times.append(period_begin + n * dt)
            period_begin = period_end

        self.times: List[float] = times
        self.dt: List[float] = [b - a for a, b in zip(times[:-1], times[1:])]

    # ------------------------------------------------------------------
    # sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.times)

    def __getitem__(self, i: int) -> float:
        return self.times[i]

    def __iter__(self):
        return iter(self.times)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TimeGrid):
            return NotImplemented
        return self.times == other.times

    def __repr__(self) -> str:
        return f"TimeGrid(n={len(self.times)}, last={self.times[-1]:.6f})"

    @property
    def last(self) -> float:
        return self.times[-1]

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------

    def closest_index(self, t: float) -> int:
        times = self.times
        i = bisect.bisect_left(times, t)
        if i == 0:
            return 0
        if i == len(times):
            return len(times) - 1
        dt1 = times[i] - t
        dt2 = t - times[i - 1]
        return i if dt1 < dt2 else i - 1

    def index(self, t: float) -> int:
        """Index of the node at time `t`; fails if `t` is not a node."""
        i = self.closest_index(t)
        if close_enough(t, self.times[i]):
            return i
        if t < self.times[0]:
            raise InadequateTimeGridError(
                f"using inadequate time grid: all nodes are later than t = {t}"
            )
        if t > self.times[-1]:
            raise InadequateTimeGridError(
                f"using inadequate time grid: all nodes are earlier than t = {t}"
            )
        j = bisect.bisect_left(self.times, t)
        raise InadequateTimeGridError(
            f"using inadequate time grid: the nodes closest to t = {t} "
            f"are {self.times[j - 1]} and {self.times[j]}"
        )


def time_steps_for(maturity_years: float, min_steps_per_year: int) -> int:
    """Step count giving at least `min_steps_per_year` over `maturity_years`."""
    if maturity_years <= 0.0:
        raise ValueError(f"maturity_years must be positive, got {maturity_years}")
    if min_steps_per_year <= 0:
        raise ValueError(f"min_steps_per_year must be positive, got {min_steps_per_year}")
    return max(int(maturity_years * min_steps_per_year), 1)
