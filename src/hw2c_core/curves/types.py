# src/hw2c_core/curves/types.py

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Tuple, Union

from .daycount import DayCounter

TimeOrDate = Union[float, int, date]


class YieldTermStructure:
    """
    Minimal term structure interface consumed by the short-rate models.

    Subclasses provide `zero_rate_at(t)` (continuously compounded, time
    measured with `day_counter` from `reference_date`); everything else is
    derived from it.
    """

    reference_date: date
    day_counter: DayCounter

    def time_from_reference(self, d: date) -> float:
        return self.day_counter.year_fraction(self.reference_date, d)

    def _to_time(self, t: TimeOrDate) -> float:
        if isinstance(t, date):
            return self.time_from_reference(t)
        return float(t)

    def zero_rate_at(self, t: float) -> float:
        raise NotImplementedError

    def zero_rate(self, t: TimeOrDate) -> float:
        return self.zero_rate_at(self._to_time(t))

    def discount(self, t: TimeOrDate) -> float:
        """P(0,t) = exp(-z(t) * t)."""
        tt = self._to_time(t)
        return math.exp(-self.zero_rate_at(tt) * tt)

    def forward_rate(self, t1: TimeOrDate, t2: TimeOrDate) -> float:
        """Continuously compounded forward between t1 and t2."""
        a = self._to_time(t1)
        b = self._to_time(t2)
        if b <= a:
            b = a + 1e-6
        return -math.log(self.discount(b) / self.discount(a)) / (b - a)


@dataclass
class FlatForward(YieldTermStructure):
    """Flat continuously compounded curve, the usual test-suite workhorse."""

    reference_date: date
    rate: float
    day_counter: DayCounter

    def zero_rate_at(self, t: float) -> float:
        return float(self.rate)


@dataclass
class CurvePoint:
    """
    A single point on a zero curve.

    tenor_years: time to maturity in years (day counter of the owning curve)
    zero_rate:   continuously compounded zero rate (decimal, e.g. 0.0225 = 2.25%)
    """
    tenor_years: float
    zero_rate: float


@dataclass
class ZeroCurve(YieldTermStructure):
    """
    Zero curve built from (tenor_years, zero_rate) points.

    - zero_rate(t): linear interpolation in time, flat beyond both ends
    - discount(t): exp(-r(t) * t)
    """

    reference_date: date
    day_counter: DayCounter
    points: List[CurvePoint] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.points:
            raise ValueError("ZeroCurve requires at least one point")
        self.points.sort(key=lambda p: p.tenor_years)

    @classmethod
    def from_pairs(
        cls,
        reference_date: date,
        day_counter: DayCounter,
        pairs: Iterable[Tuple[float, float]],
    ) -> "ZeroCurve":
        pts = [CurvePoint(float(t), float(r)) for t, r in pairs]
        return cls(reference_date=reference_date, day_counter=day_counter, points=pts)

    def zero_rate_at(self, t: float) -> float:
        pts = self.points

        if t <= pts[0].tenor_years:
            return pts[0].zero_rate
        if t >= pts[-1].tenor_years:
            return pts[-1].zero_rate

        for i in range(1, len(pts)):
            left = pts[i - 1]
            right = pts[i]
            if left.tenor_years <= t <= right.tenor_years:
                w = (t - left.tenor_years) / (right.tenor_years - left.tenor_years)
                return left.zero_rate + w * (right.zero_rate - left.zero_rate)

        return pts[-1].zero_rate
