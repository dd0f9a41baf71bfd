from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, order=True)
class Intersection:
    """Parameter pair where two curves (or two parts of one curve) meet.

    Ordering is lexicographic on ``(t1, t2)`` so sorted lists can be
    de-duplicated by comparing neighbours.
    """

    t1: float
    t2: float

    def swapped(self) -> "Intersection":
        return Intersection(self.t2, self.t1)


@dataclass(frozen=True)
class Extrema:
    """Extremum parameters of a curve."""

    per_dimension: Tuple[Tuple[float, ...], ...]  # one sorted tuple per axis
    values: Tuple[float, ...]  # all axes merged, sorted and unique


__all__ = ["Intersection", "Extrema"]
