"""Axis-aligned bounding boxes for 2D and 3D curves."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .vector import Point, PointLike, as_point


@dataclass(frozen=True)
class BoundingBox:
    """Per-dimension ``(lower, upper)`` extents.

    Degenerate boxes (``lower == upper`` in some dimension) are valid and
    describe curves with no extent in that dimension.
    """

    lower: Point
    upper: Point

    def __post_init__(self) -> None:
        if type(self.lower) is not type(self.upper):
            raise ValueError("BoundingBox corners must have the same dimension")
        for lo, hi in zip(self.lower, self.upper):
            if lo > hi:
                raise ValueError(f"BoundingBox lower corner exceeds upper corner: {lo} > {hi}")

    @staticmethod
    def from_points(points: Iterable[PointLike]) -> "BoundingBox":
        iterator = iter(points)
        try:
            first = as_point(next(iterator))
        except StopIteration:
            raise ValueError("BoundingBox.from_points requires at least one point") from None
        lo = list(first)
        hi = list(first)
        for p in iterator:
            for d, v in enumerate(as_point(p)):
                if v < lo[d]:
                    lo[d] = v
                elif v > hi[d]:
                    hi[d] = v
        return BoundingBox(type(first).from_components(lo), type(first).from_components(hi))

    @property
    def dimensions(self) -> int:
        return self.lower.dimensions

    @property
    def xmin(self) -> float:
        return self.lower.x

    @property
    def ymin(self) -> float:
        return self.lower.y

    @property
    def xmax(self) -> float:
        return self.upper.x

    @property
    def ymax(self) -> float:
        return self.upper.y

    def size(self) -> Point:
        return self.upper - self.lower

    def center(self) -> Point:
        return (self.lower + self.upper) * 0.5

    def overlaps(self, other: "BoundingBox") -> bool:
        """True when the boxes share at least one point (touching counts)."""

        for lo1, hi1, lo2, hi2 in zip(self.lower, self.upper, other.lower, other.upper):
            if hi1 < lo2 or lo1 > hi2:
                return False
        return True

    def contains_point(self, point: PointLike, eps: Optional[float] = None) -> bool:
        slack = 0.0 if eps is None else eps
        p = as_point(point)
        return all(lo - slack <= v <= hi + slack for v, lo, hi in zip(p, self.lower, self.upper))

    def expanded(self, margin: float) -> "BoundingBox":
        cls = type(self.lower)
        return BoundingBox(
            cls.from_components([v - margin for v in self.lower]),
            cls.from_components([v + margin for v in self.upper]),
        )

    def union(self, other: "BoundingBox") -> "BoundingBox":
        cls = type(self.lower)
        return BoundingBox(
            cls.from_components([min(a, b) for a, b in zip(self.lower, other.lower)]),
            cls.from_components([max(a, b) for a, b in zip(self.upper, other.upper)]),
        )


__all__ = ["BoundingBox"]
