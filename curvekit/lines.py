"""Line segments, segment/segment intersection and segment distances.

These are the flat-region primitives of the intersection search: once two
curve regions are close enough to their chords, the chords stand in for the
curves.  Computation happens in the xy plane.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .bbox import BoundingBox
from .numeric import get_tolerance
from .types import Intersection
from .vector import Point, PointLike, as_point, lerp


@dataclass(frozen=True)
class LineSegment:
    p0: Point
    p1: Point

    def __post_init__(self) -> None:
        p0 = as_point(self.p0)
        p1 = as_point(self.p1)
        if type(p0) is not type(p1):
            raise ValueError("LineSegment endpoints must have the same dimension")
        object.__setattr__(self, "p0", p0)
        object.__setattr__(self, "p1", p1)

    def __iter__(self) -> Iterator[Point]:
        yield self.p0
        yield self.p1

    def point_at(self, t: float) -> Point:
        return lerp(t, self.p0, self.p1)

    def direction(self) -> Point:
        return self.p1 - self.p0

    def length(self) -> float:
        return self.direction().length()

    @property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points((self.p0, self.p1))

    def as_curve(self):
        """The segment as an order-1 :class:`~curvekit.curve.BezierCurve`."""

        from .curve import BezierCurve

        return BezierCurve((self.p0, self.p1))


def line_intersection(
    a0: PointLike,
    a1: PointLike,
    b0: PointLike,
    b1: PointLike,
    clamp: bool = True,
    *,
    eps: Optional[float] = None,
) -> Optional[Intersection]:
    """Intersect segment ``a0-a1`` with segment ``b0-b1``.

    Returns the parameters along each segment, or ``None`` when the segments
    are parallel.  With ``clamp`` the parameters must lie strictly inside
    ``(0, 1)``; touching at an endpoint is left to the caller.
    """

    tol = eps if eps is not None else get_tolerance().parallel
    a0 = as_point(a0)
    b0 = as_point(b0)
    d1 = as_point(a1) - a0
    d2 = as_point(b1) - b0

    # Cramer's rule on  a0 + t1*d1 = b0 + t2*d2
    det = d2.x * d1.y - d1.x * d2.y
    if det == 0 or abs(det) <= tol * d1.length() * d2.length():
        return None

    e = b0.x - a0.x
    f = b0.y - a0.y
    t1 = (d2.x * f - e * d2.y) / det
    if clamp and (t1 >= 1.0 or t1 <= 0.0):
        return None
    t2 = (d1.x * f - e * d1.y) / det
    if clamp and (t2 >= 1.0 or t2 <= 0.0):
        return None
    return Intersection(t1, t2)


def distance2(p: PointLike, l1: PointLike, l2: PointLike) -> Tuple[float, float]:
    """Squared distance from ``p`` to segment ``l1-l2`` and the closest parameter."""

    p = as_point(p)
    l1 = as_point(l1)
    l2 = as_point(l2)
    delta = l2 - l1
    denom = delta.length_squared()
    param = (p - l1).dot(delta) / denom if denom > 0 else 0.0
    if param < 0:
        t = 0.0
        closest = l1
    elif param > 1:
        t = 1.0
        closest = l2
    else:
        t = param
        closest = l1 + delta * param
    return (p - closest).length_squared(), t


def line_distance2(
    a1: PointLike, a2: PointLike, b1: PointLike, b2: PointLike
) -> Tuple[float, float, float]:
    """Squared distance between two segments with the parameters where it occurs.

    Crossing segments report ``0.0`` at their intersection.  Otherwise the
    closest pair involves an endpoint, so the four endpoint projections are
    compared.
    """

    hit = line_intersection(a1, a2, b1, b2)
    if hit is not None:
        return 0.0, hit.t1, hit.t2

    shortest, t = distance2(a1, b1, b2)
    t1, t2 = 0.0, t
    d2, t = distance2(a2, b1, b2)
    if d2 < shortest:
        shortest, t1, t2 = d2, 1.0, t
    d2, t = distance2(b1, a1, a2)
    if d2 < shortest:
        shortest, t1, t2 = d2, t, 0.0
    d2, t = distance2(b2, a1, a2)
    if d2 < shortest:
        shortest, t1, t2 = d2, t, 1.0
    return shortest, t1, t2


__all__ = ["LineSegment", "line_intersection", "distance2", "line_distance2"]
