"""Bezier curves of order 1 to 3.

A :class:`BezierCurve` is an immutable sequence of control points.  Derived
data such as the bounding box, flatness and the simple/linear flags are
cached on first access; subdivision always builds new curves.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from functools import cached_property
from typing import Dict, List, Sequence, Tuple

import numpy as np

from . import settings
from .bbox import BoundingBox
from .lines import LineSegment, line_intersection
from .numeric import between, clamp, get_tolerance, map_range, unit_interval
from .roots import droots, roots
from .types import Extrema, Intersection
from .vector import Point, PointLike, Vec2, Vec3, align, angle, as_point, lerp

# Legendre-Gauss abscissae and weights on [-1, 1]
_QUADRATURE_T, _QUADRATURE_C = np.polynomial.legendre.leggauss(settings.QUADRATURE_ORDER)


class CurveKind(IntEnum):
    LINEAR = 1
    QUADRATIC = 2
    CUBIC = 3


def hull(points: Sequence[Point], t: float) -> List[Point]:
    """Every de Casteljau point for ``t``, level by level.

    The first ``len(points)`` entries are the control points themselves; the
    last entry is the curve point at ``t``.
    """

    q = list(points)
    start = 0
    for count in range(len(points) - 1, 0, -1):
        end = start + count
        for i in range(start, end):
            q.append(lerp(t, q[i], q[i + 1]))
        start = end + 1
    return q


def _split_indices(count: int) -> Tuple[Tuple[int, ...], Tuple[int, ...]]:
    left = []
    right = []
    start = 0
    for size in range(count, 0, -1):
        left.append(start)
        right.append(start + size - 1)
        start += size
    return tuple(left), tuple(reversed(right))


# hull positions of the left/right control points, keyed by point count
# (cubic: left 0,4,7,9 and right 9,8,6,3)
SPLIT_INDICES: Dict[int, Tuple[Tuple[int, ...], Tuple[int, ...]]] = {
    n: _split_indices(n) for n in (2, 3, 4)
}


def _bernstein(p: Sequence[Point], t: float) -> Point:
    mt = 1.0 - t
    n = len(p)
    if n == 1:
        return p[0]
    if n == 2:
        return p[0] * mt + p[1] * t
    if n == 3:
        return p[0] * (mt * mt) + p[1] * (2.0 * mt * t) + p[2] * (t * t)
    mt2 = mt * mt
    t2 = t * t
    return p[0] * (mt2 * mt) + p[1] * (3.0 * mt2 * t) + p[2] * (3.0 * mt * t2) + p[3] * (t * t2)


@dataclass(frozen=True)
class BezierCurve:
    points: Tuple[Point, ...]

    def __post_init__(self) -> None:
        pts = tuple(as_point(p) for p in self.points)
        if len(pts) not in SPLIT_INDICES:
            raise ValueError(f"BezierCurve needs 2, 3 or 4 control points, got {len(pts)}")
        if len({type(p) for p in pts}) != 1:
            raise ValueError("BezierCurve control points must all be 2D or all be 3D")
        object.__setattr__(self, "points", pts)

    # --- construction ------------------------------------------------------
    @classmethod
    def with_points(cls, points: Sequence[PointLike]) -> "BezierCurve":
        return cls(tuple(points))

    @classmethod
    def line(cls, p0: PointLike, p1: PointLike) -> "BezierCurve":
        """A straight cubic with its inner control points on the chord thirds."""

        a = as_point(p0)
        b = as_point(p1)
        d = (b - a) / 3.0
        return cls((a, a + d, a + d * 2.0, b))

    # --- basic properties ----------------------------------------------------
    @property
    def order(self) -> int:
        return len(self.points) - 1

    @property
    def kind(self) -> CurveKind:
        return CurveKind(self.order)

    @property
    def dimensions(self) -> int:
        return self.points[0].dimensions

    @property
    def chord(self) -> LineSegment:
        return LineSegment(self.points[0], self.points[-1])

    # --- evaluation ----------------------------------------------------------
    def evaluate(self, t: float) -> Point:
        """Point on the curve at ``t``; the endpoints are returned exactly."""

        if t == 0:
            return self.points[0]
        if t == 1:
            return self.points[-1]
        return _bernstein(self.points, t)

    @cached_property
    def derivative_points(self) -> Tuple[Tuple[Point, ...], ...]:
        """Control points of the first, second, ... derivative curves."""

        levels = []
        p = self.points
        while len(p) > 1:
            c = len(p) - 1
            p = tuple((p[j + 1] - p[j]) * float(c) for j in range(c))
            levels.append(p)
        return tuple(levels)

    def derivative(self, t: float) -> Point:
        return _bernstein(self.derivative_points[0], t)

    def normal(self, t: float) -> Point:
        """Unit normal at ``t``.

        2D curves use the exact perpendicular of the tangent.  3D curves
        estimate the osculating plane from the tangent at ``t`` and at
        ``t + NORMAL_PROBE``, which is an approximation; straight 3D curves
        have no such plane and get the zero vector.
        """

        if self.dimensions == 3:
            return self._normal3(t)
        d = self._tangent(t)
        q = d.length()
        if q == 0:
            return Vec2(0.0, 0.0)
        return Vec2(-d.y / q, d.x / q)

    def _tangent(self, t: float) -> Point:
        # Coincident control points make the derivative vanish at the ends.
        d = self.derivative(t)
        eps = get_tolerance().epsilon
        if d.length() > eps:
            return d
        probe = t + 1e-4 if t < 0.5 else t - 1e-4
        d = self.derivative(probe)
        if d.length() > eps:
            return d
        return self.points[-1] - self.points[0]

    def _normal3(self, t: float) -> Vec3:
        r1 = self._tangent(t).normalized()
        r2 = self._tangent(t + settings.NORMAL_PROBE).normalized()
        c = r2.cross(r1).normalized()
        # rotation about c by a quarter turn
        r = (
            c.x * c.x, c.x * c.y - c.z, c.x * c.z + c.y,
            c.x * c.y + c.z, c.y * c.y, c.y * c.z - c.x,
            c.x * c.z - c.y, c.y * c.z + c.x, c.z * c.z,
        )
        return Vec3(
            r[0] * r1.x + r[1] * r1.y + r[2] * r1.z,
            r[3] * r1.x + r[4] * r1.y + r[5] * r1.z,
            r[6] * r1.x + r[7] * r1.y + r[8] * r1.z,
        )

    def hull(self, t: float) -> List[Point]:
        return hull(self.points, t)

    def lookup_table(self, steps: int = settings.LOOKUP_TABLE_STEPS) -> np.ndarray:
        """``steps + 1`` evenly spaced curve points, shape ``(steps + 1, dims)``."""

        if steps < 1:
            raise ValueError("lookup_table needs at least one step")
        return np.array([self.evaluate(i / steps).components() for i in range(steps + 1)], dtype=float)

    def length(self) -> float:
        """Arc length by Legendre-Gauss quadrature."""

        z = 0.5
        total = 0.0
        for x, w in zip(_QUADRATURE_T, _QUADRATURE_C):
            total += float(w) * self.derivative(z * float(x) + z).length()
        return z * total

    # --- subdivision -----------------------------------------------------------
    def split(self, t: float) -> Tuple["BezierCurve", "BezierCurve"]:
        """Curves covering ``[0, t]`` and ``[t, 1]``."""

        if not 0.0 < t < 1.0:
            raise ValueError(f"split parameter must lie in (0, 1), got {t}")
        left, right = Subcurve(0.0, 1.0, self).split(t)
        return left.curve, right.curve

    def split_range(self, t1: float, t2: float) -> "BezierCurve":
        """The part of the curve between ``t1`` and ``t2``."""

        return self.subcurve(t1, t2).curve

    def subcurve(self, t1: float, t2: float) -> "Subcurve":
        if not 0.0 <= t1 < t2 <= 1.0:
            raise ValueError(f"split range needs 0 <= t1 < t2 <= 1, got ({t1}, {t2})")
        return Subcurve(0.0, 1.0, self).split_range(t1, t2)

    # --- extrema and bounds ------------------------------------------------------
    def extrema(self, include_inflection: bool = True) -> Extrema:
        per_dimension = []
        for d in range(self.dimensions):
            candidates: List[float] = []
            if self.order >= 2:
                candidates.extend(droots([p[d] for p in self.derivative_points[0]]))
            if include_inflection and self.order == 3:
                candidates.extend(droots([p[d] for p in self.derivative_points[1]]))
            per_dimension.append(tuple(sorted(unit_interval(candidates))))

        values: List[float] = []
        for v in sorted(t for axis in per_dimension for t in axis):
            if not values or v > values[-1]:
                values.append(v)
        return Extrema(tuple(per_dimension), tuple(values))

    @cached_property
    def bounding_box(self) -> BoundingBox:
        extrema = self.extrema(include_inflection=False)
        p0 = self.evaluate(0.0)
        p1 = self.evaluate(1.0)
        lower = []
        upper = []
        for d in range(self.dimensions):
            values = [p0[d], p1[d]] + [self.evaluate(t)[d] for t in extrema.per_dimension[d]]
            lower.append(min(values))
            upper.append(max(values))
        cls = type(self.points[0])
        return BoundingBox(cls.from_components(lower), cls.from_components(upper))

    # --- shape tests ------------------------------------------------------------
    @cached_property
    def flatness(self) -> float:
        """Upper bound on the squared distance between the curve and its chord.

        See https://jeremykun.com/2013/05/11/bezier-curves-and-picasso/
        """

        if self.order == 1:
            return 0.0
        if self.order == 2:
            q0, q1, q2 = self.points
            p0, p1, p2, p3 = q0, q0 + (q1 - q0) * (2.0 / 3.0), q2 + (q1 - q2) * (2.0 / 3.0), q2
        else:
            p0, p1, p2, p3 = self.points
        a = p1 * 3.0 - p0 * 2.0 - p3
        b = p2 * 3.0 - p0 - p3 * 2.0
        return sum(max(ad * ad, bd * bd) for ad, bd in zip(a, b)) / 16.0

    @cached_property
    def linear(self) -> bool:
        tol = get_tolerance().linear
        aligned = align(self.points, self.points[0], self.points[-1])
        return all(abs(p.y) <= tol for p in aligned)

    @cached_property
    def simple(self) -> bool:
        """Control points on one side of the baseline and end normals within 60 degrees."""

        if self.order == 3:
            p = self.points
            a1 = angle(p[0], p[3], p[1])
            a2 = angle(p[0], p[3], p[2])
            if (a1 > 0 and a2 < 0) or (a1 < 0 and a2 > 0):
                return False
        n1 = self.normal(0.0)
        n2 = self.normal(1.0)
        if n1.length() == 0 or n2.length() == 0:
            return True
        s = clamp(n1.dot(n2), -1.0, 1.0)
        return abs(math.acos(s)) < settings.SIMPLE_ANGLE

    # --- reduction -----------------------------------------------------------------
    def reduce(self, step: float = settings.REDUCE_STEP) -> List["Subcurve"]:
        """Split the curve into consecutive simple segments.

        The curve is cut at its extrema first, then each piece is grown in
        ``step`` increments for as long as it stays simple.
        """

        if not 0.0 < step <= 1.0:
            raise ValueError("reduce step must lie in (0, 1]")

        bounds = [0.0]
        for t in list(self.extrema().values) + [1.0]:
            if t - bounds[-1] >= step:
                bounds.append(t)
        # a short tail is absorbed by the last piece
        bounds[-1] = 1.0

        whole = Subcurve(0.0, 1.0, self)
        pieces: List[Subcurve] = []
        n = max(1, int(round(1.0 / step)))
        for t1, t2 in zip(bounds[:-1], bounds[1:]):
            part = whole.split_range(t1, t2)
            i = 0
            while i < n:
                j = i + 1
                while j < n and part.split_range(i / n, (j + 1) / n).curve.simple:
                    j += 1
                pieces.append(part.split_range(i / n, j / n))
                i = j
        return pieces

    # --- intersection ----------------------------------------------------------------
    def intersects_line(self, segment: LineSegment) -> List[float]:
        """Curve parameters where the curve crosses ``segment``."""

        lo = segment.bounding_box
        if self.order == 1:
            hit = line_intersection(self.points[0], self.points[1], segment.p0, segment.p1, clamp=False)
            candidates = [] if hit is None else unit_interval([hit.t1])
        else:
            candidates = roots(self.points, segment)

        found = []
        for t in candidates:
            p = self.evaluate(t)
            if between(p.x, lo.xmin, lo.xmax) and between(p.y, lo.ymin, lo.ymax):
                found.append(t)
        return found

    def intersects(
        self, other: "BezierCurve", threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD
    ) -> List[Intersection]:
        from .intersection import intersects

        return intersects(self, other, threshold)

    def self_intersects(
        self, threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD
    ) -> List[Intersection]:
        from .intersection import self_intersects

        return self_intersects(self, threshold)


@dataclass(frozen=True)
class Subcurve:
    """The part ``[t1, t2]`` of a parent curve, stored as its own curve."""

    t1: float
    t2: float
    curve: BezierCurve

    @staticmethod
    def whole(curve: BezierCurve) -> "Subcurve":
        return Subcurve(0.0, 1.0, curve)

    def global_parameter(self, t: float) -> float:
        """Map a local parameter of ``curve`` onto the parent curve."""

        return t * self.t2 + (1.0 - t) * self.t1

    def split(self, t: float) -> Tuple["Subcurve", "Subcurve"]:
        q = self.curve.hull(t)
        left_idx, right_idx = SPLIT_INDICES[len(self.curve.points)]
        left = BezierCurve(tuple(q[i] for i in left_idx))
        right = BezierCurve(tuple(q[i] for i in right_idx))
        tm = map_range(t, 0.0, 1.0, self.t1, self.t2)
        return Subcurve(self.t1, tm, left), Subcurve(tm, self.t2, right)

    def split_range(self, t1: float, t2: float) -> "Subcurve":
        left_idx, right_idx = SPLIT_INDICES[len(self.curve.points)]
        q1 = hull(self.curve.points, t1)
        tail = [q1[i] for i in right_idx]
        q2 = hull(tail, map_range(t2, t1, 1.0, 0.0, 1.0))
        head = tuple(q2[i] for i in left_idx)
        return Subcurve(
            map_range(t1, 0.0, 1.0, self.t1, self.t2),
            map_range(t2, 0.0, 1.0, self.t1, self.t2),
            BezierCurve(head),
        )


__all__ = ["CurveKind", "BezierCurve", "Subcurve", "hull", "SPLIT_INDICES"]
