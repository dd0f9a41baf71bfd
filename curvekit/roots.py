"""Closed-form real root solvers for Bezier polynomials.

``droots`` works on raw Bernstein coefficients (derivative control values)
and returns every real root.  ``roots`` answers "where does this curve cross
this line": the control points are aligned so the line becomes the x axis,
and the quadratic or cubic in y is solved in closed form.  Only roots in the
unit interval come back from ``roots``; see :func:`curvekit.numeric.unit_interval`.
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence

from .numeric import crt, get_tolerance, unit_interval
from .vector import Point, PointLike, Vec2, align, as_point

TAU = 2.0 * math.pi


def droots(p: Sequence[float]) -> List[float]:
    """Real roots of a linear (2 values) or quadratic (3 values) Bernstein polynomial."""

    if len(p) == 3:
        a, b, c = p
        d = a - 2.0 * b + c
        if d != 0:
            disc = b * b - a * c
            if disc < 0:
                return []
            m1 = -math.sqrt(disc)
            m2 = -a + b
            v1 = -(m1 + m2) / d
            v2 = -(-m1 + m2) / d
            return [v1, v2]
        if b != c:
            return [(2.0 * b - c) / (2.0 * (b - c))]
        return []
    if len(p) == 2:
        a, b = p
        if a != b:
            return [a / (a - b)]
        return []
    raise ValueError(f"droots needs 2 or 3 coefficients, got {len(p)}")


def _negligible(d: float, eps: float, *values: float) -> bool:
    """True when ``d`` is rounding noise next to the coefficients it came from."""

    return abs(d) <= eps * max(abs(v) for v in values)


def _quadratic_roots(a: float, b: float, c: float, eps: float) -> List[float]:
    d = a - 2.0 * b + c
    if not _negligible(d, eps, a, b, c):
        disc = b * b - a * c
        if disc < 0:
            return []
        m1 = -math.sqrt(disc)
        m2 = -a + b
        return [-(m1 + m2) / d, -(-m1 + m2) / d]
    if a != b:
        # d ~ 0: the quadratic is really the line a + 2(b - a)t
        return [0.5 * a / (a - b)]
    return []


def _cubic_roots(pa: float, pb: float, pc: float, pd: float, eps: float) -> List[float]:
    # http://www.trans4mind.com/personal_development/mathematics/polynomials/cubicAlgebra.htm
    d = -pa + 3.0 * pb - 3.0 * pc + pd
    if _negligible(d, eps, pa, pb, pc, pd):
        # No cubic term: rebuild the quadratic's control values from the power basis.
        qa = 3.0 * pa - 6.0 * pb + 3.0 * pc
        qb = -3.0 * pa + 3.0 * pb
        qc = pa
        return _quadratic_roots(qc, qb / 2.0 + qc, qa + qb + qc, eps)

    a = (3.0 * pa - 6.0 * pb + 3.0 * pc) / d
    b = (-3.0 * pa + 3.0 * pb) / d
    c = pa / d

    p = (3.0 * b - a * a) / 3.0
    p3 = p / 3.0
    q = (2.0 * a * a * a - 9.0 * a * b + 27.0 * c) / 27.0
    q2 = q / 2.0
    discriminant = q2 * q2 + p3 * p3 * p3

    if discriminant < 0:
        mp3 = -p / 3.0
        r = math.sqrt(mp3 * mp3 * mp3)
        t = -q / (2.0 * r)
        cosphi = -1.0 if t < -1 else 1.0 if t > 1 else t
        phi = math.acos(cosphi)
        t1 = 2.0 * crt(r)
        return [
            t1 * math.cos(phi / 3.0) - a / 3.0,
            t1 * math.cos((phi + TAU) / 3.0) - a / 3.0,
            t1 * math.cos((phi + 2.0 * TAU) / 3.0) - a / 3.0,
        ]
    if discriminant == 0:
        u1 = crt(-q2) if q2 < 0 else -crt(q2)
        return [2.0 * u1 - a / 3.0, -u1 - a / 3.0]

    sd = math.sqrt(discriminant)
    u1 = crt(-q2 + sd)
    v1 = crt(q2 + sd)
    return [u1 - v1 - a / 3.0]


def roots(
    points: Sequence[PointLike],
    line: Optional[Sequence[PointLike]] = None,
    *,
    eps: Optional[float] = None,
) -> List[float]:
    """Parameters in ``[0, 1]`` where a quadratic or cubic crosses ``line``.

    ``line`` is any pair of points (a :class:`~curvekit.lines.LineSegment`
    unpacks into one); it defaults to the x axis.
    """

    tol = eps if eps is not None else get_tolerance().epsilon
    pts: List[Point] = [as_point(p) for p in points]
    if line is None:
        p1, p2 = Vec2(0.0, 0.0), Vec2(1.0, 0.0)
    else:
        p1, p2 = (as_point(p) for p in line)
    ys = [v.y for v in align(pts, p1, p2)]

    if len(pts) == 3:
        found = _quadratic_roots(ys[0], ys[1], ys[2], tol)
    elif len(pts) == 4:
        found = _cubic_roots(ys[0], ys[1], ys[2], ys[3], tol)
    else:
        raise ValueError(f"roots supports quadratic and cubic curves, got {len(pts)} points")
    return unit_interval(found, eps=tol)


__all__ = ["droots", "roots"]
