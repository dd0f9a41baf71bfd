"""Bezier curve geometry: evaluation, subdivision, bounds and intersection."""

__all__ = [
    "Vec2",
    "Vec3",
    "BoundingBox",
    "LineSegment",
    "line_intersection",
    "Intersection",
    "Extrema",
    "BezierCurve",
    "CurveKind",
    "Subcurve",
    "droots",
    "roots",
    # Tolerances
    "TolerancePolicy",
    "get_tolerance",
    "set_tolerance",
    # Intersection engine
    "ConvergenceError",
    "intersects",
    "self_intersects",
    "intersect_many",
]

from .vector import Vec2, Vec3
from .numeric import TolerancePolicy, get_tolerance, set_tolerance
from .bbox import BoundingBox
from .types import Intersection, Extrema
from .lines import LineSegment, line_intersection
from .roots import droots, roots
from .curve import BezierCurve, CurveKind, Subcurve
from .intersection import ConvergenceError, intersects, self_intersects, intersect_many
