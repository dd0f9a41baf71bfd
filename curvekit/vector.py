"""Immutable 2D/3D vectors and the point helpers built on them.

Control points, derivatives and normals are all plain value vectors.  A
curve is either entirely 2D or entirely 3D; the point type decides which
code path the normal computation takes.
"""

from __future__ import annotations

from dataclasses import dataclass
from math import atan2, cos, hypot, isclose, sin, sqrt
from typing import ClassVar, Iterable, List, Sequence, Tuple, Union

EPSILON: float = 1e-9


@dataclass(frozen=True)
class Vec2:
    """A lightweight immutable 2D vector."""

    x: float
    y: float

    dimensions: ClassVar[int] = 2

    # --- basic arithmetic -------------------------------------------------
    def __add__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "Vec2") -> "Vec2":
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> "Vec2":
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vec2":
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y)[index]

    def __iter__(self):
        yield self.x
        yield self.y

    # --- vector operations -------------------------------------------------
    def dot(self, other: "Vec2") -> float:
        return self.x * other.x + self.y * other.y

    def cross(self, other: "Vec2") -> float:
        return self.x * other.y - self.y * other.x

    def length(self) -> float:
        return hypot(self.x, self.y)

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y

    def normalized(self) -> "Vec2":
        n = self.length()
        if n == 0:
            return Vec2(0.0, 0.0)
        return self / n

    def perpendicular(self) -> "Vec2":
        return Vec2(-self.y, self.x)

    def distance_to(self, other: "Vec2") -> float:
        return (self - other).length()

    def almost_equals(self, other: "Vec2", eps: float = EPSILON) -> bool:
        return isclose(self.x, other.x, abs_tol=eps) and isclose(self.y, other.y, abs_tol=eps)

    def components(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @staticmethod
    def from_components(values: Sequence[float]) -> "Vec2":
        return Vec2(float(values[0]), float(values[1]))

    @staticmethod
    def zero() -> "Vec2":
        return Vec2(0.0, 0.0)


@dataclass(frozen=True)
class Vec3:
    x: float
    y: float
    z: float

    dimensions: ClassVar[int] = 3

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vec3":
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> "Vec3":
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def __getitem__(self, index: int) -> float:
        return (self.x, self.y, self.z)[index]

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def length(self) -> float:
        return sqrt(self.dot(self))

    def length_squared(self) -> float:
        return self.dot(self)

    def normalized(self) -> "Vec3":
        n = self.length()
        if n == 0:
            return Vec3(0.0, 0.0, 0.0)
        return self / n

    def distance_to(self, other: "Vec3") -> float:
        return (self - other).length()

    def almost_equals(self, other: "Vec3", eps: float = EPSILON) -> bool:
        return (
            isclose(self.x, other.x, abs_tol=eps)
            and isclose(self.y, other.y, abs_tol=eps)
            and isclose(self.z, other.z, abs_tol=eps)
        )

    def components(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    @staticmethod
    def from_components(values: Sequence[float]) -> "Vec3":
        return Vec3(float(values[0]), float(values[1]), float(values[2]))

    @staticmethod
    def zero() -> "Vec3":
        return Vec3(0.0, 0.0, 0.0)


Point = Union[Vec2, Vec3]
PointLike = Union[Vec2, Vec3, Sequence[float]]


def as_point(value: PointLike) -> Point:
    """Coerce a vector or a 2/3 element sequence into ``Vec2``/``Vec3``."""

    if isinstance(value, (Vec2, Vec3)):
        return value
    try:
        coords = tuple(float(v) for v in value)
    except TypeError as exc:
        raise ValueError(f"Expected a sequence of coordinates, got {value!r}") from exc
    if len(coords) == 2:
        return Vec2.from_components(coords)
    if len(coords) == 3:
        return Vec3.from_components(coords)
    raise ValueError(f"Expected 2 or 3 coordinates, got {len(coords)}")


def lerp(r: float, v1: Point, v2: Point) -> Point:
    return v1 + (v2 - v1) * r


def angle(o: Point, v1: Point, v2: Point) -> float:
    """Signed angle at ``o`` from ``v1`` to ``v2``, measured in the xy plane."""

    dx1 = v1.x - o.x
    dy1 = v1.y - o.y
    dx2 = v2.x - o.x
    dy2 = v2.y - o.y
    cross = dx1 * dy2 - dy1 * dx2
    dot = dx1 * dx2 + dy1 * dy2
    return atan2(cross, dot)


def align(points: Iterable[Point], p1: Point, p2: Point) -> List[Vec2]:
    """Move and rotate ``points`` so that the line ``p1 -> p2`` lies on the x axis."""

    tx = p1.x
    ty = p1.y
    a = -atan2(p2.y - ty, p2.x - tx)
    ca = cos(a)
    sa = sin(a)
    return [
        Vec2((v.x - tx) * ca - (v.y - ty) * sa, (v.x - tx) * sa + (v.y - ty) * ca)
        for v in points
    ]


__all__ = ["EPSILON", "Vec2", "Vec3", "Point", "PointLike", "as_point", "lerp", "angle", "align"]
