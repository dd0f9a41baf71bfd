import math

import numpy as np
import pytest

from curvekit.curve import SPLIT_INDICES, BezierCurve, CurveKind, Subcurve, hull
from curvekit.lines import LineSegment
from curvekit.vector import Vec2, Vec3

ARCH = BezierCurve.with_points([(0, 0), (0, 100), (100, 100), (100, 0)])
S_CURVE = BezierCurve.with_points([(0, 0), (1, 1), (2, -1), (3, 0)])
QUAD = BezierCurve.with_points([(0, 0), (1, 2), (2, 0)])

CURVES = [
    BezierCurve.with_points([(0, 0), (2, 1)]),
    QUAD,
    ARCH,
    S_CURVE,
    BezierCurve.with_points([(0, 0, 0), (1, 2, 1), (2, -1, 3), (3, 0, 0)]),
]


def test_bezier_evaluate():
    p = QUAD.evaluate(0.5)
    assert abs(p.x - 1.0) < 1e-6
    assert abs(p.y - 1.0) < 1e-6
    d = QUAD.derivative(0.5)
    assert abs(d.x - 2.0) < 1e-6
    assert abs(d.y - 0.0) < 1e-6


def test_evaluate_endpoints_exact():
    for curve in CURVES:
        assert curve.evaluate(0.0) == curve.points[0]
        assert curve.evaluate(1.0) == curve.points[-1]


def test_construction_validates_points():
    with pytest.raises(ValueError):
        BezierCurve.with_points([(0, 0)])
    with pytest.raises(ValueError):
        BezierCurve.with_points([(0, 0)] * 5)
    with pytest.raises(ValueError):
        BezierCurve.with_points([(0, 0), (1, 1, 1)])
    with pytest.raises(ValueError):
        BezierCurve.with_points([(0, 0, 0, 0), (1, 1, 1, 1)])


def test_kind_and_order():
    assert [c.kind for c in CURVES[:3]] == [CurveKind.LINEAR, CurveKind.QUADRATIC, CurveKind.CUBIC]
    assert ARCH.order == 3
    assert ARCH.dimensions == 2
    assert CURVES[-1].dimensions == 3


def test_line_factory():
    line = BezierCurve.line((0.0, 0.0), (3.0, 0.0))
    assert line.order == 3
    assert line.points[1].almost_equals(Vec2(1.0, 0.0))
    assert line.points[2].almost_equals(Vec2(2.0, 0.0))
    assert line.flatness == 0.0
    assert line.linear


def test_split_indices():
    assert SPLIT_INDICES[4] == ((0, 4, 7, 9), (9, 8, 6, 3))
    assert SPLIT_INDICES[3] == ((0, 3, 5), (5, 4, 2))
    assert SPLIT_INDICES[2] == ((0, 2), (2, 1))


def test_hull_ends_on_curve():
    q = hull(ARCH.points, 0.3)
    assert len(q) == 10
    assert q[-1].almost_equals(ARCH.evaluate(0.3))
    assert len(QUAD.hull(0.3)) == 6


def test_split_reassembles():
    rng = np.random.default_rng(7)
    for curve in CURVES:
        for t in rng.uniform(0.01, 0.99, 20):
            left, right = curve.split(float(t))
            p = curve.evaluate(float(t))
            assert left.evaluate(1.0).almost_equals(p, 1e-9)
            assert right.evaluate(0.0).almost_equals(p, 1e-9)
            # the halves trace the same curve
            assert left.evaluate(0.5).almost_equals(curve.evaluate(float(t) * 0.5), 1e-9)


def test_split_rejects_bad_parameters():
    for t in (0.0, 1.0, -0.5, 1.5):
        with pytest.raises(ValueError):
            ARCH.split(t)
    with pytest.raises(ValueError):
        ARCH.split_range(0.6, 0.4)
    with pytest.raises(ValueError):
        ARCH.split_range(0.5, 0.5)
    with pytest.raises(ValueError):
        ARCH.split_range(-0.1, 0.5)


def test_split_range():
    part = ARCH.split_range(0.25, 0.75)
    assert part.evaluate(0.0).almost_equals(ARCH.evaluate(0.25), 1e-9)
    assert part.evaluate(1.0).almost_equals(ARCH.evaluate(0.75), 1e-9)
    assert part.evaluate(0.5).almost_equals(ARCH.evaluate(0.5), 1e-9)
    whole = ARCH.split_range(0.0, 1.0)
    assert whole.evaluate(0.4).almost_equals(ARCH.evaluate(0.4), 1e-9)


def test_subcurve_tracks_global_parameters():
    left, right = Subcurve.whole(ARCH).split(0.5)
    assert (left.t1, left.t2) == (0.0, 0.5)
    assert (right.t1, right.t2) == (0.5, 1.0)
    quarter = right.split(0.5)[0]
    assert (quarter.t1, quarter.t2) == (0.5, 0.75)
    assert quarter.global_parameter(0.5) == 0.625
    assert quarter.curve.evaluate(0.5).almost_equals(ARCH.evaluate(0.625), 1e-9)
    inner = right.split_range(0.5, 1.0)
    assert math.isclose(inner.t1, 0.75) and math.isclose(inner.t2, 1.0)


def test_derivative_points():
    levels = QUAD.derivative_points
    assert levels[0] == (Vec2(2.0, 4.0), Vec2(2.0, -4.0))
    assert levels[1] == (Vec2(0.0, -8.0),)


def test_extrema_quadratic():
    ext = QUAD.extrema()
    assert ext.per_dimension[0] == ()
    assert len(ext.per_dimension[1]) == 1
    assert math.isclose(ext.per_dimension[1][0], 0.5)
    assert ext.values == (0.5,)


def test_extrema_with_and_without_inflection():
    r1 = (3.0 - math.sqrt(3.0)) / 6.0
    r2 = (3.0 + math.sqrt(3.0)) / 6.0
    plain = S_CURVE.extrema(include_inflection=False)
    assert plain.per_dimension[0] == ()
    assert list(plain.per_dimension[1]) == pytest.approx([r1, r2])
    full = S_CURVE.extrema()
    assert list(full.per_dimension[1]) == pytest.approx([r1, 0.5, r2])
    assert list(full.values) == pytest.approx([r1, 0.5, r2])


def test_extrema_merged_values_are_sorted_and_unique():
    curve = BezierCurve.with_points([(0, 0), (0, 100), (100, 100), (100, 0)])
    values = curve.extrema().values
    assert list(values) == sorted(set(values))
    assert all(0.0 <= t <= 1.0 for t in values)


def test_bounding_box_quadratic():
    box = QUAD.bounding_box
    assert box.lower == Vec2(0.0, 0.0)
    assert box.upper == Vec2(2.0, 1.0)


def test_bounding_box_contains_samples():
    rng = np.random.default_rng(1234)
    for curve in CURVES:
        box = curve.bounding_box
        for t in rng.uniform(0.0, 1.0, 200):
            assert box.contains_point(curve.evaluate(float(t)), eps=1e-9)


def test_bounding_box_is_tight_for_arch():
    box = ARCH.bounding_box
    assert box.lower.almost_equals(Vec2(0.0, 0.0))
    assert box.upper.almost_equals(Vec2(100.0, 75.0))


def test_flatness():
    assert CURVES[0].flatness == 0.0
    # the elevated quadratic bounds its squared chord distance exactly here
    assert math.isclose(QUAD.flatness, 1.0)
    assert ARCH.flatness > 1.0


def test_linear():
    assert BezierCurve.with_points([(0, 0), (1, 1), (2, 2)]).linear
    assert not QUAD.linear
    assert not ARCH.linear


def test_simple():
    assert not ARCH.simple
    assert not S_CURVE.simple
    assert BezierCurve.with_points([(0, 0), (1, 0.2), (2, 0.2), (3, 0)]).simple
    # vanishing normals count as simple
    assert BezierCurve.with_points([(1, 1), (1, 1)]).simple


def test_reduce_covers_curve_with_simple_pieces():
    pieces = ARCH.reduce()
    assert len(pieces) > 1
    assert pieces[0].t1 == 0.0
    assert math.isclose(pieces[-1].t2, 1.0)
    for a, b in zip(pieces, pieces[1:]):
        assert math.isclose(a.t2, b.t1, abs_tol=1e-12)
    for piece in pieces:
        assert piece.t1 < piece.t2
        assert piece.curve.simple
        assert piece.curve.evaluate(0.0).almost_equals(ARCH.evaluate(piece.t1), 1e-6)
        assert piece.curve.evaluate(1.0).almost_equals(ARCH.evaluate(piece.t2), 1e-6)


def test_reduce_simple_curve_is_one_piece():
    curve = BezierCurve.line((0.0, 0.0), (3.0, 0.0))
    pieces = curve.reduce()
    assert len(pieces) == 1
    assert (pieces[0].t1, pieces[0].t2) == (0.0, 1.0)


def test_reduce_rejects_bad_step():
    with pytest.raises(ValueError):
        ARCH.reduce(step=0.0)


def test_length():
    assert math.isclose(BezierCurve.with_points([(0, 0), (3, 4)]).length(), 5.0, abs_tol=1e-9)
    assert math.isclose(BezierCurve.line((0.0, 0.0), (3.0, 4.0)).length(), 5.0, abs_tol=1e-9)
    assert math.isclose(CURVES[-1].chord.length(), 3.0)
    # between the inscribed polyline and the control polygon
    assert 180.0 < ARCH.length() < 300.0


def test_lookup_table():
    table = QUAD.lookup_table(10)
    assert table.shape == (11, 2)
    assert np.allclose(table[0], [0.0, 0.0])
    assert np.allclose(table[5], [1.0, 1.0])
    assert np.allclose(table[-1], [2.0, 0.0])
    assert CURVES[-1].lookup_table().shape == (101, 3)
    with pytest.raises(ValueError):
        QUAD.lookup_table(0)


def test_normal_2d():
    n = QUAD.normal(0.5)
    assert n.almost_equals(Vec2(0.0, 1.0))
    rng = np.random.default_rng(3)
    for t in rng.uniform(0.0, 1.0, 50):
        n = ARCH.normal(float(t))
        d = ARCH.derivative(float(t))
        assert math.isclose(n.length(), 1.0, abs_tol=1e-12)
        assert abs(n.dot(d)) < 1e-9 * d.length()


def test_normal_with_vanishing_derivative():
    curve = BezierCurve.with_points([(0, 0), (0, 0), (1, 1), (1, 1)])
    expected = Vec2(-1.0, 1.0).normalized()
    assert curve.normal(0.0).almost_equals(expected, 1e-6)
    assert curve.normal(1.0).almost_equals(expected, 1e-6)
    point = BezierCurve.with_points([(1, 1), (1, 1), (1, 1)])
    assert point.normal(0.5) == Vec2(0.0, 0.0)


def test_normal_3d_is_approximate_but_consistent():
    # The 3D normal comes from a finite-difference probe, so compare loosely.
    flat = BezierCurve.with_points([(0, 0, 0), (1, 1, 0), (2, 1, 0), (3, 0, 0)])
    planar = BezierCurve.with_points([(0, 0), (1, 1), (2, 1), (3, 0)])
    for t in (0.1, 0.25, 0.5, 0.9):
        n3 = flat.normal(t)
        n2 = planar.normal(t)
        assert isinstance(n3, Vec3)
        assert math.isclose(n3.length(), 1.0, abs_tol=1e-4)
        assert abs(n3.z) < 1e-4
        assert math.isclose(abs(n3.x * n2.x + n3.y * n2.y), 1.0, abs_tol=1e-4)
    curve = CURVES[-1]
    for t in (0.2, 0.6):
        n = curve.normal(t)
        d = curve.derivative(t)
        assert math.isclose(n.length(), 1.0, abs_tol=1e-4)
        assert abs(n.dot(d.normalized())) < 1e-4


def test_straight_3d_curve_has_zero_normal():
    curve = BezierCurve.with_points([(0, 0, 0), (1, 1, 1), (2, 2, 2)])
    assert curve.normal(0.5) == Vec3(0.0, 0.0, 0.0)


def test_intersects_line_straight_cubic():
    curve = BezierCurve.line((0.0, 0.0), (3.0, 0.0))
    found = curve.intersects_line(LineSegment((1.0, -1.0), (1.0, 1.0)))
    assert len(found) == 1
    assert math.isclose(found[0], 1.0 / 3.0, abs_tol=1e-6)


def test_intersects_line_arch():
    found = sorted(ARCH.intersects_line(LineSegment((-10.0, 50.0), (110.0, 50.0))))
    assert found == pytest.approx([(3.0 - math.sqrt(3.0)) / 6.0, (3.0 + math.sqrt(3.0)) / 6.0], abs=1e-6)
    # the segment stops before the second crossing
    found = ARCH.intersects_line(LineSegment((-10.0, 50.0), (50.0, 50.0)))
    assert found == pytest.approx([(3.0 - math.sqrt(3.0)) / 6.0], abs=1e-6)


def test_intersects_line_order_one():
    curve = BezierCurve.with_points([(0, 0), (2, 2)])
    found = curve.intersects_line(LineSegment((0.0, 2.0), (2.0, 0.0)))
    assert found == pytest.approx([0.5])
    assert curve.intersects_line(LineSegment((5.0, 0.0), (6.0, -1.0))) == []


def test_curves_are_values():
    a = BezierCurve.with_points([(0, 0), (1, 2), (2, 0)])
    assert a == QUAD
    assert hash(a) == hash(QUAD)
    assert a is not QUAD
