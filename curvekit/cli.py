from __future__ import annotations

import argparse
import json
import logging
import sys

from . import settings
from .curve import BezierCurve
from .intersection import ConvergenceError, intersects, self_intersects


def _curve(text: str) -> BezierCurve:
    try:
        points = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"control points are not valid JSON: {exc}") from exc
    if not isinstance(points, list):
        raise ValueError("control points must be a JSON list of coordinate lists")
    return BezierCurve.with_points(points)


def _hits(found) -> list:
    return [{"t1": hit.t1, "t2": hit.t2} for hit in found]


def _cmd_intersect(args: argparse.Namespace) -> int:
    a = _curve(args.a)
    b = _curve(args.b)
    found = intersects(a, b, float(args.threshold))
    print(json.dumps({"intersections": _hits(found)}, indent=2))
    return 0


def _cmd_self_intersect(args: argparse.Namespace) -> int:
    found = self_intersects(_curve(args.curve), float(args.threshold))
    print(json.dumps({"intersections": _hits(found)}, indent=2))
    return 0


def _cmd_bbox(args: argparse.Namespace) -> int:
    box = _curve(args.curve).bounding_box
    print(json.dumps({"lower": list(box.lower), "upper": list(box.upper)}, indent=2))
    return 0


def _cmd_extrema(args: argparse.Namespace) -> int:
    ext = _curve(args.curve).extrema(include_inflection=not args.no_inflection)
    res = {
        "per_dimension": [list(axis) for axis in ext.per_dimension],
        "values": list(ext.values),
    }
    print(json.dumps(res, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(prog="curvekit")
    p.add_argument("-v", "--verbose", action="store_true", help="Log search statistics to stderr")
    sub = p.add_subparsers(dest="cmd", required=True)

    pts_help = "Control points as JSON, e.g. '[[0,0],[1,2],[2,0]]'"

    inter = sub.add_parser("intersect", help="Intersect two curves")
    inter.add_argument("--a", type=str, required=True, help=pts_help)
    inter.add_argument("--b", type=str, required=True, help=pts_help)
    inter.add_argument("--threshold", type=float, default=settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD)
    inter.set_defaults(func=_cmd_intersect)

    selfi = sub.add_parser("self-intersect", help="Find where a curve crosses itself")
    selfi.add_argument("--curve", type=str, required=True, help=pts_help)
    selfi.add_argument("--threshold", type=float, default=settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD)
    selfi.set_defaults(func=_cmd_self_intersect)

    bbox = sub.add_parser("bbox", help="Tight bounding box of a curve")
    bbox.add_argument("--curve", type=str, required=True, help=pts_help)
    bbox.set_defaults(func=_cmd_bbox)

    ext = sub.add_parser("extrema", help="Extremum parameters per dimension")
    ext.add_argument("--curve", type=str, required=True, help=pts_help)
    ext.add_argument("--no-inflection", action="store_true", help="Leave out inflection points")
    ext.set_defaults(func=_cmd_extrema)

    ns = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if ns.verbose else logging.WARNING)
    try:
        return int(ns.func(ns))
    except ConvergenceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
