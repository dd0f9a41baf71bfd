"""Curve/curve and self intersection by recursive subdivision.

Both curves are cut into regions (:class:`~curvekit.curve.Subcurve`) that are
halved until they are flat enough to be replaced by their chords; crossing
chords give the intersection parameters.  Each query runs under a
:class:`SearchBudget` so coincident or nearly coincident curves cannot keep
the search going forever.
"""

from __future__ import annotations

import concurrent.futures
import logging
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from . import settings
from .curve import BezierCurve, Subcurve
from .lines import line_distance2
from .numeric import TolerancePolicy, approximately, get_tolerance
from .types import Intersection

log = logging.getLogger("curvekit.intersection")


class ConvergenceError(RuntimeError):
    """The search ran out of budget before every region became flat.

    ``partial`` holds the intersections found before the search stopped,
    sorted and de-duplicated.  An empty *return value* from the engine means
    the curves do not meet; this exception means the answer is unknown.
    """

    def __init__(self, reason: str, partial: Sequence[Intersection] = ()):
        super().__init__(f"intersection search did not converge: {reason}")
        self.reason = reason
        self.partial = list(partial)


@dataclass
class SearchBudget:
    max_depth: int
    max_nodes: int
    nodes: int = 0
    deepest: int = 0
    exhausted: Optional[str] = None
    stopped: bool = False

    @classmethod
    def from_policy(cls, policy: TolerancePolicy) -> "SearchBudget":
        return cls(max_depth=policy.max_depth, max_nodes=policy.max_nodes)

    def enter(self, depth: int) -> bool:
        """Account for one visited region pair; False means do not descend."""

        if self.stopped:
            return False
        self.nodes += 1
        if self.nodes > self.max_nodes:
            # nothing else runs once the node budget is gone
            self.stopped = True
            self.exhausted = f"visited more than {self.max_nodes} region pairs"
            log.debug("search stopped: %s", self.exhausted)
            return False
        if depth > self.max_depth:
            # only this branch is abandoned; siblings keep going
            if self.exhausted is None:
                self.exhausted = f"subdivision deeper than {self.max_depth} levels"
                log.debug("search branch abandoned: %s", self.exhausted)
            return False
        self.deepest = max(self.deepest, depth)
        return True


def _pair_iteration(
    c1: Subcurve,
    c2: Subcurve,
    threshold2: float,
    budget: SearchBudget,
    eps: float,
    depth: int,
) -> List[Intersection]:
    if not budget.enter(depth):
        return []
    if not c1.curve.bounding_box.overlaps(c2.curve.bounding_box):
        return []

    f1 = c1.curve.flatness
    f2 = c2.curve.flatness
    a = c1.curve.points
    b = c2.curve.points
    d2, s1, s2 = line_distance2(a[0], a[-1], b[0], b[-1])

    flat1 = f1 < threshold2
    flat2 = f2 < threshold2
    if flat1 and flat2:
        if d2 <= eps * eps:
            return [Intersection(c1.global_parameter(s1), c2.global_parameter(s2))]
        return []
    # each curve stays within sqrt(flatness) of its chord
    reach = math.sqrt(f1) + math.sqrt(f2)
    if d2 > reach * reach:
        return []

    if flat1:
        right = c2.split(0.5)
        pairs = [(c1, right[0]), (c1, right[1])]
    elif flat2:
        left = c1.split(0.5)
        pairs = [(left[0], c2), (left[1], c2)]
    else:
        left = c1.split(0.5)
        right = c2.split(0.5)
        pairs = [(l, r) for l in left for r in right]

    found: List[Intersection] = []
    for l, r in pairs:
        found.extend(_pair_iteration(l, r, threshold2, budget, eps, depth + 1))
    return found


def _ordered(found: Iterable[Intersection], eps: float) -> List[Intersection]:
    """Sort by ``(t1, t2)`` and drop hits equal to a kept one within ``eps``."""

    result: List[Intersection] = []
    for hit in sorted(found):
        duplicate = False
        # kept hits are sorted by t1, so only the tail can be within eps
        for kept in reversed(result):
            if hit.t1 - kept.t1 > eps:
                break
            if approximately(kept.t2, hit.t2, eps=eps):
                duplicate = True
                break
        if not duplicate:
            result.append(hit)
    return result


def _check_threshold(threshold: float) -> None:
    if not threshold > 0:
        raise ValueError(f"intersection threshold must be positive, got {threshold}")


def _finish(found: List[Intersection], budget: SearchBudget, eps: float) -> List[Intersection]:
    result = _ordered(found, eps)
    log.debug(
        "intersection search: %d hits, %d region pairs, depth %d",
        len(result),
        budget.nodes,
        budget.deepest,
    )
    if budget.exhausted is not None:
        raise ConvergenceError(budget.exhausted, result)
    return result


def pair_iteration(
    c1: Subcurve,
    c2: Subcurve,
    threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD,
    *,
    policy: Optional[TolerancePolicy] = None,
) -> List[Intersection]:
    """Intersections between two regions, in the regions' global parameters."""

    _check_threshold(threshold)
    policy = policy or get_tolerance()
    budget = SearchBudget.from_policy(policy)
    found = _pair_iteration(c1, c2, threshold * threshold, budget, policy.epsilon, 0)
    return _finish(found, budget, policy.epsilon)


def _curves_intersect(
    c1: Sequence[Subcurve],
    c2: Sequence[Subcurve],
    threshold: float,
    budget: SearchBudget,
    eps: float,
) -> List[Intersection]:
    pairs = [
        (l, r)
        for l in c1
        for r in c2
        if l.curve.bounding_box.overlaps(r.curve.bounding_box)
    ]
    found: List[Intersection] = []
    threshold2 = threshold * threshold
    for l, r in pairs:
        found.extend(_pair_iteration(l, r, threshold2, budget, eps, 0))
        if budget.stopped:
            break
    return found


def curves_intersect(
    c1: Sequence[Subcurve],
    c2: Sequence[Subcurve],
    threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD,
    *,
    policy: Optional[TolerancePolicy] = None,
) -> List[Intersection]:
    """Intersect every region of ``c1`` with every region of ``c2``.

    Region pairs whose bounding boxes do not overlap are dropped before any
    subdivision happens.
    """

    _check_threshold(threshold)
    policy = policy or get_tolerance()
    budget = SearchBudget.from_policy(policy)
    found = _curves_intersect(c1, c2, threshold, budget, policy.epsilon)
    return _finish(found, budget, policy.epsilon)


def _require_planar(*curves: BezierCurve) -> None:
    for c in curves:
        if c.dimensions != 2:
            raise ValueError("curve intersection is only defined for 2D curves")


def intersects(
    a: BezierCurve,
    b: BezierCurve,
    threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD,
    *,
    policy: Optional[TolerancePolicy] = None,
) -> List[Intersection]:
    """Parameter pairs ``(t on a, t on b)`` where two curves meet.

    ``a`` is reduced to simple segments first; ``b`` is searched as a single
    region.  Use :func:`self_intersects` for a curve against itself.
    """

    if a is b:
        raise ValueError("use self_intersects() to intersect a curve with itself")
    _check_threshold(threshold)
    _require_planar(a, b)
    policy = policy or get_tolerance()
    budget = SearchBudget.from_policy(policy)
    found = _curves_intersect(a.reduce(), [Subcurve.whole(b)], threshold, budget, policy.epsilon)
    return _finish(found, budget, policy.epsilon)


def self_intersects(
    curve: BezierCurve,
    threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD,
    *,
    policy: Optional[TolerancePolicy] = None,
) -> List[Intersection]:
    """Parameter pairs ``(t1, t2)`` with ``t1 < t2`` where a curve crosses itself.

    Simple segments cannot cross their direct neighbours, so each segment is
    only compared with the segments two or more places after it.
    """

    _check_threshold(threshold)
    _require_planar(curve)
    policy = policy or get_tolerance()
    budget = SearchBudget.from_policy(policy)
    reduced = curve.reduce()
    found: List[Intersection] = []
    for i in range(len(reduced) - 2):
        found.extend(_curves_intersect([reduced[i]], reduced[i + 2:], threshold, budget, policy.epsilon))
        if budget.stopped:
            break
    return _finish(found, budget, policy.epsilon)


def intersect_many(
    pairs: Iterable[Tuple[BezierCurve, BezierCurve]],
    threshold: float = settings.DEFAULT_CURVE_INTERSECTION_THRESHOLD,
    max_workers: Optional[int] = None,
    *,
    policy: Optional[TolerancePolicy] = None,
) -> List[List[Intersection]]:
    """Run independent :func:`intersects` queries on a thread pool.

    Results come back in the order of ``pairs``.  The first failing query
    re-raises its exception here.
    """

    _check_threshold(threshold)
    pairs = list(pairs)
    policy = policy or get_tolerance()
    results: List[Optional[List[Intersection]]] = [None] * len(pairs)
    with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
        future_to_index = {
            executor.submit(intersects, a, b, threshold, policy=policy): i
            for i, (a, b) in enumerate(pairs)
        }
        for future in concurrent.futures.as_completed(future_to_index):
            results[future_to_index[future]] = future.result()
    log.debug("intersect_many: %d pairs", len(pairs))
    return results  # type: ignore[return-value]


__all__ = [
    "ConvergenceError",
    "SearchBudget",
    "pair_iteration",
    "curves_intersect",
    "intersects",
    "self_intersects",
    "intersect_many",
]
