"""Numeric primitives and tolerance configuration for the curve kernel."""

from __future__ import annotations

import math
from dataclasses import dataclass
from threading import RLock
from typing import Callable, Iterable, List, Optional


@dataclass(frozen=True)
class TolerancePolicy:
    """Container for numeric tolerances used throughout the curve kernel."""

    epsilon: float = 1e-6
    linear: float = 1e-4
    parallel: float = 1e-12  # relative to the product of segment lengths
    max_depth: int = 48
    max_nodes: int = 100_000

    def __post_init__(self) -> None:
        if self.epsilon < 0 or self.linear < 0 or self.parallel < 0:
            raise ValueError("tolerances must be non-negative")
        if self.max_depth < 1 or self.max_nodes < 1:
            raise ValueError("search budget must allow at least one step")


_policy_lock = RLock()
_current_policy: TolerancePolicy = TolerancePolicy()
_listeners: list[Callable[[TolerancePolicy], None]] = []


def get_tolerance() -> TolerancePolicy:
    with _policy_lock:
        return _current_policy


def set_tolerance(policy: TolerancePolicy) -> None:
    """Update the global tolerance policy and notify listeners."""

    with _policy_lock:
        global _current_policy
        _current_policy = policy
        listeners = list(_listeners)
    for cb in listeners:
        cb(policy)


def on_tolerance_changed(listener: Callable[[TolerancePolicy], None]) -> None:
    with _policy_lock:
        _listeners.append(listener)


def approximately(a: float, b: float, *, eps: Optional[float] = None) -> bool:
    tol = eps if eps is not None else get_tolerance().epsilon
    return abs(a - b) <= tol


def between(v: float, lo: float, hi: float, *, eps: Optional[float] = None) -> bool:
    """``lo <= v <= hi`` with both ends widened by ``eps``."""

    return (lo <= v <= hi) or approximately(v, lo, eps=eps) or approximately(v, hi, eps=eps)


def clamp(x: float, lo: float, hi: float) -> float:
    # NaN falls through every comparison and comes back unchanged.
    if hi < lo:
        raise ValueError("clamp requires lo <= hi")
    if x < lo:
        return lo
    if x > hi:
        return hi
    return x


def crt(v: float) -> float:
    """Real cube root that keeps the sign of ``v``."""

    if v < 0:
        return -math.pow(-v, 1.0 / 3.0)
    return math.pow(v, 1.0 / 3.0)


def map_range(v: float, ds: float, de: float, ts: float, te: float) -> float:
    """Linearly remap ``v`` from ``[ds, de]`` onto ``[ts, te]``."""

    return ts + (te - ts) * ((v - ds) / (de - ds))


def unit_interval(values: Iterable[float], *, eps: Optional[float] = None) -> List[float]:
    """Keep values inside ``[-eps, 1 + eps]`` and clamp them into ``[0, 1]``.

    This is the single acceptance rule for polynomial roots: both the
    baseline-relative solver and the extrema search run their candidates
    through it.
    """

    tol = eps if eps is not None else get_tolerance().epsilon
    return [clamp(v, 0.0, 1.0) for v in values if -tol <= v <= 1.0 + tol]


__all__ = [
    "TolerancePolicy",
    "get_tolerance",
    "set_tolerance",
    "on_tolerance_changed",
    "approximately",
    "between",
    "clamp",
    "crt",
    "map_range",
    "unit_interval",
]
