"""
Pure 2D vector arithmetic and cubic Bezier math.

Every function here is stateless and returns new Point instances; nothing in
this module mutates its arguments.
"""

import math
from typing import NamedTuple

import numpy as np

from .cad_types import Point, PointLike, to_point
from .constants import POINT_TOLERANCE, SNAP_ANGLE_INCREMENT


class CubicCurve(NamedTuple):
    p0: Point
    cp1: Point
    cp2: Point
    p3: Point


def distance(p1: PointLike, p2: PointLike) -> float:
    """Euclidean distance between two points"""
    p1, p2 = to_point(p1), to_point(p2)
    return math.hypot(p2.x - p1.x, p2.y - p1.y)


def angle(p1: PointLike, p2: PointLike) -> float:
    """Direction (radians, atan2) of the vector from p1 to p2"""
    p1, p2 = to_point(p1), to_point(p2)
    return math.atan2(p2.y - p1.y, p2.x - p1.x)


def add(p1: PointLike, p2: PointLike) -> Point:
    p1, p2 = to_point(p1), to_point(p2)
    return Point(p1.x + p2.x, p1.y + p2.y)


def subtract(p1: PointLike, p2: PointLike) -> Point:
    p1, p2 = to_point(p1), to_point(p2)
    return Point(p1.x - p2.x, p1.y - p2.y)


def scale(p: PointLike, factor: float) -> Point:
    p = to_point(p)
    return Point(p.x * factor, p.y * factor)


def negate(p: PointLike) -> Point:
    p = to_point(p)
    return Point(-p.x, -p.y)


def length(p: PointLike) -> float:
    """Length of a vector"""
    p = to_point(p)
    return math.hypot(p.x, p.y)


def equals(p1: PointLike, p2: PointLike, tolerance: float = POINT_TOLERANCE) -> bool:
    return to_point(p1).equals(to_point(p2), tolerance)


def polar(theta: float, radius: float) -> Point:
    """Vector of the given length pointing along ``theta``"""
    return Point(math.cos(theta) * radius, math.sin(theta) * radius)


def rotate(p: PointLike, theta: float, origin: PointLike = (0.0, 0.0)) -> Point:
    """Rotate ``p`` around ``origin`` by ``theta`` radians (counter-clockwise)."""
    p, origin = to_point(p), to_point(origin)
    dx, dy = p.x - origin.x, p.y - origin.y
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    return Point(origin.x + dx * cos_t - dy * sin_t, origin.y + dx * sin_t + dy * cos_t)


def snap_angle(theta: float, increment: float = SNAP_ANGLE_INCREMENT) -> float:
    """Round an angle to the nearest multiple of ``increment``."""
    if increment <= 0:
        raise ValueError(f"Snap increment must be positive, got {increment}")
    return round(theta / increment) * increment


def snap_to_angle(
    origin: PointLike, position: PointLike, increment: float = SNAP_ANGLE_INCREMENT
) -> Point:
    """
    Constrain ``position`` so that the direction origin -> position is a
    multiple of ``increment``. The distance from ``origin`` is preserved.
    """
    origin, position = to_point(origin), to_point(position)
    radius = distance(origin, position)
    if radius == 0:
        return position
    snapped = snap_angle(angle(origin, position), increment)
    return add(origin, polar(snapped, radius))


def lerp(p0: PointLike, p1: PointLike, t: float) -> Point:
    """Linear interpolation between two points"""
    p0, p1 = to_point(p0), to_point(p1)
    return Point(p0.x + t * (p1.x - p0.x), p0.y + t * (p1.y - p0.y))


def cubic_bezier_point(
    p0: PointLike, cp1: PointLike, cp2: PointLike, p3: PointLike, t: float
) -> Point:
    """Evaluate a cubic Bezier curve at parameter t (0 to 1)"""
    p0, cp1, cp2, p3 = to_point(p0), to_point(cp1), to_point(cp2), to_point(p3)
    t2 = t * t
    t3 = t2 * t
    mt = 1 - t
    mt2 = mt * mt
    mt3 = mt2 * mt
    return Point(
        mt3 * p0.x + 3 * mt2 * t * cp1.x + 3 * mt * t2 * cp2.x + t3 * p3.x,
        mt3 * p0.y + 3 * mt2 * t * cp1.y + 3 * mt * t2 * cp2.y + t3 * p3.y,
    )


def subdivide_cubic_bezier(
    p0: PointLike, cp1: PointLike, cp2: PointLike, p3: PointLike, t: float
):
    """
    Split a cubic Bezier curve at parameter t with De Casteljau's algorithm.

    Args:
        p0, cp1, cp2, p3: Start point, control points and end point
        t: Split parameter

    Returns:
        Tuple of two CubicCurve descriptions which together trace the
        original curve: the first covers [0, t], the second [t, 1].
    """
    p0, cp1, cp2, p3 = to_point(p0), to_point(cp1), to_point(cp2), to_point(p3)
    p01 = lerp(p0, cp1, t)
    p12 = lerp(cp1, cp2, t)
    p23 = lerp(cp2, p3, t)

    p012 = lerp(p01, p12, t)
    p123 = lerp(p12, p23, t)

    p0123 = lerp(p012, p123, t)

    return (
        CubicCurve(p0=p0, cp1=p01, cp2=p012, p3=p0123),
        CubicCurve(p0=p0123, cp1=p123, cp2=p23, p3=p3),
    )


def sample_parameters(samples: int) -> np.ndarray:
    """``samples + 1`` uniformly spaced parameters covering [0, 1]."""
    if samples < 1:
        raise ValueError(f"Need at least one sample step, got {samples}")
    return np.linspace(0.0, 1.0, samples + 1)


def sample_cubic_bezier(
    p0: PointLike, cp1: PointLike, cp2: PointLike, p3: PointLike, samples: int
) -> np.ndarray:
    """Evaluate a cubic curve at ``samples + 1`` parameters; returns (N, 2)."""
    t = sample_parameters(samples)[:, None]
    mt = 1.0 - t
    ctrl = [to_point(p).as_array() for p in (p0, cp1, cp2, p3)]
    # offsets from p0 so a collapsed curve samples to exactly p0
    return ctrl[0] + (
        3 * mt**2 * t * (ctrl[1] - ctrl[0])
        + 3 * mt * t**2 * (ctrl[2] - ctrl[0])
        + t**3 * (ctrl[3] - ctrl[0])
    )


def sample_line(p0: PointLike, p1: PointLike, samples: int) -> np.ndarray:
    """Evaluate a straight segment at ``samples + 1`` parameters; returns (N, 2)."""
    t = sample_parameters(samples)[:, None]
    a, b = to_point(p0).as_array(), to_point(p1).as_array()
    return a + t * (b - a)


def closest_sample(samples: np.ndarray, position: PointLike):
    """
    Index and distance of the sample nearest to ``position``.

    The first sample wins on exact ties, matching a linear scan with a strict
    ``<`` comparison.
    """
    position = to_point(position)
    deltas = samples - position.as_array()
    dists = np.hypot(deltas[:, 0], deltas[:, 1])
    finite = np.isfinite(dists)
    if not finite.any():
        return None
    dists = np.where(finite, dists, np.inf)
    idx = int(np.argmin(dists))
    return idx, float(dists[idx])
