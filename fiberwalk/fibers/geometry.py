"""
Geometry - angle and distance helpers for fibers and the refraction field

Points are plain (x, y) tuples in surface coordinates unless noted.
"""

import math
from typing import Tuple

Point = Tuple[float, float]

TWO_PI = 2.0 * math.pi
HALF_PI = 0.5 * math.pi


def distance(p: Point, q: Point) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def point_to_line(p: Point, l1: Point, l2: Point) -> float:
    """
    Perpendicular distance from p to the infinite line through l1 and l2.

    l1 and l2 must be distinct; the length in the denominator is not guarded.
    """
    dx = l2[0] - l1[0]
    dy = l2[1] - l1[1]
    cross = dx * (l1[1] - p[1]) - dy * (l1[0] - p[0])
    return abs(cross) / math.hypot(dx, dy)


def normalize(p: Point, width: float, height: float) -> Point:
    """Surface coordinates -> [0, 1] x [0, 1]."""
    return (p[0] / width, p[1] / height)


def denormalize(p: Point, width: float, height: float) -> Point:
    """[0, 1] x [0, 1] -> surface coordinates."""
    return (p[0] * width, p[1] * height)


def within_extent(p: Point, l1: Point, l2: Point, pad: float = 0.0) -> bool:
    """True if p lies inside the bounding box of segment l1-l2 grown by pad."""
    return (min(l1[0], l2[0]) - pad <= p[0] <= max(l1[0], l2[0]) + pad
            and min(l1[1], l2[1]) - pad <= p[1] <= max(l1[1], l2[1]) + pad)


def line_angle(l1: Point, l2: Point) -> float:
    """atan of the line's slope, in (-pi/2, pi/2]. Vertical lines give pi/2."""
    angle = math.atan2(l2[1] - l1[1], l2[0] - l1[0])
    if angle > HALF_PI:
        angle -= math.pi
    elif angle <= -HALF_PI:
        angle += math.pi
    return angle


def line_normal_angle(l1: Point, l2: Point) -> float:
    """Normal angle of the line through l1 and l2: atan(m) + pi/2."""
    return line_angle(l1, l2) + HALF_PI


def slope_intercept(l1: Point, l2: Point) -> Tuple[float, float]:
    """
    Slope m and intercept b of the line through l1 and l2.

    Vertical lines return (inf, nan).
    """
    dx = l2[0] - l1[0]
    if dx == 0:
        return math.inf, math.nan
    m = (l2[1] - l1[1]) / dx
    return m, l1[1] - m * l1[0]


def wrap_delta(ad: float) -> float:
    """Wrap an angle difference into (-2pi, 2pi), keeping its sign."""
    return math.fmod(ad, TWO_PI)


def classify_angle(ad: float) -> Tuple[str, float]:
    """
    Bucket an incidence angle difference into quadrants A-D.

    Returns (quadrant, adjusted ad). Quadrants B and C are shifted by pi so
    that sin() of the result gives the bend direction.
    """
    ad = wrap_delta(ad)
    a = abs(ad)
    if a > 3.0 * HALF_PI:
        return 'A', ad
    if a > math.pi:
        return 'B', ad - math.pi
    if a > HALF_PI:
        return 'C', ad - math.pi
    return 'D', ad


def heading_from_center(x: float, y: float, cx: float, cy: float) -> float:
    """Heading pointing away from (cx, cy) through (x, y)."""
    return math.atan2(y - cy, x - cx)


def step_endpoint(x: float, y: float, theta: float, d: float) -> Point:
    """Point reached by moving d along heading theta."""
    return (x + d * math.cos(theta), y + d * math.sin(theta))
