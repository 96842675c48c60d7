"""
Refraction Field - a virtual boundary that bends passing fibers

The field is a line segment between two boundary points. A fiber whose
position is near the segment gets its heading bent by

    delta = refraction * sin(ad),   ad = norm - theta

where norm is the line's normal angle. The bend direction is also written
into the fiber's color (red/green shift), and an optional surface receives a
faint trace dot at every activation, plus quadrant markers in debug mode.

Built once per scene and never mutated; attach() returns a bound copy.
"""

import copy
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from ..config import (
    QUADRANT_COLORS,
    REFRACTION_DOT_CHROMA,
    REFRACTION_DOT_RADIUS,
    REFRACTION_LINE_CHROMA,
    REFRACTION_STRENGTH,
    REFRACTION_THRESHOLD,
    REFRACTION_TINT_ALPHA,
    REFRACTION_TRACE_ALPHA,
)
from ..utils.logger import logger
from .colors import Rgba, clamp_channel, parse_color
from .errors import ConfigurationError
from .fiber_state import FiberState
from .geometry import (
    Point,
    classify_angle,
    denormalize,
    line_normal_angle,
    point_to_line,
    slope_intercept,
    within_extent,
)
from .rng import RandomSource

_BASE_CHANNEL = 128
_MARKER_RADIUS = 2.0


@dataclass
class Refraction:
    """Outcome of one field evaluation (None from evaluate() when inactive)."""
    distance: float
    quadrant: str
    ad: float
    delta: float
    trace_color: Rgba
    tint_color: Rgba


def shifted_color(delta: float, chroma: float, alpha: float) -> Rgba:
    """Mid grey with red/green pushed apart by delta * chroma."""
    shift = delta * chroma
    return Rgba(
        clamp_channel(_BASE_CHANNEL - shift),
        clamp_channel(_BASE_CHANNEL + shift),
        _BASE_CHANNEL,
        alpha,
    )


class RefractionField:
    """
    Bends fibers that come within threshold of the boundary segment.

    p1, p2 are in surface coordinates. threshold is in surface units too.
    """

    def __init__(self, p1: Point, p2: Point,
                 refraction: float = REFRACTION_STRENGTH,
                 dot_chroma: float = REFRACTION_DOT_CHROMA,
                 line_chroma: float = REFRACTION_LINE_CHROMA,
                 threshold: float = REFRACTION_THRESHOLD,
                 debug: bool = False,
                 surface=None):
        if p1[0] == p2[0] and p1[1] == p2[1]:
            raise ConfigurationError(f"Refraction boundary points coincide: {p1}")
        if threshold <= 0:
            raise ConfigurationError(f"Refraction threshold must be > 0, got {threshold}")

        self._p1 = (float(p1[0]), float(p1[1]))
        self._p2 = (float(p2[0]), float(p2[1]))
        self._refraction = refraction
        self._dot_chroma = dot_chroma
        self._line_chroma = line_chroma
        self._threshold = threshold
        self._debug = debug
        self._surface = surface

        self._m, self._b = slope_intercept(self._p1, self._p2)
        self._norm = line_normal_angle(self._p1, self._p2)

    @classmethod
    def from_normalized(cls, p1: Point, p2: Point, width: float, height: float,
                        **kwargs) -> "RefractionField":
        """Build from resolution-independent [0, 1] boundary points."""
        return cls(denormalize(p1, width, height), denormalize(p2, width, height), **kwargs)

    @classmethod
    def random(cls, width: float, height: float, rng: RandomSource,
               **kwargs) -> "RefractionField":
        """Boundary between two random points of the surface."""
        p1 = (rng.random(), rng.random())
        p2 = (rng.random(), rng.random())
        while p1 == p2:
            p2 = (rng.random(), rng.random())
        return cls.from_normalized(p1, p2, width, height, **kwargs)

    # === Properties ===

    @property
    def points(self) -> Tuple[Point, Point]:
        return self._p1, self._p2

    @property
    def slope(self) -> float:
        return self._m

    @property
    def intercept(self) -> float:
        return self._b

    @property
    def norm(self) -> float:
        return self._norm

    @property
    def refraction(self) -> float:
        return self._refraction

    @property
    def threshold(self) -> float:
        return self._threshold

    @property
    def surface(self):
        return self._surface

    def attach(self, surface) -> "RefractionField":
        """Copy of this field that draws traces onto surface."""
        bound = copy.copy(self)
        bound._surface = surface
        return bound

    # === Evaluation ===

    def is_active(self, x: float, y: float) -> bool:
        """True inside the padded extent and closer than threshold to the line."""
        p = (x, y)
        return (within_extent(p, self._p1, self._p2, self._threshold)
                and point_to_line(p, self._p1, self._p2) < self._threshold)

    def evaluate(self, state: FiberState) -> Optional[Refraction]:
        """Compute the bend for state, or None outside the activation region."""
        if not self.is_active(state.x, state.y):
            return None
        r = point_to_line(state.position, self._p1, self._p2)

        quadrant, ad = classify_angle(self._norm - state.theta)
        delta = self._refraction * math.sin(ad)
        return Refraction(
            distance=r,
            quadrant=quadrant,
            ad=ad,
            delta=delta,
            trace_color=shifted_color(delta, self._dot_chroma, REFRACTION_TRACE_ALPHA),
            tint_color=shifted_color(delta, self._line_chroma, REFRACTION_TINT_ALPHA),
        )

    def transform(self, state: FiberState, step: int) -> FiberState:
        """Transform strategy: bend and tint the fiber when it is near the boundary."""
        hit = self.evaluate(state)
        if hit is None:
            return state

        if self._surface is not None:
            if self._debug:
                marker = parse_color(QUADRANT_COLORS[hit.quadrant])
                self._surface.fill_circle(state.x, state.y, _MARKER_RADIUS, marker)
            self._surface.fill_circle(state.x, state.y, REFRACTION_DOT_RADIUS, hit.trace_color)

        logger.debug(
            f"bend {hit.delta:+.3f} at ({state.x:.1f}, {state.y:.1f})",
            component="FIELD",
            details=f"quadrant {hit.quadrant}",
        )
        return state.evolve(theta=state.theta + hit.delta, color=hit.tint_color)

    def draw_boundary(self, surface, color, width: float = 1.0) -> None:
        """Stroke the boundary segment itself (debug aid)."""
        surface.stroke_line(self._p1[0], self._p1[1], self._p2[0], self._p2[1],
                            parse_color(color), width)
