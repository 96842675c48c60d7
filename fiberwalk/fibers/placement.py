"""
Placement strategies - where a fiber (re)spawns and which way it faces

A placement is a callable (state, loop_index) -> FiberState. loop_index is 0
for the initial spawn and counts re-seeds after that. Factories close over
their parameters and an injected random source; nothing else is shared.
"""

import math
from typing import Callable, Tuple

from ..config import RING_BAND, RING_DRIFT, RING_GROWTH, RING_JITTER
from .errors import ConfigurationError
from .fiber_state import FiberState
from .geometry import TWO_PI, Point, heading_from_center
from .rng import RandomSource

Placement = Callable[[FiberState, int], FiberState]


def ring_band(width: float, height: float, inner: float, outer: float) -> Tuple[float, float]:
    """Radius band proportional to the surface's smaller side."""
    side = min(width, height)
    return inner * side, outer * side


def _on_ring(state: FiberState, center: Point, radius: float, theta: float) -> FiberState:
    return state.evolve(
        x=center[0] + radius * math.cos(theta),
        y=center[1] + radius * math.sin(theta),
        theta=theta,
    )


def ring_placement(center: Point, r_min: float, r_max: float, rng: RandomSource) -> Placement:
    """Spawn on a random point of a ring, heading outward."""

    def place(state: FiberState, loop_index: int) -> FiberState:
        theta = rng.uniform(0.0, TWO_PI)
        radius = rng.uniform(r_min, r_max)
        return _on_ring(state, center, radius, theta)

    return place


def moving_ring_placement(center: Point, r_min: float, r_max: float,
                          drift: Point, jitter: float, rng: RandomSource) -> Placement:
    """Ring whose center moves by drift on every re-seed."""

    def place(state: FiberState, loop_index: int) -> FiberState:
        cx = center[0] + drift[0] * loop_index + rng.uniform(-jitter, jitter)
        cy = center[1] + drift[1] * loop_index + rng.uniform(-jitter, jitter)
        theta = rng.uniform(0.0, TWO_PI)
        radius = rng.uniform(r_min, r_max)
        return _on_ring(state, (cx, cy), radius, theta)

    return place


def expanding_ring_placement(center: Point, r_min: float, r_max: float,
                             growth: float, jitter: float, rng: RandomSource) -> Placement:
    """Ring whose radius grows by growth on every re-seed."""

    def place(state: FiberState, loop_index: int) -> FiberState:
        theta = rng.uniform(0.0, TWO_PI)
        radius = rng.uniform(r_min, r_max) + growth * loop_index + rng.uniform(-jitter, jitter)
        return _on_ring(state, center, radius, theta)

    return place


def random_placement(width: float, height: float, rng: RandomSource) -> Placement:
    """Anywhere on the surface, heading away from the center."""
    cx, cy = width / 2.0, height / 2.0

    def place(state: FiberState, loop_index: int) -> FiberState:
        x = rng.uniform(0.0, width)
        y = rng.uniform(0.0, height)
        return state.evolve(x=x, y=y, theta=heading_from_center(x, y, cx, cy))

    return place


def fixed_placement(x: float, y: float, theta: float = 0.0) -> Placement:
    def place(state: FiberState, loop_index: int) -> FiberState:
        return state.evolve(x=x, y=y, theta=theta)

    return place


# === Registry ===

def _build_ring(width, height, rng):
    r_min, r_max = ring_band(width, height, *RING_BAND)
    return ring_placement((width / 2.0, height / 2.0), r_min, r_max, rng)


def _build_moving_ring(width, height, rng):
    side = min(width, height)
    r_min, r_max = ring_band(width, height, *RING_BAND)
    drift = (RING_DRIFT[0] * side, RING_DRIFT[1] * side)
    return moving_ring_placement((width / 2.0, height / 2.0), r_min, r_max,
                                 drift, RING_JITTER, rng)


def _build_expanding_ring(width, height, rng):
    r_min, r_max = ring_band(width, height, *RING_BAND)
    growth = RING_GROWTH * min(width, height)
    return expanding_ring_placement((width / 2.0, height / 2.0), r_min, r_max,
                                    growth, RING_JITTER, rng)


def _build_random(width, height, rng):
    return random_placement(width, height, rng)


PLACEMENTS = {
    'ring': _build_ring,
    'moving_ring': _build_moving_ring,
    'expanding_ring': _build_expanding_ring,
    'random': _build_random,
}


def build_placement(name: str, width: float, height: float, rng: RandomSource) -> Placement:
    """Look up a placement by name and bind it to a surface size."""
    if name not in PLACEMENTS:
        raise ConfigurationError(f"Unknown placement: {name!r}")
    return PLACEMENTS[name](width, height, rng)
