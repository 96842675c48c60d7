"""
Transform strategies - per-step changes to heading, length and color

A transform is a callable (state, step) -> FiberState, run once per tick
after the renderer. Transforms never touch steps or loop; the driver owns
those.
"""

import math
from typing import Callable, Sequence, Union

from ..config import FADE_K, SPIRAL_RATE, WANDER_ANGLE, WANDER_SCALE
from .errors import ConfigurationError
from .fiber_state import FiberState
from .rng import RandomSource

Transform = Callable[[FiberState, int], FiberState]


def identity(state: FiberState, step: int) -> FiberState:
    return state


def fade(k: float = FADE_K) -> Transform:
    """Alpha falls linearly to zero over a loop: alpha = k * (1 - step/steps)."""

    def apply(state: FiberState, step: int) -> FiberState:
        alpha = k * (1.0 - step / state.steps)
        return state.evolve(color=state.color.with_alpha(alpha))

    return apply


def wander(rng: RandomSource, angle: float = WANDER_ANGLE,
           scale=WANDER_SCALE) -> Transform:
    """Bounded random walk on heading and step length."""

    def apply(state: FiberState, step: int) -> FiberState:
        theta = state.theta + rng.uniform(-angle, angle)
        d = state.d * rng.uniform(scale[0], scale[1])
        return state.evolve(theta=theta, d=d)

    return apply


def spiral(rng: RandomSource, rate=SPIRAL_RATE) -> Transform:
    """Heading only ever increases, so paths curl."""

    def apply(state: FiberState, step: int) -> FiberState:
        turn = rng.uniform(rate[0], rate[1]) * math.pi / state.steps
        return state.evolve(theta=state.theta + turn)

    return apply


def bounce(width: float, height: float) -> Transform:
    """Turn around once the fiber has left the surface."""

    def apply(state: FiberState, step: int) -> FiberState:
        if state.x > width or state.x < 0 or state.y > height or state.y < 0:
            return state.evolve(theta=state.theta + math.pi)
        return state

    return apply


def refract(field) -> Transform:
    """Delegate to a RefractionField."""
    return field.transform


def chain(*transforms: Transform) -> Transform:
    """Apply transforms left to right."""
    if not transforms:
        return identity
    if len(transforms) == 1:
        return transforms[0]

    def apply(state: FiberState, step: int) -> FiberState:
        for t in transforms:
            state = t(state, step)
        return state

    return apply


# === Registry ===

def _build_refract(width, height, rng, field):
    if field is None:
        raise ConfigurationError("'refract' transform needs a refraction field")
    return refract(field)


TRANSFORMS = {
    'identity': lambda width, height, rng, field: identity,
    'fade': lambda width, height, rng, field: fade(),
    'wander': lambda width, height, rng, field: wander(rng),
    'spiral': lambda width, height, rng, field: spiral(rng),
    'bounce': lambda width, height, rng, field: bounce(width, height),
    'refract': _build_refract,
}

TRANSFORM_NAMES = tuple(TRANSFORMS)


def build_transform(spec: Union[str, Sequence[str]], width: float, height: float,
                    rng: RandomSource, field=None) -> Transform:
    """
    Build a transform from a name or a list of names (chained in order).

    'refract' needs a field.
    """
    names = [spec] if isinstance(spec, str) else list(spec)
    built = []
    for name in names:
        if name not in TRANSFORMS:
            raise ConfigurationError(f"Unknown transform: {name!r}")
        built.append(TRANSFORMS[name](width, height, rng, field))
    return chain(*built)
