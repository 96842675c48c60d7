"""
Renderer strategies - paint one step and move the fiber

A renderer is a callable (surface, state) -> FiberState. Drawing and motion
are fused: the returned state sits at the end of the step. Heading and step
length pass through unchanged.
"""

from typing import Callable, Optional

from ..config import DEFAULT_LINE_WIDTH, DEFAULT_POINT_RADIUS
from .colors import GradientPaint
from .errors import ConfigurationError
from .fiber_state import FiberState
from .geometry import step_endpoint

Renderer = Callable[[object, FiberState], FiberState]


def resolve_paint(surface, paint, x1: float, y1: float, x2: float, y2: float):
    """Solid colors pass through; gradients are laid out on this call's endpoints."""
    if isinstance(paint, GradientPaint):
        return surface.linear_gradient(x1, y1, x2, y2, paint.start, paint.stop)
    return paint


def segment_renderer(width: float = DEFAULT_LINE_WIDTH) -> Renderer:
    """Straight line from the current position to the next."""

    def render(surface, state: FiberState) -> FiberState:
        x2, y2 = step_endpoint(state.x, state.y, state.theta, state.d)
        paint = resolve_paint(surface, state.color, state.x, state.y, x2, y2)
        surface.stroke_line(state.x, state.y, x2, y2, paint, width)
        return state.moved_to(x2, y2)

    return render


def point_renderer(radius: float = DEFAULT_POINT_RADIUS) -> Renderer:
    """Small dot at the next position, no connecting line."""

    def render(surface, state: FiberState) -> FiberState:
        x2, y2 = step_endpoint(state.x, state.y, state.theta, state.d)
        paint = resolve_paint(surface, state.color, x2 - radius, y2, x2 + radius, y2)
        surface.fill_circle(x2, y2, radius, paint)
        return state.moved_to(x2, y2)

    return render


RENDERERS = {
    'segment': segment_renderer,
    'point': point_renderer,
}


def build_renderer(name: str, size: Optional[float] = None) -> Renderer:
    """Look up a renderer by name; size is the line width or dot radius."""
    if name not in RENDERERS:
        raise ConfigurationError(f"Unknown renderer: {name!r}")
    factory = RENDERERS[name]
    return factory() if size is None else factory(size)
