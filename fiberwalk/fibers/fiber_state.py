"""
Fiber State - the record one fiber carries from step to step

States are frozen; strategies return new values via evolve().
The per-loop step counter lives in the driver, not here.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict

from .colors import Paint, Rgba, paint_to_dict, parse_paint
from .errors import ConfigurationError


@dataclass(frozen=True)
class FiberState:
    """
    One evolving walk.

    x, y:   position in surface coordinates
    theta:  heading in radians
    d:      step length
    color:  paint for the next draw
    steps:  ticks per loop (fixed at creation)
    loop:   remaining re-seeds
    """

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0
    d: float = 10.0
    color: Paint = field(default_factory=lambda: Rgba(128, 128, 128))
    steps: int = 1
    loop: int = 0

    def __post_init__(self):
        if self.steps <= 0:
            raise ConfigurationError(f"steps must be > 0, got {self.steps}")
        if self.loop < 0:
            raise ConfigurationError(f"loop must be >= 0, got {self.loop}")

    def evolve(self, **changes) -> "FiberState":
        return replace(self, **changes)

    def moved_to(self, x: float, y: float) -> "FiberState":
        return replace(self, x=x, y=y)

    @property
    def position(self):
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for log snapshots and debugging."""
        return {
            "x": self.x,
            "y": self.y,
            "theta": self.theta,
            "d": self.d,
            "color": paint_to_dict(self.color),
            "steps": self.steps,
            "loop": self.loop,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FiberState":
        return cls(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            theta=float(data.get("theta", 0.0)),
            d=float(data.get("d", 10.0)),
            color=parse_paint(data.get("color", "#808080")),
            steps=int(data.get("steps", 1)),
            loop=int(data.get("loop", 0)),
        )
