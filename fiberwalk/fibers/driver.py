"""
Fiber Driver - runs one fiber through its loops

Each tick: render, transform, then either queue the next tick, re-seed at a
loop boundary, or stop. The driver owns the per-loop step counter and is the
only thing allowed to change a fiber's steps or loop budget.
"""

from enum import Enum, auto
from typing import Callable, Optional, Sequence

from ..utils.logger import logger
from .fiber_state import FiberState
from .placement import Placement
from .renderers import Renderer
from .transforms import Transform


class DriverState(Enum):
    IDLE = auto()
    ACTIVE = auto()
    LOOP_BOUNDARY = auto()
    RESEED = auto()
    TERMINATED = auto()
    FAILED = auto()


class FiberDriver:
    """
    Drives a single fiber on a scheduler.

    loop_colors, when given, are two paints the fiber alternates between at
    every loop boundary. on_finished(driver) fires once on termination.
    """

    def __init__(self, index: int, state: FiberState,
                 renderer: Renderer, transform: Transform, placement: Placement,
                 surface, scheduler,
                 loop_colors: Optional[Sequence] = None,
                 on_finished: Optional[Callable[["FiberDriver"], None]] = None):
        self.index = index
        self._state = state
        self._renderer = renderer
        self._transform = transform
        self._placement = placement
        self._surface = surface
        self._scheduler = scheduler
        self._loop_colors = tuple(loop_colors) if loop_colors else None
        self._on_finished = on_finished

        self._step = 0
        self._tone = 0
        self._reseeds = 0
        self._ticks = 0
        self._status = DriverState.IDLE

    @property
    def state(self) -> FiberState:
        return self._state

    @property
    def step(self) -> int:
        return self._step

    @property
    def status(self) -> DriverState:
        return self._status

    @property
    def tick_count(self) -> int:
        return self._ticks

    @property
    def reseeds(self) -> int:
        return self._reseeds

    @property
    def alive(self) -> bool:
        return self._status in (DriverState.IDLE, DriverState.ACTIVE)

    def start(self) -> None:
        """Queue the first tick."""
        if self._status is not DriverState.IDLE:
            return
        self._status = DriverState.ACTIVE
        logger.fiber(self.index, "started", details=f"steps={self._state.steps} loop={self._state.loop}")
        self._scheduler.schedule(self._tick)

    def _tick(self) -> None:
        """One atomic render + transform cycle, then decide what comes next."""
        if self._status is not DriverState.ACTIVE:
            return

        state = self._state
        try:
            drawn = self._renderer(self._surface, state)
            moved = self._transform(drawn, self._step)
        except Exception:
            self._status = DriverState.FAILED
            logger.fiber(self.index, "failed", details=f"step {self._step}")
            raise
        self._ticks += 1

        # Only the driver changes steps and loop
        if moved.steps != state.steps or moved.loop != state.loop:
            moved = moved.evolve(steps=state.steps, loop=state.loop)

        if self._step + 1 < moved.steps:
            self._step += 1
            self._state = moved
            self._scheduler.schedule(self._tick)
            return

        self._status = DriverState.LOOP_BOUNDARY
        if moved.loop > 0:
            self._reseed(moved)
            return

        self._state = moved
        self._status = DriverState.TERMINATED
        logger.fiber(self.index, "terminated", details=f"{self._ticks} ticks")
        if self._on_finished is not None:
            self._on_finished(self)

    def _reseed(self, state: FiberState) -> None:
        self._status = DriverState.RESEED
        self._reseeds += 1
        state = state.evolve(loop=state.loop - 1)
        if self._loop_colors is not None:
            self._tone = 1 - self._tone
            state = state.evolve(color=self._loop_colors[self._tone])
        placed = self._placement(state, self._reseeds)

        self._state = placed.evolve(steps=state.steps, loop=state.loop)
        self._step = 0
        self._status = DriverState.ACTIVE
        logger.fiber(self.index, "reseeded", details=f"{self._state.loop} loops left")
        self._scheduler.schedule(self._tick)
