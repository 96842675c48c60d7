"""
Fiber Controller - Manages a scene run on a surface

Connects:
- SceneConfig / build_scene (assembly)
- FiberDriver (one per fiber)
- FrameScheduler (frame-paced or immediate ticks)
- QtSurface + noise overlay (drawing)

Emits signals for UI updates. In frame mode the scheduler's QTimer paces
ticks; in immediate mode run_until_done() renders the whole scene in one go.
"""

from typing import List, Optional

import numpy as np
from PyQt5.QtCore import QObject, pyqtSignal
from PyQt5.QtGui import QImage

from ..utils.logger import logger
from .driver import FiberDriver
from .noise import add_noise, apply_noise
from .rng import XorShift32, generate_random_seed
from .scene import Scene, SceneConfig, build_scene
from .scheduler import FrameScheduler
from .surface import QtSurface


class FiberController(QObject):
    """
    Controller for one scene at a time.

    start() validates and seeds before anything is scheduled, so a bad
    config raises ConfigurationError with the surface untouched.
    """

    frame_rendered = pyqtSignal(int)     # frame number
    fiber_finished = pyqtSignal(int)     # fiber index
    fiber_failed = pyqtSignal(str)       # error message
    scene_finished = pyqtSignal()
    running_changed = pyqtSignal(bool)

    def __init__(self, config: Optional[SceneConfig] = None, surface=None, parent=None):
        super().__init__(parent)

        self._config = config or SceneConfig()
        self._surface = surface
        self._scene: Optional[Scene] = None
        self._drivers: List[FiberDriver] = []
        self._finished = 0
        self._running = False
        self._seed: Optional[int] = None
        self._noise_tile: Optional[QImage] = None

        self._scheduler = self._make_scheduler()

    def _make_scheduler(self) -> FrameScheduler:
        scheduler = FrameScheduler(self._config.frame_mode, self._config.frame_hz, parent=self)
        scheduler.frame_done.connect(self.frame_rendered)
        scheduler.task_failed.connect(self.fiber_failed)
        scheduler.idle.connect(self._on_idle)
        return scheduler

    @property
    def config(self) -> SceneConfig:
        return self._config

    @property
    def surface(self):
        return self._surface

    @property
    def scheduler(self) -> FrameScheduler:
        return self._scheduler

    @property
    def scene(self) -> Optional[Scene]:
        return self._scene

    @property
    def drivers(self) -> List[FiberDriver]:
        return list(self._drivers)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def seed(self) -> Optional[int]:
        """Seed of the current (or last) run."""
        return self._seed

    @property
    def noise_tile(self) -> Optional[QImage]:
        """Noise tile drawn by the last finished run, if any."""
        return self._noise_tile

    def set_config(self, config: SceneConfig) -> None:
        """Replace the config; stops a running scene first."""
        if self._running:
            self.stop()
        mode_changed = (config.frame_mode != self._config.frame_mode
                        or config.frame_hz != self._config.frame_hz)
        self._config = config
        if mode_changed:
            self._scheduler.deleteLater()
            self._scheduler = self._make_scheduler()

    # === Lifecycle ===

    def start(self) -> Scene:
        """Assemble the scene and queue every fiber's first tick."""
        if self._running:
            self.stop()

        config = self._config
        config.validate()
        if self._surface is None:
            self._surface = QtSurface(config.width, config.height, config.background)
        elif config.clear_before_draw:
            self._surface.clear()

        self._seed = config.seed if config.seed is not None else generate_random_seed()
        scene = build_scene(config, surface=self._surface, rng=XorShift32(self._seed))
        if scene.field is not None and config.refraction.draw_boundary:
            scene.field.draw_boundary(self._surface, '#ff000080')

        self._scheduler.reset()
        self._scene = scene
        self._finished = 0
        self._noise_tile = None
        self._drivers = [
            FiberDriver(
                index=i,
                state=state,
                renderer=scene.renderer,
                transform=scene.transform,
                placement=scene.placement,
                surface=self._surface,
                scheduler=self._scheduler,
                loop_colors=scene.loop_colors,
                on_finished=self._on_fiber_finished,
            )
            for i, state in enumerate(scene.fibers)
        ]

        self._running = True
        self.running_changed.emit(True)
        logger.info(f"Starting {len(self._drivers)} fibers", component="SCENE",
                    details=f"mode={config.frame_mode} seed={self._seed}")
        for driver in self._drivers:
            driver.start()
        return scene

    def stop(self) -> None:
        """Abort all pending ticks (e.g. the surface is going away)."""
        if not self._running:
            return
        self._scheduler.cancel_all()
        self._running = False
        self.running_changed.emit(False)
        logger.info("Scene stopped", component="SCENE")

    def run_until_done(self):
        """Render the whole scene synchronously (immediate mode). Returns the surface."""
        self.start()
        self._scheduler.run_until_idle()
        return self._surface

    # === Callbacks ===

    def _on_fiber_finished(self, driver: FiberDriver) -> None:
        self._finished += 1
        self.fiber_finished.emit(driver.index)

    def _on_idle(self) -> None:
        if not self._running:
            return
        self._running = False
        self._apply_noise()
        failed = len(self._drivers) - self._finished
        logger.info(f"Scene finished: {self._finished} fibers done, {failed} failed",
                    component="SCENE")
        self.running_changed.emit(False)
        self.scene_finished.emit()

    def _apply_noise(self) -> None:
        config = self._config
        if config.noise_tile is not None:
            apply_noise(self._surface, config.noise_tile, use_overlay=config.noise_overlay_blend)
            self._noise_tile = config.noise_tile
            logger.debug("Pre-built noise tile applied", component="NOISE")
            return
        if not config.noise_opacity:
            return
        rng = np.random.default_rng(self._seed)
        self._noise_tile = add_noise(self._surface, config.noise_opacity,
                                     use_overlay=config.noise_overlay_blend, rng=rng)
