"""
Frame Scheduler - cooperative tick queue for fiber drivers

Drivers hand their next tick to schedule() instead of calling themselves.
A frame runs every task queued before it started, in queue order; tasks
queued while a frame runs wait for the next one. That keeps fibers in
creation order within a frame and keeps the call stack flat.

Two modes, fixed at construction:
- 'frame':     a QTimer runs one frame per tick at frame_hz (needs a Qt event loop)
- 'immediate': run_until_idle() drains frames back to back (batch rendering)
"""

from typing import Callable, List, Optional

from PyQt5.QtCore import QObject, QTimer, pyqtSignal

from ..config import DEFAULT_FRAME_MODE, FRAME_HZ, FRAME_MODES
from ..utils.logger import logger
from .errors import ConfigurationError

Task = Callable[[], None]


class FrameScheduler(QObject):
    """
    Single-threaded frame queue.

    A task that raises is logged and dropped; the rest of the frame still
    runs. cancel_all() drops everything pending and refuses new work until
    reset().
    """

    frame_done = pyqtSignal(int)   # frame number
    idle = pyqtSignal()            # queue drained
    task_failed = pyqtSignal(str)  # error message

    def __init__(self, mode: str = DEFAULT_FRAME_MODE, frame_hz: int = FRAME_HZ, parent=None):
        super().__init__(parent)
        if mode not in FRAME_MODES:
            raise ConfigurationError(f"Unknown frame mode: {mode!r}")
        if frame_hz <= 0:
            raise ConfigurationError(f"frame_hz must be > 0, got {frame_hz}")

        self._mode = mode
        self._queue: List[Task] = []
        self._frame = 0
        self._cancelled = False
        self._errors: List[Exception] = []

        self._timer: Optional[QTimer] = None
        if mode == 'frame':
            self._timer = QTimer(self)
            self._timer.setInterval(max(1, 1000 // frame_hz))
            self._timer.timeout.connect(self._on_timer)

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def frame_count(self) -> int:
        return self._frame

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def errors(self) -> List[Exception]:
        return list(self._errors)

    @property
    def running(self) -> bool:
        return self._timer is not None and self._timer.isActive()

    def schedule(self, task: Task) -> bool:
        """Queue task for the next frame. Returns False once cancelled."""
        if self._cancelled:
            return False
        self._queue.append(task)
        if self._timer is not None and not self._timer.isActive():
            self._timer.start()
        return True

    def run_frame(self) -> int:
        """Run every task queued so far. Returns how many ran."""
        tasks, self._queue = self._queue, []
        self._frame += 1
        ran = 0
        for task in tasks:
            if self._cancelled:
                break
            ran += 1
            try:
                task()
            except Exception as e:
                self._errors.append(e)
                logger.error(f"Tick failed in frame {self._frame}", component="SCHED",
                             details=str(e))
                self.task_failed.emit(str(e))

        self.frame_done.emit(self._frame)
        if not self._queue:
            self._went_idle()
        return ran

    def run_until_idle(self, max_frames: Optional[int] = None) -> int:
        """
        Drain the queue frame by frame without waiting on a timer.

        Re-raises the first tick failure of this run after the surviving
        fibers have finished. Returns the number of frames run.
        """
        errors_before = len(self._errors)
        frames = 0
        while self._queue and not self._cancelled:
            if max_frames is not None and frames >= max_frames:
                break
            self.run_frame()
            frames += 1

        if len(self._errors) > errors_before:
            raise self._errors[errors_before]
        return frames

    def cancel_all(self) -> int:
        """Drop every pending tick and stop the timer. Returns how many were dropped."""
        dropped = len(self._queue)
        self._queue.clear()
        self._cancelled = True
        if self._timer is not None:
            self._timer.stop()
        logger.info(f"Scheduler cancelled, {dropped} pending ticks dropped", component="SCHED")
        return dropped

    def reset(self) -> None:
        """Accept work again after cancel_all()."""
        self._queue.clear()
        self._cancelled = False
        self._errors.clear()
        self._frame = 0

    def _on_timer(self) -> None:
        self.run_frame()

    def _went_idle(self) -> None:
        if self._timer is not None:
            self._timer.stop()
        self.idle.emit()
