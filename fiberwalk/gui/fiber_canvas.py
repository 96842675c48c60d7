"""
Fiber Canvas
Shows a scene's surface while its fibers are being drawn.
"""

from typing import Optional

from PyQt5.QtCore import QRectF, Qt
from PyQt5.QtGui import QColor, QPainter
from PyQt5.QtWidgets import QLabel, QMainWindow, QStatusBar, QWidget

from ..fibers.controller import FiberController
from ..utils.logger import logger
from ..utils.app_paths import default_output_path


class FiberCanvas(QWidget):
    """
    Widget that paints the controller's surface image, letterboxed.

    Repaints once per scheduler frame rather than once per fiber tick.
    """

    BACKDROP = QColor('#1a1a1a')

    def __init__(self, parent=None):
        super().__init__(parent)
        self._controller: Optional[FiberController] = None
        self.setMinimumSize(200, 200)

    def set_controller(self, controller: FiberController) -> None:
        """Set the controller whose surface is shown."""
        if self._controller is not None:
            self._controller.frame_rendered.disconnect(self._on_frame)
            self._controller.scene_finished.disconnect(self.update)
        self._controller = controller
        if controller is not None:
            controller.frame_rendered.connect(self._on_frame)
            controller.scene_finished.connect(self.update)
        self.update()

    def _on_frame(self, frame: int) -> None:
        self.update()

    def image_rect(self) -> QRectF:
        """Largest rect with the surface's aspect ratio centered in the widget."""
        surface = self._controller.surface if self._controller else None
        if surface is None:
            return QRectF()
        scale = min(self.width() / surface.width, self.height() / surface.height)
        w, h = surface.width * scale, surface.height * scale
        return QRectF((self.width() - w) / 2, (self.height() - h) / 2, w, h)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.BACKDROP)
        surface = self._controller.surface if self._controller else None
        if surface is None:
            return
        painter.setRenderHint(QPainter.SmoothPixmapTransform)
        painter.drawImage(self.image_rect(), surface.image)

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.update()


class FiberWindow(QMainWindow):
    """
    Main window: canvas plus a status line.

    Keys: R restarts with a new seed, S saves the image, Esc stops.
    The right side of the status bar shows the latest INFO or ERROR log line.
    """

    def __init__(self, controller: FiberController, preset: str = 'scene', parent=None):
        super().__init__(parent)
        self._controller = controller
        self._preset = preset

        self.setWindowTitle("Fiberwalk")
        self._canvas = FiberCanvas(self)
        self._canvas.set_controller(controller)
        self.setCentralWidget(self._canvas)

        self._status_label = QLabel("")
        status = QStatusBar(self)
        status.addWidget(self._status_label)
        self._log_label = QLabel("")
        status.addPermanentWidget(self._log_label)
        self.setStatusBar(status)

        controller.running_changed.connect(self._on_running_changed)
        controller.fiber_failed.connect(self._on_fiber_failed)
        controller.scene_finished.connect(self._on_scene_finished)
        logger.signal_emitter.log_message.connect(self._on_log_message)

        config = controller.config
        self.resize(min(config.width, 1000), min(config.height, 1000) + 24)

    def _on_running_changed(self, running: bool) -> None:
        self._status_label.setText("drawing..." if running else "stopped")

    def _on_scene_finished(self) -> None:
        self._status_label.setText("done  (R: redraw, S: save)")

    def _on_fiber_failed(self, message: str) -> None:
        self._status_label.setText(f"fiber failed: {message}")

    def _on_log_message(self, message: str, level: int, timestamp: str) -> None:
        self._log_label.setText(f"{timestamp}  {message}")

    def keyPressEvent(self, event):
        key = event.key()
        if key == Qt.Key_R:
            self._controller.config.seed = None
            self._controller.start()
        elif key == Qt.Key_S:
            self.save_image()
        elif key == Qt.Key_Escape:
            self._controller.stop()
        else:
            super().keyPressEvent(event)

    def save_image(self) -> None:
        surface = self._controller.surface
        if surface is None:
            return
        path = surface.save(default_output_path(self._preset, self._controller.seed or 0))
        self._status_label.setText(f"saved {path}")

    def closeEvent(self, event):
        # Pending ticks must not outlive the surface
        self._controller.stop()
        logger.info("Window closed", component="APP")
        super().closeEvent(event)
