"""
Qt Surface - raster drawing surface over a QImage

Provides the primitives fibers draw with: clear/fill rectangles, stroked
lines and arcs, filled circles, linear gradients, tiled pattern fills and a
compositing-mode switch. Each draw call opens its own QPainter, so the image
can be shown or saved between ticks. Draw calls are not reentrant.
"""

import math
from contextlib import contextmanager
from pathlib import Path
from typing import Optional, Union

from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import (
    QBrush,
    QColor,
    QImage,
    QLinearGradient,
    QPainter,
    QPainterPath,
    QPen,
)

from ..utils.logger import logger
from .colors import Rgba, parse_color
from .errors import SurfaceError

COMPOSITION_MODES = {
    'normal': QPainter.CompositionMode_SourceOver,
    'source-over': QPainter.CompositionMode_SourceOver,
    'overlay': QPainter.CompositionMode_Overlay,
    'multiply': QPainter.CompositionMode_Multiply,
    'screen': QPainter.CompositionMode_Screen,
    'lighter': QPainter.CompositionMode_Plus,
    'darken': QPainter.CompositionMode_Darken,
    'lighten': QPainter.CompositionMode_Lighten,
}


def to_brush(paint) -> QBrush:
    """Rgba, QColor, QLinearGradient or QBrush -> QBrush."""
    if isinstance(paint, QBrush):
        return paint
    if isinstance(paint, Rgba):
        return QBrush(paint.to_qcolor())
    if isinstance(paint, (QColor, QLinearGradient)):
        return QBrush(paint)
    return QBrush(parse_color(paint).to_qcolor())


class QtSurface:
    """
    Drawing surface backed by an ARGB32 QImage.

    background=None leaves the surface transparent.
    """

    def __init__(self, width: int, height: int, background=None, antialias: bool = True):
        if width <= 0 or height <= 0:
            raise SurfaceError(f"Surface size must be positive, got {width}x{height}")
        self._image = QImage(int(width), int(height), QImage.Format_ARGB32_Premultiplied)
        self._background = parse_color(background) if background is not None else None
        self._mode_name = 'normal'
        self._mode = COMPOSITION_MODES['normal']
        self._antialias = antialias
        self._drawing = False
        self.clear()

    @property
    def width(self) -> int:
        return self._image.width()

    @property
    def height(self) -> int:
        return self._image.height()

    @property
    def image(self) -> QImage:
        return self._image

    @property
    def composition(self) -> str:
        return self._mode_name

    @contextmanager
    def _painter(self):
        if self._drawing:
            raise SurfaceError("Reentrant draw call on surface")
        self._drawing = True
        painter = QPainter()
        try:
            if not painter.begin(self._image):
                raise SurfaceError("Could not begin painting on surface")
            painter.setRenderHint(QPainter.Antialiasing, self._antialias)
            painter.setCompositionMode(self._mode)
            yield painter
        finally:
            if painter.isActive():
                painter.end()
            self._drawing = False

    # === Compositing ===

    def set_composition(self, mode: str) -> None:
        """Switch compositing mode for subsequent draws ('normal', 'overlay', ...)."""
        if mode not in COMPOSITION_MODES:
            raise SurfaceError(f"Unsupported composition mode: {mode!r}")
        self._mode_name = mode
        self._mode = COMPOSITION_MODES[mode]

    # === Primitives ===

    def clear(self) -> None:
        """Reset the whole surface to its background (or transparent)."""
        if self._background is None:
            self._image.fill(Qt.transparent)
        else:
            self._image.fill(self._background.to_qcolor())

    def clear_rect(self, x: float, y: float, w: float, h: float) -> None:
        with self._painter() as p:
            p.setCompositionMode(QPainter.CompositionMode_Clear)
            p.fillRect(QRectF(x, y, w, h), Qt.transparent)

    def fill_rect(self, x: float, y: float, w: float, h: float, paint) -> None:
        with self._painter() as p:
            p.fillRect(QRectF(x, y, w, h), to_brush(paint))

    def stroke_line(self, x1: float, y1: float, x2: float, y2: float,
                    paint, width: float = 1.0) -> None:
        with self._painter() as p:
            p.setPen(QPen(to_brush(paint), width))
            p.drawLine(QPointF(x1, y1), QPointF(x2, y2))

    def stroke_arc(self, x: float, y: float, radius: float, start: float, end: float,
                   paint, width: float = 1.0) -> None:
        """Circular arc from angle start to end (radians, clockwise on screen)."""
        rect = QRectF(x - radius, y - radius, 2 * radius, 2 * radius)
        start_deg = -math.degrees(start)
        sweep_deg = -math.degrees(end - start)
        path = QPainterPath()
        path.arcMoveTo(rect, start_deg)
        path.arcTo(rect, start_deg, sweep_deg)
        with self._painter() as p:
            p.setPen(QPen(to_brush(paint), width))
            p.setBrush(Qt.NoBrush)
            p.drawPath(path)

    def fill_circle(self, x: float, y: float, radius: float, paint) -> None:
        with self._painter() as p:
            p.setPen(Qt.NoPen)
            p.setBrush(to_brush(paint))
            p.drawEllipse(QPointF(x, y), radius, radius)

    def linear_gradient(self, x1: float, y1: float, x2: float, y2: float,
                        start, stop) -> QLinearGradient:
        """Two-stop gradient between (x1, y1) and (x2, y2)."""
        gradient = QLinearGradient(QPointF(x1, y1), QPointF(x2, y2))
        gradient.setColorAt(0.0, parse_color(start).to_qcolor())
        gradient.setColorAt(1.0, parse_color(stop).to_qcolor())
        return gradient

    def fill_pattern(self, tile: QImage) -> None:
        """Tile an image across the whole surface."""
        with self._painter() as p:
            p.fillRect(QRectF(0, 0, self.width, self.height), QBrush(tile))

    # === Output ===

    def pixel(self, x: int, y: int) -> Rgba:
        color = self._image.pixelColor(x, y)
        return Rgba(color.red(), color.green(), color.blue(), color.alphaF())

    def save(self, path: Union[str, Path], fmt: Optional[str] = None) -> Path:
        path = Path(path)
        if not self._image.save(str(path), fmt):
            raise SurfaceError(f"Could not save surface to {path}")
        logger.info(f"Saved {self.width}x{self.height} image", component="SURFACE",
                    details=str(path))
        return path
