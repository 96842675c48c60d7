"""
Noise overlay - film-grain texture composited over a finished scene

A small grey-noise tile is generated with numpy and tiled across the
surface, either as a plain translucent layer or in 'overlay' blend mode.
"""

from typing import Optional

import numpy as np
from PyQt5.QtGui import QImage

from ..config import MIN_NOISE_TILE, NOISE_TILE_DIVISOR
from ..utils.logger import logger
from .errors import ConfigurationError


def create_noise_tile(opacity: float, tile_size: int = 100,
                      rng: Optional[np.random.Generator] = None) -> QImage:
    """Square tile of uniform grey noise at the given opacity."""
    if not 0.0 <= opacity <= 1.0:
        raise ConfigurationError(f"Noise opacity must be in [0, 1], got {opacity}")
    if tile_size <= 0:
        raise ConfigurationError(f"Noise tile size must be > 0, got {tile_size}")
    if rng is None:
        rng = np.random.default_rng()

    alpha = int(round(opacity * 255))
    values = rng.integers(0, 256, size=(tile_size, tile_size), dtype=np.uint32)
    # Premultiplied ARGB32: color channels are pre-scaled by alpha
    grey = values * alpha // 255
    argb = np.ascontiguousarray(
        (np.uint32(alpha) << 24) | (grey << 16) | (grey << 8) | grey,
        dtype=np.uint32,
    )

    image = QImage(argb.data, tile_size, tile_size, tile_size * 4,
                   QImage.Format_ARGB32_Premultiplied)
    # copy() detaches the image from the numpy buffer
    return image.copy()


def apply_noise(surface, tile: QImage, use_overlay: bool = False):
    """Tile the noise over the surface, restoring the previous composition mode."""
    previous = surface.composition
    if use_overlay:
        surface.set_composition('overlay')
    try:
        surface.fill_pattern(tile)
    finally:
        if use_overlay:
            surface.set_composition(previous)
    return surface


def default_tile_size(width: int) -> int:
    return max(MIN_NOISE_TILE, int(width / NOISE_TILE_DIVISOR))


def add_noise(surface, opacity: float, tile_size: Optional[int] = None,
              use_overlay: bool = False,
              rng: Optional[np.random.Generator] = None) -> QImage:
    """Generate a tile and apply it in one go. Returns the tile for reuse."""
    if tile_size is None:
        tile_size = default_tile_size(surface.width)
    tile = create_noise_tile(opacity, tile_size, rng)
    apply_noise(surface, tile, use_overlay)
    logger.info(f"Noise overlay applied (opacity {opacity:g}, tile {tile_size}px)",
                component="NOISE")
    return tile
