"""
Raster to pygame Surface adapter.

The decoders produce a :class:`~copperview.core.raster.Raster`; this
module is the only place that knows about pygame surfaces.  Scaling is
nearest-neighbour (each source pixel becomes a ``scale x scale`` block),
so individual bitplane pixels stay crisp when inspected.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pygame

from copperview.core.raster import Raster

logger = logging.getLogger(__name__)

_MIN_SCALE: int = 1
_MAX_SCALE: int = 8


def _scaled(array: np.ndarray, scale: int) -> np.ndarray:
    if scale == 1:
        return array
    return np.repeat(np.repeat(array, scale, axis=0), scale, axis=1)


def raster_to_surface(
    raster: Raster, scale: int = 1, background: Optional[int] = None
) -> pygame.Surface:
    """Blit *raster* into a new surface.

    Parameters:
        raster: The decoded bitmap.
        scale: Integer magnification, clamped to 1-8.
        background: ``0xRRGGBB`` used for transparent pixels.  When
            ``None`` the surface keeps per-pixel alpha instead.

    Returns:
        A ``(width * scale, height * scale)`` :class:`pygame.Surface`.
    """
    scale = max(_MIN_SCALE, min(_MAX_SCALE, scale))
    size = (raster.width * scale, raster.height * scale)

    rgb = raster.rgb()
    alpha = raster.alpha()

    if background is None:
        surface = pygame.Surface(size, pygame.SRCALPHA, 32)
    else:
        surface = pygame.Surface(size)
        transparent = alpha == 0
        rgb[transparent] = ((background >> 16) & 0xFF, (background >> 8) & 0xFF, background & 0xFF)

    if raster.width and raster.height:
        # pygame surfarray expects (W, H, 3) -- transpose width and height.
        pygame.surfarray.blit_array(surface, _scaled(rgb, scale).transpose(1, 0, 2))
        if background is None:
            pixels_alpha = pygame.surfarray.pixels_alpha(surface)
            try:
                pixels_alpha[...] = _scaled(alpha, scale).T
            finally:
                del pixels_alpha
    return surface


def save_png(
    raster: Raster, path: str, scale: int = 1, background: Optional[int] = None
) -> None:
    """Write *raster* to an image file (format chosen from the extension)."""
    surface = raster_to_surface(raster, scale, background)
    pygame.image.save(surface, path)
    logger.info("Saved %dx%d raster to %s", surface.get_width(), surface.get_height(), path)
