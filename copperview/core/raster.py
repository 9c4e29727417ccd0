"""
Planar pixel decoding.

Turns a :class:`~copperview.core.geometry.Screen` plus a palette into a
:class:`Raster` -- colour indices and resolved ARGB colours for every
pixel.  Bitplane rows are fetched one 16-bit word at a time (most
significant bit = leftmost pixel) and bit ``p`` of a pixel's colour index
comes from plane ``p``.

When a mask geometry is supplied, the mask planes are combined the same
way into a mask value, the colour index becomes ``index & mask`` and a
resulting index of 0 is transparent.  Without a mask, index 0 is an
ordinary palette entry.

Rows are independent: the base address of row ``y`` in plane ``p`` is
``planes[p] + y * (width / 8 + modulos[p & 1])``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from copperview.core.errors import InvalidGeometry
from copperview.core.geometry import Screen
from copperview.core.memory import IMemoryReader

logger = logging.getLogger(__name__)

OPAQUE = 0xFF000000
TRANSPARENT = 0x00000000


@dataclass(frozen=True, eq=False)
class Raster:
    """A decoded bitmap.

    Attributes:
        width: Width in pixels.
        height: Height in rows.
        indices: ``(height, width)`` uint16 colour indices (after masking).
        colors: ``(height, width)`` uint32 ``0xAARRGGBB``; alpha 0 marks a
            transparent pixel.
        mask: ``(height, width)`` uint16 mask values, or ``None`` when the
            bitmap was decoded without a mask.
    """

    width: int
    height: int
    indices: np.ndarray
    colors: np.ndarray
    mask: Optional[np.ndarray] = None

    def rgb(self) -> np.ndarray:
        """Return a ``(height, width, 3)`` uint8 RGB array."""
        out = np.empty((self.height, self.width, 3), dtype=np.uint8)
        out[..., 0] = (self.colors >> 16) & 0xFF
        out[..., 1] = (self.colors >> 8) & 0xFF
        out[..., 2] = self.colors & 0xFF
        return out

    def alpha(self) -> np.ndarray:
        """Return a ``(height, width)`` uint8 alpha array."""
        return ((self.colors >> 24) & 0xFF).astype(np.uint8)

    def pixel(self, x: int, y: int) -> int:
        """Resolved ``0xAARRGGBB`` colour at (*x*, *y*)."""
        return int(self.colors[y, x])

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height}, masked={self.mask is not None})"


def _read_row_bits(memory: IMemoryReader, address: int, words: int) -> np.ndarray:
    """Fetch *words* words from *address* and unpack them MSB first."""
    row = np.fromiter(
        (memory.read_word(address + i * 2) for i in range(words)),
        dtype=">u2",
        count=words,
    )
    return np.unpackbits(row.view(np.uint8))


def _compose_row(screen: Screen, memory: IMemoryReader, y: int) -> np.ndarray:
    """OR every plane's bits of row *y* into per-pixel values."""
    words = (screen.width + 15) // 16
    value = np.zeros(words * 16, dtype=np.uint16)
    for p in range(screen.num_planes):
        bits = _read_row_bits(memory, screen.row_base(p, y), words)
        value |= bits.astype(np.uint16) << p
    return value[: screen.width]


def _palette_lut(palette: Sequence[int], num_planes: int) -> np.ndarray:
    """ARGB lookup table covering every index *num_planes* can produce.

    Indices past the end of *palette* resolve to the transparent
    background.
    """
    size = max(len(palette), 1 << num_planes)
    lut = np.full(size, TRANSPARENT, dtype=np.uint32)
    if palette:
        lut[: len(palette)] = OPAQUE | (np.asarray(palette, dtype=np.uint32) & 0xFFFFFF)
    return lut


def decode_raster(
    screen: Screen,
    mask: Optional[Screen],
    palette: Sequence[int],
    memory: IMemoryReader,
) -> Raster:
    """Decode *screen* into a :class:`Raster`.

    Args:
        screen: Geometry of the colour planes.
        mask: Geometry of the mask planes, or ``None``.
        palette: ``0xRRGGBB`` colours; may be shorter than the number of
            indices the planes can produce.
        memory: Source of the plane data.

    Raises:
        InvalidGeometry: If *mask* does not have the dimensions of *screen*.
    """
    if mask is not None and (mask.width, mask.height) != (screen.width, screen.height):
        raise InvalidGeometry(
            f"mask is {mask.width}x{mask.height}, bitmap is {screen.width}x{screen.height}"
        )

    indices = np.zeros((screen.height, screen.width), dtype=np.uint16)
    mask_values = None if mask is None else np.zeros_like(indices)

    for y in range(screen.height):
        row = _compose_row(screen, memory, y)
        if mask is not None:
            mask_row = _compose_row(mask, memory, y)
            mask_values[y] = mask_row
            row &= mask_row
        indices[y] = row

    colors = _palette_lut(palette, screen.num_planes)[indices]
    if mask is not None:
        colors[indices == 0] = TRANSPARENT

    indices.setflags(write=False)
    colors.setflags(write=False)
    if mask_values is not None:
        mask_values.setflags(write=False)

    logger.debug(
        "Decoded %dx%dx%d raster (masked=%s, %d palette entries)",
        screen.width, screen.height, screen.num_planes, mask is not None, len(palette),
    )
    return Raster(screen.width, screen.height, indices, colors, mask_values)


def read_pixel(screen: Screen, memory: IMemoryReader, x: int, y: int) -> int:
    """Return the raw colour index of one pixel.

    Raises:
        IndexError: If (*x*, *y*) lies outside the screen.
    """
    if not (0 <= x < screen.width and 0 <= y < screen.height):
        raise IndexError(f"pixel ({x}, {y}) outside {screen.width}x{screen.height}")
    pixel = 0
    for p in range(screen.num_planes):
        raw = memory.read_byte(screen.row_base(p, y) + x // 8)
        if raw & (1 << (7 - (x & 7))):
            pixel |= 1 << p
    return pixel
