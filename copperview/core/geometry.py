"""
Bitmap geometry -- where each bitplane row of a bitmap lives in memory.

A :class:`Screen` describes a planar bitmap the way the display hardware
sees it: one start address per bitplane and a pair of modulos (the extra
bytes skipped after each row), the first for even-indexed planes and the
second for odd-indexed planes (BPL1MOD / BPL2MOD).

Two storage layouts are resolved:

* **Interleaved** -- each row holds one line of every plane back to back
  (and, for masked bitmaps, one mask line after each plane line).
* **Non-interleaved** -- each plane is a contiguous block of
  ``height`` rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from copperview.core.errors import InvalidGeometry
from copperview.core.resources import BitmapResource

DEFAULT_WIDTH = 320
DEFAULT_HEIGHT = 256


@dataclass(frozen=True)
class Screen:
    """Planar bitmap geometry.

    Attributes:
        width: Width in pixels.
        height: Height in rows.
        planes: Start address of each bitplane.
        modulos: Bytes skipped after each row, for even and odd planes.
    """

    width: int
    height: int
    planes: tuple[int, ...]
    modulos: tuple[int, int] = (0, 0)

    @property
    def num_planes(self) -> int:
        return len(self.planes)

    @property
    def row_bytes(self) -> int:
        """Bytes of pixel data per plane row."""
        return self.width // 8

    def stride(self, plane: int) -> int:
        """Distance in bytes between consecutive rows of *plane*."""
        return self.row_bytes + self.modulos[plane & 1]

    def row_base(self, plane: int, y: int) -> int:
        """Address of row *y* of *plane*."""
        return self.planes[plane] + y * self.stride(plane)


def _validate(resource: BitmapResource) -> None:
    if resource.num_planes <= 0:
        raise InvalidGeometry(f"{resource.name!r}: plane count must be positive, got {resource.num_planes}")
    if resource.width <= 0 or resource.height <= 0:
        raise InvalidGeometry(
            f"{resource.name!r}: dimensions must be positive, got {resource.width}x{resource.height}"
        )
    if resource.width % 8:
        raise InvalidGeometry(f"{resource.name!r}: width {resource.width} is not a multiple of 8")


def resolve_geometry(resource: BitmapResource) -> tuple[Screen, Optional[Screen]]:
    """Compute the bitmap's plane addresses and modulos.

    Returns:
        ``(screen, mask)`` where *mask* is ``None`` unless the resource is
        masked.

    Raises:
        InvalidGeometry: For non-positive dimensions or plane count, or a
            width that is not a multiple of 8.
    """
    _validate(resource)

    if resource.interleaved:
        return _resolve_interleaved(resource)
    return _resolve_planar(resource)


def _resolve_interleaved(resource: BitmapResource) -> tuple[Screen, Optional[Screen]]:
    row_bytes = resource.width // 8
    # Masked interleaved bitmaps carry a mask line after every plane line.
    scale = 2 if resource.masked else 1
    planes = tuple(resource.address + p * row_bytes * scale for p in range(resource.num_planes))
    modulo = row_bytes * (resource.num_planes * scale - 1)
    screen = Screen(resource.width, resource.height, planes, (modulo, modulo))

    mask = None
    if resource.masked:
        mask = Screen(resource.width, resource.height,
                      tuple(a + row_bytes for a in planes), (modulo, modulo))
    return screen, mask


def _resolve_planar(resource: BitmapResource) -> tuple[Screen, Optional[Screen]]:
    plane_bytes = resource.width // 8 * resource.height
    planes = tuple(resource.address + p * plane_bytes for p in range(resource.num_planes))
    screen = Screen(resource.width, resource.height, planes, (0, 0))

    mask = None
    if resource.masked:
        mask = Screen(resource.width, resource.height, _planar_mask_planes(planes, plane_bytes), (0, 0))
    return screen, mask


def _planar_mask_planes(planes: tuple[int, ...], plane_bytes: int) -> tuple[int, ...]:
    """Mask plane addresses for a masked, non-interleaved bitmap.

    UNVERIFIED: assumes each mask block directly follows its bitmap plane
    block.  This has not been checked against real output, so it is
    kept apart from the interleaved path and pinned by a regression test
    rather than trusted.
    """
    return tuple(a + plane_bytes for a in planes)
