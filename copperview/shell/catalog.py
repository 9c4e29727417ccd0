"""
Bitmap and palette catalogs for the debugger views.

Builds the selectable lists shown by the viewer: the playfield the copper
list sets up plus every bitmap resource, and the copper / custom-register
palettes plus every palette resource.  Each entry carries its resolved
payload so that switching selection never re-derives anything.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from copperview.core import custom_registers as cr
from copperview.core.copper import CopperEntry, screen_from_copper
from copperview.core.custom_registers import CustomRegisters
from copperview.core.errors import InvalidGeometry
from copperview.core.geometry import Screen, resolve_geometry
from copperview.core.memory import IMemoryReader
from copperview.core.palette import palette_from_copper, palette_from_custom_regs, palette_from_memory
from copperview.core.resources import BitmapResource, GfxResource, PaletteResource

logger = logging.getLogger(__name__)

COPPER_NAME = "*Copper*"
CUSTOM_REGS_NAME = "*Custom Registers*"


@dataclass(frozen=True)
class GfxResourceView:
    """A resource together with its decoded payload.

    Bitmap views carry ``screen`` (and ``mask`` when masked); palette
    views carry ``palette``.
    """

    resource: GfxResource
    screen: Optional[Screen] = None
    mask: Optional[Screen] = None
    palette: Optional[tuple[int, ...]] = None

    @property
    def name(self) -> str:
        return self.resource.name


def build_bitmap_views(
    resources: Sequence[GfxResource], entries: Sequence[CopperEntry]
) -> list[GfxResourceView]:
    """Copper playfield first, then bitmap resources sorted by name.

    Resources whose geometry cannot be resolved are left out.
    """
    copper_screen = screen_from_copper(entries)
    copper_resource = BitmapResource(
        name=COPPER_NAME,
        address=copper_screen.planes[0] if copper_screen.planes else 0,
        width=copper_screen.width,
        height=copper_screen.height,
        num_planes=copper_screen.num_planes,
    )
    views = [GfxResourceView(copper_resource, screen=copper_screen)]

    bitmaps = sorted((r for r in resources if isinstance(r, BitmapResource)), key=lambda r: r.name)
    for resource in bitmaps:
        try:
            screen, mask = resolve_geometry(resource)
        except InvalidGeometry as exc:
            logger.warning("Skipping bitmap %r: %s", resource.name, exc)
            continue
        views.append(GfxResourceView(resource, screen=screen, mask=mask))
    return views


def build_palette_views(
    resources: Sequence[GfxResource],
    entries: Sequence[CopperEntry],
    registers: CustomRegisters,
    memory: IMemoryReader,
) -> list[GfxResourceView]:
    """Copper palette, register palette, then palette resources by name."""
    copper_palette = tuple(palette_from_copper(entries))
    views = [
        GfxResourceView(
            PaletteResource(COPPER_NAME, 0, len(copper_palette), size=cr.NUM_COLORS * 2),
            palette=copper_palette,
        ),
        GfxResourceView(
            PaletteResource(CUSTOM_REGS_NAME, cr.get_custom_address("COLOR00"),
                            cr.NUM_COLORS, size=cr.NUM_COLORS * 2),
            palette=tuple(palette_from_custom_regs(registers)),
        ),
    ]

    palettes = sorted((r for r in resources if isinstance(r, PaletteResource)), key=lambda r: r.name)
    for resource in palettes:
        colors = palette_from_memory(memory, resource.address, resource.num_entries)
        views.append(GfxResourceView(resource, palette=tuple(colors)))
    return views


def describe_view(view: GfxResourceView) -> str:
    """One-line summary: name, shape or colour count, size and address."""
    resource = view.resource
    match resource:
        case BitmapResource():
            flags = ("I" if resource.interleaved else "") + ("M" if resource.masked else "")
            detail = f"{resource.width}x{resource.height}x{resource.num_planes}"
            if flags:
                detail += f" {flags}"
        case PaletteResource():
            count = len(view.palette) if view.palette is not None else resource.num_entries
            detail = f"{count} colours"

    size = f"{resource.size:,}b" if resource.size else ""
    address = f"${resource.address:08x}" if resource.address else ""
    return f"{resource.name:<24s} {detail:<16s} {size:>10s} {address}".rstrip()
