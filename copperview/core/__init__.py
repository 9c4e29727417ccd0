"""
Core decoders: copper lists, bitmap geometry, palettes and planar pixels.

Every function here is pure; memory, registers and the DMA timeline are
passed in explicitly.
"""

from copperview.core.copper import (
    CopperEntry,
    CopperMove,
    CopperProgram,
    CopperSkip,
    CopperWait,
    decode_copper,
    decode_copper_program,
    disassemble,
    format_copper_listing,
    screen_from_copper,
)
from copperview.core.custom_registers import CustomRegisters, get_custom_address, get_custom_name
from copperview.core.dma import DmaRecord, memory_after_dma
from copperview.core.errors import (
    CopperViewError,
    InvalidGeometry,
    ResourceFormatError,
    SessionLoadError,
    TruncatedProgram,
)
from copperview.core.geometry import Screen, resolve_geometry
from copperview.core.memory import ChipMemory, IMemoryReader
from copperview.core.palette import (
    expand_color,
    palette_from_copper,
    palette_from_custom_regs,
    palette_from_memory,
)
from copperview.core.raster import Raster, decode_raster, read_pixel
from copperview.core.resources import BitmapResource, GfxResource, PaletteResource, parse_resource
from copperview.core.types import DmaKind, GfxResourceFlags, GfxResourceType

__all__ = [
    "BitmapResource",
    "ChipMemory",
    "CopperEntry",
    "CopperMove",
    "CopperProgram",
    "CopperSkip",
    "CopperViewError",
    "CopperWait",
    "CustomRegisters",
    "DmaKind",
    "DmaRecord",
    "GfxResource",
    "GfxResourceFlags",
    "GfxResourceType",
    "IMemoryReader",
    "InvalidGeometry",
    "PaletteResource",
    "Raster",
    "ResourceFormatError",
    "Screen",
    "SessionLoadError",
    "TruncatedProgram",
    "decode_copper",
    "decode_copper_program",
    "decode_raster",
    "disassemble",
    "expand_color",
    "format_copper_listing",
    "get_custom_address",
    "get_custom_name",
    "memory_after_dma",
    "palette_from_copper",
    "palette_from_custom_regs",
    "palette_from_memory",
    "parse_resource",
    "read_pixel",
    "resolve_geometry",
    "screen_from_copper",
]
