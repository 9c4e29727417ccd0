"""
Core enumerations for copperview.
Values follow the encoding used in debugger profile snapshots.
"""

from enum import IntEnum, IntFlag


class DmaKind(IntEnum):
    """Owner of a recorded DMA bus slot."""
    Refresh = 0
    Cpu = 1
    Copper = 2
    Audio = 3
    Blitter = 4
    Bitplane = 5
    Sprite = 6
    Disk = 7

    @staticmethod
    def from_name(name):
        for kind in DmaKind:
            if kind.name.lower() == str(name).lower():
                return kind
        raise KeyError(name)


class GfxResourceType(IntEnum):
    Bitmap = 0
    Palette = 1


class GfxResourceFlags(IntFlag):
    Interleaved = 1 << 0
    Masked = 1 << 1
