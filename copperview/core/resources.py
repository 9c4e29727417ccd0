"""
Graphics resources registered by the debugged program.

Profile snapshots describe resources as loosely-typed records whose
payload depends on a type tag.  :func:`parse_resource` turns such a
record into one of two explicit types so that consumers never probe for
optional fields.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Union

from copperview.core.errors import ResourceFormatError
from copperview.core.types import GfxResourceFlags, GfxResourceType


@dataclass(frozen=True)
class BitmapResource:
    """A planar bitmap in chip memory."""

    name: str
    address: int
    width: int
    height: int
    num_planes: int
    interleaved: bool = False
    masked: bool = False
    size: int = 0

    @property
    def flags(self) -> GfxResourceFlags:
        flags = GfxResourceFlags(0)
        if self.interleaved:
            flags |= GfxResourceFlags.Interleaved
        if self.masked:
            flags |= GfxResourceFlags.Masked
        return flags


@dataclass(frozen=True)
class PaletteResource:
    """A table of ``$0RGB`` colour words in memory."""

    name: str
    address: int
    num_entries: int
    size: int = 0


GfxResource = Union[BitmapResource, PaletteResource]


def _int(record: Mapping[str, Any], key: str, default: Any = None) -> int:
    value = record.get(key, default)
    if value is None:
        raise ResourceFormatError(f"resource record is missing {key!r}")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ResourceFormatError(f"resource field {key!r} is not an integer: {value!r}") from exc


def parse_resource(record: Mapping[str, Any]) -> GfxResource:
    """Build a typed resource from a profile record.

    Raises:
        ResourceFormatError: If the type tag is unknown or a field the tag
            requires is missing or malformed.
    """
    try:
        kind = GfxResourceType(int(record.get("type", -1)))
    except (TypeError, ValueError) as exc:
        raise ResourceFormatError(f"unknown resource type {record.get('type')!r}") from exc

    name = str(record.get("name", ""))
    address = _int(record, "address", 0)
    size = _int(record, "size", 0)

    match kind:
        case GfxResourceType.Bitmap:
            bitmap = record.get("bitmap")
            if not isinstance(bitmap, Mapping):
                raise ResourceFormatError(f"bitmap resource {name!r} has no bitmap payload")
            flags = GfxResourceFlags(_int(record, "flags", 0))
            return BitmapResource(
                name=name,
                address=address,
                width=_int(bitmap, "width"),
                height=_int(bitmap, "height"),
                num_planes=_int(bitmap, "numPlanes"),
                interleaved=bool(flags & GfxResourceFlags.Interleaved),
                masked=bool(flags & GfxResourceFlags.Masked),
                size=size,
            )
        case GfxResourceType.Palette:
            palette = record.get("palette")
            if not isinstance(palette, Mapping):
                raise ResourceFormatError(f"palette resource {name!r} has no palette payload")
            return PaletteResource(
                name=name,
                address=address,
                num_entries=_int(palette, "numEntries"),
                size=size,
            )
