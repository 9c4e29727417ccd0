"""
Debugger session snapshots for copperview.

A :class:`DebugSession` bundles one frame's worth of captured state --
chip memory, custom registers, the DMA timeline and the program's
graphics resources -- and memoises everything derived from it.  A new
frame means a new session (with a new ``generation``); nothing is ever
mutated in place.

Snapshots are stored as JSON::

    {
      "chipMem": "<base64>",            # or "chipMemFile": "<path>"
      "customRegs": [0, ...],
      "dmaRecords": [{"vpos": 0, "hpos": 0, "kind": "copper",
                      "address": 0, "value": 0, "write": false}],
      "gfxResources": [{"name": "...", "type": 0, "flags": 3, ...}],
      "frame": 0
    }

``chipMemFile`` is resolved relative to the JSON file.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
import os
from collections import OrderedDict
from typing import Any, Optional, Sequence

from copperview.core.copper import CopperEntry, CopperProgram, decode_copper_program
from copperview.core.custom_registers import CustomRegisters
from copperview.core.dma import DmaRecord, memory_after_dma
from copperview.core.errors import ResourceFormatError, SessionLoadError
from copperview.core.geometry import Screen
from copperview.core.memory import ChipMemory
from copperview.core.raster import Raster, decode_raster
from copperview.core.resources import GfxResource, parse_resource
from copperview.core.types import DmaKind
from copperview.shell.catalog import GfxResourceView, build_bitmap_views, build_palette_views

logger = logging.getLogger(__name__)

# Decoded rasters kept per session; the least recently used are dropped.
RASTER_CACHE_SIZE: int = 32


class DebugSession:
    """One captured frame plus caches of everything decoded from it.

    Parameters
    ----------
    memory:
        Chip memory snapshot.
    registers:
        Custom register snapshot.
    dma_records:
        The frame's DMA timeline.
    resources:
        Graphics resources registered by the debugged program.
    generation:
        Identifies the snapshot; part of every cache key.
    """

    def __init__(
        self,
        memory: ChipMemory,
        registers: CustomRegisters,
        dma_records: Sequence[DmaRecord] = (),
        resources: Sequence[GfxResource] = (),
        generation: int = 0,
    ) -> None:
        self.memory: ChipMemory = memory
        self.registers: CustomRegisters = registers
        self.dma_records: tuple[DmaRecord, ...] = tuple(dma_records)
        self.resources: tuple[GfxResource, ...] = tuple(resources)
        self.generation: int = generation

        self._program: Optional[CopperProgram] = None
        self._bitmap_views: Optional[list[GfxResourceView]] = None
        self._palette_views: Optional[list[GfxResourceView]] = None
        self._rasters: OrderedDict[tuple, Raster] = OrderedDict()

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def copper_program(self) -> CopperProgram:
        if self._program is None:
            self._program = decode_copper_program(self.memory, self.dma_records)
        return self._program

    def copper(self) -> list[CopperEntry]:
        """The frame's decoded copper list."""
        return list(self.copper_program().entries)

    def bitmap_views(self) -> list[GfxResourceView]:
        if self._bitmap_views is None:
            self._bitmap_views = build_bitmap_views(self.resources, self.copper_program().entries)
        return self._bitmap_views

    def palette_views(self) -> list[GfxResourceView]:
        if self._palette_views is None:
            self._palette_views = build_palette_views(
                self.resources, self.copper_program().entries, self.registers, self.memory
            )
        return self._palette_views

    def render(self, bitmap: GfxResourceView, palette: Sequence[int]) -> Raster:
        """Decode *bitmap* with *palette*, reusing an earlier result if any."""
        if bitmap.screen is None:
            raise ValueError(f"{bitmap.name!r} is not a bitmap view")
        return self.render_screen(bitmap.screen, bitmap.mask, palette)

    def render_screen(
        self, screen: Screen, mask: Optional[Screen], palette: Sequence[int]
    ) -> Raster:
        key = (screen, mask, tuple(palette), self.generation)
        raster = self._rasters.get(key)
        if raster is not None:
            self._rasters.move_to_end(key)
            return raster

        raster = decode_raster(screen, mask, palette, self.memory)
        self._rasters[key] = raster
        if len(self._rasters) > RASTER_CACHE_SIZE:
            self._rasters.popitem(last=False)
        return raster

    def after_dma(self, until: Optional[tuple[int, int]] = None) -> DebugSession:
        """A session over memory with the recorded bus writes replayed.

        *until* optionally bounds the replay to writes before that
        ``(vpos, hpos)`` beam position.
        """
        memory = memory_after_dma(self.memory, self.dma_records, until)
        return DebugSession(memory, self.registers, self.dma_records, self.resources, self.generation)

    @staticmethod
    def find(views: Sequence[GfxResourceView], name: Optional[str]) -> GfxResourceView:
        """Return the view called *name*, or the first view when ``None``.

        Raises:
            KeyError: If no view has that name.
        """
        if name is None:
            return views[0]
        for view in views:
            if view.name == name:
                return view
        raise KeyError(name)

    def __repr__(self) -> str:
        return (
            f"DebugSession(generation={self.generation}, "
            f"memory={self.memory!r}, "
            f"dma_records={len(self.dma_records)}, "
            f"resources={len(self.resources)})"
        )


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def _load_chip_mem(doc: dict[str, Any], directory: str) -> ChipMemory:
    try:
        base = int(doc.get("chipMemBase", 0))
    except (TypeError, ValueError) as exc:
        raise SessionLoadError(f"chipMemBase is not a number: {exc}") from exc
    if "chipMem" in doc:
        try:
            return ChipMemory(base64.b64decode(doc["chipMem"], validate=True), base)
        except (binascii.Error, TypeError) as exc:
            raise SessionLoadError(f"chipMem is not valid base64: {exc}") from exc
    if "chipMemFile" in doc:
        path = os.path.join(directory, doc["chipMemFile"])
        try:
            with open(path, "rb") as fh:
                return ChipMemory(fh.read(), base)
        except OSError as exc:
            raise SessionLoadError(f"cannot read chip memory from {path}: {exc}") from exc
    raise SessionLoadError("snapshot has neither chipMem nor chipMemFile")


def _parse_dma_record(record: dict[str, Any]) -> DmaRecord:
    kind = record.get("kind", DmaKind.Copper)
    kind = DmaKind(kind) if isinstance(kind, int) else DmaKind.from_name(kind)
    return DmaRecord(
        vpos=int(record["vpos"]),
        hpos=int(record["hpos"]),
        kind=kind,
        address=int(record["address"]),
        value=int(record.get("value", 0)),
        write=bool(record.get("write", False)),
        size=int(record.get("size", 2)),
    )


def session_from_dict(doc: dict[str, Any], directory: str = ".") -> DebugSession:
    """Build a session from a decoded JSON snapshot.

    Raises:
        SessionLoadError: If any part of the snapshot is malformed.
    """
    if not isinstance(doc, dict):
        raise SessionLoadError("snapshot must be a JSON object")

    memory = _load_chip_mem(doc, directory)
    try:
        registers = CustomRegisters([int(v) for v in doc.get("customRegs", [])])
        dma_records = [_parse_dma_record(r) for r in doc.get("dmaRecords", [])]
        resources = [parse_resource(r) for r in doc.get("gfxResources", [])]
        generation = int(doc.get("frame", 0))
    except ResourceFormatError as exc:
        raise SessionLoadError(f"bad graphics resource: {exc}") from exc
    except (KeyError, TypeError, ValueError) as exc:
        raise SessionLoadError(f"malformed snapshot: {exc!r}") from exc

    return DebugSession(memory, registers, dma_records, resources, generation)


def load_session(path: str) -> DebugSession:
    """Read a JSON session snapshot from *path*.

    Raises:
        FileNotFoundError: If *path* does not exist.
        SessionLoadError: If the file is not a valid snapshot.
    """
    with open(path, "r", encoding="utf-8") as fh:
        try:
            doc = json.load(fh)
        except json.JSONDecodeError as exc:
            raise SessionLoadError(f"{path}: invalid JSON: {exc}") from exc

    session = session_from_dict(doc, os.path.dirname(os.path.abspath(path)))
    logger.info(
        "Loaded session %s: %d bytes chip memory, %d DMA records, %d resources",
        path, session.memory.size, len(session.dma_records), len(session.resources),
    )
    return session


# ---------------------------------------------------------------------------
# Current session (composition root only)
# ---------------------------------------------------------------------------

_current: Optional[DebugSession] = None


def set_current_session(session: Optional[DebugSession]) -> None:
    global _current
    _current = session


def current_session() -> DebugSession:
    """The session selected by the application entry point.

    Raises:
        RuntimeError: If no session has been set.
    """
    if _current is None:
        raise RuntimeError("no debugger session is loaded")
    return _current
