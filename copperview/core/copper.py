"""
Copper -- display-list decoding for the Amiga copper coprocessor.

The copper executes a list of two-word instructions from chip memory,
synchronised to the video beam:

* **MOVE** -- write a 16-bit value to a custom register.
  IR1 bit 0 = 0.  IR1 bits 8-1 hold the register offset, IR2 the data.
* **WAIT** -- stall until the beam reaches a position.
  IR1 bit 0 = 1, IR2 bit 0 = 0.
* **SKIP** -- skip the next instruction if the beam is past a position.
  IR1 bit 0 = 1, IR2 bit 0 = 1.

WAIT/SKIP layout:

    IR1  15-8  VP   vertical beam position
         7-1   HP   horizontal beam position
    IR2  15    BFD  blitter-finished disable
         14-8  VE   vertical compare enable mask
         7-1   HE   horizontal compare enable mask

``WAIT $FFFF,$FFFE`` can never be satisfied and marks the end of a list.

Decoding works from the frame's DMA timeline rather than by walking
memory from COP1LC: only words the copper really fetched are decoded, so
jumps, skips and early list ends are reflected exactly and decoding never
reads beyond what the frame touched.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from copperview.core import custom_registers as cr
from copperview.core.dma import DmaRecord, copper_fetches
from copperview.core.errors import TruncatedProgram
from copperview.core.geometry import DEFAULT_HEIGHT, DEFAULT_WIDTH, Screen
from copperview.core.memory import IMemoryReader

logger = logging.getLogger(__name__)

END_IR1 = 0xFFFF
END_IR2 = 0xFFFE


# ---------------------------------------------------------------------------
# Instructions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CopperMove:
    """MOVE: write :attr:`data` to custom register :attr:`register`."""

    ir1: int
    ir2: int

    @property
    def register(self) -> int:
        return self.ir1 & 0x1FE

    @property
    def data(self) -> int:
        return self.ir2

    @property
    def is_legal(self) -> bool:
        return self.register >= cr.COPPER_MIN_REGISTER

    def __str__(self) -> str:
        return f"MOVE {cr.register_label(self.register)} := ${self.data:04X}"


@dataclass(frozen=True)
class _CopperCompare:
    """Shared field decoding for WAIT and SKIP."""

    ir1: int
    ir2: int

    @property
    def vp(self) -> int:
        return (self.ir1 >> 8) & 0xFF

    @property
    def hp(self) -> int:
        return self.ir1 & 0xFE

    @property
    def ve(self) -> int:
        return (self.ir2 >> 8) & 0x7F

    @property
    def he(self) -> int:
        return self.ir2 & 0xFE

    @property
    def blitter_finished_disable(self) -> bool:
        return bool(self.ir2 & 0x8000)

    def _condition(self) -> str:
        text = f"vpos >= ${self.vp:02X} hpos >= ${self.hp:02X}"
        if self.ve != 0x7F or self.he != 0xFE:
            text += f" mask ${self.ve:02X}/${self.he:02X}"
        if not self.blitter_finished_disable:
            text += " & blitter done"
        return text


@dataclass(frozen=True)
class CopperWait(_CopperCompare):
    """WAIT: stall until the beam passes (VP, HP)."""

    @property
    def is_end(self) -> bool:
        return self.ir1 == END_IR1 and self.ir2 == END_IR2

    def __str__(self) -> str:
        if self.is_end:
            return "END"
        return f"WAIT {self._condition()}"


@dataclass(frozen=True)
class CopperSkip(_CopperCompare):
    """SKIP: skip the next instruction if the beam is past (VP, HP)."""

    def __str__(self) -> str:
        return f"SKIP {self._condition()}"


CopperInsn = Union[CopperMove, CopperWait, CopperSkip]


def disassemble(ir1: int, ir2: int) -> CopperInsn:
    """Decode one instruction from its two words."""
    ir1 &= 0xFFFF
    ir2 &= 0xFFFF
    if not ir1 & 1:
        return CopperMove(ir1, ir2)
    if ir2 & 1:
        return CopperSkip(ir1, ir2)
    return CopperWait(ir1, ir2)


@dataclass(frozen=True)
class CopperEntry:
    """One executed copper instruction.

    Attributes:
        vpos: Beam line at which the instruction was fetched.
        hpos: Beam colour clock at which the instruction was fetched.
        address: Chip address of IR1.
        insn: The decoded instruction.
    """

    vpos: int
    hpos: int
    address: int
    insn: CopperInsn


@dataclass(frozen=True)
class CopperProgram:
    """Result of :func:`decode_copper_program`.

    ``truncated`` is set when decoding stopped before the end of the
    list; ``entries`` then holds everything up to the last complete
    instruction.
    """

    entries: tuple[CopperEntry, ...]
    truncated: Optional[TruncatedProgram] = None


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_copper_program(
    memory: IMemoryReader, dma_records: Sequence[DmaRecord]
) -> CopperProgram:
    """Decode the copper list executed during one frame.

    Consecutive copper fetches at ``a`` and ``a + 2`` form one
    instruction positioned at the first fetch.  A repeated fetch of the
    pending address is the copper re-reading after a WAIT and is folded
    into the pending instruction.

    Decoding stops after the end-of-list WAIT, or early (truncated) when:

    * the timeline ends between the two words of an instruction,
    * the second fetch is not at ``a + 2``,
    * a MOVE targets a register the copper may not write.
    """
    entries: list[CopperEntry] = []
    pending: Optional[DmaRecord] = None
    truncated: Optional[TruncatedProgram] = None

    for fetch in copper_fetches(dma_records):
        if pending is None:
            pending = fetch
            continue
        if fetch.address == pending.address:
            continue
        if fetch.address != pending.address + 2:
            truncated = TruncatedProgram("unpaired copper fetch", fetch.address, len(entries))
            break

        insn = disassemble(memory.read_word(pending.address), memory.read_word(fetch.address))
        if isinstance(insn, CopperMove) and not insn.is_legal:
            truncated = TruncatedProgram("illegal copper MOVE", pending.address, len(entries))
            pending = None
            break

        entries.append(CopperEntry(pending.vpos, pending.hpos, pending.address, insn))
        pending = None
        if isinstance(insn, CopperWait) and insn.is_end:
            break

    if truncated is None and pending is not None:
        truncated = TruncatedProgram("timeline ended mid-instruction", pending.address, len(entries))

    if truncated is not None:
        logger.warning("Copper list truncated: %s", truncated)
    else:
        logger.debug("Decoded %d copper instructions", len(entries))
    return CopperProgram(tuple(entries), truncated)


def decode_copper(memory: IMemoryReader, dma_records: Sequence[DmaRecord]) -> list[CopperEntry]:
    """Decode the frame's copper list; partial on malformed input, never raises."""
    return list(decode_copper_program(memory, dma_records).entries)


def format_copper_listing(entries: Sequence[CopperEntry]) -> str:
    """Render entries as ``L<vpos>C<hpos> $<address>: <insn>`` lines."""
    return "\n".join(
        f"L{e.vpos:03d}C{e.hpos:03d} ${e.address:08x}: {e.insn}" for e in entries
    )


# ---------------------------------------------------------------------------
# Screen reconstruction
# ---------------------------------------------------------------------------

def _signed16(value: int) -> int:
    return value - 0x10000 if value & 0x8000 else value


def _moves(entries: Sequence[CopperEntry]):
    for entry in entries:
        if isinstance(entry.insn, CopperMove):
            yield entry, entry.insn


def screen_from_copper(entries: Sequence[CopperEntry]) -> Screen:
    """Reconstruct the playfield the copper list sets up.

    This is a best-effort reading of the register writes, not an
    emulation: mid-frame changes other than plane pointers are collapsed
    to their last value.
    """
    control: dict[int, int] = {}
    for _entry, move in _moves(entries):
        if move.register in (cr.BPLCON0, cr.BPL1MOD, cr.BPL2MOD,
                             cr.DIWSTRT, cr.DIWSTOP, cr.DDFSTRT, cr.DDFSTOP):
            control[move.register] = move.data

    diwstrt = control.get(cr.DIWSTRT)
    diwstop = control.get(cr.DIWSTOP)
    vstart = (diwstrt >> 8) if diwstrt is not None else 0

    pointers = _plane_pointers(entries, vstart)

    bplcon0 = control.get(cr.BPLCON0)
    hires = bool(bplcon0 is not None and bplcon0 & 0x8000)
    if bplcon0 is not None:
        num_planes = 8 if bplcon0 & 0x10 else (bplcon0 >> 12) & 7
    else:
        num_planes = len(pointers)
    num_planes = min(num_planes, cr.MAX_PLANES)

    width = _screen_width(control, hires)
    height = DEFAULT_HEIGHT
    if diwstrt is not None and diwstop is not None:
        vstop = (diwstop >> 8) | (0 if diwstop & 0x8000 else 0x100)
        if vstop > vstart:
            height = vstop - vstart

    planes = tuple(pointers.get(p, 0) for p in range(num_planes))
    modulos = (_signed16(control.get(cr.BPL1MOD, 0)), _signed16(control.get(cr.BPL2MOD, 0)))
    screen = Screen(width, height, planes, modulos)
    logger.debug("Screen from copper: %s", screen)
    return screen


def _plane_pointers(entries: Sequence[CopperEntry], vstart: int) -> dict[int, int]:
    """Bitplane pointers as set up before the display window opens.

    Each pointer half takes its last write before line *vstart*, or its
    first write when the list sets it only once the window is open.
    """
    before: dict[tuple[int, int], int] = {}
    first: dict[tuple[int, int], int] = {}
    for entry, move in _moves(entries):
        offset = move.register - cr.BPL1PTH
        if not 0 <= offset < cr.MAX_PLANES * 4:
            continue
        key = (offset // 4, (offset % 4) // 2)
        first.setdefault(key, move.data)
        if entry.vpos < vstart:
            before[key] = move.data

    pointers: dict[int, int] = {}
    for plane, half in sorted(first):
        value = before.get((plane, half), first[(plane, half)])
        pointers[plane] = pointers.get(plane, 0) | (value << 16 if half == 0 else value)
    return pointers


def _screen_width(control: dict[int, int], hires: bool) -> int:
    ddfstrt = control.get(cr.DDFSTRT)
    ddfstop = control.get(cr.DDFSTOP)
    if ddfstrt is not None and ddfstop is not None and ddfstop > ddfstrt:
        span = ddfstop - ddfstrt
        return ((span // 4 + 2) if hires else (span // 8 + 1)) * 16

    diwstrt = control.get(cr.DIWSTRT)
    diwstop = control.get(cr.DIWSTOP)
    if diwstrt is not None and diwstop is not None:
        hstart = diwstrt & 0xFF
        hstop = (diwstop & 0xFF) | 0x100
        width = (hstop - hstart) * (2 if hires else 1)
        if width > 0:
            return (width + 15) // 16 * 16
    return DEFAULT_WIDTH
