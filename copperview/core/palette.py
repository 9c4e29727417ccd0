"""
Palette extraction.

OCS colour registers hold 12-bit ``$0RGB`` values.  Every source below
expands them with :func:`expand_color`, so palettes taken from the copper
list, the live registers, or a table in memory compare equal when they
describe the same colours.  Palette entries are ``0xRRGGBB`` ints.
"""

from __future__ import annotations

from typing import Sequence

from copperview.core import custom_registers as cr
from copperview.core.copper import CopperEntry, CopperMove
from copperview.core.custom_registers import CustomRegisters
from copperview.core.memory import IMemoryReader


def expand_color(value: int) -> int:
    """Expand a ``$0RGB`` colour word to ``0xRRGGBB``.

    Each 4-bit channel is replicated into both nibbles of its byte, so
    ``$F`` becomes ``$FF`` and ``$8`` becomes ``$88``.
    """
    r = (value >> 8) & 0xF
    g = (value >> 4) & 0xF
    b = value & 0xF
    return ((r * 0x11) << 16) | ((g * 0x11) << 8) | (b * 0x11)


def palette_from_copper(entries: Sequence[CopperEntry]) -> list[int]:
    """Colours set by the copper list; the last write to a register wins.

    Always returns :data:`~copperview.core.custom_registers.NUM_COLORS`
    entries; registers the list never writes are black.
    """
    palette = [0] * cr.NUM_COLORS
    for entry in entries:
        insn = entry.insn
        if not isinstance(insn, CopperMove):
            continue
        index = (insn.register - cr.COLOR00) >> 1
        if 0 <= index < cr.NUM_COLORS and insn.register >= cr.COLOR00:
            palette[index] = expand_color(insn.data)
    return palette


def palette_from_custom_regs(registers: CustomRegisters, count: int = cr.NUM_COLORS) -> list[int]:
    """Colours held in the COLORxx registers of a register snapshot."""
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    return [expand_color(registers[cr.color_register(i)]) for i in range(count)]


def palette_from_memory(memory: IMemoryReader, address: int, count: int) -> list[int]:
    """Colours from *count* consecutive ``$0RGB`` words at *address*."""
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    return [expand_color(memory.read_word(address + i * 2)) for i in range(count)]
