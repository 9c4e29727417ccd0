"""
Amiga OCS/ECS custom chip registers.

The custom chips are memory-mapped at $DFF000-$DFF1FF as 256 16-bit
registers.  Offsets below are relative to :data:`CUSTOM_BASE`; the copper
addresses registers by these offsets (its MOVE destination field).

Register map (subset used by the debugger views):

    0x080-0x08A  COP1LC, COP2LC, COPJMP1/2   Copper list control
    0x08E-0x094  DIWSTRT/DIWSTOP, DDFSTRT/DDFSTOP   Display window / fetch
    0x0E0-0x0FE  BPL1PTH..BPL8PTL            Bitplane pointers
    0x100-0x10A  BPLCON0-3, BPL1MOD, BPL2MOD Bitplane control / modulos
    0x180-0x1BE  COLOR00-COLOR31             Colour registers
"""

from __future__ import annotations

from typing import Optional, Sequence

CUSTOM_BASE = 0xDFF000
NUM_REGISTERS = 0x100
NUM_COLORS = 32

# ---------------------------------------------------------------------------
# Register offset constants
# ---------------------------------------------------------------------------

BLTDDAT  = 0x000
DMACONR  = 0x002
VPOSR    = 0x004
VHPOSR   = 0x006
INTENAR  = 0x01C
INTREQR  = 0x01E
COPCON   = 0x02E
COP1LCH  = 0x080
COP1LCL  = 0x082
COP2LCH  = 0x084
COP2LCL  = 0x086
COPJMP1  = 0x088
COPJMP2  = 0x08A
COPINS   = 0x08C
DIWSTRT  = 0x08E
DIWSTOP  = 0x090
DDFSTRT  = 0x092
DDFSTOP  = 0x094
DMACON   = 0x096
INTENA   = 0x09A
INTREQ   = 0x09C
BPL1PTH  = 0x0E0
BPLCON0  = 0x100
BPLCON1  = 0x102
BPLCON2  = 0x104
BPLCON3  = 0x106
BPL1MOD  = 0x108
BPL2MOD  = 0x10A
SPR0PTH  = 0x120
COLOR00  = 0x180

# Lowest register offset a copper MOVE may write (COPCON danger bit aside).
COPPER_MIN_REGISTER = 0x040

MAX_PLANES = 8


def bplpt_high(plane: int) -> int:
    """Offset of BPLxPTH for zero-based *plane*."""
    return BPL1PTH + plane * 4


def bplpt_low(plane: int) -> int:
    """Offset of BPLxPTL for zero-based *plane*."""
    return BPL1PTH + plane * 4 + 2


def color_register(index: int) -> int:
    """Offset of COLORxx for colour *index* (0-31)."""
    return COLOR00 + index * 2


def _build_names() -> dict[int, str]:
    names: dict[int, str] = {
        BLTDDAT: "BLTDDAT", DMACONR: "DMACONR", VPOSR: "VPOSR", VHPOSR: "VHPOSR",
        INTENAR: "INTENAR", INTREQR: "INTREQR", COPCON: "COPCON",
        COP1LCH: "COP1LCH", COP1LCL: "COP1LCL", COP2LCH: "COP2LCH", COP2LCL: "COP2LCL",
        COPJMP1: "COPJMP1", COPJMP2: "COPJMP2", COPINS: "COPINS",
        DIWSTRT: "DIWSTRT", DIWSTOP: "DIWSTOP", DDFSTRT: "DDFSTRT", DDFSTOP: "DDFSTOP",
        DMACON: "DMACON", INTENA: "INTENA", INTREQ: "INTREQ",
        BPLCON0: "BPLCON0", BPLCON1: "BPLCON1", BPLCON2: "BPLCON2", BPLCON3: "BPLCON3",
        BPL1MOD: "BPL1MOD", BPL2MOD: "BPL2MOD",
    }
    for plane in range(MAX_PLANES):
        names[bplpt_high(plane)] = f"BPL{plane + 1}PTH"
        names[bplpt_low(plane)] = f"BPL{plane + 1}PTL"
    for sprite in range(8):
        names[SPR0PTH + sprite * 4] = f"SPR{sprite}PTH"
        names[SPR0PTH + sprite * 4 + 2] = f"SPR{sprite}PTL"
    for index in range(NUM_COLORS):
        names[color_register(index)] = f"COLOR{index:02d}"
    return names


_NAMES: dict[int, str] = _build_names()
_OFFSETS: dict[str, int] = {name: offset for offset, name in _NAMES.items()}


def get_custom_name(address: int) -> Optional[str]:
    """Return the register name for an absolute address or an offset.

    Returns ``None`` for addresses with no known register.
    """
    offset = address - CUSTOM_BASE if address >= CUSTOM_BASE else address
    return _NAMES.get(offset & 0x1FE) if 0 <= offset < NUM_REGISTERS * 2 else None


def get_custom_offset(name: str) -> int:
    """Return the offset of register *name* from :data:`CUSTOM_BASE`.

    Raises:
        KeyError: If *name* is not a known register.
    """
    return _OFFSETS[name.upper()]


def get_custom_address(name: str) -> int:
    """Return the absolute bus address of register *name*."""
    return CUSTOM_BASE + get_custom_offset(name)


def register_label(offset: int) -> str:
    """Register name, or ``$xxx`` when the offset is not in the table."""
    return _NAMES.get(offset) or f"${offset:03X}"


class CustomRegisters:
    """Snapshot of the custom register bank.

    Parameters
    ----------
    values:
        Register values in offset order, one 16-bit value per register
        (index ``i`` holds offset ``i * 2``).  Shorter snapshots are
        accepted; missing registers read as zero.
    """

    def __init__(self, values: Sequence[int]) -> None:
        self._values: tuple[int, ...] = tuple(v & 0xFFFF for v in values)

    def read_registers(self) -> tuple[int, ...]:
        """Return the full snapshot."""
        return self._values

    def __len__(self) -> int:
        return len(self._values)

    def __getitem__(self, offset: int) -> int:
        """Read the register at byte *offset* from :data:`CUSTOM_BASE`."""
        index = (offset & 0x1FE) >> 1
        return self._values[index] if index < len(self._values) else 0

    def get(self, name: str) -> int:
        """Read a register by name."""
        return self[get_custom_offset(name)]

    def __repr__(self) -> str:
        return f"CustomRegisters({len(self._values)} registers)"
