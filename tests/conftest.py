"""
Shared fixtures for copperview tests.

``frame`` builds a chip memory image and the matching copper DMA timeline
so decoders can be exercised without a captured session.
"""

import base64
import json
import os

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pytest

from copperview.core import ChipMemory, DmaKind, DmaRecord


class FrameBuilder:
    """Chip memory plus a copper fetch timeline under construction."""

    def __init__(self, size=0x8000):
        self.data = bytearray(size)

    def put_word(self, address, value):
        self.data[address] = (value >> 8) & 0xFF
        self.data[address + 1] = value & 0xFF

    def put_words(self, address, values):
        for i, value in enumerate(values):
            self.put_word(address + i * 2, value)

    def copper(self, address, instructions, positions=None):
        """Store *instructions* (IR1, IR2 pairs) at *address*.

        Returns the DMA records of the copper fetching them.  *positions*
        optionally gives the (vpos, hpos) of each instruction; otherwise
        instructions are fetched back to back on line 0.
        """
        records = []
        for i, (ir1, ir2) in enumerate(instructions):
            insn_address = address + i * 4
            self.put_word(insn_address, ir1)
            self.put_word(insn_address + 2, ir2)
            vpos, hpos = positions[i] if positions else (0, i * 4)
            records.append(DmaRecord(vpos, hpos, DmaKind.Copper, insn_address, ir1))
            records.append(DmaRecord(vpos, hpos + 2, DmaKind.Copper, insn_address + 2, ir2))
        return records

    def memory(self):
        return ChipMemory(self.data)


@pytest.fixture
def frame():
    """A fresh 32 KB frame builder."""
    return FrameBuilder()


@pytest.fixture
def snapshot(frame):
    """A JSON-ready session snapshot.

    The copper list sets up a 16x2 single-plane screen at $4000 with
    COLOR01 red; the register bank holds COLOR01 green.  Resources: a
    masked interleaved bitmap ``sprite``, an invalid bitmap ``broken``
    and a two-entry palette ``pal``.
    """
    records = frame.copper(0x1000, [
        (0x008E, 0x8081), (0x0090, 0x82C1),
        (0x0092, 0x0038), (0x0094, 0x003C),
        (0x0100, 0x1200),
        (0x00E0, 0x0000), (0x00E2, 0x4000),
        (0x0180, 0x0000), (0x0182, 0x0F00),
        (0xFFFF, 0xFFFE),
    ])
    frame.put_words(0x4000, [0x8000, 0x0001])
    frame.put_words(0x5000, [0xFFFF, 0x00FF])
    frame.put_words(0x6000, [0x0FFF, 0x000F])

    registers = [0] * 0x100
    registers[0xC1] = 0x00F0

    return {
        "chipMem": base64.b64encode(bytes(frame.data)).decode("ascii"),
        "customRegs": registers,
        "dmaRecords": [
            {"vpos": r.vpos, "hpos": r.hpos, "kind": "copper", "address": r.address, "value": r.value}
            for r in records
        ],
        "gfxResources": [
            {"name": "sprite", "type": 0, "flags": 3, "address": 0x5000, "size": 4,
             "bitmap": {"width": 16, "height": 1, "numPlanes": 1}},
            {"name": "broken", "type": 0, "flags": 0, "address": 0x5000, "size": 4,
             "bitmap": {"width": 12, "height": 1, "numPlanes": 1}},
            {"name": "pal", "type": 1, "flags": 0, "address": 0x6000, "size": 4,
             "palette": {"numEntries": 2}},
        ],
        "frame": 7,
    }


@pytest.fixture
def session_file(snapshot, tmp_path):
    """The ``snapshot`` fixture written to a JSON file."""
    path = tmp_path / "session.json"
    path.write_text(json.dumps(snapshot), encoding="utf-8")
    return str(path)
