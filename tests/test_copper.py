"""
Copper list decoding and screen reconstruction tests.
"""

import logging

import pytest

from copperview.core import (
    CopperMove,
    CopperSkip,
    CopperWait,
    DmaKind,
    DmaRecord,
    decode_copper,
    decode_copper_program,
    disassemble,
    format_copper_listing,
    screen_from_copper,
)

END = (0xFFFF, 0xFFFE)
LIST = 0x1000


# =============================================================================
# Disassembly
# =============================================================================

class TestDisassemble:

    def test_move(self):
        insn = disassemble(0x0180, 0x0FFF)
        assert isinstance(insn, CopperMove)
        assert insn.register == 0x180
        assert insn.data == 0x0FFF
        assert str(insn) == "MOVE COLOR00 := $0FFF"

    def test_move_unknown_register(self):
        assert str(disassemble(0x01FC, 0x0000)) == "MOVE $1FC := $0000"

    def test_wait(self):
        insn = disassemble(0x2C07, 0xFFFE)
        assert isinstance(insn, CopperWait)
        assert (insn.vp, insn.hp) == (0x2C, 0x06)
        assert (insn.ve, insn.he) == (0x7F, 0xFE)
        assert str(insn) == "WAIT vpos >= $2C hpos >= $06"

    def test_wait_with_mask_and_blitter(self):
        text = str(disassemble(0x8001, 0x7F00))
        assert "mask $7F/$00" in text
        assert text.endswith("& blitter done")

    def test_skip(self):
        insn = disassemble(0x6401, 0xFFFF)
        assert isinstance(insn, CopperSkip)
        assert str(insn).startswith("SKIP vpos >= $64")

    def test_end(self):
        insn = disassemble(*END)
        assert isinstance(insn, CopperWait)
        assert insn.is_end
        assert str(insn) == "END"


# =============================================================================
# Decoding from the DMA timeline
# =============================================================================

class TestDecode:

    def test_decodes_until_end(self, frame):
        records = frame.copper(LIST, [(0x0180, 0x0000), (0x2C07, 0xFFFE), END, (0x0180, 0x0FFF)])
        program = decode_copper_program(frame.memory(), records)
        assert len(program.entries) == 3
        assert program.entries[-1].insn.is_end
        assert program.truncated is None

    def test_entry_metadata(self, frame):
        records = frame.copper(LIST, [(0x0180, 0x0F00), END], positions=[(12, 40), (13, 2)])
        entries = decode_copper(frame.memory(), records)
        assert (entries[0].vpos, entries[0].hpos, entries[0].address) == (12, 40, LIST)
        assert (entries[1].vpos, entries[1].hpos, entries[1].address) == (13, 2, LIST + 4)

    def test_reads_words_from_memory(self, frame):
        """Instruction words come from the memory snapshot, not the records."""
        records = frame.copper(LIST, [(0x0180, 0x0F00), END])
        frame.put_word(LIST + 2, 0x00F0)
        entries = decode_copper(frame.memory(), records)
        assert entries[0].insn.data == 0x00F0

    def test_ignores_other_dma(self, frame):
        records = frame.copper(LIST, [(0x0180, 0x0F00), END])
        records.insert(1, DmaRecord(0, 1, DmaKind.Bitplane, 0x4000))
        records.insert(0, DmaRecord(0, 0, DmaKind.Cpu, 0x4000, 0x1234, write=True))
        assert len(decode_copper(frame.memory(), records)) == 2

    def test_refetch_folded(self, frame):
        """A repeated fetch of the same word does not split the instruction."""
        records = frame.copper(LIST, [(0x2C07, 0xFFFE), END])
        records.insert(1, DmaRecord(0, 1, DmaKind.Copper, LIST))
        program = decode_copper_program(frame.memory(), records)
        assert len(program.entries) == 2
        assert program.truncated is None

    def test_jump_between_instructions(self, frame):
        """A new list address at an instruction boundary is followed."""
        records = frame.copper(LIST, [(0x0088, 0x0000)])
        records += frame.copper(0x2000, [(0x0180, 0x0FFF), END])
        entries = decode_copper(frame.memory(), records)
        assert [e.address for e in entries] == [LIST, 0x2000, 0x2004]

    def test_empty_timeline(self, frame):
        program = decode_copper_program(frame.memory(), [])
        assert program.entries == ()
        assert program.truncated is None


class TestTruncation:
    """Malformed timelines give partial results instead of errors."""

    def test_timeline_ends_mid_instruction(self, frame, caplog):
        records = frame.copper(LIST, [(0x0180, 0x0F00), (0x0182, 0x00F0)])[:-1]
        with caplog.at_level(logging.WARNING, logger="copperview.core.copper"):
            program = decode_copper_program(frame.memory(), records)
        assert len(program.entries) == 1
        assert program.truncated is not None
        assert program.truncated.address == LIST + 4
        assert program.truncated.decoded == 1
        assert "truncated" in caplog.text

    def test_unpaired_fetch(self, frame):
        records = frame.copper(LIST, [(0x0180, 0x0F00), (0x0182, 0x00F0)])
        records[3] = DmaRecord(0, 6, DmaKind.Copper, 0x3000)
        program = decode_copper_program(frame.memory(), records)
        assert len(program.entries) == 1
        assert program.truncated.reason == "unpaired copper fetch"

    def test_illegal_move_excluded(self, frame):
        """A MOVE below the copper's register floor halts decoding."""
        records = frame.copper(LIST, [(0x0180, 0x0F00), (0x0020, 0x0000), END])
        program = decode_copper_program(frame.memory(), records)
        assert len(program.entries) == 1
        assert program.truncated.reason == "illegal copper MOVE"

    def test_decode_copper_never_raises(self, frame):
        records = frame.copper(LIST, [(0x0180, 0x0F00)])[:1]
        assert decode_copper(frame.memory(), records) == []


class TestListing:

    def test_format(self, frame):
        records = frame.copper(LIST, [(0x0180, 0x0FFF), END], positions=[(5, 8), (44, 226)])
        listing = format_copper_listing(decode_copper(frame.memory(), records))
        assert listing.splitlines() == [
            "L005C008 $00001000: MOVE COLOR00 := $0FFF",
            "L044C226 $00001004: END",
        ]


# =============================================================================
# Screen reconstruction
# =============================================================================

def standard_list(planes=(0x20000, 0x22800, 0x25000)):
    instructions = [
        (0x008E, 0x2C81), (0x0090, 0x2CC1),
        (0x0092, 0x0038), (0x0094, 0x00D0),
        (0x0100, (len(planes) << 12) | 0x0200),
        (0x0108, 0x0000), (0x010A, 0xFFD8),
    ]
    for i, address in enumerate(planes):
        instructions.append((0x00E0 + i * 4, address >> 16))
        instructions.append((0x00E2 + i * 4, address & 0xFFFF))
    instructions.append(END)
    return instructions


class TestScreenFromCopper:

    def test_standard_lores(self, frame):
        records = frame.copper(LIST, standard_list())
        screen = screen_from_copper(decode_copper(frame.memory(), records))
        assert (screen.width, screen.height) == (320, 256)
        assert screen.planes == (0x20000, 0x22800, 0x25000)
        assert screen.modulos == (0, -40)

    def test_hires_width(self, frame):
        instructions = [(0x0100, 0xA200), (0x0092, 0x003C), (0x0094, 0x00D4), END]
        records = frame.copper(LIST, instructions)
        assert screen_from_copper(decode_copper(frame.memory(), records)).width == 640

    def test_eight_planes(self, frame):
        records = frame.copper(LIST, [(0x0100, 0x0210), END])
        assert screen_from_copper(decode_copper(frame.memory(), records)).num_planes == 8

    def test_defaults_without_setup(self, frame):
        screen = screen_from_copper([])
        assert (screen.width, screen.height) == (320, 256)
        assert screen.planes == ()

    def test_pointers_latched_before_display(self, frame):
        """Mid-screen pointer changes do not replace the initial setup."""
        instructions = [
            (0x008E, 0x2C81), (0x0090, 0x2CC1), (0x0100, 0x1200),
            (0x00E0, 0x0002), (0x00E2, 0x0000),
            (0x00E0, 0x0003), (0x00E2, 0x0000),
            END,
        ]
        positions = [(0, 0), (0, 4), (0, 8), (0, 12), (0, 16), (100, 0), (100, 4), (255, 224)]
        records = frame.copper(LIST, instructions, positions)
        screen = screen_from_copper(decode_copper(frame.memory(), records))
        assert screen.planes == (0x20000,)

    def test_planes_without_bplcon0(self, frame):
        """Plane count falls back to the pointers the list sets."""
        records = frame.copper(LIST, [(0x00E0, 0x0001), (0x00E2, 0x0000),
                                      (0x00E4, 0x0001), (0x00E6, 0x2800), END])
        screen = screen_from_copper(decode_copper(frame.memory(), records))
        assert screen.planes == (0x10000, 0x12800)

    def test_diw_height(self, frame):
        records = frame.copper(LIST, [(0x008E, 0x2C81), (0x0090, 0xF4C1), END])
        assert screen_from_copper(decode_copper(frame.memory(), records)).height == 0xF4 - 0x2C

    def test_pointer_set_after_window_opens(self, frame):
        """Planes only set once the window is open still get their address."""
        instructions = [
            (0x008E, 0x2C81), (0x0090, 0x2CC1), (0x0100, 0x2200),
            (0x00E0, 0x0000), (0x00E2, 0x4000),
            (0x00E4, 0x0000), (0x00E6, 0x6000),
            END,
        ]
        positions = [(0x10, 0), (0x10, 4), (0x10, 8), (0x10, 12), (0x10, 16),
                     (0x2C, 0), (0x2C, 4), (0xFF, 224)]
        records = frame.copper(LIST, instructions, positions)
        screen = screen_from_copper(decode_copper(frame.memory(), records))
        assert screen.planes == (0x4000, 0x6000)

    def test_pointer_halves_resolved_separately(self, frame):
        """A low half rewritten mid-screen keeps its pre-window value."""
        instructions = [
            (0x008E, 0x2C81), (0x0100, 0x1200),
            (0x00E2, 0x8000),
            (0x00E0, 0x0001),
            (0x00E2, 0x9000),
            END,
        ]
        positions = [(0, 0), (0, 4), (0, 8), (0x40, 0), (0x50, 0), (0xFF, 224)]
        records = frame.copper(LIST, instructions, positions)
        screen = screen_from_copper(decode_copper(frame.memory(), records))
        assert screen.planes == (0x18000,)
