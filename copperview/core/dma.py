"""
DMA timeline records.

A frame's bus activity is captured as a chronological list of
:class:`DmaRecord` entries, one per DMA slot used.  Copper decoding uses
the copper fetch records to know which words were actually fetched (and
where the beam was); :func:`memory_after_dma` replays recorded bus writes
to reconstruct chip memory at a point in the frame.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

from copperview.core.memory import ChipMemory
from copperview.core.types import DmaKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DmaRecord:
    """One DMA bus access.

    Attributes:
        vpos: Beam line at which the access happened.
        hpos: Beam colour clock within the line.
        kind: Which DMA channel owned the slot.
        address: Chip address accessed.
        value: Data transferred (word for ``size == 2``, byte otherwise).
        write: ``True`` for bus writes.
        size: Transfer width in bytes (1 or 2).
    """

    vpos: int
    hpos: int
    kind: DmaKind
    address: int
    value: int = 0
    write: bool = False
    size: int = 2

    @property
    def position(self) -> tuple[int, int]:
        return (self.vpos, self.hpos)


def copper_fetches(records: Sequence[DmaRecord]) -> Iterator[DmaRecord]:
    """Yield the copper instruction fetches of a timeline, in order."""
    for record in records:
        if record.kind == DmaKind.Copper and not record.write:
            yield record


def memory_after_dma(
    memory: ChipMemory,
    records: Sequence[DmaRecord],
    until: Optional[tuple[int, int]] = None,
) -> ChipMemory:
    """Return *memory* with every recorded bus write applied.

    Args:
        memory: Snapshot taken at the start of the frame.
        records: Chronological DMA timeline.
        until: Optional ``(vpos, hpos)`` bound; writes at or after this
            beam position are not applied.

    Returns:
        A new :class:`ChipMemory`; *memory* itself is left untouched.
    """
    writes: dict[int, int] = {}
    applied = 0
    for record in records:
        if until is not None and record.position >= until:
            break
        if not record.write:
            continue
        if record.size == 2:
            writes[record.address] = (record.value >> 8) & 0xFF
            writes[record.address + 1] = record.value & 0xFF
        else:
            writes[record.address] = record.value & 0xFF
        applied += 1

    logger.debug("memory_after_dma: applied %d writes", applied)
    if not writes:
        return memory
    return memory.with_writes(writes)
