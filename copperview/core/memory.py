"""
Chip memory access for copperview.

:class:`IMemoryReader` is the read-only interface every decoder consumes.
:class:`ChipMemory` implements it over an immutable byte snapshot of the
emulated chip RAM.  Amiga chip memory is big-endian, so a word at ``a``
is ``mem[a] << 8 | mem[a + 1]``.

Reads outside the snapshot return zero, mirroring unmapped bus reads.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Union


class IMemoryReader(ABC):
    """Random-access reads over the emulated address space."""

    @abstractmethod
    def read_byte(self, address: int) -> int:
        """Return the 8-bit value at *address*."""
        ...

    @abstractmethod
    def read_word(self, address: int) -> int:
        """Return the big-endian 16-bit value at *address*."""
        ...


class ChipMemory(IMemoryReader):
    """An immutable snapshot of chip RAM.

    Parameters
    ----------
    data:
        The raw memory contents.  A copy is taken, so later changes to a
        mutable source do not leak into the snapshot.
    base:
        Address of ``data[0]`` in the emulated address space.
    """

    def __init__(self, data: Union[bytes, bytearray, memoryview], base: int = 0) -> None:
        self._data: bytes = bytes(data)
        self._base: int = base

    @property
    def base(self) -> int:
        return self._base

    @property
    def size(self) -> int:
        """Number of bytes in the snapshot."""
        return len(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def contains(self, address: int) -> bool:
        return 0 <= address - self._base < len(self._data)

    def read_byte(self, address: int) -> int:
        offset = address - self._base
        if 0 <= offset < len(self._data):
            return self._data[offset]
        return 0

    def read_word(self, address: int) -> int:
        return (self.read_byte(address) << 8) | self.read_byte(address + 1)

    def get_snapshot(self) -> bytes:
        """Return the raw snapshot bytes."""
        return self._data

    def with_writes(self, writes: dict[int, int]) -> ChipMemory:
        """Return a new snapshot with the given byte writes applied.

        Args:
            writes: Mapping of absolute address to byte value.  Addresses
                outside the snapshot are ignored.
        """
        data = bytearray(self._data)
        for address, value in writes.items():
            offset = address - self._base
            if 0 <= offset < len(data):
                data[offset] = value & 0xFF
        return ChipMemory(data, self._base)

    def __repr__(self) -> str:
        return f"ChipMemory(base=${self._base:08x}, size={len(self._data)})"
