"""
Exception types for copperview.

Geometry and resource errors are raised synchronously to the immediate
caller.  :class:`TruncatedProgram` is different: copper decoding never
raises it, it is attached to the partial result instead.
"""

from __future__ import annotations


class CopperViewError(Exception):
    """Base class for all copperview errors."""


class InvalidGeometry(CopperViewError, ValueError):
    """A bitmap descriptor has dimensions that cannot be resolved."""


class TruncatedProgram(CopperViewError):
    """Copper decoding stopped before the end of the list.

    Attributes:
        reason: Short human-readable cause.
        address: Chip address of the fetch that ended decoding.
        decoded: Number of instructions decoded before stopping.
    """

    def __init__(self, reason: str, address: int, decoded: int) -> None:
        super().__init__(f"{reason} at ${address:08x} after {decoded} instructions")
        self.reason: str = reason
        self.address: int = address
        self.decoded: int = decoded


class ResourceFormatError(CopperViewError, ValueError):
    """A graphics resource record could not be parsed."""


class SessionLoadError(CopperViewError, RuntimeError):
    """A debugger session snapshot could not be loaded."""
