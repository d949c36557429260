"""
sumtree utilities — Byte, hex and fixed-width integer helpers

  • Hex helpers with a lowercase "0x" prefix
  • Big-endian unsigned integers of a fixed width (the only integer
    encoding used on the wire)
  • A small cursor for reading fixed-width fields out of a buffer

All functions are deterministic and side-effect free.
"""
from __future__ import annotations

from typing import Type, Union

from ..errors import DecodeError, EncodeError

BytesLike = Union[bytes, bytearray, memoryview]

HEX_PREFIX = "0x"


# -----------------------------------------------------------------------------
# Hex helpers
# -----------------------------------------------------------------------------

def strip_0x(h: str) -> str:
    """Remove a leading '0x' / '0X' (if present)."""
    return h[2:] if h[:2].lower() == HEX_PREFIX else h


def bytes_to_hex(b: BytesLike) -> str:
    """Return '0x' + lowercase hex for the given bytes."""
    return HEX_PREFIX + _b(b).hex()


def hex_to_bytes(s: str) -> bytes:
    """
    Parse a hex string with or without the '0x' prefix.
    Raises DecodeError on malformed input or odd-length hex.
    """
    if not isinstance(s, str):
        raise DecodeError("hex input must be a string")
    hexpart = strip_0x(s.strip())
    if len(hexpart) % 2 != 0:
        raise DecodeError("hex payload length must be even")
    try:
        return bytes.fromhex(hexpart)
    except ValueError as e:
        raise DecodeError(f"invalid hex string: {e}") from e


# -----------------------------------------------------------------------------
# Fixed-width big-endian integers
# -----------------------------------------------------------------------------

def uint_to_be(value: int, width: int, *, field: str = "value") -> bytes:
    """
    Encode a non-negative integer as exactly `width` big-endian bytes.

    Raises:
        EncodeError if the value is negative or does not fit.
    """
    v = int(value)
    if v < 0:
        raise EncodeError(f"{field} must be non-negative, got {v}")
    if v.bit_length() > 8 * width:
        raise EncodeError(
            f"{field} {v} does not fit in {width} bytes",
            data={"field": field, "width": width},
        )
    return v.to_bytes(width, "big")


def be_to_uint(b: BytesLike) -> int:
    """Decode big-endian unsigned bytes to an integer."""
    return int.from_bytes(_b(b), "big")


# -----------------------------------------------------------------------------
# Reader
# -----------------------------------------------------------------------------

class Reader:
    """
    Sequential reader over a byte buffer. Every short read raises the
    configured error type so callers get a domain-specific failure.
    """

    def __init__(self, buf: BytesLike, *, error: Type[DecodeError] = DecodeError) -> None:
        self._mv = memoryview(_b(buf))
        self._pos = 0
        self._error = error

    @property
    def remaining(self) -> int:
        return len(self._mv) - self._pos

    def take(self, n: int, *, field: str = "field") -> bytes:
        if n < 0 or self._pos + n > len(self._mv):
            raise self._error(
                f"buffer too short for {field}: need {n} bytes, have {self.remaining}"
            )
        out = self._mv[self._pos : self._pos + n].tobytes()
        self._pos += n
        return out

    def uint(self, width: int, *, field: str = "field") -> int:
        return be_to_uint(self.take(width, field=field))

    def finish(self) -> None:
        """Require that the whole buffer has been consumed."""
        if self.remaining:
            raise self._error(f"{self.remaining} trailing bytes after record")


# -----------------------------------------------------------------------------
# Internal helpers
# -----------------------------------------------------------------------------

def _b(x: BytesLike) -> bytes:
    """Coerce to `bytes` without unnecessary copies."""
    if isinstance(x, bytes):
        return x
    if isinstance(x, bytearray):
        return bytes(x)
    if isinstance(x, memoryview):
        return x.tobytes()
    raise DecodeError(f"expected bytes-like input, got {type(x).__name__}")


__all__ = [
    "HEX_PREFIX", "strip_0x", "bytes_to_hex", "hex_to_bytes",
    "uint_to_be", "be_to_uint",
    "Reader",
]
