"""Fixed-offset field extraction over raw byte slices.

Every read is bounds-checked against the slice it is given, so a short
buffer becomes an OutOfBounds error instead of a silent short value.
"""
from __future__ import annotations

import struct

from .protocol import DEFAULT_BYTE_ORDER


class DecodeError(ValueError):
    """Base class for structural decode failures."""


class OutOfBounds(DecodeError):
    """A field would extend past the end of the buffer."""


class TruncatedHeader(DecodeError):
    """Fewer bytes than a full message header."""


def _require(data: bytes, offset: int, size: int) -> None:
    if offset < 0 or offset + size > len(data):
        raise OutOfBounds(
            f"Need {size} bytes at offset {offset}, but buffer holds {len(data)}"
        )


def _unpack(fmt: str, data: bytes, offset: int, byte_order: str) -> int:
    size = struct.calcsize("=" + fmt)
    _require(data, offset, size)
    return struct.unpack_from(byte_order + fmt, data, offset)[0]


def read_u32(data: bytes, offset: int, byte_order: str = DEFAULT_BYTE_ORDER) -> int:
    return _unpack("I", data, offset, byte_order)


def read_i32(data: bytes, offset: int, byte_order: str = DEFAULT_BYTE_ORDER) -> int:
    return _unpack("i", data, offset, byte_order)


def read_u64(data: bytes, offset: int, byte_order: str = DEFAULT_BYTE_ORDER) -> int:
    return _unpack("Q", data, offset, byte_order)


def read_bytes(data: bytes, offset: int, size: int) -> bytes:
    _require(data, offset, size)
    return bytes(data[offset:offset + size])


def read_cstring(data: bytes, offset: int, size: int) -> bytes:
    """Read a fixed-width name field.

    Stops at the first NUL; an unterminated field yields all `size` bytes.
    Non-printable bytes are kept as-is.
    """
    raw = read_bytes(data, offset, size)
    end = raw.find(b"\x00")
    return raw if end == -1 else raw[:end]
