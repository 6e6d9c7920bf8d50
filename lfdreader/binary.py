"""
Little-endian field helpers shared by every codec.

All readers take the whole body plus an absolute offset, the way the records
are laid out on disk, and raise MalformedDataError instead of struct.error
when a field runs past the end of the buffer.
"""

from __future__ import annotations

import struct
from typing import Tuple

from .errors import MalformedDataError


def unpack(fmt: str, data: bytes, offset: int) -> Tuple:
    if offset < 0:
        raise MalformedDataError(f"negative offset {offset} while reading {fmt!r}")
    try:
        return struct.unpack_from(fmt, data, offset)
    except struct.error as exc:
        raise MalformedDataError(
            f"{fmt!r} at 0x{offset:04X} runs past the end of a {len(data)}-byte buffer"
        ) from exc


def read_u8(data: bytes, offset: int) -> int:
    return unpack("<B", data, offset)[0]


def read_i16(data: bytes, offset: int) -> int:
    return unpack("<h", data, offset)[0]


def read_u16(data: bytes, offset: int) -> int:
    return unpack("<H", data, offset)[0]


def read_i32(data: bytes, offset: int) -> int:
    return unpack("<i", data, offset)[0]


def read_u24(data: bytes, offset: int) -> int:
    lo, hi = unpack("<HB", data, offset)
    return lo | (hi << 16)


def pack_u24(value: int) -> bytes:
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"{value} does not fit in three bytes")
    return struct.pack("<HB", value & 0xFFFF, value >> 16)


def read_bytes(data: bytes, offset: int, size: int) -> bytes:
    end = offset + size
    if offset < 0 or size < 0 or end > len(data):
        raise MalformedDataError(
            f"{size} bytes at 0x{offset:04X} run past the end of a {len(data)}-byte buffer"
        )
    return bytes(data[offset:end])


def read_padded(data: bytes, offset: int, size: int) -> str:
    """Fixed-width NUL-padded ASCII field, trimmed at the first NUL."""
    raw = read_bytes(data, offset, size)
    return raw.split(b"\x00", 1)[0].decode("latin-1")


def pack_padded(text: str, size: int) -> bytes:
    raw = text.encode("latin-1")[:size]
    return raw + b"\x00" * (size - len(raw))
