"""
Creative Voice (.voc) framing used by BLAS/VOIC bodies.

Only the block types the game writes are interpreted; callers see every
block through :func:`iter_blocks` and decide what to keep.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterator

from .binary import pack_u24, read_bytes, read_u8, read_u24, unpack
from .errors import MalformedDataError

MAGIC = b"Creative Voice File\x1a"
HEADER_SIZE = 0x1A
VERSION = 0x010A
CHECKSUM = (~VERSION + 0x1234) & 0xFFFF

BLOCK_TERMINATOR = 0
BLOCK_SOUND = 1
BLOCK_REPEAT = 6
BLOCK_END_REPEAT = 7

CODEC_PCM8 = 0


@dataclass(frozen=True)
class VocBlock:
    offset: int
    kind: int
    payload: bytes


def build_header() -> bytes:
    return MAGIC + struct.pack("<HHH", HEADER_SIZE, VERSION, CHECKSUM)


def parse_header(data: bytes) -> int:
    """Validate the fixed header and return the offset of the first block."""
    if read_bytes(data, 0, len(MAGIC)) != MAGIC:
        raise MalformedDataError("missing 'Creative Voice File' signature")
    size, version, checksum = unpack("<HHH", data, len(MAGIC))
    if checksum != (~version + 0x1234) & 0xFFFF:
        raise MalformedDataError(f"VOC checksum 0x{checksum:04X} does not match version 0x{version:04X}")
    if size < HEADER_SIZE:
        raise MalformedDataError(f"VOC header size 0x{size:X} is too small")
    return size


def iter_blocks(data: bytes, offset: int) -> Iterator[VocBlock]:
    pos = offset
    while pos < len(data):
        kind = read_u8(data, pos)
        if kind == BLOCK_TERMINATOR:
            return
        length = read_u24(data, pos + 1)
        yield VocBlock(pos, kind, read_bytes(data, pos + 4, length))
        pos += 4 + length


def pack_block(kind: int, payload: bytes) -> bytes:
    return bytes((kind,)) + pack_u24(len(payload)) + payload


def sound_block(samples: bytes, divisor: int) -> bytes:
    return pack_block(BLOCK_SOUND, bytes((divisor, CODEC_PCM8)) + samples)


def repeat_block(count: int) -> bytes:
    return pack_block(BLOCK_REPEAT, struct.pack("<h", count))


def end_repeat_block() -> bytes:
    return pack_block(BLOCK_END_REPEAT, b"")
