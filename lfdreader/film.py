"""
FILM: the cut-scene script.

Body layout::

    i16 reserved
    i16 frame count
    i16 block count - 1
    blocks:
        u8  tag[4], name[8]; i32 length     (length includes this header)
        i16 type number
        i16 chunk count
        i16 length - 22
        chunks:
            i16 length                      (includes these four bytes)
            i16 opcode
            i16 args[(length - 4) / 2]      (none for END and opcode 0x11)
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple

from .binary import read_bytes, read_i16, unpack
from .errors import ConstraintError, MalformedDataError
from .resource import HEADER_LENGTH, Header, Resource, ResourceType

BLOCK_HEADER_LENGTH = 0x16
CHUNK_HEADER_LENGTH = 4

BLOCK_TYPE_NUMBERS = {
    "END\x00": 1,
    "VIEW": 2,
    "ANIM": 3,
    "DELT": 3,
    "CUST": 3,
    "PLTT": 4,
    "VOIC": 5,
}


class ChunkCode(IntEnum):
    END = 2
    TIME = 3
    MOVE = 4
    SPEED = 5
    LAYER = 6
    FRAME = 7
    ANIMATION = 8
    EVENT = 9
    REGION = 10
    WINDOW = 11
    SHIFT = 12
    DISPLAY = 13
    ORIENTATION = 14
    USE = 15
    UNKNOWN11 = 0x11
    TRANSITION = 0x12
    UNKNOWN13 = 0x13
    LOOP = 0x14
    UNKNOWN17 = 0x17
    PRELOAD = 0x18
    SOUND = 0x19
    STEREO = 0x1C


NO_ARGUMENT_CODES = frozenset((ChunkCode.END, ChunkCode.UNKNOWN11))


@dataclass(frozen=True)
class Chunk:
    code: int
    args: Tuple[int, ...] = ()

    @property
    def opcode(self) -> Optional[ChunkCode]:
        try:
            return ChunkCode(self.code)
        except ValueError:
            return None

    @property
    def length(self) -> int:
        return CHUNK_HEADER_LENGTH + 2 * len(self.args)

    def __str__(self) -> str:
        label = self.opcode.name.title() if self.opcode is not None else f"0x{self.code:02X}"
        if not self.args:
            return label
        return f"{label}: " + " ".join(str(arg) for arg in self.args)


@dataclass(frozen=True)
class FilmBlock:
    tag: str
    name: str
    chunks: Tuple[Chunk, ...] = field(default_factory=tuple)

    @property
    def type_number(self) -> int:
        return BLOCK_TYPE_NUMBERS.get(self.tag, -1)

    @property
    def length(self) -> int:
        return BLOCK_HEADER_LENGTH + sum(chunk.length for chunk in self.chunks)

    def __str__(self) -> str:
        return self.tag.rstrip("\x00") + self.name


def _decode_chunks(body: bytes, pos: int, count: int, end: int) -> Tuple[Chunk, ...]:
    chunks: List[Chunk] = []
    for _ in range(count):
        length, code = unpack("<hh", body, pos)
        if length < CHUNK_HEADER_LENGTH or pos + length > end:
            raise MalformedDataError(f"chunk at 0x{pos:04X} declares {length} bytes")
        if code in NO_ARGUMENT_CODES:
            args: Tuple[int, ...] = ()
        else:
            total = (length - CHUNK_HEADER_LENGTH) >> 1
            args = unpack(f"<{total}h", body, pos + CHUNK_HEADER_LENGTH)
        chunks.append(Chunk(code, tuple(args)))
        pos += length
    return tuple(chunks)


class Film(Resource):
    TYPE = ResourceType.FILM

    def __init__(self, name: str = "", frames: int = 0, blocks: Iterable[FilmBlock] = (), reserved: int = 0) -> None:
        super().__init__(name)
        self.reserved = reserved
        self._frames = frames
        self._blocks: List[FilmBlock] = list(blocks)

    def _decode(self, body: bytes, **context) -> None:
        reserved, frames, stored = unpack("<hhh", body, 0)
        blocks: List[FilmBlock] = []
        pos = 6
        for _ in range(stored + 1):
            header = Header.unpack(body, pos)
            if header.length < HEADER_LENGTH + 2:
                raise MalformedDataError(f"film block at 0x{pos:04X} declares {header.length} bytes")
            end = pos + header.length
            read_bytes(body, pos, header.length)  # whole block present
            chunks: Tuple[Chunk, ...] = ()
            if header.length >= BLOCK_HEADER_LENGTH:
                count = read_i16(body, pos + 0x12)
                chunks = _decode_chunks(body, pos + BLOCK_HEADER_LENGTH, count, end)
            blocks.append(FilmBlock(header.tag, header.name, chunks))
            pos = end
        self.reserved = reserved
        self._frames = frames
        self._blocks = blocks

    def _encode(self) -> bytes:
        if not self._blocks:
            raise ConstraintError("blocks", 0, "a film needs at least one block")
        blob = bytearray(struct.pack("<hhh", self.reserved, self._frames, len(self._blocks) - 1))
        for block in self._blocks:
            blob.extend(Header(block.tag, block.name, block.length).pack())
            blob.extend(struct.pack("<hhh", block.type_number, len(block.chunks), block.length - BLOCK_HEADER_LENGTH))
            for chunk in block.chunks:
                blob.extend(struct.pack("<hh", chunk.length, chunk.code))
                if chunk.args:
                    blob.extend(struct.pack(f"<{len(chunk.args)}h", *chunk.args))
        return bytes(blob)

    @property
    def frames(self) -> int:
        return self._frames

    @frames.setter
    def frames(self, value: int) -> None:
        self._frames = value
        self.modified = True

    @property
    def blocks(self) -> List[FilmBlock]:
        return list(self._blocks)

    @blocks.setter
    def blocks(self, value: Iterable[FilmBlock]) -> None:
        self._blocks = list(value)
        self.modified = True
