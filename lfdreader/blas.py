"""
BLAS and VOIC: 8-bit PCM sound effects wrapped in Creative Voice framing.

A body holds one or two sound blocks.  A block may be preceded by a repeat
marker whose count follows the game's convention: -1 and up means the sound
repeats, -2 and below means it does not.  The sample-rate divisor is shared
by both blocks.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, replace
from typing import Iterable, List

from . import voc
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

logger = logging.getLogger(__name__)

MAX_SOUND_BLOCKS = 2
MAX_SAMPLES = 0xFFFFFD
NO_REPEAT = -2
REPEAT_FOREVER = -1
MIN_FREQUENCY = 10000
MAX_FREQUENCY = 12000
DEFAULT_FREQUENCY = 11025


def divisor_for(frequency: int) -> int:
    return 256 - 1000000 // frequency


@dataclass(frozen=True)
class SoundBlock:
    data: bytes
    repeat_count: int = NO_REPEAT

    def __post_init__(self) -> None:
        if len(self.data) > MAX_SAMPLES:
            raise ConstraintError("data", len(self.data), f"{MAX_SAMPLES} bytes max")
        if not -0x8000 <= self.repeat_count <= 0x7FFF:
            raise ConstraintError("repeat_count", self.repeat_count, "signed 16-bit")

    @property
    def repeats(self) -> bool:
        return self.repeat_count >= REPEAT_FOREVER

    def with_repeats(self, repeats: bool) -> "SoundBlock":
        if not repeats:
            return replace(self, repeat_count=NO_REPEAT)
        if self.repeats:
            return self
        return replace(self, repeat_count=REPEAT_FOREVER)


class Blas(Resource):
    TYPE = ResourceType.BLAS

    def __init__(self, name: str = "", blocks: Iterable[SoundBlock] = (), frequency: int = DEFAULT_FREQUENCY) -> None:
        super().__init__(name)
        self._blocks: List[SoundBlock] = []
        self._divisor = 0
        self.frequency = frequency
        self.blocks = blocks

    def _decode(self, body: bytes, **context) -> None:
        pos = voc.parse_header(body)
        blocks: List[SoundBlock] = []
        divisor = self._divisor
        repeat = NO_REPEAT
        for block in voc.iter_blocks(body, pos):
            if block.kind == voc.BLOCK_REPEAT:
                repeat = struct.unpack_from("<h", block.payload.ljust(2, b"\x00"))[0]
            elif block.kind == voc.BLOCK_SOUND:
                if len(block.payload) < 2:
                    raise MalformedDataError(f"sound block at 0x{block.offset:04X} is too short")
                if len(blocks) == MAX_SOUND_BLOCKS:
                    raise MalformedDataError(f"more than {MAX_SOUND_BLOCKS} sound blocks")
                divisor = block.payload[0]
                blocks.append(SoundBlock(block.payload[2:], repeat))
                repeat = NO_REPEAT
            elif block.kind != voc.BLOCK_END_REPEAT:
                logger.warning("%s: skipping VOC block type %d at 0x%04X", self.name, block.kind, block.offset)
        self._blocks = blocks
        self._divisor = divisor

    def _encode(self) -> bytes:
        blob = bytearray(voc.build_header())
        for block in self._blocks:
            if block.repeats:
                blob.extend(voc.repeat_block(block.repeat_count))
            blob.extend(voc.sound_block(block.data, self._divisor))
            if block.repeats:
                blob.extend(voc.end_repeat_block())
        blob.append(voc.BLOCK_TERMINATOR)
        return bytes(blob)

    @property
    def blocks(self) -> List[SoundBlock]:
        return list(self._blocks)

    @blocks.setter
    def blocks(self, value: Iterable[SoundBlock]) -> None:
        blocks = list(value)
        if len(blocks) > MAX_SOUND_BLOCKS:
            raise ConstraintError("blocks", len(blocks), f"{MAX_SOUND_BLOCKS} max")
        self._blocks = blocks
        self.modified = True

    @property
    def divisor(self) -> int:
        return self._divisor

    @property
    def frequency(self) -> int:
        return 1000000 // (256 - self._divisor)

    @frequency.setter
    def frequency(self, value: int) -> None:
        if not MIN_FREQUENCY <= value <= MAX_FREQUENCY:
            raise ConstraintError("frequency", value, f"{MIN_FREQUENCY}-{MAX_FREQUENCY} Hz")
        self._divisor = divisor_for(value)
        self.modified = True

    def to_voc(self) -> bytes:
        """The body is a complete .voc file."""
        return self.encode()

    @classmethod
    def from_voc(cls, data: bytes, name: str = "") -> "Blas":
        return cls.from_bytes(data, contains_header=False, name=name)


class Voic(Blas):
    TYPE = ResourceType.VOIC
