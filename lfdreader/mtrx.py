from __future__ import annotations

import struct

from .binary import read_bytes, unpack
from .resource import Resource, ResourceType

FRAMES_PER_SECOND = 12


class Mtrx(Resource):
    """MTRX: per-frame object matrix data for a film, kept as raw bytes after a short header."""

    TYPE = ResourceType.MTRX

    def __init__(self, name: str = "", frames: int = 0, objects: int = 0, data: bytes = b"", reserved: int = 0) -> None:
        super().__init__(name)
        self.frames = frames
        self.reserved = reserved
        self.objects = objects
        self.data = bytes(data)

    def _decode(self, body: bytes, **context) -> None:
        self.frames, self.reserved, self.objects = unpack("<hhh", body, 0)
        self.data = read_bytes(body, 6, len(body) - 6)

    def _encode(self) -> bytes:
        return struct.pack("<hhh", self.frames, self.reserved, self.objects) + self.data

    def encode(self) -> bytes:
        # plain fields, always rebuilt
        self._raw = self._encode()
        self.modified = False
        return self._raw

    @property
    def seconds(self) -> float:
        return round(self.frames / FRAMES_PER_SECOND, 2)
