"""
FONT: fixed-height 1bpp strike.

Header (12 bytes)::

    i16 first character code
    i16 glyph count
    i16 bits per scanline   row stride in bits, multiple of 8
    i16 height
    i16 baseline
    u8  reserved[2]

then one width byte per glyph, then ``height * bits / 8`` bytes per glyph,
most significant bit first.
"""

from __future__ import annotations

import struct
from typing import Iterable, List

import numpy as np
from PIL import Image

from .binary import read_bytes, unpack
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

HEADER_FORMAT = "<hhhhh2x"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)


def _check_stride(bits: int) -> None:
    if bits <= 0 or bits % 8:
        raise ConstraintError("bits_per_scanline", bits, "a positive multiple of 8")


class Font(Resource):
    TYPE = ResourceType.FONT

    def __init__(
        self,
        name: str = "",
        start_char: int = 0x20,
        height: int = 8,
        bits_per_scanline: int = 8,
        baseline: int = 0,
        glyphs: Iterable = (),
    ) -> None:
        super().__init__(name)
        _check_stride(bits_per_scanline)
        if height <= 0:
            raise ConstraintError("height", height, "at least one row")
        self.start_char = start_char
        self._height = height
        self._bits = bits_per_scanline
        self._baseline = baseline
        self._glyphs: List[np.ndarray] = []
        for glyph in glyphs:
            self._glyphs.append(self._checked(glyph))

    def _checked(self, glyph) -> np.ndarray:
        bits = (np.asarray(glyph) != 0).astype(np.uint8)
        if bits.ndim != 2 or bits.shape[0] != self._height:
            raise ConstraintError("glyph.shape", bits.shape, f"{self._height} rows")
        if bits.shape[1] > min(self._bits, 255):
            raise ConstraintError("glyph.width", bits.shape[1], f"{min(self._bits, 255)}px max")
        return bits

    def _decode(self, body: bytes, **context) -> None:
        start, count, bits, height, baseline = unpack(HEADER_FORMAT, body, 0)
        if bits <= 0 or bits % 8 or height <= 0 or count < 0:
            raise MalformedDataError(f"bad font header: count={count} bits={bits} height={height}")
        stride = bits // 8
        widths = read_bytes(body, HEADER_SIZE, count)
        pos = HEADER_SIZE + count
        glyphs: List[np.ndarray] = []
        for width in widths:
            raw = np.frombuffer(read_bytes(body, pos, height * stride), dtype=np.uint8)
            rows = np.unpackbits(raw.reshape(height, stride), axis=1)
            glyphs.append(rows[:, :width].copy())
            pos += height * stride
        self.start_char = start
        self._bits, self._height, self._baseline = bits, height, baseline
        self._glyphs = glyphs

    def _encode(self) -> bytes:
        blob = bytearray(
            struct.pack(HEADER_FORMAT, self.start_char, len(self._glyphs), self._bits, self._height, self._baseline)
        )
        blob.extend(glyph.shape[1] for glyph in self._glyphs)
        for glyph in self._glyphs:
            padded = np.zeros((self._height, self._bits), dtype=np.uint8)
            padded[:, : glyph.shape[1]] = glyph
            blob.extend(np.packbits(padded, axis=1).tobytes())
        return bytes(blob)

    def __len__(self) -> int:
        return len(self._glyphs)

    def __getitem__(self, index: int) -> np.ndarray:
        return self._glyphs[index].copy()

    def __setitem__(self, index: int, glyph) -> None:
        self._glyphs[index] = self._checked(glyph)
        self.modified = True

    def glyph_for(self, char: str) -> np.ndarray:
        index = ord(char) - self.start_char
        if not 0 <= index < len(self._glyphs):
            raise KeyError(char)
        return self[index]

    def add_glyph(self, glyph) -> None:
        self._glyphs.append(self._checked(glyph))
        self.modified = True

    @property
    def glyph_widths(self) -> List[int]:
        return [glyph.shape[1] for glyph in self._glyphs]

    @property
    def height(self) -> int:
        return self._height

    @property
    def bits_per_scanline(self) -> int:
        return self._bits

    @bits_per_scanline.setter
    def bits_per_scanline(self, value: int) -> None:
        _check_stride(value)
        widest = max(self.glyph_widths, default=0)
        if widest > value:
            raise ConstraintError("bits_per_scanline", value, f"at least {widest} for the widest glyph")
        self._bits = value
        self.modified = True

    @property
    def baseline(self) -> int:
        return self._baseline

    @baseline.setter
    def baseline(self, value: int) -> None:
        if not 0 <= value <= self._height:
            raise ConstraintError("baseline", value, f"0-{self._height}")
        self._baseline = value
        self.modified = True

    def to_image(self, spacing: int = 1) -> Image.Image:
        """All glyphs side by side on one strip, white on black."""
        width = sum(self.glyph_widths) + spacing * max(len(self._glyphs) - 1, 0)
        sheet = np.zeros((self._height, max(width, 1)), dtype=np.uint8)
        x = 0
        for glyph in self._glyphs:
            sheet[:, x : x + glyph.shape[1]] = glyph * 255
            x += glyph.shape[1] + spacing
        return Image.fromarray(sheet).convert("1")
