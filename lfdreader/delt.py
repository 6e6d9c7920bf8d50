"""
DELT images and the row codec they share with ANIM frames.

Body layout (little endian)::

    i16 left, top, right, bottom
    rows:
        i16 length        0 ends the image; odd = opcode row, even = raw row
        i16 left, top     absolute position of the row's first pixel
        ...               (length >> 1) pixels, raw or as opcodes

Opcodes inside a compressed row: an odd byte repeats the following color
``byte >> 1`` times, an even byte copies ``byte >> 1`` literal pixels.  Rows
may start mid-image and stop short ("broken" rows); uncovered pixels stay 0.
"""

from __future__ import annotations

import struct
from typing import Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from .binary import read_bytes, read_i16, read_u8, unpack
from .bitmap import as_pixels, check_dimensions, to_image
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

MAX_WIDTH = 640
MAX_HEIGHT = 480
MAX_RUN = 127
MIN_REPEAT = 3


def _check_short(field: str, value: int) -> int:
    if not -0x8000 <= value <= 0x7FFF:
        raise ConstraintError(field, value, "signed 16-bit")
    return int(value)


def decode_image(left: int, top: int, width: int, height: int, data: bytes) -> np.ndarray:
    pixels = np.zeros((max(height, 0), max(width, 0)), dtype=np.uint8)
    pos = 0
    while pos < len(data):
        value = read_i16(data, pos)
        if value == 0:
            break
        if value < 0:
            raise MalformedDataError(f"negative row length {value} at 0x{pos:04X}")
        compressed = value & 1
        count = value >> 1
        x, y = unpack("<hh", data, pos + 2)
        x -= left
        y -= top
        pos += 6
        if not 0 <= y < height or x < 0 or x + count > width:
            raise MalformedDataError(
                f"row at 0x{pos - 6:04X} covers ({x},{y})+{count}, outside a {width}x{height} image"
            )
        row = pixels[y]
        if not compressed:
            row[x : x + count] = np.frombuffer(read_bytes(data, pos, count), dtype=np.uint8)
            pos += count
            continue
        end = x + count
        while x < end:
            op = read_u8(data, pos)
            pos += 1
            run = op >> 1
            if x + run > end:
                raise MalformedDataError(f"opcode 0x{op:02X} at 0x{pos - 1:04X} overruns its row")
            if op & 1:
                row[x : x + run] = read_u8(data, pos)
                pos += 1
            else:
                row[x : x + run] = np.frombuffer(read_bytes(data, pos, run), dtype=np.uint8)
                pos += run
            x += run
    return pixels


def encode_row(row: bytes) -> bytes:
    """Greedy repeat/literal opcodes for one full-width row."""
    out = bytearray()
    width = len(row)
    x = 0
    while x < width:
        k = x + 1
        while k < width and row[k] == row[x] and k - x < MAX_RUN:
            k += 1
        if k - x >= MIN_REPEAT:
            out.append(((k - x) << 1) | 1)
            out.append(row[x])
        else:
            k = x + 1
            while k < width and k - x < MAX_RUN:
                # stop the literal where a repeat run would start
                if k + 2 < width and row[k] == row[k + 1] == row[k + 2]:
                    break
                k += 1
            out.append((k - x) << 1)
            out.extend(row[x:k])
        x = k
    return bytes(out)


def encode_image(pixels: np.ndarray, left: int, top: int) -> bytes:
    height, width = pixels.shape
    blob = bytearray()
    if width:
        for y in range(height):
            blob.extend(struct.pack("<hhh", (width << 1) | 1, left, top + y))
            blob.extend(encode_row(pixels[y].tobytes()))
    blob.extend(struct.pack("<h", 0))
    return bytes(blob)


def decode_box(body: bytes, offset: int = 0) -> Tuple[int, int, int, int]:
    left, top, right, bottom = unpack("<hhhh", body, offset)
    return left, top, right - left + 1, bottom - top + 1


class Delt(Resource):
    TYPE = ResourceType.DELT

    def __init__(self, name: str = "", pixels=None, left: int = 0, top: int = 0) -> None:
        super().__init__(name)
        self._left = _check_short("left", left)
        self._top = _check_short("top", top)
        self._pixels = np.zeros((0, 0), dtype=np.uint8)
        if pixels is not None:
            self.set_image(pixels)

    def _decode(self, body: bytes, **context) -> None:
        left, top, width, height = decode_box(body)
        self._pixels = decode_image(left, top, width, height, body[8:])
        self._left, self._top = left, top

    def _encode(self) -> bytes:
        box = struct.pack("<hhhh", self._left, self._top, self.right, self.bottom)
        return box + encode_image(self._pixels, self._left, self._top)

    def set_image(self, image, palette: Sequence[Optional[Tuple[int, int, int]]] | None = None) -> None:
        """Replace the pixels; non-indexed Pillow images are quantized against ``palette``."""
        pixels = as_pixels(image, palette)
        check_dimensions(pixels, MAX_WIDTH, MAX_HEIGHT)
        self._pixels = pixels
        self.modified = True

    @property
    def pixels(self) -> np.ndarray:
        return self._pixels.copy()

    @pixels.setter
    def pixels(self, value) -> None:
        self.set_image(value)

    @property
    def left(self) -> int:
        return self._left

    @left.setter
    def left(self, value: int) -> None:
        self._left = _check_short("left", value)
        self.modified = True

    @property
    def top(self) -> int:
        return self._top

    @top.setter
    def top(self, value: int) -> None:
        self._top = _check_short("top", value)
        self.modified = True

    @property
    def width(self) -> int:
        return self._pixels.shape[1]

    @property
    def height(self) -> int:
        return self._pixels.shape[0]

    @property
    def right(self) -> int:
        return self._left + self.width - 1

    @property
    def bottom(self) -> int:
        return self._top + self.height - 1

    def to_image(self, palette, transparent: int | None = 0) -> Image.Image:
        return to_image(self._pixels, palette, transparent)
