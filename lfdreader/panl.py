"""
PANL images: opcode-only RLE, one or more images per body.

Every opcode is a repeat:

    0xFD n c    color c, n + 1 pixels
    0xFC c n    color c, n + 1 pixels
    0xFE        end of row
    0xFF        end of image
    other b     color b >> 2, (b & 3) + 1 pixels

The packed form cannot carry color 0x3F or above since (0x3F << 2) would
collide with the marker bytes.  Cockpit LFDs carry a single image; standalone
panel files carry many back to back.
"""

from __future__ import annotations

from typing import Iterable, List, Sequence, Tuple

import numpy as np
from PIL import Image

from .binary import read_u8
from .bitmap import as_pixels, check_dimensions, to_image
from .errors import MalformedDataError
from .resource import Resource, ResourceType

COLOR_COUNT = 0xFC
COUNT_COLOR = 0xFD
END_OF_ROW = 0xFE
END_OF_IMAGE = 0xFF

PACKED_COLOR_LIMIT = 0x3F
MAX_PACKED_RUN = 4
MAX_RUN = 256

MAX_WIDTH = 640
MAX_HEIGHT = 480


def _decode_image(body: bytes, pos: int) -> Tuple[np.ndarray, int]:
    start = pos
    rows: List[bytearray] = []
    current = bytearray()
    while True:
        op = read_u8(body, pos)
        if op == END_OF_IMAGE:
            pos += 1
            if current:
                rows.append(current)
            break
        if op == END_OF_ROW:
            rows.append(current)
            current = bytearray()
            pos += 1
            continue
        if op == COUNT_COLOR:
            count, color = read_u8(body, pos + 1) + 1, read_u8(body, pos + 2)
            pos += 3
        elif op == COLOR_COUNT:
            color, count = read_u8(body, pos + 1), read_u8(body, pos + 2) + 1
            pos += 3
        else:
            color, count = op >> 2, (op & 3) + 1
            pos += 1
        current.extend(bytes((color,)) * count)

    width = len(rows[0]) if rows else 0
    for y, row in enumerate(rows):
        if len(row) != width:
            raise MalformedDataError(
                f"image at 0x{start:04X}: row {y} has {len(row)} pixels, first row has {width}"
            )
    pixels = np.frombuffer(b"".join(rows), dtype=np.uint8).reshape(len(rows), width)
    return pixels.copy(), pos


def decode_images(body: bytes) -> List[np.ndarray]:
    images: List[np.ndarray] = []
    pos = 0
    while pos < len(body):
        image, pos = _decode_image(body, pos)
        images.append(image)
    return images


def encode_row(row: bytes) -> bytes:
    out = bytearray()
    width = len(row)
    x = 0
    while x < width:
        color = row[x]
        k = x + 1
        while k < width and row[k] == color and k - x < MAX_RUN:
            k += 1
        run = k - x
        if run <= MAX_PACKED_RUN and color < PACKED_COLOR_LIMIT:
            out.append((color << 2) | (run - 1))
        else:
            out.extend((COUNT_COLOR, run - 1, color))
        x = k
    return bytes(out)


def encode_images(images: Iterable[np.ndarray]) -> bytes:
    blob = bytearray()
    for pixels in images:
        for row in pixels:
            blob.extend(encode_row(row.tobytes()))
            blob.append(END_OF_ROW)
        blob.append(END_OF_IMAGE)
    return bytes(blob)


class Panl(Resource):
    TYPE = ResourceType.PANL

    def __init__(self, name: str = "", images: Iterable = ()) -> None:
        super().__init__(name)
        self._images: List[np.ndarray] = [self._checked(image, None) for image in images]

    @staticmethod
    def _checked(image, palette) -> np.ndarray:
        pixels = as_pixels(image, palette)
        check_dimensions(pixels, MAX_WIDTH, MAX_HEIGHT)
        return pixels

    def _decode(self, body: bytes, **context) -> None:
        self._images = decode_images(body)

    def _encode(self) -> bytes:
        return encode_images(self._images)

    def __len__(self) -> int:
        return len(self._images)

    def __getitem__(self, index: int) -> np.ndarray:
        return self._images[index].copy()

    @property
    def images(self) -> List[np.ndarray]:
        return [image.copy() for image in self._images]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) of the first image, the one a cockpit mask covers."""
        if not self._images:
            return (0, 0)
        height, width = self._images[0].shape
        return (width, height)

    def set_image(self, index: int, image, palette: Sequence | None = None) -> None:
        self._images[index] = self._checked(image, palette)
        self.modified = True

    def add_image(self, image, palette: Sequence | None = None) -> None:
        self._images.append(self._checked(image, palette))
        self.modified = True

    def remove_image(self, index: int) -> None:
        del self._images[index]
        self.modified = True

    def to_image(self, palette, index: int = 0, transparent: int | None = None) -> Image.Image:
        return to_image(self._images[index], palette, transparent)
