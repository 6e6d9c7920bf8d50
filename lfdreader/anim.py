"""
ANIM: a list of DELT-coded frames sharing one palette.

Body layout::

    i16 frame count
    per frame:
        i32 length                 8 + row data
        i16 left, top, right, bottom
        DELT rows

The animation's box is the union of the frame boxes and is derived on every
access, so moving or replacing a frame can never leave it stale.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np
from PIL import Image

from .binary import read_bytes, read_i16, read_i32
from .bitmap import as_pixels, check_dimensions, to_image
from .delt import MAX_HEIGHT, MAX_WIDTH, _check_short, decode_box, decode_image, encode_image
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

MAX_FRAMES = 50

Bounds = Tuple[int, int, int, int]


@dataclass(frozen=True, eq=False)
class Frame:
    left: int
    top: int
    pixels: np.ndarray

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def right(self) -> int:
        return self.left + self.width - 1

    @property
    def bottom(self) -> int:
        return self.top + self.height - 1

    def to_image(self, palette, transparent: int | None = 0) -> Image.Image:
        return to_image(self.pixels, palette, transparent)


def check_frame_bounds(left: int, top: int, width: int, height: int, bounds: Bounds | None) -> None:
    """Raise ConstraintError unless the frame box fits inside ``(left, top, right, bottom)``."""
    if bounds is None:
        return
    b_left, b_top, b_right, b_bottom = bounds
    if left < b_left or left + width - 1 > b_right:
        raise ConstraintError("left", left, f"{b_left} to {b_right - width + 1}")
    if top < b_top or top + height - 1 > b_bottom:
        raise ConstraintError("top", top, f"{b_top} to {b_bottom - height + 1}")


def _frame_pixels(image, palette) -> np.ndarray:
    pixels = as_pixels(image, palette)
    check_dimensions(pixels, MAX_WIDTH, MAX_HEIGHT)
    return pixels


def _stored_frame(left: int, top: int, pixels: np.ndarray) -> Frame:
    """Frames own a read-only buffer; edits go through the Anim methods."""
    frame = Frame(_check_short("left", left), _check_short("top", top), pixels)
    _check_short("right", frame.right)
    _check_short("bottom", frame.bottom)
    pixels.flags.writeable = False
    return frame


class Anim(Resource):
    TYPE = ResourceType.ANIM

    def __init__(self, name: str = "", frames: Iterable[Frame] = ()) -> None:
        super().__init__(name)
        self._frames: List[Frame] = []
        for frame in frames:
            self._append(_stored_frame(frame.left, frame.top, _frame_pixels(frame.pixels, None)))

    def _append(self, frame: Frame, index: int | None = None) -> None:
        if len(self._frames) >= MAX_FRAMES:
            raise ConstraintError("frames", len(self._frames) + 1, f"{MAX_FRAMES} max")
        if index is None:
            self._frames.append(frame)
        else:
            self._frames.insert(index, frame)
        self.modified = True

    def _decode(self, body: bytes, **context) -> None:
        count = read_i16(body, 0)
        if count < 0:
            raise MalformedDataError(f"negative frame count {count}")
        frames: List[Frame] = []
        pos = 2
        for _ in range(count):
            length = read_i32(body, pos)
            if length < 8:
                raise MalformedDataError(f"frame at 0x{pos:04X} declares {length} bytes")
            left, top, width, height = decode_box(body, pos + 4)
            rows = read_bytes(body, pos + 12, length - 8)
            frames.append(_stored_frame(left, top, decode_image(left, top, width, height, rows)))
            pos += 4 + length
        self._frames = frames

    def _encode(self) -> bytes:
        blob = bytearray(struct.pack("<h", len(self._frames)))
        for frame in self._frames:
            rows = encode_image(frame.pixels, frame.left, frame.top)
            blob.extend(struct.pack("<i", 8 + len(rows)))
            blob.extend(struct.pack("<hhhh", frame.left, frame.top, frame.right, frame.bottom))
            blob.extend(rows)
        return bytes(blob)

    def __len__(self) -> int:
        return len(self._frames)

    def __getitem__(self, index: int) -> Frame:
        return self._frames[index]

    def __iter__(self) -> Iterator[Frame]:
        return iter(list(self._frames))

    @property
    def frames(self) -> List[Frame]:
        return list(self._frames)

    @property
    def bounds(self) -> Bounds:
        """Union of every frame box as (left, top, right, bottom)."""
        if not self._frames:
            return (0, 0, -1, -1)
        return (
            min(frame.left for frame in self._frames),
            min(frame.top for frame in self._frames),
            max(frame.right for frame in self._frames),
            max(frame.bottom for frame in self._frames),
        )

    @property
    def left(self) -> int:
        return self.bounds[0]

    @property
    def top(self) -> int:
        return self.bounds[1]

    @property
    def width(self) -> int:
        left, _, right, _ = self.bounds
        return right - left + 1

    @property
    def height(self) -> int:
        _, top, _, bottom = self.bounds
        return bottom - top + 1

    def add_frame(self, image, left: int | None = None, top: int | None = None, palette=None) -> Frame:
        return self.insert_frame(len(self._frames), image, left, top, palette)

    def insert_frame(
        self,
        index: int,
        image,
        left: int | None = None,
        top: int | None = None,
        palette: Sequence | None = None,
    ) -> Frame:
        """New frames default to the current top-left corner of the animation."""
        if left is None:
            left = self.left
        if top is None:
            top = self.top
        frame = _stored_frame(left, top, _frame_pixels(image, palette))
        self._append(frame, index)
        return frame

    def remove_frame(self, index: int) -> Frame:
        if len(self._frames) <= 1:
            raise ConstraintError("frames", len(self._frames), "an animation keeps at least one frame")
        frame = self._frames.pop(index)
        self.modified = True
        return frame

    def set_frame_image(self, index: int, image, palette=None, bounds: Bounds | None = None) -> None:
        frame = self._frames[index]
        pixels = _frame_pixels(image, palette)
        check_frame_bounds(frame.left, frame.top, pixels.shape[1], pixels.shape[0], bounds)
        self._frames[index] = _stored_frame(frame.left, frame.top, pixels)
        self.modified = True

    def set_frame_position(self, index: int, left: int, top: int, bounds: Bounds | None = None) -> None:
        """Move a frame; ``bounds`` is the box the caller wants it kept inside."""
        frame = self._frames[index]
        check_frame_bounds(left, top, frame.width, frame.height, bounds)
        self._frames[index] = _stored_frame(left, top, frame.pixels)
        self.modified = True
