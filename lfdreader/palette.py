"""
PLTT palettes.

A PLTT only defines the sub-range ``start_index..end_index`` of the 256-entry
working palette; every entry outside that range is ``None`` (unset).  Several
PLTTs are layered with :func:`compose_palettes` to build the palette an image
is drawn with.

Body layout::

    u8   start index
    u8   end index
    u8   rgb[end - start + 1][3]
    u8   rotator count            (absent in some files)
    {i16 frame divider, u8 start, u8 end}[count]
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .binary import read_bytes, read_u8, unpack
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

Color = Tuple[int, int, int]
PaletteEntries = List[Optional[Color]]

PALETTE_SIZE = 256
BLACK: Color = (0, 0, 0)
UNSET = None


@dataclass(frozen=True)
class Rotator:
    """Index range that the game cycles every ``frame_divider`` frames."""

    frame_divider: int
    start: int
    end: int

    def __post_init__(self) -> None:
        _check_range(self.start, self.end)


def _check_range(start: int, end: int) -> None:
    if not 0 <= start < PALETTE_SIZE:
        raise ConstraintError("start_index", start, "0-255")
    if not 0 <= end < PALETTE_SIZE:
        raise ConstraintError("end_index", end, "0-255")
    if start > end:
        raise ConstraintError("start_index", start, f"must not exceed end_index {end}")


def _check_color(color: Sequence[int]) -> Color:
    if len(color) != 3 or any(not 0 <= int(c) <= 255 for c in color):
        raise ConstraintError("color", tuple(color), "three components in 0-255")
    return (int(color[0]), int(color[1]), int(color[2]))


class Pltt(Resource):
    TYPE = ResourceType.PLTT

    def __init__(
        self,
        name: str = "",
        start_index: int = 0,
        end_index: int = PALETTE_SIZE - 1,
        colors: Sequence[Sequence[int]] | None = None,
        rotators: Iterable[Rotator] = (),
    ) -> None:
        super().__init__(name)
        _check_range(start_index, end_index)
        self._start = start_index
        self._end = end_index
        self._colors: PaletteEntries = [
            BLACK if start_index <= index <= end_index else UNSET for index in range(PALETTE_SIZE)
        ]
        if colors is not None:
            if len(colors) != end_index - start_index + 1:
                raise ConstraintError("colors", len(colors), f"{end_index - start_index + 1} entries expected")
            for offset, color in enumerate(colors):
                self._colors[start_index + offset] = _check_color(color)
        self._rotators: List[Rotator] = list(rotators)

    def _decode(self, body: bytes, **context) -> None:
        start, end = read_u8(body, 0), read_u8(body, 1)
        if start > end:
            raise MalformedDataError(f"palette range 0x{start:02X}-0x{end:02X} is inverted")
        count = end - start + 1
        rgb = read_bytes(body, 2, count * 3)
        colors: PaletteEntries = [UNSET] * PALETTE_SIZE
        for offset in range(count):
            colors[start + offset] = (rgb[offset * 3], rgb[offset * 3 + 1], rgb[offset * 3 + 2])

        rotators: List[Rotator] = []
        pos = 2 + count * 3
        if pos < len(body):
            total = read_u8(body, pos)
            pos += 1
            for _ in range(total):
                divider, lo, hi = unpack("<hBB", body, pos)
                rotators.append(Rotator(divider, lo, hi))
                pos += 4

        self._start, self._end = start, end
        self._colors = colors
        self._rotators = rotators

    def _encode(self) -> bytes:
        blob = bytearray((self._start, self._end))
        for color in self._colors[self._start : self._end + 1]:
            blob.extend(color)
        blob.append(len(self._rotators))
        for rotator in self._rotators:
            blob.extend(struct.pack("<hBB", rotator.frame_divider, rotator.start, rotator.end))
        return bytes(blob)

    def set_range(self, start_index: int, end_index: int) -> None:
        """Move the defined range; new entries become black, dropped ones unset."""
        _check_range(start_index, end_index)
        for index in range(PALETTE_SIZE):
            inside = start_index <= index <= end_index
            if not inside:
                self._colors[index] = UNSET
            elif not self._start <= index <= self._end:
                self._colors[index] = BLACK
        self._start, self._end = start_index, end_index
        self.modified = True

    @property
    def start_index(self) -> int:
        return self._start

    @start_index.setter
    def start_index(self, value: int) -> None:
        self.set_range(value, self._end)

    @property
    def end_index(self) -> int:
        return self._end

    @end_index.setter
    def end_index(self, value: int) -> None:
        self.set_range(self._start, value)

    def _check_index(self, index: int) -> None:
        if not self._start <= index <= self._end:
            raise IndexError(f"index 0x{index:02X} is outside 0x{self._start:02X}-0x{self._end:02X}")

    def __getitem__(self, index: int) -> Color:
        self._check_index(index)
        return self._colors[index]

    def __setitem__(self, index: int, color: Sequence[int]) -> None:
        self._check_index(index)
        self._colors[index] = _check_color(color)
        self.modified = True

    @property
    def colors(self) -> PaletteEntries:
        """All 256 entries, ``None`` outside the defined range."""
        return list(self._colors)

    @property
    def rotators(self) -> List[Rotator]:
        return list(self._rotators)

    @rotators.setter
    def rotators(self, value: Iterable[Rotator]) -> None:
        self._rotators = list(value)
        self.modified = True


def compose_palettes(palettes: Iterable[Pltt]) -> PaletteEntries:
    """Layer palettes in order; later ones win inside their own range only."""
    working: PaletteEntries = [UNSET] * PALETTE_SIZE
    for palette in palettes:
        for index in range(palette.start_index, palette.end_index + 1):
            working[index] = palette[index]
    return working
