"""
MASK: the monochrome window mask of a cockpit view.

Each row opens with a lead byte (0xFF: first run is white/solid, anything
else: black/transparent) followed by alternating run lengths.  A 0x00 byte
adds 256 and is always followed by a closing byte 1-255, so a run of exactly
256 or 512 pixels can only be written at the end of a row, where the closing
byte becomes a throw-away pixel past the right edge.  The body ends with two
0x00 bytes.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image

from .binary import read_u8
from .bitmap import check_dimensions
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

WHITE_LEAD = 0xFF
BLACK_LEAD = 0x01
ESCALATION = 256
TERMINATOR = b"\x00\x00"

MAX_WIDTH = 640
MAX_HEIGHT = 480


def _parse_row(body: bytes, pos: int, width: int) -> Tuple[np.ndarray, int]:
    white = read_u8(body, pos) == WHITE_LEAD
    pos += 1
    row = np.zeros(width, dtype=np.uint8)
    x = 0
    while x < width:
        run = 0
        while True:
            value = read_u8(body, pos)
            pos += 1
            if value:
                run += value
                break
            run += ESCALATION
            if x + run == width:
                read_u8(body, pos)
                pos += 1  # throw-away closing pixel
                break
        if x + run > width:
            raise MalformedDataError(f"run of {run} at 0x{pos - 1:04X} passes the {width}px row")
        if white:
            row[x : x + run] = 1
        x += run
        white = not white
    return row, pos


def _parse(body: bytes, width: int, height: int | None, strict: bool) -> np.ndarray:
    rows: List[np.ndarray] = []
    pos = 0
    while pos < len(body) and body[pos] != 0:
        if height is not None and len(rows) == height:
            break
        row, pos = _parse_row(body, pos, width)
        rows.append(row)
    if height is not None and len(rows) != height:
        raise MalformedDataError(f"mask holds {len(rows)} rows, expected {height}")
    if strict and (not rows or any(body[pos:])):
        raise MalformedDataError(f"width {width} leaves undecoded data at 0x{pos:04X}")
    if not rows:
        return np.zeros((0, width), dtype=np.uint8)
    return np.stack(rows)


def candidate_widths(body: bytes) -> List[int]:
    """Cumulative run sums of the first row, smallest first."""
    candidates = set()
    total = 0
    for value in body[1:]:
        total += value if value else ESCALATION
        if total > MAX_WIDTH:
            break
        candidates.add(total)
    return sorted(candidates)


def decode_mask(body: bytes, width: int | None = None, height: int | None = None) -> np.ndarray:
    if width is not None:
        return _parse(body, width, height, strict=False)
    if not any(body):
        return np.zeros((0, 0), dtype=np.uint8)
    for candidate in candidate_widths(body):
        try:
            return _parse(body, candidate, height, strict=True)
        except MalformedDataError:
            continue
    raise MalformedDataError("could not determine the mask width")


def row_runs(row: np.ndarray) -> List[int]:
    if not len(row):
        return []
    edges = np.flatnonzero(np.diff(row.astype(np.int16))) + 1
    bounds = [0, *edges.tolist(), len(row)]
    return [end - start for start, end in zip(bounds, bounds[1:])]


def check_runs(bits: np.ndarray) -> None:
    """Reject 256/512-pixel runs that do not end their row."""
    for y, row in enumerate(bits):
        x = 0
        runs = row_runs(row)
        for index, run in enumerate(runs):
            if run % ESCALATION == 0 and index != len(runs) - 1:
                raise ConstraintError("run", run, f"row {y} column {x}: 256/512px runs must end the row")
            x += run


def encode_mask(bits: np.ndarray) -> bytes:
    check_runs(bits)
    blob = bytearray()
    for row in bits:
        blob.append(WHITE_LEAD if len(row) and row[0] else BLACK_LEAD)
        for run in row_runs(row):
            zeros, remainder = divmod(run, ESCALATION)
            blob.extend(b"\x00" * zeros)
            blob.append(remainder if remainder else 1)
    blob.extend(TERMINATOR)
    return bytes(blob)


def _as_bits(value, transparent: Sequence[int]) -> np.ndarray:
    if isinstance(value, Image.Image):
        rgb = np.asarray(value.convert("RGB"), dtype=np.uint8)
        bits = np.any(rgb != np.array(transparent[:3], dtype=np.uint8), axis=2)
    else:
        bits = np.asarray(value)
        if bits.ndim != 2:
            raise ConstraintError("mask", bits.shape, "a 2D array")
        bits = bits != 0
    bits = bits.astype(np.uint8)
    check_dimensions(bits, MAX_WIDTH, MAX_HEIGHT)
    check_runs(bits)
    return bits


class Mask(Resource):
    """Solid pixels are 1 (white), see-through pixels are 0 (black)."""

    TYPE = ResourceType.MASK

    def __init__(self, name: str = "", bits=None) -> None:
        super().__init__(name)
        self._bits = np.zeros((0, 0), dtype=np.uint8)
        if bits is not None:
            self.set_mask(bits)

    @classmethod
    def from_image(cls, image: Image.Image, name: str = "", transparent: Sequence[int] = (0, 0, 0)) -> "Mask":
        mask = cls(name)
        mask.set_mask(image, transparent)
        return mask

    def _decode(self, body: bytes, width: int | None = None, height: int | None = None, **context) -> None:
        self._bits = decode_mask(body, width, height)

    def _encode(self) -> bytes:
        return encode_mask(self._bits)

    def set_mask(self, value, transparent: Sequence[int] = (0, 0, 0)) -> None:
        """Anything that is not ``transparent`` becomes solid."""
        self._bits = _as_bits(value, transparent)
        self.modified = True

    @property
    def bits(self) -> np.ndarray:
        return self._bits.copy()

    @property
    def width(self) -> int:
        return self._bits.shape[1]

    @property
    def height(self) -> int:
        return self._bits.shape[0]

    def to_image(self) -> Image.Image:
        return Image.fromarray(self._bits * 255).convert("1")
