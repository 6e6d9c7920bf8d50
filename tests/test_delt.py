from __future__ import annotations

import struct

import numpy as np
import pytest
from PIL import Image

from lfdreader import ConstraintError, Delt, MalformedDataError
from lfdreader.delt import encode_row


def test_round_trip_keeps_box_and_pixels(checker_delt):
    decoded = Delt.from_bytes(checker_delt.to_bytes())
    assert (decoded.left, decoded.top, decoded.width, decoded.height) == (10, 20, 4, 4)
    assert (decoded.right, decoded.bottom) == (13, 23)
    np.testing.assert_array_equal(decoded.pixels, checker_delt.pixels)


def test_box_header():
    body = Delt("d", np.zeros((2, 3), dtype=np.uint8), left=-4, top=7).encode()
    assert struct.unpack_from("<hhhh", body, 0) == (-4, 7, -2, 8)


def test_repeat_and_literal_opcodes():
    assert encode_row(bytes([5] * 10)) == bytes(((10 << 1) | 1, 5))
    assert encode_row(bytes([1, 2, 3])) == bytes((3 << 1, 1, 2, 3))
    assert encode_row(bytes([1, 2, 7, 7, 7, 7])) == bytes((2 << 1, 1, 2, (4 << 1) | 1, 7))


def test_long_runs_split_at_127():
    encoded = encode_row(bytes([9] * 130))
    assert encoded == bytes(((127 << 1) | 1, 9, (3 << 1) | 1, 9))


def test_broken_rows_leave_gaps():
    box = struct.pack("<hhhh", 10, 20, 13, 21)
    row = struct.pack("<hhh", 2 << 1, 11, 21) + bytes((7, 8))
    delt = Delt("broken")
    delt.decode(box + row + struct.pack("<h", 0), contains_header=False)
    expected = np.zeros((2, 4), dtype=np.uint8)
    expected[1, 1:3] = (7, 8)
    np.testing.assert_array_equal(delt.pixels, expected)


def test_row_outside_box_is_rejected():
    box = struct.pack("<hhhh", 0, 0, 1, 1)
    row = struct.pack("<hhh", 2 << 1, 1, 0) + bytes((7, 8))
    with pytest.raises(MalformedDataError):
        Delt("bad").decode(box + row + struct.pack("<h", 0), contains_header=False)


def test_opcode_overrunning_row_is_rejected():
    box = struct.pack("<hhhh", 0, 0, 1, 0)
    row = struct.pack("<hhh", (2 << 1) | 1, 0, 0) + bytes(((3 << 1) | 1, 4))
    with pytest.raises(MalformedDataError):
        Delt("bad").decode(box + row + struct.pack("<h", 0), contains_header=False)


def test_image_size_limit():
    with pytest.raises(ConstraintError):
        Delt("big", np.zeros((481, 1), dtype=np.uint8))
    with pytest.raises(ConstraintError):
        Delt("far", left=40000)


def test_set_image_quantizes_rgb_against_palette(ramp_palette):
    image = Image.new("RGB", (2, 1))
    image.putpixel((0, 0), (8, 8, 8))
    image.putpixel((1, 0), (250, 250, 250))
    delt = Delt("q")
    delt.set_image(image, ramp_palette.colors)
    np.testing.assert_array_equal(delt.pixels, [[0x21, 0x3F]])
    assert delt.modified


def test_to_image_is_indexed(checker_delt, ramp_palette):
    image = checker_delt.to_image(ramp_palette.colors)
    assert image.mode == "P"
    assert image.size == (4, 4)
    assert image.getpixel((0, 3)) == 0x3F
    assert image.info["transparency"] == 0
