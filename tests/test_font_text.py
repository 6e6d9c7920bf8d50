from __future__ import annotations

import struct

import numpy as np
import pytest

from lfdreader import ConstraintError, Font, Text


def _font() -> Font:
    return Font("small", start_char=0x41, height=2, bits_per_scanline=8, glyphs=[[[1, 0, 1], [0, 1, 0]]])


def test_font_layout_is_msb_first():
    body = _font().encode()
    assert body[:12] == struct.pack("<hhhhh2x", 0x41, 1, 8, 2, 0)
    assert body[12:] == bytes((3, 0xA0, 0x40))


def test_font_round_trip_and_lookup():
    decoded = Font.from_bytes(_font().to_bytes())
    assert decoded.glyph_widths == [3]
    np.testing.assert_array_equal(decoded.glyph_for("A"), [[1, 0, 1], [0, 1, 0]])
    with pytest.raises(KeyError):
        decoded.glyph_for("B")


def test_glyph_constraints():
    font = _font()
    with pytest.raises(ConstraintError):
        font.add_glyph(np.ones((2, 9), dtype=np.uint8))
    with pytest.raises(ConstraintError):
        font.add_glyph(np.ones((3, 2), dtype=np.uint8))
    with pytest.raises(ConstraintError):
        font.bits_per_scanline = 12


def test_wider_stride_keeps_glyphs():
    font = Font("wide", height=1, bits_per_scanline=16, glyphs=[np.ones((1, 12), dtype=np.uint8)])
    decoded = Font.from_bytes(font.to_bytes())
    assert decoded.bits_per_scanline == 16
    np.testing.assert_array_equal(decoded[0], np.ones((1, 12)))
    assert decoded.to_image().size == (12, 1)


def test_text_layout():
    body = Text("t", ["hi", ""]).encode()
    assert body == struct.pack("<h", 2) + struct.pack("<h", 4) + b"hi\x00\x00" + struct.pack("<h", 2) + b"\x00\x00"


def test_text_round_trip_latin1():
    text = Text("t", ["Hello", "caf\xe9"])
    decoded = Text.from_bytes(text.to_bytes())
    assert decoded.strings == ["Hello", "caf\xe9"]
    assert list(decoded) == decoded.strings


def test_text_rejects_characters_outside_latin1():
    text = Text("t")
    with pytest.raises(ConstraintError):
        text.append("€")
    assert len(text) == 0


def test_text_keeps_trailing_nuls_that_belong_to_the_string():
    text = Text("t", ["pad\x00", "end"])
    decoded = Text.from_bytes(text.to_bytes())
    assert decoded.strings == ["pad\x00", "end"]


def test_text_accepts_a_single_nul_terminator():
    body = struct.pack("<h", 1) + struct.pack("<h", 3) + b"ok\x00"
    text = Text("t")
    text.decode(body, contains_header=False)
    assert text.strings == ["ok"]
