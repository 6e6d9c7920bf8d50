from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from lfdreader import ConstraintError, Mask, MalformedDataError
from lfdreader.mask import decode_mask, encode_mask


def test_row_encoding_starts_with_the_first_color():
    bits = np.array([[1, 1, 1, 1, 0, 0], [0, 0, 1, 1, 1, 1]], dtype=np.uint8)
    assert encode_mask(bits) == bytes((0xFF, 4, 2, 0x01, 2, 4, 0, 0))


def test_width_is_discovered_from_the_first_row():
    body = bytes((0xFF, 4, 6, 0xFF, 4, 6, 0, 0))
    bits = decode_mask(body)
    assert bits.shape == (2, 10)
    np.testing.assert_array_equal(bits[0], [1, 1, 1, 1, 0, 0, 0, 0, 0, 0])


def test_run_of_256_at_row_end_has_a_throw_away_byte():
    bits = np.zeros((2, 300), dtype=np.uint8)
    bits[:, :44] = 1
    body = encode_mask(bits)
    assert body[:5] == bytes((0xFF, 44, 0x00, 0x01, 0xFF))
    np.testing.assert_array_equal(decode_mask(body), bits)


def test_run_of_512_ending_the_row():
    bits = np.zeros((1, 512), dtype=np.uint8)
    body = encode_mask(bits)
    assert body == bytes((0x01, 0x00, 0x00, 0x01, 0x00, 0x00))
    np.testing.assert_array_equal(decode_mask(body, width=512), bits)


def test_run_of_256_inside_a_row_cannot_be_written():
    bits = np.zeros((1, 300), dtype=np.uint8)
    bits[0, 256:] = 1
    with pytest.raises(ConstraintError):
        Mask("m", bits)


def test_longer_runs_escalate():
    bits = np.zeros((1, 400), dtype=np.uint8)
    bits[0, 300:] = 1
    body = encode_mask(bits)
    assert body == bytes((0x01, 0x00, 44, 100, 0, 0))
    np.testing.assert_array_equal(decode_mask(body, width=400), bits)


def test_known_size_rejects_short_bodies():
    with pytest.raises(MalformedDataError):
        decode_mask(bytes((0xFF, 4, 0, 0)), width=4, height=2)


def test_from_image_treats_black_as_transparent():
    image = Image.new("RGB", (3, 1))
    image.putpixel((1, 0), (255, 0, 0))
    mask = Mask.from_image(image, "win")
    np.testing.assert_array_equal(mask.bits, [[0, 1, 0]])
    decoded = Mask.from_bytes(mask.to_bytes(), width=3, height=1)
    np.testing.assert_array_equal(decoded.bits, mask.bits)
    assert decoded.to_image().mode == "1"


def test_empty_mask_reads_back_without_a_size():
    body = Mask("m").to_bytes()
    decoded = Mask.from_bytes(body)
    assert decoded.bits.shape == (0, 0)
    assert decode_mask(b"\x00\x00").shape == (0, 0)
    with pytest.raises(MalformedDataError):
        decode_mask(bytes((0x00, 0x05)))
