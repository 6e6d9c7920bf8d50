from __future__ import annotations

import numpy as np
import pytest

from lfdreader import Anim, ConstraintError, Frame


def _anim() -> Anim:
    return Anim(
        "blink",
        [
            Frame(0, 0, np.full((2, 2), 3, dtype=np.uint8)),
            Frame(5, 3, np.array([[9]], dtype=np.uint8)),
        ],
    )


def test_bounds_are_the_union_of_frames():
    anim = _anim()
    assert anim.bounds == (0, 0, 5, 3)
    assert (anim.width, anim.height) == (6, 4)
    assert Anim("empty").bounds == (0, 0, -1, -1)


def test_round_trip():
    anim = _anim()
    decoded = Anim.from_bytes(anim.to_bytes())
    assert len(decoded) == 2
    assert (decoded[1].left, decoded[1].top) == (5, 3)
    np.testing.assert_array_equal(decoded[0].pixels, anim[0].pixels)
    np.testing.assert_array_equal(decoded[1].pixels, [[9]])


def test_moving_a_frame_updates_bounds():
    anim = _anim()
    anim.set_frame_position(1, 1, 1)
    assert anim.bounds == (0, 0, 1, 1)
    assert anim.modified


def test_position_outside_requested_bounds_is_rejected():
    anim = _anim()
    with pytest.raises(ConstraintError):
        anim.set_frame_position(0, 9, 0, bounds=(0, 0, 9, 9))


def test_new_frames_default_to_top_left():
    anim = Anim("a", [Frame(4, 6, np.zeros((1, 1), dtype=np.uint8))])
    frame = anim.add_frame(np.ones((2, 2), dtype=np.uint8))
    assert (frame.left, frame.top) == (4, 6)


def test_last_frame_cannot_be_removed():
    anim = _anim()
    anim.remove_frame(0)
    with pytest.raises(ConstraintError):
        anim.remove_frame(0)


def test_frame_limit():
    anim = Anim("many")
    for _ in range(50):
        anim.add_frame(np.zeros((1, 1), dtype=np.uint8), 0, 0)
    with pytest.raises(ConstraintError):
        anim.add_frame(np.zeros((1, 1), dtype=np.uint8), 0, 0)


def test_positions_outside_signed_16_bit_are_rejected():
    with pytest.raises(ConstraintError):
        Anim("a", [Frame(40000, 0, np.zeros((1, 1), dtype=np.uint8))])
    anim = _anim()
    with pytest.raises(ConstraintError):
        anim.insert_frame(0, np.zeros((1, 1), dtype=np.uint8), 0, -40000)
    with pytest.raises(ConstraintError):
        anim.set_frame_position(0, 0x7FFF, 0)
    assert len(anim) == 2
    assert (anim[0].left, anim[0].top) == (0, 0)


def test_frame_buffers_are_read_only():
    anim = _anim()
    with pytest.raises(ValueError):
        anim.frames[0].pixels[0, 0] = 9
    decoded = Anim.from_bytes(anim.to_bytes())
    with pytest.raises(ValueError):
        decoded[0].pixels[0, 0] = 9
    anim.set_frame_image(0, np.array([[9, 0]], dtype=np.uint8))
    assert anim.modified
    np.testing.assert_array_equal(Anim.from_bytes(anim.to_bytes())[0].pixels, [[9, 0]])
