from __future__ import annotations

import struct

import pytest

from lfdreader import Chunk, ChunkCode, ConstraintError, Film, FilmBlock, MalformedDataError, Mtrx, Xact


def _film() -> Film:
    return Film(
        "intro",
        frames=120,
        blocks=[
            FilmBlock("VIEW", "", (Chunk(ChunkCode.TIME, (30,)), Chunk(ChunkCode.END))),
            FilmBlock("DELT", "stars", (Chunk(ChunkCode.MOVE, (1, 2, 3, 4)), Chunk(ChunkCode.END))),
        ],
    )


def test_layout_stores_block_count_minus_one():
    body = _film().encode()
    assert struct.unpack_from("<hhh", body, 0) == (0, 120, 1)
    assert body[6:10] == b"VIEW"
    assert struct.unpack_from("<ihhh", body, 6 + 12) == (32, 2, 2, 10)


def test_round_trip():
    film = _film()
    decoded = Film.from_bytes(film.to_bytes())
    assert decoded.frames == 120
    assert decoded.blocks == film.blocks
    assert decoded.blocks[1].type_number == 3
    assert [str(block) for block in decoded.blocks] == ["VIEW", "DELTstars"]


def test_chunk_labels():
    assert str(Chunk(ChunkCode.TIME, (30,))) == "Time: 30"
    assert str(Chunk(ChunkCode.END)) == "End"
    assert str(Chunk(0x30, (1,))) == "0x30: 1"
    assert Chunk(0x30).opcode is None


def test_chunk_running_past_its_block_is_rejected():
    body = bytearray(_film().encode())
    # first chunk of the first block claims 64 bytes
    struct.pack_into("<h", body, 6 + 22, 64)
    with pytest.raises(MalformedDataError):
        Film("bad").decode(bytes(body), contains_header=False)


def test_film_needs_a_block():
    with pytest.raises(ConstraintError):
        Film("empty").encode()


def test_mtrx_round_trip():
    mtrx = Mtrx("m", frames=24, objects=3, data=b"xyz")
    decoded = Mtrx.from_bytes(mtrx.to_bytes())
    assert (decoded.frames, decoded.objects, decoded.data) == (24, 3, b"xyz")
    assert decoded.seconds == 2.0
    decoded.frames = 36
    assert Mtrx.from_bytes(decoded.to_bytes()).frames == 36


def test_xact_is_passed_through():
    xact = Xact("x", b"\x01\x02\x03")
    decoded = Xact.from_bytes(xact.to_bytes())
    assert decoded.act == b"\x01\x02\x03"
