from __future__ import annotations

import pytest

from lfdreader import HEADER_LENGTH, Header, MalformedDataError, ResourceMap, Text, derive_offsets


def test_offsets_follow_the_map_layout():
    lengths = [10, 3, 0]
    # 16 * N bytes of map body, then each sibling's header and body
    assert derive_offsets(lengths) == [48, 48 + 26, 48 + 26 + 19]


def test_entry_position_is_absolute():
    rmap = ResourceMap("resource", [Header("TEXT", "a", 10), Header("DELT", "b", 3)])
    first, second = rmap.entries
    assert first.offset == 32
    assert first.position == HEADER_LENGTH + 32
    assert second.position == HEADER_LENGTH + 32 + HEADER_LENGTH + 10


def test_map_round_trip():
    rmap = ResourceMap("empire", [Header("TEXT", "a", 10), Header("PLTT", "pal", 99)])
    raw = rmap.to_bytes()
    assert len(raw) == HEADER_LENGTH * 3
    decoded = ResourceMap.from_bytes(raw)
    assert decoded.name == "empire"
    assert decoded.headers == rmap.headers
    assert [entry.tag for entry in decoded] == ["TEXT", "PLTT"]


def test_map_from_resources_uses_current_lengths():
    text = Text("t", ["hello"])
    rmap = ResourceMap.from_resources([text])
    # count + length prefix + "hello" + two NULs
    assert rmap.headers == [Header("TEXT", "t", 2 + 2 + 7)]
    assert rmap.name == "resource"


def test_map_body_must_be_whole_headers():
    raw = Header("RMAP", "resource", 20).pack() + b"\x00" * 20
    with pytest.raises(MalformedDataError):
        ResourceMap.from_bytes(raw)
