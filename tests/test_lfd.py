from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from lfdreader import (
    BACKUP_SUFFIX,
    Crft,
    DecodeTraceLogger,
    Delt,
    Header,
    LfdCategory,
    LfdFile,
    LoadFileError,
    LockedCollectionError,
    MalformedDataError,
    Mask,
    OpaqueResource,
    Panl,
    Pltt,
    ResourceMap,
    ResourceType,
    ResourceTypeError,
    SaveFileError,
    Text,
    UnsupportedOperationError,
    log_resource_map,
)


def _save(tmp_path: Path, *resources, map_name: str = "resource") -> Path:
    lfd = LfdFile()
    lfd.resources.extend(resources)
    lfd.rmap = ResourceMap(map_name)
    return lfd.write(tmp_path / "test.lfd")


def test_palette_and_image_survive_a_save(tmp_path, ramp_palette, checker_delt):
    path = _save(tmp_path, ramp_palette, checker_delt)
    loaded = LfdFile.load(path)

    assert loaded.category is LfdCategory.NORMAL
    assert len(loaded.rmap) == 2
    first, second = loaded.rmap.entries
    assert first.offset == 32
    assert second.offset == 32 + 16 + len(ramp_palette.encode())

    data = path.read_bytes()
    assert data[first.position : first.position + 4] == b"PLTT"
    assert data[second.position : second.position + 4] == b"DELT"

    palette, image = loaded.resources
    assert (palette.start_index, palette.end_index) == (0x20, 0x3F)
    assert (image.width, image.height) == (4, 4)
    np.testing.assert_array_equal(image.pixels, checker_delt.pixels)
    assert loaded.palette()[0x21] == (8, 8, 8)
    assert loaded.palette()[0x40] is None


def test_growing_a_body_shifts_only_later_offsets(tmp_path, ramp_palette, checker_delt):
    path = _save(tmp_path, ramp_palette, Text("names", ["a"]), checker_delt, map_name="empire")
    lfd = LfdFile.load(path)
    before = [entry.offset for entry in lfd.rmap.entries]

    text = lfd.resources.find(ResourceType.TEXT, "names")
    old_length = len(text.encode())
    text.append("a much longer string")
    lfd.write()
    delta = len(text.encode()) - old_length

    reloaded = LfdFile.load(path)
    after = [entry.offset for entry in reloaded.rmap.entries]
    assert after[:2] == before[:2]
    assert after[2] == before[2] + delta
    assert reloaded.rmap.name == "empire"
    assert reloaded.resources[1].strings == ["a", "a much longer string"]


def test_unmodified_file_is_written_back_identically(tmp_path, ramp_palette, checker_delt):
    path = _save(tmp_path, ramp_palette, checker_delt)
    original = path.read_bytes()
    assert LfdFile.load(path).to_bytes() == original


def test_failed_write_restores_the_backup(tmp_path, monkeypatch, ramp_palette, checker_delt):
    path = _save(tmp_path, ramp_palette, checker_delt)
    original = path.read_bytes()
    lfd = LfdFile.load(path)
    lfd.resources[0][0x20] = (1, 2, 3)

    def broken_write(self, data):
        with open(self, "wb") as handle:
            handle.write(data[:10])
        raise OSError("disk full")

    monkeypatch.setattr(Path, "write_bytes", broken_write)
    with pytest.raises(SaveFileError) as info:
        lfd.write()
    monkeypatch.undo()

    assert isinstance(info.value.cause, OSError)
    assert path.read_bytes() == original
    assert not path.with_name(path.name + BACKUP_SUFFIX).exists()


def test_failed_write_to_a_new_path_leaves_nothing(tmp_path, monkeypatch, ramp_palette):
    lfd = LfdFile()
    lfd.resources.append(ramp_palette)
    target = tmp_path / "new.lfd"

    def broken_write(self, data):
        with open(self, "wb") as handle:
            handle.write(data[:10])
        raise OSError("disk full")

    monkeypatch.setattr(Path, "write_bytes", broken_write)
    with pytest.raises(SaveFileError):
        lfd.write(target)
    monkeypatch.undo()

    assert not target.exists()
    assert not target.with_name(target.name + BACKUP_SUFFIX).exists()
    assert lfd.path is None


def test_encode_failure_leaves_the_file_alone(tmp_path, ramp_palette):
    path = _save(tmp_path, ramp_palette)
    original = path.read_bytes()
    lfd = LfdFile.load(path)
    lfd.resources.append(Crft("new"))
    with pytest.raises(SaveFileError) as info:
        lfd.write()
    assert isinstance(info.value.cause, UnsupportedOperationError)
    assert path.read_bytes() == original


def test_write_needs_a_path():
    with pytest.raises(ValueError):
        LfdFile().write()


def test_bare_resource_file(tmp_path, checker_delt):
    path = tmp_path / "bare.lfd"
    path.write_bytes(checker_delt.to_bytes())
    lfd = LfdFile.load(path)
    assert lfd.rmap is None
    (delt,) = lfd.resources
    assert isinstance(delt, Delt)
    assert lfd.to_bytes() == checker_delt.to_bytes()


def test_unknown_types_are_kept(tmp_path, ramp_palette):
    blob = b"GMID" + b"\x00" * 8
    raw_resource = Header("GMID", "song", len(blob)).pack() + blob
    lfd = LfdFile()
    lfd.resources.extend([ramp_palette, OpaqueResource.from_bytes(raw_resource)])
    lfd.create_rmap()
    loaded = LfdFile.from_bytes(lfd.to_bytes())
    assert isinstance(loaded.resources[1], OpaqueResource)
    assert loaded.resources[1].to_bytes() == raw_resource


def test_cockpit_structure_is_locked():
    lfd = LfdFile(LfdCategory.COCKPIT)
    assert [resource.type for resource in lfd] == [ResourceType.PANL, ResourceType.MASK, ResourceType.PLTT]
    with pytest.raises(LockedCollectionError):
        lfd.resources.append(Text("t"))
    with pytest.raises(LockedCollectionError):
        del lfd.resources[0]
    with pytest.raises(LockedCollectionError):
        lfd.resources[0] = Panl("other")
    with pytest.raises(LockedCollectionError):
        lfd.rmap = ResourceMap()
    with pytest.raises(LockedCollectionError):
        lfd.create_rmap()
    lfd.resources[0] = Panl("", [np.zeros((1, 1), dtype=np.uint8)])
    assert len(lfd.resources[0]) == 1


def test_cockpit_round_trip(tmp_path):
    lfd = LfdFile(LfdCategory.COCKPIT)
    lfd.resources[0] = Panl("", [np.full((2, 3), 7, dtype=np.uint8)])
    bits = np.array([[1, 0, 0], [1, 1, 1]], dtype=np.uint8)
    lfd.resources[1] = Mask("", bits)
    lfd.resources[2] = Pltt("", 0, 15)
    path = lfd.write(tmp_path / "cockpit.lfd")

    loaded = LfdFile.load(path)
    assert loaded.category is LfdCategory.COCKPIT
    assert loaded.rmap is None
    panel, mask, palette = loaded.resources
    assert panel.size == (3, 2)
    np.testing.assert_array_equal(mask.bits, bits)
    assert palette.end_index == 15
    assert loaded.resources.locked


def test_battle_files(tmp_path):
    lfd = LfdFile(LfdCategory.BATTLE)
    assert [resource.name for resource in lfd] == ["battle#", "b#gal"]
    assert lfd.has_rmap
    loaded = LfdFile.from_bytes(lfd.to_bytes())
    assert loaded.category is LfdCategory.BATTLE
    with pytest.raises(LockedCollectionError):
        loaded.resources.append(Text("extra"))


def test_truncated_input_raises_load_error(ramp_palette, checker_delt):
    lfd = LfdFile()
    lfd.resources.extend([ramp_palette, checker_delt])
    lfd.create_rmap()
    data = lfd.to_bytes()
    with pytest.raises(LoadFileError) as info:
        LfdFile.from_bytes(data[:-3])
    assert isinstance(info.value.cause, MalformedDataError)


def test_map_type_must_match_the_resource(ramp_palette):
    body = ramp_palette.encode()
    data = ResourceMap("r", [Header("DELT", "ramp", len(body))]).to_bytes() + ramp_palette.to_bytes()
    with pytest.raises(LoadFileError) as info:
        LfdFile.from_bytes(data)
    assert isinstance(info.value.cause, ResourceTypeError)


def test_missing_file_raises_load_error(tmp_path):
    with pytest.raises(LoadFileError) as info:
        LfdFile.load(tmp_path / "nope.lfd")
    assert isinstance(info.value.cause, FileNotFoundError)


def test_trace_and_map_logs(tmp_path, ramp_palette, checker_delt):
    path = _save(tmp_path, ramp_palette, checker_delt)
    trace = DecodeTraceLogger(tmp_path / "logs" / "trace.txt")
    lfd = LfdFile.load(path, trace=trace)
    assert len(trace.lines) == 3
    assert "via Pltt" in trace.lines[1]
    trace.flush()
    assert (tmp_path / "logs" / "trace.txt").read_text(encoding="utf-8").count("\n") == 3

    listing = tmp_path / "map.txt"
    log_resource_map(lfd.rmap.entries, listing)
    lines = listing.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("#0001 offset=0x000030 type=PLTT")
    assert "name=checker" in lines[1]
