"""TEXT: a count-prefixed table of length-prefixed, NUL-terminated strings."""

from __future__ import annotations

import struct
from typing import Iterable, Iterator, List

from .binary import read_bytes, read_i16
from .errors import ConstraintError, MalformedDataError
from .resource import Resource, ResourceType

ENCODING = "latin-1"
TERMINATOR = b"\x00\x00"


def _check_string(value: str) -> str:
    try:
        raw = value.encode(ENCODING)
    except UnicodeEncodeError as exc:
        raise ConstraintError("string", value, f"{ENCODING} characters only") from exc
    if len(raw) + len(TERMINATOR) > 0x7FFF:
        raise ConstraintError("string", len(raw), "32765 bytes max")
    return value


def _strip_terminator(raw: bytes) -> bytes:
    """Drop the two-byte terminator, or the lone NUL some files end strings with."""
    if raw.endswith(TERMINATOR):
        return raw[: -len(TERMINATOR)]
    if raw.endswith(b"\x00"):
        return raw[:-1]
    return raw


class Text(Resource):
    TYPE = ResourceType.TEXT

    def __init__(self, name: str = "", strings: Iterable[str] = ()) -> None:
        super().__init__(name)
        self._strings: List[str] = [_check_string(value) for value in strings]

    def _decode(self, body: bytes, **context) -> None:
        count = read_i16(body, 0)
        if count < 0:
            raise MalformedDataError(f"negative string count {count}")
        strings: List[str] = []
        pos = 2
        for _ in range(count):
            length = read_i16(body, pos)
            if length < 0:
                raise MalformedDataError(f"negative string length {length} at 0x{pos:04X}")
            raw = read_bytes(body, pos + 2, length)
            strings.append(_strip_terminator(raw).decode(ENCODING))
            pos += 2 + length
        self._strings = strings

    def _encode(self) -> bytes:
        blob = bytearray(struct.pack("<h", len(self._strings)))
        for value in self._strings:
            raw = value.encode(ENCODING) + TERMINATOR
            blob.extend(struct.pack("<h", len(raw)))
            blob.extend(raw)
        return bytes(blob)

    def __len__(self) -> int:
        return len(self._strings)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._strings))

    def __getitem__(self, index: int) -> str:
        return self._strings[index]

    def __setitem__(self, index: int, value: str) -> None:
        self._strings[index] = _check_string(value)
        self.modified = True

    def append(self, value: str) -> None:
        self._strings.append(_check_string(value))
        self.modified = True

    def remove(self, index: int) -> str:
        value = self._strings.pop(index)
        self.modified = True
        return value

    @property
    def strings(self) -> List[str]:
        return list(self._strings)

    @strings.setter
    def strings(self, values: Iterable[str]) -> None:
        self._strings = [_check_string(value) for value in values]
        self.modified = True
