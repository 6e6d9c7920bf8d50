"""
Resource map (RMAP): the table of contents at the front of a mapped LFD.

Each 16-byte entry repeats the header of one sibling resource.  Offsets are
never stored; they are derived from the entry lengths and measured from the
start of the map body, so the i-th sibling header sits at file position
``HEADER_LENGTH + entries[i].offset``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Sequence

from .errors import MalformedDataError
from .resource import HEADER_LENGTH, Header, Resource, ResourceType

DEFAULT_MAP_NAME = "resource"


@dataclass(frozen=True)
class MapEntry:
    tag: str
    name: str
    length: int
    offset: int

    @property
    def type(self) -> ResourceType:
        return ResourceType.from_tag(self.tag)

    @property
    def position(self) -> int:
        """Absolute file position of the resource header."""
        return HEADER_LENGTH + self.offset


def derive_offsets(lengths: Sequence[int]) -> List[int]:
    offsets: List[int] = []
    offset = HEADER_LENGTH * len(lengths)
    for length in lengths:
        offsets.append(offset)
        offset += HEADER_LENGTH + length
    return offsets


class ResourceMap(Resource):
    TYPE = ResourceType.RMAP

    def __init__(self, name: str = DEFAULT_MAP_NAME, headers: Iterable[Header] = ()) -> None:
        super().__init__(name)
        self._headers: List[Header] = list(headers)

    @classmethod
    def from_resources(cls, resources: Iterable[Resource], name: str = DEFAULT_MAP_NAME) -> "ResourceMap":
        """Build a map from the resources' current bodies (encoding modified ones first)."""
        return cls(name, [resource.header for resource in resources])

    def _decode(self, body: bytes, **context) -> None:
        if len(body) % HEADER_LENGTH:
            raise MalformedDataError(f"map body of {len(body)} bytes is not a multiple of {HEADER_LENGTH}")
        self._headers = [Header.unpack(body, pos) for pos in range(0, len(body), HEADER_LENGTH)]

    def _encode(self) -> bytes:
        return b"".join(header.pack() for header in self._headers)

    @property
    def headers(self) -> List[Header]:
        return list(self._headers)

    @headers.setter
    def headers(self, value: Iterable[Header]) -> None:
        self._headers = list(value)
        self.modified = True

    @property
    def entries(self) -> List[MapEntry]:
        offsets = derive_offsets([header.length for header in self._headers])
        return [
            MapEntry(header.tag, header.name, header.length, offset)
            for header, offset in zip(self._headers, offsets)
        ]

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self) -> Iterator[MapEntry]:
        return iter(self.entries)
