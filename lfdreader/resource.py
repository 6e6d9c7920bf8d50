from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum

from .binary import pack_padded, read_bytes, read_i32, read_padded
from .errors import ConstraintError, MalformedDataError, ResourceTypeError

HEADER_LENGTH = 16
NAME_LENGTH = 8


class ResourceType(Enum):
    ANIM = "ANIM"
    BLAS = "BLAS"
    BMAP = "BMAP"
    CUST = "CUST"
    DELT = "DELT"
    FILM = "FILM"
    FONT = "FONT"
    GMID = "GMID"
    MASK = "MASK"
    MTRX = "MTRX"
    PANL = "PANL"
    PLTT = "PLTT"
    RMAP = "RMAP"
    SHIP = "SHIP"
    TEXT = "TEXT"
    VOIC = "VOIC"
    XACT = "XACT"
    CRFT = "CRFT"
    CPLX = "CPLX"
    UNDEFINED = ""

    @classmethod
    def from_tag(cls, tag: str) -> "ResourceType":
        if not tag:
            return cls.UNDEFINED
        try:
            return cls(tag)
        except ValueError:
            return cls.UNDEFINED


@dataclass(frozen=True)
class Header:
    """The 16-byte record in front of every resource body."""

    tag: str
    name: str
    length: int

    @property
    def type(self) -> ResourceType:
        return ResourceType.from_tag(self.tag)

    @classmethod
    def unpack(cls, data: bytes, offset: int = 0) -> "Header":
        tag = read_bytes(data, offset, 4).decode("latin-1")
        name = read_padded(data, offset + 4, NAME_LENGTH)
        length = read_i32(data, offset + 12)
        if length < 0:
            raise MalformedDataError(f"negative body length {length} in header at 0x{offset:04X}")
        return cls(tag=tag, name=name, length=length)

    def pack(self) -> bytes:
        return pack_padded(self.tag, 4) + pack_padded(self.name, NAME_LENGTH) + struct.pack("<i", self.length)


class Resource:
    """
    One typed, named body inside an LFD container.

    Subclasses implement ``_decode(body, **context)`` and ``_encode()``.  The
    last decoded or encoded body is cached; ``encode()`` only calls
    ``_encode()`` when ``modified`` is set, so untouched resources are written
    back byte-for-byte.
    """

    TYPE = ResourceType.UNDEFINED

    def __init__(self, name: str = "", *, tag: str | None = None) -> None:
        self._tag = tag if tag is not None else self.TYPE.value
        self._name = ""
        self.name = name
        self._raw = b""
        self.modified = True

    @classmethod
    def from_bytes(cls, raw: bytes, contains_header: bool = True, name: str = "", **context):
        resource = cls(name)
        resource.decode(raw, contains_header, **context)
        return resource

    def decode(self, raw: bytes, contains_header: bool = True, **context) -> None:
        if contains_header:
            header = Header.unpack(raw, 0)
            if self.TYPE is not ResourceType.UNDEFINED and header.tag != self.TYPE.value:
                raise ResourceTypeError(self.TYPE.value, header.tag)
            body = read_bytes(raw, HEADER_LENGTH, header.length)
            self._tag = header.tag
            self._name = header.name
        else:
            body = bytes(raw)
        self._decode(body, **context)
        self._raw = body
        self.modified = False

    def encode(self) -> bytes:
        if self.modified:
            self._raw = self._encode()
            self.modified = False
        return self._raw

    def to_bytes(self) -> bytes:
        body = self.encode()
        return Header(self._tag, self._name, len(body)).pack() + body

    def _decode(self, body: bytes, **context) -> None:
        pass

    def _encode(self) -> bytes:
        return self._raw

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def type(self) -> ResourceType:
        return ResourceType.from_tag(self._tag)

    @property
    def name(self) -> str:
        return self._name

    @name.setter
    def name(self, value: str) -> None:
        value = value.rstrip("\x00")
        if len(value) > NAME_LENGTH:
            raise ConstraintError("name", value, f"{NAME_LENGTH} characters max")
        try:
            value.encode("ascii")
        except UnicodeEncodeError as exc:
            raise ConstraintError("name", value, "ASCII only") from exc
        self._name = value

    @property
    def raw(self) -> bytes:
        """Body bytes from the last decode or encode; stale while ``modified``."""
        return self._raw

    @property
    def header(self) -> Header:
        return Header(self._tag, self._name, len(self.encode()))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._tag.strip()}:{self._name!r} {len(self._raw)} bytes>"


class OpaqueResource(Resource):
    """Bytes in, the same bytes out; used for BMAP/CUST/GMID and unknown tags."""

    def __init__(self, name: str = "", data: bytes = b"", *, tag: str = "") -> None:
        super().__init__(name, tag=tag)
        self._raw = bytes(data)

    @property
    def data(self) -> bytes:
        return self._raw

    @data.setter
    def data(self, value: bytes) -> None:
        self._raw = bytes(value)
        self.modified = True
