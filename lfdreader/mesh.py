"""
Wireframe mesh structures shared by CRFT, CPLX and SHIP.

A component is a list of LODs.  Its LOD table is a run of 6-byte
``{i32 distance, i16 jump}`` records closed by distance 0x7FFFFFFF; each jump
is measured from the start of its own record.  An LOD mesh reads::

    u8  signature, unknown1, vertex count, unknown2, shape count
    u8  color index[shape count]
    i16 minimum bound[3], maximum bound[3]
    i16 vertex[vertex count][3]
    i16 vertex normal[vertex count][3]        (CPLX and SHIP only)
    {i16 face normal[3], i16 jump}[shape count]
    shapes: u8 type, u8 data[(type & 0x0F) * 2 + 3]
    {u8, i16}[shape count]                    trailing, not always present
    i16 record count, {u8 id, i16 jump}[count], records

A vertex axis whose high byte is 0x7F copies the same axis from
``(low byte >> 1)`` vertices earlier.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable, List, Optional, Tuple

from .binary import read_bytes, unpack
from .errors import MalformedDataError, UnsupportedOperationError
from .resource import Resource

logger = logging.getLogger(__name__)

LOD_SENTINEL = 0x7FFFFFFF
LOD_HEADER_SIZE = 6
SHAPE_SETTING_SIZE = 8
SHAPE_EXTRA_SIZE = 3
AUX_ENTRY_SIZE = 3
DELTA_MARKER = 0x7F00

TWO_SIDED = 0x10
GOURAUD = 0x20


class MeshType(IntEnum):
    DEFAULT = 0
    MAIN_HULL = 1
    WING = 2
    FUSELAGE = 3
    GUN_TURRET = 4
    SMALL_GUN = 5
    ENGINE = 6
    BRIDGE = 7
    SHIELD_GEN = 8
    ENERGY_GEN = 9
    LAUNCHER = 10
    COMM_SYS = 11
    BEAM_SYS = 12
    COMMAND_BEAM = 13
    DOCKING_PLAT = 14
    LANDING_PLAT = 15
    HANGAR = 16
    CARGO_POD = 17
    MISC_HULL = 18
    ANTENNA = 19
    ROT_WING = 20
    ROT_GUN_TURRET = 21
    ROT_LAUNCHER = 22
    ROT_COMM_SYS = 23
    ROT_BEAM_SYS = 24
    ROT_COMMAND_BEAM = 25
    CUSTOM1 = 26
    CUSTOM2 = 27
    CUSTOM3 = 28
    CUSTOM4 = 29
    CUSTOM5 = 30
    CUSTOM6 = 31


@dataclass(frozen=True)
class Vertex:
    x: int
    y: int
    z: int

    def __getitem__(self, axis: int) -> int:
        return (self.x, self.y, self.z)[axis]


@dataclass(frozen=True)
class Vector(Vertex):
    @property
    def magnitude(self) -> int:
        return int(math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z))


@dataclass(frozen=True)
class Line:
    start: int
    end: int


@dataclass(frozen=True)
class Shape:
    face_normal: Vector
    type: int
    data: bytes
    unknown1: Optional[int] = None
    unknown2: Optional[int] = None

    @property
    def vertex_count(self) -> int:
        return self.type & 0x0F

    @property
    def is_two_sided(self) -> bool:
        return bool(self.type & TWO_SIDED)

    @property
    def is_gouraud(self) -> bool:
        return bool(self.type & GOURAUD)

    @property
    def lines(self) -> Tuple[Line, ...]:
        """Wireframe edges as vertex index pairs, one per two vertices."""
        count = self.vertex_count
        if count == 2:
            return (Line(self.data[2], self.data[3]),)
        return tuple(Line(self.data[n * 2], self.data[(n + 1) * 2]) for n in range(count // 2))


@dataclass(frozen=True)
class AuxRecord:
    """Trailing per-LOD record whose meaning is not known."""

    ident: int
    type: int
    data: bytes


@dataclass(frozen=True)
class Lod:
    distance: int
    signature: int
    unknown1: int
    unknown2: int
    color_indices: bytes
    minimum_bound: Vertex
    maximum_bound: Vertex
    vertices: Tuple[Vertex, ...]
    shapes: Tuple[Shape, ...]
    vertex_normals: Optional[Tuple[Vector, ...]] = None
    aux_records: Tuple[AuxRecord, ...] = ()


@dataclass(frozen=True)
class Component:
    lods: Tuple[Lod, ...]
    mesh_type: Optional[int] = None
    settings: bytes = b""

    @property
    def kind(self) -> Optional[MeshType]:
        if self.mesh_type is None:
            return None
        try:
            return MeshType(self.mesh_type)
        except ValueError:
            return None


class MeshReader:
    """Field reader bound to one body and byte order ("<" or ">")."""

    def __init__(self, data: bytes, byte_order: str = "<") -> None:
        self.data = data
        self.byte_order = byte_order

    def unpack(self, fmt: str, pos: int) -> Tuple:
        return unpack(self.byte_order + fmt, self.data, pos)

    def u8(self, pos: int) -> int:
        return self.unpack("B", pos)[0]

    def i16(self, pos: int) -> int:
        return self.unpack("h", pos)[0]

    def raw(self, pos: int, size: int) -> bytes:
        return read_bytes(self.data, pos, size)

    def vertex(self, pos: int) -> Vertex:
        return Vertex(*self.unpack("3h", pos))

    def vector(self, pos: int) -> Vector:
        return Vector(*self.unpack("3h", pos))


def resolve_vertices(raw: Iterable[Tuple[int, int, int]]) -> Tuple[Vertex, ...]:
    """Apply the 0x7Fxx same-axis back-references in index order."""
    vertices: List[Vertex] = []
    for index, values in enumerate(raw):
        axes = []
        for axis, value in enumerate(values):
            if (value & 0xFF00) == DELTA_MARKER:
                back = (value & 0xFF) >> 1
                if back == 0 or back > index:
                    raise MalformedDataError(f"vertex {index} refers {back} vertices back (0x{value:04X})")
                value = vertices[index - back][axis]
            axes.append(value)
        vertices.append(Vertex(*axes))
    return tuple(vertices)


def read_lod_table(reader: MeshReader, start: int) -> List[Tuple[int, int]]:
    """(distance, mesh position) pairs up to and including the sentinel entry."""
    table: List[Tuple[int, int]] = []
    pos = start
    while True:
        distance, jump = reader.unpack("ih", pos)
        table.append((distance, pos + jump))
        if distance == LOD_SENTINEL:
            return table
        pos += LOD_HEADER_SIZE


def _read_shape_extras(reader: MeshReader, pos: int, count: int) -> Tuple[List[Tuple[int, int]], int]:
    extras = [reader.unpack("Bh", pos + s * SHAPE_EXTRA_SIZE) for s in range(count)]
    return extras, pos + count * SHAPE_EXTRA_SIZE


def _read_aux_records(reader: MeshReader, pos: int, type2_size: int) -> Tuple[AuxRecord, ...]:
    count = reader.i16(pos)
    if count < 0:
        raise MalformedDataError(f"negative record count {count}")
    start = pos + 2
    records: List[AuxRecord] = []
    for index in range(count):
        entry = start + index * AUX_ENTRY_SIZE
        ident, jump = reader.unpack("Bh", entry)
        target = entry + jump
        kind = reader.u8(target)
        if kind == 1:
            size = reader.u8(target + 2) * 3 + 2
        elif kind == 2:
            size = type2_size
        else:
            size = 1
        records.append(AuxRecord(ident, kind, reader.raw(target + 1, size)))
    return tuple(records)


def read_lod(
    reader: MeshReader,
    pos: int,
    distance: int,
    vertex_normals: bool,
    type2_size: int = 16,
) -> Lod:
    signature, unknown1, vertex_count, unknown2, shape_count = reader.unpack("5B", pos)
    pos += 5
    colors = reader.raw(pos, shape_count)
    pos += shape_count
    minimum, maximum = reader.vertex(pos), reader.vertex(pos + 6)
    pos += 12
    vertices = resolve_vertices(reader.unpack("3h", pos + v * 6) for v in range(vertex_count))
    pos += vertex_count * 6

    normals: Optional[Tuple[Vector, ...]] = None
    if vertex_normals:
        normals = tuple(reader.vector(pos + v * 6) for v in range(vertex_count))
        pos += vertex_count * 6

    settings_start = pos
    settings = [
        (reader.vector(settings_start + s * SHAPE_SETTING_SIZE), reader.i16(settings_start + s * SHAPE_SETTING_SIZE + 6))
        for s in range(shape_count)
    ]
    pos = settings_start + shape_count * SHAPE_SETTING_SIZE
    shapes: List[Shape] = []
    for s, (normal, jump) in enumerate(settings):
        pos = settings_start + s * SHAPE_SETTING_SIZE + jump
        kind = reader.u8(pos)
        data = reader.raw(pos + 1, (kind & 0x0F) * 2 + 3)
        shapes.append(Shape(normal, kind, data))
        pos += 1 + len(data)

    records: Tuple[AuxRecord, ...] = ()
    try:
        extras, pos = _read_shape_extras(reader, pos, shape_count)
    except MalformedDataError:
        logger.debug("LOD at distance %d has no per-shape trailing data", distance)
    else:
        shapes = [
            Shape(shape.face_normal, shape.type, shape.data, unknown1, unknown2)
            for shape, (unknown1, unknown2) in zip(shapes, extras)
        ]
        try:
            records = _read_aux_records(reader, pos, type2_size)
        except MalformedDataError as exc:
            logger.debug("LOD at distance %d: trailing records skipped (%s)", distance, exc)

    return Lod(
        distance=distance,
        signature=signature,
        unknown1=unknown1,
        unknown2=unknown2,
        color_indices=colors,
        minimum_bound=minimum,
        maximum_bound=maximum,
        vertices=vertices,
        shapes=tuple(shapes),
        vertex_normals=normals,
        aux_records=records,
    )


def read_component(reader: MeshReader, start: int, vertex_normals: bool, type2_size: int = 16) -> Tuple[Lod, ...]:
    return tuple(
        read_lod(reader, position, distance, vertex_normals, type2_size)
        for distance, position in read_lod_table(reader, start)
    )


class MeshResource(Resource):
    """Read-only base for the three mesh generations."""

    BYTE_ORDER = "<"
    VERTEX_NORMALS = False
    SHADING_SET_SIZE = 16
    AUX_TYPE2_SIZE = 16

    def __init__(self, name: str = "", components: Iterable[Component] = (), shading_sets: Iterable[bytes] = ()) -> None:
        super().__init__(name)
        self.components: Tuple[Component, ...] = tuple(components)
        self.shading_sets: Tuple[bytes, ...] = tuple(shading_sets)

    def _read_shading_sets(self, reader: MeshReader, pos: int, count: int) -> int:
        size = self.SHADING_SET_SIZE
        self.shading_sets = tuple(reader.raw(pos + i * size, size) for i in range(count))
        return pos + count * size

    def _read_lods(self, reader: MeshReader, start: int) -> Tuple[Lod, ...]:
        return read_component(reader, start, self.VERTEX_NORMALS, self.AUX_TYPE2_SIZE)

    def _encode(self) -> bytes:
        raise UnsupportedOperationError(f"{self.TYPE.value} meshes cannot be encoded")
