"""
The three mesh resources.

CRFT (little endian) and CPLX (big endian)::

    i16 length                  body length - 2
    u8  component count
    u8  shading set count
    u8  shading set[count][16]
    i16 component jump[component count]     measured from each jump field

SHIP (little endian)::

    i16 length
    u8  unknown[30]
    u8  component count
    u8  shading set count
    i16 unknown
    u8  shading set[count][6]
    settings[component count]   64 bytes each: i16 mesh type at 0x00,
                                i16 jump at 0x2C measured from the record start

CPLX and SHIP LODs carry per-vertex normals.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List

from .mesh import Component, MeshReader, MeshResource, MeshType
from .resource import ResourceType

SHIP_UNKNOWNS_SIZE = 30
SHIP_SETTINGS_SIZE = 0x40
SHIP_JUMP_OFFSET = 0x2C


class Crft(MeshResource):
    TYPE = ResourceType.CRFT

    def _decode(self, body: bytes, **context) -> None:
        reader = MeshReader(body, self.BYTE_ORDER)
        component_count, shading_count = reader.unpack("BB", 2)
        pos = self._read_shading_sets(reader, 4, shading_count)
        components: List[Component] = []
        for c in range(component_count):
            field = pos + c * 2
            components.append(Component(self._read_lods(reader, field + reader.i16(field))))
        self.components = tuple(components)

    def to_ship(self) -> "Ship":
        """Wireframe-only SHIP; unknowns, shading sets and normals are left empty."""
        components = [
            Component(
                tuple(replace(lod, vertex_normals=None) for lod in component.lods),
                mesh_type=MeshType.DEFAULT,
            )
            for component in self.components
        ]
        return Ship(self.name, components)


class Cplx(Crft):
    TYPE = ResourceType.CPLX
    BYTE_ORDER = ">"
    VERTEX_NORMALS = True


class Ship(MeshResource):
    TYPE = ResourceType.SHIP
    VERTEX_NORMALS = True
    SHADING_SET_SIZE = 6
    AUX_TYPE2_SIZE = 1

    def __init__(
        self,
        name: str = "",
        components: Iterable[Component] = (),
        shading_sets: Iterable[bytes] = (),
        unknowns: bytes = b"",
        unknown: int = 0,
    ) -> None:
        super().__init__(name, components, shading_sets)
        self.unknowns = bytes(unknowns)
        self.unknown = unknown

    def _decode(self, body: bytes, **context) -> None:
        reader = MeshReader(body, self.BYTE_ORDER)
        pos = 2
        self.unknowns = reader.raw(pos, SHIP_UNKNOWNS_SIZE)
        pos += SHIP_UNKNOWNS_SIZE
        component_count, shading_count, self.unknown = reader.unpack("BBh", pos)
        pos = self._read_shading_sets(reader, pos + 4, shading_count)
        components: List[Component] = []
        for c in range(component_count):
            record = pos + c * SHIP_SETTINGS_SIZE
            settings = reader.raw(record, SHIP_SETTINGS_SIZE)
            mesh_type = reader.i16(record)
            lods = self._read_lods(reader, record + reader.i16(record + SHIP_JUMP_OFFSET))
            components.append(Component(lods, mesh_type=mesh_type, settings=settings))
        self.components = tuple(components)
