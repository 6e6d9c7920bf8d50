"""
Readers and writers for LFD resource containers and the codecs they carry.
"""

from .errors import (
    ConstraintError,
    LfdError,
    LoadFileError,
    LockedCollectionError,
    MalformedDataError,
    ResourceTypeError,
    SaveFileError,
    UnsupportedOperationError,
)
from .resource import HEADER_LENGTH, NAME_LENGTH, Header, OpaqueResource, Resource, ResourceType
from .rmap import DEFAULT_MAP_NAME, MapEntry, ResourceMap, derive_offsets
from .logging import DecodeTraceLogger, log_resource_map
from .palette import PALETTE_SIZE, Pltt, Rotator, compose_palettes
from .bitmap import quantize, to_image
from .anim import Anim, Frame
from .blas import Blas, SoundBlock, Voic
from .craft import Cplx, Crft, Ship
from .delt import MAX_HEIGHT, MAX_WIDTH, Delt
from .film import Chunk, ChunkCode, Film, FilmBlock
from .font import Font
from .mask import Mask
from .mesh import AuxRecord, Component, Line, Lod, MeshType, Shape, Vector, Vertex
from .mtrx import Mtrx
from .panl import Panl
from .text import Text
from .xact import Xact
from .registry import RESOURCE_CLASSES, decode_resource, resource_class
from .lfd import BACKUP_SUFFIX, LfdCategory, LfdFile, ResourceList

__all__ = [
    "LfdError",
    "ResourceTypeError",
    "MalformedDataError",
    "ConstraintError",
    "UnsupportedOperationError",
    "LockedCollectionError",
    "LoadFileError",
    "SaveFileError",
    "HEADER_LENGTH",
    "NAME_LENGTH",
    "Header",
    "Resource",
    "ResourceType",
    "OpaqueResource",
    "DEFAULT_MAP_NAME",
    "MapEntry",
    "ResourceMap",
    "derive_offsets",
    "DecodeTraceLogger",
    "log_resource_map",
    "PALETTE_SIZE",
    "Pltt",
    "Rotator",
    "compose_palettes",
    "quantize",
    "to_image",
    "Anim",
    "Frame",
    "Blas",
    "Voic",
    "SoundBlock",
    "Crft",
    "Cplx",
    "Ship",
    "MAX_WIDTH",
    "MAX_HEIGHT",
    "Delt",
    "Film",
    "FilmBlock",
    "Chunk",
    "ChunkCode",
    "Font",
    "Mask",
    "MeshType",
    "Vertex",
    "Vector",
    "Line",
    "Shape",
    "AuxRecord",
    "Lod",
    "Component",
    "Mtrx",
    "Panl",
    "Text",
    "Xact",
    "RESOURCE_CLASSES",
    "resource_class",
    "decode_resource",
    "BACKUP_SUFFIX",
    "LfdCategory",
    "LfdFile",
    "ResourceList",
]
