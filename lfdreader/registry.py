"""Tag-to-codec dispatch used when loading containers."""

from __future__ import annotations

import logging
from typing import Dict, Type

from .anim import Anim
from .binary import read_bytes
from .blas import Blas, Voic
from .craft import Cplx, Crft, Ship
from .delt import Delt
from .film import Film
from .font import Font
from .mask import Mask
from .mtrx import Mtrx
from .palette import Pltt
from .panl import Panl
from .resource import HEADER_LENGTH, Header, OpaqueResource, Resource, ResourceType
from .rmap import ResourceMap
from .text import Text
from .xact import Xact

logger = logging.getLogger(__name__)

RESOURCE_CLASSES: Dict[ResourceType, Type[Resource]] = {
    ResourceType.ANIM: Anim,
    ResourceType.BLAS: Blas,
    ResourceType.CPLX: Cplx,
    ResourceType.CRFT: Crft,
    ResourceType.DELT: Delt,
    ResourceType.FILM: Film,
    ResourceType.FONT: Font,
    ResourceType.MASK: Mask,
    ResourceType.MTRX: Mtrx,
    ResourceType.PANL: Panl,
    ResourceType.PLTT: Pltt,
    ResourceType.RMAP: ResourceMap,
    ResourceType.SHIP: Ship,
    ResourceType.TEXT: Text,
    ResourceType.VOIC: Voic,
    ResourceType.XACT: Xact,
}


def resource_class(tag: str) -> Type[Resource]:
    return RESOURCE_CLASSES.get(ResourceType.from_tag(tag), OpaqueResource)


def decode_resource(data: bytes, offset: int = 0, expected: str | None = None, **context) -> Resource:
    """
    Decode the resource whose header starts at ``offset``.

    ``expected`` picks the codec from a tag declared elsewhere (a map entry);
    the codec then rejects a body whose own header disagrees.
    """

    header = Header.unpack(data, offset)
    cls = resource_class(header.tag if expected is None else expected)
    if cls is OpaqueResource:
        logger.debug("%s %r at 0x%X kept as raw bytes", header.tag, header.name, offset)
    raw = read_bytes(data, offset, HEADER_LENGTH + header.length)
    return cls.from_bytes(raw, contains_header=True, **context)
