"""
LFD containers.

Three layouts exist on disk:

* mapped: an RMAP listing every sibling, then the siblings in map order;
* cockpit: PANL, MASK, PLTT back to back with no map;
* bare: a single resource with no map.
"""

from __future__ import annotations

import shutil
from collections.abc import MutableSequence
from enum import Enum
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

from .delt import Delt
from .errors import LfdError, LoadFileError, LockedCollectionError, SaveFileError
from .logging import DecodeTraceLogger
from .mask import Mask
from .palette import PaletteEntries, Pltt, compose_palettes
from .panl import Panl
from .registry import decode_resource
from .resource import HEADER_LENGTH, Header, Resource, ResourceType
from .rmap import DEFAULT_MAP_NAME, ResourceMap
from .text import Text

BACKUP_SUFFIX = ".tmp"
BATTLE_TEXT = "battle#"
BATTLE_DELT = "b#gal"
COCKPIT_RMAP_MESSAGE = "Cockpit LFDs do not contain RMAPs"


class LfdCategory(Enum):
    NORMAL = "normal"
    COCKPIT = "cockpit"
    BATTLE = "battle"


class ResourceList(MutableSequence):
    """
    Ordered resources of one container.

    A locked list (cockpit and battle files) keeps its structure: nothing can
    be inserted or removed, and a slot can only be replaced by a resource of
    the same type and name.
    """

    def __init__(self, resources: Iterable[Resource] = (), locked: bool = False) -> None:
        self._items: List[Resource] = list(resources)
        self.locked = locked

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __setitem__(self, index, resource) -> None:
        if self.locked:
            if isinstance(index, slice):
                raise LockedCollectionError("collection structure is locked (slice assignment)")
            current = self._items[index]
            if current.tag != resource.tag or current.name != resource.name:
                raise LockedCollectionError(
                    f"collection structure is locked: slot {index} holds {current.tag}:{current.name}"
                )
        self._items[index] = resource

    def __delitem__(self, index) -> None:
        if self.locked:
            raise LockedCollectionError("collection structure is locked (delete)")
        del self._items[index]

    def insert(self, index: int, resource: Resource) -> None:
        if self.locked:
            raise LockedCollectionError("collection structure is locked (insert)")
        self._items.insert(index, resource)

    def find(self, rtype: ResourceType | str, name: str) -> Optional[Resource]:
        tag = rtype.value if isinstance(rtype, ResourceType) else rtype
        for resource in self._items:
            if resource.tag == tag and resource.name == name:
                return resource
        return None

    def of_type(self, rtype: ResourceType) -> List[Resource]:
        return [resource for resource in self._items if resource.type is rtype]

    def __repr__(self) -> str:
        return f"ResourceList({self._items!r}, locked={self.locked})"


class LfdFile:
    def __init__(self, category: LfdCategory = LfdCategory.NORMAL, path: str | Path | None = None) -> None:
        self.path = Path(path) if path is not None else None
        self._category = category
        self._rmap: ResourceMap | None = None
        if category is LfdCategory.BATTLE:
            self.resources = ResourceList([Text(BATTLE_TEXT), Delt(BATTLE_DELT)], locked=True)
            self._rmap = ResourceMap()
        elif category is LfdCategory.COCKPIT:
            self.resources = ResourceList([Panl(), Mask(), Pltt()], locked=True)
        else:
            self.resources = ResourceList()

    @classmethod
    def load(cls, path: str | Path, trace: DecodeTraceLogger | None = None) -> "LfdFile":
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            raise LoadFileError(path, exc) from exc
        return cls.from_bytes(data, path=path, trace=trace)

    @classmethod
    def from_bytes(
        cls,
        data: bytes,
        path: str | Path | None = None,
        trace: DecodeTraceLogger | None = None,
    ) -> "LfdFile":
        lfd = cls(path=path)
        try:
            lfd._read(data, trace)
        except (LfdError, ValueError) as exc:
            raise LoadFileError(path if path is not None else "<bytes>", exc) from exc
        return lfd

    def _decode(self, data: bytes, offset: int, trace, expected: str | None = None, **context) -> Resource:
        resource = decode_resource(data, offset, expected, **context)
        if trace is not None:
            trace.record(
                offset=offset,
                tag=resource.tag,
                name=resource.name,
                length=len(resource.raw),
                decoder=type(resource).__name__,
            )
        return resource

    def _read(self, data: bytes, trace) -> None:
        first = Header.unpack(data, 0)
        if first.type is ResourceType.RMAP:
            rmap = self._decode(data, 0, trace)
            self.resources = ResourceList(
                self._decode(data, entry.position, trace, expected=entry.tag) for entry in rmap.entries
            )
            self._rmap = rmap
            names = [resource.name for resource in self.resources]
            if len(names) == 2 and names[0].startswith("battle") and names[1].endswith("gal"):
                self._category = LfdCategory.BATTLE
                self.resources.locked = True
        elif first.type is ResourceType.PANL:
            panl = self._decode(data, 0, trace, expected="PANL")
            width, height = panl.size
            mask_offset = HEADER_LENGTH + first.length
            mask = self._decode(data, mask_offset, trace, expected="MASK", width=width, height=height)
            pltt_offset = mask_offset + HEADER_LENGTH + len(mask.raw)
            pltt = self._decode(data, pltt_offset, trace, expected="PLTT")
            self.resources = ResourceList([panl, mask, pltt], locked=True)
            self._category = LfdCategory.COCKPIT
        else:
            self.resources = ResourceList([self._decode(data, 0, trace)])

    @property
    def category(self) -> LfdCategory:
        return self._category

    @property
    def rmap(self) -> ResourceMap | None:
        return self._rmap

    @rmap.setter
    def rmap(self, value: ResourceMap | None) -> None:
        if self._category is LfdCategory.COCKPIT:
            raise LockedCollectionError(COCKPIT_RMAP_MESSAGE)
        self._rmap = value

    @property
    def has_rmap(self) -> bool:
        return self._rmap is not None

    def __len__(self) -> int:
        return len(self.resources)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.resources)

    def _encode_resources(self) -> None:
        for resource in self.resources:
            resource.encode()

    def create_rmap(self) -> ResourceMap:
        """Rebuild the map from the final encoded bodies, keeping its name."""
        if self._category is LfdCategory.COCKPIT:
            raise LockedCollectionError(COCKPIT_RMAP_MESSAGE)
        name = self._rmap.name if self._rmap is not None else DEFAULT_MAP_NAME
        self._encode_resources()
        self._rmap = ResourceMap.from_resources(self.resources, name)
        self._rmap.encode()
        return self._rmap

    def to_bytes(self) -> bytes:
        if self._rmap is not None:
            self.create_rmap()
        else:
            self._encode_resources()
        chunks = [self._rmap.to_bytes()] if self._rmap is not None else []
        chunks.extend(resource.to_bytes() for resource in self.resources)
        return b"".join(chunks)

    def write(self, path: str | Path | None = None) -> Path:
        """
        Save to ``path`` (default: where the file was loaded from).

        An existing target is copied to ``<path>.tmp`` first and put back if
        anything fails; a target this call created is removed instead.  The
        failure is raised as SaveFileError.
        """

        target = Path(path) if path is not None else self.path
        if target is None:
            raise ValueError("no path given and the file was not loaded from disk")
        backup = target.with_name(target.name + BACKUP_SUFFIX)
        backed_up = False
        created = False
        try:
            blob = self.to_bytes()
            if target.exists():
                shutil.copyfile(target, backup)
                backed_up = True
            else:
                created = True
            target.write_bytes(blob)
        except Exception as exc:
            if backed_up:
                shutil.copyfile(backup, target)
                backup.unlink()
            elif created:
                target.unlink(missing_ok=True)
            raise SaveFileError(target, exc) from exc
        if backed_up:
            backup.unlink()
        self.path = target
        return target

    def palette(self) -> PaletteEntries:
        """Every PLTT in the file layered in order."""
        return compose_palettes(resource for resource in self.resources if isinstance(resource, Pltt))
