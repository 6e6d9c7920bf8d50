from __future__ import annotations

from .resource import Resource, ResourceType


class Xact(Resource):
    """XACT: an embedded ACT image; the bytes are handed through untouched."""

    TYPE = ResourceType.XACT

    def __init__(self, name: str = "", act: bytes = b"") -> None:
        super().__init__(name)
        self._raw = bytes(act)

    @property
    def act(self) -> bytes:
        return self._raw

    @act.setter
    def act(self, value: bytes) -> None:
        self._raw = bytes(value)
        self.modified = True
