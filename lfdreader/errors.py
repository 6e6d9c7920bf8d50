from __future__ import annotations


class LfdError(Exception):
    """Base class for everything raised by lfdreader."""


class ResourceTypeError(LfdError, ValueError):
    """An embedded header names a different resource type than the decoder expects."""

    def __init__(self, expected: str, found: str) -> None:
        super().__init__(f"raw header is for a {found!r} resource, expected {expected!r}")
        self.expected = expected
        self.found = found


class MalformedDataError(LfdError, ValueError):
    """Truncated bodies, rows outside the image box, offsets outside the buffer."""


class ConstraintError(LfdError, ValueError):
    """A value cannot be written in the on-disk encoding."""

    def __init__(self, field: str, value: object, allowed: str) -> None:
        super().__init__(f"{field}={value!r} is not allowed ({allowed})")
        self.field = field
        self.value = value
        self.allowed = allowed


class UnsupportedOperationError(LfdError, NotImplementedError):
    pass


class LockedCollectionError(LfdError, RuntimeError):
    pass


class LoadFileError(LfdError, RuntimeError):
    def __init__(self, path: object, cause: BaseException) -> None:
        super().__init__(f"failed to load {path}: {cause}")
        self.path = path
        self.cause = cause


class SaveFileError(LfdError, RuntimeError):
    def __init__(self, path: object, cause: BaseException) -> None:
        super().__init__(f"failed to save {path}: {cause}")
        self.path = path
        self.cause = cause
