"""Typed error markers shared by traversal, normalization, and rendering.

Fallible operations return ``(value, error)`` pairs instead of raising; the
caller decides whether an error becomes an inline marker or a root failure.
"""

from __future__ import annotations

import errno
from dataclasses import dataclass
from enum import Enum


class TraversalErrorKind(Enum):
    NOT_FOUND = "not found"
    PERMISSION_DENIED = "permission denied"
    LOOP_DETECTED = "symlink loop"
    UNSUPPORTED_TYPE = "unsupported"


class MetadataErrorKind(Enum):
    NOT_FOUND = "not found"
    PERMISSION_DENIED = "permission denied"
    UNSUPPORTED = "unreadable metadata"
    UNRESOLVABLE_OWNER = "unknown owner"


class RenderErrorKind(Enum):
    INVALID_WIDTH = "invalid width"
    ENCODING = "encoding"


ErrorKind = TraversalErrorKind | MetadataErrorKind | RenderErrorKind


@dataclass(frozen=True)
class EntryError:
    """One captured failure tied to a path.

    ``message`` keeps the OS description when there is one so the CLI can echo
    it; ``label()`` is the fixed inline placeholder used by renderers.
    """

    kind: ErrorKind
    path: str
    message: str = ""

    def label(self) -> str:
        return f"<{self.kind.value}: {self.path}>"

    def describe(self) -> str:
        detail = self.message or self.kind.value
        return f"cannot access '{self.path}': {detail}"


MetadataError = EntryError
TraversalError = EntryError
RenderError = EntryError


@dataclass(frozen=True)
class RootError:
    """Failure affecting a whole requested root; surfaced to the caller."""

    path: str
    error: EntryError

    def describe(self) -> str:
        return self.error.describe()


def metadata_error_from_os(exc: OSError, path: str) -> EntryError:
    """Map an ``OSError`` from a stat-like call onto ``MetadataErrorKind``."""
    message = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return EntryError(MetadataErrorKind.NOT_FOUND, path, message)
    if isinstance(exc, PermissionError):
        return EntryError(MetadataErrorKind.PERMISSION_DENIED, path, message)
    return EntryError(MetadataErrorKind.UNSUPPORTED, path, message)


def traversal_error_from_os(exc: OSError, path: str) -> EntryError:
    """Map an ``OSError`` from a directory scan onto ``TraversalErrorKind``."""
    message = exc.strerror or str(exc)
    if isinstance(exc, FileNotFoundError):
        return EntryError(TraversalErrorKind.NOT_FOUND, path, message)
    if isinstance(exc, PermissionError):
        return EntryError(TraversalErrorKind.PERMISSION_DENIED, path, message)
    if exc.errno == errno.ELOOP:
        return EntryError(TraversalErrorKind.LOOP_DETECTED, path, message)
    return EntryError(TraversalErrorKind.UNSUPPORTED_TYPE, path, message)


__all__ = [
    "TraversalErrorKind",
    "MetadataErrorKind",
    "RenderErrorKind",
    "ErrorKind",
    "EntryError",
    "MetadataError",
    "TraversalError",
    "RenderError",
    "RootError",
    "metadata_error_from_os",
    "traversal_error_from_os",
]
