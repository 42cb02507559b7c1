"""Domain datatypes for normalized filesystem entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from ..errors import EntryError
from .owner import group_name_for_gid, user_name_for_uid


class FileKind(Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    FIFO = "fifo"
    SOCKET = "socket"
    BLOCK_DEVICE = "block_device"
    CHAR_DEVICE = "char_device"
    UNKNOWN = "unknown"

    @property
    def type_char(self) -> str:
        """Leading character of the long-format permission column."""
        return _TYPE_CHARS[self]


_TYPE_CHARS = {
    FileKind.REGULAR: ".",
    FileKind.DIRECTORY: "d",
    FileKind.SYMLINK: "l",
    FileKind.FIFO: "|",
    FileKind.SOCKET: "s",
    FileKind.BLOCK_DEVICE: "b",
    FileKind.CHAR_DEVICE: "c",
    FileKind.UNKNOWN: "?",
}


class Support(Enum):
    """Whether the platform reports a metadata field at all."""

    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class Permissions:
    """Owner/group/other rwx bits plus setuid, setgid, and sticky."""

    user_read: bool = False
    user_write: bool = False
    user_execute: bool = False
    group_read: bool = False
    group_write: bool = False
    group_execute: bool = False
    other_read: bool = False
    other_write: bool = False
    other_execute: bool = False
    setuid: bool = False
    setgid: bool = False
    sticky: bool = False
    execute_support: Support = Support.SUPPORTED

    @property
    def is_executable(self) -> bool:
        if self.execute_support is Support.UNSUPPORTED:
            return False
        return self.user_execute or self.group_execute or self.other_execute

    def triplets(self) -> tuple[tuple[bool, bool, bool, bool], ...]:
        """Return ``(read, write, execute, special)`` for user, group, other."""
        return (
            (self.user_read, self.user_write, self.user_execute, self.setuid),
            (self.group_read, self.group_write, self.group_execute, self.setgid),
            (self.other_read, self.other_write, self.other_execute, self.sticky),
        )


@dataclass(frozen=True)
class Timestamps:
    """Aware UTC timestamps; ``None`` where the platform does not report one."""

    modified: datetime | None = None
    accessed: datetime | None = None
    created: datetime | None = None


@dataclass(frozen=True)
class Owner:
    """Numeric ownership; names resolve lazily through a memoized lookup."""

    uid: int = 0
    gid: int = 0
    support: Support = Support.SUPPORTED

    def user_lookup(self) -> tuple[str, EntryError | None]:
        """Return ``(name, error)``; unknown ids come back as digits plus an error."""
        if self.support is Support.UNSUPPORTED:
            return "-", None
        return user_name_for_uid(self.uid)

    def group_lookup(self) -> tuple[str, EntryError | None]:
        if self.support is Support.UNSUPPORTED:
            return "-", None
        return group_name_for_gid(self.gid)

    @property
    def user_name(self) -> str:
        return self.user_lookup()[0]

    @property
    def group_name(self) -> str:
        return self.group_lookup()[0]


@dataclass(frozen=True)
class LinkTarget:
    """Symlink destination text plus the resolved target record.

    ``entry`` is ``None`` exactly when the link is broken, and ``broken`` says so
    explicitly.
    """

    path: str
    entry: EntryRecord | None = None
    broken: bool = False


@dataclass(frozen=True)
class EntryRecord:
    """One filesystem object as seen by the listing pipeline.

    Records with ``error`` set are inline markers for entries or subtrees that
    could not be read; they carry ``FileKind.UNKNOWN`` unless the kind was known.
    """

    path: str
    name: str
    kind: FileKind
    size: int = 0
    timestamps: Timestamps = field(default_factory=Timestamps)
    permissions: Permissions = field(default_factory=Permissions)
    owner: Owner = field(default_factory=Owner)
    link: LinkTarget | None = None
    depth: int = 0
    parent: str | None = None
    error: EntryError | None = None
    inode: tuple[int, int] | None = None

    @property
    def is_dir(self) -> bool:
        return self.kind is FileKind.DIRECTORY

    @property
    def is_symlink(self) -> bool:
        return self.kind is FileKind.SYMLINK

    @property
    def is_broken_link(self) -> bool:
        return self.link is not None and self.link.broken

    @property
    def is_marker(self) -> bool:
        return self.error is not None

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".") and self.name not in {".", ".."}

    @property
    def points_to_dir(self) -> bool:
        """Return whether this is a directory or a symlink to one."""
        if self.is_dir:
            return True
        return bool(self.link and self.link.entry and self.link.entry.is_dir)

    @property
    def extension(self) -> str:
        """Lower-cased text after the last dot; empty for dotfiles without one."""
        stem = self.name.lstrip(".")
        if "." not in stem:
            return ""
        return stem.rsplit(".", 1)[1].lower()


def error_marker(
    error: EntryError,
    *,
    name: str,
    depth: int,
    parent: str | None,
    kind: FileKind = FileKind.UNKNOWN,
) -> EntryRecord:
    """Build an inline marker record for an unreadable entry or subtree."""
    return EntryRecord(
        path=error.path,
        name=name,
        kind=kind,
        depth=depth,
        parent=parent,
        error=error,
    )


__all__ = [
    "FileKind",
    "Support",
    "Permissions",
    "Timestamps",
    "Owner",
    "LinkTarget",
    "EntryRecord",
    "error_marker",
]
