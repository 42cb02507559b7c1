"""Convert raw ``os.stat_result`` values into portable ``EntryRecord`` objects."""

from __future__ import annotations

import os
import stat
import sys
from datetime import datetime, timezone

from ..errors import EntryError, metadata_error_from_os
from .types import EntryRecord, FileKind, LinkTarget, Owner, Permissions, Support, Timestamps

NANOS_PER_SECOND = 1_000_000_000
WINDOWS = sys.platform == "win32"


def kind_from_mode(mode: int) -> FileKind:
    """Return ``FileKind`` for an ``st_mode`` value."""
    if stat.S_ISDIR(mode):
        return FileKind.DIRECTORY
    if stat.S_ISREG(mode):
        return FileKind.REGULAR
    if stat.S_ISLNK(mode):
        return FileKind.SYMLINK
    if stat.S_ISFIFO(mode):
        return FileKind.FIFO
    if stat.S_ISSOCK(mode):
        return FileKind.SOCKET
    if stat.S_ISBLK(mode):
        return FileKind.BLOCK_DEVICE
    if stat.S_ISCHR(mode):
        return FileKind.CHAR_DEVICE
    return FileKind.UNKNOWN


def permissions_from_mode(mode: int, *, execute_supported: bool = not WINDOWS) -> Permissions:
    """Decode permission bits; execute bits default to ``False`` when unsupported."""
    execute = execute_supported
    return Permissions(
        user_read=bool(mode & stat.S_IRUSR),
        user_write=bool(mode & stat.S_IWUSR),
        user_execute=execute and bool(mode & stat.S_IXUSR),
        group_read=bool(mode & stat.S_IRGRP),
        group_write=bool(mode & stat.S_IWGRP),
        group_execute=execute and bool(mode & stat.S_IXGRP),
        other_read=bool(mode & stat.S_IROTH),
        other_write=bool(mode & stat.S_IWOTH),
        other_execute=execute and bool(mode & stat.S_IXOTH),
        setuid=bool(mode & stat.S_ISUID),
        setgid=bool(mode & stat.S_ISGID),
        sticky=bool(mode & stat.S_ISVTX),
        execute_support=Support.SUPPORTED if execute else Support.UNSUPPORTED,
    )


def _from_nanos(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / NANOS_PER_SECOND, tz=timezone.utc)


def timestamps_from_stat(st: os.stat_result) -> Timestamps:
    """Normalize stat times to aware UTC datetimes."""
    birth = getattr(st, "st_birthtime", None)
    return Timestamps(
        modified=_from_nanos(getattr(st, "st_mtime_ns", None)),
        accessed=_from_nanos(getattr(st, "st_atime_ns", None)),
        created=datetime.fromtimestamp(birth, tz=timezone.utc) if birth is not None else None,
    )


def normalize_stat(
    path: str,
    st: os.stat_result,
    *,
    name: str | None = None,
    depth: int = 0,
    parent: str | None = None,
    link: LinkTarget | None = None,
) -> EntryRecord:
    """Build an ``EntryRecord`` from a stat result.

    Directory sizes are reported as 0; aggregation is a separate opt-in pass.
    """
    kind = kind_from_mode(st.st_mode)
    size = int(st.st_size) if kind is not FileKind.DIRECTORY else 0
    uid = getattr(st, "st_uid", None)
    gid = getattr(st, "st_gid", None)
    owner_support = Support.UNSUPPORTED if WINDOWS or uid is None else Support.SUPPORTED
    return EntryRecord(
        path=path,
        name=name if name is not None else display_name(path),
        kind=kind,
        size=max(0, size),
        timestamps=timestamps_from_stat(st),
        permissions=permissions_from_mode(st.st_mode),
        owner=Owner(uid=int(uid or 0), gid=int(gid or 0), support=owner_support),
        link=link if kind is FileKind.SYMLINK else None,
        depth=depth,
        parent=parent,
        inode=(int(st.st_dev), int(st.st_ino)),
    )


def display_name(path: str) -> str:
    """Return the final component of ``path``, or ``path`` itself for roots."""
    stripped = path.rstrip("/\\")
    name = os.path.basename(stripped)
    return name or path


def stat_path(path: str, follow_symlinks: bool = False) -> tuple[os.stat_result | None, EntryError | None]:
    """Return ``(stat_result, error)`` for ``path``."""
    try:
        return os.stat(path, follow_symlinks=follow_symlinks), None
    except OSError as exc:
        return None, metadata_error_from_os(exc, path)


def resolve_link_target(path: str) -> LinkTarget:
    """Read a symlink and resolve its destination record or broken marker."""
    try:
        target_text = os.readlink(path)
    except OSError:
        return LinkTarget(path="?", entry=None, broken=True)

    target_stat, error = stat_path(path, follow_symlinks=True)
    if target_stat is None or error is not None:
        return LinkTarget(path=target_text, entry=None, broken=True)

    absolute = os.path.join(os.path.dirname(path), target_text)
    target = normalize_stat(absolute, target_stat, name=display_name(target_text))
    return LinkTarget(path=target_text, entry=target, broken=False)


def build_record(
    path: str,
    *,
    name: str | None = None,
    depth: int = 0,
    parent: str | None = None,
    follow_symlinks: bool = False,
) -> tuple[EntryRecord | None, EntryError | None]:
    """Stat ``path`` and return ``(record, error)``.

    With ``follow_symlinks`` the target's metadata is reported; a dangling link
    falls back to the link itself so it still renders as broken.
    """
    st, error = stat_path(path, follow_symlinks=False)
    if st is None:
        return None, error

    if stat.S_ISLNK(st.st_mode):
        if follow_symlinks:
            followed, _follow_error = stat_path(path, follow_symlinks=True)
            if followed is not None:
                return normalize_stat(path, followed, name=name, depth=depth, parent=parent), None
        link = resolve_link_target(path)
        return normalize_stat(path, st, name=name, depth=depth, parent=parent, link=link), None

    return normalize_stat(path, st, name=name, depth=depth, parent=parent), None


__all__ = [
    "kind_from_mode",
    "permissions_from_mode",
    "timestamps_from_stat",
    "normalize_stat",
    "display_name",
    "stat_path",
    "resolve_link_target",
    "build_record",
]
