"""Deterministic ordering of entry records.

Sorting is layered stable passes: name ascending first, then the primary key,
then directory grouping. Equal primary keys therefore always fall back to
name ascending, regardless of the requested order.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum

from ..entry_model import EntryRecord, FileKind


class SortKey(Enum):
    NAME = "name"
    SIZE = "size"
    TIME = "time"
    EXTENSION = "extension"
    KIND = "kind"


class SortOrder(Enum):
    ASCENDING = "ascending"
    DESCENDING = "descending"


class DirGrouping(Enum):
    NONE = "none"
    FIRST = "first"
    LAST = "last"


_KIND_RANK = {
    FileKind.DIRECTORY: 0,
    FileKind.SYMLINK: 1,
    FileKind.REGULAR: 2,
    FileKind.FIFO: 3,
    FileKind.SOCKET: 4,
    FileKind.BLOCK_DEVICE: 5,
    FileKind.CHAR_DEVICE: 6,
    FileKind.UNKNOWN: 7,
}


def _name_key(entry: EntryRecord) -> str:
    return entry.name


def _size_key(entry: EntryRecord) -> int:
    return entry.size


def _time_key(entry: EntryRecord) -> float:
    modified = entry.timestamps.modified
    return modified.timestamp() if modified is not None else float("-inf")


def _extension_key(entry: EntryRecord) -> str:
    return entry.extension


def _kind_key(entry: EntryRecord) -> int:
    return _KIND_RANK[entry.kind]


_PRIMARY_KEYS: dict[SortKey, Callable[[EntryRecord], object]] = {
    SortKey.NAME: _name_key,
    SortKey.SIZE: _size_key,
    SortKey.TIME: _time_key,
    SortKey.EXTENSION: _extension_key,
    SortKey.KIND: _kind_key,
}


def sort_entries(
    entries: Iterable[EntryRecord],
    key: SortKey = SortKey.NAME,
    order: SortOrder = SortOrder.ASCENDING,
    dir_grouping: DirGrouping = DirGrouping.NONE,
) -> list[EntryRecord]:
    """Return ``entries`` ordered by ``key`` with name-ascending tie breaks."""
    ordered = sorted(entries, key=_name_key)
    descending = order is SortOrder.DESCENDING
    if key is not SortKey.NAME or descending:
        ordered.sort(key=_PRIMARY_KEYS[key], reverse=descending)

    if dir_grouping is DirGrouping.FIRST:
        ordered.sort(key=lambda entry: not entry.points_to_dir)
    elif dir_grouping is DirGrouping.LAST:
        ordered.sort(key=lambda entry: entry.points_to_dir)
    return ordered


__all__ = ["SortKey", "SortOrder", "DirGrouping", "sort_entries"]
