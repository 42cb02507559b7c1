"""Hidden-file, glob, and version-control filters for entry records."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from fnmatch import fnmatchcase

from ..entry_model import EntryRecord

VCS_DIRECTORY_NAMES = frozenset({".git", ".hg", ".svn", ".bzr", "_darcs", "CVS"})


@dataclass(frozen=True)
class FilterSet:
    """Which non-root entries to leave out of a listing."""

    show_hidden: bool = False
    ignore_globs: tuple[str, ...] = ()
    ignore_vcs: bool = False

    def rejects(self, entry: EntryRecord) -> bool:
        """Return whether ``entry`` is excluded; roots and error markers never are."""
        if entry.depth == 0 or entry.is_marker:
            return False
        if not self.show_hidden and entry.is_hidden:
            return True
        if self.ignore_vcs and entry.name in VCS_DIRECTORY_NAMES:
            return True
        return any(fnmatchcase(entry.name, pattern) for pattern in self.ignore_globs)


def filter_entries(entries: Iterable[EntryRecord], filters: FilterSet) -> list[EntryRecord]:
    """Drop rejected entries together with everything listed below them.

    ``entries`` must be in traversal pre-order so parents precede children.
    """
    dropped: set[str] = set()
    kept: list[EntryRecord] = []
    for entry in entries:
        if entry.parent is not None and entry.parent in dropped:
            dropped.add(entry.path)
            continue
        if filters.rejects(entry):
            dropped.add(entry.path)
            continue
        kept.append(entry)
    return kept


__all__ = ["FilterSet", "VCS_DIRECTORY_NAMES", "filter_entries"]
