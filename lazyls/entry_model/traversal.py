"""Lazy, error-tolerant traversal of one or more listing roots.

Each root yields its own record first (depth 0) and then descendants in
pre-order. Unreadable subtrees become a single inline marker record and the
walk carries on with their siblings. Symlink loops are detected through a
visited set scoped to the current traversal chain.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace

from ..errors import EntryError, RootError, TraversalErrorKind, traversal_error_from_os
from .normalize import build_record
from .types import EntryRecord, error_marker

logger = logging.getLogger(__name__)

ROOT_WORKERS_MAX = 8


@dataclass(frozen=True)
class TraversalOptions:
    """Walk configuration: recursion, depth bound, symlink policy, size totals.

    ``directory_only`` lists directory roots as entries without reading them.
    """

    recursive: bool = False
    max_depth: int | None = None
    follow_symlinks: bool = False
    total_size: bool = False
    directory_only: bool = False

    def descends_into(self, depth: int) -> bool:
        """Return whether a directory found at ``depth`` gets its children listed."""
        if self.directory_only:
            return False
        if depth == 0:
            return True
        if not self.recursive:
            return False
        return self.max_depth is None or depth < self.max_depth


class ErrorLog:
    """Append-only, thread-safe record of everything a run failed to read."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entry_errors: list[EntryError] = []
        self._root_errors: list[RootError] = []

    def add(self, error: EntryError) -> None:
        with self._lock:
            self._entry_errors.append(error)
        logger.debug("listing error: %s", error.describe())

    def add_root(self, error: RootError) -> None:
        with self._lock:
            self._root_errors.append(error)
        logger.debug("root error: %s", error.describe())

    @property
    def entry_errors(self) -> tuple[EntryError, ...]:
        with self._lock:
            return tuple(self._entry_errors)

    @property
    def root_errors(self) -> tuple[RootError, ...]:
        with self._lock:
            return tuple(self._root_errors)


class TraversalChain:
    """Directory identities on the path from the root to the current entry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._visited: set[tuple[int, int]] = set()

    def enter(self, inode: tuple[int, int] | None) -> bool:
        """Push ``inode``; return ``False`` when it is already on the chain."""
        if inode is None:
            return True
        with self._lock:
            if inode in self._visited:
                return False
            self._visited.add(inode)
            return True

    def leave(self, inode: tuple[int, int] | None) -> None:
        if inode is None:
            return
        with self._lock:
            self._visited.discard(inode)


def scan_directory(path: str) -> tuple[list[str], EntryError | None]:
    """Return sorted child names of ``path`` or a traversal error."""
    try:
        with os.scandir(path) as entries:
            names = [entry.name for entry in entries]
    except OSError as exc:
        return [], traversal_error_from_os(exc, path)
    names.sort()
    return names, None


def aggregate_size(path: str, error_log: ErrorLog | None = None) -> int:
    """Sum sizes of regular files below ``path`` without following symlinks."""
    total = 0
    pending = [path]
    while pending:
        current = pending.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            pending.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            total += int(entry.stat(follow_symlinks=False).st_size)
                    except OSError as exc:
                        if error_log is not None:
                            error_log.add(traversal_error_from_os(exc, entry.path))
        except OSError as exc:
            if error_log is not None:
                error_log.add(traversal_error_from_os(exc, current))
    return total


def resolve_root(root: str, options: TraversalOptions) -> tuple[EntryRecord | None, RootError | None]:
    """Stat a requested root; symlinks to directories are listed through."""
    record, error = build_record(root, name=root, follow_symlinks=options.follow_symlinks)
    if record is None:
        assert error is not None
        return None, RootError(path=root, error=error)
    if record.is_symlink and record.points_to_dir and not options.directory_only:
        followed, _error = build_record(root, name=root, follow_symlinks=True)
        if followed is not None:
            record = followed
    if options.total_size and record.is_dir:
        record = replace(record, size=aggregate_size(root))
    return record, None


class _Walker:
    def __init__(
        self,
        options: TraversalOptions,
        error_log: ErrorLog,
        prune: Callable[[EntryRecord], bool] | None = None,
    ) -> None:
        self.options = options
        self.error_log = error_log
        self.prune = prune
        self.chain = TraversalChain()

    def marker(self, error: EntryError, *, name: str, depth: int, parent: str | None) -> EntryRecord:
        self.error_log.add(error)
        return error_marker(error, name=name, depth=depth, parent=parent)

    def descend(self, directory: EntryRecord) -> Iterator[EntryRecord]:
        """Yield the children of ``directory`` unless it closes a loop."""
        if not self.chain.enter(directory.inode):
            loop = EntryError(TraversalErrorKind.LOOP_DETECTED, directory.path)
            yield self.marker(loop, name=directory.name, depth=directory.depth + 1, parent=directory.path)
            return
        try:
            yield from self.children(directory)
        finally:
            self.chain.leave(directory.inode)

    def children(self, directory: EntryRecord) -> Iterator[EntryRecord]:
        depth = directory.depth + 1
        names, scan_error = scan_directory(directory.path)
        if scan_error is not None:
            yield self.marker(scan_error, name=directory.name, depth=depth, parent=directory.path)
            return

        for name in names:
            child_path = os.path.join(directory.path, name)
            record, error = build_record(
                child_path,
                name=name,
                depth=depth,
                parent=directory.path,
                follow_symlinks=self.options.follow_symlinks,
            )
            if record is None:
                assert error is not None
                yield self.marker(error, name=name, depth=depth, parent=directory.path)
                continue
            if self.prune is not None and self.prune(record):
                continue
            if record.is_dir and self.options.total_size:
                record = replace(record, size=aggregate_size(child_path, self.error_log))
            yield record
            if record.is_dir and self.options.descends_into(depth):
                yield from self.descend(record)


def iter_root(
    root: str,
    options: TraversalOptions,
    error_log: ErrorLog | None = None,
    prune: Callable[[EntryRecord], bool] | None = None,
) -> Iterator[EntryRecord]:
    """Yield the root record and, for directories, its descendants in pre-order.

    A root that does not exist yields nothing; its failure lands in
    ``error_log.root_errors``. Children for which ``prune`` returns true are
    neither yielded nor descended into. The iterator is single-use: re-iterating
    means walking the filesystem again with a new call.
    """
    log = error_log if error_log is not None else ErrorLog()
    record, root_error = resolve_root(root, options)
    if record is None:
        assert root_error is not None
        log.add_root(root_error)
        return
    yield record
    if record.is_dir and options.descends_into(0):
        walker = _Walker(options, log, prune)
        yield from walker.descend(record)


def walk_roots(
    roots: list[str],
    options: TraversalOptions,
    error_log: ErrorLog | None = None,
    prune: Callable[[EntryRecord], bool] | None = None,
) -> list[list[EntryRecord]]:
    """Walk several roots, in parallel when there is more than one.

    Output keeps argument order regardless of completion order.
    """
    log = error_log if error_log is not None else ErrorLog()
    if not roots:
        return []
    if len(roots) == 1:
        return [list(iter_root(roots[0], options, log, prune))]

    max_workers = min(ROOT_WORKERS_MAX, len(roots))
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="lazyls-walk") as executor:
        futures = [executor.submit(lambda root: list(iter_root(root, options, log, prune)), root) for root in roots]
        return [future.result() for future in futures]


__all__ = [
    "TraversalOptions",
    "ErrorLog",
    "TraversalChain",
    "scan_directory",
    "aggregate_size",
    "resolve_root",
    "iter_root",
    "walk_roots",
]
