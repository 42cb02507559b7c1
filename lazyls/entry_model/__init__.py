"""Domain model for normalized filesystem entries plus traversal.

This package contains non-rendering primitives:
- entry/permission/timestamp datatypes with explicit support tags
- stat normalization and symlink resolution
- memoized owner/group name lookup
- lazy multi-root traversal with inline error markers
"""

from __future__ import annotations

from .types import EntryRecord, FileKind, LinkTarget, Owner, Permissions, Support, Timestamps, error_marker
from .normalize import build_record, kind_from_mode, normalize_stat, permissions_from_mode, stat_path
from .owner import clear_owner_cache, group_name_for_gid, user_name_for_uid
from .traversal import ErrorLog, TraversalChain, TraversalOptions, aggregate_size, iter_root, resolve_root, walk_roots

__all__ = [
    "EntryRecord",
    "FileKind",
    "LinkTarget",
    "Owner",
    "Permissions",
    "Support",
    "Timestamps",
    "error_marker",
    "build_record",
    "kind_from_mode",
    "normalize_stat",
    "permissions_from_mode",
    "stat_path",
    "clear_owner_cache",
    "group_name_for_gid",
    "user_name_for_uid",
    "ErrorLog",
    "TraversalChain",
    "TraversalOptions",
    "aggregate_size",
    "iter_root",
    "resolve_root",
    "walk_roots",
]
