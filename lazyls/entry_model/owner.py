"""Memoized uid/gid to name resolution.

Lookups are cached process-wide for one invocation and keyed by numeric id.
Unknown ids fall back to the decimal id plus an ``UNRESOLVABLE_OWNER`` error.
"""

from __future__ import annotations

import sys
from functools import lru_cache

from ..errors import EntryError, MetadataErrorKind

if sys.platform != "win32":
    import grp
    import pwd
else:  # pragma: no cover - exercised on Windows only
    grp = None
    pwd = None

OWNER_CACHE_MAX = 1_024


@lru_cache(maxsize=OWNER_CACHE_MAX)
def user_name_for_uid(uid: int) -> tuple[str, EntryError | None]:
    """Return ``(name, error)`` for ``uid``; the name is the id when unknown."""
    if pwd is None:
        return str(uid), None
    try:
        return pwd.getpwuid(uid).pw_name, None
    except KeyError:
        return str(uid), EntryError(MetadataErrorKind.UNRESOLVABLE_OWNER, f"uid {uid}")


@lru_cache(maxsize=OWNER_CACHE_MAX)
def group_name_for_gid(gid: int) -> tuple[str, EntryError | None]:
    """Return ``(name, error)`` for ``gid``; the name is the id when unknown."""
    if grp is None:
        return str(gid), None
    try:
        return grp.getgrgid(gid).gr_name, None
    except KeyError:
        return str(gid), EntryError(MetadataErrorKind.UNRESOLVABLE_OWNER, f"gid {gid}")


def clear_owner_cache() -> None:
    """Drop memoized owner names."""
    user_name_for_uid.cache_clear()
    group_name_for_gid.cache_clear()
