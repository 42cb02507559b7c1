"""Parse the ``LS_COLORS`` environment variable used by GNU ls and dircolors.

The value is a ``:``-separated list of ``key=sgr`` pairs. Two-letter keys are
file-type indicators (``di``, ``ln``, ``ex``...); keys starting with ``*`` are
globs matched against the entry name.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from types import MappingProxyType

from .theme import StyleCategory

logger = logging.getLogger(__name__)

_SGR_PARAMS_RE = re.compile(r"^[0-9;]+$")

INDICATOR_CATEGORIES: Mapping[str, StyleCategory] = MappingProxyType(
    {
        "fi": StyleCategory.FILE,
        "di": StyleCategory.DIR,
        "ln": StyleCategory.SYMLINK,
        "or": StyleCategory.BROKEN_SYMLINK,
        "pi": StyleCategory.PIPE,
        "so": StyleCategory.SOCKET,
        "bd": StyleCategory.BLOCK_DEVICE,
        "cd": StyleCategory.CHAR_DEVICE,
        "ex": StyleCategory.FILE_EXEC,
        "su": StyleCategory.FILE_SETUID,
    }
)


@dataclass(frozen=True)
class LsColors:
    """Parsed ``LS_COLORS`` content: indicator SGRs plus ordered name globs."""

    indicators: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    globs: tuple[tuple[str, str], ...] = ()

    def sgr_for_category(self, category: StyleCategory) -> str | None:
        """Return escape text for a file-kind category when ``LS_COLORS`` sets one."""
        for key, mapped in INDICATOR_CATEGORIES.items():
            if mapped is category and key in self.indicators:
                return f"\033[{self.indicators[key]}m"
        return None

    def sgr_for_name(self, name: str) -> str | None:
        """Return escape text for the last glob matching ``name``."""
        folded = name.lower()
        for pattern, params in reversed(self.globs):
            if fnmatchcase(folded, pattern):
                return f"\033[{params}m"
        return None


def parse_ls_colors(text: str) -> LsColors:
    """Parse an ``LS_COLORS`` string; malformed pairs are skipped."""
    indicators: dict[str, str] = {}
    globs: list[tuple[str, str]] = []
    for item in text.split(":"):
        if not item or "=" not in item:
            continue
        key, params = item.split("=", 1)
        key = key.strip()
        params = params.strip()
        if not params or not _SGR_PARAMS_RE.match(params):
            logger.debug("skipping LS_COLORS entry %r", item)
            continue
        if key.startswith("*"):
            globs.append((key.lower(), params))
        elif key:
            indicators[key] = params
    return LsColors(indicators=MappingProxyType(indicators), globs=tuple(globs))


def ls_colors_from_env(environ: Mapping[str, str] | None = None) -> LsColors | None:
    """Return parsed ``LS_COLORS`` from ``environ``, or ``None`` when unset."""
    env = os.environ if environ is None else environ
    value = env.get("LS_COLORS")
    if not value:
        return None
    return parse_ls_colors(value)


__all__ = ["INDICATOR_CATEGORIES", "LsColors", "parse_ls_colors", "ls_colors_from_env"]
