"""Map entry attributes to colors and icons.

The name color is chosen first-match-wins: broken symlink, error marker,
explicit type (directory, symlink, executable, special file), extension,
permission class (setuid/setgid), then the plain file default. ``LS_COLORS``
indicator and glob colors take precedence over the theme at their stage, but
never over the broken-symlink rule.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from .entry_model import EntryRecord, FileKind
from .icons import Icons, icon_name_for_entry
from .lscolors import LsColors
from .theme import StyleCategory, Theme

HOUR = timedelta(hours=1)
DAY = timedelta(days=1)

_KIND_CATEGORIES = {
    FileKind.SYMLINK: StyleCategory.SYMLINK,
    FileKind.FIFO: StyleCategory.PIPE,
    FileKind.SOCKET: StyleCategory.SOCKET,
    FileKind.BLOCK_DEVICE: StyleCategory.BLOCK_DEVICE,
    FileKind.CHAR_DEVICE: StyleCategory.CHAR_DEVICE,
    FileKind.UNKNOWN: StyleCategory.SPECIAL,
}


@dataclass(frozen=True)
class SizeThresholds:
    """Byte boundaries of the medium and large size buckets."""

    medium: int = 1024 * 1024
    large: int = 1024 * 1024 * 1024


@dataclass(frozen=True)
class StyleDecision:
    color: str
    icon: str | None
    category: StyleCategory


def type_category(entry: EntryRecord) -> StyleCategory | None:
    """Return the explicit type override category, if the entry has one."""
    if entry.is_broken_link:
        return StyleCategory.BROKEN_SYMLINK
    if entry.is_marker:
        return StyleCategory.ERROR
    if entry.kind is FileKind.DIRECTORY:
        return StyleCategory.DIR_SETUID if entry.permissions.setuid else StyleCategory.DIR
    if entry.kind in _KIND_CATEGORIES:
        return _KIND_CATEGORIES[entry.kind]
    if entry.permissions.is_executable:
        return StyleCategory.FILE_EXEC
    return None


def permission_class_category(entry: EntryRecord) -> StyleCategory:
    """Fallback category for regular files without a type or extension match."""
    if entry.permissions.setuid or entry.permissions.setgid:
        return StyleCategory.FILE_SETUID
    return StyleCategory.FILE


_BIT_CATEGORIES = {
    "r": StyleCategory.READ,
    "w": StyleCategory.WRITE,
    "x": StyleCategory.EXEC,
}


def permission_bit_category(bit: str, present: bool, *, special: bool = False) -> StyleCategory:
    """Category for one ``rwx`` character of the permission column.

    ``special`` marks the execute slot of a setuid/setgid/sticky triplet, which
    is drawn as ``s``/``t`` (or ``S``/``T`` without the execute bit).
    """
    if bit == "x" and special:
        return StyleCategory.EXEC_STICKY
    if not present:
        return StyleCategory.NO_ACCESS
    return _BIT_CATEGORIES[bit]


def recency_category(modified: datetime | None, now: datetime) -> StyleCategory:
    if modified is None:
        return StyleCategory.OLDER
    age = now - modified
    if age < HOUR:
        return StyleCategory.HOUR_OLD
    if age < DAY:
        return StyleCategory.DAY_OLD
    return StyleCategory.OLDER


def size_category(entry: EntryRecord, thresholds: SizeThresholds) -> StyleCategory:
    if entry.kind is not FileKind.REGULAR:
        return StyleCategory.NON_FILE
    if entry.size >= thresholds.large:
        return StyleCategory.FILE_LARGE
    if entry.size >= thresholds.medium:
        return StyleCategory.FILE_MEDIUM
    return StyleCategory.FILE_SMALL


class StyleResolver:
    """Resolve ``StyleDecision`` values and column colors for one run."""

    def __init__(
        self,
        theme: Theme,
        icons: Icons | None = None,
        lscolors: LsColors | None = None,
        *,
        now: datetime,
        size_thresholds: SizeThresholds = SizeThresholds(),
        read_shebang: bool = True,
    ) -> None:
        self.theme = theme
        self.icons = icons
        self.lscolors = lscolors
        self.now = now
        self.size_thresholds = size_thresholds
        self.read_shebang = read_shebang

    def sgr(self, category: StyleCategory) -> str:
        return self.theme.sgr_for(category)

    def _kind_sgr(self, category: StyleCategory) -> str:
        if self.lscolors is not None:
            from_env = self.lscolors.sgr_for_category(category)
            if from_env is not None:
                return from_env
        return self.theme.sgr_for(category)

    def _extension_sgr(self, entry: EntryRecord) -> str | None:
        if self.lscolors is not None:
            from_env = self.lscolors.sgr_for_name(entry.name)
            if from_env is not None:
                return from_env
        return self.theme.sgr_for_extension(entry.extension)

    def name_style(self, entry: EntryRecord) -> tuple[StyleCategory, str]:
        """Return ``(category, sgr)`` for the entry name."""
        category = type_category(entry)
        if category is not None:
            return category, self._kind_sgr(category)
        extension_sgr = self._extension_sgr(entry)
        if extension_sgr is not None:
            return StyleCategory.FILE, extension_sgr
        category = permission_class_category(entry)
        return category, self._kind_sgr(category)

    def icon_for(self, entry: EntryRecord, category: StyleCategory) -> str | None:
        if self.icons is None or not self.icons.enabled:
            return None
        icon_name = icon_name_for_entry(entry, read_shebang=self.read_shebang)
        if icon_name is None:
            icon_name = self.theme.icon_name_for(category)
        return self.icons.glyph(icon_name)

    def resolve(self, entry: EntryRecord) -> StyleDecision:
        category, color = self.name_style(entry)
        return StyleDecision(color=color, icon=self.icon_for(entry, category), category=category)

    def link_target_sgr(self, entry: EntryRecord) -> str:
        """Color for the ``=> target`` suffix of symlinks."""
        if entry.is_broken_link:
            return self._kind_sgr(StyleCategory.BROKEN_SYMLINK)
        return self._kind_sgr(StyleCategory.SYMLINK)

    def recency_sgr(self, entry: EntryRecord) -> str:
        return self.sgr(recency_category(entry.timestamps.modified, self.now))

    def size_sgr(self, entry: EntryRecord) -> str:
        return self.sgr(size_category(entry, self.size_thresholds))


__all__ = [
    "SizeThresholds",
    "StyleDecision",
    "StyleResolver",
    "type_category",
    "permission_class_category",
    "permission_bit_category",
    "recency_category",
    "size_category",
]
