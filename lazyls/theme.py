"""Color theme definitions and selection helpers.

A theme maps semantic style categories (file kind, permission class, age
bucket, size bucket) to color tokens. Tokens are resolved to ANSI SGR text
here so the rest of the pipeline only ever sees escape strings.

Token grammar: ``None``/``""`` for no styling, an int ``0..255`` or
``"fixed:N"`` for the 256-color palette, ``"#rrggbb"`` for true color,
``"sgr:01;34"`` for raw SGR parameters (as found in ``LS_COLORS``), or
space-separated pygments console names such as ``"bold blue"``.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType

from pygments.console import codes as console_codes

logger = logging.getLogger(__name__)

ColorToken = str | int | None

_HEX_RE = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")
_SGR_PARAMS_RE = re.compile(r"^[0-9;]*$")


class StyleCategory(Enum):
    # file kinds
    FILE = "file"
    FILE_EXEC = "file-exec"
    FILE_SETUID = "file-setuid"
    DIR = "dir"
    DIR_SETUID = "dir-setuid"
    SYMLINK = "symlink"
    BROKEN_SYMLINK = "broken-symlink"
    PIPE = "pipe"
    SOCKET = "socket"
    BLOCK_DEVICE = "block-device"
    CHAR_DEVICE = "char-device"
    SPECIAL = "special"
    ERROR = "error"
    # permissions
    READ = "read"
    WRITE = "write"
    EXEC = "exec"
    EXEC_STICKY = "exec-sticky"
    NO_ACCESS = "no-access"
    # last modification
    HOUR_OLD = "hour-old"
    DAY_OLD = "day-old"
    OLDER = "older"
    # owner
    USER = "user"
    GROUP = "group"
    # size
    NON_FILE = "non-file"
    FILE_SMALL = "file-small"
    FILE_MEDIUM = "file-medium"
    FILE_LARGE = "file-large"
    # decorations
    TREE_EDGE = "tree-edge"


SETUID_CATEGORIES = frozenset({StyleCategory.FILE_SETUID, StyleCategory.DIR_SETUID})


def color_token_to_sgr(token: ColorToken, *, background: bool = False) -> str:
    """Return the escape sequence for ``token``; ``""`` for unknown or empty."""
    if token is None or token == "" or isinstance(token, bool):
        return ""
    layer = 48 if background else 38
    if isinstance(token, int):
        if 0 <= token <= 255:
            return f"\033[{layer};5;{token}m"
        logger.warning("ignoring out-of-range color %r", token)
        return ""

    text = str(token).strip()
    lowered = text.lower()
    if lowered.startswith("fixed:"):
        value = lowered.split(":", 1)[1]
        if value.isdigit():
            return color_token_to_sgr(int(value), background=background)
    elif lowered.isdigit():
        return color_token_to_sgr(int(lowered), background=background)
    elif lowered.startswith("sgr:"):
        params = lowered.split(":", 1)[1]
        if params and _SGR_PARAMS_RE.match(params):
            return f"\033[{params}m"
    elif match := _HEX_RE.match(text):
        red, green, blue = (int(part, 16) for part in match.groups())
        return f"\033[{layer};2;{red};{green};{blue}m"
    else:
        parts = lowered.split()
        if parts and all(part in console_codes for part in parts):
            return "".join(console_codes[part] for part in parts)

    logger.warning("ignoring unknown color token %r", token)
    return ""


def _frozen(mapping: Mapping) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class Theme:
    """Immutable category/extension palette plus per-category icon names."""

    name: str
    colors: Mapping[StyleCategory, ColorToken] = field(default_factory=lambda: _frozen({}))
    extension_colors: Mapping[str, ColorToken] = field(default_factory=lambda: _frozen({}))
    icon_names: Mapping[StyleCategory, str] = field(default_factory=lambda: _frozen({}))
    setuid_background: ColorToken = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "colors", _frozen(self.colors))
        object.__setattr__(
            self,
            "extension_colors",
            _frozen({ext.lower().lstrip("."): token for ext, token in self.extension_colors.items()}),
        )
        object.__setattr__(self, "icon_names", _frozen(self.icon_names))

    @property
    def is_plain(self) -> bool:
        tokens = [*self.colors.values(), *self.extension_colors.values()]
        return all(token is None or token == "" for token in tokens)

    def sgr_for(self, category: StyleCategory) -> str:
        """Return escape text for ``category``, with setuid background when due."""
        sgr = color_token_to_sgr(self.colors.get(category))
        if category in SETUID_CATEGORIES:
            sgr += color_token_to_sgr(self.setuid_background, background=True)
        return sgr

    def sgr_for_extension(self, extension: str) -> str | None:
        """Return escape text for ``extension`` or ``None`` when unmapped."""
        if not extension or extension not in self.extension_colors:
            return None
        return color_token_to_sgr(self.extension_colors[extension])

    def icon_name_for(self, category: StyleCategory) -> str | None:
        return self.icon_names.get(category)

    def with_overrides(
        self,
        colors: Mapping[StyleCategory, ColorToken] | None = None,
        extension_colors: Mapping[str, ColorToken] | None = None,
    ) -> Theme:
        """Return a copy with ``colors``/``extension_colors`` layered on top."""
        merged_colors = dict(self.colors)
        merged_colors.update(colors or {})
        merged_extensions = dict(self.extension_colors)
        merged_extensions.update(extension_colors or {})
        return replace(self, colors=merged_colors, extension_colors=merged_extensions)


_DEFAULT_ICON_NAMES = {
    StyleCategory.FILE: "file",
    StyleCategory.FILE_EXEC: "file",
    StyleCategory.FILE_SETUID: "file",
    StyleCategory.DIR: "folder",
    StyleCategory.DIR_SETUID: "folder",
    StyleCategory.SYMLINK: "symlink-file",
    StyleCategory.BROKEN_SYMLINK: "symlink-file",
    StyleCategory.PIPE: "pipe",
    StyleCategory.SOCKET: "socket",
    StyleCategory.BLOCK_DEVICE: "block-device",
    StyleCategory.CHAR_DEVICE: "char-device",
    StyleCategory.SPECIAL: "special",
    StyleCategory.ERROR: "error",
}

_ARCHIVE_EXTENSIONS = ("7z", "bz2", "gz", "lz", "rar", "tar", "tgz", "xz", "zip", "zst")
_IMAGE_EXTENSIONS = ("bmp", "gif", "ico", "jpeg", "jpg", "png", "svg", "tiff", "webp")
_MEDIA_EXTENSIONS = ("avi", "flac", "m4a", "mkv", "mov", "mp3", "mp4", "ogg", "wav", "webm")

DARK_THEME = Theme(
    name="dark",
    colors={
        StyleCategory.USER: None,
        StyleCategory.GROUP: None,
        StyleCategory.READ: None,
        StyleCategory.WRITE: None,
        StyleCategory.EXEC: None,
        StyleCategory.EXEC_STICKY: None,
        StyleCategory.NO_ACCESS: 8,
        StyleCategory.FILE: None,
        StyleCategory.FILE_EXEC: 8,
        StyleCategory.FILE_SETUID: 8,
        StyleCategory.DIR: 26,
        StyleCategory.DIR_SETUID: 3,
        StyleCategory.PIPE: 44,
        StyleCategory.SYMLINK: 37,
        StyleCategory.BROKEN_SYMLINK: 124,
        StyleCategory.BLOCK_DEVICE: 44,
        StyleCategory.CHAR_DEVICE: 172,
        StyleCategory.SOCKET: 44,
        StyleCategory.SPECIAL: 44,
        StyleCategory.ERROR: 124,
        StyleCategory.HOUR_OLD: None,
        StyleCategory.DAY_OLD: None,
        StyleCategory.OLDER: 245,
        StyleCategory.NON_FILE: 250,
        StyleCategory.FILE_SMALL: 245,
        StyleCategory.FILE_MEDIUM: None,
        StyleCategory.FILE_LARGE: None,
        StyleCategory.TREE_EDGE: 245,
    },
    extension_colors={
        **{ext: 167 for ext in _ARCHIVE_EXTENSIONS},
        **{ext: 139 for ext in _IMAGE_EXTENSIONS},
        **{ext: 110 for ext in _MEDIA_EXTENSIONS},
    },
    icon_names=_DEFAULT_ICON_NAMES,
    setuid_background=124,
)

LIGHT_THEME = Theme(
    name="light",
    colors={
        **DARK_THEME.colors,
        StyleCategory.USER: 94,
        StyleCategory.GROUP: 94,
        StyleCategory.NO_ACCESS: 245,
        StyleCategory.FILE_EXEC: 28,
        StyleCategory.FILE_SETUID: 28,
        StyleCategory.DIR: 19,
        StyleCategory.SYMLINK: 30,
        StyleCategory.OLDER: 240,
        StyleCategory.NON_FILE: 240,
        StyleCategory.FILE_SMALL: 240,
        StyleCategory.TREE_EDGE: 240,
    },
    extension_colors={
        **{ext: 124 for ext in _ARCHIVE_EXTENSIONS},
        **{ext: 90 for ext in _IMAGE_EXTENSIONS},
        **{ext: 25 for ext in _MEDIA_EXTENSIONS},
    },
    icon_names=_DEFAULT_ICON_NAMES,
    setuid_background=217,
)

MINIMAL_THEME = Theme(
    name="minimal",
    colors={
        StyleCategory.DIR: "blue",
        StyleCategory.DIR_SETUID: "blue",
        StyleCategory.SYMLINK: "cyan",
        StyleCategory.BROKEN_SYMLINK: "red",
        StyleCategory.FILE_EXEC: "green",
        StyleCategory.ERROR: "red",
    },
    icon_names=_DEFAULT_ICON_NAMES,
)

PLAIN_THEME = Theme(name="plain", icon_names=_DEFAULT_ICON_NAMES)

_THEMES: dict[str, Theme] = {
    DARK_THEME.name: DARK_THEME,
    LIGHT_THEME.name: LIGHT_THEME,
    MINIMAL_THEME.name: MINIMAL_THEME,
}


def available_theme_names() -> tuple[str, ...]:
    """Return selectable non-plain theme names."""
    return tuple(sorted(_THEMES.keys()))


def normalize_theme_name(name: str | None) -> str:
    """Return a valid theme name, falling back to dark."""
    if not name:
        return DARK_THEME.name
    candidate = str(name).strip().lower()
    if candidate in _THEMES:
        return candidate
    if candidate:
        logger.warning("unknown color theme %r, using %s", name, DARK_THEME.name)
    return DARK_THEME.name


def resolve_theme(name: str | None, *, no_color: bool = False) -> Theme:
    """Return concrete theme for requested name and color mode."""
    if no_color:
        return PLAIN_THEME
    return _THEMES[normalize_theme_name(name)]


def parse_category_overrides(raw: Mapping[str, object]) -> dict[StyleCategory, ColorToken]:
    """Map ``{"dir": 33, ...}`` config data onto categories, skipping bad keys."""
    by_value = {category.value: category for category in StyleCategory}
    overrides: dict[StyleCategory, ColorToken] = {}
    for key, token in raw.items():
        category = by_value.get(str(key).strip().lower().replace("_", "-"))
        if category is None:
            logger.warning("ignoring unknown theme category %r", key)
            continue
        if token is not None and not isinstance(token, (str, int)):
            logger.warning("ignoring color for %r: expected string or integer", key)
            continue
        overrides[category] = token
    return overrides


__all__ = [
    "ColorToken",
    "StyleCategory",
    "Theme",
    "DARK_THEME",
    "LIGHT_THEME",
    "MINIMAL_THEME",
    "PLAIN_THEME",
    "color_token_to_sgr",
    "available_theme_names",
    "normalize_theme_name",
    "resolve_theme",
    "parse_category_overrides",
]
