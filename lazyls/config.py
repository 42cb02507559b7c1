"""Listing options and the persisted JSON config file.

``ListingConfig`` is the immutable object threaded through every stage.
The config file only supplies defaults for command-line options; all access
is defensive: malformed or missing config falls back safely.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from platformdirs import user_config_dir

from .entry_model import TraversalOptions
from .icons import IconTheme
from .listing.filtering import FilterSet
from .listing.sorting import DirGrouping, SortKey, SortOrder
from .render import DisplayMode, GridDirection, SizeFormat
from .render.blocks import DateStyle
from .style import SizeThresholds
from .theme import ColorToken, StyleCategory, parse_category_overrides

logger = logging.getLogger(__name__)

APP_NAME = "lazyls"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
LEGACY_CONFIG_PATH = Path.home() / ".config" / "lazyls.json"
CONFIG_PATH = DEFAULT_CONFIG_PATH

WHEN_CHOICES = ("always", "auto", "never")


@dataclass(frozen=True)
class ListingConfig:
    """Fully resolved options for one listing run.

    ``long_format`` only changes tree output; ``DisplayMode.LONG`` always
    prints the long columns.
    """

    recursive: bool = False
    max_depth: int | None = None
    follow_symlinks: bool = False
    sort_key: SortKey = SortKey.NAME
    sort_order: SortOrder = SortOrder.ASCENDING
    show_hidden: bool = False
    pattern_filters: tuple[str, ...] = ()
    display_mode: DisplayMode = DisplayMode.GRID
    color_enabled: bool = True
    icon_enabled: bool = True
    terminal_width: int | None = None
    dir_grouping: DirGrouping = DirGrouping.FIRST
    ignore_vcs: bool = False
    total_size: bool = False
    theme_name: str = "dark"
    icon_theme: IconTheme = IconTheme.FANCY
    use_lscolors: bool = True
    size_format: SizeFormat = SizeFormat.DEFAULT
    date_format: str = DateStyle.DATE.value
    size_thresholds: SizeThresholds = SizeThresholds()
    grid_direction: GridDirection = GridDirection.DOWN
    now: datetime | None = None
    long_format: bool = False
    directory_only: bool = False
    classify: bool = False
    theme_overrides: Mapping[StyleCategory, ColorToken] = field(default_factory=dict)
    extension_colors: Mapping[str, ColorToken] = field(default_factory=dict)

    def traversal_options(self) -> TraversalOptions:
        """Tree listings always recurse; ``max_depth`` still bounds them."""
        return TraversalOptions(
            recursive=self.recursive or self.display_mode is DisplayMode.TREE,
            max_depth=self.max_depth,
            follow_symlinks=self.follow_symlinks,
            total_size=self.total_size,
            directory_only=self.directory_only,
        )

    def filter_set(self) -> FilterSet:
        return FilterSet(
            show_hidden=self.show_hidden,
            ignore_globs=tuple(self.pattern_filters),
            ignore_vcs=self.ignore_vcs,
        )


def _load_config_path() -> Path:
    """Return preferred config path, falling back to legacy location when needed."""
    if CONFIG_PATH.exists():
        return CONFIG_PATH
    if CONFIG_PATH == DEFAULT_CONFIG_PATH and LEGACY_CONFIG_PATH.exists():
        return LEGACY_CONFIG_PATH
    return CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = _load_config_path()
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("ignoring config %s: expected a JSON object", config_path)
        return {}
    return data


def _choice(data: Mapping[str, object], key: str, choices: tuple[str, ...]) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in choices:
        return value.strip().lower()
    logger.warning("ignoring config %r: expected one of %s", key, ", ".join(choices))
    return None


def _flag(data: Mapping[str, object], key: str) -> bool | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    logger.warning("ignoring config %r: expected true or false", key)
    return None


def _section(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    if value is None:
        return {}
    if isinstance(value, Mapping):
        return value
    logger.warning("ignoring config %r: expected an object", key)
    return {}


def _date_format(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        text = value.strip()
        if text in {style.value for style in DateStyle} or (text.startswith("+") and len(text) > 1):
            return text
    logger.warning("ignoring config 'date': expected date, relative, iso or +FORMAT")
    return None


def option_defaults(data: Mapping[str, object]) -> dict[str, object]:
    """Translate config-file keys into command-line option defaults.

    The keys of the returned dict are ``argparse`` destinations; values the
    file leaves out or gets wrong are simply absent.
    """
    defaults: dict[str, object] = {}

    def put(dest: str, value: object) -> None:
        if value is not None:
            defaults[dest] = value

    put("all", _flag(data, "show_hidden"))
    put("reverse", _flag(data, "reverse"))
    put("ignore_vcs", _flag(data, "ignore_vcs"))
    put("total_size", _flag(data, "total_size"))
    put("dereference", _flag(data, "dereference"))
    put("classify", _flag(data, "classify"))
    put("sort", _choice(data, "sort", tuple(key.value for key in SortKey)))
    put("group_dirs", _choice(data, "group_dirs", tuple(grouping.value for grouping in DirGrouping)))
    put("layout", _choice(data, "display", tuple(mode.value for mode in DisplayMode)))
    put("size", _choice(data, "size", tuple(size_format.value for size_format in SizeFormat)))
    put("date", _date_format(data.get("date")))

    color = _section(data, "color")
    put("color", _choice(color, "when", WHEN_CHOICES))
    theme = color.get("theme")
    if isinstance(theme, str) and theme.strip():
        defaults["color_theme"] = theme.strip()

    icons = _section(data, "icons")
    put("icon", _choice(icons, "when", WHEN_CHOICES))
    put("icon_theme", _choice(icons, "theme", (IconTheme.FANCY.value, IconTheme.UNICODE.value)))

    depth = data.get("depth")
    if depth is not None:
        if isinstance(depth, int) and not isinstance(depth, bool) and depth > 0:
            defaults["depth"] = depth
        else:
            logger.warning("ignoring config 'depth': expected a positive integer")

    globs = data.get("ignore_globs")
    if globs is not None:
        if isinstance(globs, list) and all(isinstance(glob, str) for glob in globs):
            defaults["ignore_glob"] = list(globs)
        else:
            logger.warning("ignoring config 'ignore_globs': expected a list of strings")
    return defaults


def theme_overrides_from(data: Mapping[str, object]) -> dict[StyleCategory, ColorToken]:
    return parse_category_overrides(_section(data, "theme_overrides"))


def extension_colors_from(data: Mapping[str, object]) -> dict[str, ColorToken]:
    colors: dict[str, ColorToken] = {}
    for extension, token in _section(data, "extension_colors").items():
        if token is not None and not isinstance(token, (str, int)):
            logger.warning("ignoring color for extension %r: expected string or integer", extension)
            continue
        colors[str(extension).lower().lstrip(".")] = token
    return colors


__all__ = [
    "APP_NAME",
    "CONFIG_PATH",
    "ListingConfig",
    "load_config",
    "option_defaults",
    "theme_overrides_from",
    "extension_colors_from",
]
