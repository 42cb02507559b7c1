"""End-to-end listing: traverse, filter, sort, style, and render.

``run_listing`` is pure apart from reading the filesystem and, when enabled,
the ``LS_COLORS`` environment variable; identical inputs give byte-identical
text.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..entry_model import EntryRecord, ErrorLog, walk_roots
from ..errors import EntryError, RootError
from ..icons import Icons, IconTheme
from ..lscolors import ls_colors_from_env
from ..render import DisplayNode, RenderContext, build_display_nodes, render_nodes
from ..style import StyleResolver
from ..theme import resolve_theme
from .filtering import filter_entries
from .sorting import sort_entries

if TYPE_CHECKING:
    from ..config import ListingConfig

logger = logging.getLogger(__name__)

DEFAULT_ROOT = "."


@dataclass(frozen=True)
class ListingResult:
    """Rendered text plus every failure captured along the way."""

    text: str
    root_errors: tuple[RootError, ...] = ()
    entry_errors: tuple[EntryError, ...] = ()
    render_errors: tuple[EntryError, ...] = ()


def build_resolver(config: ListingConfig, environ: Mapping[str, str] | None = None) -> StyleResolver:
    """Assemble theme, icons, and ``LS_COLORS`` for one run."""
    theme = resolve_theme(config.theme_name, no_color=not config.color_enabled)
    if config.color_enabled and (config.theme_overrides or config.extension_colors):
        theme = theme.with_overrides(config.theme_overrides, config.extension_colors)
    lscolors = None
    if config.color_enabled and config.use_lscolors:
        lscolors = ls_colors_from_env(environ if environ is not None else os.environ)
    icon_theme = config.icon_theme if config.icon_enabled else IconTheme.NONE
    now = config.now if config.now is not None else datetime.now(timezone.utc)
    return StyleResolver(
        theme,
        Icons(icon_theme),
        lscolors,
        now=now,
        size_thresholds=config.size_thresholds,
    )


def build_nodes(
    per_root: Sequence[Sequence[EntryRecord]],
    config: ListingConfig,
    resolver: StyleResolver,
) -> list[DisplayNode]:
    """Filter and sort each root's entries and group them into display nodes."""
    options = config.traversal_options()
    filters = config.filter_set()

    def order(siblings: list[EntryRecord]) -> list[EntryRecord]:
        return sort_entries(siblings, config.sort_key, config.sort_order, config.dir_grouping)

    def expands(entry: EntryRecord) -> bool:
        return options.descends_into(entry.depth)

    nodes: list[DisplayNode] = []
    for entries in per_root:
        kept = filter_entries(entries, filters)
        nodes.extend(build_display_nodes(kept, resolver, order=order, expands=expands))
    return nodes


def run_listing(
    paths: Sequence[str],
    config: ListingConfig,
    *,
    environ: Mapping[str, str] | None = None,
) -> ListingResult:
    """List ``paths`` (the current directory when empty) and render the result."""
    roots = list(paths) or [DEFAULT_ROOT]
    error_log = ErrorLog()
    filters = config.filter_set()
    per_root = walk_roots(roots, config.traversal_options(), error_log, prune=filters.rejects)

    resolver = build_resolver(config, environ)
    nodes = build_nodes(per_root, config, resolver)
    context = RenderContext(
        resolver=resolver,
        size_format=config.size_format,
        date_format=config.date_format,
        total_size=config.total_size,
        classify=config.classify,
    )
    text, render_errors = render_nodes(
        nodes,
        config.display_mode,
        config.terminal_width,
        context,
        config.grid_direction,
        long_format=config.long_format,
    )
    for error in render_errors:
        logger.debug("render issue: %s", error.describe())
    return ListingResult(
        text=text,
        root_errors=error_log.root_errors,
        entry_errors=error_log.entry_errors,
        render_errors=tuple(render_errors),
    )


__all__ = ["DEFAULT_ROOT", "ListingResult", "build_resolver", "build_nodes", "run_listing"]
