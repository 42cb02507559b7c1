"""Layout rendering for resolved display nodes.

``render_nodes`` dispatches over the closed ``DisplayMode`` set. Grid, one-line
and long listings print non-directory arguments first and then one section per
listed directory; sections get a ``path:`` heading when there is more than one
thing to tell apart. Tree listings draw each root as a single tree, optionally with long columns.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from enum import Enum

from ..ansi import clip_ansi_line
from ..errors import EntryError, RenderErrorKind
from .blocks import DateStyle, RenderContext, SizeFormat, header_line, name_block, sanitize_name
from .grid import GridDirection, layout_grid
from .long_format import layout_long
from .nodes import DisplayNode, build_display_nodes
from .tree import layout_tree

TERMINAL_PATH = "<terminal>"


class DisplayMode(Enum):
    GRID = "grid"
    ONELINE = "oneline"
    LONG = "long"
    TREE = "tree"


SectionLayout = Callable[[Sequence[DisplayNode], "_RenderPass"], list[str]]


class _RenderPass:
    """Mutable state for one ``render_nodes`` call."""

    def __init__(
        self,
        mode: DisplayMode,
        terminal_width: int | None,
        context: RenderContext,
        direction: GridDirection,
        long_format: bool = False,
    ) -> None:
        self.mode = mode
        self.long_format = long_format
        self.terminal_width = terminal_width
        self.context = context
        self.direction = direction
        self.errors: list[EntryError] = []
        self._width_reported = False

    def heading(self, path: str) -> str:
        """Return the ``path:`` heading, clipped to the width in grid mode."""
        line = header_line(path, self.errors)
        if self.mode is DisplayMode.GRID and self.terminal_width is not None and self.terminal_width > 0:
            return clip_ansi_line(line, self.terminal_width)
        return line

    def report_invalid_width(self) -> None:
        if self._width_reported:
            return
        self._width_reported = True
        self.errors.append(
            EntryError(RenderErrorKind.INVALID_WIDTH, TERMINAL_PATH, f"terminal width {self.terminal_width!r}")
        )


def _grid_section(nodes: Sequence[DisplayNode], render_pass: _RenderPass) -> list[str]:
    context = render_pass.context
    cells = [name_block(node.entry, node.style, context, render_pass.errors, show_link_target=False) for node in nodes]
    if not cells:
        return []
    lines, width_valid = layout_grid(cells, render_pass.terminal_width, render_pass.direction)
    if not width_valid:
        render_pass.report_invalid_width()
    return lines


def _oneline_section(nodes: Sequence[DisplayNode], render_pass: _RenderPass) -> list[str]:
    context = render_pass.context
    return [name_block(node.entry, node.style, context, render_pass.errors, show_link_target=False) for node in nodes]


def _long_section(nodes: Sequence[DisplayNode], render_pass: _RenderPass) -> list[str]:
    return layout_long(nodes, render_pass.context, render_pass.errors)


_SECTION_LAYOUTS: dict[DisplayMode, SectionLayout] = {
    DisplayMode.GRID: _grid_section,
    DisplayMode.ONELINE: _oneline_section,
    DisplayMode.LONG: _long_section,
}


def _shows_headings(nodes: Sequence[DisplayNode], depth: int) -> bool:
    if depth > 0:
        return True
    folders = sum(1 for node in nodes if node.expanded)
    return folders > 1 or folders < len(nodes)


def _render_sections(nodes: Sequence[DisplayNode], render_pass: _RenderPass, depth: int) -> list[str]:
    layout = _SECTION_LAYOUTS[render_pass.mode]
    listed = [node for node in nodes if not node.expanded] if depth == 0 else list(nodes)
    lines = layout(listed, render_pass) if listed else []

    headings = _shows_headings(nodes, depth)
    for node in nodes:
        if not node.expanded:
            continue
        if headings:
            if lines:
                lines.append("")
            lines.append(render_pass.heading(node.entry.path))
        lines.extend(_render_sections(node.children, render_pass, depth + 1))
    return lines


def _render_tree(nodes: Sequence[DisplayNode], render_pass: _RenderPass) -> list[str]:
    return layout_tree(nodes, render_pass.context, render_pass.errors, long_format=render_pass.long_format)


def _render_listing(nodes: Sequence[DisplayNode], render_pass: _RenderPass) -> list[str]:
    return _render_sections(nodes, render_pass, 0)


_MODE_RENDERERS: dict[DisplayMode, Callable[[Sequence[DisplayNode], _RenderPass], list[str]]] = {
    DisplayMode.GRID: _render_listing,
    DisplayMode.ONELINE: _render_listing,
    DisplayMode.LONG: _render_listing,
    DisplayMode.TREE: _render_tree,
}


def render_nodes(
    nodes: Sequence[DisplayNode],
    mode: DisplayMode,
    terminal_width: int | None,
    context: RenderContext,
    direction: GridDirection = GridDirection.DOWN,
    *,
    long_format: bool = False,
) -> tuple[str, list[EntryError]]:
    """Render ``nodes`` and return ``(text, render_errors)``.

    ``long_format`` adds the long-listing columns to tree output. The text
    ends with a newline unless it is empty.
    """
    render_pass = _RenderPass(mode, terminal_width, context, direction, long_format)
    lines = _MODE_RENDERERS[mode](nodes, render_pass)
    text = "\n".join(lines) + "\n" if lines else ""
    return text, render_pass.errors


__all__ = [
    "DisplayMode",
    "DisplayNode",
    "DateStyle",
    "GridDirection",
    "RenderContext",
    "SizeFormat",
    "build_display_nodes",
    "render_nodes",
    "sanitize_name",
]
