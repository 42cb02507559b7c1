"""Box-drawing tree layout.

Every line below a root carries one segment per ancestor between it and the
root, then a branch or corner connector. Only the last child of a directory
gets the corner. Long trees put the permission, owner, size and date columns
after the connector, aligned within each group of siblings.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..ansi import paint
from ..errors import EntryError
from ..theme import StyleCategory
from .blocks import RenderContext, name_block
from .long_format import align_rows, long_row
from .nodes import DisplayNode

BRANCH = "├── "
CORNER = "└── "
PIPE = "│   "
BLANK = "    "


def tree_prefix(ancestors_last: Sequence[bool], is_last: bool) -> str:
    """Return the plain prefix for a node.

    ``ancestors_last`` has one flag per ancestor below the root, saying whether
    that ancestor was the last child of its own parent.
    """
    segments = [BLANK if last else PIPE for last in ancestors_last]
    segments.append(CORNER if is_last else BRANCH)
    return "".join(segments)


def layout_tree(
    nodes: Sequence[DisplayNode],
    context: RenderContext,
    errors: list[EntryError],
    *,
    long_format: bool = False,
) -> list[str]:
    """Render each root and its descendants depth-first in pre-order."""
    edge_sgr = context.resolver.sgr(StyleCategory.TREE_EDGE)
    lines: list[str] = []

    def group_text(group: Sequence[DisplayNode]) -> list[str]:
        if long_format:
            return align_rows([long_row(node, context, errors) for node in group])
        return [name_block(node.entry, node.style, context, errors) for node in group]

    def walk(children: Sequence[DisplayNode], ancestors_last: list[bool]) -> None:
        for index, (child, text) in enumerate(zip(children, group_text(children))):
            is_last = index == len(children) - 1
            prefix = paint(tree_prefix(ancestors_last, is_last), edge_sgr)
            lines.append(prefix + text)
            if child.children:
                walk(child.children, [*ancestors_last, is_last])

    for root, text in zip(nodes, group_text(nodes)):
        lines.append(text)
        walk(root.children, [])
    return lines


__all__ = ["BRANCH", "CORNER", "PIPE", "BLANK", "tree_prefix", "layout_tree"]
