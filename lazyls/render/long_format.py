"""Long-format rows: permissions, owner, size, date, and name."""

from __future__ import annotations

from collections.abc import Sequence

from ..ansi import pad_left, pad_right, visible_width
from ..errors import EntryError
from .blocks import RenderContext, date_block, group_block, name_block, permission_block, size_block, user_block
from .nodes import DisplayNode

FIELD_SEPARATOR = " "
SIZE_COLUMN = 3


def long_row(node: DisplayNode, context: RenderContext, errors: list[EntryError]) -> list[str]:
    """Return the column cells for one node, name last."""
    entry = node.entry
    resolver = context.resolver
    return [
        permission_block(entry, resolver),
        user_block(entry, resolver, errors),
        group_block(entry, resolver, errors),
        size_block(entry, context),
        date_block(entry, context),
        name_block(entry, node.style, context, errors),
    ]


def align_rows(rows: Sequence[list[str]]) -> list[str]:
    """Join cell rows with every column as wide as its widest cell.

    Sizes are right-aligned; the trailing name column is never padded.
    """
    if not rows:
        return []
    field_count = len(rows[0]) - 1
    widths = [max(visible_width(row[index]) for row in rows) for index in range(field_count)]

    lines: list[str] = []
    for row in rows:
        fields = []
        for index in range(field_count):
            align = pad_left if index == SIZE_COLUMN else pad_right
            fields.append(align(row[index], widths[index]))
        fields.append(row[-1])
        lines.append(FIELD_SEPARATOR.join(fields))
    return lines


def layout_long(nodes: Sequence[DisplayNode], context: RenderContext, errors: list[EntryError]) -> list[str]:
    """Render one listing, aligned across all of its rows."""
    return align_rows([long_row(node, context, errors) for node in nodes])


__all__ = ["long_row", "align_rows", "layout_long"]
