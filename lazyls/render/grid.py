"""Multi-column grid layout for name cells.

The column count is the largest one whose rows fit inside the terminal width
with a two-space gutter. Each column is as wide as its widest cell.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from ..ansi import clip_ansi_line, pad_right, visible_width

GUTTER = 2


class GridDirection(Enum):
    DOWN = "down"
    ACROSS = "across"


@dataclass(frozen=True)
class GridPlan:
    rows: int
    columns: int
    column_widths: tuple[int, ...]

    @property
    def total_width(self) -> int:
        return sum(self.column_widths) + GUTTER * max(0, self.columns - 1)


def _cell_position(index: int, rows: int, columns: int, direction: GridDirection) -> tuple[int, int]:
    if direction is GridDirection.ACROSS:
        return index // columns, index % columns
    return index % rows, index // rows


def plan_for_rows(widths: list[int], rows: int, direction: GridDirection) -> GridPlan:
    columns = math.ceil(len(widths) / rows)
    if direction is GridDirection.ACROSS:
        # row-major filling can leave the last row short; recompute the row count
        rows = math.ceil(len(widths) / columns)
    column_widths = [0] * columns
    for index, width in enumerate(widths):
        _row, column = _cell_position(index, rows, columns, direction)
        column_widths[column] = max(column_widths[column], width)
    return GridPlan(rows=rows, columns=columns, column_widths=tuple(column_widths))


def max_columns_for(widths: list[int], max_width: int) -> int:
    """Upper bound on columns: every column is at least as wide as the narrowest cell."""
    narrowest = min(widths)
    return max(1, min(len(widths), (max_width + GUTTER) // (narrowest + GUTTER)))


def fit_into_width(widths: list[int], max_width: int, direction: GridDirection = GridDirection.DOWN) -> GridPlan | None:
    """Return the plan with the most columns (so the fewest rows) that fits ``max_width``.

    Candidate column counts are tried from ``max_columns_for`` downward, so
    the search costs at most one plan per column the terminal could hold.
    ``None`` means even a single column is too wide.
    """
    if not widths:
        return GridPlan(rows=0, columns=0, column_widths=())
    if max(widths) > max_width:
        return None
    tried_rows: set[int] = set()
    for columns in range(max_columns_for(widths, max_width), 0, -1):
        rows = math.ceil(len(widths) / columns)
        if rows in tried_rows:
            continue
        tried_rows.add(rows)
        plan = plan_for_rows(widths, rows, direction)
        if plan.total_width <= max_width:
            return plan
    return None


def layout_grid(
    cells: list[str],
    terminal_width: int | None,
    direction: GridDirection = GridDirection.DOWN,
) -> tuple[list[str], bool]:
    """Lay ``cells`` out in columns; return ``(lines, width_was_valid)``.

    An unknown or non-positive width puts every cell on its own line. When even
    one column is wider than the terminal, lines are clipped to the width.
    """
    if terminal_width is None or terminal_width <= 0:
        return list(cells), False

    widths = [visible_width(cell) for cell in cells]
    plan = fit_into_width(widths, terminal_width, direction)
    if plan is None:
        return [clip_ansi_line(cell, terminal_width) for cell in cells], True

    grid: list[list[str | None]] = [[None] * plan.columns for _ in range(plan.rows)]
    for index, cell in enumerate(cells):
        row, column = _cell_position(index, plan.rows, plan.columns, direction)
        grid[row][column] = cell

    lines: list[str] = []
    for row_cells in grid:
        present = [(column, cell) for column, cell in enumerate(row_cells) if cell is not None]
        parts: list[str] = []
        for position, (column, cell) in enumerate(present):
            if position == len(present) - 1:
                parts.append(cell)
            else:
                parts.append(pad_right(cell, plan.column_widths[column]) + " " * GUTTER)
        lines.append("".join(parts))
    return lines, True


__all__ = ["GUTTER", "GridDirection", "GridPlan", "plan_for_rows", "max_columns_for", "fit_into_width", "layout_grid"]
