"""ANSI-aware text measurement and padding utilities.

Provides width measurement, clipping, and padding that preserve escape sequences.
These helpers keep columns aligned when color codes and wide chars are present.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\033[0m"


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def strip_ansi(text: str) -> str:
    """Remove every escape sequence from ``text``."""
    return ANSI_ESCAPE_RE.sub("", text)


def visible_width(text: str) -> int:
    """Return rendered column width of ``text`` ignoring escape sequences."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    A reset is appended when clipping cut a styled run short.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    styled = False
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                styled = True
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if ch == "\t":
            if col + w > max_cols:
                break
            out.append(" " * w)
            col += w
            i += 1
            continue
        if col + w > max_cols:
            break
        out.append(ch)
        col += w
        i += 1

    clipped = "".join(out)
    if styled and i < n and not clipped.endswith(RESET):
        clipped += RESET
    return clipped


def pad_right(text: str, width: int) -> str:
    """Left-align ``text`` in a field of ``width`` visible columns."""
    return text + " " * max(0, width - visible_width(text))


def pad_left(text: str, width: int) -> str:
    """Right-align ``text`` in a field of ``width`` visible columns."""
    return " " * max(0, width - visible_width(text)) + text


def paint(text: str, sgr: str) -> str:
    """Wrap ``text`` in ``sgr`` and a reset; plain text when ``sgr`` is empty."""
    if not sgr or not text:
        return text
    return f"{sgr}{text}{RESET}"
