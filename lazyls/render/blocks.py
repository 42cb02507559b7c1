"""Cell builders for the individual columns of a listing.

Each helper returns display text, already colored when the active theme has a
color for it. Widths are measured later with ``ansi.visible_width``.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ..ansi import paint
from ..entry_model import EntryRecord, FileKind, Support
from ..errors import EntryError, RenderErrorKind
from ..style import StyleDecision, StyleResolver, permission_bit_category, type_category
from ..theme import StyleCategory

SYMLINK_ARROW = " ⇒ "
ICON_SEPARATOR = " "
SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")
SIZE_BASE = 1024
DATE_PATTERN = "%a %b %d %H:%M:%S %Y"
ISO_PATTERN = "%Y-%m-%d %H:%M"
MISSING_FIELD = "-"

KIND_INDICATORS = {
    FileKind.DIRECTORY: "/",
    FileKind.SYMLINK: "@",
    FileKind.FIFO: "|",
    FileKind.SOCKET: "=",
}
EXECUTABLE_INDICATOR = "*"

_RELATIVE_UNITS = (
    ("year", 365 * 24 * 3600),
    ("month", 30 * 24 * 3600),
    ("week", 7 * 24 * 3600),
    ("day", 24 * 3600),
    ("hour", 3600),
    ("minute", 60),
    ("second", 1),
)


class SizeFormat(Enum):
    DEFAULT = "default"
    SHORT = "short"
    BYTES = "bytes"


class DateStyle(Enum):
    DATE = "date"
    RELATIVE = "relative"
    ISO = "iso"


@dataclass(frozen=True)
class RenderContext:
    """Per-run rendering options shared by every layout."""

    resolver: StyleResolver
    size_format: SizeFormat = SizeFormat.DEFAULT
    date_format: str = DateStyle.DATE.value
    total_size: bool = False
    classify: bool = False


def sanitize_name(text: str) -> tuple[str, bool]:
    """Replace control characters and lone surrogates with ``?``.

    Returns ``(clean_text, changed)``.
    """
    out: list[str] = []
    changed = False
    for ch in text:
        code = ord(ch)
        if 0xD800 <= code <= 0xDFFF or unicodedata.category(ch) == "Cc":
            out.append("?")
            changed = True
        else:
            out.append(ch)
    return "".join(out), changed


def _safe_text(text: str, errors: list[EntryError]) -> str:
    clean, changed = sanitize_name(text)
    if changed:
        errors.append(EntryError(RenderErrorKind.ENCODING, clean, "name contains unprintable characters"))
    return clean


def permission_block(entry: EntryRecord, resolver: StyleResolver) -> str:
    """Return ``drwxr-xr-x``-style text with per-character colors."""
    if entry.is_marker:
        return ""
    category = type_category(entry) or StyleCategory.FILE
    parts = [paint(entry.kind.type_char, resolver.sgr(category))]
    permissions = entry.permissions
    special_chars = ("s", "s", "t")
    for (read, write, execute, special), special_char in zip(permissions.triplets(), special_chars):
        if permissions.execute_support is Support.UNSUPPORTED:
            execute = False
        parts.append(paint("r" if read else "-", resolver.sgr(permission_bit_category("r", read))))
        parts.append(paint("w" if write else "-", resolver.sgr(permission_bit_category("w", write))))
        if special:
            char = special_char if execute else special_char.upper()
        else:
            char = "x" if execute else "-"
        parts.append(paint(char, resolver.sgr(permission_bit_category("x", execute, special=special))))
    return "".join(parts)


def _record_once(error: EntryError | None, errors: list[EntryError] | None) -> None:
    if error is not None and errors is not None and error not in errors:
        errors.append(error)


def user_block(entry: EntryRecord, resolver: StyleResolver, errors: list[EntryError] | None = None) -> str:
    """Owner name, or the numeric uid when the name cannot be resolved."""
    if entry.is_marker:
        return ""
    name, error = entry.owner.user_lookup()
    _record_once(error, errors)
    return paint(name, resolver.sgr(StyleCategory.USER))


def group_block(entry: EntryRecord, resolver: StyleResolver, errors: list[EntryError] | None = None) -> str:
    if entry.is_marker:
        return ""
    name, error = entry.owner.group_lookup()
    _record_once(error, errors)
    return paint(name, resolver.sgr(StyleCategory.GROUP))


def format_size(size: int, size_format: SizeFormat) -> str:
    """Format a byte count: ``4.2 KB`` (default), ``4.2K`` (short) or raw bytes."""
    if size_format is SizeFormat.BYTES:
        return str(size)
    value = float(size)
    unit_index = 0
    while value >= SIZE_BASE and unit_index < len(SIZE_UNITS) - 1:
        value /= SIZE_BASE
        unit_index += 1
    if unit_index == 0:
        number = str(size)
    elif value < 10:
        number = f"{value:.1f}"
    else:
        number = str(int(round(value)))
    unit = SIZE_UNITS[unit_index]
    if size_format is SizeFormat.SHORT:
        return f"{number}{unit[0]}"
    return f"{number} {unit}"


def size_block(entry: EntryRecord, context: RenderContext) -> str:
    if entry.is_marker:
        return ""
    shows_size = entry.kind is FileKind.REGULAR or (entry.is_dir and context.total_size)
    if not shows_size:
        return paint(MISSING_FIELD, context.resolver.sgr(StyleCategory.NON_FILE))
    return paint(format_size(entry.size, context.size_format), context.resolver.size_sgr(entry))


def format_relative(moment: datetime, now: datetime) -> str:
    seconds = int((now - moment).total_seconds())
    if seconds < 0:
        return "in the future"
    if seconds < 1:
        return "now"
    for unit, unit_seconds in _RELATIVE_UNITS:
        if seconds >= unit_seconds:
            count = seconds // unit_seconds
            suffix = "" if count == 1 else "s"
            return f"{count} {unit}{suffix} ago"
    return "now"


def format_date(moment: datetime | None, date_format: str, now: datetime) -> str:
    """Format a timestamp as ``date``, ``relative``, ``iso`` or ``+strftime``."""
    if moment is None:
        return MISSING_FIELD
    if date_format == DateStyle.RELATIVE.value:
        return format_relative(moment, now)
    local = moment.astimezone()
    if date_format == DateStyle.ISO.value:
        return local.strftime(ISO_PATTERN)
    if date_format.startswith("+"):
        return local.strftime(date_format[1:])
    return local.strftime(DATE_PATTERN)


def date_block(entry: EntryRecord, context: RenderContext) -> str:
    if entry.is_marker:
        return ""
    resolver = context.resolver
    text = format_date(entry.timestamps.modified, context.date_format, resolver.now)
    return paint(text, resolver.recency_sgr(entry))


def indicator_for(entry: EntryRecord) -> str:
    """Return the ``-F`` suffix: ``/`` ``@`` ``|`` ``=`` by kind, ``*`` for executables."""
    if entry.is_marker:
        return ""
    if entry.kind in KIND_INDICATORS:
        return KIND_INDICATORS[entry.kind]
    if entry.kind is FileKind.REGULAR and entry.permissions.is_executable:
        return EXECUTABLE_INDICATOR
    return ""


def name_block(
    entry: EntryRecord,
    style: StyleDecision,
    context: RenderContext,
    errors: list[EntryError],
    *,
    show_link_target: bool = True,
) -> str:
    """Return ``[icon ]name[indicator][ => target]`` for one entry, or its error label."""
    icon = f"{style.icon}{ICON_SEPARATOR}" if style.icon else ""
    if entry.is_marker:
        assert entry.error is not None
        label = _safe_text(entry.error.label(), errors)
        return icon + paint(label, style.color)

    name = _safe_text(entry.name, errors)
    text = icon + paint(name, style.color)
    if context.classify:
        text += indicator_for(entry)
    if show_link_target and entry.link is not None:
        target = _safe_text(entry.link.path, errors)
        text += SYMLINK_ARROW + paint(target, context.resolver.link_target_sgr(entry))
    return text


def header_line(path: str, errors: list[EntryError]) -> str:
    """Return the ``path:`` heading printed above a directory section."""
    clean, changed = sanitize_name(path)
    if changed:
        errors.append(EntryError(RenderErrorKind.ENCODING, clean, "path contains unprintable characters"))
    return f"{clean}:"


__all__ = [
    "SizeFormat",
    "DateStyle",
    "RenderContext",
    "SYMLINK_ARROW",
    "sanitize_name",
    "permission_block",
    "user_block",
    "group_block",
    "format_size",
    "size_block",
    "format_relative",
    "format_date",
    "date_block",
    "indicator_for",
    "name_block",
    "header_line",
]
