"""Command-line front door for lazyls.

Parses CLI options on top of config-file defaults, detects terminal
capabilities, and prints one listing. Unreadable roots go to stderr.
"""

from __future__ import annotations

import argparse
import logging
import os
import shutil
import sys
from collections.abc import Mapping, Sequence
from typing import TextIO

from .config import (
    WHEN_CHOICES,
    ListingConfig,
    extension_colors_from,
    load_config,
    option_defaults,
    theme_overrides_from,
)
from .icons import IconTheme
from .listing import DirGrouping, SortKey, SortOrder, run_listing
from .render import DisplayMode, GridDirection, SizeFormat
from .theme import available_theme_names

PROG = "lazyls"
EXIT_MINOR_PROBLEMS = 1
EXIT_SERIOUS_TROUBLE = 2


def _positive_int(value: str) -> int:
    """argparse type for positive integer values."""
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: {value!r}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be >= 1")
    return parsed


def _date_format(value: str) -> str:
    if value in {"date", "relative", "iso"} or (value.startswith("+") and len(value) > 1):
        return value
    raise argparse.ArgumentTypeError("expected date, relative, iso or +FORMAT")


def build_parser(defaults: Mapping[str, object] | None = None) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="List directory contents with colors, icons, and tree or long layouts.",
    )
    parser.add_argument("paths", nargs="*", help="Files or directories to list. Defaults to the current directory.")
    parser.add_argument("-a", "--all", action="store_true", help="Do not ignore entries starting with '.'.")
    parser.add_argument("-R", "--recursive", action="store_true", help="Recurse into directories.")
    parser.add_argument("--depth", type=_positive_int, default=None, help="Stop recursing after N levels.")
    parser.add_argument("--tree", action="store_true", help="Recurse and draw a tree; combine with -l for columns.")
    parser.add_argument(
        "-d", "--directory-only", action="store_true", help="List directories themselves, not their contents."
    )
    layout = parser.add_mutually_exclusive_group()
    layout.add_argument("-l", "--long", dest="layout", action="store_const", const="long", help="Use long format.")
    layout.add_argument(
        "-1", "--oneline", dest="layout", action="store_const", const="oneline", help="One entry per line."
    )
    parser.add_argument("-x", "--across", action="store_true", help="Fill grid rows before columns.")
    parser.add_argument("--sort", choices=[key.value for key in SortKey], default="name", help="Sort key.")
    parser.add_argument("-S", dest="sort", action="store_const", const="size", help="Sort by size.")
    parser.add_argument("-t", dest="sort", action="store_const", const="time", help="Sort by modification time.")
    parser.add_argument("-X", dest="sort", action="store_const", const="extension", help="Sort by extension.")
    parser.add_argument("-r", "--reverse", action="store_true", help="Reverse the sort order.")
    parser.add_argument(
        "--group-dirs",
        choices=[grouping.value for grouping in DirGrouping],
        default="first",
        help="Where to place directories among siblings.",
    )
    parser.add_argument("--color", choices=WHEN_CHOICES, default="auto", help="When to use colors.")
    parser.add_argument(
        "--color-theme",
        default="dark",
        help=f"Color theme name ({', '.join(available_theme_names())}).",
    )
    parser.add_argument("--icon", choices=WHEN_CHOICES, default="auto", help="When to print icons.")
    parser.add_argument(
        "--icon-theme",
        choices=[IconTheme.FANCY.value, IconTheme.UNICODE.value],
        default="fancy",
        help="Icon glyph set.",
    )
    parser.add_argument(
        "-I",
        "--ignore-glob",
        action="append",
        default=[],
        metavar="PATTERN",
        help="Do not list names matching PATTERN (repeatable).",
    )
    parser.add_argument("--ignore-vcs", action="store_true", help="Hide version-control directories.")
    parser.add_argument(
        "-F", "--classify", action="store_true", help="Append an indicator (one of /@|=*) to names."
    )
    parser.add_argument("-L", "--dereference", action="store_true", help="Show information for symlink targets.")
    parser.add_argument("--total-size", action="store_true", help="Report recursive sizes for directories.")
    parser.add_argument(
        "--size",
        choices=[size_format.value for size_format in SizeFormat],
        default="default",
        help="How to display sizes.",
    )
    parser.add_argument("--date", type=_date_format, default="date", help="date, relative, iso or +FORMAT.")
    parser.add_argument("--width", type=_positive_int, default=None, help="Terminal width override.")
    parser.add_argument("--no-lscolors", action="store_true", help="Ignore the LS_COLORS environment variable.")
    parser.add_argument("--verbose", action="store_true", help="Log traversal details to stderr.")
    if defaults:
        parser.set_defaults(**defaults)
    return parser


def _enabled(when: str, is_tty: bool) -> bool:
    if when == "always":
        return True
    if when == "never":
        return False
    return is_tty


def _terminal_width(override: int | None, is_tty: bool) -> int | None:
    if override is not None:
        return override
    if not is_tty:
        return None
    return shutil.get_terminal_size((80, 24)).columns


def config_from_args(
    args: argparse.Namespace,
    *,
    is_tty: bool,
    file_data: Mapping[str, object] | None = None,
) -> ListingConfig:
    """Resolve parsed arguments and terminal state into a ``ListingConfig``."""
    file_data = file_data or {}
    layout = args.layout or "grid"
    long_format = layout == "long"
    if args.tree or layout == "tree":
        layout = "tree"
    elif layout == "grid" and not is_tty and args.width is None:
        layout = "oneline"
    return ListingConfig(
        recursive=args.recursive,
        max_depth=args.depth,
        follow_symlinks=args.dereference,
        sort_key=SortKey(args.sort),
        sort_order=SortOrder.DESCENDING if args.reverse else SortOrder.ASCENDING,
        show_hidden=args.all,
        pattern_filters=tuple(args.ignore_glob),
        display_mode=DisplayMode(layout),
        color_enabled=_enabled(args.color, is_tty),
        icon_enabled=_enabled(args.icon, is_tty),
        terminal_width=_terminal_width(args.width, is_tty),
        dir_grouping=DirGrouping(args.group_dirs),
        ignore_vcs=args.ignore_vcs,
        total_size=args.total_size,
        theme_name=args.color_theme,
        icon_theme=IconTheme(args.icon_theme),
        use_lscolors=not args.no_lscolors,
        size_format=SizeFormat(args.size),
        date_format=args.date,
        grid_direction=GridDirection.ACROSS if args.across else GridDirection.DOWN,
        long_format=long_format,
        directory_only=args.directory_only,
        classify=args.classify,
        theme_overrides=theme_overrides_from(file_data),
        extension_colors=extension_colors_from(file_data),
    )


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=f"{PROG}: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(
    argv: Sequence[str] | None = None,
    *,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    environ: Mapping[str, str] | None = None,
) -> None:
    """Parse CLI arguments, print the listing, and exit non-zero on failures.

    Missing roots exit with status 2; unreadable entries below a root exit
    with status 1 after the full listing is printed.
    """
    out = stdout if stdout is not None else sys.stdout
    err = stderr if stderr is not None else sys.stderr
    file_data = load_config()
    parser = build_parser(option_defaults(file_data))
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    is_tty = bool(getattr(out, "isatty", lambda: False)())
    config = config_from_args(args, is_tty=is_tty, file_data=file_data)
    result = run_listing(args.paths, config, environ=environ if environ is not None else os.environ)

    for root_error in result.root_errors:
        err.write(f"{PROG}: {root_error.describe()}\n")
    out.write(result.text)
    out.flush()

    if result.root_errors:
        raise SystemExit(EXIT_SERIOUS_TROUBLE)
    if result.entry_errors:
        raise SystemExit(EXIT_MINOR_PROBLEMS)


if __name__ == "__main__":
    main()
