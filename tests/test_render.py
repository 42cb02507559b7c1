"""Layout renderer tests: tree prefixes, long format, sections, and markers."""

from __future__ import annotations

import sys
import unittest
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from unittest import mock

from lazyls.ansi import strip_ansi
from lazyls.entry_model import EntryRecord, FileKind, LinkTarget, Owner, Timestamps, error_marker, permissions_from_mode
from lazyls.entry_model.owner import clear_owner_cache
from lazyls.errors import EntryError, MetadataErrorKind, RenderErrorKind, TraversalErrorKind
from lazyls.listing import SortKey, SortOrder, sort_entries
from lazyls.render import DisplayMode, RenderContext, SizeFormat, build_display_nodes, render_nodes
from lazyls.render.blocks import format_date, format_relative, format_size, permission_block, sanitize_name
from lazyls.render.tree import BLANK, BRANCH, CORNER, PIPE, tree_prefix
from lazyls.style import StyleResolver
from lazyls.theme import DARK_THEME, PLAIN_THEME

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _entry(path: str, kind: FileKind = FileKind.REGULAR, size: int = 0, mode: int = 0o644, **kwargs) -> EntryRecord:
    parts = path.split("/")
    depth = len(parts) - 1
    return EntryRecord(
        path=path,
        name=parts[-1] if depth else path,
        kind=kind,
        size=size,
        permissions=permissions_from_mode(mode, execute_supported=True),
        timestamps=Timestamps(modified=NOW - timedelta(days=2)),
        owner=Owner(uid=0, gid=0),
        depth=depth,
        parent="/".join(parts[:-1]) if depth else None,
        **kwargs,
    )


def _nodes(entries: list[EntryRecord], resolver: StyleResolver, max_depth: int | None = None):
    def order(siblings: list[EntryRecord]) -> list[EntryRecord]:
        return sort_entries(siblings, SortKey.NAME, SortOrder.ASCENDING)

    def expands(entry: EntryRecord) -> bool:
        return max_depth is None or entry.depth < max_depth

    return build_display_nodes(entries, resolver, order=order, expands=expands)


class _RenderCase(unittest.TestCase):
    def setUp(self) -> None:
        self.resolver = StyleResolver(PLAIN_THEME, now=NOW)
        self.context = RenderContext(resolver=self.resolver)

    def render(self, entries: list[EntryRecord], mode: DisplayMode, width: int | None = 80):
        return render_nodes(_nodes(entries, self.resolver), mode, width, self.context)


class TreeTests(_RenderCase):
    def test_prefix_segments(self) -> None:
        self.assertEqual(tree_prefix([], False), BRANCH)
        self.assertEqual(tree_prefix([False, True], True), PIPE + BLANK + CORNER)

    def test_tree_output(self) -> None:
        entries = [
            _entry("root", FileKind.DIRECTORY),
            _entry("root/b", FileKind.DIRECTORY),
            _entry("root/b/inner.txt"),
            _entry("root/a.txt"),
            _entry("root/c.txt"),
        ]
        text, errors = self.render(entries, DisplayMode.TREE)
        self.assertEqual(errors, [])
        self.assertEqual(
            text,
            "root\n"
            "├── a.txt\n"
            "├── b\n"
            "│   └── inner.txt\n"
            "└── c.txt\n",
        )

    def test_single_child_gets_corner(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/only.txt")]
        text, _errors = self.render(entries, DisplayMode.TREE)
        self.assertEqual(text, "root\n└── only.txt\n")

    def test_prefix_depth_matches_ancestor_count(self) -> None:
        entries = [
            _entry("r", FileKind.DIRECTORY),
            _entry("r/a", FileKind.DIRECTORY),
            _entry("r/a/b", FileKind.DIRECTORY),
            _entry("r/a/b/c.txt"),
            _entry("r/a/b/d.txt"),
            _entry("r/a/e.txt"),
            _entry("r/z.txt"),
        ]
        nodes = _nodes(entries, self.resolver)
        text, _errors = render_nodes(nodes, DisplayMode.TREE, 80, self.context)
        lines = text.splitlines()
        flat = [node for root in nodes for node in root.iter_preorder()]
        self.assertEqual(len(lines), len(flat))
        for line, node in zip(lines, flat):
            segments = 0
            rest = line
            while rest[:4] in (BRANCH, CORNER, PIPE, BLANK):
                segments += 1
                rest = rest[4:]
            self.assertEqual(segments, node.depth)

        corners_by_parent: dict[str, int] = {}
        for root in nodes:
            for node in root.iter_preorder():
                if node.children:
                    corners_by_parent[node.entry.path] = 0
        for line, node in zip(lines, flat):
            if node.depth and strip_ansi(line).lstrip("│ ").startswith("└── "):
                corners_by_parent[node.entry.parent] += 1
        self.assertTrue(all(count == 1 for count in corners_by_parent.values()))

    def test_tree_edges_are_colored_with_theme(self) -> None:
        resolver = StyleResolver(DARK_THEME, now=NOW)
        context = RenderContext(resolver=resolver)
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/x.txt")]
        text, _errors = render_nodes(_nodes(entries, resolver), DisplayMode.TREE, 80, context)
        self.assertIn("\033[38;5;245m└── \033[0m", text)


class LongFormatTests(_RenderCase):
    def test_columns_align_and_sizes_right_align(self) -> None:
        entries = [
            _entry("root", FileKind.DIRECTORY, mode=0o755),
            _entry("root/big.bin", size=2048),
            _entry("root/s.txt", size=7),
        ]
        context = RenderContext(resolver=self.resolver, size_format=SizeFormat.BYTES, date_format="iso")
        text, _errors = render_nodes(_nodes(entries, self.resolver), DisplayMode.LONG, 80, context)
        lines = text.splitlines()
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith(".rw-r--r-- "))
        self.assertTrue(lines[0].endswith(" big.bin"))
        self.assertTrue(lines[1].endswith(" s.txt"))
        self.assertIn(" 2048 ", lines[0])
        self.assertIn("    7 ", lines[1])
        self.assertEqual(lines[0].index("big.bin"), lines[1].index("s.txt"))

    def test_symlink_target_is_shown(self) -> None:
        target = _entry("root/real.txt")
        entries = [
            _entry("root", FileKind.DIRECTORY),
            _entry("root/link", FileKind.SYMLINK, mode=0o777, link=LinkTarget(path="real.txt", entry=target)),
        ]
        text, _errors = self.render(entries, DisplayMode.LONG)
        self.assertTrue(text.rstrip("\n").endswith("link ⇒ real.txt"))

    def test_marker_renders_label(self) -> None:
        error = EntryError(TraversalErrorKind.PERMISSION_DENIED, "./secret")
        entries = [
            _entry("root", FileKind.DIRECTORY),
            error_marker(error, name="secret", depth=1, parent="root"),
        ]
        text, _errors = self.render(entries, DisplayMode.LONG)
        self.assertIn("<permission denied: ./secret>", text)


class LongTreeTests(_RenderCase):
    def test_columns_align_within_each_sibling_group(self) -> None:
        entries = [
            _entry("root", FileKind.DIRECTORY, mode=0o755),
            _entry("root/big.bin", size=2048),
            _entry("root/sub", FileKind.DIRECTORY, mode=0o755),
            _entry("root/sub/s.txt", size=7),
        ]
        context = RenderContext(resolver=self.resolver, size_format=SizeFormat.BYTES, date_format="iso")
        text, errors = render_nodes(
            _nodes(entries, self.resolver), DisplayMode.TREE, 80, context, long_format=True
        )
        lines = text.splitlines()

        self.assertEqual(errors, [])
        self.assertEqual(len(lines), 4)
        self.assertTrue(lines[0].startswith("drwxr-xr-x "))
        self.assertTrue(lines[0].endswith(" root"))
        self.assertTrue(lines[1].startswith(BRANCH + ".rw-r--r-- "))
        self.assertTrue(lines[2].startswith(CORNER + "drwxr-xr-x "))
        self.assertTrue(lines[3].startswith(BLANK + CORNER + ".rw-r--r-- "))
        self.assertIn(" 2048 ", lines[1])
        self.assertIn("    - ", lines[2])
        self.assertEqual(lines[1].index("big.bin"), lines[2].index("sub"))
        self.assertIn(" 7 ", lines[3])
        self.assertTrue(lines[3].endswith(" s.txt"))

    def test_plain_tree_ignores_long_columns_by_default(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/a.txt")]
        text, _errors = self.render(entries, DisplayMode.TREE)
        self.assertEqual(text, "root\n└── a.txt\n")


class ClassifyTests(_RenderCase):
    def test_indicators_follow_kind_and_execute_bits(self) -> None:
        target = _entry("root/note.txt")
        entries = [
            _entry("root", FileKind.DIRECTORY),
            _entry("root/dir", FileKind.DIRECTORY, mode=0o755),
            _entry("root/link", FileKind.SYMLINK, mode=0o777, link=LinkTarget(path="note.txt", entry=target)),
            _entry("root/note.txt"),
            _entry("root/pipe", FileKind.FIFO),
            _entry("root/run.sh", mode=0o755),
        ]
        context = RenderContext(resolver=self.resolver, classify=True)
        text, _errors = render_nodes(_nodes(entries, self.resolver), DisplayMode.ONELINE, 80, context)
        self.assertEqual(text, "dir/\nlink@\nnote.txt\npipe|\nrun.sh*\n")

    def test_indicator_precedes_link_target_in_long_format(self) -> None:
        target = _entry("root/real.txt")
        entries = [
            _entry("root", FileKind.DIRECTORY),
            _entry("root/link", FileKind.SYMLINK, mode=0o777, link=LinkTarget(path="real.txt", entry=target)),
        ]
        context = RenderContext(resolver=self.resolver, classify=True)
        text, _errors = render_nodes(_nodes(entries, self.resolver), DisplayMode.LONG, 80, context)
        self.assertTrue(text.rstrip("\n").endswith("link@ ⇒ real.txt"))

    def test_indicators_are_off_by_default(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/dir", FileKind.DIRECTORY)]
        text, _errors = self.render(entries, DisplayMode.ONELINE)
        self.assertEqual(text, "dir\n")


@unittest.skipIf(sys.platform == "win32", "owner names are unsupported on Windows")
class OwnerColumnTests(_RenderCase):
    def setUp(self) -> None:
        super().setUp()
        clear_owner_cache()
        self.addCleanup(clear_owner_cache)

    def test_unknown_owner_shows_id_and_is_recorded_once(self) -> None:
        stranger = Owner(uid=54321, gid=54322)
        entries = [
            _entry("root", FileKind.DIRECTORY),
            replace(_entry("root/a"), owner=stranger),
            replace(_entry("root/b"), owner=stranger),
        ]
        with mock.patch("lazyls.entry_model.owner.pwd") as fake_pwd, mock.patch(
            "lazyls.entry_model.owner.grp"
        ) as fake_grp:
            fake_pwd.getpwuid.side_effect = KeyError(54321)
            fake_grp.getgrgid.side_effect = KeyError(54322)
            text, errors = self.render(entries, DisplayMode.LONG)

        for line in text.splitlines():
            self.assertIn(" 54321 54322 ", line)
        self.assertEqual(
            [(error.kind, error.path) for error in errors],
            [
                (MetadataErrorKind.UNRESOLVABLE_OWNER, "uid 54321"),
                (MetadataErrorKind.UNRESOLVABLE_OWNER, "gid 54322"),
            ],
        )


class SectionTests(_RenderCase):
    def test_single_directory_has_no_heading(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/a"), _entry("root/b")]
        text, _errors = self.render(entries, DisplayMode.ONELINE)
        self.assertEqual(text, "a\nb\n")

    def test_files_first_then_headed_sections(self) -> None:
        first = [_entry("d1", FileKind.DIRECTORY), _entry("d1/x")]
        second = [_entry("d2", FileKind.DIRECTORY), _entry("d2/y")]
        loose = [_entry("f.txt")]
        nodes = _nodes(loose, self.resolver) + _nodes(first, self.resolver) + _nodes(second, self.resolver)
        text, _errors = render_nodes(nodes, DisplayMode.ONELINE, 80, self.context)
        self.assertEqual(text, "f.txt\n\nd1:\nx\n\nd2:\ny\n")

    def test_recursive_listing_heads_every_subdirectory(self) -> None:
        entries = [
            _entry("root", FileKind.DIRECTORY),
            _entry("root/sub", FileKind.DIRECTORY),
            _entry("root/sub/inner"),
            _entry("root/top"),
        ]
        text, _errors = self.render(entries, DisplayMode.ONELINE)
        self.assertEqual(text, "sub\ntop\n\nroot/sub:\ninner\n")

    def test_unreadable_directory_marker_renders_inline(self) -> None:
        error = EntryError(TraversalErrorKind.PERMISSION_DENIED, "root/locked")
        entries = [
            _entry("root", FileKind.DIRECTORY),
            _entry("root/locked", FileKind.DIRECTORY),
            error_marker(error, name="locked", depth=2, parent="root/locked"),
            _entry("root/open.txt"),
        ]
        text, _errors = self.render(entries, DisplayMode.ONELINE)
        self.assertEqual(text, "locked\nopen.txt\n\nroot/locked:\n<permission denied: root/locked>\n")

    def test_grid_without_width_records_invalid_width_once(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/a"), _entry("root/b")]
        text, errors = self.render(entries, DisplayMode.GRID, width=None)
        self.assertEqual(text, "a\nb\n")
        self.assertEqual([error.kind for error in errors], [RenderErrorKind.INVALID_WIDTH])

    def test_grid_flows_into_columns(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY)] + [_entry(f"root/{name}") for name in "abcd"]
        text, errors = self.render(entries, DisplayMode.GRID, width=4)
        self.assertEqual(errors, [])
        self.assertEqual(text, "a  c\nb  d\n")

    def test_control_characters_are_sanitized(self) -> None:
        entries = [_entry("root", FileKind.DIRECTORY), _entry("root/bad\x1b[31mname")]
        text, errors = self.render(entries, DisplayMode.ONELINE)
        self.assertEqual(text, "bad?[31mname\n")
        self.assertEqual([error.kind for error in errors], [RenderErrorKind.ENCODING])


class BlockFormattingTests(unittest.TestCase):
    def test_format_size(self) -> None:
        self.assertEqual(format_size(512, SizeFormat.DEFAULT), "512 B")
        self.assertEqual(format_size(4300, SizeFormat.DEFAULT), "4.2 KB")
        self.assertEqual(format_size(4300, SizeFormat.SHORT), "4.2K")
        self.assertEqual(format_size(50 * 1024 * 1024, SizeFormat.DEFAULT), "50 MB")
        self.assertEqual(format_size(4300, SizeFormat.BYTES), "4300")

    def test_relative_dates(self) -> None:
        self.assertEqual(format_relative(NOW, NOW), "now")
        self.assertEqual(format_relative(NOW - timedelta(hours=3), NOW), "3 hours ago")
        self.assertEqual(format_relative(NOW - timedelta(days=1), NOW), "1 day ago")
        self.assertEqual(format_date(None, "date", NOW), "-")

    def test_custom_date_format(self) -> None:
        moment = datetime(2024, 1, 2, 3, 4, tzinfo=timezone.utc)
        self.assertEqual(format_date(moment, "+%Y", NOW), moment.astimezone().strftime("%Y"))

    def test_permission_string_special_bits(self) -> None:
        resolver = StyleResolver(PLAIN_THEME, now=NOW)
        self.assertEqual(permission_block(_entry("x", mode=0o4755), resolver), ".rwsr-xr-x")
        self.assertEqual(permission_block(_entry("x", mode=0o4644), resolver), ".rwSr--r--")
        self.assertEqual(permission_block(_entry("d", FileKind.DIRECTORY, mode=0o1777), resolver), "drwxrwxrwt")

    def test_sanitize_name_replaces_surrogates(self) -> None:
        self.assertEqual(sanitize_name("caf\udce9"), ("caf?", True))
        self.assertEqual(sanitize_name("plain"), ("plain", False))


if __name__ == "__main__":
    unittest.main()
