"""End-to-end listing tests over real temporary directory trees."""

from __future__ import annotations

import os
import sys
import tempfile
import unittest
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from unittest import mock

from lazyls.ansi import strip_ansi
from lazyls.config import ListingConfig
from lazyls.entry_model import traversal as traversal_mod
from lazyls.icons import FANCY_GLYPHS
from lazyls.listing import DirGrouping, SortKey, run_listing
from lazyls.render import DisplayMode

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
PLAIN = ListingConfig(color_enabled=False, icon_enabled=False, display_mode=DisplayMode.ONELINE, now=NOW)


def _populate(root: Path) -> None:
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("print('hi')\n", encoding="utf-8")
    (root / "src" / "deep").mkdir()
    (root / "src" / "deep" / "leaf.txt").write_text("leaf", encoding="utf-8")
    (root / "README.md").write_text("# readme\n", encoding="utf-8")
    (root / "archive.tar").write_bytes(b"\0" * 300)
    (root / ".git").mkdir()
    for path in root.rglob("*"):
        os.utime(path, (1_700_000_000, 1_700_000_000))


class PipelineTests(unittest.TestCase):
    def test_output_is_byte_identical_across_runs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            configs = [
                ListingConfig(terminal_width=40, now=NOW),
                ListingConfig(display_mode=DisplayMode.LONG, recursive=True, now=NOW),
                ListingConfig(display_mode=DisplayMode.TREE, show_hidden=True, now=NOW),
                ListingConfig(sort_key=SortKey.SIZE, terminal_width=12, now=NOW, color_enabled=False),
            ]
            for listing in configs:
                with self.subTest(mode=listing.display_mode):
                    first = run_listing([tmp], listing, environ={})
                    second = run_listing([tmp], listing, environ={})
                    self.assertEqual(first.text, second.text)
                    self.assertNotEqual(first.text, "")

    def test_recursive_listing_with_depth_bound(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            result = run_listing([tmp], replace(PLAIN, recursive=True, max_depth=1), environ={})
            self.assertEqual(result.text, "src\nREADME.md\narchive.tar\n")

    def test_tree_listing(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            result = run_listing([tmp], replace(PLAIN, display_mode=DisplayMode.TREE), environ={})
            self.assertEqual(
                result.text,
                f"{tmp}\n"
                "├── src\n"
                "│   ├── deep\n"
                "│   │   └── leaf.txt\n"
                "│   └── main.py\n"
                "├── README.md\n"
                "└── archive.tar\n",
            )

    def test_ignore_vcs_and_globs(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            listing = replace(PLAIN, show_hidden=True, ignore_vcs=True, pattern_filters=("*.tar",))
            result = run_listing([tmp], listing, environ={})
            self.assertEqual(result.text, "src\nREADME.md\n")

    def test_permission_denied_subtree_lists_siblings(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            denied = os.path.join(tmp, "src")
            real_scandir = os.scandir

            def fake_scandir(path):
                if os.fspath(path) == denied:
                    raise PermissionError(13, "Permission denied", denied)
                return real_scandir(path)

            with mock.patch.object(traversal_mod.os, "scandir", side_effect=fake_scandir):
                result = run_listing([tmp], replace(PLAIN, recursive=True), environ={})

            self.assertEqual(
                result.text,
                "src\nREADME.md\narchive.tar\n\n" f"{denied}:\n" f"<permission denied: {denied}>\n",
            )
            self.assertEqual(len(result.entry_errors), 1)
            self.assertEqual(result.root_errors, ())

    def test_missing_root_is_reported_and_others_still_list(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            missing = os.path.join(tmp, "missing")
            readme = os.path.join(tmp, "README.md")
            result = run_listing([missing, readme], PLAIN, environ={})
            self.assertEqual(result.text, f"{readme}\n")
            self.assertEqual([error.path for error in result.root_errors], [missing])

    def test_color_and_icons(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            listing = ListingConfig(display_mode=DisplayMode.ONELINE, now=NOW)
            result = run_listing([tmp], listing, environ={})
            self.assertIn(f"{FANCY_GLYPHS['folder']} \033[38;5;26msrc\033[0m", result.text)
            self.assertIn("\033[38;5;167marchive.tar\033[0m", result.text)
            self.assertEqual(
                strip_ansi(result.text),
                f"{FANCY_GLYPHS['folder']} src\n"
                f"{FANCY_GLYPHS['markdown']} README.md\n"
                f"{FANCY_GLYPHS['archive']} archive.tar\n",
            )

    def test_ls_colors_environment_is_honored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            listing = ListingConfig(display_mode=DisplayMode.ONELINE, icon_enabled=False, now=NOW)
            result = run_listing([tmp], listing, environ={"LS_COLORS": "di=01;34"})
            self.assertIn("\033[01;34msrc\033[0m", result.text)
            ignored = run_listing([tmp], replace(listing, use_lscolors=False), environ={"LS_COLORS": "di=01;34"})
            self.assertNotIn("\033[01;34m", ignored.text)

    def test_no_color_output_has_no_escapes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            listing = replace(PLAIN, display_mode=DisplayMode.LONG, recursive=True)
            result = run_listing([tmp], listing, environ={"LS_COLORS": "di=01;34"})
            self.assertNotIn("\033", result.text)

    def test_total_size_sorts_directories_by_contents(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            _populate(Path(tmp))
            listing = replace(PLAIN, sort_key=SortKey.SIZE, total_size=True)
            result = run_listing([tmp], replace(listing, dir_grouping=DirGrouping.NONE), environ={})
            self.assertEqual(result.text, "README.md\nsrc\narchive.tar\n")

    @unittest.skipIf(sys.platform == "win32", "symlinks need privileges on Windows")
    def test_broken_symlink_renders_in_long_format(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            os.symlink("gone.txt", Path(tmp) / "dangling")
            listing = replace(PLAIN, display_mode=DisplayMode.LONG)
            result = run_listing([tmp], listing, environ={})
            self.assertTrue(result.text.rstrip("\n").endswith("dangling ⇒ gone.txt"))
            self.assertTrue(result.text.startswith("l"))


if __name__ == "__main__":
    unittest.main()
