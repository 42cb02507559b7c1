from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyls import config
from lazyls.listing import DirGrouping
from lazyls.render import DisplayMode
from lazyls.theme import StyleCategory


class LoadConfigTests(unittest.TestCase):
    def test_missing_file_yields_empty_config(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch("lazyls.config.CONFIG_PATH", Path(tmp) / "missing.json"):
                self.assertEqual(config.load_config(), {})

    def test_malformed_file_is_ignored_with_warning(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "lazyls.json"
            config_path.write_text("{not json", encoding="utf-8")
            with mock.patch("lazyls.config.CONFIG_PATH", config_path):
                with self.assertLogs("lazyls.config", level="WARNING"):
                    self.assertEqual(config.load_config(), {})

    def test_non_object_json_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "lazyls.json"
            config_path.write_text("[1, 2]", encoding="utf-8")
            with mock.patch("lazyls.config.CONFIG_PATH", config_path):
                with self.assertLogs("lazyls.config", level="WARNING"):
                    self.assertEqual(config.load_config(), {})

    def test_reads_json_object(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            config_path = Path(tmp) / "lazyls.json"
            config_path.write_text(json.dumps({"show_hidden": True}), encoding="utf-8")
            with mock.patch("lazyls.config.CONFIG_PATH", config_path):
                self.assertEqual(config.load_config(), {"show_hidden": True})


class OptionDefaultsTests(unittest.TestCase):
    def test_valid_keys_become_option_defaults(self) -> None:
        data = {
            "show_hidden": True,
            "sort": "size",
            "reverse": True,
            "group_dirs": "last",
            "display": "long",
            "color": {"when": "never", "theme": "light"},
            "icons": {"when": "always", "theme": "unicode"},
            "size": "short",
            "date": "+%Y",
            "ignore_globs": ["*.pyc"],
            "depth": 2,
            "classify": True,
        }
        defaults = config.option_defaults(data)
        self.assertEqual(
            defaults,
            {
                "all": True,
                "sort": "size",
                "reverse": True,
                "group_dirs": "last",
                "layout": "long",
                "color": "never",
                "color_theme": "light",
                "icon": "always",
                "icon_theme": "unicode",
                "size": "short",
                "date": "+%Y",
                "ignore_glob": ["*.pyc"],
                "depth": 2,
                "classify": True,
            },
        )

    def test_invalid_values_are_skipped_with_warnings(self) -> None:
        data = {"show_hidden": "yes", "sort": "random", "depth": 0, "ignore_globs": "*.pyc", "color": "red"}
        with self.assertLogs("lazyls.config", level="WARNING") as logs:
            defaults = config.option_defaults(data)
        self.assertEqual(defaults, {})
        self.assertEqual(len(logs.records), 5)

    def test_theme_overrides_and_extension_colors(self) -> None:
        data = {"theme_overrides": {"dir": 33}, "extension_colors": {".RS": "#ff0000", "bad": [1]}}
        self.assertEqual(config.theme_overrides_from(data), {StyleCategory.DIR: 33})
        with self.assertLogs("lazyls.config", level="WARNING"):
            self.assertEqual(config.extension_colors_from(data), {"rs": "#ff0000"})


class ListingConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        listing = config.ListingConfig()
        self.assertIs(listing.display_mode, DisplayMode.GRID)
        self.assertIs(listing.dir_grouping, DirGrouping.FIRST)
        self.assertFalse(listing.traversal_options().recursive)

    def test_tree_mode_implies_recursion(self) -> None:
        listing = config.ListingConfig(display_mode=DisplayMode.TREE, max_depth=2)
        options = listing.traversal_options()
        self.assertTrue(options.recursive)
        self.assertEqual(options.max_depth, 2)

    def test_filter_set_mirrors_options(self) -> None:
        listing = config.ListingConfig(show_hidden=True, pattern_filters=("*.o",), ignore_vcs=True)
        filters = listing.filter_set()
        self.assertTrue(filters.show_hidden)
        self.assertEqual(filters.ignore_globs, ("*.o",))
        self.assertTrue(filters.ignore_vcs)


if __name__ == "__main__":
    unittest.main()
