"""Icon names for entries and the glyph tables that draw them.

Icon selection happens in two steps: an entry maps to an icon *name* (by file
name, extension, shebang interpreter, or kind) and an ``Icons`` glyph table
maps the name to a codepoint. ``FANCY`` glyphs need a Nerd Font; ``UNICODE``
only draws folders and files with plain Unicode symbols.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType

from .entry_model import EntryRecord, FileKind

SHEBANG_READ_BYTES = 128


class IconTheme(Enum):
    NONE = "none"
    FANCY = "fancy"
    UNICODE = "unicode"


FANCY_GLYPHS: Mapping[str, str] = MappingProxyType(
    {
        "folder": "\uf115",
        "file": "\uf016",
        "symlink-dir": "\uf482",
        "symlink-file": "\uf481",
        "socket": "\uf6a7",
        "pipe": "\uf731",
        "char-device": "\ue601",
        "block-device": "\ufc29",
        "special": "\uf2dc",
        "error": "\uf071",
        "archive": "\uf410",
        "image": "\uf1c5",
        "audio": "\uf001",
        "video": "\uf03d",
        "font": "\uf031",
        "playlist": "\uf910",
        "python": "\ue606",
        "rust": "\ue7a8",
        "javascript": "\ue74e",
        "typescript": "\ue628",
        "react": "\ue7ba",
        "json": "\ue60b",
        "markdown": "\uf48a",
        "shell": "\uf489",
        "config": "\ue615",
        "c": "\ue61e",
        "cpp": "\ue61d",
        "header": "\uf0fd",
        "go": "\ue626",
        "java": "\ue204",
        "ruby": "\ue21e",
        "html": "\uf13b",
        "css": "\ue749",
        "sass": "\ue603",
        "less": "\ue758",
        "php": "\ue73d",
        "lua": "\ue620",
        "perl": "\ue769",
        "haskell": "\ue777",
        "swift": "\ue755",
        "scala": "\ue737",
        "dart": "\ue798",
        "elixir": "\ue62d",
        "erlang": "\ue7b1",
        "clojure": "\ue768",
        "csharp": "\uf81a",
        "database": "\uf1c0",
        "sqlite": "\ue7c4",
        "diff": "\uf440",
        "document": "\uf1c2",
        "spreadsheet": "\uf1c3",
        "presentation": "\uf1c4",
        "pdf": "\uf1c1",
        "text": "\uf15c",
        "log": "\uf18d",
        "lock": "\uf023",
        "windows": "\uf17a",
        "vim": "\ue62b",
        "xml": "\ue619",
        "git": "\uf1d3",
        "github": "\uf408",
        "nix": "\uf313",
        "docker": "\uf308",
        "r": "\uf25d",
        "julia": "\ue624",
        "vue": "\ufd42",
        "tex": "\ue600",
        "ebook": "\ue28b",
        "env": "\uf462",
        "node": "\ue718",
        "vscode": "\ue70c",
        "trash": "\uf1f8",
        "apple": "\uf179",
    }
)

UNICODE_GLYPHS: Mapping[str, str] = MappingProxyType(
    {
        "folder": "\U0001f5c1",
        "file": "\U0001f5cb",
    }
)

ICON_NAME_BY_FILENAME: Mapping[str, str] = MappingProxyType(
    {
        ".trash": "trash",
        ".bashrc": "shell",
        ".bash_profile": "shell",
        ".zshrc": "shell",
        ".git": "git",
        ".github": "github",
        ".gitignore": "git",
        ".gitmodules": "git",
        ".gitattributes": "git",
        ".vimrc": "vim",
        ".vscode": "vscode",
        ".ds_store": "apple",
        ".env": "env",
        "dockerfile": "docker",
        "docker-compose.yml": "docker",
        "gemfile": "ruby",
        "rakefile": "ruby",
        "license": "markdown",
        "readme": "markdown",
        "makefile": "shell",
        "node_modules": "node",
        "cargo.lock": "lock",
    }
)

_EXTENSION_GROUPS: dict[str, tuple[str, ...]] = {
    "archive": ("7z", "bz2", "gz", "lz", "rar", "tar", "tgz", "xz", "zip", "zst"),
    "image": ("bmp", "gif", "ico", "jpeg", "jpg", "png", "svg", "tiff", "webp", "psd"),
    "audio": ("flac", "m4a", "mp3", "ogg", "opus", "wav", "wma"),
    "video": ("avi", "flv", "mkv", "mov", "mp4", "ogv", "webm", "wmv"),
    "font": ("eot", "otf", "ttc", "ttf", "woff", "woff2"),
    "playlist": ("m3u", "m3u8", "pls", "wpl"),
    "python": ("py", "pyc", "pyi", "pyw", "ipynb"),
    "rust": ("rs", "rlib"),
    "javascript": ("js", "mjs", "cjs"),
    "typescript": ("ts",),
    "react": ("jsx", "tsx"),
    "json": ("json", "yaml", "yml", "avro", "properties", "toml"),
    "markdown": ("md", "markdown", "mkd", "rdoc", "rmd", "rst", "readme", "license"),
    "shell": ("sh", "bash", "zsh", "fish", "csh", "ksh", "awk", "ps1"),
    "config": ("cfg", "conf", "ini", "editorconfig"),
    "c": ("c",),
    "cpp": ("cpp", "cc", "cxx", "c++", "cp"),
    "header": ("h", "hpp", "hxx"),
    "go": ("go",),
    "java": ("java", "jar", "class"),
    "ruby": ("rb", "gemspec", "erb", "ru"),
    "html": ("htm", "html"),
    "css": ("css", "scss"),
    "sass": ("sass",),
    "less": ("less",),
    "php": ("php",),
    "lua": ("lua",),
    "perl": ("pl", "pm"),
    "haskell": ("hs", "lhs"),
    "swift": ("swift",),
    "scala": ("scala",),
    "dart": ("dart",),
    "elixir": ("ex", "exs"),
    "erlang": ("erl",),
    "clojure": ("clj", "cljs"),
    "csharp": ("cs", "csproj", "csx"),
    "database": ("db", "sql", "dump"),
    "sqlite": ("sqlite", "sqlite3"),
    "diff": ("diff", "patch"),
    "document": ("doc", "docx", "odt", "gdoc"),
    "spreadsheet": ("csv", "xls", "xlsx", "ods", "gsheet"),
    "presentation": ("ppt", "pptx", "odp", "gslides"),
    "pdf": ("pdf",),
    "text": ("txt",),
    "log": ("log",),
    "lock": ("lock",),
    "windows": ("bat", "exe", "dll"),
    "vim": ("vim",),
    "xml": ("xml", "xul"),
    "nix": ("nix",),
    "r": ("r", "rdata", "rds"),
    "julia": ("jl",),
    "vue": ("vue",),
    "tex": ("tex",),
    "ebook": ("epub", "mobi"),
}

ICON_NAME_BY_EXTENSION: Mapping[str, str] = MappingProxyType(
    {extension: icon_name for icon_name, extensions in _EXTENSION_GROUPS.items() for extension in extensions}
)

_KIND_ICON_NAMES = {
    FileKind.DIRECTORY: "folder",
    FileKind.SOCKET: "socket",
    FileKind.FIFO: "pipe",
    FileKind.CHAR_DEVICE: "char-device",
    FileKind.BLOCK_DEVICE: "block-device",
    FileKind.UNKNOWN: "special",
}


def icon_name_for_interpreter(command: str) -> str | None:
    """Map a shebang interpreter (``python3``, ``bash``...) to an icon name."""
    if command in ICON_NAME_BY_EXTENSION:
        return ICON_NAME_BY_EXTENSION[command]
    if command.endswith("sh"):
        return "shell"
    if command.startswith("python"):
        return "python"
    if command.startswith("node"):
        return "javascript"
    if command.startswith("perl"):
        return "perl"
    if command.startswith("ruby"):
        return "ruby"
    return None


def shebang_interpreter(path: str) -> str | None:
    """Return the interpreter named on a ``#!`` first line, if any."""
    try:
        with open(path, "rb") as handle:
            head = handle.read(SHEBANG_READ_BYTES)
    except OSError:
        return None
    if not head.startswith(b"#!"):
        return None
    line = head[2:].split(b"\n", 1)[0].decode("utf-8", errors="replace").strip()
    last = line.rsplit("/", 1)[-1]
    words = last.split()
    if not words:
        return None
    if words[0] == "env":
        # `#!/usr/bin/env python3`
        return words[-1] if len(words) > 1 else None
    return words[0]


def icon_name_for_entry(entry: EntryRecord, *, read_shebang: bool = True) -> str | None:
    """Return the icon name an entry asks for, or ``None`` for the category default."""
    if entry.is_marker:
        return "error"
    if entry.kind is FileKind.SYMLINK:
        return "symlink-dir" if entry.points_to_dir else "symlink-file"
    if entry.kind in _KIND_ICON_NAMES:
        return _KIND_ICON_NAMES[entry.kind]

    lowered = entry.name.lower()
    if lowered in ICON_NAME_BY_FILENAME:
        return ICON_NAME_BY_FILENAME[lowered]
    extension = entry.extension
    if extension:
        return ICON_NAME_BY_EXTENSION.get(extension)
    if read_shebang:
        command = shebang_interpreter(entry.path)
        if command:
            return icon_name_for_interpreter(command)
    return None


class Icons:
    """Icon-name to glyph lookup for one icon theme."""

    def __init__(self, theme: IconTheme = IconTheme.FANCY, glyphs: Mapping[str, str] | None = None) -> None:
        self.theme = theme
        if glyphs is not None:
            self._glyphs = MappingProxyType(dict(glyphs))
        elif theme is IconTheme.UNICODE:
            self._glyphs = UNICODE_GLYPHS
        else:
            self._glyphs = FANCY_GLYPHS

    @property
    def enabled(self) -> bool:
        return self.theme is not IconTheme.NONE

    def glyph(self, icon_name: str | None) -> str | None:
        """Return the glyph for ``icon_name``; unknown names draw the file glyph."""
        if not self.enabled:
            return None
        if icon_name is not None and icon_name in self._glyphs:
            return self._glyphs[icon_name]
        return self._glyphs.get("file")


__all__ = [
    "IconTheme",
    "Icons",
    "FANCY_GLYPHS",
    "UNICODE_GLYPHS",
    "ICON_NAME_BY_FILENAME",
    "ICON_NAME_BY_EXTENSION",
    "icon_name_for_interpreter",
    "shebang_interpreter",
    "icon_name_for_entry",
]
