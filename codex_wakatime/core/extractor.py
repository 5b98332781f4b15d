"""File activity extraction from assistant messages.

Each matcher is a regex over the raw message yielding (path, access) pairs.
Results are folded through a single merge where WRITE absorbs READ, so a
path mentioned under a write verb stays a write no matter where the read
mention appears in the text.

Matchers:
- code block header: ```ts:src/index.ts
- backtick path with extension: `src/foo/bar.ts`
- quoted path with extension: "src/file.ts" or 'src/file.ts'
- action verb + path: Created src/new.ts, Read `README.md`
"""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum


class Access(Enum):
    """How a file was touched."""

    READ = "read"
    WRITE = "write"

    def merge(self, other: Access) -> Access:
        """Combine two observations of the same path; WRITE is absorbing."""
        if self is Access.WRITE or other is Access.WRITE:
            return Access.WRITE
        return Access.READ


@dataclass(frozen=True, slots=True)
class ExtractedFile:
    """A file referenced by the assistant.

    Attributes:
        path: Absolute, normalized path.
        is_write: True if any mention used a write verb.
    """

    path: str
    is_write: bool


@dataclass(frozen=True)
class Matcher:
    """One signal class: a pattern whose first group captures a path."""

    name: str
    pattern: re.Pattern[str]
    access: Access

    def scan(self, message: str) -> Iterator[tuple[str, Access]]:
        for match in self.pattern.finditer(message):
            candidate = match.group(1)
            if candidate:
                yield candidate, self.access


WRITE_VERBS = (
    "Create",
    "Created",
    "Modify",
    "Modified",
    "Update",
    "Updated",
    "Write",
    "Wrote",
    "Edit",
    "Edited",
    "Delete",
    "Deleted",
)
READ_VERBS = ("Read", "List")


# Extensions are ASCII; whitespace around paths may be any Unicode space
_EXTENSION = "[A-Za-z0-9_]{1,6}"


def _verb_pattern(verbs: Iterable[str]) -> re.Pattern[str]:
    alternation = "|".join(verbs)
    return re.compile(
        rf"(?:{alternation})\s+`?([^\s`]+\.{_EXTENSION})`?",
        re.IGNORECASE,
    )


CODE_BLOCK_HEADER = Matcher(
    "code_block_header", re.compile(r"```[A-Za-z0-9_]*:([^\n`]+)"), Access.READ
)
BACKTICK_PATH = Matcher(
    "backtick_path", re.compile(rf"`([^`\s]+\.{_EXTENSION})`"), Access.READ
)
QUOTED_PATH = Matcher(
    "quoted_path", re.compile(rf"[\"']([^\"'\s]+\.{_EXTENSION})[\"']"), Access.READ
)
WRITE_ACTION = Matcher("write_action", _verb_pattern(WRITE_VERBS), Access.WRITE)
READ_ACTION = Matcher("read_action", _verb_pattern(READ_VERBS), Access.READ)
# Presence only: one pass over both verb sets keeps mentions in text order
ANY_ACTION = Matcher("any_action", _verb_pattern(WRITE_VERBS + READ_VERBS), Access.READ)

# Write pass first, then the read-oriented signal classes
CLASSIFYING_MATCHERS: tuple[Matcher, ...] = (
    WRITE_ACTION,
    CODE_BLOCK_HEADER,
    BACKTICK_PATH,
    QUOTED_PATH,
    READ_ACTION,
)

PRESENCE_MATCHERS: tuple[Matcher, ...] = (
    CODE_BLOCK_HEADER,
    BACKTICK_PATH,
    ANY_ACTION,
    QUOTED_PATH,
)

MAX_EXTENSION_LENGTH = 6
_INVALID_CHARS = re.compile(r"[<>|?*]")

TRACKABLE_EXTENSIONS = frozenset(
    {
        # JavaScript/TypeScript
        "js", "ts", "jsx", "tsx", "mjs", "cjs", "mts", "cts",
        # Web
        "html", "htm", "css", "scss", "sass", "less", "vue", "svelte",
        # Data/Config
        "json", "yaml", "yml", "toml", "xml", "csv",
        # Programming languages
        "py", "rb", "go", "rs", "java", "kt", "kts", "scala",
        "c", "cpp", "cc", "cxx", "h", "hpp", "cs", "fs", "swift", "m", "mm",
        # Shell/Scripts
        "sh", "bash", "zsh", "fish", "ps1", "bat", "cmd",
        # Documentation
        "md", "mdx", "rst", "txt",
        # Other
        "sql", "graphql", "gql", "proto", "env", "lock", "dockerfile",
    }
)


def _extension(path: str) -> str:
    return os.path.splitext(os.path.basename(path))[1][1:].lower()


def is_valid_file_path(path: str) -> bool:
    """Check if a raw match looks like a file path.

    Unknown extensions are accepted; only the length is bounded.
    """
    if not path:
        return False
    if "://" in path:
        return False
    if _INVALID_CHARS.search(path):
        return False
    ext = _extension(path.strip())
    return 0 < len(ext) <= MAX_EXTENSION_LENGTH


def is_trackable_extension(path: str) -> bool:
    """Check if a file extension is one commonly tracked."""
    return _extension(path) in TRACKABLE_EXTENSIONS


def normalize_path(path: str, cwd: str) -> str:
    """Resolve `path` against `cwd` and collapse `.`/`..` segments."""
    cleaned = path.strip()
    if os.path.isabs(cleaned):
        return os.path.normpath(cleaned)
    return os.path.normpath(os.path.join(cwd, cleaned))


def _observations(
    message: str,
    cwd: str,
    matchers: Iterable[Matcher],
    strict_extensions: bool,
) -> Iterator[tuple[str, Access]]:
    for matcher in matchers:
        for raw, access in matcher.scan(message):
            if not is_valid_file_path(raw):
                continue
            if strict_extensions and not is_trackable_extension(raw.strip()):
                continue
            yield normalize_path(raw, cwd), access


def merge_observations(observations: Iterable[tuple[str, Access]]) -> dict[str, Access]:
    """Fold (path, access) pairs, keeping first-seen order per path."""
    merged: dict[str, Access] = {}
    for path, access in observations:
        previous = merged.get(path)
        merged[path] = access if previous is None else previous.merge(access)
    return merged


def extract_files(
    message: str | None,
    cwd: str,
    *,
    strict_extensions: bool = False,
) -> list[ExtractedFile]:
    """Extract files from an assistant message with write detection.

    Args:
        message: The assistant's last message (may be None or empty).
        cwd: Working directory used to resolve relative paths.
        strict_extensions: Also require a commonly tracked extension.

    Returns:
        One ExtractedFile per distinct normalized path, ordered by first
        detection (write matches first, then read matches).
    """
    if not message:
        return []

    merged = merge_observations(
        _observations(message, cwd, CLASSIFYING_MATCHERS, strict_extensions)
    )
    return [
        ExtractedFile(path=path, is_write=access is Access.WRITE)
        for path, access in merged.items()
    ]


def extract_file_paths(message: str | None, cwd: str) -> list[str]:
    """Extract the distinct normalized paths mentioned in a message.

    No read/write distinction; for callers that only need presence.
    """
    if not message:
        return []

    return list(merge_observations(_observations(message, cwd, PRESENCE_MATCHERS, False)))
