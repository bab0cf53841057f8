"""File admissibility - decides which repository files are worth analyzing.

Path checks run before any content is read; content checks run after
decoding. Both halves are pure and never raise.
"""

from __future__ import annotations

import re

MAX_FILE_SIZE = 500 * 1024
MAX_NON_PRINTABLE_RATIO = 0.1

IGNORE_EXTENSIONS = (
    ".jpg", ".jpeg", ".png", ".gif", ".svg", ".ico", ".webp",
    ".mp4", ".webm", ".ogg", ".mp3", ".wav",
    ".pdf", ".zip", ".rar", ".7z", ".tar", ".gz",
    ".woff", ".woff2", ".eot", ".ttf",
    ".exe", ".dll", ".so", ".dylib", ".class",
)

IGNORE_DIRS = frozenset({
    "node_modules", "dist", "build", "target", "out",
    ".git", ".idea", ".vscode", ".next", ".vercel",
    "vendor", "bower_components", "jspm_packages",
    "__pycache__", "venv", "env", ".env", ".venv",
})

_NON_PRINTABLE = re.compile(r"[^\x20-\x7E\t\n\r]")


def is_path_admissible(path: str) -> bool:
    """Reject denied extensions and anything under a denied directory."""
    if path.lower().endswith(IGNORE_EXTENSIONS):
        return False
    return not any(segment in IGNORE_DIRS for segment in path.split("/"))


def is_content_admissible(content: str) -> bool:
    """Reject empty, oversized, and binary-looking content."""
    if not content:
        return False
    if len(content) > MAX_FILE_SIZE:
        return False
    non_printable = len(_NON_PRINTABLE.findall(content))
    return non_printable <= len(content) * MAX_NON_PRINTABLE_RATIO


def is_admissible(path: str, content: str | None = None) -> bool:
    """Full admissibility check; content is only inspected when given."""
    if not is_path_admissible(path):
        return False
    if content is None:
        return True
    return is_content_admissible(content)
