"""Representative file sampling for repository prompts.

A repository can have hundreds of files but a prompt only has room for a
handful. Selection happens in two passes:

1. Priority pass - conventionally important files (README, manifests,
   entry points, ...) in the order of ``PRIORITY_PATTERNS``.
2. Breadth pass - round-robin over directories, one file per directory per
   sweep, so a single large directory cannot crowd out the rest.

Selected contents are then truncated to fit a per-file character budget.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping, Sequence

from .config import MAX_CHARS_PER_FILE, MAX_SELECTED_FILES

TRUNCATION_MARKER = "\n... [file truncated due to size]"


@dataclass(frozen=True)
class PriorityPattern:
    """A class of conventionally important files."""

    purpose: str
    regex: re.Pattern

    def matches(self, path: str) -> bool:
        return self.regex.search(path) is not None


def _p(purpose: str, pattern: str) -> PriorityPattern:
    return PriorityPattern(purpose, re.compile(pattern, re.IGNORECASE))


PRIORITY_PATTERNS: tuple[PriorityPattern, ...] = (
    _p("readme", r"readme\.md"),
    _p("manifest", r"package\.json|composer\.json|pyproject\.toml"),
    _p("entry point", r"(^|/)(app|index|main)\.(js|ts|py|java|rb)$"),
    _p("env example", r"\.env\.example"),
    _p("container", r"docker-compose\.yml|dockerfile"),
    _p("schema", r"schema\.(sql|js|ts|prisma)"),
    _p("models", r"models/|entities/|dto/"),
    _p("api", r"controllers/|routes/|api/"),
    _p("views", r"components/|views/"),
    _p("utils", r"utils/|helpers/"),
    _p("tests", r"tests/|spec/"),
)


def select_representative_files(
    files: Mapping[str, str],
    max_files: int = MAX_SELECTED_FILES,
    max_chars: int = MAX_CHARS_PER_FILE,
    patterns: Sequence[PriorityPattern] = PRIORITY_PATTERNS,
) -> dict[str, str]:
    """Pick at most ``max_files`` files that best represent the repository.

    Paths are considered in sorted order, so the result depends only on the
    mapping's contents and the pattern table.
    """
    paths = sorted(files)
    selected: list[str] = _priority_pass(paths, max_files, patterns)
    if len(selected) < max_files:
        selected.extend(_breadth_pass(paths, set(selected), max_files - len(selected)))

    return {path: truncate(files[path], max_chars) for path in selected}


def _priority_pass(
    paths: Sequence[str], limit: int, patterns: Sequence[PriorityPattern]
) -> list[str]:
    selected: list[str] = []
    seen: set[str] = set()
    for pattern in patterns:
        for path in paths:
            if len(selected) >= limit:
                return selected
            if path not in seen and pattern.matches(path):
                selected.append(path)
                seen.add(path)
    return selected


def _breadth_pass(paths: Sequence[str], taken: set[str], limit: int) -> list[str]:
    by_dir: dict[str, list[str]] = {}
    for path in paths:
        if path in taken:
            continue
        by_dir.setdefault(_dirname(path), []).append(path)

    picked: list[str] = []
    queues = list(by_dir.values())
    while queues and len(picked) < limit:
        for queue in queues:
            if len(picked) >= limit:
                break
            picked.append(queue.pop(0))
        queues = [q for q in queues if q]
    return picked


def _dirname(path: str) -> str:
    head, sep, _ = path.rpartition("/")
    return head if sep else "."


def truncate(content: str, max_chars: int = MAX_CHARS_PER_FILE) -> str:
    """Cut ``content`` to ``max_chars`` and mark it when anything was dropped."""
    if len(content) <= max_chars:
        return content
    return content[:max_chars] + TRUNCATION_MARKER
