"""Analysis history stored as one JSON file per analysis.

Each record lives at ``<root>/<user>/<id>.json``.
"""

from __future__ import annotations

import datetime
import json
import re
import uuid
from pathlib import Path

from .generator import AnalysisResult
from .logging import get_logger

logger = get_logger("history")

ANONYMOUS = "anonymous"

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]")


class HistoryStore:
    """Persists analysis results and lists the latest ones per user."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def _user_dir(self, user: str | None) -> Path:
        return self.root / _UNSAFE.sub("_", user or ANONYMOUS)

    def save(self, result: AnalysisResult, user: str | None = None) -> AnalysisResult:
        """Assign ``id``/``created_at`` and write the record to disk."""
        result.id = result.id or uuid.uuid4().hex[:12]
        result.created_at = result.created_at or datetime.datetime.now(
            datetime.timezone.utc
        ).isoformat(timespec="seconds")

        user_dir = self._user_dir(user)
        user_dir.mkdir(parents=True, exist_ok=True)
        (user_dir / f"{result.id}.json").write_text(json.dumps(result.to_dict(), indent=2))
        return result

    def get(self, analysis_id: str, user: str | None = None) -> AnalysisResult | None:
        path = self._user_dir(user) / f"{_UNSAFE.sub('_', analysis_id)}.json"
        if not path.is_file():
            return None
        return AnalysisResult.from_dict(json.loads(path.read_text()))

    def latest(self, user: str | None = None, limit: int = 10) -> list[AnalysisResult]:
        """Most recent analyses first. Unreadable records are skipped."""
        user_dir = self._user_dir(user)
        if not user_dir.is_dir():
            return []

        results = []
        for path in user_dir.glob("*.json"):
            try:
                results.append(AnalysisResult.from_dict(json.loads(path.read_text())))
            except (OSError, ValueError, KeyError) as e:
                logger.warning("Skipping unreadable history record %s: %s", path.name, e)
        results.sort(key=lambda r: r.created_at or "", reverse=True)
        return results[:limit]
