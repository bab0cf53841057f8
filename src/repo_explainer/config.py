"""Runtime settings. Defaults live here; the CLI fills them from options/env."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_LLM_BASE_URL = "https://api.openai.com/v1"
GITHUB_API_URL = "https://api.github.com"
DEFAULT_HOME = Path.home() / ".repo-explainer"

HTTP_TIMEOUT = 30  # per GitHub request
LLM_TIMEOUT = 180  # per completion; analyses with 15 files are slow

MAX_SELECTED_FILES = 15
MAX_CHARS_PER_FILE = 10_000
MAX_REMOTE_FILES = 100

# Cache lifetimes in seconds
ANALYSIS_TTL = 60 * 60
REPO_LIST_TTL = 10 * 60
HISTORY_TTL = 5 * 60
SAMPLES_TTL = 24 * 60 * 60


@dataclass
class Settings:
    """Everything a command needs to build its clients."""

    openai_api_key: str | None = None
    model: str = DEFAULT_MODEL
    llm_base_url: str = DEFAULT_LLM_BASE_URL
    github_token: str | None = None
    github_api_url: str = GITHUB_API_URL
    home: Path = DEFAULT_HOME
    http_timeout: float = HTTP_TIMEOUT
    llm_timeout: float = LLM_TIMEOUT
    max_selected_files: int = MAX_SELECTED_FILES
    max_chars_per_file: int = MAX_CHARS_PER_FILE
    max_remote_files: int = MAX_REMOTE_FILES

    @property
    def history_dir(self) -> Path:
        return self.home / "history"

    @property
    def upload_dir(self) -> Path:
        return self.home / "uploads"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        home = os.environ.get("EXPLAINER_HOME")
        return cls(
            openai_api_key=os.environ.get("OPENAI_API_KEY") or None,
            model=os.environ.get("EXPLAINER_MODEL", DEFAULT_MODEL),
            llm_base_url=os.environ.get("EXPLAINER_LLM_BASE_URL", DEFAULT_LLM_BASE_URL),
            github_token=os.environ.get("GITHUB_TOKEN") or None,
            home=Path(home) if home else DEFAULT_HOME,
        )
