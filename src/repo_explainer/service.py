"""Request-level composition: ingestion, analysis, caching and history.

One ``AnalysisService`` is built per process by the CLI bootstrap and
handed its cache, clients and history store explicitly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .archive import extract_files_from_zip, scoped_upload
from .cache import TTLCache
from .config import ANALYSIS_TTL, HISTORY_TTL, REPO_LIST_TTL, SAMPLES_TTL, Settings
from .errors import NoAdmissibleFilesError
from .generator import AnalysisResult, CodeExplainer, RepositoryAnalyzer
from .github import GitHubClient, normalize_repo_url, parse_repo_url
from .history import ANONYMOUS, HistoryStore
from .logging import get_logger
from .model import LLMClient
from .samples import SAMPLES

logger = get_logger("service")

SAMPLES_KEY = "code-samples"
HISTORY_FETCH_LIMIT = 50


def analysis_key(url: str, repo_name: str | None = None) -> str:
    key = f"repo-analysis:{normalize_repo_url(url)}"
    if repo_name:
        key = f"{key}:name={repo_name}"
    return key


def repos_key(user: str) -> str:
    return f"user-repos:{user}"


def history_key(user: str | None) -> str:
    return f"history:{user or ANONYMOUS}"


class AnalysisService:
    """Everything a command needs, wired together once."""

    def __init__(
        self,
        settings: Settings,
        cache: TTLCache,
        llm: LLMClient,
        github: GitHubClient,
        history: HistoryStore,
    ):
        self.settings = settings
        self.cache = cache
        self.llm = llm
        self.github = github
        self.history = history
        self.analyzer = RepositoryAnalyzer(
            llm,
            max_files=settings.max_selected_files,
            max_chars=settings.max_chars_per_file,
        )
        self.explainer = CodeExplainer(llm)

    @classmethod
    def from_settings(cls, settings: Settings, cache: TTLCache) -> "AnalysisService":
        return cls(
            settings,
            cache,
            LLMClient(
                api_key=settings.openai_api_key,
                model=settings.model,
                base_url=settings.llm_base_url,
                timeout=settings.llm_timeout,
            ),
            GitHubClient(
                token=settings.github_token,
                base_url=settings.github_api_url,
                timeout=settings.http_timeout,
                max_files=settings.max_remote_files,
            ),
            HistoryStore(settings.history_dir),
        )

    async def __aenter__(self) -> "AnalysisService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.github.aclose()
        await self.llm.aclose()

    async def analyze_github(
        self,
        url: str,
        repo_name: str | None = None,
        user: str | None = None,
        progress_callback=None,
    ) -> AnalysisResult:
        """Analyze a GitHub repository, reusing a cached result for the same URL."""
        owner, repo = parse_repo_url(url)
        key = analysis_key(url, repo_name)

        async def compute() -> AnalysisResult:
            if progress_callback:
                progress_callback(f"Fetching {owner}/{repo} from GitHub...", 0, 2)
            files = await self.github.fetch_repository_files(owner, repo)
            if not files:
                raise NoAdmissibleFilesError(
                    "The repository did not contain any code files that could be analyzed"
                )
            result = await self.analyzer.analyze_repository(
                files, repo_name or repo, progress_callback=progress_callback
            )
            result.repository_url = url
            return self._record(result, user)

        if key in self.cache:
            logger.info("Using cached analysis for %s", key)
        return await self.cache.get_or_set(key, compute, ANALYSIS_TTL)

    async def analyze_archive(
        self,
        data: bytes,
        repo_name: str,
        user: str | None = None,
        progress_callback=None,
    ) -> AnalysisResult:
        """Analyze the files inside ZIP ``data``."""
        files = extract_files_from_zip(data)
        if not files:
            raise NoAdmissibleFilesError(
                "The zip file did not contain any code files that could be analyzed"
            )
        result = await self.analyzer.analyze_repository(
            files, repo_name, progress_callback=progress_callback
        )
        return self._record(result, user)

    async def analyze_upload(
        self,
        data: bytes,
        filename: str,
        repo_name: str | None = None,
        user: str | None = None,
        progress_callback=None,
    ) -> AnalysisResult:
        """Stage an uploaded archive on disk for the request, then analyze it."""
        with scoped_upload(data, filename, self.settings.upload_dir) as path:
            name = repo_name or Path(filename).stem or path.stem
            return await self.analyze_archive(
                path.read_bytes(), name, user=user, progress_callback=progress_callback
            )

    def _record(self, result: AnalysisResult, user: str | None) -> AnalysisResult:
        saved = self.history.save(result, user)
        self.cache.delete(history_key(user))
        return saved

    async def list_repositories(self, user: str) -> list[dict[str, Any]]:
        """The user's GitHub repositories, cached for a few minutes."""
        return await self.cache.get_or_set(
            repos_key(user), self.github.list_repositories, REPO_LIST_TTL
        )

    def list_history(self, user: str | None = None, limit: int = 10) -> list[AnalysisResult]:
        key = history_key(user)
        cached = self.cache.get(key, None)
        if cached is not None:
            return cached[:limit]
        results = self.history.latest(user, limit=HISTORY_FETCH_LIMIT)
        self.cache.set(key, results, HISTORY_TTL)
        return results[:limit]

    def get_analysis(self, analysis_id: str, user: str | None = None) -> AnalysisResult | None:
        return self.history.get(analysis_id, user)

    def get_sample(self, language: str) -> str | None:
        samples = self.cache.get(SAMPLES_KEY, None)
        if samples is None:
            samples = dict(SAMPLES)
            self.cache.set(SAMPLES_KEY, samples, SAMPLES_TTL)
        return samples.get(language.lower())

    async def explain(self, code: str, language: str = "auto", detail_level: str = "standard") -> str:
        return await self.explainer.explain_code(code, language, detail_level)

    async def generate(self, description: str, language: str) -> str:
        return await self.explainer.generate_code(description, language)
