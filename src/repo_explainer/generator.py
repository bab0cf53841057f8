"""Analysis orchestration - turns ingested files into model output.

``RepositoryAnalyzer`` runs the two-step repository flow (technical
analysis, then a user manual built from it). ``CodeExplainer`` covers the
single-snippet explain and generate paths.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping

from .config import MAX_CHARS_PER_FILE, MAX_SELECTED_FILES
from .errors import LLMError
from .logging import get_logger
from .model import LLMClient
from .prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    GENERATION_SYSTEM_PROMPT,
    MANUAL_SYSTEM_PROMPT,
    build_analysis_prompt,
    build_manual_prompt,
    explanation_prompt,
    generation_prompt,
    render_structure,
)
from .sampler import select_representative_files

logger = get_logger("generator")

ANALYSIS_TEMPERATURE = 0.3
ANALYSIS_MAX_TOKENS = 4000
GENERATION_TEMPERATURE = 0.2
SUMMARY_MAX_CHARS = 300
NO_EXPLANATION = "No explanation generated."


@dataclass
class AnalysisResult:
    """Output of one repository analysis."""

    repository_name: str
    technical_analysis: str
    user_manual: str
    analyzed_files: int
    total_files: int
    repository_url: str | None = None
    analysis_summary: str | None = None
    id: str | None = None
    created_at: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data = {
            "id": self.id,
            "repositoryName": self.repository_name,
            "repositoryUrl": self.repository_url,
            "technicalAnalysis": self.technical_analysis,
            "userManual": self.user_manual,
            "analyzedFiles": self.analyzed_files,
            "totalFiles": self.total_files,
            "analysisSummary": self.analysis_summary,
            "createdAt": self.created_at,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        return cls(
            repository_name=data["repositoryName"],
            technical_analysis=data["technicalAnalysis"],
            user_manual=data["userManual"],
            analyzed_files=int(data["analyzedFiles"]),
            total_files=int(data["totalFiles"]),
            repository_url=data.get("repositoryUrl"),
            analysis_summary=data.get("analysisSummary"),
            id=data.get("id"),
            created_at=data.get("createdAt"),
        )


class RepositoryAnalyzer:
    """Samples a repository and asks the model for an analysis and a manual."""

    def __init__(
        self,
        client: LLMClient,
        max_files: int = MAX_SELECTED_FILES,
        max_chars: int = MAX_CHARS_PER_FILE,
    ):
        self.client = client
        self.max_files = max_files
        self.max_chars = max_chars

    async def analyze_repository(
        self,
        files: Mapping[str, str],
        repo_name: str,
        progress_callback=None,
    ) -> AnalysisResult:
        """Run both model calls. Any model failure propagates to the caller."""
        structure = render_structure(sorted(files))
        selected = select_representative_files(files, self.max_files, self.max_chars)
        logger.info("%s: analyzing %d of %d files", repo_name, len(selected), len(files))

        if progress_callback:
            progress_callback("Generating technical analysis...", 1, 2)
        analysis = await self._complete(
            build_analysis_prompt(repo_name, structure, selected),
            ANALYSIS_SYSTEM_PROMPT,
            "technical analysis",
        )

        if progress_callback:
            progress_callback("Writing user manual...", 2, 2)
        manual = await self._complete(
            build_manual_prompt(repo_name, structure, analysis),
            MANUAL_SYSTEM_PROMPT,
            "user manual",
        )

        return AnalysisResult(
            repository_name=repo_name,
            technical_analysis=analysis,
            user_manual=manual,
            analyzed_files=len(selected),
            total_files=len(files),
            analysis_summary=summarize(analysis),
        )

    async def _complete(self, prompt: str, system: str, what: str) -> str:
        text = await self.client.chat(
            prompt,
            system=system,
            temperature=ANALYSIS_TEMPERATURE,
            max_tokens=ANALYSIS_MAX_TOKENS,
        )
        if not text.strip():
            raise LLMError(f"Model returned an empty {what}")
        return text


class CodeExplainer:
    """Explain a code snippet, or write code from a description."""

    def __init__(self, client: LLMClient):
        self.client = client

    async def explain_code(self, code: str, language: str = "auto", detail_level: str = "standard") -> str:
        """Explanation text; degrades to a placeholder instead of raising."""
        system, prompt, temperature = explanation_prompt(code, language, detail_level)
        try:
            text = await self.client.chat(prompt, system=system, temperature=temperature)
        except LLMError as e:
            logger.error("Error explaining code: %s", e)
            return NO_EXPLANATION
        return text or NO_EXPLANATION

    async def generate_code(self, description: str, language: str) -> str:
        """Generated source, unwrapped from its code fence when there is one."""
        content = await self.client.chat(
            generation_prompt(description, language),
            system=GENERATION_SYSTEM_PROMPT,
            temperature=GENERATION_TEMPERATURE,
        )
        return extract_code_block(content, language)


def extract_code_block(content: str, language: str = "") -> str:
    """Body of the first fenced block, or ``content`` unchanged if none."""
    lang = re.escape(language) if language else ""
    match = re.search(rf"```(?:{lang})?([\s\S]*?)```", content, re.IGNORECASE)
    if match and match.group(1).strip():
        return match.group(1).strip()
    return content


def summarize(analysis: str, limit: int = SUMMARY_MAX_CHARS) -> str:
    """First prose paragraph of a markdown analysis, capped at ``limit`` chars."""
    for block in re.split(r"\n\s*\n", analysis.strip()):
        block = block.strip()
        if not block or block.startswith(("#", "```", "---")):
            continue
        text = " ".join(block.split())
        if len(text) > limit:
            return text[: limit - 3].rstrip() + "..."
        return text
    return ""
