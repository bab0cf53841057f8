"""Error types shared across the ingestion pipeline and the model client."""

from __future__ import annotations


class ExplainerError(Exception):
    """Base class for every error raised by repo-explainer."""


class ArchiveError(ExplainerError):
    """The uploaded bytes are not a readable ZIP archive."""


class PerFileDecodeError(ExplainerError):
    """A single archive entry could not be decoded as text."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Could not decode {path}: {reason}")
        self.path = path
        self.reason = reason


class RemoteAPIError(ExplainerError):
    """A GitHub API call returned a non-success status."""

    def __init__(self, status: int, body: str = "", rate_limit_remaining: str | None = None):
        super().__init__(f"GitHub API error: {status} - {body[:200]}")
        self.status = status
        self.body = body
        self.rate_limit_remaining = rate_limit_remaining

    @property
    def is_rate_limited(self) -> bool:
        if self.status == 429:
            return True
        if self.status == 403:
            return "rate limit" in self.body.lower() or self.rate_limit_remaining == "0"
        return False


class EncodingError(ExplainerError):
    """Remote file content arrived without a supported encoding."""


class InvalidRepositoryURL(ExplainerError):
    """The string does not look like a GitHub repository URL."""


class NoAdmissibleFilesError(ExplainerError):
    """An ingestion run produced zero files worth analyzing."""


class LLMError(ExplainerError):
    """The language model call failed or returned unusable output."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_rate_limited(self) -> bool:
        return self.status_code == 429


def is_rate_limited(error: BaseException) -> bool:
    """True when ``error`` is a remote or model failure caused by throttling."""
    return bool(getattr(error, "is_rate_limited", False))
