"""GitHub REST client - walks a repository tree and fetches file contents.

Requests are issued one at a time. Unauthenticated clients get 60
requests per hour.
"""

from __future__ import annotations

import base64
import re
from dataclasses import dataclass
from typing import Any, Union
from urllib.parse import quote, urlsplit, urlunsplit

import httpx

from .config import GITHUB_API_URL, HTTP_TIMEOUT, MAX_REMOTE_FILES
from .errors import EncodingError, InvalidRepositoryURL, RemoteAPIError
from .filters import MAX_FILE_SIZE, is_content_admissible, is_path_admissible
from .logging import get_logger

logger = get_logger("github")

USER_AGENT = "repo-explainer"

_REPO_URL = re.compile(r"github\.com[/:]([^/]+)/([^/?#\s]+)", re.IGNORECASE)


@dataclass(frozen=True)
class RemoteEntry:
    """One item from a contents listing. ``type`` is "file" or "dir"."""

    name: str
    path: str
    type: str
    download_url: str | None = None
    size: int = 0

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "RemoteEntry":
        return cls(
            name=data.get("name", ""),
            path=data.get("path", ""),
            type=data.get("type", "file"),
            download_url=data.get("download_url"),
            size=data.get("size") or 0,
        )


@dataclass(frozen=True)
class SingleFile:
    entry: RemoteEntry


@dataclass(frozen=True)
class DirectoryListing:
    entries: tuple[RemoteEntry, ...]


RemoteListing = Union[SingleFile, DirectoryListing]


def parse_listing(payload: Any) -> RemoteListing:
    """Tag a decoded contents response as a directory listing or a single file."""
    if isinstance(payload, list):
        return DirectoryListing(tuple(RemoteEntry.from_json(item) for item in payload))
    if isinstance(payload, dict):
        return SingleFile(RemoteEntry.from_json(payload))
    raise RemoteAPIError(200, f"Unexpected contents payload: {type(payload).__name__}")


def parse_repo_url(url: str) -> tuple[str, str]:
    """Extract ``(owner, repo)`` from a GitHub URL."""
    match = _REPO_URL.search(url)
    if not match:
        raise InvalidRepositoryURL(f"Invalid GitHub repository URL: {url}")
    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    if not repo:
        raise InvalidRepositoryURL(f"Invalid GitHub repository URL: {url}")
    return owner, repo


def normalize_repo_url(url: str) -> str:
    """Stable identity for a repository URL, used as a cache key.

    Drops query string, fragment, trailing slashes and a ``.git`` suffix,
    then lowercases the whole URL. GitHub owner and repository names are
    case-insensitive.
    """
    parts = urlsplit(url.strip())
    path = parts.path.rstrip("/")
    if path.endswith(".git"):
        path = path[: -len(".git")]
    path = path.rstrip("/")
    return urlunsplit((parts.scheme, parts.netloc, path, "", "")).lower()


class GitHubClient:
    """Async client for the GitHub contents API."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_API_URL,
        timeout: float = HTTP_TIMEOUT,
        max_files: int = MAX_REMOTE_FILES,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.max_files = max_files
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": USER_AGENT,
        }
        if self.token:
            headers["Authorization"] = f"token {self.token}"
        return headers

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        resp = await self._client.get(
            f"{self.base_url}{path}", headers=self._headers(), params=params
        )
        if not resp.is_success:
            raise RemoteAPIError(
                resp.status_code,
                resp.text,
                rate_limit_remaining=resp.headers.get("x-ratelimit-remaining"),
            )
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteAPIError(resp.status_code, resp.text) from e

    async def list_repositories(self) -> list[dict[str, Any]]:
        """Repositories of the authenticated user, most recently updated first."""
        if not self.token:
            raise RemoteAPIError(401, "GitHub token required to fetch repositories")
        return await self._get_json("/user/repos", params={"sort": "updated", "per_page": 100})

    async def get_repository(self, owner: str, repo: str) -> dict[str, Any]:
        return await self._get_json(f"/repos/{owner}/{repo}")

    async def list_contents(self, owner: str, repo: str, path: str = "") -> RemoteListing:
        """One level of the contents API."""
        endpoint = f"/repos/{owner}/{repo}/contents"
        if path:
            endpoint = f"{endpoint}/{quote(path, safe='/')}"
        return parse_listing(await self._get_json(endpoint))

    async def list_recursive(self, owner: str, repo: str, path: str = "") -> list[RemoteEntry]:
        """Every file under ``path``, depth-first in listing order.

        Uses an explicit stack of pending directories, so nesting depth does
        not grow the call stack.
        """
        files: list[RemoteEntry] = []
        # Each frame is the not-yet-visited remainder of one directory listing.
        stack: list[list[RemoteEntry]] = [await self._list_level(owner, repo, path)]
        while stack:
            pending = stack[-1]
            if not pending:
                stack.pop()
                continue
            entry = pending.pop(0)
            if entry.type == "dir":
                stack.append(await self._list_level(owner, repo, entry.path))
            else:
                files.append(entry)
        return files

    async def _list_level(self, owner: str, repo: str, path: str) -> list[RemoteEntry]:
        listing = await self.list_contents(owner, repo, path)
        if isinstance(listing, SingleFile):
            return [listing.entry]
        return list(listing.entries)

    async def get_file_content(self, owner: str, repo: str, path: str) -> str:
        """Decoded UTF-8 text of one file."""
        data = await self._get_json(f"/repos/{owner}/{repo}/contents/{quote(path, safe='/')}")
        if not isinstance(data, dict):
            raise EncodingError(f"{path} is not a file")
        content = data.get("content")
        encoding = data.get("encoding")
        if not content or encoding != "base64":
            raise EncodingError(f"File content or encoding not provided for {path} (encoding={encoding!r})")
        try:
            return base64.b64decode(content).decode("utf-8")
        except (ValueError, UnicodeDecodeError) as e:
            raise EncodingError(f"Could not decode {path}: {e}") from e

    async def fetch_repository_files(self, owner: str, repo: str) -> dict[str, str]:
        """Fetch up to ``max_files`` admissible files as ``{path: text}``."""
        entries = await self.list_recursive(owner, repo)
        candidates = [e for e in entries if is_path_admissible(e.path)]
        logger.debug(
            "%s/%s: %d files listed, %d pass path filter", owner, repo, len(entries), len(candidates)
        )

        files: dict[str, str] = {}
        for entry in candidates:
            if len(files) >= self.max_files:
                break
            if entry.size > MAX_FILE_SIZE:
                logger.debug("Skipping %s: listed size %d exceeds size cap", entry.path, entry.size)
                continue
            try:
                content = await self.get_file_content(owner, repo, entry.path)
            except (RemoteAPIError, EncodingError, httpx.HTTPError) as e:
                logger.warning("Error fetching file content for %s: %s", entry.path, e)
                continue
            if len(content) > MAX_FILE_SIZE:
                logger.debug("Skipping %s: %d chars exceeds size cap", entry.path, len(content))
                continue
            if not is_content_admissible(content):
                continue
            files[entry.path] = content
        return files

    async def fetch_repository_files_from_url(self, url: str) -> dict[str, str]:
        owner, repo = parse_repo_url(url)
        return await self.fetch_repository_files(owner, repo)
