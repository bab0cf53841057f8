"""Chat-completion model client.

Talks to any OpenAI-compatible ``/chat/completions`` endpoint and
returns plain text. Errors carry the HTTP status so callers can tell a
rate limit from any other failure.
"""

from __future__ import annotations

from typing import Any

import httpx

from .config import DEFAULT_LLM_BASE_URL, DEFAULT_MODEL, LLM_TIMEOUT
from .errors import LLMError
from .logging import get_logger

logger = get_logger("model")


class LLMClient:
    """Async client for an OpenAI-compatible chat completions API."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_LLM_BASE_URL,
        timeout: float = LLM_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            logger.warning("No model API key provided; requests will likely be rejected")
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def chat(
        self,
        prompt: str,
        system: str = "",
        temperature: float = 0.3,
        max_tokens: int | None = None,
    ) -> str:
        """Send one user prompt and return the completion text ("" if none)."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        try:
            resp = await self._client.post(
                f"{self.base_url}/chat/completions",
                json=payload,
                headers=self._headers(),
            )
        except httpx.TimeoutException:
            raise LLMError(f"Model request timed out after {self.timeout}s")
        except httpx.HTTPError as e:
            raise LLMError(f"Cannot reach model API at {self.base_url}: {e}")

        if resp.status_code != 200:
            raise LLMError(
                f"Model API returned {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
            return data["choices"][0]["message"].get("content") or ""
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError(f"Model API returned an unexpected payload: {e}")
