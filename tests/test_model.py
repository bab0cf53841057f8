"""Tests for the chat-completion client."""

import json

import httpx
import pytest

from repo_explainer.config import DEFAULT_MODEL
from repo_explainer.errors import LLMError
from repo_explainer.model import LLMClient


def completion(text):
    return {"choices": [{"message": {"role": "assistant", "content": text}}]}


def client_for(handler, **kwargs) -> LLMClient:
    return LLMClient(api_key="sk-test", transport=httpx.MockTransport(handler), **kwargs)


class TestLLMClientConfig:
    def test_default_config(self):
        client = LLMClient(api_key="sk-test")
        assert client.model == DEFAULT_MODEL
        assert client.base_url == "https://api.openai.com/v1"

    def test_custom_base_url_strips_slash(self):
        client = LLMClient(api_key="k", base_url="http://localhost:11434/v1/", model="qwen2.5-coder:7b")
        assert client.base_url == "http://localhost:11434/v1"
        assert client.model == "qwen2.5-coder:7b"


@pytest.mark.asyncio
class TestLLMClientChat:
    async def test_chat_success(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("# Architecture\n\nThis is a web app."))

        async with client_for(handler) as client:
            text = await client.chat("Analyze this repo", system="be brief", temperature=0.3, max_tokens=4000)

        assert "web app" in text
        assert seen["url"] == "https://api.openai.com/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test"
        body = seen["body"]
        assert body["model"] == DEFAULT_MODEL
        assert body["temperature"] == 0.3
        assert body["max_tokens"] == 4000
        assert body["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "Analyze this repo"},
        ]

    async def test_chat_omits_optional_fields(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=completion("ok"))

        async with client_for(handler) as client:
            await client.chat("hi")
        assert "max_tokens" not in seen["body"]
        assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]

    async def test_null_content_becomes_empty_string(self):
        async with client_for(lambda r: httpx.Response(200, json=completion(None))) as client:
            assert await client.chat("hi") == ""

    async def test_server_error(self):
        async with client_for(lambda r: httpx.Response(500, text="Internal server error")) as client:
            with pytest.raises(LLMError, match="500") as excinfo:
                await client.chat("hi")
        assert excinfo.value.status_code == 500
        assert not excinfo.value.is_rate_limited

    async def test_rate_limit_is_distinguishable(self):
        body = {"error": {"message": "Rate limit reached", "type": "requests"}}
        async with client_for(lambda r: httpx.Response(429, json=body)) as client:
            with pytest.raises(LLMError) as excinfo:
                await client.chat("hi")
        assert excinfo.value.is_rate_limited

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with client_for(handler) as client:
            with pytest.raises(LLMError, match="timed out"):
                await client.chat("hi")

    async def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with client_for(handler) as client:
            with pytest.raises(LLMError, match="Cannot reach"):
                await client.chat("hi")

    async def test_malformed_payload(self):
        async with client_for(lambda r: httpx.Response(200, json={"unexpected": True})) as client:
            with pytest.raises(LLMError, match="unexpected payload"):
                await client.chat("hi")
