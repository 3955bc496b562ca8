"""Unit tests for DeepSeekAdapter."""

import asyncio

import aiohttp
import pytest
from unittest.mock import patch

from tokayah.adapters.llm import create_llm
from tokayah.adapters.llm.deepseek_adapter import DeepSeekAdapter, extract_content
from tokayah.config import AppConfig, LLMConfig, UsageLimitsConfig
from tokayah.infrastructure.usage import UsageTracker
from tokayah.ports.outbound import GenerationError, LLMPort

SESSION_PATH = "tokayah.adapters.llm.deepseek_adapter.aiohttp.ClientSession"


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


def _mock_aiohttp_session(status=200, data=None, text="", error=None):
    """Return a fake aiohttp.ClientSession class recording every post()."""
    requests = []

    class FakeResponse:
        def __init__(self):
            self.status = status

        async def json(self):
            if isinstance(data, Exception):
                raise data
            return data

        async def text(self):
            return text

        async def __aenter__(self):
            if error:
                raise error
            return self

        async def __aexit__(self, *args):
            pass

    class FakeSession:
        def __init__(self, **kwargs):
            self.kwargs = kwargs

        def post(self, url, **kwargs):
            requests.append({"url": url, "session": self.kwargs, **kwargs})
            return FakeResponse()

        async def __aenter__(self):
            return self

        async def __aexit__(self, *args):
            pass

    FakeSession.requests = requests
    return FakeSession


def _make_adapter(**limits):
    config = LLMConfig(api_key="sk-test", base_url="https://api.example.com/v1/", model="deepseek-chat", timeout_seconds=5)
    tracker = UsageTracker(UsageLimitsConfig(**limits))
    return DeepSeekAdapter(config, usage_tracker=tracker), tracker


class TestComplete:
    @pytest.mark.asyncio
    async def test_success(self):
        session = _mock_aiohttp_session(data=_completion("  0.9  "))
        adapter, tracker = _make_adapter()
        with patch(SESSION_PATH, session):
            result = await adapter.complete("system", "question", temperature=0.1, max_tokens=10)
        assert result == "0.9"
        request = session.requests[0]
        assert request["url"] == "https://api.example.com/v1/chat/completions"
        assert request["headers"]["Authorization"] == "Bearer sk-test"
        body = request["json"]
        assert body["model"] == "deepseek-chat"
        assert body["messages"] == [
            {"role": "system", "content": "system"},
            {"role": "user", "content": "question"},
        ]
        assert body["temperature"] == 0.1
        assert body["max_tokens"] == 10
        assert request["session"]["timeout"].total == 5
        assert tracker.get_status()["total_calls_all_time"] == 1

    @pytest.mark.asyncio
    async def test_http_error(self):
        session = _mock_aiohttp_session(status=429, text="rate limited")
        adapter, tracker = _make_adapter()
        with patch(SESSION_PATH, session):
            with pytest.raises(GenerationError, match="429"):
                await adapter.complete("s", "q")
        assert tracker.get_status()["total_calls_all_time"] == 0

    @pytest.mark.asyncio
    async def test_transport_error(self):
        session = _mock_aiohttp_session(error=aiohttp.ClientConnectionError("refused"))
        adapter, _ = _make_adapter()
        with patch(SESSION_PATH, session):
            with pytest.raises(GenerationError, match="Transport"):
                await adapter.complete("s", "q")

    @pytest.mark.asyncio
    async def test_timeout(self):
        session = _mock_aiohttp_session(error=asyncio.TimeoutError())
        adapter, _ = _make_adapter()
        with patch(SESSION_PATH, session):
            with pytest.raises(GenerationError, match="Timeout"):
                await adapter.complete("s", "q")

    @pytest.mark.asyncio
    async def test_invalid_json(self):
        session = _mock_aiohttp_session(data=ValueError("not json"))
        adapter, _ = _make_adapter()
        with patch(SESSION_PATH, session):
            with pytest.raises(GenerationError, match="Invalid JSON"):
                await adapter.complete("s", "q")

    @pytest.mark.asyncio
    async def test_empty_content(self):
        session = _mock_aiohttp_session(data=_completion("   "))
        adapter, _ = _make_adapter()
        with patch(SESSION_PATH, session):
            with pytest.raises(GenerationError, match="Empty"):
                await adapter.complete("s", "q")

    @pytest.mark.asyncio
    async def test_paused_usage_never_calls_out(self):
        session = _mock_aiohttp_session(data=_completion("x"))
        adapter, _ = _make_adapter(paused=True)
        with patch(SESSION_PATH, session):
            with pytest.raises(GenerationError, match="Usage limit"):
                await adapter.complete("s", "q")
        assert session.requests == []


class TestExtractContent:
    @pytest.mark.parametrize("payload", [{}, {"choices": []}, {"choices": [{"message": {}}]}, None])
    def test_malformed(self, payload):
        with pytest.raises(GenerationError):
            extract_content(payload)


class TestFactory:
    def test_create_llm(self):
        config = AppConfig()
        config.llm.api_key = "sk"
        config.usage_limits.max_calls_per_day = 7
        llm = create_llm(config)
        assert isinstance(llm, LLMPort)
        assert llm.usage_tracker.limits["max_calls_per_day"] == 7
