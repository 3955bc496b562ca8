"""Unit tests for the health and status endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from tokayah.adapters.web.server import ServiceState, create_app
from tokayah.config import UsageLimitsConfig
from tokayah.domain.models import ResponderKind
from tokayah.domain.personas import build_profiles
from tokayah.domain.responders import build_specialists
from tokayah.domain.router import Router
from tokayah.domain.synthesizer import Synthesizer
from tokayah.infrastructure.usage import UsageTracker


class NullLLM:
    async def complete(self, system_prompt, user_message, temperature=0.7, max_tokens=1000):
        return ""


def _make_router():
    llm = NullLLM()
    profiles = build_profiles()
    specialists = build_specialists(llm, profiles=profiles)
    synthesizer = Synthesizer(profiles[ResponderKind.OPINION], llm, list(specialists.values()))
    return Router(specialists, synthesizer, allowed_channels=["-1002", "-1001"], handle="TokAyahBot")


@pytest.fixture
def state():
    return ServiceState()


@pytest.fixture
def transport(state):
    return ASGITransport(app=create_app(state))


class TestHealth:
    @pytest.mark.asyncio
    async def test_not_ready(self, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/health")
        assert resp.status_code == 503

    @pytest.mark.asyncio
    async def test_ready(self, state, transport):
        state.mark_ready(_make_router())
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}

    @pytest.mark.asyncio
    async def test_stopping(self, state, transport):
        state.mark_ready(_make_router())
        state.mark_stopping()
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/health")
        assert resp.status_code == 503


class TestStatus:
    @pytest.mark.asyncio
    async def test_before_ready(self, transport):
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/status")
        assert resp.status_code == 200
        data = resp.json()
        assert data["ready"] is False
        assert data["mode"] is None

    @pytest.mark.asyncio
    async def test_reports_routing_and_usage(self, state, transport):
        state.mark_ready(_make_router(), UsageTracker(UsageLimitsConfig(max_calls_per_day=50)))
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            resp = await ac.get("/status")
        data = resp.json()
        assert data["ready"] is True
        assert data["mode"] == "specialist"
        assert data["broadQuestions"] is False
        assert data["responders"] == ["fatwa", "mazhab", "jakim", "malaysianfatwa", "ibadah", "opinion"]
        assert data["groupIds"] == ["-1001", "-1002"]
        assert data["usage"]["limits"]["per_day"] == 50
