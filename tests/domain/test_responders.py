"""Tests for domain/responders.py — relevance scoring and generation.

No network: every test runs against a mock LLMPort.
"""

import pytest

from tokayah.domain.models import ResponderKind
from tokayah.domain.personas import FATWA_PROMPT, RELEVANCE_PROMPT, build_profiles
from tokayah.domain.responders import (
    APOLOGY_TEXT,
    EMPTY_ANSWER_TEXT,
    Responder,
    build_specialists,
    parse_score,
)
from tokayah.ports.outbound import GenerationError, LLMPort


class MockLLM:
    """Mock LLMPort returning a fixed reply, or raising."""

    def __init__(self, response="0.8", error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def complete(self, system_prompt, user_message, temperature=0.7, max_tokens=1000):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_message": user_message,
            "temperature": temperature,
            "max_tokens": max_tokens,
        })
        if self.error:
            raise self.error
        return self.response


def _make_responder(response="0.8", error=None, kind=ResponderKind.FATWA):
    llm = MockLLM(response=response, error=error)
    profile = build_profiles()[kind]
    return Responder(kind=kind, name="TestAgent", profile=profile, llm=llm), llm


class TestParseScore:
    @pytest.mark.parametrize("raw,expected", [
        ("0.85", 0.85),
        ("Score: 0.4", 0.4),
        (".5", 0.5),
        ("1", 1.0),
        ("7", 1.0),
        ("0", 0.0),
    ])
    def test_parses_and_clamps(self, raw, expected):
        assert parse_score(raw) == pytest.approx(expected)

    def test_no_number_raises(self):
        with pytest.raises(ValueError):
            parse_score("relevant")


class TestScoreRelevance:
    @pytest.mark.asyncio
    async def test_uses_low_temperature_relevance_prompt(self):
        responder, llm = _make_responder("0.9")
        score = await responder.score_relevance("apa hukum riba")
        assert score == pytest.approx(0.9)
        call = llm.calls[0]
        assert call["temperature"] == 0.1
        assert call["max_tokens"] == 10
        assert call["user_message"] == "apa hukum riba"
        assert "hukum" in call["system_prompt"]
        assert call["system_prompt"].startswith(RELEVANCE_PROMPT.split("\n")[0])

    @pytest.mark.asyncio
    async def test_generation_error_scores_zero(self):
        responder, _ = _make_responder(error=GenerationError("boom"))
        assert await responder.score_relevance("anything") == 0.0

    @pytest.mark.asyncio
    async def test_unparseable_scores_zero(self):
        responder, _ = _make_responder("I think it is relevant")
        assert await responder.score_relevance("anything") == 0.0

    @pytest.mark.asyncio
    async def test_out_of_range_is_clamped(self):
        responder, _ = _make_responder("-3")
        # "-" is not part of the number; "3" clamps to 1.0
        assert await responder.score_relevance("anything") == 1.0

    @pytest.mark.asyncio
    async def test_should_respond_uses_threshold(self):
        low, _ = _make_responder("0.69")
        high, _ = _make_responder("0.7")
        assert not await low.should_respond("q")
        assert await high.should_respond("q")


class TestGenerate:
    @pytest.mark.asyncio
    async def test_uses_domain_prompt(self):
        responder, llm = _make_responder("### Hukum\n**Wajib**")
        answer = await responder.generate("apa hukum solat jumaat")
        assert answer == "### Hukum\n**Wajib**"
        assert llm.calls[0]["system_prompt"] == FATWA_PROMPT
        assert llm.calls[0]["temperature"] == 0.7
        assert llm.calls[0]["max_tokens"] == 1000

    @pytest.mark.asyncio
    async def test_failure_returns_apology(self):
        responder, _ = _make_responder(error=GenerationError("timeout"))
        assert await responder.generate("q") == APOLOGY_TEXT

    @pytest.mark.asyncio
    async def test_empty_returns_fallback_text(self):
        responder, _ = _make_responder("")
        assert await responder.generate("q") == EMPTY_ANSWER_TEXT


class TestBuildSpecialists:
    def test_declared_order_and_threshold(self):
        llm = MockLLM()
        specialists = build_specialists(llm, threshold=0.6)
        assert list(specialists) == [
            ResponderKind.FATWA,
            ResponderKind.MAZHAB,
            ResponderKind.JAKIM,
            ResponderKind.MALAYSIAN_FATWA,
            ResponderKind.IBADAH,
        ]
        assert all(r.threshold == 0.6 for r in specialists.values())
        assert specialists[ResponderKind.MALAYSIAN_FATWA].command == "malaysianfatwa"

    def test_mock_satisfies_port(self):
        assert isinstance(MockLLM(), LLMPort)
