"""Topic-specialized responders.

Each responder owns a profile (topics, keywords, prompt, threshold) and
exposes relevance scoring and answer generation over an LLMPort. Failures
never leave this boundary: scoring fails closed to 0.0 and generation
degrades to a fixed apology string.
"""

import re
import sys
from typing import Dict, Optional

from tokayah.domain.models import ResponderKind, ResponderProfile
from tokayah.domain.personas import RELEVANCE_PROMPT, build_profiles
from tokayah.ports.outbound import LLMPort

APOLOGY_TEXT = (
    "I apologize, but I encountered an error while processing your question. "
    "Please try again later."
)
EMPTY_ANSWER_TEXT = "I apologize, but I could not generate a response at this time."

_SCORE_RE = re.compile(r"\d*\.?\d+")


def _log(msg: str):
    print(msg, file=sys.stderr)


def parse_score(raw: str) -> float:
    """Extract the first number from a model reply, clamped to [0, 1].

    Raises ValueError when the reply holds no number.
    """
    found = _SCORE_RE.search(raw or "")
    if not found:
        raise ValueError(f"no numeric score in {raw!r}")
    return min(max(float(found.group()), 0.0), 1.0)


class Responder:
    """A topic specialist: relevance model + domain prompt.

    Handles:
    - scoreRelevance: one low-temperature call returning a bare number
    - generate: one call with the domain prompt and the raw question
    """

    SCORE_TEMPERATURE = 0.1
    SCORE_MAX_TOKENS = 10
    ANSWER_TEMPERATURE = 0.7
    ANSWER_MAX_TOKENS = 1000

    def __init__(
        self,
        kind: ResponderKind,
        name: str,
        profile: ResponderProfile,
        llm: LLMPort,
    ):
        self.kind = kind
        self.name = name
        self.profile = profile
        self.llm = llm

    @property
    def command(self) -> str:
        return self.kind.value

    @property
    def topics(self):
        return self.profile.topics

    @property
    def keywords(self):
        return self.profile.keywords

    @property
    def threshold(self) -> float:
        return self.profile.relevance_threshold

    def relevance_prompt(self) -> str:
        return RELEVANCE_PROMPT.format(
            topics=", ".join(sorted(self.profile.topics)),
            keywords=", ".join(sorted(self.profile.keywords)),
        )

    async def score_relevance(self, text: str) -> float:
        """Relevance of text to this responder's domain, in [0, 1]. Never raises."""
        try:
            raw = await self.llm.complete(
                self.relevance_prompt(),
                text,
                temperature=self.SCORE_TEMPERATURE,
                max_tokens=self.SCORE_MAX_TOKENS,
            )
            return parse_score(raw)
        except Exception as e:
            _log(f"[{self.name}] relevance check failed: {e}")
            return 0.0

    async def should_respond(self, text: str) -> bool:
        return await self.score_relevance(text) >= self.threshold

    async def generate(self, text: str) -> str:
        """Answer text with the domain prompt. Returns an apology on any failure."""
        try:
            response = await self.llm.complete(
                self.profile.prompt_template,
                text,
                temperature=self.ANSWER_TEMPERATURE,
                max_tokens=self.ANSWER_MAX_TOKENS,
            )
        except Exception as e:
            _log(f"[{self.name}] generate failed: {e}")
            return APOLOGY_TEXT
        return response or EMPTY_ANSWER_TEXT

    def __repr__(self) -> str:
        return f"<{self.name} kind={self.kind.value} threshold={self.threshold}>"


# kind -> display name used in logs
SPECIALIST_NAMES = {
    ResponderKind.FATWA: "FatwaAgent",
    ResponderKind.MAZHAB: "MazhabAgent",
    ResponderKind.JAKIM: "JakimAgent",
    ResponderKind.MALAYSIAN_FATWA: "MalaysianFatwaAgent",
    ResponderKind.IBADAH: "IbadahAgent",
}


def build_specialists(
    llm: LLMPort,
    threshold: float = 0.7,
    profiles: Optional[Dict[ResponderKind, ResponderProfile]] = None,
) -> Dict[ResponderKind, Responder]:
    """Instantiate every specialist in declared order."""
    profiles = profiles or build_profiles(threshold=threshold)
    return {
        kind: Responder(kind=kind, name=name, profile=profiles[kind], llm=llm)
        for kind, name in SPECIALIST_NAMES.items()
    }
