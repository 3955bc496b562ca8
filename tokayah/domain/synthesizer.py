"""Synthesizer — the catch-all responder that merges every specialist's answer."""

import asyncio
import re
import sys
from typing import List, Sequence

from tokayah.domain.models import AgentAnswer, ResponderKind, ResponderProfile
from tokayah.domain.personas import SYNTHESIS_REQUEST
from tokayah.domain.responders import APOLOGY_TEXT, Responder
from tokayah.ports.outbound import LLMPort

# Fixed labels, one per specialist in declared order
SOURCE_LABELS = (
    "Fatwa Perspective",
    "Mazhab Analysis",
    "JAKIM Guidelines",
    "Malaysian Fatwa Council View",
    "Islamic Practice Context",
)
EXTRA_SOURCE_LABEL = "Additional Perspective"

EMPTY_SYNTHESIS_TEXT = "I apologize, but I could not generate a comprehensive opinion at this time."

_HEADER_LINE_RE = re.compile(r"^\s*#+.*$", re.MULTILINE)


def _log(msg: str):
    print(msg, file=sys.stderr)


def source_label(index: int) -> str:
    if 0 <= index < len(SOURCE_LABELS):
        return SOURCE_LABELS[index]
    return EXTRA_SOURCE_LABEL


def clean_answer(text: str) -> str:
    """Drop header lines and blank lines from a specialist answer."""
    without_headers = _HEADER_LINE_RE.sub("", text or "")
    return "\n".join(line for line in without_headers.split("\n") if line.strip())


def combine_perspectives(answers: Sequence[AgentAnswer]) -> str:
    return "\n\n".join(
        f"{answer.source_label}:\n{clean_answer(answer.text)}" for answer in answers
    )


class Synthesizer(Responder):
    """Fans a question out to every specialist and synthesizes one answer.

    Always willing to respond; its threshold sits below the specialists'
    so it catches broad or ambiguous questions.
    """

    SYNTHESIS_MAX_TOKENS = 2000

    def __init__(
        self,
        profile: ResponderProfile,
        llm: LLMPort,
        specialists: Sequence[Responder],
    ):
        super().__init__(
            kind=ResponderKind.OPINION,
            name="Synthesizer",
            profile=profile,
            llm=llm,
        )
        self.specialists: List[Responder] = list(specialists)

    async def should_respond(self, text: str) -> bool:
        return True

    async def collect(self, question: str) -> List[AgentAnswer]:
        """Ask every specialist concurrently. Results keep declared order."""
        _log(f"[{self.name}] collecting {len(self.specialists)} perspectives")
        texts = await asyncio.gather(*(s.generate(question) for s in self.specialists))
        return [
            AgentAnswer(source_label=source_label(i), text=text)
            for i, text in enumerate(texts)
        ]

    async def generate(self, question: str) -> str:
        try:
            answers = await self.collect(question)
            perspectives = combine_perspectives(answers)
            _log(f"[{self.name}] synthesizing {len(answers)} perspectives")
            response = await self.llm.complete(
                self.profile.prompt_template,
                SYNTHESIS_REQUEST.format(question=question, perspectives=perspectives),
                temperature=self.ANSWER_TEMPERATURE,
                max_tokens=self.SYNTHESIS_MAX_TOKENS,
            )
        except Exception as e:
            _log(f"[{self.name}] synthesis failed: {e}")
            return APOLOGY_TEXT
        return response or EMPTY_SYNTHESIS_TEXT
