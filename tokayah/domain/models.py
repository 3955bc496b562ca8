"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional


class ResponderKind(str, Enum):
    """Closed set of responders, in declared routing order."""

    FATWA = "fatwa"
    MAZHAB = "mazhab"
    JAKIM = "jakim"
    MALAYSIAN_FATWA = "malaysianfatwa"
    IBADAH = "ibadah"
    OPINION = "opinion"  # synthesizer


@dataclass(frozen=True)
class ResponderProfile:
    """Topic model and prompt of one responder."""

    topics: FrozenSet[str]
    keywords: FrozenSet[str]
    prompt_template: str
    relevance_threshold: float = 0.7


@dataclass(frozen=True)
class AgentAnswer:
    """One specialist's answer collected during a synthesis fan-out."""

    source_label: str
    text: str


@dataclass(frozen=True)
class CannedReply:
    """Fixed reply for a trivial interaction."""

    category: str  # e.g. "greeting", "thanks", "identity"
    text: str


class RouteAction(str, Enum):
    IGNORE = "ignore"
    PROMPT = "prompt"
    TRIVIAL = "trivial"
    SPECIALIST = "specialist"
    SYNTHESIS = "synthesis"
    COMMAND = "command"
    FALLBACK = "fallback"
    ERROR = "error"
    GROUP_ONLY = "group_only"
    MISSING_QUESTION = "missing_question"


@dataclass
class RouteResult:
    """Outcome of one routing decision: what to send, in order."""

    action: RouteAction
    chunks: List[str] = field(default_factory=list)
    markup: bool = False
    responder: Optional[ResponderKind] = None

    @property
    def should_reply(self) -> bool:
        return bool(self.chunks)
