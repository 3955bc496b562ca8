"""Domain layer — pure Python, no framework dependencies."""

from tokayah.domain.formatter import FormatValidationError, format_reply, render
from tokayah.domain.mention import MentionDetector
from tokayah.domain.models import (
    AgentAnswer,
    CannedReply,
    ResponderKind,
    ResponderProfile,
    RouteAction,
    RouteResult,
)
from tokayah.domain.personas import build_profiles
from tokayah.domain.responders import Responder, build_specialists
from tokayah.domain.router import Router
from tokayah.domain.synthesizer import Synthesizer
from tokayah.domain.trivial import TrivialMatcher

__all__ = [
    "FormatValidationError",
    "format_reply",
    "render",
    "MentionDetector",
    "AgentAnswer",
    "CannedReply",
    "ResponderKind",
    "ResponderProfile",
    "RouteAction",
    "RouteResult",
    "build_profiles",
    "Responder",
    "build_specialists",
    "Router",
    "Synthesizer",
    "TrivialMatcher",
]
