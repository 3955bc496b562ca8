"""Port interfaces (Hexagonal Architecture)."""

from tokayah.ports.inbound import InboundMessage
from tokayah.ports.outbound import GenerationError, LLMPort, ReplyPort

__all__ = [
    "InboundMessage",
    "GenerationError",
    "LLMPort",
    "ReplyPort",
]
