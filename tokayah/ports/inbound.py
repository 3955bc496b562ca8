"""Inbound port — transport-agnostic message representation."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class InboundMessage:
    """Telegram/CLI-agnostic chat message, consumed by one routing decision."""

    text: str
    channel_id: str
    message_id: int
    reply_to_text: Optional[str] = None
    reply_to_self: bool = False  # the replied-to message was sent by this bot
    is_from_self: bool = False

    @property
    def is_reply(self) -> bool:
        return self.reply_to_text is not None
