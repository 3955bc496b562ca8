"""Outbound ports — interfaces for external system adapters."""

from typing import Optional, Protocol, runtime_checkable


class GenerationError(Exception):
    """Transport, HTTP or quota failure at the text-generation boundary."""


@runtime_checkable
class LLMPort(Protocol):
    """Interface for text-generation backends."""

    async def complete(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str: ...


@runtime_checkable
class ReplyPort(Protocol):
    """Interface for sending replies back to a chat."""

    async def reply(
        self,
        channel_id: str,
        text: str,
        reply_to_message_id: Optional[int] = None,
        markup: bool = False,
    ) -> None: ...
