"""DeepSeek chat-completions adapter — implements LLMPort over aiohttp."""

import asyncio
import sys
from datetime import datetime
from typing import Any, Dict, Optional

import aiohttp

from tokayah.config import LLMConfig
from tokayah.infrastructure.usage import UsageLimitExceeded, UsageTracker
from tokayah.ports.outbound import GenerationError


def _log(msg: str):
    print(msg, file=sys.stderr)


def extract_content(payload: Any) -> str:
    """Pull the first choice's message content out of a completions payload."""
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise GenerationError(f"Malformed completion payload: {e}") from e
    if not isinstance(content, str) or not content.strip():
        raise GenerationError("Empty completion content")
    return content.strip()


class DeepSeekAdapter:
    """OpenAI-compatible chat completions client. Implements LLMPort protocol.

    Every failure (HTTP status, transport, timeout, malformed payload, quota)
    surfaces as GenerationError. Each call carries its own timeout.
    """

    def __init__(self, config: LLMConfig, usage_tracker: Optional[UsageTracker] = None):
        self.config = config
        self.usage_tracker = usage_tracker or UsageTracker()

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def _body(self, system_prompt: str, user_message: str, temperature: float, max_tokens: int) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

    async def complete(
        self,
        system_prompt: str,
        user_message: str,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> str:
        try:
            self.usage_tracker.check_limits()
        except UsageLimitExceeded as e:
            raise GenerationError(f"Usage limit: {e}") from e

        timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
        started = datetime.now()
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(
                    self.endpoint,
                    json=self._body(system_prompt, user_message, temperature, max_tokens),
                    headers=self._headers(),
                ) as resp:
                    if resp.status >= 400:
                        detail = (await resp.text())[:200]
                        raise GenerationError(f"DeepSeek API {resp.status}: {detail}")
                    payload = await resp.json()
        except asyncio.TimeoutError as e:
            raise GenerationError(f"Timeout ({self.config.timeout_seconds}s)") from e
        except aiohttp.ClientError as e:
            raise GenerationError(f"Transport error: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Invalid JSON response: {e}") from e

        content = extract_content(payload)
        self.usage_tracker.record_call()
        elapsed = (datetime.now() - started).total_seconds()
        _log(f"[DeepSeek] completed in {elapsed:.1f}s ({len(content)} chars)")
        warning = self.usage_tracker.get_warning()
        if warning:
            _log(f"[DeepSeek] {warning}")
        return content
