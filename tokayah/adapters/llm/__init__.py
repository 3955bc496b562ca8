"""LLM adapters — DeepSeek chat completions."""

from tokayah.adapters.llm.deepseek_adapter import DeepSeekAdapter
from tokayah.config import AppConfig
from tokayah.infrastructure.usage import UsageTracker


def create_llm(config: AppConfig) -> DeepSeekAdapter:
    """Build the LLM adapter with a usage tracker bound to the configured limits."""
    return DeepSeekAdapter(config.llm, usage_tracker=UsageTracker(config.usage_limits))


__all__ = ["DeepSeekAdapter", "create_llm"]
