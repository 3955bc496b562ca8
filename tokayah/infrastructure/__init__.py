"""Infrastructure — usage tracking."""

from tokayah.infrastructure.usage import UsageLimitExceeded, UsageTracker

__all__ = ["UsageLimitExceeded", "UsageTracker"]
