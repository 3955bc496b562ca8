"""Usage tracking and rate limiting for generation calls."""

import json
import sys
from dataclasses import asdict
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, Optional, Union

from tokayah.config import UsageLimitsConfig


class UsageLimitExceeded(Exception):
    """Raised when a usage limit is exceeded"""


class UsageTracker:
    """Tracks generation calls and enforces rate limits.

    In-memory by default; pass usage_file to persist counters across restarts.
    """

    def __init__(
        self,
        limits: Union[UsageLimitsConfig, Dict[str, Any], None] = None,
        usage_file: Optional[str] = None,
    ):
        if limits is None:
            limits = UsageLimitsConfig()
        self.limits: Dict[str, Any] = asdict(limits) if isinstance(limits, UsageLimitsConfig) else dict(limits)
        self.usage_file = Path(usage_file) if usage_file else None
        if self.usage_file:
            self.usage_file.parent.mkdir(parents=True, exist_ok=True)
        self._data = self._load()

    def _load(self) -> Dict[str, Any]:
        if self.usage_file and self.usage_file.exists():
            try:
                with open(self.usage_file, "r", encoding="utf-8") as f:
                    return json.load(f)
            except (OSError, ValueError) as e:
                print(f"[Usage] ignoring unreadable usage file: {e}", file=sys.stderr)
        return {"calls": [], "total_calls": 0}

    def _save(self):
        if not self.usage_file:
            return
        try:
            with open(self.usage_file, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            print(f"[Usage] failed to save usage data: {e}", file=sys.stderr)

    def _calls_since(self, seconds: float) -> int:
        cutoff = (datetime.now() - timedelta(seconds=seconds)).isoformat()
        return sum(1 for ts in self._data["calls"] if ts > cutoff)

    def _cleanup_old_calls(self):
        """Remove call timestamps older than 24 hours"""
        cutoff = (datetime.now() - timedelta(hours=24)).isoformat()
        self._data["calls"] = [ts for ts in self._data["calls"] if ts > cutoff]

    def check_limits(self):
        """Check all usage limits before a call. Raises UsageLimitExceeded if any limit is hit."""
        limits = self.limits

        if limits.get("paused", False):
            raise UsageLimitExceeded("Usage is paused by configuration")

        min_interval = limits.get("min_call_interval_seconds", 0)
        if min_interval and self._data["calls"]:
            last_call = self._data["calls"][-1]
            elapsed = (datetime.now() - datetime.fromisoformat(last_call)).total_seconds()
            if elapsed < min_interval:
                raise UsageLimitExceeded(
                    f"Cooldown: {min_interval - elapsed:.1f}s remaining "
                    f"(min interval: {min_interval}s)"
                )

        for window, seconds, key in (
            ("Per-minute", 60, "max_calls_per_minute"),
            ("Per-hour", 3600, "max_calls_per_hour"),
            ("Daily", 86400, "max_calls_per_day"),
        ):
            used = self._calls_since(seconds)
            if used >= limits[key]:
                raise UsageLimitExceeded(f"{window} limit reached: {used}/{limits[key]}")

    def record_call(self):
        """Record a successful call"""
        self._cleanup_old_calls()
        self._data["calls"].append(datetime.now().isoformat())
        self._data["total_calls"] = self._data.get("total_calls", 0) + 1
        self._save()

    def get_warning(self) -> Optional[str]:
        """Return a warning message if daily usage exceeds the threshold percentage"""
        limits = self.limits
        per_day = self._calls_since(86400)
        threshold = limits["max_calls_per_day"] * limits["warning_threshold_pct"] / 100

        if per_day >= threshold:
            return (
                f"Usage warning: {per_day}/{limits['max_calls_per_day']} "
                f"daily calls used ({per_day * 100 // limits['max_calls_per_day']}%)"
            )
        return None

    def get_status(self) -> Dict[str, Any]:
        limits = self.limits
        return {
            "calls_today": self._calls_since(86400),
            "calls_this_hour": self._calls_since(3600),
            "calls_this_minute": self._calls_since(60),
            "limits": {
                "per_minute": limits["max_calls_per_minute"],
                "per_hour": limits["max_calls_per_hour"],
                "per_day": limits["max_calls_per_day"],
            },
            "paused": limits.get("paused", False),
            "total_calls_all_time": self._data.get("total_calls", 0),
        }
