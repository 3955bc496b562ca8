"""Configuration and environment loading."""

__version__ = "0.1.0"

import os
import sys
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

load_dotenv()

_stderr_print = lambda *a, **kw: print(*a, **kw, file=sys.stderr)

ROUTING_SPECIALIST = "specialist"
ROUTING_SYNTHESIZE = "synthesize"
SUPPORTED_ROUTING_MODES = (ROUTING_SPECIALIST, ROUTING_SYNTHESIZE)

REQUIRED_ENV_VARS = ("TELEGRAM_TOKEN", "DEEPSEEK_API_KEY", "GROUP_IDS")


class ConfigurationError(Exception):
    """Raised at startup when required settings are missing or inconsistent."""


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        _stderr_print(f"Invalid {name}={raw!r}, falling back to {default}")
        return default


def _routing_mode_from_env() -> str:
    mode = os.getenv("ROUTING_MODE", ROUTING_SPECIALIST).strip().lower()
    if mode not in SUPPORTED_ROUTING_MODES:
        _stderr_print(f"Unsupported ROUTING_MODE={mode!r}, falling back to {ROUTING_SPECIALIST!r}")
        return ROUTING_SPECIALIST
    return mode


def parse_group_ids(raw: str) -> List[str]:
    """Split a comma separated GROUP_IDS value, dropping blanks."""
    return [part.strip() for part in raw.split(",") if part.strip()]


@dataclass
class UsageLimitsConfig:
    max_calls_per_minute: int = 60
    max_calls_per_hour: int = 600
    max_calls_per_day: int = 5000
    min_call_interval_seconds: float = 0
    warning_threshold_pct: int = 80
    paused: bool = False


@dataclass
class TelegramConfig:
    token: str = ""
    group_ids: List[str] = field(default_factory=list)


@dataclass
class LLMConfig:
    api_key: str = ""
    base_url: str = "https://api.deepseek.com/v1"
    model: str = "deepseek-chat"
    timeout_seconds: float = 60.0


@dataclass
class RoutingConfig:
    mode: str = ROUTING_SPECIALIST
    broad_questions: bool = False
    specialist_threshold: float = 0.7
    synthesizer_threshold: float = 0.3


@dataclass
class AppConfig:
    """Typed application configuration."""

    port: int = 3000
    shutdown_grace_seconds: float = 10.0
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    usage_limits: UsageLimitsConfig = field(default_factory=UsageLimitsConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Create AppConfig from environment variables."""
        return cls(
            port=_env_int("PORT", 3000),
            shutdown_grace_seconds=_env_float("SHUTDOWN_GRACE_SECONDS", 10.0),
            telegram=TelegramConfig(
                token=os.getenv("TELEGRAM_TOKEN", "").strip(),
                group_ids=parse_group_ids(os.getenv("GROUP_IDS", "")),
            ),
            llm=LLMConfig(
                api_key=os.getenv("DEEPSEEK_API_KEY", "").strip(),
                base_url=os.getenv("DEEPSEEK_BASE_URL", "https://api.deepseek.com/v1").rstrip("/"),
                model=os.getenv("DEEPSEEK_MODEL", "deepseek-chat"),
                timeout_seconds=_env_float("LLM_TIMEOUT_SECONDS", 60.0),
            ),
            routing=RoutingConfig(
                mode=_routing_mode_from_env(),
                broad_questions=_env_bool("BROAD_QUESTION_ROUTING", False),
                specialist_threshold=_env_float("SPECIALIST_THRESHOLD", 0.7),
                synthesizer_threshold=_env_float("SYNTHESIZER_THRESHOLD", 0.3),
            ),
        )

    def validate(self) -> "AppConfig":
        """Check required settings. Raises ConfigurationError listing every problem."""
        missing = []
        if not self.telegram.token:
            missing.append("TELEGRAM_TOKEN")
        if not self.llm.api_key:
            missing.append("DEEPSEEK_API_KEY")
        if not self.telegram.group_ids:
            missing.append("GROUP_IDS")
        if missing:
            raise ConfigurationError(
                f"{', '.join(missing)} not set in environment variables"
            )
        routing = self.routing
        if not 0.0 <= routing.synthesizer_threshold < routing.specialist_threshold <= 1.0:
            raise ConfigurationError(
                "synthesizer threshold must be lower than the specialist threshold "
                f"(got {routing.synthesizer_threshold} / {routing.specialist_threshold})"
            )
        return self
