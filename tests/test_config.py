"""Tests for the typed AppConfig dataclass and environment loading."""

import pytest

from tokayah.config import (
    ROUTING_SPECIALIST,
    ROUTING_SYNTHESIZE,
    AppConfig,
    ConfigurationError,
    LLMConfig,
    RoutingConfig,
    TelegramConfig,
    UsageLimitsConfig,
    parse_group_ids,
)

ENV_VARS = (
    "TELEGRAM_TOKEN", "DEEPSEEK_API_KEY", "GROUP_IDS", "DEEPSEEK_BASE_URL", "DEEPSEEK_MODEL",
    "LLM_TIMEOUT_SECONDS", "ROUTING_MODE", "BROAD_QUESTION_ROUTING", "PORT",
    "SHUTDOWN_GRACE_SECONDS", "SPECIALIST_THRESHOLD", "SYNTHESIZER_THRESHOLD",
)


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def _valid_config():
    return AppConfig(
        telegram=TelegramConfig(token="t", group_ids=["-1001"]),
        llm=LLMConfig(api_key="k"),
    )


class TestDefaults:
    def test_llm(self):
        c = LLMConfig()
        assert c.base_url == "https://api.deepseek.com/v1"
        assert c.model == "deepseek-chat"
        assert c.timeout_seconds == 60.0

    def test_routing(self):
        c = RoutingConfig()
        assert c.mode == ROUTING_SPECIALIST
        assert c.broad_questions is False
        assert c.synthesizer_threshold < c.specialist_threshold

    def test_usage_limits_allow_fan_out(self):
        assert UsageLimitsConfig().min_call_interval_seconds == 0


class TestParseGroupIds:
    def test_splits_and_trims(self):
        assert parse_group_ids(" -1001, -1002 ,,") == ["-1001", "-1002"]

    def test_empty(self):
        assert parse_group_ids("") == []


class TestFromEnv:
    def test_reads_environment(self, clean_env):
        clean_env.setenv("TELEGRAM_TOKEN", "123:abc")
        clean_env.setenv("DEEPSEEK_API_KEY", "sk-1")
        clean_env.setenv("GROUP_IDS", "-1001,-1002")
        clean_env.setenv("ROUTING_MODE", "Synthesize")
        clean_env.setenv("BROAD_QUESTION_ROUTING", "true")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("DEEPSEEK_BASE_URL", "https://proxy.local/v1/")
        config = AppConfig.from_env()
        assert config.telegram.token == "123:abc"
        assert config.telegram.group_ids == ["-1001", "-1002"]
        assert config.llm.api_key == "sk-1"
        assert config.llm.base_url == "https://proxy.local/v1"
        assert config.routing.mode == ROUTING_SYNTHESIZE
        assert config.routing.broad_questions is True
        assert config.port == 8080

    def test_unknown_mode_falls_back(self, clean_env):
        clean_env.setenv("ROUTING_MODE", "roundrobin")
        assert AppConfig.from_env().routing.mode == ROUTING_SPECIALIST

    def test_bad_float_falls_back(self, clean_env):
        clean_env.setenv("LLM_TIMEOUT_SECONDS", "soon")
        assert AppConfig.from_env().llm.timeout_seconds == 60.0

    def test_bad_port_falls_back(self, clean_env):
        clean_env.setenv("PORT", "http")
        assert AppConfig.from_env().port == 3000


class TestValidate:
    def test_valid_returns_self(self):
        config = _valid_config()
        assert config.validate() is config

    def test_lists_every_missing_variable(self):
        with pytest.raises(ConfigurationError, match="TELEGRAM_TOKEN, DEEPSEEK_API_KEY, GROUP_IDS"):
            AppConfig().validate()

    def test_missing_group_ids(self):
        config = _valid_config()
        config.telegram.group_ids = []
        with pytest.raises(ConfigurationError, match="GROUP_IDS"):
            config.validate()

    def test_synthesizer_threshold_must_be_lower(self):
        config = _valid_config()
        config.routing.synthesizer_threshold = 0.7
        with pytest.raises(ConfigurationError, match="threshold"):
            config.validate()
