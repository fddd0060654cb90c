"""Tests for configuration validation."""
import pytest
from pydantic import ValidationError as PydanticValidationError

from kieai.config import DEFAULT_BASE_URL, SDKConfig, Settings, normalize_config
from kieai.utils.exceptions import ConfigInvalidError, ErrorKind


class TestNormalizeConfig:
    def test_defaults_applied(self):
        config = normalize_config({"api_key": "k"})
        assert config.api_key == "k"
        assert config.base_url == DEFAULT_BASE_URL
        assert config.timeout == 30.0
        assert config.retry.max_retries == 3
        assert config.retry.retry_delay == 1.0
        assert config.retry.exponential_backoff is True

    def test_sdk_config_passes_through(self):
        config = SDKConfig(api_key="k")
        assert normalize_config(config) is config

    def test_missing_api_key(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            normalize_config({})
        assert "API key is required" in str(exc_info.value)
        assert exc_info.value.context["field"] == "api_key"
        assert exc_info.value.kind is ErrorKind.CONFIG_INVALID

    def test_blank_api_key(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            normalize_config({"api_key": "   "})
        assert "API key is required" in str(exc_info.value)
        assert "KIEAI_API_KEY" in exc_info.value.hint

    def test_invalid_base_url(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            normalize_config({"api_key": "k", "base_url": "not-a-url"})
        assert exc_info.value.context["field"] == "base_url"
        assert isinstance(exc_info.value.cause, PydanticValidationError)

    def test_trailing_slash_stripped(self):
        config = normalize_config({"api_key": "k", "base_url": "https://example.com/"})
        assert config.base_url == "https://example.com"

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            normalize_config({"api_key": "k", "timeout": 0})
        assert exc_info.value.context["field"] == "timeout"

    def test_negative_retry_count(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            normalize_config({"api_key": "k", "retry": {"max_retries": -1}})
        assert exc_info.value.context["field"] == "retry.max_retries"

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigInvalidError) as exc_info:
            normalize_config({"api_key": "k", "apiKey": "k"})
        assert exc_info.value.context["field"] == "apiKey"

    def test_non_mapping_rejected(self):
        with pytest.raises(ConfigInvalidError, match="must be a mapping"):
            normalize_config("k")

    def test_config_is_frozen(self):
        config = normalize_config({"api_key": "k"})
        with pytest.raises(PydanticValidationError):
            config.api_key = "other"


class TestSettings:
    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("KIEAI_API_KEY", "env-key")
        monkeypatch.setenv("KIEAI_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("KIEAI_MAX_RETRIES", "5")
        config = SDKConfig.from_settings(Settings())
        assert config.api_key == "env-key"
        assert config.base_url == "https://env.example.com"
        assert config.retry.max_retries == 5
