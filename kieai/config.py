"""SDK configuration.

``Settings`` reads defaults from the environment (``KIEAI_*``) or a ``.env``
file.  ``SDKConfig`` is the validated, frozen snapshot every request reads;
build one with :func:`normalize_config`.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from kieai.utils.exceptions import ConfigInvalidError

DEFAULT_BASE_URL = "https://api.kie.ai"
DEFAULT_TIMEOUT = 30.0


class Settings(BaseSettings):
    # Credentials
    api_key: str = ""
    base_url: str = DEFAULT_BASE_URL

    # Transport
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = 3
    retry_delay: float = 1.0
    exponential_backoff: bool = True

    # Logging
    debug: bool = False
    log_json: bool = False

    model_config = SettingsConfigDict(
        env_prefix="KIEAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()


class RetryConfig(BaseModel):
    """Retry policy for idempotent requests.

    ``retry_delay`` is in seconds; with ``exponential_backoff`` the n-th
    retry sleeps ``retry_delay * 2 ** n``.
    """

    max_retries: int = Field(default=3, ge=0)
    retry_delay: float = Field(default=1.0, ge=0)
    exponential_backoff: bool = True

    model_config = ConfigDict(frozen=True, extra="forbid")


class SDKConfig(BaseModel):
    """Immutable client configuration.

    Attributes:
        api_key: Bearer token sent with every request.
        base_url: API root, without trailing slash.
        timeout: Per-request timeout in seconds.
        retry: Retry policy applied to idempotent requests.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("api_key")
    @classmethod
    def _api_key_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("API key is required")
        return value

    @field_validator("base_url")
    @classmethod
    def _base_url_is_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError('baseURL must be a valid URL like "https://api.example.com"')
        return value.rstrip("/")

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> SDKConfig:
        source = source or settings
        return cls(
            api_key=source.api_key,
            base_url=source.base_url,
            timeout=source.timeout,
            retry=RetryConfig(
                max_retries=source.max_retries,
                retry_delay=source.retry_delay,
                exponential_backoff=source.exponential_backoff,
            ),
        )


# Remediation hints keyed by the top-level field that failed validation.
_HINTS: dict[str, str] = {
    "api_key": "Provide a valid API key in the configuration or set KIEAI_API_KEY",
    "base_url": 'Provide a valid base URL like "https://api.example.com"',
    "timeout": "Provide a timeout in seconds (e.g. 30.0)",
    "retry": "Provide non-negative retry counts and delays",
}


def normalize_config(config: SDKConfig | Mapping[str, Any] | None = None) -> SDKConfig:
    """Validate *config* and return the frozen :class:`SDKConfig`.

    ``None`` builds the configuration from :data:`settings`.  Any validation
    problem surfaces as :class:`ConfigInvalidError`.
    """
    if isinstance(config, SDKConfig):
        return config

    try:
        if config is None:
            return SDKConfig.from_settings()
        if not isinstance(config, Mapping):
            raise ConfigInvalidError(
                "SDK configuration must be a mapping or SDKConfig",
                hint="Provide a valid SDKConfig object",
                context={"provided_type": type(config).__name__},
            )
        return SDKConfig.model_validate(dict(config))
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        loc = first.get("loc", ())
        field = ".".join(str(part) for part in loc) or "config"
        message = first.get("msg", "invalid configuration").removeprefix("Value error, ")
        if first.get("type") == "missing" and field == "api_key":
            message = "API key is required"
        raise ConfigInvalidError(
            f"Invalid configuration for {field}: {message}",
            hint=_HINTS.get(str(loc[0]) if loc else "", "Check the SDK configuration"),
            context={"field": field, "errors": len(exc.errors())},
        ) from exc
