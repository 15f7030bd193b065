"""Server configuration via environment variables."""

from __future__ import annotations

import logging
import os
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

DEFAULT_BASE_URL = "https://api.orshot.com"
VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}
VALID_ENVIRONMENTS = {"development", "production", "test"}
VALID_TRANSPORTS = {"stdio", "http", "sse"}

# Every variable ServerConfig.from_env reads; .env files may only set these.
ENV_VARS = frozenset({
    "ORSHOT_API_KEY",
    "ORSHOT_API_BASE",
    "ORSHOT_API_TIMEOUT",
    "ORSHOT_API_RETRIES",
    "ORSHOT_API_RETRY_DELAY",
    "ORSHOT_API_RETRY_MAX_DELAY",
    "ORSHOT_MAX_TEMPLATE_ID_LENGTH",
    "ORSHOT_MAX_API_KEY_LENGTH",
    "ORSHOT_REQUIRE_API_KEY",
    "ORSHOT_DISABLE_AUTO_MAPPING",
    "ORSHOT_AUTO_MAPPING_FALLBACK",
    "ORSHOT_LOG_LEVEL",
    "ORSHOT_ENVIRONMENT",
    "ORSHOT_MCP_TRANSPORT",
    "ORSHOT_MCP_HOST",
    "PORT",
})

logger = logging.getLogger(__name__)


def _env_flag(name: str, default: bool) -> bool:
    """Read a boolean env var; unset or blank falls back to *default*."""
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


class ServerConfig(BaseModel):
    """Runtime configuration resolved from environment."""

    api_key: str = Field(default="")
    base_url: str = Field(default=DEFAULT_BASE_URL)
    request_timeout: float = Field(default=30.0, ge=1.0, le=60.0)
    retry_max_attempts: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0.1, le=10.0)
    retry_max_delay: float = Field(default=60.0)
    max_template_id_length: int = Field(default=100, ge=1, le=200)
    max_api_key_length: int = Field(default=200, ge=10, le=500)
    require_api_key: bool = Field(default=True)
    auto_mapping_enabled: bool = Field(default=True)
    auto_mapping_fallback: bool = Field(default=True)
    log_level: str = Field(default="INFO")
    environment: str = Field(default="production")
    transport: str = Field(default="stdio")
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=3000, ge=1, le=65535)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, value: str) -> str:
        url = value.strip().rstrip("/")
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid API base URL '{value}'")
        return url

    @field_validator("retry_max_delay")
    @classmethod
    def validate_retry_max_delay(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("Retry delay must be > 0")
        return value

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level == "WARN":
            level = "WARNING"
        if level not in VALID_LOG_LEVELS:
            allowed = ", ".join(sorted(VALID_LOG_LEVELS))
            raise ValueError(f"Invalid log level '{value}'. Allowed: {allowed}")
        return level

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, value: str) -> str:
        env = value.strip().lower()
        if env not in VALID_ENVIRONMENTS:
            allowed = ", ".join(sorted(VALID_ENVIRONMENTS))
            raise ValueError(f"Invalid environment '{value}'. Allowed: {allowed}")
        return env

    @field_validator("transport")
    @classmethod
    def validate_transport(cls, value: str) -> str:
        transport = value.strip().lower()
        if transport not in VALID_TRANSPORTS:
            allowed = ", ".join(sorted(VALID_TRANSPORTS))
            raise ValueError(f"Invalid transport '{value}'. Allowed: {allowed}")
        return transport

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build config from environment variables."""
        return cls(
            api_key=os.getenv("ORSHOT_API_KEY", "").strip(),
            base_url=os.getenv("ORSHOT_API_BASE", DEFAULT_BASE_URL),
            request_timeout=float(os.getenv("ORSHOT_API_TIMEOUT", "30")),
            retry_max_attempts=int(os.getenv("ORSHOT_API_RETRIES", "3")),
            retry_base_delay=float(os.getenv("ORSHOT_API_RETRY_DELAY", "1.0")),
            retry_max_delay=float(os.getenv("ORSHOT_API_RETRY_MAX_DELAY", "60.0")),
            max_template_id_length=int(os.getenv("ORSHOT_MAX_TEMPLATE_ID_LENGTH", "100")),
            max_api_key_length=int(os.getenv("ORSHOT_MAX_API_KEY_LENGTH", "200")),
            require_api_key=_env_flag("ORSHOT_REQUIRE_API_KEY", True),
            auto_mapping_enabled=not _env_flag("ORSHOT_DISABLE_AUTO_MAPPING", False),
            auto_mapping_fallback=_env_flag("ORSHOT_AUTO_MAPPING_FALLBACK", True),
            log_level=os.getenv("ORSHOT_LOG_LEVEL", "INFO"),
            environment=os.getenv("ORSHOT_ENVIRONMENT", "production"),
            transport=os.getenv("ORSHOT_MCP_TRANSPORT", "stdio"),
            host=os.getenv("ORSHOT_MCP_HOST", "127.0.0.1"),
            port=int(os.getenv("PORT", "3000")),
        )


_config: ServerConfig | None = None


def get_config() -> ServerConfig:
    """Return the process config, creating it on first access.

    Loads ``~/.config/orshot-mcp/.env`` and ``./.env`` before reading env
    vars. Process environment always takes precedence over the files.

    Raises:
        pydantic.ValidationError: If any value is out of range.
    """
    global _config
    if _config is None:
        from .dotenv import load_dotenv

        report = load_dotenv(keys=ENV_VARS)
        if report.injected:
            logger.info(
                "Loaded %d var(s) from .env: %s",
                len(report.injected),
                ", ".join(report.injected),
            )
        if report.ignored:
            logger.warning("Ignored unknown .env var(s): %s", ", ".join(report.ignored))
        if report.malformed:
            logger.warning("Skipped malformed .env line(s): %s", ", ".join(report.malformed))
        _config = ServerConfig.from_env()
    return _config
