"""Configuration management for the payroll scheduler.

Settings come from the environment (optionally a ``.env`` file). The
workflow dispatcher gets its own explicit, validated ``DispatchConfig``
rather than reading the environment per request.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from datetime import time
from functools import lru_cache
from typing import Any
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from payroll_scheduler.errors import ConfigurationError

DEFAULT_TIMEZONE = "America/Toronto"
DEFAULT_SEND_TIME = time(9, 0)
DEFAULT_SOURCE = "payroll-scheduler/payroll"


@dataclass(frozen=True)
class DispatchConfig:
    """
    Outbound workflow endpoint configuration.

    Attributes:
        webhook_url: Endpoint receiving the scheduling payload. Required.
        secret: Shared secret sent in ``auth_header``. Optional.
        auth_header: Header name carrying the secret. Default ``X-API-Key``.
        timeout_seconds: Bound on the whole request. Default 10.
        default_timezone: Zone used when a request names none.
        default_send_time: Local wall-clock time used for date-only sends.
        source: Tag identifying this system in the payload.
    """

    webhook_url: str
    secret: str | None = None
    auth_header: str = "X-API-Key"
    timeout_seconds: float = 10.0
    default_timezone: str = DEFAULT_TIMEZONE
    default_send_time: time = DEFAULT_SEND_TIME
    source: str = DEFAULT_SOURCE
    extra_headers: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not self.webhook_url:
            raise ConfigurationError("webhook_url is required for dispatch")
        parsed = urlparse(self.webhook_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                "webhook_url must be an absolute http(s) URL",
                {"webhook_url": self.webhook_url},
            )
        if not 1 <= self.timeout_seconds <= 120:
            raise ConfigurationError("timeout_seconds must be between 1 and 120")
        if not self.auth_header:
            raise ConfigurationError("auth_header must not be empty")
        try:
            ZoneInfo(self.default_timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(
                f"Unknown default_timezone '{self.default_timezone}'"
            ) from e

    def headers(self) -> dict[str, str]:
        """Request headers, including the shared secret when configured."""
        headers = {"Content-Type": "application/json", **self.extra_headers}
        if self.secret:
            headers[self.auth_header] = self.secret
        return headers


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment."""

    database_url: str
    host: str
    port: int
    debug: bool
    log_level: str
    workflow_webhook_url: str | None = None
    workflow_webhook_secret: str | None = None
    workflow_auth_header: str = "X-API-Key"
    workflow_timeout_seconds: float = 10.0
    timezone: str = DEFAULT_TIMEZONE
    update_token: str | None = None
    employee_webhook_url: str | None = None
    employee_webhook_secret: str | None = None

    @property
    def dispatch_enabled(self) -> bool:
        return bool(self.workflow_webhook_url)

    def dispatch_config(self) -> DispatchConfig:
        """Build the validated dispatcher configuration.

        Raises ConfigurationError when no endpoint is configured.
        """
        if not self.workflow_webhook_url:
            raise ConfigurationError(
                "WORKFLOW_WEBHOOK_URL is not configured; schedule dispatch is disabled"
            )
        return DispatchConfig(
            webhook_url=self.workflow_webhook_url,
            secret=self.workflow_webhook_secret,
            auth_header=self.workflow_auth_header,
            timeout_seconds=self.workflow_timeout_seconds,
            default_timezone=self.timezone,
        )

    def redacted(self) -> dict[str, Any]:
        """Settings safe to log."""
        return {
            "database_url": self.database_url.split("@")[-1],
            "host": self.host,
            "port": self.port,
            "debug": self.debug,
            "dispatch_enabled": self.dispatch_enabled,
            "update_token_set": bool(self.update_token),
            "timezone": self.timezone,
        }

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment variables."""
        load_dotenv()

        debug = os.getenv("DEBUG", "false").lower() == "true"
        return cls(
            database_url=os.getenv("DATABASE_URL", "sqlite+aiosqlite:///./payroll.db"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            debug=debug,
            log_level=os.getenv("LOG_LEVEL", "DEBUG" if debug else "INFO").upper(),
            workflow_webhook_url=os.getenv("WORKFLOW_WEBHOOK_URL") or None,
            workflow_webhook_secret=os.getenv("WORKFLOW_WEBHOOK_SECRET") or None,
            workflow_auth_header=os.getenv("WORKFLOW_AUTH_HEADER", "X-API-Key"),
            workflow_timeout_seconds=float(os.getenv("WORKFLOW_TIMEOUT_SECONDS", "10")),
            timezone=os.getenv("PAYROLL_TIMEZONE", DEFAULT_TIMEZONE),
            update_token=os.getenv("PAYROLL_UPDATE_TOKEN") or None,
            employee_webhook_url=os.getenv("EMPLOYEE_WEBHOOK_URL") or None,
            employee_webhook_secret=os.getenv("EMPLOYEE_WEBHOOK_SECRET") or None,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.from_env()
