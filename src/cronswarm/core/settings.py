"""Process-wide settings for cronswarm.

Values are read from ``CRONSWARM_*`` environment variables and an optional
``.env`` file, validated once, and cached.

Examples:
    >>> CronswarmSettings(poll_interval_seconds=0.5).poll_interval.total_seconds()
    0.5

Tags:
    settings, configuration, pydantic, environment, cronswarm

Doc-Types:
    api-reference
"""

from __future__ import annotations

from datetime import timedelta
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CronswarmSettings(BaseSettings):
    """cronswarm configuration.

    Fields
    ──────
    docker_host           : Engine/swarm manager URL; ``None`` uses DOCKER_HOST etc.
    docker_timeout        : Per-request timeout of the docker SDK, seconds
    poll_interval_seconds : Delay between two status checks of a running job
    max_runtime_seconds   : Run-time budget before a job is reported as timed out
    log_level / log_format: structlog configuration
    slack_*               : Slack notification middleware
    """

    model_config = SettingsConfigDict(
        env_prefix="CRONSWARM_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Docker ───────────────────────────────────────────────────
    docker_host: str | None = Field(default=None)
    docker_timeout: int = Field(default=60, gt=0)

    # ── Watch loop ───────────────────────────────────────────────
    poll_interval_seconds: float = Field(default=0.1, gt=0)
    max_runtime_seconds: int = Field(default=24 * 60 * 60, gt=0)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: Literal["json", "console"] | None = Field(default=None)

    # ── Slack ────────────────────────────────────────────────────
    slack_webhook: str = Field(default="")
    slack_only_on_error: bool = Field(default=False)
    slack_logs_url: str = Field(default="")

    @property
    def poll_interval(self) -> timedelta:
        return timedelta(seconds=self.poll_interval_seconds)

    @property
    def max_runtime(self) -> timedelta:
        return timedelta(seconds=self.max_runtime_seconds)

    @property
    def json_logs(self) -> bool | None:
        if self.log_format is None:
            return None
        return self.log_format == "json"


_settings_cache: dict[str, CronswarmSettings] = {}


def get_settings(*, _force_reload: bool = False) -> CronswarmSettings:
    """Load, validate, and cache a :class:`CronswarmSettings` instance."""
    if not _force_reload and "default" in _settings_cache:
        return _settings_cache["default"]

    settings = CronswarmSettings()
    _settings_cache["default"] = settings
    return settings


def clear_settings_cache() -> None:
    """Clear the settings cache (primarily for testing)."""
    _settings_cache.clear()
