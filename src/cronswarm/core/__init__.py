"""Core primitives shared by every cronswarm module: errors, logging, settings."""

from cronswarm.core.errors import (
    CleanupError,
    ClusterError,
    ConfigError,
    ContainerError,
    ContainerNotFoundError,
    CronswarmError,
    ErrorCategory,
    ErrorContext,
    ExitCodeError,
    ImagePullError,
    JobSkippedError,
    LocalCommandError,
    MaxTimeRunningError,
    ServiceCreateError,
    ServiceInspectError,
    ServiceNotFoundError,
)
from cronswarm.core.logging import configure_logging, get_logger
from cronswarm.core.settings import CronswarmSettings, clear_settings_cache, get_settings

__all__ = [
    # Errors
    "CleanupError",
    "ClusterError",
    "ConfigError",
    "ContainerError",
    "ContainerNotFoundError",
    "CronswarmError",
    "ErrorCategory",
    "ErrorContext",
    "ExitCodeError",
    "ImagePullError",
    "JobSkippedError",
    "LocalCommandError",
    "MaxTimeRunningError",
    "ServiceCreateError",
    "ServiceInspectError",
    "ServiceNotFoundError",
    # Logging
    "configure_logging",
    "get_logger",
    # Settings
    "CronswarmSettings",
    "clear_settings_cache",
    "get_settings",
]
