"""
Structured error types for cronswarm.

Every failure a job run can produce is a ``CronswarmError`` subclass carrying
enough metadata for a notification middleware or the scheduler to report it
without parsing message strings:

- **Category:** Where the failure came from (image, cluster, job, timeout)
- **Retryable:** Whether firing the job again may succeed
- **Context:** Job, instance name, service/container id, image
- **Cause:** The underlying exception (docker SDK, OS error, ...)

Manifesto:
    - **Infrastructure vs application:** A rejected task and a task that
      exited with code 3 are different failures and get different classes
    - **Error Chaining:** Remote-call errors are wrapped, never replaced
    - **No sentinels:** Outcomes are exceptions, not magic exit codes

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                      CronswarmError                              │
        │  (category, retryable, context, cause)                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ClusterError        ImagePullError     ExitCodeError            │
        │  (CLUSTER)           (IMAGE)            (JOB, exit_code)         │
        │       │                                                          │
        │  ServiceNotFound     MaxTimeRunningError  LocalCommandError      │
        │  ContainerNotFound   (TIMEOUT)            (JOB)                  │
        │  ServiceCreateError                                              │
        │  ServiceInspectError JobSkippedError     ConfigError             │
        │  ContainerError      (SKIPPED)           (CONFIG)                │
        │  CleanupError                                                    │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Wrapping a remote failure with identifying context:

    >>> try:
    ...     raise OSError("connection refused")
    ... except OSError as e:
    ...     err = ImagePullError("error pulling image 'busybox'", cause=e)
    >>> err.with_context(image="busybox").context.image
    'busybox'

    Exit codes survive into the message:

    >>> str(ExitCodeError(3))
    'exit code: 3'

Tags:
    error-handling, exception-hierarchy, cronswarm, job-runner

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        IMAGE: Image could not be pulled
        CLUSTER: Cluster manager API failures (create, inspect, delete)
        JOB: The workload itself failed (non-zero exit, command not found)
        TIMEOUT: The run exceeded its time budget
        SKIPPED: The run was deliberately not executed
        CONFIG: Invalid configuration
        INTERNAL: Bugs, unexpected state
    """

    IMAGE = "IMAGE"
    CLUSTER = "CLUSTER"
    JOB = "JOB"
    TIMEOUT = "TIMEOUT"
    SKIPPED = "SKIPPED"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only set what is relevant; ``to_dict()`` drops ``None`` fields so the
    result can be passed straight to a structured logger.

    Attributes:
        job: Name of the job whose run failed
        instance_name: Per-run instance name (``<name>_<unix-ts>``)
        service_id: Cluster-assigned service identifier
        container_id: Container identifier
        image: Fully qualified image reference
        metadata: Additional key-value pairs
    """

    job: str | None = None
    instance_name: str | None = None
    service_id: str | None = None
    container_id: str | None = None
    image: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["job", "instance_name", "service_id", "container_id", "image"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class CronswarmError(Exception):
    """
    Base exception for all cronswarm errors.

    Subclasses set ``default_category`` and ``default_retryable`` so call
    sites only pass a message and, when wrapping, the ``cause``.

    Examples:
        >>> error = CronswarmError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.retryable
        False

    Guardrails:
        ❌ DON'T: Raise a bare Exception from a job body
        ✅ DO: Raise the subclass matching the failing stage

        ❌ DON'T: Drop the docker SDK exception when wrapping
        ✅ DO: Pass it as cause= for error chaining
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> CronswarmError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ServiceCreateError("create failed").with_context(
                job="backup", image="busybox:latest"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CLUSTER ERRORS
# =============================================================================


class ClusterError(CronswarmError):
    """Cluster manager API call failed."""

    default_category = ErrorCategory.CLUSTER
    default_retryable = True


class ServiceNotFoundError(ClusterError):
    """The referenced service does not exist (anymore)."""

    default_retryable = False


class ContainerNotFoundError(ClusterError):
    """The referenced container does not exist (anymore)."""

    default_retryable = False


class ServiceCreateError(ClusterError):
    """The cluster manager rejected the service descriptor."""


class ServiceInspectError(ClusterError):
    """A freshly created service could not be read back."""


class ContainerError(ClusterError):
    """Container create/start/inspect/exec failed."""


class CleanupError(ClusterError):
    """Removing a finished service or container failed."""


# =============================================================================
# IMAGE ERRORS
# =============================================================================


class ImagePullError(CronswarmError):
    """Image could not be fetched from its registry."""

    default_category = ErrorCategory.IMAGE
    default_retryable = True


# =============================================================================
# JOB OUTCOME ERRORS
# =============================================================================


class ExitCodeError(CronswarmError):
    """
    The workload terminated with a non-zero exit code.

    Rejected swarm tasks that report exit code 0 are surfaced here with the
    reserved code 255, so this error never carries 0.
    """

    default_category = ErrorCategory.JOB

    def __init__(self, exit_code: int, **kwargs: Any):
        super().__init__(f"exit code: {exit_code}", **kwargs)
        self.exit_code = exit_code

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["exit_code"] = self.exit_code
        return result


class LocalCommandError(CronswarmError):
    """A local command could not be started."""

    default_category = ErrorCategory.JOB


class MaxTimeRunningError(CronswarmError):
    """No terminal state was observed before the maximum run time elapsed."""

    default_category = ErrorCategory.TIMEOUT

    def __init__(self, message: str = "maximum run time exceeded", **kwargs: Any):
        super().__init__(message, **kwargs)


class JobSkippedError(CronswarmError):
    """
    The run was skipped by a middleware.

    Not a failure: ``Execution.stop()`` records it as ``skipped`` and leaves
    ``failed`` unset.
    """

    default_category = ErrorCategory.SKIPPED

    def __init__(self, message: str = "execution skipped", **kwargs: Any):
        super().__init__(message, **kwargs)


class ConfigError(CronswarmError):
    """Invalid configuration."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "CronswarmError",
    "ClusterError",
    "ServiceNotFoundError",
    "ContainerNotFoundError",
    "ServiceCreateError",
    "ServiceInspectError",
    "ContainerError",
    "CleanupError",
    "ImagePullError",
    "ExitCodeError",
    "LocalCommandError",
    "MaxTimeRunningError",
    "JobSkippedError",
    "ConfigError",
]
