"""Tests for cronswarm.core.errors module."""

import pytest

from cronswarm.core.errors import (
    CleanupError,
    ClusterError,
    ConfigError,
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
    ServiceNotFoundError,
)


class TestErrorContext:
    def test_create_empty_context(self):
        ctx = ErrorContext()
        assert ctx.job is None
        assert ctx.service_id is None
        assert ctx.metadata == {}

    def test_to_dict_drops_unset_fields(self):
        ctx = ErrorContext(job="backup", image="busybox:latest")
        assert ctx.to_dict() == {"job": "backup", "image": "busybox:latest"}


class TestCronswarmError:
    def test_defaults(self):
        error = CronswarmError("boom")
        assert str(error) == "boom"
        assert error.message == "boom"
        assert error.category == ErrorCategory.INTERNAL
        assert error.retryable is False
        assert error.cause is None

    def test_cause_is_chained(self):
        original = ValueError("low level")
        error = CronswarmError("wrapped", cause=original)
        assert error.cause is original
        assert error.__cause__ is original

    def test_with_context_sets_known_fields(self):
        error = ServiceCreateError("create failed").with_context(job="backup", image="busybox")
        assert error.context.job == "backup"
        assert error.context.image == "busybox"

    def test_with_context_puts_unknown_keys_in_metadata(self):
        error = CronswarmError("x").with_context(attempt=3)
        assert error.context.metadata == {"attempt": 3}

    def test_with_context_returns_same_instance(self):
        error = CronswarmError("x")
        assert error.with_context(job="a") is error

    def test_to_dict(self):
        error = ClusterError("api down", cause=OSError("refused")).with_context(service_id="svc-1")
        d = error.to_dict()
        assert d["error_type"] == "ClusterError"
        assert d["message"] == "api down"
        assert d["category"] == "CLUSTER"
        assert d["retryable"] is True
        assert d["context"] == {"service_id": "svc-1"}
        assert d["cause"] == "refused"

    def test_override_retryable(self):
        assert ClusterError("gone", retryable=False).retryable is False


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [ServiceNotFoundError, ContainerNotFoundError, ServiceCreateError, CleanupError],
    )
    def test_cluster_subclasses(self, cls):
        error = cls("x")
        assert isinstance(error, ClusterError)
        assert error.category == ErrorCategory.CLUSTER

    def test_not_found_is_not_retryable(self):
        assert ServiceNotFoundError("x").retryable is False
        assert ContainerNotFoundError("x").retryable is False

    def test_image_pull_error(self):
        error = ImagePullError("no such image")
        assert error.category == ErrorCategory.IMAGE
        assert error.retryable is True

    def test_categories(self):
        assert LocalCommandError("x").category == ErrorCategory.JOB
        assert ConfigError("x").category == ErrorCategory.CONFIG


class TestExitCodeError:
    def test_message_and_code(self):
        error = ExitCodeError(3)
        assert error.exit_code == 3
        assert str(error) == "exit code: 3"
        assert error.category == ErrorCategory.JOB

    def test_to_dict_includes_exit_code(self):
        assert ExitCodeError(255).to_dict()["exit_code"] == 255


class TestSentinelReplacements:
    def test_max_time_running_default_message(self):
        error = MaxTimeRunningError()
        assert str(error) == "maximum run time exceeded"
        assert error.category == ErrorCategory.TIMEOUT

    def test_job_skipped_default_message(self):
        error = JobSkippedError()
        assert str(error) == "execution skipped"
        assert error.category == ErrorCategory.SKIPPED
