"""Tests for RunJob, a one-shot container on a single engine."""

from __future__ import annotations

from datetime import timedelta

import pytest

from cronswarm.core.errors import (
    CleanupError,
    ContainerError,
    ExitCodeError,
    ImagePullError,
    MaxTimeRunningError,
)
from cronswarm.execution import run_job


class TestContainerSpec:
    def test_shell_tokenized_command(self, container_job):
        job = container_job(command='echo -a "foo bar"', network="foo", user="app", tty=True)
        job.new_instance_name()
        spec = job.build_container_spec()

        assert spec.name == job.instance_name
        assert spec.image == "test-image"
        assert spec.command == ("echo", "-a", "foo bar")
        assert spec.network == "foo"
        assert spec.user == "app"
        assert spec.tty is True


class TestRunJob:
    @pytest.mark.asyncio
    async def test_success_captures_output_and_removes(self, stub, container_job):
        stub.container_polls = 2
        stub.container_output = b"hello\n"

        execution = await run_job(container_job(command="echo hello"))

        assert execution.failed is False
        assert execution.output.getvalue() == b"hello\n"
        assert stub.pulled[0].repository == "test-image"
        assert stub.list_containers(all=True) == []
        assert stub.remove_count == 1

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, stub, container_job):
        stub.container_exit_code = 4

        execution = await run_job(container_job())

        assert isinstance(execution.error, ExitCodeError)
        assert execution.error.exit_code == 4
        assert stub.list_containers(all=True) == []

    @pytest.mark.asyncio
    async def test_keep_container(self, stub, container_job):
        execution = await run_job(container_job(delete=False))

        assert execution.failed is False
        assert len(stub.list_containers(all=True)) == 1
        assert stub.remove_count == 0

    @pytest.mark.asyncio
    async def test_deadline(self, stub, clock, container_job):
        stub.container_polls = 1000

        def ticking_clock():
            clock.advance(timedelta(minutes=10))
            return clock()

        execution = await run_job(
            container_job(clock=ticking_clock, max_runtime=timedelta(minutes=30)),
        )

        assert isinstance(execution.error, MaxTimeRunningError)
        assert stub.list_containers(all=True) == []

    @pytest.mark.asyncio
    async def test_pull_failure(self, stub, container_job):
        stub.fail_pull = True

        execution = await run_job(container_job())

        assert isinstance(execution.error, ImagePullError)
        assert stub.containers == {}

    @pytest.mark.asyncio
    async def test_create_failure(self, stub, container_job):
        stub.fail_create = True

        execution = await run_job(container_job())

        assert isinstance(execution.error, ContainerError)
        assert stub.remove_count == 0

    @pytest.mark.asyncio
    async def test_remove_failure_on_success(self, stub, container_job):
        stub.fail_remove = True

        execution = await run_job(container_job())

        assert isinstance(execution.error, CleanupError)

    @pytest.mark.asyncio
    async def test_remove_failure_after_job_failure(self, stub, container_job):
        stub.fail_remove = True
        stub.container_exit_code = 1

        execution = await run_job(container_job())

        assert isinstance(execution.error, ExitCodeError)
