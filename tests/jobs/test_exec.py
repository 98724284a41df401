"""Tests for ExecJob."""

import pytest

from cronswarm.cluster import ExecResult
from cronswarm.core.errors import ClusterError, ContainerError, ExitCodeError
from cronswarm.execution import run_job
from cronswarm.jobs import ExecJob


def _job(stub, **kwargs) -> ExecJob:
    defaults = {"client": stub, "name": "exec-job", "container": "web", "command": 'sh -c "echo hi"'}
    defaults.update(kwargs)
    return ExecJob(**defaults)


class TestExecJob:
    @pytest.mark.asyncio
    async def test_success(self, stub):
        stub.exec_result = ExecResult(exit_code=0, output=b"hi\n")

        execution = await run_job(_job(stub))

        assert execution.failed is False
        assert execution.output.getvalue() == b"hi\n"
        assert stub.exec_calls == [("web", ["sh", "-c", "echo hi"], "root", False)]

    @pytest.mark.asyncio
    async def test_non_zero_exit(self, stub):
        stub.exec_result = ExecResult(exit_code=2, output=b"no\n")

        execution = await run_job(_job(stub))

        assert isinstance(execution.error, ExitCodeError)
        assert execution.error.exit_code == 2
        assert execution.output.getvalue() == b"no\n"

    @pytest.mark.asyncio
    async def test_cluster_error_wrapped(self, stub):
        async def broken(*args, **kwargs):
            raise ClusterError("no such container")

        stub.exec_in_container = broken

        execution = await run_job(_job(stub))

        assert isinstance(execution.error, ContainerError)
        assert execution.error.context.container_id == "web"
