"""Tests for StubClusterClient, the in-memory cluster manager."""

from __future__ import annotations

from datetime import timedelta

import pytest

from cronswarm.cluster import (
    ClusterClient,
    ContainerSpec,
    ExecResult,
    PullOptions,
    ServiceSpec,
    StubClusterClient,
    TaskState,
    TaskStatus,
)
from cronswarm.core.errors import ClusterError, ContainerNotFoundError, ServiceNotFoundError


def _spec(name: str = "job_1700000000") -> ServiceSpec:
    return ServiceSpec(name=name, image="busybox")


class TestProtocol:
    def test_is_cluster_client(self):
        assert isinstance(StubClusterClient(), ClusterClient)


class TestServices:
    @pytest.mark.asyncio
    async def test_create_inspect_remove(self):
        stub = StubClusterClient()
        service_id = await stub.create_service(_spec())

        info = await stub.inspect_service(service_id)
        assert info.id == service_id
        assert info.name == "job_1700000000"
        assert [s.id for s in stub.list_services()] == [service_id]

        await stub.remove_service(service_id)
        assert stub.list_services() == []

    @pytest.mark.asyncio
    async def test_service_age_backdates_creation(self, clock):
        stub = StubClusterClient(service_age=timedelta(hours=1), clock=clock)
        service_id = await stub.create_service(_spec())
        info = await stub.inspect_service(service_id)
        assert info.created_at == clock() - timedelta(hours=1)

    @pytest.mark.asyncio
    async def test_task_script_last_entry_repeats(self):
        stub = StubClusterClient(task_script=[
            [TaskStatus(TaskState.PENDING)],
            [TaskStatus(TaskState.FAILED, exit_code=3)],
        ])
        service_id = await stub.create_service(_spec())

        states = [(await stub.list_tasks(service_id))[0].state for _ in range(3)]
        assert states == [TaskState.PENDING, TaskState.FAILED, TaskState.FAILED]
        assert stub.list_tasks_count == 3

    @pytest.mark.asyncio
    async def test_removed_service_has_no_tasks(self):
        stub = StubClusterClient()
        service_id = await stub.create_service(_spec())
        stub.remove_external(service_id)
        assert await stub.list_tasks(service_id) == []

    @pytest.mark.asyncio
    async def test_remove_twice_raises_not_found(self):
        stub = StubClusterClient()
        service_id = await stub.create_service(_spec())
        await stub.remove_service(service_id)
        with pytest.raises(ServiceNotFoundError):
            await stub.remove_service(service_id)

    @pytest.mark.asyncio
    async def test_injected_failures(self):
        stub = StubClusterClient()
        stub.fail_pull = True
        with pytest.raises(ClusterError):
            await stub.pull_image(PullOptions("busybox"))

        stub.fail_list_tasks = 1
        service_id = await stub.create_service(_spec())
        with pytest.raises(ClusterError):
            await stub.list_tasks(service_id)
        assert await stub.list_tasks(service_id)


class TestContainers:
    @pytest.mark.asyncio
    async def test_runs_for_scripted_polls(self):
        stub = StubClusterClient(container_polls=2, container_exit_code=4)
        container_id = await stub.create_container(ContainerSpec(name="c", image="busybox"))
        await stub.start_container(container_id)

        running = [(await stub.inspect_container(container_id)).running for _ in range(3)]
        assert running == [True, True, False]
        assert (await stub.inspect_container(container_id)).exit_code == 4

    @pytest.mark.asyncio
    async def test_remove_then_missing(self):
        stub = StubClusterClient()
        container_id = await stub.create_container(ContainerSpec(name="c", image="busybox"))
        await stub.remove_container(container_id)
        assert stub.list_containers(all=True) == []
        with pytest.raises(ContainerNotFoundError):
            await stub.inspect_container(container_id)

    @pytest.mark.asyncio
    async def test_exec_records_call(self):
        stub = StubClusterClient(exec_result=ExecResult(exit_code=0, output=b"hi"))
        result = await stub.exec_in_container("web", ["echo", "hi"], user="app", tty=True)
        assert result.output == b"hi"
        assert stub.exec_calls == [("web", ["echo", "hi"], "app", True)]
