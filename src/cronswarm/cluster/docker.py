"""Docker engine / swarm manager client.

Implements ``ClusterClient`` on top of the ``docker`` SDK (docker-py). The
SDK is blocking, so every call is off-loaded with ``asyncio.to_thread``; no
lock is held across a remote call, so concurrent job runs only share the
remote manager itself.

.. code-block:: text

    ClusterClient method   │ docker SDK call
    ───────────────────────┼──────────────────────────────────────────
    pull_image             │ images.pull(repository, tag=tag)
    create_service         │ api.create_service(TaskTemplate, name=...)
    inspect_service        │ api.inspect_service(id)
    list_tasks             │ api.tasks(filters={"service": id})
    remove_service         │ api.remove_service(id)
    create_container       │ api.create_container(...)
    start_container        │ api.start(id)
    inspect_container      │ api.inspect_container(id)["State"]
    container_logs         │ api.logs(id, stdout=..., stderr=...)
    remove_container       │ api.remove_container(id, force=True)
    exec_in_container      │ api.exec_create / exec_start / exec_inspect

Registry credentials are resolved by the SDK from the docker config file
(``~/.docker/config.json``) based on the registry part of the repository.

Example:
    >>> client = DockerClusterClient.from_env()
    >>> await client.pull_image(PullOptions("busybox", "latest"))
"""

from __future__ import annotations

import asyncio
import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, TypeVar

import docker
import requests
from docker import errors as docker_errors
from docker import types as docker_types

from cronswarm.cluster._types import (
    ContainerSpec,
    ContainerState,
    ExecResult,
    PullOptions,
    ServiceInfo,
    ServiceSpec,
    TaskState,
    TaskStatus,
)
from cronswarm.core.errors import (
    ClusterError,
    ContainerNotFoundError,
    ServiceNotFoundError,
)
from cronswarm.core.logging import get_logger
from cronswarm.core.settings import CronswarmSettings

logger = get_logger(__name__)

T = TypeVar("T")

_FRACTION = re.compile(r"\.(\d+)")


def parse_docker_time(value: str) -> datetime:
    """Parse an RFC 3339 timestamp with nanosecond precision (``...123456789Z``)."""
    value = value.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    value = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _task_status(task: dict[str, Any]) -> TaskStatus:
    status = task.get("Status") or {}
    container_status = status.get("ContainerStatus") or {}
    return TaskStatus(
        state=TaskState(status.get("State", "unknown")),
        exit_code=container_status.get("ExitCode"),
        message=status.get("Err") or status.get("Message"),
    )


class DockerClusterClient:
    """``ClusterClient`` backed by a ``docker.DockerClient``."""

    def __init__(self, client: docker.DockerClient) -> None:
        self._client = client

    @classmethod
    def from_env(cls, *, timeout: int = 60) -> DockerClusterClient:
        """Connect using DOCKER_HOST / DOCKER_TLS_VERIFY / DOCKER_CERT_PATH."""
        return cls(docker.from_env(timeout=timeout))

    @classmethod
    def from_url(cls, base_url: str, *, timeout: int = 60) -> DockerClusterClient:
        return cls(docker.DockerClient(base_url=base_url, timeout=timeout))

    @property
    def api(self) -> Any:
        """Low-level ``docker.APIClient``."""
        return self._client.api

    async def _call(
        self,
        fn: Callable[..., T],
        *args: Any,
        not_found: type[ClusterError] | None = None,
        **kwargs: Any,
    ) -> T:
        try:
            return await asyncio.to_thread(fn, *args, **kwargs)
        except docker_errors.NotFound as exc:
            if not_found is not None:
                raise not_found(str(exc), cause=exc) from exc
            raise ClusterError(str(exc), retryable=False, cause=exc) from exc
        except docker_errors.DockerException as exc:
            raise ClusterError(str(exc), cause=exc) from exc
        except requests.exceptions.RequestException as exc:
            # daemon unreachable or timed out
            raise ClusterError(str(exc), cause=exc) from exc

    # ── Images ───────────────────────────────────────────────────

    async def pull_image(self, options: PullOptions) -> None:
        logger.debug("image_pull", repository=options.repository, tag=options.tag)
        await self._call(self._client.images.pull, options.repository, tag=options.tag)

    # ── Services ─────────────────────────────────────────────────

    def build_task_template(self, spec: ServiceSpec) -> docker_types.TaskTemplate:
        """Translate a ``ServiceSpec`` into the SDK's task template."""
        container_spec = docker_types.ContainerSpec(
            image=spec.image,
            command=list(spec.command) if spec.command is not None else None,
        )
        restart_policy = docker_types.RestartPolicy(
            condition=spec.restart_condition,
            max_attempts=spec.max_attempts,
        )
        log_driver = None
        if spec.log_driver is not None:
            log_driver = docker_types.DriverConfig(
                spec.log_driver.name, dict(spec.log_driver.options),
            )
        placement = None
        if spec.constraints:
            placement = docker_types.Placement(constraints=list(spec.constraints))
        networks = None
        if spec.networks:
            networks = [docker_types.NetworkAttachmentConfig(target=n) for n in spec.networks]

        return docker_types.TaskTemplate(
            container_spec=container_spec,
            restart_policy=restart_policy,
            log_driver=log_driver,
            placement=placement,
            networks=networks,
        )

    async def create_service(self, spec: ServiceSpec) -> str:
        response = await self._call(
            self.api.create_service,
            self.build_task_template(spec),
            name=spec.name,
            labels=dict(spec.labels) or None,
        )
        return response["ID"]

    async def inspect_service(self, service_id: str) -> ServiceInfo:
        attrs = await self._call(
            self.api.inspect_service, service_id, not_found=ServiceNotFoundError,
        )
        return ServiceInfo(
            id=attrs["ID"],
            name=(attrs.get("Spec") or {}).get("Name", ""),
            created_at=parse_docker_time(attrs["CreatedAt"]),
        )

    async def list_tasks(self, service_id: str) -> list[TaskStatus]:
        tasks = await self._call(self.api.tasks, filters={"service": service_id})
        return [_task_status(t) for t in tasks]

    async def remove_service(self, service_id: str) -> None:
        await self._call(
            self.api.remove_service, service_id, not_found=ServiceNotFoundError,
        )

    # ── Containers ───────────────────────────────────────────────

    async def create_container(self, spec: ContainerSpec) -> str:
        kwargs: dict[str, Any] = {
            "command": list(spec.command) if spec.command is not None else None,
            "name": spec.name,
            "user": spec.user or None,
            "tty": spec.tty,
        }
        if spec.network:
            kwargs["networking_config"] = self.api.create_networking_config(
                {spec.network: self.api.create_endpoint_config()}
            )
        response = await self._call(self.api.create_container, spec.image, **kwargs)
        return response["Id"]

    async def start_container(self, container_id: str) -> None:
        await self._call(self.api.start, container_id, not_found=ContainerNotFoundError)

    async def inspect_container(self, container_id: str) -> ContainerState:
        attrs = await self._call(
            self.api.inspect_container, container_id, not_found=ContainerNotFoundError,
        )
        state = attrs.get("State") or {}
        return ContainerState(
            id=attrs.get("Id", container_id),
            running=bool(state.get("Running")),
            exit_code=state.get("ExitCode"),
            status=state.get("Status", ""),
        )

    async def container_logs(self, container_id: str) -> tuple[bytes, bytes]:
        stdout = await self._call(
            self.api.logs, container_id, stdout=True, stderr=False,
            not_found=ContainerNotFoundError,
        )
        stderr = await self._call(
            self.api.logs, container_id, stdout=False, stderr=True,
            not_found=ContainerNotFoundError,
        )
        return stdout, stderr

    async def remove_container(self, container_id: str) -> None:
        await self._call(
            self.api.remove_container, container_id, force=True,
            not_found=ContainerNotFoundError,
        )

    async def exec_in_container(
        self,
        container: str,
        command: list[str],
        *,
        user: str = "",
        tty: bool = False,
    ) -> ExecResult:
        created = await self._call(
            self.api.exec_create, container, command, user=user, tty=tty,
            not_found=ContainerNotFoundError,
        )
        output = await self._call(self.api.exec_start, created["Id"], tty=tty)
        inspected = await self._call(self.api.exec_inspect, created["Id"])
        return ExecResult(exit_code=inspected["ExitCode"], output=output or b"")


def build_client(settings: CronswarmSettings) -> DockerClusterClient:
    """Create the client for the configured docker host."""
    if settings.docker_host:
        return DockerClusterClient.from_url(settings.docker_host, timeout=settings.docker_timeout)
    return DockerClusterClient.from_env(timeout=settings.docker_timeout)
