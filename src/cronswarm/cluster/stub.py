"""In-memory cluster manager for tests and dry runs.

``StubClusterClient`` implements ``ClusterClient`` without any daemon. Task
states are scripted: each ``list_tasks`` call returns the next entry of
``task_script`` and the last entry repeats forever.

.. code-block:: text

    StubClusterClient behavior:

    create_service(spec)     → "svc-<hex>", created_at = clock() - service_age
    list_tasks(id)           → task_script[0], task_script[1], ..., task_script[-1], ...
    remove_service(id)       → marks removed; ServiceNotFoundError if already gone

    Inject failures:
      stub.fail_pull = True          → pull_image() raises ClusterError
      stub.fail_create = True        → create_service() raises ClusterError
      stub.fail_inspect = True       → inspect_service() raises ClusterError
      stub.fail_list_tasks = N       → the next N list_tasks() calls raise
      stub.fail_remove = True        → remove_*() raises ClusterError
      stub.remove_external(id)       → service disappears behind the runner's back

    Track usage:
      stub.pulled, stub.created_specs, stub.remove_count, stub.list_tasks_count

Example:
    >>> stub = StubClusterClient(task_script=[
    ...     [TaskStatus(TaskState.RUNNING)],
    ...     [TaskStatus(TaskState.FAILED, exit_code=3)],
    ... ])
    >>> job = RunServiceJob(client=stub, name="backup", image="busybox")
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta

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
from cronswarm.execution.models import utcnow

DEFAULT_TASK_SCRIPT: tuple[tuple[TaskStatus, ...], ...] = (
    (TaskStatus(TaskState.RUNNING),),
    (TaskStatus(TaskState.COMPLETE, exit_code=0),),
)


@dataclass
class _StubService:
    id: str
    spec: ServiceSpec
    created_at: datetime
    polls: int = 0
    removed: bool = False


@dataclass
class _StubContainer:
    id: str
    spec: ContainerSpec
    exit_code: int
    polls_left: int
    stdout: bytes = b""
    stderr: bytes = b""
    running: bool = False
    started: bool = False
    removed: bool = False
    commands: list[list[str]] = field(default_factory=list)


class StubClusterClient:
    """Scriptable in-memory ``ClusterClient``."""

    def __init__(
        self,
        *,
        task_script: Sequence[Sequence[TaskStatus]] | None = None,
        service_age: timedelta = timedelta(0),
        container_exit_code: int = 0,
        container_polls: int = 1,
        container_output: bytes = b"",
        exec_result: ExecResult | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.task_script = [list(tasks) for tasks in (task_script or DEFAULT_TASK_SCRIPT)]
        self.service_age = service_age
        self.container_exit_code = container_exit_code
        self.container_polls = container_polls
        self.container_output = container_output
        self.exec_result = exec_result or ExecResult(exit_code=0)
        self.clock = clock

        self.services: dict[str, _StubService] = {}
        self.containers: dict[str, _StubContainer] = {}
        self.pulled: list[PullOptions] = []
        self.created_specs: list[ServiceSpec] = []
        self.exec_calls: list[tuple[str, list[str], str, bool]] = []
        self.list_tasks_count = 0
        self.remove_count = 0

        self.fail_pull = False
        self.fail_create = False
        self.fail_inspect = False
        self.fail_list_tasks = 0
        self.fail_remove = False

    # ── Images ───────────────────────────────────────────────────

    async def pull_image(self, options: PullOptions) -> None:
        if self.fail_pull:
            raise ClusterError(f"Stub: pull failure injected for {options.reference}")
        self.pulled.append(options)

    # ── Services ─────────────────────────────────────────────────

    async def create_service(self, spec: ServiceSpec) -> str:
        if self.fail_create:
            raise ClusterError("Stub: create failure injected")
        service_id = f"svc-{uuid.uuid4().hex[:12]}"
        self.services[service_id] = _StubService(
            id=service_id,
            spec=spec,
            created_at=self.clock() - self.service_age,
        )
        self.created_specs.append(spec)
        return service_id

    async def inspect_service(self, service_id: str) -> ServiceInfo:
        if self.fail_inspect:
            raise ClusterError("Stub: inspect failure injected")
        svc = self._service(service_id)
        return ServiceInfo(id=svc.id, name=svc.spec.name, created_at=svc.created_at)

    async def list_tasks(self, service_id: str) -> list[TaskStatus]:
        self.list_tasks_count += 1
        if self.fail_list_tasks > 0:
            self.fail_list_tasks -= 1
            raise ClusterError("Stub: list tasks failure injected")
        svc = self.services.get(service_id)
        if svc is None or svc.removed:
            return []
        index = min(svc.polls, len(self.task_script) - 1)
        svc.polls += 1
        return list(self.task_script[index])

    async def remove_service(self, service_id: str) -> None:
        self.remove_count += 1
        if self.fail_remove:
            raise ClusterError("Stub: remove failure injected")
        self._service(service_id).removed = True

    def remove_external(self, service_id: str) -> None:
        """Remove a service as another actor would."""
        self.services[service_id].removed = True

    def list_services(self) -> list[ServiceInfo]:
        return [
            ServiceInfo(id=s.id, name=s.spec.name, created_at=s.created_at)
            for s in self.services.values()
            if not s.removed
        ]

    def _service(self, service_id: str) -> _StubService:
        svc = self.services.get(service_id)
        if svc is None or svc.removed:
            raise ServiceNotFoundError(f"No such service: {service_id}")
        return svc

    # ── Containers ───────────────────────────────────────────────

    async def create_container(self, spec: ContainerSpec) -> str:
        if self.fail_create:
            raise ClusterError("Stub: create failure injected")
        container_id = uuid.uuid4().hex
        self.containers[container_id] = _StubContainer(
            id=container_id,
            spec=spec,
            exit_code=self.container_exit_code,
            polls_left=self.container_polls,
            stdout=self.container_output,
        )
        return container_id

    async def start_container(self, container_id: str) -> None:
        container = self._container(container_id)
        container.running = True
        container.started = True

    async def inspect_container(self, container_id: str) -> ContainerState:
        container = self._container(container_id)
        if container.running:
            if container.polls_left > 0:
                container.polls_left -= 1
            else:
                container.running = False
        return ContainerState(
            id=container.id,
            running=container.running,
            exit_code=None if container.running else container.exit_code,
            status="running" if container.running else "exited",
        )

    def stop_container(self, container_id: str, exit_code: int = 0) -> None:
        """Stop a running container as another actor would."""
        container = self._container(container_id)
        container.running = False
        container.exit_code = exit_code

    async def container_logs(self, container_id: str) -> tuple[bytes, bytes]:
        container = self._container(container_id)
        return container.stdout, container.stderr

    async def remove_container(self, container_id: str) -> None:
        self.remove_count += 1
        if self.fail_remove:
            raise ClusterError("Stub: remove failure injected")
        self._container(container_id).removed = True

    def list_containers(self, *, all: bool = False) -> list[ContainerState]:
        return [
            ContainerState(id=c.id, running=c.running, exit_code=c.exit_code)
            for c in self.containers.values()
            if not c.removed and (all or c.running)
        ]

    def _container(self, container_id: str) -> _StubContainer:
        container = self.containers.get(container_id)
        if container is None or container.removed:
            raise ContainerNotFoundError(f"No such container: {container_id}")
        return container

    # ── Exec ─────────────────────────────────────────────────────

    async def exec_in_container(
        self,
        container: str,
        command: list[str],
        *,
        user: str = "",
        tty: bool = False,
    ) -> ExecResult:
        self.exec_calls.append((container, list(command), user, tty))
        return self.exec_result
