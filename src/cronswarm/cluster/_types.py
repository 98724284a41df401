"""Cluster manager value types and the client protocol.

The job runners never talk to the docker SDK directly. They build the
request values defined here and hand them to a ``ClusterClient``:

- PullOptions: repository / tag / registry of an image to fetch
- ServiceSpec: one-shot service descriptor (restart policy "none", 1 attempt)
- ServiceInfo: read-back of a created service (id, creation time)
- TaskState / TaskStatus: polled view of the work units backing a service
- ContainerSpec / ContainerState: single-engine container equivalents
- ExecResult: outcome of a command exec'd into a running container

Architecture:

    .. code-block:: text

        RunServiceJob ──ServiceSpec──▶ ClusterClient ──▶ swarm manager
              ▲                            │
              └────list[TaskStatus]────────┘

        ClusterClient (Protocol)
        ├── DockerClusterClient   (docker SDK, real engine/swarm)
        └── StubClusterClient     (in-memory, scripted task states)

Design Notes:
    A one-shot task is an ordinary swarm service whose restart policy is
    ``condition=none, max_attempts=1``: the task runs once and is never
    rescheduled, so its terminal task state is the job outcome.

Tags:
    cronswarm, cluster, swarm, protocol, value-types

Doc-Types:
    api-reference
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class TaskState(str, Enum):
    """Swarm task states (``Status.State`` of a task)."""

    NEW = "new"
    ALLOCATED = "allocated"
    PENDING = "pending"
    ASSIGNED = "assigned"
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    STARTING = "starting"
    RUNNING = "running"
    COMPLETE = "complete"
    SHUTDOWN = "shutdown"
    FAILED = "failed"
    REJECTED = "rejected"
    REMOVE = "remove"
    ORPHANED = "orphaned"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> TaskState:
        return cls.UNKNOWN


TERMINAL_TASK_STATES: frozenset[TaskState] = frozenset({
    TaskState.COMPLETE,
    TaskState.FAILED,
    TaskState.REJECTED,
})

# Exit code reported for a rejected task that claims to have exited cleanly.
REJECTED_EXIT_CODE = 255


@dataclass(frozen=True)
class TaskStatus:
    """Observed status of one task backing a service."""

    state: TaskState
    exit_code: int | None = None
    message: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_TASK_STATES

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"state": self.state.value}
        if self.exit_code is not None:
            d["exit_code"] = self.exit_code
        if self.message:
            d["message"] = self.message
        return d


@dataclass(frozen=True)
class PullOptions:
    """Image pull request.

    ``repository`` already carries the registry host when there is one;
    ``registry`` is kept separately to pick credentials.
    """

    repository: str
    tag: str = "latest"
    registry: str = ""

    @property
    def reference(self) -> str:
        return f"{self.repository}:{self.tag}"


@dataclass(frozen=True)
class LogDriver:
    name: str
    options: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ServiceSpec:
    """One-shot service descriptor submitted to the swarm manager."""

    name: str
    image: str
    command: tuple[str, ...] | None = None
    networks: tuple[str, ...] = ()
    log_driver: LogDriver | None = None
    constraints: tuple[str, ...] = ()
    restart_condition: str = "none"
    max_attempts: int = 1
    labels: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logging."""
        d: dict[str, Any] = {
            "name": self.name,
            "image": self.image,
            "restart_policy": {
                "condition": self.restart_condition,
                "max_attempts": self.max_attempts,
            },
        }
        if self.command is not None:
            d["command"] = list(self.command)
        if self.networks:
            d["networks"] = list(self.networks)
        if self.log_driver is not None:
            d["log_driver"] = {"name": self.log_driver.name, "options": dict(self.log_driver.options)}
        if self.constraints:
            d["constraints"] = list(self.constraints)
        if self.labels:
            d["labels"] = dict(self.labels)
        return d


@dataclass(frozen=True)
class ServiceInfo:
    id: str
    name: str
    created_at: datetime


@dataclass(frozen=True)
class ContainerSpec:
    """Single-engine container request (``RunJob``)."""

    name: str
    image: str
    command: tuple[str, ...] | None = None
    user: str = ""
    tty: bool = False
    network: str = ""


@dataclass(frozen=True)
class ContainerState:
    id: str
    running: bool
    exit_code: int | None = None
    status: str = ""


@dataclass(frozen=True)
class ExecResult:
    exit_code: int
    output: bytes = b""


@runtime_checkable
class ClusterClient(Protocol):
    """Request/response API of the container cluster manager.

    Every method is a single remote call. Implementations raise
    ``cronswarm.core.errors.ClusterError`` subclasses; in particular
    ``remove_service`` raises ``ServiceNotFoundError`` for an absent service
    and ``remove_container`` raises ``ContainerNotFoundError``.
    """

    async def pull_image(self, options: PullOptions) -> None: ...

    async def create_service(self, spec: ServiceSpec) -> str: ...

    async def inspect_service(self, service_id: str) -> ServiceInfo: ...

    async def list_tasks(self, service_id: str) -> list[TaskStatus]: ...

    async def remove_service(self, service_id: str) -> None: ...

    async def create_container(self, spec: ContainerSpec) -> str: ...

    async def start_container(self, container_id: str) -> None: ...

    async def inspect_container(self, container_id: str) -> ContainerState: ...

    async def container_logs(self, container_id: str) -> tuple[bytes, bytes]: ...

    async def remove_container(self, container_id: str) -> None: ...

    async def exec_in_container(
        self,
        container: str,
        command: list[str],
        *,
        user: str = "",
        tty: bool = False,
    ) -> ExecResult: ...
