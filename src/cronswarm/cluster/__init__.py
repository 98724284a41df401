"""
Cluster manager access.

Modules:
    _types  - request/response value types and the ClusterClient protocol
    docker  - DockerClusterClient (docker SDK)
    stub    - StubClusterClient (in-memory, for tests)
"""

from cronswarm.cluster._types import (
    REJECTED_EXIT_CODE,
    TERMINAL_TASK_STATES,
    ClusterClient,
    ContainerSpec,
    ContainerState,
    ExecResult,
    LogDriver,
    PullOptions,
    ServiceInfo,
    ServiceSpec,
    TaskState,
    TaskStatus,
)
from cronswarm.cluster.docker import DockerClusterClient, build_client
from cronswarm.cluster.stub import StubClusterClient

__all__ = [
    # Types & Protocol
    "ClusterClient",
    "ContainerSpec",
    "ContainerState",
    "ExecResult",
    "LogDriver",
    "PullOptions",
    "ServiceInfo",
    "ServiceSpec",
    "TaskState",
    "TaskStatus",
    "REJECTED_EXIT_CODE",
    "TERMINAL_TASK_STATES",
    # Clients
    "DockerClusterClient",
    "StubClusterClient",
    "build_client",
]
