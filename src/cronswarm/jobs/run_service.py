"""Run a job as a one-shot swarm service.

``RunServiceJob`` turns the swarm "service" primitive into a run-to-completion
task: the service is created with restart policy ``none`` / one attempt, its
task is polled until it reaches a terminal state or the run-time budget is
spent, and the service is removed afterwards.

Architecture:

    .. code-block:: text

        RunServiceJob.run(ctx)

        Pending
          │ pull_image(repository, tag)           ── ImagePullError
          ▼
        ImagePulled
          │ create_service(ServiceSpec)           ── ServiceCreateError
          ▼
        ServiceCreated
          │ inspect_service(id) → created_at      ── ServiceInspectError ─┐
          ▼                                                               │
        Watching  (one task, tick every poll_interval)                    │
          │ 1. created_at < now - max_runtime ?   ── MaxTimeRunningError ─┤
          │ 2. list_tasks(id)                                             │
          │      []                → exit 0                               │
          │      terminal task     → its exit code (rejected+0 → 255)     │
          │      otherwise         → next tick                            │
          ▼                                                               │
        Succeeded | FailedExitCode (ExitCodeError) ───────────────────────┤
          │                                                               │
          ▼                                                               ▼
        Cleaned: remove_service(id) unless delete=False
          ├── not found      → warning, treated as cleaned
          ├── other error    → CleanupError on the success path,
          │                    logged and swallowed on the failure path
          ▼
        Done

    .. mermaid::

        stateDiagram-v2
            [*] --> ImagePulled: pull
            ImagePulled --> ServiceCreated: create
            ServiceCreated --> Watching: inspect
            Watching --> Watching: tick, no terminal task
            Watching --> Succeeded: exit 0
            Watching --> FailedExitCode: exit != 0
            Watching --> TimedOut: deadline
            Succeeded --> Cleaned
            FailedExitCode --> Cleaned
            TimedOut --> Cleaned
            Cleaned --> [*]

Example:
    >>> job = RunServiceJob(
    ...     client=DockerClusterClient.from_env(),
    ...     name="nightly-report",
    ...     image="reports:2.1",
    ...     command="python -m reports.nightly",
    ...     network="backend",
    ... )
    >>> execution = await run_job(job)

Tags:
    cronswarm, jobs, swarm, service, state-machine

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from cronswarm.cluster._types import (
    REJECTED_EXIT_CODE,
    ClusterClient,
    LogDriver,
    ServiceSpec,
    TaskState,
)
from cronswarm.core.errors import (
    CleanupError,
    ClusterError,
    ExitCodeError,
    ImagePullError,
    MaxTimeRunningError,
    ServiceCreateError,
    ServiceInspectError,
    ServiceNotFoundError,
)
from cronswarm.execution.models import utcnow
from cronswarm.jobs._base import BareJob
from cronswarm.jobs._watch import DEFAULT_MAX_RUNTIME, DEFAULT_POLL_INTERVAL, watch
from cronswarm.jobs.images import build_pull_options, full_image_name, split_command

if TYPE_CHECKING:
    from cronswarm.execution.context import Context

GELF_LOG_DRIVER = "gelf"


@dataclass(kw_only=True)
class RunServiceJob(BareJob):
    """One-shot swarm service job.

    ``user`` and ``tty`` are accepted for parity with the container variants;
    a swarm task has no use for them and they are not sent.
    """

    client: ClusterClient = field(repr=False)
    image: str = ""
    network: str = ""
    registry: str = ""
    logging_gelf_address: str = ""
    placement_constraint: str = ""
    delete: bool = True
    user: str = "root"
    tty: bool = False
    poll_interval: timedelta = DEFAULT_POLL_INTERVAL
    max_runtime: timedelta = DEFAULT_MAX_RUNTIME
    clock: Callable[[], datetime] = field(default=utcnow, repr=False)

    @property
    def full_image(self) -> str:
        return full_image_name(self.registry, self.image)

    async def run(self, ctx: Context) -> None:
        self.new_instance_name(self.clock())
        ctx.bind_logger(instance_name=self.instance_name)

        await self._pull_image()

        service_id = await self._create_service()
        ctx.logger.info("service_created", service_id=service_id, image=self.full_image)

        try:
            await self._watch_service(ctx, service_id)
        except Exception:
            try:
                await self._delete_service(ctx, service_id)
            except CleanupError as exc:
                ctx.logger.error(
                    "service_cleanup_failed",
                    service_id=service_id,
                    image=self.full_image,
                    error=str(exc),
                )
            raise

        await self._delete_service(ctx, service_id)

    def build_service_spec(self) -> ServiceSpec:
        """Descriptor for this run; ``instance_name`` must already be set."""
        log_driver = None
        if self.logging_gelf_address:
            log_driver = LogDriver(
                name=GELF_LOG_DRIVER,
                options={"gelf-address": self.logging_gelf_address},
            )

        command = split_command(self.command)
        return ServiceSpec(
            name=self.instance_name,
            image=self.full_image,
            command=tuple(command) if command is not None else None,
            networks=(self.network,) if self.network else (),
            log_driver=log_driver,
            constraints=(self.placement_constraint,) if self.placement_constraint else (),
        )

    async def _pull_image(self) -> None:
        options = build_pull_options(self.image, self.registry)
        try:
            await self.client.pull_image(options)
        except ClusterError as exc:
            raise ImagePullError(
                f"error pulling image {self.full_image!r}: {exc}", cause=exc,
            ).with_context(job=self.name, image=self.full_image) from exc

    async def _create_service(self) -> str:
        spec = self.build_service_spec()
        try:
            return await self.client.create_service(spec)
        except ClusterError as exc:
            raise ServiceCreateError(
                f"error creating service {spec.name!r} for image {self.full_image!r}: {exc}",
                cause=exc,
            ).with_context(
                job=self.name, instance_name=self.instance_name, image=self.full_image,
            ) from exc

    async def _watch_service(self, ctx: Context, service_id: str) -> None:
        ctx.logger.info("service_watch_started", service_id=service_id)

        try:
            info = await self.client.inspect_service(service_id)
        except ClusterError as exc:
            raise ServiceInspectError(
                f"failed to inspect service {service_id}: {exc}", cause=exc,
            ).with_context(job=self.name, service_id=service_id) from exc

        try:
            exit_code = await watch(
                lambda: self._find_task_status(ctx, service_id),
                started_at=info.created_at,
                max_runtime=self.max_runtime,
                interval=self.poll_interval,
                clock=self.clock,
            )
        except MaxTimeRunningError as exc:
            raise exc.with_context(job=self.name, service_id=service_id)

        ctx.logger.info("service_completed", service_id=service_id, exit_code=exit_code)
        if exit_code != 0:
            raise ExitCodeError(exit_code).with_context(
                job=self.name, instance_name=self.instance_name, service_id=service_id,
            )

    async def _find_task_status(self, ctx: Context, service_id: str) -> int | None:
        """Exit code of the service's terminal task, or ``None`` to keep watching."""
        try:
            tasks = await self.client.list_tasks(service_id)
        except ClusterError as exc:
            ctx.logger.error("task_status_failed", service_id=service_id, error=str(exc))
            return None

        # The task is gone (removed by someone else); nothing left to wait for
        if not tasks:
            return 0

        for task in tasks:
            if not task.is_terminal:
                continue

            exit_code = task.exit_code
            if exit_code is None:
                exit_code = 0 if task.state == TaskState.COMPLETE else REJECTED_EXIT_CODE
            if exit_code == 0 and task.state == TaskState.REJECTED:
                exit_code = REJECTED_EXIT_CODE
            return exit_code

        return None

    async def _delete_service(self, ctx: Context, service_id: str) -> None:
        if not self.delete:
            return

        try:
            await self.client.remove_service(service_id)
        except ServiceNotFoundError:
            ctx.logger.warning(
                "service_already_removed",
                service_id=service_id,
                message="service cannot be removed; it may have been removed by another process",
            )
        except ClusterError as exc:
            raise CleanupError(
                f"error deleting service {service_id} ({self.full_image}): {exc}", cause=exc,
            ).with_context(job=self.name, service_id=service_id, image=self.full_image) from exc
