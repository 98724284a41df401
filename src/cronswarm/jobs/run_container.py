"""Run a job as a one-shot container on a single engine.

``RunJob`` is the non-swarm counterpart of ``RunServiceJob``: the same
pull → create → watch → classify → remove sequence, with a plain container
in place of a service and the container's logs captured into the
execution record.

.. code-block:: text

    pull_image ──▶ create_container ──▶ start_container
                                              │
                         inspect_container every poll_interval
                         until not running or deadline
                                              │
                      container_logs → execution.output / error_output
                                              │
                      remove_container (every path, unless delete=False)
                                              │
                         exit 0 → success, otherwise ExitCodeError
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from cronswarm.cluster._types import ClusterClient, ContainerSpec
from cronswarm.core.errors import (
    CleanupError,
    ClusterError,
    ContainerError,
    ContainerNotFoundError,
    ExitCodeError,
    ImagePullError,
    MaxTimeRunningError,
)
from cronswarm.execution.models import utcnow
from cronswarm.jobs._base import BareJob
from cronswarm.jobs._watch import DEFAULT_MAX_RUNTIME, DEFAULT_POLL_INTERVAL, watch
from cronswarm.jobs.images import build_pull_options, full_image_name, shell_split

if TYPE_CHECKING:
    from cronswarm.execution.context import Context


@dataclass(kw_only=True)
class RunJob(BareJob):
    """One-shot container job."""

    client: ClusterClient = field(repr=False)
    image: str = ""
    network: str = ""
    registry: str = ""
    user: str = "root"
    tty: bool = False
    delete: bool = True
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
        container_id = await self._create_container()
        ctx.logger.info("container_created", container_id=container_id, image=self.full_image)

        try:
            exit_code = await self._start_and_watch(ctx, container_id)
            if exit_code != 0:
                raise ExitCodeError(exit_code).with_context(
                    job=self.name, instance_name=self.instance_name, container_id=container_id,
                )
        except Exception:
            try:
                await self._delete_container(ctx, container_id)
            except CleanupError as exc:
                ctx.logger.error("container_cleanup_failed", container_id=container_id, error=str(exc))
            raise

        await self._delete_container(ctx, container_id)

    def build_container_spec(self) -> ContainerSpec:
        command = shell_split(self.command)
        return ContainerSpec(
            name=self.instance_name,
            image=self.full_image,
            command=tuple(command) if command is not None else None,
            user=self.user,
            tty=self.tty,
            network=self.network,
        )

    async def _pull_image(self) -> None:
        try:
            await self.client.pull_image(build_pull_options(self.image, self.registry))
        except ClusterError as exc:
            raise ImagePullError(
                f"error pulling image {self.full_image!r}: {exc}", cause=exc,
            ).with_context(job=self.name, image=self.full_image) from exc

    async def _create_container(self) -> str:
        try:
            return await self.client.create_container(self.build_container_spec())
        except ClusterError as exc:
            raise ContainerError(
                f"error creating container for image {self.full_image!r}: {exc}", cause=exc,
            ).with_context(job=self.name, instance_name=self.instance_name, image=self.full_image) from exc

    async def _start_and_watch(self, ctx: Context, container_id: str) -> int:
        try:
            await self.client.start_container(container_id)
        except ClusterError as exc:
            raise ContainerError(
                f"error starting container {container_id}: {exc}", cause=exc,
            ).with_context(job=self.name, container_id=container_id) from exc

        ctx.logger.info("container_watch_started", container_id=container_id)
        try:
            exit_code = await watch(
                lambda: self._container_exit_code(container_id),
                started_at=self.clock(),
                max_runtime=self.max_runtime,
                interval=self.poll_interval,
                clock=self.clock,
            )
        except MaxTimeRunningError as exc:
            raise exc.with_context(job=self.name, container_id=container_id)

        await self._collect_logs(ctx, container_id)
        ctx.logger.info("container_completed", container_id=container_id, exit_code=exit_code)
        return exit_code

    async def _container_exit_code(self, container_id: str) -> int | None:
        try:
            state = await self.client.inspect_container(container_id)
        except ClusterError as exc:
            raise ContainerError(
                f"error inspecting container {container_id}: {exc}", cause=exc,
            ).with_context(job=self.name, container_id=container_id) from exc

        if state.running:
            return None
        return state.exit_code if state.exit_code is not None else 0

    async def _collect_logs(self, ctx: Context, container_id: str) -> None:
        try:
            stdout, stderr = await self.client.container_logs(container_id)
        except ClusterError as exc:
            ctx.logger.warning("container_logs_failed", container_id=container_id, error=str(exc))
            return
        ctx.execution.output.write(stdout)
        ctx.execution.error_output.write(stderr)

    async def _delete_container(self, ctx: Context, container_id: str) -> None:
        if not self.delete:
            return

        try:
            await self.client.remove_container(container_id)
        except ContainerNotFoundError:
            ctx.logger.warning("container_already_removed", container_id=container_id)
        except ClusterError as exc:
            raise CleanupError(
                f"error removing container {container_id}: {exc}", cause=exc,
            ).with_context(job=self.name, container_id=container_id) from exc
