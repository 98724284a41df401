"""Run a job inside an already-running container."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cronswarm.cluster._types import ClusterClient
from cronswarm.core.errors import ClusterError, ContainerError, ExitCodeError
from cronswarm.jobs._base import BareJob
from cronswarm.jobs.images import shell_split

if TYPE_CHECKING:
    from cronswarm.execution.context import Context


@dataclass(kw_only=True)
class ExecJob(BareJob):
    client: ClusterClient = field(repr=False)
    container: str = ""
    user: str = "root"
    tty: bool = False

    async def run(self, ctx: Context) -> None:
        command = shell_split(self.command) or []
        try:
            result = await self.client.exec_in_container(
                self.container, command, user=self.user, tty=self.tty,
            )
        except ClusterError as exc:
            raise ContainerError(
                f"error executing {self.command!r} in container {self.container!r}: {exc}",
                cause=exc,
            ).with_context(job=self.name, container_id=self.container) from exc

        ctx.execution.output.write(result.output)
        if result.exit_code != 0:
            raise ExitCodeError(result.exit_code).with_context(
                job=self.name, container_id=self.container,
            )
