"""Run a job as a local subprocess."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cronswarm.core.errors import ExitCodeError, LocalCommandError
from cronswarm.jobs._base import BareJob
from cronswarm.jobs.images import shell_split

if TYPE_CHECKING:
    from cronswarm.execution.context import Context


@dataclass(kw_only=True)
class LocalJob(BareJob):
    """Command run on the scheduler's own host.

    ``environment`` entries are overlaid on the current process environment;
    ``dir`` is the working directory (the current one when ``None``).
    """

    dir: str | None = None
    environment: dict[str, str] = field(default_factory=dict)

    def build_environment(self) -> dict[str, str]:
        env = dict(os.environ)
        env.update(self.environment)
        return env

    async def run(self, ctx: Context) -> None:
        argv = shell_split(self.command)
        if not argv:
            raise LocalCommandError("empty command").with_context(job=self.name)

        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                cwd=self.dir,
                env=self.build_environment(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise LocalCommandError(
                f"cannot start {argv[0]!r}: {exc}", cause=exc,
            ).with_context(job=self.name) from exc

        stdout, stderr = await proc.communicate()
        ctx.execution.output.write(stdout)
        ctx.execution.error_output.write(stderr)

        if proc.returncode != 0:
            raise ExitCodeError(proc.returncode).with_context(job=self.name)
