"""Entry point a scheduler calls each time a job fires."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from cronswarm.core.logging import LogContext
from cronswarm.execution.context import Context
from cronswarm.execution.middleware import Middleware
from cronswarm.execution.models import Execution

if TYPE_CHECKING:
    from cronswarm.jobs._base import Job


async def run_job(
    job: Job,
    *,
    middlewares: Sequence[Middleware] = (),
    logger: Any | None = None,
) -> Execution:
    """Run ``job`` once through its middleware chain.

    ``middlewares`` are scheduler-wide stages placed in front of the job's
    own. The returned execution is always closed; a failed run carries its
    error in ``execution.error``. While the run is in flight, module-level
    loggers (the docker client's, for instance) carry ``job`` and
    ``execution_id`` through the logging context.
    """
    execution = Execution()
    ctx = Context(job, execution, middlewares=middlewares, logger=logger)

    async with LogContext(job=job.name, execution_id=execution.id):
        ctx.start()
        ctx.logger.info("job_started", command=job.command)

        try:
            await ctx.next()
        except Exception as exc:
            ctx.stop(exc)
        else:
            ctx.stop(None)

        if execution.failed:
            ctx.logger.error(
                "job_finished",
                duration=str(execution.duration),
                failed=True,
                skipped=False,
                error=str(execution.error),
            )
        else:
            ctx.logger.info(
                "job_finished",
                duration=str(execution.duration),
                failed=False,
                skipped=execution.skipped,
            )
    return execution
