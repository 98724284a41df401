"""Per-run context threaded through the middleware chain.

A ``Context`` binds one job invocation together: the ``Job``, its
``Execution`` record, a bound logger, and the chain of stages that wrap the
job body. It is owned by a single run and never shared between concurrent
runs of the same job.

Architecture:

    .. code-block:: text

        stages = (*scheduler middlewares, *job.middlewares())

        ctx.next()
          ├── next stage (skipped if stopped and not continue_on_stop())
          │     └── stage.run(ctx) → ... → ctx.next()
          └── no stages left
                ├── stopped → return, job body never runs
                └── job.run(ctx)
                      ├── returns  → ctx.stop(None)
                      └── raises   → ctx.stop(exc), re-raise unchanged

    .. mermaid::

        sequenceDiagram
            participant R as run_job
            participant O as Overlap
            participant S as Slack
            participant J as Job
            R->>O: ctx.next()
            O->>S: ctx.next()
            S->>J: ctx.next()
            J-->>S: raise ExitCodeError
            Note over S: ctx.stop(err), notify
            S-->>O: re-raise
            O-->>R: re-raise

Example:
    >>> execution = Execution()
    >>> ctx = Context(job, execution, middlewares=[Overlap(no_overlap=True)])
    >>> ctx.start()
    >>> await ctx.next()

Tags:
    cronswarm, execution, context, middleware-chain

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from cronswarm.core.logging import get_logger
from cronswarm.execution.middleware import Middleware
from cronswarm.execution.models import Execution

if TYPE_CHECKING:
    from cronswarm.jobs._base import Job


class Context:
    """Mutable carrier for one job run.

    .. code-block:: text

        Context
        ├── .job          → the Job being run (read-only for stages)
        ├── .execution    → the run's Execution record
        ├── .logger       → structlog logger bound with job + execution_id
        ├── .stopped      → True once the execution has been closed
        ├── .start()      → open the execution, notify the job
        ├── .next()       → run the rest of the chain
        └── .stop(err)    → close the execution (first call wins)
    """

    def __init__(
        self,
        job: Job,
        execution: Execution,
        *,
        middlewares: Sequence[Middleware] = (),
        logger: Any | None = None,
    ) -> None:
        self.job = job
        self.execution = execution
        self.logger = (logger or get_logger("cronswarm.job")).bind(
            job=job.name, execution_id=execution.id,
        )
        self._stages: tuple[Middleware, ...] = (*middlewares, *job.middlewares())
        self._cursor = 0
        self._executed = False

    @property
    def stopped(self) -> bool:
        return not self.execution.is_running

    @property
    def executed(self) -> bool:
        """Whether the job body has been entered."""
        return self._executed

    @property
    def stages(self) -> tuple[Middleware, ...]:
        return self._stages

    def start(self) -> None:
        self.execution.start()
        self.job.notify_start()

    def stop(self, error: BaseException | None = None) -> None:
        """Close the execution with ``error``. No-op once stopped."""
        if self.stopped:
            return
        self.execution.stop(error)
        self.job.notify_stop()

    def bind_logger(self, **values: Any) -> None:
        """Add key/values to every subsequent log line of this run."""
        self.logger = self.logger.bind(**values)

    async def next(self) -> None:
        """Run the remaining stages and, at the end, the job body.

        Exceptions raised further down the chain stop the context with that
        error and propagate unchanged.
        """
        try:
            ran_job = await self._do_next()
        except Exception as exc:
            self.stop(exc)
            raise

        if ran_job:
            self.stop(None)

    async def _do_next(self) -> bool:
        while self._cursor < len(self._stages):
            stage = self._stages[self._cursor]
            self._cursor += 1
            if self.stopped and not stage.continue_on_stop():
                continue
            await stage.run(self)
            return False

        if self.stopped or self._executed:
            return False

        self._executed = True
        await self.job.run(self)
        return True
