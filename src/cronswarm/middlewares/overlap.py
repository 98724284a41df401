"""Skip a firing while a previous run of the same job is still in flight."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel

from cronswarm.core.errors import JobSkippedError

if TYPE_CHECKING:
    from cronswarm.execution.context import Context


class OverlapConfig(BaseModel):
    no_overlap: bool = False


def new_overlap(config: OverlapConfig) -> Overlap | None:
    if not config.no_overlap:
        return None
    return Overlap(no_overlap=config.no_overlap)


class Overlap:
    def __init__(self, *, no_overlap: bool = True) -> None:
        self.no_overlap = no_overlap

    def continue_on_stop(self) -> bool:
        return False

    async def run(self, ctx: Context) -> None:
        # This run is already counted, so a concurrent one makes it > 1
        if self.no_overlap and ctx.job.running > 1:
            ctx.stop(JobSkippedError().with_context(job=ctx.job.name))

        await ctx.next()
