"""Middleware contract and registration container.

A middleware wraps a job's run for a cross-cutting concern (notification,
overlap protection, persistence). It is any object with::

    async def run(self, ctx: Context) -> None
    def continue_on_stop(self) -> bool

``run`` does its pre-logic, calls ``await ctx.next()`` to hand control to
the rest of the chain, then does its post-logic. ``continue_on_stop``
tells the chain whether the stage must still be entered after an earlier
stage stopped the context (a notifier wants to report a skipped run; an
overlap guard does not).

Example:
    >>> class Timing:
    ...     def continue_on_stop(self) -> bool:
    ...         return False
    ...     async def run(self, ctx) -> None:
    ...         await ctx.next()
    ...         ctx.logger.info("timing", duration=ctx.execution.duration)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from cronswarm.execution.context import Context


@runtime_checkable
class Middleware(Protocol):
    """Interceptor around a job run."""

    def continue_on_stop(self) -> bool:
        """Whether to run this stage even after the chain has been stopped."""
        ...

    async def run(self, ctx: Context) -> None:
        """Run the stage; call ``await ctx.next()`` to continue the chain."""
        ...


class MiddlewareContainer:
    """Ordered set of middlewares, at most one per concrete type.

    ``use()`` ignores ``None`` (the ``new_*`` factories return ``None`` for an
    empty configuration) and keeps the first middleware registered for a
    given type, so re-applying configuration is harmless.
    """

    def __init__(self) -> None:
        self._by_type: dict[type, Middleware] = {}

    def use(self, *middlewares: Middleware | None) -> None:
        for m in middlewares:
            if m is None:
                continue
            kind = type(m)
            if kind in self._by_type:
                continue
            self._by_type[kind] = m

    def middlewares(self) -> list[Middleware]:
        """Registered middlewares in registration order."""
        return list(self._by_type.values())

    def __len__(self) -> int:
        return len(self._by_type)
