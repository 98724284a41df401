"""Job protocol and the fields shared by every job variant.

Every variant (``RunServiceJob``, ``RunJob``, ``ExecJob``, ``LocalJob``)
subclasses ``BareJob`` and adds its own execution parameters and ``run``.

.. code-block:: text

    BareJob
    ├── name, command, schedule       identity (owned by the scheduler)
    ├── instance_name                 "<name>_<unix-ts>", regenerated per run
    ├── running                       number of in-flight runs
    ├── use(*middlewares) / middlewares()
    └── run(ctx)                      abstract
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from cronswarm.execution.middleware import Middleware, MiddlewareContainer
from cronswarm.execution.models import utcnow

if TYPE_CHECKING:
    from cronswarm.execution.context import Context


@runtime_checkable
class Job(Protocol):
    """What the scheduler and the middleware chain need from a job."""

    name: str
    command: str
    instance_name: str

    @property
    def running(self) -> int: ...

    def middlewares(self) -> list[Middleware]: ...

    def notify_start(self) -> None: ...

    def notify_stop(self) -> None: ...

    async def run(self, ctx: Context) -> None: ...


def instance_name_for(name: str, when: datetime) -> str:
    return f"{name}_{int(when.timestamp())}"


@dataclass(kw_only=True)
class BareJob:
    """Identity and bookkeeping common to all job variants."""

    name: str = ""
    command: str = ""
    schedule: str = ""
    instance_name: str = field(default="", init=False)

    _running: int = field(default=0, init=False, repr=False, compare=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False, compare=False)
    _middlewares: MiddlewareContainer = field(
        default_factory=MiddlewareContainer, init=False, repr=False, compare=False,
    )

    @property
    def running(self) -> int:
        return self._running

    def notify_start(self) -> None:
        with self._lock:
            self._running += 1

    def notify_stop(self) -> None:
        with self._lock:
            self._running -= 1

    def new_instance_name(self, now: datetime | None = None) -> str:
        """Generate and store the instance name for a new run."""
        self.instance_name = instance_name_for(self.name, now or utcnow())
        return self.instance_name

    def use(self, *middlewares: Middleware | None) -> None:
        self._middlewares.use(*middlewares)

    def middlewares(self) -> list[Middleware]:
        return self._middlewares.middlewares()

    async def run(self, ctx: Context) -> None:
        """Implement in subclass. Runs the job body once."""
        raise NotImplementedError
