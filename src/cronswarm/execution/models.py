"""Execution record.

One ``Execution`` exists per job invocation. It is opened by
``Context.start()``, mutated by middlewares and the job body while the chain
runs, and closed exactly once by ``Execution.stop()``. Persisting it is the
business of a middleware, not of this module.
"""

import io
import secrets
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from cronswarm.core.errors import JobSkippedError


def utcnow() -> datetime:
    """Return timezone-aware UTC datetime."""
    return datetime.now(UTC)


def new_execution_id() -> str:
    """Random 12-char hex identifier."""
    return secrets.token_hex(6)


@dataclass
class Execution:
    """Record of one run of a job.

    Lifecycle::

        Execution()          is_running=False, started_at=None
          └── start()        is_running=True,  started_at=now
                └── stop(err)
                      ├── err is None             → success
                      ├── err is JobSkippedError  → skipped=True
                      └── otherwise               → failed=True, error=err

    ``stop()`` only acts on a running execution, so the first call wins and
    the record is frozen afterwards.
    """

    id: str = field(default_factory=new_execution_id)
    started_at: datetime | None = None
    ended_at: datetime | None = None
    duration: timedelta = field(default_factory=timedelta)
    is_running: bool = False
    failed: bool = False
    skipped: bool = False
    error: BaseException | None = None
    output: io.BytesIO = field(default_factory=io.BytesIO, repr=False)
    error_output: io.BytesIO = field(default_factory=io.BytesIO, repr=False)

    def start(self) -> None:
        self.is_running = True
        self.started_at = utcnow()

    def stop(self, error: BaseException | None = None) -> None:
        if not self.is_running:
            return

        self.is_running = False
        self.ended_at = utcnow()
        if self.started_at is not None:
            self.duration = self.ended_at - self.started_at

        if isinstance(error, JobSkippedError):
            self.skipped = True
        elif error is not None:
            self.error = error
            self.failed = True

    @property
    def closed(self) -> bool:
        """Whether the execution was started and has been stopped."""
        return self.started_at is not None and not self.is_running

    def to_dict(self) -> dict[str, Any]:
        """Serialize for logs and CLI output."""
        return {
            "id": self.id,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_seconds": self.duration.total_seconds(),
            "failed": self.failed,
            "skipped": self.skipped,
            "error": str(self.error) if self.error is not None else None,
            "output": self.output.getvalue().decode("utf-8", errors="replace"),
            "error_output": self.error_output.getvalue().decode("utf-8", errors="replace"),
        }
