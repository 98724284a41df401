"""
Job execution: the per-run record, the context and the middleware chain.

Modules:
    models      - Execution record
    middleware  - Middleware protocol and MiddlewareContainer
    context     - Context (start / next / stop)
    runner      - run_job(), the scheduler-facing entry point
"""

from cronswarm.execution.context import Context
from cronswarm.execution.middleware import Middleware, MiddlewareContainer
from cronswarm.execution.models import Execution, new_execution_id, utcnow
from cronswarm.execution.runner import run_job

__all__ = [
    "Context",
    "Execution",
    "Middleware",
    "MiddlewareContainer",
    "new_execution_id",
    "run_job",
    "utcnow",
]
