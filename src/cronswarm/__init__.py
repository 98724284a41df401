"""
cronswarm - scheduled jobs executed as one-shot swarm services.

Packages:
- cronswarm.core: errors, logging, settings
- cronswarm.execution: Execution record, Context, middleware chain, run_job
- cronswarm.cluster: ClusterClient protocol, docker SDK and in-memory clients
- cronswarm.jobs: RunServiceJob, RunJob, ExecJob, LocalJob
- cronswarm.middlewares: Overlap, Slack
"""

__version__ = "0.1.0"

from cronswarm.core import *  # noqa
from cronswarm.execution import Context, Execution, run_job  # noqa: E402
from cronswarm.jobs import ExecJob, LocalJob, RunJob, RunServiceJob  # noqa: E402
