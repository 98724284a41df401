"""
Job variants.

Modules:
    _base        - Job protocol, BareJob
    _watch       - deadline-bounded poller shared by the runners
    images       - image reference and command helpers
    run_service  - RunServiceJob (one-shot swarm service)
    run_container - RunJob (one-shot container on a single engine)
    exec         - ExecJob (command inside a running container)
    local        - LocalJob (local subprocess)
"""

from cronswarm.jobs._base import BareJob, Job, instance_name_for
from cronswarm.jobs._watch import DEFAULT_MAX_RUNTIME, DEFAULT_POLL_INTERVAL, watch
from cronswarm.jobs.exec import ExecJob
from cronswarm.jobs.images import (
    build_pull_options,
    full_image_name,
    parse_image,
    shell_split,
    split_command,
)
from cronswarm.jobs.local import LocalJob
from cronswarm.jobs.run_container import RunJob
from cronswarm.jobs.run_service import RunServiceJob

__all__ = [
    # Base
    "BareJob",
    "Job",
    "instance_name_for",
    # Watch
    "DEFAULT_MAX_RUNTIME",
    "DEFAULT_POLL_INTERVAL",
    "watch",
    # Images
    "build_pull_options",
    "full_image_name",
    "parse_image",
    "shell_split",
    "split_command",
    # Variants
    "ExecJob",
    "LocalJob",
    "RunJob",
    "RunServiceJob",
]
