"""
Middlewares wrapping job runs.

Modules:
    overlap - Overlap (skip concurrent firings of the same job)
    slack   - Slack (webhook notification after every run)
"""

from cronswarm.middlewares.overlap import Overlap, OverlapConfig, new_overlap
from cronswarm.middlewares.slack import Slack, SlackConfig, new_slack

__all__ = [
    "Overlap",
    "OverlapConfig",
    "new_overlap",
    "Slack",
    "SlackConfig",
    "new_slack",
]
