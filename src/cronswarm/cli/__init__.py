"""
CLI layer for cronswarm.

A Typer application that builds a job from command-line options, runs it
once through ``run_job`` and prints the execution. Job semantics live in
``cronswarm.jobs``; this package handles only terminal transport.

Entry point::

    cronswarm --help
"""

from cronswarm.cli.app import app

__all__ = ["app"]
