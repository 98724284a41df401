"""
CLI utility helpers: settings, client and middleware wiring, output formatting.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from cronswarm.cluster import ClusterClient, build_client
from cronswarm.core.errors import ConfigError
from cronswarm.core.logging import configure_logging
from cronswarm.core.settings import CronswarmSettings, get_settings
from cronswarm.execution import Execution, Middleware, run_job
from cronswarm.jobs import Job
from cronswarm.middlewares import SlackConfig, new_slack

console = Console()
err_console = Console(stderr=True)


# ── Wiring ───────────────────────────────────────────────────────────────


def load_settings() -> CronswarmSettings:
    """Validated settings; invalid ``CRONSWARM_*`` values exit with code 2."""
    try:
        settings = get_settings()
    except ValidationError as exc:
        error = ConfigError(f"invalid configuration: {exc}", cause=exc)
        err_console.print(f"[bold red]Error[/bold red] ({error.category.value}): {error.message}")
        raise typer.Exit(code=2) from exc

    configure_logging(level=settings.log_level, json_format=settings.json_logs)
    return settings


def get_client(settings: CronswarmSettings) -> ClusterClient:
    return build_client(settings)


def make_middlewares(settings: CronswarmSettings) -> list[Middleware]:
    slack = new_slack(SlackConfig.from_settings(settings))
    return [slack] if slack is not None else []


def run_once(job: Job, settings: CronswarmSettings, *, as_json: bool = False) -> None:
    """Run ``job`` once, print its execution, exit 1 when it failed."""
    execution = asyncio.run(run_job(job, middlewares=make_middlewares(settings)))
    output_execution(execution, job=job, as_json=as_json)
    if execution.failed:
        raise typer.Exit(code=1)


# ── Output helpers ───────────────────────────────────────────────────────


def _status(execution: Execution) -> str:
    if execution.failed:
        return "[red]failed[/red]"
    if execution.skipped:
        return "[yellow]skipped[/yellow]"
    return "[green]success[/green]"


def output_execution(execution: Execution, *, job: Job, as_json: bool = False) -> None:
    data: dict[str, Any] = {"job": job.name, "instance_name": job.instance_name, **execution.to_dict()}

    if as_json:
        console.print_json(json.dumps(data, default=str))
        return

    table = Table(title=f"Execution: {job.name}", show_header=False, pad_edge=False)
    table.add_column("field", style="cyan")
    table.add_column("value", overflow="fold")
    table.add_row("status", _status(execution))
    for key, value in data.items():
        if key in ("output", "error_output") and not value:
            continue
        table.add_row(key, "" if value is None else str(value))
    console.print(table)
