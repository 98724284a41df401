"""
Root Typer application for the cronswarm CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="cronswarm",
    help="cronswarm: run scheduled jobs as one-shot swarm services, containers or local commands.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from cronswarm import __version__

        typer.echo(f"cronswarm {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """cronswarm CLI. Run jobs once and report their execution."""


# ── Sub-command registration ─────────────────────────────────────────────

from cronswarm.cli.run import app as run_app  # noqa: E402

app.add_typer(run_app, name="run", help="Run a job once.")
