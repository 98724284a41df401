"""
CLI: ``cronswarm run``: run a single job once, outside any schedule.
"""

from __future__ import annotations

import typer

from cronswarm.cli import utils
from cronswarm.jobs import ExecJob, LocalJob, RunJob, RunServiceJob

app = typer.Typer(no_args_is_help=True)


@app.command("service")
def run_service(
    image: str = typer.Argument(..., help="Image to run"),
    command: str = typer.Option("", "--command", "-c", help="Command (whitespace separated)"),
    name: str = typer.Option("cronswarm", "--name", "-n", help="Job name"),
    network: str = typer.Option("", "--network"),
    registry: str = typer.Option("", "--registry"),
    placement_constraint: str = typer.Option("", "--placement-constraint"),
    logging_gelf_address: str = typer.Option("", "--logging-gelf-address"),
    keep: bool = typer.Option(False, "--keep", help="Do not remove the service afterwards"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run IMAGE as a one-shot swarm service and wait for it."""
    settings = utils.load_settings()
    job = RunServiceJob(
        client=utils.get_client(settings),
        name=name,
        command=command,
        image=image,
        network=network,
        registry=registry,
        placement_constraint=placement_constraint,
        logging_gelf_address=logging_gelf_address,
        delete=not keep,
        poll_interval=settings.poll_interval,
        max_runtime=settings.max_runtime,
    )
    utils.run_once(job, settings, as_json=json_out)


@app.command("container")
def run_container(
    image: str = typer.Argument(..., help="Image to run"),
    command: str = typer.Option("", "--command", "-c"),
    name: str = typer.Option("cronswarm", "--name", "-n", help="Job name"),
    network: str = typer.Option("", "--network"),
    registry: str = typer.Option("", "--registry"),
    user: str = typer.Option("root", "--user", "-u"),
    tty: bool = typer.Option(False, "--tty"),
    keep: bool = typer.Option(False, "--keep", help="Do not remove the container afterwards"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run IMAGE as a one-shot container on the engine."""
    settings = utils.load_settings()
    job = RunJob(
        client=utils.get_client(settings),
        name=name,
        command=command,
        image=image,
        network=network,
        registry=registry,
        user=user,
        tty=tty,
        delete=not keep,
        poll_interval=settings.poll_interval,
        max_runtime=settings.max_runtime,
    )
    utils.run_once(job, settings, as_json=json_out)


@app.command("exec")
def run_exec(
    container: str = typer.Argument(..., help="Running container name or id"),
    command: str = typer.Option(..., "--command", "-c"),
    name: str = typer.Option("cronswarm", "--name", "-n", help="Job name"),
    user: str = typer.Option("root", "--user", "-u"),
    tty: bool = typer.Option(False, "--tty"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run a command inside CONTAINER."""
    settings = utils.load_settings()
    job = ExecJob(
        client=utils.get_client(settings),
        name=name,
        command=command,
        container=container,
        user=user,
        tty=tty,
    )
    utils.run_once(job, settings, as_json=json_out)


@app.command("local")
def run_local(
    command: str = typer.Argument(..., help="Command line to run"),
    name: str = typer.Option("cronswarm", "--name", "-n", help="Job name"),
    dir: str | None = typer.Option(None, "--dir", "-d", help="Working directory"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """Run COMMAND as a local subprocess."""
    settings = utils.load_settings()
    job = LocalJob(name=name, command=command, dir=dir)
    utils.run_once(job, settings, as_json=json_out)
