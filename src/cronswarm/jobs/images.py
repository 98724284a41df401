"""Image reference and command helpers used to build cluster requests.

Image references::

    busybox                              → busybox                 : latest
    busybox:1.36                         → busybox                 : 1.36
    registry.io:5000/team/app:2.0        → registry.io:5000/team/app : 2.0   (registry registry.io:5000)
    team/app:2.0 + registry "reg.io"     → reg.io/team/app         : 2.0   (registry reg.io)
"""

from __future__ import annotations

import shlex

from cronswarm.cluster._types import PullOptions

DEFAULT_TAG = "latest"


def parse_image(image: str) -> tuple[str, str]:
    """Split ``image`` into ``(repository, tag)``; tag defaults to ``latest``.

    Only a ``:`` after the last ``/`` separates a tag, so a registry port
    (``host:5000/repo``) is never mistaken for one.
    """
    last_slash = image.rfind("/")
    colon = image.rfind(":")
    if colon > last_slash:
        return image[:colon], image[colon + 1:] or DEFAULT_TAG
    return image, DEFAULT_TAG


def registry_of(repository: str) -> str:
    """Registry host embedded in ``repository``, or ``""`` for Docker Hub."""
    first, sep, _ = repository.partition("/")
    if not sep:
        return ""
    if "." in first or ":" in first or first == "localhost":
        return first
    return ""


def build_pull_options(image: str, registry: str = "") -> PullOptions:
    """Pull request for ``image``, optionally served by ``registry``."""
    repository, tag = parse_image(image)
    if registry:
        repository = f"{registry}/{repository}"
    else:
        registry = registry_of(repository)
    return PullOptions(repository=repository, tag=tag, registry=registry)


def full_image_name(registry: str, image: str) -> str:
    if registry:
        return f"{registry}/{image}"
    return image


def split_command(command: str) -> list[str] | None:
    """Whitespace tokenization used for swarm service commands."""
    if not command:
        return None
    return command.split()


def shell_split(command: str) -> list[str] | None:
    """Shell-like tokenization (quotes group words) for containers and local runs."""
    if not command:
        return None
    return shlex.split(command)
