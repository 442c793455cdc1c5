"""Build-and-push command for service images.

This module provides the `dcs-build-images` command which makes sure a
Docker Hub repository exists for each service, then builds and pushes the
service images one at a time.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
import questionary

from .. import __version__
from ..config import RegistryConfig, load_config
from ..errors import DcsError
from ..formatters import (
    EMOJIS,
    console,
    print_error,
    print_failure,
    print_info,
    print_stream_line,
    print_success,
)
from ..publish import ImageBuilder, RegistryClient, RepositoryStatus, ServiceBuildSpec, ServicePrompter
from ..shared.auth import export_suggestions, get_token, prompt_token
from ..shared.logging import configure_logging

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def pair_services(services: tuple[str, ...], paths: tuple[Path, ...]) -> list[ServiceBuildSpec]:
    """Pair --service and --path values in the order they were given.

    Raises:
        DcsError: If the counts differ or a name repeats
    """
    if len(services) != len(paths):
        raise DcsError(
            "Each --service needs a matching --path",
            hint="Example: dcs-build-images -s backend -p ../backend -s git-server -p ../git-server",
        )

    specs: list[ServiceBuildSpec] = []
    seen: set[str] = set()
    for name, path in zip(services, paths):
        name = name.strip()
        if not name:
            raise DcsError("Service name cannot be empty")
        if name in seen:
            raise DcsError(f"Service {name} was given more than once")
        seen.add(name)
        specs.append(ServiceBuildSpec(name, path.expanduser()))
    return specs


@click.command("build-images", context_settings=CONTEXT_SETTINGS)
@click.version_option(
    __version__,
    "-v",
    "--version",
    prog_name="dcs-build-images",
    message="%(prog)s v%(version)s",
)
@click.option(
    "--service",
    "-s",
    "services",
    multiple=True,
    help="Service name (can be used multiple times)",
)
@click.option(
    "--path",
    "-p",
    "paths",
    multiple=True,
    type=click.Path(path_type=Path),
    help="Path to service directory (must follow --service)",
)
@click.option("--token", "-t", default=None, help="Docker Hub token (default: $DOCKER_TOKEN)")
def build_images(services: tuple[str, ...], paths: tuple[Path, ...], token: str | None) -> None:
    """Build service images and push them to Docker Hub.

    Without --service flags the tool asks for services interactively.

    Examples:

        # Interactive mode
        dcs-build-images

        # Non-interactive mode
        dcs-build-images -s backend -p /path/to/backend -s git-server -p /path/to/git-server

        # With Docker token
        dcs-build-images -t your-token -s backend -p /path/to/backend
    """
    configure_logging()
    try:
        _run_publish(services, paths, token)
    except DcsError as e:
        print_error(e)
        sys.exit(1)
    except KeyboardInterrupt:
        print_failure("Cancelled")
        sys.exit(1)


def _resolve_token(token_arg: str | None) -> str:
    token = get_token(token_arg)
    if token:
        return token

    print_info("Docker Hub token not found in environment variables", style="yellow")
    token = prompt_token()

    save = questionary.confirm("Would you like to save this token to your environment?", default=False).ask()
    if save:
        suggestions = export_suggestions(token)
        print_info("Add this line to your shell configuration file:")
        console.print(suggestions[0], style="yellow", markup=False)
        if len(suggestions) > 1:
            console.print("\nOr run this command to add it to your shell configuration:", style="blue")
            console.print(suggestions[1], style="yellow", markup=False)
    return token


def _run_publish(
    services: tuple[str, ...],
    paths: tuple[Path, ...],
    token_arg: str | None,
) -> None:
    """Execute the full publish flow.

    Prompts and docker processes run synchronously; only the registry
    calls go through an event loop.
    """
    console.print(f"\n{EMOJIS['ROCKET']} Docker Build and Push Tool\n", style="blue")

    specs = pair_services(services, paths)
    cli_config = load_config()
    token = _resolve_token(token_arg)

    if not specs:
        prompter = ServicePrompter()
        specs = prompter.select(prompter.collect())

    # Fail before touching the registry if any build context is unusable
    registry = RegistryConfig.from_cli_config(cli_config, token)
    builder = ImageBuilder(registry, on_line=lambda line, kind: print_stream_line(line, kind.value))
    for spec in specs:
        builder.check_context(spec)

    for spec in specs:
        with console.status(f"Checking repository {spec.repository}..."):
            status = asyncio.run(_ensure_repository(registry, spec.repository))
        if status == RepositoryStatus.CREATED:
            print_success(f"Repository {spec.repository} created!")
        else:
            print_success(f"Repository {spec.repository} exists.")

        console.print(f"\n{EMOJIS['GEAR']} Building {spec.name}...", style="blue")
        builder.build(spec)

        console.print(f"\n{EMOJIS['ROCKET']} Pushing {spec.name}...", style="blue")
        builder.push(spec)

        console.print()
        print_success(f"Successfully built and pushed {spec.name}!")

    console.print()
    print_success("All selected images have been built and pushed successfully!")


async def _ensure_repository(registry: RegistryConfig, name: str) -> RepositoryStatus:
    async with RegistryClient(registry) as client:
        return await client.ensure_repository(name)
