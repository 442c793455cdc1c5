"""Setup command for the local DCS stack.

This module provides the `dcs-setup` command which checks prerequisites,
collects the stack configuration, writes test-compose.yml, builds the
service images, starts the stack and verifies every service.
"""

from __future__ import annotations

import asyncio
import sys

import click

from .. import __version__
from ..bootstrap import (
    ComposeConfig,
    ComposeGenerator,
    DockerDetector,
    HealthPoller,
    MultiArchBuilder,
    PortResolver,
    ServiceCheck,
    ServiceProber,
    StackManager,
    StackPrompter,
    VolumeManager,
)
from ..bootstrap.health import DOMAIN_HINTS
from ..bootstrap.prerequisites import BUILDX_HINT, COMPOSE_HINT, DOCKER_INSTALL_URL
from ..config import DEFAULT_REDIS_PASSWORD, CLIConfig, StackConfig, load_config
from ..errors import DcsError, PrerequisiteError, StackError
from ..formatters import (
    EMOJIS,
    console,
    print_dim,
    print_error,
    print_failure,
    print_header,
    print_success,
    print_summary,
    print_warning,
)
from ..shared.logging import configure_logging
from ..shared.paths import COMPOSE_FILE

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

# (display name, success line, failure line) per service
SERVICE_LABELS = {
    "backend": ("backend", "Backend is running locally", "Backend is not responding locally"),
    "git-server": ("git-server", "Git server is running", "Git server is not responding"),
    "log-streamer": ("log-streamer", "Log streamer is running", "Log streamer is not responding"),
    "redis": ("Redis", "Redis is running", "Redis is not responding"),
    "mongodb": ("MongoDB", "MongoDB is running", "MongoDB is not responding"),
}


@click.command("setup", context_settings=CONTEXT_SETTINGS)
@click.version_option(
    __version__,
    "-v",
    "--version",
    prog_name="dcs-setup",
    message="%(prog)s v%(version)s",
)
@click.option("--backend-domain", "-b", default=None, help="Backend domain")
@click.option("--git-domain", "-g", default=None, help="Git server domain")
@click.option(
    "--redis-pass",
    "-r",
    default=DEFAULT_REDIS_PASSWORD,
    show_default=True,
    help="Redis password",
)
@click.option("--redis-user", "-u", default="", help="Redis username (optional)")
@click.option("--test-runner", "-t", default="", help="Test runner URL (optional)")
def setup(
    backend_domain: str | None,
    git_domain: str | None,
    redis_pass: str,
    redis_user: str,
    test_runner: str,
) -> None:
    """Configure, build and start the local DCS stack.

    Without both --backend-domain and --git-domain the tool asks for the
    configuration interactively.

    Examples:

        # Interactive mode
        dcs-setup

        # Non-interactive mode
        dcs-setup -b api.example.com -g git.example.com -r mypassword

        # Full configuration
        dcs-setup -b api.example.com -g git.example.com -r mypassword -u admin -t https://test.example.com
    """
    configure_logging()
    try:
        _run_setup(
            backend_domain=backend_domain,
            git_domain=git_domain,
            redis_password=redis_pass,
            redis_username=redis_user,
            test_runner_url=test_runner,
        )
    except DcsError as e:
        print_error(e)
        sys.exit(1)
    except KeyboardInterrupt:
        print_failure("Setup cancelled")
        sys.exit(1)


def check_dependencies(detector: DockerDetector | None = None) -> None:
    """Report each prerequisite and raise on the first missing one.

    Raises:
        PrerequisiteError: If docker, compose or buildx is unavailable
    """
    print_header("Checking Dependencies")
    info = (detector or DockerDetector()).detect()

    if not info.docker_available:
        print_failure("Docker is not installed or not running")
        raise PrerequisiteError(
            info.error or "Docker is not available",
            hint=f"Please install Docker from: {DOCKER_INSTALL_URL}",
        )
    print_success(f"Docker is installed ({info.docker_version})")

    if not info.compose_available:
        print_failure("Docker Compose is not available")
        raise PrerequisiteError("Docker Compose is not available", hint=COMPOSE_HINT)
    print_success(f"Docker Compose is available ({info.compose_version})")

    if not info.buildx_available:
        print_failure("Docker Buildx is not available")
        raise PrerequisiteError("Docker Buildx is not available", hint=BUILDX_HINT)
    print_success("Docker Buildx is available")


def print_configuration(config: StackConfig) -> None:
    print_header("Configuration Summary")
    console.print("Here's what we're going to set up:\n", style="bold")
    print_summary(
        [
            ("SERVER", "Backend Domain", config.backend_domain),
            ("SERVER", "Git Server Domain", config.git_domain),
            ("KEY", "Redis Password", config.redis_password),
            ("KEY", "Redis Username", config.redis_username),
            ("LINK", "Test Runner URL", config.test_runner_url),
        ]
    )


def print_check(check: ServiceCheck) -> None:
    """Print one service's verification result and diagnostics."""
    name, ok_line, fail_line = SERVICE_LABELS.get(
        check.service, (check.service, f"{check.service} is running", f"{check.service} is not responding")
    )

    if check.healthy:
        print_success(ok_line)
        for warning in check.warnings:
            print_warning(warning)
            console.print("\nThis might be due to:", style="yellow")
            for i, hint in enumerate(DOMAIN_HINTS, start=1):
                console.print(f"{i}. {hint}", style="yellow")
        return

    print_failure(f"{fail_line} ({check.result.error})")
    console.print(f"\nChecking {name} logs...", style="yellow")
    if check.logs is None:
        print_failure(f"Could not fetch {name} logs (logs unavailable)")
        return

    print_dim(check.logs)
    if check.tls_expected:
        console.print("\nNote: SSL certificate errors are expected in local development.", style="yellow")
        console.print("The git server is running but cannot obtain SSL certificates.", style="yellow")
        console.print("This is normal and won't affect local development.", style="yellow")


def print_useful_commands(config: StackConfig) -> None:
    compose = COMPOSE_FILE.name
    console.print()
    console.print("Useful Commands", style="bold blue")
    console.print(
        f"  [grey50]{EMOJIS['INFO']}[/grey50] View logs:     [green]docker compose -f {compose} logs -f[/green]"
    )
    console.print(
        f"  [grey50]{EMOJIS['INFO']}[/grey50] Stop services: [green]docker compose -f {compose} down[/green]"
    )
    console.print()
    console.print(f"{EMOJIS['INFO']} To save this configuration for future use, run:", style="grey50")
    for line in config.export_lines():
        console.print(f"  {EMOJIS['GEAR']} {line}", markup=False)


def _run_setup(
    backend_domain: str | None,
    git_domain: str | None,
    redis_password: str,
    redis_username: str,
    test_runner_url: str,
    cli_config: CLIConfig | None = None,
) -> bool:
    """Execute the full setup flow.

    Prompts (configuration, port conflicts) run before any event loop
    exists; only health verification is async.

    Returns:
        True if every service passed verification.
    """
    cli_config = cli_config or load_config()

    # ── Step 1: Prerequisites ──
    check_dependencies()

    # ── Step 2: Configuration ──
    interactive = not (backend_domain and git_domain)
    if interactive:
        config = StackPrompter().collect(
            backend_domain=backend_domain,
            git_domain=git_domain,
            redis_password=redis_password,
            redis_username=redis_username,
            test_runner_url=test_runner_url,
        )
    else:
        config = StackConfig(
            backend_domain=backend_domain,
            git_domain=git_domain,
            redis_password=redis_password or DEFAULT_REDIS_PASSWORD,
            redis_username=redis_username or "",
            test_runner_url=test_runner_url or "",
        )

    print_configuration(config)
    if interactive and not StackPrompter().confirm():
        raise DcsError("Setup cancelled")

    # ── Step 3: Ports and compose file ──
    print_header("Creating Configuration")
    stack = StackManager()
    VolumeManager().setup_directories()
    ports = PortResolver(stack=stack).resolve_all()

    with console.status("Creating docker-compose configuration..."):
        compose_config = ComposeConfig.from_assignment(config, ports, namespace=cli_config.registry_namespace)
        compose_file = ComposeGenerator().generate(compose_config)
    print_success(f"Configuration created ({compose_file})")

    # ── Step 4: Multi-architecture images ──
    print_header("Building Multi-Architecture Images")
    images = MultiArchBuilder(
        namespace=cli_config.registry_namespace,
        version=cli_config.image_tag,
        source_root=cli_config.source_root,
    )
    with console.status("Setting up multi-platform builder..."):
        created = images.ensure_builder()
    print_success("Created new multi-platform builder" if created else "Multi-platform builder already exists")

    with console.status("Building images for multiple architectures..."):
        images.build_all()
    print_success("Multi-architecture images built successfully")

    # ── Step 5: Start ──
    print_header("Starting Services")
    with console.status("Initializing all services..."):
        started, message = stack.up()
    if not started:
        raise StackError(message)
    print_success(message)

    # ── Step 6: Verify ──
    print_header("Testing Services")
    poller = HealthPoller(deadline_seconds=cli_config.probe_timeout)
    prober = ServiceProber(stack, config, ports, poller)
    report = asyncio.run(prober.verify(on_result=print_check))

    # ── Done ──
    print_header("Setup Complete")
    if report.all_healthy:
        print_success("All services have been set up successfully!")
    else:
        print_warning(
            f"Some services may not be running properly ({', '.join(report.failed)}). "
            "Please check the logs above."
        )

    print_useful_commands(config)
    return report.all_healthy
