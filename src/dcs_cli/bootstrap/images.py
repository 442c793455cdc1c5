"""Multi-architecture image builds for the setup command.

Builds the three in-house service images for amd64 and arm64 with a
dedicated buildx builder and pushes them, so the compose stack can pull
them on either architecture.
"""

from __future__ import annotations

import subprocess
from collections.abc import Sequence
from pathlib import Path

from ..errors import BuildError
from ..shared.logging import get_logger

logger = get_logger(__name__)

BUILDER_NAME = "multi-platform-builder"
PLATFORMS = ("linux/amd64", "linux/arm64")
SERVICES = ("backend", "git-server", "log-streamer")


def _run(args: Sequence[str]) -> str:
    """Run a docker command and return stdout.

    Raises:
        BuildError: If the command is missing or exits non-zero
    """
    logger.debug("buildx_command", args=list(args))
    try:
        result = subprocess.run(list(args), capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise BuildError("Docker not found. Is Docker installed?") from e
    except subprocess.CalledProcessError as e:
        details = (e.stderr or "").strip() or (e.stdout or "").strip() or str(e)
        raise BuildError(f"Command failed: {' '.join(args)}\n{details}") from e
    return result.stdout


class MultiArchBuilder:
    """Build and push multi-platform images with docker buildx."""

    def __init__(
        self,
        namespace: str,
        version: str,
        source_root: Path,
        builder_name: str = BUILDER_NAME,
        platforms: Sequence[str] = PLATFORMS,
    ):
        """Initialize builder.

        Args:
            namespace: Registry namespace images are pushed under
            version: Version tag pushed alongside `latest`
            source_root: Directory containing one build context per service
            builder_name: buildx builder instance to create/use
            platforms: Target platforms
        """
        self.namespace = namespace
        self.version = version
        self.source_root = source_root
        self.builder_name = builder_name
        self.platforms = tuple(platforms)

    def ensure_builder(self) -> bool:
        """Create the buildx builder if missing and make it current.

        Returns:
            True if the builder was created, False if it already existed.
        """
        builders = _run(["docker", "buildx", "ls"])
        created = False
        if self.builder_name not in builders:
            _run(
                [
                    "docker",
                    "buildx",
                    "create",
                    "--name",
                    self.builder_name,
                    "--driver",
                    "docker-container",
                    "--bootstrap",
                ]
            )
            created = True

        _run(["docker", "buildx", "use", self.builder_name])
        return created

    def tags(self, service: str) -> list[str]:
        image = f"{self.namespace}/dcs-{service}"
        return [f"{image}:latest", f"{image}:{self.version}"]

    def build_args(self, service: str) -> list[str]:
        args = ["docker", "buildx", "build", "--platform", ",".join(self.platforms)]
        for tag in self.tags(service):
            args.extend(["-t", tag])
        args.extend(["--push", str(self.source_root / service)])
        return args

    def build(self, service: str) -> list[str]:
        """Build and push one service; returns the pushed tags."""
        context = self.source_root / service
        if not context.is_dir():
            raise BuildError(
                f"Build context not found for {service}: {context}",
                hint="Set DCS_SOURCE_ROOT to the directory containing the service sources.",
            )
        _run(self.build_args(service))
        return self.tags(service)

    def build_all(self, services: Sequence[str] = SERVICES) -> list[str]:
        """Build every service in order, stopping at the first failure."""
        pushed: list[str] = []
        for service in services:
            pushed.extend(self.build(service))
        return pushed
