"""Image build-and-push driver.

Runs `docker build` and `docker push` for one service at a time, streaming
their output line by line. Lines are classified for coloring only; success
or failure is decided by the exit code alone.
"""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from ..config import RegistryConfig
from ..errors import BuildError
from ..shared.logging import get_logger

logger = get_logger(__name__)

DOCKERFILE_NAME = "Dockerfile"
REPOSITORY_PREFIX = "dcs-"


class LineKind(Enum):
    """Display category of a line of build/push output."""

    STEP = "step"
    CACHE = "cache"
    SUCCESS = "success"
    INFO = "info"
    ERROR = "error"


class Phase(Enum):
    BUILD = "build"
    PUSH = "push"


# Ordered (substring, kind) rules per phase; first match wins
_RULES: dict[Phase, list[tuple[str, LineKind]]] = {
    Phase.BUILD: [
        ("Step", LineKind.STEP),
        ("Pulling", LineKind.STEP),
        ("Successfully", LineKind.SUCCESS),
        ("Using cache", LineKind.CACHE),
        ("CACHED", LineKind.CACHE),
    ],
    Phase.PUSH: [
        ("Pushing", LineKind.STEP),
        ("Pushed", LineKind.SUCCESS),
        ("Layer", LineKind.STEP),
        ("Preparing", LineKind.CACHE),
    ],
}


def classify_line(line: str, phase: Phase) -> LineKind | None:
    """Classify a line of output, or return None for blank lines."""
    if not line.strip():
        return None
    if "error" in line.lower():
        return LineKind.ERROR
    for marker, kind in _RULES[phase]:
        if marker in line:
            return kind
    return LineKind.INFO


@dataclass(frozen=True)
class ServiceBuildSpec:
    """A service to build: its name and its build context directory."""

    name: str
    context: Path

    @property
    def repository(self) -> str:
        return f"{REPOSITORY_PREFIX}{self.name}"

    @property
    def dockerfile(self) -> Path:
        return self.context / DOCKERFILE_NAME


LineCallback = Callable[[str, LineKind], None]


class ImageBuilder:
    """Build and push service images with docker."""

    def __init__(self, registry: RegistryConfig, on_line: LineCallback | None = None):
        """Initialize builder.

        Args:
            registry: Namespace and tag used to name images
            on_line: Called with (line, kind) for every non-blank output line
        """
        self.registry = registry
        self.on_line = on_line

    def image_name(self, spec: ServiceBuildSpec) -> str:
        return f"{self.registry.namespace}/{spec.repository}:{self.registry.tag}"

    def check_context(self, spec: ServiceBuildSpec) -> None:
        """Fail fast when the build descriptor is missing.

        Raises:
            BuildError: If <context>/Dockerfile does not exist
        """
        if not spec.dockerfile.is_file():
            raise BuildError(f"Dockerfile not found at {spec.dockerfile}")

    def build(self, spec: ServiceBuildSpec) -> str:
        """Build the image for a service and return its name."""
        self.check_context(spec)
        image = self.image_name(spec)
        self._stream(
            ["docker", "build", "-t", image, "-f", str(spec.dockerfile), str(spec.context)],
            Phase.BUILD,
            f"Build failed for {spec.name}",
        )
        return image

    def push(self, spec: ServiceBuildSpec) -> str:
        """Push the already-built image for a service."""
        image = self.image_name(spec)
        self._stream(["docker", "push", image], Phase.PUSH, f"Push failed for {spec.name}")
        return image

    def build_and_push(self, spec: ServiceBuildSpec) -> str:
        self.build(spec)
        return self.push(spec)

    def _stream(self, args: Sequence[str], phase: Phase, failure: str) -> None:
        """Run a command, feeding each output line to on_line.

        Raises:
            BuildError: If the command cannot start or exits non-zero
        """
        logger.debug("command_start", args=list(args), phase=phase.value)
        try:
            process = subprocess.Popen(
                list(args),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError as e:
            raise BuildError(
                "Docker not found. Is Docker installed?",
                hint="Please install Docker from: https://docs.docker.com/get-docker/",
            ) from e

        assert process.stdout is not None
        for raw in process.stdout:
            line = raw.rstrip("\n")
            kind = classify_line(line, phase)
            if kind is not None and self.on_line:
                self.on_line(line, kind)

        return_code = process.wait()
        logger.debug("command_exit", args=list(args), returncode=return_code)
        if return_code != 0:
            raise BuildError(f"{failure} (exit code {return_code})")
