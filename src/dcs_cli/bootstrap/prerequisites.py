"""Prerequisite detection for the setup command.

This module provides detection of Docker, Docker Compose and Buildx, and
local port availability.
"""

from __future__ import annotations

import shutil
import socket
import subprocess
from dataclasses import dataclass

from ..errors import PortResolutionError
from ..shared.logging import get_logger

logger = get_logger(__name__)

MAX_PORT = 65535

DOCKER_INSTALL_URL = "https://docs.docker.com/get-docker/"
COMPOSE_HINT = "Please ensure you have Docker Desktop or Docker Engine with the Compose plugin installed"
BUILDX_HINT = "Please install the Docker Buildx plugin: https://docs.docker.com/build/install-buildx/"


@dataclass
class DockerInfo:
    """Docker runtime detection result."""

    docker_available: bool
    docker_version: str | None = None
    compose_available: bool = False
    compose_version: str | None = None
    buildx_available: bool = False
    buildx_version: str | None = None
    error: str | None = None


class DockerDetector:
    """Detect Docker Engine, Compose and Buildx availability."""

    def detect(self) -> DockerInfo:
        """Check for Docker, then the compose and buildx plugins."""
        if not shutil.which("docker"):
            return DockerInfo(
                docker_available=False,
                error=f"Docker is not installed. Install Docker: {DOCKER_INSTALL_URL}",
            )

        try:
            result = subprocess.run(
                ["docker", "version", "--format", "{{.Server.Version}}"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            if result.returncode != 0:
                return DockerInfo(
                    docker_available=False,
                    error=f"Docker not responding: {result.stderr.strip()}",
                )
            docker_version = result.stdout.strip()
        except subprocess.TimeoutExpired:
            return DockerInfo(
                docker_available=False,
                error="Docker not responding (timeout)",
            )

        compose_version = self._plugin_version(["docker", "compose", "version", "--short"])
        buildx_version = self._plugin_version(["docker", "buildx", "version"])

        return DockerInfo(
            docker_available=True,
            docker_version=docker_version,
            compose_available=compose_version is not None,
            compose_version=compose_version,
            buildx_available=buildx_version is not None,
            buildx_version=buildx_version,
        )

    def _plugin_version(self, args: list[str]) -> str | None:
        """Run a plugin's version command; None when it is unavailable."""
        try:
            result = subprocess.run(args, capture_output=True, text=True, timeout=10)
        except subprocess.TimeoutExpired:
            logger.debug("plugin_version_timeout", args=args)
            return None
        if result.returncode != 0:
            return None
        return result.stdout.strip()


class PortScanner:
    """Check whether local TCP ports can be listened on."""

    def __init__(self, host: str = "0.0.0.0"):
        self.host = host

    def is_port_available(self, port: int) -> bool:
        """A port is available if a listener can be bound to it."""
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            try:
                sock.bind((self.host, port))
                sock.listen(1)
            except OSError:
                return False
        return True

    def find_available(self, start: int, taken: set[int] | None = None) -> int:
        """First port >= start that is free and not in `taken`.

        Raises:
            PortResolutionError: If nothing up to 65535 is free
        """
        taken = taken or set()
        for candidate in range(start, MAX_PORT + 1):
            if candidate not in taken and self.is_port_available(candidate):
                return candidate
        raise PortResolutionError(f"No available port found between {start} and {MAX_PORT}")
