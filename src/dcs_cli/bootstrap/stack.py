"""Stack management for the setup command.

Thin wrappers around `docker compose -f test-compose.yml ...` for the
operations setup needs: ps, up, logs and exec.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from ..errors import StackError
from ..shared.logging import get_logger
from ..shared.paths import COMPOSE_FILE

logger = get_logger(__name__)


class StackManager:
    """Manage the generated docker-compose stack."""

    def __init__(self, compose_dir: Path | None = None):
        """Initialize stack manager.

        Args:
            compose_dir: Directory containing the compose file (default: cwd)
        """
        self.compose_dir = compose_dir or Path(".")
        self.compose_file = self.compose_dir / COMPOSE_FILE.name

    def _base_args(self) -> list[str]:
        return ["docker", "compose", "-f", self.compose_file.name]

    def _run(self, args: list[str], timeout: float | None = None) -> subprocess.CompletedProcess:
        cmd = self._base_args() + args
        logger.debug("compose_command", args=cmd)
        return subprocess.run(
            cmd,
            cwd=self.compose_dir,
            capture_output=True,
            text=True,
            timeout=timeout,
        )

    def ps(self, service: str) -> str:
        """Return `docker compose ps <service>` output, or "" if it fails."""
        try:
            result = self._run(["ps", service], timeout=30)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            logger.debug("compose_ps_failed", service=service, error=str(e))
            return ""
        if result.returncode != 0:
            return ""
        return result.stdout

    def is_publishing(self, service: str, port: int) -> bool:
        """True if our own <service> container already maps host <port>."""
        return f":{port}->" in self.ps(service)

    def up(self, detach: bool = True) -> tuple[bool, str]:
        """Start stack.

        Returns:
            Tuple of (success, message).
        """
        if not self.compose_file.exists():
            return False, f"No {self.compose_file.name} found"

        args = ["up"]
        if detach:
            args.append("-d")

        try:
            result = self._run(args)
        except FileNotFoundError:
            return False, "Docker not found. Is Docker installed?"

        if result.returncode != 0:
            return False, f"Failed to start stack: {result.stderr.strip()}"

        return True, "Services started"

    def logs(self, service: str, tail: int | None = None, timeout: float = 30.0) -> str:
        """Fetch a service's logs.

        Raises:
            StackError: If the logs cannot be fetched
        """
        args = ["logs", "--no-color"]
        if tail:
            args.extend(["--tail", str(tail)])
        args.append(service)

        try:
            result = self._run(args, timeout=timeout)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            raise StackError(f"Could not fetch {service} logs: {e}") from e

        if result.returncode != 0:
            raise StackError(f"Could not fetch {service} logs: {result.stderr.strip()}")
        return result.stdout

    def exec(self, service: str, command: list[str], timeout: float = 10.0) -> subprocess.CompletedProcess:
        """Run a command inside a running service container (no TTY).

        Raises:
            FileNotFoundError: If docker is not installed
            subprocess.TimeoutExpired: If the command exceeds `timeout`
        """
        return self._run(["exec", "-T", service, *command], timeout=timeout)
