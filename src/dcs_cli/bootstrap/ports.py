"""Port conflict resolution for the setup command.

Each published service gets its default host port unless something else is
listening there. A port held by our own earlier run of the same service is
kept as-is, so re-running setup is a no-op for ports.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

import questionary
from questionary import Choice

from ..errors import PortResolutionError
from ..formatters import print_info, print_success, print_warning
from ..shared.logging import get_logger
from .prerequisites import MAX_PORT, PortScanner
from .stack import StackManager

logger = get_logger(__name__)

# Logical service name -> resolved host port
PortAssignment = dict[str, int]

# Resolution order matches the order services are wired in the compose file
DEFAULT_PORTS: PortAssignment = {
    "log-streamer": 8080,
    "backend": 3000,
    "redis": 6379,
    "mongodb": 27017,
}


class PortAction(Enum):
    """What to do about a port held by an unrelated process."""

    AUTO = "auto"
    CUSTOM = "custom"
    EXIT = "exit"


def validate_port_input(text: str, is_free: Callable[[int], bool]) -> bool | str:
    """questionary validator for a manually entered port."""
    try:
        port = int(text.strip())
    except ValueError:
        return f"Please enter a valid port number (1-{MAX_PORT})"
    if port < 1 or port > MAX_PORT:
        return f"Please enter a valid port number (1-{MAX_PORT})"
    if not is_free(port):
        return "This port is already in use"
    return True


class PortPrompt:
    """questionary prompts used when a default port is taken."""

    def choose_action(self, service: str, port: int) -> PortAction:
        answer = questionary.select(
            "What would you like to do?",
            choices=[
                Choice("Try another port automatically", value=PortAction.AUTO),
                Choice("Specify a custom port", value=PortAction.CUSTOM),
                Choice("Exit setup", value=PortAction.EXIT),
            ],
        ).ask()
        # Ctrl+C counts as exit
        return answer if answer is not None else PortAction.EXIT

    def ask_port(self, service: str, is_free: Callable[[int], bool]) -> int:
        answer = questionary.text(
            f"Enter a custom port for {service}",
            validate=lambda text: validate_port_input(text, is_free),
        ).ask()
        if answer is None:
            raise PortResolutionError("Setup cancelled")
        return int(answer.strip())


class PortResolver:
    """Resolve a free host port for each published service."""

    def __init__(
        self,
        scanner: PortScanner | None = None,
        stack: StackManager | None = None,
        prompt: PortPrompt | None = None,
    ):
        self.scanner = scanner or PortScanner()
        self.stack = stack or StackManager()
        self.prompt = prompt or PortPrompt()
        self.assigned: PortAssignment = {}

    def is_free(self, port: int) -> bool:
        """Free means bindable and not handed to another service in this run."""
        return port not in self.assigned.values() and self.scanner.is_port_available(port)

    def resolve(self, service: str, default: int) -> int:
        """Resolve the host port for one service.

        Raises:
            PortResolutionError: If the operator aborts or no port is left
        """
        port = self._resolve(service, default)
        self.assigned[service] = port
        logger.info("port_resolved", service=service, default=default, port=port)
        return port

    def _resolve(self, service: str, default: int) -> int:
        if self.is_free(default):
            return default

        claimed_this_run = default in self.assigned.values()
        if not claimed_this_run and self.stack.is_publishing(service, default):
            print_info(f"Port {default} is already in use by our {service} service", style="green")
            return default

        print_warning(f"Port {default} is already in use by another service")
        action = self.prompt.choose_action(service, default)

        if action == PortAction.EXIT:
            raise PortResolutionError("Setup cancelled")

        if action == PortAction.CUSTOM:
            return self.prompt.ask_port(service, self.is_free)

        port = self.scanner.find_available(default, taken=set(self.assigned.values()))
        print_success(f"Using port {port} for {service}")
        return port

    def resolve_all(self, defaults: PortAssignment | None = None) -> PortAssignment:
        """Resolve every service in `defaults` (DEFAULT_PORTS if omitted)."""
        for service, default in (defaults or DEFAULT_PORTS).items():
            self.resolve(service, default)
        return dict(self.assigned)
