"""Interactive service collection for the image publisher.

Used when no --service flags are given: ask for services one by one, then
let the operator tick which ones to build.
"""

from __future__ import annotations

from pathlib import Path

import questionary
from questionary import Choice

from .builder import DOCKERFILE_NAME, ServiceBuildSpec


def validate_service_name(text: str, existing: list[str]) -> bool | str:
    """questionary validator for a service name."""
    name = text.strip()
    if not name:
        return "Service name cannot be empty"
    if name in existing:
        return "Service name already exists"
    return True


def validate_context_path(text: str) -> bool | str:
    """questionary validator for a build context directory."""
    raw = text.strip()
    if not raw:
        return "Path cannot be empty"
    path = Path(raw).expanduser()
    if not path.is_dir():
        return "Directory does not exist"
    if not (path / DOCKERFILE_NAME).is_file():
        return "Dockerfile not found in directory"
    return True


class ServicePrompter:
    """Ask the operator which services to build."""

    def collect(self) -> list[ServiceBuildSpec]:
        """Prompt for (name, path) pairs until the operator stops.

        Raises:
            KeyboardInterrupt: If the operator cancels a prompt
        """
        specs: list[ServiceBuildSpec] = []

        while True:
            names = [spec.name for spec in specs]
            name = _ask(
                questionary.text(
                    "Enter service name (e.g., backend, git-server):",
                    validate=lambda text: validate_service_name(text, names),
                )
            )
            path = _ask(
                questionary.text(
                    "Enter absolute path to service directory:",
                    validate=validate_context_path,
                )
            )
            specs.append(ServiceBuildSpec(name.strip(), Path(path.strip()).expanduser()))

            if not _ask(questionary.confirm("Add another service?", default=False)):
                return specs

    def select(self, specs: list[ServiceBuildSpec]) -> list[ServiceBuildSpec]:
        """Checkbox selection of the services to build and push."""
        if not specs:
            return []

        choices = [Choice(title=f"{spec.name:<20s} {spec.context}", value=spec.name) for spec in specs]
        selected = _ask(
            questionary.checkbox(
                "Select services to build and push:",
                choices=choices,
                validate=lambda picked: True if picked else "Please select at least one service",
            )
        )
        return [spec for spec in specs if spec.name in selected]


def _ask(question: questionary.Question):
    answer = question.ask()
    if answer is None:
        raise KeyboardInterrupt("Prompt cancelled by user")
    return answer
