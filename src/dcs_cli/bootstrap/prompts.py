"""Interactive configuration for the setup command.

Used when the backend and git domains are not both given as flags. Values
that were passed as flags become the prompt defaults.
"""

from __future__ import annotations

import questionary

from ..config import DEFAULT_REDIS_PASSWORD, StackConfig
from ..formatters import EMOJIS, console, print_header


def _required(text: str) -> bool | str:
    return True if text.strip() else "This field is required"


def _ask(question: questionary.Question):
    answer = question.ask()
    if answer is None:
        raise KeyboardInterrupt("Setup cancelled by user")
    return answer


class StackPrompter:
    """Ask the operator for domains, Redis credentials and the test runner."""

    def collect(
        self,
        backend_domain: str | None = None,
        git_domain: str | None = None,
        redis_password: str | None = None,
        redis_username: str | None = None,
        test_runner_url: str | None = None,
    ) -> StackConfig:
        print_header("Domain Configuration")
        console.print(f"{EMOJIS['INFO']} Let's start by configuring your domains", style="grey50")
        backend = _ask(
            questionary.text(
                f"{EMOJIS['SERVER']} Enter your backend domain",
                default=backend_domain or "",
                validate=_required,
            )
        )
        git = _ask(
            questionary.text(
                f"{EMOJIS['SERVER']} Enter your git server domain",
                default=git_domain or "",
                validate=_required,
            )
        )

        print_header("Redis Configuration")
        console.print(f"{EMOJIS['INFO']} Now, let's set up Redis", style="grey50")
        password = _ask(
            questionary.text(
                f"{EMOJIS['KEY']} Enter Redis password",
                default=redis_password or DEFAULT_REDIS_PASSWORD,
                validate=_required,
            )
        )
        username = _ask(
            questionary.text(
                f"{EMOJIS['KEY']} Enter Redis username (optional)",
                default=redis_username or "",
            )
        )

        print_header("Test Runner Configuration")
        console.print(f"{EMOJIS['INFO']} Finally, let's configure the test runner", style="grey50")
        runner_url = _ask(
            questionary.text(
                f"{EMOJIS['LINK']} Enter test runner URL (optional)",
                default=test_runner_url or "",
            )
        )

        return StackConfig(
            backend_domain=backend.strip(),
            git_domain=git.strip(),
            redis_password=password.strip(),
            redis_username=username.strip(),
            test_runner_url=runner_url.strip(),
        )

    def confirm(self) -> bool:
        return bool(
            _ask(questionary.confirm("Do you want to proceed with this configuration?", default=False))
        )
