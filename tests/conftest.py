"""Shared test fixtures for dcs-cli tests."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import pytest
from prompt_toolkit.application import create_app_session
from prompt_toolkit.input import create_pipe_input
from prompt_toolkit.output import DummyOutput

from dcs_cli.config import RegistryConfig, StackConfig


@pytest.fixture
def registry_config() -> RegistryConfig:
    """Registry settings pointing at a fake API."""
    return RegistryConfig(
        namespace="testns",
        api_url="https://registry.test/v2",
        tag="1.0.0",
        token="tok_test",
    )


@pytest.fixture
def stack_config() -> StackConfig:
    """A complete stack configuration."""
    return StackConfig(
        backend_domain="api.example.com",
        git_domain="git.example.com",
        redis_password="s3cret",
    )


@pytest.fixture
def service_dir(tmp_path: Path) -> Path:
    """A build context with a Dockerfile."""
    context = tmp_path / "backend"
    context.mkdir()
    (context / "Dockerfile").write_text("FROM scratch\n")
    return context


# =============================================================================
# Fakes for port resolution
# =============================================================================


@dataclass
class FakeScanner:
    """PortScanner stand-in with a fixed set of busy ports."""

    busy: set[int] = field(default_factory=set)
    checked: list[int] = field(default_factory=list)

    def is_port_available(self, port: int) -> bool:
        self.checked.append(port)
        return port not in self.busy

    def find_available(self, start: int, taken: set[int] | None = None) -> int:
        taken = taken or set()
        port = start
        while port in self.busy or port in taken:
            port += 1
        return port


@dataclass
class FakeStack:
    """StackManager stand-in: {service: port} currently published by us."""

    publishing: dict[str, int] = field(default_factory=dict)

    def is_publishing(self, service: str, port: int) -> bool:
        return self.publishing.get(service) == port


@pytest.fixture
def fake_scanner() -> FakeScanner:
    return FakeScanner()


@pytest.fixture
def fake_stack() -> FakeStack:
    return FakeStack()


@pytest.fixture(autouse=True)
def isolated_config(tmp_path_factory, monkeypatch):
    """Keep tests away from ~/.dcs and any DCS_* / DOCKER_TOKEN in the shell."""
    from dcs_cli.config import ENV_VARS
    from dcs_cli.shared.auth import TOKEN_ENV_VAR

    for env_var in [*ENV_VARS.values(), TOKEN_ENV_VAR, "DCS_LOG_LEVEL", "DCS_LOG_JSON"]:
        monkeypatch.delenv(env_var, raising=False)

    config_path = tmp_path_factory.mktemp("dcs-home") / "config.yaml"
    monkeypatch.setattr("dcs_cli.config.get_config_path", lambda: config_path)
    return config_path


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers bound to streams a CliRunner has since closed."""
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def terminal():
    """Feed keystrokes to real questionary prompts.

    Text sent up front is consumed prompt by prompt; whatever one prompt
    does not read carries over to the next.
    """
    with create_pipe_input() as pipe_input:
        with create_app_session(input=pipe_input, output=DummyOutput()):
            yield pipe_input
