"""Unit tests for interactive service collection."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from dcs_cli.publish.builder import ServiceBuildSpec
from dcs_cli.publish.prompts import ServicePrompter, validate_context_path, validate_service_name


def answer(value):
    return MagicMock(ask=MagicMock(return_value=value))


class TestValidators:
    """Tests for prompt validators."""

    def test_service_name(self):
        assert validate_service_name("backend", []) is True
        assert validate_service_name("  ", []) == "Service name cannot be empty"
        assert validate_service_name("backend", ["backend"]) == "Service name already exists"

    def test_context_path_ok(self, service_dir):
        assert validate_context_path(str(service_dir)) is True

    def test_context_path_errors(self, tmp_path):
        assert validate_context_path("") == "Path cannot be empty"
        assert validate_context_path(str(tmp_path / "nope")) == "Directory does not exist"
        assert validate_context_path(str(tmp_path)) == "Dockerfile not found in directory"


class TestServicePrompter:
    """Tests for ServicePrompter."""

    def test_collect_single_service(self, service_dir):
        with patch("questionary.text", side_effect=[answer("backend "), answer(str(service_dir))]), patch(
            "questionary.confirm", return_value=answer(False)
        ):
            specs = ServicePrompter().collect()

        assert specs == [ServiceBuildSpec("backend", service_dir)]

    def test_collect_cancelled(self):
        with patch("questionary.text", return_value=answer(None)):
            with pytest.raises(KeyboardInterrupt):
                ServicePrompter().collect()

    def test_select_keeps_checked_services(self):
        specs = [ServiceBuildSpec("backend", Path("/a")), ServiceBuildSpec("git-server", Path("/b"))]
        with patch("questionary.checkbox", return_value=answer(["git-server"])):
            assert ServicePrompter().select(specs) == [specs[1]]

    def test_select_nothing_to_choose(self):
        with patch("questionary.checkbox") as mock_checkbox:
            assert ServicePrompter().select([]) == []
        mock_checkbox.assert_not_called()
