"""Unit tests for console script entry points."""

import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from dcs_cli import __version__
from dcs_cli.main import build_images_main, cli, setup_main


def test_group_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "build-images" in result.output
    assert "setup" in result.output


def test_group_version():
    result = CliRunner().invoke(cli, ["-v"])
    assert result.exit_code == 0
    assert f"dcs v{__version__}" in result.output


@pytest.mark.parametrize("entry_point,prog", [(build_images_main, "dcs-build-images"), (setup_main, "dcs-setup")])
def test_usage_error_exits_one(entry_point, prog):
    with patch.object(sys, "argv", [prog, "--no-such-flag"]):
        with pytest.raises(SystemExit) as exc_info:
            entry_point()
    assert exc_info.value.code == 1


def test_version_exits_cleanly(capsys):
    with patch.object(sys, "argv", ["dcs-setup", "--version"]):
        setup_main()
    assert f"dcs-setup v{__version__}" in capsys.readouterr().out
