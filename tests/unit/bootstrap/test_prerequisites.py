"""Unit tests for prerequisite detection."""

import socket
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from dcs_cli.bootstrap.prerequisites import MAX_PORT, DockerDetector, PortScanner
from dcs_cli.errors import PortResolutionError


def completed(returncode=0, stdout="", stderr=""):
    return MagicMock(returncode=returncode, stdout=stdout, stderr=stderr)


class TestDockerDetector:
    """Tests for DockerDetector."""

    def test_docker_not_installed(self):
        with patch("shutil.which", return_value=None):
            info = DockerDetector().detect()

        assert info.docker_available is False
        assert "not installed" in info.error

    def test_docker_not_running(self):
        with patch("shutil.which", return_value="/usr/bin/docker"), patch("subprocess.run") as mock_run:
            mock_run.return_value = completed(1, stderr="Cannot connect to the Docker daemon")
            info = DockerDetector().detect()

        assert info.docker_available is False
        assert "Cannot connect" in info.error

    def test_docker_timeout(self):
        with patch("shutil.which", return_value="/usr/bin/docker"), patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired("docker", 10)
        ):
            info = DockerDetector().detect()

        assert info.docker_available is False
        assert "timeout" in info.error

    def test_everything_available(self):
        with patch("shutil.which", return_value="/usr/bin/docker"), patch("subprocess.run") as mock_run:
            mock_run.side_effect = [
                completed(stdout="24.0.7\n"),
                completed(stdout="2.23.0\n"),
                completed(stdout="github.com/docker/buildx v0.12.1\n"),
            ]
            info = DockerDetector().detect()

        assert info.docker_available is True
        assert info.docker_version == "24.0.7"
        assert info.compose_available is True
        assert info.compose_version == "2.23.0"
        assert info.buildx_available is True

    def test_buildx_missing(self):
        with patch("shutil.which", return_value="/usr/bin/docker"), patch("subprocess.run") as mock_run:
            mock_run.side_effect = [
                completed(stdout="24.0.7\n"),
                completed(stdout="2.23.0\n"),
                completed(1, stderr="'buildx' is not a docker command"),
            ]
            info = DockerDetector().detect()

        assert info.compose_available is True
        assert info.buildx_available is False


class TestPortScanner:
    """Tests for PortScanner."""

    def test_free_port(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
            sock.bind(("0.0.0.0", 0))
            port = sock.getsockname()[1]

        assert PortScanner().is_port_available(port) is True

    def test_bound_port(self):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
            holder.bind(("0.0.0.0", 0))
            holder.listen(1)
            port = holder.getsockname()[1]

            assert PortScanner().is_port_available(port) is False

    def test_find_available_first_fit(self):
        scanner = PortScanner()
        with patch.object(scanner, "is_port_available", side_effect=lambda p: p not in (3000, 3001)):
            assert scanner.find_available(3000) == 3002

    def test_find_available_skips_taken(self):
        scanner = PortScanner()
        with patch.object(scanner, "is_port_available", return_value=True):
            assert scanner.find_available(8080, taken={8080, 8081}) == 8082

    def test_find_available_exhausted(self):
        scanner = PortScanner()
        with patch.object(scanner, "is_port_available", return_value=False) as mock_available:
            with pytest.raises(PortResolutionError):
                scanner.find_available(MAX_PORT - 2)

        assert [c.args[0] for c in mock_available.call_args_list] == [MAX_PORT - 2, MAX_PORT - 1, MAX_PORT]
