"""DCS CLI - Build, publish and bootstrap the DotCodeSchool service stack."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dcs-cli")
except PackageNotFoundError:
    __version__ = "1.0.0"  # Fallback for editable installs without metadata

from .main import main

__all__ = ["main", "__version__"]
