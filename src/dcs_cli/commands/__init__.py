"""Click commands exposed by dcs-cli."""

from .publish import build_images
from .setup import setup

__all__ = ["build_images", "setup"]
