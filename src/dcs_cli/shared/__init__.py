"""Shared modules for dcs-cli.

Used by both the image publisher and the stack bootstrapper:
- Paths (compose file, config file)
- Auth (registry token resolution)
- Logging (structlog setup)
"""

from .auth import auth_headers, export_suggestions, get_token, prompt_token
from .logging import configure_logging, get_logger
from .paths import COMPOSE_FILE, CONFIG_FILE, DCS_DIR, LOGS_DIR, compose_data_dirs

__all__ = [
    # Paths
    "DCS_DIR",
    "CONFIG_FILE",
    "COMPOSE_FILE",
    "LOGS_DIR",
    "compose_data_dirs",
    # Auth
    "get_token",
    "prompt_token",
    "export_suggestions",
    "auth_headers",
    # Logging
    "configure_logging",
    "get_logger",
]
