"""Path management for dcs-cli.

The compose file and its data directories live in the directory the
bootstrapper is run from; only the optional CLI config lives under ~/.dcs/.
"""

from pathlib import Path

# Base directory for CLI configuration
DCS_DIR = Path.home() / ".dcs"

# Optional layered configuration file
CONFIG_FILE = DCS_DIR / "config.yaml"

# Generated compose document (relative to the working directory)
COMPOSE_FILE = Path("test-compose.yml")

# Host directory the services log into
LOGS_DIR = Path("logs")


def compose_data_dirs(base_dir: Path | None = None) -> list[Path]:
    """Directories mounted as volumes by the generated compose file.

    Args:
        base_dir: Directory holding the compose file (default: cwd)

    Returns:
        List of host paths for git, redis and mongodb data
    """
    base = base_dir or Path(".")
    return [base / "git-data", base / "redis-data", base / "mongodb-data"]
