"""Image publishing for the `dcs-build-images` command.

1. Resolves services from flags or interactive prompts
2. Ensures a registry repository exists for each
3. Builds and pushes each image in turn
"""

from .builder import ImageBuilder, LineKind, Phase, ServiceBuildSpec, classify_line
from .prompts import ServicePrompter
from .registry import RegistryClient, RepositoryStatus

__all__ = [
    # Build and push
    "ImageBuilder",
    "LineKind",
    "Phase",
    "ServiceBuildSpec",
    "classify_line",
    # Prompts
    "ServicePrompter",
    # Registry
    "RegistryClient",
    "RepositoryStatus",
]
