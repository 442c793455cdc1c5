"""Bootstrap package for bringing up the local DCS stack.

This package provides the `dcs-setup` command which:
1. Detects Docker/Compose/Buildx prerequisites
2. Resolves a free host port for each published service
3. Generates test-compose.yml
4. Builds and pushes multi-architecture images
5. Starts the stack and verifies each service's health
"""

from .compose import ComposeConfig, ComposeGenerator, VolumeManager
from .health import HealthCheckResult, HealthPoller, ServiceCheck, ServiceProber, VerificationReport
from .images import MultiArchBuilder
from .ports import DEFAULT_PORTS, PortAction, PortAssignment, PortPrompt, PortResolver
from .prerequisites import DockerDetector, DockerInfo, PortScanner
from .prompts import StackPrompter
from .stack import StackManager

__all__ = [
    # Prerequisites
    "DockerDetector",
    "DockerInfo",
    "PortScanner",
    # Port resolution
    "DEFAULT_PORTS",
    "PortAction",
    "PortAssignment",
    "PortPrompt",
    "PortResolver",
    # Prompts
    "StackPrompter",
    # Compose generation
    "ComposeConfig",
    "ComposeGenerator",
    "VolumeManager",
    # Images
    "MultiArchBuilder",
    # Health verification
    "HealthCheckResult",
    "HealthPoller",
    "ServiceCheck",
    "ServiceProber",
    "VerificationReport",
    # Stack management
    "StackManager",
]
