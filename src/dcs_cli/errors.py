"""Error types shared by the publisher and the bootstrapper.

Every fatal condition is raised as a DcsError subclass and turned into a
red status line plus exit code 1 by the command layer.
"""


class DcsError(Exception):
    """Base class for errors that abort a dcs command."""

    def __init__(self, message: str, hint: str | None = None):
        self.message = message
        self.hint = hint
        super().__init__(message)


class PrerequisiteError(DcsError):
    """A required local tool (docker, compose, buildx) is missing."""


class RegistryError(DcsError):
    """The registry API returned something other than the expected status."""

    def __init__(self, message: str, status_code: int | None = None, hint: str | None = None):
        self.status_code = status_code
        super().__init__(message, hint)


class BuildError(DcsError):
    """An image could not be built or pushed."""


class PortResolutionError(DcsError):
    """No usable port could be assigned to a service."""


class StackError(DcsError):
    """A docker compose operation failed."""
