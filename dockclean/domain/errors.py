class DockCleanError(Exception):
    """Base class for every error raised by dockclean."""


class RuntimeConnectionError(DockCleanError):
    """The container runtime cannot be reached or its API version negotiated."""


class RuntimeOperationError(DockCleanError):
    """A single list/remove call against the runtime failed."""

    def __init__(self, message: str, resource_id: str | None = None):
        super().__init__(message)
        self.resource_id = resource_id


class UsageError(DockCleanError):
    """Invalid combination of options, reported before any runtime call."""
