"""Exception hierarchy for stack management.

Only :class:`EngineUnavailableError` is fatal for a whole command. Failures of
individual services during a batch are never raised: they are reported as
failed outcomes carrying the engine's exit code.

Examples:
    >>> try:
    ...     engine = require_engine()
    ... except EngineUnavailableError as e:
    ...     console.print(e.get_user_message())
"""

from pathlib import Path


class DsctlError(Exception):
    """Base class for dsctl errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def get_user_message(self) -> str:
        return self.message


class EngineUnavailableError(DsctlError):
    """No compose engine responded to a version probe."""

    def __init__(self, tried: list[str] | None = None):
        self.tried = list(tried or [])
        tried_text = ", ".join(f"'{cmd}'" for cmd in self.tried) or "none"
        super().__init__(f"No compose engine available (tried: {tried_text})")

    def get_user_message(self) -> str:
        return (
            f"{self.message}\n"
            "Install Docker with the compose plugin (https://docs.docker.com/compose/install/)\n"
            "or point COMPOSE_ENGINE at a working command, e.g. COMPOSE_ENGINE='podman compose'"
        )


class DirectoryMissingError(DsctlError):
    """A service's working directory does not exist."""

    def __init__(self, service: str, path: Path):
        self.service = service
        self.path = Path(path)
        super().__init__(f"Service '{service}' not found: {self.path} does not exist")


class ConfirmationDeclined(DsctlError):
    """A destructive action was not confirmed. Callers treat this as a no-op."""

    def __init__(self, action: str):
        self.action = action
        super().__init__(f"{action} cancelled")
