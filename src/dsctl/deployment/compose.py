"""Compose engine adapter.

Runs the compose engine from inside a service's directory, so the engine picks
up that directory's descriptor and uses the directory name as project name.

Operations return the engine's exit code instead of raising, so the batch
executor can report failures per service:

- ``up``      ``<engine> up -d``
- ``down``    ``<engine> down``
- ``reload``  ``down`` then ``up``; ``up`` runs even if ``down`` failed
- ``update``  ``<engine> pull`` then, only if the pull succeeded, ``up -d``

State queries list containers with ``ps --status <status> --format {{.Name}}``
and match names against the service name, either exactly or followed by ``_``
or ``-`` (so ``web`` matches ``web-web-1`` but not ``webapp-web-1``).

Examples:
    >>> adapter = ComposeAdapter.from_settings(settings)
    >>> adapter.up("web")
    0
    >>> adapter.query_state("web")
    <ServiceState.RUNNING: 'running'>
"""

import re
import subprocess
from pathlib import Path

from rich.markup import escape

from dsctl.deployment.errors import EngineUnavailableError
from dsctl.deployment.models import Operation, ServiceState
from dsctl.deployment.runtime_helper import EngineHandle, resolve_engine
from dsctl.deployment.services import is_stack
from dsctl.utils.config import Settings
from dsctl.utils.logger import get_logger

logger = get_logger("engine")

# Exit code reported when a service directory does not exist
MISSING_DIRECTORY_EXIT_CODE = 1

NAME_FORMAT = "{{.Name}}"


def name_pattern(service: str) -> re.Pattern:
    """Container names belonging to ``service``: exact, or followed by ``_``/``-``."""
    return re.compile(rf"^{re.escape(service)}($|[_-])", re.IGNORECASE)


class ComposeAdapter:
    """Issues compose commands for services under ``settings.services_dir``.

    Args:
        settings: Provides the services root and descriptor file name
        engine: Resolved engine, or None when no engine is available
        quiet: Capture engine output and log it instead of letting it reach
            the terminal (the live view needs an undisturbed screen)
    """

    def __init__(self, settings: Settings, engine: EngineHandle | None, quiet: bool = False):
        self.settings = settings
        self.engine = engine
        self.quiet = quiet

    @classmethod
    def from_settings(cls, settings: Settings, quiet: bool = False) -> "ComposeAdapter":
        return cls(settings, resolve_engine(settings.engine), quiet=quiet)

    @property
    def available(self) -> bool:
        return self.engine is not None

    def service_dir(self, service: str) -> Path:
        return self.settings.service_path(service)

    def _require_engine(self) -> EngineHandle:
        if self.engine is None:
            raise EngineUnavailableError()
        return self.engine

    def _invoke(self, service: str, *args: str) -> int:
        engine = self._require_engine()
        cmd = engine.command(*args)
        cwd = self.service_dir(service)
        logger.info(f"{service}: Running: {' '.join(cmd)}")

        if not self.quiet:
            return subprocess.run(cmd, cwd=cwd).returncode

        result = subprocess.run(cmd, cwd=cwd, capture_output=True, text=True)
        if result.stdout.strip():
            logger.debug(f"{service}: {escape(result.stdout.strip())}")
        if result.returncode != 0 and result.stderr.strip():
            logger.warning(f"{service}: {escape(result.stderr.strip())}")
        return result.returncode

    def _check_directory(self, service: str) -> bool:
        if self.service_dir(service).is_dir():
            return True
        logger.error(f"Service '{service}' not found: {self.service_dir(service)}")
        return False

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def up(self, service: str) -> int:
        self._require_engine()
        if not self._check_directory(service):
            return MISSING_DIRECTORY_EXIT_CODE
        return self._invoke(service, "up", "-d")

    def down(self, service: str) -> int:
        self._require_engine()
        if not self._check_directory(service):
            return MISSING_DIRECTORY_EXIT_CODE
        return self._invoke(service, "down")

    def reload(self, service: str) -> int:
        # TODO: add a --strict option that skips up when down fails
        self._require_engine()
        if not self._check_directory(service):
            return MISSING_DIRECTORY_EXIT_CODE

        down_code = self._invoke(service, "down")
        if down_code != 0:
            logger.warning(f"{service}: down exited with {down_code}, starting anyway")
        return self._invoke(service, "up", "-d")

    def update(self, service: str) -> int:
        self._require_engine()
        if not self._check_directory(service):
            return MISSING_DIRECTORY_EXIT_CODE

        pull_code = self._invoke(service, "pull")
        if pull_code != 0:
            logger.warning(f"{service}: pull failed ({pull_code}), not restarting")
            return pull_code
        return self._invoke(service, "up", "-d")

    def run(self, operation: Operation | str, service: str) -> int:
        """Dispatch ``operation`` against ``service``."""
        operation = Operation(operation)
        handlers = {
            Operation.UP: self.up,
            Operation.DOWN: self.down,
            Operation.RELOAD: self.reload,
            Operation.UPDATE: self.update,
        }
        return handlers[operation](service)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _list_names(self, service: str, status: str) -> list[str]:
        cmd = self.engine.command("ps", "--status", status, "--format", NAME_FORMAT)
        try:
            result = subprocess.run(
                cmd, cwd=self.service_dir(service), capture_output=True, text=True
            )
        except OSError as e:
            logger.debug(f"{service}: ps failed: {e}")
            return []

        if result.returncode != 0:
            logger.debug(f"{service}: ps --status {status} exited with {result.returncode}")
            return []
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]

    def query_state(self, service: str) -> ServiceState:
        """Classify ``service`` from a fresh engine query. Never cached.

        Relies on ``ps --status`` and ``ps --format``, which the legacy
        ``docker-compose`` (v1) does not have; with that engine every
        ``ps`` call fails and stacks read as DOWN.
        """
        if self.engine is None:
            return ServiceState.UNAVAILABLE

        if not is_stack(self.service_dir(service), self.settings.compose_file):
            return ServiceState.DOWN

        pattern = name_pattern(service)
        if any(pattern.match(name) for name in self._list_names(service, "running")):
            return ServiceState.RUNNING
        if any(pattern.match(name) for name in self._list_names(service, "exited")):
            return ServiceState.STOPPED
        return ServiceState.DOWN

    def query_states(self, services: list[str]) -> dict[str, ServiceState]:
        return {service: self.query_state(service) for service in services}
