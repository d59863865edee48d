"""Compose engine detection.

Probes the known compose invocations in priority order and binds the first
one that answers ``version``:

1. ``docker compose`` (compose v2 plugin)
2. ``docker-compose`` (legacy standalone binary)

An override (config ``engine`` or ``COMPOSE_ENGINE``, e.g. ``podman compose``)
replaces the candidate list. The result, including "nothing found", is cached
for the rest of the process and never rewritten, so worker threads can read it
without locking.

Examples:
    Basic usage::

        from dsctl.deployment.runtime_helper import require_engine

        engine = require_engine()
        engine.command("up", "-d")
        # ['docker', 'compose', 'up', '-d']
"""

import shlex
import subprocess
import threading
from dataclasses import dataclass

from dsctl.deployment.errors import EngineUnavailableError
from dsctl.utils.logger import get_logger

logger = get_logger("engine")

ENGINE_CANDIDATES: tuple[tuple[str, ...], ...] = (
    ("docker", "compose"),
    ("docker-compose",),
)

PROBE_TIMEOUT = 5

_UNRESOLVED = object()

# Module-level cache: _UNRESOLVED, None (unavailable) or an EngineHandle
_cached_engine: object = _UNRESOLVED
_tried: list[str] = []
_lock = threading.Lock()


@dataclass(frozen=True)
class EngineHandle:
    """A compose invocation that answered the version probe."""

    base: tuple[str, ...]

    def command(self, *args: str) -> list[str]:
        return [*self.base, *args]

    def __str__(self) -> str:
        return " ".join(self.base)


def _candidates(override: str | None) -> list[tuple[str, ...]]:
    if override:
        parts = tuple(shlex.split(override))
        if parts:
            return [parts]
    return list(ENGINE_CANDIDATES)


def probe(base: tuple[str, ...]) -> bool:
    """Run ``<base> version`` with output discarded; True on exit code 0."""
    try:
        result = subprocess.run(
            [*base, "version"],
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            timeout=PROBE_TIMEOUT,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError):
        return False
    return result.returncode == 0


def resolve_engine(override: str | None = None) -> EngineHandle | None:
    """Resolve the compose engine once per process.

    Args:
        override: Explicit command line (e.g. ``"podman compose"``) probed alone

    Returns:
        The bound EngineHandle, or None when no candidate responded
    """
    global _cached_engine, _tried

    with _lock:
        if _cached_engine is not _UNRESOLVED:
            return _cached_engine

        tried = []
        for base in _candidates(override):
            tried.append(" ".join(base))
            if probe(base):
                handle = EngineHandle(base)
                logger.debug(f"Using compose engine '{handle}'")
                _cached_engine, _tried = handle, tried
                return handle

        logger.debug(f"No compose engine found (tried {', '.join(tried)})")
        _cached_engine, _tried = None, tried
        return None


def require_engine(override: str | None = None) -> EngineHandle:
    """Like :func:`resolve_engine` but raises when unavailable.

    Raises:
        EngineUnavailableError: If no candidate responded to the probe
    """
    engine = resolve_engine(override)
    if engine is None:
        raise EngineUnavailableError(_tried)
    return engine


def reset_engine_cache() -> None:
    """Forget the resolved engine (tests only)."""
    global _cached_engine, _tried
    with _lock:
        _cached_engine = _UNRESOLVED
        _tried = []
