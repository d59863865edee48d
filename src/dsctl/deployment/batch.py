"""Bounded batch executor.

Runs one operation against many services concurrently. Each service gets a
*unit*: a thread that drives the compose engine's child processes for that
service. Concurrency is bounded by windows, not by a streaming pool:

    launch units until ``max_jobs`` are in the current window, then wait for
    every unit in that window to finish before launching the next one.

A slow unit therefore holds back the next window even when its siblings
finished early. Failures stay local: a unit that fails or raises is recorded
as a failed :class:`Outcome` and never affects other units. There are no
timeouts, retries or cancellation.

Examples:
    Blocking run::

        >>> executor = BatchExecutor(adapter, max_jobs=4)
        >>> results = executor.run(Operation.UP, ["web", "db"])
        >>> results["web"].succeeded
        True

    Non-blocking launch, as used by the live view::

        >>> batch = executor.launch(Operation.RELOAD, services)
        >>> while not batch.done():
        ...     time.sleep(0.5)
        >>> batch.results()
"""

import threading
import time
from collections.abc import Callable, Iterable

from rich.markup import escape

from dsctl.deployment.models import Operation, Outcome
from dsctl.utils.logger import get_logger

logger = get_logger("batch")

# Exit code recorded for a unit whose operation raised
UNIT_ERROR_EXIT_CODE = 1

Runner = Callable[[Operation, str], int]


class Unit:
    """One concurrently running operation against one service."""

    def __init__(self, service: str, operation: Operation, runner: Runner):
        self.service = service
        self.operation = operation
        self._runner = runner
        self.exit_code: int | None = None
        self._thread = threading.Thread(
            target=self._run, name=f"dsctl-{operation.value}-{service}", daemon=True
        )

    def _run(self) -> None:
        try:
            self.exit_code = self._runner(self.operation, self.service)
        except Exception as e:
            logger.error(f"{self.service}: {self.operation.value} raised: {e}", exc_info=True)
            self.exit_code = UNIT_ERROR_EXIT_CODE

    def start(self) -> None:
        self._thread.start()

    def is_running(self) -> bool:
        return self._thread.is_alive()

    def wait(self) -> int:
        self._thread.join()
        return self.exit_code

    @property
    def outcome(self) -> Outcome | None:
        if self.exit_code is None or self.is_running():
            return None
        return Outcome(self.service, self.operation, self.exit_code)


class Batch:
    """A dispatch of one operation over a list of services.

    Only the dispatcher thread touches the window count. Other threads read
    the started units through :meth:`units`.
    """

    def __init__(
        self, operation: Operation, services: Iterable[str], max_jobs: int, runner: Runner
    ):
        if max_jobs < 1:
            raise ValueError(f"max_jobs must be at least 1, got {max_jobs}")

        self.operation = Operation(operation)
        # Duplicates collapse to their first occurrence
        self.services = list(dict.fromkeys(services))
        self.max_jobs = max_jobs
        self._runner = runner
        self._units: list[Unit] = []
        self._lock = threading.Lock()
        self._dispatcher = threading.Thread(
            target=self._dispatch, name="dsctl-dispatcher", daemon=True
        )
        self.started_at: float | None = None

    def start(self) -> "Batch":
        self.started_at = time.monotonic()
        self._dispatcher.start()
        return self

    def _dispatch(self) -> None:
        window: list[Unit] = []
        for service in self.services:
            unit = Unit(service, self.operation, self._runner)
            unit.start()
            with self._lock:
                self._units.append(unit)
            window.append(unit)

            if len(window) >= self.max_jobs:
                logger.debug(f"Window of {len(window)} full, waiting for it to drain")
                for running in window:
                    running.wait()
                window = []

        for running in window:
            running.wait()

    def units(self) -> list[Unit]:
        """Snapshot of the units launched so far, in launch order."""
        with self._lock:
            return list(self._units)

    def done(self) -> bool:
        """True once every service has been launched and every unit finished."""
        if self._dispatcher.is_alive():
            return False
        return not any(unit.is_running() for unit in self.units())

    def wait(self) -> dict[str, Outcome]:
        self._dispatcher.join()
        for unit in self.units():
            unit.wait()
        if self.started_at is not None:
            elapsed = time.monotonic() - self.started_at
            logger.timing(
                f"{self.operation.value} on {len(self.services)} service(s) took {elapsed:.1f}s"
            )
        return self.results()

    def results(self) -> dict[str, Outcome]:
        """Outcome per service. Only complete once :meth:`done` is True."""
        outcomes = {}
        for unit in self.units():
            outcome = unit.outcome
            if outcome is not None:
                outcomes[unit.service] = outcome
        return outcomes


class BatchExecutor:
    """Runs operations through an adapter under a job-count gate.

    Args:
        adapter: Anything with ``run(operation, service) -> int``
        max_jobs: Window size (the configured ``MAX_DS_JOBS``)
    """

    def __init__(self, adapter, max_jobs: int = 4):
        if max_jobs < 1:
            raise ValueError(f"max_jobs must be at least 1, got {max_jobs}")
        self.adapter = adapter
        self.max_jobs = max_jobs

    def launch(
        self, operation: Operation | str, services: Iterable[str], max_jobs: int | None = None
    ) -> Batch:
        """Start dispatching and return immediately."""
        jobs = self.max_jobs if max_jobs is None else max_jobs
        batch = Batch(Operation(operation), services, jobs, self.adapter.run)
        logger.key_info(
            f"{batch.operation.value}: {len(batch.services)} service(s), "
            f"up to {batch.max_jobs} at a time"
        )
        return batch.start()

    def run(
        self, operation: Operation | str, services: Iterable[str], max_jobs: int | None = None
    ) -> dict[str, Outcome]:
        """Run the batch to completion and return one outcome per distinct service."""
        return self.launch(operation, services, max_jobs).wait()


def format_report(results: dict[str, Outcome]) -> list[str]:
    """Rich-markup report lines, one per service, sorted by service name."""
    lines = []
    for service in sorted(results):
        outcome = results[service]
        name = escape(service)
        if outcome.succeeded:
            lines.append(f"[[success]{name}[/success]] ✅ success")
        else:
            lines.append(f"[[error]{name}[/error]] ❌ failed (exit {outcome.exit_code})")
    return lines
