"""Live status view for a running batch.

Shows a Service / Before / After / Result table that is redrawn while the
batch runs. "Before" is captured once, before any unit starts. Whenever at
least one unit has finished since the last check, "After" is re-queried for
every target service. The view exits only once the batch has fully drained,
and renders one last table with fresh states.

States read right after a unit finishes can still be transitional; the
engine settles on its own schedule and nothing here waits for it.
"""

import logging
import time

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.table import Table

from dsctl.deployment.batch import Batch, BatchExecutor
from dsctl.deployment.models import Operation, Outcome, ServiceState
from dsctl.utils.log_filter import quiet_logger
from dsctl.utils.logger import get_logger

logger = get_logger("live")

DEFAULT_REFRESH_INTERVAL = 0.5

STATE_STYLES = {
    ServiceState.RUNNING: "success",
    ServiceState.STOPPED: "error",
    ServiceState.DOWN: "warning",
    ServiceState.UNAVAILABLE: "warning",
}


def state_markup(state: ServiceState | None) -> str:
    """Rich markup for a state, e.g. ``[success]● running[/success]``."""
    if state is None:
        return "[dim]…[/dim]"
    style = STATE_STYLES[state]
    return f"[{style}]● {state.label}[/{style}]"


def _result_markup(service: str, batch: Batch, results: dict[str, Outcome]) -> str:
    outcome = results.get(service)
    if outcome is not None:
        if outcome.succeeded:
            return "[success]✅ success[/success]"
        return f"[error]❌ failed (exit {outcome.exit_code})[/error]"
    if any(unit.service == service for unit in batch.units()):
        return "[info]⏳ running[/info]"
    return "[dim]queued[/dim]"


def build_table(
    operation: Operation,
    services: list[str],
    before: dict[str, ServiceState],
    after: dict[str, ServiceState],
    batch: Batch,
) -> Table:
    """Full table for every target service."""
    results = batch.results()
    table = Table(
        title=f"{operation.value} ({len(results)}/{len(services)} done)",
        show_header=True,
        header_style="bold_primary",
    )
    table.add_column("Service", style="accent", no_wrap=True)
    table.add_column("Before")
    table.add_column("After")
    table.add_column("Result")

    for service in services:
        table.add_row(
            escape(service),
            state_markup(before.get(service)),
            state_markup(after.get(service)),
            _result_markup(service, batch, results),
        )
    return table


def run_live(
    adapter,
    operation: Operation | str,
    services: list[str],
    max_jobs: int,
    console: Console | None = None,
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
) -> dict[str, Outcome]:
    """Run a batch while redrawing the before/after state table.

    Args:
        adapter: Provides ``run`` for the units and ``query_state`` for the table
        operation: Operation for every service
        services: Target services (duplicates collapse)
        max_jobs: Window size for the underlying executor
        console: Console to draw on (defaults to the CLI console)
        refresh_interval: Seconds between checks

    Returns:
        One outcome per distinct service
    """
    if console is None:
        from dsctl.cli.styles import get_console

        console = get_console()

    operation = Operation(operation)
    services = list(dict.fromkeys(services))
    executor = BatchExecutor(adapter, max_jobs)

    before = adapter.query_states(services)
    after = dict(before)

    # Only errors reach the log while the table is drawn; failures show under Result
    with quiet_logger(["dsctl.engine", "dsctl.batch"], logging.ERROR):
        batch = executor.launch(operation, services)
        finished: set[str] = set()

        with Live(
            build_table(operation, services, before, after, batch),
            console=console,
            auto_refresh=False,
        ) as live:
            while not batch.done():
                newly_finished = {
                    unit.service for unit in batch.units() if not unit.is_running()
                } - finished
                if newly_finished:
                    finished |= newly_finished
                    after = adapter.query_states(services)
                live.update(build_table(operation, services, before, after, batch), refresh=True)
                time.sleep(refresh_interval)

            results = batch.wait()
            after = adapter.query_states(services)
            live.update(build_table(operation, services, before, after, batch), refresh=True)

    logger.debug(f"Live view finished: {len(results)} outcome(s)")
    return results
