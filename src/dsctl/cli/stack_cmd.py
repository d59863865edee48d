"""Stack lifecycle and status commands.

``up``, ``down``, ``reload`` and ``update`` run one operation over one or more
services concurrently (``all`` selects every stack) and print one result line
per service. ``list`` and ``status`` show the state reported by the engine.
"""

import sys

import click
from rich.markup import escape
from rich.table import Table

from dsctl.deployment.batch import BatchExecutor, format_report
from dsctl.deployment.compose import ComposeAdapter
from dsctl.deployment.errors import EngineUnavailableError
from dsctl.deployment.live import run_live, state_markup
from dsctl.deployment.models import Operation
from dsctl.deployment.services import is_stack, list_services
from dsctl.utils.config import Settings

from .service_utils import build_adapter, fail, resolve_targets
from .styles import Messages, Styles, get_console

OPERATION_HELP = {
    Operation.UP: "Start services in the background.",
    Operation.DOWN: "Stop and remove services' containers.",
    Operation.RELOAD: "Stop, then start services again.",
    Operation.UPDATE: "Pull images, then restart services that pulled successfully.",
}


def run_operation(settings: Settings, operation: Operation, targets, live: bool, jobs: int | None):
    """Shared body of the lifecycle commands. Exits 1 if any service failed."""
    console = get_console()
    services = resolve_targets(settings, targets)
    if not services:
        console.print(Messages.warning(f"No stacks found in {settings.services_dir}"))
        return

    max_jobs = jobs or settings.max_jobs
    try:
        adapter = build_adapter(settings, quiet=live)
    except EngineUnavailableError as e:
        fail(e)

    if live:
        results = run_live(adapter, operation, services, max_jobs, console=console)
    else:
        results = BatchExecutor(adapter, max_jobs).run(operation, services)

    console.print()
    for line in format_report(results):
        console.print(line)

    failed = [name for name, outcome in results.items() if not outcome.succeeded]
    if failed:
        sys.exit(1)


def _lifecycle_command(operation: Operation):
    help_text = f"""{OPERATION_HELP[operation]}

    TARGETS are service names, or 'all' (or 'a') for every stack.

    \b
    Examples:
      $ dsctl {operation.value} web db
      $ dsctl {operation.value} all --live -j 8
    """

    @click.command(name=operation.value, help=help_text)
    @click.argument("targets", nargs=-1, required=True)
    @click.option("--live", "-l", is_flag=True, help="Show a live before/after state table.")
    @click.option(
        "--jobs",
        "-j",
        type=click.IntRange(min=1),
        default=None,
        help="Maximum services handled at once (default: MAX_DS_JOBS or 4).",
    )
    @click.pass_obj
    def command(settings: Settings, targets: tuple[str, ...], live: bool, jobs: int | None):
        run_operation(settings, operation, targets, live, jobs)

    return command


up = _lifecycle_command(Operation.UP)
down = _lifecycle_command(Operation.DOWN)
reload = _lifecycle_command(Operation.RELOAD)
update = _lifecycle_command(Operation.UPDATE)


def _state_table(title: str) -> Table:
    table = Table(title=title, show_header=True, header_style=Styles.BOLD_PRIMARY)
    table.add_column("Service", style=Styles.ACCENT, no_wrap=True)
    table.add_column("Stack")
    table.add_column("State")
    return table


@click.command(name="list")
@click.pass_obj
def list_cmd(settings: Settings):
    """List every service folder with its state.

    Folders without a compose file are shown as non-stacks.
    """
    console = get_console()
    root = settings.services_dir
    if not root.is_dir():
        console.print(Messages.warning(f"Services directory not found: {root}"))
        return

    adapter = ComposeAdapter.from_settings(settings)
    if not adapter.available:
        console.print(Messages.warning("No compose engine found; states shown as 'missing'"))

    table = _state_table(str(root))
    for name in list_services(root):
        stack = is_stack(root / name, settings.compose_file)
        table.add_row(
            escape(name),
            "[success]yes[/success]" if stack else "[dim]no[/dim]",
            state_markup(adapter.query_state(name)),
        )
    console.print(table)


@click.command()
@click.argument("targets", nargs=-1)
@click.pass_obj
def status(settings: Settings, targets: tuple[str, ...]):
    """Show the state of selected services (default: all stacks)."""
    console = get_console()
    services = resolve_targets(settings, targets or ("all",))
    if not services:
        console.print(Messages.warning(f"No stacks found in {settings.services_dir}"))
        return

    adapter = ComposeAdapter.from_settings(settings)
    table = _state_table("Service Status")
    for name in services:
        stack = is_stack(settings.service_path(name), settings.compose_file)
        table.add_row(
            escape(name),
            "[success]yes[/success]" if stack else "[dim]no[/dim]",
            state_markup(adapter.query_state(name)),
        )
    console.print(table)
