"""Remove service folders that are not stacks."""

import click
from rich.markup import escape

from dsctl.deployment.errors import ConfirmationDeclined
from dsctl.deployment.services import clean_non_stacks, list_non_stacks
from dsctl.utils.config import Settings

from .service_utils import fail, require_confirmation
from .styles import Messages, get_console


def _print_orphans(console, names: list[str]) -> None:
    for name in names:
        console.print(f"  • {escape(name)}")


@click.command()
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def clean(settings: Settings, yes: bool):
    """Delete every service folder without a compose file.

    Use 'dsctl dry-clean' to preview what would be removed.
    """
    console = get_console()
    orphans = list_non_stacks(settings.services_dir, settings.compose_file)
    if not orphans:
        console.print(Messages.info("Nothing to clean"))
        return

    console.print(Messages.warning(f"{len(orphans)} folder(s) without {settings.compose_file}:"))
    _print_orphans(console, orphans)
    try:
        require_confirmation("Clean", "Delete these folders?", assume_yes=yes)
    except ConfirmationDeclined as e:
        console.print(Messages.info(e.get_user_message()))
        return

    try:
        removed = clean_non_stacks(settings.services_dir, settings.compose_file)
    except OSError as e:
        fail(f"Clean failed: {e}")

    console.print(Messages.success(f"Removed {len(removed)} folder(s)"))


@click.command(name="dry-clean")
@click.pass_obj
def dry_clean(settings: Settings):
    """Show which folders 'dsctl clean' would delete."""
    console = get_console()
    orphans = clean_non_stacks(settings.services_dir, settings.compose_file, dry_run=True)
    if not orphans:
        console.print(Messages.info("Nothing to clean"))
        return

    console.print(f"Would remove {len(orphans)} folder(s):")
    _print_orphans(console, orphans)
