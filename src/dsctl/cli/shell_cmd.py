"""Shell integration commands: command alias and completion setup."""

import re

import click
from rich.markup import escape

from dsctl.utils.config import Settings, save_user_config_value

from . import shell as shell_setup
from .service_utils import fail
from .styles import Messages, get_console

ALIAS_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_-]*$")


@click.command()
@click.argument("name", required=False)
@click.option("--unset", is_flag=True, help="Remove the configured alias.")
@click.pass_obj
def alias(settings: Settings, name: str | None, unset: bool):
    """Show or set a short alias for dsctl (e.g. 'ds').

    The alias is stored in the user config; run 'dsctl install' afterwards
    to add it to your shell.
    """
    console = get_console()

    if unset:
        save_user_config_value("alias", None, settings.config_path)
        console.print(Messages.success("Alias removed"))
        return

    if name is None:
        if settings.alias:
            click.echo(settings.alias)
        else:
            console.print(Messages.info("No alias configured"))
        return

    if not ALIAS_PATTERN.match(name):
        fail(f"Invalid alias '{name}': use letters, digits, '-' or '_'")

    config_path = save_user_config_value("alias", name, settings.config_path)
    console.print(Messages.success(f"Alias set to '{escape(name)}' in {escape(str(config_path))}"))
    console.print(f"Run {Messages.command('dsctl install')} to enable it in your shell")


@click.command()
@click.option(
    "--shell",
    "shell_name",
    type=click.Choice(shell_setup.SUPPORTED_SHELLS),
    default=None,
    help="Shell to configure (default: detected from $SHELL).",
)
@click.pass_obj
def install(settings: Settings, shell_name: str | None):
    """Add completion (and the configured alias) to your shell rc file."""
    console = get_console()
    shell_name = shell_name or shell_setup.detect_shell()

    rc_path = shell_setup.rc_file_for(shell_name)
    lines = shell_setup.install_lines(shell_name, settings.alias)
    try:
        added = shell_setup.install(rc_path, lines)
    except OSError as e:
        fail(f"Could not update {rc_path}: {e}")

    if not added:
        console.print(Messages.info(f"Already installed in {escape(str(rc_path))}"))
        return

    console.print(Messages.success(f"Updated {escape(str(rc_path))}:"))
    for line in added:
        console.print(f"  {escape(line)}", style="dim")
    console.print(f"Restart your shell or run {Messages.command(f'source {rc_path}')}")
