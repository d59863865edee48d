"""Service folder commands: create, delete, edit and inspect services."""

import click
from rich.markup import escape
from rich.table import Table

from dsctl.deployment.compose import ComposeAdapter
from dsctl.deployment.errors import ConfirmationDeclined, DirectoryMissingError
from dsctl.deployment.services import (
    DEFAULT_IMAGE,
    create_service,
    is_stack,
    remove_service,
)
from dsctl.utils.config import Settings
from dsctl.utils.logger import get_logger

from .service_utils import fail, require_confirmation, require_service_dir
from .styles import Messages, Styles, get_console

logger = get_logger("cli")


@click.command()
@click.argument("name")
@click.option("--image", "-i", default=DEFAULT_IMAGE, show_default=True, help="Container image.")
@click.option("--port", "-p", type=click.IntRange(1, 65535), default=None, help="Published port.")
@click.option("--edit", "-e", "open_editor", is_flag=True, help="Open the compose file afterwards.")
@click.pass_obj
def new(settings: Settings, name: str, image: str, port: int | None, open_editor: bool):
    """Create a new stack NAME with a starter compose file.

    \b
    Examples:
      $ dsctl new blog
      $ dsctl new blog --image ghost:5 --port 2368 --edit
    """
    console = get_console()
    try:
        service_dir = create_service(
            settings.services_dir, name, settings.compose_file, image=image, port=port
        )
    except (ValueError, FileExistsError) as e:
        fail(str(e))

    compose_path = service_dir / settings.compose_file
    console.print(Messages.success(f"Created {escape(name)}"))
    console.print(f"  {Messages.path(escape(str(compose_path)))}")

    if open_editor:
        click.edit(filename=str(compose_path), editor=settings.editor)


@click.command(name="del")
@click.argument("name")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@click.pass_obj
def delete(settings: Settings, name: str, yes: bool):
    """Delete service NAME and everything in its folder.

    A stack is brought down first when a compose engine is available.
    """
    console = get_console()
    try:
        service_dir = require_service_dir(settings, name)
    except DirectoryMissingError as e:
        fail(e)

    if not yes:
        console.print(Messages.warning(f"This permanently deletes {escape(str(service_dir))}"))
    try:
        require_confirmation("Delete", f"Delete service '{name}'?", assume_yes=yes)
    except ConfirmationDeclined as e:
        console.print(Messages.info(escape(e.get_user_message())))
        return

    if is_stack(service_dir, settings.compose_file):
        adapter = ComposeAdapter.from_settings(settings)
        if adapter.available:
            exit_code = adapter.down(name)
            if exit_code != 0:
                logger.warning(f"'down' for {name} exited with {exit_code}; deleting anyway")
        else:
            logger.warning("No compose engine found; containers were not stopped")

    try:
        remove_service(settings.services_dir, name)
    except (ValueError, OSError) as e:
        fail(f"Could not delete {name}: {e}")

    console.print(Messages.success(f"Deleted {escape(name)}"))


def _edit_file(settings: Settings, name: str, filename: str) -> None:
    try:
        service_dir = require_service_dir(settings, name)
    except DirectoryMissingError as e:
        fail(e)
    click.edit(filename=str(service_dir / filename), editor=settings.editor)


@click.command()
@click.argument("name")
@click.pass_obj
def edit(settings: Settings, name: str):
    """Open the compose file of NAME in $EDITOR."""
    _edit_file(settings, name, settings.compose_file)


@click.command()
@click.argument("name")
@click.pass_obj
def env(settings: Settings, name: str):
    """Open the .env file of NAME in $EDITOR (created if missing)."""
    _edit_file(settings, name, ".env")


@click.command()
@click.argument("name")
@click.option("--all", "-a", "show_hidden", is_flag=True, help="Include dot files.")
@click.pass_obj
def ls(settings: Settings, name: str, show_hidden: bool):
    """List the files in the folder of NAME."""
    try:
        service_dir = require_service_dir(settings, name)
    except DirectoryMissingError as e:
        fail(e)

    table = Table(title=str(service_dir), show_header=True, header_style=Styles.BOLD_PRIMARY)
    table.add_column("Name", style=Styles.ACCENT)
    table.add_column("Type")
    table.add_column("Size", justify="right")

    for entry in sorted(service_dir.iterdir(), key=lambda p: p.name):
        if entry.name.startswith(".") and not show_hidden:
            continue
        if entry.is_dir():
            table.add_row(escape(entry.name) + "/", "[dim]dir[/dim]", "")
        else:
            table.add_row(escape(entry.name), "file", str(entry.stat().st_size))

    get_console().print(table)


@click.command()
@click.argument("name", required=False)
@click.pass_obj
def path(settings: Settings, name: str | None):
    """Print the folder of NAME (or the services root).

    Plain output, meant for `cd "$(dsctl path web)"`.
    """
    if name is None:
        click.echo(str(settings.services_dir))
        return
    try:
        service_dir = require_service_dir(settings, name)
    except DirectoryMissingError as e:
        fail(e)
    click.echo(str(service_dir))


__all__ = ["new", "delete", "edit", "env", "ls", "path"]
