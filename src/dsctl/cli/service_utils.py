"""Helpers shared by the CLI commands: target selection, adapter setup,
confirmation prompts and consistent failure output."""

import os
import sys
from pathlib import Path
from typing import NoReturn

import questionary

from dsctl.deployment.compose import ComposeAdapter
from dsctl.deployment.errors import ConfirmationDeclined, DirectoryMissingError, DsctlError
from dsctl.deployment.runtime_helper import require_engine
from dsctl.deployment.services import list_stacks
from dsctl.utils.config import Settings

from .styles import Messages, Styles, get_console, get_questionary_style

ALL_TARGETS = ("all", "a")


def resolve_targets(settings: Settings, targets: tuple[str, ...] | list[str]) -> list[str]:
    """Expand ``all``/``a`` to every stack; otherwise keep the given order."""
    if any(target in ALL_TARGETS for target in targets):
        return list_stacks(settings.services_dir, settings.compose_file)
    return list(dict.fromkeys(targets))


def build_adapter(settings: Settings, quiet: bool = False) -> ComposeAdapter:
    """Adapter bound to a resolved engine.

    Raises:
        EngineUnavailableError: If no compose engine responds
    """
    return ComposeAdapter(settings, require_engine(settings.engine), quiet=quiet)


def require_service_dir(settings: Settings, name: str) -> Path:
    path = settings.service_path(name)
    if not path.is_dir():
        raise DirectoryMissingError(name, path)
    return path


def confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question. Ctrl-C or ESC counts as no."""
    answer = questionary.confirm(message, default=default, style=get_questionary_style()).ask()
    return bool(answer)


def require_confirmation(action: str, message: str, assume_yes: bool = False) -> None:
    """Ask before a destructive action.

    Raises:
        ConfirmationDeclined: If the user answers no
    """
    if assume_yes:
        return
    if not confirm(message, default=False):
        raise ConfirmationDeclined(action)


def fail(error: DsctlError | str, exit_code: int = 1) -> NoReturn:
    """Print an error the way every command does and exit."""
    text = error.get_user_message() if isinstance(error, DsctlError) else str(error)
    console = get_console()
    console.print(f"\n{Messages.error(text)}\n")

    if os.environ.get("DEBUG") and isinstance(error, BaseException):
        import traceback

        console.print(
            "".join(traceback.format_exception(type(error), error, error.__traceback__)),
            style=Styles.DIM,
            markup=False,
        )
    sys.exit(exit_code)
