"""Main CLI entry point for dsctl.

This module provides the main CLI group that organizes all dsctl
commands under the `dsctl` command namespace.

Performance Note: Uses lazy imports so that command modules (and the rich,
questionary and jinja2 machinery behind them) are loaded only when a command
is actually invoked. This keeps `dsctl --help` and shell completion fast.
"""

import logging
import sys

import click
import yaml

from dsctl import __version__

# Command name -> (module, attribute)
COMMANDS = {
    "list": ("dsctl.cli.stack_cmd", "list_cmd"),
    "status": ("dsctl.cli.stack_cmd", "status"),
    "up": ("dsctl.cli.stack_cmd", "up"),
    "down": ("dsctl.cli.stack_cmd", "down"),
    "reload": ("dsctl.cli.stack_cmd", "reload"),
    "update": ("dsctl.cli.stack_cmd", "update"),
    "new": ("dsctl.cli.service_cmd", "new"),
    "del": ("dsctl.cli.service_cmd", "delete"),
    "edit": ("dsctl.cli.service_cmd", "edit"),
    "env": ("dsctl.cli.service_cmd", "env"),
    "ls": ("dsctl.cli.service_cmd", "ls"),
    "path": ("dsctl.cli.service_cmd", "path"),
    "clean": ("dsctl.cli.clean_cmd", "clean"),
    "dry-clean": ("dsctl.cli.clean_cmd", "dry_clean"),
    "alias": ("dsctl.cli.shell_cmd", "alias"),
    "install": ("dsctl.cli.shell_cmd", "install"),
}


class LazyGroup(click.Group):
    """Click group that lazily loads subcommands only when invoked."""

    def get_command(self, ctx, cmd_name):
        """Lazily import and return the command when it's invoked."""
        if cmd_name not in COMMANDS:
            return None

        import importlib

        module_name, attr = COMMANDS[cmd_name]
        mod = importlib.import_module(module_name)
        return getattr(mod, attr)

    def list_commands(self, ctx):
        """Return list of available commands (for --help)."""
        return list(COMMANDS)


def _log_level(verbose: int, quiet: bool = False) -> int | None:
    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


@click.group(cls=LazyGroup, invoke_without_command=True)
@click.version_option(version=__version__, prog_name="dsctl")
@click.option(
    "--services-dir",
    "-d",
    type=click.Path(file_okay=False),
    default=None,
    help="Root folder holding one folder per service (default: $SERVICES_DIR or ~/services).",
)
@click.option(
    "--compose-file",
    "-f",
    default=None,
    help="Descriptor file name that marks a stack (default: compose.yml).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="User config file (default: $DSCTL_CONFIG or ~/.config/dsctl/config.yml).",
)
@click.option("--verbose", "-v", count=True, help="Show engine activity (-vv for debug output).")
@click.option("--quiet", "-q", is_flag=True, help="Only show errors.")
@click.pass_context
def cli(ctx, services_dir, compose_file, config_path, verbose, quiet):
    """dsctl - manage a folder of docker compose stacks.

    Every folder under the services root is a service; folders holding a
    compose file are stacks that can be started, stopped, reloaded and
    updated, many at a time.

    Use 'dsctl COMMAND --help' for more information on a specific command.

    Examples:

    \b
      dsctl list                      Show every service and its state
      dsctl up web db                 Start two stacks
      dsctl update all --live         Pull and restart every stack, live
      dsctl new blog --port 8080      Create a new stack
      dsctl del blog                  Delete a service folder
      dsctl dry-clean                 Show folders without a compose file
      dsctl install                   Add completion to your shell
    """
    from dsctl.utils.config import load_settings, set_settings

    from .service_utils import fail
    from .styles import initialize_theme_from_config

    try:
        settings = load_settings(config_path).with_overrides(
            services_dir=services_dir, compose_file=compose_file
        )
    except (ValueError, yaml.YAMLError) as e:
        fail(f"Invalid configuration: {e}")

    set_settings(settings)
    initialize_theme_from_config()

    from dsctl.utils.logger import reconfigure_logging, set_log_level

    level = _log_level(verbose, quiet)
    if level is None:
        reconfigure_logging()
    else:
        set_log_level(level)

    ctx.obj = settings

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def main():
    """Entry point for the dsctl CLI."""
    try:
        cli()
    except KeyboardInterrupt:
        click.echo("\nInterrupted", err=True)
        sys.exit(130)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
