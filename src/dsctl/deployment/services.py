"""Service directory index and filesystem helpers.

A service is a directory directly under the services root. It is a *stack*
when it contains the compose descriptor (``compose.yml`` by default). Nothing
here is cached: every call reflects the filesystem at that moment.

Examples:
    >>> root = Path("~/services").expanduser()
    >>> for name in list_services(root):
    ...     print(name, is_stack(root / name))

    Scaffold a new stack from the bundled template::

        >>> create_service(root, "whoami", image="traefik/whoami", port=8080)
"""

import shutil
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, PackageLoader, StrictUndefined

from dsctl.deployment.errors import DirectoryMissingError
from dsctl.utils.logger import get_logger

logger = get_logger("services")

DEFAULT_COMPOSE_FILE = "compose.yml"
COMPOSE_TEMPLATE = "compose.yml.j2"
DEFAULT_IMAGE = "nginx:alpine"


@dataclass(frozen=True)
class Service:
    """View of one service directory."""

    name: str
    path: Path
    is_stack: bool


def list_services(root: str | Path) -> Iterator[str]:
    """Yield the names of the immediate subdirectories of ``root``.

    Order is filesystem enumeration order. Hidden directories are skipped.
    Yields nothing when ``root`` does not exist. Each call starts a fresh
    enumeration.
    """
    root = Path(root)
    if not root.is_dir():
        return

    for entry in root.iterdir():
        if entry.name.startswith("."):
            continue
        if entry.is_dir():
            yield entry.name


def is_stack(service_dir: str | Path, compose_file: str = DEFAULT_COMPOSE_FILE) -> bool:
    """True iff ``service_dir/compose_file`` exists as a regular file."""
    return (Path(service_dir) / compose_file).is_file()


def get_service(root: str | Path, name: str, compose_file: str = DEFAULT_COMPOSE_FILE) -> Service:
    path = Path(root) / name
    return Service(name=name, path=path, is_stack=is_stack(path, compose_file))


def list_stacks(root: str | Path, compose_file: str = DEFAULT_COMPOSE_FILE) -> list[str]:
    return [name for name in list_services(root) if is_stack(Path(root) / name, compose_file)]


def list_non_stacks(root: str | Path, compose_file: str = DEFAULT_COMPOSE_FILE) -> list[str]:
    return [name for name in list_services(root) if not is_stack(Path(root) / name, compose_file)]


def validate_service_name(name: str) -> str:
    """Reject names that would escape the services root or be hidden."""
    if not name or name in (".", ".."):
        raise ValueError("Service name cannot be empty")
    if "/" in name or "\\" in name:
        raise ValueError(f"Service name cannot contain path separators: {name!r}")
    if name.startswith("."):
        raise ValueError(f"Service name cannot start with '.': {name!r}")
    return name


def render_compose(name: str, image: str = DEFAULT_IMAGE, port: int | None = None) -> str:
    """Render the starter compose descriptor for a new service."""
    env = Environment(
        loader=PackageLoader("dsctl", "templates"),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )
    template = env.get_template(COMPOSE_TEMPLATE)
    return template.render(name=name, image=image, port=port)


def create_service(
    root: str | Path,
    name: str,
    compose_file: str = DEFAULT_COMPOSE_FILE,
    image: str = DEFAULT_IMAGE,
    port: int | None = None,
) -> Path:
    """Create ``root/name`` with a rendered compose descriptor.

    Returns:
        Path of the new service directory

    Raises:
        ValueError: If the name is not a plain directory name
        FileExistsError: If the directory already exists
    """
    validate_service_name(name)
    service_dir = Path(root) / name
    if service_dir.exists():
        raise FileExistsError(f"Service '{name}' already exists: {service_dir}")

    service_dir.mkdir(parents=True)
    (service_dir / compose_file).write_text(render_compose(name, image=image, port=port))

    logger.success(f"Created service '{name}' in {service_dir}")
    return service_dir


def _remove_tree(path: Path) -> None:
    # A linked service folder loses the link only; its target is left alone
    if path.is_symlink():
        path.unlink()
    else:
        shutil.rmtree(path)


def remove_service(root: str | Path, name: str) -> Path:
    """Recursively delete ``root/name`` (only the link, when it is a symlink).

    Raises:
        DirectoryMissingError: If the directory does not exist
    """
    validate_service_name(name)
    service_dir = Path(root) / name
    if not service_dir.is_dir():
        raise DirectoryMissingError(name, service_dir)

    _remove_tree(service_dir)
    logger.info(f"Removed {service_dir}")
    return service_dir


def clean_non_stacks(
    root: str | Path, compose_file: str = DEFAULT_COMPOSE_FILE, dry_run: bool = False
) -> list[str]:
    """Remove every service directory that is not a stack.

    Args:
        root: Services root
        compose_file: Descriptor file name that marks a stack
        dry_run: Only report what would be removed

    Returns:
        Names removed (or that would be removed), in enumeration order
    """
    orphans = list_non_stacks(root, compose_file)
    if dry_run:
        return orphans

    for name in orphans:
        _remove_tree(Path(root) / name)
        logger.info(f"Removed non-stack folder '{name}'")
    return orphans
