"""
Configuration System

Settings for dsctl come from four layers, lowest priority first:

- Built-in defaults
- The YAML user config (``$DSCTL_CONFIG`` or ``~/.config/dsctl/config.yml``)
- Environment variables (a ``.env`` file in the working directory is loaded
  first and never overrides variables that are already set)
- Command-line flags, applied by the CLI through :meth:`Settings.with_overrides`

String values in the YAML file may reference the environment with
``${VAR}``, ``${VAR:-default}`` or ``$VAR``.
"""

import logging
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

# Use standard logging (not get_logger) to avoid circular imports with logger.py
logger = logging.getLogger("CONFIG")

DEFAULT_SERVICES_DIR = "~/services"
DEFAULT_COMPOSE_FILE = "compose.yml"
DEFAULT_EDITOR = "nano"
DEFAULT_MAX_JOBS = 4

# Environment variable -> settings key
ENV_OVERRIDES = {
    "SERVICES_DIR": "services_dir",
    "COMPOSE_FILE": "compose_file",
    "EDITOR": "editor",
    "MAX_DS_JOBS": "max_jobs",
    "COMPOSE_ENGINE": "engine",
}

_ENV_PATTERN = re.compile(r"\$\{([^}:]+)(?::-(.*?))?\}|\$([A-Za-z_][A-Za-z0-9_]*)")


def default_config_path() -> Path:
    """Location of the user config file."""
    env_path = os.environ.get("DSCTL_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return Path.home() / ".config" / "dsctl" / "config.yml"


@dataclass(frozen=True)
class Settings:
    services_dir: Path
    compose_file: str = DEFAULT_COMPOSE_FILE
    editor: str = DEFAULT_EDITOR
    max_jobs: int = DEFAULT_MAX_JOBS
    engine: str | None = None
    alias: str | None = None
    logging: dict[str, Any] = field(default_factory=dict)
    cli: dict[str, Any] = field(default_factory=dict)
    config_path: Path | None = None

    def service_path(self, name: str) -> Path:
        return self.services_dir / name

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with the non-None overrides applied and validated."""
        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        if "services_dir" in values:
            values["services_dir"] = Path(values["services_dir"]).expanduser()
        if "max_jobs" in values:
            values["max_jobs"] = _parse_max_jobs(values["max_jobs"])
        return replace(self, **values)

    def get(self, path: str, default: Any = None) -> Any:
        """Get a value using dot notation, e.g. ``logging.colors.batch``."""
        keys = path.split(".")
        head, rest = keys[0], keys[1:]
        if not hasattr(self, head):
            return default
        value = getattr(self, head)
        try:
            for key in rest:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default


def _parse_max_jobs(value: Any) -> int:
    try:
        jobs = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"max_jobs must be an integer, got {value!r}") from None
    if jobs < 1:
        raise ValueError(f"max_jobs must be at least 1, got {jobs}")
    return jobs


def _resolve_env_vars(data: Any) -> Any:
    """Recursively resolve environment variables in configuration data."""
    if isinstance(data, dict):
        return {key: _resolve_env_vars(value) for key, value in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars(item) for item in data]
    elif isinstance(data, str):

        def replace_env_var(match):
            if match.group(1):
                var_name = match.group(1)
                default_value = match.group(2)
            else:
                var_name = match.group(3)
                default_value = None

            env_value = os.environ.get(var_name)
            if env_value is None:
                if default_value is not None:
                    return default_value
                logger.debug(f"Environment variable '{var_name}' not found, keeping original value")
                return match.group(0)
            return env_value

        return _ENV_PATTERN.sub(replace_env_var, data)
    return data


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """Load and validate a YAML configuration file. A missing file is empty."""
    if not file_path.exists():
        logger.debug(f"No config file at {file_path}")
        return {}

    try:
        with open(file_path) as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        error_msg = f"Error parsing YAML configuration {file_path}: {e}"
        logger.error(error_msg)
        raise yaml.YAMLError(error_msg) from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration file must contain a mapping: {file_path}")

    logger.debug(f"Loaded configuration from {file_path}")
    return config


def load_settings(config_path: str | Path | None = None, load_env_file: bool = True) -> Settings:
    """Build :class:`Settings` from defaults, user config and environment.

    Args:
        config_path: Explicit config file. Defaults to :func:`default_config_path`.
        load_env_file: Load ``.env`` from the working directory first.

    Raises:
        ValueError: If a value has the wrong type (e.g. non-numeric MAX_DS_JOBS)
        yaml.YAMLError: If the config file is not valid YAML
    """
    if load_env_file:
        dotenv_path = Path.cwd() / ".env"
        if dotenv_path.exists():
            load_dotenv(dotenv_path, override=False)
            logger.debug(f"Loaded .env file from {dotenv_path}")

    path = Path(config_path).expanduser() if config_path else default_config_path()
    raw = _resolve_env_vars(load_yaml_file(path))

    values: dict[str, Any] = {
        "services_dir": raw.get("services_dir", DEFAULT_SERVICES_DIR),
        "compose_file": raw.get("compose_file", DEFAULT_COMPOSE_FILE),
        "editor": raw.get("editor", DEFAULT_EDITOR),
        "max_jobs": raw.get("max_jobs", DEFAULT_MAX_JOBS),
        "engine": raw.get("engine"),
        "alias": raw.get("alias"),
    }

    for env_name, key in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[key] = env_value

    logging_config = raw.get("logging") or {}
    cli_config = raw.get("cli") or {}
    for section, value in (("logging", logging_config), ("cli", cli_config)):
        if not isinstance(value, dict):
            raise ValueError(f"'{section}' must be a mapping in the config file")

    return Settings(
        services_dir=Path(str(values["services_dir"])).expanduser(),
        compose_file=str(values["compose_file"]),
        editor=str(values["editor"]),
        max_jobs=_parse_max_jobs(values["max_jobs"]),
        engine=values["engine"] or None,
        alias=values["alias"] or None,
        logging=logging_config,
        cli=cli_config,
        config_path=path,
    )


def save_user_config_value(key: str, value: Any, config_path: str | Path | None = None) -> Path:
    """Persist a single top-level key in the user config file.

    Other keys are preserved. A value of None removes the key.

    Returns:
        Path of the written file
    """
    path = Path(config_path).expanduser() if config_path else default_config_path()
    data = load_yaml_file(path)

    if value is None:
        data.pop(key, None)
    else:
        data[key] = value

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    logger.debug(f"Saved '{key}' to {path}")
    return path


# =============================================================================
# GLOBAL CONFIGURATION
# =============================================================================

_default_settings: Settings | None = None


def get_settings() -> Settings:
    """Process-wide settings, loaded on first use."""
    global _default_settings
    if _default_settings is None:
        _default_settings = load_settings()
    return _default_settings


def set_settings(settings: Settings | None) -> None:
    """Replace the process-wide settings (the CLI does this after applying flags)."""
    global _default_settings
    _default_settings = settings


def get_config_value(path: str, default: Any = None) -> Any:
    """
    Get a specific configuration value by dot-separated path.

    Never raises for a missing or unreadable config; the default is returned,
    so callers such as the logger keep working without configuration.

    Examples:
        >>> get_config_value("max_jobs", 4)
        >>> get_config_value("logging.colors.batch", "white")
    """
    if not path:
        raise ValueError("Configuration path cannot be empty or None")

    try:
        settings = get_settings()
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.debug(f"Configuration unavailable ({e}), using default for '{path}'")
        return default

    return settings.get(path, default)
