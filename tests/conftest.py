"""
Pytest configuration and shared test utilities.

This module provides shared fixtures for all dsctl tests: an isolated user
config, a populated services root, and a themed console that records output.
"""

import io
import logging

import pytest

from dsctl.deployment import runtime_helper
from dsctl.utils import config as config_module
from dsctl.utils.config import Settings

ENV_VARS = ("SERVICES_DIR", "COMPOSE_FILE", "EDITOR", "MAX_DS_JOBS", "COMPOSE_ENGINE", "DEBUG")


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path_factory, monkeypatch):
    """Keep tests away from the real user config, env and engine cache."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setenv("DSCTL_CONFIG", str(config_dir / "config.yml"))
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)

    root_level = logging.getLogger().level
    config_module.set_settings(None)
    runtime_helper.reset_engine_cache()
    yield
    config_module.set_settings(None)
    runtime_helper.reset_engine_cache()
    logging.getLogger().setLevel(root_level)


@pytest.fixture
def services_root(tmp_path):
    """Services root with two stacks (web, db) and one orphan folder."""
    root = tmp_path / "services"
    for name in ("web", "db"):
        (root / name).mkdir(parents=True)
        (root / name / "compose.yml").write_text(f"services:\n  {name}:\n    image: nginx\n")
    (root / "orphan").mkdir()
    (root / "orphan" / "notes.txt").write_text("leftover\n")
    return root


@pytest.fixture
def settings(services_root):
    return Settings(services_dir=services_root, max_jobs=2)


@pytest.fixture
def console():
    """Themed console writing to a buffer; read it with ``console.file.getvalue()``."""
    from dsctl.cli.styles import make_console

    return make_console(file=io.StringIO(), width=120)
