"""Tests for the layered configuration system."""

from pathlib import Path

import pytest
import yaml

from dsctl.utils import config as config_module
from dsctl.utils.config import (
    DEFAULT_MAX_JOBS,
    Settings,
    default_config_path,
    get_config_value,
    load_settings,
    load_yaml_file,
    save_user_config_value,
)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(
        yaml.safe_dump(
            {
                "services_dir": str(tmp_path / "stacks"),
                "compose_file": "docker-compose.yml",
                "max_jobs": 8,
                "alias": "ds",
                "logging": {"level": "info", "colors": {"batch": "cyan"}},
            }
        )
    )
    return path


class TestDefaults:
    def test_defaults_without_config(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yml", load_env_file=False)

        assert settings.services_dir == Path("~/services").expanduser()
        assert settings.compose_file == "compose.yml"
        assert settings.editor == "nano"
        assert settings.max_jobs == DEFAULT_MAX_JOBS
        assert settings.engine is None
        assert settings.alias is None

    def test_default_config_path_from_env(self, monkeypatch, tmp_path):
        monkeypatch.setenv("DSCTL_CONFIG", str(tmp_path / "custom.yml"))

        assert default_config_path() == tmp_path / "custom.yml"

    def test_default_config_path_in_home(self, monkeypatch):
        monkeypatch.delenv("DSCTL_CONFIG")

        assert default_config_path() == Path.home() / ".config" / "dsctl" / "config.yml"


class TestLayering:
    """Config file < environment < explicit overrides."""

    def test_config_file_values(self, config_file, tmp_path):
        settings = load_settings(config_file, load_env_file=False)

        assert settings.services_dir == tmp_path / "stacks"
        assert settings.compose_file == "docker-compose.yml"
        assert settings.max_jobs == 8
        assert settings.alias == "ds"
        assert settings.get("logging.colors.batch") == "cyan"
        assert settings.config_path == config_file

    def test_environment_overrides_file(self, config_file, monkeypatch, tmp_path):
        monkeypatch.setenv("SERVICES_DIR", str(tmp_path / "env-stacks"))
        monkeypatch.setenv("MAX_DS_JOBS", "3")
        monkeypatch.setenv("EDITOR", "vim")
        monkeypatch.setenv("COMPOSE_ENGINE", "podman compose")

        settings = load_settings(config_file, load_env_file=False)

        assert settings.services_dir == tmp_path / "env-stacks"
        assert settings.max_jobs == 3
        assert settings.editor == "vim"
        assert settings.engine == "podman compose"

    def test_overrides_win(self, config_file, tmp_path):
        settings = load_settings(config_file, load_env_file=False).with_overrides(
            services_dir=str(tmp_path / "cli"), compose_file=None, max_jobs="2"
        )

        assert settings.services_dir == tmp_path / "cli"
        assert settings.compose_file == "docker-compose.yml"
        assert settings.max_jobs == 2

    def test_no_overrides_returns_same_object(self, config_file):
        settings = load_settings(config_file, load_env_file=False)

        assert settings.with_overrides(services_dir=None) is settings

    def test_dotenv_does_not_override_environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("EDITOR=emacs\nMAX_DS_JOBS=6\n")
        monkeypatch.setenv("EDITOR", "vim")
        # load_dotenv writes into os.environ; let monkeypatch undo it
        monkeypatch.setenv("MAX_DS_JOBS", "")
        monkeypatch.delenv("MAX_DS_JOBS")

        settings = load_settings(tmp_path / "none.yml")

        assert settings.editor == "vim"
        assert settings.max_jobs == 6

    def test_env_var_references_in_yaml(self, tmp_path, monkeypatch):
        monkeypatch.setenv("STACK_HOME", str(tmp_path / "home"))
        path = tmp_path / "config.yml"
        path.write_text(
            'services_dir: "${STACK_HOME}/services"\neditor: "${DSCTL_TEST_EDITOR:-micro}"\n'
        )

        settings = load_settings(path, load_env_file=False)

        assert settings.services_dir == tmp_path / "home" / "services"
        assert settings.editor == "micro"


class TestValidation:
    @pytest.mark.parametrize("value", ["0", "-2", "many"])
    def test_invalid_max_jobs_from_env(self, value, monkeypatch, tmp_path):
        monkeypatch.setenv("MAX_DS_JOBS", value)

        with pytest.raises(ValueError, match="max_jobs"):
            load_settings(tmp_path / "none.yml", load_env_file=False)

    def test_invalid_override(self, tmp_path):
        settings = Settings(services_dir=tmp_path)

        with pytest.raises(ValueError):
            settings.with_overrides(max_jobs=0)

    def test_non_mapping_config(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("- just\n- a list\n")

        with pytest.raises(ValueError):
            load_yaml_file(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("services_dir: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            load_yaml_file(path)

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("")

        assert load_yaml_file(path) == {}


class TestSaveUserConfigValue:
    def test_preserves_other_keys(self, config_file):
        save_user_config_value("alias", "d", config_file)

        data = yaml.safe_load(config_file.read_text())
        assert data["alias"] == "d"
        assert data["max_jobs"] == 8

    def test_none_removes_key(self, config_file):
        save_user_config_value("alias", None, config_file)

        assert "alias" not in yaml.safe_load(config_file.read_text())

    def test_creates_file(self, tmp_path):
        path = tmp_path / "nested" / "config.yml"

        assert save_user_config_value("editor", "vim", path) == path
        assert yaml.safe_load(path.read_text()) == {"editor": "vim"}


class TestGetConfigValue:
    def test_reads_global_settings(self, tmp_path):
        config_module.set_settings(Settings(services_dir=tmp_path, max_jobs=7))

        assert get_config_value("max_jobs") == 7
        assert get_config_value("logging.level", "warning") == "warning"
        assert get_config_value("no.such.key", "fallback") == "fallback"

    def test_broken_config_falls_back(self, monkeypatch, tmp_path):
        path = tmp_path / "broken.yml"
        path.write_text("services_dir: [unclosed\n")
        monkeypatch.setenv("DSCTL_CONFIG", str(path))

        assert get_config_value("max_jobs", 4) == 4

    def test_empty_path_rejected(self):
        with pytest.raises(ValueError):
            get_config_value("")
