"""Tests for the CLI theme and message helpers."""

import io

from dsctl.cli import styles
from dsctl.cli.styles import DEFAULT_THEME, Messages, load_theme_from_config, make_console
from dsctl.utils import config as config_module
from dsctl.utils.config import Settings


class TestTheme:
    def test_default_theme_without_config(self, tmp_path):
        config_module.set_settings(Settings(services_dir=tmp_path))

        assert load_theme_from_config() == DEFAULT_THEME

    def test_valid_overrides_applied(self, tmp_path):
        config_module.set_settings(
            Settings(services_dir=tmp_path, cli={"theme": {"primary": "#112233"}})
        )

        theme = load_theme_from_config()

        assert theme.primary == "#112233"
        assert theme.error == DEFAULT_THEME.error

    def test_invalid_overrides_ignored(self, tmp_path):
        config_module.set_settings(
            Settings(services_dir=tmp_path, cli={"theme": {"primary": "blue", "nope": "#fff"}})
        )

        assert load_theme_from_config() == DEFAULT_THEME

    def test_set_theme_replaces_console(self):
        before = styles.get_console()
        try:
            styles.set_theme(DEFAULT_THEME)
            assert styles.get_console() is not before
        finally:
            styles.set_theme(DEFAULT_THEME)


class TestMessages:
    def test_every_semantic_style_renders(self):
        console = make_console(file=io.StringIO(), width=120)

        for line in (
            Messages.success("ok"),
            Messages.error("bad"),
            Messages.warning("careful"),
            Messages.info("note"),
            Messages.command("dsctl up all"),
            Messages.path("/srv"),
            "[bold_primary]x[/bold_primary] [accent]y[/accent] [dim]z[/dim]",
        ):
            console.print(line)

        output = console.file.getvalue()
        assert "✓ ok" in output
        assert "✗ bad" in output
        assert "dsctl up all" in output
