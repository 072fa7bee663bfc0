"""
Tests for configuration management.
"""

from pathlib import Path

import pytest

from promptpack.config import Settings, get_xdg_state_dir


@pytest.fixture(autouse=True)
def clear_promptpack_env(monkeypatch):
    """Ensure host environment overrides don't affect config unit tests."""
    for name in (
        "AGENT_JUDGE",
        "PLUGIN_DIRS",
        "LOG_DIR",
        "LOG_LEVEL",
        "OPENAI_MODEL",
        "ANTHROPIC_MODEL",
        "XDG_STATE_HOME",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


class TestSettings:
    """Tests for Settings configuration."""

    def test_default_layout_settings(self):
        """Test default plugin layout settings."""
        settings = Settings(_env_file=None)

        assert settings.manifest_filename == "plugin.json"
        assert settings.commands_dir == "commands"
        assert settings.agents_dir == "agents"
        assert settings.placeholder_token == "$ARGUMENTS"
        assert settings.frontmatter_marker == "---"

    def test_default_matching_settings(self):
        """Test default agent matching settings."""
        settings = Settings(_env_file=None)

        assert settings.agent_judge == "keyword"
        assert settings.agent_match_min_score == 0.0
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.anthropic_model == "claude-sonnet-4-5"

    def test_default_logging_settings(self):
        """Test default logging settings."""
        settings = Settings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.log_format == "standard"
        assert settings.log_console_enabled is True
        assert settings.log_file_enabled is False

    def test_settings_from_env_vars(self, monkeypatch):
        """Test that settings can be overridden by environment variables."""
        monkeypatch.setenv("AGENT_JUDGE", "anthropic")
        monkeypatch.setenv("JUDGE_MAX_TOKENS", "400")
        monkeypatch.setenv("PLACEHOLDER_TOKEN", "{{args}}")

        settings = Settings(_env_file=None)

        assert settings.agent_judge == "anthropic"
        assert settings.judge_max_tokens == 400
        assert settings.placeholder_token == "{{args}}"

    def test_case_insensitive_env_vars(self, monkeypatch):
        """Test that environment variables are case-insensitive."""
        monkeypatch.setenv("commands_dir", "prompts")

        settings = Settings(_env_file=None)

        assert settings.commands_dir == "prompts"

    def test_env_file(self, tmp_path):
        """Test values from a .env file."""
        env_file = tmp_path / ".env"
        env_file.write_text("AGENTS_DIR=personas\nLOG_FORMAT=json\n")

        settings = Settings(_env_file=env_file)

        assert settings.agents_dir == "personas"
        assert settings.log_format == "json"


class TestPluginDirs:
    """Tests for extra plugin directories."""

    def test_default_is_empty(self):
        assert Settings(_env_file=None).extra_plugin_dirs == []

    def test_comma_separated_env_value(self, monkeypatch):
        monkeypatch.setenv("PLUGIN_DIRS", "/opt/plugins, ~/more-plugins ,")

        settings = Settings(_env_file=None)

        assert settings.extra_plugin_dirs == [
            Path("/opt/plugins"),
            Path("~/more-plugins").expanduser(),
        ]

    def test_json_list_env_value(self, monkeypatch):
        monkeypatch.setenv("PLUGIN_DIRS", '["/a", "/b"]')

        settings = Settings(_env_file=None)

        assert settings.extra_plugin_dirs == [Path("/a"), Path("/b")]


class TestLogDirectory:
    """Tests for log directory resolution."""

    def test_explicit_log_dir(self, tmp_path):
        settings = Settings(_env_file=None, log_dir=str(tmp_path / "logs"))

        assert settings.log_directory == tmp_path / "logs"

    def test_xdg_state_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))

        assert get_xdg_state_dir() == str(tmp_path / "promptpack" / "logs")
        assert Settings(_env_file=None).log_directory == tmp_path / "promptpack" / "logs"

    def test_home_fallback(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))

        assert get_xdg_state_dir() == str(tmp_path / ".local" / "state" / "promptpack" / "logs")

    def test_no_home(self, monkeypatch):
        monkeypatch.delenv("HOME", raising=False)

        assert get_xdg_state_dir() == "./logs"
