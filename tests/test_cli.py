"""
Tests for CLI commands.
"""

import pytest
from typer.testing import CliRunner

from promptpack.cli import app

# Disable Rich formatting in tests using NO_COLOR environment variable
runner = CliRunner(env={"NO_COLOR": "1", "TERM": "dumb", "COLUMNS": "200"})


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    """Keep CLI invocations from installing handlers on the runner's streams."""
    monkeypatch.setattr("promptpack.cli.setup_logging", lambda **kwargs: None)


class TestValidateCommand:
    """Tests for validate command."""

    def test_valid_plugin(self, plugin_dir):
        result = runner.invoke(app, ["validate", str(plugin_dir)])

        assert result.exit_code == 0
        assert "example-plugin v1.0.0" in result.stdout
        assert "Entries checked: 4" in result.stdout
        assert "Plugin is valid" in result.stdout

    def test_nonexistent_directory(self, tmp_path):
        result = runner.invoke(app, ["validate", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "not found" in result.stdout.lower()

    def test_manifest_failure(self, plugin_dir, make_manifest, sample_entries):
        sample_entries.append(
            {"kind": "command", "identifier": "ghost", "path": "commands/ghost.md"}
        )
        make_manifest(plugin_dir, sample_entries)

        result = runner.invoke(app, ["validate", str(plugin_dir)])

        assert result.exit_code == 1
        assert "not_found" in result.stdout
        assert "commands/ghost.md" in result.stdout
        assert "Validation failed" in result.stdout

    def test_template_failure_names_the_file(self, plugin_dir, make_file, make_manifest, sample_entries):
        make_file(plugin_dir, "agents/nameless.md", "---\ndescription: No name\n---\n")
        sample_entries.append(
            {"kind": "agent", "identifier": "nameless", "path": "agents/nameless.md"}
        )
        make_manifest(plugin_dir, sample_entries)

        result = runner.invoke(app, ["validate", str(plugin_dir)])

        assert result.exit_code == 1
        assert "1 template file(s) failed to load" in result.stdout
        assert "agents/nameless.md" in result.stdout
        assert "missing required field 'name'" in result.stdout

    def test_undeclared_templates(self, plugin_dir, make_manifest, sample_entries):
        make_manifest(plugin_dir, sample_entries[:3])

        result = runner.invoke(app, ["validate", str(plugin_dir)])

        assert result.exit_code == 0
        assert "Not in manifest: agents/react-reviewer.md" in result.stdout

    def test_undeclared_templates_strict(self, plugin_dir, make_manifest, sample_entries):
        make_manifest(plugin_dir, sample_entries[:3])

        result = runner.invoke(app, ["validate", str(plugin_dir), "--strict"])

        assert result.exit_code == 1
        assert "Validation failed" in result.stdout


class TestListCommand:
    """Tests for list command."""

    def test_lists_all_templates(self, plugin_dir):
        result = runner.invoke(app, ["list", str(plugin_dir)])

        assert result.exit_code == 0
        for identifier in ("api-new", "lint", "db-tuner", "react-reviewer"):
            assert identifier in result.stdout

    def test_filter_by_kind(self, plugin_dir):
        result = runner.invoke(app, ["list", str(plugin_dir), "--kind", "agent"])

        assert result.exit_code == 0
        assert "db-tuner" in result.stdout
        assert "api-new" not in result.stdout

    def test_unknown_kind(self, plugin_dir):
        result = runner.invoke(app, ["list", str(plugin_dir), "--kind", "skill"])

        assert result.exit_code == 1
        assert "Unknown kind" in result.stdout


class TestShowCommand:
    """Tests for show command."""

    def test_show_command(self, plugin_dir):
        result = runner.invoke(app, ["show", str(plugin_dir), "command", "api-new"])

        assert result.exit_code == 0
        assert result.stdout.startswith("---\ndescription: Scaffold a new REST API endpoint\n")
        assert "Create a new endpoint for: $ARGUMENTS" in result.stdout

    def test_show_missing(self, plugin_dir):
        result = runner.invoke(app, ["show", str(plugin_dir), "agent", "api-new"])

        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestRenderCommand:
    """Tests for render command."""

    def test_render_with_arguments(self, plugin_dir):
        result = runner.invoke(app, ["render", str(plugin_dir), "api-new", "POST", "/users"])

        assert result.exit_code == 0
        assert "model: claude-sonnet-4-5" in result.stdout
        assert "Create a new endpoint for: POST /users" in result.stdout

    def test_render_unknown_command(self, plugin_dir):
        result = runner.invoke(app, ["render", str(plugin_dir), "nonexistent"])

        assert result.exit_code == 1
        assert "command 'nonexistent' not found" in result.stdout


class TestMatchCommand:
    """Tests for match command."""

    def test_keyword_match(self, plugin_dir):
        result = runner.invoke(
            app,
            ["match", str(plugin_dir), "slow query on postgres", "--judge", "keyword"],
        )

        assert result.exit_code == 0
        assert "db-tuner" in result.stdout
        assert "react-reviewer" not in result.stdout

    def test_no_match(self, plugin_dir):
        result = runner.invoke(
            app,
            ["match", str(plugin_dir), "update the changelog", "--judge", "keyword"],
        )

        assert result.exit_code == 0
        assert "No agent matches this context" in result.stdout

    def test_unknown_judge(self, plugin_dir):
        result = runner.invoke(app, ["match", str(plugin_dir), "x", "--judge", "oracle"])

        assert result.exit_code == 1
        assert "Unknown agent judge" in result.stdout


class TestPluginsCommand:
    """Tests for plugins command."""

    def test_lists_discovered_plugins(self, plugin_dir):
        result = runner.invoke(app, ["plugins", "--plugin-dir", str(plugin_dir.parent)])

        assert result.exit_code == 0
        assert "example-plugin" in result.stdout
        assert "1.0.0" in result.stdout

    def test_no_plugins(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr("promptpack.loader.PluginLoader.DEFAULT_PLUGIN_DIRS", [])

        result = runner.invoke(app, ["plugins", "--plugin-dir", str(tmp_path / "empty")])

        assert result.exit_code == 0
        assert "No plugins found." in result.stdout

    def test_requires_subcommand(self):
        result = runner.invoke(app, [])

        assert result.exit_code != 0 or "Usage" in result.stdout
