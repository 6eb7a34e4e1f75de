"""Tests for the toggle-handler CLI."""

import pytest
from click.testing import CliRunner

from togglehandler import __version__
from togglehandler.cli import main
from togglehandler.strategies import extract_toggle_names


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, project):
    """Run the CLI against the sample project."""
    def _invoke(*args, input=None):
        return runner.invoke(main, ["--project", str(project), *args], input=input)
    return _invoke


def _read(toggle_dir, name):
    return (toggle_dir / name).read_text(encoding="utf-8")


class TestCreate:
    def test_create_with_options(self, invoke, toggle_dir):
        result = invoke("create", "--name", "FooBar", "--jira", "IMASD-1", "--description", "Do foo")
        assert result.exit_code == 0, result.output
        assert "[OK]" in result.output
        assert "Toggle FooBar created" in result.output
        assert 'description = "IMASD-1 Do foo"' in _read(toggle_dir, "Toggle.kt")

    def test_create_remote_with_dates(self, invoke, toggle_dir):
        result = invoke(
            "create", "-n", "FooBar", "--remote",
            "--activation-date", "01/03/2025",
            "--activation-version", "13.6.0",
            "--deprecation-date", "2025-09-01",
        )
        assert result.exit_code == 0, result.output
        registry = _read(toggle_dir, "Toggle.kt")
        assert 'activationDate = "01/03/2025",' in registry
        assert 'activationVersion = "13.6.0",' in registry
        assert 'deprecationDate = "01/09/2025",' in registry

    def test_create_non_remote_ignores_dates(self, invoke, toggle_dir):
        result = invoke("create", "-n", "FooBar", "--activation-date", "01/03/2025")
        assert result.exit_code == 0, result.output
        assert 'activationDate = "01/03/2025"' not in _read(toggle_dir, "Toggle.kt")

    def test_create_interactive(self, invoke, toggle_dir):
        result = invoke("create", input="FooBar\nIMASD-1\nDo foo\nn\n")
        assert result.exit_code == 0, result.output
        assert "FooBar" in extract_toggle_names(_read(toggle_dir, "Toggle.kt"))

    def test_create_interactive_remote(self, invoke, toggle_dir):
        result = invoke("create", input="FooBar\n\nDo foo\ny\n05/03/2025\n14.0.0\n05/09/2025\n")
        assert result.exit_code == 0, result.output
        registry = _read(toggle_dir, "Toggle.kt")
        assert "isRemoteConfigurable = true," in registry
        assert 'activationDate = "05/03/2025",' in registry
        assert 'activationVersion = "14.0.0",' in registry

    def test_create_existing_fails(self, invoke):
        result = invoke("create", "-n", "SearchMigration")
        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_create_reports_failed_file_and_continues(self, invoke, toggle_dir):
        (toggle_dir / "RemoteSettingsDefaults.kt").write_text("object Empty\n", encoding="utf-8")
        result = invoke("create", "-n", "FooBar")
        assert result.exit_code == 1
        assert "[FAIL]" in result.output
        assert "landmark_not_found" in result.output
        assert "FooBar" in extract_toggle_names(_read(toggle_dir, "Toggle.kt"))

    def test_dry_run(self, invoke, toggle_dir, registry_text):
        result = invoke("create", "-n", "FooBar", "--dry-run")
        assert result.exit_code == 0, result.output
        assert "Would update" in result.output
        assert "+    data object FooBar : Toggle(" in result.output
        assert _read(toggle_dir, "Toggle.kt") == registry_text

    def test_no_files(self, runner, tmp_path):
        result = runner.invoke(main, ["--project", str(tmp_path), "create", "-n", "FooBar"])
        assert result.exit_code == 1
        assert "No files found to modify" in result.output


class TestDelete:
    def test_delete_by_name(self, invoke, toggle_dir):
        result = invoke("delete", "SearchMigration", "--yes", "--no-open")
        assert result.exit_code == 0, result.output
        assert "Toggle SearchMigration deleted" in result.output
        assert extract_toggle_names(_read(toggle_dir, "Toggle.kt")) == ["NewOnboarding"]

    def test_delete_interactive_choice(self, invoke, toggle_dir):
        result = invoke("delete", "--no-open", input="NewOnboarding\ny\n")
        assert result.exit_code == 0, result.output
        assert "1. SearchMigration" in result.output
        assert extract_toggle_names(_read(toggle_dir, "Toggle.kt")) == ["SearchMigration"]

    def test_delete_cancelled(self, invoke, toggle_dir, registry_text):
        result = invoke("delete", "SearchMigration", "--no-open", input="n\n")
        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert _read(toggle_dir, "Toggle.kt") == registry_text

    def test_delete_unknown(self, invoke):
        result = invoke("delete", "Missing", "--yes", "--no-open")
        assert result.exit_code == 1
        assert "not declared" in result.output

    def test_delete_opens_extensions(self, invoke, monkeypatch):
        opened = []
        monkeypatch.setattr("click.edit", lambda **kwargs: opened.append(kwargs["filename"]))
        result = invoke("delete", "SearchMigration", "--yes")
        assert result.exit_code == 0, result.output
        assert len(opened) == 1
        assert opened[0].endswith("ServiceExtensions.kt")


class TestListAndFiles:
    def test_list(self, invoke):
        result = invoke("list")
        assert result.exit_code == 0, result.output
        assert "SearchMigration" in result.output
        assert "NewOnboarding" in result.output
        assert "None" not in result.output

    def test_list_without_registry(self, invoke, toggle_dir):
        (toggle_dir / "Toggle.kt").unlink()
        result = invoke("list")
        assert result.exit_code == 1
        assert "Could not find file Toggle.kt" in result.output

    def test_files(self, invoke, toggle_dir):
        (toggle_dir / "ToggleDoc.kt").unlink()
        result = invoke("files")
        assert result.exit_code == 0, result.output
        assert "registry" in result.output
        assert "ToggleDoc.kt not found" in result.output


class TestUndo:
    def test_undo_after_create(self, invoke, toggle_dir, registry_text):
        invoke("create", "-n", "FooBar")
        result = invoke("undo", "--yes")
        assert result.exit_code == 0, result.output
        assert "Restored" in result.output
        assert _read(toggle_dir, "Toggle.kt") == registry_text

    def test_nothing_to_undo(self, invoke):
        result = invoke("undo", "--yes")
        assert result.exit_code == 0
        assert "Nothing to undo" in result.output


class TestMain:
    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert __version__ in result.output

    def test_bad_project(self, runner, tmp_path):
        result = runner.invoke(main, ["--project", str(tmp_path / "nope"), "list"])
        assert result.exit_code == 1
        assert "Configuration error" in result.output
