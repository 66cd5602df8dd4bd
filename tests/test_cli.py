"""
Tests for CLI commands — sync, plan, config check, and global options.
"""

import json
import textwrap
from datetime import UTC, datetime
from pathlib import Path

import pytest
from click.testing import CliRunner

from bundlesync.adapters.mock import MockCatalog, MockExtractor
from bundlesync.core.use_cases import plan as plan_module
from bundlesync.core.use_cases import sync as sync_module
from bundlesync.main import cli

PAST = datetime(2020, 1, 1, tzinfo=UTC)


def _write_config(tmp_path: Path, packages: str = "pkgA/app.zip;pkgB/*", extra: str = "") -> Path:
    content = textwrap.dedent(f"""\
        packages: "{packages}"
        connection: "Region=us-east-1"
        working_directory: apps
        temp_directory: downloads
    """) + extra
    path = tmp_path / "bundlesync.yml"
    path.write_text(content)
    return path


@pytest.fixture
def mock_storage(monkeypatch, catalog: MockCatalog, extractor: MockExtractor):
    """Route every command to the in-memory catalog and extractor."""
    catalog.put_object("pkgA", "app.zip", b"app\n", last_modified=PAST)
    catalog.put_object("pkgB", "y.zip", b"y\n", last_modified=PAST)
    catalog.put_object("pkgB", "x.zip", b"x\n", last_modified=PAST)

    monkeypatch.setattr(sync_module, "build_catalog", lambda config: catalog)
    monkeypatch.setattr(sync_module, "build_extractor", lambda config: extractor)
    monkeypatch.setattr(plan_module, "build_catalog", lambda config: catalog)
    return catalog


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "install remote bundles" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_no_subcommand_runs_sync(self, tmp_path: Path, mock_storage):
        config = _write_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config)])

        assert result.exit_code == 0, result.output
        assert "3 installed, 0 skipped, 0 failed" in result.output
        assert (tmp_path / "apps" / "app.zip.receipt").is_file()

    def test_missing_config_exits_2(self, tmp_path: Path):
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(tmp_path / "absent.yml"), "sync"])
        assert result.exit_code == 2
        assert "Config file not found" in result.output

    def test_missing_required_setting_exits_2(self, tmp_path: Path):
        path = tmp_path / "bundlesync.yml"
        path.write_text("working_directory: apps\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(path), "sync"])
        assert result.exit_code == 2
        assert "Missing required setting(s) packages, connection" in result.output


class TestSyncCommand:
    def test_sync_then_skip(self, tmp_path: Path, mock_storage):
        config = _write_config(tmp_path)
        runner = CliRunner()

        first = runner.invoke(cli, ["-q", "-c", str(config), "sync"])
        second = runner.invoke(cli, ["-q", "-c", str(config), "sync"])

        assert first.exit_code == 0
        assert second.exit_code == 0
        assert "0 installed, 3 skipped, 0 failed" in second.output

    def test_always_install_flag(self, tmp_path: Path, mock_storage, extractor: MockExtractor):
        config = _write_config(tmp_path, packages="pkgA/app.zip")
        runner = CliRunner()
        runner.invoke(cli, ["-q", "-c", str(config), "sync"])
        result = runner.invoke(cli, ["-q", "-c", str(config), "sync", "--always-install"])

        assert result.exit_code == 0
        assert "1 installed" in result.output
        assert extractor.call_count == 2

    def test_failure_exit_code(self, tmp_path: Path, mock_storage):
        mock_storage.set_fetch_failure("pkgB", "x.zip", "503 Slow Down")
        config = _write_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "sync"])

        assert result.exit_code == 1
        assert "503 Slow Down" in result.output
        assert "2 installed, 0 skipped, 1 failed (partial)" in result.output

    def test_failure_tolerated_when_fail_on_error_off(self, tmp_path: Path, mock_storage):
        mock_storage.set_fetch_failure("pkgA", "app.zip", "503 Slow Down")
        config = _write_config(tmp_path, packages="pkgA/app.zip", extra="fail_on_error: false\n")
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "sync"])
        assert result.exit_code == 0

    def test_unresolved_entry_listed(self, tmp_path: Path, mock_storage):
        config = _write_config(tmp_path, packages="garbage;pkgA/app.zip")
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "sync"])
        assert result.exit_code == 1
        assert "unresolved" in result.output

    def test_json_output(self, tmp_path: Path, mock_storage):
        config = _write_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "sync", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "ok"
        assert [o["package"]["name"] for o in data["outcomes"]] == ["app.zip", "x.zip", "y.zip"]

    def test_env_overrides_file(self, tmp_path: Path, mock_storage, monkeypatch):
        config = _write_config(tmp_path)
        monkeypatch.setenv("BUNDLESYNC_PACKAGES", "pkgA/app.zip")
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "sync", "--json"])

        data = json.loads(result.output)
        assert data["total"] == 1


class TestPlanCommand:
    def test_plan(self, tmp_path: Path, mock_storage):
        config = _write_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "plan"])

        assert result.exit_code == 0
        assert "3 of 3 package(s) would be installed" in result.output
        assert mock_storage.calls("fetch") == []

    def test_plan_json_after_sync(self, tmp_path: Path, mock_storage):
        config = _write_config(tmp_path)
        runner = CliRunner()
        runner.invoke(cli, ["-q", "-c", str(config), "sync"])
        result = runner.invoke(cli, ["-q", "-c", str(config), "plan", "--json"])

        data = json.loads(result.output)
        assert {item["action"] for item in data["items"]} == {"skip"}


class TestConfigCheckCommand:
    def test_valid_config(self, tmp_path: Path):
        (tmp_path / "apps").mkdir()
        config = _write_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "config", "check"])

        assert result.exit_code == 0
        assert "configuration is valid" in result.output
        assert "Package entries:   2" in result.output

    def test_invalid_config(self, tmp_path: Path):
        config = _write_config(tmp_path, packages="garbage")
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "config", "check"])

        assert result.exit_code == 1
        assert "Configuration errors" in result.output
        assert "garbage" in result.output

    def test_json(self, tmp_path: Path):
        config = _write_config(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["-q", "-c", str(config), "config", "check", "--json"])

        data = json.loads(result.output)
        assert data["valid"] is True
        assert data["entry_count"] == 2
