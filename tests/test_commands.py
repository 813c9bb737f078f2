"""Tests for the click command surface."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from batchinstall.commands import cli


@pytest.fixture
def runner():
    """Create a CliRunner for testing."""
    return CliRunner()


@pytest.fixture
def manifest_file(temp_dir: Path, bulk_manifest_data) -> Path:
    path = temp_dir / "manifest.json"
    path.write_text(json.dumps(bulk_manifest_data))
    return path


@pytest.fixture
def fake_client(mocker, fake_registry):
    """Route the install command to a FakeRegistry."""
    client = fake_registry()
    mocker.patch("batchinstall.commands.install.ShellRegistryClient", return_value=client)
    mocker.patch(
        "batchinstall.commands.install.is_preferred_runtime_available", return_value=True
    )
    return client


class TestInstallCommand:
    def test_install_profile_with_yes(self, runner, manifest_file, fake_client):
        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "--profile", "everything", "--yes"]
        )

        assert result.exit_code == 0, result.output
        assert [c[1] for c in fake_client.install_calls] == [
            "Toolkit",
            "Editor",
            "Bulk.Authentication",
            "Bulk.Users",
            "Bulk.Groups",
            "ServiceConnector",
        ]
        assert "Total: 6 module(s), 6 succeeded, 0 failed" in result.output

    def test_silent_uses_broadest_profile(self, runner, manifest_file, fake_client):
        result = runner.invoke(cli, ["install", "-c", str(manifest_file), "--silent"])

        assert result.exit_code == 0, result.output
        assert "profile 'everything'" in result.output
        assert len(fake_client.install_calls) == 6

    def test_services_option(self, runner, manifest_file, fake_client):
        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "-s", "connectors", "-y"]
        )

        assert result.exit_code == 0, result.output
        assert [c[1] for c in fake_client.install_calls] == ["ServiceConnector"]
        assert fake_client.install_calls[0][3] == "3.4.0"

    def test_partial_failure_still_exits_zero(self, runner, manifest_file, fake_client):
        fake_client.install_errors["Bulk.Users"] = "No match was found"

        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "--profile", "everything", "-y"]
        )

        assert result.exit_code == 0
        assert "Failed modules:" in result.output
        assert "Bulk.Users: No match was found" in result.output
        assert "5 succeeded, 1 failed" in result.output

    def test_force_flags_untrusted_as_possibly_spurious(
        self, runner, manifest_file, fake_client
    ):
        fake_client.install_errors["Toolkit"] = "untrusted repository"

        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "-s", "tools", "--force", "-y"]
        )

        assert result.exit_code == 0
        assert "Toolkit (may be a false failure)" in result.output

    def test_dry_run_installs_nothing(self, runner, manifest_file, fake_client):
        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "-p", "everything", "--dry-run"]
        )

        assert result.exit_code == 0
        assert "[DRY-RUN]" in result.output
        assert fake_client.calls == []

    def test_declined_confirmation(self, runner, manifest_file, fake_client):
        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "-p", "small"], input="n\n"
        )

        assert result.exit_code == 0
        assert "Installation cancelled." in result.output
        assert fake_client.calls == []

    def test_declining_between_batches_reports_partial_run(
        self, runner, manifest_file, fake_client
    ):
        fake_client.install_errors["Editor"] = "No match was found"

        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "-p", "everything"], input="y\nn\n"
        )

        assert result.exit_code == 0, result.output
        assert "Stopped before bulk-essential" in result.output
        assert "Total: 2 module(s), 1 succeeded, 1 failed" in result.output
        assert "Editor: No match was found" in result.output
        assert [c[1] for c in fake_client.install_calls] == ["Toolkit", "Editor"]

    def test_batch_delay_pauses_between_sub_batches(
        self, runner, manifest_file, fake_client, mocker
    ):
        sleep = mocker.patch("batchinstall.commands.install.asyncio.sleep")

        result = runner.invoke(
            cli,
            ["install", "-c", str(manifest_file), "-p", "everything", "-y", "--batch-delay", "2"],
        )

        assert result.exit_code == 0, result.output
        # three batch boundaries plus one bulk-remainder sub-batch boundary
        assert sleep.call_count == 4

    def test_missing_manifest_exits_one(self, runner, temp_dir, fake_client):
        result = runner.invoke(
            cli, ["install", "-c", str(temp_dir / "absent.json"), "-y"]
        )

        assert result.exit_code == 1
        assert "Error: Manifest file not found" in result.output

    def test_invalid_manifest_exits_one(self, runner, temp_dir, fake_client):
        path = temp_dir / "broken.json"
        path.write_text('{"services": {')

        result = runner.invoke(cli, ["install", "-c", str(path), "-y"])

        assert result.exit_code == 1
        assert "syntax error" in result.output

    def test_unknown_profile_exits_one(self, runner, manifest_file, fake_client):
        result = runner.invoke(
            cli, ["install", "-c", str(manifest_file), "-p", "nope", "-y"]
        )

        assert result.exit_code == 1
        assert "Profile 'nope' not found" in result.output
        assert fake_client.calls == []

    def test_config_from_environment(self, runner, manifest_file, fake_client, monkeypatch):
        monkeypatch.setenv("BATCHINSTALL_CONFIG", str(manifest_file))

        result = runner.invoke(cli, ["install", "-p", "small", "-y"])

        assert result.exit_code == 0, result.output
        assert {c[1] for c in fake_client.install_calls} == {"Toolkit", "Editor"}


class TestPlanCommand:
    def test_plan_shows_batches(self, runner, manifest_file):
        result = runner.invoke(cli, ["plan", "-c", str(manifest_file), "-p", "everything"])

        assert result.exit_code == 0
        assert "1. core: 2 module(s)" in result.output
        assert "3. bulk-remainder: 2 module(s)" in result.output
        assert "Total modules: 6" in result.output

    def test_plan_nothing_selected(self, runner, temp_dir):
        path = temp_dir / "m.json"
        path.write_text('{"services": {"s": {"enabled": false, "modules": {"A": "1.0"}}}}')

        result = runner.invoke(cli, ["plan", "-c", str(path)])

        assert result.exit_code == 0
        assert "Nothing to install" in result.output


class TestListCommand:
    def test_list(self, runner, manifest_file):
        result = runner.invoke(cli, ["list", "-c", str(manifest_file)])

        assert result.exit_code == 0
        assert "tools" in result.output
        assert "everything" in result.output

    def test_list_verbose(self, runner, manifest_file):
        result = runner.invoke(cli, ["list", "-c", str(manifest_file), "-v"])

        assert result.exit_code == 0
        assert "• ServiceConnector (3.4.0)" in result.output
        assert "services: tools, bulk, connectors" in result.output


class TestConfigCommands:
    def test_fmt_stdout(self, runner, temp_dir):
        path = temp_dir / "m.json"
        path.write_text('{\n  // comment\n  "services": {},\n}')

        result = runner.invoke(cli, ["config", "fmt", str(path)])

        assert result.exit_code == 0
        assert "//" not in result.output
        assert json.loads(result.output) == {"services": {}}

    def test_fmt_write(self, runner, temp_dir):
        path = temp_dir / "m.json"
        path.write_text('{"services": {},}')

        result = runner.invoke(cli, ["config", "fmt", str(path), "--write"])

        assert result.exit_code == 0
        assert "Formatted" in result.output
        assert json.loads(path.read_text()) == {"services": {}}

    def test_fmt_missing_file(self, runner, temp_dir):
        result = runner.invoke(cli, ["config", "fmt", str(temp_dir / "nope.json")])

        assert result.exit_code == 1

    def test_init_creates_and_refuses_overwrite(self, runner, temp_dir, mocker):
        target = temp_dir / "cfg" / "manifest.json"
        mocker.patch(
            "batchinstall.commands.config.init.get_user_manifest_path", return_value=target
        )

        first = runner.invoke(cli, ["config", "init"])
        second = runner.invoke(cli, ["config", "init"])
        forced = runner.invoke(cli, ["config", "init", "--force"])

        assert first.exit_code == 0
        assert target.exists()
        assert second.exit_code == 1
        assert "already exists" in second.output
        assert forced.exit_code == 0
        assert target.with_suffix(".json.bak").exists()
