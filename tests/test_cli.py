"""
Tests for CLI commands — argument handling, exit codes and wiring.
"""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from conftest import FakeHost, copying_downloader, make_release

from alistctl.core.errors import DownloadFailed, MissingDependency
from alistctl.core.services.archive_install import install_archive
from alistctl.core.services.systemd_service import ServiceRegistrar
from alistctl.main import cli
from alistctl.ui.cli import actions


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Config file pointing every host path into tmp_path, plus a FakeHost."""
    cfg = tmp_path / "config.yml"
    cfg.write_text(
        f"default_install_path: {tmp_path}/opt/alist-backup\n"
        f"unit_dir: {tmp_path}/systemd\n"
        f"manager_path: {tmp_path}/sbin/alist-backup-manager\n"
        f"command_link: {tmp_path}/bin/alist-backup\n"
        "log_file: null\n"
    )
    monkeypatch.setenv("ALISTCTL_CONFIG", str(cfg))
    monkeypatch.setenv("ALISTCTL_LOG_FILE", "")
    host = FakeHost()

    def _registrar(config, run=None):
        return ServiceRegistrar(config.service_name, config.unit_dir, run=host)

    with patch("alistctl.main.registrar_for", side_effect=_registrar), \
         patch("alistctl.main.run_command", host), \
         patch("alistctl.ui.cli.actions.preflight"), \
         patch("alistctl.core.services.platform_detect.host_machine", return_value="x86_64"):
        yield tmp_path, host


def _make_installed(tmp_path):
    install = tmp_path / "opt" / "alist-backup"
    install.mkdir(parents=True)
    (install / "alist").write_bytes(b"bin")
    return install


class TestCLIGlobal:
    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Alist Backup manager" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_unknown_command_exits_1(self, env):
        result = CliRunner().invoke(cli, ["reinstall"])
        assert result.exit_code == 1
        assert "Usage" in result.output

    @pytest.mark.parametrize("command", ["update", "uninstall"])
    def test_extra_path_argument_rejected(self, env, command):
        result = CliRunner().invoke(cli, [command, "/data"])
        assert result.exit_code == 1

    def test_missing_config_file(self, tmp_path):
        result = CliRunner().invoke(cli, ["--config", str(tmp_path / "nope.yml"), "status"])
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestProxyOption:
    def test_bad_proxy_rejected(self, env):
        result = CliRunner().invoke(cli, ["install", "--proxy", "http://mirror/"])
        assert result.exit_code == 1
        assert "https://" in result.output


class TestServiceCommands:
    def test_status_not_installed(self, env):
        result = CliRunner().invoke(cli, ["status"])
        assert result.exit_code == 1
        assert "not installed" in result.output

    def test_start_then_status(self, env):
        tmp_path, host = env
        _make_installed(tmp_path)
        runner = CliRunner()
        assert runner.invoke(cli, ["start"]).exit_code == 0
        result = runner.invoke(cli, ["status", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["state"] == "running"
        assert data["installed"] is True
        assert data["unit"]["active"] is True
        assert data["unit"]["sub_state"] == "running"

    def test_stop_failure_is_warning(self, env):
        tmp_path, host = env
        _make_installed(tmp_path)
        host.fail.add("stop")
        result = CliRunner().invoke(cli, ["stop"])
        assert result.exit_code == 0
        assert "Failed to stop" in result.output

    def test_restart_failure_is_fatal(self, env):
        tmp_path, host = env
        _make_installed(tmp_path)
        host.fail.add("restart")
        result = CliRunner().invoke(cli, ["restart"])
        assert result.exit_code == 1


class TestPasswordCommands:
    def test_random(self, env):
        tmp_path, host = env
        _make_installed(tmp_path)
        result = CliRunner().invoke(cli, ["password", "random"])
        assert result.exit_code == 0
        assert "admin" in result.output
        assert "s3cret" in result.output
        assert host.active

    def test_set_empty_rejected(self, env):
        tmp_path, host = env
        _make_installed(tmp_path)
        result = CliRunner().invoke(cli, ["password", "set", ""])
        assert result.exit_code == 1
        assert "cannot be empty" in result.output


class TestUninstallCommand:
    def test_declined(self, env):
        tmp_path, host = env
        install = _make_installed(tmp_path)
        result = CliRunner().invoke(cli, ["uninstall"], input="n\n")
        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert install.exists()

    def test_confirmed(self, env):
        tmp_path, host = env
        install = _make_installed(tmp_path)
        result = CliRunner().invoke(cli, ["uninstall", "--yes"])
        assert result.exit_code == 0
        assert not install.exists()


class TestUpdateCommand:
    def test_failed_update_exits_1_and_keeps_service(self, env):
        tmp_path, host = env
        install = _make_installed(tmp_path)
        host.active = True

        with patch(
            "alistctl.core.use_cases.installation.install_archive",
            side_effect=DownloadFailed("Download failed after 3 attempts"),
        ):
            result = CliRunner().invoke(cli, ["update"])

        assert result.exit_code == 1
        assert (install / "alist").read_bytes() == b"bin"
        assert host.active


class TestMenuEntry:
    def test_no_args_opens_menu(self, env):
        result = CliRunner().invoke(cli, [], input="0\n")
        assert result.exit_code == 0
        assert "Alist Backup Manager" in result.output

    def test_invalid_choice_then_exit(self, env):
        with patch("alistctl.ui.cli.menu.time.sleep"):
            result = CliRunner().invoke(cli, [], input="99\n0\n")
        assert result.exit_code == 0
        assert "Invalid option" in result.output


class TestPreflight:
    def test_requires_systemd(self):
        with patch("alistctl.ui.cli.actions.require_root"), \
             patch("alistctl.ui.cli.actions.detect_init_system", return_value="openrc"):
            with pytest.raises(MissingDependency, match="openrc"):
                actions.preflight("install")

    def test_systemd_host_passes(self):
        with patch("alistctl.ui.cli.actions.require_root") as mock_root, \
             patch("alistctl.ui.cli.actions.detect_init_system", return_value="systemd"), \
             patch("alistctl.ui.cli.actions.require_commands") as mock_commands:
            actions.preflight("update")
        mock_root.assert_called_once_with("update")
        mock_commands.assert_called_once_with(["systemctl"])


@pytest.fixture
def local_release(tmp_path):
    """Route install_archive downloads to a local release archive."""
    release = make_release(tmp_path / "release.tar.gz", {"alist": b"#!/bin/sh\necho new\n"})

    def _install_archive(url, install_dir, binary_name="alist", **kwargs):
        kwargs["downloader"] = copying_downloader(release)
        return install_archive(url, install_dir, binary_name, **kwargs)

    with patch("alistctl.core.use_cases.installation.install_archive",
               side_effect=_install_archive), \
         patch("alistctl.core.use_cases.installation.check_port_free"), \
         patch("alistctl.ui.cli.actions.lan_address", return_value="192.168.1.20"), \
         patch("alistctl.ui.cli.actions.public_address", return_value="203.0.113.7"):
        yield release


class TestInstallCommand:
    def test_install_into_path(self, env, local_release):
        tmp_path, host = env
        result = CliRunner().invoke(cli, ["install", str(tmp_path / "data")])

        assert result.exit_code == 0, result.output
        install_dir = tmp_path / "data" / "alist-backup"
        assert (install_dir / "alist").is_file()
        assert "installed successfully" in result.output
        assert "Username: admin" in result.output
        assert "Password: s3cret" in result.output
        assert "http://192.168.1.20:5244/" in result.output
        assert host.enabled and host.active
        unit = (tmp_path / "systemd" / "alist-backup.service").read_text()
        assert f"WorkingDirectory={install_dir}\n" in unit

    def test_relative_path_is_made_absolute(self, env, local_release, monkeypatch):
        tmp_path, host = env
        monkeypatch.chdir(tmp_path)
        result = CliRunner().invoke(cli, ["install", "rel"])

        assert result.exit_code == 0, result.output
        unit = (tmp_path / "systemd" / "alist-backup.service").read_text()
        assert f"WorkingDirectory={tmp_path / 'rel' / 'alist-backup'}\n" in unit

    def test_already_installed_exits_0(self, env, local_release):
        tmp_path, host = env
        install_dir = tmp_path / "data" / "alist-backup"
        install_dir.mkdir(parents=True)
        (install_dir / "alist").write_bytes(b"old")

        result = CliRunner().invoke(cli, ["install", str(tmp_path / "data")])

        assert result.exit_code == 0
        assert "Already installed" in result.output
        assert (install_dir / "alist").read_bytes() == b"old"
        assert host.calls == []
