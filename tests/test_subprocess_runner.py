"""
Tests for the subprocess runner — ``subprocess.run`` is patched.
"""

import subprocess
from unittest.mock import patch

from alistctl.core.execution.subprocess_runner import run_command


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(["x"], returncode, stdout=stdout, stderr=stderr)


class TestRunCommand:
    @patch("alistctl.core.execution.subprocess_runner.subprocess.run")
    def test_success(self, mock_run):
        mock_run.return_value = _completed(stdout="active\n")
        result = run_command(["systemctl", "is-active", "alist-backup"])
        assert result["ok"] is True
        assert result["stdout"] == "active\n"
        assert result["returncode"] == 0
        assert "elapsed_ms" in result

    @patch("alistctl.core.execution.subprocess_runner.subprocess.run")
    def test_failure_uses_stderr(self, mock_run):
        mock_run.return_value = _completed(returncode=5, stderr="Unit not found.\n")
        result = run_command(["systemctl", "start", "alist-backup"])
        assert result["ok"] is False
        assert result["returncode"] == 5
        assert result["error"] == "Unit not found."

    @patch("alistctl.core.execution.subprocess_runner.subprocess.run")
    def test_failure_without_stderr(self, mock_run):
        mock_run.return_value = _completed(returncode=3)
        result = run_command(["systemctl", "is-active", "--quiet", "alist-backup"])
        assert result["error"] == "Command failed (exit 3)"

    @patch("alistctl.core.execution.subprocess_runner.subprocess.run")
    def test_merge_stderr_and_cwd(self, mock_run):
        mock_run.return_value = _completed(stdout="username: admin\n")
        run_command(["./alist", "admin", "random"], cwd="/opt/alist-backup", merge_stderr=True)
        kwargs = mock_run.call_args.kwargs
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["cwd"] == "/opt/alist-backup"

    @patch("alistctl.core.execution.subprocess_runner.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["systemctl"], 60)
        result = run_command(["systemctl", "restart", "alist-backup"], timeout=60)
        assert result["ok"] is False
        assert "timed out" in result["error"]

    @patch("alistctl.core.execution.subprocess_runner.subprocess.run")
    def test_missing_program(self, mock_run):
        mock_run.side_effect = FileNotFoundError("No such file or directory: 'systemctl'")
        result = run_command(["systemctl", "daemon-reload"])
        assert result["ok"] is False
        assert "No such file" in result["error"]
