"""Tests for the shell command dispatcher."""

import subprocess
import pytest
from unittest.mock import Mock, patch
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from executors import ShellDispatcher, ExecutionResult
from scheduler import CommandFailed


class TestShellDispatcher:
    """Test running console commands."""

    def test_build_command_quotes_args(self):
        dispatcher = ShellDispatcher()
        assert dispatcher.build_command("echo", ["a b", "c"]) == "echo 'a b' c"
        assert dispatcher.build_command("ls") == "ls"

    def test_build_command_requires_command(self):
        with pytest.raises(ValueError):
            ShellDispatcher().build_command("")

    def test_call_success(self):
        dispatcher = ShellDispatcher(timeout=10)

        with patch("executors.shell_dispatcher.subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=0, stdout=b"done\n", stderr=b"")
            result = dispatcher.call("backup", ["--full"])

        assert isinstance(result, ExecutionResult)
        assert result.success is True
        assert result.stdout == "done\n"
        assert result.command == "backup --full"
        call_kwargs = mock_run.call_args[1]
        assert call_kwargs["shell"] is True
        assert call_kwargs["timeout"] == 10

    def test_call_failure_raises(self):
        dispatcher = ShellDispatcher()

        with patch("executors.shell_dispatcher.subprocess.run") as mock_run:
            mock_run.return_value = Mock(returncode=2, stdout=b"", stderr=b"no such file")
            with pytest.raises(CommandFailed) as exc_info:
                dispatcher.call("cat", ["missing.txt"])

        assert exc_info.value.exit_code == 2
        assert exc_info.value.stderr == "no such file"

    def test_call_timeout_raises(self):
        dispatcher = ShellDispatcher(timeout=1)

        with patch("executors.shell_dispatcher.subprocess.run",
                   side_effect=subprocess.TimeoutExpired("sleep 5", 1)):
            with pytest.raises(CommandFailed) as exc_info:
                dispatcher.call("sleep", ["5"])

        assert exc_info.value.exit_code is None

    def test_real_command(self):
        result = ShellDispatcher(timeout=10).call("echo", ["hello"])
        assert result.stdout.strip() == "hello"
        assert result.to_dict()["exit_code"] == 0

    def test_extra_environment(self):
        dispatcher = ShellDispatcher(env={"CRONGUARD_TEST_VALUE": "42"})
        result = dispatcher.call("echo $CRONGUARD_TEST_VALUE")
        assert result.stdout.strip() == "42"
