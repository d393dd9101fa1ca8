"""Tests for the command line entry point."""

import pytest
from unittest.mock import patch
import sys
import types
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import main
from config import settings

CALLS = []


def register(scheduler):
    scheduler.schedule(lambda: CALLS.append("ran")).name("record")
    scheduler.schedule(lambda: None, "0 0 1 1 *").name("new year").description("Yearly rollover")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "lock_dir", str(tmp_path / "tmp"))
    monkeypatch.setattr(settings, "environment", "development")
    monkeypatch.setattr(settings, "log_file", None)
    CALLS.clear()


@pytest.fixture
def schedule_module(monkeypatch):
    module = types.ModuleType("cronguard_test_schedule")
    module.register = register
    monkeypatch.setitem(sys.modules, "cronguard_test_schedule", module)
    return "cronguard_test_schedule:register"


class TestMain:
    """Test CLI sub-commands."""

    def test_load_registrar(self, schedule_module):
        assert main.load_registrar(schedule_module) is register

    def test_load_registrar_bad_target(self):
        with pytest.raises(ValueError):
            main.load_registrar("no_colon_here")

    def test_run(self, schedule_module):
        assert main.main(["run", "--schedule", schedule_module]) == 0
        assert CALLS == ["ran"]

    def test_run_without_schedule(self):
        assert main.main(["run"]) == 0

    def test_list(self, schedule_module, capsys):
        assert main.main(["list", "--schedule", schedule_module]) == 0
        out = capsys.readouterr().out
        assert "[0] record" in out
        assert "0 0 1 1 * (Yearly on January 1st at midnight)" in out
        assert "Yearly rollover" in out
        assert CALLS == []

    def test_env_override(self, schedule_module):
        main.main(["run", "--schedule", schedule_module, "--env", "production"])
        assert settings.environment == "production"

    def test_clear_locks(self, schedule_module, capsys):
        (Path(settings.lock_dir)).mkdir(parents=True)
        (Path(settings.lock_dir) / "abc.lock").write_text("1")
        assert main.main(["clear-locks", "--schedule", schedule_module]) == 0
        assert "Removed 1 lock marker(s)" in capsys.readouterr().out

    def test_work_uses_minute_trigger(self, schedule_module):
        with patch("main.BlockingScheduler") as MockScheduler:
            assert main.main(["work", "--schedule", schedule_module]) == 0

        worker = MockScheduler.return_value
        worker.add_job.assert_called_once()
        trigger = worker.add_job.call_args[1]["trigger"]
        assert str(trigger.fields[-1]) == "0"  # second field
        worker.start.assert_called_once()

    def test_fatal_error_returns_one(self):
        assert main.main(["run", "--schedule", "module_that_does_not_exist:register"]) == 1
