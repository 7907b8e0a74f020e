"""Tests for running a command with secrets in its environment."""
import io
import subprocess
import sys

import pytest

from sm_action.secrets.domains.errors import CommandFailed, SpawnFailed
from sm_action.secrets.workflows import run_command
from sm_action.secrets.workflows.run_command import execute_run_command, get_shell

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh syntax")


@posix_only
class TestExecuteRunCommand:
    """Test suite for run mode against a real shell."""

    def test_execute_run_command_success(self):
        """Test that a simple command succeeds."""
        env_vars = {"SECRET1": "value1", "SECRET2": "value2"}
        execute_run_command("echo 'Hello World'", env_vars)

    def test_execute_run_command_failure(self):
        """Test that a non-zero exit raises CommandFailed with the status."""
        with pytest.raises(CommandFailed) as exc_info:
            execute_run_command("exit 1", {})

        assert exc_info.value.returncode == 1
        assert "Commands exited with non-zero status" in str(exc_info.value)

    def test_exit_code_is_preserved(self):
        """Test that the child's exact exit status is reported."""
        with pytest.raises(CommandFailed) as exc_info:
            execute_run_command("exit 42", {})

        assert exc_info.value.returncode == 42

    def test_secrets_are_in_child_environment(self):
        """Test that secrets reach the child as environment variables."""
        execute_run_command('test "$SECRET1" = "value1" && test "$SECRET2" = "a b"', {"SECRET1": "value1", "SECRET2": "a b"})

    def test_parent_environment_is_inherited(self, monkeypatch):
        """Test that secrets are merged into, not substituted for, the parent environment."""
        monkeypatch.setenv("PARENT_ONLY", "inherited")
        execute_run_command('test "$PARENT_ONLY" = "inherited" && test "$SECRET1" = "v"', {"SECRET1": "v"})

    def test_secret_overrides_inherited_variable(self, monkeypatch):
        """Test that a secret wins over an inherited variable of the same name."""
        monkeypatch.setenv("SHARED_NAME", "from-parent")
        execute_run_command('test "$SHARED_NAME" = "from-secret"', {"SHARED_NAME": "from-secret"})

    def test_shell_operators_work(self, tmp_path):
        """Test that the command is interpreted by the shell, not tokenized."""
        target = tmp_path / "out.txt"
        execute_run_command(f"echo one > '{target}' && echo two >> '{target}'", {})
        assert target.read_text() == "one\ntwo\n"

    def test_multiline_secret_reaches_child(self, tmp_path):
        """Test that multi-line values are passed intact."""
        target = tmp_path / "value.txt"
        execute_run_command(f"printf '%s' \"$MULTI\" > '{target}'", {"MULTI": "a\nb=c"})
        assert target.read_text() == "a\nb=c"


class TestRunCommandNoOp:
    """Test suite for empty commands."""

    @pytest.mark.parametrize("command", ["", "   ", "\n\t"])
    def test_execute_run_command_empty_command(self, command, monkeypatch):
        """Test that empty commands succeed without spawning anything."""
        def fail_run(*args, **kwargs):
            raise AssertionError("subprocess.run should not be called")

        monkeypatch.setattr(run_command.subprocess, "run", fail_run)
        execute_run_command(command, {"SECRET": "value"}, mask=True)


class TestSpawnAndMasking:
    """Test suite for spawn errors and run mode masking."""

    def test_spawn_failure(self, monkeypatch):
        """Test that an unstartable shell raises SpawnFailed with the cause."""
        monkeypatch.setattr(run_command, "get_shell", lambda: ["/nonexistent/shell", "-c"])

        with pytest.raises(SpawnFailed) as exc_info:
            execute_run_command("echo hi", {})

        assert isinstance(exc_info.value.cause, OSError)
        assert "Failed to execute commands" in str(exc_info.value)

    @posix_only
    @pytest.mark.parametrize("secret_envs", [
        {"A=B": "v"},
        {"A": "v\x00x"},
    ])
    def test_rejected_environment_is_spawn_failure(self, secret_envs):
        """Test that an environment the OS cannot accept raises SpawnFailed."""
        with pytest.raises(SpawnFailed) as exc_info:
            execute_run_command("true", secret_envs)

        assert isinstance(exc_info.value.cause, ValueError)

    def test_command_passed_as_single_argument(self, monkeypatch):
        """Test the argv handed to subprocess and the merged environment."""
        captured = {}

        def fake_run(argv, env=None, check=None):
            captured["argv"] = argv
            captured["env"] = env
            return subprocess.CompletedProcess(argv, 0)

        monkeypatch.setattr(run_command.subprocess, "run", fake_run)
        monkeypatch.setenv("INHERITED", "yes")

        execute_run_command("echo a | grep a; echo b", {"SECRET": "s"})

        assert captured["argv"] == get_shell() + ["echo a | grep a; echo b"]
        assert captured["env"]["SECRET"] == "s"
        assert captured["env"]["INHERITED"] == "yes"

    def test_no_mask_commands_by_default(self, monkeypatch):
        """Test that run mode emits no mask commands unless asked to."""
        monkeypatch.setattr(
            run_command.subprocess, "run",
            lambda argv, env=None, check=None: subprocess.CompletedProcess(argv, 0),
        )
        stream = io.StringIO()

        execute_run_command("true", {"SECRET": "value"}, stream=stream)

        assert stream.getvalue() == ""

    def test_mask_option_masks_before_spawn(self, monkeypatch):
        """Test that mask=True masks every value before the child starts."""
        stream = io.StringIO()
        seen_at_spawn = {}

        def fake_run(argv, env=None, check=None):
            seen_at_spawn["output"] = stream.getvalue()
            return subprocess.CompletedProcess(argv, 0)

        monkeypatch.setattr(run_command.subprocess, "run", fake_run)

        execute_run_command("true", {"ONE": "v1", "TWO": "v2"}, mask=True, stream=stream)

        assert seen_at_spawn["output"] == "::add-mask::v1\n::add-mask::v2\n"

    def test_windows_uses_powershell(self, monkeypatch):
        """Test shell selection on Windows."""
        monkeypatch.setattr(run_command.sys, "platform", "win32")
        assert get_shell() == ["powershell", "-Command"]

    def test_posix_uses_sh(self, monkeypatch):
        """Test shell selection on POSIX systems."""
        monkeypatch.setattr(run_command.sys, "platform", "linux")
        assert get_shell() == ["/bin/sh", "-c"]
