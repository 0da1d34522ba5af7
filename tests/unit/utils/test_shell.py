"""Unit tests for shell execution utilities.

run_process is exercised against short-lived Python child processes, so
no external tool is needed.
"""

import logging
import signal
import sys
import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from wingetctl.utils.shell import (
    ProcessOutput,
    _kill_tree,
    _popen_group_kwargs,
    command_exists,
    run_process,
)


# Starts a long sleeper that inherits stdout and stderr
_SPAWNS_SLEEPER = (
    "import subprocess, sys, time; "
    "subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(10)'])"
)


def _python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


class TestProcessOutput:
    """Tests for ProcessOutput properties."""

    def test_success(self) -> None:
        """Exit code 0 without timeout or cancel is a success."""
        output = ProcessOutput(args=("x",), stdout_lines=("a", "b"), returncode=0)
        assert output.success is True
        assert output.text == "a\nb"

    def test_failure_hides_partial_stdout(self) -> None:
        """A failed run never exposes parseable text."""
        output = ProcessOutput(args=("x",), stdout_lines=("Foo Foo.Bar 1.0",), returncode=1)
        assert output.success is False
        assert output.text == ""
        assert output.stdout == "Foo Foo.Bar 1.0"

    def test_timed_out_is_not_success(self) -> None:
        """A timed-out run is a failure even with exit code 0."""
        output = ProcessOutput(args=("x",), returncode=0, timed_out=True)
        assert output.success is False
        assert output.error_message == "Command timed out"

    def test_canceled_message(self) -> None:
        """Cancellation has its own message."""
        output = ProcessOutput(args=("x",), canceled=True, timed_out=True)
        assert output.error_message == "Operation canceled"

    def test_error_message_prefers_stderr(self) -> None:
        """stderr is the primary error text."""
        output = ProcessOutput(
            args=("x",), stdout_lines=("out",), stderr_lines=("boom",), returncode=2
        )
        assert output.error_message == "boom"

    def test_error_message_falls_back_to_last_stdout_line(self) -> None:
        """winget reports errors on stdout; the last non-blank line is used."""
        output = ProcessOutput(
            args=("x",),
            stdout_lines=("Installing...", "Installer failed with exit code: 1603", ""),
            returncode=1,
        )
        assert output.error_message == "Installer failed with exit code: 1603"

    def test_error_message_exit_code(self) -> None:
        """Without any output the exit code is reported."""
        output = ProcessOutput(args=("x",), returncode=3)
        assert output.error_message == "Command exited with code 3"


class TestRunProcess:
    """Tests for run_process."""

    def test_captures_stdout_lines(self) -> None:
        """stdout is captured line by line, in order."""
        output = run_process(_python("print('one'); print('two')"))

        assert output.success is True
        assert output.returncode == 0
        assert output.stdout_lines == ("one", "two")
        assert output.text == "one\ntwo"

    def test_captures_stderr_separately(self) -> None:
        """stderr goes to its own buffer."""
        output = run_process(
            _python("import sys; print('out'); print('err', file=sys.stderr)")
        )

        assert output.stdout_lines == ("out",)
        assert output.stderr_lines == ("err",)

    def test_nonzero_exit_returns_empty_text(self, caplog: pytest.LogCaptureFixture) -> None:
        """A non-zero exit yields no text and logs stderr."""
        code = "import sys; print('partial'); print('bad', file=sys.stderr); sys.exit(3)"
        with caplog.at_level(logging.ERROR, logger="wingetctl.utils.shell"):
            output = run_process(_python(code))

        assert output.returncode == 3
        assert output.success is False
        assert output.text == ""
        assert "bad" in caplog.text

    def test_utf8_output(self) -> None:
        """Output is decoded as UTF-8."""
        code = "import sys; sys.stdout.buffer.write('Versión ✓\\n'.encode('utf-8'))"
        output = run_process(_python(code))
        assert output.stdout_lines == ("Versión ✓",)

    def test_timeout_kills_process(self) -> None:
        """A process outliving the timeout is terminated."""
        start = time.monotonic()
        output = run_process(_python("import time; time.sleep(30)"), timeout=0.5)

        assert output.timed_out is True
        assert output.success is False
        assert output.text == ""
        assert time.monotonic() - start < 10

    def test_cancel_during_run(self) -> None:
        """Setting the cancel event stops the process."""
        cancel = threading.Event()
        timer = threading.Timer(0.3, cancel.set)
        timer.start()
        try:
            start = time.monotonic()
            output = run_process(_python("import time; time.sleep(30)"), cancel_event=cancel)
        finally:
            timer.cancel()

        assert output.canceled is True
        assert output.timed_out is False
        assert output.success is False
        assert time.monotonic() - start < 10

    def test_cancel_before_start_spawns_nothing(self) -> None:
        """A pre-set cancel event never launches the process."""
        cancel = threading.Event()
        cancel.set()

        with patch("wingetctl.utils.shell.subprocess.Popen") as mock_popen:
            output = run_process(["winget", "list"], cancel_event=cancel)

        mock_popen.assert_not_called()
        assert output.canceled is True
        assert output.args == ("winget", "list")

    def test_missing_executable(self) -> None:
        """Spawn failures become a failed result, not an exception."""
        output = run_process(["definitely-not-a-real-binary-xyz", "--version"])

        assert output.success is False
        assert output.returncode == -1
        assert output.text == ""
        assert output.stderr_lines

    def test_no_timeout(self) -> None:
        """timeout=None waits for the process to finish."""
        output = run_process(_python("print('done')"), timeout=None)
        assert output.text == "done"


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX process groups")
class TestProcessTree:
    """Tests for children that start processes of their own, like installers."""

    def test_timeout_kills_grandchild_holding_pipes(self) -> None:
        """The timeout holds even when a grandchild keeps stdout open."""
        start = time.monotonic()
        output = run_process(_python(_SPAWNS_SLEEPER + "; time.sleep(30)"), timeout=1.0)

        assert output.timed_out is True
        assert time.monotonic() - start < 5

    def test_cancel_kills_grandchild_holding_pipes(self) -> None:
        """Cancellation returns promptly with a grandchild still running."""
        cancel = threading.Event()
        timer = threading.Timer(0.5, cancel.set)
        timer.start()
        try:
            start = time.monotonic()
            output = run_process(
                _python(_SPAWNS_SLEEPER + "; time.sleep(30)"), cancel_event=cancel
            )
        finally:
            timer.cancel()

        assert output.canceled is True
        assert time.monotonic() - start < 5

    def test_exited_parent_with_lingering_grandchild(self) -> None:
        """A normal exit returns after the drain grace period, output intact."""
        start = time.monotonic()
        output = run_process(_python(_SPAWNS_SLEEPER + "; print('started')"), timeout=5.0)

        assert output.success is True
        assert "started" in output.stdout_lines
        assert time.monotonic() - start < 5

    def test_child_gets_own_session(self) -> None:
        """Children start in a new session so the whole tree can be signalled."""
        with patch("wingetctl.utils.shell._WINDOWS", False):
            assert _popen_group_kwargs() == {"start_new_session": True}


class TestKillTreeWindows:
    """Tests for the Windows tree kill."""

    def test_uses_taskkill_tree(self) -> None:
        """taskkill /T removes the child and its descendants."""
        process = MagicMock(pid=4242)
        with (
            patch("wingetctl.utils.shell._WINDOWS", True),
            patch("wingetctl.utils.shell.subprocess.run") as mock_run,
        ):
            _kill_tree(process, signal.SIGTERM)

        assert mock_run.call_args.args[0] == ["taskkill", "/F", "/T", "/PID", "4242"]


class TestCommandExists:
    """Tests for command_exists."""

    def test_existing_command(self) -> None:
        """The running interpreter exists."""
        assert command_exists(sys.executable) is True

    def test_missing_command(self) -> None:
        """An unknown name does not exist."""
        assert command_exists("definitely-not-a-real-binary-xyz") is False
