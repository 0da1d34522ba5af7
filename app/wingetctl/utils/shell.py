"""Shell execution utilities.

Provides subprocess execution with timeout, cooperative cancellation and
line-by-line output capture.
"""

from __future__ import annotations

import contextlib
import logging
import os
import shutil
import signal
import subprocess
import threading
import time
from dataclasses import dataclass
from typing import IO, Any

logger = logging.getLogger(__name__)

# Default bound on a single invocation, in seconds
DEFAULT_TIMEOUT = 10.0

_WINDOWS = os.name == "nt"

# Grace period between terminate() and kill(), and for draining pipes
_KILL_GRACE = 2.0

# Poll interval for exit/cancel/deadline checks
_POLL_INTERVAL = 0.05


@dataclass(frozen=True, slots=True)
class ProcessOutput:
    """Captured output of a single external process invocation.

    Attributes:
        args: Command line that was executed.
        stdout_lines: Standard output, one entry per line, in order.
        stderr_lines: Standard error, one entry per line, in order.
        returncode: Exit code, or -1 if the process could not be started.
        timed_out: True if the process was killed after the timeout.
        canceled: True if the process was killed on cancellation.
    """

    args: tuple[str, ...]
    stdout_lines: tuple[str, ...] = ()
    stderr_lines: tuple[str, ...] = ()
    returncode: int = -1
    timed_out: bool = False
    canceled: bool = False

    @property
    def success(self) -> bool:
        """Check if the process ran to completion with exit code 0."""
        return self.returncode == 0 and not self.timed_out and not self.canceled

    @property
    def stdout(self) -> str:
        """Return the raw captured stdout regardless of outcome."""
        return "\n".join(self.stdout_lines)

    @property
    def stderr(self) -> str:
        """Return the raw captured stderr regardless of outcome."""
        return "\n".join(self.stderr_lines)

    @property
    def text(self) -> str:
        """Return stdout for a successful run, empty text otherwise.

        A failed invocation never yields partial output that could be
        mistaken for a parseable answer.
        """
        return self.stdout if self.success else ""

    @property
    def error_message(self) -> str:
        """Return a human-readable reason for a failed run."""
        if self.canceled:
            return "Operation canceled"
        if self.timed_out:
            return "Command timed out"
        stderr = self.stderr.strip()
        if stderr:
            return stderr
        # winget reports most errors on stdout
        for line in reversed(self.stdout_lines):
            if line.strip():
                return line.strip()
        return f"Command exited with code {self.returncode}"


def _pump(stream: IO[str], sink: list[str]) -> None:
    """Append each line of a text stream to sink until EOF."""
    with contextlib.suppress(ValueError, OSError):
        for line in stream:
            sink.append(line.rstrip("\r\n"))


def _popen_group_kwargs() -> dict[str, Any]:
    """Start the child as the head of its own process group."""
    if _WINDOWS:
        return {"creationflags": subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}


def _kill_tree(process: subprocess.Popen[str], sig: int) -> None:
    """Send a signal to the child and everything it started."""
    if _WINDOWS:
        with contextlib.suppress(OSError, subprocess.SubprocessError):
            subprocess.run(
                ["taskkill", "/F", "/T", "/PID", str(process.pid)],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=_KILL_GRACE,
                check=False,
            )
        return
    # start_new_session made the child's pid the group id
    with contextlib.suppress(ProcessLookupError, PermissionError):
        os.killpg(process.pid, sig)


def _reap(process: subprocess.Popen[str]) -> None:
    """Terminate the process tree, escalating to kill()."""
    _kill_tree(process, signal.SIGTERM)
    try:
        process.wait(timeout=_KILL_GRACE)
    except subprocess.TimeoutExpired:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        process.wait()
    # Descendants that ignored SIGTERM
    if not _WINDOWS:
        _kill_tree(process, signal.SIGKILL)


def run_process(
    args: list[str],
    *,
    cancel_event: threading.Event | None = None,
    timeout: float | None = DEFAULT_TIMEOUT,
) -> ProcessOutput:
    """Run an external process, capturing stdout and stderr line by line.

    The call waits until the process exits, the cancel event is set, or the
    timeout elapses. In the last two cases the process is terminated and
    the result is flagged accordingly. Spawn failures are reported as a
    failed ProcessOutput instead of being raised.

    Args:
        args: Command and arguments to execute.
        cancel_event: Optional event; setting it aborts the invocation.
        timeout: Maximum time in seconds to wait. None waits forever.

    Returns:
        ProcessOutput describing the invocation.
    """
    command = tuple(args)
    logger.debug("Running %s", " ".join(command))

    if cancel_event is not None and cancel_event.is_set():
        return ProcessOutput(args=command, canceled=True)

    try:
        process = subprocess.Popen(
            args,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            **_popen_group_kwargs(),
        )
    except (FileNotFoundError, OSError) as e:
        logger.error("Failed to start %s: %s", command[0] if command else "<empty>", e)
        return ProcessOutput(args=command, stderr_lines=(str(e),))

    stdout_lines: list[str] = []
    stderr_lines: list[str] = []
    readers = [
        threading.Thread(target=_pump, args=(process.stdout, stdout_lines), daemon=True),
        threading.Thread(target=_pump, args=(process.stderr, stderr_lines), daemon=True),
    ]
    for reader in readers:
        reader.start()

    deadline = None if timeout is None else time.monotonic() + timeout
    timed_out = False
    canceled = False

    try:
        while process.poll() is None:
            if cancel_event is not None and cancel_event.wait(_POLL_INTERVAL):
                canceled = True
                break
            if cancel_event is None:
                time.sleep(_POLL_INTERVAL)
            if deadline is not None and time.monotonic() >= deadline:
                timed_out = True
                break
    finally:
        if canceled or timed_out or process.poll() is None:
            _reap(process)
        # A grandchild may still hold the pipes open; give up after the grace period
        drain_deadline = time.monotonic() + _KILL_GRACE
        for reader, stream in zip(readers, (process.stdout, process.stderr), strict=True):
            reader.join(timeout=max(0.0, drain_deadline - time.monotonic()))
            if reader.is_alive():
                logger.debug("Output of %s still open, leaving it to the reader", command[0])
            elif stream is not None:
                with contextlib.suppress(OSError):
                    stream.close()

    if canceled:
        logger.warning("Command canceled: %s", " ".join(command))
    elif timed_out:
        logger.warning("Command timed out after %.1fs: %s", timeout, " ".join(command))

    output = ProcessOutput(
        args=command,
        stdout_lines=tuple(stdout_lines),
        stderr_lines=tuple(stderr_lines),
        returncode=process.returncode if process.returncode is not None else -1,
        timed_out=timed_out,
        canceled=canceled,
    )

    if not output.success and not (canceled or timed_out):
        logger.error(
            "Command failed (exit %d): %s. Error: %s",
            output.returncode,
            " ".join(command),
            output.stderr.strip() or "<no stderr>",
        )

    return output


def command_exists(name: str) -> bool:
    """Check if a command exists in the system PATH.

    Args:
        name: Command name to check.

    Returns:
        True if command exists, False otherwise.
    """
    return shutil.which(name) is not None
