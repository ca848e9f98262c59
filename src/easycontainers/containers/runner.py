"""Command runner with hard timeouts.

Every external operation of the container lifecycle goes through
CommandRunner.run, which races the process against its timeout and turns
non-zero exits and timeouts into typed errors.
"""

from __future__ import annotations

import os
import signal
import subprocess
import time
from typing import TYPE_CHECKING

from easycontainers.core.errors import CommandFailed, CommandTimedOut
from easycontainers.core.utils import logger
from easycontainers.types.container import CommandExecution

if TYPE_CHECKING:
    from collections.abc import Sequence

DEFAULT_MAX_OUTPUT_CHARS = 64_000

# Grace period for reaping a killed process group
_KILL_WAIT_SEC = 5


def _tail(text: str | None, limit: int) -> str:
    """Keep the last `limit` characters of captured output."""
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return "... (truncated)\n" + text[-limit:]


class CommandRunner:
    """Runs external commands with a timeout, keeping the tail of their output.

    Output is read in full while the command runs and cut down afterward, so
    `max_output_chars` bounds what a CommandExecution or CommandFailed
    carries, not the memory used by a chatty command. Bytes that are not
    valid UTF-8 are decoded as U+FFFD.

    Args:
        max_output_chars: Maximum characters kept per captured stream.
            Older output is dropped first.
    """

    def __init__(self, *, max_output_chars: int = DEFAULT_MAX_OUTPUT_CHARS) -> None:
        self.max_output_chars = max_output_chars

    def run(self, args: Sequence[str], *, timeout: float) -> CommandExecution:
        """Run a command and wait at most `timeout` seconds for it.

        The command runs in its own session so that on timeout the whole
        process group (including shells and their children) is killed.

        Args:
            args: Command and arguments.
            timeout: Timeout in seconds.

        Returns:
            CommandExecution with the captured output.

        Raises:
            CommandTimedOut: If the command did not finish within `timeout`.
            CommandFailed: If the command exited non-zero or could not be started.
        """
        cmd = list(args)
        logger.debug(f"Running command (timeout {timeout}s): {' '.join(cmd)}")
        start_time = time.monotonic()

        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                start_new_session=True,
            )
        except FileNotFoundError as e:
            raise CommandFailed(command=cmd, returncode=127, output=str(e)) from e

        try:
            stdout, stderr = proc.communicate(timeout=timeout)
        except subprocess.TimeoutExpired as e:
            self._kill(proc)
            raise CommandTimedOut(command=cmd, timeout=timeout) from e

        execution = CommandExecution(
            command=cmd,
            returncode=proc.returncode,
            stdout=_tail(stdout, self.max_output_chars),
            stderr=_tail(stderr, self.max_output_chars),
            duration_sec=time.monotonic() - start_time,
        )
        if not execution.success:
            raise CommandFailed(command=cmd, returncode=execution.returncode, output=execution.output)
        return execution

    @staticmethod
    def _kill(proc: subprocess.Popen) -> None:
        """Kill the process group of a timed out command and reap it."""
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
        try:
            proc.communicate(timeout=_KILL_WAIT_SEC)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process {proc.pid} did not exit after SIGKILL")


__all__ = ["DEFAULT_MAX_OUTPUT_CHARS", "CommandRunner"]
