"""Exception types raised by easycontainers.

Every error is a RuntimeError subclass so callers that only care about
"something went wrong starting the container" can catch RuntimeError.
"""

from __future__ import annotations

from collections.abc import Sequence

LOGS_BANNER = " -- CONTAINER LOGS -- "


class EasyContainersError(RuntimeError):
    """Base class for all easycontainers errors."""


# --- Command runner ---


class CommandError(EasyContainersError):
    """An external command did not complete successfully.

    Attributes:
        command: The argument list that was executed.
    """

    def __init__(self, message: str, *, command: Sequence[str]) -> None:
        super().__init__(message)
        self.command = list(command)


class CommandFailed(CommandError):
    """An external command exited with a non-zero status.

    Attributes:
        returncode: Exit status of the command.
        output: Captured stdout and stderr, combined.
    """

    def __init__(self, *, command: Sequence[str], returncode: int, output: str) -> None:
        super().__init__(
            f"error in command: {' '.join(command)} (exit code {returncode}) -- {output.strip()}",
            command=command,
        )
        self.returncode = returncode
        self.output = output


class CommandTimedOut(CommandError):
    """An external command did not finish within its timeout.

    Attributes:
        timeout: The timeout in seconds that was exceeded.
    """

    def __init__(self, *, command: Sequence[str], timeout: float) -> None:
        super().__init__(f"command timed out after {timeout}s: {' '.join(command)}", command=command)
        self.timeout = timeout


# --- Port allocation ---


class PortAllocationError(EasyContainersError):
    """The OS refused to hand out an ephemeral port."""


class PortAllocationExhausted(PortAllocationError):
    """Every port offered by the OS had already been allocated."""


# --- Container lifecycle ---


class LifecycleStepError(EasyContainersError):
    """A step of the container lifecycle failed.

    Attributes:
        container_name: Name of the container the step ran against.
        logs: Container log output captured after the failure, if any.
    """

    def __init__(self, message: str, *, container_name: str, logs: str = "") -> None:
        if logs:
            message = f"{message}\n\n{LOGS_BANNER}\n\n{logs}"
        super().__init__(message)
        self.container_name = container_name
        self.logs = logs


class LaunchFailed(LifecycleStepError):
    """The container could not be started."""


class SeedWriteFailed(LifecycleStepError):
    """The seed script could not be read or written to a temp file."""


class SeedCopyFailed(LifecycleStepError):
    """The seed script could not be copied into the container."""


class ReadinessTimeout(LifecycleStepError):
    """The ready marker was not observed before the step timeout."""


class CleanupFailed(LifecycleStepError):
    """The container could not be stopped. Only ever logged."""


__all__ = [
    "LOGS_BANNER",
    "CleanupFailed",
    "CommandError",
    "CommandFailed",
    "CommandTimedOut",
    "EasyContainersError",
    "LaunchFailed",
    "LifecycleStepError",
    "PortAllocationError",
    "PortAllocationExhausted",
    "ReadinessTimeout",
    "SeedCopyFailed",
    "SeedWriteFailed",
]
