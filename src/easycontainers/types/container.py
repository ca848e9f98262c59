"""Container-related type definitions for easycontainers."""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path  # noqa: TC003 - Path is used at runtime by pydantic

from pydantic import BaseModel, ConfigDict, Field

# Namespace prefix for every container and temp file created by this package
NAME_PREFIX = "easycontainers-"


class ContainerLifecycleState(StrEnum):
    """State of a container handle.

    Every non-terminal state can move to FAILED. TERMINATED and FAILED are terminal.
    """

    CREATED = "created"
    LAUNCHING = "launching"
    SEEDING_DATA = "seeding_data"
    AWAITING_READY = "awaiting_ready"
    READY = "ready"
    RUNNING = "running"
    CLEANING_UP = "cleaning_up"
    TERMINATED = "terminated"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """True for TERMINATED and FAILED."""
        return self in (ContainerLifecycleState.TERMINATED, ContainerLifecycleState.FAILED)


class ContainerIdentity(BaseModel):
    """Name and host port of one ephemeral container.

    Attributes:
        name: Container name, always starting with NAME_PREFIX.
        port: Host port published to the service's internal port.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Container name, carries the namespace prefix")
    port: int = Field(gt=0, le=65535, description="Host port published to the service port")


class InitializationPayload(BaseModel):
    """Seed data run against the service at startup.

    Attributes:
        path: Optional file whose contents are seeded first.
        query: Optional literal statements seeded after the file.
    """

    model_config = ConfigDict(frozen=True)

    path: Path | None = Field(default=None, description="File with statements to seed first")
    query: str | None = Field(default=None, description="Literal statements seeded after the file")

    @property
    def is_empty(self) -> bool:
        """True when neither a file nor a query is configured."""
        return not self.path and not self.query


class CommandExecution(BaseModel):
    """Result of one successful external command.

    Attributes:
        command: Argument list that was executed.
        returncode: Exit code of the command.
        stdout: Captured standard output (tail, bounded).
        stderr: Captured standard error (tail, bounded).
        duration_sec: Wall-clock time the command took.
    """

    model_config = ConfigDict(frozen=True)

    command: list[str] = Field(description="Argument list that was executed")
    returncode: int = Field(default=0, description="Exit code of the command (0 indicates success)")
    stdout: str = Field(default="", description="Captured standard output")
    stderr: str = Field(default="", description="Captured standard error")
    duration_sec: float = Field(default=0.0, description="Wall-clock duration of the command")

    @property
    def success(self) -> bool:
        """Check if command executed successfully (returncode == 0)."""
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr."""
        if self.stdout and self.stderr:
            return f"{self.stdout}\n{self.stderr}"
        return self.stdout or self.stderr


__all__ = [
    "NAME_PREFIX",
    "CommandExecution",
    "ContainerIdentity",
    "ContainerLifecycleState",
    "InitializationPayload",
]
