"""Container backend protocol definition.

Defines the interface for container operations that can be implemented
by different container runtimes (Docker, Podman, etc.).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from pathlib import Path


class ContainerBackend(Protocol):
    """Protocol for container backend implementations.

    Name filters are regular expressions matched against container names the
    way `docker ps --filter name=...` does. Use exact_name_filter() to match a
    single container and prefix_name_filter() to match a namespace.
    """

    def run(
        self,
        *,
        name: str,
        image: str,
        port_mappings: dict[int, int],
        env_vars: dict[str, str],
        timeout: float,
    ) -> None:
        """Run a detached, auto-removed container.

        Args:
            name: Container name.
            image: Image to run.
            port_mappings: Host port -> container port mappings.
            env_vars: Environment variables passed to the container.
            timeout: Timeout in seconds.

        Raises:
            CommandError: If the container fails to start.
        """
        ...

    def exec_in_container(self, *, name: str, command: str, timeout: float) -> str:
        """Run a shell command inside a running container.

        Args:
            name: Container name.
            command: Shell command text.
            timeout: Timeout in seconds.

        Returns:
            Combined output of the command.

        Raises:
            CommandError: If the command fails or times out.
        """
        ...

    def copy_into_container(self, *, local_path: Path, name: str, remote_dir: str, timeout: float) -> None:
        """Copy a local file into a directory of a running container.

        Args:
            local_path: File to copy.
            name: Exact container name.
            remote_dir: Destination directory inside the container.
            timeout: Timeout in seconds.

        Raises:
            CommandError: If the container is not running or the copy fails.
        """
        ...

    def stop(self, *, name_filter: str, timeout: float) -> None:
        """Stop every running container matching the filter.

        Does nothing if no container matches.

        Args:
            name_filter: Name filter expression.
            timeout: Timeout in seconds.
        """
        ...

    def logs(self, *, name: str, timeout: float) -> str:
        """Get a container's log output.

        Args:
            name: Container name.
            timeout: Timeout in seconds.

        Returns:
            Log text, or an empty string if the logs cannot be read.
        """
        ...

    def list_running(self, *, name_filter: str, timeout: float) -> list[str]:
        """List IDs of running containers matching the filter.

        Args:
            name_filter: Name filter expression.
            timeout: Timeout in seconds.

        Returns:
            Container IDs, empty if none match.
        """
        ...


def exact_name_filter(name: str) -> str:
    """Filter matching exactly one container name.

    Docker reports names with a leading slash, so the anchor includes it.
    """
    return f"^/{name}$"


def prefix_name_filter(prefix: str) -> str:
    """Filter matching every container whose name starts with `prefix`."""
    return f"^/{prefix}"


__all__ = ["ContainerBackend", "exact_name_filter", "prefix_name_filter"]
