"""Docker backend implementation.

Uses the docker CLI to manage containers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from easycontainers.containers.runner import CommandRunner
from easycontainers.core.errors import CommandError, CommandFailed
from easycontainers.core.utils import logger
from easycontainers.types.config import LifecycleConfig

from .protocol import exact_name_filter

if TYPE_CHECKING:
    from pathlib import Path


class DockerBackend:
    """Docker implementation of ContainerBackend.

    Uses the docker CLI to manage containers. Every call goes through the
    command runner, so each one has a hard timeout.

    Args:
        runner: Command runner. Defaults to a new CommandRunner keeping
            EASYCONTAINERS_MAX_OUTPUT_CHARS characters of output.
        docker: Name or path of the docker executable.
    """

    def __init__(self, *, runner: CommandRunner | None = None, docker: str = "docker") -> None:
        self.runner = runner or CommandRunner(max_output_chars=LifecycleConfig.from_env().max_output_chars)
        self.docker = docker

    def run(
        self,
        *,
        name: str,
        image: str,
        port_mappings: dict[int, int],
        env_vars: dict[str, str],
        timeout: float,
    ) -> None:
        """Run a detached, auto-removed Docker container."""
        cmd = [self.docker, "run", "--rm"]

        # Add port mappings (host_port:container_port)
        for host_port, container_port in port_mappings.items():
            cmd.extend(["-p", f"{host_port}:{container_port}"])

        cmd.extend(["--name", name])

        for key, value in env_vars.items():
            cmd.extend(["-e", f"{key}={value}"])

        cmd.extend(["-d", image])
        self.runner.run(cmd, timeout=timeout)

    def exec_in_container(self, *, name: str, command: str, timeout: float) -> str:
        """Run a bash command inside a running Docker container."""
        result = self.runner.run([self.docker, "exec", name, "/bin/bash", "-c", command], timeout=timeout)
        return result.output

    def copy_into_container(self, *, local_path: Path, name: str, remote_dir: str, timeout: float) -> None:
        """Copy a file into a running Docker container, resolved by exact name."""
        ids = self.list_running(name_filter=exact_name_filter(name), timeout=timeout)
        if len(ids) != 1:
            raise CommandFailed(
                command=[self.docker, "cp", str(local_path), f"{name}:{remote_dir}"],
                returncode=1,
                output=f"expected exactly one running container named {name}, found {len(ids)}",
            )
        self.runner.run([self.docker, "cp", str(local_path), f"{ids[0]}:{remote_dir}"], timeout=timeout)

    def stop(self, *, name_filter: str, timeout: float) -> None:
        """Stop running Docker containers matching the filter. No-op if none match."""
        ids = self.list_running(name_filter=name_filter, timeout=timeout)
        if not ids:
            logger.debug(f"No running containers match {name_filter}")
            return
        self.runner.run([self.docker, "stop", *ids], timeout=timeout)

    def logs(self, *, name: str, timeout: float) -> str:
        """Get a Docker container's stdout and stderr logs."""
        try:
            return self.runner.run([self.docker, "logs", name], timeout=timeout).output
        except CommandFailed as e:
            # The container may already be gone (--rm), keep whatever was captured
            logger.debug(f"Could not read logs for {name}: {e}")
            return e.output.strip()
        except CommandError as e:
            logger.debug(f"Reading logs for {name} timed out: {e}")
            return ""

    def list_running(self, *, name_filter: str, timeout: float) -> list[str]:
        """List IDs of running Docker containers matching the filter."""
        result = self.runner.run(
            [self.docker, "ps", "--filter", f"name={name_filter}", "--format", "{{.ID}}"],
            timeout=timeout,
        )
        return [line.strip() for line in result.stdout.splitlines() if line.strip()]


__all__ = ["DockerBackend"]
