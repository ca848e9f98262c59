"""Scope-bound container handles.

A ContainerHandle owns one ephemeral, named service container. The only way
to start it is run_scoped(), which launches the container, seeds it, waits
for the ready marker, runs the caller's workload and always stops the
container afterward.

Service-specific handles (MySQL, PostgreSQL) only declare the image, ports,
environment, ready marker and readiness probe.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, TypeVar

from easycontainers.core.errors import (
    CleanupFailed,
    CommandError,
    CommandTimedOut,
    LaunchFailed,
    LifecycleStepError,
    ReadinessTimeout,
    SeedCopyFailed,
    SeedWriteFailed,
)
from easycontainers.core.utils import SystemClock, logger
from easycontainers.types.config import LifecycleConfig
from easycontainers.types.container import (
    NAME_PREFIX,
    ContainerIdentity,
    ContainerLifecycleState,
    InitializationPayload,
)

from .backend import exact_name_filter, get_default_backend
from .guard import get_default_guard
from .ports import get_default_allocator
from .seed import render_payload, write_seed_file

if TYPE_CHECKING:
    from collections.abc import Callable

    from easycontainers.core.utils import Clock

    from .backend import ContainerBackend
    from .guard import LifecycleGuard
    from .ports import PortAllocator

T = TypeVar("T")
H = TypeVar("H", bound="ContainerHandle")

_State = ContainerLifecycleState


class ContainerHandle(ABC):
    """Abstract base class for scope-bound service containers.

    Subclasses must define the class attributes below and implement
    environment() and readiness_command().

    Args:
        name: Logical name. The container is named `<prefix><service>-<name>`.
        port: Host port to publish. If None, one is allocated.
        path: Optional seed file, run before `query`.
        query: Optional literal seed statements.
        config: Lifecycle configuration. Defaults to LifecycleConfig.from_env().
        backend: Container backend. Defaults to Docker.
        allocator: Port allocator used when `port` is None.
        guard: Process-wide lifecycle guard.
        clock: Clock for polling and settling delays.

    Example:
        >>> db, port = MySQLContainer.new("users")
        >>> db.query = "CREATE TABLE users (id INT);"
        >>> db.run_scoped(lambda: run_my_tests(port))
    """

    # --- Class attributes (must be defined by subclasses) ---

    service: ClassVar[str]
    """Short service name, part of the container name."""

    image: ClassVar[str]
    """Image to run."""

    internal_port: ClassVar[int]
    """Port the service listens on inside the container."""

    ready_marker: ClassVar[str]
    """Statement appended to every seed script; its effect signals readiness."""

    init_dir: ClassVar[str] = "/docker-entrypoint-initdb.d"
    """Directory inside the container whose scripts run at initialization."""

    seed_suffix: ClassVar[str] = ".sql"
    """File suffix of the seed script, so the entrypoint knows how to run it."""

    def __init__(
        self,
        name: str,
        *,
        port: int | None = None,
        path: str | Path | None = None,
        query: str | None = None,
        config: LifecycleConfig | None = None,
        backend: ContainerBackend | None = None,
        allocator: PortAllocator | None = None,
        guard: LifecycleGuard | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.config = config or LifecycleConfig.from_env()
        self.backend = backend or get_default_backend()
        self.guard = guard or get_default_guard()
        self.clock = clock or SystemClock()

        if port is None:
            port = (allocator or get_default_allocator()).allocate()

        self.identity = ContainerIdentity(name=f"{NAME_PREFIX}{self.service}-{name}", port=port)
        self.path = Path(path) if path else None
        self.query = query
        self.state_history: list[ContainerLifecycleState] = [_State.CREATED]
        self._seed_file: Path | None = None

    @classmethod
    def new(cls: type[H], name: str, **kwargs) -> tuple[H, int]:
        """Create a handle with an allocated port.

        Returns:
            The handle and the host port it will publish.
        """
        handle = cls(name, **kwargs)
        return handle, handle.port

    @classmethod
    def with_port(cls: type[H], name: str, port: int, **kwargs) -> H:
        """Create a handle publishing a specific host port."""
        return cls(name, port=port, **kwargs)

    # --- Service definition ---

    @abstractmethod
    def environment(self) -> dict[str, str]:
        """Environment variables the service image needs (e.g. credentials)."""

    @abstractmethod
    def readiness_command(self) -> str:
        """Shell command, run inside the container, that succeeds once the ready marker exists."""

    # --- Properties ---

    @property
    def container_name(self) -> str:
        return self.identity.name

    @property
    def port(self) -> int:
        return self.identity.port

    @property
    def state(self) -> ContainerLifecycleState:
        """Current lifecycle state."""
        return self.state_history[-1]

    @property
    def payload(self) -> InitializationPayload:
        """Seed payload built from the current `path` and `query`."""
        return InitializationPayload(path=self.path, query=self.query)

    # --- Public API ---

    def run_scoped(self, workload: Callable[[], T]) -> T:
        """Start the container, run `workload` once it is ready, then stop it.

        The container is stopped and the seed file removed on every exit path.
        Cleanup failures are logged and never replace the workload's result
        or the error that aborted the sequence.

        Args:
            workload: Called with no arguments after the container is ready.

        Returns:
            Whatever `workload` returns.

        Raises:
            LaunchFailed: If the container could not be started.
            SeedWriteFailed: If the seed script could not be prepared.
            SeedCopyFailed: If the seed script could not be copied into the container.
            ReadinessTimeout: If the ready marker was not observed in time.
            Exception: Anything raised by `workload`, unchanged.
        """
        if self.state.is_terminal:
            raise RuntimeError(f"Container handle {self.container_name} was already run (state: {self.state})")
        if self.state is not _State.CREATED:
            raise RuntimeError(f"Container handle {self.container_name} is already running (state: {self.state})")

        self.guard.ensure_started()

        failed = True
        try:
            self._remove_existing()
            self._launch()
            self._seed()
            self._await_ready()

            self._transition(_State.RUNNING)
            result = workload()
            failed = False
            return result
        finally:
            self._transition(_State.CLEANING_UP)
            self._cleanup()
            self._transition(_State.FAILED if failed else _State.TERMINATED)

    # --- Lifecycle steps ---

    def _transition(self, state: ContainerLifecycleState) -> None:
        logger.debug(f"{self.container_name}: {self.state} -> {state}")
        self.state_history.append(state)

    def _remove_existing(self) -> None:
        """Stop a container left over from an earlier attempt with the same name."""
        name_filter = exact_name_filter(self.container_name)
        timeout = self.config.step_timeout_sec
        try:
            if self.backend.list_running(name_filter=name_filter, timeout=timeout):
                logger.info(f"Removing existing container: {self.container_name}")
                self.backend.stop(name_filter=name_filter, timeout=timeout)
        except CommandError as e:
            raise LaunchFailed(
                f"Failed to remove existing container {self.container_name}: {e}",
                container_name=self.container_name,
            ) from e

    def _launch(self) -> None:
        self._transition(_State.LAUNCHING)
        logger.info(f"Starting container: {self.container_name} (image: {self.image}, port: {self.port})")
        try:
            self.backend.run(
                name=self.container_name,
                image=self.image,
                port_mappings={self.port: self.internal_port},
                env_vars=self.environment(),
                timeout=self.config.step_timeout_sec,
            )
        except CommandError as e:
            raise self._with_logs(LaunchFailed, f"Failed to start container {self.container_name}: {e}") from e

    def _seed(self) -> None:
        """Write the seed script to a temp file and copy it into the init directory.

        The ready marker is always seeded, even with an empty payload, so the
        readiness probe has something to look for.
        """
        self._transition(_State.SEEDING_DATA)
        try:
            script = render_payload(
                self.payload,
                ready_marker=self.ready_marker,
                base_dir=self.config.seed_base_dir,
            )
            self._seed_file = write_seed_file(script, suffix=self.seed_suffix)
        except OSError as e:
            raise SeedWriteFailed(
                f"Failed to prepare seed script for {self.container_name}: {e}",
                container_name=self.container_name,
            ) from e

        if self.payload.is_empty:
            logger.info(f"No seed data for {self.container_name}, seeding the ready marker only")
        logger.info(f"Seeding {self.container_name} from {self._seed_file}")
        try:
            self.backend.copy_into_container(
                local_path=self._seed_file,
                name=self.container_name,
                remote_dir=self.init_dir,
                timeout=self.config.step_timeout_sec,
            )
        except CommandError as e:
            raise self._with_logs(SeedCopyFailed, f"Failed to copy seed script into {self.container_name}: {e}") from e

    def _await_ready(self) -> None:
        """Poll the readiness probe until it succeeds, then let the service settle."""
        self._transition(_State.AWAITING_READY)
        timeout = self.config.step_timeout_sec
        deadline = self.clock.monotonic() + timeout
        command = self.readiness_command()
        logger.info(f"Waiting for {self.container_name} to be ready (timeout: {timeout}s)")

        while True:
            remaining = deadline - self.clock.monotonic()
            if remaining <= 0:
                raise self._with_logs(
                    ReadinessTimeout,
                    f"Container {self.container_name} timed out waiting for the ready marker after {timeout}s",
                )

            try:
                self.backend.exec_in_container(name=self.container_name, command=command, timeout=remaining)
                break
            except CommandTimedOut as e:
                raise self._with_logs(
                    ReadinessTimeout,
                    f"Container {self.container_name} timed out waiting for the ready marker after {timeout}s",
                ) from e
            except CommandError as e:
                logger.debug(f"{self.container_name} not ready yet: {e}")

            self.clock.sleep(min(self.config.poll_interval_sec, max(deadline - self.clock.monotonic(), 0)))

        # The marker can show up shortly before the service accepts connections.
        # Settling still counts against the step deadline.
        self.clock.sleep(min(self.config.settle_delay_sec, max(deadline - self.clock.monotonic(), 0)))
        self._transition(_State.READY)
        logger.info(f"Successfully created {self.service} container {self.container_name}")

    def _cleanup(self) -> None:
        """Stop the container and remove the seed file. Never raises."""
        logger.info(f"Stopping container: {self.container_name}")
        try:
            self.backend.stop(
                name_filter=exact_name_filter(self.container_name),
                timeout=self.config.step_timeout_sec,
            )
        except Exception as e:
            error = CleanupFailed(
                f"Failed to stop container {self.container_name}: {e}",
                container_name=self.container_name,
            )
            error.__cause__ = e
            logger.warning(str(error), exc_info=error)

        if self._seed_file is not None:
            try:
                self._seed_file.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Failed to remove seed file {self._seed_file}: {e}")
            self._seed_file = None

    def _with_logs(self, error_cls: type[LifecycleStepError], message: str) -> LifecycleStepError:
        """Build a step error carrying the container's logs.

        Service errors during initialization (e.g. a syntax error in the seed
        script) often only show up in the container logs.
        """
        try:
            logs = self.backend.logs(name=self.container_name, timeout=self.config.step_timeout_sec)
        except CommandError as e:
            logger.debug(f"Could not read logs for {self.container_name}: {e}")
            logs = ""
        return error_cls(message, container_name=self.container_name, logs=logs.strip())


__all__ = ["ContainerHandle"]
