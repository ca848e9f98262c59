"""Process-wide lifecycle guard.

Before the first container of a process is launched, the guard sweeps away
containers and seed files left behind by earlier runs that crashed before
their own cleanup ran, and installs signal handlers that repeat the sweep when
the process is interrupted.
"""

from __future__ import annotations

import signal
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from easycontainers.core.errors import CommandError
from easycontainers.core.utils import SystemClock, logger
from easycontainers.types.config import LifecycleConfig
from easycontainers.types.container import NAME_PREFIX

from .backend import get_default_backend, prefix_name_filter

if TYPE_CHECKING:
    from collections.abc import Sequence

    from easycontainers.core.utils import Clock

    from .backend import ContainerBackend

# SIGKILL cannot be caught, so interrupt and terminate are the best we can do
DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM)


class LifecycleGuard:
    """Runs the startup sweep and signal registration exactly once.

    Args:
        backend: Container backend. Defaults to Docker.
        config: Lifecycle configuration. Defaults to LifecycleConfig.from_env().
        clock: Clock used by the sweep wait loop.
        temp_dir: Directory scanned for leftover seed files. Defaults to the system temp dir.
        signals: Signals that trigger a sweep. Empty to skip signal registration.
        prefix: Namespace prefix of swept containers and files.
    """

    def __init__(
        self,
        *,
        backend: ContainerBackend | None = None,
        config: LifecycleConfig | None = None,
        clock: Clock | None = None,
        temp_dir: str | Path | None = None,
        signals: Sequence[signal.Signals] = DEFAULT_SIGNALS,
        prefix: str = NAME_PREFIX,
    ) -> None:
        self.backend = backend or get_default_backend()
        self.config = config or LifecycleConfig.from_env()
        self.clock = clock or SystemClock()
        self.temp_dir = Path(temp_dir or tempfile.gettempdir())
        self.signals = tuple(signals)
        self.prefix = prefix
        self._lock = threading.Lock()
        self._started = False
        self._previous_handlers: dict[signal.Signals, Any] = {}

    @property
    def started(self) -> bool:
        """True once ensure_started() has run."""
        return self._started

    def ensure_started(self) -> None:
        """Sweep stale resources and register signal handlers, once.

        Later calls return immediately. Concurrent callers block until the
        first call has finished, so no container is launched mid-sweep.
        """
        with self._lock:
            if self._started:
                return
            self._started = True

            if self.config.sweep_on_start:
                logger.info(f"Sweeping leftover containers with prefix '{self.prefix}'")
                self.sweep()
                self.wait_for_sweep()
                self.remove_stale_seed_files()
            else:
                logger.info("Startup sweep disabled")

            self._register_signal_handlers()

    def sweep(self) -> None:
        """Stop every running container carrying the namespace prefix.

        Best-effort: failures are logged, never raised.
        """
        try:
            self.backend.stop(
                name_filter=prefix_name_filter(self.prefix),
                timeout=self.config.step_timeout_sec,
            )
        except CommandError as e:
            logger.warning(f"Sweep of '{self.prefix}' containers failed: {e}")

    def wait_for_sweep(self) -> bool:
        """Poll until no prefixed container is running, or the sweep timeout elapses.

        Returns:
            True if all prefixed containers are gone, False on timeout.
        """
        name_filter = prefix_name_filter(self.prefix)
        deadline = self.clock.monotonic() + self.config.sweep_timeout_sec

        while True:
            try:
                remaining = self.backend.list_running(
                    name_filter=name_filter,
                    timeout=self.config.step_timeout_sec,
                )
            except CommandError as e:
                logger.warning(f"Could not list '{self.prefix}' containers: {e}")
                return False

            if not remaining:
                return True

            if self.clock.monotonic() >= deadline:
                logger.warning(
                    f"{len(remaining)} '{self.prefix}' container(s) still running after "
                    f"{self.config.sweep_timeout_sec}s, proceeding anyway"
                )
                return False

            logger.info("Waiting for cleanup to finish")
            self.clock.sleep(self.config.poll_interval_sec)

    def remove_stale_seed_files(self) -> int:
        """Delete leftover prefixed seed files from the temp directory.

        Returns:
            Number of files removed.
        """
        removed = 0
        for path in self.temp_dir.glob(f"{self.prefix}*"):
            if not path.is_file():
                continue
            try:
                path.unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not remove stale seed file {path}: {e}")

        if removed:
            logger.info(f"Removed {removed} stale seed file(s) from {self.temp_dir}")
        return removed

    def _register_signal_handlers(self) -> None:
        """Install sweep-on-signal handlers, chaining to the previous ones."""
        if not self.signals:
            return

        if threading.current_thread() is not threading.main_thread():
            logger.warning("Signal handlers can only be installed from the main thread, skipping")
            return

        for signum in self.signals:
            self._previous_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self._handle_signal)

    def _handle_signal(self, signum: int, frame: Any) -> None:
        """Start a sweep in the background, then defer to the previous handler."""
        logger.info(f"Received signal {signum}, sweeping '{self.prefix}' containers")
        # Non-daemon so interpreter shutdown waits for the sweep to finish
        threading.Thread(target=self.sweep, name="easycontainers-sweep", daemon=False).start()

        previous = self._previous_handlers.get(signal.Signals(signum), signal.SIG_DFL)
        if callable(previous):
            previous(signum, frame)
        elif previous is None or previous == signal.SIG_DFL:
            # None means a handler installed outside Python; act like the default
            if signum == signal.SIGINT:
                signal.default_int_handler(signum, frame)
            raise SystemExit(128 + signum)


# Process-wide guard shared by all handles that don't bring their own
_default_guard: LifecycleGuard | None = None
_default_guard_lock = threading.Lock()


def get_default_guard() -> LifecycleGuard:
    """Get the process-wide lifecycle guard, creating it on first use."""
    global _default_guard

    with _default_guard_lock:
        if _default_guard is None:
            _default_guard = LifecycleGuard()
        return _default_guard


__all__ = ["DEFAULT_SIGNALS", "LifecycleGuard", "get_default_guard"]
