"""Host port allocation for containers.

Ports handed to containers are not bound until the container actually starts,
so the OS can offer the same ephemeral port twice in a row. The allocator
remembers every port it ever returned and never returns one again.
"""

from __future__ import annotations

import socket
import threading
from collections.abc import Callable

from easycontainers.core.errors import PortAllocationError, PortAllocationExhausted
from easycontainers.core.utils import logger
from easycontainers.types.config import LifecycleConfig

DEFAULT_PORT_RETRY_COUNT = 10


def find_free_port() -> int:
    """Find and return an available TCP port.

    Uses the OS to allocate a free port by binding to port 0 on loopback,
    which lets the OS choose an available port. The socket is closed right
    away; the container binds the port later.

    Returns:
        An available port number.
    """
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        s.bind(("localhost", 0))
        return s.getsockname()[1]


class PortAllocator:
    """Hands out host ports that are unique for the allocator's lifetime.

    Args:
        probe: Function asking the OS for a free port. Defaults to find_free_port.
        retry_count: How many OS offers to try before giving up.
    """

    def __init__(
        self,
        *,
        probe: Callable[[], int] = find_free_port,
        retry_count: int = DEFAULT_PORT_RETRY_COUNT,
    ) -> None:
        self._probe = probe
        self.retry_count = retry_count
        self._lock = threading.Lock()
        self._allocated: set[int] = set()

    @property
    def allocated_ports(self) -> frozenset[int]:
        """Snapshot of every port handed out so far."""
        with self._lock:
            return frozenset(self._allocated)

    def allocate(self) -> int:
        """Allocate a port that was never returned before.

        Returns:
            A free host port.

        Raises:
            PortAllocationError: If the OS could not resolve or bind loopback.
            PortAllocationExhausted: If every offered port was already allocated.
        """
        for _ in range(self.retry_count):
            try:
                port = self._probe()
            except OSError as e:
                raise PortAllocationError(f"Failed to get a port from the OS: {e}") from e

            # The lock only guards check-and-insert, never the socket probe
            with self._lock:
                if port not in self._allocated:
                    self._allocated.add(port)
                    logger.debug(f"Allocated port {port}")
                    return port

        raise PortAllocationExhausted(f"took too long to find free port ({self.retry_count} attempts)")


# Process-wide allocator shared by all handles that don't bring their own
_default_allocator: PortAllocator | None = None
_default_allocator_lock = threading.Lock()


def get_default_allocator() -> PortAllocator:
    """Get the process-wide port allocator, creating it on first use.

    Its retry count comes from EASYCONTAINERS_PORT_RETRY_COUNT.
    """
    global _default_allocator

    with _default_allocator_lock:
        if _default_allocator is None:
            _default_allocator = PortAllocator(retry_count=LifecycleConfig.from_env().port_retry_count)
        return _default_allocator


__all__ = [
    "DEFAULT_PORT_RETRY_COUNT",
    "PortAllocator",
    "find_free_port",
    "get_default_allocator",
]
