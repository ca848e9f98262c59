"""Container backend abstraction for easycontainers.

This package provides a Protocol for container backends and a Docker implementation.
This allows for future support of other container runtimes (e.g., Podman).
"""

import threading

from .docker import DockerBackend
from .protocol import ContainerBackend, exact_name_filter, prefix_name_filter

# Default backend instance, built on first use so it picks up the environment
_default_backend: ContainerBackend | None = None
_default_backend_lock = threading.Lock()


def get_default_backend() -> ContainerBackend:
    """Get the default container backend (Docker)."""
    global _default_backend

    with _default_backend_lock:
        if _default_backend is None:
            _default_backend = DockerBackend()
        return _default_backend


__all__ = [
    "ContainerBackend",
    "DockerBackend",
    "exact_name_filter",
    "get_default_backend",
    "prefix_name_filter",
]
