"""Ephemeral service containers for test runs.

This package provides scope-bound container handles plus the pieces they are
built from: port allocation, the process-wide lifecycle guard, the command
runner and the container backend.
"""

from .backend import ContainerBackend, DockerBackend, exact_name_filter, get_default_backend, prefix_name_filter
from .guard import LifecycleGuard, get_default_guard
from .handle import ContainerHandle
from .mysql import MySQLContainer
from .ports import PortAllocator, find_free_port, get_default_allocator
from .postgres import PostgresContainer
from .runner import CommandRunner
from .seed import build_seed_script

__all__ = [
    "CommandRunner",
    "ContainerBackend",
    "ContainerHandle",
    "DockerBackend",
    "LifecycleGuard",
    "MySQLContainer",
    "PortAllocator",
    "PostgresContainer",
    "build_seed_script",
    "exact_name_filter",
    "find_free_port",
    "get_default_allocator",
    "get_default_backend",
    "get_default_guard",
    "prefix_name_filter",
]
