"""easycontainers - ephemeral service containers for test runs"""

from easycontainers.containers import LifecycleGuard, MySQLContainer, PortAllocator, PostgresContainer
from easycontainers.core.utils import logger, setup_easycontainers_logging
from easycontainers.types import LifecycleConfig

__all__ = [
    "LifecycleConfig",
    "LifecycleGuard",
    "MySQLContainer",
    "PortAllocator",
    "PostgresContainer",
    "logger",
    "setup_easycontainers_logging",
]
