from .config import LifecycleConfig
from .container import (
    NAME_PREFIX,
    CommandExecution,
    ContainerIdentity,
    ContainerLifecycleState,
    InitializationPayload,
)

__all__ = [
    "NAME_PREFIX",
    "CommandExecution",
    "ContainerIdentity",
    "ContainerLifecycleState",
    "InitializationPayload",
    "LifecycleConfig",
]
