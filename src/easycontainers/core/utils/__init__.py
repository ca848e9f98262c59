from .clock import Clock, SystemClock
from .logging import logger, setup_easycontainers_logging

__all__ = [
    "Clock",
    "SystemClock",
    "logger",
    "setup_easycontainers_logging",
]
