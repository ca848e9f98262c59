"""Core modules for easycontainers."""

from .utils.logging import setup_easycontainers_logging

__all__ = [
    "setup_easycontainers_logging",
]
