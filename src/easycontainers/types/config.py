"""Configuration for container lifecycles.

All values can be overridden via environment variables.
"""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class LifecycleConfig:
    """Timeouts and knobs for the container lifecycle.

    All values can be overridden via environment variables.
    """

    step_timeout_sec: float = 60  # EASYCONTAINERS_STEP_TIMEOUT_SEC
    poll_interval_sec: float = 1.0  # EASYCONTAINERS_POLL_INTERVAL_SEC
    settle_delay_sec: float = 3.0  # EASYCONTAINERS_SETTLE_DELAY_SEC
    sweep_timeout_sec: float = 60  # EASYCONTAINERS_SWEEP_TIMEOUT_SEC
    port_retry_count: int = 10  # EASYCONTAINERS_PORT_RETRY_COUNT
    max_output_chars: int = 64_000  # EASYCONTAINERS_MAX_OUTPUT_CHARS
    sweep_on_start: bool = True  # EASYCONTAINERS_SWEEP_ON_START
    seed_base_dir: str | None = None  # EASYCONTAINERS_SEED_BASE_DIR

    @classmethod
    def from_env(cls) -> LifecycleConfig:
        """Load configuration from environment variables with defaults."""

        def get_float(env_var: str, default: float) -> float:
            val = os.environ.get(env_var)
            if val is not None:
                try:
                    return float(val)
                except ValueError:
                    pass
            return default

        def get_int(env_var: str, default: int) -> int:
            val = os.environ.get(env_var)
            if val is not None:
                try:
                    return int(val)
                except ValueError:
                    pass
            return default

        def get_bool(env_var: str, default: bool) -> bool:
            val = os.environ.get(env_var)
            if val is None:
                return default
            return val.strip().lower() not in ("0", "false", "no", "off")

        return cls(
            step_timeout_sec=get_float("EASYCONTAINERS_STEP_TIMEOUT_SEC", cls.step_timeout_sec),
            poll_interval_sec=get_float("EASYCONTAINERS_POLL_INTERVAL_SEC", cls.poll_interval_sec),
            settle_delay_sec=get_float("EASYCONTAINERS_SETTLE_DELAY_SEC", cls.settle_delay_sec),
            sweep_timeout_sec=get_float("EASYCONTAINERS_SWEEP_TIMEOUT_SEC", cls.sweep_timeout_sec),
            port_retry_count=get_int("EASYCONTAINERS_PORT_RETRY_COUNT", cls.port_retry_count),
            max_output_chars=get_int("EASYCONTAINERS_MAX_OUTPUT_CHARS", cls.max_output_chars),
            sweep_on_start=get_bool("EASYCONTAINERS_SWEEP_ON_START", cls.sweep_on_start),
            seed_base_dir=os.environ.get("EASYCONTAINERS_SEED_BASE_DIR") or None,
        )


__all__ = ["LifecycleConfig"]
