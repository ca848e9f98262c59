"""Pytest configuration for all tests."""

from __future__ import annotations

import re
import shutil
from pathlib import Path

import pytest

from easycontainers.containers import LifecycleGuard, PortAllocator
from easycontainers.core.errors import CommandFailed
from easycontainers.types import LifecycleConfig


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "docker: marks tests that require Docker")


@pytest.fixture(scope="session")
def docker():
    """Check that docker is available and return the CLI name."""
    if shutil.which("docker") is None:
        pytest.skip("'docker' is missing or not available in PATH.")
    return "docker"


class FakeClock:
    """Clock whose sleep() advances time instantly."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeBackend:
    """In-memory ContainerBackend recording every call.

    Args:
        ready_after: Number of failing readiness probes before one succeeds.
            None means probes never succeed.
    """

    def __init__(self, *, ready_after: int | None = 0) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.running: dict[str, str] = {}
        self.ready_after = ready_after
        self.probes = 0
        self.seed_scripts: list[str] = []
        self.log_text = "fake container logs"
        self.errors: dict[str, BaseException] = {}

    def _record(self, method: str, **kwargs) -> None:
        self.calls.append((method, kwargs))
        if method in self.errors:
            raise self.errors[method]

    def _matching(self, name_filter: str) -> list[str]:
        return [name for name in list(self.running) if re.search(name_filter, f"/{name}")]

    def methods(self) -> list[str]:
        return [method for method, _ in self.calls]

    def stop_filters(self) -> list[str]:
        return [kwargs["name_filter"] for method, kwargs in self.calls if method == "stop"]

    def run(self, *, name, image, port_mappings, env_vars, timeout) -> None:
        self._record("run", name=name, image=image, port_mappings=port_mappings, env_vars=env_vars)
        self.running[name] = f"id-{len(self.running)}"

    def exec_in_container(self, *, name, command, timeout) -> str:
        self._record("exec_in_container", name=name, command=command, timeout=timeout)
        self.probes += 1
        if name not in self.running or self.ready_after is None or self.probes <= self.ready_after:
            raise CommandFailed(command=["docker", "exec", name], returncode=1, output="Table doesn't exist")
        return "initialization table found"

    def copy_into_container(self, *, local_path: Path, name, remote_dir, timeout) -> None:
        self._record("copy_into_container", local_path=local_path, name=name, remote_dir=remote_dir)
        self.seed_scripts.append(local_path.read_text(encoding="utf-8"))

    def stop(self, *, name_filter, timeout) -> None:
        self._record("stop", name_filter=name_filter)
        for name in self._matching(name_filter):
            del self.running[name]

    def logs(self, *, name, timeout) -> str:
        self._record("logs", name=name)
        return self.log_text

    def list_running(self, *, name_filter, timeout) -> list[str]:
        self._record("list_running", name_filter=name_filter)
        return [self.running[name] for name in self._matching(name_filter)]


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def lifecycle_config(tmp_path: Path) -> LifecycleConfig:
    """Config with the production timings and a temp seed base dir."""
    return LifecycleConfig(
        step_timeout_sec=60,
        poll_interval_sec=1.0,
        settle_delay_sec=3.0,
        sweep_timeout_sec=60,
        seed_base_dir=str(tmp_path),
    )


@pytest.fixture
def guard(fake_backend, lifecycle_config, fake_clock, tmp_path) -> LifecycleGuard:
    """Guard on the fake backend that never touches signal handlers."""
    seed_tmp = tmp_path / "tmp"
    seed_tmp.mkdir()
    return LifecycleGuard(
        backend=fake_backend,
        config=lifecycle_config,
        clock=fake_clock,
        temp_dir=seed_tmp,
        signals=(),
    )


@pytest.fixture
def allocator() -> PortAllocator:
    return PortAllocator()


@pytest.fixture
def make_handle(fake_backend, lifecycle_config, allocator, guard, fake_clock):
    """Factory fixture building handles wired to the fakes."""

    def _make(cls, name: str, **kwargs):
        kwargs.setdefault("backend", fake_backend)
        kwargs.setdefault("config", lifecycle_config)
        kwargs.setdefault("allocator", allocator)
        kwargs.setdefault("guard", guard)
        kwargs.setdefault("clock", fake_clock)
        return cls(name, **kwargs)

    return _make
