"""Main invoke tasks file. Use `inv --list` to see available tasks."""

from __future__ import annotations

from typing import TYPE_CHECKING

from invoke import Collection, task

if TYPE_CHECKING:
    from invoke.context import Context


@task(name="lint")
def lint(ctx: Context) -> None:
    """Run linting (no fixes) - for CI."""
    ctx.run("ruff check src tests tasks.py")
    ctx.run("ruff format --check src tests tasks.py")


@task(name="format")
def format_code(ctx: Context) -> None:
    """Format code using ruff - for local dev."""
    ctx.run("ruff check src tests tasks.py --fix")
    ctx.run("ruff format src tests tasks.py")


@task(
    name="test",
    help={"docker": "Also run the tests that start real containers"},
)
def run_tests(ctx: Context, docker: bool = False) -> None:
    """Run tests."""
    marker = " -m docker" if docker else ""
    ctx.run(f"pytest{marker}", pty=True)


@task(
    name="sweep",
    help={"timeout": "Seconds to wait for swept containers to disappear"},
)
def sweep(ctx: Context, timeout: float = 60) -> None:
    """Stop leftover easycontainers containers and remove stale seed files."""
    from dataclasses import replace

    from easycontainers import LifecycleConfig, LifecycleGuard, setup_easycontainers_logging

    setup_easycontainers_logging()
    guard = LifecycleGuard(config=replace(LifecycleConfig.from_env(), sweep_timeout_sec=timeout), signals=())
    guard.sweep()
    guard.wait_for_sweep()
    guard.remove_stale_seed_files()


ns = Collection(lint, format_code, run_tests, sweep)
