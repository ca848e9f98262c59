"""Seed scripts for container initialization.

A seed script is the configured file contents, then the inline query, then a
ready marker statement. Services run their init scripts in order, so once the
marker exists every seed statement has been applied.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from easycontainers.types.container import NAME_PREFIX, InitializationPayload

# Joins file contents and inline query, in case the file doesn't end with ";"
QUERY_SEPARATOR = "; "


def build_seed_script(*, file_text: str = "", query: str = "", ready_marker: str) -> str:
    """Concatenate seed statements and append the ready marker.

    Args:
        file_text: Statements read from the seed file.
        query: Inline statements seeded after the file.
        ready_marker: Statement whose effect signals that seeding finished.

    Returns:
        The full seed script.

    Example:
        >>> build_seed_script(file_text="CREATE TABLE t();", query="SELECT 1;", ready_marker="CREATE TABLE m;")
        'CREATE TABLE t();; SELECT 1;;CREATE TABLE m;'
    """
    script = file_text
    if query:
        script = f"{script}{QUERY_SEPARATOR}{query}" if script else query

    if not script:
        return ready_marker
    return f"{script};{ready_marker}"


def resolve_seed_path(path: Path, base_dir: str | Path | None = None) -> Path:
    """Resolve a seed file path, relative paths against `base_dir` (default: cwd)."""
    if path.is_absolute():
        return path
    return Path(base_dir or Path.cwd()) / path


def render_payload(payload: InitializationPayload, *, ready_marker: str, base_dir: str | Path | None = None) -> str:
    """Read the payload's file (if any) and build its seed script.

    Raises:
        OSError: If the seed file cannot be read.
    """
    file_text = ""
    if payload.path:
        file_text = resolve_seed_path(payload.path, base_dir).read_text(encoding="utf-8")
    return build_seed_script(file_text=file_text, query=payload.query or "", ready_marker=ready_marker)


def write_seed_file(script: str, *, suffix: str = ".sql", directory: str | Path | None = None) -> Path:
    """Write a seed script to a uniquely named, prefixed temp file.

    The file is world-readable so the service user inside the container can
    read it after `docker cp`.

    Returns:
        Path of the written file. The caller is responsible for deleting it.
    """
    with tempfile.NamedTemporaryFile(
        mode="w",
        prefix=NAME_PREFIX,
        suffix=suffix,
        dir=directory,
        delete=False,
        encoding="utf-8",
    ) as f:
        f.write(script)
    seed_path = Path(f.name)
    seed_path.chmod(0o644)
    return seed_path


__all__ = [
    "QUERY_SEPARATOR",
    "build_seed_script",
    "render_payload",
    "resolve_seed_path",
    "write_seed_file",
]
