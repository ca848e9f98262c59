"""PostgreSQL container using the official postgres image."""

from __future__ import annotations

from typing import ClassVar

from .handle import ContainerHandle

POSTGRES_USER = "postgres"
POSTGRES_PASSWORD = "pass"


class PostgresContainer(ContainerHandle):
    """A container using the official postgres docker image.

    Seed scripts run against the default `postgres` database as the
    `postgres` superuser.
    """

    service: ClassVar[str] = "postgres"
    image: ClassVar[str] = "postgres:latest"
    internal_port: ClassVar[int] = 5432
    ready_marker: ClassVar[str] = "CREATE TABLE z_z_(id integer);"

    def environment(self) -> dict[str, str]:
        return {"POSTGRES_PASSWORD": POSTGRES_PASSWORD}

    def readiness_command(self) -> str:
        return f"psql -U {POSTGRES_USER} -tAc 'select 1 from z_z_ limit 1'"


__all__ = ["POSTGRES_PASSWORD", "POSTGRES_USER", "PostgresContainer"]
