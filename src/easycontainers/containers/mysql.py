"""MySQL container using the official mysql image."""

from __future__ import annotations

from typing import ClassVar

from .handle import ContainerHandle

MYSQL_ROOT_PASSWORD = "pass"


class MySQLContainer(ContainerHandle):
    """A container using the official mysql docker image.

    `path` is a SQL file (relative paths resolve against the seed base dir)
    and `query` a string of SQL; both run when the container initializes.

    Example:
        >>> db, port = MySQLContainer.new("orders", query="CREATE DATABASE shop;")
        >>> db.run_scoped(lambda: connect(host="127.0.0.1", port=port, user="root", password="pass"))
    """

    service: ClassVar[str] = "mysql"
    image: ClassVar[str] = "mysql:latest"
    internal_port: ClassVar[int] = 3306

    # Created after all the other SQL has run, so finding the table means the
    # container is fully initialized
    ready_marker: ClassVar[str] = "CREATE TABLE mysql.z_z_(id integer);"

    def environment(self) -> dict[str, str]:
        return {"MYSQL_ROOT_PASSWORD": MYSQL_ROOT_PASSWORD}

    def readiness_command(self) -> str:
        return (
            f"mysql -uroot -p{MYSQL_ROOT_PASSWORD} "
            "-e 'select \"initialization table found\" from mysql.z_z_ limit 1'"
        )


__all__ = ["MYSQL_ROOT_PASSWORD", "MySQLContainer"]
