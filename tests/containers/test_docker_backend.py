"""Tests for the docker CLI backend, with the command runner faked out."""

from pathlib import Path

import pytest

from easycontainers.containers import DockerBackend, backend, exact_name_filter, get_default_backend, prefix_name_filter
from easycontainers.core.errors import CommandFailed, CommandTimedOut
from easycontainers.types import CommandExecution


class FakeRunner:
    """Records commands and answers `docker ps` with canned IDs."""

    def __init__(self, ps_ids: list[str] | None = None) -> None:
        self.commands: list[list[str]] = []
        self.ps_ids = ps_ids or []
        self.errors: dict[str, Exception] = {}

    def run(self, args, *, timeout):
        cmd = list(args)
        self.commands.append(cmd)
        if cmd[1] in self.errors:
            raise self.errors[cmd[1]]
        stdout = "\n".join(self.ps_ids) + "\n" if cmd[1] == "ps" else ""
        return CommandExecution(command=cmd, stdout=stdout)


def test_name_filters_are_anchored():
    assert exact_name_filter("easycontainers-mysql-a") == "^/easycontainers-mysql-a$"
    assert prefix_name_filter("easycontainers-") == "^/easycontainers-"


def test_run_builds_detached_auto_removed_command():
    runner = FakeRunner()
    DockerBackend(runner=runner).run(
        name="easycontainers-mysql-a",
        image="mysql:latest",
        port_mappings={40001: 3306},
        env_vars={"MYSQL_ROOT_PASSWORD": "pass"},
        timeout=60,
    )

    assert runner.commands == [
        [
            "docker",
            "run",
            "--rm",
            "-p",
            "40001:3306",
            "--name",
            "easycontainers-mysql-a",
            "-e",
            "MYSQL_ROOT_PASSWORD=pass",
            "-d",
            "mysql:latest",
        ]
    ]


def test_stop_with_no_match_is_a_noop():
    runner = FakeRunner(ps_ids=[])
    DockerBackend(runner=runner).stop(name_filter=exact_name_filter("easycontainers-mysql-a"), timeout=60)

    assert [cmd[1] for cmd in runner.commands] == ["ps"]


def test_stop_stops_every_matching_id():
    runner = FakeRunner(ps_ids=["abc", "def"])
    DockerBackend(runner=runner).stop(name_filter=prefix_name_filter("easycontainers-"), timeout=60)

    assert runner.commands[0] == ["docker", "ps", "--filter", "name=^/easycontainers-", "--format", "{{.ID}}"]
    assert runner.commands[1] == ["docker", "stop", "abc", "def"]


def test_copy_resolves_container_by_exact_name():
    runner = FakeRunner(ps_ids=["abc"])
    DockerBackend(runner=runner).copy_into_container(
        local_path=Path("/tmp/easycontainers-1.sql"),
        name="easycontainers-mysql-a",
        remote_dir="/docker-entrypoint-initdb.d",
        timeout=60,
    )

    assert runner.commands[0][3] == "name=^/easycontainers-mysql-a$"
    assert runner.commands[1] == ["docker", "cp", "/tmp/easycontainers-1.sql", "abc:/docker-entrypoint-initdb.d"]


def test_copy_fails_when_container_is_not_running():
    runner = FakeRunner(ps_ids=[])
    with pytest.raises(CommandFailed, match="found 0"):
        DockerBackend(runner=runner).copy_into_container(
            local_path=Path("/tmp/easycontainers-1.sql"),
            name="easycontainers-mysql-a",
            remote_dir="/docker-entrypoint-initdb.d",
            timeout=60,
        )


def test_exec_runs_bash_inside_container():
    runner = FakeRunner()
    DockerBackend(runner=runner).exec_in_container(name="easycontainers-mysql-a", command="echo hi", timeout=5)

    assert runner.commands == [["docker", "exec", "easycontainers-mysql-a", "/bin/bash", "-c", "echo hi"]]


def test_logs_keep_output_of_failed_command():
    runner = FakeRunner()
    runner.errors["logs"] = CommandFailed(command=["docker", "logs"], returncode=1, output="ERROR 1064 syntax\n")

    assert DockerBackend(runner=runner).logs(name="easycontainers-mysql-a", timeout=5) == "ERROR 1064 syntax"


def test_logs_timeout_returns_empty():
    runner = FakeRunner()
    runner.errors["logs"] = CommandTimedOut(command=["docker", "logs"], timeout=5)

    assert DockerBackend(runner=runner).logs(name="easycontainers-mysql-a", timeout=5) == ""


def test_default_runner_reads_output_limit_from_env(monkeypatch):
    monkeypatch.setenv("EASYCONTAINERS_MAX_OUTPUT_CHARS", "10")

    assert DockerBackend().runner.max_output_chars == 10


def test_default_backend_is_built_on_first_use(monkeypatch):
    monkeypatch.setenv("EASYCONTAINERS_MAX_OUTPUT_CHARS", "10")
    monkeypatch.setattr(backend, "_default_backend", None)

    default = get_default_backend()

    assert isinstance(default, DockerBackend)
    assert default.runner.max_output_chars == 10
    assert get_default_backend() is default
