"""Tests for ``rexec exec`` CLI command."""

from __future__ import annotations

import time
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from rexec.cli import main
from rexec.errors import RuntimeAdapterError
from rexec.runtime.docker_runtime import DockerRuntime


class TestExecCommand:
    def test_runs_single_command(self, make_runtime) -> None:
        runtime = make_runtime()

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(
                main,
                ["exec", "web-1", "--user", "app", "--workdir", "/srv", "--no-stderr", "--", "ls", "-la"],
            )

        assert result.exit_code == 0, result.output
        assert runtime.calls[0] == ("create", "web-1", ["ls", "-la"], True, False, "app", "/srv")
        assert "exec-0" in result.output

    def test_disallowed_exit_code(self, make_runtime) -> None:
        runtime = make_runtime({"false": {"exit_code": 1}})

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(
                main, ["exec", "web-1", "--success-code", "0", "--success-code", "2", "false"]
            )

        assert result.exit_code == 1
        assert "1 is not a successful exit code" in result.output

    def test_any_exit_code_accepted_without_success_codes(self, make_runtime) -> None:
        runtime = make_runtime({"false": {"exit_code": 1}})

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(main, ["exec", "web-1", "false"])

        assert result.exit_code == 0, result.output

    def test_timeout_reports_probe(self, make_runtime) -> None:
        runtime = make_runtime({"sleep": {"running_polls": -1}})

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(
                main,
                ["exec", "web-1", "--poll-timeout", "0", "--poll-interval", "1000", "sleep", "100"],
            )

        assert result.exit_code == 1
        assert "timely fashion" in result.output
        assert runtime.count("inspect") == 1

    def test_docker_unavailable(self) -> None:
        with patch.object(DockerRuntime, "from_env", side_effect=RuntimeAdapterError("no socket")):
            result = CliRunner().invoke(main, ["exec", "web-1", "ls"])

        assert result.exit_code == 1
        assert "no socket" in result.output

    def test_requires_command(self) -> None:
        result = CliRunner().invoke(main, ["exec", "web-1"])

        assert result.exit_code != 0

    def test_negative_poll_timeout_rejected(self) -> None:
        result = CliRunner().invoke(main, ["exec", "web-1", "--poll-timeout", "-5", "ls"])

        assert result.exit_code != 0


def _docker_runtime_with_late_output(exit_code: int = 0) -> DockerRuntime:
    client = MagicMock()
    client.exec_create.return_value = {"Id": "abc123"}
    client.exec_inspect.return_value = {"Running": False, "ExitCode": exit_code}

    def _stream():
        time.sleep(0.3)
        yield (b"tail-output", None)

    client.exec_start.return_value = _stream()
    return DockerRuntime(client)


class TestExecOutputDrain:
    def test_output_after_exit_is_printed_before_ledger(self) -> None:
        runtime = _docker_runtime_with_late_output()

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(main, ["exec", "web-1", "make", "build"])

        assert result.exit_code == 0, result.output
        assert "tail-output" in result.output
        assert result.output.index("tail-output") < result.output.index("Completed Execs")

    def test_output_is_drained_when_exec_fails(self) -> None:
        runtime = _docker_runtime_with_late_output(exit_code=3)

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(main, ["exec", "web-1", "--success-code", "0", "make", "build"])

        assert result.exit_code == 1
        assert "tail-output" in result.output
        assert "3 is not a successful exit code" in result.output

    def test_scripted_runtime_is_joined_on_failure(self, make_runtime) -> None:
        runtime = make_runtime({"false": {"exit_code": 1}})

        with patch.object(DockerRuntime, "from_env", return_value=runtime):
            result = CliRunner().invoke(main, ["exec", "web-1", "--success-code", "0", "false"])

        assert result.exit_code == 1
        assert runtime.calls[-1] == ("join",)
