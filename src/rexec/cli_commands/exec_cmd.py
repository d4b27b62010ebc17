"""``rexec exec`` — run a single command inside a running container."""

from __future__ import annotations

import asyncio
import sys

import click

from rexec.cli_commands._output import configure_logging, err_console, print_error, print_ledger
from rexec.models import DEFAULT_POLL_INTERVAL_MS, DEFAULT_POLL_TIMEOUT_MS


@click.command("exec")
@click.argument("container")
@click.argument("command", nargs=-1, required=True)
@click.option("--user", "-u", default=None, help="User as <name|uid>[:<group|gid>].")
@click.option("--workdir", "-w", default=None, help="Working directory inside the container.")
@click.option(
    "--success-code",
    "success_codes",
    type=int,
    multiple=True,
    help="Accepted exit code (repeatable). Any code is accepted if omitted.",
)
@click.option("--poll-timeout", type=click.IntRange(min=0), default=DEFAULT_POLL_TIMEOUT_MS, show_default=True,
              help="Total time to wait for the command, in milliseconds.")
@click.option("--poll-interval", type=click.IntRange(min=0), default=DEFAULT_POLL_INTERVAL_MS, show_default=True,
              help="Time between liveness checks, in milliseconds.")
@click.option("--no-stdout", is_flag=True, help="Do not attach standard output.")
@click.option("--no-stderr", is_flag=True, help="Do not attach standard error.")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
def exec_cmd(
    container: str,
    command: tuple[str, ...],
    user: str | None,
    workdir: str | None,
    success_codes: tuple[int, ...],
    poll_timeout: int,
    poll_interval: int,
    no_stdout: bool,
    no_stderr: bool,
    verbose: bool,
) -> None:
    """Execute COMMAND inside CONTAINER, streaming its output."""
    from rexec.errors import RexecError
    from rexec.models import ExecSpec, ProbeConfig
    from rexec.runtime.docker_runtime import STREAM_DRAIN_TIMEOUT, DockerRuntime
    from rexec.session import ExecSession

    configure_logging(verbose)

    spec = ExecSpec(
        command=command,
        user=user,
        working_dir=workdir,
        attach_stdout=not no_stdout,
        attach_stderr=not no_stderr,
    )

    try:
        runtime = DockerRuntime.from_env()
        with err_console.status("Executing...") as status:
            session = ExecSession(
                runtime,
                container,
                probe=ProbeConfig(poll_timeout=poll_timeout, poll_interval=poll_interval),
                success_on_exit_codes=success_codes,
                on_progress=status.update,
            )
            try:
                ledger = asyncio.run(session.run([spec]))
            finally:
                runtime.join_streams(timeout=STREAM_DRAIN_TIMEOUT)
    except RexecError as exc:
        print_error("Execution error", exc)
        sys.exit(1)

    print_ledger([spec], ledger)
