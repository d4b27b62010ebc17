"""``rexec run`` — execute every command of a plan YAML file."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click

from rexec.cli_commands._output import (
    configure_logging,
    err_console,
    print_error,
    print_ledger,
    print_plan,
)


@click.command()
@click.argument("plan", type=click.Path(exists=True))
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--telemetry", is_flag=True, help="Enable telemetry.")
@click.option("--dry-run", is_flag=True, help="Validate the plan only, do not execute.")
def run(plan: str, verbose: bool, telemetry: bool, dry_run: bool) -> None:
    """Execute the commands defined in PLAN yaml file."""
    from rexec.errors import RexecError
    from rexec.plan import PlanLoader, PlanValidationError, TelemetrySettings
    from rexec.runtime.docker_runtime import STREAM_DRAIN_TIMEOUT, DockerRuntime
    from rexec.session import ExecSession
    from rexec.utils.telemetry import configure_telemetry

    configure_logging(verbose)

    try:
        exec_plan = PlanLoader(Path(plan)).load()
    except PlanValidationError as exc:
        print_error("Validation error", exc)
        sys.exit(1)

    if telemetry:
        if exec_plan.telemetry is None:
            exec_plan.telemetry = TelemetrySettings(enabled=True)
        else:
            exec_plan.telemetry.enabled = True

    if dry_run:
        print_plan(exec_plan)
        return

    specs = exec_plan.to_specs()

    if exec_plan.telemetry and exec_plan.telemetry.enabled:
        try:
            configure_telemetry(
                service_name=exec_plan.telemetry.service_name,
                export_to_console=exec_plan.telemetry.export_to_console,
                otlp_endpoint=exec_plan.telemetry.otlp_endpoint,
            )
        except ImportError as exc:
            print_error("Telemetry error", exc)
            sys.exit(1)

    try:
        runtime = DockerRuntime.from_env()
        with err_console.status("Executing...") as status:
            session = ExecSession(
                runtime,
                exec_plan.container,
                probe=exec_plan.probe,
                success_on_exit_codes=exec_plan.success_on_exit_codes,
                on_progress=status.update,
            )
            try:
                ledger = asyncio.run(session.run(specs))
            finally:
                runtime.join_streams(timeout=STREAM_DRAIN_TIMEOUT)
    except RexecError as exc:
        print_error("Execution error", exc)
        sys.exit(1)

    print_ledger(specs, ledger)
