"""Shared CLI output formatters."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from rexec.models import ExecSpec  # noqa: TC001
from rexec.plan import ExecPlan  # noqa: TC001

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route ``rexec`` log records to stderr through rich."""
    root = logging.getLogger("rexec")
    root.handlers.clear()
    root.addHandler(RichHandler(console=err_console, show_path=False))
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)


def print_error(label: str, exc: BaseException) -> None:
    """Print a failure on one unwrapped line so the full message survives."""
    console.print(f"[red]{label}:[/red] {escape(str(exc))}", soft_wrap=True)


def print_ledger(specs: Sequence[ExecSpec], ledger: Sequence[str]) -> None:
    """Pretty-print completed exec ids next to the commands that produced them."""
    table = Table(title="Completed Execs")
    table.add_column("#", justify="right")
    table.add_column("Command", style="cyan")
    table.add_column("Exec ID")

    for index, (spec, exec_id) in enumerate(zip(specs, ledger, strict=False)):
        table.add_row(str(index), _truncate(" ".join(spec.command)), exec_id[:12])

    console.print(table)


def print_plan(plan: ExecPlan) -> None:
    """Summarise a validated plan without running it."""
    console.print("[green]Plan validated successfully.[/green]")
    console.print(f"  Container: {plan.container}")
    console.print(f"  Commands: {len(plan.to_specs())}")
    if plan.user:
        console.print(f"  User: {plan.user}")
    if plan.working_dir:
        console.print(f"  Working dir: {plan.working_dir}")
    if plan.success_on_exit_codes:
        console.print(f"  Allowed exit codes: {plan.success_on_exit_codes}")
    if plan.probe is not None:
        console.print(f"  Probe: {plan.probe}")
    if plan.telemetry is not None and plan.telemetry.enabled:
        console.print("  Telemetry: enabled")
        if plan.telemetry.otlp_endpoint:
            console.print(f"  OTLP endpoint: {plan.telemetry.otlp_endpoint}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
