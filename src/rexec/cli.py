"""rexec CLI entrypoint."""

from __future__ import annotations

import click

from rexec import __version__


@click.group()
@click.version_option(version=__version__, prog_name="rexec")
def main() -> None:
    """rexec — run commands inside a running container."""


# Register subcommands
from rexec.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
