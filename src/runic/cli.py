"""
Runic CLI

Command-line interface for inspecting and calling deployed contracts
found in a Foundry project's broadcast records.

Commands:
  scan       - List deployments (proxies resolved)
  functions  - Show a deployment's functions and selectors
  encode     - Print call data for a function call
  call       - Execute a read or write call
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from .config import DEFAULT_BROADCAST_DIR, DEFAULT_OUT_DIR
from .theurgy.common import ProjectSettings


# ============ Constants ============

VERSION = "0.3.0"


# ============ Main CLI Group ============


@click.group()
@click.version_option(version=VERSION, prog_name="runic")
@click.option(
    "--broadcast-dir",
    envvar="RUNIC_BROADCAST_DIR",
    default=DEFAULT_BROADCAST_DIR,
    type=click.Path(path_type=Path),
    help="Directory of broadcast run records",
)
@click.option(
    "--out-dir",
    envvar="RUNIC_OUT_DIR",
    default=DEFAULT_OUT_DIR,
    type=click.Path(path_type=Path),
    help="Compiler output directory with ABI artifacts",
)
@click.option(
    "--chains-file",
    default=None,
    type=click.Path(path_type=Path),
    help="JSON file mapping chain ids to network names",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(
    ctx: click.Context,
    broadcast_dir: Path,
    out_dir: Path,
    chains_file: Optional[Path],
    verbose: bool,
) -> None:
    """Runic - inspect and call deployed contracts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = ProjectSettings(
        broadcast_dir=broadcast_dir,
        out_dir=out_dir,
        chains_file=chains_file,
    )


# ============ Top-level Commands ============

from .theurgy.scan import scan
from .theurgy.functions import functions
from .theurgy.encode import encode
from .theurgy.invoke import call

cli.add_command(scan)
cli.add_command(functions)
cli.add_command(encode)
cli.add_command(call)


# ============ Entry Points ============


def main() -> None:
    """Runic CLI entry point."""
    # Ensure UTF-8 output on Windows
    if sys.platform == "win32":
        try:
            sys.stdout.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
            sys.stderr.reconfigure(encoding="utf-8")  # type: ignore[union-attr]
        except (AttributeError, OSError):
            pass  # Fallback: old Python or non-tty
    cli()


if __name__ == "__main__":
    main()
