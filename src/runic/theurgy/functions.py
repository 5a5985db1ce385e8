"""
Theurgy Functions - Show what a deployment can be called with.
"""

from __future__ import annotations

from typing import Optional

import click

from .common import ProjectSettings, discover, select_deployment


@click.command()
@click.argument("name")
@click.option("--chain-id", type=int, default=None, help="Chain to pick the deployment from")
@click.pass_obj
def functions(settings: ProjectSettings, name: str, chain_id: Optional[int]) -> None:
    """List the functions of deployment NAME with their selectors."""
    found = discover(settings)
    deployment = select_deployment(found.deployments, name, chain_id)

    click.echo(f"{deployment.name} @ {deployment.callable_address} ({deployment.network_name})")
    if deployment.abi_path:
        click.echo(click.style(f"  ABI: {deployment.abi_path}", dim=True))
    if not deployment.functions:
        click.secho("  No ABI functions available.", fg="yellow")
        return

    for func in deployment.functions:
        outputs = ", ".join(p.canonical_type for p in func.outputs)
        kind = "read " if func.is_read_only else "write"
        click.echo(
            click.style(f"  0x{func.selector.hex()}  ", dim=True)
            + click.style(kind, fg="green" if func.is_read_only else "magenta")
            + f"  {func.signature}"
            + (f" -> ({outputs})" if outputs else "")
            + click.style(f"  [{func.mutability.value}]", dim=True)
        )
