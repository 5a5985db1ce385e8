"""
Theurgy Scan - List deployed contracts found in broadcast runs.

Contracts behind a proxy are listed once, under the implementation's
name, with the proxy address as the call target.
"""

from __future__ import annotations

import click

from ..anamnesis import unconfigured_chains, visible_deployments
from ..sigil.eth import EnvSecretStore, rpc_url_variable
from .common import ProjectSettings, discover


@click.command()
@click.option("--all", "show_all", is_flag=True, help="Include hidden proxy entries")
@click.pass_obj
def scan(settings: ProjectSettings, show_all: bool) -> None:
    """
    Discover deployments and report chains without an RPC URL.
    """
    found = discover(settings)
    listed = found.deployments if show_all else visible_deployments(found.deployments)

    if not listed:
        click.echo(f"No deployments found under {settings.broadcast_dir}")
        return

    click.echo(f"Deployments: {len(listed)}")
    for d in listed:
        line = (
            click.style(f"  {d.name:<28}", fg="bright_white", bold=True)
            + click.style(f"{d.network_name:<14}", fg="cyan")
            + d.callable_address
        )
        if d.is_proxy:
            line += click.style(f"  [proxy -> impl {d.address}]", dim=True)
        if not d.functions:
            line += click.style("  (no ABI)", fg="yellow")
        click.echo(line)

    missing = unconfigured_chains(found.chain_ids, found.chain_names, EnvSecretStore())
    if missing:
        click.echo("")
        click.secho("  No RPC URL configured for:", fg="yellow")
        for chain_id in missing:
            name = found.chain_names.name_for(chain_id)
            click.echo(f"    {name} (chain {chain_id}): set {rpc_url_variable(name)}")
