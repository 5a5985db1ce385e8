"""
Theurgy Invoke - Execute a contract call against a discovered deployment.

View and pure functions go through eth_call; everything else is signed
with the configured wallet and broadcast. Calls target the proxy address
when the deployment sits behind one.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click

from ..anamnesis import donor_interfaces
from ..pneuma.abi import CodecError, find_function
from ..pneuma.tx import ContractCaller, ErrorResult, ReadResult, invoke
from ..sigil.eth import EnvSecretStore, SignerError, rpc_url_variable
from .common import ProjectSettings, discover, fail, fail_with, select_deployment


@click.command("call")
@click.argument("name")
@click.argument("function")
@click.argument("args", nargs=-1)
@click.option("--chain-id", type=int, default=None, help="Chain to pick the deployment from")
@click.option("--value", default=0, type=int, help="ETH value in wei")
@click.option("--gas-limit", default=None, type=int, help="Gas limit (default: estimate)")
@click.option("--rpc-url", envvar="RUNIC_RPC_URL", default=None, help="RPC URL override")
@click.option("--wallet", envvar="RUNIC_WALLET", default="default", help="Signing key name")
@click.option(
    "--abi-from",
    "abi_from",
    default=None,
    help="Call using the ABI of another deployment on the same chain",
)
@click.pass_obj
def call(
    settings: ProjectSettings,
    name: str,
    function: str,
    args: tuple[str, ...],
    chain_id: Optional[int],
    value: int,
    gas_limit: Optional[int],
    rpc_url: Optional[str],
    wallet: str,
    abi_from: Optional[str],
) -> None:
    """
    Call FUNCTION on deployment NAME with ARGS.
    """
    found = discover(settings)
    deployment = select_deployment(found.deployments, name, chain_id)

    if abi_from:
        donors = donor_interfaces(found.deployments, deployment.chain_id)
        donor = select_deployment(donors, abi_from, deployment.chain_id, include_hidden=True)
        deployment.use_interface(donor)

    try:
        func = find_function(deployment.functions, function)
    except CodecError as exc:
        fail_with(exc)

    secrets = EnvSecretStore()
    rpc_url = rpc_url or secrets.resolve_rpc_url(deployment.network_name)
    if not rpc_url:
        fail(
            f"No RPC URL for {deployment.network_name}. "
            f"Set {rpc_url_variable(deployment.network_name)} or pass --rpc-url."
        )

    caller = ContractCaller(rpc_url, chain_id=deployment.chain_id)
    if not func.is_read_only:
        private_key = secrets.resolve_signing_key(wallet)
        if private_key:
            try:
                caller.with_signer(private_key)
            except SignerError as exc:
                fail_with(exc)

    click.echo(f"  Target:   {deployment.callable_address} ({deployment.network_name})")
    click.echo(f"  Function: {func.signature}")
    if args:
        click.echo(f"  Args:     {', '.join(args)}")
    if value > 0:
        click.echo(f"  Value:    {value} wei")
    click.echo("")

    result = asyncio.run(
        invoke(caller, deployment, func, list(args), value=value, gas_limit=gas_limit)
    )

    if isinstance(result, ErrorResult):
        click.secho(f"Call failed: {result.message}", fg="red")
        sys.exit(result.exit_code)
    if isinstance(result, ReadResult):
        if not result.values:
            click.echo("(no return values)")
        for output, text in zip(func.outputs, result.values):
            label = output.name or output.canonical_type
            click.echo(f"  {label}: {text}")
        return

    click.secho("SUCCESS: Transaction sent!", fg="green")
    click.echo(f"  TX: {result.tx_hash}")
