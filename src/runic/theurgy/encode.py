"""
Theurgy Encode - Print call data for a function call without sending it.
"""

from __future__ import annotations

from typing import Optional

import click

from ..pneuma.abi import CodecError, find_function
from ..pneuma.codec import encode_calldata_hex
from .common import ProjectSettings, discover, fail_with, select_deployment


@click.command()
@click.argument("name")
@click.argument("function")
@click.argument("args", nargs=-1)
@click.option("--chain-id", type=int, default=None, help="Chain to pick the deployment from")
@click.pass_obj
def encode(
    settings: ProjectSettings,
    name: str,
    function: str,
    args: tuple[str, ...],
    chain_id: Optional[int],
) -> None:
    """Encode FUNCTION of deployment NAME with ARGS as call data."""
    found = discover(settings)
    deployment = select_deployment(found.deployments, name, chain_id)

    try:
        func = find_function(deployment.functions, function)
        click.echo(encode_calldata_hex(func, list(args)))
    except CodecError as exc:
        fail_with(exc)
