"""
Shared plumbing for Theurgy commands: project settings, deployment lookup,
and turning library errors into CLI exits.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import click

from ..anamnesis import Deployment, discover_deployments, visible_deployments
from ..config import ChainNames, ConfigError


@dataclass(frozen=True)
class ProjectSettings:
    broadcast_dir: Path
    out_dir: Path
    chains_file: Optional[Path] = None


@dataclass
class Discovery:
    deployments: list[Deployment]
    chain_ids: list[int]
    chain_names: ChainNames


def fail(message: str, exit_code: int = 1) -> NoReturn:
    click.secho(f"ERROR: {message}", fg="red", err=True)
    sys.exit(exit_code)


def fail_with(exc: Exception) -> NoReturn:
    fail(str(exc), getattr(exc, "exit_code", 1))


def discover(settings: ProjectSettings) -> Discovery:
    try:
        chain_names = ChainNames.from_file(settings.chains_file)
    except ConfigError as exc:
        fail_with(exc)
    deployments, chain_ids = discover_deployments(
        settings.broadcast_dir, settings.out_dir, chain_names
    )
    return Discovery(deployments, chain_ids, chain_names)


def _matches(deployment: Deployment, name: str) -> bool:
    return name in (deployment.name, deployment.display_name) or (
        deployment.address.lower() == name.lower()
    )


def select_deployment(
    deployments: list[Deployment],
    name: str,
    chain_id: Optional[int] = None,
    include_hidden: bool = False,
) -> Deployment:
    """Find one deployment by name or address, optionally on a given chain."""
    pool = deployments if include_hidden else visible_deployments(deployments)
    matches = [
        d for d in pool if _matches(d, name) and (chain_id is None or d.chain_id == chain_id)
    ]
    if not matches:
        where = f" on chain {chain_id}" if chain_id is not None else ""
        fail(f"No deployment named {name}{where}")
    if len(matches) > 1:
        options = ", ".join(f"{d.address} ({d.network_name})" for d in matches)
        fail(f"{name} matches several deployments: {options}. Pass --chain-id or an address.")
    return matches[0]
