"""
Proxy Resolver - Point implementation contracts at the proxy in front of them.

Two passes over the scanned deployments, each confined to a single chain:

1. Name pass: ``Counter`` and ``CounterProxy`` deployed on the same chain
   are an implementation/proxy pair.
2. Argument pass: a deployment whose first constructor argument is the
   address of another deployment on the same chain (ERC1967Proxy,
   TransparentUpgradeableProxy) is that deployment's proxy.

A linked implementation keeps its own ABI but takes the proxy's address
as ``callable_address``; the proxy is renamed with a ``_hidden`` suffix so
it drops out of the main listing yet stays available as an ABI donor.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .models import Deployment

logger = logging.getLogger(__name__)

PROXY_SUFFIX = "Proxy"


def base_name(name: str) -> str:
    if name.endswith(PROXY_SUFFIX):
        return name[: -len(PROXY_SUFFIX)]
    return name


def _link(implementation: Deployment, proxy: Deployment, reason: str) -> None:
    implementation.link_behind(proxy)
    logger.info(
        "Linked %s (%s) behind proxy %s on chain %d [%s]",
        implementation.name,
        implementation.address,
        proxy.address,
        implementation.chain_id,
        reason,
    )


def _link_by_name(deployments: list[Deployment]) -> None:
    groups: dict[tuple[str, int], list[Deployment]] = {}
    for deployment in deployments:
        key = (base_name(deployment.name), deployment.chain_id)
        groups.setdefault(key, []).append(deployment)

    for members in groups.values():
        if len(members) < 2:
            continue
        proxy = next((d for d in members if d.name.endswith(PROXY_SUFFIX)), None)
        implementation = next(
            (d for d in members if not d.name.endswith(PROXY_SUFFIX)), None
        )
        if proxy is None or implementation is None:
            continue
        if len(members) > 2:
            logger.warning(
                "%d deployments share base name %r on chain %d; linking %s -> %s",
                len(members),
                base_name(proxy.name),
                proxy.chain_id,
                implementation.address,
                proxy.address,
            )
        _link(implementation, proxy, "name")


def _link_by_constructor_argument(deployments: list[Deployment]) -> None:
    by_address: dict[tuple[str, int], Deployment] = {}
    for deployment in deployments:
        by_address.setdefault((deployment.address, deployment.chain_id), deployment)

    links = []
    for proxy in deployments:
        if not proxy.constructor_args:
            continue
        target = by_address.get((proxy.constructor_args[0], proxy.chain_id))
        if target is not None and target is not proxy:
            links.append((proxy, target))

    for proxy, implementation in links:
        # A proxy already hidden (by name or an earlier link) keeps its pairing.
        if proxy.is_hidden:
            continue
        if implementation.is_proxy:
            logger.warning(
                "%s (%s) is already behind proxy %s on chain %d; ignoring %s (%s)",
                implementation.name,
                implementation.address,
                implementation.callable_address,
                implementation.chain_id,
                proxy.name,
                proxy.address,
            )
            continue
        _link(implementation, proxy, "constructor argument")


def resolve_proxies(deployments: list[Deployment]) -> list[Deployment]:
    """Link proxies to implementations in place; returns the same list."""
    _link_by_name(deployments)
    _link_by_constructor_argument(deployments)
    return deployments


def visible_deployments(deployments: Iterable[Deployment]) -> list[Deployment]:
    return [d for d in deployments if not d.is_hidden]


def donor_interfaces(
    deployments: Iterable[Deployment], chain_id: Optional[int] = None
) -> list[Deployment]:
    """Deployments (hidden ones included) whose ABI can be lent to another."""
    return [
        d
        for d in deployments
        if d.functions and (chain_id is None or d.chain_id == chain_id)
    ]
