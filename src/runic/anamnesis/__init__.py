"""
Anamnesis - Recall what a project has deployed.

Reads Foundry broadcast records back into ``Deployment`` objects and
works out which contracts sit behind proxies.
"""

from .models import Deployment
from .proxy import donor_interfaces, resolve_proxies, visible_deployments
from .scanner import (
    ArtifactReadError,
    DeploymentScanner,
    discover_deployments,
    unconfigured_chains,
)

__all__ = [
    "ArtifactReadError",
    "Deployment",
    "DeploymentScanner",
    "discover_deployments",
    "donor_interfaces",
    "resolve_proxies",
    "unconfigured_chains",
    "visible_deployments",
]
