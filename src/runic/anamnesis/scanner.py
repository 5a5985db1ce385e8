"""
Deployment Scanner - Discover deployed contracts from Foundry broadcast runs.

Layout:
    broadcast/<Script>.s.sol/<chain id>/run-latest.json
    out/<Name>.sol/<Name>.json      (preferred interface location)
    out/<Name>.json                 (fallback)

A bad file never stops the scan: it is logged and skipped, and the
contracts found elsewhere are still returned.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from ..config import ChainNames
from ..pneuma.abi import CodecError, ContractFunction, load_interface
from ..pneuma.codec import is_address
from ..sigil.eth import SecretStore
from .models import Deployment
from .proxy import resolve_proxies

logger = logging.getLogger(__name__)

RUN_FILE = "run-latest.json"
CREATION_TYPES = frozenset({"CREATE", "CREATE2"})


class ArtifactReadError(RuntimeError):
    exit_code: int = 5


def _stringify_argument(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"))


def parse_chain_id(run_file: Path) -> int:
    """
    Read the chain id from the run file's parent directory name.

    Raises:
        ArtifactReadError: If the directory name is not an unsigned integer
    """
    dirname = run_file.parent.name
    if not (dirname.isascii() and dirname.isdigit()):
        raise ArtifactReadError(f"Parent directory {dirname!r} of {run_file} is not a chain id")
    return int(dirname)


def read_run_file(path: Path) -> list[dict[str, Any]]:
    """
    Load the transaction list from a broadcast run file.

    Raises:
        ArtifactReadError: If the file cannot be read or decoded
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ArtifactReadError(f"Failed to read {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ArtifactReadError(f"Run file {path} is not a JSON object")

    transactions = data.get("transactions") or []
    if not isinstance(transactions, list):
        raise ArtifactReadError(f"'transactions' in {path} is not a list")
    return [tx for tx in transactions if isinstance(tx, dict)]


class DeploymentScanner:
    """
    Turns a broadcast directory into a list of ``Deployment`` records.

    Args:
        out_dir: Compiler output directory holding interface files
        chain_names: Chain id -> network name table
        run_file: File name of the run records to read
    """

    def __init__(
        self,
        out_dir: Union[Path, str],
        chain_names: Optional[ChainNames] = None,
        run_file: str = RUN_FILE,
    ) -> None:
        self.out_dir = Path(out_dir)
        self.chain_names = chain_names or ChainNames.default()
        self.run_file = run_file

    def interface_path(self, contract_name: str) -> Optional[Path]:
        nested = self.out_dir / f"{contract_name}.sol" / f"{contract_name}.json"
        if nested.is_file():
            return nested
        flat = self.out_dir / f"{contract_name}.json"
        if flat.is_file():
            return flat
        return None

    def load_functions(self, abi_path: Optional[Path]) -> list[ContractFunction]:
        if abi_path is None:
            return []
        try:
            return load_interface(abi_path)
        except (OSError, UnicodeDecodeError, CodecError) as exc:
            logger.warning("Ignoring interface %s: %s", abi_path, exc)
            return []

    def parse_run_file(self, path: Path) -> list[Deployment]:
        """
        Extract one Deployment per contract creation in a run file.

        Raises:
            ArtifactReadError: If the chain id or file contents are unusable
        """
        chain_id = parse_chain_id(path)
        network = self.chain_names.name_for(chain_id)

        deployments = []
        for tx in read_run_file(path):
            if tx.get("transactionType") not in CREATION_TYPES:
                continue
            name = tx.get("contractName")
            address = tx.get("contractAddress")
            if not name or not address:
                continue
            if not isinstance(address, str) or not is_address(address):
                logger.warning("Skipping %s in %s: invalid address %r", name, path, address)
                continue

            abi_path = self.interface_path(name)
            raw_args = tx.get("arguments")
            args = (
                [_stringify_argument(a) for a in raw_args]
                if isinstance(raw_args, list)
                else None
            )

            deployments.append(
                Deployment(
                    name=name,
                    address=address,
                    callable_address=address,
                    network_name=network,
                    chain_id=chain_id,
                    tx_hash=tx.get("hash"),
                    abi_path=abi_path,
                    functions=self.load_functions(abi_path),
                    constructor_args=args,
                )
            )

        logger.debug("Parsed %d deployments from %s", len(deployments), path)
        return deployments

    def scan(self, root_dir: Union[Path, str]) -> tuple[list[Deployment], list[int]]:
        """
        Walk ``root_dir`` for run files and collect deployments.

        Returns:
            Tuple of (deployments, sorted distinct chain ids)
        """
        root = Path(root_dir)
        if not root.is_dir():
            logger.info("Broadcast directory does not exist: %s", root)
            return [], []

        deployments: list[Deployment] = []
        for path in sorted(root.rglob(self.run_file)):
            if not path.is_file():
                continue
            try:
                deployments.extend(self.parse_run_file(path))
            except ArtifactReadError as exc:
                logger.warning("Skipping %s: %s", path, exc)

        logger.info("Found %d deployments", len(deployments))
        chain_ids = sorted({d.chain_id for d in deployments})
        return deployments, chain_ids


def discover_deployments(
    broadcast_dir: Union[Path, str],
    out_dir: Union[Path, str],
    chain_names: Optional[ChainNames] = None,
) -> tuple[list[Deployment], list[int]]:
    """Scan a broadcast directory and link proxies in one step."""
    deployments, chain_ids = DeploymentScanner(out_dir, chain_names).scan(broadcast_dir)
    return resolve_proxies(deployments), chain_ids


def unconfigured_chains(
    chain_ids: Iterable[int], chain_names: ChainNames, secrets: SecretStore
) -> list[int]:
    """Chain ids whose network has no RPC URL in the secret store."""
    return [
        chain_id
        for chain_id in chain_ids
        if not secrets.resolve_rpc_url(chain_names.name_for(chain_id))
    ]
