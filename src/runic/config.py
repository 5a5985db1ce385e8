"""
Runic configuration - filesystem locations and the chain-name table.

The chain-name table is an ordinary object: build it once with
``ChainNames.default()`` or ``ChainNames.from_file(...)`` and hand it to
whatever needs to turn a chain id into a network name.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional, Union


def _runic_dir() -> Path:
    override = os.environ.get("RUNIC_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".runic"


RUNIC_DIR = _runic_dir()
RUNIC_ENV = RUNIC_DIR / ".env"
CHAINS_FILE = RUNIC_DIR / "chains.json"

DEFAULT_BROADCAST_DIR = "broadcast"
DEFAULT_OUT_DIR = "out"

# Well-known EVM chains; user entries in chains.json take precedence.
DEFAULT_CHAIN_NAMES: dict[int, str] = {
    1: "mainnet",
    10: "optimism",
    100: "gnosis",
    137: "polygon",
    8453: "base",
    31337: "anvil",
    42161: "arbitrum",
    84532: "base-sepolia",
    11155111: "sepolia",
}


class ConfigError(ValueError):
    exit_code: int = 6


class ChainNames:
    """Immutable chain id -> network name lookup."""

    def __init__(self, names: Optional[Mapping[int, str]] = None) -> None:
        self._names = MappingProxyType(dict(names or {}))

    @classmethod
    def default(cls) -> "ChainNames":
        return cls(DEFAULT_CHAIN_NAMES)

    @classmethod
    def from_file(cls, path: Union[Path, str, None] = None) -> "ChainNames":
        """
        Load chain names from a JSON object of ``{"<chain id>": "<name>"}``.

        Entries are merged over the built-in defaults. A missing file
        yields the defaults unchanged.

        Raises:
            ConfigError: If the file is not valid JSON or has a non-integer key
        """
        path = Path(path) if path is not None else CHAINS_FILE
        names = dict(DEFAULT_CHAIN_NAMES)
        if not path.exists():
            return cls(names)

        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            raise ConfigError(f"Cannot read chain names from {path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError(f"Chain names file must hold a JSON object: {path}")

        for key, value in data.items():
            try:
                chain_id = int(key)
            except ValueError as exc:
                raise ConfigError(f"Invalid chain id {key!r} in {path}") from exc
            names[chain_id] = str(value)

        return cls(names)

    def name_for(self, chain_id: int) -> str:
        return self._names.get(chain_id, f"chain-{chain_id}")

    def id_for(self, name: str) -> Optional[int]:
        for chain_id, known in self._names.items():
            if known == name:
                return chain_id
        return None

    def __contains__(self, chain_id: object) -> bool:
        return chain_id in self._names

    def __len__(self) -> int:
        return len(self._names)
