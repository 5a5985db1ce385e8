"""
ECDSA / secp256k1 key handling and secret lookup for Runic.

Signing keys and RPC URLs are secrets. They live outside the project tree,
in ~/.runic/.env or the process environment:

    RPC_URL_SEPOLIA=https://...
    PRIVATE_KEY_DEPLOYER=0x...
    PRIVATE_KEY=0x...          # used when no named key matches

Dependencies: eth-account (lightweight, no full web3.py needed)
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Optional, Protocol

from dotenv import dotenv_values
from eth_account import Account
from eth_account.signers.local import LocalAccount

from ..config import RUNIC_ENV


class SignerError(ValueError):
    exit_code: int = 4


class NoSignerConfigured(SignerError):
    pass


class SecretStore(Protocol):
    """Where RPC URLs and signing keys come from."""

    def resolve_rpc_url(self, name: str) -> Optional[str]:
        ...

    def resolve_signing_key(self, name: str) -> Optional[str]:
        ...


def _env_suffix(name: str) -> str:
    return re.sub(r"[^0-9A-Za-z]", "_", name.strip()).upper()


def rpc_url_variable(network_name: str) -> str:
    """Environment variable holding the RPC URL for a network."""
    return f"RPC_URL_{_env_suffix(network_name)}"


class EnvSecretStore:
    """
    Resolve secrets from a .env file and the process environment.

    Values already present in the process environment win over the file.

    Args:
        env_path: Path to .env file (default: ~/.runic/.env)
    """

    def __init__(self, env_path: Optional[Path] = None) -> None:
        self.env_path = env_path or RUNIC_ENV
        self._file_values: dict[str, str] = {}
        if self.env_path.exists():
            self._file_values = {
                k: v for k, v in dotenv_values(self.env_path).items() if v is not None
            }

    def _get(self, key: str) -> Optional[str]:
        value = os.environ.get(key) or self._file_values.get(key)
        return value.strip() if value else None

    def resolve_rpc_url(self, name: str) -> Optional[str]:
        return self._get(rpc_url_variable(name))

    def resolve_signing_key(self, name: str) -> Optional[str]:
        return self._get(f"PRIVATE_KEY_{_env_suffix(name)}") or self._get("PRIVATE_KEY")


def normalize_private_key(private_key: str) -> str:
    """
    Normalize a hex private key to 0x-prefixed form.

    Raises:
        SignerError: If the key is not 64 hex characters
    """
    clean = private_key.strip()
    if clean[:2] in ("0x", "0X"):
        clean = clean[2:]
    if not re.fullmatch(r"[0-9a-fA-F]{64}", clean):
        raise SignerError(
            "Invalid private key format: expected 64 hex characters "
            "(with or without 0x prefix)"
        )
    return "0x" + clean.lower()


def load_signer(private_key: str) -> LocalAccount:
    """
    Get an eth-account LocalAccount from a private key.

    Raises:
        SignerError: If the key cannot be parsed
    """
    key = normalize_private_key(private_key)
    try:
        return Account.from_key(key)
    except (ValueError, TypeError) as exc:
        raise SignerError(f"Failed to parse private key: {exc}") from exc

