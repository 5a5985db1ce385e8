"""Shared fixtures: a Foundry-style project tree."""

from __future__ import annotations

from pathlib import Path

import pytest

from .samples import (
    COUNTER_ABI,
    COUNTER_ADDRESS,
    ERC20_ABI,
    PROXY_ABI,
    PROXY_ADDRESS,
    TOKEN_ADDRESS,
    creation,
    write_json,
)


@pytest.fixture()
def project(tmp_path: Path) -> Path:
    """
    A Foundry project with one deploy run on anvil (31337):
    Counter behind an ERC1967Proxy, plus an ERC20 token.
    """
    root = tmp_path / "project"
    out = root / "out"
    write_json(out / "Counter.sol" / "Counter.json", {"abi": COUNTER_ABI, "bytecode": {"object": "0x"}})
    write_json(out / "ERC1967Proxy.json", PROXY_ABI)
    write_json(out / "Token.sol" / "Token.json", {"abi": ERC20_ABI})

    write_json(
        root / "broadcast" / "Deploy.s.sol" / "31337" / "run-latest.json",
        {
            "transactions": [
                creation("Counter", COUNTER_ADDRESS),
                creation("ERC1967Proxy", PROXY_ADDRESS, [COUNTER_ADDRESS, "0x"]),
                creation("Token", TOKEN_ADDRESS, ["1000000"], tx_type="CREATE2"),
                {
                    "hash": "0x" + "ab" * 32,
                    "transactionType": "CALL",
                    "contractName": "Counter",
                    "contractAddress": PROXY_ADDRESS,
                    "function": "setNumber(uint256)",
                    "arguments": ["7"],
                },
            ],
            "chain": 31337,
        },
    )
    return root
