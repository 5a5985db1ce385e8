"""Sample ABIs, artifact builders and a fake JSON-RPC node shared by the tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
from eth_hash.auto import keccak

from runic.pneuma.rpc import RpcProvider

# Anvil's first default account.
ANVIL_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
ANVIL_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"

COUNTER_ADDRESS = "0x5fbdb2315678afecb367f032d93f642f64180aa3"
PROXY_ADDRESS = "0xe7f1725e7734ce288f8367e1bb143e90bb3f0512"
TOKEN_ADDRESS = "0x9fe46736679d2d9a65f0992f2272de9f3c7fa6e0"

RPC_URL = "http://node.test"

COUNTER_ABI: list[dict[str, Any]] = [
    {
        "type": "function",
        "name": "increment",
        "inputs": [],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "number",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256", "internalType": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "setNumber",
        "inputs": [{"name": "newNumber", "type": "uint256", "internalType": "uint256"}],
        "outputs": [],
        "stateMutability": "nonpayable",
    },
    {
        "type": "event",
        "name": "NumberSet",
        "inputs": [{"name": "value", "type": "uint256", "indexed": False}],
        "anonymous": False,
    },
]

ERC20_ABI: list[dict[str, Any]] = [
    {"type": "constructor", "inputs": [{"name": "supply", "type": "uint256"}]},
    {
        "type": "function",
        "name": "balanceOf",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
        "stateMutability": "view",
    },
    {
        "type": "function",
        "name": "transfer",
        "inputs": [
            {"name": "to", "type": "address"},
            {"name": "amount", "type": "uint256"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
        "stateMutability": "nonpayable",
    },
    {
        "type": "function",
        "name": "name",
        "inputs": [],
        "outputs": [{"name": "", "type": "string"}],
        "stateMutability": "view",
    },
    {"type": "error", "name": "InsufficientBalance", "inputs": []},
]

PROXY_ABI: list[dict[str, Any]] = [
    {
        "type": "constructor",
        "inputs": [
            {"name": "implementation", "type": "address"},
            {"name": "_data", "type": "bytes"},
        ],
        "stateMutability": "payable",
    },
    {"type": "fallback", "stateMutability": "payable"},
    {
        "type": "event",
        "name": "Upgraded",
        "inputs": [{"name": "implementation", "type": "address", "indexed": True}],
    },
]


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path


def creation(name: str, address: str, arguments: Any = None, tx_type: str = "CREATE") -> dict:
    tx: dict[str, Any] = {
        "hash": "0x" + address[2:].rjust(64, "0"),
        "transactionType": tx_type,
        "contractName": name,
        "contractAddress": address,
        "arguments": arguments,
        "transaction": {"from": ANVIL_ADDRESS.lower()},
    }
    return tx


def word(value: int) -> str:
    return value.to_bytes(32, "big").hex()


class FakeNode:
    """Answers JSON-RPC requests from a method -> result table and records them."""

    def __init__(self, results: Optional[dict[str, Any]] = None) -> None:
        self.results = {
            "eth_chainId": hex(31337),
            "eth_getTransactionCount": "0x7",
            "eth_gasPrice": hex(1_000_000_000),
            "eth_estimateGas": hex(50_000),
            **(results or {}),
        }
        self.requests: list[dict[str, Any]] = []

    def methods(self) -> list[str]:
        return [r["method"] for r in self.requests]

    def params(self, method: str) -> list:
        return next(r["params"] for r in self.requests if r["method"] == method)

    def handle(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append(body)
        method = body["method"]

        if method == "eth_sendRawTransaction":
            raw = bytes.fromhex(body["params"][0][2:])
            result = "0x" + keccak(raw).hex().upper()
        else:
            result = self.results[method]

        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(body)
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def provider(self) -> RpcProvider:
        return RpcProvider(RPC_URL, transport=httpx.MockTransport(self.handle))


def rpc_error(message: str) -> Callable[[dict], httpx.Response]:
    def respond(body: dict) -> httpx.Response:
        return httpx.Response(
            200,
            json={"jsonrpc": "2.0", "id": body["id"], "error": {"code": 3, "message": message}},
        )

    return respond
