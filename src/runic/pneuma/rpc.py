"""
JSON-RPC Provider - Async Ethereum JSON-RPC over httpx.

Lightweight alternative to web3.py: one ``httpx.AsyncClient`` per
provider, plain JSON-RPC 2.0 payloads, hex quantities converted to ints.
Every failure surfaces as ``RpcError``; nothing here retries.
"""

from __future__ import annotations

import itertools
import logging
from typing import Any, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class RpcError(RuntimeError):
    exit_code: int = 3


def _hex_quantity(value: int) -> str:
    return hex(value)


def _to_int(result: Any, method: str) -> int:
    if not isinstance(result, str):
        raise RpcError(f"{method} returned {result!r}, expected a hex quantity")
    try:
        return int(result, 16)
    except ValueError as exc:
        raise RpcError(f"{method} returned malformed quantity {result!r}") from exc


class RpcProvider:
    """
    Async JSON-RPC client for a single endpoint.

    Use as an async context manager, or call ``aclose()`` when done.

    Args:
        rpc_url: HTTP(S) endpoint
        timeout: Per-request timeout in seconds
        transport: Optional httpx transport (tests pass ``httpx.MockTransport``)
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self._ids = itertools.count(1)

    async def __aenter__(self) -> "RpcProvider":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def request(self, method: str, params: list) -> Any:
        """
        Make a JSON-RPC call.

        Returns:
            Result field from the RPC response

        Raises:
            RpcError: On transport failure, HTTP error status, or an
                ``error`` member in the response
        """
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": params,
            "id": next(self._ids),
        }
        logger.debug("RPC %s -> %s", method, self.rpc_url)

        try:
            response = await self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise RpcError(f"RPC request {method} failed: {exc}") from exc
        except ValueError as exc:
            raise RpcError(f"RPC response to {method} is not JSON: {exc}") from exc

        if not isinstance(data, dict):
            raise RpcError(f"RPC response to {method} is not an object")
        if data.get("error"):
            error = data["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RpcError(f"RPC error from {method}: {message}")

        return data.get("result")

    async def call(self, to: str, data: bytes, block: str = "latest") -> bytes:
        """Execute ``eth_call`` and return the raw return data."""
        result = await self.request(
            "eth_call", [{"to": to, "data": "0x" + data.hex()}, block]
        )
        if not isinstance(result, str):
            raise RpcError(f"eth_call returned {result!r}, expected hex data")
        digits = result[2:] if result.startswith("0x") else result
        try:
            return bytes.fromhex(digits)
        except ValueError as exc:
            raise RpcError(f"eth_call returned malformed data {result!r}") from exc

    async def chain_id(self) -> int:
        return _to_int(await self.request("eth_chainId", []), "eth_chainId")

    async def get_nonce(self, address: str) -> int:
        result = await self.request("eth_getTransactionCount", [address, "pending"])
        return _to_int(result, "eth_getTransactionCount")

    async def gas_price(self) -> int:
        return _to_int(await self.request("eth_gasPrice", []), "eth_gasPrice")

    async def estimate_gas(
        self, sender: str, to: str, data: bytes, value: int = 0
    ) -> int:
        tx = {
            "from": sender,
            "to": to,
            "data": "0x" + data.hex(),
            "value": _hex_quantity(value),
        }
        return _to_int(await self.request("eth_estimateGas", [tx]), "eth_estimateGas")

    async def send_raw_transaction(self, raw_tx: bytes) -> str:
        """Broadcast a signed transaction; returns its hash as lowercase hex."""
        result = await self.request("eth_sendRawTransaction", ["0x" + raw_tx.hex()])
        if not isinstance(result, str):
            raise RpcError(f"eth_sendRawTransaction returned {result!r}")
        return result.lower()
