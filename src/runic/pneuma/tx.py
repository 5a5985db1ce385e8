"""
Contract Caller - Read via eth_call, write via signed transactions.

Uses eth-account for signing and the httpx-based JSON-RPC provider for
sending. Each call is a single attempt: a failed broadcast is reported,
never retried, so a transaction cannot be submitted twice by accident.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Union

from eth_account.signers.local import LocalAccount

from ..anamnesis.models import Deployment
from ..sigil.eth import NoSignerConfigured, SignerError, load_signer
from .abi import CodecError, ContractFunction
from .codec import InvalidLiteral, decode_result, encode_call, to_checksum_address
from .rpc import RpcError, RpcProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReadResult:
    values: list[str]


@dataclass(frozen=True)
class WriteResult:
    tx_hash: str


@dataclass(frozen=True)
class ErrorResult:
    message: str
    exit_code: int = 1


CallResult = Union[ReadResult, WriteResult, ErrorResult]


class ContractCaller:
    """
    Issues calls against one RPC endpoint.

    Args:
        rpc_url: JSON-RPC endpoint
        chain_id: Chain id for signing; queried from the node when None
        provider: Pre-built provider (tests inject one with a mock transport)
    """

    def __init__(
        self,
        rpc_url: str,
        chain_id: Optional[int] = None,
        provider: Optional[RpcProvider] = None,
    ) -> None:
        self.rpc_url = rpc_url
        self.chain_id = chain_id
        self._provider = provider
        self.signer: Optional[LocalAccount] = None

    def with_signer(self, private_key: str) -> "ContractCaller":
        """
        Attach a signing key for write calls.

        Raises:
            SignerError: If the key cannot be parsed
        """
        self.signer = load_signer(private_key)
        return self

    @staticmethod
    def is_read_only(func: ContractFunction) -> bool:
        return func.is_read_only

    def _connect(self) -> RpcProvider:
        return self._provider or RpcProvider(self.rpc_url)

    async def _release(self, provider: RpcProvider) -> None:
        if provider is not self._provider:
            await provider.aclose()

    async def call_read(
        self, address: str, func: ContractFunction, args: Sequence[str]
    ) -> ReadResult:
        """
        Execute a read-only call (eth_call) and decode the result.

        Raises:
            CodecError: On a malformed address, arguments, or return data
            RpcError: If the node cannot be reached or the call reverts
        """
        to = to_checksum_address(address)
        calldata = encode_call(func, args)

        provider = self._connect()
        try:
            data = await provider.call(to, calldata)
        finally:
            await self._release(provider)

        return ReadResult(decode_result(func, data))

    async def call_write(
        self,
        address: str,
        func: ContractFunction,
        args: Sequence[str],
        value: Optional[int] = None,
        gas_limit: Optional[int] = None,
    ) -> WriteResult:
        """
        Build, sign, and broadcast a contract transaction.

        Returns as soon as the node accepts the transaction; inclusion is
        not awaited.

        Raises:
            NoSignerConfigured: If ``with_signer`` was never called
            CodecError: On a malformed address or arguments
            RpcError: If any node request or the broadcast fails
        """
        if self.signer is None:
            raise NoSignerConfigured("No signer configured for write transaction")

        to = to_checksum_address(address)
        calldata = encode_call(func, args)
        amount = value or 0

        provider = self._connect()
        try:
            chain_id = self.chain_id
            if chain_id is None:
                chain_id = await provider.chain_id()
            nonce = await provider.get_nonce(self.signer.address)
            gas_price = await provider.gas_price()
            gas = gas_limit or await provider.estimate_gas(
                self.signer.address, to, calldata, amount
            )

            tx = {
                "to": to,
                "data": "0x" + calldata.hex(),
                "value": amount,
                "nonce": nonce,
                "gas": gas,
                "gasPrice": gas_price,
                "chainId": chain_id,
            }
            signed = self.signer.sign_transaction(tx)
            tx_hash = await provider.send_raw_transaction(bytes(signed.raw_transaction))
        finally:
            await self._release(provider)

        logger.info("Sent %s to %s: %s", func.name, to, tx_hash)
        return WriteResult(tx_hash)


async def invoke(
    caller: ContractCaller,
    deployment: Deployment,
    func: ContractFunction,
    args: Sequence[str],
    value: Optional[int] = None,
    gas_limit: Optional[int] = None,
) -> CallResult:
    """
    Run one user-initiated call against a deployment.

    Calls go to ``deployment.callable_address`` so proxied contracts are
    reached through their proxy. Sending value to a view or pure function is
    refused. Failures come back as ``ErrorResult``.
    """
    try:
        if caller.is_read_only(func):
            if value:
                raise InvalidLiteral(
                    f"{func.name} is {func.mutability.value} and cannot receive value"
                )
            return await caller.call_read(deployment.callable_address, func, args)
        return await caller.call_write(
            deployment.callable_address, func, args, value=value, gas_limit=gas_limit
        )
    except (CodecError, RpcError, SignerError) as exc:
        logger.debug("Call to %s.%s failed: %s", deployment.name, func.name, exc)
        return ErrorResult(str(exc), exc.exit_code)
