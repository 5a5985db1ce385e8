"""
Call Codec - Function selectors, call data encoding, and result decoding.

Arguments arrive as the strings a user typed; results leave as strings
(hex for addresses and bytes, decimal for integers). Argument blocks are
laid out by eth-abi once each literal has been checked against its type.
Results are walked slot by slot, each static slot decoded by eth-abi, so an
unknown or malformed output degrades to raw hex instead of failing the
whole call.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_hash.auto import keccak

from .abi import (
    AbiKind,
    AbiType,
    CodecError,
    ContractFunction,
    UnsupportedParamType,
)

logger = logging.getLogger(__name__)

SLOT_SIZE = 32


class InvalidLiteral(CodecError):
    pass


class InsufficientData(CodecError):
    pass


def keccak256(data: bytes) -> bytes:
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    return keccak(data)


def to_checksum_address(address: str) -> str:
    """Convert an address to EIP-55 checksummed format."""
    addr = _strip_hex_prefix(address).lower()
    if len(addr) != 40 or not _is_hex(addr):
        raise InvalidLiteral(f"Invalid address: {address!r}")
    addr_hash = keccak256(addr.encode("utf-8")).hex()
    result = "0x"
    for i, c in enumerate(addr):
        if c in "abcdef":
            result += c.upper() if int(addr_hash[i], 16) >= 8 else c
        else:
            result += c
    return result


def is_address(value: str) -> bool:
    stripped = _strip_hex_prefix(value.strip())
    return len(stripped) == 40 and _is_hex(stripped)


# ---------------------------------------------------------------------------
# Signatures
# ---------------------------------------------------------------------------


def signature(func: ContractFunction) -> str:
    return func.signature


def selector(func: ContractFunction) -> bytes:
    return func.selector


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _strip_hex_prefix(value: str) -> str:
    return value[2:] if value[:2] in ("0x", "0X") else value


_HEX = re.compile(r"[0-9a-fA-F]*")


def _is_hex(value: str) -> bool:
    return _HEX.fullmatch(value) is not None


def _parse_hex_bytes(value: str, type_name: str) -> bytes:
    digits = _strip_hex_prefix(value.strip())
    if not _is_hex(digits):
        raise InvalidLiteral(f"Invalid {type_name}: {value!r} is not hex")
    if len(digits) % 2:
        raise InvalidLiteral(f"Invalid {type_name}: odd number of hex digits in {value!r}")
    return bytes.fromhex(digits)


_HEX_INTEGER = re.compile(r"0[xX][0-9a-fA-F]+")
_UNSIGNED_DECIMAL = re.compile(r"[0-9]+")
_SIGNED_DECIMAL = re.compile(r"-?[0-9]+")


def _parse_integer(value: str, type_name: str, signed: bool = False) -> tuple[int, bool]:
    """Returns (number, was_hex)."""
    text = value.strip()
    if _HEX_INTEGER.fullmatch(text):
        return int(text[2:], 16), True
    decimal = _SIGNED_DECIMAL if signed else _UNSIGNED_DECIMAL
    if decimal.fullmatch(text):
        return int(text, 10), False
    raise InvalidLiteral(f"Invalid {type_name}: {value!r}")


def coerce_argument(abi_type: AbiType, value: str) -> Any:
    """
    Convert a user-supplied literal into the Python value eth-abi expects.

    Raises:
        UnsupportedParamType: For types the codec cannot encode
        InvalidLiteral: When the literal does not fit the type
    """
    kind = abi_type.kind
    type_name = abi_type.canonical

    if kind is AbiKind.ADDRESS:
        return to_checksum_address(value.strip())

    if kind is AbiKind.UINT:
        number, _ = _parse_integer(value, type_name)
        if number < 0 or number >= 1 << abi_type.size:
            raise InvalidLiteral(f"Value {value} out of range for {type_name}")
        return number

    if kind is AbiKind.INT:
        number, was_hex = _parse_integer(value, type_name, signed=True)
        bits = abi_type.size
        if was_hex:
            # Hex literals are the raw two's complement bit pattern.
            if number >= 1 << bits:
                raise InvalidLiteral(f"Value {value} out of range for {type_name}")
            if number >= 1 << (bits - 1):
                number -= 1 << bits
        elif not -(1 << (bits - 1)) <= number < 1 << (bits - 1):
            raise InvalidLiteral(f"Value {value} out of range for {type_name}")
        return number

    if kind is AbiKind.BOOL:
        return value.strip().lower() in ("true", "1")

    if kind is AbiKind.FIXED_BYTES:
        raw = _parse_hex_bytes(value, type_name)
        if len(raw) != abi_type.size:
            raise InvalidLiteral(
                f"Invalid {type_name}: expected {abi_type.size} bytes, got {len(raw)}"
            )
        return raw

    if kind is AbiKind.BYTES:
        return _parse_hex_bytes(value, type_name)

    if kind is AbiKind.STRING:
        return value

    if kind is AbiKind.TUPLE:
        try:
            items = json.loads(value)
        except json.JSONDecodeError as exc:
            raise InvalidLiteral(
                f"Tuple {type_name} must be given as a JSON array: {value!r}"
            ) from exc
        if not isinstance(items, list) or len(items) != len(abi_type.components):
            raise InvalidLiteral(
                f"Tuple {type_name} needs {len(abi_type.components)} members: {value!r}"
            )
        return tuple(
            coerce_argument(component, item if isinstance(item, str) else json.dumps(item))
            for component, item in zip(abi_type.components, items)
        )

    raise UnsupportedParamType(f"Unsupported parameter type: {abi_type.raw}")


def encode_arguments(types: Sequence[AbiType], args: Sequence[str]) -> bytes:
    values = [coerce_argument(t, v) for t, v in zip(types, args)]
    try:
        return encode([t.canonical for t in types], values)
    except EncodingError as exc:
        raise InvalidLiteral(str(exc)) from exc


def encode_call(func: ContractFunction, args: Sequence[str]) -> bytes:
    """
    Encode a call: 4-byte selector followed by the argument block.

    Missing trailing arguments are treated as empty strings.

    Raises:
        UnsupportedParamType: If an input type cannot be encoded
        InvalidLiteral: If a literal is malformed, or too many are given
    """
    if len(args) > len(func.inputs):
        raise InvalidLiteral(
            f"{func.name} takes {len(func.inputs)} arguments, got {len(args)}"
        )
    padded = list(args) + [""] * (len(func.inputs) - len(args))
    types = [p.abi_type for p in func.inputs]
    return selector(func) + encode_arguments(types, padded)


def encode_calldata_hex(func: ContractFunction, args: Sequence[str]) -> str:
    return "0x" + encode_call(func, args).hex()


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _read_slot(data: bytes, position: int, what: str) -> bytes:
    end = position + SLOT_SIZE
    if position < 0 or len(data) < end:
        raise InsufficientData(
            f"Insufficient data for {what}: need {end} bytes, have {len(data)}"
        )
    return data[position:end]


def _read_dynamic(data: bytes, slot: bytes, what: str) -> bytes:
    offset = int.from_bytes(slot, "big")
    length = int.from_bytes(_read_slot(data, offset, f"{what} length"), "big")
    start = offset + SLOT_SIZE
    if len(data) < start + length:
        raise InsufficientData(
            f"Insufficient data for {what}: need {start + length} bytes, have {len(data)}"
        )
    return data[start:start + length]


_SLOT_KINDS = frozenset(
    {AbiKind.ADDRESS, AbiKind.UINT, AbiKind.INT, AbiKind.BOOL, AbiKind.FIXED_BYTES}
)


def _render(kind: AbiKind, value: Any) -> str:
    if kind is AbiKind.ADDRESS:
        return to_checksum_address(value)
    if kind is AbiKind.BOOL:
        return "true" if value else "false"
    if kind is AbiKind.FIXED_BYTES:
        return "0x" + value.hex()
    return str(value)


def _decode_at(abi_type: AbiType, data: bytes, position: int) -> tuple[str, int]:
    """Decode one value whose head starts at ``position``; returns (text, next position)."""
    kind = abi_type.kind
    what = abi_type.canonical

    if kind is AbiKind.TUPLE and not abi_type.is_dynamic:
        parts = []
        for component in abi_type.components:
            text, position = _decode_at(component, data, position)
            parts.append(text)
        return "(" + ", ".join(parts) + ")", position

    slot = _read_slot(data, position, what)
    position += SLOT_SIZE

    if kind in _SLOT_KINDS:
        try:
            (value,) = decode([what], slot)
        except DecodingError as exc:
            logger.warning("Malformed %s value %s: %s; showing raw slot", what, slot.hex(), exc)
            return "0x" + slot.hex(), position
        return _render(kind, value), position
    if kind is AbiKind.STRING:
        return _read_dynamic(data, slot, what).decode("utf-8", errors="replace"), position
    if kind is AbiKind.BYTES:
        return "0x" + _read_dynamic(data, slot, what).hex(), position

    logger.warning("Cannot decode output type %s; showing raw slot", abi_type.raw)
    return "0x" + slot.hex(), position


def decode_result(func: ContractFunction, data: bytes) -> list[str]:
    """
    Decode return data according to ``func.outputs``.

    Raises:
        InsufficientData: If the data ends before a value is complete
    """
    results = []
    position = 0
    for output in func.outputs:
        text, position = _decode_at(output.abi_type, data, position)
        results.append(text)
    return results
