"""
ABI Parser - Turns contract interface JSON into typed function descriptors.

Interfaces come from Foundry build output (out/<Name>.sol/<Name>.json) or
any file holding a bare ABI array. Parameter type strings are resolved once,
here, into an ``AbiType`` so the codec never branches on raw strings.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Union

from eth_hash.auto import keccak


class CodecError(ValueError):
    exit_code: int = 2


class MalformedInterface(CodecError):
    pass


class UnsupportedParamType(CodecError):
    pass


class FunctionNotFound(CodecError):
    pass


class AbiKind(Enum):
    ADDRESS = "address"
    UINT = "uint"
    INT = "int"
    BOOL = "bool"
    FIXED_BYTES = "bytesN"
    BYTES = "bytes"
    STRING = "string"
    TUPLE = "tuple"
    UNSUPPORTED = "unsupported"


class Mutability(str, Enum):
    PURE = "pure"
    VIEW = "view"
    NONPAYABLE = "nonpayable"
    PAYABLE = "payable"


@dataclass(frozen=True)
class AbiType:
    """
    A resolved ABI parameter type.

    Attributes:
        kind: Which variant this is
        size: Bit width for UINT/INT, byte length for FIXED_BYTES, else 0
        components: Member types for TUPLE
        raw: The type string as written in the interface
    """

    kind: AbiKind
    size: int = 0
    components: tuple["AbiType", ...] = ()
    raw: str = ""

    @property
    def canonical(self) -> str:
        if self.kind is AbiKind.TUPLE:
            return "(" + ",".join(c.canonical for c in self.components) + ")"
        if self.kind is AbiKind.UINT:
            return f"uint{self.size}"
        if self.kind is AbiKind.INT:
            return f"int{self.size}"
        if self.kind is AbiKind.FIXED_BYTES:
            return f"bytes{self.size}"
        if self.kind is AbiKind.UNSUPPORTED:
            if self.raw.startswith("tuple") and self.components:
                # tuple[] / tuple[2]: the suffix follows the member list
                inner = ",".join(c.canonical for c in self.components)
                return f"({inner}){self.raw[len('tuple'):]}"
            return self.raw
        return self.kind.value

    @property
    def is_dynamic(self) -> bool:
        if self.kind in (AbiKind.BYTES, AbiKind.STRING):
            return True
        if self.kind is AbiKind.TUPLE:
            return any(c.is_dynamic for c in self.components)
        return False

    @property
    def supported(self) -> bool:
        if self.kind is AbiKind.UNSUPPORTED:
            return False
        return all(c.supported for c in self.components)


_SIZED = re.compile(r"^(uint|int|bytes)(\d+)$")


def parse_type(type_str: str, components: Sequence["FunctionParam"] = ()) -> AbiType:
    """Resolve a Solidity type string into an ``AbiType``."""
    if type_str == "address":
        return AbiType(AbiKind.ADDRESS, raw=type_str)
    if type_str == "bool":
        return AbiType(AbiKind.BOOL, raw=type_str)
    if type_str == "string":
        return AbiType(AbiKind.STRING, raw=type_str)
    if type_str == "bytes":
        return AbiType(AbiKind.BYTES, raw=type_str)
    if type_str == "uint":
        return AbiType(AbiKind.UINT, 256, raw=type_str)
    if type_str == "int":
        return AbiType(AbiKind.INT, 256, raw=type_str)
    if type_str == "tuple":
        return AbiType(
            AbiKind.TUPLE,
            components=tuple(p.abi_type for p in components),
            raw=type_str,
        )

    match = _SIZED.match(type_str)
    if match:
        base, width = match.group(1), int(match.group(2))
        if base == "bytes" and 1 <= width <= 32:
            return AbiType(AbiKind.FIXED_BYTES, width, raw=type_str)
        if base in ("uint", "int") and 8 <= width <= 256 and width % 8 == 0:
            kind = AbiKind.UINT if base == "uint" else AbiKind.INT
            return AbiType(kind, width, raw=type_str)

    # Arrays, fixed-point and anything unknown stay loadable but unusable.
    return AbiType(
        AbiKind.UNSUPPORTED,
        components=tuple(p.abi_type for p in components),
        raw=type_str,
    )


@dataclass(frozen=True)
class FunctionParam:
    name: str
    type: str
    components: Optional[tuple["FunctionParam", ...]] = None
    abi_type: AbiType = field(default=AbiType(AbiKind.UNSUPPORTED), compare=False)

    @classmethod
    def build(
        cls,
        name: str,
        type_str: str,
        components: Optional[Sequence["FunctionParam"]] = None,
    ) -> "FunctionParam":
        comps = tuple(components) if components is not None else None
        return cls(
            name=name,
            type=type_str,
            components=comps,
            abi_type=parse_type(type_str, comps or ()),
        )

    @property
    def canonical_type(self) -> str:
        return self.abi_type.canonical


@dataclass(frozen=True)
class ContractFunction:
    name: str
    inputs: tuple[FunctionParam, ...] = ()
    outputs: tuple[FunctionParam, ...] = ()
    mutability: Mutability = Mutability.NONPAYABLE

    @property
    def signature(self) -> str:
        """Canonical ``name(type1,type2)`` form; tuples expand to ``(a,b)``."""
        params = ",".join(p.canonical_type for p in self.inputs)
        return f"{self.name}({params})"

    @property
    def selector(self) -> bytes:
        return keccak(self.signature.encode("utf-8"))[:4]

    @property
    def is_read_only(self) -> bool:
        return self.mutability in (Mutability.PURE, Mutability.VIEW)


def _parse_params(raw: Any) -> tuple[FunctionParam, ...]:
    if not isinstance(raw, list):
        return ()

    params = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        type_str = item.get("type")
        if not isinstance(type_str, str):
            continue
        name = item.get("name")
        components = item.get("components")
        params.append(
            FunctionParam.build(
                name=name if isinstance(name, str) else "",
                type_str=type_str,
                components=_parse_params(components) if isinstance(components, list) else None,
            )
        )
    return tuple(params)


def _parse_mutability(item: dict[str, Any]) -> Mutability:
    value = item.get("stateMutability")
    if value is None:
        # Pre-0.5 compilers only emit the constant/payable flags.
        if item.get("constant"):
            return Mutability.VIEW
        if item.get("payable"):
            return Mutability.PAYABLE
        return Mutability.NONPAYABLE
    try:
        return Mutability(value)
    except ValueError:
        return Mutability.NONPAYABLE


def parse_abi(abi_json: Any) -> list[ContractFunction]:
    """
    Extract callable functions from an ABI.

    Events, errors, constructors and fallback entries are skipped.

    Args:
        abi_json: Decoded ABI (must be a list)

    Returns:
        Function descriptors in declaration order

    Raises:
        MalformedInterface: If the root is not a list, or a function
            entry has no name
    """
    if not isinstance(abi_json, list):
        raise MalformedInterface(
            f"ABI must be a JSON array, got {type(abi_json).__name__}"
        )

    functions = []
    for index, item in enumerate(abi_json):
        if not isinstance(item, dict):
            raise MalformedInterface(f"ABI entry {index} is not an object")
        # Solidity lets "type" be omitted for functions.
        if item.get("type", "function") != "function":
            continue

        name = item.get("name")
        if not isinstance(name, str) or not name:
            raise MalformedInterface(f"ABI function entry {index} has no 'name' field")

        functions.append(
            ContractFunction(
                name=name,
                inputs=_parse_params(item.get("inputs")),
                outputs=_parse_params(item.get("outputs")),
                mutability=_parse_mutability(item),
            )
        )

    return functions


def parse_abi_string(abi_str: str) -> list[ContractFunction]:
    try:
        abi_json = json.loads(abi_str)
    except json.JSONDecodeError as exc:
        raise MalformedInterface(f"Failed to parse ABI as JSON: {exc}") from exc
    return parse_abi(abi_json)


def load_interface(path: Union[Path, str]) -> list[ContractFunction]:
    """
    Load functions from an interface file.

    Accepts a Foundry/Hardhat artifact (object with an ``abi`` field) or a
    bare ABI array.

    Raises:
        OSError: If the file cannot be read
        MalformedInterface: If the contents are not a usable ABI
    """
    with Path(path).open("r", encoding="utf-8") as f:
        text = f.read()

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInterface(f"Failed to parse {path} as JSON: {exc}") from exc

    if isinstance(data, dict) and "abi" in data:
        data = data["abi"]
    return parse_abi(data)


def find_function(
    functions: Iterable[ContractFunction], name_or_signature: str
) -> ContractFunction:
    """
    Look up a function by bare name or full signature.

    A bare name must be unique; overloaded functions need the signature,
    e.g. ``safeTransferFrom(address,address,uint256)``.

    Raises:
        FunctionNotFound: If nothing matches or the name is ambiguous
    """
    functions = list(functions)
    if "(" in name_or_signature:
        wanted = name_or_signature.replace(" ", "")
        for func in functions:
            if func.signature == wanted:
                return func
        raise FunctionNotFound(f"No function with signature {name_or_signature}")

    matches = [f for f in functions if f.name == name_or_signature]
    if not matches:
        raise FunctionNotFound(f"Function {name_or_signature} not found in ABI")
    if len(matches) > 1:
        options = ", ".join(f.signature for f in matches)
        raise FunctionNotFound(
            f"Function {name_or_signature} is overloaded; use one of: {options}"
        )
    return matches[0]
