__all__ = [
    # Interface parsing
    "AbiKind",
    "AbiType",
    "ContractFunction",
    "FunctionParam",
    "Mutability",
    "find_function",
    "load_interface",
    "parse_abi",
    "parse_abi_string",
    # Codec
    "decode_result",
    "encode_call",
    "selector",
    "signature",
    # Calls
    "CallResult",
    "ContractCaller",
    "ErrorResult",
    "ReadResult",
    "RpcProvider",
    "WriteResult",
    "invoke",
    # Deployments
    "ChainNames",
    "Deployment",
    "DeploymentScanner",
    "discover_deployments",
    "resolve_proxies",
    # Secrets
    "EnvSecretStore",
    "SecretStore",
    # Errors
    "ArtifactReadError",
    "CodecError",
    "ConfigError",
    "FunctionNotFound",
    "InsufficientData",
    "InvalidLiteral",
    "MalformedInterface",
    "NoSignerConfigured",
    "RpcError",
    "SignerError",
    "UnsupportedParamType",
]

from .config import ChainNames, ConfigError
from .pneuma.abi import (
    AbiKind,
    AbiType,
    CodecError,
    ContractFunction,
    FunctionNotFound,
    FunctionParam,
    MalformedInterface,
    Mutability,
    UnsupportedParamType,
    find_function,
    load_interface,
    parse_abi,
    parse_abi_string,
)
from .pneuma.codec import (
    InsufficientData,
    InvalidLiteral,
    decode_result,
    encode_call,
    selector,
    signature,
)
from .pneuma.rpc import RpcError, RpcProvider
from .pneuma.tx import (
    CallResult,
    ContractCaller,
    ErrorResult,
    ReadResult,
    WriteResult,
    invoke,
)
from .anamnesis import (
    ArtifactReadError,
    Deployment,
    DeploymentScanner,
    discover_deployments,
    resolve_proxies,
)
from .sigil.eth import EnvSecretStore, NoSignerConfigured, SecretStore, SignerError
