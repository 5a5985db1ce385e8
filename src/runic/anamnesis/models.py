from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ..pneuma.abi import ContractFunction

HIDDEN_SUFFIX = "_hidden"


@dataclass
class Deployment:
    """
    One contract created by a deploy run.

    ``callable_address`` is where calls go. It equals ``address`` unless the
    proxy resolver found a proxy in front of this contract, in which case it
    is the proxy's address and ``is_proxy`` is set.
    """

    name: str
    address: str
    callable_address: str
    network_name: str
    chain_id: int
    tx_hash: Optional[str] = None
    abi_path: Optional[Path] = None
    functions: list[ContractFunction] = field(default_factory=list)
    constructor_args: Optional[list[str]] = None
    is_proxy: bool = False
    implementation_confirmed: bool = False

    @property
    def is_hidden(self) -> bool:
        return self.name.endswith(HIDDEN_SUFFIX)

    @property
    def display_name(self) -> str:
        if self.is_hidden:
            return self.name[: -len(HIDDEN_SUFFIX)]
        return self.name

    def link_behind(self, proxy: "Deployment") -> None:
        """Route calls for this implementation through ``proxy`` and hide the proxy."""
        self.callable_address = proxy.address
        self.is_proxy = True
        proxy.name = proxy.name + HIDDEN_SUFFIX

    def use_interface(self, donor: "Deployment") -> None:
        """Call this deployment with another deployment's ABI (user override)."""
        self.functions = list(donor.functions)
        self.abi_path = donor.abi_path
        self.implementation_confirmed = True
