"""
contractspec.contracts.registry

Purpose:
    Name -> Contract mapping for one API. Shared by the server (mount every
    contract that carries a handler) and the client (bind a named function per
    contract).

Author:
    Kanir Pandya

Created:
    2026-03-03
"""

from __future__ import annotations

import keyword
from collections.abc import Iterator, Mapping

from contractspec.contracts.contract import Contract
from contractspec.errors import ContractError


class ContractRegistry(Mapping[str, Contract]):
    """
    Ordered, append-only registry of named contracts.

    Names must be valid Python identifiers so they can become client attribute
    names (client.bind(registry).find_user(...)).
    """

    def __init__(self, contracts: Mapping[str, Contract] | None = None) -> None:
        self._contracts: dict[str, Contract] = {}
        for name, contract in (contracts or {}).items():
            self.register(name, contract)

    def register(self, name: str, contract: Contract) -> Contract:
        if not isinstance(name, str) or not name.isidentifier() or keyword.iskeyword(name):
            raise ContractError(f"Invalid operation name: {name!r}. Use a Python identifier.")
        if name.endswith("_or_raise"):
            raise ContractError(f"Invalid operation name: {name!r}. The '_or_raise' suffix is reserved.")
        if not isinstance(contract, Contract):
            raise ContractError(f"Invalid contract for {name!r}: got {type(contract).__name__}.")
        if name in self._contracts:
            raise ContractError(f"Operation already registered: {name!r}.")
        self._contracts[name] = contract
        return contract

    def with_handlers(self) -> dict[str, Contract]:
        return {name: c for name, c in self._contracts.items() if c.handler is not None}

    def __getitem__(self, name: str) -> Contract:
        return self._contracts[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._contracts)

    def __len__(self) -> int:
        return len(self._contracts)

    def __repr__(self) -> str:
        return f"ContractRegistry({list(self._contracts)})"
