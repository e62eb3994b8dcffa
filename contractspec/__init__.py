"""
contractspec

Contract-driven request/response validation for HTTP APIs.

    from contractspec import Contract, ContractClient, Ok, Err
"""

from contractspec.client.caller import BoundClient, ContractClient, call, call_or_raise
from contractspec.contracts.contract import Contract, ContractInput, HttpMethod, Route
from contractspec.contracts.registry import ContractRegistry
from contractspec.errors import (
    ContractError,
    HandlerError,
    Phase,
    RequestError,
    ServerError,
    ValidationError,
)
from contractspec.result import Err, Ok, Result

__all__ = [
    "BoundClient",
    "Contract",
    "ContractClient",
    "ContractError",
    "ContractInput",
    "ContractRegistry",
    "Err",
    "HandlerError",
    "HttpMethod",
    "Ok",
    "Phase",
    "RequestError",
    "Result",
    "Route",
    "ServerError",
    "ValidationError",
    "call",
    "call_or_raise",
]
