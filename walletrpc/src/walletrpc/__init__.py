"""
walletrpc - Wallet operations exposed over JSON-RPC

Balance queries, transaction construction, multi-party signature collection
and relay of completed transactions.
"""

__version__ = "0.3.0"

from walletrpc.errors import (
    AccessDenied,
    InsufficientFunds,
    InvalidParams,
    MethodNotFound,
    RpcError,
)
from walletrpc.rpc import RpcServer, WalletRpcHandler, WalletSession

__all__ = [
    "AccessDenied",
    "InsufficientFunds",
    "InvalidParams",
    "MethodNotFound",
    "RpcError",
    "RpcServer",
    "WalletRpcHandler",
    "WalletSession",
]
