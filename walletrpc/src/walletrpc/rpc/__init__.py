"""
RPC boundary: wallet session, method handler and HTTP transport.
"""

from walletrpc.rpc.handler import WalletRpcHandler
from walletrpc.rpc.server import RpcServer
from walletrpc.rpc.session import WalletSession

__all__ = [
    "RpcServer",
    "WalletRpcHandler",
    "WalletSession",
]
