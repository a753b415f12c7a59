"""
Relay collaborators.

Available relays:
- InMemoryRelay: keeps relayed transactions in process (no node required)
- NodeRelay: forwards to a node's JSON-RPC ``sendrawtransaction``
"""

from walletrpc.relay.base import Relay, RelayError
from walletrpc.relay.memory import InMemoryRelay
from walletrpc.relay.node import NodeRelay

__all__ = [
    "InMemoryRelay",
    "NodeRelay",
    "Relay",
    "RelayError",
]
