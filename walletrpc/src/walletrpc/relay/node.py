"""
Relay through a node's JSON-RPC ``sendrawtransaction``.
"""

from __future__ import annotations

from typing import Any

import httpx
from loguru import logger
from walletcore import ContractTransaction

from walletrpc.relay.base import Relay, RelayError

# Timeout for relay calls (seconds)
DEFAULT_RELAY_TIMEOUT = 30.0


class NodeRelay(Relay):
    """
    Forwards signed transactions to a node over HTTP JSON-RPC.

    The call is synchronous: relay is a single hand-off at the end of a
    request and nothing else in the request suspends.
    """

    def __init__(
        self,
        rpc_url: str,
        timeout: float = DEFAULT_RELAY_TIMEOUT,
        client: httpx.Client | None = None,
    ):
        self.rpc_url = rpc_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)
        self._request_id = 0

    def _rpc_call(self, method: str, params: list | None = None) -> Any:
        """
        Make an RPC call to the node.

        Raises:
            RelayError: On RPC errors or connection/timeout errors
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }

        try:
            response = self.client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"RPC call timed out: {method} - {e}")
            raise RelayError(f"Relay timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"RPC call failed: {method} - {e}")
            raise RelayError(f"Relay failed: {e}") from e
        except ValueError as e:
            logger.error(f"RPC call returned invalid JSON: {method} - {e}")
            raise RelayError("Relay returned invalid JSON") from e

        if "error" in data and data["error"]:
            error_info = data["error"]
            error_code = error_info.get("code", "unknown")
            error_msg = error_info.get("message", str(error_info))
            logger.error(f"RPC error from node: {method} - {error_code}: {error_msg}")
            raise RelayError(f"RPC error {error_code}: {error_msg}")

        return data.get("result")

    def relay(self, tx: ContractTransaction) -> bool:
        result = self._rpc_call("sendrawtransaction", [tx.serialize().hex()])
        accepted = bool(result)
        if accepted:
            logger.info(f"Relayed transaction {tx.hash} to {self.rpc_url}")
        else:
            logger.warning(f"Node rejected transaction {tx.hash}")
        return accepted

    def close(self) -> None:
        self.client.close()
