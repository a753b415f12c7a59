"""
Relay that keeps transactions in memory instead of broadcasting them.
"""

from __future__ import annotations

import threading

from loguru import logger
from walletcore import ContractTransaction

from walletrpc.relay.base import Relay


class InMemoryRelay(Relay):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.relayed: list[ContractTransaction] = []

    def relay(self, tx: ContractTransaction) -> bool:
        with self._lock:
            if any(t.hash == tx.hash for t in self.relayed):
                logger.debug(f"Transaction {tx.hash} already relayed")
                return False
            self.relayed.append(tx)
        logger.info(f"Relayed transaction {tx.hash} (in-memory)")
        return True
