"""
Relay collaborator interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from walletcore import ContractTransaction


class RelayError(Exception):
    pass


class Relay(ABC):
    """Hands finalized transactions to the network."""

    @abstractmethod
    def relay(self, tx: ContractTransaction) -> bool:
        """Broadcast ``tx``; returns False if the network rejected it"""

    def close(self) -> None:
        """Close relay connection"""
        pass
