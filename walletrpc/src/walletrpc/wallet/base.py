"""
Wallet collaborator interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from walletcore import (
    Coin,
    Contract,
    ContractTransaction,
    Fixed8,
    KeyPair,
    TransactionOutput,
    UInt160,
    UInt256,
)

from walletrpc.wallet import signing
from walletrpc.wallet.builder import BuildResult, build_transaction
from walletrpc.wallet.signing import SignatureContext


class Wallet(ABC):
    """
    Abstract wallet: owned coins, keys and verification contracts.

    Implementations own coin persistence and must serialize concurrent
    spends: ``save_transaction`` reports a conflict instead of letting two
    transactions spend the same coin.
    """

    @abstractmethod
    def get_coins(self) -> list[Coin]:
        """Snapshot of every coin the wallet tracks"""

    @abstractmethod
    def create_key(self) -> KeyPair:
        """Create and store a new key along with its signature contract"""

    @abstractmethod
    def get_contracts(self, public_key_hash: UInt160) -> list[Contract]:
        """Contracts that include the public key with this hash"""

    @abstractmethod
    def get_contract(self, script_hash: UInt160) -> Contract | None:
        """Contract stored under ``script_hash``"""

    @abstractmethod
    def get_key(self, public_key: bytes) -> KeyPair | None:
        """Private key for a public key, if held"""

    @abstractmethod
    def get_key_by_script_hash(self, script_hash: UInt160) -> KeyPair | None:
        """Key behind a standard (single-signature) contract"""

    @abstractmethod
    def get_change_address(self) -> UInt160:
        """Default script hash receiving change"""

    @abstractmethod
    def save_transaction(self, tx: ContractTransaction) -> bool:
        """
        Record a finalized transaction: mark its inputs spent and track
        outputs paying to the wallet.

        Returns False if any input is unknown or already spent.
        """

    def make_transaction(
        self,
        outputs: Sequence[TransactionOutput],
        change_address: UInt160 | None = None,
        fee: Fixed8 = Fixed8.ZERO,
        fee_asset: UInt256 | None = None,
    ) -> BuildResult:
        """Build an unsigned transaction from the current coin snapshot."""
        return build_transaction(
            self.get_coins(),
            outputs,
            change_address=change_address or self.get_change_address(),
            fee=fee,
            fee_asset=fee_asset,
        )

    def sign(self, context: SignatureContext) -> bool:
        """Sign every condition this wallet holds keys for."""
        return signing.sign(context, self)

    def close(self) -> None:
        """Release wallet resources"""
        pass
