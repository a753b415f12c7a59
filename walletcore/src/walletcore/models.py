"""
Wallet coin models.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntFlag

from walletcore.fixed8 import Fixed8
from walletcore.transaction import CoinReference, TransactionOutput
from walletcore.uint import UInt160, UInt256


class CoinState(IntFlag):
    UNCONFIRMED = 0
    CONFIRMED = 1
    SPENT = 2


@dataclass(frozen=True)
class Coin:
    """An output owned by the wallet, tagged with its confirmation/spend state"""

    reference: CoinReference
    output: TransactionOutput
    state: CoinState = CoinState.UNCONFIRMED

    @property
    def asset_id(self) -> UInt256:
        return self.output.asset_id

    @property
    def value(self) -> Fixed8:
        return self.output.value

    @property
    def script_hash(self) -> UInt160:
        return self.output.script_hash

    @property
    def address(self) -> str:
        return self.output.address

    @property
    def is_confirmed(self) -> bool:
        return bool(self.state & CoinState.CONFIRMED)

    @property
    def is_spent(self) -> bool:
        return bool(self.state & CoinState.SPENT)

    @property
    def is_spendable(self) -> bool:
        return self.is_confirmed and not self.is_spent
