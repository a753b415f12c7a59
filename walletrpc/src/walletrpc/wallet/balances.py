"""
Balance aggregation over the wallet's coins.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from walletcore import Coin, Fixed8, UInt256


@dataclass(frozen=True)
class AddressBalance:
    """Per-asset sums for one address"""

    unconfirmed: Fixed8
    confirmed: Fixed8
    spendable: Fixed8

    @property
    def total(self) -> Fixed8:
        return self.unconfirmed + self.confirmed

    def to_json(self, asset_id: UInt256) -> dict[str, Any]:
        return {
            "asset": str(asset_id),
            "unconfirmed": str(self.unconfirmed),
            "confirmed": str(self.confirmed),
            "spendable": str(self.spendable),
        }


@dataclass(frozen=True)
class AssetBalance:
    """Wallet-wide unspent sums for one asset"""

    total: Fixed8
    confirmed: Fixed8

    def to_json(self) -> dict[str, str]:
        return {"balance": str(self.total), "confirmed": str(self.confirmed)}


def get_address_balances(coins: Iterable[Coin], address: str) -> dict[UInt256, AddressBalance]:
    """
    Group the coins owned by ``address`` by asset.

    unconfirmed + confirmed covers every coin the address owns (spent or not);
    spendable is the confirmed, unspent subset. An address with no coins
    yields an empty mapping.
    """
    groups: dict[UInt256, list[Coin]] = {}
    for coin in coins:
        if coin.address == address:
            groups.setdefault(coin.asset_id, []).append(coin)

    return {
        asset_id: AddressBalance(
            unconfirmed=Fixed8.sum(c.value for c in group if not c.is_confirmed),
            confirmed=Fixed8.sum(c.value for c in group if c.is_confirmed),
            spendable=Fixed8.sum(c.value for c in group if c.is_spendable),
        )
        for asset_id, group in sorted(groups.items(), key=lambda item: item[0])
    }


def get_asset_balance(coins: Iterable[Coin], asset_id: UInt256) -> AssetBalance:
    unspent = [c for c in coins if c.asset_id == asset_id and not c.is_spent]
    return AssetBalance(
        total=Fixed8.sum(c.value for c in unspent),
        confirmed=Fixed8.sum(c.value for c in unspent if c.is_confirmed),
    )
