"""
Coin selection over the wallet's confirmed, unspent coins.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from loguru import logger
from walletcore import Coin, Fixed8, UInt256


@dataclass(frozen=True)
class CoinSelection:
    """Result of coin selection"""

    asset_id: UInt256
    coins: tuple[Coin, ...]
    total_value: Fixed8
    change_value: Fixed8
    fee: Fixed8


@dataclass(frozen=True)
class SelectionShortfall:
    """Available coins of an asset do not cover target + fee"""

    asset_id: UInt256
    required: Fixed8
    available: Fixed8


def spendable_coins(coins: Iterable[Coin], asset_id: UInt256) -> list[Coin]:
    return [c for c in coins if c.asset_id == asset_id and c.is_spendable]


def select_coins(
    coins: Iterable[Coin],
    asset_id: UInt256,
    target_value: Fixed8,
    fee: Fixed8 = Fixed8.ZERO,
) -> CoinSelection | SelectionShortfall:
    """
    Select coins of ``asset_id`` covering ``target_value + fee``.

    Only confirmed, unspent coins are candidates. The candidates are ordered by
    value (largest first, ties broken by output reference); whole coins are
    taken while each fits in the remaining amount, and the remainder is covered
    by the smallest coin that still covers it. The result is deterministic for
    a given coin set.

    Raises:
        ValueError: If target or fee is negative, or both are zero
    """
    if target_value < Fixed8.ZERO:
        raise ValueError(f"Target value must not be negative: {target_value}")
    if fee < Fixed8.ZERO:
        raise ValueError(f"Fee must not be negative: {fee}")

    amount = target_value + fee
    if amount <= Fixed8.ZERO:
        raise ValueError("Nothing to select: target and fee are both zero")

    candidates = spendable_coins(coins, asset_id)
    available = Fixed8.sum(c.value for c in candidates)

    if available < amount:
        logger.debug(f"Selection for {asset_id} short: need {amount}, have {available}")
        return SelectionShortfall(asset_id=asset_id, required=amount, available=available)

    ordered = sorted(candidates, key=lambda c: (-c.value.raw, c.reference))

    selected: list[Coin] = []
    remaining = amount
    index = 0
    while index < len(ordered) and ordered[index].value <= remaining:
        remaining -= ordered[index].value
        selected.append(ordered[index])
        index += 1

    if remaining > Fixed8.ZERO:
        # ordered is descending, so the last coin >= remaining is the smallest that covers it
        cover = [c for c in ordered[index:] if c.value >= remaining][-1]
        selected.append(cover)

    total = Fixed8.sum(c.value for c in selected)
    change = total - amount

    logger.debug(
        f"Selected {len(selected)} coin(s) of {asset_id}: total {total}, change {change}"
    )
    return CoinSelection(
        asset_id=asset_id,
        coins=tuple(selected),
        total_value=total,
        change_value=change,
        fee=fee,
    )
