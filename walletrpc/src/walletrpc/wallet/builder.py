"""
Transaction builder.

Builds an unsigned contract transaction from:
- Requested outputs (possibly spanning several assets)
- A network fee, paid in the fee asset
- A change address receiving any excess of the selected inputs
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from loguru import logger
from walletcore import Coin, ContractTransaction, Fixed8, TransactionOutput, UInt160, UInt256

from walletrpc.wallet.coin_selection import CoinSelection, SelectionShortfall, select_coins


@dataclass(frozen=True)
class TransactionBuilt:
    """Successful build: the unsigned transaction and the coins it spends."""

    transaction: ContractTransaction
    coins: tuple[Coin, ...]

    @property
    def script_hashes(self) -> list[UInt160]:
        """Script hashes that must authorize the inputs, ascending."""
        return sorted({c.script_hash for c in self.coins})


@dataclass(frozen=True)
class InsufficientFundsResult:
    """No covering selection exists for ``asset_id``."""

    asset_id: UInt256
    required: Fixed8
    available: Fixed8


BuildResult = TransactionBuilt | InsufficientFundsResult


def _required_per_asset(
    outputs: Sequence[TransactionOutput], fee: Fixed8, fee_asset: UInt256
) -> dict[UInt256, Fixed8]:
    totals: dict[UInt256, Fixed8] = {}
    for out in outputs:
        totals[out.asset_id] = totals.get(out.asset_id, Fixed8.ZERO) + out.value
    if fee > Fixed8.ZERO and fee_asset not in totals:
        totals[fee_asset] = Fixed8.ZERO
    return totals


def build_transaction(
    coins: Iterable[Coin],
    outputs: Sequence[TransactionOutput],
    change_address: UInt160,
    fee: Fixed8 = Fixed8.ZERO,
    fee_asset: UInt256 | None = None,
) -> BuildResult:
    """
    Assemble an unsigned transaction paying ``outputs`` plus ``fee``.

    Coins are selected independently for each asset. If any asset cannot be
    covered the whole build fails with an InsufficientFundsResult; no partial
    transaction is produced.

    Args:
        coins: Snapshot of the wallet's coins
        outputs: Requested outputs, in order
        change_address: Script hash receiving change
        fee: Network fee
        fee_asset: Asset the fee is paid in (defaults to the first output's asset)

    Raises:
        ValueError: If outputs are empty, an output value is not positive,
            or the fee is negative
    """
    if not outputs:
        raise ValueError("At least one output is required")
    for out in outputs:
        if out.value <= Fixed8.ZERO:
            raise ValueError(f"Output value must be positive: {out.value}")
    if fee < Fixed8.ZERO:
        raise ValueError(f"Fee must not be negative: {fee}")

    if fee_asset is None:
        fee_asset = outputs[0].asset_id

    snapshot = list(coins)
    selections: list[CoinSelection] = []

    for asset_id, target in _required_per_asset(outputs, fee, fee_asset).items():
        asset_fee = fee if asset_id == fee_asset else Fixed8.ZERO
        result = select_coins(snapshot, asset_id, target, asset_fee)
        if isinstance(result, SelectionShortfall):
            logger.info(
                f"Insufficient funds for {asset_id}: need {result.required}, "
                f"have {result.available}"
            )
            return InsufficientFundsResult(
                asset_id=result.asset_id,
                required=result.required,
                available=result.available,
            )
        selections.append(result)

    inputs = []
    spent: list[Coin] = []
    change_outputs = []
    for selection in selections:
        for coin in selection.coins:
            inputs.append(coin.reference)
            spent.append(coin)
        if selection.change_value > Fixed8.ZERO:
            change_outputs.append(
                TransactionOutput(
                    asset_id=selection.asset_id,
                    value=selection.change_value,
                    script_hash=change_address,
                )
            )

    tx = ContractTransaction(
        inputs=tuple(inputs),
        outputs=tuple(outputs) + tuple(change_outputs),
        fee=fee,
    )
    _check_balance(tx, spent, fee_asset)

    logger.debug(
        f"Built transaction {tx.hash}: {len(tx.inputs)} input(s), {len(tx.outputs)} output(s)"
    )
    return TransactionBuilt(transaction=tx, coins=tuple(spent))


def _check_balance(tx: ContractTransaction, spent: Sequence[Coin], fee_asset: UInt256) -> None:
    """Inputs must equal outputs plus fee, per asset."""
    balance: dict[UInt256, int] = {}
    for coin in spent:
        balance[coin.asset_id] = balance.get(coin.asset_id, 0) + coin.value.raw
    for out in tx.outputs:
        balance[out.asset_id] = balance.get(out.asset_id, 0) - out.value.raw
    balance[fee_asset] = balance.get(fee_asset, 0) - tx.fee.raw

    unbalanced = {str(a): v for a, v in balance.items() if v != 0}
    if unbalanced:
        raise RuntimeError(f"Transaction does not balance: {unbalanced}")
