"""
Wallet collaborator, balance aggregation, coin selection, transaction
building and signature collection.
"""

from walletrpc.wallet.balances import (
    AddressBalance,
    AssetBalance,
    get_address_balances,
    get_asset_balance,
)
from walletrpc.wallet.base import Wallet
from walletrpc.wallet.builder import (
    BuildResult,
    InsufficientFundsResult,
    TransactionBuilt,
    build_transaction,
)
from walletrpc.wallet.coin_selection import CoinSelection, SelectionShortfall, select_coins
from walletrpc.wallet.memory import InMemoryWallet
from walletrpc.wallet.signing import SignatureContext, SigningCapability, sign

__all__ = [
    "AddressBalance",
    "AssetBalance",
    "BuildResult",
    "CoinSelection",
    "InMemoryWallet",
    "InsufficientFundsResult",
    "SelectionShortfall",
    "SignatureContext",
    "SigningCapability",
    "TransactionBuilt",
    "Wallet",
    "build_transaction",
    "get_address_balances",
    "get_asset_balance",
    "select_coins",
    "sign",
]
