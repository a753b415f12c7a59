"""
walletcore - Value types and primitives for the wallet RPC service

Provides fixed-point amounts, hash identifiers, keys, contracts and transactions.
"""

__version__ = "0.3.0"

from walletcore.contract import Contract, ContractError
from walletcore.crypto import (
    CryptoError,
    KeyPair,
    address_to_script_hash,
    hash160,
    hash256,
    script_hash_to_address,
    verify_signature,
)
from walletcore.fixed8 import Fixed8
from walletcore.models import Coin, CoinState
from walletcore.transaction import (
    CoinReference,
    ContractTransaction,
    TransactionFormatError,
    TransactionOutput,
    Witness,
)
from walletcore.uint import UInt160, UInt256

__all__ = [
    "Coin",
    "CoinReference",
    "CoinState",
    "Contract",
    "ContractError",
    "ContractTransaction",
    "CryptoError",
    "Fixed8",
    "KeyPair",
    "TransactionFormatError",
    "TransactionOutput",
    "UInt160",
    "UInt256",
    "Witness",
    "address_to_script_hash",
    "hash160",
    "hash256",
    "script_hash_to_address",
    "verify_signature",
]
