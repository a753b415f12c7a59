"""
In-memory wallet.

Holds keys, contracts and coins in process memory. Coin state is guarded by a
lock so that concurrent requests cannot both spend the same coin.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from loguru import logger
from walletcore import (
    Coin,
    CoinReference,
    CoinState,
    Contract,
    ContractTransaction,
    KeyPair,
    UInt160,
    hash160,
)

from walletrpc.wallet.base import Wallet


class InMemoryWallet(Wallet):
    def __init__(self, keys: Iterable[KeyPair] = ()):
        self._lock = threading.Lock()
        self._keys: dict[bytes, KeyPair] = {}
        self._contracts: dict[UInt160, Contract] = {}
        self._coins: dict[CoinReference, Coin] = {}
        # Insertion order of standard contracts; the first is the change address
        self._standard: list[UInt160] = []

        for key in keys:
            self.import_key(key)

        logger.info(f"Initialized in-memory wallet with {len(self._keys)} key(s)")

    def import_key(self, key: KeyPair) -> Contract:
        """Store a key and its signature contract."""
        contract = Contract.create_signature_contract(key.public_key)
        with self._lock:
            self._keys[key.public_key] = key
            if contract.script_hash not in self._contracts:
                self._contracts[contract.script_hash] = contract
                self._standard.append(contract.script_hash)
        return contract

    def add_contract(self, contract: Contract) -> None:
        """Track a contract (e.g. multisig) so its coins are owned and signable."""
        with self._lock:
            self._contracts[contract.script_hash] = contract
            if contract.is_standard and contract.script_hash not in self._standard:
                self._standard.append(contract.script_hash)

    def add_coin(self, coin: Coin) -> None:
        """Record a coin observed on the ledger."""
        with self._lock:
            self._coins[coin.reference] = coin

    def confirm(self, reference: CoinReference) -> None:
        with self._lock:
            coin = self._coins[reference]
            self._coins[reference] = Coin(
                reference=coin.reference,
                output=coin.output,
                state=coin.state | CoinState.CONFIRMED,
            )

    def get_coins(self) -> list[Coin]:
        with self._lock:
            return list(self._coins.values())

    def create_key(self) -> KeyPair:
        key = KeyPair.generate()
        self.import_key(key)
        logger.debug(f"Created key {key.public_key_hash}")
        return key

    def get_contracts(self, public_key_hash: UInt160) -> list[Contract]:
        with self._lock:
            return [
                contract
                for contract in self._contracts.values()
                if any(UInt160(hash160(pk)) == public_key_hash for pk in contract.public_keys)
            ]

    def get_contract(self, script_hash: UInt160) -> Contract | None:
        with self._lock:
            return self._contracts.get(script_hash)

    def get_key(self, public_key: bytes) -> KeyPair | None:
        with self._lock:
            return self._keys.get(public_key)

    def get_key_by_script_hash(self, script_hash: UInt160) -> KeyPair | None:
        with self._lock:
            contract = self._contracts.get(script_hash)
            if contract is None or not contract.is_standard:
                return None
            return self._keys.get(contract.public_keys[0])

    def get_change_address(self) -> UInt160:
        with self._lock:
            if not self._standard:
                raise ValueError("Wallet has no standard contract for change")
            return self._standard[0]

    def save_transaction(self, tx: ContractTransaction) -> bool:
        with self._lock:
            for reference in tx.inputs:
                coin = self._coins.get(reference)
                if coin is None or coin.is_spent:
                    logger.warning(f"Transaction {tx.hash} conflicts on input {reference}")
                    return False

            for reference in tx.inputs:
                coin = self._coins[reference]
                self._coins[reference] = Coin(
                    reference=reference, output=coin.output, state=coin.state | CoinState.SPENT
                )

            tx_hash = tx.hash
            for index, output in enumerate(tx.outputs):
                if output.script_hash in self._contracts:
                    reference = CoinReference(prev_hash=tx_hash, prev_index=index)
                    self._coins[reference] = Coin(reference=reference, output=output)

        logger.info(f"Saved transaction {tx_hash}")
        return True
