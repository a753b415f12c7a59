"""
Pytest configuration and fixtures for walletrpc tests.
"""

from __future__ import annotations

from collections.abc import Callable

import pytest
from walletcore import (
    Coin,
    CoinReference,
    CoinState,
    Contract,
    Fixed8,
    KeyPair,
    TransactionOutput,
    UInt160,
    UInt256,
    hash256,
)

from walletrpc.relay import InMemoryRelay
from walletrpc.rpc import WalletRpcHandler, WalletSession
from walletrpc.wallet import InMemoryWallet


@pytest.fixture
def asset_a() -> UInt256:
    return UInt256.parse("0x" + "aa" * 32)


@pytest.fixture
def asset_b() -> UInt256:
    return UInt256.parse("0x" + "bb" * 32)


@pytest.fixture
def make_key() -> Callable[[int], KeyPair]:
    """Deterministic key from a single repeated byte"""
    return lambda n: KeyPair(bytes([n]) * 32)


@pytest.fixture
def make_coin(asset_a: UInt256) -> Callable[..., Coin]:
    """Factory for coins; the reference is derived from ``tag`` and ``index``."""

    def _make(
        script_hash: UInt160,
        value: str,
        asset_id: UInt256 | None = None,
        index: int = 0,
        state: CoinState = CoinState.CONFIRMED,
        tag: bytes = b"funding",
    ) -> Coin:
        return Coin(
            reference=CoinReference(UInt256(hash256(tag)), index),
            output=TransactionOutput(asset_id or asset_a, Fixed8.parse(value), script_hash),
            state=state,
        )

    return _make


@pytest.fixture
def key(make_key) -> KeyPair:
    return make_key(1)


@pytest.fixture
def contract(key: KeyPair) -> Contract:
    return Contract.create_signature_contract(key.public_key)


@pytest.fixture
def payee(make_key) -> UInt160:
    return Contract.create_signature_contract(make_key(9).public_key).script_hash


@pytest.fixture
def wallet(key: KeyPair) -> InMemoryWallet:
    return InMemoryWallet([key])


@pytest.fixture
def relay() -> InMemoryRelay:
    return InMemoryRelay()


@pytest.fixture
def session(wallet: InMemoryWallet, relay: InMemoryRelay) -> WalletSession:
    return WalletSession(relay=relay, wallet=wallet)


@pytest.fixture
def handler() -> WalletRpcHandler:
    return WalletRpcHandler()
