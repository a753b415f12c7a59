"""
Wallet session: the explicit handle every RPC call runs against.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from loguru import logger
from walletcore import CryptoError, KeyPair, UInt256

from walletrpc.config import Settings
from walletrpc.errors import AccessDenied
from walletrpc.relay import InMemoryRelay, NodeRelay, Relay
from walletrpc.wallet import InMemoryWallet, Wallet


@dataclass
class WalletSession:
    """
    Collaborators for one RPC endpoint.

    ``wallet`` is None when no wallet is loaded; every wallet-dependent
    method then fails with AccessDenied.
    """

    relay: Relay = field(default_factory=InMemoryRelay)
    wallet: Wallet | None = None
    fee_asset: UInt256 | None = None

    def require_wallet(self) -> Wallet:
        if self.wallet is None:
            raise AccessDenied()
        return self.wallet

    @classmethod
    def from_settings(cls, settings: Settings) -> WalletSession:
        """
        Build a session from configuration.

        Raises:
            ValueError: If a configured key or the fee asset is malformed
        """
        wallet: Wallet | None = None
        wif_keys = settings.get_wallet_keys()
        if wif_keys:
            try:
                keys = [KeyPair.from_wif(wif) for wif in wif_keys]
            except CryptoError as e:
                raise ValueError(f"Invalid wallet key: {e}") from e
            wallet = InMemoryWallet(keys)
        else:
            logger.warning("No wallet keys configured; wallet methods will be denied")

        fee_asset = UInt256.parse(settings.fee_asset) if settings.fee_asset else None

        relay: Relay
        if settings.relay_url:
            relay = NodeRelay(settings.relay_url, timeout=settings.relay_timeout)
            logger.info(f"Relaying through node at {settings.relay_url}")
        else:
            relay = InMemoryRelay()
            logger.info("No relay URL configured; using in-memory relay")

        return cls(relay=relay, wallet=wallet, fee_asset=fee_asset)

    def close(self) -> None:
        if self.wallet is not None:
            self.wallet.close()
        self.relay.close()
