"""
Wallet RPC method handler.

Validates positional parameters, drives balance queries and the
select -> build -> sign -> (relay | return partial) pipeline, and maps
results to JSON.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from loguru import logger
from walletcore import ContractTransaction, Fixed8, TransactionOutput, UInt160

from walletrpc.errors import InsufficientFunds, InvalidParams, MethodNotFound, RpcError
from walletrpc.relay import RelayError
from walletrpc.rpc import params as p
from walletrpc.rpc.session import WalletSession
from walletrpc.wallet import (
    InsufficientFundsResult,
    SignatureContext,
    Wallet,
    get_address_balances,
    get_asset_balance,
)


def wallet_method(func: Callable[..., Any]) -> Callable[..., Any]:
    """Mark a method as requiring a loaded wallet."""
    func.requires_wallet = True  # type: ignore[attr-defined]
    return func


class WalletRpcHandler:
    def __init__(self) -> None:
        self._methods: dict[str, Callable[..., Any]] = {
            "getaddressbalance": self.get_address_balance,
            "getbalance": self.get_balance,
            "sendtoaddress": self.send_to_address,
            "sendmany": self.send_many,
            "getnewaddress": self.get_new_address,
            "dumpprivkey": self.dump_priv_key,
            "sign": self.sign,
            "relay": self.relay,
        }

    @property
    def methods(self) -> list[str]:
        return sorted(self._methods)

    def process(self, session: WalletSession, method: str, params: Any) -> Any:
        """
        Execute ``method`` against ``session``.

        The loaded-wallet check runs before any parameter validation.

        Raises:
            RpcError: AccessDenied, InvalidParams, InsufficientFunds or MethodNotFound
        """
        func = self._methods.get(method)
        if func is None:
            raise MethodNotFound(f"Method not found: {method}")

        wallet = session.require_wallet() if getattr(func, "requires_wallet", False) else None

        if params is None:
            params = []
        if not isinstance(params, list):
            raise InvalidParams("Invalid params: params must be an array")

        logger.debug(f"RPC {method} with {len(params)} param(s)")
        if wallet is not None:
            return func(session, wallet, params)
        return func(session, params)

    @wallet_method
    def get_address_balance(
        self, session: WalletSession, wallet: Wallet, params: list[Any]
    ) -> dict[str, Any]:
        p.check_count(params, 1, 1)
        address = p.parse_string(params[0], "address")
        p.parse_address(address)

        balances = get_address_balances(wallet.get_coins(), address)
        return {"balances": [b.to_json(asset_id) for asset_id, b in balances.items()]}

    @wallet_method
    def get_balance(
        self, session: WalletSession, wallet: Wallet, params: list[Any]
    ) -> dict[str, str]:
        p.check_count(params, 1, 1)
        asset_id = p.parse_asset(params[0])
        return get_asset_balance(wallet.get_coins(), asset_id).to_json()

    @wallet_method
    def send_to_address(
        self, session: WalletSession, wallet: Wallet, params: list[Any]
    ) -> dict[str, Any]:
        p.check_count(params, 3, 5)
        output = TransactionOutput(
            asset_id=p.parse_asset(params[0]),
            script_hash=p.parse_address(params[1]),
            value=p.parse_positive_amount(params[2]),
        )
        fee = p.parse_fee(params[3]) if len(params) >= 4 else Fixed8.ZERO
        change_address = p.parse_address(params[4]) if len(params) >= 5 else None

        return self._send(session, wallet, [output], fee, change_address)

    @wallet_method
    def send_many(
        self, session: WalletSession, wallet: Wallet, params: list[Any]
    ) -> dict[str, Any]:
        p.check_count(params, 1, 3)
        to = params[0]
        if not isinstance(to, list) or not to:
            raise InvalidParams("Invalid params: outputs must be a non-empty array")
        outputs = [p.parse_output(item) for item in to]
        fee = p.parse_fee(params[1]) if len(params) >= 2 else Fixed8.ZERO
        change_address = p.parse_address(params[2]) if len(params) >= 3 else None

        return self._send(session, wallet, outputs, fee, change_address)

    @wallet_method
    def get_new_address(self, session: WalletSession, wallet: Wallet, params: list[Any]) -> str:
        p.check_count(params, 0, 0)
        key = wallet.create_key()
        contract = next(
            (c for c in wallet.get_contracts(key.public_key_hash) if c.is_standard), None
        )
        if contract is None:
            raise RpcError("Wallet did not register a contract for the new key")
        return contract.address

    @wallet_method
    def dump_priv_key(self, session: WalletSession, wallet: Wallet, params: list[Any]) -> str:
        p.check_count(params, 1, 1)
        script_hash = p.parse_address(params[0])
        key = wallet.get_key_by_script_hash(script_hash)
        if key is None:
            raise InvalidParams("Invalid params: no private key for address")
        return key.export()

    @wallet_method
    def sign(self, session: WalletSession, wallet: Wallet, params: list[Any]) -> dict[str, Any]:
        """Add this wallet's signatures to a context handed off by another cosigner."""
        p.check_count(params, 1, 1)
        context = self._parse_context(params[0])
        if not wallet.sign(context):
            logger.info("No new signatures added to the context")
        return context.to_json()

    def relay(self, session: WalletSession, params: list[Any]) -> dict[str, Any]:
        """Finalize and relay a completed context."""
        p.check_count(params, 1, 1)
        context = self._parse_context(params[0])
        if not context.completed:
            raise InvalidParams("Invalid params: signature context is not completed")
        tx = context.finalize()
        self._relay(session, tx)
        return tx.to_json()

    def _parse_context(self, value: Any) -> SignatureContext:
        if not isinstance(value, dict | str):
            raise InvalidParams("Invalid params: context must be an object")
        try:
            return SignatureContext.from_json(value)
        except ValueError as e:
            raise InvalidParams(f"Invalid params: {e}") from e

    def _send(
        self,
        session: WalletSession,
        wallet: Wallet,
        outputs: Sequence[TransactionOutput],
        fee: Fixed8,
        change_address: UInt160 | None,
    ) -> dict[str, Any]:
        """
        Build and sign; save and relay once every condition is signed.

        The transaction is saved before it is relayed, so a relay failure
        leaves the selected coins spent. The caller then gets an internal
        error, and repeating the same send fails with InsufficientFunds until
        the wallet observes the outcome.
        """
        try:
            result = wallet.make_transaction(
                outputs, change_address=change_address, fee=fee, fee_asset=session.fee_asset
            )
        except ValueError as e:
            raise InvalidParams(f"Invalid params: {e}") from e

        if isinstance(result, InsufficientFundsResult):
            raise InsufficientFunds()

        context = SignatureContext(result.transaction, result.script_hashes)
        wallet.sign(context)

        if not context.completed:
            logger.info(
                f"Transaction {result.transaction.hash} needs more signatures; "
                "returning signature context"
            )
            return context.to_json()

        tx = context.finalize()
        if not wallet.save_transaction(tx):
            # Another request spent one of the selected coins first
            raise InsufficientFunds()
        self._relay(session, tx)
        return tx.to_json()

    def _relay(self, session: WalletSession, tx: ContractTransaction) -> None:
        try:
            accepted = session.relay.relay(tx)
        except RelayError as e:
            raise RpcError(f"Relay failed: {e}") from e
        if not accepted:
            logger.warning(f"Relay did not accept transaction {tx.hash}")
