"""
Tests for walletrpc.rpc.handler
"""

import pytest
from walletcore import (
    Contract,
    ContractTransaction,
    Fixed8,
    KeyPair,
    address_to_script_hash,
    script_hash_to_address,
)

from walletrpc.errors import (
    AccessDenied,
    InsufficientFunds,
    InvalidParams,
    MethodNotFound,
    RpcError,
)
from walletrpc.relay import Relay, RelayError
from walletrpc.rpc import WalletSession
from walletrpc.wallet import InMemoryWallet


@pytest.fixture
def payee_address(payee):
    return script_hash_to_address(payee)


@pytest.fixture
def funded(wallet, contract, make_coin):
    wallet.add_coin(make_coin(contract.script_hash, "10"))
    return wallet


class FailingRelay(Relay):
    def relay(self, tx):
        raise RelayError("connection refused")


class RejectingRelay(Relay):
    def relay(self, tx):
        return False


class ConflictingWallet(InMemoryWallet):
    """Wallet that loses every spend race at save time."""

    def save_transaction(self, tx):
        return False


class UnregisteredKeyWallet(InMemoryWallet):
    """Wallet whose new keys come without a signature contract."""

    def create_key(self):
        return KeyPair.generate()


class TestDispatch:
    def test_unknown_method(self, handler, session):
        with pytest.raises(MethodNotFound):
            handler.process(session, "getblock", [])

    def test_params_must_be_array(self, handler, session):
        with pytest.raises(InvalidParams):
            handler.process(session, "getnewaddress", {"a": 1})

    def test_missing_params_treated_as_empty(self, handler, session):
        address = handler.process(session, "getnewaddress", None)
        assert address.startswith("A")

    @pytest.mark.parametrize(
        "method,params",
        [
            ("getaddressbalance", ["not-an-address"]),
            ("getbalance", []),
            ("sendtoaddress", [0]),
            ("sendmany", "garbage"),
            ("getnewaddress", ["extra"]),
            ("dumpprivkey", []),
            ("sign", [{}]),
        ],
    )
    def test_access_denied_before_validation(self, handler, method, params):
        session = WalletSession()
        with pytest.raises(AccessDenied) as exc_info:
            handler.process(session, method, params)
        assert exc_info.value.code == -400

    def test_relay_does_not_need_wallet(self, handler):
        with pytest.raises(InvalidParams):
            handler.process(WalletSession(), "relay", [{}])


class TestBalances:
    def test_get_address_balance(self, handler, session, funded, contract, asset_a):
        result = handler.process(session, "getaddressbalance", [contract.address])
        assert result == {
            "balances": [
                {
                    "asset": str(asset_a),
                    "unconfirmed": "0",
                    "confirmed": "10",
                    "spendable": "10",
                }
            ]
        }

    def test_get_address_balance_empty(self, handler, session, payee_address):
        assert handler.process(session, "getaddressbalance", [payee_address]) == {"balances": []}

    def test_get_address_balance_bad_address(self, handler, session):
        with pytest.raises(InvalidParams):
            handler.process(session, "getaddressbalance", ["AXXXXXXXX"])

    def test_get_balance(self, handler, session, funded, asset_a):
        result = handler.process(session, "getbalance", [str(asset_a)])
        assert result == {"balance": "10", "confirmed": "10"}

    def test_get_balance_bad_asset(self, handler, session):
        with pytest.raises(InvalidParams):
            handler.process(session, "getbalance", ["0x1234"])


class TestSendToAddress:
    def test_change_and_fee(
        self, handler, session, funded, contract, relay, asset_a, payee_address
    ):
        result = handler.process(
            session, "sendtoaddress", [str(asset_a), payee_address, "7", "1"]
        )

        assert len(result["vin"]) == 1
        assert [(o["value"], o["address"]) for o in result["vout"]] == [
            ("7", payee_address),
            ("2", contract.address),
        ]
        assert result["net_fee"] == "1"
        assert len(result["scripts"]) == 1

        assert len(relay.relayed) == 1
        assert str(relay.relayed[0].hash) == result["txid"]

    def test_persists_before_relay(self, handler, session, funded, asset_a, payee_address):
        handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "7", "1"])

        spent = [c for c in funded.get_coins() if c.is_spent]
        assert len(spent) == 1

        with pytest.raises(InsufficientFunds):
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1"])

    def test_numeric_value(self, handler, session, funded, asset_a, payee_address):
        result = handler.process(session, "sendtoaddress", [str(asset_a), payee_address, 2.5])
        assert result["vout"][0]["value"] == "2.5"

    def test_explicit_change_address(
        self, handler, session, funded, asset_a, payee_address, make_key
    ):
        change = Contract.create_signature_contract(make_key(4).public_key).address
        result = handler.process(
            session, "sendtoaddress", [str(asset_a), payee_address, "3", "0", change]
        )
        assert result["vout"][1]["address"] == change

    def test_insufficient_funds(self, handler, session, asset_a, payee_address):
        with pytest.raises(InsufficientFunds) as exc_info:
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1", "0"])
        assert exc_info.value.code == -300

    def test_insufficient_funds_including_fee(
        self, handler, session, funded, asset_a, payee_address
    ):
        with pytest.raises(InsufficientFunds):
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "10", "0.1"])

    @pytest.mark.parametrize(
        "value",
        [
            "0",
            "-1",
            0,
            "1.000000001",
            "1.000000000000000000000000000001",
            "1e1000000",
            "abc",
            True,
            None,
        ],
    )
    def test_invalid_value(self, handler, session, funded, asset_a, payee_address, value):
        with pytest.raises(InvalidParams) as exc_info:
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, value])
        assert exc_info.value.code == -32602

    def test_negative_fee(self, handler, session, funded, asset_a, payee_address):
        with pytest.raises(InvalidParams):
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1", "-1"])

    @pytest.mark.parametrize("fee", ["1e1000000", "0.000000000000000000000000000001"])
    def test_unrepresentable_fee(self, handler, session, funded, asset_a, payee_address, fee):
        with pytest.raises(InvalidParams):
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1", fee])

        assert not any(c.is_spent for c in funded.get_coins())

    @pytest.mark.parametrize("count", [2, 6])
    def test_param_count(self, handler, session, funded, asset_a, payee_address, count):
        params = [str(asset_a), payee_address, "1", "0", payee_address, "x"][:count]
        with pytest.raises(InvalidParams):
            handler.process(session, "sendtoaddress", params)

    def test_bad_address(self, handler, session, funded, asset_a):
        with pytest.raises(InvalidParams):
            handler.process(session, "sendtoaddress", [str(asset_a), "nope", "1"])

    def test_fee_asset_from_session(
        self, handler, session, funded, contract, make_coin, asset_a, asset_b, payee_address
    ):
        funded.add_coin(make_coin(contract.script_hash, "1", asset_id=asset_b, tag=b"gas"))
        session.fee_asset = asset_b

        result = handler.process(
            session, "sendtoaddress", [str(asset_a), payee_address, "10", "0.5"]
        )

        assert len(result["vin"]) == 2
        assert [(o["asset"], o["value"]) for o in result["vout"]] == [
            (str(asset_a), "10"),
            (str(asset_b), "0.5"),
        ]

    def test_relay_failure(self, handler, funded, asset_a, payee_address):
        session = WalletSession(relay=FailingRelay(), wallet=funded)
        with pytest.raises(RpcError) as exc_info:
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1"])
        assert exc_info.value.code == -32603

        # saved before the relay attempt, so the coin stays spent
        assert funded.get_coins()[0].is_spent
        with pytest.raises(InsufficientFunds):
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1"])

    def test_save_conflict_is_insufficient_funds(
        self, handler, relay, contract, make_coin, asset_a, payee_address, key
    ):
        wallet = ConflictingWallet([key])
        wallet.add_coin(make_coin(contract.script_hash, "10"))
        session = WalletSession(relay=relay, wallet=wallet)

        with pytest.raises(InsufficientFunds) as exc_info:
            handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "7", "1"])

        assert exc_info.value.code == -300
        assert relay.relayed == []

    def test_relay_rejection_still_returns_transaction(
        self, handler, funded, asset_a, payee_address
    ):
        session = WalletSession(relay=RejectingRelay(), wallet=funded)
        result = handler.process(session, "sendtoaddress", [str(asset_a), payee_address, "1"])
        assert result["type"] == "ContractTransaction"


class TestSendMany:
    def test_multiple_outputs(self, handler, session, funded, asset_a, payee_address, make_key):
        other = Contract.create_signature_contract(make_key(6).public_key).address
        outputs = [
            {"asset": str(asset_a), "value": "3", "address": payee_address},
            {"asset": str(asset_a), "value": "4", "address": other},
        ]

        result = handler.process(session, "sendmany", [outputs, "1"])

        assert [o["value"] for o in result["vout"]] == ["3", "4", "2"]

    @pytest.mark.parametrize(
        "outputs",
        [
            [],
            "x",
            [{"asset": "0x" + "aa" * 32, "value": "1"}],
            [{"asset": "0x" + "aa" * 32, "value": "0", "address": "x"}],
            ["not-an-object"],
        ],
    )
    def test_invalid_outputs(self, handler, session, funded, outputs):
        with pytest.raises(InvalidParams):
            handler.process(session, "sendmany", [outputs])


class TestKeys:
    def test_get_new_address(self, handler, session, wallet):
        address = handler.process(session, "getnewaddress", [])
        script_hash = address_to_script_hash(address)
        assert wallet.get_key_by_script_hash(script_hash) is not None

    def test_dump_priv_key(self, handler, session, key, contract):
        wif = handler.process(session, "dumpprivkey", [contract.address])
        assert KeyPair.from_wif(wif) == key

    def test_dump_priv_key_unknown_address(self, handler, session, payee_address):
        with pytest.raises(InvalidParams):
            handler.process(session, "dumpprivkey", [payee_address])

    def test_get_new_address_without_contract(self, handler, key, relay):
        session = WalletSession(relay=relay, wallet=UnregisteredKeyWallet([key]))
        with pytest.raises(RpcError) as exc_info:
            handler.process(session, "getnewaddress", [])
        assert exc_info.value.code == -32603


class TestMultisigFlow:
    @pytest.fixture
    def cosigners(self, make_key, make_coin):
        keys = [make_key(2), make_key(3)]
        multisig = Contract.create_multisig_contract(2, [k.public_key for k in keys])
        wallets = []
        for k in keys:
            w = InMemoryWallet([k])
            w.add_contract(multisig)
            w.add_coin(make_coin(multisig.script_hash, "10"))
            wallets.append(w)
        return multisig, wallets

    def test_partial_then_sign_then_relay(
        self, handler, relay, cosigners, asset_a, payee_address
    ):
        multisig, wallets = cosigners
        first = WalletSession(relay=relay, wallet=wallets[0])
        second = WalletSession(relay=relay, wallet=wallets[1])

        partial = handler.process(
            first,
            "sendtoaddress",
            [str(asset_a), payee_address, "7", "1", multisig.address],
        )

        assert partial["completed"] is False
        item = partial["items"][str(multisig.script_hash)]
        assert len(item["signatures"]) == 1
        assert relay.relayed == []

        signed = handler.process(second, "sign", [partial])
        assert signed["completed"] is True

        result = handler.process(WalletSession(relay=relay), "relay", [signed])

        assert len(relay.relayed) == 1
        tx = relay.relayed[0]
        assert isinstance(tx, ContractTransaction)
        assert result["txid"] == str(tx.hash)
        assert tx.witnesses[0].verification_script == multisig.script
        assert tx.fee == Fixed8.parse("1")

    def test_relay_incomplete_context(self, handler, relay, cosigners, asset_a, payee_address):
        multisig, wallets = cosigners
        partial = handler.process(
            WalletSession(relay=relay, wallet=wallets[0]),
            "sendtoaddress",
            [str(asset_a), payee_address, "1", "0", multisig.address],
        )

        with pytest.raises(InvalidParams):
            handler.process(WalletSession(relay=relay), "relay", [partial])

    def test_sign_malformed_context(self, handler, session):
        with pytest.raises(InvalidParams):
            handler.process(session, "sign", [{"hex": "zz", "items": {}}])

    def test_sign_non_object(self, handler, session):
        with pytest.raises(InvalidParams):
            handler.process(session, "sign", [42])
