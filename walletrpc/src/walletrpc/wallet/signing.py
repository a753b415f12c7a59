"""
Signature collection for multi-party transaction authorization.

A SignatureContext tracks, for every script hash that must authorize a
transaction's inputs, the verification script (once known) and the
signatures gathered so far. It is either Collecting or Completed; an
incomplete context is handed to the next cosigner as JSON and resumed there.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol

from loguru import logger
from pydantic import BaseModel, Field, ValidationError, field_validator
from walletcore import (
    Contract,
    ContractError,
    ContractTransaction,
    Fixed8,
    KeyPair,
    TransactionFormatError,
    UInt160,
    Witness,
    verify_signature,
)
from walletcore.constants import CONTRACT_TX_NAME


class SigningCapability(Protocol):
    """Anything holding contracts and the private keys for some of their public keys"""

    def get_contract(self, script_hash: UInt160) -> Contract | None: ...

    def get_key(self, public_key: bytes) -> KeyPair | None: ...


@dataclass
class ContextItem:
    """Collected state for one spending condition."""

    contract: Contract | None = None
    signatures: dict[bytes, bytes] = field(default_factory=dict)

    @property
    def is_satisfied(self) -> bool:
        if self.contract is None:
            return False
        count = sum(1 for pk in self.contract.public_keys if pk in self.signatures)
        return count >= self.contract.required_signatures


def _is_hex(value: str) -> bool:
    try:
        bytes.fromhex(value)
    except ValueError:
        return False
    return True


class ContextItemModel(BaseModel):
    script: str | None = None
    signatures: dict[str, str] = Field(default_factory=dict)

    @field_validator("script")
    @classmethod
    def validate_script(cls, v: str | None) -> str | None:
        if v is not None and not _is_hex(v):
            raise ValueError("script must be hex")
        return v

    @field_validator("signatures")
    @classmethod
    def validate_signatures(cls, v: dict[str, str]) -> dict[str, str]:
        for pubkey, sig in v.items():
            if not _is_hex(pubkey) or not _is_hex(sig):
                raise ValueError("signatures must map hex public keys to hex signatures")
        return v


class SignatureContextModel(BaseModel):
    """Wire form of a partially signed transaction."""

    type: str = CONTRACT_TX_NAME
    hex: str
    fee: str = "0"
    items: dict[str, ContextItemModel]
    completed: bool = False

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        if v != CONTRACT_TX_NAME:
            raise ValueError(f"Unsupported transaction type: {v}")
        return v

    @field_validator("hex")
    @classmethod
    def validate_hex(cls, v: str) -> str:
        if not v or not _is_hex(v):
            raise ValueError("hex must be a non-empty hex string")
        return v


class SignatureContext:
    """
    Signatures collected for one pending transaction.

    Created fresh per signing attempt and owned by the request processing it.
    """

    def __init__(self, transaction: ContractTransaction, script_hashes: Iterable[UInt160]):
        self.transaction = transaction
        self.script_hashes: list[UInt160] = sorted(set(script_hashes))
        if not self.script_hashes:
            raise ValueError("Transaction has no spending conditions")
        self.items: dict[UInt160, ContextItem] = {sh: ContextItem() for sh in self.script_hashes}
        self._sign_data = transaction.get_sign_data()

    @property
    def sign_data(self) -> bytes:
        return self._sign_data

    @property
    def completed(self) -> bool:
        return all(item.is_satisfied for item in self.items.values())

    def add_signature(self, contract: Contract, public_key: bytes, signature: bytes) -> bool:
        """
        Record a signature for ``contract``.

        Returns False if the signature was already present.

        Raises:
            ValueError: If the contract does not guard an input, the key is not
                part of the contract, or the signature does not verify
        """
        item = self.items.get(contract.script_hash)
        if item is None:
            raise ValueError(f"Contract {contract.script_hash} does not guard any input")
        if public_key not in contract.public_keys:
            raise ValueError(f"Public key {public_key.hex()} is not part of the contract")
        if not verify_signature(self._sign_data, signature, public_key):
            raise ValueError(f"Invalid signature for public key {public_key.hex()}")

        if item.contract is None:
            item.contract = contract

        if item.signatures.get(public_key) == signature:
            return False
        item.signatures[public_key] = signature
        return True

    def get_witnesses(self) -> tuple[Witness, ...]:
        """
        Unlocking scripts in script-hash order.

        Raises:
            ValueError: If the context is not completed
        """
        if not self.completed:
            raise ValueError("Signature context is not completed")

        witnesses = []
        for script_hash in self.script_hashes:
            item = self.items[script_hash]
            contract = item.contract
            if contract is None:
                raise ValueError(f"No verification script for {script_hash}")
            witnesses.append(
                Witness(
                    invocation_script=contract.build_invocation_script(item.signatures),
                    verification_script=contract.script,
                )
            )
        return tuple(witnesses)

    def finalize(self) -> ContractTransaction:
        """Return the transaction with unlocking scripts attached. The context is not modified."""
        return ContractTransaction(
            inputs=self.transaction.inputs,
            outputs=self.transaction.outputs,
            witnesses=self.get_witnesses(),
            fee=self.transaction.fee,
        )

    def to_json(self) -> dict[str, Any]:
        items = {}
        for script_hash in self.script_hashes:
            item = self.items[script_hash]
            items[str(script_hash)] = {
                "script": item.contract.script.hex() if item.contract else None,
                "signatures": {pk.hex(): sig.hex() for pk, sig in sorted(item.signatures.items())},
            }
        return {
            "type": CONTRACT_TX_NAME,
            "hex": self.transaction.serialize_unsigned().hex(),
            "fee": str(self.transaction.fee),
            "items": items,
            "completed": self.completed,
        }

    def to_json_string(self) -> str:
        return json.dumps(self.to_json())

    @classmethod
    def from_json(cls, data: dict[str, Any] | str) -> SignatureContext:
        """
        Resume a context handed off by another cosigner.

        Every imported signature is verified again.

        Raises:
            ValueError: If the payload is malformed or carries an invalid signature
        """
        try:
            model = (
                SignatureContextModel.model_validate_json(data)
                if isinstance(data, str)
                else SignatureContextModel.model_validate(data)
            )
        except ValidationError as e:
            raise ValueError(f"Malformed signature context: {e}") from e

        try:
            transaction = ContractTransaction.from_bytes(
                bytes.fromhex(model.hex), fee=Fixed8.parse(model.fee)
            )
            script_hashes = {UInt160.parse(sh): item for sh, item in model.items.items()}
        except (TransactionFormatError, ValueError) as e:
            raise ValueError(f"Malformed signature context: {e}") from e

        context = cls(transaction, script_hashes.keys())
        for script_hash, item in script_hashes.items():
            if item.script is None:
                if item.signatures:
                    raise ValueError(f"Signatures without a script for {script_hash}")
                continue
            try:
                contract = Contract.from_script(bytes.fromhex(item.script))
            except ContractError as e:
                raise ValueError(f"Unsupported script for {script_hash}: {e}") from e
            if contract.script_hash != script_hash:
                raise ValueError(f"Script does not hash to {script_hash}")

            context.items[script_hash].contract = contract
            for pubkey_hex, sig_hex in item.signatures.items():
                context.add_signature(contract, bytes.fromhex(pubkey_hex), bytes.fromhex(sig_hex))

        return context


def sign(context: SignatureContext, capability: SigningCapability) -> bool:
    """
    Add every signature ``capability`` can produce for unsatisfied conditions.

    Conditions that are already satisfied are left untouched, so signing twice
    with the same capability is a no-op.

    Returns:
        True if at least one signature was added
    """
    added = False
    for script_hash in context.script_hashes:
        item = context.items[script_hash]
        if item.is_satisfied:
            continue

        contract = capability.get_contract(script_hash)
        if contract is None:
            continue

        for public_key in contract.public_keys:
            if item.is_satisfied:
                break
            if public_key in item.signatures:
                continue
            key = capability.get_key(public_key)
            if key is None:
                continue
            signature = key.sign(context.sign_data)
            if context.add_signature(contract, public_key, signature):
                added = True
                logger.debug(f"Signed condition {script_hash} with key {public_key.hex()[:16]}...")

    return added
