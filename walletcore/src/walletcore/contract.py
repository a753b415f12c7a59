"""
Verification contracts: the spending conditions attached to script hashes.

Two shapes are understood:

- signature contract: ``PUSH(pubkey) CHECKSIG`` (one signature)
- multisig contract: ``PUSH(m) PUSH(pk_1) ... PUSH(pk_n) PUSH(n) CHECKMULTISIG``
  with public keys sorted ascending (m signatures)
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from functools import cached_property

from walletcore.constants import (
    MAX_MULTISIG_KEYS,
    OP_1,
    OP_16,
    OP_CHECKMULTISIG,
    OP_CHECKSIG,
    OP_PUSHBYTES75,
    OP_PUSHDATA1,
)
from walletcore.crypto import hash160, script_hash_to_address
from walletcore.uint import UInt160

PUBKEY_LENGTH = 33


class ContractError(ValueError):
    pass


def push_data(data: bytes) -> bytes:
    """Script push of raw bytes."""
    if len(data) <= OP_PUSHBYTES75:
        return bytes([len(data)]) + data
    if len(data) <= 0xFF:
        return bytes([OP_PUSHDATA1, len(data)]) + data
    raise ContractError(f"Push data too large: {len(data)} bytes")


def push_int(n: int) -> bytes:
    if not 1 <= n <= 16:
        raise ContractError(f"Small integer out of range: {n}")
    return bytes([OP_1 + n - 1])


def read_pushes(script: bytes) -> list[bytes]:
    """
    Split an invocation script into its pushed items.

    Raises:
        ContractError: If the script contains anything other than data pushes
    """
    items: list[bytes] = []
    offset = 0
    while offset < len(script):
        op = script[offset]
        offset += 1
        if op <= OP_PUSHBYTES75:
            length = op
        elif op == OP_PUSHDATA1:
            if offset >= len(script):
                raise ContractError("Truncated PUSHDATA1")
            length = script[offset]
            offset += 1
        else:
            raise ContractError(f"Unexpected opcode {op:#x} in invocation script")
        if offset + length > len(script):
            raise ContractError("Truncated push")
        items.append(script[offset : offset + length])
        offset += length
    return items


@dataclass(frozen=True)
class Contract:
    """A verification script plus the keys and threshold parsed from it."""

    script: bytes
    public_keys: tuple[bytes, ...] = field(compare=False)
    required_signatures: int = field(compare=False)

    @classmethod
    def create_signature_contract(cls, public_key: bytes) -> Contract:
        if len(public_key) != PUBKEY_LENGTH:
            raise ContractError(f"Public key must be {PUBKEY_LENGTH} bytes")
        script = push_data(public_key) + bytes([OP_CHECKSIG])
        return cls(script=script, public_keys=(public_key,), required_signatures=1)

    @classmethod
    def create_multisig_contract(cls, m: int, public_keys: Sequence[bytes]) -> Contract:
        n = len(public_keys)
        if not 1 <= m <= n <= MAX_MULTISIG_KEYS:
            raise ContractError(f"Invalid multisig parameters: {m}-of-{n}")
        if len(set(public_keys)) != n:
            raise ContractError("Duplicate public keys in multisig contract")
        for pk in public_keys:
            if len(pk) != PUBKEY_LENGTH:
                raise ContractError(f"Public key must be {PUBKEY_LENGTH} bytes")

        ordered = tuple(sorted(public_keys))
        script = push_int(m)
        for pk in ordered:
            script += push_data(pk)
        script += push_int(n) + bytes([OP_CHECKMULTISIG])
        return cls(script=script, public_keys=ordered, required_signatures=m)

    @classmethod
    def from_script(cls, script: bytes) -> Contract:
        """
        Recover a contract from its verification script.

        Raises:
            ContractError: If the script is neither a signature nor a multisig contract
        """
        if (
            len(script) == PUBKEY_LENGTH + 2
            and script[0] == PUBKEY_LENGTH
            and script[-1] == OP_CHECKSIG
        ):
            return cls(script=script, public_keys=(script[1:-1],), required_signatures=1)

        if len(script) < 3 or script[-1] != OP_CHECKMULTISIG:
            raise ContractError("Unsupported verification script")

        m_op, n_op = script[0], script[-2]
        if not (OP_1 <= m_op <= OP_16 and OP_1 <= n_op <= OP_16):
            raise ContractError("Malformed multisig script")
        m = m_op - OP_1 + 1
        n = n_op - OP_1 + 1

        keys: list[bytes] = []
        offset = 1
        while offset < len(script) - 2:
            if script[offset] != PUBKEY_LENGTH:
                raise ContractError("Malformed multisig script")
            keys.append(script[offset + 1 : offset + 1 + PUBKEY_LENGTH])
            offset += 1 + PUBKEY_LENGTH

        if offset != len(script) - 2 or len(keys) != n or not 1 <= m <= n:
            raise ContractError("Malformed multisig script")

        return cls(script=script, public_keys=tuple(keys), required_signatures=m)

    @cached_property
    def script_hash(self) -> UInt160:
        return UInt160(hash160(self.script))

    @property
    def address(self) -> str:
        return script_hash_to_address(self.script_hash)

    @property
    def is_standard(self) -> bool:
        return len(self.public_keys) == 1 and self.script[-1] == OP_CHECKSIG

    @property
    def is_multisig(self) -> bool:
        return self.script[-1] == OP_CHECKMULTISIG

    def build_invocation_script(self, signatures: dict[bytes, bytes]) -> bytes:
        """
        Push the first ``required_signatures`` signatures in public-key order.

        Raises:
            ContractError: If fewer signatures than required are available
        """
        ordered = [signatures[pk] for pk in self.public_keys if pk in signatures]
        if len(ordered) < self.required_signatures:
            raise ContractError(
                f"Need {self.required_signatures} signatures, have {len(ordered)}"
            )
        return b"".join(push_data(sig) for sig in ordered[: self.required_signatures])
