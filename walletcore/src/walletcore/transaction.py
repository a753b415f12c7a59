"""
Contract transactions: binary serialization, hashing and JSON rendering.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any

from walletcore.constants import CONTRACT_TX_NAME, CONTRACT_TX_TYPE, CONTRACT_TX_VERSION
from walletcore.crypto import hash256, script_hash_to_address
from walletcore.fixed8 import Fixed8
from walletcore.uint import UInt160, UInt256


class TransactionFormatError(ValueError):
    pass


def encode_varint(value: int) -> bytes:
    if value < 0xFD:
        return bytes([value])
    if value <= 0xFFFF:
        return b"\xfd" + value.to_bytes(2, "little")
    if value <= 0xFFFFFFFF:
        return b"\xfe" + value.to_bytes(4, "little")
    return b"\xff" + value.to_bytes(8, "little")


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    first = data[offset]
    offset += 1

    if first < 0xFD:
        return first, offset
    if first == 0xFD:
        return int.from_bytes(data[offset : offset + 2], "little"), offset + 2
    if first == 0xFE:
        return int.from_bytes(data[offset : offset + 4], "little"), offset + 4
    return int.from_bytes(data[offset : offset + 8], "little"), offset + 8


def encode_varbytes(data: bytes) -> bytes:
    return encode_varint(len(data)) + data


def _take(data: bytes, offset: int, length: int) -> tuple[bytes, int]:
    if offset + length > len(data):
        raise TransactionFormatError("Unexpected end of transaction data")
    return data[offset : offset + length], offset + length


@dataclass(frozen=True, order=True)
class CoinReference:
    """Pointer to a previous transaction output."""

    prev_hash: UInt256
    prev_index: int

    def serialize(self) -> bytes:
        return self.prev_hash.data + struct.pack("<H", self.prev_index)

    def to_json(self) -> dict[str, Any]:
        return {"txid": str(self.prev_hash), "vout": self.prev_index}


@dataclass(frozen=True)
class TransactionOutput:
    asset_id: UInt256
    value: Fixed8
    script_hash: UInt160

    def serialize(self) -> bytes:
        return self.asset_id.data + struct.pack("<q", self.value.raw) + self.script_hash.data

    @property
    def address(self) -> str:
        return script_hash_to_address(self.script_hash)

    def to_json(self, index: int) -> dict[str, Any]:
        return {
            "n": index,
            "asset": str(self.asset_id),
            "value": str(self.value),
            "address": self.address,
        }


@dataclass(frozen=True)
class Witness:
    invocation_script: bytes
    verification_script: bytes

    def serialize(self) -> bytes:
        return encode_varbytes(self.invocation_script) + encode_varbytes(
            self.verification_script
        )

    def to_json(self) -> dict[str, str]:
        return {
            "invocation": self.invocation_script.hex(),
            "verification": self.verification_script.hex(),
        }


@dataclass(frozen=True)
class ContractTransaction:
    """
    An asset transfer.

    ``fee`` is the network fee implied by inputs minus outputs. It travels
    alongside the body and is not part of the serialized bytes.
    """

    inputs: tuple[CoinReference, ...]
    outputs: tuple[TransactionOutput, ...]
    witnesses: tuple[Witness, ...] = ()
    fee: Fixed8 = field(default=Fixed8.ZERO)

    def serialize_unsigned(self) -> bytes:
        result = bytes([CONTRACT_TX_TYPE, CONTRACT_TX_VERSION])
        result += encode_varint(0)  # attributes
        result += encode_varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize()
        result += encode_varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()
        return result

    def serialize(self) -> bytes:
        result = self.serialize_unsigned()
        result += encode_varint(len(self.witnesses))
        for witness in self.witnesses:
            result += witness.serialize()
        return result

    def get_sign_data(self) -> bytes:
        return self.serialize_unsigned()

    @property
    def hash(self) -> UInt256:
        return UInt256(hash256(self.serialize_unsigned()))

    @property
    def size(self) -> int:
        return len(self.serialize())

    @classmethod
    def from_bytes(cls, data: bytes, fee: Fixed8 = Fixed8.ZERO) -> ContractTransaction:
        """
        Parse the unsigned or signed form.

        Raises:
            TransactionFormatError: On any malformed or trailing data
        """
        try:
            offset = 0
            header, offset = _take(data, offset, 2)
            if header[0] != CONTRACT_TX_TYPE:
                raise TransactionFormatError(f"Unsupported transaction type {header[0]:#x}")
            if header[1] != CONTRACT_TX_VERSION:
                raise TransactionFormatError(f"Unsupported transaction version {header[1]}")

            attr_count, offset = read_varint(data, offset)
            if attr_count:
                raise TransactionFormatError("Transaction attributes are not supported")

            input_count, offset = read_varint(data, offset)
            inputs: list[CoinReference] = []
            for _ in range(input_count):
                prev_hash, offset = _take(data, offset, 32)
                index_bytes, offset = _take(data, offset, 2)
                inputs.append(
                    CoinReference(UInt256(prev_hash), struct.unpack("<H", index_bytes)[0])
                )

            output_count, offset = read_varint(data, offset)
            outputs: list[TransactionOutput] = []
            for _ in range(output_count):
                asset, offset = _take(data, offset, 32)
                value_bytes, offset = _take(data, offset, 8)
                script_hash, offset = _take(data, offset, 20)
                outputs.append(
                    TransactionOutput(
                        asset_id=UInt256(asset),
                        value=Fixed8(struct.unpack("<q", value_bytes)[0]),
                        script_hash=UInt160(script_hash),
                    )
                )

            witnesses: list[Witness] = []
            if offset < len(data):
                witness_count, offset = read_varint(data, offset)
                for _ in range(witness_count):
                    inv_len, offset = read_varint(data, offset)
                    invocation, offset = _take(data, offset, inv_len)
                    ver_len, offset = read_varint(data, offset)
                    verification, offset = _take(data, offset, ver_len)
                    witnesses.append(Witness(invocation, verification))

            if offset != len(data):
                raise TransactionFormatError("Trailing bytes after transaction")

        except IndexError as e:
            raise TransactionFormatError("Unexpected end of transaction data") from e

        return cls(
            inputs=tuple(inputs),
            outputs=tuple(outputs),
            witnesses=tuple(witnesses),
            fee=fee,
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "txid": str(self.hash),
            "size": self.size,
            "type": CONTRACT_TX_NAME,
            "version": CONTRACT_TX_VERSION,
            "attributes": [],
            "vin": [inp.to_json() for inp in self.inputs],
            "vout": [out.to_json(i) for i, out in enumerate(self.outputs)],
            "sys_fee": str(Fixed8.ZERO),
            "net_fee": str(self.fee),
            "scripts": [w.to_json() for w in self.witnesses],
        }
