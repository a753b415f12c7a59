"""
Hashing, key and address primitives.
"""

from __future__ import annotations

import hashlib
import secrets

import base58
from coincurve import PrivateKey, PublicKey

from walletcore.constants import ADDRESS_VERSION, WIF_COMPRESSED_FLAG, WIF_VERSION
from walletcore.uint import UInt160


class CryptoError(Exception):
    pass


def hash256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def script_hash_to_address(script_hash: UInt160, version: int = ADDRESS_VERSION) -> str:
    return base58.b58encode_check(bytes([version]) + script_hash.data).decode("ascii")


def address_to_script_hash(address: str, version: int = ADDRESS_VERSION) -> UInt160:
    """
    Decode a Base58Check address into its script hash.

    Raises:
        ValueError: On bad checksum, version or length
    """
    if not isinstance(address, str) or not address:
        raise ValueError("Address must be a non-empty string")
    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise ValueError(f"Invalid address: {address}") from e

    if len(decoded) != 21:
        raise ValueError(f"Invalid address length: {address}")
    if decoded[0] != version:
        raise ValueError(f"Unknown address version {decoded[0]:#x}: {address}")

    return UInt160(decoded[1:])


def verify_signature(data: bytes, signature: bytes, public_key: bytes) -> bool:
    """Check a DER signature over sha256(data)."""
    try:
        return PublicKey(public_key).verify(signature, data)
    except (ValueError, TypeError):
        return False


class KeyPair:
    """
    A secp256k1 key pair.

    Signatures are deterministic (RFC 6979): signing the same data twice
    yields the same bytes.
    """

    def __init__(self, private_key: bytes | PrivateKey):
        if isinstance(private_key, PrivateKey):
            self._private_key = private_key
        else:
            if len(private_key) != 32:
                raise CryptoError(f"Private key must be 32 bytes, got {len(private_key)}")
            try:
                self._private_key = PrivateKey(private_key)
            except ValueError as e:
                raise CryptoError(f"Invalid private key: {e}") from e

        self.public_key: bytes = self._private_key.public_key.format(compressed=True)
        self.public_key_hash = UInt160(hash160(self.public_key))

    @classmethod
    def generate(cls) -> KeyPair:
        return cls(secrets.token_bytes(32))

    @classmethod
    def from_wif(cls, wif: str) -> KeyPair:
        try:
            decoded = base58.b58decode_check(wif.strip())
        except ValueError as e:
            raise CryptoError("Invalid WIF checksum") from e

        if len(decoded) != 34 or decoded[0] != WIF_VERSION or decoded[33] != WIF_COMPRESSED_FLAG:
            raise CryptoError("Invalid WIF encoding")

        return cls(decoded[1:33])

    def export(self) -> str:
        """Export as WIF"""
        payload = (
            bytes([WIF_VERSION]) + self._private_key.secret + bytes([WIF_COMPRESSED_FLAG])
        )
        return base58.b58encode_check(payload).decode("ascii")

    def sign(self, data: bytes) -> bytes:
        """DER signature over sha256(data)."""
        return self._private_key.sign(data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.public_key == other.public_key

    def __hash__(self) -> int:
        return hash(self.public_key)

    def __repr__(self) -> str:
        return f"KeyPair({self.public_key.hex()})"
