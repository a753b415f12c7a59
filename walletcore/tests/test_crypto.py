"""
Tests for walletcore.crypto
"""

import base58
import pytest

from walletcore import (
    CryptoError,
    KeyPair,
    UInt160,
    address_to_script_hash,
    hash160,
    hash256,
    script_hash_to_address,
    verify_signature,
)

PRIVKEY_1 = bytes.fromhex("01" * 32)
PRIVKEY_2 = bytes.fromhex("02" * 32)


class TestHashes:
    def test_hash256_empty(self):
        expected = bytes.fromhex("5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456")
        assert hash256(b"") == expected

    def test_hash160_empty(self):
        assert hash160(b"") == bytes.fromhex("b472a266d0bd89c13706a4132ccfb16f7c3b9fcb")

    def test_hash160_length(self):
        assert len(hash160(b"hello")) == 20


class TestAddress:
    def test_roundtrip(self):
        script_hash = UInt160(hash160(b"script"))
        address = script_hash_to_address(script_hash)
        assert address_to_script_hash(address) == script_hash

    def test_version_prefix_renders_as_a(self):
        address = script_hash_to_address(UInt160(hash160(b"script")))
        assert address.startswith("A")

    def test_bad_checksum(self):
        address = script_hash_to_address(UInt160(hash160(b"script")))
        corrupted = address[:-1] + ("1" if address[-1] != "1" else "2")
        with pytest.raises(ValueError):
            address_to_script_hash(corrupted)

    def test_wrong_version(self):
        address = script_hash_to_address(UInt160(hash160(b"script")), version=0x00)
        with pytest.raises(ValueError):
            address_to_script_hash(address)

    def test_empty(self):
        with pytest.raises(ValueError):
            address_to_script_hash("")

    def test_invalid_characters(self):
        with pytest.raises(ValueError):
            address_to_script_hash("0OIl")


class TestKeyPair:
    def test_public_key_is_compressed(self):
        key = KeyPair(PRIVKEY_1)
        assert len(key.public_key) == 33
        assert key.public_key[0] in (0x02, 0x03)

    def test_public_key_hash(self):
        key = KeyPair(PRIVKEY_1)
        assert key.public_key_hash == UInt160(hash160(key.public_key))

    def test_wif_roundtrip(self):
        key = KeyPair(PRIVKEY_1)
        wif = key.export()
        assert wif[0] in ("K", "L")
        assert KeyPair.from_wif(wif) == key

    def test_corrupted_wif(self):
        wif = KeyPair(PRIVKEY_1).export()
        corrupted = wif[:-1] + ("1" if wif[-1] != "1" else "2")
        with pytest.raises(CryptoError):
            KeyPair.from_wif(corrupted)

    def test_uncompressed_wif_rejected(self):
        wif = base58.b58encode_check(b"\x80" + PRIVKEY_1).decode()
        with pytest.raises(CryptoError):
            KeyPair.from_wif(wif)

    def test_wrong_length_key(self):
        with pytest.raises(CryptoError):
            KeyPair(b"\x01" * 31)

    def test_zero_key_rejected(self):
        with pytest.raises(CryptoError):
            KeyPair(bytes(32))

    def test_generate_unique(self):
        assert KeyPair.generate() != KeyPair.generate()

    def test_sign_is_deterministic(self):
        key = KeyPair(PRIVKEY_1)
        assert key.sign(b"payload") == key.sign(b"payload")

    def test_sign_verify(self):
        key = KeyPair(PRIVKEY_1)
        sig = key.sign(b"payload")
        assert verify_signature(b"payload", sig, key.public_key)
        assert not verify_signature(b"other", sig, key.public_key)
        assert not verify_signature(b"payload", sig, KeyPair(PRIVKEY_2).public_key)

    def test_verify_garbage_signature(self):
        key = KeyPair(PRIVKEY_1)
        assert not verify_signature(b"payload", b"\x30\x01", key.public_key)

    def test_verify_garbage_public_key(self):
        key = KeyPair(PRIVKEY_1)
        assert not verify_signature(b"payload", key.sign(b"payload"), b"\x02" * 5)
