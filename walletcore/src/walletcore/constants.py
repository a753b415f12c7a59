"""
Ledger, address and script constants.
"""

from __future__ import annotations

# Amounts are fixed-point with eight decimal places
FIXED8_DECIMALS = 8

# Base58Check version byte prefixed to script hashes when rendering addresses
ADDRESS_VERSION = 0x17

# WIF export: version byte and compressed-key suffix
WIF_VERSION = 0x80
WIF_COMPRESSED_FLAG = 0x01

# Transaction wire constants
CONTRACT_TX_TYPE = 0x80
CONTRACT_TX_VERSION = 0
CONTRACT_TX_NAME = "ContractTransaction"

# Script opcodes used by verification contracts
OP_PUSHBYTES75 = 0x4B
OP_PUSHDATA1 = 0x4C
OP_1 = 0x51
OP_16 = 0x60
OP_CHECKSIG = 0xAC
OP_CHECKMULTISIG = 0xAE

# CHECKMULTISIG can be satisfied by at most this many keys
MAX_MULTISIG_KEYS = 16
