"""Bech32 conversions between Cosmos address kinds."""
from __future__ import annotations

import hashlib

from bech32 import bech32_decode, bech32_encode, convertbits

# Amino prefix in front of an ed25519 consensus public key.
_AMINO_PUBKEY_PREFIX_LEN = 5


def decode_address(address: str) -> bytes:
    """Raw bytes behind a bech32 string; ValueError when it is not valid bech32."""
    hrp, data = bech32_decode(address)
    if hrp is None or data is None:
        raise ValueError(f"Invalid bech32 string: {address}")
    decoded = convertbits(data, 5, 8, False)
    if decoded is None:
        raise ValueError(f"Invalid bech32 payload: {address}")
    return bytes(decoded)


def encode_address(raw: bytes, prefix: str) -> str:
    return bech32_encode(prefix, convertbits(raw, 8, 5))


def operator_to_delegator(operator_address: str, prefix: str) -> str:
    """``cosmosvaloper1…`` → ``cosmos1…`` (same account bytes)."""
    return encode_address(decode_address(operator_address), prefix)


def delegator_to_operator(delegator_address: str, prefix: str) -> str:
    return encode_address(decode_address(delegator_address), f"{prefix}valoper")


def pubkey_to_consensus_address(consensus_pubkey: str, prefix: str) -> str:
    """``cosmosvalconspub1…`` → ``cosmosvalcons1…``.

    The consensus address is the first 20 bytes of sha256 over the bare
    ed25519 key.
    """
    raw = decode_address(consensus_pubkey)
    digest = hashlib.sha256(raw[_AMINO_PUBKEY_PREFIX_LEN:]).digest()[:20]
    return encode_address(digest, f"{prefix}valcons")
