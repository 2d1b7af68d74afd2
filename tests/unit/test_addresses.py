"""Unit tests for bech32 address conversions."""
from __future__ import annotations

import hashlib

import pytest

from chain_aggregator.chains.cosmos.addresses import (
    decode_address,
    delegator_to_operator,
    encode_address,
    operator_to_delegator,
    pubkey_to_consensus_address,
)

ACCOUNT_BYTES = bytes(range(20))


class TestAddressConversions:
    def test_decode_encoded_bytes(self) -> None:
        address = encode_address(ACCOUNT_BYTES, "cosmos")
        assert address.startswith("cosmos1")
        assert decode_address(address) == ACCOUNT_BYTES

    def test_operator_to_delegator(self) -> None:
        operator = encode_address(ACCOUNT_BYTES, "cosmosvaloper")
        delegator = operator_to_delegator(operator, "cosmos")
        assert delegator == encode_address(ACCOUNT_BYTES, "cosmos")
        assert delegator_to_operator(delegator, "cosmos") == operator

    def test_consensus_address_hashes_bare_key(self) -> None:
        key = bytes(range(32))
        pubkey = encode_address(b"\x16\x24\xde\x64\x20" + key, "cosmosvalconspub")
        expected = encode_address(hashlib.sha256(key).digest()[:20], "cosmosvalcons")
        assert pubkey_to_consensus_address(pubkey, "cosmos") == expected

    def test_invalid_string_raises(self) -> None:
        with pytest.raises(ValueError):
            decode_address("not-an-address")
