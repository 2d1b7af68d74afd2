"""Unit tests for data models."""
from __future__ import annotations

from decimal import Decimal

import pytest

from chain_aggregator.models import (
    EMPTY_TALLY,
    Balance,
    BalanceType,
    Coin,
    SendDetails,
    Transaction,
    TransactionType,
    Validator,
)


class TestCoin:
    def test_equality(self) -> None:
        assert Coin("ATOM", Decimal("1.0")) == Coin("ATOM", Decimal(1))

    def test_frozen(self) -> None:
        coin = Coin("ATOM", Decimal(1))
        with pytest.raises(AttributeError):
            coin.amount = Decimal(2)  # type: ignore[misc]


class TestBalance:
    def test_defaults(self) -> None:
        balance = Balance(
            id="ATOM",
            denom="ATOM",
            type=BalanceType.STAKE,
            total=Decimal(1),
            available=Decimal(1),
        )
        assert balance.staked == 0
        assert balance.fiat_value is None
        assert balance.gas_price is None


class TestValidator:
    def test_frozen(self, sample_validator: Validator) -> None:
        with pytest.raises(AttributeError):
            sample_validator.voting_power = Decimal(1)  # type: ignore[misc]

    def test_optional_metrics_default_to_none(
        self, sample_validator: Validator
    ) -> None:
        assert sample_validator.uptime_percentage is None
        assert sample_validator.expected_returns is None
        assert sample_validator.self_stake == 0


class TestTransaction:
    def test_details_carry_type(self) -> None:
        details = SendDetails(("a",), ("b",), Coin("ATOM", Decimal(1)))
        tx = Transaction(
            id="H",
            key="H_0",
            type=details.type,
            hash="H",
            height=1,
            timestamp=None,
            details=details,
            success=True,
        )
        assert tx.type == TransactionType.SEND
        assert tx.type.value == "SendTx"
        assert tx.fees == ()


class TestTally:
    def test_empty_tally(self) -> None:
        assert EMPTY_TALLY.total == 0
        assert EMPTY_TALLY.total_voted_percentage == "0.0000"
