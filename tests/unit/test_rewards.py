"""Unit tests for reward aggregation."""
from __future__ import annotations

from decimal import Decimal

from chain_aggregator.models import Reward
from chain_aggregator.rewards import aggregate_rewards


def _reward(validator: str, denom: str, amount: str) -> Reward:
    return Reward(
        id=validator, validator_address=validator, denom=denom, amount=Decimal(amount)
    )


class TestAggregateRewards:
    def test_sums_by_validator_and_denom(self) -> None:
        result = aggregate_rewards(
            [
                _reward("V1", "uatom", "10"),
                _reward("V1", "uatom", "5"),
                _reward("V2", "uatom", "3"),
            ]
        )
        assert [(r.validator_address, r.denom, r.amount) for r in result] == [
            ("V1", "uatom", Decimal(15)),
            ("V2", "uatom", Decimal(3)),
        ]

    def test_different_denoms_stay_apart(self) -> None:
        result = aggregate_rewards(
            [_reward("V1", "uatom", "1"), _reward("V1", "ukava", "2")]
        )
        assert [r.id for r in result] == ["V1_uatom", "V1_ukava"]

    def test_rounds_to_six_decimals(self) -> None:
        result = aggregate_rewards(
            [_reward("V1", "ATOM", "0.0000004"), _reward("V1", "ATOM", "0.0000002")]
        )
        assert result[0].amount == Decimal("0.000001")

    def test_empty(self) -> None:
        assert aggregate_rewards([]) == []
