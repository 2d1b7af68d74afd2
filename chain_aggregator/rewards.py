"""Reward aggregation by (validator, denom)."""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from .models import Reward
from .numbers import fix_decimals

REWARD_PRECISION = 6


def aggregate_rewards(rewards: Iterable[Reward]) -> list[Reward]:
    """Sum rewards sharing a validator and denom.

    Output order follows the first appearance of each pair; metadata other
    than the amount comes from that first entry.
    """
    grouped: dict[tuple[str, str], Reward] = {}
    for reward in rewards:
        pair = (reward.validator_address, reward.denom)
        if pair in grouped:
            current = grouped[pair]
            grouped[pair] = replace(current, amount=current.amount + reward.amount)
        else:
            grouped[pair] = reward

    return [
        replace(
            reward,
            id=f"{reward.validator_address}_{reward.denom}",
            amount=fix_decimals(reward.amount, REWARD_PRECISION),
        )
        for reward in grouped.values()
    ]
