"""Chain reducer protocol: raw node responses to canonical entities."""
from typing import Any, Mapping, Protocol, Sequence

from ..config import NetworkConfig
from ..models import (
    Balance,
    Block,
    Coin,
    Delegation,
    Holdings,
    Proposal,
    Reward,
    Tally,
    Transaction,
    Undelegation,
    Validator,
)


class ChainReducer(Protocol):
    """Full reducer capability set; one implementation per chain family.

    Every method is pure. Sources assemble the raw records (merging the
    several responses a record is built from) before handing them over.
    """

    network: NetworkConfig

    def reduce_coin(self, chain_coin: Mapping[str, Any]) -> Coin: ...

    def reduce_block(
        self, raw_block: Mapping[str, Any], transactions: Sequence[Transaction]
    ) -> Block: ...

    def reduce_validator(self, raw_validator: Mapping[str, Any]) -> Validator: ...

    def reduce_delegation(
        self, raw_delegation: Mapping[str, Any], validator: Validator | None
    ) -> Delegation: ...

    def reduce_undelegation(
        self, raw_undelegation: Mapping[str, Any], validator: Validator | None
    ) -> Undelegation: ...

    def reduce_transactions(
        self,
        raw_transactions: Sequence[Mapping[str, Any]],
        block: Mapping[str, Any] | None = None,
    ) -> list[Transaction]: ...

    def reduce_tally(
        self, raw_tally: Mapping[str, Any], total_issuance: Any
    ) -> Tally: ...

    def reduce_proposal(self, raw_proposal: Mapping[str, Any]) -> Proposal: ...

    def reduce_rewards(
        self,
        raw_rewards: Sequence[Mapping[str, Any]],
        validators: Mapping[str, Validator],
        address: str,
    ) -> list[Reward]: ...

    def reduce_balance(self, coin: Coin, holdings: Holdings) -> Balance: ...
