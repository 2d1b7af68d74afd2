"""Chain source protocol: the uniform read operations of one network."""
from decimal import Decimal
from typing import Mapping, Protocol

from ..models import (
    AccountInfo,
    Balance,
    Block,
    Delegation,
    GovernanceOverview,
    GovernanceParameters,
    Proposal,
    Reward,
    Transaction,
    Undelegation,
    Validator,
)


class ChainSource(Protocol):
    """Retrieval plus reduction for one chain family."""

    def check_address(self, address: str) -> None: ...

    async def get_block(self, height: int | None = None) -> Block: ...

    async def get_all_validators(
        self, height: int | None = None
    ) -> list[Validator]: ...

    async def get_self_stake(self, validator: Validator) -> Decimal: ...

    async def get_balances(
        self, address: str, currency: str, validators: Mapping[str, Validator]
    ) -> list[Balance]: ...

    async def get_delegations(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Delegation]: ...

    async def get_undelegations(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Undelegation]: ...

    async def get_rewards(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Reward]: ...

    async def get_transactions(self, address: str) -> list[Transaction]: ...

    async def get_all_proposals(
        self, validators: Mapping[str, Validator]
    ) -> list[Proposal]: ...

    async def get_proposal_by_id(
        self, proposal_id: str, validators: Mapping[str, Validator]
    ) -> Proposal: ...

    async def get_governance_parameters(self) -> GovernanceParameters: ...

    async def get_governance_overview(
        self, validators: Mapping[str, Validator]
    ) -> GovernanceOverview: ...

    async def get_delegator_vote(
        self, proposal_id: str, address: str
    ) -> str | None: ...

    async def get_account_info(self, address: str) -> AccountInfo: ...
