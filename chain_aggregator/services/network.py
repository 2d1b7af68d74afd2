"""Chain-agnostic facade: one service per configured network."""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from ..chains.cosmos import CosmosSource
from ..chains.polkadot import PolkadotSource
from ..config import AppConfig, NetworkConfig
from ..errors import InvalidInputError
from ..interfaces.fiat import FiatValuesAPI
from ..interfaces.source import ChainSource
from ..interfaces.store import NetworkStore
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
from ..retrieval import ResponseCache, RestClient

logger = logging.getLogger(__name__)

# Registry of chain source factories keyed by network type.
_SOURCE_FACTORIES: dict[str, Any] = {
    "cosmos": lambda client, fiat, store: CosmosSource(client, fiat, store),
    "polkadot": lambda client, fiat, store: PolkadotSource(client, fiat, store),
}


class NetworkService:
    """Uniform read operations for one network, whatever its chain family."""

    def __init__(
        self,
        network: NetworkConfig,
        config: AppConfig,
        fiat_values_api: FiatValuesAPI,
        store: NetworkStore,
    ) -> None:
        factory = _SOURCE_FACTORIES.get(network.network_type)
        if factory is None:
            raise ValueError(
                f"No chain source for network type '{network.network_type}'"
            )
        self.network = network
        self.cache = ResponseCache(config.retrieval.cache_flush_threshold)
        self.client = RestClient(network, config.retrieval, self.cache)
        self.source: ChainSource = factory(self.client, fiat_values_api, store)

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    async def _validators_by_address(self) -> dict[str, Validator]:
        validators = await self.source.get_all_validators()
        return {v.operator_address: v for v in validators}

    async def get_block(self, height: int | None = None) -> Block:
        return await self.source.get_block(height)

    async def get_all_validators(self, height: int | None = None) -> list[Validator]:
        return await self.source.get_all_validators(height)

    async def get_validator(self, operator_address: str) -> Validator:
        """One validator with its self-delegated stake filled in."""
        validators = await self._validators_by_address()
        validator = validators.get(operator_address)
        if validator is None:
            raise InvalidInputError(
                f"There is no validator with address '{operator_address}' "
                f"in the {self.network.title} network"
            )
        self_stake = await self.source.get_self_stake(validator)
        return replace(validator, self_stake=self_stake)

    # ------------------------------------------------------------------
    # Account state
    # ------------------------------------------------------------------

    async def get_balances(self, address: str, currency: str = "USD") -> list[Balance]:
        self.source.check_address(address)
        validators = await self._validators_by_address()
        return await self.source.get_balances(address, currency, validators)

    async def get_delegations(self, address: str) -> list[Delegation]:
        self.source.check_address(address)
        validators = await self._validators_by_address()
        return await self.source.get_delegations(address, validators)

    async def get_undelegations(self, address: str) -> list[Undelegation]:
        self.source.check_address(address)
        validators = await self._validators_by_address()
        return await self.source.get_undelegations(address, validators)

    async def get_rewards(self, address: str) -> list[Reward]:
        self.source.check_address(address)
        validators = await self._validators_by_address()
        return await self.source.get_rewards(address, validators)

    async def get_transactions(self, address: str) -> list[Transaction]:
        return await self.source.get_transactions(address)

    async def get_account_info(self, address: str) -> AccountInfo:
        return await self.source.get_account_info(address)

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    async def get_all_proposals(self) -> list[Proposal]:
        validators = await self._validators_by_address()
        return await self.source.get_all_proposals(validators)

    async def get_proposal(self, proposal_id: str) -> Proposal:
        validators = await self._validators_by_address()
        return await self.source.get_proposal_by_id(proposal_id, validators)

    async def get_governance_parameters(self) -> GovernanceParameters:
        return await self.source.get_governance_parameters()

    async def get_governance_overview(self) -> GovernanceOverview:
        validators = await self._validators_by_address()
        return await self.source.get_governance_overview(validators)

    async def get_delegator_vote(self, proposal_id: str, address: str) -> str | None:
        return await self.source.get_delegator_vote(proposal_id, address)


def build_services(
    config: AppConfig,
    fiat_values_api: FiatValuesAPI,
    store: NetworkStore,
) -> dict[str, NetworkService]:
    """One :class:`NetworkService` per configured network, keyed by network id."""
    services = {
        network_id: NetworkService(network, config, fiat_values_api, store)
        for network_id, network in config.networks.items()
    }
    logger.debug("Built services for %s", ", ".join(services))
    return services

