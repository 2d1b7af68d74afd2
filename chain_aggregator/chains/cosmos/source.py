"""Cosmos-SDK chain source: LCD REST retrieval composed with the Cosmos reducers."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Mapping

from ...errors import AbsentValid, Failed, Found, InvalidInputError
from ...governance import parse_links
from ...interfaces.fiat import FiatValuesAPI
from ...interfaces.store import NetworkStore
from ...models import (
    AccountInfo,
    Balance,
    Block,
    Coin,
    Delegation,
    DetailedVotes,
    GovernanceOverview,
    GovernanceParameters,
    Holdings,
    Proposal,
    Reward,
    Transaction,
    Undelegation,
    Validator,
)
from ...numbers import (
    ZERO,
    divide,
    fix_decimals_and_round_up,
    parse_chain_int,
    to_view_denom,
)
from ...retrieval import RestClient
from . import reducers
from .addresses import operator_to_delegator, pubkey_to_consensus_address
from .reducers import CosmosReducer, block_height

logger = logging.getLogger(__name__)

NO_DELEGATION_MARKER = "no delegation for this"
UNKNOWN_PROPOSAL_MARKER = "unknown proposal"
SIGNING_INFO_TTL_SECONDS = 60
TOP_VOTERS = 10

_VALIDATOR_STATUSES = ("unbonding", "bonded", "unbonded")


class CosmosSource:
    """Read operations for one Cosmos-SDK network."""

    def __init__(
        self,
        client: RestClient,
        fiat_values_api: FiatValuesAPI,
        store: NetworkStore,
    ) -> None:
        self.client = client
        self.network = client.network
        self.reducer = CosmosReducer(self.network)
        self.fiat_values_api = fiat_values_api
        self.store = store

    def check_address(self, address: str) -> None:
        prefix = self.network.address_prefix
        if prefix and not address.startswith(prefix):
            raise InvalidInputError(
                f"The address you entered doesn't belong to the "
                f"{self.network.title} network"
            )

    # ------------------------------------------------------------------
    # Blocks and transactions
    # ------------------------------------------------------------------

    async def get_block(self, height: int | None = None) -> Block:
        if height is not None:
            raw_block, transactions = await asyncio.gather(
                self.client.get_retry(f"blocks/{height}"),
                self._transactions_at_height(height),
            )
        else:
            raw_block = await self.client.get_retry("blocks/latest")
            transactions = await self._transactions_at_height(block_height(raw_block))
        return self.reducer.reduce_block(raw_block, transactions)

    async def _transactions_at_height(self, height: Any) -> list[Transaction]:
        txs = await self.client.load_paginated(f"txs?tx.height={height}")
        return self.reducer.reduce_transactions(txs)

    async def get_transactions(self, address: str) -> list[Transaction]:
        self.check_address(address)
        queries = (
            f"txs?sender={address}",
            f"txs?recipient={address}",
            f"txs?action=submit_proposal&proposer={address}",
            f"txs?action=deposit&depositor={address}",
            f"txs?action=vote&voter={address}",
            f"txs?action=delegate&delegator={address}",
            f"txs?action=begin_redelegate&delegator={address}",
            f"txs?action=begin_unbonding&delegator={address}",
            f"txs?action=withdraw_delegator_reward&delegator={address}",
            f"txs?action=withdraw_validator_rewards_all&source-validator={address}",
        )
        groups = await asyncio.gather(*(self.client.load_paginated(q) for q in queries))
        txs = [tx for group in groups for tx in group]
        transactions = self.reducer.reduce_transactions(txs)
        return reducers.format_transactions_reducer(transactions)

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    async def _signing_info(self, consensus_pubkey: str) -> dict[str, Any]:
        address = pubkey_to_consensus_address(
            consensus_pubkey, self.network.address_prefix
        )
        result = await self.client.query_optional(
            f"slashing/validators/{consensus_pubkey}/signing_info",
            absent_statuses=(404,),
            ttl=SIGNING_INFO_TTL_SECONDS,
        )
        if isinstance(result, Found):
            return {**result.value, "address": address}
        if isinstance(result, Failed):
            logger.warning("No signing info for %s: %s", address, result.error)
        return {"address": address, "missed_blocks_counter": "0", "start_height": "0"}

    async def get_all_validators(self, height: int | None = None) -> list[Validator]:
        block = height if height is not None else "latest"
        groups, annual_provision, validator_set, slashing_params = await asyncio.gather(
            asyncio.gather(
                *(
                    self.client.query(f"staking/validators?status={status}")
                    for status in _VALIDATOR_STATUSES
                )
            ),
            self.client.query("minting/annual-provisions"),
            self.client.query(f"validatorsets/{block}"),
            self.client.query("slashing/parameters"),
        )
        validators = [v for group in groups for v in group or []]

        consensus_validators = {
            v["address"]: v for v in validator_set.get("validators", [])
        }
        total_voting_power = sum(
            (
                parse_chain_int(v.get("voting_power"))
                for v in consensus_validators.values()
            ),
            ZERO,
        )

        signing_infos = await asyncio.gather(
            *(self._signing_info(v["consensus_pubkey"]) for v in validators)
        )

        reduced: list[Validator] = []
        for validator, signing_info in zip(validators, signing_infos):
            consensus = consensus_validators.get(signing_info["address"])
            voting_power = ZERO
            if consensus:
                voting_power = divide(consensus["voting_power"], total_voting_power)
            reduced.append(
                self.reducer.reduce_validator(
                    {
                        **validator,
                        "voting_power": voting_power,
                        "signing_info": signing_info,
                        "signed_blocks_window": slashing_params.get(
                            "signed_blocks_window"
                        ),
                        "annual_provision": annual_provision,
                    }
                )
            )
        return reduced

    async def get_self_stake(self, validator: Validator) -> Decimal:
        """Stake the operator account delegated to its own validator (0 when none)."""
        delegator_address = operator_to_delegator(
            validator.operator_address, self.network.address_prefix
        )
        path = (
            f"staking/delegators/{delegator_address}"
            f"/delegations/{validator.operator_address}"
        )
        result = await self.client.query_optional(
            path,
            absent_markers=(NO_DELEGATION_MARKER,),
        )
        if isinstance(result, AbsentValid):
            return ZERO
        if isinstance(result, Failed):
            raise result.error
        return self.reducer.reduce_delegation(result.value, validator).amount

    # ------------------------------------------------------------------
    # Account state
    # ------------------------------------------------------------------

    async def get_delegations(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Delegation]:
        self.check_address(address)
        delegations = (
            await self.client.query(f"staking/delegators/{address}/delegations") or []
        )
        return [
            self.reducer.reduce_delegation(
                d, validators.get(d.get("validator_address", ""))
            )
            for d in delegations
            if _delegation_balance(d) >= 1
        ]

    async def get_undelegations(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Undelegation]:
        self.check_address(address)
        undelegations = (
            await self.client.query(
                f"staking/delegators/{address}/unbonding_delegations"
            )
            or []
        )
        return [
            self.reducer.reduce_undelegation(u, validators.get(u["validator_address"]))
            for u in reducers.flatten_undelegations(undelegations)
        ]

    async def get_rewards(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Reward]:
        self.check_address(address)
        result = (
            await self.client.query(f"distribution/delegators/{address}/rewards") or {}
        )
        rewards = [r for r in result.get("rewards") or [] if r.get("reward")]
        return self.reducer.reduce_rewards(rewards, validators, address)

    async def get_balances(
        self, address: str, currency: str, validators: Mapping[str, Validator]
    ) -> list[Balance]:
        self.check_address(address)
        raw_balances, delegations, undelegations, rewards = await asyncio.gather(
            self.client.query(f"bank/balances/{address}"),
            self.get_delegations(address, validators),
            self.get_undelegations(address, validators),
            self.get_rewards(address, validators),
        )
        coins = [self.reducer.reduce_coin(c) for c in raw_balances or []]

        # reward-only denoms and an absent staking denom still get a row
        denoms = {c.denom for c in coins}
        for denom in [r.denom for r in rewards] + [self.network.staking_denom]:
            if denom not in denoms:
                coins.append(Coin(denom=denom, amount=ZERO))
                denoms.add(denom)

        holdings = Holdings(
            delegations=tuple(delegations), undelegations=tuple(undelegations)
        )
        balances = [self.reducer.reduce_balance(c, holdings) for c in coins]
        return await self._with_fiat_values(balances, currency)

    async def _with_fiat_values(
        self, balances: list[Balance], currency: str
    ) -> list[Balance]:
        totals, availables = await asyncio.gather(
            self.fiat_values_api.calculate_fiat_values(
                [Coin(b.denom, b.total) for b in balances], currency
            ),
            self.fiat_values_api.calculate_fiat_values(
                [Coin(b.denom, b.available) for b in balances], currency
            ),
        )
        return [
            replace(
                b,
                fiat_value=totals.get(b.denom),
                available_fiat_value=availables.get(b.denom),
            )
            for b in balances
        ]

    async def get_account_info(self, address: str) -> AccountInfo:
        self.check_address(address)
        account = await self.client.query(f"auth/accounts/{address}")
        return reducers.account_info_reducer(address, account or {})

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    async def _proposer(self, proposal_id: str) -> str | None:
        result = await self.client.query_optional(
            f"gov/proposals/{proposal_id}/proposer", absent_statuses=(404, 500)
        )
        if isinstance(result, Found):
            return (result.value or {}).get("proposer")
        return None

    async def _detailed_votes(self, proposal: Mapping[str, Any]) -> DetailedVotes:
        proposal_id = proposal["id"]
        votes, deposits, tally, tallying, deposit_params, links = await asyncio.gather(
            self.client.query(f"gov/proposals/{proposal_id}/votes"),
            self.client.query(f"gov/proposals/{proposal_id}/deposits"),
            self.client.query(f"gov/proposals/{proposal_id}/tally"),
            self.client.query("gov/parameters/tallying"),
            self.client.query("gov/parameters/deposit"),
            self.store.get_network_links(self.network.id),
        )
        return reducers.detailed_votes_reducer(
            self.network,
            proposal,
            votes,
            deposits,
            tally,
            tallying,
            deposit_params,
            links,
        )

    async def _reduce_proposal(
        self,
        proposal: Mapping[str, Any],
        total_bonded_tokens: Any,
        validators: Mapping[str, Validator],
    ) -> Proposal:
        proposal_id = proposal["id"]
        tally, proposer, detailed_votes = await asyncio.gather(
            self.client.query(f"gov/proposals/{proposal_id}/tally"),
            self._proposer(proposal_id),
            self._detailed_votes(proposal),
        )
        return self.reducer.reduce_proposal(
            {
                "proposal": proposal,
                "tally": tally,
                "proposer": proposer,
                "total_bonded_tokens": total_bonded_tokens,
                "detailed_votes": detailed_votes,
                "validators": validators,
            }
        )

    async def get_all_proposals(
        self, validators: Mapping[str, Validator]
    ) -> list[Proposal]:
        response, pool = await asyncio.gather(
            self.client.query("gov/proposals"),
            self.client.query("staking/pool"),
        )
        if not isinstance(response, list):
            return []
        bonded = pool.get("bonded_tokens")
        proposals = await asyncio.gather(
            *(self._reduce_proposal(p, bonded, validators) for p in response)
        )
        return sorted(proposals, key=lambda p: int(p.id), reverse=True)

    async def get_proposal_by_id(
        self, proposal_id: str, validators: Mapping[str, Validator]
    ) -> Proposal:
        result = await self.client.query_optional(
            f"gov/proposals/{proposal_id}",
            absent_markers=(UNKNOWN_PROPOSAL_MARKER,),
            absent_statuses=(400, 404),
        )
        if isinstance(result, Failed):
            raise result.error
        if isinstance(result, AbsentValid) or not result.value:
            raise InvalidInputError(
                f"There is no proposal in the network with ID '{proposal_id}'"
            )
        pool = await self.client.query("staking/pool")
        return await self._reduce_proposal(
            result.value, pool.get("bonded_tokens"), validators
        )

    async def get_governance_parameters(self) -> GovernanceParameters:
        deposit_params, tallying_params = await asyncio.gather(
            self.client.query("gov/parameters/deposit"),
            self.client.query("gov/parameters/tallying"),
        )
        return reducers.governance_parameter_reducer(
            self.network, deposit_params, tallying_params
        )

    async def get_governance_overview(
        self, validators: Mapping[str, Validator]
    ) -> GovernanceOverview:
        pool, community_pool, links = await asyncio.gather(
            self.client.query("staking/pool"),
            self.client.query("distribution/community_pool"),
            self.store.get_network_links(self.network.id),
        )
        lookup = self.network.staking_coin_lookup
        treasury = next(
            (
                c.get("amount")
                for c in community_pool or []
                if c.get("denom") == lookup.chain_denom
            ),
            0,
        )
        top_voters = sorted(
            validators.values(), key=lambda v: v.voting_power, reverse=True
        )
        return GovernanceOverview(
            total_staked_assets=fix_decimals_and_round_up(
                to_view_denom(lookup, pool.get("bonded_tokens")), 2
            ),
            total_voters=None,
            treasury_size=fix_decimals_and_round_up(to_view_denom(lookup, treasury), 2),
            top_voters=tuple(
                reducers.top_voter_reducer(v) for v in top_voters[:TOP_VOTERS]
            ),
            links=parse_links(links),
        )

    async def get_delegator_vote(self, proposal_id: str, address: str) -> str | None:
        self.check_address(address)
        votes = await self.client.query(f"gov/proposals/{proposal_id}/votes") or []
        for vote in votes:
            if vote.get("voter") == address:
                return vote.get("option")
        return None


def _delegation_balance(delegation: Mapping[str, Any]) -> Decimal:
    balance = delegation.get("balance", 0)
    if isinstance(balance, Mapping):
        balance = balance.get("amount")
    return parse_chain_int(balance)
