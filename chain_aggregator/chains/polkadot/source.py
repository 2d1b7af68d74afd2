"""Polkadot chain source over a Substrate API Sidecar REST endpoint."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from decimal import Decimal
from typing import Any, Mapping

from ...errors import Failed, Found, InvalidInputError
from ...governance import parse_links
from ...interfaces.fiat import FiatValuesAPI
from ...interfaces.store import NetworkStore
from ...models import (
    AccountInfo,
    Balance,
    Block,
    Coin,
    Delegation,
    DelegationState,
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
from .reducers import PolkadotReducer, account_id, call_name

logger = logging.getLogger(__name__)

NOT_A_STASH_MARKER = "is not a stash"
TOP_VOTERS = 10


class PolkadotSource:
    """Read operations for one Substrate network."""

    def __init__(
        self,
        client: RestClient,
        fiat_values_api: FiatValuesAPI,
        store: NetworkStore,
    ) -> None:
        self.client = client
        self.network = client.network
        self.reducer = PolkadotReducer(self.network)
        self.fiat_values_api = fiat_values_api
        self.store = store

    def check_address(self, address: str) -> None:
        prefix = self.network.address_prefix
        if prefix and not address.startswith(prefix):
            raise InvalidInputError(
                f"The address you entered doesn't belong to the "
                f"{self.network.title} network"
            )

    async def _storage(self, pallet: str, item: str, *keys: Any) -> Any:
        path = f"pallets/{pallet}/storage/{item}"
        if keys:
            path += "?" + "&".join(f"keys[]={key}" for key in keys)
        data = await self.client.query(path)
        return (data or {}).get("value")

    async def _const(self, pallet: str, item: str) -> Any:
        data = await self.client.query(f"pallets/{pallet}/consts/{item}")
        return (data or {}).get("value")

    async def _active_era(self) -> int:
        progress = await self.client.query("pallets/staking/progress")
        return int(progress.get("activeEra") or 0)

    # ------------------------------------------------------------------
    # Blocks and transactions
    # ------------------------------------------------------------------

    async def get_block(self, height: int | None = None) -> Block:
        raw_block = await self.client.get_retry(
            f"blocks/{height}" if height is not None else "blocks/head"
        )
        transactions = self.reducer.reduce_transactions(
            raw_block.get("extrinsics", []), raw_block
        )
        return self.reducer.reduce_block(raw_block, transactions)

    async def get_transactions(self, address: str) -> list[Transaction]:
        self.check_address(address)
        logger.debug("%s has no address history index", self.network.id)
        return []

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    async def get_identity(self, address: str) -> dict[str, str]:
        """Identity of ``address``, resolving sub-identities through ``superOf``."""
        registration, super_of = await asyncio.gather(
            self._storage("identity", "identityOf", address),
            self._storage("identity", "superOf", address),
        )
        identity = reducers.identity_reducer(registration)
        if super_of:
            parent_address, sub_name = super_of[0], super_of[1]
            parent = reducers.identity_reducer(
                await self._storage(
                    "identity", "identityOf", account_id(parent_address)
                )
            )
            identity = {
                **parent,
                **{key: value for key, value in identity.items() if value},
                "display": reducers.decode_identity_field(sub_name),
                "display_parent": parent.get("display", ""),
            }
        return identity

    async def _validator_record(
        self, address: str, status: str, era: int, total_stake: Decimal
    ) -> dict[str, Any]:
        prefs, exposure, identity = await asyncio.gather(
            self._storage("staking", "validators", address),
            self._storage("staking", "erasStakers", era, address),
            self.get_identity(address),
        )
        exposure = exposure or {}
        return {
            "account_id": address,
            "status": status,
            "identity": identity,
            "commission": (prefs or {}).get("commission", 0),
            "exposure": exposure,
            "voting_power": divide(parse_chain_int(exposure.get("total")), total_stake),
        }

    async def get_all_validators(self, height: int | None = None) -> list[Validator]:
        era = await self._active_era()
        listing, total_stake = await asyncio.gather(
            self.client.query("pallets/staking/validators"),
            self._storage("staking", "erasTotalStake", era),
        )
        total = parse_chain_int(total_stake)
        records = await asyncio.gather(
            *(
                self._validator_record(v["address"], v.get("status", ""), era, total)
                for v in listing.get("validators", [])
            )
        )
        return [self.reducer.reduce_validator(record) for record in records]

    async def get_self_stake(self, validator: Validator) -> Decimal:
        return validator.self_stake

    # ------------------------------------------------------------------
    # Account state
    # ------------------------------------------------------------------

    async def _staking_info(self, address: str) -> dict[str, Any] | None:
        """Staking ledger of a stash, ``None`` for accounts that never bonded."""
        result = await self.client.query_optional(
            f"accounts/{address}/staking-info", absent_markers=(NOT_A_STASH_MARKER,)
        )
        if isinstance(result, Failed):
            raise result.error
        if isinstance(result, Found):
            return result.value
        return None

    async def get_delegations(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Delegation]:
        self.check_address(address)
        era, nominations = await asyncio.gather(
            self._active_era(), self._storage("staking", "nominators", address)
        )
        targets = [account_id(t) for t in (nominations or {}).get("targets", [])]
        exposures = await asyncio.gather(
            *(self._storage("staking", "erasStakers", era, t) for t in targets)
        )
        delegations: list[Delegation] = []
        for target, exposure in zip(targets, exposures):
            entry = next(
                (
                    other
                    for other in (exposure or {}).get("others", [])
                    if account_id(other.get("who")) == address
                ),
                None,
            )
            # nominated but not backed by this nominator in the active era
            state = DelegationState.ACTIVE if entry else DelegationState.INACTIVE
            raw = {
                "who": address,
                "value": (entry or {}).get("value", 0),
                "validator_address": target,
            }
            delegations.append(
                reducers.delegation_reducer(
                    self.network, raw, validators.get(target), state
                )
            )
        return delegations

    async def get_undelegations(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Undelegation]:
        self.check_address(address)
        staking_info, era = await asyncio.gather(
            self._staking_info(address), self._active_era()
        )
        if staking_info is None:
            return []
        unlocking = staking_info.get("staking", {}).get("unlocking", [])
        return [
            self.reducer.reduce_undelegation(
                {
                    "address": address,
                    "value": chunk.get("value"),
                    "era": chunk.get("era"),
                    "active_era": era,
                },
                None,
            )
            for chunk in unlocking
        ]

    async def get_rewards(
        self, address: str, validators: Mapping[str, Validator]
    ) -> list[Reward]:
        self.check_address(address)
        rewards = await self.store.get_rewards(address, self.network.id)
        return self.reducer.reduce_rewards(rewards, validators, address)

    async def get_balances(
        self, address: str, currency: str, validators: Mapping[str, Validator]
    ) -> list[Balance]:
        self.check_address(address)
        balance_info, staking_info = await asyncio.gather(
            self.client.query(f"accounts/{address}/balance-info"),
            self._staking_info(address),
        )
        lookup = self.network.staking_coin_lookup
        total_raw = parse_chain_int(balance_info.get("free")) + parse_chain_int(
            balance_info.get("reserved")
        )
        staked_raw = (staking_info or {}).get("staking", {}).get("active", 0)
        holdings = Holdings(
            total=fix_decimals_and_round_up(to_view_denom(lookup, total_raw), 6),
            staked=fix_decimals_and_round_up(to_view_denom(lookup, staked_raw), 6),
        )
        available = reducers.coin_reducer(
            self.network, reducers.available_balance(balance_info)
        )
        balance = self.reducer.reduce_balance(available, holdings)

        totals, availables = await asyncio.gather(
            self.fiat_values_api.calculate_fiat_values(
                [Coin(balance.denom, balance.total)], currency
            ),
            self.fiat_values_api.calculate_fiat_values(
                [Coin(balance.denom, balance.available)], currency
            ),
        )
        return [
            replace(
                balance,
                fiat_value=totals.get(balance.denom),
                available_fiat_value=availables.get(balance.denom),
            )
        ]

    async def get_account_info(self, address: str) -> AccountInfo:
        self.check_address(address)
        balance_info = await self.client.query(f"accounts/{address}/balance-info")
        return AccountInfo(address=address, sequence=str(balance_info.get("nonce", "")))

    # ------------------------------------------------------------------
    # Governance
    # ------------------------------------------------------------------

    async def _election_members(self) -> dict[str, Any]:
        """Elected council candidates as ``{address: backing stake}``."""
        members = await self._storage("electionsPhragmen", "members") or []
        roster: dict[str, Any] = {}
        for member in members:
            if isinstance(member, Mapping):
                roster[account_id(member.get("who"))] = member.get("stake", 0)
            else:
                roster[account_id(member[0])] = member[1]
        return roster

    async def _democracy_proposal(
        self, index: Any, proposer: str, block_height: int, launch_period: Any
    ) -> dict[str, Any]:
        deposit, identity = await asyncio.gather(
            self._storage("democracy", "depositOf", index),
            self.get_identity(proposer),
        )
        seconds, balance = _seconds_and_balance(deposit)
        return {
            "kind": "democracy",
            "index": index,
            "proposer": proposer,
            "proposer_identity": identity,
            "seconds": seconds,
            "balance": balance,
            "block_height": block_height,
            "launch_period": launch_period,
        }

    async def _democracy_proposals(
        self, block_height: int, launch_period: Any
    ) -> list[dict[str, Any]]:
        public_props = await self._storage("democracy", "publicProps") or []
        return list(
            await asyncio.gather(
                *(
                    self._democracy_proposal(
                        index, account_id(proposer), block_height, launch_period
                    )
                    for index, _proposal_hash, proposer in public_props
                )
            )
        )

    async def _referenda(
        self, block_height: int, total_issuance: Any, voting_period: Any
    ) -> list[dict[str, Any]]:
        lowest, count = await asyncio.gather(
            self._storage("democracy", "lowestUnbaked"),
            self._storage("democracy", "referendumCount"),
        )
        indices = range(int(lowest or 0), int(count or 0))
        infos = await asyncio.gather(
            *(self._storage("democracy", "referendumInfoOf", i) for i in indices)
        )
        return [
            {
                "kind": "referendum",
                "index": index,
                "status": info["ongoing"],
                "total_issuance": total_issuance,
                "block_height": block_height,
                "voting_period": voting_period,
            }
            for index, info in zip(indices, infos)
            if info and "ongoing" in info
        ]

    async def _council_motions(self) -> dict[str, dict[str, Any]]:
        """Council votes keyed by the treasury proposal index they act on."""
        hashes = await self._storage("council", "proposals") or []
        votes, calls = await asyncio.gather(
            asyncio.gather(*(self._storage("council", "voting", h) for h in hashes)),
            asyncio.gather(
                *(self._storage("council", "proposalOf", h) for h in hashes)
            ),
        )
        motions: dict[str, dict[str, Any]] = {}
        for vote, call in zip(votes, calls):
            if not vote or not call or call_name(call)[0] != "treasury":
                continue
            proposal_id = (call.get("args") or {}).get("proposal_id")
            if proposal_id is not None:
                motions[str(proposal_id)] = vote
        return motions

    async def _treasury_proposals(
        self, block_height: int, election_members: Mapping[str, Any]
    ) -> list[dict[str, Any]]:
        count, motions = await asyncio.gather(
            self._storage("treasury", "proposalCount"), self._council_motions()
        )
        indices = range(int(count or 0))
        proposals = await asyncio.gather(
            *(self._storage("treasury", "proposals", i) for i in indices)
        )
        return [
            {
                "kind": "treasury",
                "index": index,
                "proposal": proposal,
                "votes": motions.get(str(index)),
                "election_members": election_members,
                "block_height": block_height,
            }
            for index, proposal in zip(indices, proposals)
            if proposal
        ]

    async def get_all_proposals(
        self, validators: Mapping[str, Validator]
    ) -> list[Proposal]:
        (
            head,
            total_issuance,
            election_members,
            voting_period,
            launch_period,
        ) = await asyncio.gather(
            self.client.get_retry("blocks/head"),
            self._storage("balances", "totalIssuance"),
            self._election_members(),
            self._const("democracy", "VotingPeriod"),
            self._const("democracy", "LaunchPeriod"),
        )
        block_height = int(head.get("number", 0))
        groups = await asyncio.gather(
            self._democracy_proposals(block_height, launch_period),
            self._referenda(block_height, total_issuance, voting_period),
            self._treasury_proposals(block_height, election_members),
        )
        return [
            self.reducer.reduce_proposal(record) for group in groups for record in group
        ]

    async def get_proposal_by_id(
        self, proposal_id: str, validators: Mapping[str, Validator]
    ) -> Proposal:
        """Match either the prefixed id (``referendum-3``) or the bare index."""
        for proposal in await self.get_all_proposals(validators):
            if proposal_id in (proposal.id, proposal.proposal_id):
                return proposal
        raise InvalidInputError(
            f"There is no proposal in the network with ID '{proposal_id}'"
        )

    async def get_governance_parameters(self) -> GovernanceParameters:
        minimum = await self._const("democracy", "MinimumDeposit")
        deposit = reducers.coin_reducer(self.network, minimum)
        return GovernanceParameters(
            deposit_denom=self.network.staking_denom,
            deposit_threshold=deposit.amount,
        )

    async def _treasury_balance(self) -> Decimal:
        if not self.network.treasury_address:
            return ZERO
        info = await self.client.query(
            f"accounts/{self.network.treasury_address}/balance-info"
        )
        return parse_chain_int(info.get("free"))

    async def get_governance_overview(
        self, validators: Mapping[str, Validator]
    ) -> GovernanceOverview:
        era = await self._active_era()
        total_stake, election_members, council, links, treasury = await asyncio.gather(
            self._storage("staking", "erasTotalStake", era),
            self._election_members(),
            self._storage("council", "members"),
            self.store.get_network_links(self.network.id),
            self._treasury_balance(),
        )
        lookup = self.network.staking_coin_lookup
        ranked = sorted(
            election_members.items(),
            key=lambda member: parse_chain_int(member[1]),
            reverse=True,
        )
        return GovernanceOverview(
            total_staked_assets=fix_decimals_and_round_up(
                to_view_denom(lookup, total_stake), 2
            ),
            total_voters=len(council or []),
            treasury_size=fix_decimals_and_round_up(to_view_denom(lookup, treasury), 2),
            top_voters=tuple(
                reducers.top_voter_reducer(self.network, address, stake, validators)
                for address, stake in ranked[:TOP_VOTERS]
            ),
            links=parse_links(links),
        )

    async def get_delegator_vote(self, proposal_id: str, address: str) -> str | None:
        self.check_address(address)
        voting = await self._storage("democracy", "votingOf", address) or {}
        reference = proposal_id.removeprefix("referendum-")
        for index, vote in (voting.get("direct") or {}).get("votes", []):
            if str(index) == reference:
                return _vote_option(vote)
        return None


def _seconds_and_balance(deposit: Any) -> tuple[list[Any], Any]:
    """``depositOf`` holds ``[seconds, balance]``; older runtimes swap the two."""
    if not deposit:
        return [], 0
    first, second = deposit[0], deposit[1]
    if isinstance(first, list):
        return first, second
    return list(second or []), first


def _vote_option(vote: Any) -> str | None:
    """Standard votes encode aye in the high bit of the vote byte."""
    standard = vote.get("standard", vote) if isinstance(vote, Mapping) else vote
    raw = standard.get("vote") if isinstance(standard, Mapping) else standard
    if isinstance(raw, Mapping):
        return "Yes" if raw.get("aye") else "No"
    if raw is None:
        return None
    return "Yes" if int(parse_chain_int(raw)) & 0x80 else "No"
