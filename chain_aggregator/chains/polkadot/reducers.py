"""Pure reducers for Substrate API Sidecar responses. No I/O.

Covers the staking aggregation that folds ``staking.bond`` and
``staking.nominate`` calls of one extrinsic into a single stake record, and the
two governance tally flavours (token-weighted referenda and member-weighted
council motions).
"""
from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from ...config import NetworkConfig
from ...governance import membership_weighted_tally, token_weighted_tally
from ...identity import resolve_display_name
from ...models import (
    EMPTY_TALLY,
    Balance,
    BalanceType,
    Block,
    Coin,
    Delegation,
    DelegationState,
    Deposit,
    DetailedVotes,
    Holdings,
    NetworkAccount,
    Proposal,
    ProposalType,
    Reward,
    SendDetails,
    StakeDetails,
    Tally,
    TimelineEvent,
    TopVoter,
    Transaction,
    TransactionDetails,
    TransactionType,
    Undelegation,
    UnknownDetails,
    Validator,
    ValidatorStatus,
    Vote,
)
from ...numbers import (
    ZERO,
    divide,
    fix_decimals,
    fix_decimals_and_round_up,
    parse_chain_int,
    to_view_denom,
)
from ...rewards import aggregate_rewards
from ...timestamps import blocks_from_now, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

COMMISSION_CONVERSION_FACTOR = Decimal("1e-9")
VIEW_PRECISION = 6

_MESSAGE_TYPES: dict[str, TransactionType] = {
    "balances.transfer": TransactionType.SEND,
    "balances.transferKeepAlive": TransactionType.SEND,
    "lunie.staking": TransactionType.STAKE,
}


def account_id(value: Any) -> str:
    """Sidecar renders accounts either bare or as ``{"id": ...}``."""
    if isinstance(value, Mapping):
        return str(value.get("id") or value.get("Id") or "")
    return str(value or "")


def call_name(call: Mapping[str, Any]) -> tuple[str, str]:
    """``(section, method)`` of a call in any of the sidecar renderings."""
    method = call.get("method", {})
    if isinstance(method, Mapping):
        return method.get("pallet", ""), method.get("method", "")
    return call.get("section", ""), method


# ---------------------------------------------------------------------------
# Coins and identities
# ---------------------------------------------------------------------------


def coin_reducer(
    network: NetworkConfig, amount: Any, precision: int = VIEW_PRECISION
) -> Coin:
    lookup = network.staking_coin_lookup
    return Coin(
        denom=lookup.view_denom,
        amount=fix_decimals_and_round_up(to_view_denom(lookup, amount), precision),
    )


def decode_identity_field(field: Any) -> str:
    """``{"raw": "0x4a6f"}`` → ``"Jo"``; ``{"none": null}`` → ``""``."""
    if isinstance(field, str):
        return field
    if not isinstance(field, Mapping):
        return ""
    raw = field.get("raw") or field.get("Raw")
    if not raw:
        return ""
    if isinstance(raw, str) and raw.startswith("0x"):
        try:
            return bytes.fromhex(raw[2:]).decode("utf-8")
        except ValueError:
            return raw
    return str(raw)


def identity_reducer(registration: Any) -> dict[str, str]:
    """Flatten an ``identityOf`` registration to plain strings."""
    if isinstance(registration, Sequence) and not isinstance(registration, str):
        registration = registration[0] if registration else None
    if not isinstance(registration, Mapping):
        return {}
    info = registration.get("info", {})
    return {
        "display": decode_identity_field(info.get("display")),
        "web": decode_identity_field(info.get("web")),
        "twitter": decode_identity_field(info.get("twitter")),
        "legal": decode_identity_field(info.get("legal")),
    }


# ---------------------------------------------------------------------------
# Blocks and transactions
# ---------------------------------------------------------------------------


def get_message_type(section: str, method: str) -> TransactionType:
    return _MESSAGE_TYPES.get(f"{section}.{method}", TransactionType.UNKNOWN)


def aggregate_staking(messages: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Append one synthetic ``lunie.staking`` record for bond + nominate pairs.

    Every input message is kept, in order, as ``{section, method, args}``. When
    both a bond (``bond`` or ``bondExtra``) and a ``nominate`` appear, a record
    with the summed bond amount and the nominated validators is appended.
    Several bond/nominate pairs in one extrinsic are folded into that one
    record.
    """
    amount = ZERO
    validators: list[str] = []
    has_bond = False
    has_nominate = False
    reduced: list[dict[str, Any]] = []

    for message in messages:
        section, method = call_name(message)
        args = message.get("args") or {}
        if section == "staking" and method == "bond":
            amount += parse_chain_int(args.get("value"))
            has_bond = True
        elif section == "staking" and method == "bondExtra":
            amount += parse_chain_int(
                args.get("maxAdditional", args.get("max_additional"))
            )
            has_bond = True
        elif section == "staking" and method == "nominate":
            validators.extend(account_id(t) for t in args.get("targets", []))
            has_nominate = True
        reduced.append({"section": section, "method": method, "args": args})

    if has_bond and has_nominate:
        reduced.append(
            {
                "section": "lunie",
                "method": "staking",
                "validators": validators,
                "amount": amount,
            }
        )
    return reduced


def block_events(extrinsics: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Rebuild block-level events, tagging each with the extrinsic it applied to."""
    events: list[dict[str, Any]] = []
    for index, extrinsic in enumerate(extrinsics):
        for event in extrinsic.get("events", []):
            section, method = call_name(event)
            events.append(
                {
                    "phase": {"applyExtrinsic": index},
                    "event": {"section": section, "method": method},
                }
            )
    return events


def get_extrinsic_success(
    extrinsic_index: int, events: Iterable[Mapping[str, Any]], is_batch: bool
) -> bool:
    """A batch succeeds on ``utility.BatchCompleted``, anything else on
    ``system.ExtrinsicSuccess``.
    """
    expected = (
        ("utility", "BatchCompleted") if is_batch else ("system", "ExtrinsicSuccess")
    )
    for event in events:
        phase = event.get("phase", {})
        if int(phase.get("applyExtrinsic", -1)) != extrinsic_index:
            continue
        body = event.get("event", {})
        if (body.get("section"), body.get("method")) == expected:
            return True
    return False


def block_timestamp(extrinsics: Iterable[Mapping[str, Any]]) -> datetime | None:
    """Time set by the ``timestamp.set`` inherent."""
    for extrinsic in extrinsics:
        if call_name(extrinsic) == ("timestamp", "set"):
            return parse_timestamp(int((extrinsic.get("args") or {}).get("now", 0)))
    return None


def signer_of(extrinsic: Mapping[str, Any]) -> str:
    signature = extrinsic.get("signature")
    if not isinstance(signature, Mapping):
        return ""
    return account_id(signature.get("signer"))


def transaction_details_reducer(
    network: NetworkConfig,
    message_type: TransactionType,
    signer: str,
    message: Mapping[str, Any],
) -> TransactionDetails:
    if message_type == TransactionType.SEND:
        args = message.get("args") or {}
        return SendDetails(
            from_addresses=(signer,),
            to_addresses=(account_id(args.get("dest")),),
            amount=coin_reducer(network, args.get("value")),
        )
    if message_type == TransactionType.STAKE:
        return StakeDetails(
            to=tuple(message["validators"]),
            amount=coin_reducer(network, message["amount"]),
        )
    return UnknownDetails()


def involved_addresses(
    message_type: TransactionType, signer: str, message: Mapping[str, Any]
) -> tuple[str, ...]:
    if message_type == TransactionType.SEND:
        candidates = [signer, account_id((message.get("args") or {}).get("dest"))]
    elif message_type == TransactionType.STAKE:
        candidates = [signer, *message["validators"]]
    else:
        candidates = [signer]
    return tuple(dict.fromkeys(a for a in candidates if a))


def transaction_reducer(
    network: NetworkConfig,
    extrinsic: Mapping[str, Any],
    index: int,
    events: Sequence[Mapping[str, Any]],
    height: int,
    timestamp: datetime | None,
) -> list[Transaction]:
    """One signed extrinsic → one record per (aggregated) call."""
    tx_hash = extrinsic.get("hash", "")
    signer = signer_of(extrinsic)
    is_batch = call_name(extrinsic) in (("utility", "batch"), ("utility", "batchAll"))
    calls = (extrinsic.get("args") or {}).get("calls", []) if is_batch else [extrinsic]
    messages = aggregate_staking(calls)
    success = get_extrinsic_success(index, events, is_batch)
    fee = (extrinsic.get("info") or {}).get("partialFee", 0)

    records: list[Transaction] = []
    for message_index, message in enumerate(messages):
        message_type = get_message_type(message["section"], message["method"])
        records.append(
            Transaction(
                id=tx_hash,
                key=f"{tx_hash}_{message_index}",
                type=message_type,
                hash=tx_hash,
                height=height,
                timestamp=timestamp,
                details=transaction_details_reducer(
                    network, message_type, signer, message
                ),
                success=success,
                fees=(coin_reducer(network, fee),),
                involved_addresses=involved_addresses(message_type, signer, message),
            )
        )
    return records


def transactions_reducer(
    network: NetworkConfig,
    extrinsics: Sequence[Mapping[str, Any]],
    block: Mapping[str, Any] | None = None,
) -> list[Transaction]:
    """Signed extrinsics of a block; inherents are skipped but keep their index."""
    block = block or {}
    height = int(block.get("number", 0))
    timestamp = block_timestamp(extrinsics)
    events = block_events(extrinsics)
    records: list[Transaction] = []
    for index, extrinsic in enumerate(extrinsics):
        if not signer_of(extrinsic):
            continue
        records.extend(
            transaction_reducer(network, extrinsic, index, events, height, timestamp)
        )
    return records


def block_reducer(
    network: NetworkConfig,
    raw_block: Mapping[str, Any],
    transactions: Sequence[Transaction],
) -> Block:
    block_hash = raw_block.get("hash", "")
    return Block(
        id=block_hash,
        network_id=network.id,
        chain_id=network.chain_id,
        height=int(raw_block.get("number", 0)),
        hash=block_hash,
        time=block_timestamp(raw_block.get("extrinsics", [])),
        proposer_address=account_id(raw_block.get("authorId")),
        transactions=tuple(transactions),
    )


# ---------------------------------------------------------------------------
# Validators and staking
# ---------------------------------------------------------------------------


def validator_reducer(
    network: NetworkConfig, validator: Mapping[str, Any]
) -> Validator:
    """Reduce a record with ``account_id``, ``identity``, ``voting_power``,
    ``exposure``, ``commission`` (perbill) and ``status``.
    """
    address = validator["account_id"]
    identity = validator.get("identity") or {}
    exposure = validator.get("exposure") or {}
    status_detailed = str(validator.get("status") or "inactive").lower()
    status = ValidatorStatus.INACTIVE
    if status_detailed == "active":
        status = ValidatorStatus.ACTIVE
    return Validator(
        id=address,
        network_id=network.id,
        chain_id=network.chain_id,
        operator_address=address,
        name=resolve_display_name(address, identity),
        status=status,
        status_detailed=status_detailed,
        voting_power=fix_decimals(validator.get("voting_power", 0), VIEW_PRECISION),
        commission=fix_decimals(
            parse_chain_int(validator.get("commission")) * COMMISSION_CONVERSION_FACTOR,
            VIEW_PRECISION,
        ),
        tokens=coin_reducer(network, exposure.get("total")).amount,
        self_stake=fix_decimals(
            to_view_denom(network.staking_coin_lookup, exposure.get("own")),
            VIEW_PRECISION,
        ),
        website=identity.get("web", ""),
        identity=identity.get("twitter", ""),
        details=identity.get("legal", ""),
        nominations=len(exposure.get("others", [])),
    )


def delegation_reducer(
    network: NetworkConfig,
    delegation: Mapping[str, Any],
    validator: Validator | None,
    state: DelegationState = DelegationState.ACTIVE,
) -> Delegation:
    """``delegation`` is a nominator entry ``{who, value}`` of a validator exposure."""
    validator_address = delegation.get("validator_address") or (
        validator.operator_address if validator else ""
    )
    return Delegation(
        id=validator_address,
        validator_address=validator_address,
        delegator_address=account_id(delegation.get("who")),
        amount=fix_decimals(
            to_view_denom(network.staking_coin_lookup, delegation.get("value")),
            VIEW_PRECISION,
        ),
        state=state,
        validator=validator,
    )


def undelegation_reducer(
    network: NetworkConfig,
    undelegation: Mapping[str, Any],
    validator: Validator | None = None,
) -> Undelegation:
    """``undelegation`` is an ``unlocking`` chunk with ``address``, ``value``,
    ``era`` and ``active_era``.
    """
    address = undelegation.get("address", "")
    value = undelegation.get("value")
    eras_left = max(
        int(undelegation.get("era", 0)) - int(undelegation.get("active_era", 0)), 0
    )
    return Undelegation(
        id=f"{address}_{value}",
        validator_address="",
        delegator_address=address,
        amount=to_view_denom(network.staking_coin_lookup, value),
        end_time=blocks_from_now(
            eras_left * network.blocks_per_era,
            network.block_time_seconds,
        ),
        validator=validator,
    )


def balance_reducer(network: NetworkConfig, coin: Coin, holdings: Holdings) -> Balance:
    """Single staking-denom balance; an empty account reports zeros."""
    total = holdings.total if holdings.total is not None else coin.amount
    if total == 0:
        return Balance(
            id=coin.denom,
            denom=coin.denom,
            type=BalanceType.STAKE,
            total=ZERO,
            available=ZERO,
            staked=ZERO,
            gas_price=network.gas_price(coin.denom),
        )
    available = min(coin.amount, total)
    return Balance(
        id=coin.denom,
        denom=coin.denom,
        type=BalanceType.STAKE,
        total=total,
        available=available,
        staked=min(holdings.staked or ZERO, total - available),
        gas_price=network.gas_price(coin.denom),
    )


def available_balance(balance_info: Mapping[str, Any]) -> Decimal:
    """Free balance minus the largest frozen amount, never negative."""
    free = parse_chain_int(balance_info.get("free"))
    frozen = max(
        parse_chain_int(balance_info.get("miscFrozen")),
        parse_chain_int(balance_info.get("feeFrozen")),
        parse_chain_int(balance_info.get("frozen")),
    )
    return max(free - frozen, ZERO)


def reward_reducer(
    network: NetworkConfig,
    rewards: Iterable[Mapping[str, Any]],
    validators: Mapping[str, Validator],
    address: str,
) -> list[Reward]:
    """Indexed rewards ``{validator, denom, amount, height}`` already in view units."""
    parsed = [
        Reward(
            id=reward["validator"],
            validator_address=reward["validator"],
            denom=reward.get("denom") or network.staking_denom,
            amount=parse_chain_int(reward.get("amount")),
            height=str(reward.get("height", "")),
            address=address,
            validator=validators.get(reward["validator"]),
        )
        for reward in rewards
    ]
    return aggregate_rewards(parsed)


# ---------------------------------------------------------------------------
# Governance
# ---------------------------------------------------------------------------


def tally_reducer(
    network: NetworkConfig, tally: Mapping[str, Any], total_issuance: Any
) -> Tally:
    """Referendum tally. ``ayes``/``nays`` already carry conviction."""
    return token_weighted_tally(
        network.staking_coin_lookup,
        yes=tally.get("ayes"),
        no=tally.get("nays"),
        turnout=tally.get("turnout"),
        total_issuance=total_issuance,
    )


def council_tally_reducer(
    votes: Mapping[str, Any], election_members: Mapping[str, Any]
) -> Tally:
    ayes = [account_id(a) for a in votes.get("ayes", [])]
    nays = [account_id(n) for n in votes.get("nays", [])]
    return membership_weighted_tally(ayes, nays, ayes + nays, election_members)


def get_status_end_time(
    block_height: int,
    end_block: Any,
    block_time_seconds: int = 6,
    now: datetime | None = None,
) -> datetime:
    return blocks_from_now(
        int(parse_chain_int(end_block)) - block_height, block_time_seconds, now
    )


def network_account_reducer(
    address: str, identity: Mapping[str, Any] | None = None
) -> NetworkAccount:
    identity = identity or {}
    return NetworkAccount(
        name=identity.get("display", ""),
        address=address,
        picture=identity.get("twitter", ""),
    )


def deposit_reducer(network: NetworkConfig, balance: Any, depositer: str) -> Deposit:
    return Deposit(
        amount=(coin_reducer(network, balance),),
        depositer=depositer,
    )


def timeline_reducer(
    network: NetworkConfig,
    block_height: int,
    events: Iterable[tuple[str, Any]],
    now: datetime | None = None,
) -> tuple[TimelineEvent, ...]:
    """Estimated wall-clock timeline from ``(title, block)`` pairs.

    Blocks behind ``block_height`` land in the past; ``None`` blocks are skipped.
    """
    return tuple(
        TimelineEvent(
            title,
            get_status_end_time(block_height, block, network.block_time_seconds, now),
        )
        for title, block in events
        if block is not None
    )


def detailed_votes_reducer(
    deposits: Sequence[Deposit] = (),
    votes: Sequence[Vote] = (),
    yes: Any = 0,
    no: Any = 0,
    timeline: Sequence[TimelineEvent] = (),
) -> DetailedVotes:
    yes, no = parse_chain_int(yes), parse_chain_int(no)
    deposits_sum = sum((d.amount[0].amount for d in deposits if d.amount), ZERO)
    return DetailedVotes(
        deposits=tuple(deposits),
        deposits_sum=fix_decimals(deposits_sum, VIEW_PRECISION),
        votes=tuple(votes),
        votes_sum=len(votes),
        voting_percentage_yes=fix_decimals(divide(yes * 100, yes + no), 2),
        voting_percentage_no=fix_decimals(divide(no * 100, yes + no), 2),
        timeline=tuple(timeline),
    )


def _block_offset(block: Any, offset: Any) -> Decimal | None:
    if block is None or offset is None:
        return None
    return parse_chain_int(block) + parse_chain_int(offset)


def _next_launch_block(block_height: int, launch_period: Any) -> int | None:
    """Public proposals are tabled as referenda every ``launch_period`` blocks."""
    if not launch_period:
        return None
    period = int(parse_chain_int(launch_period))
    return (block_height // period + 1) * period


def democracy_proposal_reducer(
    network: NetworkConfig, record: Mapping[str, Any]
) -> Proposal:
    """Public proposal still gathering seconds (the deposit-period analogue).

    Every second locks the proposal's deposit again, so each seconder is
    listed as a depositer.
    """
    index = str(record["index"])
    seconds = record.get("seconds", [])
    block_height = record.get("block_height", 0)
    next_launch = _next_launch_block(block_height, record.get("launch_period"))
    return Proposal(
        id=f"democracy-{index}",
        proposal_id=index,
        network_id=network.id,
        type=ProposalType.PARAMETER_CHANGE,
        title=f"Preliminary Proposal #{index}",
        description=record.get("description", ""),
        status="DepositPeriod",
        tally=Tally(
            yes=Decimal(len(seconds)),
            no=ZERO,
            abstain=ZERO,
            veto=ZERO,
            total=Decimal(len(seconds)),
            total_voted_percentage=EMPTY_TALLY.total_voted_percentage,
        ),
        deposit=to_view_denom(network.staking_coin_lookup, record.get("balance")),
        proposer=network_account_reducer(
            record.get("proposer", ""), record.get("proposer_identity")
        ),
        detailed_votes=detailed_votes_reducer(
            deposits=[
                deposit_reducer(network, record.get("balance"), account_id(s))
                for s in seconds
            ],
            timeline=timeline_reducer(
                network,
                block_height,
                [("Next referendum launch", next_launch)],
            ),
        ),
    )


def democracy_referendum_reducer(
    network: NetworkConfig, record: Mapping[str, Any]
) -> Proposal:
    """Ongoing referendum. Started ``voting_period`` blocks before its end."""
    index = str(record["index"])
    status = record["status"]
    tally = status.get("tally", {})
    block_height = record.get("block_height", 0)
    now = utc_now()
    end = status.get("end")
    voting_period = record.get("voting_period")
    start = (
        parse_chain_int(end) - parse_chain_int(voting_period)
        if end is not None and voting_period is not None
        else None
    )
    timeline = timeline_reducer(
        network,
        block_height,
        [
            ("Referendum started", start),
            ("Proposal voting period ends", end),
            ("Proposal enacted", _block_offset(end, status.get("delay"))),
        ],
        now,
    )
    created = (
        get_status_end_time(block_height, start, network.block_time_seconds, now)
        if start is not None
        else None
    )
    return Proposal(
        id=f"referendum-{index}",
        proposal_id=index,
        network_id=network.id,
        type=ProposalType.PARAMETER_CHANGE,
        title=f"Proposal #{index}",
        description=record.get("description", ""),
        status="VotingPeriod",
        tally=tally_reducer(network, tally, record.get("total_issuance")),
        deposit=to_view_denom(network.staking_coin_lookup, tally.get("turnout")),
        creation_time=created,
        status_begin_time=created,
        status_end_time=(
            get_status_end_time(block_height, end, network.block_time_seconds, now)
            if end is not None
            else None
        ),
        detailed_votes=detailed_votes_reducer(
            yes=tally.get("ayes", 0),
            no=tally.get("nays", 0),
            timeline=timeline,
        ),
    )


def council_votes_reducer(index: str, votes: Mapping[str, Any]) -> list[Vote]:
    return [
        Vote(id=f"{index}_{voter}", voter=voter, option=option)
        for option, key in (("Yes", "ayes"), ("No", "nays"))
        for voter in (account_id(v) for v in votes.get(key, []))
    ]


def treasury_proposal_reducer(
    network: NetworkConfig, record: Mapping[str, Any]
) -> Proposal:
    """Treasury spend; tallied by the council motion approving it, when one exists."""
    index = str(record["index"])
    proposal = record.get("proposal", {})
    votes = record.get("votes")
    block_height = record.get("block_height", 0)
    now = utc_now()
    proposer = account_id(proposal.get("proposer"))
    council_votes = council_votes_reducer(index, votes) if votes else []
    return Proposal(
        id=f"treasury-{index}",
        proposal_id=index,
        network_id=network.id,
        type=ProposalType.TREASURY,
        title=f"Treasury Proposal #{index}",
        description=record.get("description", ""),
        status="VotingPeriod",
        tally=(
            council_tally_reducer(votes, record.get("election_members", {}))
            if votes
            else EMPTY_TALLY
        ),
        deposit=to_view_denom(network.staking_coin_lookup, proposal.get("bond")),
        status_end_time=(
            get_status_end_time(
                block_height,
                votes.get("end"),
                network.block_time_seconds,
                now,
            )
            if votes
            else None
        ),
        proposer=network_account_reducer(proposer),
        beneficiary=network_account_reducer(account_id(proposal.get("beneficiary"))),
        detailed_votes=detailed_votes_reducer(
            deposits=(
                [deposit_reducer(network, proposal["bond"], proposer)]
                if proposal.get("bond")
                else []
            ),
            votes=council_votes,
            yes=sum(1 for v in council_votes if v.option == "Yes"),
            no=sum(1 for v in council_votes if v.option == "No"),
            timeline=timeline_reducer(
                network,
                block_height,
                [("Council voting period ends", votes.get("end") if votes else None)],
                now,
            ),
        ),
    )


_PROPOSAL_REDUCERS = {
    "democracy": democracy_proposal_reducer,
    "referendum": democracy_referendum_reducer,
    "treasury": treasury_proposal_reducer,
}


def proposal_reducer(network: NetworkConfig, record: Mapping[str, Any]) -> Proposal:
    return _PROPOSAL_REDUCERS[record["kind"]](network, record)


def top_voter_reducer(
    network: NetworkConfig,
    address: str,
    stake: Any,
    validators: Mapping[str, Validator],
) -> TopVoter:
    validator = validators.get(address)
    return TopVoter(
        name=validator.name if validator else address,
        address=address,
        voting_power=to_view_denom(network.staking_coin_lookup, stake),
        validator=validator,
    )


# ---------------------------------------------------------------------------
# ChainReducer implementation
# ---------------------------------------------------------------------------


class PolkadotReducer:
    """Substrate (API Sidecar) variant of the chain reducer interface."""

    def __init__(self, network: NetworkConfig) -> None:
        self.network = network

    def reduce_coin(self, chain_coin: Mapping[str, Any]) -> Coin:
        return coin_reducer(self.network, chain_coin.get("amount"))

    def reduce_block(
        self, raw_block: Mapping[str, Any], transactions: Sequence[Transaction]
    ) -> Block:
        return block_reducer(self.network, raw_block, transactions)

    def reduce_validator(self, raw_validator: Mapping[str, Any]) -> Validator:
        return validator_reducer(self.network, raw_validator)

    def reduce_delegation(
        self, raw_delegation: Mapping[str, Any], validator: Validator | None
    ) -> Delegation:
        return delegation_reducer(self.network, raw_delegation, validator)

    def reduce_undelegation(
        self, raw_undelegation: Mapping[str, Any], validator: Validator | None
    ) -> Undelegation:
        return undelegation_reducer(self.network, raw_undelegation, validator)

    def reduce_transactions(
        self,
        raw_transactions: Sequence[Mapping[str, Any]],
        block: Mapping[str, Any] | None = None,
    ) -> list[Transaction]:
        return transactions_reducer(self.network, raw_transactions, block)

    def reduce_tally(self, raw_tally: Mapping[str, Any], total_issuance: Any) -> Tally:
        return tally_reducer(self.network, raw_tally, total_issuance)

    def reduce_proposal(self, raw_proposal: Mapping[str, Any]) -> Proposal:
        return proposal_reducer(self.network, raw_proposal)

    def reduce_rewards(
        self,
        raw_rewards: Sequence[Mapping[str, Any]],
        validators: Mapping[str, Validator],
        address: str,
    ) -> list[Reward]:
        return reward_reducer(self.network, raw_rewards, validators, address)

    def reduce_balance(self, coin: Coin, holdings: Holdings) -> Balance:
        return balance_reducer(self.network, coin, holdings)
