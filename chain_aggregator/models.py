"""Canonical, chain-agnostic data models. All frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Union


class TransactionType(str, Enum):
    SEND = "SendTx"
    STAKE = "StakeTx"
    RESTAKE = "RestakeTx"
    UNSTAKE = "UnstakeTx"
    CLAIM_REWARDS = "ClaimRewardsTx"
    SUBMIT_PROPOSAL = "SubmitProposalTx"
    VOTE = "VoteTx"
    DEPOSIT = "DepositTx"
    UNKNOWN = "UnknownTx"


class DelegationState(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class ProposalType(str, Enum):
    TEXT = "TEXT"
    TREASURY = "TREASURY"
    PARAMETER_CHANGE = "PARAMETER_CHANGE"


class BalanceType(str, Enum):
    STAKE = "STAKE"
    CURRENCY = "CURRENCY"


class ValidatorStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# ---------------------------------------------------------------------------
# Accounts and balances
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Coin:
    denom: str
    amount: Decimal


@dataclass(frozen=True)
class Balance:
    """Per-denom balance. ``available + staked`` never exceeds ``total``."""

    id: str
    denom: str
    type: BalanceType
    total: Decimal
    available: Decimal
    staked: Decimal = Decimal(0)
    fiat_value: Decimal | None = None
    available_fiat_value: Decimal | None = None
    gas_price: Decimal | None = None


@dataclass(frozen=True)
class AccountInfo:
    address: str
    account_number: str = ""
    sequence: str = ""


@dataclass(frozen=True)
class NetworkAccount:
    name: str
    address: str
    picture: str = ""


# ---------------------------------------------------------------------------
# Validators and staking
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Validator:
    id: str
    network_id: str
    chain_id: str
    operator_address: str
    name: str
    status: ValidatorStatus
    status_detailed: str
    voting_power: Decimal
    commission: Decimal
    tokens: Decimal = Decimal(0)
    self_stake: Decimal = Decimal(0)
    website: str = ""
    identity: str = ""
    details: str = ""
    max_commission: Decimal | None = None
    max_change_commission: Decimal | None = None
    commission_update_time: str = ""
    delegator_shares: Decimal | None = None
    start_height: str = ""
    uptime_percentage: Decimal | None = None
    expected_returns: Decimal | None = None
    consensus_pubkey: str = ""
    jailed: bool = False
    nominations: int | None = None
    popularity: int | None = None


@dataclass(frozen=True)
class Delegation:
    id: str
    validator_address: str
    delegator_address: str
    amount: Decimal
    state: DelegationState = DelegationState.ACTIVE
    validator: Validator | None = None


@dataclass(frozen=True)
class Undelegation:
    id: str
    validator_address: str
    delegator_address: str
    amount: Decimal
    start_height: str = ""
    end_time: datetime | None = None
    validator: Validator | None = None


@dataclass(frozen=True)
class Holdings:
    """Staking-side amounts known for an address, in view denomination.

    Cosmos chains report delegations and undelegations; Substrate chains
    report the account total and bonded amount directly.
    """

    delegations: tuple[Delegation, ...] = ()
    undelegations: tuple[Undelegation, ...] = ()
    total: Decimal | None = None
    staked: Decimal | None = None


@dataclass(frozen=True)
class Reward:
    id: str
    validator_address: str
    denom: str
    amount: Decimal
    height: str = ""
    address: str = ""
    validator: Validator | None = None


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SendDetails:
    from_addresses: tuple[str, ...]
    to_addresses: tuple[str, ...]
    amount: Coin | None
    type: TransactionType = TransactionType.SEND


@dataclass(frozen=True)
class StakeDetails:
    to: tuple[str, ...]
    amount: Coin | None
    type: TransactionType = TransactionType.STAKE


@dataclass(frozen=True)
class RestakeDetails:
    from_addresses: tuple[str, ...]
    to: tuple[str, ...]
    amount: Coin | None
    type: TransactionType = TransactionType.RESTAKE


@dataclass(frozen=True)
class UnstakeDetails:
    from_addresses: tuple[str, ...]
    amount: Coin | None
    type: TransactionType = TransactionType.UNSTAKE


@dataclass(frozen=True)
class ClaimRewardsDetails:
    from_addresses: tuple[str, ...]
    amounts: tuple[Coin, ...]
    type: TransactionType = TransactionType.CLAIM_REWARDS


@dataclass(frozen=True)
class SubmitProposalDetails:
    proposal_type: ProposalType
    title: str
    description: str
    initial_deposit: Coin | None
    type: TransactionType = TransactionType.SUBMIT_PROPOSAL


@dataclass(frozen=True)
class VoteDetails:
    proposal_id: str
    vote_option: str
    type: TransactionType = TransactionType.VOTE


@dataclass(frozen=True)
class DepositDetails:
    proposal_id: str
    amount: Coin | None
    type: TransactionType = TransactionType.DEPOSIT


@dataclass(frozen=True)
class UnknownDetails:
    type: TransactionType = TransactionType.UNKNOWN


TransactionDetails = Union[
    SendDetails,
    StakeDetails,
    RestakeDetails,
    UnstakeDetails,
    ClaimRewardsDetails,
    SubmitProposalDetails,
    VoteDetails,
    DepositDetails,
    UnknownDetails,
]


@dataclass(frozen=True)
class Transaction:
    """One canonical message; ``key`` is ``{hash}_{index}`` and is unique."""

    id: str
    key: str
    type: TransactionType
    hash: str
    height: int
    timestamp: datetime | None
    details: TransactionDetails
    success: bool
    fees: tuple[Coin, ...] = ()
    memo: str = ""
    log: str = ""
    involved_addresses: tuple[str, ...] = ()


@dataclass(frozen=True)
class Block:
    id: str
    network_id: str
    chain_id: str
    height: int
    hash: str
    time: datetime | None
    proposer_address: str = ""
    transactions: tuple[Transaction, ...] = ()
    session_index: int | None = None


# ---------------------------------------------------------------------------
# Governance
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Tally:
    yes: Decimal
    no: Decimal
    abstain: Decimal
    veto: Decimal
    total: Decimal
    total_voted_percentage: str


EMPTY_TALLY = Tally(
    yes=Decimal(0),
    no=Decimal(0),
    abstain=Decimal(0),
    veto=Decimal(0),
    total=Decimal(0),
    total_voted_percentage="0.0000",
)


@dataclass(frozen=True)
class Deposit:
    amount: tuple[Coin, ...]
    depositer: str


@dataclass(frozen=True)
class Vote:
    id: str
    voter: str
    option: str


@dataclass(frozen=True)
class TimelineEvent:
    title: str
    time: datetime | None


@dataclass(frozen=True)
class DetailedVotes:
    deposits: tuple[Deposit, ...] = ()
    deposits_sum: Decimal = Decimal(0)
    percentage_deposits_needed: Decimal = Decimal(0)
    votes: tuple[Vote, ...] = ()
    votes_sum: int = 0
    voting_threshold_yes: Decimal = Decimal(0)
    voting_threshold_no: Decimal = Decimal(0)
    voting_percentage_yes: Decimal = Decimal(0)
    voting_percentage_no: Decimal = Decimal(0)
    links: tuple[dict[str, str], ...] = ()
    timeline: tuple[TimelineEvent, ...] = ()


@dataclass(frozen=True)
class Proposal:
    id: str
    proposal_id: str
    network_id: str
    type: ProposalType
    title: str
    description: str
    status: str
    tally: Tally
    deposit: Decimal = Decimal(0)
    creation_time: datetime | None = None
    status_begin_time: datetime | None = None
    status_end_time: datetime | None = None
    proposer: NetworkAccount | None = None
    beneficiary: NetworkAccount | None = None
    detailed_votes: DetailedVotes | None = None


@dataclass(frozen=True)
class GovernanceParameters:
    deposit_denom: str
    deposit_threshold: Decimal
    voting_threshold: Decimal | None = None
    veto_threshold: Decimal | None = None


@dataclass(frozen=True)
class TopVoter:
    name: str
    address: str
    voting_power: Decimal
    validator: Validator | None = None


@dataclass(frozen=True)
class GovernanceOverview:
    total_staked_assets: Decimal
    total_voters: int | None
    treasury_size: Decimal
    top_voters: tuple[TopVoter, ...] = ()
    links: tuple[dict[str, str], ...] = field(default_factory=tuple)
