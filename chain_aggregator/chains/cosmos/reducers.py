"""Pure reducers for Cosmos-SDK LCD responses. No I/O."""
from __future__ import annotations

import json
import logging
import re
from decimal import Decimal
from typing import Any, Iterable, Mapping, Sequence

from ...config import NetworkConfig
from ...governance import parse_links, token_weighted_tally
from ...identity import resolve_display_name
from ...models import (
    AccountInfo,
    Balance,
    BalanceType,
    Block,
    ClaimRewardsDetails,
    Coin,
    Delegation,
    DelegationState,
    Deposit,
    DepositDetails,
    DetailedVotes,
    GovernanceParameters,
    Holdings,
    NetworkAccount,
    Proposal,
    ProposalType,
    RestakeDetails,
    Reward,
    SendDetails,
    StakeDetails,
    SubmitProposalDetails,
    Tally,
    TimelineEvent,
    TopVoter,
    Transaction,
    TransactionDetails,
    TransactionType,
    Undelegation,
    UnknownDetails,
    UnstakeDetails,
    Validator,
    ValidatorStatus,
    Vote,
    VoteDetails,
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
from ...timestamps import parse_timestamp
from .addresses import delegator_to_operator

logger = logging.getLogger(__name__)

VIEW_PRECISION = 6

_MESSAGE_TYPES: dict[str, TransactionType] = {
    "cosmos-sdk/MsgSend": TransactionType.SEND,
    "cosmos-sdk/MsgDelegate": TransactionType.STAKE,
    "cosmos-sdk/MsgBeginRedelegate": TransactionType.RESTAKE,
    "cosmos-sdk/MsgUndelegate": TransactionType.UNSTAKE,
    "cosmos-sdk/MsgWithdrawDelegationReward": TransactionType.CLAIM_REWARDS,
    "cosmos-sdk/MsgSubmitProposal": TransactionType.SUBMIT_PROPOSAL,
    "cosmos-sdk/MsgVote": TransactionType.VOTE,
    "cosmos-sdk/MsgDeposit": TransactionType.DEPOSIT,
}

_PROPOSAL_TYPES: dict[str, ProposalType] = {
    "cosmos-sdk/TextProposal": ProposalType.TEXT,
    "cosmos-sdk/CommunityPoolSpendProposal": ProposalType.TREASURY,
    "cosmos-sdk/ParameterChangeProposal": ProposalType.PARAMETER_CHANGE,
}

# Older gaia versions report proposal status as an enum number.
_PROPOSAL_STATUS_CODES = {
    1: "DepositPeriod",
    2: "VotingPeriod",
    3: "Passed",
    4: "Rejected",
    5: "Failed",
}

_FINAL_STATUSES = ("Passed", "Rejected", "Failed")

# Message fields that hold an address taking part in the message.
_ADDRESS_FIELDS = (
    "from_address",
    "to_address",
    "delegator_address",
    "validator_address",
    "validator_src_address",
    "validator_dst_address",
    "proposer",
    "depositor",
    "voter",
)

_BONDED = 2
_BANNED_AFTER_YEAR = 9000

_SCHEME_RE = re.compile(r"^https?://")
_AMOUNT_RE = re.compile(r"^(\d+)(.+)$")


# ---------------------------------------------------------------------------
# Coins
# ---------------------------------------------------------------------------


def coin_reducer(network: NetworkConfig, chain_coin: Mapping[str, Any]) -> Coin:
    """Chain coin to view coin rounded up to 6 decimals; unknown denoms pass through."""
    denom = chain_coin.get("denom", "")
    lookup = network.get_coin_lookup(denom)
    if lookup is None:
        return Coin(denom=denom, amount=parse_chain_int(chain_coin.get("amount")))
    return Coin(
        denom=lookup.view_denom,
        amount=fix_decimals_and_round_up(
            to_view_denom(lookup, chain_coin.get("amount")), VIEW_PRECISION
        ),
    )


def _first_coin(network: NetworkConfig, coins: Any) -> Coin | None:
    if isinstance(coins, Mapping):
        return coin_reducer(network, coins)
    if coins:
        return coin_reducer(network, coins[0])
    return None


def _staking_amount(network: NetworkConfig, raw: Any) -> Decimal:
    """Staking-denom amount; accepts a bare number or a ``{denom, amount}`` coin."""
    if isinstance(raw, Mapping):
        raw = raw.get("amount")
    return fix_decimals_and_round_up(
        to_view_denom(network.staking_coin_lookup, raw), VIEW_PRECISION
    )


# ---------------------------------------------------------------------------
# Blocks and validators
# ---------------------------------------------------------------------------


def _block_header(raw_block: Mapping[str, Any]) -> Mapping[str, Any]:
    meta = raw_block.get("block_meta", {})
    return meta.get("header") or raw_block.get("block", {}).get("header", {})


def block_height(raw_block: Mapping[str, Any]) -> int:
    return int(_block_header(raw_block).get("height", 0))


def block_reducer(
    network: NetworkConfig,
    raw_block: Mapping[str, Any],
    transactions: Sequence[Transaction],
) -> Block:
    meta = raw_block.get("block_meta", {})
    header = _block_header(raw_block)
    block_hash = meta.get("block_id", {}).get("hash", "")
    return Block(
        id=block_hash,
        network_id=network.id,
        chain_id=header.get("chain_id", network.chain_id),
        height=int(header.get("height", 0)),
        hash=block_hash,
        time=parse_timestamp(header.get("time")),
        proposer_address=header.get("proposer_address", ""),
        transactions=tuple(transactions),
    )


def normalize_website(website: str | None) -> str:
    if not website or website == "[do-not-modify]":
        return ""
    if not _SCHEME_RE.match(website):
        return f"https://{website}"
    return website


def validator_status(validator: Mapping[str, Any]) -> tuple[ValidatorStatus, str]:
    if validator.get("status") == _BONDED:
        return ValidatorStatus.ACTIVE, "active"
    signing_info = validator.get("signing_info") or {}
    jailed_until = parse_timestamp(signing_info.get("jailed_until"))
    if jailed_until is not None and jailed_until.year > _BANNED_AFTER_YEAR:
        return ValidatorStatus.INACTIVE, "banned"
    return ValidatorStatus.INACTIVE, "inactive"


def expected_returns(
    voting_power: Decimal, commission: Decimal, tokens: Any, annual_provision: Any
) -> Decimal:
    """Yearly reward per staked token after commission."""
    tokens = parse_chain_int(tokens)
    if tokens == 0:
        return ZERO
    provision = parse_chain_int(annual_provision)
    return fix_decimals(
        divide(voting_power * provision * (1 - commission), tokens), VIEW_PRECISION
    )


def validator_reducer(
    network: NetworkConfig, validator: Mapping[str, Any]
) -> Validator:
    """Reduce an LCD validator merged with ``voting_power``, ``signing_info``,
    ``signed_blocks_window`` and ``annual_provision``.
    """
    description = validator.get("description", {})
    commission = validator.get("commission", {})
    rates = commission.get("commission_rates", commission)
    signing_info = validator.get("signing_info") or {}
    status, status_detailed = validator_status(validator)

    voting_power = parse_chain_int(validator.get("voting_power", 0))
    rate = parse_chain_int(rates.get("rate", 0))
    window = parse_chain_int(validator.get("signed_blocks_window", 0))
    uptime = None
    if window > 0:
        missed = parse_chain_int(signing_info.get("missed_blocks_counter", 0))
        uptime = 1 - divide(missed, window)

    annual_provision = validator.get("annual_provision")
    returns = None
    if annual_provision is not None:
        returns = expected_returns(
            voting_power, rate, validator.get("tokens"), annual_provision
        )

    operator_address = validator.get("operator_address", "")
    return Validator(
        id=operator_address,
        network_id=network.id,
        chain_id=network.chain_id,
        operator_address=operator_address,
        name=resolve_display_name(
            operator_address, {"display": description.get("moniker", "")}
        ),
        status=status,
        status_detailed=status_detailed,
        voting_power=fix_decimals(voting_power, VIEW_PRECISION),
        commission=fix_decimals(rate, VIEW_PRECISION),
        tokens=_staking_amount(network, validator.get("tokens")),
        website=normalize_website(description.get("website")),
        identity=description.get("identity", ""),
        details=description.get("details", ""),
        max_commission=fix_decimals(rates.get("max_rate", 0), VIEW_PRECISION),
        max_change_commission=fix_decimals(
            rates.get("max_change_rate", 0), VIEW_PRECISION
        ),
        commission_update_time=commission.get("update_time", ""),
        delegator_shares=parse_chain_int(validator.get("delegator_shares")),
        start_height=str(signing_info.get("start_height", "")),
        uptime_percentage=uptime,
        expected_returns=returns,
        consensus_pubkey=validator.get("consensus_pubkey", ""),
        jailed=bool(validator.get("jailed", False)),
    )


# ---------------------------------------------------------------------------
# Delegations
# ---------------------------------------------------------------------------


def delegation_reducer(
    network: NetworkConfig,
    delegation: Mapping[str, Any],
    validator: Validator | None,
    state: DelegationState = DelegationState.ACTIVE,
) -> Delegation:
    validator_address = delegation.get("validator_address", "")
    delegator_address = delegation.get("delegator_address", "")
    raw_amount = delegation.get("balance", delegation.get("shares", 0))
    return Delegation(
        id=f"{validator_address}-{delegator_address}",
        validator_address=validator_address,
        delegator_address=delegator_address,
        amount=_staking_amount(network, raw_amount),
        state=state,
        validator=validator,
    )


def flatten_undelegations(
    undelegations: Iterable[Mapping[str, Any]],
) -> list[dict[str, Any]]:
    """One row per unbonding entry instead of one per validator."""
    flattened: list[dict[str, Any]] = []
    for undelegation in undelegations:
        for entry in undelegation.get("entries", []):
            flattened.append(
                {
                    "validator_address": undelegation.get("validator_address", ""),
                    "delegator_address": undelegation.get("delegator_address", ""),
                    "balance": entry.get("balance"),
                    "completion_time": entry.get("completion_time"),
                    "creation_height": entry.get("creation_height"),
                    "initial_balance": entry.get("initial_balance"),
                }
            )
    return flattened


def undelegation_reducer(
    network: NetworkConfig,
    undelegation: Mapping[str, Any],
    validator: Validator | None,
) -> Undelegation:
    validator_address = undelegation.get("validator_address", "")
    creation_height = str(undelegation.get("creation_height", ""))
    return Undelegation(
        id=f"{validator_address}_{creation_height}",
        validator_address=validator_address,
        delegator_address=undelegation.get("delegator_address", ""),
        amount=_staking_amount(network, undelegation.get("balance")),
        start_height=creation_height,
        end_time=parse_timestamp(undelegation.get("completion_time")),
        validator=validator,
    )


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


def get_message_type(message_type: str) -> TransactionType:
    return _MESSAGE_TYPES.get(message_type, TransactionType.UNKNOWN)


def proposal_type(content_type: str) -> ProposalType:
    return _PROPOSAL_TYPES.get(content_type, ProposalType.TEXT)


def claimed_amounts(
    network: NetworkConfig, logs: Iterable[Mapping[str, Any]]
) -> tuple[Coin, ...]:
    """Sum the ``transfer`` event amounts (``"12uatom,3ufoo"``) of withdrawals."""
    sums: dict[str, Decimal] = {}
    for log in logs:
        for event in log.get("events", []):
            if event.get("type") != "transfer":
                continue
            for attribute in event.get("attributes", []):
                if attribute.get("key") != "amount" or not attribute.get("value"):
                    continue
                for part in attribute["value"].split(","):
                    match = _AMOUNT_RE.match(part.strip())
                    if match:
                        amount, denom = match.groups()
                        sums[denom] = sums.get(denom, ZERO) + Decimal(amount)
    return tuple(
        coin_reducer(network, {"denom": denom, "amount": amount})
        for denom, amount in sums.items()
    )


def transaction_details_reducer(
    network: NetworkConfig,
    message_type: TransactionType,
    message: Mapping[str, Any],
    claim_messages: Sequence[Mapping[str, Any]] = (),
    logs: Sequence[Mapping[str, Any]] = (),
) -> TransactionDetails:
    if message_type == TransactionType.SEND:
        return SendDetails(
            from_addresses=(message.get("from_address", ""),),
            to_addresses=(message.get("to_address", ""),),
            amount=_first_coin(network, message.get("amount")),
        )
    if message_type == TransactionType.STAKE:
        return StakeDetails(
            to=(message.get("validator_address", ""),),
            amount=_first_coin(network, message.get("amount")),
        )
    if message_type == TransactionType.RESTAKE:
        return RestakeDetails(
            from_addresses=(message.get("validator_src_address", ""),),
            to=(message.get("validator_dst_address", ""),),
            amount=_first_coin(network, message.get("amount")),
        )
    if message_type == TransactionType.UNSTAKE:
        return UnstakeDetails(
            from_addresses=(message.get("validator_address", ""),),
            amount=_first_coin(network, message.get("amount")),
        )
    if message_type == TransactionType.CLAIM_REWARDS:
        return ClaimRewardsDetails(
            from_addresses=tuple(
                m.get("validator_address", "") for m in claim_messages or (message,)
            ),
            amounts=claimed_amounts(network, logs),
        )
    if message_type == TransactionType.SUBMIT_PROPOSAL:
        content = message.get("content", {})
        return SubmitProposalDetails(
            proposal_type=proposal_type(content.get("type", "")),
            title=content.get("value", {}).get("title", ""),
            description=content.get("value", {}).get("description", ""),
            initial_deposit=_first_coin(network, message.get("initial_deposit")),
        )
    if message_type == TransactionType.VOTE:
        return VoteDetails(
            proposal_id=str(message.get("proposal_id", "")),
            vote_option=message.get("option", ""),
        )
    if message_type == TransactionType.DEPOSIT:
        return DepositDetails(
            proposal_id=str(message.get("proposal_id", "")),
            amount=_first_coin(network, message.get("amount")),
        )
    return UnknownDetails()


def involved_addresses(messages: Iterable[Mapping[str, Any]]) -> tuple[str, ...]:
    addresses: list[str] = []
    for message in messages:
        for key in _ADDRESS_FIELDS:
            address = message.get(key)
            if address and address not in addresses:
                addresses.append(address)
    return tuple(addresses)


def transaction_success(transaction: Mapping[str, Any]) -> bool:
    return not transaction.get("code")


def transaction_reducer(
    network: NetworkConfig, transaction: Mapping[str, Any]
) -> list[Transaction]:
    """One LCD tx → one record per message.

    Reward withdrawals within a tx are folded into a single record since they
    are signed and shown together.
    """
    value = transaction.get("tx", {}).get("value", {})
    messages = value.get("msg", []) or []
    logs = transaction.get("logs") or []
    tx_hash = transaction.get("txhash", "")
    success = transaction_success(transaction)
    fees = tuple(
        coin_reducer(network, coin)
        for coin in value.get("fee", {}).get("amount", []) or []
    )

    claim_messages = [
        m.get("value", {})
        for m in messages
        if get_message_type(m.get("type", "")) == TransactionType.CLAIM_REWARDS
    ]
    claim_logs = [
        log
        for index, log in enumerate(logs)
        if index < len(messages)
        and get_message_type(messages[index].get("type", ""))
        == TransactionType.CLAIM_REWARDS
    ]

    records: list[Transaction] = []
    claims_added = False
    for message in messages:
        message_type = get_message_type(message.get("type", ""))
        body = message.get("value", {})
        if message_type == TransactionType.CLAIM_REWARDS:
            if claims_added:
                continue
            claims_added = True
            details = transaction_details_reducer(
                network, message_type, body, claim_messages, claim_logs
            )
            addresses = involved_addresses(claim_messages)
        else:
            details = transaction_details_reducer(network, message_type, body)
            addresses = involved_addresses([body])

        index = len(records)
        records.append(
            Transaction(
                id=tx_hash,
                key=f"{tx_hash}_{index}",
                type=message_type,
                hash=tx_hash,
                height=int(transaction.get("height", 0)),
                timestamp=parse_timestamp(transaction.get("timestamp")),
                details=details,
                success=success,
                fees=fees,
                memo=value.get("memo", ""),
                log="" if success else transaction.get("raw_log", ""),
                involved_addresses=addresses,
            )
        )
    return records


def transactions_reducer(
    network: NetworkConfig, transactions: Iterable[Mapping[str, Any]]
) -> list[Transaction]:
    records: list[Transaction] = []
    for transaction in transactions:
        records.extend(transaction_reducer(network, transaction))
    return records


def format_transactions_reducer(
    transactions: Iterable[Transaction],
) -> list[Transaction]:
    """Drop duplicate keys (a tx matches several filters) and sort newest first."""
    unique: dict[str, Transaction] = {}
    for transaction in transactions:
        unique.setdefault(transaction.key, transaction)
    return sorted(
        unique.values(),
        key=lambda t: (t.timestamp is not None, t.timestamp or 0, t.height),
        reverse=True,
    )


# ---------------------------------------------------------------------------
# Governance
# ---------------------------------------------------------------------------


def proposal_status(proposal: Mapping[str, Any]) -> str:
    status = proposal.get("proposal_status", proposal.get("status", ""))
    if isinstance(status, int) or (isinstance(status, str) and status.isdigit()):
        return _PROPOSAL_STATUS_CODES.get(int(status), str(status))
    return status


def proposal_begin_time(proposal: Mapping[str, Any]) -> Any:
    status = proposal_status(proposal)
    if status == "DepositPeriod":
        return parse_timestamp(proposal.get("submit_time"))
    if status == "VotingPeriod":
        return parse_timestamp(proposal.get("voting_start_time"))
    return parse_timestamp(proposal.get("voting_end_time"))


def proposal_end_time(proposal: Mapping[str, Any]) -> Any:
    if proposal_status(proposal) == "DepositPeriod":
        return parse_timestamp(proposal.get("deposit_end_time"))
    return parse_timestamp(proposal.get("voting_end_time"))


def tally_reducer(
    network: NetworkConfig, tally: Mapping[str, Any], total_bonded_tokens: Any
) -> Tally:
    yes = parse_chain_int(tally.get("yes"))
    no = parse_chain_int(tally.get("no"))
    abstain = parse_chain_int(tally.get("abstain"))
    veto = parse_chain_int(tally.get("no_with_veto"))
    return token_weighted_tally(
        network.staking_coin_lookup,
        yes=yes,
        no=no,
        turnout=yes + no + abstain + veto,
        total_issuance=total_bonded_tokens,
        abstain=abstain,
        veto=veto,
    )


def deposit_amount(network: NetworkConfig, proposal: Mapping[str, Any]) -> Decimal:
    """Total deposited in the staking denom."""
    for coin in proposal.get("total_deposit", []) or []:
        if coin.get("denom") == network.staking_coin_lookup.chain_denom:
            return _staking_amount(network, coin.get("amount"))
    return ZERO


def network_account_reducer(
    address: str | None, validators: Mapping[str, Validator], prefix: str
) -> NetworkAccount | None:
    """Account shown for a proposer; named after its validator when it runs one."""
    if not address:
        return None
    validator = None
    try:
        validator = validators.get(delegator_to_operator(address, prefix))
    except ValueError:
        logger.debug("Proposer %s is not a bech32 address", address)
    if validator is None:
        return NetworkAccount(name=address, address=address)
    return NetworkAccount(
        name=resolve_display_name(address, {"display": validator.name}),
        address=address,
        picture=validator.identity,
    )


def deposit_reducer(network: NetworkConfig, deposit: Mapping[str, Any]) -> Deposit:
    return Deposit(
        amount=tuple(coin_reducer(network, coin) for coin in deposit.get("amount", [])),
        depositer=deposit.get("depositor", ""),
    )


def vote_reducer(vote: Mapping[str, Any]) -> Vote:
    return Vote(
        id=f"{vote.get('proposal_id', '')}_{vote.get('voter', '')}",
        voter=vote.get("voter", ""),
        option=vote.get("option", ""),
    )


def detailed_votes_reducer(
    network: NetworkConfig,
    proposal: Mapping[str, Any],
    votes: Sequence[Mapping[str, Any]] | None,
    deposits: Sequence[Mapping[str, Any]] | None,
    tally: Mapping[str, Any],
    tallying_parameters: Mapping[str, Any],
    deposit_parameters: Mapping[str, Any],
    links: str | None,
) -> DetailedVotes:
    formatted_deposits = tuple(deposit_reducer(network, d) for d in deposits or [])
    deposits_sum = sum(
        (d.amount[0].amount for d in formatted_deposits if d.amount), ZERO
    )
    min_deposit = deposit_parameters.get("min_deposit", []) or []
    min_deposit_view = (
        coin_reducer(network, min_deposit[0]).amount if min_deposit else ZERO
    )

    yes = parse_chain_int(tally.get("yes"))
    no = parse_chain_int(tally.get("no"))
    veto = parse_chain_int(tally.get("no_with_veto"))
    participation = yes + no + veto + parse_chain_int(tally.get("abstain"))
    threshold = parse_chain_int(tallying_parameters.get("threshold", 0))

    return DetailedVotes(
        deposits=formatted_deposits,
        deposits_sum=fix_decimals(deposits_sum, VIEW_PRECISION),
        percentage_deposits_needed=fix_decimals_and_round_up(
            divide(deposits_sum * 100, min_deposit_view), 2
        ),
        votes=tuple(vote_reducer(v) for v in votes or []),
        votes_sum=len(votes or []),
        voting_threshold_yes=fix_decimals(threshold, 2),
        voting_threshold_no=fix_decimals(1 - threshold, 2),
        voting_percentage_yes=fix_decimals(divide(yes * 100, participation), 2),
        voting_percentage_no=fix_decimals(divide((no + veto) * 100, participation), 2),
        links=parse_links(links),
        timeline=(
            TimelineEvent(
                "Proposal created", parse_timestamp(proposal.get("submit_time"))
            ),
            TimelineEvent(
                "Proposal deposit period ends",
                parse_timestamp(proposal.get("deposit_end_time")),
            ),
            TimelineEvent(
                "Proposal voting period starts",
                parse_timestamp(proposal.get("voting_start_time")),
            ),
            TimelineEvent(
                "Proposal voting period ends",
                parse_timestamp(proposal.get("voting_end_time")),
            ),
        ),
    )


def proposal_reducer(network: NetworkConfig, record: Mapping[str, Any]) -> Proposal:
    """Reduce a proposal record carrying ``proposal``, ``tally``, ``proposer``,
    ``total_bonded_tokens``, ``detailed_votes`` and ``validators``.
    """
    proposal = record["proposal"]
    content = proposal.get("content", {})
    value = content.get("value", {})
    status = proposal_status(proposal)
    tally = record.get("tally") or {}
    if status in _FINAL_STATUSES and proposal.get("final_tally_result"):
        tally = proposal["final_tally_result"]

    description = value.get("description", "")
    if value.get("changes"):
        changes = json.dumps(value["changes"])
        description = f"{description}\n\nParameter: {changes}".strip()

    proposal_id = str(proposal.get("id", ""))
    return Proposal(
        id=proposal_id,
        proposal_id=proposal_id,
        network_id=network.id,
        type=proposal_type(content.get("type", "")),
        title=value.get("title", ""),
        description=description,
        status=status,
        tally=tally_reducer(network, tally, record.get("total_bonded_tokens")),
        deposit=deposit_amount(network, proposal),
        creation_time=parse_timestamp(proposal.get("submit_time")),
        status_begin_time=proposal_begin_time(proposal),
        status_end_time=proposal_end_time(proposal),
        proposer=network_account_reducer(
            record.get("proposer"), record.get("validators", {}), network.address_prefix
        ),
        beneficiary=(
            NetworkAccount(name=value["recipient"], address=value["recipient"])
            if value.get("recipient")
            else None
        ),
        detailed_votes=record.get("detailed_votes"),
    )


def governance_parameter_reducer(
    network: NetworkConfig,
    deposit_parameters: Mapping[str, Any],
    tallying_parameters: Mapping[str, Any],
) -> GovernanceParameters:
    min_deposit = deposit_parameters.get("min_deposit", []) or []
    return GovernanceParameters(
        deposit_denom=network.staking_denom,
        deposit_threshold=(
            coin_reducer(network, min_deposit[0]).amount if min_deposit else ZERO
        ),
        voting_threshold=parse_chain_int(tallying_parameters.get("threshold")),
        veto_threshold=parse_chain_int(tallying_parameters.get("veto")),
    )


def top_voter_reducer(validator: Validator) -> TopVoter:
    return TopVoter(
        name=validator.name,
        address=validator.operator_address,
        voting_power=validator.voting_power,
        validator=validator,
    )


def account_info_reducer(address: str, account: Mapping[str, Any]) -> AccountInfo:
    """Handles base accounts and the nested vesting account layouts."""
    value = account.get("value", account)
    if "BaseVestingAccount" in value:
        value = value["BaseVestingAccount"].get("BaseAccount", {})
    elif "base_vesting_account" in value:
        value = value["base_vesting_account"].get("base_account", {})
    return AccountInfo(
        address=value.get("address") or address,
        account_number=str(value.get("account_number", "")),
        sequence=str(value.get("sequence", "")),
    )


# ---------------------------------------------------------------------------
# Rewards and balances
# ---------------------------------------------------------------------------


def reward_reducer(
    network: NetworkConfig,
    rewards: Iterable[Mapping[str, Any]],
    validators: Mapping[str, Validator],
    address: str,
) -> list[Reward]:
    parsed: list[Reward] = []
    for entry in rewards:
        validator_address = entry.get("validator_address", "")
        for chain_coin in entry.get("reward") or []:
            coin = coin_reducer(network, chain_coin)
            parsed.append(
                Reward(
                    id=validator_address,
                    validator_address=validator_address,
                    denom=coin.denom,
                    amount=coin.amount,
                    address=address,
                    validator=validators.get(validator_address),
                )
            )
    return aggregate_rewards(parsed)


def balance_reducer(network: NetworkConfig, coin: Coin, holdings: Holdings) -> Balance:
    """Staking denom totals include delegated and unbonding stake."""
    is_staking_denom = coin.denom == network.staking_denom
    gas_price = network.gas_price(coin.denom)
    if not is_staking_denom:
        return Balance(
            id=coin.denom,
            denom=coin.denom,
            type=BalanceType.CURRENCY,
            total=coin.amount,
            available=coin.amount,
            staked=ZERO,
            gas_price=gas_price,
        )

    delegated = sum((d.amount for d in holdings.delegations), ZERO)
    unbonding = sum((u.amount for u in holdings.undelegations), ZERO)
    return Balance(
        id=coin.denom,
        denom=coin.denom,
        type=BalanceType.STAKE,
        total=coin.amount + delegated + unbonding,
        available=coin.amount,
        staked=delegated,
        gas_price=gas_price,
    )


# ---------------------------------------------------------------------------
# ChainReducer implementation
# ---------------------------------------------------------------------------


class CosmosReducer:
    """Cosmos-SDK (legacy LCD) variant of the chain reducer interface."""

    def __init__(self, network: NetworkConfig) -> None:
        self.network = network

    def reduce_coin(self, chain_coin: Mapping[str, Any]) -> Coin:
        return coin_reducer(self.network, chain_coin)

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
        return transactions_reducer(self.network, raw_transactions)

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
