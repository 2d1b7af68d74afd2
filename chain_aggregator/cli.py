"""Command-line interface for the chain aggregator."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from .config import load_config
from .errors import InvalidInputError, UpstreamUnavailableError
from .fiat import PythFiatValues
from .logging_setup import configure_logging
from .services import NetworkService, build_services
from .stores import StaticNetworkStore

logger = logging.getLogger(__name__)

EXIT_INVALID_INPUT = 2
EXIT_UPSTREAM_UNAVAILABLE = 3


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="chain-aggregator",
        description="Read-only aggregator over Cosmos and Polkadot REST endpoints",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--network",
        default=None,
        help="Network id from config.yaml, e.g. cosmos-hub",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("validators", help="List the current validator set")

    validator_parser = sub.add_parser("validator", help="One validator with self stake")
    validator_parser.add_argument("operator_address")

    block_parser = sub.add_parser("block", help="Block with its transactions")
    block_parser.add_argument(
        "height",
        nargs="?",
        type=int,
        default=None,
        help="Block height (default: latest)",
    )

    balances_parser = sub.add_parser("balances", help="Balances of an address")
    balances_parser.add_argument("address")
    balances_parser.add_argument(
        "--currency", default="USD", help="Fiat currency (default: USD)"
    )

    for name, help_text in (
        ("delegations", "Delegations of an address"),
        ("undelegations", "Pending undelegations of an address"),
        ("rewards", "Unclaimed rewards of an address"),
        ("transactions", "Transaction history of an address"),
        ("account", "Account number and sequence of an address"),
    ):
        address_parser = sub.add_parser(name, help=help_text)
        address_parser.add_argument("address")

    sub.add_parser("proposals", help="All governance proposals")

    proposal_parser = sub.add_parser("proposal", help="One governance proposal")
    proposal_parser.add_argument("proposal_id")

    vote_parser = sub.add_parser("vote", help="How an address voted on a proposal")
    vote_parser.add_argument("proposal_id")
    vote_parser.add_argument("address")

    sub.add_parser("governance", help="Governance overview")
    sub.add_parser("parameters", help="Governance deposit and tally parameters")

    return parser


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_jsonable(result: Any) -> Any:
    """Dataclasses (and lists of them) to plain dicts for ``json.dumps``."""
    if is_dataclass(result) and not isinstance(result, type):
        return asdict(result)
    if isinstance(result, (list, tuple)):
        return [to_jsonable(item) for item in result]
    return result


def render(result: Any) -> str:
    return json.dumps(to_jsonable(result), default=_json_default, indent=2)


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


async def _dispatch(service: NetworkService, args: argparse.Namespace) -> Any:
    command = args.command
    if command == "validators":
        return await service.get_all_validators()
    if command == "validator":
        return await service.get_validator(args.operator_address)
    if command == "block":
        return await service.get_block(args.height)
    if command == "balances":
        return await service.get_balances(args.address, args.currency)
    if command == "delegations":
        return await service.get_delegations(args.address)
    if command == "undelegations":
        return await service.get_undelegations(args.address)
    if command == "rewards":
        return await service.get_rewards(args.address)
    if command == "transactions":
        return await service.get_transactions(args.address)
    if command == "account":
        return await service.get_account_info(args.address)
    if command == "proposals":
        return await service.get_all_proposals()
    if command == "proposal":
        return await service.get_proposal(args.proposal_id)
    if command == "vote":
        return await service.get_delegator_vote(args.proposal_id, args.address)
    if command == "governance":
        return await service.get_governance_overview()
    if command == "parameters":
        return await service.get_governance_parameters()
    raise ValueError(f"Unknown command '{command}'")


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command and return the process exit code."""
    configure_logging(args.log_level)
    config = load_config(args.config)

    if args.network not in config.networks:
        logger.error(
            "Unknown network '%s' (configured: %s)",
            args.network,
            ", ".join(sorted(config.networks)),
        )
        return EXIT_INVALID_INPUT

    fiat_values_api = PythFiatValues(config.fiat.pyth)
    store = StaticNetworkStore(config.links)
    service = build_services(config, fiat_values_api, store)[args.network]

    try:
        result = await _dispatch(service, args)
    except InvalidInputError as e:
        logger.error("%s", e)
        return EXIT_INVALID_INPUT
    except UpstreamUnavailableError as e:
        logger.error("%s", e)
        return EXIT_UPSTREAM_UNAVAILABLE

    print(render(result))
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)
    if not args.network:
        parser.error("--network is required")

    sys.exit(asyncio.run(_run(args)))
