"""Unit tests for CLI argument parsing and output rendering."""
from __future__ import annotations

import argparse
import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from chain_aggregator.cli import (
    EXIT_INVALID_INPUT,
    EXIT_UPSTREAM_UNAVAILABLE,
    _run,
    build_parser,
    render,
    to_jsonable,
)
from chain_aggregator.errors import InvalidInputError, UpstreamUnavailableError
from chain_aggregator.models import Coin, Validator


class TestBuildParser:
    def test_defaults(self) -> None:
        parser = build_parser()
        args = parser.parse_args(["validators"])
        assert args.config is None
        assert args.log_level == "INFO"
        assert args.network is None
        assert args.command == "validators"

    def test_block_height_optional(self) -> None:
        parser = build_parser()
        assert parser.parse_args(["block"]).height is None
        assert parser.parse_args(["block", "42"]).height == 42

    def test_balances_currency(self) -> None:
        parser = build_parser()
        args = parser.parse_args(
            ["--network", "cosmos-hub", "balances", "cosmos1x", "--currency", "EUR"]
        )
        assert args.network == "cosmos-hub"
        assert args.address == "cosmos1x"
        assert args.currency == "EUR"

    def test_vote_arguments(self) -> None:
        args = build_parser().parse_args(["vote", "7", "cosmos1x"])
        assert args.proposal_id == "7"
        assert args.address == "cosmos1x"

    def test_invalid_log_level(self) -> None:
        parser = build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["--log-level", "TRACE", "validators"])


class TestRender:
    def test_dataclass_list(self, sample_validator: Validator) -> None:
        data = to_jsonable([sample_validator])
        assert isinstance(data, list)
        assert data[0]["operator_address"] == "cosmosvaloper1abc"

    def test_decimal_enum_and_datetime(self, sample_validator: Validator) -> None:
        rendered = json.loads(
            render(
                {
                    "validator": to_jsonable(sample_validator),
                    "at": datetime(2020, 1, 1, tzinfo=timezone.utc),
                }
            )
        )
        assert rendered["validator"]["voting_power"] == "0.25"
        assert rendered["validator"]["status"] == "ACTIVE"
        assert rendered["at"] == "2020-01-01T00:00:00+00:00"

    def test_coin(self) -> None:
        rendered = json.loads(render(Coin("ATOM", Decimal("1.5"))))
        assert rendered == {"denom": "ATOM", "amount": "1.5"}


class TestRun:
    def _args(self, sample_yaml_path: Path, *argv: str) -> argparse.Namespace:
        return build_parser().parse_args(["--config", str(sample_yaml_path), *argv])

    @pytest.mark.asyncio
    async def test_unknown_network(self, sample_yaml_path: Path) -> None:
        args = self._args(sample_yaml_path, "--network", "nope", "validators")
        assert await _run(args) == EXIT_INVALID_INPUT

    @pytest.mark.asyncio
    async def test_prints_result(
        self, sample_yaml_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        args = self._args(
            sample_yaml_path, "--network", "cosmos-hub", "account", "cosmos1x"
        )
        with patch(
            "chain_aggregator.cli.NetworkService.get_account_info",
            new=AsyncMock(return_value={"sequence": "3"}),
        ):
            assert await _run(args) == 0
        assert json.loads(capsys.readouterr().out) == {"sequence": "3"}

    @pytest.mark.asyncio
    async def test_invalid_input_exit_code(self, sample_yaml_path: Path) -> None:
        args = self._args(
            sample_yaml_path, "--network", "cosmos-hub", "validator", "bad"
        )
        with patch(
            "chain_aggregator.cli.NetworkService.get_validator",
            new=AsyncMock(side_effect=InvalidInputError("no such validator")),
        ):
            assert await _run(args) == EXIT_INVALID_INPUT

    @pytest.mark.asyncio
    async def test_upstream_unavailable_exit_code(
        self, sample_yaml_path: Path
    ) -> None:
        args = self._args(sample_yaml_path, "--network", "polkadot", "validators")
        with patch(
            "chain_aggregator.cli.NetworkService.get_all_validators",
            new=AsyncMock(
                side_effect=UpstreamUnavailableError(
                    "https://sidecar.example.com/x", "polkadot", 3
                )
            ),
        ):
            assert await _run(args) == EXIT_UPSTREAM_UNAVAILABLE
