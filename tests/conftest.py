"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from chain_aggregator.config import (
    AppConfig,
    CoinLookupConfig,
    FiatConfig,
    NetworkConfig,
    PythConfig,
    RetrievalConfig,
)
from chain_aggregator.models import Validator, ValidatorStatus


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def cosmos_network() -> NetworkConfig:
    return NetworkConfig(
        id="cosmos-hub",
        title="Cosmos Hub",
        network_type="cosmos",
        chain_id="cosmoshub-3",
        api_url="https://lcd.example.com",
        address_prefix="cosmos",
        coin_lookup=(
            CoinLookupConfig(
                chain_denom="uatom",
                view_denom="ATOM",
                chain_to_view_conversion_factor=Decimal("0.000001"),
            ),
        ),
        gas_prices={"uatom": Decimal("0.0025")},
        rpc_timeout=5,
    )


@pytest.fixture()
def polkadot_network() -> NetworkConfig:
    return NetworkConfig(
        id="polkadot",
        title="Polkadot",
        network_type="polkadot",
        chain_id="polkadot",
        api_url="https://sidecar.example.com",
        address_prefix="1",
        coin_lookup=(
            CoinLookupConfig(
                chain_denom="planck",
                view_denom="DOT",
                chain_to_view_conversion_factor=Decimal("0.0000000001"),
            ),
        ),
        rpc_timeout=5,
        blocks_per_era=14400,
        block_time_seconds=6,
        treasury_address="1TREASURY",
    )


@pytest.fixture()
def retrieval_config() -> RetrievalConfig:
    return RetrievalConfig(
        retry_attempts=3,
        retry_delay_seconds=0.0,
        retry_cache_ttl_seconds=1.0,
        cache_flush_threshold=100_000,
        max_pages=5,
    )


@pytest.fixture()
def sample_pyth_config() -> PythConfig:
    return PythConfig(
        hermes_url="https://hermes.example.com/v2/updates/price/latest",
        feeds={"ATOM": "0xaaa", "DOT": "0xbbb"},
    )


@pytest.fixture()
def sample_app_config(
    cosmos_network: NetworkConfig,
    polkadot_network: NetworkConfig,
    retrieval_config: RetrievalConfig,
    sample_pyth_config: PythConfig,
) -> AppConfig:
    return AppConfig(
        retrieval=retrieval_config,
        networks={"cosmos-hub": cosmos_network, "polkadot": polkadot_network},
        fiat=FiatConfig(provider="pyth", pyth=sample_pyth_config),
        links={"cosmos-hub": ({"title": "Forum", "url": "https://forum.example.com"},)},
    )


# ---------------------------------------------------------------------------
# Collaborator fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_fiat() -> AsyncMock:
    fiat = AsyncMock()
    fiat.calculate_fiat_values.side_effect = lambda coins, currency: {
        coin.denom: coin.amount * 10 for coin in coins
    }
    return fiat


@pytest.fixture()
def mock_store() -> AsyncMock:
    store = AsyncMock()
    store.get_network_links.return_value = (
        '[{"title": "Forum", "url": "https://forum.example.com"}]'
    )
    store.get_rewards.return_value = []
    return store


def _mock_client(network: NetworkConfig) -> MagicMock:
    """REST client double whose query methods are AsyncMocks."""
    client = MagicMock()
    client.network = network
    client.query = AsyncMock()
    client.query_optional = AsyncMock()
    client.get_retry = AsyncMock()
    client.load_paginated = AsyncMock()
    return client


@pytest.fixture()
def cosmos_client(cosmos_network: NetworkConfig) -> MagicMock:
    return _mock_client(cosmos_network)


@pytest.fixture()
def polkadot_client(polkadot_network: NetworkConfig) -> MagicMock:
    return _mock_client(polkadot_network)


@pytest.fixture()
def sample_validator() -> Validator:
    return Validator(
        id="cosmosvaloper1abc",
        network_id="cosmos-hub",
        chain_id="cosmoshub-3",
        operator_address="cosmosvaloper1abc",
        name="Validator One",
        status=ValidatorStatus.ACTIVE,
        status_detailed="active",
        voting_power=Decimal("0.25"),
        commission=Decimal("0.1"),
        identity="keybase-id",
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    retrieval:
      retry_attempts: 2
      retry_delay_seconds: 0.5
      max_pages: 10
    networks:
      cosmos-hub:
        title: Cosmos Hub
        network_type: cosmos
        chain_id: cosmoshub-3
        api_url: "https://lcd.example.com/"
        address_prefix: cosmos
        coin_lookup:
          - chain_denom: uatom
            view_denom: ATOM
            chain_to_view_conversion_factor: 0.000001
        gas_prices:
          uatom: "0.0025"
      polkadot:
        network_type: polkadot
        api_url: "https://sidecar.example.com"
        address_prefix: "1"
        blocks_per_era: 600
        coin_lookup:
          - chain_denom: planck
            view_denom: DOT
            chain_to_view_conversion_factor: "0.0000000001"
    fiat:
      provider: pyth
      pyth:
        hermes_url: "https://hermes.example.com"
        feeds: {ATOM: "aaa", DOT: "bbb"}
    links:
      cosmos-hub:
        - title: Forum
          url: https://forum.example.com
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
