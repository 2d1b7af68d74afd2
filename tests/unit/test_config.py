"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from chain_aggregator.config import (
    AppConfig,
    NetworkConfig,
    _interpolate_env,
    load_config,
)


def _write(tmp_path: Path, content: str) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(textwrap.dedent(content))
    return cfg_file


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_structures(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LCD", "https://lcd.test")
        result = _interpolate_env({"urls": ["${LCD}/a", "plain"], "n": 3})
        assert result == {"urls": ["https://lcd.test/a", "plain"], "n": 3}


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.retrieval.retry_attempts == 2
        assert cfg.retrieval.retry_delay_seconds == 0.5
        assert cfg.retrieval.max_pages == 10
        assert set(cfg.networks) == {"cosmos-hub", "polkadot"}

    def test_network_fields(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        hub = cfg.networks["cosmos-hub"]
        assert hub.id == "cosmos-hub"
        assert hub.api_url == "https://lcd.example.com"
        assert hub.staking_denom == "ATOM"
        assert hub.coin_lookup[0].chain_to_view_conversion_factor == Decimal(
            "0.000001"
        )
        assert hub.gas_prices == {"uatom": Decimal("0.0025")}

    def test_defaults_for_omitted_fields(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        polkadot = cfg.networks["polkadot"]
        assert polkadot.title == "polkadot"
        assert polkadot.blocks_per_era == 600
        assert polkadot.block_time_seconds == 6
        assert cfg.retrieval.cache_flush_threshold == 100_000

    def test_fiat_and_links(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert cfg.fiat.pyth.feeds == {"ATOM": "aaa", "DOT": "bbb"}
        assert cfg.links["cosmos-hub"][0]["title"] == "Forum"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_LCD_URL", "https://lcd.env.test")
        cfg_file = _write(
            tmp_path,
            """\
            networks:
              hub:
                api_url: "${TEST_LCD_URL}"
                coin_lookup:
                  - {chain_denom: uatom, view_denom: ATOM}
            """,
        )
        cfg = load_config(cfg_file)
        assert cfg.networks["hub"].api_url == "https://lcd.env.test"


class TestValidation:
    def test_no_networks_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(tmp_path, "networks: {}\n")
        with pytest.raises(ValueError, match="At least one network"):
            load_config(cfg_file)

    def test_unknown_network_type_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            """\
            networks:
              eth:
                network_type: ethereum
                api_url: https://eth.test
                coin_lookup:
                  - {chain_denom: wei, view_denom: ETH}
            """,
        )
        with pytest.raises(ValueError, match="unknown network_type"):
            load_config(cfg_file)

    def test_missing_api_url_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            """\
            networks:
              hub:
                coin_lookup:
                  - {chain_denom: uatom, view_denom: ATOM}
            """,
        )
        with pytest.raises(ValueError, match="no api_url"):
            load_config(cfg_file)

    def test_missing_coin_lookup_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            """\
            networks:
              hub:
                api_url: https://lcd.test
            """,
        )
        with pytest.raises(ValueError, match="no coin_lookup"):
            load_config(cfg_file)

    def test_zero_max_pages_raises(self, tmp_path: Path) -> None:
        cfg_file = _write(
            tmp_path,
            """\
            retrieval:
              max_pages: 0
            networks:
              hub:
                api_url: https://lcd.test
                coin_lookup:
                  - {chain_denom: uatom, view_denom: ATOM}
            """,
        )
        with pytest.raises(ValueError, match="max_pages"):
            load_config(cfg_file)


class TestGasPrice:
    def test_view_denom_price(self, cosmos_network: NetworkConfig) -> None:
        assert cosmos_network.gas_price("ATOM") == Decimal("0.0000000025")

    def test_price_keyed_by_view_denom(self) -> None:
        network = NetworkConfig(id="n", gas_prices={"ATOM": Decimal("0.1")})
        assert network.gas_price("ATOM") == Decimal("0.1")

    def test_unknown_denom(self, polkadot_network: NetworkConfig) -> None:
        assert polkadot_network.gas_price("DOT") is None
