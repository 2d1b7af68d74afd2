"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

NETWORK_TYPES = ("cosmos", "polkadot")

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CoinLookupConfig:
    chain_denom: str = ""
    view_denom: str = ""
    chain_to_view_conversion_factor: Decimal = Decimal(1)


@dataclass(frozen=True)
class NetworkConfig:
    id: str = ""
    title: str = ""
    network_type: str = "cosmos"
    chain_id: str = ""
    api_url: str = ""
    address_prefix: str = ""
    coin_lookup: tuple[CoinLookupConfig, ...] = ()
    gas_prices: dict[str, Decimal] = field(default_factory=dict)
    rpc_timeout: int = 30
    blocks_per_era: int = 14400
    block_time_seconds: int = 6
    treasury_address: str = ""

    @property
    def staking_denom(self) -> str:
        """View denom of the primary staking token (first coin lookup entry)."""
        return self.coin_lookup[0].view_denom if self.coin_lookup else ""

    @property
    def staking_coin_lookup(self) -> CoinLookupConfig:
        return self.coin_lookup[0]

    def get_coin_lookup(self, denom: str) -> CoinLookupConfig | None:
        """Find the lookup entry for a chain denom (or view denom)."""
        for lookup in self.coin_lookup:
            if lookup.chain_denom == denom:
                return lookup
        for lookup in self.coin_lookup:
            if lookup.view_denom == denom:
                return lookup
        return None

    def gas_price(self, view_denom: str) -> Decimal | None:
        """Gas price in view units; prices configured per chain denom are converted."""
        if view_denom in self.gas_prices:
            return self.gas_prices[view_denom]
        lookup = self.get_coin_lookup(view_denom)
        if lookup is None or lookup.chain_denom not in self.gas_prices:
            return None
        factor = lookup.chain_to_view_conversion_factor
        return self.gas_prices[lookup.chain_denom] * factor


@dataclass(frozen=True)
class RetrievalConfig:
    retry_attempts: int = 3
    retry_delay_seconds: float = 1.0
    retry_cache_ttl_seconds: float = 1.0
    cache_flush_threshold: int = 100_000
    max_pages: int = 100


@dataclass(frozen=True)
class PythConfig:
    hermes_url: str = "https://hermes.pyth.network/v2/updates/price/latest"
    feeds: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FiatConfig:
    provider: str = "pyth"
    pyth: PythConfig = field(default_factory=PythConfig)


@dataclass(frozen=True)
class AppConfig:
    retrieval: RetrievalConfig = field(default_factory=RetrievalConfig)
    networks: dict[str, NetworkConfig] = field(default_factory=dict)
    fiat: FiatConfig = field(default_factory=FiatConfig)
    links: dict[str, tuple[dict[str, str], ...]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_retrieval(raw: dict[str, Any]) -> RetrievalConfig:
    return RetrievalConfig(
        retry_attempts=int(raw.get("retry_attempts", 3)),
        retry_delay_seconds=float(raw.get("retry_delay_seconds", 1.0)),
        retry_cache_ttl_seconds=float(raw.get("retry_cache_ttl_seconds", 1.0)),
        cache_flush_threshold=int(raw.get("cache_flush_threshold", 100_000)),
        max_pages=int(raw.get("max_pages", 100)),
    )


def _build_coin_lookup(raw: list[dict[str, Any]]) -> tuple[CoinLookupConfig, ...]:
    lookups: list[CoinLookupConfig] = []
    for c in raw:
        lookups.append(
            CoinLookupConfig(
                chain_denom=c.get("chain_denom", ""),
                view_denom=c.get("view_denom", ""),
                # str() first so YAML floats like 1e-6 stay exact
                chain_to_view_conversion_factor=Decimal(
                    str(c.get("chain_to_view_conversion_factor", 1))
                ),
            )
        )
    return tuple(lookups)


def _build_networks(raw: dict[str, Any]) -> dict[str, NetworkConfig]:
    networks: dict[str, NetworkConfig] = {}
    for network_id, cfg in raw.items():
        networks[network_id] = NetworkConfig(
            id=network_id,
            title=cfg.get("title", network_id),
            network_type=cfg.get("network_type", "cosmos"),
            chain_id=cfg.get("chain_id", ""),
            api_url=cfg.get("api_url", "").rstrip("/"),
            address_prefix=cfg.get("address_prefix", ""),
            coin_lookup=_build_coin_lookup(cfg.get("coin_lookup", [])),
            gas_prices={
                denom: Decimal(str(price))
                for denom, price in cfg.get("gas_prices", {}).items()
            },
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
            blocks_per_era=int(cfg.get("blocks_per_era", 14400)),
            block_time_seconds=int(cfg.get("block_time_seconds", 6)),
            treasury_address=cfg.get("treasury_address", ""),
        )
    return networks


def _build_fiat(raw: dict[str, Any]) -> FiatConfig:
    pyth_raw = raw.get("pyth", {})
    return FiatConfig(
        provider=raw.get("provider", "pyth"),
        pyth=PythConfig(
            hermes_url=pyth_raw.get("hermes_url", PythConfig.hermes_url),
            feeds=dict(pyth_raw.get("feeds", {})),
        ),
    )


def _build_links(raw: dict[str, Any]) -> dict[str, tuple[dict[str, str], ...]]:
    return {
        network_id: tuple(dict(link) for link in links)
        for network_id, links in raw.items()
    }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from the package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        retrieval=_build_retrieval(raw.get("retrieval", {})),
        networks=_build_networks(raw.get("networks", {})),
        fiat=_build_fiat(raw.get("fiat", {})),
        links=_build_links(raw.get("links", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.networks:
        raise ValueError("At least one network must be configured")

    if cfg.retrieval.max_pages < 1:
        raise ValueError("retrieval.max_pages must be at least 1")

    for network in cfg.networks.values():
        if network.network_type not in NETWORK_TYPES:
            raise ValueError(
                f"Network '{network.id}' has unknown network_type "
                f"'{network.network_type}'"
            )
        if not network.api_url:
            raise ValueError(f"Network '{network.id}' has no api_url")
        if not network.coin_lookup:
            raise ValueError(f"Network '{network.id}' has no coin_lookup entries")
