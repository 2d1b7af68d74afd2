"""Fiat valuation backed by Pyth Network Hermes prices."""
from __future__ import annotations

import logging
import ssl
from decimal import Decimal
from typing import Sequence

import aiohttp
import certifi

from ..config import PythConfig
from ..models import Coin

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES = ("USD",)
PRICE_TIMEOUT_SECONDS = 10


class PythFiatValues:
    """Value coins in USD from Pyth price feeds keyed by view denom."""

    def __init__(self, config: PythConfig) -> None:
        self.hermes_url = config.hermes_url
        self.price_feeds = dict(config.feeds)

    async def fetch_prices(self, denoms: Sequence[str]) -> dict[str, Decimal]:
        """Latest USD price per denom; denoms without a configured feed are skipped."""
        prices: dict[str, Decimal] = {}

        feeds = {d: self.price_feeds[d] for d in denoms if d in self.price_feeds}
        feed_ids = sorted(set(feeds.values()))
        if not feed_ids:
            return prices

        query_params = "&".join(f"ids[]={fid}" for fid in feed_ids)
        url = f"{self.hermes_url}?{query_params}"

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        try:
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=PRICE_TIMEOUT_SECONDS)
                ) as response:
                    if response.status != 200:
                        logger.error(
                            "Error fetching prices from Pyth: HTTP %s", response.status
                        )
                        return prices
                    data = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            logger.error("Error fetching prices from Pyth: %s", e)
            return prices

        # Hermes returns feed ids without the 0x prefix
        id_to_denoms: dict[str, list[str]] = {}
        for denom, feed_id in feeds.items():
            id_to_denoms.setdefault(feed_id.removeprefix("0x"), []).append(denom)

        for item in data.get("parsed", []):
            feed_id = str(item.get("id", "")).removeprefix("0x")
            price_data = item.get("price", {})
            price = Decimal(int(price_data.get("price", 0))).scaleb(
                int(price_data.get("expo", 0))
            )
            for denom in id_to_denoms.get(feed_id, []):
                prices[denom] = price

        for denom, price in sorted(prices.items()):
            logger.debug("Pyth price %s: $%s", denom, price)
        return prices

    async def calculate_fiat_values(
        self, coins: Sequence[Coin], currency: str
    ) -> dict[str, Decimal | None]:
        if currency.upper() not in SUPPORTED_CURRENCIES:
            logger.warning("Unsupported fiat currency %s", currency)
            return {coin.denom: None for coin in coins}

        prices = await self.fetch_prices([coin.denom for coin in coins])
        values: dict[str, Decimal | None] = {}
        for coin in coins:
            price = prices.get(coin.denom)
            values[coin.denom] = (
                (coin.amount * price).quantize(Decimal("0.01"))
                if price is not None
                else None
            )
        return values
