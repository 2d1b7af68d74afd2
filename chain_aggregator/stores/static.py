"""Network store serving governance links from configuration."""
from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Sequence

logger = logging.getLogger(__name__)


class StaticNetworkStore:
    """Links come from ``config.yaml``; there is no reward index behind it."""

    def __init__(self, links: Mapping[str, Sequence[Mapping[str, str]]]) -> None:
        self.links = {network_id: list(items) for network_id, items in links.items()}

    async def get_network_links(self, network_id: str) -> str:
        return json.dumps(self.links.get(network_id, []))

    async def get_rewards(self, address: str, network_id: str) -> list[dict[str, Any]]:
        logger.debug("No stored rewards for %s on %s", address, network_id)
        return []
