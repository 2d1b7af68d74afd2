"""Network store protocol: data persisted outside the chain."""
from typing import Any, Protocol


class NetworkStore(Protocol):
    """Read access to per-network links and indexed rewards."""

    async def get_network_links(self, network_id: str) -> str: ...

    async def get_rewards(
        self, address: str, network_id: str
    ) -> list[dict[str, Any]]: ...
