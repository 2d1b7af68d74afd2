"""Error taxonomy and the tri-state result of optional upstream queries."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union


class AggregatorError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInputError(AggregatorError):
    """Caller supplied something the network cannot answer for (never retried)."""


class UpstreamError(AggregatorError):
    """A single failed request against a node: transport error or non-2xx status."""

    def __init__(self, url: str, status: int | None = None, body: str = "") -> None:
        self.url = url
        self.status = status
        self.body = body
        detail = f"HTTP {status}" if status is not None else "transport error"
        super().__init__(f"{detail} for {url}: {body[:200]}")


class UpstreamUnavailableError(AggregatorError):
    """All retry attempts for a query failed."""

    def __init__(self, url: str, network_id: str, attempts: int = 0) -> None:
        self.url = url
        self.network_id = network_id
        self.attempts = attempts
        super().__init__(
            f"Error for query {url} in network {network_id} (tried {attempts} times)"
        )


class PaginationLimitError(UpstreamUnavailableError):
    """Paginated listing did not reach ``total_count`` within the page bound."""

    def __init__(
        self, url: str, network_id: str, pages: int, loaded: int, total: int
    ) -> None:
        super().__init__(url, network_id, attempts=pages)
        self.loaded = loaded
        self.total = total
        self.args = (
            f"Pagination for {url} in network {network_id} stopped after "
            f"{pages} pages with {loaded}/{total} items",
        )


# ---------------------------------------------------------------------------
# Query results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Found:
    value: Any


@dataclass(frozen=True)
class AbsentValid:
    """The node answered that the resource does not exist; treat as zero/empty."""

    reason: str = ""


@dataclass(frozen=True)
class Failed:
    error: AggregatorError


QueryResult = Union[Found, AbsentValid, Failed]
