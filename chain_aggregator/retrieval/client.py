"""REST client for chain nodes with fixed-delay retries and a response cache."""
from __future__ import annotations

import asyncio
import json
import logging
import ssl
from typing import Any, Iterable

import aiohttp
import certifi

from ..config import NetworkConfig, RetrievalConfig
from ..errors import (
    AbsentValid,
    Failed,
    Found,
    PaginationLimitError,
    QueryResult,
    UpstreamError,
    UpstreamUnavailableError,
)
from .cache import ResponseCache

logger = logging.getLogger(__name__)

PAGE_LIMIT = 1_000_000_000


class RestClient:
    """GET-only client for one network's REST endpoint.

    Every logical query runs through :meth:`get_retry`: an initial attempt
    plus ``retry_attempts`` retries, a fixed delay between them, and an
    oversized-cache flush before each attempt.
    """

    def __init__(
        self,
        network: NetworkConfig,
        retrieval: RetrievalConfig,
        cache: ResponseCache | None = None,
    ) -> None:
        self.network = network
        self.base_url = network.api_url.rstrip("/")
        self.timeout = network.rpc_timeout
        self._retrieval = retrieval
        self.cache = cache or ResponseCache(retrieval.cache_flush_threshold)

    def url_for(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    # ------------------------------------------------------------------
    # Single attempt
    # ------------------------------------------------------------------

    async def get(self, path: str, ttl: float = 0.0) -> Any:
        """One GET; non-2xx and transport failures raise :class:`UpstreamError`."""
        url = self.url_for(path)
        cached = self.cache.get(url)
        if cached is not None:
            return cached

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        status: int | None = None

        try:
            connector = aiohttp.TCPConnector(ssl=ssl_context)
            async with aiohttp.ClientSession(connector=connector) as session:
                async with session.get(
                    url, timeout=aiohttp.ClientTimeout(total=self.timeout)
                ) as response:
                    status = response.status
                    text = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise UpstreamError(url, None, str(e)) from e
        except UnicodeDecodeError as e:
            raise UpstreamError(url, status, f"Undecodable response body: {e}") from e

        if not 200 <= status < 300:
            raise UpstreamError(url, status, text)

        try:
            payload = json.loads(text)
        except ValueError as e:
            raise UpstreamError(url, status, text) from e

        self.cache.put(url, payload, len(text), ttl)
        return payload

    # ------------------------------------------------------------------
    # Retrying queries
    # ------------------------------------------------------------------

    async def _attempt(
        self,
        path: str,
        ttl: float,
        absent_markers: Iterable[str] = (),
        absent_statuses: Iterable[int] = (),
    ) -> QueryResult:
        url = self.url_for(path)
        markers = tuple(absent_markers)
        statuses = tuple(absent_statuses)
        attempts = self._retrieval.retry_attempts + 1
        last_error: UpstreamError | None = None

        for attempt in range(attempts):
            self.cache.flush_if_oversized()
            try:
                return Found(await self.get(path, ttl))
            except UpstreamError as e:
                if e.status in statuses or any(m in e.body for m in markers):
                    logger.debug("Absent resource at %s: HTTP %s", url, e.status)
                    return AbsentValid(e.body)
                last_error = e
                if attempt < attempts - 1:
                    logger.warning(
                        "Query %s in network %s failed (attempt %d/%d): %s",
                        url,
                        self.network.id,
                        attempt + 1,
                        attempts,
                        e,
                    )
                    await asyncio.sleep(self._retrieval.retry_delay_seconds)

        logger.error(
            "Error for query %s in network %s (tried %d times)",
            url,
            self.network.id,
            attempts,
        )
        error = UpstreamUnavailableError(url, self.network.id, attempts)
        error.__cause__ = last_error
        return Failed(error)

    async def get_retry(self, path: str, ttl: float | None = None) -> Any:
        """GET with retries; raises :class:`UpstreamUnavailableError` when exhausted."""
        if ttl is None:
            ttl = self._retrieval.retry_cache_ttl_seconds
        result = await self._attempt(path, ttl)
        if isinstance(result, Failed):
            raise result.error
        return result.value

    async def query(self, path: str, ttl: float | None = None) -> Any:
        """Retried GET with the ``{"height", "result"}`` envelope removed."""
        return _unwrap(await self.get_retry(path, ttl))

    async def query_optional(
        self,
        path: str,
        absent_markers: Iterable[str] = (),
        absent_statuses: Iterable[int] = (),
        ttl: float | None = None,
    ) -> QueryResult:
        """Retried GET where a known "does not exist" answer is a valid result.

        Responses matching ``absent_statuses`` or containing one of
        ``absent_markers`` return :class:`AbsentValid` straight away.
        """
        if ttl is None:
            ttl = self._retrieval.retry_cache_ttl_seconds
        result = await self._attempt(path, ttl, absent_markers, absent_statuses)
        if isinstance(result, Found):
            return Found(_unwrap(result.value))
        return result

    async def load_paginated(
        self,
        path: str,
        items_key: str = "txs",
        total_key: str = "total_count",
    ) -> list[Any]:
        """Collect every page of a listing until ``total_count`` items are loaded.

        Stops early on an empty page. Raises :class:`PaginationLimitError` when
        ``max_pages`` pages were fetched without reaching the total.
        """
        separator = "&" if "?" in path else "?"
        items: list[Any] = []
        total = 0
        max_pages = self._retrieval.max_pages

        for page in range(1, max_pages + 1):
            data = await self.get_retry(
                f"{path}{separator}limit={PAGE_LIMIT}&page={page}"
            )
            page_items = data.get(items_key) or []
            total = int(data.get(total_key) or 0)
            items.extend(page_items)

            if len(items) >= total:
                return items
            if not page_items:
                logger.warning(
                    "Empty page %d for %s with %d/%d items loaded",
                    page,
                    self.url_for(path),
                    len(items),
                    total,
                )
                return items

        raise PaginationLimitError(
            self.url_for(path), self.network.id, max_pages, len(items), total
        )


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and set(payload) == {"height", "result"}:
        return payload["result"]
    return payload
