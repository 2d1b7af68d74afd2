"""Integration tests for the REST client: retries, absent resources, pagination."""
from __future__ import annotations

import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from chain_aggregator.chains.cosmos import CosmosSource
from chain_aggregator.config import NetworkConfig, RetrievalConfig
from chain_aggregator.errors import (
    AbsentValid,
    Found,
    InvalidInputError,
    PaginationLimitError,
    UpstreamError,
    UpstreamUnavailableError,
)
from chain_aggregator.retrieval import RestClient

SESSION = "chain_aggregator.retrieval.client.aiohttp.ClientSession"
CONNECTOR = "chain_aggregator.retrieval.client.aiohttp.TCPConnector"
SLEEP = "chain_aggregator.retrieval.client.asyncio.sleep"


@pytest.fixture()
def client(
    cosmos_network: NetworkConfig, retrieval_config: RetrievalConfig
) -> RestClient:
    return RestClient(cosmos_network, retrieval_config)


def _response(status: int = 200, body: Any = None) -> AsyncMock:
    text = body if isinstance(body, str) else json.dumps(body or {})
    mock_response = AsyncMock()
    mock_response.status = status
    mock_response.text = AsyncMock(return_value=text)
    mock_response.__aenter__ = AsyncMock(return_value=mock_response)
    mock_response.__aexit__ = AsyncMock(return_value=None)
    return mock_response


def _mock_session(*responses: Any) -> AsyncMock:
    """Session whose successive GETs yield ``responses`` (exceptions are raised)."""
    mock_session = AsyncMock()
    mock_session.get = MagicMock(side_effect=list(responses))
    mock_session.__aenter__ = AsyncMock(return_value=mock_session)
    mock_session.__aexit__ = AsyncMock(return_value=None)
    return mock_session


class TestRetries:
    @pytest.mark.asyncio
    async def test_recovers_after_failures(self, client: RestClient) -> None:
        mock_session = _mock_session(
            _response(500, "boom"),
            aiohttp.ClientConnectionError("reset"),
            _response(200, {"result": "ok"}),
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with patch(SLEEP, new=AsyncMock()) as sleep:
                    result = await client.get_retry("node_info")

        assert result == {"result": "ok"}
        assert mock_session.get.call_count == 3
        assert sleep.await_count == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_all_attempts(self, client: RestClient) -> None:
        mock_session = _mock_session(*(_response(502, "bad gateway") for _ in range(4)))

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with patch(SLEEP, new=AsyncMock()):
                    with pytest.raises(UpstreamUnavailableError) as exc_info:
                        await client.get_retry("staking/pool")

        assert mock_session.get.call_count == 4
        assert exc_info.value.attempts == 4
        assert exc_info.value.network_id == "cosmos-hub"
        assert "tried 4 times" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_undecodable_body_is_retried(self, client: RestClient) -> None:
        garbled = _response(200)
        garbled.text = AsyncMock(
            side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        )
        mock_session = _mock_session(garbled, _response(200, {"result": "ok"}))

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with patch(SLEEP, new=AsyncMock()):
                    result = await client.get_retry("node_info")

        assert result == {"result": "ok"}
        assert mock_session.get.call_count == 2

    @pytest.mark.asyncio
    async def test_undecodable_body_raises_upstream_error(
        self, client: RestClient
    ) -> None:
        garbled = _response(200)
        garbled.text = AsyncMock(
            side_effect=UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        )

        with patch(SESSION, return_value=_mock_session(garbled)):
            with patch(CONNECTOR):
                with pytest.raises(UpstreamError) as exc_info:
                    await client.get("node_info")

        assert exc_info.value.status == 200
        assert "Undecodable" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_absent_marker_not_retried(self, client: RestClient) -> None:
        mock_session = _mock_session(
            _response(500, '{"error": "no delegation for this (address, validator)"}')
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                result = await client.query_optional(
                    "staking/delegators/cosmos1x/delegations/cosmosvaloper1y",
                    absent_markers=("no delegation",),
                )

        assert isinstance(result, AbsentValid)
        assert mock_session.get.call_count == 1

    @pytest.mark.asyncio
    async def test_absent_status(self, client: RestClient) -> None:
        mock_session = _mock_session(_response(404, "not found"))

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                result = await client.query_optional(
                    "auth/accounts/cosmos1x", absent_statuses=(404,)
                )

        assert isinstance(result, AbsentValid)

    @pytest.mark.asyncio
    async def test_query_unwraps_envelope(self, client: RestClient) -> None:
        mock_session = _mock_session(
            _response(200, {"height": "10", "result": {"bonded_tokens": "5"}})
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                optional = await client.query_optional("staking/pool")

        assert optional == Found({"bonded_tokens": "5"})


class TestCache:
    @pytest.mark.asyncio
    async def test_repeated_query_hits_cache(self, client: RestClient) -> None:
        mock_session = _mock_session(_response(200, {"result": [1]}))

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                first = await client.get_retry("validatorsets/latest")
                second = await client.get_retry("validatorsets/latest")

        assert first == second == {"result": [1]}
        assert mock_session.get.call_count == 1
        assert "https://lcd.example.com/validatorsets/latest" in client.cache

    @pytest.mark.asyncio
    async def test_zero_ttl_not_cached(self, client: RestClient) -> None:
        mock_session = _mock_session(_response(200, {"a": 1}), _response(200, {"a": 2}))

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                first = await client.get_retry("blocks/latest", ttl=0)
                second = await client.get_retry("blocks/latest", ttl=0)

        assert (first, second) == ({"a": 1}, {"a": 2})


class TestPagination:
    @pytest.mark.asyncio
    async def test_collects_all_pages_in_order(self, client: RestClient) -> None:
        mock_session = _mock_session(
            _response(200, {"total_count": "5", "txs": [1, 2]}),
            _response(200, {"total_count": "5", "txs": [3, 4]}),
            _response(200, {"total_count": "5", "txs": [5]}),
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                items = await client.load_paginated("txs?message.sender=cosmos1x")

        assert items == [1, 2, 3, 4, 5]
        urls = [c.args[0] for c in mock_session.get.call_args_list]
        assert urls[0].endswith("txs?message.sender=cosmos1x&limit=1000000000&page=1")
        assert urls[2].endswith("&page=3")

    @pytest.mark.asyncio
    async def test_empty_page_stops(self, client: RestClient) -> None:
        mock_session = _mock_session(
            _response(200, {"total_count": "5", "txs": [1]}),
            _response(200, {"total_count": "5", "txs": []}),
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                items = await client.load_paginated("txs?tx.height=3")

        assert items == [1]

    @pytest.mark.asyncio
    async def test_page_limit_raises(self, client: RestClient) -> None:
        mock_session = _mock_session(
            *(_response(200, {"total_count": "100", "txs": [n]}) for n in range(5))
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with pytest.raises(PaginationLimitError) as exc_info:
                    await client.load_paginated("txs?tx.height=3")

        assert exc_info.value.loaded == 5
        assert exc_info.value.total == 100


class TestProposalLookup:
    @pytest.fixture()
    def source(
        self, client: RestClient, mock_fiat: AsyncMock, mock_store: AsyncMock
    ) -> CosmosSource:
        return CosmosSource(client, mock_fiat, mock_store)

    @pytest.mark.asyncio
    async def test_outage_is_not_an_unknown_proposal(
        self, source: CosmosSource
    ) -> None:
        mock_session = _mock_session(*(_response(502, "bad gateway") for _ in range(4)))

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with patch(SLEEP, new=AsyncMock()):
                    with pytest.raises(UpstreamUnavailableError):
                        await source.get_proposal_by_id("7", {})

        assert mock_session.get.call_count == 4

    @pytest.mark.asyncio
    async def test_transient_500_is_retried(self, source: CosmosSource) -> None:
        mock_session = _mock_session(
            _response(500, "internal error"),
            _response(404, "not found"),
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with patch(SLEEP, new=AsyncMock()):
                    with pytest.raises(InvalidInputError, match="'7'"):
                        await source.get_proposal_by_id("7", {})

        assert mock_session.get.call_count == 2

    @pytest.mark.asyncio
    async def test_unknown_proposal_marker(self, source: CosmosSource) -> None:
        mock_session = _mock_session(
            _response(500, '{"error": "unknown proposal 7"}')
        )

        with patch(SESSION, return_value=mock_session):
            with patch(CONNECTOR):
                with pytest.raises(InvalidInputError):
                    await source.get_proposal_by_id("7", {})

        assert mock_session.get.call_count == 1
