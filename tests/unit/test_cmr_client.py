"""Tests for the async CMR client with RESPX mocking."""

import httpx
import pytest
import pytest_asyncio

from cmr_stac.core.cmr_client import CmrClient
from cmr_stac.core.config.cmr import CmrConfig
from cmr_stac.core.exceptions import CmrError
from cmr_stac.core.provider_cache import ProviderCache
from tests.fixtures.mock_http import CMR_URL, FeedPage, cmr_collection, cmr_granule

CMR_CONFIG = CmrConfig(
    cmr_url=CMR_URL,
    ingest_url=f"{CMR_URL}/ingest",
    request_timeout=5,
    provider_refresh_interval=0,
)


@pytest_asyncio.fixture
async def client():
    cmr_client = CmrClient(CMR_CONFIG)
    yield cmr_client
    await cmr_client.aclose()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_search_sends_cursor_as_header(mock_cmr, client):
    mock_cmr.granules = FeedPage(
        [cmr_granule("G1"), cmr_granule("G2")], hits=5, search_after="next"
    )

    result = await client.search("items", {"page_size": 2, "cursor": "abc123", "provider": "P"})

    request = mock_cmr.granule_searches()[0]
    assert request.headers["CMR-Search-After"] == "abc123"
    assert "cursor" not in request.url.params
    assert request.url.params["provider"] == "P"
    assert [entry["id"] for entry in result.items] == ["G1", "G2"]
    assert result.cursor == "next"
    assert result.total == 5


@pytest.mark.unit
@pytest.mark.asyncio
async def test_no_cursor_on_last_page(mock_cmr, client):
    mock_cmr.granules = FeedPage([cmr_granule("G1")], hits=1, search_after="stale")

    result = await client.search("items", {"page_size": 2})

    assert result.cursor is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_no_cursor_when_page_full_but_all_hits_returned(mock_cmr, client):
    mock_cmr.granules = FeedPage([cmr_granule("G1"), cmr_granule("G2")], hits=2, search_after="x")

    result = await client.search("items", {"page_size": 2})

    assert result.cursor is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_cmr_error_carries_status_and_messages(mock_cmr, client):
    mock_cmr.granules = FeedPage(status_code=400, errors=["Invalid temporal"])

    with pytest.raises(CmrError) as exc_info:
        await client.search("items", {"temporal": "nope"})

    assert exc_info.value.cmr_status == 400
    assert exc_info.value.errors == ["Invalid temporal"]
    assert exc_info.value.status_code == 502


@pytest.mark.unit
@pytest.mark.asyncio
async def test_find_collection(mock_cmr, client):
    mock_cmr.collections = FeedPage([cmr_collection()], hits=1)

    entry = await client.find_collection("LPDAAC_ECS", "C123-LPDAAC_ECS")

    assert entry["id"] == "C123-LPDAAC_ECS"
    params = mock_cmr.collection_searches()[0].url.params
    assert params["concept_id"] == "C123-LPDAAC_ECS"
    assert params["provider"] == "LPDAAC_ECS"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_find_collection_missing(mock_cmr, client):
    assert await client.find_collection(None, "C999-NOPE") is None
    assert "provider" not in mock_cmr.collection_searches()[0].url.params


@pytest.mark.unit
@pytest.mark.asyncio
async def test_provider_cache_snapshots(mock_cmr, client):
    cache = ProviderCache(client)

    await cache.start()

    assert [p.provider_id for p in cache.list_providers()] == ["LPDAAC_ECS", "GES_DISC"]
    assert [p.provider_id for p in cache.list_providers("cloud")] == ["LPDAAC_ECS"]
    assert cache.snapshot().get("GES_DISC").short_name == "GES_DISC"
    await cache.stop()


@pytest.mark.unit
@pytest.mark.asyncio
async def test_failed_refresh_keeps_previous_snapshot(mock_cmr, client):
    cache = ProviderCache(client)
    await cache.refresh()

    mock_cmr.providers_route.mock(side_effect=httpx.ConnectError("down"))
    await cache.start()

    assert len(cache.snapshot()) == 2
