"""RESPX-based HTTP mocking fixtures for CMR.

The ``mock_cmr`` fixture stands in for both CMR services the app talks to:
ingest (provider list) and search (collections and granules). Tests set the
page each search returns and inspect the recorded calls.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
import respx

CMR_URL = "https://cmr.earthdata.nasa.gov"


# === CMR Response Fixtures ===


def cmr_collection(
    concept_id: str = "C123-LPDAAC_ECS",
    provider_id: str = "LPDAAC_ECS",
    links: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """One collection entry as returned by ``collections.json``."""
    return {
        "id": concept_id,
        "data_center": provider_id,
        "title": f"Collection {concept_id}",
        "summary": "Land surface reflectance",
        "time_start": "2000-02-24T00:00:00.000Z",
        "time_end": None,
        "boxes": ["-90 -180 90 180"],
        "links": links or [],
    }


def cmr_granule(
    concept_id: str = "G1-LPDAAC_ECS",
    collection_id: str = "C123-LPDAAC_ECS",
    provider_id: str = "LPDAAC_ECS",
) -> dict[str, Any]:
    """One granule entry as returned by ``granules.json``."""
    return {
        "id": concept_id,
        "collection_concept_id": collection_id,
        "data_center": provider_id,
        "title": f"Granule {concept_id}",
        "time_start": "2020-01-01T00:00:00.000Z",
        "time_end": "2020-01-01T00:05:00.000Z",
        "updated": "2020-01-02T00:00:00.000Z",
        "cloud_cover": "12.5",
        "polygons": [["10 20 10 30 20 30 20 20 10 20"]],
        "links": [
            {
                "rel": "http://esipfed.org/ns/fedsearch/1.1/data#",
                "href": "https://data.example.com/G1.hdf",
                "type": "application/x-hdfeos",
            },
            {
                "rel": "http://esipfed.org/ns/fedsearch/1.1/browse#",
                "href": "https://data.example.com/G1.jpg",
            },
        ],
    }


@pytest.fixture
def cmr_providers() -> list[dict[str, str]]:
    """CMR ingest ``/providers`` payload."""
    return [
        {"provider-id": "LPDAAC_ECS", "short-name": "LPDAAC"},
        {"provider-id": "GES_DISC", "short-name": "GES_DISC"},
    ]


# === Mock CMR service ===


def feed_response(
    entries: list[dict[str, Any]],
    hits: int | None = None,
    search_after: str | None = None,
    status_code: int = 200,
) -> httpx.Response:
    headers = {}
    if hits is not None:
        headers["CMR-Hits"] = str(hits)
    if search_after:
        headers["CMR-Search-After"] = search_after
    return httpx.Response(status_code, json={"feed": {"entry": entries}}, headers=headers)


@dataclass
class FeedPage:
    entries: list[dict[str, Any]] = field(default_factory=list)
    hits: int | None = None
    search_after: str | None = None
    status_code: int = 200
    errors: list[str] | None = None

    def response(self) -> httpx.Response:
        if self.errors is not None:
            return httpx.Response(self.status_code, json={"errors": self.errors})
        return feed_response(self.entries, self.hits, self.search_after, self.status_code)


class MockCmr:
    """Stateful CMR double on top of a RESPX router."""

    def __init__(self, router: respx.MockRouter, providers: list[dict[str, str]]) -> None:
        self.router = router
        self.collections = FeedPage()
        self.granules = FeedPage()
        self.cloud_providers: set[str] = {"LPDAAC_ECS"}

        self.providers_route = router.get("/ingest/providers").mock(
            return_value=httpx.Response(200, json=providers)
        )
        self.collections_route = router.get("/search/collections.json").mock(
            side_effect=self._collections
        )
        self.granules_route = router.get("/search/granules.json").mock(
            side_effect=lambda request: self.granules.response()
        )

    @staticmethod
    def _is_cloud_check(request: httpx.Request) -> bool:
        params = request.url.params
        return params.get("cloud_hosted") == "true" and params.get("page_size") == "0"

    def _collections(self, request: httpx.Request) -> httpx.Response:
        if self._is_cloud_check(request):
            hits = 1 if request.url.params.get("provider") in self.cloud_providers else 0
            return feed_response([], hits=hits)
        return self.collections.response()

    def collection_searches(self) -> list[httpx.Request]:
        """Collection searches sent by the app, excluding provider cloud checks."""
        return [
            call.request
            for call in self.collections_route.calls
            if not self._is_cloud_check(call.request)
        ]

    def granule_searches(self) -> list[httpx.Request]:
        return [call.request for call in self.granules_route.calls]


@pytest.fixture
def mock_cmr(cmr_providers):
    """Mock CMR ingest and search endpoints with RESPX.

    Example:
        def test_example(mock_cmr):
            mock_cmr.granules = FeedPage([cmr_granule()], hits=1)
            ...
    """
    with respx.mock(base_url=CMR_URL, assert_all_called=False) as respx_mock:
        yield MockCmr(respx_mock, cmr_providers)
