"""Async CMR search client.

This is the search collaborator: it sends already-converted CMR parameters
and hands back raw CMR entries. It performs no retries; httpx transport
errors propagate to the caller unchanged.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx

from cmr_stac.core.config.cmr import CmrConfig
from cmr_stac.core.exceptions import CmrError
from cmr_stac.stac.providers import Provider

logger = logging.getLogger(__name__)

SearchKind = Literal["items", "collections"]

SEARCH_AFTER_HEADER = "CMR-Search-After"
HITS_HEADER = "CMR-Hits"
DEFAULT_PAGE_SIZE = 10

_SEARCH_PATHS: dict[str, str] = {
    "items": "granules.json",
    "collections": "collections.json",
}


@dataclass(frozen=True)
class SearchResult:
    """One page of CMR results.

    Attributes:
        items: Raw CMR JSON entries
        cursor: Opaque continuation token, set only when another page exists
        total: Total number of hits reported by CMR
    """

    items: list[dict[str, Any]] = field(default_factory=list)
    cursor: str | None = None
    total: int | None = None


def _parse_hits(value: str | None) -> int | None:
    try:
        return int(value) if value is not None else None
    except ValueError:
        return None


class CmrClient:
    """Thin async wrapper over the CMR search and ingest APIs."""

    def __init__(
        self, cmr_config: CmrConfig, http_client: httpx.AsyncClient | None = None
    ) -> None:
        self.config = cmr_config
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=cmr_config.request_timeout)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _get(
        self,
        url: str,
        params: Mapping[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        logger.debug(f"CMR GET {url} params={dict(params or {})}")
        response = await self._client.get(url, params=params, headers=headers)
        if response.is_error:
            errors: list[str] = []
            try:
                errors = [str(e) for e in response.json().get("errors", [])]
            except ValueError:
                errors = [response.text] if response.text else []
            logger.warning(f"CMR returned {response.status_code} for {url}: {errors}")
            raise CmrError(response.status_code, str(response.request.url), errors)
        return response

    async def search(self, kind: SearchKind, query: Mapping[str, Any]) -> SearchResult:
        """Run a granule (``items``) or collection search.

        A ``cursor`` key in ``query`` is sent as the CMR-Search-After header
        rather than as a parameter.
        """
        params = dict(query)
        cursor = params.pop("cursor", None)
        headers = {SEARCH_AFTER_HEADER: str(cursor)} if cursor else None

        url = f"{self.config.search_url}/{_SEARCH_PATHS[kind]}"
        response = await self._get(url, params=params, headers=headers)

        entries = response.json().get("feed", {}).get("entry", [])
        total = _parse_hits(response.headers.get(HITS_HEADER))
        page_size = params.get("page_size", DEFAULT_PAGE_SIZE)
        try:
            page_size = int(page_size)
        except (TypeError, ValueError):
            page_size = DEFAULT_PAGE_SIZE

        # CMR sends a search-after token with every non-empty page; only a
        # full page can be followed by another one.
        next_cursor = response.headers.get(SEARCH_AFTER_HEADER)
        has_more = bool(entries) and len(entries) >= page_size
        if total is not None:
            has_more = has_more and total > len(entries)

        logger.debug(f"CMR {kind} search returned {len(entries)} of {total} hits")
        return SearchResult(items=entries, cursor=next_cursor if has_more else None, total=total)

    async def find_collection(
        self, provider_id: str | None, collection_id: str
    ) -> dict[str, Any] | None:
        """Look up one collection by concept id, optionally within a provider."""
        query: dict[str, Any] = {"concept_id": collection_id}
        if provider_id:
            query["provider"] = provider_id
        result = await self.search("collections", query)
        return result.items[0] if result.items else None

    async def list_providers(self) -> list[Provider]:
        response = await self._get(f"{self.config.ingest_url}/providers")
        return [Provider.from_cmr(entry) for entry in response.json()]

    async def has_cloud_collections(self, provider_id: str) -> bool:
        """Whether the provider holds at least one cloud-hosted collection."""
        response = await self._get(
            f"{self.config.search_url}/collections.json",
            params={"provider": provider_id, "cloud_hosted": "true", "page_size": 0},
        )
        return (_parse_hits(response.headers.get(HITS_HEADER)) or 0) > 0
