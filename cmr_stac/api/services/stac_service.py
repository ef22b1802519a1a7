"""STAC request orchestration.

Each operation runs one linear pipeline:

    strip extensions -> resolve provider -> convert params -> CMR search
    -> build representation -> assemble links -> validate -> apply extensions

The service holds only collaborators; every value computed for a request is
local to that request.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from cmr_stac.api.models.search_request import SearchRequest, resolve_params
from cmr_stac.conversion.cmr_to_stac import (
    collection_to_stac,
    granule_to_item,
    granules_to_feature_collection,
)
from cmr_stac.conversion.param_converter import (
    COLLECTION_SEARCH_CONVERSION_MAP,
    ITEM_SEARCH_CONVERSION_MAP,
    convert_params,
)
from cmr_stac.conversion.pipeline import ExtensionPipeline, ResponseContext
from cmr_stac.core.cmr_client import CmrClient
from cmr_stac.core.config.stac import StacConfig
from cmr_stac.core.exceptions import ItemNotFound
from cmr_stac.stac.conformance import CONFORMANCE
from cmr_stac.stac.context import StacContext, get_base_url
from cmr_stac.stac.links import (
    GEOJSON,
    assemble_links,
    collection_entry_links,
    ensure_items_link,
    links_of,
    prepend_links,
    provider_catalog_links,
    provider_child_links,
    root_catalog_links,
    with_links,
)
from cmr_stac.stac.providers import (
    Provider,
    base_url_for_collection,
    collections_description,
    is_all_provider,
    resolve_provider_filter,
)
from cmr_stac.validation import SchemaValidator

logger = logging.getLogger(__name__)


class StacService:
    """Serves STAC documents backed by CMR searches."""

    def __init__(
        self,
        client: CmrClient,
        validator: SchemaValidator,
        pipeline: ExtensionPipeline,
        stac_config: StacConfig,
    ) -> None:
        self.client = client
        self.validator = validator
        self.pipeline = pipeline
        self.stac_config = stac_config

    @property
    def stac_version(self) -> str:
        return self.stac_config.stac_version

    @property
    def cmr_search_url(self) -> str:
        return self.client.config.search_url

    # === Catalogs ===

    def root_catalog(self, context: StacContext, providers: list[Provider]) -> dict[str, Any]:
        """Root catalog with one child link per provider (ALL included by the caller)."""
        catalog_id = f"CMR-{context.id}"
        links = [*root_catalog_links(context), *provider_child_links(context, providers)]
        return with_links(
            {
                "type": "Catalog",
                "id": catalog_id,
                "stac_version": self.stac_version,
                "conformsTo": CONFORMANCE,
                "title": f"NASA Common Metadata Repository {catalog_id} API",
                "description": (
                    f"This is the landing page for {catalog_id}. "
                    "Each provider link contains a STAC endpoint."
                ),
            },
            links,
        )

    def provider_catalog(self, context: StacContext, provider: Provider) -> dict[str, Any]:
        return with_links(
            {
                "type": "Catalog",
                "id": provider.provider_id,
                "stac_version": self.stac_version,
                "conformsTo": CONFORMANCE,
                "title": provider.short_name,
                "description": f"Root catalog for {provider.provider_id}",
            },
            provider_catalog_links(context),
        )

    # === Item search ===

    async def search_items(
        self,
        context: StacContext,
        provider_id: str,
        request: SearchRequest,
        collection_id: str | None = None,
    ) -> dict[str, Any]:
        """Item search, optionally scoped to one collection."""
        original_query = resolve_params(request)
        core_params, extension_params = self.pipeline.strip(original_query)
        if collection_id is not None:
            core_params = {**core_params, "collections": [collection_id]}

        query = resolve_provider_filter(core_params, provider_id)
        cmr_query = convert_params(query, ITEM_SEARCH_CONVERSION_MAP)
        logger.debug(f"Item search for {provider_id}: {cmr_query}")

        search_result = await self.client.search("items", cmr_query)
        feature_collection = granules_to_feature_collection(
            search_result.items, context.stac_root, self.stac_version, self.cmr_search_url
        )

        parent_title = "Collection" if collection_id is not None else "Provider Catalog"
        assembled = assemble_links(
            context,
            search_result.cursor,
            original_query,
            parent_title=parent_title,
            next_media_type=GEOJSON,
        )
        feature_collection = with_links(
            feature_collection, prepend_links(assembled, links_of(feature_collection))
        )

        await self.validator.validate("items", feature_collection)
        return self.pipeline.apply(
            feature_collection,
            extension_params,
            ResponseContext(search_result=search_result, query=core_params),
        )

    async def get_item(
        self, context: StacContext, provider_id: str, collection_id: str, item_id: str
    ) -> dict[str, Any]:
        query = resolve_provider_filter(
            {"ids": [item_id], "collections": [collection_id]}, provider_id
        )
        search_result = await self.client.search(
            "items", convert_params(query, ITEM_SEARCH_CONVERSION_MAP)
        )
        if not search_result.items:
            raise ItemNotFound(
                f"Could not find item [{item_id}] in collection [{collection_id}]"
            )
        item = granule_to_item(
            search_result.items[0], context.stac_root, self.stac_version, self.cmr_search_url
        )
        await self.validator.validate("item", item)
        return item

    # === Collections ===

    def _collection_items_url(self, base_url: str, collection: dict[str, Any]) -> str:
        collection_id = quote(collection["id"], safe="")
        return f"{base_url_for_collection(base_url, collection)}/{collection_id}/items"

    async def list_collections(
        self, context: StacContext, provider_id: str, request: SearchRequest
    ) -> dict[str, Any]:
        """Collection listing with cursor pagination."""
        original_query = resolve_params(request)
        core_params, extension_params = self.pipeline.strip(original_query)
        if context.is_cloud_stac:
            core_params = {**core_params, "cloud_hosted": True}

        query = resolve_provider_filter(core_params, provider_id)
        cmr_query = convert_params(query, COLLECTION_SEARCH_CONVERSION_MAP)
        logger.debug(f"Collection search for {provider_id}: {cmr_query}")

        search_result = await self.client.search("collections", cmr_query)

        base_url = get_base_url(context.self)
        collections = []
        for entry in search_result.items:
            collection = collection_to_stac(entry, self.stac_version, self.cmr_search_url)
            links = prepend_links(
                collection_entry_links(context, collection["id"]), links_of(collection)
            )
            links = ensure_items_link(links, self._collection_items_url(base_url, collection))
            collections.append(with_links(collection, links))

        response = with_links(
            {
                "description": collections_description(provider_id),
                "collections": collections,
            },
            assemble_links(context, search_result.cursor, original_query),
        )

        await self.validator.validate("collections", response)
        return self.pipeline.apply(
            response,
            extension_params,
            ResponseContext(search_result=search_result, query=core_params),
        )

    async def get_collection(
        self, context: StacContext, provider_id: str, collection_id: str
    ) -> dict[str, Any]:
        """Single collection lookup.

        Raises:
            ItemNotFound: If CMR has no such collection for the provider
        """
        provider_filter = None if is_all_provider(provider_id) else provider_id
        entry = await self.client.find_collection(provider_filter, collection_id)
        if entry is None:
            raise ItemNotFound(
                f"Could not find collection [{collection_id}] in provider [{provider_id}]"
            )

        collection = collection_to_stac(entry, self.stac_version, self.cmr_search_url)
        links = prepend_links(assemble_links(context), links_of(collection))
        collections_url = context.path.rsplit("/", 1)[0]
        links = ensure_items_link(links, self._collection_items_url(collections_url, collection))
        collection = with_links(collection, links)

        await self.validator.validate("collection", collection)
        return collection
