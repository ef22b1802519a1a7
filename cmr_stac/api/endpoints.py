from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Request

from cmr_stac.api.models import BodySource, QuerySource, SearchBody
from cmr_stac.api.services.stac_service import StacService
from cmr_stac.core.config import config
from cmr_stac.core.logging import logger
from cmr_stac.core.provider_cache import ProviderCache
from cmr_stac.stac.context import StacContext
from cmr_stac.stac.providers import ProviderSnapshot, find_provider, with_all_provider

router = APIRouter()


def get_service(request: Request) -> StacService:
    service: StacService = request.app.state.stac_service
    return service


def get_provider_cache(request: Request) -> ProviderCache:
    cache: ProviderCache = request.app.state.provider_cache
    return cache


def get_stac_context(request: Request) -> StacContext:
    return StacContext.from_request(request, config.stac)


def get_snapshot(
    context: StacContext = Depends(get_stac_context),
    cache: ProviderCache = Depends(get_provider_cache),
) -> ProviderSnapshot:
    """Provider list for the requested catalog flavour."""
    return cache.snapshot("cloud" if context.is_cloud_stac else "standard")


@router.get("/health")
async def health_check(cache: ProviderCache = Depends(get_provider_cache)) -> dict[str, Any]:
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "cmr_url": config.cmr_url,
        "stac_version": config.stac_version,
        "providers": len(cache.snapshot("standard")),
        "cloud_providers": len(cache.snapshot("cloud")),
    }


@router.get("/")
async def root_catalog(
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    return service.root_catalog(context, with_all_provider(snapshot))


@router.get("/{provider_id}")
async def provider_catalog(
    provider_id: str,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    provider = find_provider(snapshot, provider_id)
    return service.provider_catalog(context, provider)


@router.get("/{provider_id}/search")
async def search_get(
    provider_id: str,
    request: Request,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    find_provider(snapshot, provider_id)
    logger.debug(f"GET /{provider_id}/search {request.url.query}")
    search = QuerySource.from_query_params(request.query_params)
    return await service.search_items(context, provider_id, search)


@router.post("/{provider_id}/search")
async def search_post(
    provider_id: str,
    body: SearchBody,
    request: Request,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    find_provider(snapshot, provider_id)
    logger.debug(f"POST /{provider_id}/search {body.to_params()}")
    search = BodySource(
        params=body.to_params(),
        query=QuerySource.from_query_params(request.query_params).params,
    )
    return await service.search_items(context, provider_id, search)


@router.get("/{provider_id}/collections")
async def list_collections(
    provider_id: str,
    request: Request,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    find_provider(snapshot, provider_id)
    search = QuerySource.from_query_params(request.query_params)
    return await service.list_collections(context, provider_id, search)


@router.get("/{provider_id}/collections/{collection_id}")
async def get_collection(
    provider_id: str,
    collection_id: str,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    find_provider(snapshot, provider_id)
    return await service.get_collection(context, provider_id, collection_id)


@router.get("/{provider_id}/collections/{collection_id}/items")
async def collection_items(
    provider_id: str,
    collection_id: str,
    request: Request,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    find_provider(snapshot, provider_id)
    search = QuerySource.from_query_params(request.query_params)
    return await service.search_items(context, provider_id, search, collection_id=collection_id)


@router.get("/{provider_id}/collections/{collection_id}/items/{item_id}")
async def get_item(
    provider_id: str,
    collection_id: str,
    item_id: str,
    context: StacContext = Depends(get_stac_context),
    snapshot: ProviderSnapshot = Depends(get_snapshot),
    service: StacService = Depends(get_service),
) -> dict[str, Any]:
    find_provider(snapshot, provider_id)
    return await service.get_item(context, provider_id, collection_id, item_id)
