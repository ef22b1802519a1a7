"""API models for search requests."""

from cmr_stac.api.models.search_request import (
    BodySource,
    QuerySource,
    SearchBody,
    SearchRequest,
    resolve_params,
)

__all__ = ["BodySource", "QuerySource", "SearchBody", "SearchRequest", "resolve_params"]
