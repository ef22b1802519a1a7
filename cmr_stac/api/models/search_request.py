"""Search request parameter sources.

A search arrives either as a query string (GET) or as a JSON body (POST).
The source is kept explicit until resolve_params() merges it into the one
mapping the rest of the pipeline works on.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from starlette.datastructures import QueryParams


@dataclass(frozen=True, slots=True)
class QuerySource:
    """Parameters from a query string."""

    params: Mapping[str, Any]
    source: Literal["query"] = "query"

    @classmethod
    def from_query_params(cls, query_params: QueryParams) -> QuerySource:
        """Collapse repeated keys (``?ids=a&ids=b``) into lists."""
        params: dict[str, Any] = {}
        for key in query_params.keys():
            values = query_params.getlist(key)
            params[key] = values[0] if len(values) == 1 else values
        return cls(params=params)


@dataclass(frozen=True, slots=True)
class BodySource:
    """Parameters from a JSON body, plus any query string sent alongside."""

    params: Mapping[str, Any]
    query: Mapping[str, Any] = field(default_factory=dict)
    source: Literal["body"] = "body"


SearchRequest = QuerySource | BodySource


def resolve_params(request: SearchRequest) -> dict[str, Any]:
    """Merge a search request into one parameter mapping.

    Body values take precedence over query-string values of the same name.
    """
    if isinstance(request, BodySource):
        return {**request.query, **request.params}
    return dict(request.params)


class SearchBody(BaseModel):
    """POST /{provider_id}/search body.

    Unknown members are kept and forwarded like unknown query parameters.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    bbox: list[float] | None = None
    datetime: str | None = None
    intersects: dict[str, Any] | None = None
    limit: int | None = None
    collections: list[str] | None = None
    ids: list[str] | None = None
    sortby: list[dict[str, str]] | str | None = None
    field_selection: dict[str, list[str]] | str | None = Field(None, alias="fields")
    cursor: str | None = None

    def to_params(self) -> dict[str, Any]:
        """Body members that were actually sent, under their wire names."""
        return self.model_dump(by_alias=True, exclude_none=True)
