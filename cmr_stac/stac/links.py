"""Hypermedia link assembly.

Every function here returns a new list of links; callers compose them, e.g.
``[*assemble_links(ctx, cursor), *existing, ...]`` followed by
ensure_items_link(). Nothing mutates a representation in place.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any
from urllib.parse import quote, urlencode

from cmr_stac.stac.context import StacContext, get_base_url
from cmr_stac.stac.providers import Provider

JSON = "application/json"
GEOJSON = "application/geo+json"

SERVICE_DOC_URL = (
    "https://wiki.earthdata.nasa.gov/display/ED/"
    "CMR+SpatioTemporal+Asset+Catalog+%28CMR-STAC%29+Documentation"
)


@dataclass(frozen=True, slots=True)
class Link:
    rel: str
    href: str
    type: str | None = None
    title: str | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Link:
        return cls(
            rel=str(data["rel"]),
            href=str(data["href"]),
            type=data.get("type"),
            title=data.get("title"),
        )

    def to_dict(self) -> dict[str, str]:
        result = {"rel": self.rel, "href": self.href}
        if self.type is not None:
            result["type"] = self.type
        if self.title is not None:
            result["title"] = self.title
        return result


def links_of(representation: Mapping[str, Any]) -> list[Link]:
    return [Link.from_dict(link) for link in representation.get("links") or []]


def with_links(representation: Mapping[str, Any], links: Iterable[Link]) -> dict[str, Any]:
    """Copy of ``representation`` whose ``links`` are replaced by ``links``."""
    return {**representation, "links": [link.to_dict() for link in links]}


def _fields_value(value: Any) -> Any:
    """Body ``{"include": [...], "exclude": [...]}`` -> ``"a,b,-c"``."""
    if not isinstance(value, Mapping):
        return _query_value(value)
    terms = [*map(str, value.get("include") or [])]
    terms += [f"-{term}" for term in value.get("exclude") or []]
    return ",".join(terms)


def _sortby_value(value: Any) -> Any:
    """Body ``[{"field": f, "direction": "desc"}]`` -> ``"-f"``."""
    if not isinstance(value, (list, tuple)) or not all(isinstance(v, Mapping) for v in value):
        return _query_value(value)
    terms = []
    for spec in value:
        descending = str(spec.get("direction", "asc")).lower() == "desc"
        terms.append(f"-{spec['field']}" if descending else str(spec["field"]))
    return ",".join(terms)


def _query_value(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        if any(isinstance(v, (dict, list)) for v in value):
            return json.dumps(value)
        return ",".join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value)
    return value


# Body-only shapes rewritten to the form the same parameter takes in a query string
_QUERY_ENCODERS: dict[str, Callable[[Any], Any]] = {
    "fields": _fields_value,
    "sortby": _sortby_value,
}


def stringify_query(query: Mapping[str, Any]) -> str:
    """Encode query parameters so a GET of the result repeats the search.

    Arrays go on one comma-separated key, ``fields`` and ``sortby`` use their
    query-string syntax, and any other object (``intersects``) is sent as JSON.
    """
    return urlencode(
        {key: _QUERY_ENCODERS.get(key, _query_value)(value) for key, value in query.items()}
    )


def next_link(
    context: StacContext,
    cursor: str,
    original_query: Mapping[str, Any] | None = None,
    media_type: str = JSON,
) -> Link:
    """Link to the next page: the original query with ``cursor`` appended last."""
    query = {k: v for k, v in (original_query or {}).items() if k != "cursor"}
    query["cursor"] = cursor
    return Link(
        rel="next",
        href=f"{context.stac_root}{context.request_path}?{stringify_query(query)}",
        type=media_type,
    )


def assemble_links(
    context: StacContext,
    next_cursor: str | None = None,
    original_query: Mapping[str, Any] | None = None,
    parent_title: str | None = "Provider Collections",
    next_media_type: str = JSON,
) -> list[Link]:
    """Canonical self, root, parent and optional next links for a resource.

    Args:
        context: URLs of the current request
        next_cursor: Continuation cursor from CMR; a next link is added iff set
        original_query: Client query merged from query string and body
        parent_title: Title of the parent link
        next_media_type: Media type of the next page

    Returns:
        ``[self, root, parent]`` or ``[self, root, parent, next]``
    """
    parent = context.path.rsplit("/", 1)[0]

    links = [
        Link(rel="self", href=context.self, type=JSON),
        Link(rel="root", href=context.stac_root, type=JSON, title="Root Catalog"),
        Link(rel="parent", href=parent, type=JSON, title=parent_title),
    ]
    if next_cursor:
        links.append(next_link(context, next_cursor, original_query, next_media_type))
    return links


def prepend_links(assembled: Sequence[Link], existing: Iterable[Link]) -> list[Link]:
    """Assembled links first, then every pre-existing link untouched."""
    return [*assembled, *existing]


def ensure_items_link(links: Sequence[Link], candidate_url: str) -> list[Link]:
    """Guarantee exactly one ``items`` link.

    An existing items link (e.g. a collection that declares its own STAC API)
    wins and is never overwritten.
    """
    if any(link.rel == "items" for link in links):
        return list(links)
    return [
        *links,
        Link(rel="items", href=candidate_url, type=GEOJSON, title="Collection Items"),
    ]


def collection_entry_links(context: StacContext, collection_id: str) -> list[Link]:
    """Self and root links of one collection inside a listing."""
    return [
        Link(
            rel="self",
            href=f"{get_base_url(context.self)}/{quote(collection_id, safe='')}",
            type=JSON,
        ),
        Link(rel="root", href=quote(context.stac_root, safe=":/"), type=JSON),
    ]


def root_catalog_links(context: StacContext) -> list[Link]:
    title = f"NASA CMR-{context.id} Root Catalog"
    return [
        Link(rel="self", href=context.stac_root, type=JSON, title=title),
        Link(rel="root", href=context.stac_root, type=JSON, title=title),
        Link(
            rel="service-desc",
            href=f"{context.stac_root}/openapi.json",
            type="application/vnd.oai.openapi+json;version=3.0",
            title="OpenAPI Documentation",
        ),
        Link(
            rel="service-doc",
            href=SERVICE_DOC_URL,
            type="text/html",
            title=f"NASA CMR-{context.id} Documentation",
        ),
    ]


def provider_child_links(context: StacContext, providers: Iterable[Provider]) -> list[Link]:
    """One ``child`` link per provider, titled with its short name."""
    base_url = get_base_url(context.self)
    return [
        Link(
            rel="child",
            href=f"{base_url}/{provider.provider_id}",
            type=JSON,
            title=provider.short_name,
        )
        for provider in providers
    ]


def provider_catalog_links(context: StacContext) -> list[Link]:
    base_url = get_base_url(context.self)
    return [
        Link(rel="self", href=base_url, type=JSON),
        Link(rel="root", href=context.stac_root, type=JSON, title="Root Catalog"),
        Link(rel="parent", href=context.stac_root, type=JSON, title="Root Catalog"),
        Link(rel="data", href=f"{base_url}/collections", type=JSON, title="Provider Collections"),
        Link(rel="search", href=f"{base_url}/search", type=GEOJSON, title="Provider Item Search"),
    ]
